"""Anthropic messages-protocol adapter.

WHY A SEPARATE PROTOCOL FAMILY:
- System prompt travels outside the message list
- Tool results are content blocks inside user messages
- Streams are typed events rather than uniform deltas
"""

import time
from collections.abc import AsyncIterator
from typing import Any

import structlog
from anthropic import AsyncAnthropic

from llm_providers.llm.adapter import MessageAdapter
from llm_providers.llm.base import (
    LLMOptions,
    LLMRequest,
    LLMRequestNonStreaming,
    LLMRequestStreaming,
    LLMResponseNonStreaming,
    LLMResponseStreaming,
    RequestMessage,
    ResponseUsage,
    ToolCall,
    ToolCallDelta,
)

logger = structlog.get_logger()

# The messages API rejects requests without max_tokens
DEFAULT_ANTHROPIC_MAX_TOKENS = 4096

_JSON_ONLY_INSTRUCTION = (
    "Respond ONLY with valid JSON. No explanations, no markdown, just the JSON object."
)


def _tool_result_block(msg: RequestMessage) -> dict[str, Any]:
    return {
        "type": "tool_result",
        "tool_use_id": msg.tool_call_id,
        "content": msg.content or "",
    }


def _convert_tool_call_message(msg: RequestMessage) -> dict[str, Any]:
    """Convert an assistant message with tool calls to content blocks format."""
    content_blocks: list[dict[str, Any]] = []
    if msg.content:
        content_blocks.append({"type": "text", "text": msg.content})
    for tc in msg.tool_calls or []:
        content_blocks.append(
            {
                "type": "tool_use",
                "id": tc.id,
                "name": tc.name,
                "input": tc.arguments,
            }
        )
    return {"role": "assistant", "content": content_blocks}


def convert_anthropic_messages(
    messages: list[RequestMessage],
) -> tuple[str | None, list[dict[str, Any]]]:
    """Convert RequestMessages to Anthropic format, extracting system messages.

    Consecutive tool results are merged into one user message because the
    API requires user and assistant turns to alternate.

    Returns:
        Tuple of (system_prompt, api_messages).
    """
    system_parts: list[str] = []
    api_messages: list[dict[str, Any]] = []

    for msg in messages:
        if msg.role == "system":
            if msg.content:
                system_parts.append(msg.content)
        elif msg.role == "tool":
            block = _tool_result_block(msg)
            previous = api_messages[-1] if api_messages else None
            if (
                previous is not None
                and previous["role"] == "user"
                and isinstance(previous["content"], list)
                and all(b.get("type") == "tool_result" for b in previous["content"])
            ):
                previous["content"].append(block)
            else:
                api_messages.append({"role": "user", "content": [block]})
        elif msg.tool_calls:
            api_messages.append(_convert_tool_call_message(msg))
        else:
            api_messages.append({"role": msg.role, "content": msg.content or ""})

    system_prompt = "\n\n".join(system_parts) if system_parts else None
    return system_prompt, api_messages


def _convert_tool_choice(tool_choice: str) -> dict[str, str]:
    if tool_choice == "auto":
        return {"type": "auto"}
    if tool_choice == "none":
        return {"type": "none"}
    if tool_choice == "required":
        return {"type": "any"}
    return {"type": "tool", "name": tool_choice}


def build_anthropic_params(
    request: LLMRequest, options: LLMOptions | None
) -> dict[str, Any]:
    """Assemble messages-API keyword arguments."""
    system_prompt, api_messages = convert_anthropic_messages(request.messages)

    # WHY: Anthropic doesn't have native JSON mode, so we modify system prompt
    if request.json_mode:
        system_prompt = (
            f"{system_prompt}\n\nIMPORTANT: {_JSON_ONLY_INSTRUCTION}"
            if system_prompt
            else _JSON_ONLY_INSTRUCTION
        )

    max_tokens = DEFAULT_ANTHROPIC_MAX_TOKENS
    if options is not None and options.max_tokens is not None:
        max_tokens = options.max_tokens

    params: dict[str, Any] = {
        "model": request.model,
        "max_tokens": max_tokens,
        "messages": api_messages,
    }
    if system_prompt:
        params["system"] = system_prompt
    if request.tools:
        params["tools"] = [
            {
                "name": tool.name,
                "description": tool.description,
                "input_schema": tool.to_json_schema(),
            }
            for tool in request.tools
        ]
        if request.tool_choice:
            params["tool_choice"] = _convert_tool_choice(request.tool_choice)

    if options is not None:
        if options.temperature is not None:
            params["temperature"] = options.temperature
        if options.top_p is not None:
            params["top_p"] = options.top_p
        if options.stop_sequences:
            params["stop_sequences"] = options.stop_sequences
        if options.timeout is not None:
            params["timeout"] = options.timeout
    return params


def _usage(input_tokens: int, output_tokens: int) -> ResponseUsage:
    return ResponseUsage(
        prompt_tokens=input_tokens,
        completion_tokens=output_tokens,
        total_tokens=input_tokens + output_tokens,
    )


def _parse_anthropic_response(response: Any, latency_ms: float) -> LLMResponseNonStreaming:
    """Parse an Anthropic message into the uniform response."""
    texts: list[str] = []
    tool_calls: list[ToolCall] | None = None

    for block in response.content:
        if block.type == "text":
            texts.append(block.text)
        elif block.type == "tool_use":
            if tool_calls is None:
                tool_calls = []
            tool_calls.append(
                ToolCall(id=block.id, name=block.name, arguments=dict(block.input))
            )

    return LLMResponseNonStreaming(
        id=response.id,
        model=response.model,
        content="".join(texts) if texts else None,
        finish_reason=response.stop_reason,
        usage=_usage(response.usage.input_tokens, response.usage.output_tokens),
        tool_calls=tool_calls,
        latency_ms=latency_ms,
    )


class AnthropicMessageAdapter(MessageAdapter):
    """Adapter for the Anthropic messages protocol."""

    def __init__(self, provider_label: str = "Anthropic") -> None:
        super().__init__(provider_label)

    async def generate_response(
        self,
        client: AsyncAnthropic,
        request: LLMRequestNonStreaming,
        options: LLMOptions | None = None,
    ) -> LLMResponseNonStreaming:
        """Generate a completion through the messages endpoint."""
        params = build_anthropic_params(request, options)

        logger.info(
            "llm_request_start",
            provider=self.provider_label,
            model=request.model,
            message_count=len(request.messages),
            stream=False,
        )

        start_time = time.monotonic()
        with self.translating_errors(request.model):
            response = await client.messages.create(**params)
        latency_ms = (time.monotonic() - start_time) * 1000

        result = _parse_anthropic_response(response, latency_ms)
        logger.info(
            "llm_request_complete",
            provider=self.provider_label,
            model=request.model,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
            latency_ms=latency_ms,
        )
        return result

    async def stream_response(
        self,
        client: AsyncAnthropic,
        request: LLMRequestStreaming,
        options: LLMOptions | None = None,
    ) -> AsyncIterator[LLMResponseStreaming]:
        """Start a messages stream."""
        params = build_anthropic_params(request, options)

        logger.info(
            "llm_request_start",
            provider=self.provider_label,
            model=request.model,
            message_count=len(request.messages),
            stream=True,
        )

        with self.translating_errors(request.model):
            stream = await client.messages.create(stream=True, **params)
        return self._iterate(stream, request.model)

    async def _iterate(
        self, stream: Any, model: str
    ) -> AsyncIterator[LLMResponseStreaming]:
        """Translate stream events into chunks.

        Only ``message_start`` contributes state (id, model, input tokens);
        every content or stop event is emitted as soon as it arrives.
        Events with nothing to report (ping, block stop) produce no chunk.
        """
        response_id = ""
        response_model = model
        input_tokens = 0
        chunk_count = 0
        start_time = time.monotonic()

        try:
            with self.translating_errors(model):
                async for event in stream:
                    chunk: LLMResponseStreaming | None = None

                    if event.type == "message_start":
                        response_id = event.message.id
                        response_model = event.message.model
                        input_tokens = event.message.usage.input_tokens
                    elif event.type == "content_block_start":
                        block = event.content_block
                        if block.type == "tool_use":
                            chunk = LLMResponseStreaming(
                                id=response_id,
                                model=response_model,
                                tool_calls=[
                                    ToolCallDelta(
                                        index=event.index,
                                        id=block.id,
                                        name=block.name,
                                    )
                                ],
                            )
                        elif block.type == "text" and block.text:
                            chunk = LLMResponseStreaming(
                                id=response_id,
                                model=response_model,
                                content=block.text,
                            )
                    elif event.type == "content_block_delta":
                        delta = event.delta
                        if delta.type == "text_delta":
                            chunk = LLMResponseStreaming(
                                id=response_id,
                                model=response_model,
                                content=delta.text,
                            )
                        elif delta.type == "input_json_delta":
                            chunk = LLMResponseStreaming(
                                id=response_id,
                                model=response_model,
                                tool_calls=[
                                    ToolCallDelta(
                                        index=event.index,
                                        arguments=delta.partial_json,
                                    )
                                ],
                            )
                    elif event.type == "message_delta":
                        chunk = LLMResponseStreaming(
                            id=response_id,
                            model=response_model,
                            finish_reason=event.delta.stop_reason,
                            usage=_usage(input_tokens, event.usage.output_tokens),
                        )

                    if chunk is not None:
                        chunk_count += 1
                        yield chunk
        finally:
            await stream.close()

        logger.info(
            "llm_stream_complete",
            provider=self.provider_label,
            model=model,
            chunk_count=chunk_count,
            latency_ms=(time.monotonic() - start_time) * 1000,
        )
