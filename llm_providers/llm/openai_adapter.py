"""OpenAI chat-completions message adapter.

Shared by every provider that speaks the chat-completions protocol: OpenAI,
Azure OpenAI and OpenAI-compatible servers (vLLM, LM Studio, Ollama, ...).
"""

import json
import time
from collections.abc import AsyncIterator
from typing import Any

import structlog
from openai import AsyncOpenAI

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

_TOOL_CHOICE_MODES = frozenset({"auto", "none", "required"})


def _convert_tool_result_message(msg: RequestMessage) -> dict[str, Any]:
    """Convert a tool result message to OpenAI tool-role dict.

    WHY: OpenAI uses a dedicated ``tool`` role with ``tool_call_id``.
    """
    return {
        "role": "tool",
        "tool_call_id": msg.tool_call_id,
        "content": msg.content or "",
    }


def _convert_tool_call_message(msg: RequestMessage) -> dict[str, Any]:
    """Convert an assistant message with tool_calls to OpenAI format.

    WHY: Assistant messages containing tool calls must include the function
    call payload with JSON-encoded arguments.
    """
    return {
        "role": "assistant",
        "content": msg.content,
        "tool_calls": [
            {
                "id": tc.id,
                "type": "function",
                "function": {
                    "name": tc.name,
                    "arguments": json.dumps(tc.arguments),
                },
            }
            for tc in msg.tool_calls or []
        ],
    }


def convert_openai_messages(messages: list[RequestMessage]) -> list[dict[str, Any]]:
    """Convert RequestMessages to chat-completions message format.

    OpenAI keeps system messages in the messages array (unlike Anthropic
    which separates them).
    """
    api_messages: list[dict[str, Any]] = []
    for msg in messages:
        if msg.role == "tool":
            api_messages.append(_convert_tool_result_message(msg))
        elif msg.tool_calls:
            api_messages.append(_convert_tool_call_message(msg))
        else:
            api_messages.append({"role": msg.role, "content": msg.content or ""})
    return api_messages


def _convert_tool_choice(tool_choice: str) -> str | dict[str, Any]:
    if tool_choice in _TOOL_CHOICE_MODES:
        return tool_choice
    return {"type": "function", "function": {"name": tool_choice}}


def build_openai_params(
    request: LLMRequest, options: LLMOptions | None
) -> dict[str, Any]:
    """Assemble chat-completions keyword arguments.

    Options left as None are omitted so the backend applies its defaults.
    """
    params: dict[str, Any] = {
        "model": request.model,
        "messages": convert_openai_messages(request.messages),
    }
    if request.tools:
        params["tools"] = [
            {
                "type": "function",
                "function": {
                    "name": tool.name,
                    "description": tool.description,
                    "parameters": tool.to_json_schema(),
                },
            }
            for tool in request.tools
        ]
        if request.tool_choice:
            params["tool_choice"] = _convert_tool_choice(request.tool_choice)
    # WHY: OpenAI has native JSON mode via response_format
    if request.json_mode:
        params["response_format"] = {"type": "json_object"}

    if options is not None:
        if options.temperature is not None:
            params["temperature"] = options.temperature
        if options.max_tokens is not None:
            params["max_tokens"] = options.max_tokens
        if options.top_p is not None:
            params["top_p"] = options.top_p
        if options.stop_sequences:
            params["stop"] = options.stop_sequences
        if options.timeout is not None:
            params["timeout"] = options.timeout
    return params


def _parse_usage(usage: Any) -> ResponseUsage | None:
    if usage is None:
        return None
    return ResponseUsage(
        prompt_tokens=usage.prompt_tokens,
        completion_tokens=usage.completion_tokens,
        total_tokens=usage.total_tokens,
    )


def _parse_openai_response(response: Any, latency_ms: float) -> LLMResponseNonStreaming:
    """Parse a chat-completion response using its first choice."""
    choice = response.choices[0]

    tool_calls: list[ToolCall] | None = None
    if choice.message.tool_calls:
        tool_calls = [
            ToolCall(
                id=tc.id,
                name=tc.function.name,
                arguments=json.loads(tc.function.arguments or "{}"),
            )
            for tc in choice.message.tool_calls
        ]

    return LLMResponseNonStreaming(
        id=response.id,
        model=response.model,
        content=choice.message.content,
        finish_reason=choice.finish_reason,
        usage=_parse_usage(response.usage),
        tool_calls=tool_calls,
        latency_ms=latency_ms,
    )


def _parse_openai_chunk(chunk: Any) -> LLMResponseStreaming:
    """Translate one chat-completion chunk without accumulating state.

    Usage-only chunks (sent last when include_usage is on) have no choices.
    """
    content = ""
    tool_calls: list[ToolCallDelta] | None = None
    finish_reason = None

    if chunk.choices:
        choice = chunk.choices[0]
        delta = choice.delta
        content = delta.content or ""
        if delta.tool_calls:
            tool_calls = [
                ToolCallDelta(
                    index=tc.index,
                    id=tc.id,
                    name=tc.function.name if tc.function else None,
                    arguments=tc.function.arguments if tc.function else None,
                )
                for tc in delta.tool_calls
            ]
        finish_reason = choice.finish_reason

    return LLMResponseStreaming(
        id=chunk.id,
        model=chunk.model,
        content=content,
        tool_calls=tool_calls,
        finish_reason=finish_reason,
        usage=_parse_usage(chunk.usage),
    )


class OpenAIMessageAdapter(MessageAdapter):
    """Adapter for the OpenAI chat-completions protocol.

    Attributes:
        stream_usage: Request a trailing usage chunk on streams. Some
            OpenAI-compatible servers reject ``stream_options``.
    """

    def __init__(self, provider_label: str = "OpenAI", stream_usage: bool = True) -> None:
        super().__init__(provider_label)
        self.stream_usage = stream_usage

    async def generate_response(
        self,
        client: AsyncOpenAI,
        request: LLMRequestNonStreaming,
        options: LLMOptions | None = None,
    ) -> LLMResponseNonStreaming:
        """Generate a completion through the chat-completions endpoint."""
        params = build_openai_params(request, options)

        logger.info(
            "llm_request_start",
            provider=self.provider_label,
            model=request.model,
            message_count=len(request.messages),
            stream=False,
        )

        start_time = time.monotonic()
        with self.translating_errors(request.model):
            response = await client.chat.completions.create(**params)
        latency_ms = (time.monotonic() - start_time) * 1000

        result = _parse_openai_response(response, latency_ms)
        logger.info(
            "llm_request_complete",
            provider=self.provider_label,
            model=request.model,
            input_tokens=result.usage.prompt_tokens if result.usage else None,
            output_tokens=result.usage.completion_tokens if result.usage else None,
            latency_ms=latency_ms,
        )
        return result

    async def stream_response(
        self,
        client: AsyncOpenAI,
        request: LLMRequestStreaming,
        options: LLMOptions | None = None,
    ) -> AsyncIterator[LLMResponseStreaming]:
        """Start a chat-completions stream."""
        params = build_openai_params(request, options)
        params["stream"] = True
        if self.stream_usage:
            params["stream_options"] = {"include_usage": True}

        logger.info(
            "llm_request_start",
            provider=self.provider_label,
            model=request.model,
            message_count=len(request.messages),
            stream=True,
        )

        with self.translating_errors(request.model):
            stream = await client.chat.completions.create(**params)
        return self._iterate(stream, request.model)

    async def _iterate(
        self, stream: Any, model: str
    ) -> AsyncIterator[LLMResponseStreaming]:
        start_time = time.monotonic()
        chunk_count = 0
        try:
            with self.translating_errors(model):
                async for chunk in stream:
                    chunk_count += 1
                    yield _parse_openai_chunk(chunk)
        finally:
            await stream.close()

        logger.info(
            "llm_stream_complete",
            provider=self.provider_label,
            model=model,
            chunk_count=chunk_count,
            latency_ms=(time.monotonic() - start_time) * 1000,
        )
