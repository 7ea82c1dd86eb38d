"""Google Gemini message adapter.

Uses the unified google-genai SDK (successor to google-generativeai).
"""

import json
import time
from collections.abc import AsyncIterator
from typing import Any

import structlog
from google import genai
from google.genai import types

from llm_providers.errors import APIKeyInvalidError, ProviderError, extract_status
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

# Gemini reports a bad key as 400 INVALID_ARGUMENT rather than 401
_INVALID_KEY_MARKERS = ("API_KEY_INVALID", "API key not valid")


def convert_gemini_messages(
    messages: list[RequestMessage],
) -> tuple[str | None, list[types.Content]]:
    """Convert RequestMessages to Gemini format, extracting system instruction.

    Function responses must name the function they answer, so tool call ids
    seen on assistant messages are mapped back to their tool names.
    """
    system_parts: list[str] = []
    contents: list[types.Content] = []
    tool_names: dict[str, str] = {}

    for msg in messages:
        if msg.role == "system":
            if msg.content:
                system_parts.append(msg.content)
        elif msg.role == "tool":
            name = tool_names.get(msg.tool_call_id or "", "function")
            contents.append(
                types.Content(
                    role="user",
                    parts=[
                        types.Part(
                            function_response=types.FunctionResponse(
                                name=name,
                                response={"result": msg.content or ""},
                            )
                        )
                    ],
                )
            )
        elif msg.tool_calls:
            parts: list[types.Part] = []
            if msg.content:
                parts.append(types.Part(text=msg.content))
            for tc in msg.tool_calls:
                tool_names[tc.id] = tc.name
                parts.append(
                    types.Part(
                        function_call=types.FunctionCall(name=tc.name, args=tc.arguments)
                    )
                )
            contents.append(types.Content(role="model", parts=parts))
        else:
            role = "model" if msg.role == "assistant" else msg.role
            contents.append(
                types.Content(role=role, parts=[types.Part(text=msg.content or "")])
            )

    system_instruction = "\n\n".join(system_parts) if system_parts else None
    return system_instruction, contents


def _convert_tool_config(tool_choice: str) -> types.ToolConfig:
    if tool_choice in ("auto", "none"):
        mode = tool_choice.upper()
        allowed = None
    elif tool_choice == "required":
        mode, allowed = "ANY", None
    else:
        mode, allowed = "ANY", [tool_choice]
    return types.ToolConfig(
        function_calling_config=types.FunctionCallingConfig(
            mode=mode,
            allowed_function_names=allowed,
        )
    )


def build_gemini_config(
    request: LLMRequest,
    options: LLMOptions | None,
    system_instruction: str | None,
) -> types.GenerateContentConfig:
    """Assemble the generation config; None options are left unset."""
    gemini_tools = None
    tool_config = None
    if request.tools:
        gemini_tools = [
            types.Tool(
                function_declarations=[
                    types.FunctionDeclaration(
                        name=tool.name,
                        description=tool.description,
                        parameters_json_schema=tool.to_json_schema(),
                    )
                    for tool in request.tools
                ]
            )
        ]
        if request.tool_choice:
            tool_config = _convert_tool_config(request.tool_choice)

    options = options or LLMOptions()
    http_options = None
    if options.timeout is not None:
        # HttpOptions.timeout is in milliseconds
        http_options = types.HttpOptions(timeout=int(options.timeout * 1000))

    return types.GenerateContentConfig(
        system_instruction=system_instruction,
        max_output_tokens=options.max_tokens,
        temperature=options.temperature,
        top_p=options.top_p,
        stop_sequences=options.stop_sequences,
        tools=gemini_tools,
        tool_config=tool_config,
        response_mime_type="application/json" if request.json_mode else None,
        http_options=http_options,
    )


def _extract_parts(
    parts: list[Any],
) -> tuple[str, list[ToolCall] | None]:
    """Extract text and function calls from Gemini response parts."""
    texts: list[str] = []
    tool_calls: list[ToolCall] | None = None
    for part in parts:
        if part.text:
            texts.append(part.text)
        elif part.function_call:
            if tool_calls is None:
                tool_calls = []
            fc = part.function_call
            tool_calls.append(
                ToolCall(
                    id=fc.id or f"call_{len(tool_calls)}_{fc.name}",
                    name=fc.name,
                    arguments=dict(fc.args) if fc.args else {},
                )
            )
    return "".join(texts), tool_calls


def _parse_candidate(
    response: Any,
) -> tuple[str, list[ToolCall] | None, str | None]:
    content = ""
    tool_calls: list[ToolCall] | None = None
    finish_reason = None
    if response.candidates:
        candidate = response.candidates[0]
        if candidate.content and candidate.content.parts:
            content, tool_calls = _extract_parts(candidate.content.parts)
        if candidate.finish_reason:
            finish_reason = candidate.finish_reason.name
    return content, tool_calls, finish_reason


def _parse_usage(usage_metadata: Any) -> ResponseUsage | None:
    if usage_metadata is None:
        return None
    prompt_tokens = usage_metadata.prompt_token_count or 0
    completion_tokens = usage_metadata.candidates_token_count or 0
    return ResponseUsage(
        prompt_tokens=prompt_tokens,
        completion_tokens=completion_tokens,
        total_tokens=usage_metadata.total_token_count
        or prompt_tokens + completion_tokens,
    )


def _parse_gemini_response(
    response: Any, model: str, latency_ms: float
) -> LLMResponseNonStreaming:
    content, tool_calls, finish_reason = _parse_candidate(response)
    return LLMResponseNonStreaming(
        id=response.response_id or "",
        model=response.model_version or model,
        content=content or None,
        finish_reason=finish_reason,
        usage=_parse_usage(response.usage_metadata),
        tool_calls=tool_calls,
        latency_ms=latency_ms,
    )


def _parse_gemini_chunk(
    chunk: Any, model: str, tool_call_offset: int = 0
) -> LLMResponseStreaming:
    """Translate one streamed response.

    Gemini streams whole function calls, so each becomes a single
    ToolCallDelta carrying the complete JSON arguments. Indexes continue
    from ``tool_call_offset`` so calls from different chunks never share one.
    """
    content, tool_calls, finish_reason = _parse_candidate(chunk)
    deltas = None
    if tool_calls:
        deltas = [
            ToolCallDelta(
                index=tool_call_offset + i,
                id=tc.id,
                name=tc.name,
                arguments=json.dumps(tc.arguments),
            )
            for i, tc in enumerate(tool_calls)
        ]
    return LLMResponseStreaming(
        id=chunk.response_id or "",
        model=chunk.model_version or model,
        content=content,
        tool_calls=deltas,
        finish_reason=finish_reason,
        usage=_parse_usage(chunk.usage_metadata),
    )


class GeminiMessageAdapter(MessageAdapter):
    """Adapter for the Google Gen AI protocol."""

    def __init__(self, provider_label: str = "Gemini") -> None:
        super().__init__(provider_label)

    def classify_error(self, error: Exception) -> ProviderError | None:
        """Also treat 400 responses flagged as bad keys as invalid credentials."""
        if extract_status(error) == 400 and any(
            marker in str(error) for marker in _INVALID_KEY_MARKERS
        ):
            return APIKeyInvalidError(
                f"{self.provider_label} API key is invalid. "
                "Please update it in settings menu."
            )
        return super().classify_error(error)

    async def generate_response(
        self,
        client: genai.Client,
        request: LLMRequestNonStreaming,
        options: LLMOptions | None = None,
    ) -> LLMResponseNonStreaming:
        """Generate a completion through generate_content."""
        system_instruction, contents = convert_gemini_messages(request.messages)
        config = build_gemini_config(request, options, system_instruction)

        logger.info(
            "llm_request_start",
            provider=self.provider_label,
            model=request.model,
            message_count=len(request.messages),
            stream=False,
        )

        start_time = time.monotonic()
        with self.translating_errors(request.model):
            response = await client.aio.models.generate_content(
                model=request.model,
                contents=contents,
                config=config,
            )
        latency_ms = (time.monotonic() - start_time) * 1000

        result = _parse_gemini_response(response, request.model, latency_ms)
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
        client: genai.Client,
        request: LLMRequestStreaming,
        options: LLMOptions | None = None,
    ) -> AsyncIterator[LLMResponseStreaming]:
        """Start a generate_content stream."""
        system_instruction, contents = convert_gemini_messages(request.messages)
        config = build_gemini_config(request, options, system_instruction)

        logger.info(
            "llm_request_start",
            provider=self.provider_label,
            model=request.model,
            message_count=len(request.messages),
            stream=True,
        )

        with self.translating_errors(request.model):
            stream = await client.aio.models.generate_content_stream(
                model=request.model,
                contents=contents,
                config=config,
            )
        return self._iterate(stream, request.model)

    async def _iterate(
        self, stream: Any, model: str
    ) -> AsyncIterator[LLMResponseStreaming]:
        start_time = time.monotonic()
        chunk_count = 0
        tool_call_count = 0
        try:
            with self.translating_errors(model):
                async for chunk in stream:
                    chunk_count += 1
                    parsed = _parse_gemini_chunk(chunk, model, tool_call_count)
                    if parsed.tool_calls:
                        tool_call_count += len(parsed.tool_calls)
                    yield parsed
        finally:
            await stream.aclose()

        logger.info(
            "llm_stream_complete",
            provider=self.provider_label,
            model=model,
            chunk_count=chunk_count,
            latency_ms=(time.monotonic() - start_time) * 1000,
        )
