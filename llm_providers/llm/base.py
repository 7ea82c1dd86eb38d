"""Uniform request/response model shared by every provider.

These shapes are backend-agnostic: adapters translate them to and from each
SDK's native types, so calling code never touches a vendor object.
"""

from dataclasses import dataclass, field
from typing import Literal

from llm_providers.config import ProviderType

Role = Literal["system", "user", "assistant", "tool"]


@dataclass(frozen=True)
class ChatModel:
    """A logical chat model bound to one provider.

    Attributes:
        id: Logical model identifier used by the application.
        provider_type: Backend type this model must run on.
        provider_id: Identifier of the configured provider instance.
        model: Model identifier sent to the backend (e.g., "gpt-4o").
    """

    id: str
    provider_type: ProviderType
    provider_id: str
    model: str


@dataclass
class ToolParameter:
    """A parameter for a tool definition.

    Attributes:
            name: Parameter name (e.g., "path").
            param_type: JSON Schema type ("string", "number", "boolean", "array", "object").
            description: Human-readable description of the parameter.
            required: Whether the parameter is required (default True).
            enum: Optional list of allowed values for constrained strings.
    """

    name: str
    param_type: str
    description: str
    required: bool = True
    enum: list[str] | None = None


@dataclass
class ToolDefinition:
    """Definition of a tool the model can call.

    Maps to:
    - OpenAI: `tools[].function` schema
    - Anthropic: `tools[]` schema
    - Gemini: `tools[].function_declarations`
    """

    name: str
    description: str
    parameters: list[ToolParameter]

    def to_json_schema(self) -> dict:
        """Convert to JSON Schema format (used by all three protocol families).

        Returns:
                JSON Schema dict with type, properties, and required fields.
        """
        properties: dict[str, dict] = {}
        required: list[str] = []

        for param in self.parameters:
            properties[param.name] = {
                "type": param.param_type,
                "description": param.description,
            }
            if param.enum:
                properties[param.name]["enum"] = param.enum
            if param.required:
                required.append(param.name)

        return {
            "type": "object",
            "properties": properties,
            "required": required,
        }


@dataclass
class ToolCall:
    """A complete tool call requested by the model.

    Attributes:
            id: Unique ID for this call (provider-generated).
            name: Tool name.
            arguments: Parsed arguments (already JSON-decoded).
    """

    id: str
    name: str
    arguments: dict


@dataclass
class RequestMessage:
    """Provider-agnostic message.

    Attributes:
            role: Message role ("system", "user", "assistant", "tool").
            content: Text content (None if an assistant message only calls tools).
            tool_calls: For assistant messages requesting tool use.
            tool_call_id: For tool role messages, the ToolCall.id being answered.
    """

    role: Role
    content: str | None = None
    tool_calls: list[ToolCall] | None = None
    tool_call_id: str | None = None


@dataclass
class LLMRequest:
    """Fields shared by streaming and non-streaming requests.

    Attributes:
        model: Backend model identifier. Providers overwrite it with
            ``ChatModel.model`` before the call.
        messages: Ordered conversation.
        tools: Tools the model may call (native function calling).
        tool_choice: "auto", "none", "required", or a tool name.
        json_mode: If True, ask the backend for JSON-only output.
    """

    model: str
    messages: list[RequestMessage]
    tools: list[ToolDefinition] | None = None
    tool_choice: str | None = None
    json_mode: bool = False


@dataclass
class LLMRequestNonStreaming(LLMRequest):
    """Request for one complete response."""

    stream: Literal[False] = field(default=False, init=False)


@dataclass
class LLMRequestStreaming(LLMRequest):
    """Request for an incremental sequence of chunks."""

    stream: Literal[True] = field(default=True, init=False)


@dataclass
class LLMOptions:
    """Generation options. None means "use the backend default".

    Attributes:
        temperature: Sampling temperature.
        max_tokens: Maximum output tokens.
        top_p: Nucleus sampling cutoff.
        stop_sequences: Custom stop sequences.
        timeout: Per-call timeout in seconds, forwarded to the backend client.
    """

    temperature: float | None = None
    max_tokens: int | None = None
    top_p: float | None = None
    stop_sequences: list[str] | None = None
    timeout: float | None = None


@dataclass
class ResponseUsage:
    """Token accounting reported by the backend."""

    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


@dataclass
class LLMResponseNonStreaming:
    """One complete generated message.

    Attributes:
            id: Backend response identifier ("" when the backend has none).
            model: Model reported by the backend.
            content: Text response (None if only tool calls).
            tool_calls: Tool calls requested by the model (if any).
            finish_reason: Why generation stopped ("stop", "length", "tool_calls", ...).
            usage: Token usage when the backend provides it.
            latency_ms: Response time in milliseconds.
    """

    id: str
    model: str
    content: str | None
    finish_reason: str | None
    usage: ResponseUsage | None = None
    tool_calls: list[ToolCall] | None = None
    latency_ms: float = 0.0


@dataclass
class ToolCallDelta:
    """Incremental tool-call fragment from a stream.

    Fragments are passed through as the backend sends them; ``arguments``
    holds a partial JSON string that callers concatenate per ``index``.
    """

    index: int
    id: str | None = None
    name: str | None = None
    arguments: str | None = None


@dataclass
class LLMResponseStreaming:
    """One chunk of a streamed message.

    Attributes:
            id: Backend response identifier.
            model: Model reported by the backend.
            content: Text delta ("" for metadata-only chunks).
            tool_calls: Tool-call fragments carried by this chunk.
            finish_reason: Set on the chunk that ends generation.
            usage: Set on the chunk that reports token usage.
    """

    id: str
    model: str
    content: str = ""
    tool_calls: list[ToolCallDelta] | None = None
    finish_reason: str | None = None
    usage: ResponseUsage | None = None
