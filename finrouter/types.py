from typing import Literal, List, Dict, Any, Union, TypedDict

# =============================================================================
# Type Definitions
# =============================================================================

# Supported LLM providers
Provider = Literal["anthropic", "openai", "google"]

DEFAULT_PROVIDER: Provider = "anthropic"

ChartType = Literal["bar", "multiBar", "line", "pie", "area", "stackedArea"]


class Attachment(TypedDict, total=False):
    """
    A single file attached to a message or to the current turn.

    Keys follow the wire format sent by the chat UI.
    """
    base64: str
    mediaType: str
    isText: bool
    fileName: str


class ChatMessage(TypedDict, total=False):
    """
    Chat message as received from the caller.

    Roles:
    - "user": User message
    - "assistant": Model response
    """
    role: Literal["user", "assistant"]
    content: str
    file: Attachment


# =============================================================================
# Provider Content Parts
# =============================================================================

class TextContent(TypedDict):
    """
    Text content part for multimodal messages.
    """
    type: Literal["text"]
    text: str


class ImageUrlDetail(TypedDict):
    url: str


class ImageContent(TypedDict):
    """
    Image content part for chat-completion messages (data URI).
    """
    type: Literal["image_url"]
    image_url: ImageUrlDetail


class Base64ImageSource(TypedDict):
    type: Literal["base64"]
    media_type: str
    data: str


class ImageBlock(TypedDict):
    """
    Image content block for the messages API (inline base64 source).
    """
    type: Literal["image"]
    source: Base64ImageSource


ContentPart = Union[TextContent, ImageContent, ImageBlock]
MessageContent = Union[str, List[ContentPart]]


class ProviderMessage(TypedDict):
    """
    A message after conversion to a provider's native request shape.
    """
    role: str
    content: MessageContent


# =============================================================================
# Tool Definitions
# =============================================================================

class FunctionParameters(TypedDict, total=False):
    """
    JSON Schema for function parameters.
    """
    type: Literal["object"]
    properties: Dict[str, Any]
    required: List[str]


class FunctionDefinition(TypedDict, total=False):
    name: str
    description: str
    parameters: FunctionParameters


class Tool(TypedDict):
    """
    Tool definition in OpenAI format.
    """
    type: Literal["function"]
    function: FunctionDefinition


# =============================================================================
# Envelopes
# =============================================================================

class ResponseEnvelope(TypedDict):
    """
    Uniform success body returned to the chat UI.
    """
    content: str
    hasToolUse: bool


class ErrorEnvelope(TypedDict, total=False):
    """
    Uniform failure body returned to the chat UI.
    """
    error: str
    details: str
