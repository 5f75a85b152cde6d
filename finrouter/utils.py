import base64
import binascii
import mimetypes
import re
from pathlib import Path
from typing import Union, List, Optional, Dict, Any
from urllib.parse import quote, unquote

from .errors import AttachmentDecodeError
from .types import (
    Attachment, ChatMessage, ContentPart, TextContent, ImageContent,
    ImageBlock, ProviderMessage, Tool
)

# A "%" that does not start a two-hex-digit escape
_MALFORMED_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")

DEFAULT_FILE_NAME = "file"

# =============================================================================
# Attachment Codec
# =============================================================================

def is_valid_base64(value: Any) -> bool:
    """
    Check whether ``value`` is well-formed, canonical base64.

    Decodes with the standard alphabet and strict padding, then re-encodes and
    compares with the input. Never raises.

    Args:
        value (Any): Candidate base64 string.

    Returns:
        bool: True iff decode-then-encode reproduces ``value`` exactly.
    """
    if not isinstance(value, str):
        return False
    try:
        decoded = base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError):
        return False
    return base64.b64encode(decoded).decode("ascii") == value


def decode_uri_component(text: str) -> str:
    """
    Percent-decode ``text`` as a URI component.

    Escapes are decoded as UTF-8; characters outside escapes are kept as-is.

    Raises:
        AttachmentDecodeError: On a stray "%" or escapes that are not UTF-8.
    """
    if "%" not in text:
        return text
    if _MALFORMED_ESCAPE.search(text):
        raise AttachmentDecodeError("Malformed percent-encoding in attachment")
    try:
        return unquote(text, encoding="utf-8", errors="strict")
    except UnicodeDecodeError as e:
        raise AttachmentDecodeError("Percent-encoded attachment is not valid UTF-8") from e


def decode_text_attachment(b64_data: str) -> str:
    """
    Decode a text attachment: base64 first, then percent-decoding.

    The decoded bytes are read one character per byte before percent-decoding,
    so text encoded as ``base64(percent-encode(utf8))`` round-trips exactly.

    Args:
        b64_data (str): Base64 payload from the attachment.

    Returns:
        str: The decoded text.

    Raises:
        AttachmentDecodeError: If either decoding stage fails.
    """
    try:
        raw = base64.b64decode(b64_data, validate=True)
    except (binascii.Error, ValueError, TypeError) as e:
        raise AttachmentDecodeError("Attachment is not valid base64") from e
    return decode_uri_component(raw.decode("latin-1"))


def validate_attachment(attachment: Attachment) -> None:
    """
    Enforce the attachment validity invariant.

    Raises:
        AttachmentDecodeError: If ``base64`` is not canonical base64, or a
            binary attachment has no media type.
    """
    if not is_valid_base64(attachment.get("base64")):
        raise AttachmentDecodeError("Attachment is not valid base64")
    if not attachment.get("isText") and not attachment.get("mediaType"):
        raise AttachmentDecodeError("Binary attachment is missing its media type")


def is_image(attachment: Optional[Attachment]) -> bool:
    """Return True for attachments whose media type is ``image/*``."""
    if not attachment:
        return False
    return (attachment.get("mediaType") or "").startswith("image/")


def encode_file(path: Union[str, Path]) -> Attachment:
    """
    Build an attachment from a local file.

    Images are base64-encoded raw. Anything with a ``text/*`` (or unknown)
    media type is treated as UTF-8 text and percent-encoded before base64, which
    is the encoding ``decode_text_attachment`` reverses.

    Args:
        path (Union[str, Path]): Path to the file.

    Returns:
        Attachment: Ready to send as ``fileData``.

    Raises:
        FileNotFoundError: If the file does not exist.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    media_type = mimetypes.guess_type(path.name)[0] or "text/plain"
    is_text = not media_type.startswith("image/")

    if is_text:
        encoded = quote(path.read_text(encoding="utf-8"), safe="")
        payload = encoded.encode("ascii")
    else:
        payload = path.read_bytes()

    return {
        "base64": base64.b64encode(payload).decode("ascii"),
        "mediaType": media_type,
        "isText": is_text,
        "fileName": path.name,
    }


# =============================================================================
# Content Builders
# =============================================================================

def create_text_content(text: str) -> TextContent:
    """
    Create a simple text content part.
    """
    return {"type": "text", "text": text}


def create_image_content(b64_data: str, media_type: str) -> ImageContent:
    """
    Create a chat-completion image part that carries the image as a data URI.

    Args:
        b64_data (str): Base64 image payload, passed through unmodified.
        media_type (str): MIME type, e.g. "image/png".

    Returns:
        ImageContent: ``{"type": "image_url", "image_url": {"url": "data:..."}}``.
    """
    return {
        "type": "image_url",
        "image_url": {"url": f"data:{media_type};base64,{b64_data}"},
    }


def create_image_block(b64_data: str, media_type: str) -> ImageBlock:
    """
    Create a messages-API image block with an inline base64 source.
    """
    return {
        "type": "image",
        "source": {
            "type": "base64",
            "media_type": media_type,
            "data": b64_data,
        },
    }


def format_text_attachment(file_name: Optional[str], text: str, content: str) -> str:
    """
    Flatten a decoded text attachment into the message text.

    Attachments sent without a name are labelled "file".
    """
    return f"File contents of {file_name or DEFAULT_FILE_NAME}:\n\n{text}\n\n{content}"


def create_message(
    role: str,
    content: Union[str, List[Union[str, ContentPart]]],
) -> ProviderMessage:
    """
    Create a provider message, normalizing bare strings in a content list
    to text parts.
    """
    if isinstance(content, str):
        return {"role": role, "content": content}

    normalized: List[ContentPart] = []
    for item in content:
        if isinstance(item, str):
            normalized.append(create_text_content(item))
        else:
            normalized.append(item)

    return {"role": role, "content": normalized}


def last_message_text(messages: List[ChatMessage]) -> str:
    """Original text of the last message, or "" for an empty history."""
    if not messages:
        return ""
    return messages[-1].get("content") or ""


def replace_last(converted: List[ProviderMessage], message: ProviderMessage) -> None:
    """
    Replace the last converted message in place; append when the list is empty.
    """
    if converted:
        converted[-1] = message
    else:
        converted.append(message)


# =============================================================================
# Tool Helpers
# =============================================================================

def create_tool(
    name: str,
    description: str,
    parameters: Dict[str, Any],
    required: Optional[List[str]] = None,
) -> Tool:
    """
    Create a tool definition in OpenAI function format.

    Args:
        name (str): The name of the function/tool.
        description (str): What the tool produces.
        parameters (Dict): JSON Schema properties of the arguments.
        required (List[str], optional): Names of required arguments.

    Returns:
        Tool: A dictionary representing the tool definition.
    """
    return {
        "type": "function",
        "function": {
            "name": name,
            "description": description,
            "parameters": {
                "type": "object",
                "properties": parameters,
                "required": required or [],
            },
        },
    }
