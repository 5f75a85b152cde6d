"""
Error taxonomy and the single mapping from exceptions to error envelopes.
"""
from typing import Optional, Tuple

from .types import ErrorEnvelope

UNKNOWN_ERROR = "An unknown error occurred"


class FinanceRouterError(Exception):
    """
    Base class for every failure the router knows how to report.
    """
    status_code: int = 500


class AttachmentDecodeError(FinanceRouterError):
    """
    Raised when an attachment is malformed (bad base64, bad percent-encoding,
    missing media type). Always detected before any provider call.
    """
    status_code = 400
    label = "Failed to process file content"


class UnsupportedProviderError(FinanceRouterError, ValueError):
    """
    Raised when the provider selector is not a recognized tag.
    """

    def __init__(self, provider: str):
        super().__init__(f"Unsupported provider: {provider}")
        self.provider = provider


class InvalidRequestError(FinanceRouterError):
    """
    Raised when the request body cannot be turned into a routable request.
    """


class ChartSpecError(FinanceRouterError, ValueError):
    """
    Raised when a chart type or chart specification does not match the schema.
    """


class ChainOutputError(FinanceRouterError):
    """
    Raised when a chain's model output does not conform to the declared shape.
    """


class ProviderError(FinanceRouterError):
    """
    Failure surfaced by a provider SDK, tagged with a provider-identifying label.
    """

    def __init__(self, label: str, details: str):
        super().__init__(f"{label}: {details}")
        self.label = label
        self.details = details


def _message_of(exc: BaseException) -> Optional[str]:
    """
    Extract a human-readable message from an arbitrary exception.

    Some SDK errors carry an empty ``args`` tuple but expose ``message``.
    """
    message = getattr(exc, "message", None)
    if isinstance(message, str) and message:
        return message
    text = str(exc)
    return text or None


def error_envelope(exc: BaseException) -> Tuple[int, ErrorEnvelope]:
    """
    Map any exception to a ``(status_code, ErrorEnvelope)`` pair.

    Args:
        exc (BaseException): The failure caught at the request boundary.

    Returns:
        Tuple[int, ErrorEnvelope]: HTTP status and the JSON-ready error body.
    """
    if isinstance(exc, AttachmentDecodeError):
        body: ErrorEnvelope = {"error": AttachmentDecodeError.label}
        details = _message_of(exc)
        if details:
            body["details"] = details
        return exc.status_code, body

    if isinstance(exc, ProviderError):
        return exc.status_code, {"error": exc.label, "details": exc.details}

    if isinstance(exc, FinanceRouterError):
        return exc.status_code, {"error": _message_of(exc) or UNKNOWN_ERROR}

    return 500, {"error": _message_of(exc) or UNKNOWN_ERROR}
