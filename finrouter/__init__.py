from .client import FinanceRouter
from .config import Settings
from .types import Attachment, ChatMessage, ResponseEnvelope, ErrorEnvelope, Provider
from .charts import CHART_TOOL, CHART_TYPES, ChartSpec, parse_chart_spec
from .errors import (
    FinanceRouterError,
    AttachmentDecodeError,
    UnsupportedProviderError,
    ProviderError,
    error_envelope,
)
from .utils import is_valid_base64, decode_text_attachment, encode_file

__all__ = [
    "FinanceRouter",
    "Settings",
    "Attachment",
    "ChatMessage",
    "ResponseEnvelope",
    "ErrorEnvelope",
    "Provider",
    "CHART_TOOL",
    "CHART_TYPES",
    "ChartSpec",
    "parse_chart_spec",
    "FinanceRouterError",
    "AttachmentDecodeError",
    "UnsupportedProviderError",
    "ProviderError",
    "error_envelope",
    "is_valid_base64",
    "decode_text_attachment",
    "encode_file",
]
