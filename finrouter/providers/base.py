import logging
from abc import ABC, abstractmethod
from typing import Any, List, Optional, Tuple, Type

from ..errors import ProviderError
from ..types import Attachment, ChatMessage, ResponseEnvelope
from ..utils import validate_attachment

logger = logging.getLogger(__name__)

# Generation parameters shared by the multi-turn variants
MAX_TOKENS = 4096
TEMPERATURE = 0.7


class BaseLLMProvider(ABC):
    """
    Abstract base class for provider adapters.

    Every adapter exposes the same capability, ``send``: convert a generic
    message list (plus an optional current-turn attachment) into the
    provider's native request, make exactly one call, and normalize the
    result into a ``ResponseEnvelope``.
    """

    #: Selector tag this adapter answers to.
    name: str = ""
    #: Category label reported when the provider's SDK fails.
    error_label: str = "Provider Error"
    #: SDK exception classes that are reported under ``error_label``.
    sdk_errors: Tuple[Type[BaseException], ...] = ()

    def __init__(self, api_key: Optional[str] = None):
        self.api_key = api_key
        self._client: Any = None

    @property
    def client(self) -> Any:
        """
        SDK client, created on first use.

        A missing credential therefore surfaces on the first request to this
        provider, not at process start.
        """
        if self._client is None:
            self._client = self._create_client()
        return self._client

    async def send(
        self,
        model: str,
        messages: List[ChatMessage],
        attachment: Optional[Attachment] = None,
    ) -> ResponseEnvelope:
        """
        Send one request to the provider and normalize the response.

        Args:
            model (str): Model identifier requested by the caller.
            messages (List[ChatMessage]): Conversation history, oldest first.
            attachment (Attachment, optional): File uploaded with the current turn.

        Returns:
            ResponseEnvelope: ``{"content": ..., "hasToolUse": False}``.

        Raises:
            AttachmentDecodeError: Before any outbound call, if an attachment
                is malformed.
            ProviderError: If the provider SDK fails.
        """
        if attachment and attachment.get("base64"):
            validate_attachment(attachment)
        else:
            attachment = None

        request = self._convert_messages(messages, attachment)

        try:
            # _complete builds the client on first use, so credential errors land here
            content = await self._complete(model, request)
        except self.sdk_errors as e:
            raise ProviderError(self.error_label, getattr(e, "message", None) or str(e)) from e

        return {"content": content or "", "hasToolUse": False}

    @abstractmethod
    def _create_client(self) -> Any:
        """Build the provider SDK client."""

    @abstractmethod
    def _convert_messages(
        self,
        messages: List[ChatMessage],
        attachment: Optional[Attachment],
    ) -> Any:
        """
        Convert generic messages into the provider's native request payload.

        Must not perform any network I/O.
        """

    @abstractmethod
    async def _complete(self, model: str, request: Any) -> str:
        """
        Make the provider call and return the response text.
        """

    @staticmethod
    def describe(converted: List[dict]) -> List[Any]:
        """Summarize converted messages for debug logging (no payloads)."""
        return [
            [part.get("type") for part in msg["content"]]
            if isinstance(msg.get("content"), list) else "text"
            for msg in converted
        ]
