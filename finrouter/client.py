import logging
from typing import Any, Dict, List, Optional, Tuple, Union

from .chains import run_chain
from .config import Settings
from .errors import UnsupportedProviderError, error_envelope
from .providers.base import BaseLLMProvider
from .providers.openai import OpenAIProvider
from .providers.anthropic import AnthropicProvider
from .providers.gemini import GeminiProvider
from .schemas import ChainRequest, FinanceRequest
from .types import Attachment, ChatMessage, DEFAULT_PROVIDER, ResponseEnvelope

logger = logging.getLogger(__name__)

Payload = Union[bytes, str, Dict[str, Any]]


def _parse(model: type, payload: Payload) -> Any:
    if isinstance(payload, (bytes, str)):
        return model.model_validate_json(payload)
    return model.model_validate(payload)


class FinanceRouter:
    """
    Routes financial-analysis chat requests to one of three LLM providers.

    One instance is built per process from ``Settings`` and shared by
    reference across requests; it holds no per-request state.
    """

    def __init__(self, settings: Optional[Settings] = None):
        """
        Initialize the router with process configuration.

        Args:
            settings: Configuration with API keys. Defaults to ``Settings.from_env()``.
        """
        self.settings = settings or Settings.from_env()
        self.providers: Dict[str, BaseLLMProvider] = {
            "anthropic": AnthropicProvider(api_key=self.settings.anthropic_api_key),
            "openai": OpenAIProvider(api_key=self.settings.openai_api_key),
            "google": GeminiProvider(api_key=self.settings.google_api_key),
        }

    # ==========================================================================
    # Dispatch
    # ==========================================================================

    def get_provider(self, provider: Optional[str] = None) -> BaseLLMProvider:
        """
        Return the adapter for a provider tag (``None`` selects the default).

        Raises:
            UnsupportedProviderError: If the tag is not recognized.
        """
        name = provider or DEFAULT_PROVIDER
        if name not in self.providers:
            raise UnsupportedProviderError(name)
        return self.providers[name]

    async def chat(
        self,
        messages: List[ChatMessage],
        model: str,
        provider: Optional[str] = None,
        file_data: Optional[Attachment] = None,
    ) -> ResponseEnvelope:
        """
        Send the conversation through the selected provider adapter.

        Args:
            messages (List[ChatMessage]): Conversation history, oldest first.
            model (str): Model identifier for the provider.
            provider (str, optional): 'anthropic' (default), 'openai' or 'google'.
            file_data (Attachment, optional): File uploaded with the current turn.

        Returns:
            ResponseEnvelope: Normalized ``{"content", "hasToolUse"}``.

        Raises:
            UnsupportedProviderError: If the provider is not recognized.
            AttachmentDecodeError: If an attachment is malformed.
            ProviderError: Any provider SDK failure.
        """
        adapter = self.get_provider(provider)
        return await adapter.send(model, messages, file_data)

    async def analyze(
        self,
        messages: List[ChatMessage],
        model: str,
        provider: Optional[str] = None,
        chart_type: Optional[str] = None,
        structured: bool = False,
    ) -> ResponseEnvelope:
        """
        Run the last message through a prompt chain (analysis, chart or
        structured analysis) on the selected provider.
        """
        return await run_chain(
            provider or DEFAULT_PROVIDER,
            model,
            messages,
            self.settings,
            chart_type=chart_type,
            structured=structured,
        )

    # ==========================================================================
    # Failure Boundaries
    # ==========================================================================

    async def handle(self, payload: Payload) -> Tuple[int, Dict[str, Any]]:
        """
        Handle a ``/api/finance`` body end to end.

        Every outcome, including malformed JSON and unexpected exceptions, is
        returned as ``(status_code, body)``; nothing propagates.

        Args:
            payload: Raw JSON (bytes/str) or an already-decoded dict.

        Returns:
            Tuple[int, Dict]: 200 with a ResponseEnvelope, 400 for attachment
            decode failures, 500 for everything else.
        """
        try:
            request: FinanceRequest = _parse(FinanceRequest, payload)
            logger.info(
                "Finance request: provider=%s model=%s messages=%d fileType=%s",
                request.provider_name,
                request.model,
                len(request.messages),
                request.fileData.mediaType if request.fileData else None,
            )
            envelope = await self.chat(
                request.chat_messages(),
                request.model,
                provider=request.provider_name,
                file_data=request.attachment(),
            )
        except Exception as e:
            return self._failure(e)
        return 200, dict(envelope)

    async def handle_chain(self, payload: Payload) -> Tuple[int, Dict[str, Any]]:
        """
        Handle a ``/api/finance/chain`` body end to end.

        Same contract as ``handle``.
        """
        try:
            request: ChainRequest = _parse(ChainRequest, payload)
            logger.info(
                "Chain request: provider=%s model=%s chartType=%s structured=%s",
                request.provider_name,
                request.model,
                request.chartType,
                request.structured,
            )
            envelope = await self.analyze(
                request.chat_messages(),
                request.model,
                provider=request.provider_name,
                chart_type=request.chartType,
                structured=request.structured,
            )
        except Exception as e:
            return self._failure(e)
        return 200, dict(envelope)

    @staticmethod
    def _failure(exc: Exception) -> Tuple[int, Dict[str, Any]]:
        status, body = error_envelope(exc)
        if status >= 500:
            logger.exception("Finance API error: %s", body.get("error"))
        else:
            logger.warning("Rejected request: %s", body.get("details") or body.get("error"))
        return status, dict(body)
