import logging
from typing import Any, List, Optional

import anthropic
from anthropic import AsyncAnthropic

from .base import BaseLLMProvider, MAX_TOKENS, TEMPERATURE
from ..types import Attachment, ChatMessage, ProviderMessage
from ..utils import (
    create_image_block, create_message, decode_text_attachment,
    format_text_attachment, is_image, last_message_text, replace_last
)

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are a helpful AI assistant."


class AnthropicProvider(BaseLLMProvider):
    """
    Structured message-API adapter for Anthropic (Claude).
    """

    name = "anthropic"
    error_label = "Anthropic API Error"
    sdk_errors = (anthropic.AnthropicError,)

    def _create_client(self) -> AsyncAnthropic:
        client = AsyncAnthropic(api_key=self.api_key)
        # The SDK only notices a missing credential while building headers
        if not client.api_key and not client.auth_token:
            raise anthropic.AnthropicError(
                "No API key was provided. Set ANTHROPIC_API_KEY or pass api_key."
            )
        return client

    @staticmethod
    def _convert_file(role: str, content: str, file: Attachment) -> ProviderMessage:
        """
        Embed an attachment into a message.

        Text files are decoded and flattened into the message text; anything
        else becomes an image block followed by the text.
        """
        if file.get("isText"):
            text = decode_text_attachment(file.get("base64", ""))
            return create_message(
                role, format_text_attachment(file.get("fileName"), text, content)
            )
        return create_message(role, [
            create_image_block(file.get("base64", ""), file.get("mediaType", "")),
            content,
        ])

    def _convert_messages(
        self,
        messages: List[ChatMessage],
        attachment: Optional[Attachment],
    ) -> List[ProviderMessage]:
        """
        Convert messages to messages-API format.

        The current-turn attachment replaces the last message: text files are
        flattened into its text, images become an image block plus text.
        Attachments of any other media type leave the last message untouched.

        Raises:
            AttachmentDecodeError: If a text attachment cannot be decoded.
        """
        converted = []
        for msg in messages:
            role = msg.get("role", "user")
            content = msg.get("content", "")
            file = msg.get("file")

            if file:
                converted.append(self._convert_file(role, content, file))
            else:
                converted.append(create_message(role, content))

        if attachment and (attachment.get("isText") or is_image(attachment)):
            replace_last(
                converted,
                self._convert_file("user", last_message_text(messages), attachment),
            )

        return converted

    async def _complete(self, model: str, request: List[ProviderMessage]) -> str:
        logger.debug(
            "Anthropic request: model=%s messageCount=%d", model, len(request)
        )

        resp = await self.client.messages.create(
            model=model,
            max_tokens=MAX_TOKENS,
            temperature=TEMPERATURE,
            messages=request,
            system=SYSTEM_PROMPT,
        )
        return self._extract_text(resp.content)

    @staticmethod
    def _extract_text(content: Any) -> str:
        """Plain string content as-is, else the first block's text."""
        if isinstance(content, str):
            return content
        if not content:
            return ""
        return getattr(content[0], "text", None) or ""
