import logging
from typing import Dict, List, Optional

import openai
from openai import AsyncOpenAI

from .base import BaseLLMProvider, MAX_TOKENS, TEMPERATURE
from ..types import Attachment, ChatMessage, ProviderMessage
from ..utils import (
    create_image_content, create_message, is_image, last_message_text, replace_last
)

logger = logging.getLogger(__name__)

# Caller-facing aliases mapped to a concrete vision-capable model
MODEL_ALIASES: Dict[str, str] = {
    "gpt-4": "gpt-4o",
}


class OpenAIProvider(BaseLLMProvider):
    """
    Vision chat-completion adapter for the OpenAI API.
    """

    name = "openai"
    error_label = "OpenAI API Error"
    sdk_errors = (openai.OpenAIError,)

    def _create_client(self) -> AsyncOpenAI:
        return AsyncOpenAI(api_key=self.api_key)

    @staticmethod
    def resolve_model(model: str) -> str:
        return MODEL_ALIASES.get(model, model)

    def _convert_messages(
        self,
        messages: List[ChatMessage],
        attachment: Optional[Attachment],
    ) -> List[ProviderMessage]:
        """
        Convert messages to chat-completion format.

        Handles:
        - Messages with an image file become a text part followed by an
          image_url part carrying a data URI.
        - Everything else passes through as plain text.
        - An image uploaded with the current turn replaces the last message.

        Args:
            messages (List[ChatMessage]): Conversation history.
            attachment (Attachment, optional): Current-turn upload.

        Returns:
            List[ProviderMessage]: OpenAI-compatible message list.
        """
        converted = []
        for msg in messages:
            role = msg.get("role", "user")
            content = msg.get("content", "")
            file = msg.get("file")

            if is_image(file):
                converted.append(create_message(role, [
                    content,
                    create_image_content(file["base64"], file["mediaType"]),
                ]))
            else:
                converted.append(create_message(role, content))

        if is_image(attachment):
            replace_last(converted, create_message("user", [
                last_message_text(messages),
                create_image_content(attachment["base64"], attachment["mediaType"]),
            ]))

        return converted

    async def _complete(self, model: str, request: List[ProviderMessage]) -> str:
        model = self.resolve_model(model)
        logger.debug(
            "OpenAI request: model=%s contentTypes=%s", model, self.describe(request)
        )

        resp = await self.client.chat.completions.create(
            model=model,
            messages=request,
            max_tokens=MAX_TOKENS,
            temperature=TEMPERATURE,
        )
        return resp.choices[0].message.content or ""
