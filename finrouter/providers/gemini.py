import base64
import binascii
import logging
from typing import List, Optional

import httpx
from google import genai
from google.genai import errors, types

from .base import BaseLLMProvider
from ..errors import AttachmentDecodeError, InvalidRequestError
from ..types import Attachment, ChatMessage
from ..utils import is_image

logger = logging.getLogger(__name__)


class GeminiProvider(BaseLLMProvider):
    """
    Single-turn generation adapter for Google Gemini (google-genai SDK).

    Only the last message is forwarded; earlier history is not sent.
    """

    name = "google"
    error_label = "Google Generative AI Error"
    # genai.Client raises ValueError when no key is found; transport failures
    # come through as raw httpx errors
    sdk_errors = (errors.APIError, httpx.HTTPError, ValueError)

    def _create_client(self) -> genai.Client:
        return genai.Client(api_key=self.api_key)

    def _convert_messages(
        self,
        messages: List[ChatMessage],
        attachment: Optional[Attachment],
    ) -> List[types.Content]:
        """
        Build a single user turn from the last message.

        An image file on that message adds an inline-data part after the text.
        The current-turn attachment is not used by this variant.

        Raises:
            InvalidRequestError: If there is no message to send.
            AttachmentDecodeError: If the image payload is not base64.
        """
        if not messages:
            raise InvalidRequestError("At least one message is required")

        last = messages[-1]
        parts = [types.Part.from_text(text=last.get("content", ""))]

        file = last.get("file")
        if is_image(file):
            try:
                data = base64.b64decode(file.get("base64", ""), validate=True)
            except (binascii.Error, ValueError) as e:
                raise AttachmentDecodeError("Attachment is not valid base64") from e
            # The SDK re-encodes the bytes as base64 on the wire
            parts.append(types.Part.from_bytes(data=data, mime_type=file["mediaType"]))

        return [types.Content(role="user", parts=parts)]

    async def _complete(self, model: str, request: List[types.Content]) -> str:
        logger.debug(
            "Gemini request: model=%s parts=%d", model, len(request[0].parts or [])
        )

        resp = await self.client.aio.models.generate_content(
            model=model,
            contents=request,
        )

        try:
            return resp.text or ""
        except ValueError:
            return ""
