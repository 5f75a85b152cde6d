"""
Pydantic models for inbound request bodies.

The models validate the JSON the chat UI sends and are then dumped to the
plain ``TypedDict`` shapes the adapters work with.
"""
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from .types import Attachment, ChatMessage, DEFAULT_PROVIDER


class AttachmentModel(BaseModel):
    base64: str = ""
    mediaType: str = ""
    isText: bool = False
    fileName: Optional[str] = None

    def to_attachment(self) -> Attachment:
        return self.model_dump(exclude_none=True)


class MessageModel(BaseModel):
    role: Literal["user", "assistant"]
    content: str = ""
    file: Optional[AttachmentModel] = None

    def to_message(self) -> ChatMessage:
        return self.model_dump(exclude_none=True)


class FinanceRequest(BaseModel):
    """Body of ``POST /api/finance``."""
    messages: List[MessageModel] = Field(default_factory=list)
    fileData: Optional[AttachmentModel] = None
    model: str
    provider: Optional[str] = None

    @property
    def provider_name(self) -> str:
        return self.provider or DEFAULT_PROVIDER

    def chat_messages(self) -> List[ChatMessage]:
        return [m.to_message() for m in self.messages]

    def attachment(self) -> Optional[Attachment]:
        return self.fileData.to_attachment() if self.fileData else None


class ChainRequest(BaseModel):
    """Body of ``POST /api/finance/chain``."""
    messages: List[MessageModel] = Field(default_factory=list)
    model: str
    provider: Optional[str] = None
    chartType: Optional[str] = None
    structured: bool = False

    @property
    def provider_name(self) -> str:
        return self.provider or DEFAULT_PROVIDER

    def chat_messages(self) -> List[ChatMessage]:
        return [m.to_message() for m in self.messages]
