"""Chat mode data models"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class Role(str, Enum):
    """Author of a conversation turn"""

    USER = "user"
    ASSISTANT = "assistant"


class TextPart(BaseModel):
    """Plain prose segment of a message"""

    model_config = ConfigDict(frozen=True)

    type: Literal["text"] = "text"
    content: str


class CodePart(BaseModel):
    """Fenced code segment of a message"""

    model_config = ConfigDict(frozen=True)

    type: Literal["code"] = "code"
    content: str
    language_hint: str = ""


MessagePart = Annotated[Union[TextPart, CodePart], Field(discriminator="type")]


class ConversationTurn(BaseModel):
    """One entry of the append-only turn log"""

    model_config = ConfigDict(frozen=True)

    sequence_id: int
    role: Role
    parts: tuple[MessagePart, ...]
    is_error: bool = False

    @property
    def text(self) -> str:
        """Concatenated content of every part"""
        return "".join(part.content for part in self.parts)


class ChatContext(BaseModel):
    """Everything one assistant request carries"""

    code: str
    language: str
    query: str


class ChatRequest(BaseModel):
    """Request for chat message"""

    message: str


class ChatResponse(BaseModel):
    """Turn log after a chat exchange"""

    turns: list[ConversationTurn]
