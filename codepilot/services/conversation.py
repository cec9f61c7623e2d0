"""
Conversation Engine - Ordered, append-only chat turn log

Sequence ids are handed out when a request is issued, so a slow reply still
lands in the slot it was issued for even if later replies arrive first.
"""

from __future__ import annotations

import bisect
import itertools
import logging
from operator import attrgetter

from codepilot.models.chat import ChatContext, ConversationTurn, Role, TextPart

from .errors import CodePilotError
from .extractor import segment
from .llm_service import GenerativeService, generate_text
from .prompts import build_chat_prompt

logger = logging.getLogger(__name__)

CHAT_FAILURE = "⚠️ Error processing request. Please try again."

_by_sequence = attrgetter("sequence_id")


class ConversationEngine:
    """Turn log of one editor view"""

    def __init__(self, gateway: GenerativeService):
        self._gateway = gateway
        self._turns: list[ConversationTurn] = []
        self._sequence = itertools.count(1)

    @property
    def turns(self) -> tuple[ConversationTurn, ...]:
        return tuple(self._turns)

    def _next_sequence_id(self) -> int:
        return next(self._sequence)

    def _insert(self, turn: ConversationTurn) -> ConversationTurn:
        bisect.insort(self._turns, turn, key=_by_sequence)
        return turn

    def append_user_turn(self, text: str) -> ConversationTurn | None:
        """Append the user's message; blank text is ignored"""
        if not text or not text.strip():
            return None
        return self._insert(
            ConversationTurn(
                sequence_id=self._next_sequence_id(),
                role=Role.USER,
                parts=(TextPart(content=text),),
            )
        )

    async def request_assistant_turn(self, context: ChatContext) -> ConversationTurn:
        """Ask the service for a reply and file it under the id reserved at issue time"""
        sequence_id = self._next_sequence_id()
        prompt = build_chat_prompt(context.query, context.code, context.language)

        try:
            raw = await generate_text(self._gateway, prompt)
        except CodePilotError as e:
            logger.warning("[Chat] Error processing request #%d: %s", sequence_id, e)
            return self._insert(
                ConversationTurn(
                    sequence_id=sequence_id,
                    role=Role.ASSISTANT,
                    parts=(TextPart(content=CHAT_FAILURE),),
                    is_error=True,
                )
            )

        return self._insert(
            ConversationTurn(
                sequence_id=sequence_id,
                role=Role.ASSISTANT,
                parts=tuple(segment(raw)),
            )
        )

    async def send_message(self, text: str, code: str, language: str) -> ConversationTurn | None:
        """User turn followed by the assistant's answer; None when the message is blank"""
        if self.append_user_turn(text) is None:
            return None
        return await self.request_assistant_turn(ChatContext(code=code, language=language, query=text))
