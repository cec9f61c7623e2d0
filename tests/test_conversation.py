"""Tests for ConversationEngine ordering, segmentation and failure turns."""

import asyncio

import pytest
from pydantic import ValidationError as PydanticValidationError

from codepilot.models.chat import ChatContext, CodePart, Role, TextPart
from codepilot.services.conversation import CHAT_FAILURE, ConversationEngine
from codepilot.services.errors import TransportError

from .conftest import FakeGateway


def _context(query="How do I loop?"):
    return ChatContext(code="let x = 1;", language="javascript", query=query)


class TestUserTurns:
    def test_blank_text_is_rejected(self, fake_gateway):
        engine = ConversationEngine(fake_gateway)

        assert engine.append_user_turn("") is None
        assert engine.append_user_turn("   \n\t") is None
        assert engine.turns == ()

    def test_user_turns_get_increasing_ids(self, fake_gateway):
        engine = ConversationEngine(fake_gateway)

        first = engine.append_user_turn("hi")
        second = engine.append_user_turn("again")

        assert (first.sequence_id, second.sequence_id) == (1, 2)
        assert first.role == Role.USER
        assert first.parts == (TextPart(content="hi"),)


class TestAssistantTurns:
    @pytest.mark.asyncio
    async def test_reply_is_segmented(self):
        engine = ConversationEngine(FakeGateway("Use a loop:\n```js\nfor (;;) {}\n```"))

        turn = await engine.request_assistant_turn(_context())

        assert turn.role == Role.ASSISTANT
        assert not turn.is_error
        assert turn.parts == (
            TextPart(content="Use a loop:\n"),
            CodePart(content="for (;;) {}\n", language_hint="js"),
        )

    @pytest.mark.asyncio
    async def test_prompt_carries_code_language_and_query(self, fake_gateway):
        engine = ConversationEngine(fake_gateway)

        await engine.request_assistant_turn(_context("Explain closures"))

        prompt = fake_gateway.prompts[0]
        assert "Explain closures" in prompt
        assert "let x = 1;" in prompt
        assert "Current language: javascript" in prompt

    @pytest.mark.asyncio
    async def test_failure_appends_error_turn(self):
        engine = ConversationEngine(FakeGateway(TransportError("429")))

        turn = await engine.request_assistant_turn(_context())

        assert turn.is_error
        assert turn.parts == (TextPart(content=CHAT_FAILURE),)
        assert engine.turns == (turn,)

    @pytest.mark.asyncio
    async def test_late_reply_keeps_issue_order(self, controlled_gateway):
        engine = ConversationEngine(controlled_gateway)
        slow = asyncio.create_task(engine.request_assistant_turn(_context("first")))
        await controlled_gateway.wait_for_calls(1)
        fast = asyncio.create_task(engine.request_assistant_turn(_context("second")))
        await controlled_gateway.wait_for_calls(2)

        controlled_gateway.resolve(1, "answer two")
        await fast
        controlled_gateway.resolve(0, "answer one")
        await slow

        assert [t.text for t in engine.turns] == ["answer one", "answer two"]
        assert [t.sequence_id for t in engine.turns] == [1, 2]

    @pytest.mark.asyncio
    async def test_user_turn_after_pending_request_follows_it(self, controlled_gateway):
        engine = ConversationEngine(controlled_gateway)
        engine.append_user_turn("question")
        pending = asyncio.create_task(engine.request_assistant_turn(_context("question")))
        await controlled_gateway.wait_for_calls(1)

        engine.append_user_turn("follow-up")
        controlled_gateway.resolve(0, "answer")
        await pending

        assert [(t.sequence_id, t.text) for t in engine.turns] == [
            (1, "question"),
            (2, "answer"),
            (3, "follow-up"),
        ]


class TestSendMessage:
    @pytest.mark.asyncio
    async def test_blank_message_dispatches_nothing(self, fake_gateway):
        engine = ConversationEngine(fake_gateway)

        assert await engine.send_message("  ", "code", "python") is None
        assert fake_gateway.calls == 0
        assert engine.turns == ()

    @pytest.mark.asyncio
    async def test_user_then_assistant(self):
        engine = ConversationEngine(FakeGateway("Sure."))

        await engine.send_message("Help", "print(1)", "python")

        assert [t.role for t in engine.turns] == [Role.USER, Role.ASSISTANT]
        assert engine.turns[1].text == "Sure."

    @pytest.mark.asyncio
    async def test_turns_are_immutable(self):
        engine = ConversationEngine(FakeGateway("Sure."))
        await engine.send_message("Help", "print(1)", "python")

        with pytest.raises(PydanticValidationError):
            engine.turns[0].is_error = True
