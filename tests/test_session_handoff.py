"""Tests for the session handoff store."""

from codepilot.models.editor import CodeBuffer, Language
from codepilot.services.session_handoff import (
    CURRENT_CODE_KEY,
    CURRENT_LANGUAGE_KEY,
    SessionHandoff,
)


class TestSessionHandoff:
    def test_get_before_put_is_absent(self):
        assert SessionHandoff().get("currentCode") is None

    def test_put_overwrites(self):
        store = SessionHandoff()
        store.put("k", "one")
        store.put("k", "two")

        assert store.get("k") == "two"

    def test_clear_ends_scope(self):
        store = SessionHandoff()
        store.put("k", "v")
        store.clear()

        assert store.get("k") is None
        assert "k" not in store

    def test_stores_are_independent(self):
        first, second = SessionHandoff(), SessionHandoff()
        first.put(CURRENT_CODE_KEY, "x")

        assert second.get(CURRENT_CODE_KEY) is None


class TestBufferHandoff:
    def test_round_trip(self):
        store = SessionHandoff()
        store.store_buffer(CodeBuffer(content="print(1)", language=Language.PYTHON))

        assert store.get(CURRENT_LANGUAGE_KEY) == "python"
        assert store.load_buffer() == CodeBuffer(content="print(1)", language=Language.PYTHON)

    def test_needs_both_keys(self):
        store = SessionHandoff()
        store.put(CURRENT_CODE_KEY, "print(1)")

        assert store.load_buffer() is None

    def test_unknown_language_is_ignored(self):
        store = SessionHandoff()
        store.put(CURRENT_CODE_KEY, "print(1)")
        store.put(CURRENT_LANGUAGE_KEY, "cobol")

        assert store.load_buffer() is None
