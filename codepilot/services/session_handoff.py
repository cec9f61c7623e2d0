"""
Session Handoff - Ephemeral key/value bridge between independently routed views

Lives exactly as long as one browsing session: no expiry inside the session,
nothing survives it.
"""

from __future__ import annotations

from codepilot.models.editor import CodeBuffer

from .languages import parse_language

CURRENT_CODE_KEY = "currentCode"
CURRENT_LANGUAGE_KEY = "currentLanguage"


class SessionHandoff:
    """String-keyed, string-valued, last-write-wins store"""

    def __init__(self) -> None:
        self._entries: dict[str, str] = {}

    def put(self, key: str, value: str) -> None:
        self._entries[key] = value

    def get(self, key: str) -> str | None:
        return self._entries.get(key)

    def clear(self) -> None:
        """End of the browsing session"""
        self._entries.clear()

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def store_buffer(self, buffer: CodeBuffer) -> None:
        """Publish the active buffer before navigating away"""
        self.put(CURRENT_CODE_KEY, buffer.content)
        self.put(CURRENT_LANGUAGE_KEY, buffer.language.value)

    def load_buffer(self) -> CodeBuffer | None:
        """Buffer left by another view, or None unless code and a known language are both set"""
        code = self.get(CURRENT_CODE_KEY)
        language = parse_language(self.get(CURRENT_LANGUAGE_KEY))
        if not code or language is None:
            return None
        return CodeBuffer(content=code, language=language)
