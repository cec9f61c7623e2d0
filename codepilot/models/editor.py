"""Editor view data models"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class Language(str, Enum):
    """Languages offered by the code editor"""

    JAVASCRIPT = "javascript"
    PYTHON = "python"
    JAVA = "java"
    CPP = "cpp"
    CSHARP = "csharp"
    PHP = "php"
    RUBY = "ruby"
    SWIFT = "swift"
    GO = "go"
    RUST = "rust"


class RequestState(str, Enum):
    """Lifecycle of a single orchestrated request"""

    IDLE = "idle"
    PENDING = "pending"  # debounce timer armed, nothing sent yet
    IN_FLIGHT = "in_flight"
    RESOLVED = "resolved"
    FAILED = "failed"


class CodeBuffer(BaseModel):
    """Code owned by the active view"""

    content: str
    language: Language = Language.JAVASCRIPT


class SuggestionState(BaseModel):
    """Snapshot of the suggestion panel"""

    suggestions: list[str] = []
    status: RequestState = RequestState.IDLE
    epoch: int = 0


class CodeUpdateRequest(BaseModel):
    """Editor content-changed event"""

    content: str


class LanguageChangeRequest(BaseModel):
    """Language selector change"""

    language: Language
