"""Models module - Pydantic data models"""

from .chat import (
    ChatContext,
    ChatRequest,
    ChatResponse,
    CodePart,
    ConversationTurn,
    MessagePart,
    Role,
    TextPart,
)
from .editor import (
    CodeBuffer,
    CodeUpdateRequest,
    Language,
    LanguageChangeRequest,
    RequestState,
    SuggestionState,
)
from .reports import (
    AnalysisPayload,
    AnalyzeErrorRequest,
    ErrorDiagnosis,
    Issue,
    IssueKind,
    IssueReport,
    ReportState,
    TestPrediction,
)

__all__ = [
    # Chat models
    "ChatContext",
    "ChatRequest",
    "ChatResponse",
    "CodePart",
    "ConversationTurn",
    "MessagePart",
    "Role",
    "TextPart",
    # Editor models
    "CodeBuffer",
    "CodeUpdateRequest",
    "Language",
    "LanguageChangeRequest",
    "RequestState",
    "SuggestionState",
    # Report models
    "AnalysisPayload",
    "AnalyzeErrorRequest",
    "ErrorDiagnosis",
    "Issue",
    "IssueKind",
    "IssueReport",
    "ReportState",
    "TestPrediction",
]
