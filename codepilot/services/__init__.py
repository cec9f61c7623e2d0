"""Services module - Business logic layer"""

from .analysis import CodeAnalyzer, ReportPanel
from .config_manager import ConfigManager
from .conversation import ConversationEngine
from .errors import (
    CodePilotError,
    GatewayTimeoutError,
    ParseError,
    TransportError,
    UserInputError,
    ValidationError,
)
from .llm_service import GenerativeGateway, GenerativeService, LLMService, call_llm
from .session_handoff import SessionHandoff
from .suggestions import EditSuggestionCoordinator
from .workspace import BrowserSession, SessionRegistry

__all__ = [
    "BrowserSession",
    "CodeAnalyzer",
    "CodePilotError",
    "ConfigManager",
    "ConversationEngine",
    "EditSuggestionCoordinator",
    "GatewayTimeoutError",
    "GenerativeGateway",
    "GenerativeService",
    "LLMService",
    "ParseError",
    "ReportPanel",
    "SessionHandoff",
    "SessionRegistry",
    "TransportError",
    "UserInputError",
    "ValidationError",
    "call_llm",
]
