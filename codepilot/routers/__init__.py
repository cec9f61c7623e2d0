"""Routers module - FastAPI route handlers"""

from . import analysis, chat, config, editor, session

__all__ = ["analysis", "chat", "config", "editor", "session"]
