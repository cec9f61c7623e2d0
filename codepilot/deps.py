"""FastAPI dependencies for CodePilot.

Shared services live on app.state and reach the routes through Depends().
A browsing session is identified by the X-Session-Id header; requests that
arrive without one are given a fresh id, echoed back in the response.
"""

import logging
import uuid
from typing import Optional

from fastapi import Depends, Header, Request, Response

from codepilot.services.config_manager import ConfigManager
from codepilot.services.workspace import BrowserSession, SessionRegistry

logger = logging.getLogger(__name__)

SESSION_HEADER = "X-Session-Id"


async def get_config_manager(request: Request) -> ConfigManager:
    """Get ConfigManager from app state."""
    return request.app.state.config_manager


async def get_registry(request: Request) -> SessionRegistry:
    """Get SessionRegistry from app state."""
    return request.app.state.sessions


async def get_session_id(
    response: Response,
    x_session_id: Optional[str] = Header(default=None),
) -> str:
    """Current browsing session id, minted when the client has none yet."""
    session_id = (x_session_id or "").strip() or uuid.uuid4().hex
    response.headers[SESSION_HEADER] = session_id
    return session_id


async def get_session(
    session_id: str = Depends(get_session_id),
    registry: SessionRegistry = Depends(get_registry),
) -> BrowserSession:
    """BrowserSession for the current request."""
    return registry.get_or_create(session_id)
