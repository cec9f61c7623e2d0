"""Browsing session endpoints"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from codepilot.deps import get_registry, get_session, get_session_id
from codepilot.services.workspace import BrowserSession, SessionRegistry

router = APIRouter()


class HandoffValue(BaseModel):
    """A single handoff entry; value is null when never set in this session"""

    key: str
    value: Optional[str] = None


@router.get("/handoff/{key}", response_model=HandoffValue)
async def get_handoff(key: str, session: BrowserSession = Depends(get_session)) -> HandoffValue:
    return HandoffValue(key=key, value=session.handoff.get(key))


@router.delete("")
async def end_session(
    session_id: str = Depends(get_session_id),
    registry: SessionRegistry = Depends(get_registry),
) -> dict:
    """End the browsing session; every handoff entry is dropped"""
    ended = await registry.end(session_id)
    return {"status": "ended" if ended else "unknown", "session_id": session_id}
