"""Chat mode API endpoints"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from codepilot.deps import get_session
from codepilot.models.chat import ChatRequest, ChatResponse
from codepilot.services.workspace import BrowserSession

router = APIRouter()


@router.get("/turns", response_model=ChatResponse)
async def list_turns(session: BrowserSession = Depends(get_session)) -> ChatResponse:
    """Turn log in sequence order"""
    return ChatResponse(turns=list(session.editor.conversation.turns))


@router.post("/message", response_model=ChatResponse)
async def chat_message(
    request: ChatRequest,
    session: BrowserSession = Depends(get_session),
) -> ChatResponse:
    """Send a chat message about the current buffer; a blank message changes nothing"""
    await session.editor.send_message(request.message)
    return ChatResponse(turns=list(session.editor.conversation.turns))
