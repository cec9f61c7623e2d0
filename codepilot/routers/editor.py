"""Code editor view endpoints: buffer, suggestions, download, handoff"""

from __future__ import annotations

import asyncio

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse
from sse_starlette.sse import EventSourceResponse

from codepilot.deps import SESSION_HEADER, get_session
from codepilot.models.editor import (
    CodeBuffer,
    CodeUpdateRequest,
    LanguageChangeRequest,
    SuggestionState,
)
from codepilot.services.workspace import BrowserSession

router = APIRouter()

# Keep-alive for idle suggestion streams
STREAM_PING_SECONDS = 15


@router.get("/buffer", response_model=CodeBuffer)
async def get_buffer(session: BrowserSession = Depends(get_session)) -> CodeBuffer:
    """Current editor buffer"""
    return session.editor.buffer


@router.put("/buffer", response_model=CodeBuffer)
async def update_buffer(
    request: CodeUpdateRequest,
    session: BrowserSession = Depends(get_session),
) -> CodeBuffer:
    """Content-changed event from the editor widget"""
    return session.editor.update_code(request.content)


@router.put("/language", response_model=CodeBuffer)
async def change_language(
    request: LanguageChangeRequest,
    session: BrowserSession = Depends(get_session),
) -> CodeBuffer:
    """Switch language; the buffer is replaced with the language template"""
    return session.editor.change_language(request.language)


@router.get("/suggestions", response_model=SuggestionState)
async def get_suggestions(session: BrowserSession = Depends(get_session)) -> SuggestionState:
    """Current suggestion list and request status"""
    return session.editor.suggestions.state


@router.post("/suggestions/refresh", response_model=SuggestionState)
async def refresh_suggestions(session: BrowserSession = Depends(get_session)) -> SuggestionState:
    """Regenerate suggestions now, bypassing the quiet period"""
    return await session.editor.refresh_suggestions()


@router.get("/suggestions/stream")
async def stream_suggestions(request: Request, session: BrowserSession = Depends(get_session)):
    """SSE stream with one event per settled suggestion request"""
    editor = session.editor
    queue = editor.subscribe()

    async def event_generator():
        try:
            while True:
                if await request.is_disconnected():
                    break
                try:
                    state = await asyncio.wait_for(queue.get(), timeout=STREAM_PING_SECONDS)
                except asyncio.TimeoutError:
                    continue
                yield {"event": "suggestions", "data": state.model_dump_json()}
        finally:
            editor.unsubscribe(queue)

    return EventSourceResponse(
        event_generator(),
        ping=STREAM_PING_SECONDS,
        headers={SESSION_HEADER: session.session_id},
    )


@router.get("/download", response_class=PlainTextResponse)
async def download_code(session: BrowserSession = Depends(get_session)) -> PlainTextResponse:
    """Buffer as a file named after its language"""
    filename, content = session.editor.download()
    return PlainTextResponse(
        content,
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            SESSION_HEADER: session.session_id,
        },
    )


@router.post("/handoff", response_model=CodeBuffer)
async def handoff_buffer(session: BrowserSession = Depends(get_session)) -> CodeBuffer:
    """Publish the buffer for the tests/debug views before navigating"""
    session.editor.handoff_buffer()
    return session.editor.buffer
