"""Test case, debug and error analysis view endpoints"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from codepilot.deps import get_session
from codepilot.models.editor import CodeBuffer, CodeUpdateRequest, LanguageChangeRequest
from codepilot.models.reports import (
    AnalyzeErrorRequest,
    ErrorDiagnosis,
    IssueReport,
    ReportState,
    TestPrediction,
)
from codepilot.services.workspace import BrowserSession

tests_router = APIRouter()
debug_router = APIRouter()
errors_router = APIRouter()


# ========== Test Cases ==========


@tests_router.get("/buffer", response_model=CodeBuffer)
async def load_tests_buffer(session: BrowserSession = Depends(get_session)) -> CodeBuffer:
    """Open the view, picking up code handed off by the editor"""
    return session.tests.load()


@tests_router.put("/buffer", response_model=CodeBuffer)
async def update_tests_buffer(
    request: CodeUpdateRequest,
    session: BrowserSession = Depends(get_session),
) -> CodeBuffer:
    return session.tests.update_code(request.content)


@tests_router.put("/language", response_model=CodeBuffer)
async def change_tests_language(
    request: LanguageChangeRequest,
    session: BrowserSession = Depends(get_session),
) -> CodeBuffer:
    return session.tests.change_language(request.language)


@tests_router.post("/generate", response_model=ReportState[str])
async def generate_tests(session: BrowserSession = Depends(get_session)) -> ReportState:
    """Generate a test suite for the buffer; on success it replaces the buffer"""
    return await session.tests.generate_tests()


@tests_router.post("/run", response_model=ReportState[TestPrediction])
async def run_tests(session: BrowserSession = Depends(get_session)) -> ReportState:
    """Predict the outcome of running the tests in the buffer"""
    return await session.tests.run_tests()


# ========== Debug ==========


@debug_router.get("/buffer", response_model=CodeBuffer)
async def load_debug_buffer(session: BrowserSession = Depends(get_session)) -> CodeBuffer:
    return session.debug.load()


@debug_router.put("/buffer", response_model=CodeBuffer)
async def update_debug_buffer(
    request: CodeUpdateRequest,
    session: BrowserSession = Depends(get_session),
) -> CodeBuffer:
    return session.debug.update_code(request.content)


@debug_router.put("/language", response_model=CodeBuffer)
async def change_debug_language(
    request: LanguageChangeRequest,
    session: BrowserSession = Depends(get_session),
) -> CodeBuffer:
    return session.debug.change_language(request.language)


@debug_router.post("/analyze", response_model=ReportState[IssueReport])
async def analyze_code(session: BrowserSession = Depends(get_session)) -> ReportState:
    """Bug, performance and security report for the buffer"""
    return await session.debug.analyze()


# ========== Error Analysis ==========


@errors_router.post("/analyze", response_model=ReportState[ErrorDiagnosis])
async def analyze_error(
    request: AnalyzeErrorRequest,
    session: BrowserSession = Depends(get_session),
) -> ReportState:
    """Diagnose a pasted error message; a blank message changes nothing"""
    return await session.errors.analyze(request.error_message)
