"""
Workspaces - The per-view state of one browsing session

Each view is an explicitly constructed object. The handoff store is the only
thing they share, and it is passed in rather than looked up.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Callable

from codepilot.models.chat import ConversationTurn
from codepilot.models.editor import CodeBuffer, Language, SuggestionState
from codepilot.models.reports import ErrorDiagnosis, IssueReport, ReportState, TestPrediction

from .analysis import (
    ANALYZE_CODE_FAILURE,
    ANALYZE_ERROR_FAILURE,
    GENERATE_TESTS_FAILURE,
    RUN_TESTS_FAILURE,
    CodeAnalyzer,
    ReportPanel,
)
from .conversation import ConversationEngine
from .languages import download_name, template_for
from .llm_service import GenerativeService
from .session_handoff import CURRENT_LANGUAGE_KEY, SessionHandoff
from .suggestions import DEFAULT_QUIET_PERIOD, EditSuggestionCoordinator

logger = logging.getLogger(__name__)

INITIAL_CODE = "// Start coding here..."

DEFAULT_IDLE_TIMEOUT = 1800.0
DEFAULT_MAX_SESSIONS = 1000


class EditorWorkspace:
    """Code editor view: buffer, live suggestions and the assistant chat"""

    def __init__(
        self,
        gateway: GenerativeService,
        handoff: SessionHandoff,
        quiet_period: float = DEFAULT_QUIET_PERIOD,
    ):
        self.handoff = handoff
        self.buffer = CodeBuffer(content=INITIAL_CODE, language=Language.JAVASCRIPT)
        self.suggestions = EditSuggestionCoordinator(gateway, quiet_period, on_update=self._publish)
        self.conversation = ConversationEngine(gateway)
        self._subscribers: set[asyncio.Queue] = set()

    def update_code(self, content: str) -> CodeBuffer:
        """Editor content-changed event"""
        self.buffer = CodeBuffer(content=content, language=self.buffer.language)
        self.handoff.store_buffer(self.buffer)
        self.suggestions.submit_edit(content)
        return self.buffer

    def change_language(self, language: Language) -> CodeBuffer:
        """Switching language replaces the buffer with that language's template"""
        self.buffer = CodeBuffer(content=template_for(language), language=language)
        self.handoff.store_buffer(self.buffer)
        self.suggestions.submit_edit(self.buffer.content)
        return self.buffer

    async def refresh_suggestions(self) -> SuggestionState:
        return await self.suggestions.force_refresh(self.buffer.content)

    async def send_message(self, text: str) -> ConversationTurn | None:
        return await self.conversation.send_message(text, self.buffer.content, self.buffer.language.value)

    def download(self) -> tuple[str, str]:
        """(file name, content) for saving the buffer"""
        return download_name(self.buffer.language), self.buffer.content

    def handoff_buffer(self) -> None:
        """Publish the buffer before navigating to another view"""
        self.handoff.store_buffer(self.buffer)

    # ========== Suggestion Updates ==========

    def subscribe(self) -> asyncio.Queue:
        queue: asyncio.Queue = asyncio.Queue()
        self._subscribers.add(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue) -> None:
        self._subscribers.discard(queue)

    def _publish(self, state: SuggestionState) -> None:
        for queue in self._subscribers:
            queue.put_nowait(state)

    async def aclose(self) -> None:
        await self.suggestions.aclose()


class TestsWorkspace:
    """Test case view: generate a suite from the handed-off code, then predict its run"""

    __test__ = False

    def __init__(self, gateway: GenerativeService, handoff: SessionHandoff):
        self.handoff = handoff
        self.analyzer = CodeAnalyzer(gateway)
        self.buffer = CodeBuffer(content="", language=Language.JAVASCRIPT)
        self.generation: ReportPanel[str] = ReportPanel("TestGeneration", GENERATE_TESTS_FAILURE)
        self.results: ReportPanel[TestPrediction] = ReportPanel("TestRun", RUN_TESTS_FAILURE)

    def load(self) -> CodeBuffer:
        """Pick up whatever the editor handed off"""
        saved = self.handoff.load_buffer()
        if saved is not None:
            self.buffer = saved
        return self.buffer

    def update_code(self, content: str) -> CodeBuffer:
        self.buffer = CodeBuffer(content=content, language=self.buffer.language)
        return self.buffer

    def change_language(self, language: Language) -> CodeBuffer:
        self.buffer = CodeBuffer(content=self.buffer.content, language=language)
        self.handoff.put(CURRENT_LANGUAGE_KEY, language.value)
        return self.buffer

    async def generate_tests(self) -> ReportState:
        source = self.buffer
        state = await self.generation.run(
            lambda: self.analyzer.generate_tests(source.content, source.language.value)
        )
        if self.generation.record is not None:
            # The editor now shows the generated suite
            self.buffer = CodeBuffer(content=self.generation.record, language=source.language)
        return state

    async def run_tests(self) -> ReportState:
        tests = self.buffer
        return await self.results.run(
            lambda: self.analyzer.predict_test_results(tests.content, tests.language.value)
        )


class DebugWorkspace:
    """Debug view: bug/performance/security report for the handed-off code"""

    def __init__(self, gateway: GenerativeService, handoff: SessionHandoff):
        self.handoff = handoff
        self.analyzer = CodeAnalyzer(gateway)
        self.buffer = CodeBuffer(content="", language=Language.JAVASCRIPT)
        self.report: ReportPanel[IssueReport] = ReportPanel("Debug", ANALYZE_CODE_FAILURE)

    def load(self) -> CodeBuffer:
        saved = self.handoff.load_buffer()
        if saved is not None:
            self.buffer = saved
        return self.buffer

    def update_code(self, content: str) -> CodeBuffer:
        self.buffer = CodeBuffer(content=content, language=self.buffer.language)
        return self.buffer

    def change_language(self, language: Language) -> CodeBuffer:
        self.buffer = CodeBuffer(content=self.buffer.content, language=language)
        return self.buffer

    async def analyze(self) -> ReportState:
        code = self.buffer
        return await self.report.run(lambda: self.analyzer.analyze_code(code.content, code.language.value))


class ErrorAnalysisWorkspace:
    """Error analysis view: diagnose a pasted error message"""

    def __init__(self, gateway: GenerativeService):
        self.analyzer = CodeAnalyzer(gateway)
        self.diagnosis: ReportPanel[ErrorDiagnosis] = ReportPanel("ErrorAnalysis", ANALYZE_ERROR_FAILURE)

    async def analyze(self, error_message: str) -> ReportState:
        return await self.diagnosis.run(lambda: self.analyzer.diagnose_error(error_message))


@dataclass
class BrowserSession:
    """All views of one browsing session around a single handoff store"""

    session_id: str
    handoff: SessionHandoff
    editor: EditorWorkspace
    tests: TestsWorkspace
    debug: DebugWorkspace
    errors: ErrorAnalysisWorkspace
    last_seen: float = 0.0

    @classmethod
    def create(
        cls,
        session_id: str,
        gateway: GenerativeService,
        quiet_period: float = DEFAULT_QUIET_PERIOD,
    ) -> "BrowserSession":
        handoff = SessionHandoff()
        return cls(
            session_id=session_id,
            handoff=handoff,
            editor=EditorWorkspace(gateway, handoff, quiet_period),
            tests=TestsWorkspace(gateway, handoff),
            debug=DebugWorkspace(gateway, handoff),
            errors=ErrorAnalysisWorkspace(gateway),
        )

    async def aclose(self) -> None:
        await self.editor.aclose()
        self.handoff.clear()

    def close(self) -> None:
        """Synchronous teardown used on eviction; in-flight requests are left to finish"""
        self.editor.suggestions.close()
        self.handoff.clear()


@dataclass
class SessionRegistry:
    """Browsing sessions keyed by id, created on first use

    A session nobody has touched for idle_timeout seconds is over and gets
    evicted. At max_sessions the least recently used one makes room.
    """

    gateway: GenerativeService
    quiet_period: float = DEFAULT_QUIET_PERIOD
    idle_timeout: float = DEFAULT_IDLE_TIMEOUT
    max_sessions: int = DEFAULT_MAX_SESSIONS
    clock: Callable[[], float] = time.monotonic
    # Insertion order is recency order: the least recently used session comes first
    _sessions: dict[str, BrowserSession] = field(default_factory=dict)

    def get_or_create(self, session_id: str) -> BrowserSession:
        now = self.clock()
        self.evict_idle(now)

        session = self._sessions.pop(session_id, None)
        if session is None:
            while self._sessions and len(self._sessions) >= self.max_sessions:
                self._evict(next(iter(self._sessions)), "least recently used")
            logger.info("[Sessions] Opening session %s", session_id)
            session = BrowserSession.create(session_id, self.gateway, self.quiet_period)

        session.last_seen = now
        self._sessions[session_id] = session
        return session

    def evict_idle(self, now: float | None = None) -> int:
        """Drop every session idle for longer than idle_timeout"""
        now = self.clock() if now is None else now
        expired = [sid for sid, s in self._sessions.items() if now - s.last_seen > self.idle_timeout]
        for session_id in expired:
            self._evict(session_id, "idle")
        return len(expired)

    def _evict(self, session_id: str, reason: str) -> None:
        session = self._sessions.pop(session_id)
        session.close()
        logger.info("[Sessions] Evicted %s session %s", reason, session_id)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    async def end(self, session_id: str) -> bool:
        """Close a session; its handoff entries are gone afterwards"""
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        await session.aclose()
        logger.info("[Sessions] Ended session %s", session_id)
        return True

    async def close_all(self) -> None:
        for session_id in list(self._sessions):
            await self.end(session_id)
