"""
Edit Suggestion Coordinator - Debounced, deduplicated, epoch-guarded suggestions

Edits arrive as a stream. Only the last edit of a burst (trailing edge of the
quiet period) is sent to the generative service, and only the response of the
most recently dispatched request may change the suggestion list. Superseded
requests are never aborted; their results are simply dropped.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

from codepilot.models.editor import RequestState, SuggestionState

from .errors import CodePilotError
from .extractor import parse_numbered_list
from .llm_service import GenerativeService, generate_text
from .prompts import build_suggestions_prompt

logger = logging.getLogger(__name__)

SUGGESTION_FAILURE = "Could not generate suggestions at this time"
DEFAULT_QUIET_PERIOD = 2.0

UpdateListener = Callable[[SuggestionState], None]


class EditSuggestionCoordinator:
    """Owns the suggestion list of one editor view"""

    def __init__(
        self,
        gateway: GenerativeService,
        quiet_period: float = DEFAULT_QUIET_PERIOD,
        on_update: Optional[UpdateListener] = None,
    ):
        self._gateway = gateway
        self.quiet_period = quiet_period
        self._on_update = on_update

        self._timer: asyncio.TimerHandle | None = None
        self._last_dispatched_snapshot: str | None = None
        self._current_request: str | None = None
        self._epoch = 0
        self._outcome = RequestState.IDLE
        self._suggestions: tuple[str, ...] = ()
        self._tasks: set[asyncio.Task] = set()

    # ========== Read Model ==========

    @property
    def epoch(self) -> int:
        return self._epoch

    @property
    def suggestions(self) -> list[str]:
        return list(self._suggestions)

    @property
    def last_dispatched_snapshot(self) -> str | None:
        return self._last_dispatched_snapshot

    @property
    def status(self) -> RequestState:
        """Idle -> Pending -> InFlight -> Resolved | Failed"""
        if self._timer is not None:
            return RequestState.PENDING
        if self._current_request is not None:
            return RequestState.IN_FLIGHT
        return self._outcome

    @property
    def is_loading(self) -> bool:
        return self._current_request is not None

    @property
    def state(self) -> SuggestionState:
        return SuggestionState(suggestions=self.suggestions, status=self.status, epoch=self._epoch)

    # ========== Commands ==========

    def submit_edit(self, content: str) -> None:
        """Content-changed event; (re)arms the quiet-period timer"""
        if content == self._last_dispatched_snapshot or content == self._current_request:
            # Nothing new to send. Unlike a plain no-op, this also drops a timer
            # still queued for an older edit, which would otherwise overwrite
            # the current suggestions with ones for stale content
            self._cancel_timer()
            return

        self._cancel_timer()
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self.quiet_period, self._on_quiet_period, content)

    async def force_refresh(self, content: str) -> SuggestionState:
        """Dispatch now, even for unchanged content; returns once this request settles"""
        self._cancel_timer()
        self._epoch += 1
        task = self._spawn(content, self._epoch)
        # The caller going away must not kill the request
        await asyncio.shield(task)
        return self.state

    def close(self) -> None:
        """Drop the pending timer (view teardown)"""
        self._cancel_timer()

    async def aclose(self) -> None:
        """Drop the pending timer and abandon every outstanding dispatch"""
        self._cancel_timer()
        for task in list(self._tasks):
            task.cancel()
        await self.drain()

    async def drain(self) -> None:
        """Wait until every dispatched request has settled"""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # ========== Internals ==========

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _on_quiet_period(self, content: str) -> None:
        self._timer = None
        if content == self._last_dispatched_snapshot:
            return
        self._epoch += 1
        self._spawn(content, self._epoch)

    def _spawn(self, content: str, epoch: int) -> asyncio.Task:
        self._current_request = content
        task = asyncio.create_task(self._dispatch(content, epoch))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _dispatch(self, content: str, epoch: int) -> None:
        logger.debug("[Suggestions] Dispatching epoch %d (%d chars)", epoch, len(content))
        try:
            raw = await generate_text(self._gateway, build_suggestions_prompt(content))
            suggestions = parse_numbered_list(raw)
        except asyncio.CancelledError:
            if epoch == self._epoch:
                self._current_request = None
            raise
        except CodePilotError as e:
            if epoch != self._epoch:
                logger.debug("[Suggestions] Ignoring failure of stale epoch %d", epoch)
                return
            logger.warning("[Suggestions] Error generating suggestions: %s", e)
            self._settle(RequestState.FAILED, (SUGGESTION_FAILURE,))
            return

        if epoch != self._epoch:
            logger.debug("[Suggestions] Discarding stale epoch %d (current %d)", epoch, self._epoch)
            return

        self._last_dispatched_snapshot = content
        self._settle(RequestState.RESOLVED, tuple(suggestions))

    def _settle(self, outcome: RequestState, suggestions: tuple[str, ...]) -> None:
        # Whole-list replacement, never a merge
        self._suggestions = suggestions
        self._outcome = outcome
        self._current_request = None
        if self._on_update is not None:
            self._on_update(self.state)
