"""
Analysis actions - Debug report, test generation, test run prediction, error diagnosis

CodeAnalyzer methods raise on anything short of a complete record.
ReportPanel is the boundary that turns those failures into an error banner.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Generic, Optional, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from codepilot.models.editor import RequestState
from codepilot.models.reports import (
    AnalysisPayload,
    ErrorDiagnosis,
    IssueReport,
    ReportState,
    TestPrediction,
)

from .errors import CodePilotError, ParseError, UserInputError, ValidationError
from .extractor import (
    parse_json_record,
    parse_labeled_fields,
    parse_labeled_list,
    strip_code_fences,
)
from .llm_service import GenerativeService, generate_text
from .prompts import (
    build_debug_prompt,
    build_error_analysis_prompt,
    build_test_generation_prompt,
    build_test_run_prompt,
)

logger = logging.getLogger(__name__)

ISSUE_REPORT_FIELDS = ("issues", "performance", "complexity")
TEST_PREDICTION_FIELDS = ("passed", "failed", "total", "coverage", "duration")

ERROR_TYPE_LABEL = "Error Type:"
LIKELY_CAUSE_LABEL = "Likely Cause:"
SOLUTIONS_LABEL = "Solutions:"

ANALYZE_CODE_FAILURE = "Failed to analyze code. Please check the code and try again."
GENERATE_TESTS_FAILURE = "Failed to generate tests. Please check your code and try again."
RUN_TESTS_FAILURE = "Failed to execute tests. Please validate your test cases."
ANALYZE_ERROR_FAILURE = "Failed to analyze error. Please try again."

M = TypeVar("M", bound=BaseModel)
T = TypeVar("T")


def _validate(model: type[M], record: dict) -> M:
    """Build a typed record or raise ValidationError - never a partial one"""
    try:
        return model.model_validate(record)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid {model.__name__}: {e.error_count()} error(s)") from e


class CodeAnalyzer:
    """One-shot structured requests against the generative service"""

    def __init__(self, gateway: GenerativeService):
        self._gateway = gateway

    async def analyze_code(self, code: str, language: str) -> IssueReport:
        raw = await generate_text(self._gateway, build_debug_prompt(code, language))
        record = parse_json_record(raw, ISSUE_REPORT_FIELDS)
        return IssueReport.from_payload(_validate(AnalysisPayload, record))

    async def generate_tests(self, code: str, language: str) -> str:
        raw = await generate_text(self._gateway, build_test_generation_prompt(code, language))
        tests = strip_code_fences(raw)
        if not tests:
            raise ParseError("Test generation returned no code")
        return tests

    async def predict_test_results(self, tests: str, language: str) -> TestPrediction:
        raw = await generate_text(self._gateway, build_test_run_prompt(tests, language))
        record = parse_json_record(raw, TEST_PREDICTION_FIELDS)
        return _validate(TestPrediction, record)

    async def diagnose_error(self, error_message: str) -> ErrorDiagnosis:
        if not error_message or not error_message.strip():
            raise UserInputError("Error message is empty")

        raw = await generate_text(self._gateway, build_error_analysis_prompt(error_message))
        fields = parse_labeled_fields(raw, [ERROR_TYPE_LABEL, LIKELY_CAUSE_LABEL])
        return ErrorDiagnosis(
            type=fields[ERROR_TYPE_LABEL],
            cause=fields[LIKELY_CAUSE_LABEL],
            solutions=parse_labeled_list(raw, SOLUTIONS_LABEL),
        )


class ReportPanel(Generic[T]):
    """Holds the latest record of one view action, or its error banner"""

    def __init__(self, name: str, failure_message: str):
        self.name = name
        self.failure_message = failure_message
        self._record: Optional[T] = None
        self._error: Optional[str] = None
        self._status = RequestState.IDLE
        self._run_id = 0

    @property
    def record(self) -> Optional[T]:
        return self._record

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def state(self) -> ReportState:
        return ReportState(record=self._record, error=self._error, status=self._status)

    async def run(self, action: Callable[[], Awaitable[T]]) -> ReportState:
        """Run an action; only the latest run may touch the panel"""
        previous = (self._run_id, self._record, self._error, self._status)
        self._run_id += 1
        run_id = self._run_id
        self._record = None
        self._error = None
        self._status = RequestState.IN_FLIGHT

        try:
            result = await action()
        except UserInputError:
            # Inert: nothing was sent, nothing changes on screen, and a run
            # still in flight keeps its claim on the panel
            if run_id == self._run_id:
                self._run_id, self._record, self._error, self._status = previous
            return self.state
        except CodePilotError as e:
            if run_id == self._run_id:
                logger.warning("[%s] %s: %s", self.name, type(e).__name__, e)
                self._error = self.failure_message
                self._status = RequestState.FAILED
            return self.state

        if run_id == self._run_id:
            self._record = result
            self._status = RequestState.RESOLVED
        else:
            logger.debug("[%s] Discarding superseded run %d", self.name, run_id)
        return self.state
