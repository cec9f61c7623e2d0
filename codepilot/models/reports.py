"""Structured report models (debug analysis, test prediction, error diagnosis)"""

from __future__ import annotations

from enum import Enum
from typing import Generic, Optional, TypeVar

from pydantic import AliasChoices, BaseModel, Field, field_validator

from .editor import RequestState


class IssueKind(str, Enum):
    """Category of a reported code issue"""

    BUG = "bug"
    PERFORMANCE = "performance"
    SECURITY = "security"


class Issue(BaseModel):
    """A single issue found in the analyzed code"""

    # The model answers with "type"; we expose it as "kind"
    kind: IssueKind = Field(validation_alias=AliasChoices("kind", "type"))
    line: int
    message: str

    @field_validator("kind", mode="before")
    @classmethod
    def _normalize_kind(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value


class PerformanceSection(BaseModel):
    """'performance' object of the raw analysis payload"""

    score: int
    suggestions: list[str] = []


class ComplexitySection(BaseModel):
    """'complexity' object of the raw analysis payload"""

    score: int
    details: str


class AnalysisPayload(BaseModel):
    """Shape the debug prompt asks the model to return"""

    issues: list[Issue]
    performance: PerformanceSection
    complexity: ComplexitySection


class IssueReport(BaseModel):
    """Bug/performance/security findings plus complexity metrics"""

    issues: list[Issue]
    performance_score: int
    performance_suggestions: list[str]
    complexity_score: int
    complexity_details: str

    @classmethod
    def from_payload(cls, payload: AnalysisPayload) -> "IssueReport":
        """Flatten the nested payload into a report"""
        return cls(
            issues=payload.issues,
            performance_score=payload.performance.score,
            performance_suggestions=payload.performance.suggestions,
            complexity_score=payload.complexity.score,
            complexity_details=payload.complexity.details,
        )


class TestPrediction(BaseModel):
    """Simulated test run results"""

    __test__ = False  # keep pytest from collecting this class

    passed: int
    failed: int
    total: int
    coverage: str
    duration: str


class ErrorDiagnosis(BaseModel):
    """Explanation of a pasted error message"""

    type: str
    cause: str
    solutions: list[str] = []


T = TypeVar("T")


class ReportState(BaseModel, Generic[T]):
    """State of a report panel: the last good record or an error banner"""

    record: Optional[T] = None
    error: Optional[str] = None
    status: RequestState = RequestState.IDLE


# ========== Request Models ==========


class AnalyzeErrorRequest(BaseModel):
    """Error message pasted into the error analysis view"""

    error_message: str
