"""Stage order and run-state tracking for report generation.

1. ``PERSONAL_SUMMARY_PENDING`` – summarize the applicant from personal info.
2. ``FINANCIAL_ANALYSIS_PENDING`` – analyze the transaction history.
3. ``CREDIT_ASSESSMENT_PENDING`` – score using the two previous summaries.
4. ``ASSEMBLED`` – merge stage output with report defaults.

Any failure moves the run to ``FAILED``, which is terminal.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional

logger = logging.getLogger(__name__)


class PipelineState(str, Enum):
    IDLE = "idle"
    PERSONAL_SUMMARY_PENDING = "personal_summary_pending"
    FINANCIAL_ANALYSIS_PENDING = "financial_analysis_pending"
    CREDIT_ASSESSMENT_PENDING = "credit_assessment_pending"
    ASSEMBLED = "assembled"
    FAILED = "failed"


_FORWARD: dict[PipelineState, PipelineState] = {
    PipelineState.IDLE: PipelineState.PERSONAL_SUMMARY_PENDING,
    PipelineState.PERSONAL_SUMMARY_PENDING: PipelineState.FINANCIAL_ANALYSIS_PENDING,
    PipelineState.FINANCIAL_ANALYSIS_PENDING: PipelineState.CREDIT_ASSESSMENT_PENDING,
    PipelineState.CREDIT_ASSESSMENT_PENDING: PipelineState.ASSEMBLED,
}

TERMINAL_STATES = frozenset({PipelineState.ASSEMBLED, PipelineState.FAILED})


@dataclass(frozen=True)
class PipelineStage:
    """Human-readable description of one report stage."""

    order: int
    name: str
    state: PipelineState
    summary: str


STAGES: tuple[PipelineStage, ...] = (
    PipelineStage(
        1,
        "Personal Summary",
        PipelineState.PERSONAL_SUMMARY_PENDING,
        "Summarize the applicant and list risk factors and recommendations.",
    ),
    PipelineStage(
        2,
        "Financial Analysis",
        PipelineState.FINANCIAL_ANALYSIS_PENDING,
        "Describe financial health, spending patterns and risk indicators.",
    ),
    PipelineStage(
        3,
        "Credit Assessment",
        PipelineState.CREDIT_ASSESSMENT_PENDING,
        "Produce score, rating, risk level, limit and approval odds.",
    ),
)


@dataclass
class ReportRun:
    """Mutable state of one generation; transitions only move forward."""

    state: PipelineState = PipelineState.IDLE
    error: Optional[BaseException] = None
    history: list[PipelineState] = field(default_factory=lambda: [PipelineState.IDLE])

    def advance(self) -> PipelineState:
        if self.state in TERMINAL_STATES:
            raise RuntimeError(f"Cannot advance a report run in state {self.state.value}")
        self.state = _FORWARD[self.state]
        self.history.append(self.state)
        logger.debug("Report run entered %s", self.state.value)
        return self.state

    def fail(self, error: BaseException) -> None:
        if self.state in TERMINAL_STATES:
            raise RuntimeError(f"Cannot fail a report run in state {self.state.value}")
        self.error = error
        self.state = PipelineState.FAILED
        self.history.append(self.state)

    @property
    def finished(self) -> bool:
        return self.state in TERMINAL_STATES


_STAGE_BY_STATE = {stage.state: stage for stage in STAGES}


def stage_for(state: PipelineState) -> PipelineStage:
    """Return the stage that runs while a report run is in ``state``."""

    try:
        return _STAGE_BY_STATE[state]
    except KeyError:
        raise ValueError(f"No stage runs in state {state.value}") from None


def describe() -> Iterable[PipelineStage]:
    """Expose the ordered list of stages for debugging and documentation."""

    return STAGES


__all__ = [
    "PipelineStage",
    "PipelineState",
    "ReportRun",
    "STAGES",
    "TERMINAL_STATES",
    "describe",
    "stage_for",
]
