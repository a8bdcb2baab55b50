from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

from .model import Outcome, RunReport

# -------------------- Schemas --------------------

class OutcomeModel(BaseModel):
    target: str
    status: str  # succeeded|skipped|failed
    reason: Optional[str] = None
    message: str = ""
    missing: list[str] = Field(default_factory=list)
    upstream: Optional[str] = None
    duration: float = 0.0

    @classmethod
    def from_outcome(cls, outcome: Outcome) -> OutcomeModel:
        return cls(
            target=outcome.target,
            status=outcome.kind.value,
            reason=outcome.reason.value if outcome.reason else None,
            message=outcome.message,
            missing=list(outcome.missing),
            upstream=outcome.upstream,
            duration=round(outcome.duration, 3),
        )


class RunReportModel(BaseModel):
    result: str  # success|failure|fatal
    exit_code: int
    plan: list[str]
    outcomes: list[OutcomeModel]
    not_run: list[str] = Field(default_factory=list)
    halted_by: Optional[str] = None

    @classmethod
    def from_report(cls, report: RunReport) -> RunReportModel:
        return cls(
            result=report.result.value,
            exit_code=report.exit_code,
            plan=list(report.plan),
            outcomes=[OutcomeModel.from_outcome(o) for o in report.outcomes.values()],
            not_run=report.not_run,
            halted_by=report.halted_by,
        )


def write_report_json(report: RunReport, path: str | Path) -> Path:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(RunReportModel.from_report(report).model_dump_json(indent=2), encoding="utf-8")
    return out
