# model.py
from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Dict, FrozenSet, Iterable, Iterator, List, Optional, Tuple

if TYPE_CHECKING:
    from .context import BuildContext


Action = Callable[["BuildContext"], Any]
Condition = Callable[["BuildContext"], bool]


def _noop(context: "BuildContext") -> None:
    return None


def _always(context: "BuildContext") -> bool:
    return True


def _strings(value: Any) -> Tuple[str, ...]:
    # a bare string is one name, not a sequence of characters
    if value is None:
        return ()
    if isinstance(value, (str, os.PathLike)):
        return (os.fspath(value),)
    return tuple(os.fspath(v) if isinstance(v, os.PathLike) else str(v) for v in value)


@dataclass(frozen=True)
class Target:
    """
    A named unit of build work.

    Hard edges:
      - depends_on: targets that must complete (succeed or be skipped) first

    Soft edges (ordering only, never pull extra targets into a plan):
      - after:  targets that run before this one when both are planned
      - before: targets that run after this one when both are planned

    Gates, checked in this order by the runner:
      - condition(context) -> False skips the target
      - requires: context values that must be present and non-empty

    `produces` is advisory: paths the action is expected to leave behind.
    """
    name: str
    action: Action = _noop
    depends_on: FrozenSet[str] = frozenset()
    before: FrozenSet[str] = frozenset()
    after: FrozenSet[str] = frozenset()
    requires: Tuple[str, ...] = ()
    condition: Condition = _always
    produces: Tuple[str, ...] = ()
    description: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValueError(f"Target name must be a non-empty string, got {self.name!r}")
        if not callable(self.action):
            raise TypeError(f"Target {self.name!r}: action must be callable")
        if not callable(self.condition):
            raise TypeError(f"Target {self.name!r}: condition must be callable")

        # frozen: normalize collections in place
        object.__setattr__(self, "depends_on", frozenset(_strings(self.depends_on)))
        object.__setattr__(self, "before", frozenset(_strings(self.before)))
        object.__setattr__(self, "after", frozenset(_strings(self.after)))
        object.__setattr__(self, "requires", _strings(self.requires))
        object.__setattr__(self, "produces", _strings(self.produces))


# ----------------------------------------------------------------------
# Plan
# ----------------------------------------------------------------------

@dataclass(frozen=True)
class Plan:
    """Ordered targets the runner will attempt. Iterates over Target objects."""
    targets: Tuple[Target, ...]
    goals: Tuple[str, ...] = ()

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(t.name for t in self.targets)

    def __iter__(self) -> Iterator[Target]:
        return iter(self.targets)

    def __len__(self) -> int:
        return len(self.targets)

    def __contains__(self, name: object) -> bool:
        return name in self.names


# ----------------------------------------------------------------------
# Outcomes
# ----------------------------------------------------------------------

class OutcomeKind(str, Enum):
    SUCCEEDED = "succeeded"
    SKIPPED = "skipped"
    FAILED = "failed"


class FailureReason(str, Enum):
    MISSING_REQUIREMENT = "missing_requirement"
    UPSTREAM_FAILURE = "upstream_failure"
    ACTION_ERROR = "action_error"


class RunResult(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    FATAL = "fatal"


EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_FATAL = 3

_EXIT_CODES = {
    RunResult.SUCCESS: EXIT_SUCCESS,
    RunResult.FAILURE: EXIT_FAILURE,
    RunResult.FATAL: EXIT_FATAL,
}


@dataclass(frozen=True)
class Outcome:
    target: str
    kind: OutcomeKind
    reason: Optional[FailureReason] = None
    message: str = ""
    missing: Tuple[str, ...] = ()      # MISSING_REQUIREMENT
    upstream: Optional[str] = None     # UPSTREAM_FAILURE
    duration: float = 0.0

    @property
    def failed(self) -> bool:
        return self.kind is OutcomeKind.FAILED

    @classmethod
    def succeeded(cls, target: str, duration: float = 0.0) -> Outcome:
        return cls(target=target, kind=OutcomeKind.SUCCEEDED, duration=duration)

    @classmethod
    def skipped(cls, target: str) -> Outcome:
        return cls(target=target, kind=OutcomeKind.SKIPPED, message="condition is false")

    @classmethod
    def missing_requirement(cls, target: str, missing: Iterable[str]) -> Outcome:
        missing = tuple(missing)
        return cls(
            target=target,
            kind=OutcomeKind.FAILED,
            reason=FailureReason.MISSING_REQUIREMENT,
            message=f"missing required input(s): {', '.join(missing)}",
            missing=missing,
        )

    @classmethod
    def upstream_failure(cls, target: str, upstream: str) -> Outcome:
        return cls(
            target=target,
            kind=OutcomeKind.FAILED,
            reason=FailureReason.UPSTREAM_FAILURE,
            message=f"dependency {upstream!r} failed",
            upstream=upstream,
        )

    @classmethod
    def action_error(cls, target: str, message: str, duration: float = 0.0) -> Outcome:
        return cls(
            target=target,
            kind=OutcomeKind.FAILED,
            reason=FailureReason.ACTION_ERROR,
            message=message,
            duration=duration,
        )


@dataclass
class RunReport:
    """
    Per-target outcomes (in plan order) plus the overall result.

    Targets after a halting MISSING_REQUIREMENT are never attempted: they have
    no outcome and are listed by `not_run`.
    """
    plan: Tuple[str, ...]
    outcomes: Dict[str, Outcome] = field(default_factory=dict)
    halted_by: Optional[str] = None

    @property
    def result(self) -> RunResult:
        if self.halted_by is not None:
            return RunResult.FATAL
        if any(o.failed for o in self.outcomes.values()):
            return RunResult.FAILURE
        return RunResult.SUCCESS

    @property
    def exit_code(self) -> int:
        return _EXIT_CODES[self.result]

    @property
    def ok(self) -> bool:
        return self.result is RunResult.SUCCESS

    @property
    def failed(self) -> List[str]:
        return [name for name, o in self.outcomes.items() if o.failed]

    @property
    def not_run(self) -> List[str]:
        return [name for name in self.plan if name not in self.outcomes]

    def __getitem__(self, name: str) -> Outcome:
        return self.outcomes[name]
