# errors.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


class TargetflowError(Exception):
    """Base class for every error raised by targetflow."""


# ----------------------------------------------------------------------
# Registration-time errors (raised while building the graph)
# ----------------------------------------------------------------------

class GraphError(TargetflowError):
    """The registered targets do not form a valid graph."""


@dataclass
class DuplicateTargetError(GraphError):
    name: str

    def __str__(self) -> str:
        return f"Duplicate target name: {self.name!r}"


@dataclass
class UnknownTargetError(GraphError):
    referrer: str
    missing: str
    relation: str = "depends_on"
    known: Tuple[str, ...] = ()

    def __str__(self) -> str:
        return f"Target {self.referrer!r} references unknown target {self.missing!r} ({self.relation})"


@dataclass
class CycleError(GraphError):
    """
    Hard dependency cycle. `cycle` lists the members in dependency order:
    each target depends on the next one, and the last depends on the first.
    """
    cycle: Tuple[str, ...]

    def __str__(self) -> str:
        chain = " -> ".join(self.cycle + self.cycle[:1])
        return f"Dependency cycle: {chain}"


# ----------------------------------------------------------------------
# Planning-time errors (raised by the scheduler)
# ----------------------------------------------------------------------

class SchedulingError(TargetflowError):
    """A valid plan cannot be produced for the requested goals."""


@dataclass
class UnknownGoalError(SchedulingError):
    goal: str
    known: Tuple[str, ...] = ()

    def __str__(self) -> str:
        return f"Unknown goal: {self.goal!r}"


@dataclass
class SchedulingCycleError(SchedulingError):
    """
    Cycle that only exists once before/after ordering edges are added to the
    dependency edges of the planned targets. Same member order as CycleError:
    each target has to wait for the next one.
    """
    cycle: Tuple[str, ...]

    def __str__(self) -> str:
        chain = " -> ".join(self.cycle + self.cycle[:1])
        return f"Ordering cycle between planned targets: {chain}"


# ----------------------------------------------------------------------
# Loading / action helpers
# ----------------------------------------------------------------------

@dataclass
class BuildFileError(TargetflowError):
    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


@dataclass
class CommandFailure(TargetflowError):
    cmd: str
    exit_code: int
    stdout: str = ""
    stderr: str = ""

    def __str__(self) -> str:
        lines = [f"command failed (exit={self.exit_code}): {self.cmd}"]
        tail = (self.stderr or self.stdout).strip()
        if tail:
            lines.append(tail.splitlines()[-1])
        return "\n".join(lines)
