# runner.py
from __future__ import annotations

import runpy
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional, Tuple

from .context import BuildContext, Parameter
from .dag import build_graph
from .errors import BuildFileError
from .model import Outcome, Plan, RunReport, Target
from .planner import plan as make_plan
from .ui.console import Console, get_console


# ----------------------------------------------------------------------
# Build file loading (local python file)
# ----------------------------------------------------------------------

@dataclass(frozen=True)
class BuildFile:
    path: Path
    targets: Tuple[Target, ...]
    parameters: Tuple[Parameter, ...] = ()
    default_goals: Tuple[str, ...] = ()

    @property
    def required_inputs(self) -> List[str]:
        """Every `requires` name across all targets, first-seen order."""
        names: dict[str, None] = {}
        for t in self.targets:
            for r in t.requires:
                names.setdefault(r, None)
        return list(names)


def load_build_file(path: str | Path) -> BuildFile:
    """
    Load targets from a python build file.

    The file must define either:
      - build() -> List[Target]
      - TARGETS = [Target, ...]

    Optionally:
      - PARAMETERS = [Parameter, ...]
      - DEFAULT = "Compile" (or a list of goal names)
    """
    build_path = Path(path).expanduser().resolve()
    if not build_path.exists():
        raise BuildFileError(str(build_path), "build file not found")
    if build_path.suffix != ".py":
        raise BuildFileError(str(build_path), f"build file must be a .py file, got: {build_path.name}")

    module_name = f"targetflow_build_{build_path.stem}"
    globals_dict = runpy.run_path(str(build_path), run_name=module_name)

    targets = None
    if "build" in globals_dict and callable(globals_dict["build"]):
        targets = globals_dict["build"]()
    elif "TARGETS" in globals_dict:
        targets = globals_dict["TARGETS"]

    if not isinstance(targets, (list, tuple)) or not all(isinstance(t, Target) for t in targets):
        raise BuildFileError(
            str(build_path),
            "must return/define a list of Target. Define build() -> List[Target] or TARGETS = [Target, ...].",
        )

    parameters = globals_dict.get("PARAMETERS", [])
    if not isinstance(parameters, (list, tuple)) or not all(isinstance(p, Parameter) for p in parameters):
        raise BuildFileError(str(build_path), "PARAMETERS must be a list of Parameter")

    default = globals_dict.get("DEFAULT", ())
    if isinstance(default, str):
        default = (default,)
    if not isinstance(default, (list, tuple)) or not all(isinstance(g, str) for g in default):
        raise BuildFileError(str(build_path), "DEFAULT must be a target name or a list of names")

    return BuildFile(
        path=build_path,
        targets=tuple(targets),
        parameters=tuple(parameters),
        default_goals=tuple(default),
    )


# ----------------------------------------------------------------------
# Execution
# ----------------------------------------------------------------------

def _first_failed_dependency(target: Target, outcomes: Mapping[str, Outcome]) -> Optional[str]:
    for dep in sorted(target.depends_on):
        outcome = outcomes.get(dep)
        if outcome is not None and outcome.failed:
            return dep
    return None


def _check_produces(target: Target, console: Console) -> None:
    for p in target.produces:
        if not Path(p).exists():
            console.print_warning(f"[{target.name}] declared output not found: {p}")


def _describe(exc: BaseException) -> str:
    msg = str(exc)
    return f"{type(exc).__name__}: {msg}" if msg else type(exc).__name__


def run(
    plan: Plan,
    context: Optional[Mapping[str, Any]] = None,
    *,
    console: Optional[Console] = None,
) -> RunReport:
    """
    Walk the plan in order, one target at a time.

    Per target:
      1. condition(context) false -> SKIPPED (requires not checked)
      2. missing required input    -> FAILED(missing_requirement), run stops
      3. failed hard dependency    -> FAILED(upstream_failure), action not called
      4. action raises             -> FAILED(action_error)
      5. otherwise                 -> SUCCEEDED

    Failures from 3 and 4 only affect dependents; unrelated targets still run.
    """
    console = console or get_console()
    ctx = BuildContext.of(context)
    report = RunReport(plan=plan.names)

    for target in plan:
        name = target.name

        try:
            enabled = bool(target.condition(ctx))
        except Exception as e:
            report.outcomes[name] = Outcome.action_error(name, f"condition raised {_describe(e)}")
            console.print_target_start(name)
            console.print_failure(name, report.outcomes[name].message)
            continue

        if not enabled:
            report.outcomes[name] = Outcome.skipped(name)
            console.print_target_skipped(name, "condition is false")
            continue

        missing = [r for r in target.requires if ctx.is_missing(r)]
        if missing:
            report.outcomes[name] = Outcome.missing_requirement(name, missing)
            report.halted_by = name
            console.print_halted(name, missing)
            break

        upstream = _first_failed_dependency(target, report.outcomes)
        if upstream is not None:
            report.outcomes[name] = Outcome.upstream_failure(name, upstream)
            console.print_upstream_failure(name, upstream)
            continue

        console.print_target_start(name)
        start = time.monotonic()
        try:
            target.action(ctx)
        except Exception as e:
            duration = time.monotonic() - start
            report.outcomes[name] = Outcome.action_error(name, _describe(e), duration=duration)
            console.print_failure(name, str(e) or type(e).__name__)
            if console.debug:
                console.print_exception(e)
            continue

        duration = time.monotonic() - start
        report.outcomes[name] = Outcome.succeeded(name, duration=duration)
        console.print_success(name, duration)
        _check_produces(target, console)

    return report


def run_build(
    targets: Iterable[Target],
    goals: Iterable[str],
    context: Optional[Mapping[str, Any]] = None,
    *,
    console: Optional[Console] = None,
) -> RunReport:
    """Validate, plan, and run. Graph and planning errors raise before any action runs."""
    graph = build_graph(targets)
    p = make_plan(graph, goals)
    return run(p, context, console=console)
