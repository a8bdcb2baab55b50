"""Console output formatting utilities for targetflow."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, Iterable, Optional

if TYPE_CHECKING:
    from ..model import Outcome, RunReport


class Console:
    """Centralized console output formatting."""

    def __init__(self, debug: bool = False):
        """
        Initialize console formatter.

        Args:
            debug: If True, show detailed output including stack traces
        """
        self.debug = debug

    def print_header(self, title: str) -> None:
        """Print a section header."""
        print(f"\n{title}")
        print("-" * len(title))

    def print_run_started(self, build_file: str, goals: Iterable[str], target_count: int) -> None:
        """Print run start information."""
        print("\nRUN STARTED")
        print(f"Build file: {build_file}")
        print(f"Goals: {', '.join(goals)}")
        print(f"Targets: {target_count}")
        print()

    def print_plan(self, names: Iterable[str]) -> None:
        """Print the execution plan."""
        self.print_header("PLAN")
        for i, name in enumerate(names, start=1):
            print(f"  {i}. {name}")

    def print_target_start(self, name: str) -> None:
        """Print target start message."""
        print(f"\nTARGET STARTED: {name}")

    def print_step(self, name: str) -> None:
        """Print step start message."""
        print(f"STEP: {name}")

    def print_success(self, name: str, duration: Optional[float] = None) -> None:
        """Print success message."""
        if duration is None:
            print("STATUS: success")
        else:
            print(f"STATUS: success ({duration:.1f}s)")

    def print_target_skipped(self, name: str, reason: str) -> None:
        """Print target skipped message."""
        print(f"\nTARGET SKIPPED: {name} ({reason})")

    def print_failure(
        self,
        name: str,
        reason: str,
        hint: Optional[str] = None,
    ) -> None:
        """
        Print failure message.

        Args:
            name: Target name
            reason: Failure reason/error message
            hint: Optional hint for user
        """
        print(f"TARGET FAILED: {name}")
        if hint:
            print(f"Hint: {hint}")
        if self.debug:
            print(f"Error details: {reason}")
        else:
            # first line only outside debug mode
            error_line = reason.split("\n")[0] if reason else "Unknown error"
            print(f"Error: {error_line}")

    def print_upstream_failure(self, name: str, upstream: str) -> None:
        """Print cascaded failure message."""
        print(f"\nTARGET FAILED: {name} (dependency '{upstream}' failed, not run)")

    def print_halted(self, name: str, missing: Iterable[str]) -> None:
        """Print run halt caused by a missing required input."""
        print(f"\nRUN HALTED: {name}", file=sys.stderr)
        print(f"Missing required input(s): {', '.join(missing)}", file=sys.stderr)
        print("Hint: pass them with --param NAME=VALUE or set them in the environment.", file=sys.stderr)

    def print_warning(self, message: str) -> None:
        """Print warning message."""
        print(f"WARNING: {message}", file=sys.stderr)

    def print_results(self, report: "RunReport") -> None:
        """Print final results summary."""
        print("\n" + "=" * 40)
        print("RESULTS")
        print("=" * 40)
        for name, outcome in report.outcomes.items():
            print(f"  {name}: {_status_display(outcome)}")
        for name in report.not_run:
            print(f"  {name}: NOT RUN")
        print(f"\nRESULT: {report.result.value.upper()}")

    def print_error(
        self,
        title: str,
        message: str,
        details: Optional[list[str]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        """
        Print structured error message.

        Args:
            title: Error title
            message: Main error message
            details: Optional list of detail lines
            suggestion: Optional suggestion for user
        """
        print(f"\nERROR: {title}", file=sys.stderr)
        print(f"{message}", file=sys.stderr)
        if details:
            for detail in details:
                print(f"  {detail}", file=sys.stderr)
        if suggestion:
            print(f"\n{suggestion}", file=sys.stderr)

    def print_exception(self, exc: BaseException) -> None:
        """Print exception, with full traceback only in debug mode."""
        if self.debug:
            import traceback
            traceback.print_exception(type(exc), exc, exc.__traceback__)
        else:
            print(f"Error: {exc}", file=sys.stderr)

    def print_info(self, message: str) -> None:
        """Print informational message."""
        print(message)

    def print_debug(self, message: str) -> None:
        """Print debug message (only if debug mode enabled)."""
        if self.debug:
            print(f"[DEBUG] {message}", file=sys.stderr)


def _status_display(outcome: "Outcome") -> str:
    status = outcome.kind.value.upper()
    if outcome.reason is not None:
        status += f" ({outcome.reason.value})"
    return status


# Global console instance (will be initialized by CLI)
_console: Optional[Console] = None


def get_console() -> Console:
    """Get the global console instance."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def set_console(console: Console) -> None:
    """Set the global console instance."""
    global _console
    _console = console
