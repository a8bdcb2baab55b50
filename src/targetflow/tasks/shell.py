# tasks/shell.py
from __future__ import annotations

import os
import subprocess
from pathlib import Path
from typing import Callable, Dict, Optional, Union

from ..context import BuildContext
from ..errors import CommandFailure
from ..ui.console import get_console

Command = Union[str, Callable[[BuildContext], str]]

# keep failure output short in reports
_TAIL = 4000


def run_command(
    cmd: str,
    *,
    cwd: str | Path | None = None,
    env: Optional[Dict[str, str]] = None,
) -> subprocess.CompletedProcess:
    """Run a shell command, raising CommandFailure on non-zero exit."""
    run_cwd = Path(cwd or ".").resolve()
    if not run_cwd.exists():
        raise FileNotFoundError(f"cwd not found: {run_cwd}")

    full_env = os.environ.copy()
    full_env.update(env or {})

    proc = subprocess.run(
        cmd,
        shell=True,
        cwd=str(run_cwd),
        env=full_env,
        text=True,
        capture_output=True,
    )

    if proc.returncode != 0:
        raise CommandFailure(
            cmd=cmd,
            exit_code=proc.returncode,
            stdout=proc.stdout[-_TAIL:],
            stderr=proc.stderr[-_TAIL:],
        )
    return proc


def sh(
    cmd: Command,
    *,
    cwd: str | Path | None = None,
    env: Optional[Dict[str, str]] = None,
) -> Callable[[BuildContext], None]:
    """
    Action that runs a shell command. `cmd` may be a callable taking the
    build context, for commands built from inputs:

        sh(lambda ctx: f"dotnet build -c {ctx['Configuration']}")
    """
    def action(context: BuildContext) -> None:
        command = cmd(context) if callable(cmd) else cmd
        get_console().print_step(command)
        proc = run_command(command, cwd=cwd, env=env)
        if proc.stdout:
            get_console().print_debug(proc.stdout.rstrip())

    return action
