# cli.py
from __future__ import annotations

import sys

import click

from targetflow import settings
from targetflow.context import BuildContext
from targetflow.dag import build_graph
from targetflow.errors import BuildFileError, GraphError, SchedulingError
from targetflow.planner import plan as make_plan
from targetflow.report import write_report_json
from targetflow.runner import BuildFile, load_build_file, run
from targetflow.ui.console import Console, set_console, get_console

# misconfigured build: graph or plan rejected, nothing ran
EXIT_INVALID = 4
EXIT_INTERRUPTED = 130


def parse_params(values: tuple[str, ...]) -> dict[str, str]:
    """Turn ("Configuration=Release", ...) into a dict."""
    params: dict[str, str] = {}
    for item in values:
        key, sep, value = item.partition("=")
        key = key.strip()
        if not sep or not key:
            raise click.BadParameter(f"expected NAME=VALUE, got {item!r}", param_hint="--param")
        params[key] = value
    return params


def _load(build_file: str) -> BuildFile:
    console = get_console()
    try:
        return load_build_file(build_file)
    except BuildFileError as e:
        console.print_error(
            "Failed to load build file",
            str(e),
            suggestion="Create a build file or specify a different path:\n  targetflow run --build-file my_build.py",
        )
        sys.exit(EXIT_INVALID)
    except Exception as e:
        # errors raised by the build file's own code
        console.print_error("Failed to load build file", f"Could not load {build_file}")
        console.print_exception(e)
        sys.exit(EXIT_INVALID)


def _invalid_build(e: Exception) -> None:
    known = getattr(e, "known", ())
    get_console().print_error(
        "Invalid build",
        str(e),
        details=["Known targets:", *(f"  {name}" for name in known)] if known else None,
    )
    sys.exit(EXIT_INVALID)


def _goals(build: BuildFile, goals: tuple[str, ...]) -> tuple[str, ...]:
    if goals:
        return goals
    if build.default_goals:
        return build.default_goals
    raise click.UsageError("No goals given and the build file declares no DEFAULT.")


build_file_option = click.option(
    "--build-file",
    "-f",
    default=settings.BUILD_FILE,
    show_default=True,
    help="Build file path (env: TARGETFLOW_BUILD_FILE)",
)


@click.group()
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug mode (show stack traces and detailed output)",
)
@click.pass_context
def cli(ctx, debug):
    """targetflow: run build targets in dependency order."""
    console = Console(debug=debug)
    set_console(console)
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


@cli.command("run")
@click.argument("goals", nargs=-1)
@build_file_option
@click.option("--param", "-p", "params", multiple=True, metavar="NAME=VALUE", help="Build input (repeatable)")
@click.option("--report-json", default=None, type=click.Path(dir_okay=False), help="Write the run report as JSON")
@click.option("--print-plan/--no-print-plan", default=True, show_default=True, help="Print the plan before running")
def run_cmd(goals, build_file, params, report_json, print_plan):
    """Run GOALS and everything they depend on."""
    console = get_console()
    overrides = parse_params(params)
    build = _load(build_file)
    goals = _goals(build, goals)

    try:
        graph = build_graph(build.targets)
        p = make_plan(graph, goals)
    except (GraphError, SchedulingError) as e:
        _invalid_build(e)

    context = BuildContext.resolve(build.parameters, overrides=overrides, lookup=build.required_inputs)

    console.print_run_started(
        build_file=build.path.name,
        goals=goals,
        target_count=len(p),
    )
    if print_plan:
        console.print_plan(p.names)

    try:
        report = run(p, context, console=console)
    except KeyboardInterrupt:
        console.print_info("\nInterrupted by user")
        sys.exit(EXIT_INTERRUPTED)

    console.print_results(report)
    if report_json:
        out = write_report_json(report, report_json)
        console.print_info(f"Report written to {out}")

    sys.exit(report.exit_code)


@cli.command("plan")
@click.argument("goals", nargs=-1)
@build_file_option
def plan_cmd(goals, build_file):
    """Print the execution order for GOALS without running anything."""
    console = get_console()
    build = _load(build_file)
    goals = _goals(build, goals)

    try:
        p = make_plan(build_graph(build.targets), goals)
    except (GraphError, SchedulingError) as e:
        _invalid_build(e)

    console.print_plan(p.names)


@cli.command("list")
@build_file_option
def list_cmd(build_file):
    """List targets and declared parameters."""
    console = get_console()
    build = _load(build_file)

    try:
        graph = build_graph(build.targets)
    except GraphError as e:
        _invalid_build(e)

    console.print_header("TARGETS")
    for name in sorted(graph):
        t = graph[name]
        marker = " (default)" if name in build.default_goals else ""
        line = f"  {name}{marker}"
        if t.depends_on:
            line += f" -> {', '.join(sorted(t.depends_on))}"
        console.print_info(line)
        if t.description:
            console.print_info(f"      {t.description}")

    if build.parameters:
        console.print_header("PARAMETERS")
        for prm in build.parameters:
            default = f" [default: {prm.default}]" if prm.default is not None else ""
            console.print_info(f"  {prm.name}{default}  {prm.description}".rstrip())


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
