from .dsl import target, parameter, targets
from .context import BuildContext, Parameter
from .dag import build_graph, Graph
from .planner import plan
from .runner import run, run_build, load_build_file
from .model import Target, Plan, Outcome, OutcomeKind, FailureReason, RunReport, RunResult
from .tasks.shell import sh
from .tasks.fs import delete_directory, ensure_clean_directory, glob_directories, glob_files

__all__ = [
    "target", "parameter", "targets", "BuildContext", "Parameter", "build_graph", "Graph",
    "plan", "run", "run_build", "load_build_file", "Target", "Plan", "Outcome", "OutcomeKind",
    "FailureReason", "RunReport", "RunResult", "sh", "delete_directory", "ensure_clean_directory",
    "glob_directories", "glob_files",
]
