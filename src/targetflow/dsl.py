# src/targetflow/dsl.py
from __future__ import annotations

from typing import Any, Iterable, List, Optional, Sequence, Union

from .context import Parameter
from .model import Action, Condition, Target

TargetRef = Union[str, Target]


def _names(refs: Optional[Iterable[TargetRef]]) -> List[str]:
    if refs is None:
        return []
    if isinstance(refs, (str, Target)):
        refs = [refs]
    return [r.name if isinstance(r, Target) else r for r in refs]


# ---------------------------------------------------------------------
# Target helper
# ---------------------------------------------------------------------

def target(
    name: str,
    action: Optional[Action] = None,
    *,
    depends_on: Optional[Iterable[TargetRef]] = None,
    before: Optional[Iterable[TargetRef]] = None,
    after: Optional[Iterable[TargetRef]] = None,
    requires: Optional[Union[str, Sequence[str]]] = None,
    condition: Optional[Condition] = None,
    produces: Optional[Union[str, Sequence[str]]] = None,
    description: str = "",
) -> Target:
    """
    Create a target. Edges accept names or Target objects:

        restore = target("Restore", sh("dotnet restore"))
        compile_ = target("Compile", sh("dotnet build"), depends_on=restore)
    """
    kwargs: dict[str, Any] = {}
    if action is not None:
        kwargs["action"] = action
    if condition is not None:
        kwargs["condition"] = condition

    return Target(
        name=name,
        depends_on=frozenset(_names(depends_on)),
        before=frozenset(_names(before)),
        after=frozenset(_names(after)),
        requires=requires or (),
        produces=produces or (),
        description=description,
        **kwargs,
    )


def parameter(name: str, description: str = "", default: Any = None) -> Parameter:
    """Declare a build input resolved from --param, the environment, or `default`."""
    return Parameter(name=name, description=description, default=default)


# ---------------------------------------------------------------------
# Build file helper
# ---------------------------------------------------------------------

def targets(*items: Target) -> List[Target]:
    """
    Target list helper for build files:

        from targetflow import targets, target, sh

        def build():
            return targets(
                target("Restore", sh("dotnet restore")),
                target("Compile", sh("dotnet build"), depends_on=["Restore"]),
            )
    """
    return list(items)
