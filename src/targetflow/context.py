# context.py
from __future__ import annotations

import os
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, Mapping, Optional

from .settings import ENV_PREFIX


@dataclass(frozen=True)
class Parameter:
    """A named build input, e.g. `parameter("Configuration", default="Debug")`."""
    name: str
    description: str = ""
    default: Any = None


def is_missing(value: Any) -> bool:
    """A required input is missing when absent, None, or a blank string."""
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


class BuildContext(Mapping[str, Any]):
    """
    Read-only mapping of input name -> value handed to every condition and
    action. Built once before a run; targets cannot change it.
    """

    def __init__(self, values: Optional[Mapping[str, Any]] = None):
        self._values = MappingProxyType(dict(values or {}))

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"BuildContext({dict(self._values)!r})"

    def is_missing(self, name: str) -> bool:
        return is_missing(self._values.get(name))

    @classmethod
    def of(cls, values: Optional[Mapping[str, Any]]) -> BuildContext:
        if isinstance(values, BuildContext):
            return values
        return cls(values)

    @classmethod
    def resolve(
        cls,
        parameters: Iterable[Parameter] = (),
        overrides: Optional[Mapping[str, Any]] = None,
        environ: Optional[Mapping[str, str]] = None,
        lookup: Iterable[str] = (),
    ) -> BuildContext:
        """
        Resolve inputs for a run. Highest priority first:
          1. overrides (CLI --param NAME=VALUE)
          2. environment: NAME, then NAME upper-cased, then TARGETFLOW_NAME
          3. Parameter.default

        `lookup` names extra inputs (e.g. target `requires`) that have no
        declaration but may still come from the environment.
        """
        env = os.environ if environ is None else environ
        overrides = dict(overrides or {})

        defaults: Dict[str, Any] = {}
        for p in parameters:
            defaults[p.name] = p.default
        for name in lookup:
            defaults.setdefault(name, None)

        values: Dict[str, Any] = {}
        for name, default in defaults.items():
            if name in overrides:
                values[name] = overrides[name]
                continue
            env_value = _from_env(name, env)
            if env_value is not None:
                values[name] = env_value
            elif default is not None:
                values[name] = default

        # undeclared overrides are still inputs
        for name, value in overrides.items():
            values.setdefault(name, value)

        return cls(values)


def _from_env(name: str, env: Mapping[str, str]) -> Optional[str]:
    for key in (name, name.upper(), f"{ENV_PREFIX}{name.upper()}"):
        if key in env:
            return env[key]
    return None
