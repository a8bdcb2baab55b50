# dag.py
from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, Iterator, List, Mapping, Optional, Set, Tuple

from .errors import CycleError, DuplicateTargetError, UnknownTargetError
from .model import Target


@dataclass(frozen=True)
class Graph:
    """
    Validated, immutable target graph.

    Edge maps are keyed by target name:
      - deps:      hard predecessors (depends_on)
      - dependents: hard successors
      - ordered_after: soft predecessors (this target's `after` plus every
        target naming it in `before`)
    """
    targets: Mapping[str, Target]
    deps: Mapping[str, FrozenSet[str]]
    dependents: Mapping[str, FrozenSet[str]]
    ordered_after: Mapping[str, FrozenSet[str]]

    def __getitem__(self, name: str) -> Target:
        return self.targets[name]

    def __contains__(self, name: object) -> bool:
        return name in self.targets

    def __iter__(self) -> Iterator[str]:
        return iter(self.targets)

    def __len__(self) -> int:
        return len(self.targets)

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(self.targets)

    def dependencies(self, name: str) -> FrozenSet[str]:
        return self.deps[name]

    def dependents_of(self, name: str) -> FrozenSet[str]:
        return self.dependents[name]

    def soft_predecessors(self, name: str) -> FrozenSet[str]:
        return self.ordered_after[name]


def build_graph(targets: Iterable[Target]) -> Graph:
    """
    Validate targets into a Graph.

    Raises:
      - DuplicateTargetError: two targets share a name
      - UnknownTargetError: depends_on/before/after names a missing target
      - CycleError: the depends_on edges contain a cycle
    """
    by_name: Dict[str, Target] = {}
    for t in targets:
        if t.name in by_name:
            raise DuplicateTargetError(t.name)
        by_name[t.name] = t

    known = tuple(sorted(by_name))
    for t in by_name.values():
        for relation in ("depends_on", "after", "before"):
            for ref in sorted(getattr(t, relation)):
                if ref not in by_name:
                    raise UnknownTargetError(referrer=t.name, missing=ref, relation=relation, known=known)

    deps: Dict[str, Set[str]] = {n: set(by_name[n].depends_on) for n in by_name}
    dependents: Dict[str, Set[str]] = {n: set() for n in by_name}
    ordered_after: Dict[str, Set[str]] = {n: set() for n in by_name}

    for t in by_name.values():
        for d in t.depends_on:
            dependents[d].add(t.name)
        for a in t.after:
            ordered_after[t.name].add(a)
        for b in t.before:
            ordered_after[b].add(t.name)

    cycle = find_cycle(deps)
    if cycle:
        raise CycleError(cycle)

    return Graph(
        targets=MappingProxyType(dict(by_name)),
        deps=_freeze(deps),
        dependents=_freeze(dependents),
        ordered_after=_freeze(ordered_after),
    )


def _freeze(edges: Dict[str, Set[str]]) -> Mapping[str, FrozenSet[str]]:
    return MappingProxyType({k: frozenset(v) for k, v in edges.items()})


def find_cycle(edges: Mapping[str, Iterable[str]]) -> Optional[Tuple[str, ...]]:
    """
    Depth-first search with recursion-stack marking over `edges`
    (node -> nodes it waits for). Returns the members of the first cycle
    found, rotated to start at its smallest name, or None.

    Nodes and neighbors are visited in sorted order so the result is stable.
    Iterative, so deep chains don't hit the recursion limit.
    """
    WHITE, GRAY, BLACK = 0, 1, 2
    color: Dict[str, int] = {n: WHITE for n in edges}

    for root in sorted(edges):
        if color[root] != WHITE:
            continue

        path: List[str] = [root]
        stack: List[Iterator[str]] = [iter(sorted(edges[root]))]
        color[root] = GRAY

        while stack:
            nxt = next(stack[-1], None)
            if nxt is None:
                color[path.pop()] = BLACK
                stack.pop()
                continue
            state = color.get(nxt, BLACK)
            if state == GRAY:
                cycle = path[path.index(nxt):]
                start = cycle.index(min(cycle))
                return tuple(cycle[start:] + cycle[:start])
            if state == WHITE:
                color[nxt] = GRAY
                path.append(nxt)
                stack.append(iter(sorted(edges[nxt])))

    return None
