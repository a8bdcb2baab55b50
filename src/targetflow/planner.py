# planner.py
from __future__ import annotations

import heapq
from typing import Dict, Iterable, List, Set

from .dag import Graph, find_cycle
from .errors import SchedulingCycleError, UnknownGoalError
from .model import Plan


def closure(graph: Graph, goals: Iterable[str]) -> Set[str]:
    """Goals plus everything they transitively depend on (hard edges only)."""
    seen: Set[str] = set()
    todo = list(goals)
    while todo:
        name = todo.pop()
        if name in seen:
            continue
        seen.add(name)
        todo.extend(graph.dependencies(name))
    return seen


def plan(graph: Graph, goals: Iterable[str]) -> Plan:
    """
    Order the goals' dependency closure into a single plan.

    - depends_on edges always apply
    - before/after edges apply only when both ends are already in the closure
    - ties go to the lexicographically smallest ready name, so the same graph
      and goals always give the same plan

    Raises:
      - UnknownGoalError: a goal is not a registered target
      - SchedulingCycleError: ordering edges close a cycle among planned targets
    """
    goals = list(dict.fromkeys(goals))
    if not goals:
        raise ValueError("plan() needs at least one goal")
    for g in goals:
        if g not in graph:
            raise UnknownGoalError(g, known=tuple(sorted(graph.names)))

    reachable = closure(graph, goals)

    # waits_for: name -> planned names that must come first
    waits_for: Dict[str, Set[str]] = {}
    for name in reachable:
        hard = set(graph.dependencies(name))
        soft = {p for p in graph.soft_predecessors(name) if p in reachable}
        waits_for[name] = hard | soft

    unlocks: Dict[str, Set[str]] = {n: set() for n in reachable}
    indeg: Dict[str, int] = {}
    for name, preds in waits_for.items():
        indeg[name] = len(preds)
        for p in preds:
            unlocks[p].add(name)

    ready: List[str] = [n for n, d in indeg.items() if d == 0]
    heapq.heapify(ready)

    order: List[str] = []
    while ready:
        name = heapq.heappop(ready)
        order.append(name)
        for nxt in unlocks[name]:
            indeg[nxt] -= 1
            if indeg[nxt] == 0:
                heapq.heappush(ready, nxt)

    if len(order) != len(reachable):
        stuck = {n: waits_for[n] for n in reachable if indeg[n] > 0}
        cycle = find_cycle({n: {p for p in preds if p in stuck} for n, preds in stuck.items()})
        raise SchedulingCycleError(cycle or tuple(sorted(stuck)))

    return Plan(targets=tuple(graph[n] for n in order), goals=tuple(goals))
