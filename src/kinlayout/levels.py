"""Generation (level) assignment for persons in a family graph."""

from collections import deque
from dataclasses import dataclass, field
import logging

from kinlayout.graph import FamilyGraph

logger = logging.getLogger(__name__)

MAX_RECONCILE_PASSES = 10


@dataclass
class LevelAssignment:
    levels: dict[str, int] = field(default_factory=dict)
    roots: list[str] = field(default_factory=list)
    passes: int = 0

    def get(self, person_id: str) -> int | None:
        return self.levels.get(person_id)

    @property
    def max_level(self) -> int:
        return max(self.levels.values(), default=-1)


def assign_root_levels(graph: FamilyGraph) -> tuple[list[str], dict[str, int]]:
    """
    Breadth-first generation assignment from every root at once.

    A child reachable through several parents keeps the level of the first
    parent that discovers it.
    """
    roots = graph.roots()
    levels = {root: 0 for root in roots}
    queue = deque(roots)
    while queue:
        current = queue.popleft()
        for child in graph.children(current):
            if child not in levels:
                levels[child] = levels[current] + 1
                queue.append(child)
    return roots, levels


def _reconciled_level(graph: FamilyGraph, levels: dict[str, int], a: str, b: str) -> int | None:
    level_a = levels.get(a)
    level_b = levels.get(b)
    ancestors_a = graph.has_parents(a)
    ancestors_b = graph.has_parents(b)

    # The spouse who descends from someone decides the generation
    if ancestors_a and not ancestors_b and level_a is not None:
        return level_a
    if ancestors_b and not ancestors_a and level_b is not None:
        return level_b

    known = [level for level in (level_a, level_b) if level is not None]
    return max(known) if known else None


def _push_descendants(
    graph: FamilyGraph, levels: dict[str, int], moved: list[str], visited: set[str]
) -> None:
    queue = deque(moved)
    while queue:
        current = queue.popleft()
        if current in visited:
            continue
        visited.add(current)
        for child in graph.children(current):
            floor = levels[current] + 1
            if child in levels and levels[child] < floor:
                levels[child] = floor
                queue.append(child)


def reconcile_spouse_levels(
    graph: FamilyGraph, levels: dict[str, int], max_passes: int = MAX_RECONCILE_PASSES
) -> int:
    """
    Pull spouse pairs onto a shared generation, in place.

    Returns the number of passes run, which never exceeds `max_passes`.
    """
    pairs = graph.spouse_pairs()
    passes = 0
    while passes < max_passes:
        passes += 1
        moved: list[str] = []
        for a, b in pairs:
            if a in levels and b in levels and levels[a] == levels[b]:
                continue
            target = _reconciled_level(graph, levels, a, b)
            if target is None:
                continue
            for person_id in (a, b):
                if levels.get(person_id) != target:
                    levels[person_id] = target
                    moved.append(person_id)

        if not moved:
            break
        _push_descendants(graph, levels, moved, set())
        logger.debug("Reconciliation pass %d moved %d persons", passes, len(moved))

    return passes


def assign_levels(graph: FamilyGraph, max_passes: int = MAX_RECONCILE_PASSES) -> LevelAssignment:
    roots, levels = assign_root_levels(graph)
    passes = reconcile_spouse_levels(graph, levels, max_passes=max_passes)
    unleveled = len(graph) - len(levels)
    if unleveled:
        logger.debug("%d persons are unreachable from any root", unleveled)
    return LevelAssignment(levels=levels, roots=roots, passes=passes)
