"""
Position assignment: turns levels and family units into per-person coordinates.

The assigner runs ordered phases over one position table. Each phase is a
module-level function taking the shared LayoutState, so phases can be run and
checked one at a time:

1. place_roots            roots that start a line of descent
2. align_children         children under their designated parent
3. place_family_units     spouses on either side of the unit's pivot
4. recenter_parents       parents over the mean of their children
5. place_residuals        stragglers next to a placed parent or spouse
6. place_fallbacks        everyone else one level below the deepest one
7. separate_overlaps      push apart boxes sharing a level (optional)

Coordinates are generic: `x` runs along the primary (sibling) axis and `level`
is the generation. Views turn them into screen coordinates.
"""

from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field
import logging

from kinlayout.config import LayoutConfig
from kinlayout.families import FamilyUnits
from kinlayout.graph import FamilyGraph
from kinlayout.levels import LevelAssignment
from kinlayout.models import Position, is_female

logger = logging.getLogger(__name__)

DesignatedParentSelector = Callable[[str, FamilyGraph], str | None]


def select_mother_first(child_id: str, graph: FamilyGraph) -> str | None:
    """
    Pick the parent a child is aligned under.

    Prefers a female parent, then a female spouse of any parent, then the
    first recorded parent.
    """
    parents = graph.parents(child_id)
    if not parents:
        return None
    for parent in parents:
        if is_female(graph.persons[parent].gender):
            return parent
    for parent in parents:
        for spouse in graph.spouses(parent):
            if is_female(graph.persons[spouse].gender):
                return spouse
    return parents[0]


def select_first_parent(child_id: str, graph: FamilyGraph) -> str | None:
    """Align every child under its first recorded parent, ignoring gender."""
    parents = graph.parents(child_id)
    return parents[0] if parents else None


@dataclass
class Slot:
    x: float
    level: int


@dataclass
class LayoutState:
    graph: FamilyGraph
    levels: LevelAssignment
    units: FamilyUnits
    config: LayoutConfig = field(default_factory=LayoutConfig)
    selector: DesignatedParentSelector = select_mother_first
    designated: dict[str, str] = field(default_factory=dict)
    designated_children: dict[str, list[str]] = field(default_factory=dict)
    table: dict[str, Slot] = field(default_factory=dict)

    def __post_init__(self):
        if not self.designated:
            self.designate_parents()

    def designate_parents(self):
        self.designated.clear()
        self.designated_children.clear()
        for child_id in self.graph.persons:
            parent = self.selector(child_id, self.graph)
            if parent is None or parent not in self.graph or parent == child_id:
                continue
            self.designated[child_id] = parent
            self.designated_children.setdefault(parent, []).append(child_id)

    def level(self, person_id: str) -> int | None:
        return self.levels.get(person_id)

    def child_count(self, person_id: str) -> int:
        return len(self.designated_children.get(person_id, ()))

    def is_placed(self, person_id: str) -> bool:
        return person_id in self.table

    def place(self, person_id: str, x: float, level: int):
        self.table[person_id] = Slot(x=x, level=level)

    def next_free_x(self, level: int) -> float:
        """Slot for a new family group, one unit gap right of everything on `level`."""
        xs = [slot.x for slot in self.table.values() if slot.level == level]
        if not xs:
            return self.config.padding
        return max(xs) + self.config.unit_step


# ============================================================================
# Phase 1: roots
# ============================================================================


def true_roots(state: LayoutState) -> list[str]:
    """
    Roots that start a line of descent.

    A root married to someone with ancestors is left for the family unit
    phase, and a root with no relationships at all is left for fallback.
    """
    graph = state.graph
    roots = []
    for root in state.levels.roots:
        spouses = graph.spouses(root)
        if not spouses and not graph.children(root):
            continue
        if any(graph.has_parents(spouse) for spouse in spouses):
            continue
        roots.append(root)
    return roots


def place_roots(state: LayoutState):
    step = state.config.sibling_step
    for i, root in enumerate(true_roots(state)):
        level = state.level(root)
        state.place(root, state.config.padding + i * step, 0 if level is None else level)


# ============================================================================
# Phase 2: children under their designated parent
# ============================================================================


def align_children(state: LayoutState):
    step = state.config.sibling_step
    parents = [p for p in state.designated_children if state.level(p) is not None]
    parents.sort(key=lambda p: (state.level(p), state.graph.order(p)))

    for parent in parents:
        if not state.is_placed(parent):
            level = state.level(parent)
            state.place(parent, state.next_free_x(level), level)
        anchor_x = state.table[parent].x

        k = 0
        for child in state.designated_children[parent]:
            child_level = state.level(child)
            if state.is_placed(child) or child_level is None:
                continue
            state.place(child, anchor_x + k * step, child_level)
            k += 1


# ============================================================================
# Phase 3: family units
# ============================================================================


def choose_pivot(state: LayoutState, members: list[str]) -> str:
    """
    The member the rest of the unit is laid out around.

    Most spouses wins, then most designated children, then having ancestors;
    the earliest member wins a full tie.
    """

    def rank(person_id: str) -> tuple[int, int, bool]:
        return (
            len(state.graph.spouse_of.get(person_id, {})),
            state.child_count(person_id),
            state.graph.has_parents(person_id),
        )

    pivot = members[0]
    for member in members[1:]:
        if rank(member) > rank(pivot):
            pivot = member
    return pivot


def split_spouses(state: LayoutState, others: list[str]) -> tuple[list[str], list[str]]:
    """
    Partition spouses into the "fewer children" and "more children" sides.

    Both lists are ordered nearest-to-pivot first, so spouses with larger
    families sit next to the pivot.
    """
    ordered = sorted(others, key=state.child_count)
    if len(ordered) == 1:
        if state.child_count(ordered[0]) > 0:
            fewer, more = [], ordered
        else:
            fewer, more = ordered, []
    else:
        mid = len(ordered) // 2
        fewer, more = ordered[:mid], ordered[mid:]
    return list(reversed(fewer)), list(reversed(more))


def shift_descendants(state: LayoutState, person_id: str, delta: float, frozen: set[str]):
    """Move the already placed designated descendants of a person by `delta`."""
    visited = set(frozen)
    visited.add(person_id)
    queue = deque(state.designated_children.get(person_id, ()))
    while queue:
        current = queue.popleft()
        if current in visited:
            continue
        visited.add(current)
        if current in state.table:
            state.table[current].x += delta
        queue.extend(state.designated_children.get(current, ()))


def move_spouse(state: LayoutState, person_id: str, x: float, level: int, unit_members: set[str]):
    previous = state.table.get(person_id)
    state.place(person_id, x, level)
    if previous is not None and previous.x != x:
        shift_descendants(state, person_id, x - previous.x, unit_members)


def shift_block(state: LayoutState, person_ids: list[str], delta: float):
    """Move persons and all their placed designated descendants by `delta`."""
    visited: set[str] = set()
    queue = deque(person_ids)
    while queue:
        current = queue.popleft()
        if current in visited:
            continue
        visited.add(current)
        if current in state.table:
            state.table[current].x += delta
        queue.extend(state.designated_children.get(current, ()))


def make_room(
    state: LayoutState, level: int, pivot: str, unit_members: set[str], n_left: int, n_right: int
):
    """
    Clear the slots a pivot's spouses are about to take on `level`.

    A box of another unit inside the left span pushes the pivot, and
    everything on the level from the pivot rightwards, to the right by the
    shortfall. Boxes inside the right span are pushed right together with
    everything beyond them. Moved boxes carry their designated descendants.
    """
    gap = state.config.sibling_step
    reach = state.config.spouse_step

    def on_level() -> dict[str, float]:
        return {pid: slot.x for pid, slot in state.table.items() if slot.level == level}

    if n_left:
        xs = on_level()
        pivot_x = xs[pivot]
        low = pivot_x - n_left * reach - gap
        blockers = [x for pid, x in xs.items() if pid not in unit_members and low < x < pivot_x]
        if blockers:
            shortfall = max(blockers) - low
            shift_block(state, [pid for pid, x in xs.items() if x >= pivot_x], shortfall)
            logger.debug("Shifted %s right by %.1f to fit %d spouses", pivot, shortfall, n_left)

    if n_right:
        xs = on_level()
        pivot_x = xs[pivot]
        high = pivot_x + n_right * reach + gap
        blockers = [x for pid, x in xs.items() if pid not in unit_members and pivot_x < x < high]
        if blockers:
            start = min(blockers)
            shortfall = high - start
            shift_block(state, [pid for pid, x in xs.items() if x >= start], shortfall)
            logger.debug("Shifted boxes right of %s by %.1f to fit %d spouses", pivot, shortfall, n_right)


def place_family_units(state: LayoutState):
    spouse_step = state.config.spouse_step
    levels = sorted(set(state.levels.levels.values()))

    for level in levels:
        for unit in state.units:
            if len(unit) < 2:
                continue
            members = [m for m in unit.member_ids if state.level(m) == level]
            if len(members) < 2:
                continue

            pivot = choose_pivot(state, members)
            if not state.is_placed(pivot):
                state.place(pivot, state.next_free_x(level), level)

            others = [m for m in members if m != pivot]
            left, right = split_spouses(state, others)
            unit_members = set(unit.member_ids)
            make_room(state, level, pivot, unit_members, len(left), len(right))
            pivot_x = state.table[pivot].x
            for k, spouse in enumerate(left, start=1):
                move_spouse(state, spouse, pivot_x - k * spouse_step, level, unit_members)
            for k, spouse in enumerate(right, start=1):
                move_spouse(state, spouse, pivot_x + k * spouse_step, level, unit_members)


# ============================================================================
# Phase 4: parents over their children
# ============================================================================


def recenter_parents(state: LayoutState):
    """
    Center each parent over the mean of its placed designated children.

    The same delta moves every other placed member of the parent's family
    unit, so spouses stay beside each other. Deepest parents go first.
    """
    parents = [
        p
        for p, children in state.designated_children.items()
        if state.is_placed(p) and any(state.is_placed(c) for c in children)
    ]
    parents.sort(key=lambda p: (-state.table[p].level, state.graph.order(p)))

    for parent in parents:
        xs = [state.table[c].x for c in state.designated_children[parent] if state.is_placed(c)]
        delta = sum(xs) / len(xs) - state.table[parent].x
        if delta == 0:
            continue
        unit = state.units.unit_of(parent)
        members = unit.member_ids if unit is not None else (parent,)
        for member in members:
            if state.is_placed(member):
                state.table[member].x += delta


# ============================================================================
# Phases 5 and 6: stragglers
# ============================================================================


def place_residuals(state: LayoutState):
    """Place unplaced persons beside an already placed parent, else a spouse."""
    graph = state.graph
    sibling_step = state.config.sibling_step
    spouse_step = state.config.spouse_step
    used: dict[str, int] = {}

    progress = True
    while progress:
        progress = False
        for person_id in graph.persons:
            if state.is_placed(person_id):
                continue
            level = state.level(person_id)

            parent = next((p for p in graph.parents(person_id) if state.is_placed(p)), None)
            if parent is not None:
                slot = state.table[parent]
                k = used.get(parent, 0)
                used[parent] = k + 1
                state.place(
                    person_id, slot.x + k * sibling_step, slot.level + 1 if level is None else level
                )
                progress = True
                continue

            spouse = next((s for s in graph.spouses(person_id) if state.is_placed(s)), None)
            if spouse is not None:
                slot = state.table[spouse]
                k = used.get(spouse, 0) + 1
                used[spouse] = k
                state.place(person_id, slot.x + k * spouse_step, slot.level if level is None else level)
                progress = True


def place_fallbacks(state: LayoutState):
    """Put everyone still unplaced on a new level below the deepest one."""
    level = max((slot.level for slot in state.table.values()), default=-1) + 1
    step = state.config.sibling_step
    i = 0
    for person_id in state.graph.persons:
        if state.is_placed(person_id):
            continue
        state.place(person_id, state.config.padding + i * step, level)
        i += 1
    if i:
        logger.debug("Fallback placed %d persons at level %d", i, level)


# ============================================================================
# Phase 7: spacing
# ============================================================================


def separate_overlaps(state: LayoutState):
    """
    Push boxes right until neighbours on a level are far enough apart.

    Neighbours from the same family unit need the smaller of the sibling and
    spouse steps, everyone else a sibling step.
    """
    sibling_step = state.config.sibling_step
    unit_gap = min(sibling_step, state.config.spouse_step)
    by_level: dict[int, list[str]] = {}
    for person_id, slot in state.table.items():
        by_level.setdefault(slot.level, []).append(person_id)

    for level, members in sorted(by_level.items()):
        members.sort(key=lambda p: (state.table[p].x, state.graph.order(p)))
        for i in range(len(members) - 1):
            left, right = members[i], members[i + 1]
            same_unit = state.units.unit_of(left) is state.units.unit_of(right)
            min_gap = unit_gap if same_unit else sibling_step
            gap = state.table[right].x - state.table[left].x
            if gap < min_gap:
                push = min_gap - gap
                for later in members[i + 1 :]:
                    state.table[later].x += push
                logger.debug("Pushed %d boxes on level %d by %.1f", len(members) - i - 1, level, push)


# ============================================================================
# Driver
# ============================================================================


PHASES = (
    place_roots,
    align_children,
    place_family_units,
    recenter_parents,
    place_residuals,
    place_fallbacks,
)


def to_positions(state: LayoutState) -> dict[str, Position]:
    """Shift the primary axis so it starts at the padding and emit Positions."""
    config = state.config
    if not state.table:
        return {}
    shift = config.padding - min(slot.x for slot in state.table.values())
    return {
        person_id: Position(
            person_id=person_id,
            x=state.table[person_id].x + shift,
            y=config.padding + state.table[person_id].level * config.level_spacing,
            level=state.table[person_id].level,
        )
        for person_id in state.graph.persons
    }


def assign_positions(
    graph: FamilyGraph,
    levels: LevelAssignment,
    units: FamilyUnits,
    config: LayoutConfig | None = None,
    selector: DesignatedParentSelector | None = None,
) -> dict[str, Position]:
    state = LayoutState(
        graph=graph,
        levels=levels,
        units=units,
        config=config or LayoutConfig(),
        selector=selector or select_mother_first,
    )
    for phase in PHASES:
        phase(state)
    if state.config.separate_overlaps:
        separate_overlaps(state)
    return to_positions(state)
