"""Layout pipeline: graph snapshot in, position map out."""

from collections import OrderedDict
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
import json
import logging
from typing import Any

from kinlayout.config import LayoutConfig
from kinlayout.families import FamilyUnits, resolve_family_units
from kinlayout.graph import FamilyGraph, build_family_graph
from kinlayout.levels import LevelAssignment, assign_levels
from kinlayout.models import Position
from kinlayout.positions import DesignatedParentSelector, assign_positions

logger = logging.getLogger(__name__)


@dataclass
class LayoutResult:
    positions: dict[str, Position] = field(default_factory=dict)
    graph: FamilyGraph = field(default_factory=FamilyGraph)
    levels: LevelAssignment = field(default_factory=LevelAssignment)
    units: FamilyUnits = field(default_factory=FamilyUnits)
    config: LayoutConfig = field(default_factory=LayoutConfig)

    def __len__(self) -> int:
        return len(self.positions)

    def __getitem__(self, person_id: Any) -> Position:
        return self.positions[str(person_id)]

    def as_dict(self) -> dict[str, dict[str, float | int]]:
        """The `{personId: {x, y, level}}` map handed to renderers."""
        return {pid: position.as_dict() for pid, position in self.positions.items()}

    @property
    def max_level(self) -> int:
        return max((p.level for p in self.positions.values()), default=-1)


def compute_layout(
    nodes: Iterable[Mapping[str, Any]] | None,
    edges: Iterable[Mapping[str, Any]] | None,
    config: LayoutConfig | None = None,
    selector: DesignatedParentSelector | None = None,
) -> LayoutResult:
    """
    Compute one position per person for a raw graph snapshot.

    Never raises for malformed, cyclic or disconnected input; an empty
    snapshot gives an empty position map.
    """
    config = config or LayoutConfig()
    graph = build_family_graph(nodes, edges)
    levels = assign_levels(graph)
    units = resolve_family_units(graph)
    positions = assign_positions(graph, levels, units, config=config, selector=selector)
    logger.debug(
        "Laid out %d persons over %d levels in %d family units (%d reconciliation passes)",
        len(positions),
        max((p.level for p in positions.values()), default=-1) + 1,
        len(units),
        levels.passes,
    )
    return LayoutResult(positions=positions, graph=graph, levels=levels, units=units, config=config)


def _str_keys(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {str(k): _str_keys(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_str_keys(v) for v in value]
    return value


def snapshot_key(nodes: Any, edges: Any, config: LayoutConfig | None = None) -> str:
    """Canonical text for a snapshot so structurally equal inputs compare equal."""
    document = {"nodes": nodes or [], "edges": edges or [], "config": repr(config)}
    try:
        return json.dumps(document, sort_keys=True, default=str)
    except TypeError:
        # Payloads mixing int and str keys cannot be sorted as they are
        return json.dumps(_str_keys(document), sort_keys=True, default=str)


class LayoutCache:
    """
    Memoizes layouts by structural equality of the snapshot.

    Keeps the `maxsize` most recently used results.
    """

    def __init__(self, maxsize: int = 16, selector: DesignatedParentSelector | None = None):
        self.maxsize = maxsize
        self.selector = selector
        self._results: OrderedDict[str, LayoutResult] = OrderedDict()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._results)

    def get(self, nodes, edges, config: LayoutConfig | None = None) -> LayoutResult:
        key = snapshot_key(nodes, edges, config)
        if key in self._results:
            self.hits += 1
            self._results.move_to_end(key)
            return self._copy(self._results[key])

        self.misses += 1
        result = compute_layout(nodes, edges, config=config, selector=self.selector)
        self._results[key] = result
        if len(self._results) > self.maxsize:
            self._results.popitem(last=False)
        return self._copy(result)

    def clear(self):
        self._results.clear()

    @staticmethod
    def _copy(result: LayoutResult) -> LayoutResult:
        # Positions are frozen; a fresh map keeps callers from editing the cached one
        return replace(result, positions=dict(result.positions))
