"""Graph building from raw snapshot records, and NetworkX views of the result."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
import logging
from typing import Any

import networkx as nx

from kinlayout.models import (
    MARITAL_STATUSES,
    MARRIED,
    PARENT,
    SPOUSE,
    ParentEdge,
    Person,
    SpouseEdge,
)
from kinlayout.parsing import parse_date_string

logger = logging.getLogger(__name__)


@dataclass
class FamilyGraph:
    """
    Typed, normalized view of one graph snapshot.

    All ids are strings. Dict insertion order follows the input order, which
    every later layout phase relies on for deterministic tie-breaks.
    """

    persons: dict[str, Person] = field(default_factory=dict)
    children_by_parent: dict[str, list[str]] = field(default_factory=dict)
    parents_by_child: dict[str, list[str]] = field(default_factory=dict)
    spouse_of: dict[str, dict[str, str]] = field(default_factory=dict)

    def __post_init__(self):
        self._order = {pid: i for i, pid in enumerate(self.persons)}

    def __len__(self) -> int:
        return len(self.persons)

    def __contains__(self, person_id: object) -> bool:
        return person_id in self.persons

    def order(self, person_id: str) -> int:
        return self._order[person_id]

    def parents(self, person_id: str) -> list[str]:
        return self.parents_by_child.get(person_id, [])

    def children(self, person_id: str) -> list[str]:
        return self.children_by_parent.get(person_id, [])

    def spouses(self, person_id: str) -> list[str]:
        return list(self.spouse_of.get(person_id, {}))

    def marital_status(self, person_a: str, person_b: str) -> str | None:
        return self.spouse_of.get(person_a, {}).get(person_b)

    def has_parents(self, person_id: str) -> bool:
        return bool(self.parents_by_child.get(person_id))

    def roots(self) -> list[str]:
        """Persons with no recorded parent edges, in input order."""
        return [pid for pid in self.persons if not self.has_parents(pid)]

    def spouse_pairs(self) -> list[tuple[str, str]]:
        """Each spouse pair once, ordered by first appearance."""
        pairs = []
        for a, spouses in self.spouse_of.items():
            for b in spouses:
                if self._order[a] < self._order[b]:
                    pairs.append((a, b))
        return pairs

    def parent_edges(self) -> list[ParentEdge]:
        return [
            ParentEdge(parent, child)
            for parent, children in self.children_by_parent.items()
            for child in children
        ]

    def spouse_edges(self) -> list[SpouseEdge]:
        """One edge per spouse pair, with its marital status."""
        return [SpouseEdge(a, b, self.spouse_of[a][b]) for a, b in self.spouse_pairs()]

    def to_networkx(self) -> nx.DiGraph:
        """Build a NetworkX directed graph with PARENT_OF and SPOUSE_OF edges."""
        G = nx.DiGraph()
        for pid, person in self.persons.items():
            # 'person_name' instead of 'name' to avoid a clash with the graphviz node name
            G.add_node(
                pid,
                person_name=person.name,
                gender=person.gender,
                birth_date=person.birth_date,
                death_date=person.death_date,
            )
        for edge in self.parent_edges():
            G.add_edge(edge.parent_id, edge.child_id, relationship_type="PARENT_OF")
        for edge in self.spouse_edges():
            for a, b in ((edge.person_a, edge.person_b), (edge.person_b, edge.person_a)):
                G.add_edge(a, b, relationship_type="SPOUSE_OF", marital_status=edge.marital_status)
        return G


def _normalize_id(value: Any) -> str | None:
    if value is None:
        return None
    key = str(value).strip()
    return key or None


def _person_from_record(person_id: str, record: Mapping[str, Any]) -> Person:
    data = record.get("data")
    if not isinstance(data, Mapping):
        data = {}
    name = data.get("full_name") or data.get("label") or record.get("label") or "Unknown"
    return Person(
        id=person_id,
        name=str(name),
        gender=data.get("gender"),
        birth_date=parse_date_string(data.get("date_of_birth")),
        death_date=parse_date_string(data.get("date_of_death")),
        data=dict(data),
    )


def build_family_graph(
    nodes: Iterable[Mapping[str, Any]] | None, edges: Iterable[Mapping[str, Any]] | None
) -> FamilyGraph:
    """
    Normalize raw node and edge records into a FamilyGraph.

    Malformed records are dropped rather than reported: nodes without an id,
    edges missing an endpoint, edges pointing at unknown persons and
    self-loops. A repeated spouse pair overwrites the earlier marital status.
    """
    persons: dict[str, Person] = {}
    for record in nodes or ():
        if not isinstance(record, Mapping):
            logger.debug("Skipping non-mapping node record: %r", record)
            continue
        person_id = _normalize_id(record.get("id"))
        if person_id is None:
            logger.debug("Skipping node without id: %r", record)
            continue
        persons[person_id] = _person_from_record(person_id, record)

    children_by_parent: dict[str, list[str]] = {}
    parents_by_child: dict[str, list[str]] = {}
    spouse_of: dict[str, dict[str, str]] = {}

    for edge in edges or ():
        if not isinstance(edge, Mapping):
            logger.debug("Skipping non-mapping edge record: %r", edge)
            continue
        source = _normalize_id(edge.get("source"))
        target = _normalize_id(edge.get("target"))
        if source is None or target is None:
            logger.debug("Skipping edge with missing endpoint: %r", edge)
            continue
        if source not in persons or target not in persons:
            logger.debug("Skipping edge to unknown person: %s -> %s", source, target)
            continue
        if source == target:
            logger.debug("Skipping self-referencing edge on %s", source)
            continue

        edge_type = edge.get("type")
        if edge_type == PARENT:
            children = children_by_parent.setdefault(source, [])
            if target not in children:
                children.append(target)
            parents = parents_by_child.setdefault(target, [])
            if source not in parents:
                parents.append(source)
        elif edge_type == SPOUSE:
            status = str(edge.get("marital_status") or MARRIED).lower()
            if status not in MARITAL_STATUSES:
                status = MARRIED
            spouse_of.setdefault(source, {})[target] = status
            spouse_of.setdefault(target, {})[source] = status
        else:
            logger.debug("Ignoring edge of type %r: %s -> %s", edge_type, source, target)

    return FamilyGraph(
        persons=persons,
        children_by_parent=children_by_parent,
        parents_by_child=parents_by_child,
        spouse_of=spouse_of,
    )


def get_ego_subgraph(graph: FamilyGraph, center_id: Any, radius: int = 2) -> FamilyGraph:
    """
    Extract the part of the family within a given degree of a center person.

    Args:
        graph: The full family graph
        center_id: The person ID to center the subgraph on
        radius: Maximum distance from center (default 2)

    Returns:
        A FamilyGraph containing only persons within `radius` relationships of
        `center_id`, with the relationships among them
    """
    center = _normalize_id(center_id)
    if center is None or center not in graph:
        raise ValueError(f"Person ID {center_id} not found in graph")

    # Undirected view so parents, children and spouses all count as neighbours
    undirected = graph.to_networkx().to_undirected()
    ego = nx.ego_graph(undirected, center, radius=radius)
    keep = [pid for pid in graph.persons if pid in ego]
    kept = set(keep)

    return FamilyGraph(
        persons={pid: graph.persons[pid] for pid in keep},
        children_by_parent={
            p: [c for c in children if c in kept]
            for p, children in graph.children_by_parent.items()
            if p in kept and any(c in kept for c in children)
        },
        parents_by_child={
            c: [p for p in parents if p in kept]
            for c, parents in graph.parents_by_child.items()
            if c in kept and any(p in kept for p in parents)
        },
        spouse_of={
            a: {b: s for b, s in spouses.items() if b in kept}
            for a, spouses in graph.spouse_of.items()
            if a in kept and any(b in kept for b in spouses)
        },
    )
