"""Family unit detection: spouses joined transitively, one anchor per household."""

from dataclasses import dataclass, field

import networkx as nx

from kinlayout.graph import FamilyGraph
from kinlayout.models import FamilyUnit


@dataclass
class FamilyUnits:
    units: list[FamilyUnit] = field(default_factory=list)
    membership: dict[str, FamilyUnit] = field(default_factory=dict)

    def __iter__(self):
        return iter(self.units)

    def __len__(self) -> int:
        return len(self.units)

    def unit_of(self, person_id: str) -> FamilyUnit | None:
        return self.membership.get(person_id)


def build_spouse_graph(graph: FamilyGraph) -> nx.Graph:
    """Undirected graph over all persons with one edge per spouse pair."""
    S = nx.Graph()
    S.add_nodes_from(graph.persons)
    S.add_edges_from(graph.spouse_pairs())
    return S


def choose_anchor(graph: FamilyGraph, member_ids: list[str]) -> str:
    """The member with the most spouses; the earliest member wins a tie."""
    anchor = member_ids[0]
    best = len(graph.spouse_of.get(anchor, {}))
    for member in member_ids[1:]:
        count = len(graph.spouse_of.get(member, {}))
        if count > best:
            anchor, best = member, count
    return anchor


def resolve_family_units(graph: FamilyGraph) -> FamilyUnits:
    """
    Merge spouses into family units, one per connected spouse component.

    Persons without spouse edges form single-member units, so every person
    belongs to exactly one unit.
    """
    S = build_spouse_graph(graph)
    result = FamilyUnits()
    components = [sorted(c, key=graph.order) for c in nx.connected_components(S)]
    # Units are ordered by their earliest member
    components.sort(key=lambda members: graph.order(members[0]))
    for members in components:
        unit = FamilyUnit(anchor_id=choose_anchor(graph, members), member_ids=tuple(members))
        result.units.append(unit)
        for member in members:
            result.membership[member] = unit
    return result
