"""Data quality checks for family graph snapshots."""

import networkx as nx

from kinlayout.graph import FamilyGraph

MIN_PARENT_AGE = 12


def _year(date: str | None) -> int | None:
    if not date:
        return None
    try:
        return int(str(date)[:4])
    except ValueError:
        return None


def find_parent_cycle(graph: FamilyGraph) -> list[str] | None:
    """Persons along one cycle of parent -> child edges, or None."""
    parent_graph = nx.DiGraph((e.parent_id, e.child_id) for e in graph.parent_edges())
    try:
        cycle = nx.find_cycle(parent_graph, orientation="original")
    except nx.NetworkXNoCycle:
        return None
    return [edge[0] for edge in cycle]


def find_spouse_descendants(graph: FamilyGraph) -> list[tuple[str, str]]:
    """Spouse pairs where one partner is a descendant of the other."""
    parent_graph = nx.DiGraph()
    parent_graph.add_nodes_from(graph.persons)
    parent_graph.add_edges_from((e.parent_id, e.child_id) for e in graph.parent_edges())
    found = []
    for edge in graph.spouse_edges():
        a, b = edge.person_a, edge.person_b
        if nx.has_path(parent_graph, a, b) or nx.has_path(parent_graph, b, a):
            found.append((a, b))
    return found


def validate_graph(graph: FamilyGraph) -> list[str]:
    """
    Validate a family graph for:
    - Cycles in parent-child relationships
    - Spouses who are also each other's descendants
    - Impossible ages (child born before parent, parent too young)
    - Death before birth

    Dates are ISO strings (YYYY-MM-DD), so they compare as strings.
    Returns a list of warning messages.
    """
    warnings: list[str] = []
    persons = graph.persons

    cycle = find_parent_cycle(graph)
    if cycle:
        names = [persons[pid].name for pid in cycle]
        warnings.append(f"Cycle detected in parent-child relationships: {names}")

    for a, b in find_spouse_descendants(graph):
        warnings.append(
            f"Suspicious: {persons[a].name} is married to their own ancestor or "
            f"descendant {persons[b].name}"
        )

    for edge in graph.parent_edges():
        parent = persons[edge.parent_id]
        child = persons[edge.child_id]
        if not parent.birth_date or not child.birth_date:
            continue
        if str(child.birth_date) < str(parent.birth_date):
            warnings.append(f"Impossible: {child.name} born before parent {parent.name}")
            continue
        parent_year = _year(parent.birth_date)
        child_year = _year(child.birth_date)
        if parent_year is not None and child_year is not None:
            if child_year - parent_year < MIN_PARENT_AGE:
                warnings.append(
                    f"Suspicious: {parent.name} was less than {MIN_PARENT_AGE} years "
                    f"old when {child.name} was born"
                )

    for person in persons.values():
        if person.birth_date and person.death_date:
            if str(person.death_date) < str(person.birth_date):
                warnings.append(f"Impossible: {person.name} died before being born")

    return warnings
