"""End-to-end layout tests and the layout cache."""

import copy
import dataclasses

import pytest

from conftest import node, parent, spouse
from kinlayout import LayoutCache, LayoutConfig, compute_layout, select_first_parent


def test_empty_snapshot():
    result = compute_layout([], [])
    assert len(result) == 0
    assert result.as_dict() == {}
    assert compute_layout(None, None).positions == {}


def test_single_root():
    result = compute_layout([node("A")], [])
    assert result.as_dict() == {"A": {"x": 150, "y": 150, "level": 0}}


def test_childless_couple_sits_side_by_side():
    result = compute_layout([node("R"), node("S")], [spouse("R", "S")])

    assert result["S"].x == 150
    assert result["R"].x == 430
    assert result["R"].level == result["S"].level == 0


def test_small_spouse_spacing_keeps_couples_one_spouse_step_apart():
    config = LayoutConfig(spouse_spacing=20)
    result = compute_layout([node("R"), node("S")], [spouse("R", "S")], config=config)

    assert abs(result["R"].x - result["S"].x) == config.spouse_step == 180


@pytest.mark.parametrize("separate", [True, False])
def test_married_in_spouse_stays_beside_partner(married_in_family, separate):
    result = compute_layout(*married_in_family, config=LayoutConfig(separate_overlaps=separate))

    row = sorted((p.x, pid) for pid, p in result.positions.items() if p.level == 1)
    assert [pid for _, pid in row] == ["K1", "S", "K2"]
    assert result["K2"].x - result["S"].x == result.config.spouse_step
    assert result["S"].x - result["K1"].x >= result.config.sibling_step
    assert result["M"].x == (result["K1"].x + result["K2"].x) / 2
    assert result["M"].x - result["F"].x == result.config.spouse_step
    assert result.as_dict()["K2"] == {"x": 675, "y": 350, "level": 1}


def test_nuclear_family(nuclear_family):
    result = compute_layout(*nuclear_family)

    assert result.as_dict() == {
        "R": {"x": 150, "y": 150, "level": 0},
        "M": {"x": 430, "y": 150, "level": 0},
        "C1": {"x": 325, "y": 350, "level": 1},
        "C2": {"x": 535, "y": 350, "level": 1},
    }
    assert result.max_level == 1


def test_selector_is_pluggable(nuclear_family):
    result = compute_layout(*nuclear_family, selector=select_first_parent)
    assert result["M"].x == 150
    assert result["R"].x == 430


def test_numeric_ids_are_looked_up_as_strings():
    result = compute_layout([node(1), node(2)], [parent(1, 2)])
    assert result[1].level == 0
    assert result["2"].level == 1


def test_isolated_person_goes_below_the_tree():
    result = compute_layout([node("R"), node("C"), node("I")], [parent("R", "C")])

    assert result["I"].level == 2
    assert result["I"].y == 550


def test_parent_cycle_still_gets_positions():
    result = compute_layout([node("X"), node("Y")], [parent("X", "Y"), parent("Y", "X")])

    assert result["X"].level == result["Y"].level == 0
    assert result["X"].x != result["Y"].x


def test_malformed_input_does_not_raise():
    nodes = [node("A"), {"id": None}, "junk", {"data": {"full_name": "No id"}}]
    edges = [parent("A", "ghost"), {"type": "parent"}, spouse("A", "A"), None]

    result = compute_layout(nodes, edges)

    assert list(result.positions) == ["A"]


@pytest.mark.parametrize("fixture", ["nuclear_family", "polygamous_family", "married_in_family"])
def test_layout_properties(request, fixture):
    nodes, edges = request.getfixturevalue(fixture)
    result = compute_layout(nodes, edges)
    graph = result.graph
    config = result.config

    assert set(result.positions) == set(graph.persons)

    for p in result.positions.values():
        assert p.y == config.padding + p.level * config.level_spacing
    assert min(p.x for p in result.positions.values()) == config.padding

    for a, b in graph.spouse_pairs():
        assert result[a].level == result[b].level

    for parent_id, children in graph.children_by_parent.items():
        for child in children:
            assert result[child].level > result[parent_id].level

    seen = {}
    for pid, p in result.positions.items():
        for other in seen.get(p.level, []):
            assert abs(result[other].x - p.x) >= config.sibling_step
        seen.setdefault(p.level, []).append(pid)

    # Nobody from another family unit sits between two spouses
    for a, b in graph.spouse_pairs():
        low, high = sorted((result[a].x, result[b].x))
        unit = result.units.unit_of(a)
        for pid, p in result.positions.items():
            if p.level == result[a].level and pid not in unit:
                assert not low < p.x < high


def test_layout_is_deterministic(polygamous_family):
    first = compute_layout(*polygamous_family).as_dict()
    second = compute_layout(*copy.deepcopy(polygamous_family)).as_dict()
    assert first == second


def test_custom_config(nuclear_family):
    config = LayoutConfig(padding=0, level_spacing=100)
    result = compute_layout(*nuclear_family, config=config)

    assert result["R"].x == 0
    assert result["C1"].y == 100
    assert result.config is config


def test_cache_hits_on_structurally_equal_snapshots(nuclear_family):
    cache = LayoutCache()
    first = cache.get(*nuclear_family)
    second = cache.get(*copy.deepcopy(nuclear_family))

    assert second.as_dict() == first.as_dict()
    assert second.graph is first.graph
    assert (cache.hits, cache.misses) == (1, 1)


def test_cache_hits_are_not_affected_by_caller_edits(nuclear_family):
    cache = LayoutCache()
    first = cache.get(*nuclear_family)
    first.positions.pop("R")

    second = cache.get(*nuclear_family)

    assert "R" in second.positions
    with pytest.raises(dataclasses.FrozenInstanceError):
        second["M"].x = 0


def test_cache_accepts_payloads_with_mixed_key_types():
    nodes = [{"id": "A", "data": {"full_name": "Ann", 1: "one"}}]
    cache = LayoutCache()

    first = cache.get(nodes, [])
    second = cache.get(copy.deepcopy(nodes), [])

    assert first.as_dict() == second.as_dict() == {"A": {"x": 150, "y": 150, "level": 0}}
    assert (cache.hits, cache.misses) == (1, 1)


def test_cache_keys_include_config(nuclear_family):
    cache = LayoutCache()
    cache.get(*nuclear_family)
    cache.get(*nuclear_family, config=LayoutConfig(padding=10))

    assert cache.misses == 2
    assert len(cache) == 2


def test_cache_evicts_least_recently_used(nuclear_family):
    cache = LayoutCache(maxsize=1)
    first = cache.get(*nuclear_family)
    cache.get([node("A")], [])
    again = cache.get(*nuclear_family)

    assert again is not first
    assert cache.misses == 3
    assert len(cache) == 1

    cache.clear()
    assert len(cache) == 0
