"""Tests for projecting layouts into screen coordinates."""

import math

import pytest

from conftest import node
from kinlayout import LayoutConfig, compute_layout
from kinlayout.views import polar_to_cartesian, project, to_horizontal, to_radial, to_vertical


def test_vertical_is_identity(nuclear_family):
    result = compute_layout(*nuclear_family)
    points = to_vertical(result)

    for pid, p in result.positions.items():
        assert (points[pid].x, points[pid].y, points[pid].level) == (p.x, p.y, p.level)
        assert points[pid].angle is None


def test_horizontal_swaps_axes(nuclear_family):
    result = compute_layout(*nuclear_family)
    points = to_horizontal(result)

    assert (points["C1"].x, points["C1"].y) == (350, 325)
    assert points["R"].x < points["C1"].x


def test_radial_single_root_sits_at_the_center():
    result = compute_layout([node("A")], [])
    point = to_radial(result)["A"]

    assert point.angle == 0
    assert point.radius == 0
    assert (point.x, point.y) == pytest.approx((350, 350))


def test_radial_rings_by_generation(polygamous_family):
    result = compute_layout(*polygamous_family)
    points = project(result, "radial")
    config = result.config
    center = config.padding + (result.max_level + 1) * config.level_spacing

    for pid, point in points.items():
        assert 0 <= point.angle < 360
        assert point.radius == result[pid].level * config.level_spacing
        distance = math.hypot(point.x - center, point.y - center)
        assert distance == pytest.approx(point.radius)


def test_radial_inner_radius_and_explicit_center(nuclear_family):
    result = compute_layout(*nuclear_family, config=LayoutConfig(radial_inner_radius=50))
    points = to_radial(result, center_point=(0, 0))

    assert points["R"].radius == 50
    assert points["C1"].radius == 250
    # Angle 0 points straight up
    assert (points["R"].x, points["R"].y) == pytest.approx((0, -50))


def test_polar_to_cartesian():
    assert polar_to_cartesian(10, 0) == pytest.approx((10, 0))
    assert polar_to_cartesian(10, 90, (5, 5)) == pytest.approx((5, 15))


def test_empty_layout_projects_to_nothing():
    result = compute_layout([], [])
    for view in ("vertical", "horizontal", "radial"):
        assert project(result, view) == {}


def test_unknown_view():
    with pytest.raises(ValueError, match="Unknown view type"):
        project(compute_layout([node("A")], []), "spiral")
