"""Coordinate transforms from generic layout positions to screen coordinates.

The engine lays everyone out top-down. Each view is a thin transform of that
single layout: the horizontal view swaps axes and the radial view turns the
primary axis into an angle and the level into a radius.
"""

from dataclasses import dataclass
import math

from kinlayout.config import HORIZONTAL, RADIAL, VERTICAL, VIEW_TYPES, LayoutConfig
from kinlayout.engine import LayoutResult


@dataclass
class ScreenPoint:
    person_id: str
    x: float
    y: float
    level: int
    angle: float | None = None  # degrees, radial view only
    radius: float | None = None  # radial view only


def polar_to_cartesian(
    radius: float, angle_degrees: float, center_point: tuple[float, float] = (0.0, 0.0)
) -> tuple[float, float]:
    """Convert polar coordinates (radius, angle) to cartesian coordinates relative to center."""
    x = center_point[0] + radius * math.cos(math.radians(angle_degrees))
    y = center_point[1] + radius * math.sin(math.radians(angle_degrees))
    return (x, y)


def to_vertical(result: LayoutResult) -> dict[str, ScreenPoint]:
    """Ancestors at the top, descendants below."""
    return {
        pid: ScreenPoint(pid, p.x, p.y, p.level) for pid, p in result.positions.items()
    }


def to_horizontal(result: LayoutResult) -> dict[str, ScreenPoint]:
    """Ancestors on the left, descendants to the right."""
    return {
        pid: ScreenPoint(pid, p.y, p.x, p.level) for pid, p in result.positions.items()
    }


def to_radial(
    result: LayoutResult, center_point: tuple[float, float] | None = None
) -> dict[str, ScreenPoint]:
    """
    Roots near the centre, each generation on a ring further out.

    The primary axis is spread over the full circle with one sibling step of
    slack, so the first and last person on a ring never coincide. Angle 0
    points up (12 o'clock) and grows clockwise.
    """
    config: LayoutConfig = result.config
    positions = result.positions
    if not positions:
        return {}

    min_x = min(p.x for p in positions.values())
    span = max(p.x for p in positions.values()) - min_x + config.sibling_step
    max_radius = config.radial_inner_radius + (result.max_level + 1) * config.level_spacing
    if center_point is None:
        center_point = (config.padding + max_radius, config.padding + max_radius)

    points = {}
    for pid, p in positions.items():
        angle = 360.0 * (p.x - min_x) / span
        radius = config.radial_inner_radius + p.level * config.level_spacing
        x, y = polar_to_cartesian(radius, angle - 90.0, center_point)
        points[pid] = ScreenPoint(pid, x, y, p.level, angle=angle, radius=radius)
    return points


def project(result: LayoutResult, view: str = VERTICAL) -> dict[str, ScreenPoint]:
    """Screen coordinates for one of the supported view types."""
    if view == VERTICAL:
        return to_vertical(result)
    if view == HORIZONTAL:
        return to_horizontal(result)
    if view == RADIAL:
        return to_radial(result)
    raise ValueError(f"Unknown view type {view!r}; expected one of {', '.join(VIEW_TYPES)}")
