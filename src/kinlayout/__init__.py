"""Generational layout of family graphs for vertical, horizontal and radial tree views."""

from kinlayout.config import LayoutConfig
from kinlayout.engine import LayoutCache, LayoutResult, compute_layout
from kinlayout.models import Position
from kinlayout.positions import select_first_parent, select_mother_first

__all__ = [
    "LayoutCache",
    "LayoutConfig",
    "LayoutResult",
    "Position",
    "compute_layout",
    "select_first_parent",
    "select_mother_first",
]
