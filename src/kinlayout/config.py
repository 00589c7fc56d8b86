"""Layout parameters and the shared colour scheme for family trees.

Every family tree uses the same configuration by default, so all views
(vertical, horizontal and radial) stay visually consistent.
"""

from dataclasses import dataclass, fields
import json
from pathlib import Path
from typing import Any, Mapping

VERTICAL = "vertical"
HORIZONTAL = "horizontal"
RADIAL = "radial"
VIEW_TYPES = (VERTICAL, HORIZONTAL, RADIAL)
DEFAULT_VIEW_TYPE = VERTICAL

# Generation-based colour scheme (blue gradient); the last entry covers 6+
GENERATION_COLORS = {
    "background": [
        "#e3f2fd",
        "#bbdefb",
        "#90caf9",
        "#64b5f6",
        "#42a5f5",
        "#2196f3",
        "#1e88e5",
    ],
    "border": [
        "#1565c0",
        "#1976d2",
        "#0288d1",
        "#0277bd",
        "#01579b",
        "#004d40",
        "#00695c",
    ],
}

GENERATION_LABELS = [
    "Level 0 (Root/Ancestors)",
    "Level 1",
    "Level 2",
    "Level 3",
    "Level 4",
    "Level 5",
    "Level 6+",
]

MARITAL_STATUS_COLORS = {
    "married": {"background": "#fff3e0", "border": "#ff9800", "label": "Married"},
    "divorced": {"background": "#ffebee", "border": "#d32f2f", "label": "Divorced"},
    "widowed": {"background": "#f5f5f5", "border": "#757575", "label": "Widowed"},
    "single": {"background": "#ffffff", "border": "#1976d2", "label": "Single (No Spouse)"},
}

# Keys used by the web front end's tree configuration
_CAMEL_CASE_KEYS = {
    "nodeWidth": "node_width",
    "nodeHeight": "node_height",
    "levelSpacing": "level_spacing",
    "siblingSpacing": "sibling_spacing",
    "spouseSpacing": "spouse_spacing",
    "familyUnitGap": "family_unit_gap",
    "padding": "padding",
    "radialInnerRadius": "radial_inner_radius",
    "separateOverlaps": "separate_overlaps",
}


@dataclass(frozen=True)
class LayoutConfig:
    node_width: float = 160
    node_height: float = 80
    level_spacing: float = 200
    sibling_spacing: float = 50
    spouse_spacing: float = 120
    family_unit_gap: float = 100
    padding: float = 150
    radial_inner_radius: float = 0
    separate_overlaps: bool = True

    @property
    def node_size(self) -> float:
        """Extent of one person box along the primary axis."""
        return self.node_width

    @property
    def sibling_step(self) -> float:
        return self.node_size + self.sibling_spacing

    @property
    def spouse_step(self) -> float:
        return self.node_size + self.spouse_spacing

    @property
    def unit_step(self) -> float:
        """Distance from the last box on a level to a newly started family group."""
        return self.node_size + self.family_unit_gap

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "LayoutConfig":
        """
        Build a config from a mapping of overrides.

        Accepts snake_case field names or the camelCase names of the front-end
        tree configuration. Unknown keys are ignored.

        Raises:
            ValueError: if a numeric parameter is not a number
        """
        known = {f.name: f for f in fields(cls)}
        values: dict[str, Any] = {}
        for key, value in mapping.items():
            name = _CAMEL_CASE_KEYS.get(key, key)
            if name not in known:
                continue
            if name == "separate_overlaps":
                values[name] = bool(value)
                continue
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"Layout parameter {key!r} must be a number, got {value!r}")
            values[name] = value
        return cls(**values)


def load_config(path: Path) -> LayoutConfig:
    """Read a JSON file of layout overrides."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"Layout config in {path} must be a JSON object")
    return LayoutConfig.from_mapping(data)


def get_generation_color(level: int) -> dict[str, str]:
    """Background and border colours for a generation level (clamped to 6+)."""
    index = min(max(level, 0), len(GENERATION_COLORS["background"]) - 1)
    return {
        "background": GENERATION_COLORS["background"][index],
        "border": GENERATION_COLORS["border"][index],
    }


def get_generation_label(level: int) -> str:
    return GENERATION_LABELS[min(max(level, 0), len(GENERATION_LABELS) - 1)]


def get_marital_status_color(status: str | None) -> dict[str, str]:
    return MARITAL_STATUS_COLORS.get(status or "single", MARITAL_STATUS_COLORS["single"])
