"""Data classes for family tree layout entities."""

from dataclasses import dataclass, field
from typing import Any

# Edge types as they appear in graph snapshots
PARENT = "parent"
SPOUSE = "spouse"

# Marital statuses carried on spouse edges
MARRIED = "married"
DIVORCED = "divorced"
WIDOWED = "widowed"
MARITAL_STATUSES = (MARRIED, DIVORCED, WIDOWED)

FEMALE_GENDERS = frozenset({"female", "f"})


def is_female(gender: str | None) -> bool:
    """Return True for the gender spellings treated as female ("female", "F")."""
    if not gender:
        return False
    return str(gender).strip().lower() in FEMALE_GENDERS


@dataclass(frozen=True)
class Person:
    id: str
    name: str
    gender: str | None = None
    birth_date: str | None = None  # ISO format YYYY-MM-DD or None
    death_date: str | None = None  # ISO format YYYY-MM-DD or None
    data: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)


@dataclass(frozen=True)
class ParentEdge:
    parent_id: str
    child_id: str


@dataclass(frozen=True)
class SpouseEdge:
    person_a: str
    person_b: str
    marital_status: str = MARRIED


@dataclass(frozen=True)
class FamilyUnit:
    anchor_id: str
    member_ids: tuple[str, ...]

    def __contains__(self, person_id: object) -> bool:
        return person_id in self.member_ids

    def __len__(self) -> int:
        return len(self.member_ids)


@dataclass(frozen=True)
class Position:
    person_id: str
    x: float
    y: float
    level: int

    def as_dict(self) -> dict[str, float | int]:
        return {"x": self.x, "y": self.y, "level": self.level}
