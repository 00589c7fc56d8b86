"""Loading graph snapshots from JSON documents, and date normalization."""

import json
from pathlib import Path
import re
from typing import Any

Snapshot = tuple[list[dict[str, Any]], list[dict[str, Any]]]

# Month name mappings (abbreviations and full names)
MONTH_MAP = {
    "JAN": 1, "JANUARY": 1,
    "FEB": 2, "FEBRUARY": 2,
    "MAR": 3, "MARCH": 3,
    "APR": 4, "APRIL": 4,
    "MAY": 5,
    "JUN": 6, "JUNE": 6,
    "JUL": 7, "JULY": 7,
    "AUG": 8, "AUGUST": 8,
    "SEP": 9, "SEPT": 9, "SEPTEMBER": 9,
    "OCT": 10, "OCTOBER": 10,
    "NOV": 11, "NOVEMBER": 11,
    "DEC": 12, "DECEMBER": 12,
}  # fmt: skip

_QUALIFIER = re.compile(
    r"^(ABT\.?|ABOUT|BEF\.?|BEFORE|AFT\.?|AFTER|EST\.?|CAL\.?|FROM|TO|BET\.?|AND|CIRCA|CA\.?|AROUND):?\s*",
    flags=re.IGNORECASE,
)

# (pattern, order of the captured groups) for the date shapes seen in user data
_DATE_PATTERNS = [
    (re.compile(r"^(\d{4})-(\d{2})-(\d{2})$"), "ymd"),  # 1839-08-29
    (re.compile(r"^(\d{4})-(\d{2})-(\d{2})[T ]"), "ymd"),  # 1950-03-04T00:00:00.000Z
    (re.compile(r"^(\d{1,2})\s+([A-Za-z]+)\.?\s*(\d{4})$"), "dMy"),  # 25 NOV 1954, 02 May1838
    (re.compile(r"^([A-Za-z]+)\.?\s*(\d{1,2}),?\s*(\d{4})$"), "Mdy"),  # April 17, 1850
    (re.compile(r"^([A-Za-z]+)\.?,?\s*(\d{4})$"), "My"),  # NOV 1954, May, 1837
    (re.compile(r"^(\d{4})$"), "y"),  # 1698
    (re.compile(r"^(\d{1,2})[-/\s](\d{1,2})[-/\s](\d{4})$"), "mdy"),  # 01-27-1920, 04 05 1911
]


def parse_date_string(date_str: str | None) -> str | None:
    """
    Parse a GEDCOM or free-form date string into ISO format (YYYY-MM-DD).
    Returns None if the date cannot be parsed.

    Handles formats like "25 NOV 1954", "ABOUT 1905", "JAN 1905",
    "(01-27-1920)", "(02 May1838)", "(SEPT. 17,1910)" and "(1789?)".
    Missing month or day default to 1.
    """
    if not date_str:
        return None

    s = str(date_str).strip().strip("()").rstrip("?")
    s = _QUALIFIER.sub("", s).strip()
    if not s:
        return None

    for pattern, order in _DATE_PATTERNS:
        match = pattern.match(s)
        if not match:
            continue
        parts = dict(zip(order, match.groups()))
        year = int(parts["y"])
        if "M" in parts:
            month = MONTH_MAP.get(parts["M"].upper().rstrip("."))
            if month is None:
                continue
        else:
            month = int(parts.get("m", 1)) or 1
        day = int(parts.get("d", 1)) or 1
        if 1 <= month <= 12 and 1 <= day <= 31:
            return f"{year:04d}-{month:02d}-{day:02d}"
    return None


# ============================================================================
# JSON snapshots
# ============================================================================


def parse_snapshot(document: Any) -> Snapshot:
    """Split a `{nodes, edges}` document as served by the tree route."""
    if not isinstance(document, dict):
        raise ValueError("Graph snapshot must be a JSON object with 'nodes' and 'edges'")
    nodes = document.get("nodes") or []
    edges = document.get("edges") or []
    if not isinstance(nodes, list) or not isinstance(edges, list):
        raise ValueError("Graph snapshot 'nodes' and 'edges' must be lists")
    return nodes, edges


def load_snapshot_json(filepath: Path) -> Snapshot:
    with open(filepath, encoding="utf-8") as f:
        return parse_snapshot(json.load(f))

