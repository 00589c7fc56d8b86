"""SQLite storage of persons and relationships, served back as graph snapshots."""

from collections.abc import Iterable, Mapping
from pathlib import Path
import sqlite3
from typing import Any

from kinlayout.parsing import Snapshot

PERSON_COLUMNS = ("full_name", "gender", "date_of_birth", "date_of_death")


def create_database(db_path: Path | str) -> sqlite3.Connection:
    """Create SQLite database with persons and relationships tables."""
    conn = sqlite3.connect(db_path)
    cursor = conn.cursor()

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS persons (
            person_id TEXT PRIMARY KEY,
            family_id TEXT,
            full_name TEXT NOT NULL,
            gender TEXT,
            date_of_birth TEXT,
            date_of_death TEXT
        )
    """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS relationships (
            relationship_id INTEGER PRIMARY KEY AUTOINCREMENT,
            person1_id TEXT NOT NULL,
            person2_id TEXT NOT NULL,
            relationship_type TEXT NOT NULL,
            marital_status TEXT,
            FOREIGN KEY (person1_id) REFERENCES persons(person_id),
            FOREIGN KEY (person2_id) REFERENCES persons(person_id)
        )
    """)

    conn.commit()
    return conn


def store_snapshot(
    conn: sqlite3.Connection,
    nodes: Iterable[Mapping[str, Any]],
    edges: Iterable[Mapping[str, Any]],
    family_id: str | None = None,
):
    """
    Insert the persons and relationships of a graph snapshot.

    Records without an id or without both endpoints are not stored.
    """
    cursor = conn.cursor()

    person_rows = []
    for node in nodes:
        if node.get("id") is None:
            continue
        data = node.get("data") or {}
        person_rows.append(
            (
                str(node["id"]),
                family_id,
                data.get("full_name") or "Unknown",
                data.get("gender"),
                data.get("date_of_birth"),
                data.get("date_of_death"),
            )
        )
    cursor.executemany(
        """
        INSERT OR REPLACE INTO persons
        (person_id, family_id, full_name, gender, date_of_birth, date_of_death)
        VALUES (?, ?, ?, ?, ?, ?)
        """,
        person_rows,
    )

    cursor.executemany(
        """
        INSERT INTO relationships (person1_id, person2_id, relationship_type, marital_status)
        VALUES (?, ?, ?, ?)
        """,
        [
            (str(e["source"]), str(e["target"]), e.get("type"), e.get("marital_status"))
            for e in edges
            if e.get("source") is not None and e.get("target") is not None and e.get("type")
        ],
    )

    conn.commit()


def load_snapshot(conn: sqlite3.Connection, family_id: str | None = None) -> Snapshot:
    """
    Read a graph snapshot, optionally limited to one family.

    Persons come back oldest first with unknown birth dates last, and only
    relationships whose two persons are both in the family are returned.
    """
    cursor = conn.cursor()
    where = "" if family_id is None else "WHERE family_id = ?"
    params: tuple = () if family_id is None else (family_id,)

    cursor.execute(
        f"""
        SELECT person_id, {", ".join(PERSON_COLUMNS)}
        FROM persons
        {where}
        ORDER BY date_of_birth IS NULL, date_of_birth ASC, rowid ASC
        """,
        params,
    )
    nodes = []
    for row in cursor.fetchall():
        data = dict(zip(PERSON_COLUMNS, row[1:]))
        data["label"] = data["full_name"]
        nodes.append({"id": row[0], "data": data})

    join_filter = "" if family_id is None else "WHERE p1.family_id = ? AND p2.family_id = ?"
    cursor.execute(
        f"""
        SELECT r.relationship_id, r.person1_id, r.person2_id, r.relationship_type, r.marital_status
        FROM relationships r
        JOIN persons p1 ON r.person1_id = p1.person_id
        JOIN persons p2 ON r.person2_id = p2.person_id
        {join_filter}
        ORDER BY r.relationship_id
        """,
        params * 2,
    )
    edges = []
    for rel_id, person1, person2, rel_type, status in cursor.fetchall():
        edge = {"id": rel_id, "source": person1, "target": person2, "type": rel_type}
        if status:
            edge["marital_status"] = status
        edges.append(edge)

    return nodes, edges
