"""Tests for the command line entry point."""

import json

import pytest

from conftest import node, parent
from kinlayout.database import create_database, store_snapshot
from kinlayout.main import build_parser, main


@pytest.fixture
def snapshot_file(tmp_path, nuclear_family):
    nodes, edges = nuclear_family
    path = tmp_path / "tree.json"
    path.write_text(json.dumps({"nodes": nodes, "edges": edges}))
    return path


def test_positions_to_stdout(snapshot_file, capsys):
    assert main([str(snapshot_file)]) == 0

    captured = capsys.readouterr()
    document = json.loads(captured.out)
    assert document["view"] == "vertical"
    assert document["positions"]["C1"]["x"] == 325
    assert document["positions"]["C1"]["level"] == 1
    assert "Found 4 persons and 5 relationships" in captured.err
    assert "No validation issues found" in captured.err
    assert "Done!" in captured.err


def test_positions_to_file_with_radial_view(snapshot_file, tmp_path):
    out = tmp_path / "positions.json"

    assert main([str(snapshot_file), "--view", "radial", "-o", str(out)]) == 0

    positions = json.loads(out.read_text())["positions"]
    assert positions["R"]["angle"] == 0
    assert positions["C2"]["radius"] == 200


def test_config_overrides(snapshot_file, tmp_path, capsys):
    config = tmp_path / "layout.json"
    config.write_text(json.dumps({"padding": 0}))

    assert main([str(snapshot_file), "--config", str(config)]) == 0

    positions = json.loads(capsys.readouterr().out)["positions"]
    assert positions["R"]["x"] == 0


def test_sqlite_input_with_family_filter(tmp_path, nuclear_family, capsys):
    db = tmp_path / "family.db"
    conn = create_database(db)
    store_snapshot(conn, *nuclear_family, family_id="f1")
    store_snapshot(conn, [node("Z")], [], family_id="f2")
    conn.close()

    assert main([str(db), "--family-id", "f1"]) == 0

    positions = json.loads(capsys.readouterr().out)["positions"]
    assert sorted(positions) == ["C1", "C2", "M", "R"]


def test_validation_warnings_are_reported(tmp_path, capsys):
    path = tmp_path / "cycle.json"
    edges = [parent("X", "Y"), parent("Y", "X")]
    path.write_text(json.dumps({"nodes": [node("X"), node("Y")], "edges": edges}))

    assert main([str(path)]) == 0
    assert "Found 1 validation warnings" in capsys.readouterr().err


def test_dot_and_plot_outputs(snapshot_file, tmp_path):
    dot = tmp_path / "tree.gv"
    plot = tmp_path / "tree.png"

    assert main([str(snapshot_file), "--dot", str(dot), "--plot", str(plot), "-o", str(tmp_path / "p.json")]) == 0

    assert dot.read_text().startswith("digraph family_tree")
    assert plot.exists()


@pytest.mark.parametrize(
    "content, suffix",
    [("{not json", ".json"), ("[1, 2]", ".json")],
)
def test_bad_input_returns_error(tmp_path, capsys, content, suffix):
    path = tmp_path / f"bad{suffix}"
    path.write_text(content)

    assert main([str(path)]) == 1
    assert "Error:" in capsys.readouterr().err


def test_missing_files_return_error(tmp_path, capsys):
    assert main([str(tmp_path / "missing.json")]) == 1
    assert main([str(tmp_path / "missing.db")]) == 1
    assert "Database not found" in capsys.readouterr().err


def test_parser_rejects_unknown_view():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["tree.json", "--view", "spiral"])
