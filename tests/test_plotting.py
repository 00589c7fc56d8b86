"""Tests for matplotlib and Graphviz rendering of layouts."""

from conftest import node
from kinlayout import compute_layout
from kinlayout.plotting import _label, layout_to_dot, plot_layout, write_dot


def test_label_wraps_long_names():
    assert _label("Ann") == "Ann"
    assert _label("Maximilian Alexander Constantine") == "Maximilian Alexander\nConstantine"
    assert _label("Bartholomew-Featherstonehaugh") == "Bartholomew-Feath..."


def test_layout_to_dot_pins_positions():
    dot = layout_to_dot(compute_layout([node("A", "Ann")], []))

    assert 'pos="150.0,-150.0!"' in dot.source
    assert "Ann" in dot.source


def test_dot_spouse_edges_are_undirected_and_styled(polygamous_family):
    source = layout_to_dot(compute_layout(*polygamous_family)).source

    assert "H -> W1" in source
    assert "dashed" in source
    assert "dir=none" in source
    assert "K1 -> G1" in source


def test_write_dot(tmp_path, nuclear_family):
    path = write_dot(compute_layout(*nuclear_family), tmp_path / "tree.dot", view="horizontal")

    text = path.read_text()
    assert text.startswith("digraph family_tree")
    assert "R -> C1" in text


def test_plot_layout_saves_an_image(tmp_path, polygamous_family):
    path = tmp_path / "tree.png"
    fig = plot_layout(compute_layout(*polygamous_family), "radial", path)

    assert path.exists()
    assert path.stat().st_size > 0
    assert "9 people, 3 generations" in fig.axes[0].get_title()


def test_plot_empty_layout(tmp_path):
    path = tmp_path / "empty.png"
    plot_layout(compute_layout([], []), output_path=path)
    assert path.exists()


def test_plot_has_a_generation_legend(tmp_path, nuclear_family):
    fig = plot_layout(compute_layout(*nuclear_family), output_path=tmp_path / "tree.svg")

    labels = [text.get_text() for text in fig.axes[0].get_legend().get_texts()]
    assert labels == ["Level 0 (Root/Ancestors)", "Level 1"]
