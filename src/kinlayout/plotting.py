"""Drawing computed layouts: matplotlib figures and Graphviz documents with pinned positions."""

import logging
from pathlib import Path

import graphviz
import matplotlib.pyplot as plt
from matplotlib.patches import FancyBboxPatch, Patch

from kinlayout.config import (
    DEFAULT_VIEW_TYPE,
    get_generation_color,
    get_generation_label,
    get_marital_status_color,
)
from kinlayout.engine import LayoutResult
from kinlayout.models import DIVORCED, WIDOWED
from kinlayout.views import project

logger = logging.getLogger(__name__)

PARENT_EDGE_COLOR = "#424242"
LINE_STYLES = {DIVORCED: "--", WIDOWED: ":"}
DOT_STYLES = {DIVORCED: "dashed", WIDOWED: "dotted"}
RENDER_FORMATS = ("png", "svg", "pdf")


def _label(name: str, max_chars: int = 20) -> str:
    """Wrap a name onto at most two lines of `max_chars`."""
    lines: list[str] = []
    current = ""
    for word in name.split():
        if len(current) + len(word) < max_chars:
            current = f"{current} {word}".strip()
        else:
            if current:
                lines.append(current)
            current = word
    if current:
        lines.append(current)
    lines = lines[:2] or [name[:max_chars]]
    return "\n".join(line if len(line) <= max_chars else line[: max_chars - 3] + "..." for line in lines)


def plot_layout(result: LayoutResult, view: str = DEFAULT_VIEW_TYPE, output_path: Path | None = None):
    """
    Draw a computed layout with matplotlib.

    Boxes are coloured by generation, parent-child links are grey and spouse
    links take the marital status colour (dashed when divorced, dotted when
    widowed).

    Args:
        result: A computed layout
        view: "vertical", "horizontal" or "radial"
        output_path: Path to save the image. If None, displays interactively.

    Returns:
        The matplotlib Figure
    """
    points = project(result, view)
    graph = result.graph
    config = result.config

    if points:
        xs = [p.x for p in points.values()]
        ys = [p.y for p in points.values()]
        width = max(xs) - min(xs) + 2 * config.padding
        height = max(ys) - min(ys) + 2 * config.padding
    else:
        xs, ys, width, height = [0.0], [0.0], 800.0, 600.0

    fig, ax = plt.subplots(figsize=(min(max(width / 100, 6), 60), min(max(height / 100, 4), 60)))

    for edge in graph.parent_edges():
        a, b = points[edge.parent_id], points[edge.child_id]
        ax.plot([a.x, b.x], [a.y, b.y], color=PARENT_EDGE_COLOR, linewidth=1.2, alpha=0.6, zorder=1)

    for edge in graph.spouse_edges():
        status = edge.marital_status
        a, b = points[edge.person_a], points[edge.person_b]
        ax.plot(
            [a.x, b.x],
            [a.y, b.y],
            color=get_marital_status_color(status)["border"],
            linestyle=LINE_STYLES.get(status, "-"),
            linewidth=2,
            zorder=2,
        )

    for pid, point in points.items():
        colors = get_generation_color(point.level)
        ax.add_patch(
            FancyBboxPatch(
                (point.x - config.node_width / 2, point.y - config.node_height / 2),
                config.node_width,
                config.node_height,
                boxstyle="round,pad=0,rounding_size=10",
                facecolor=colors["background"],
                edgecolor=colors["border"],
                linewidth=1.5,
                zorder=3,
            )
        )
        ax.text(point.x, point.y, _label(graph.persons[pid].name), ha="center", va="center", fontsize=6, zorder=4)

    legend = {}
    for level in sorted({p.level for p in points.values()}):
        label = get_generation_label(level)
        colors = get_generation_color(level)
        legend.setdefault(label, Patch(facecolor=colors["background"], edgecolor=colors["border"], label=label))
    if legend:
        ax.legend(handles=list(legend.values()), loc="upper right", fontsize=7, frameon=False)

    ax.set_xlim(min(xs) - config.padding, max(xs) + config.padding)
    # Screen coordinates grow downwards
    ax.set_ylim(max(ys) + config.padding, min(ys) - config.padding)
    ax.set_aspect("equal")
    ax.axis("off")
    ax.set_title(f"Family Tree ({len(points)} people, {result.max_level + 1} generations)")
    fig.tight_layout()

    if output_path:
        fig.savefig(output_path, dpi=150, bbox_inches="tight")
        plt.close(fig)
        logger.info("Layout plot saved to %s", output_path)
    else:
        plt.show()
    return fig


def layout_to_dot(result: LayoutResult, view: str = DEFAULT_VIEW_TYPE) -> graphviz.Digraph:
    """
    Build a Graphviz document with every person pinned at its computed position.

    Render it with `neato -n` (or `render_dot`) to keep the layout intact.
    """
    points = project(result, view)
    graph = result.graph
    config = result.config

    dot = graphviz.Digraph("family_tree", engine="neato")
    dot.attr(splines="true", inputscale="72", overlap="true")
    dot.attr(
        "node",
        shape="box",
        style="rounded,filled",
        fontsize="10",
        width=f"{config.node_width / 72:.2f}",
        height=f"{config.node_height / 72:.2f}",
        fixedsize="true",
    )

    for pid, point in points.items():
        colors = get_generation_color(point.level)
        dot.node(
            pid,
            label=_label(graph.persons[pid].name),
            # Graphviz y grows upwards
            pos=f"{point.x:.1f},{-point.y:.1f}!",
            fillcolor=colors["background"],
            color=colors["border"],
        )

    for edge in graph.parent_edges():
        dot.edge(edge.parent_id, edge.child_id, color=PARENT_EDGE_COLOR)

    for edge in graph.spouse_edges():
        status = edge.marital_status
        dot.edge(
            edge.person_a,
            edge.person_b,
            dir="none",
            color=get_marital_status_color(status)["border"],
            style=DOT_STYLES.get(status, "solid"),
            penwidth="2",
        )

    return dot


def write_dot(result: LayoutResult, output_path: Path, view: str = DEFAULT_VIEW_TYPE) -> Path:
    """Save the DOT source of a layout; needs no Graphviz installation."""
    dot = layout_to_dot(result, view)
    dot.save(str(output_path))
    logger.info("DOT source saved to %s", output_path)
    return Path(output_path)


def render_dot(result: LayoutResult, output_path: Path, view: str = DEFAULT_VIEW_TYPE) -> Path:
    """Render a layout through the Graphviz binaries; format follows the file extension."""
    output_path = Path(output_path)
    fmt = output_path.suffix.lower().lstrip(".")
    if fmt not in RENDER_FORMATS:
        fmt = "png"
    dot = layout_to_dot(result, view)
    dot.render(outfile=str(output_path), format=fmt, cleanup=True)
    logger.info("Graph saved to %s", output_path)
    return output_path
