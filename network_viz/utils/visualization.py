"""Visualization utilities for network simulation.

This module draws frames of a running simulation: links, nodes (routers and
endpoints with different markers) and packets in flight.
"""

import os
from typing import Optional, Sequence, Tuple

import matplotlib.pyplot as plt
import networkx as nx
import numpy as np
from matplotlib.collections import LineCollection

from network_viz.core.enums import NodeKind
from network_viz.core.simulator import Frame, NetworkSimulator

NODE_STYLE = {
    NodeKind.ROUTER: {"node_shape": "o", "node_color": "lightblue"},
    NodeKind.ENDPOINT: {"node_shape": "s", "node_color": "lightgreen"},
}


def draw_frame(
    frame: Frame,
    ax: Optional[plt.Axes] = None,
    size: Tuple[int, int] = (800, 600),
    flags: Sequence[str] = (),
) -> plt.Axes:
    """Draw one simulation frame.

    Args:
        frame: Frame captured from the simulator.
        ax: Axes to draw on; a new figure is created if None.
        size: Canvas size in simulation units, as (width, height).
        flags: Names of the active policy flags, shown in the header.

    Returns:
        The axes drawn on.
    """
    if ax is None:
        _, ax = plt.subplots(figsize=(size[0] / 100, size[1] / 100))

    if frame.segments:
        ax.add_collection(LineCollection(frame.segments, colors="black", linewidths=1, zorder=1))

    graph = nx.Graph()
    pos = {}
    for node_id, kind, position in frame.nodes:
        graph.add_node(node_id, kind=kind)
        pos[node_id] = position

    for kind, style in NODE_STYLE.items():
        nodelist = [n for n, data in graph.nodes(data=True) if data["kind"] is kind]
        if nodelist:
            nx.draw_networkx_nodes(graph, pos, nodelist=nodelist, ax=ax, node_size=500, **style)
    nx.draw_networkx_labels(graph, pos, ax=ax, font_size=9, font_color="red")

    if frame.packets:
        points = np.array([p for p, _ in frame.packets])
        ax.scatter(points[:, 0], points[:, 1], s=80, c="orange", edgecolors="black", zorder=3)

    header = f"tick {frame.tick}  PACKETS: {frame.packets_in_flight}"
    if flags:
        header += "  " + " ".join(flag.upper() for flag in flags)
    ax.set_title(header, loc="left", color="red", fontsize=10)

    ax.set_xlim(0, size[0])
    ax.set_ylim(size[1], 0)
    ax.set_aspect("equal")
    ax.axis("off")
    return ax


def save_frame(
    simulator: NetworkSimulator,
    filename: str,
    flags: Sequence[str] = (),
    size: Tuple[int, int] = (800, 600),
) -> None:
    """Render the simulator's current state to an image file.

    Args:
        simulator: NetworkSimulator instance.
        filename: Output filename.
        flags: Names of the active policy flags.
        size: Canvas size in simulation units.
    """
    directory = os.path.dirname(filename)
    if directory:
        os.makedirs(directory, exist_ok=True)

    ax = draw_frame(simulator.frame(), size=size, flags=flags)
    fig = ax.get_figure()
    fig.tight_layout()
    fig.savefig(filename)
    plt.close(fig)


class FrameRecorder:
    """Frame callback saving every Nth tick to a directory.

    Attributes:
        output_dir: Directory the PNG files are written to.
        every: Save one frame out of this many.
        saved: Paths written so far.
    """

    def __init__(self, output_dir: str, every: int = 1, flags: Sequence[str] = ()) -> None:
        if every < 1:
            raise ValueError("every must be at least 1")
        self.output_dir = output_dir
        self.every = every
        self.flags = list(flags)
        self.saved = []

    def __call__(self, simulator: NetworkSimulator) -> None:
        if simulator.tick % self.every:
            return
        filename = os.path.join(self.output_dir, f"frame_{simulator.tick:06d}.png")
        save_frame(simulator, filename, flags=self.flags)
        self.saved.append(filename)
