"""
Static radial layout for constellation nodes

The most important node sits at the centre of the canvas; the rest are placed
on concentric rings, eight per ring, at evenly spaced angles with a little
random jitter. No physics simulation is run.
"""
import math
import random
from typing import List, Optional

from constellation import config
from constellation.models import Node

MIN_RADIUS = 4
MAX_RADIUS = 12


def node_radius(importance: float) -> float:
    """Map importance from [10, 100] linearly onto a display radius in [4, 12] (unclamped)"""
    return MIN_RADIUS + (importance - 10) * (MAX_RADIUS - MIN_RADIUS) / 90


def assign_radial_layout(
    nodes: List[Node],
    width: float = config.LAYOUT_WIDTH,
    height: float = config.LAYOUT_HEIGHT,
    ring_spacing: float = config.LAYOUT_RING_SPACING,
    nodes_per_ring: int = config.LAYOUT_NODES_PER_RING,
    jitter: float = config.LAYOUT_JITTER,
    rng: Optional[random.Random] = None,
) -> List[Node]:
    """
    Assign x, y and radius to every node

    Args:
        nodes: Nodes to position (updated in place, list order is kept)
        width: Canvas width
        height: Canvas height
        ring_spacing: Distance between consecutive rings
        nodes_per_ring: Number of nodes on each ring
        jitter: Maximum total spread of the random offset on each axis
        rng: Random source for jitter (a fresh unseeded one if not given)

    Returns:
        The same nodes, for chaining
    """
    rng = rng or random.Random()
    center_x = width / 2
    center_y = height / 2

    # Stable sort: equal importance keeps search order
    ranked = sorted(nodes, key=lambda node: node.importance, reverse=True)

    for i, node in enumerate(ranked):
        node.radius = node_radius(node.importance)
        if i == 0:
            node.x = center_x
            node.y = center_y
            continue

        ring = (i - 1) // nodes_per_ring + 1
        angle = 2 * math.pi * ((i - 1) % nodes_per_ring) / nodes_per_ring
        node.x = center_x + ring * ring_spacing * math.cos(angle) + (rng.random() - 0.5) * jitter
        node.y = center_y + ring * ring_spacing * math.sin(angle) + (rng.random() - 0.5) * jitter

    return nodes
