"""
Viewport bounds for the pannable roadmap canvas.

The canvas is otherwise unbounded, so panning is clamped to a rectangle around
the laid-out content. The right-hand padding grows with the densest Feature's
task count so that its task markers and detail panels stay reachable.
"""

from typing import Iterable

from .models import PositionedNode, ViewportBounds

DEFAULT_VIEWPORT_BOUNDS: ViewportBounds = ((-1000, -400), (2400, 800))

LEFT_PADDING = 400
TOP_PADDING = 240
BOTTOM_PADDING = 720
BOUNDS_NODE_WIDTH = 520

# (minimum task count, extra right padding), densest tier first
RIGHT_PADDING_TIERS = (
    (60, 2600),
    (40, 2200),
    (20, 1800),
)
BASE_RIGHT_PADDING = 1000


def extra_right_padding(max_task_count: int) -> int:
    """Right padding tier for the largest task count on a single Feature."""
    for threshold, padding in RIGHT_PADDING_TIERS:
        if max_task_count >= threshold:
            return padding
    return BASE_RIGHT_PADDING


class ViewportBoundsCalculator:
    """Derives the pan/zoom clamp rectangle from positioned nodes."""

    def calculate(
        self, nodes: Iterable[PositionedNode], max_task_count: int = 0
    ) -> ViewportBounds:
        """
        Compute ((min_x, min_y), (max_x, max_y)) for a node set.

        Args:
            nodes: Every node the renderer will draw.
            max_task_count: Largest task count on any Feature in the plan.

        Returns:
            The clamp rectangle, or DEFAULT_VIEWPORT_BOUNDS for no nodes.
        """
        nodes = list(nodes)
        if not nodes:
            return DEFAULT_VIEWPORT_BOUNDS

        x_positions = [node.x for node in nodes]
        y_positions = [node.y for node in nodes]

        min_x = min(x_positions) - LEFT_PADDING
        min_y = min(y_positions) - TOP_PADDING
        max_y = max(y_positions) + BOTTOM_PADDING
        max_x = (
            max(x_positions)
            + BOUNDS_NODE_WIDTH
            + extra_right_padding(max_task_count)
        )

        return ((min_x, min_y), (max_x, max_y))

    @staticmethod
    def contains(bounds: ViewportBounds, node: PositionedNode) -> bool:
        """True if the node's bounding box lies inside the bounds."""
        (min_x, min_y), (max_x, max_y) = bounds
        left, top, right, bottom = node.bbox
        return min_x <= left and min_y <= top and right <= max_x and bottom <= max_y
