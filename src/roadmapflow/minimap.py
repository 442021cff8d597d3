"""
Task marker synthesis for the overview minimap.

Task markers are small, non-interactive nodes placed in a fixed grid to the
right of each Feature card. They exist only so the overview can show task
status at a glance; they are never connected or selectable.
"""

import logging
from typing import Iterable, List, Sequence, Tuple

from .models import NodeKind, PositionedNode, Task

logger = logging.getLogger(__name__)

MAX_MARKERS_PER_FEATURE = 9
MARKER_WIDTH = 180
MARKER_HEIGHT = 32
MARKER_GAP = 8
MARKER_ROWS = 3
MARKER_X_OFFSET = 540
GRID_HEIGHT = MARKER_ROWS * MARKER_HEIGHT + (MARKER_ROWS - 1) * MARKER_GAP

# status -> (stroke, fill)
TASK_MARKER_COLORS = {
    "done": ("#047857", "#10b981"),
    "in_progress": ("#1d4ed8", "#3b82f6"),
    "in_review": ("#7e22ce", "#a855f7"),
    "blocked": ("#b91c1c", "#ef4444"),
}
DEFAULT_MARKER_COLORS = ("#6b7280", "#9ca3af")

# Overview colors for the primary nodes.
MINIMAP_NODE_COLORS = {
    NodeKind.EPIC: "#9ca3af",
    NodeKind.FEATURE: "#f59e0b",
}
DEFAULT_MINIMAP_NODE_COLOR = "#6b7280"


def marker_colors(status) -> Tuple[str, str]:
    """(stroke, fill) for a Task status; unknown statuses are gray."""
    key = getattr(status, "value", status)
    return TASK_MARKER_COLORS.get(key, DEFAULT_MARKER_COLORS)


def minimap_node_color(node: PositionedNode) -> str:
    """Overview color of a node; task markers use their status fill."""
    if node.kind == NodeKind.TASK_MARKER:
        return marker_colors(node.status)[1]
    return MINIMAP_NODE_COLORS.get(node.kind, DEFAULT_MINIMAP_NODE_COLOR)


class MinimapNodeSynthesizer:
    """
    Generates task markers beside Feature nodes.

    Attributes:
        max_markers: Number of leading Tasks per Feature that get a marker.
    """

    def __init__(self, max_markers: int = MAX_MARKERS_PER_FEATURE):
        if max_markers < 0:
            raise ValueError("max_markers must not be negative")
        self.max_markers = max_markers

    def marker_position(
        self, feature_node: PositionedNode, index: int
    ) -> Tuple[float, float]:
        """Top-left corner of the index-th marker of a Feature."""
        row = index % MARKER_ROWS
        col = index // MARKER_ROWS
        start_y = feature_node.y + feature_node.height / 2 - GRID_HEIGHT / 2
        x = feature_node.x + MARKER_X_OFFSET + col * (MARKER_WIDTH + MARKER_GAP)
        y = start_y + row * (MARKER_HEIGHT + MARKER_GAP)
        return x, y

    def markers_for(
        self, feature_node: PositionedNode, tasks: Sequence[Task]
    ) -> List[PositionedNode]:
        """Markers for the first max_markers Tasks of one Feature."""
        markers = []
        for index, task in enumerate(tasks[: self.max_markers]):
            x, y = self.marker_position(feature_node, index)
            markers.append(
                PositionedNode(
                    id=f"{feature_node.id}-task-{task.id}",
                    kind=NodeKind.TASK_MARKER,
                    x=x,
                    y=y,
                    width=MARKER_WIDTH,
                    height=MARKER_HEIGHT,
                    parent_id=feature_node.id,
                    status=task.status,
                    draggable=False,
                    selectable=False,
                    connectable=False,
                )
            )
        return markers

    def synthesize(
        self, features: Iterable[Tuple[PositionedNode, Sequence[Task]]]
    ) -> List[PositionedNode]:
        """
        Markers for every Feature, in Feature order.

        Args:
            features: (feature node, tasks) pairs.
        """
        markers: List[PositionedNode] = []
        for feature_node, tasks in features:
            if tasks:
                markers.extend(self.markers_for(feature_node, tasks))
        logger.debug("Synthesized %d task markers", len(markers))
        return markers
