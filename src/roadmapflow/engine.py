"""
Main roadmap layout engine.

Combines feature assignment, group layout, connector construction, minimap
marker synthesis and viewport bounds into one pure call.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from .connectors import ConnectorBuilder
from .layout import (
    EPIC_X,
    FEATURE_X_OFFSET,
    NODE_WIDTH,
    START_Y,
    GroupLayoutPlanner,
    assign_features,
)
from .minimap import MAX_MARKERS_PER_FEATURE, MinimapNodeSynthesizer
from .models import LayoutResult, NodeKind, PlanGraph, PositionedNode
from .tracer import LayoutTrace
from .validation import validate_layout
from .viewport import ViewportBoundsCalculator

logger = logging.getLogger(__name__)


class RoadmapLayoutEngine:
    """
    Lay out a roadmap plan on an infinite 2D canvas.

    The engine holds configuration only; every call to layout() is
    independent and returns a new immutable LayoutResult.

    Example:
        >>> engine = RoadmapLayoutEngine()
        >>> result = engine.layout(plan)
        >>> result.as_dict()["viewportBounds"]
    """

    def __init__(
        self,
        epic_x: float = EPIC_X,
        feature_x_offset: float = FEATURE_X_OFFSET,
        node_width: float = NODE_WIDTH,
        start_y: float = START_Y,
        max_task_markers: int = MAX_MARKERS_PER_FEATURE,
    ):
        """
        Initialize the layout engine.

        Args:
            epic_x: Left edge of the Epic column.
            feature_x_offset: Distance from the Epic column to the Features.
            node_width: Width of Epic and Feature cards.
            start_y: Vertical cursor for the first Epic group.
            max_task_markers: Tasks per Feature shown as minimap markers.

        Raises:
            ValueError: If node_width is not positive or max_task_markers is
                negative.
        """
        self.start_y = start_y
        self.planner = GroupLayoutPlanner(
            epic_x=epic_x,
            feature_x_offset=feature_x_offset,
            node_width=node_width,
        )
        self.connector_builder = ConnectorBuilder()
        self.minimap = MinimapNodeSynthesizer(max_markers=max_task_markers)
        self.viewport = ViewportBoundsCalculator()
        self._trace: Optional[LayoutTrace] = None

    def layout(self, plan: PlanGraph, debug: bool = False) -> LayoutResult:
        """
        Compute the full layout for a plan.

        Args:
            plan: The Epic -> Feature -> Task hierarchy.
            debug: If True, record a LayoutTrace (see get_trace()) and run the
                invariant checks.

        Returns:
            LayoutResult with Epic, Feature and task marker nodes, connectors
            and the viewport bounds.
        """
        trace = LayoutTrace(fingerprint=plan.fingerprint()) if debug else None

        assignment = assign_features(plan)
        nodes, next_y = self.planner.place_all(assignment, self.start_y)

        if trace:
            trace.add_stage(
                "groups_placed",
                {
                    "epics": len(assignment.groups),
                    "features": len(nodes) - len(assignment.groups)
                    - len(assignment.orphans),
                    "cursor": next_y,
                },
            )
            trace.add_stage(
                "orphans_placed",
                {
                    "orphans": len(assignment.orphans),
                    "ids": [f.id for f in assignment.orphans],
                },
            )

        connectors = self.connector_builder.build(nodes)
        if trace:
            trace.add_stage(
                "connectors_built",
                {"connectors": len(connectors), "ids": [c.id for c in connectors]},
            )

        feature_nodes = [n for n in nodes if n.kind == NodeKind.FEATURE]
        feature_tasks = [f.tasks for f in assignment.ordered_features()]
        markers = self.minimap.synthesize(zip(feature_nodes, feature_tasks))
        all_nodes = nodes + markers
        if trace:
            trace.add_stage("markers_synthesized", {"markers": len(markers)})

        max_task_count = plan.max_task_count()
        bounds = self.viewport.calculate(all_nodes, max_task_count)
        if trace:
            trace.add_stage(
                "viewport_computed",
                {"max_task_count": max_task_count, "bounds": bounds},
            )

        result = LayoutResult(
            nodes=tuple(all_nodes),
            connectors=tuple(connectors),
            viewport_bounds=bounds,
        )

        if trace:
            issues = validate_layout(result)
            trace.add_stage(
                "validated",
                {"issues": len(issues), "codes": [i.code for i in issues]},
            )
            self._trace = trace

        logger.debug(
            "Laid out %d nodes and %d connectors", len(all_nodes), len(connectors)
        )
        return result

    def get_trace(self) -> Optional[LayoutTrace]:
        """Trace of the last layout(debug=True) call, if any."""
        return self._trace


def compute_layout(plan: PlanGraph, **kwargs) -> LayoutResult:
    """
    Convenience function to lay out a plan with a default engine.

    Args:
        plan: The plan to lay out.
        **kwargs: Additional parameters for RoadmapLayoutEngine.
    """
    return RoadmapLayoutEngine(**kwargs).layout(plan)


class LayoutMemo:
    """
    Caller-side memo keyed by the plan fingerprint.

    Holds only the most recent result: a new plan version replaces it.
    """

    def __init__(self, engine: Optional[RoadmapLayoutEngine] = None):
        self.engine = engine or RoadmapLayoutEngine()
        self._key: Optional[str] = None
        self._result: Optional[LayoutResult] = None

    def get(self, plan: PlanGraph) -> LayoutResult:
        key = plan.fingerprint()
        if key != self._key or self._result is None:
            self._result = self.engine.layout(plan)
            self._key = key
        return self._result

    def clear(self) -> None:
        self._key = None
        self._result = None


@dataclass(frozen=True)
class BoundNode:
    """A positioned node paired with caller-supplied UI callbacks."""

    node: PositionedNode
    callbacks: Mapping[str, Any]


def attach_callbacks(
    result: LayoutResult, callbacks: Dict[NodeKind, Mapping[str, Any]]
) -> List[BoundNode]:
    """
    Pair every node with the callbacks registered for its kind.

    The callbacks are passed through untouched; nothing here calls them.
    Kinds without an entry get an empty mapping.
    """
    return [
        BoundNode(node=node, callbacks=callbacks.get(node.kind, {}))
        for node in result.nodes
    ]
