"""
roadmapflow - Roadmap Layout Engine

Turns a hierarchical roadmap plan (Epics -> Features -> Tasks) into positioned
nodes, connectors and viewport bounds for an infinite 2D canvas.

Example:
    >>> from roadmapflow import Epic, Feature, PlanGraph, compute_layout
    >>> plan = PlanGraph(epics=[
    ...     Epic(id="e1", features=[Feature(id="f1"), Feature(id="f2")]),
    ... ])
    >>> result = compute_layout(plan)
    >>> [node.id for node in result.nodes]
    ['e1', 'f1', 'f2']

Debug Mode Example:
    >>> engine = RoadmapLayoutEngine()
    >>> result = engine.layout(plan, debug=True)
    >>> print(engine.get_trace().summary())
"""

from .connectors import ConnectorBuilder, connector_color
from .engine import (
    BoundNode,
    LayoutMemo,
    RoadmapLayoutEngine,
    attach_callbacks,
    compute_layout,
)
from .layout import GroupLayoutPlanner, GroupPlacement, assign_features
from .loader import PlanLoadError, plan_from_dict
from .minimap import MinimapNodeSynthesizer, marker_colors, minimap_node_color
from .models import (
    DEFAULT_CANVAS_CONFIG,
    CanvasConfig,
    Connector,
    Epic,
    Feature,
    LayoutResult,
    NodeKind,
    PlanGraph,
    PositionedNode,
    Task,
)
from .png_renderer import PreviewRenderer, render_preview
from .progress import (
    calculate_feature_progress,
    completed_task_count,
    effective_progress,
)
from .sizing import estimate_height
from .tracer import LayoutTrace, PipelineStage
from .validation import LayoutIssue, validate_layout
from .viewport import DEFAULT_VIEWPORT_BOUNDS, ViewportBoundsCalculator

__version__ = "0.1.0"

__all__ = [
    # Main API
    "RoadmapLayoutEngine",
    "compute_layout",
    "LayoutMemo",
    "attach_callbacks",
    "BoundNode",
    # Models
    "PlanGraph",
    "Epic",
    "Feature",
    "Task",
    "NodeKind",
    "PositionedNode",
    "Connector",
    "LayoutResult",
    "CanvasConfig",
    "DEFAULT_CANVAS_CONFIG",
    # Loading
    "plan_from_dict",
    "PlanLoadError",
    # Components
    "estimate_height",
    "GroupLayoutPlanner",
    "GroupPlacement",
    "assign_features",
    "ConnectorBuilder",
    "connector_color",
    "MinimapNodeSynthesizer",
    "marker_colors",
    "minimap_node_color",
    "ViewportBoundsCalculator",
    "DEFAULT_VIEWPORT_BOUNDS",
    # Progress
    "calculate_feature_progress",
    "completed_task_count",
    "effective_progress",
    # Preview
    "PreviewRenderer",
    "render_preview",
    # Debug/Validation
    "LayoutTrace",
    "PipelineStage",
    "LayoutIssue",
    "validate_layout",
]
