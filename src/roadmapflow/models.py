"""
Data models for roadmap layout.

This module contains the dataclasses on both sides of the layout engine: the
plan hierarchy that comes in (Epics owning Features owning Tasks) and the
positioned geometry that goes out to the canvas renderer.

Classes:
    PlanGraph: Ordered Epics plus any Features delivered outside an Epic.
    Epic, Feature, Task: The plan hierarchy.
    NodeKind: Closed discriminant for positioned nodes.
    PositionedNode: A node with concrete canvas coordinates.
    Connector: A directed, colored link between two positioned nodes.
    LayoutResult: Nodes, connectors and viewport bounds of one layout run.
    CanvasConfig: Fixed pan/zoom defaults for the canvas.
"""

import hashlib
import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

# ((min_x, min_y), (max_x, max_y))
ViewportBounds = Tuple[Tuple[float, float], Tuple[float, float]]


class EpicStatus(str, Enum):
    BACKLOG = "backlog"
    PLANNED = "planned"
    IN_PROGRESS = "in_progress"
    IN_REVIEW = "in_review"
    COMPLETED = "completed"
    ON_HOLD = "on_hold"


class EpicPriority(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    NICE_TO_HAVE = "nice_to_have"


class FeatureStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    IN_REVIEW = "in_review"
    COMPLETED = "completed"
    BLOCKED = "blocked"


class TaskStatus(str, Enum):
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    IN_REVIEW = "in_review"
    DONE = "done"
    BLOCKED = "blocked"


class TaskPriority(str, Enum):
    URGENT = "urgent"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass
class Task:
    """
    Smallest unit of work. Only its status matters to the layout.

    Attributes:
        id: Task identifier.
        feature_id: Back-reference to the owning Feature.
        title: Display title.
        status: One of the TaskStatus values (unknown values are tolerated).
        priority: One of the TaskPriority values.
        position: Order key within the Feature.
    """

    id: str
    feature_id: Optional[str] = None
    title: str = ""
    status: str = TaskStatus.TODO.value
    priority: str = TaskPriority.MEDIUM.value
    position: int = 0


@dataclass
class Feature:
    """
    Work item under an Epic.

    Attributes:
        id: Feature identifier.
        epic_id: Back-reference to the owning Epic. When None, the Epic whose
            feature list contains this Feature is the owner.
        title: Display title.
        description: Rich text (HTML) description, used for size estimation.
        status: One of the FeatureStatus values.
        position: Order key within the Epic.
        is_deliverable: Whether the Feature counts toward milestone progress.
        estimated_hours: Planned effort.
        actual_hours: Spent effort.
        progress: Externally derived completion (0-100), if known.
        tasks: Ordered Tasks.
    """

    id: str
    epic_id: Optional[str] = None
    title: str = ""
    description: Optional[str] = None
    status: str = FeatureStatus.NOT_STARTED.value
    position: int = 0
    is_deliverable: bool = False
    estimated_hours: Optional[float] = None
    actual_hours: Optional[float] = None
    progress: Optional[int] = None
    tasks: List[Task] = field(default_factory=list)


@dataclass
class Epic:
    """
    Top-level unit of work in a roadmap.

    Attributes:
        id: Epic identifier.
        title: Display title.
        description: Rich text (HTML) description, used for size estimation.
        priority: One of the EpicPriority values.
        status: One of the EpicStatus values.
        position: Integer order key; Epics are laid out by a stable sort on it.
        color: Optional accent color.
        tags: Legacy free-form tags.
        labels: Label objects ({"id", "name", "color"}).
        estimated_hours: Planned effort.
        actual_hours: Spent effort.
        features: Ordered Features.
    """

    id: str
    title: str = ""
    description: Optional[str] = None
    priority: str = EpicPriority.MEDIUM.value
    status: str = EpicStatus.BACKLOG.value
    position: int = 0
    color: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    labels: List[Dict[str, str]] = field(default_factory=list)
    estimated_hours: Optional[float] = None
    actual_hours: Optional[float] = None
    features: List[Feature] = field(default_factory=list)


@dataclass
class PlanGraph:
    """
    The full Epic -> Feature -> Task hierarchy for one roadmap.

    Attributes:
        epics: Epics in delivery order (layout re-sorts them by position).
        unassigned_features: Features that arrived outside any Epic's list.
            They are positioned under the Epic named by their epic_id, or as
            orphans when that Epic does not exist.
    """

    epics: List[Epic] = field(default_factory=list)
    unassigned_features: List[Feature] = field(default_factory=list)

    def all_features(self) -> List[Feature]:
        """Every Feature in the plan, Epic lists first, then unassigned."""
        features = [f for epic in self.epics for f in epic.features]
        features.extend(self.unassigned_features)
        return features

    def max_task_count(self) -> int:
        """Largest number of Tasks on any single Feature (0 if none)."""
        return max((len(f.tasks) for f in self.all_features()), default=0)

    def fingerprint(self) -> str:
        """
        Structural hash of the layout-relevant plan content.

        Two plans with the same fingerprint produce the same layout, so the
        digest can key a caller-side memo.
        """
        canonical = {
            "epics": [
                {
                    "id": epic.id,
                    "status": epic.status,
                    "description": epic.description,
                    "position": epic.position,
                    "features": [_feature_key(f) for f in epic.features],
                }
                for epic in self.epics
            ],
            "unassigned": [_feature_key(f) for f in self.unassigned_features],
        }
        payload = json.dumps(canonical, sort_keys=True, separators=(",", ":"))
        return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def _feature_key(feature: Feature) -> Dict[str, Any]:
    return {
        "id": feature.id,
        "epic_id": feature.epic_id,
        "description": feature.description,
        "status": feature.status,
        "tasks": [[t.id, t.status] for t in feature.tasks],
    }


class NodeKind(str, Enum):
    """Closed discriminant for positioned nodes."""

    EPIC = "epic"
    FEATURE = "feature"
    TASK_MARKER = "taskMarker"


@dataclass(frozen=True)
class PositionedNode:
    """
    A node with concrete canvas coordinates.

    Attributes:
        id: Node identifier (Epic/Feature id, or a synthetic marker id).
        kind: NodeKind discriminant.
        x: Left edge in canvas units.
        y: Top edge in canvas units.
        width: Node width.
        height: Node height.
        parent_id: Owning Epic for Features, owning Feature for task markers.
        status: Status of the underlying plan item, used for coloring.
        orphan: True for Features placed by the fallback path.
        draggable: Renderer hint.
        selectable: Renderer hint.
        connectable: Renderer hint.
    """

    id: str
    kind: NodeKind
    x: float
    y: float
    width: float
    height: float
    parent_id: Optional[str] = None
    status: Optional[str] = None
    orphan: bool = False
    draggable: bool = True
    selectable: bool = True
    connectable: bool = True

    @property
    def bbox(self) -> Tuple[float, float, float, float]:
        """(left, top, right, bottom)."""
        return (self.x, self.y, self.x + self.width, self.y + self.height)

    @property
    def interactive(self) -> bool:
        return self.draggable or self.selectable or self.connectable

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "kind": self.kind.value,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "parentId": self.parent_id,
            "status": self.status,
            "orphan": self.orphan,
            "draggable": self.draggable,
            "selectable": self.selectable,
            "connectable": self.connectable,
        }


@dataclass(frozen=True)
class Connector:
    """A directed, colored link between two positioned nodes."""

    id: str
    source_id: str
    source_handle: str
    target_id: str
    target_handle: str
    color: str
    animated: bool = False
    dashed: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "sourceId": self.source_id,
            "sourceHandle": self.source_handle,
            "targetId": self.target_id,
            "targetHandle": self.target_handle,
            "color": self.color,
            "animated": self.animated,
            "dashed": self.dashed,
        }


@dataclass(frozen=True)
class LayoutResult:
    """Result of one layout run. Immutable; recomputed wholesale."""

    nodes: Tuple[PositionedNode, ...] = ()
    connectors: Tuple[Connector, ...] = ()
    viewport_bounds: ViewportBounds = ((-1000, -400), (2400, 800))

    def nodes_of_kind(self, kind: NodeKind) -> List[PositionedNode]:
        return [node for node in self.nodes if node.kind == kind]

    def epics(self) -> List[PositionedNode]:
        return self.nodes_of_kind(NodeKind.EPIC)

    def features(self) -> List[PositionedNode]:
        return self.nodes_of_kind(NodeKind.FEATURE)

    def task_markers(self) -> List[PositionedNode]:
        return self.nodes_of_kind(NodeKind.TASK_MARKER)

    def get_node(self, node_id: str) -> Optional[PositionedNode]:
        """First node with the given id, or None."""
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def as_dict(self) -> Dict[str, Any]:
        """The renderer-facing output contract."""
        (min_x, min_y), (max_x, max_y) = self.viewport_bounds
        return {
            "positionedNodes": [node.to_dict() for node in self.nodes],
            "connectors": [connector.to_dict() for connector in self.connectors],
            "viewportBounds": [[min_x, min_y], [max_x, max_y]],
        }


@dataclass(frozen=True)
class CanvasConfig:
    """
    Fixed pan/zoom defaults for the roadmap canvas.

    Attributes:
        default_zoom: Initial zoom level.
        min_zoom: Lower zoom clamp.
        max_zoom: Upper zoom clamp.
        default_viewport_x: Initial horizontal offset.
        default_viewport_y: Initial vertical offset.
        background_gap: Background grid spacing.
        background_color: Background grid color.
    """

    default_zoom: float = 0.67
    min_zoom: float = 0.4
    max_zoom: float = 1.0
    default_viewport_x: float = -50
    default_viewport_y: float = 0
    background_gap: int = 20
    background_color: str = "#e5e7eb"

    @property
    def zoom_range(self) -> Tuple[float, float]:
        return (self.min_zoom, self.max_zoom)

    def clamp_zoom(self, zoom: float) -> float:
        """Clamp a requested zoom level into the allowed range."""
        return min(self.max_zoom, max(self.min_zoom, zoom))


DEFAULT_CANVAS_CONFIG = CanvasConfig()
