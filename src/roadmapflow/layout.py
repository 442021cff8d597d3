"""
Group layout for roadmap plans.

Each Epic and the Features it owns are positioned as one group: the Epic sits
in the left column, its Features are stacked in the right column, and the two
are vertically centered on each other. Groups are placed top to bottom with a
running cursor. Features whose Epic cannot be resolved (orphans) are placed
below everything else.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from .models import Epic, Feature, NodeKind, PlanGraph, PositionedNode
from .sizing import BASE_FEATURE_HEIGHT, estimate_height, js_round

logger = logging.getLogger(__name__)

EPIC_X = 100
FEATURE_X_OFFSET = 560
NODE_WIDTH = 500
START_Y = 100

MIN_FEATURE_SPACING = 0
MAX_FEATURE_SPACING = 110
FALLBACK_FEATURE_SPACING = 80

MIN_GROUP_GAP = 40
GROUP_GAP_RATIO = 0.15


@dataclass
class EpicGroup:
    """An Epic together with the Features that will be stacked beside it."""

    epic: Epic
    features: List[Feature] = field(default_factory=list)


@dataclass
class FeatureAssignment:
    """
    Features grouped by owning Epic.

    Attributes:
        groups: One EpicGroup per Epic, in stable position order.
        orphans: Features whose owning Epic does not exist, in discovery order.
    """

    groups: List[EpicGroup] = field(default_factory=list)
    orphans: List[Feature] = field(default_factory=list)

    def ordered_features(self) -> List[Feature]:
        """Features in the order their nodes are emitted by place_all."""
        features = [f for group in self.groups for f in group.features]
        features.extend(self.orphans)
        return features


@dataclass
class GroupPlacement:
    """
    Outcome of placing one group.

    Attributes:
        nodes: Positioned Epic followed by its Features (or orphans only).
        next_y: Vertical cursor for the next group.
        group_height: Height reserved for the group.
        spacing: Vertical spacing used between stacked Features.
    """

    nodes: List[PositionedNode] = field(default_factory=list)
    next_y: float = 0
    group_height: float = 0
    spacing: int = 0


def sort_epics(epics: List[Epic]) -> List[Epic]:
    """Stable sort on position; ties keep plan order."""
    return sorted(epics, key=lambda epic: epic.position)


def assign_features(plan: PlanGraph) -> FeatureAssignment:
    """
    Resolve every Feature in the plan to its owning Epic.

    A Feature listed under an Epic stays there unless its epic_id names a
    different Epic. Re-routed and unassigned Features go to the first Epic
    (in position order) carrying the named id, after that Epic's own
    Features; when no such Epic exists they become orphans.
    """
    groups = [EpicGroup(epic=epic) for epic in sort_epics(plan.epics)]

    owner_index: Dict[str, int] = {}
    for index, group in enumerate(groups):
        if group.epic.id in owner_index:
            logger.warning("Duplicate epic id %r in plan", group.epic.id)
            continue
        owner_index[group.epic.id] = index

    rerouted: List[Feature] = []
    for group in groups:
        for feature in group.epic.features:
            if feature.epic_id in (None, "", group.epic.id):
                group.features.append(feature)
            else:
                rerouted.append(feature)
    rerouted.extend(plan.unassigned_features)

    assignment = FeatureAssignment(groups=groups)
    for feature in rerouted:
        index = owner_index.get(feature.epic_id)
        if index is None:
            logger.warning(
                "Feature %r references unknown epic %r; placing as orphan",
                feature.id,
                feature.epic_id,
            )
            assignment.orphans.append(feature)
        else:
            groups[index].features.append(feature)

    return assignment


class GroupLayoutPlanner:
    """
    Positions Epic groups and orphan Features on the canvas.

    Attributes:
        epic_x: Left edge of the Epic column.
        feature_x_offset: Distance from the Epic column to the Feature column.
        node_width: Width of Epic and Feature cards.
    """

    def __init__(
        self,
        epic_x: float = EPIC_X,
        feature_x_offset: float = FEATURE_X_OFFSET,
        node_width: float = NODE_WIDTH,
    ):
        if node_width <= 0:
            raise ValueError("node_width must be positive")
        self.epic_x = epic_x
        self.feature_x_offset = feature_x_offset
        self.node_width = node_width

    @property
    def feature_x(self) -> float:
        return self.epic_x + self.feature_x_offset

    def feature_spacing(self, feature_heights: List[int]) -> int:
        """
        Vertical gap between stacked Features.

        Grows with the average Feature height so that tall cards get more
        breathing room; a single Feature needs no spacing.
        """
        if len(feature_heights) <= 1:
            return 0
        average = sum(feature_heights) / len(feature_heights)
        spacing = js_round(average * 0.32 + 14)
        return min(MAX_FEATURE_SPACING, max(MIN_FEATURE_SPACING, spacing))

    def place_group(
        self, epic: Epic, features: List[Feature], current_y: float
    ) -> GroupPlacement:
        """
        Position one Epic and its Features as a vertically centered group.

        Args:
            epic: The Epic to place.
            features: Features owned by the Epic, in stacking order.
            current_y: Top of the free vertical space.

        Returns:
            GroupPlacement with the positioned nodes and the next cursor.
        """
        epic_height = estimate_height(epic.description, NodeKind.EPIC)
        feature_heights = [
            estimate_height(feature.description, NodeKind.FEATURE)
            for feature in features
        ]
        spacing = self.feature_spacing(feature_heights)

        if feature_heights:
            total_feature_height = sum(feature_heights) + spacing * (
                len(feature_heights) - 1
            )
        else:
            total_feature_height = 0

        group_height = max(epic_height, total_feature_height)
        group_gap = max(MIN_GROUP_GAP, js_round(group_height * GROUP_GAP_RATIO))
        epic_center_y = current_y + group_height / 2

        nodes = [
            PositionedNode(
                id=epic.id,
                kind=NodeKind.EPIC,
                x=self.epic_x,
                y=epic_center_y - epic_height / 2,
                width=self.node_width,
                height=epic_height,
                status=epic.status,
            )
        ]

        feature_top_y = epic_center_y - total_feature_height / 2
        for feature, height in zip(features, feature_heights):
            nodes.append(
                PositionedNode(
                    id=feature.id,
                    kind=NodeKind.FEATURE,
                    x=self.feature_x,
                    y=feature_top_y,
                    width=self.node_width,
                    height=height,
                    parent_id=epic.id,
                    status=feature.status,
                )
            )
            feature_top_y += height + spacing

        logger.debug(
            "Placed epic %r with %d features: group_height=%s spacing=%s",
            epic.id,
            len(features),
            group_height,
            spacing,
        )

        return GroupPlacement(
            nodes=nodes,
            next_y=current_y + group_height + group_gap,
            group_height=group_height,
            spacing=spacing,
        )

    def place_orphans(
        self, features: List[Feature], current_y: float
    ) -> GroupPlacement:
        """
        Place Features without a resolvable Epic below all other content.

        Orphans get the base Feature height and a fixed spacing, stacked in
        the Feature column.
        """
        nodes = []
        y = current_y
        for feature in features:
            nodes.append(
                PositionedNode(
                    id=feature.id,
                    kind=NodeKind.FEATURE,
                    x=self.feature_x,
                    y=y,
                    width=self.node_width,
                    height=BASE_FEATURE_HEIGHT,
                    status=feature.status,
                    orphan=True,
                )
            )
            y += BASE_FEATURE_HEIGHT + FALLBACK_FEATURE_SPACING

        return GroupPlacement(
            nodes=nodes,
            next_y=y,
            group_height=y - current_y,
            spacing=FALLBACK_FEATURE_SPACING,
        )

    def place_all(
        self, assignment: FeatureAssignment, start_y: float = START_Y
    ) -> Tuple[List[PositionedNode], float]:
        """
        Place every group, then the orphans.

        Returns:
            (nodes, next_y): Epic nodes first, then Feature nodes (group order,
            then orphans), and the cursor after the last placed item.
        """
        epic_nodes: List[PositionedNode] = []
        feature_nodes: List[PositionedNode] = []
        current_y = start_y

        for group in assignment.groups:
            placement = self.place_group(group.epic, group.features, current_y)
            epic_nodes.append(placement.nodes[0])
            feature_nodes.extend(placement.nodes[1:])
            current_y = placement.next_y

        if assignment.orphans:
            placement = self.place_orphans(assignment.orphans, current_y)
            feature_nodes.extend(placement.nodes)
            current_y = placement.next_y

        return epic_nodes + feature_nodes, current_y
