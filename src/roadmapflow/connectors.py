"""
Connector construction for positioned roadmap nodes.

Two connector families are derived from the node set:
- Epic -> Feature links, colored by the Feature's status.
- A dashed chain linking consecutive Epics in position order.
"""

import logging
from typing import Iterable, List

from .models import Connector, NodeKind, PositionedNode

logger = logging.getLogger(__name__)

FEATURE_STATUS_COLORS = {
    "completed": "#22c55e",  # green
    "in_progress": "#3b82f6",  # blue
    "blocked": "#ef4444",  # red
    "in_review": "#a855f7",  # purple
}
DEFAULT_CONNECTOR_COLOR = "#9ca3af"  # gray
EPIC_CHAIN_COLOR = "#9ca3af"

EPIC_RIGHT_HANDLE = "epic-right"
EPIC_TOP_HANDLE = "epic-top"
EPIC_BOTTOM_HANDLE = "epic-bottom"
FEATURE_LEFT_HANDLE = "feature-left"


def connector_color(status) -> str:
    """Connector color for a Feature status; unknown statuses are gray."""
    key = getattr(status, "value", status)
    return FEATURE_STATUS_COLORS.get(key, DEFAULT_CONNECTOR_COLOR)


class ConnectorBuilder:
    """Builds the connector list for a finished node set."""

    def build(self, nodes: Iterable[PositionedNode]) -> List[Connector]:
        """
        Build Feature connectors followed by Epic chain connectors.

        Args:
            nodes: Positioned nodes, Epics in position order and Features in
                group order. Task markers are ignored.

        Returns:
            Connectors in deterministic order.
        """
        nodes = list(nodes)
        epic_nodes = [n for n in nodes if n.kind == NodeKind.EPIC]
        feature_nodes = [n for n in nodes if n.kind == NodeKind.FEATURE]

        connectors = self.feature_connectors(feature_nodes)
        connectors.extend(self.epic_chain(epic_nodes))

        logger.debug("Built %d connectors", len(connectors))
        return connectors

    def feature_connectors(
        self, feature_nodes: List[PositionedNode]
    ) -> List[Connector]:
        """One connector per Feature that has an owning Epic."""
        connectors = []
        for node in feature_nodes:
            if node.parent_id is None:
                continue
            connectors.append(
                Connector(
                    id=f"epic-feature-{node.parent_id}-{node.id}",
                    source_id=node.parent_id,
                    source_handle=EPIC_RIGHT_HANDLE,
                    target_id=node.id,
                    target_handle=FEATURE_LEFT_HANDLE,
                    color=connector_color(node.status),
                    animated=node.status == "in_progress",
                )
            )
        return connectors

    def epic_chain(self, epic_nodes: List[PositionedNode]) -> List[Connector]:
        """Dashed connectors between consecutive Epics."""
        return [
            Connector(
                id=f"epic-chain-{source.id}-{target.id}",
                source_id=source.id,
                source_handle=EPIC_BOTTOM_HANDLE,
                target_id=target.id,
                target_handle=EPIC_TOP_HANDLE,
                color=EPIC_CHAIN_COLOR,
                animated=False,
                dashed=True,
            )
            for source, target in zip(epic_nodes, epic_nodes[1:])
        ]
