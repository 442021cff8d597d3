"""
Invariant checks for a finished layout.

Uses networkx for:
- Connector graph representation (parallel connectors allowed)
- Dangling endpoint detection
- Cycle detection on the Epic chain

Problems are reported as LayoutIssue records rather than raised; the layout
contract is total, so a violation here points at a bug or at upstream data
quality (e.g. duplicate ids), not at a failed layout.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Optional

import networkx as nx

from .models import LayoutResult, NodeKind, PositionedNode
from .sizing import height_range
from .viewport import ViewportBoundsCalculator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LayoutIssue:
    """
    A single invariant violation.

    Attributes:
        code: Machine-readable category ("height_clamp", "sibling_overlap",
            "outside_viewport", "dangling_connector", "chain_cycle").
        message: Human-readable description.
        node_id: Offending node or connector id, if any.
    """

    code: str
    message: str
    node_id: Optional[str] = None


def build_connector_graph(result: LayoutResult) -> nx.MultiDiGraph:
    """Node ids as graph nodes, connectors as keyed edges."""
    graph = nx.MultiDiGraph()
    for node in result.nodes:
        graph.add_node(node.id, kind=node.kind)
    for connector in result.connectors:
        graph.add_edge(
            connector.source_id,
            connector.target_id,
            key=connector.id,
            dashed=connector.dashed,
        )
    return graph


def check_heights(result: LayoutResult) -> List[LayoutIssue]:
    issues = []
    for node in result.nodes:
        if node.kind == NodeKind.TASK_MARKER:
            continue
        base, maximum = height_range(node.kind)
        if not base <= node.height <= maximum:
            issues.append(
                LayoutIssue(
                    "height_clamp",
                    f"{node.kind.value} height {node.height} outside "
                    f"[{base}, {maximum}]",
                    node.id,
                )
            )
    return issues


def check_sibling_overlap(result: LayoutResult) -> List[LayoutIssue]:
    """Consecutive Features under the same Epic must not intersect."""
    siblings: Dict[str, List[PositionedNode]] = defaultdict(list)
    for node in result.features():
        if node.parent_id is not None:
            siblings[node.parent_id].append(node)

    issues = []
    for parent_id, nodes in siblings.items():
        for upper, lower in zip(nodes, nodes[1:]):
            if lower.y < upper.y + upper.height:
                issues.append(
                    LayoutIssue(
                        "sibling_overlap",
                        f"features {upper.id!r} and {lower.id!r} under "
                        f"{parent_id!r} overlap",
                        lower.id,
                    )
                )
    return issues


def check_containment(result: LayoutResult) -> List[LayoutIssue]:
    return [
        LayoutIssue(
            "outside_viewport",
            f"node bbox {node.bbox} escapes viewport {result.viewport_bounds}",
            node.id,
        )
        for node in result.nodes
        if not ViewportBoundsCalculator.contains(result.viewport_bounds, node)
    ]


def check_connectors(result: LayoutResult) -> List[LayoutIssue]:
    """Connector endpoints must be positioned nodes; the chain must be acyclic."""
    node_ids = {node.id for node in result.nodes}
    issues = [
        LayoutIssue(
            "dangling_connector",
            f"connector endpoint {endpoint!r} is not a positioned node",
            connector.id,
        )
        for connector in result.connectors
        for endpoint in (connector.source_id, connector.target_id)
        if endpoint not in node_ids
    ]

    graph = build_connector_graph(result)
    chain = nx.MultiDiGraph()
    chain.add_edges_from(
        (u, v, key, {})
        for u, v, key, dashed in graph.edges(keys=True, data="dashed")
        if dashed
    )
    if not nx.is_directed_acyclic_graph(chain):
        cycle = nx.find_cycle(chain)
        issues.append(
            LayoutIssue(
                "chain_cycle",
                f"epic chain contains a cycle through {cycle[0][0]!r}",
                cycle[0][2] if len(cycle[0]) > 2 else None,
            )
        )
    return issues


def validate_layout(result: LayoutResult) -> List[LayoutIssue]:
    """Run every invariant check and return the combined issue list."""
    issues = (
        check_heights(result)
        + check_sibling_overlap(result)
        + check_containment(result)
        + check_connectors(result)
    )
    for issue in issues:
        logger.warning("Layout issue [%s]: %s", issue.code, issue.message)
    return issues
