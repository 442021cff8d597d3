"""
Node size estimation.

Heights are estimated from description length with a fixed characters-per-line
heuristic rather than real text metrics. The constants reproduce the canvas
widgets' numeric contract exactly; they are not meant to be visually precise.
"""

import math
from typing import Optional

from .models import NodeKind

BASE_EPIC_HEIGHT = 220
MAX_EPIC_HEIGHT = 420
EPIC_CHARS_PER_LINE = 80

BASE_FEATURE_HEIGHT = 140
MAX_FEATURE_HEIGHT = 320
FEATURE_CHARS_PER_LINE = 70

DESCRIPTION_LINE_HEIGHT = 16

# kind -> (base height, max height, chars per line)
SIZE_RULES = {
    NodeKind.EPIC: (BASE_EPIC_HEIGHT, MAX_EPIC_HEIGHT, EPIC_CHARS_PER_LINE),
    NodeKind.FEATURE: (
        BASE_FEATURE_HEIGHT,
        MAX_FEATURE_HEIGHT,
        FEATURE_CHARS_PER_LINE,
    ),
}


def js_round(value: float) -> int:
    """Round half up (2.5 -> 3, -2.5 -> -2), unlike Python's round()."""
    return math.floor(value + 0.5)


def height_range(kind: NodeKind):
    """(base, max) height for an Epic or Feature."""
    base, maximum, _ = _rules_for(kind)
    return base, maximum


def estimate_height(description: Optional[str], kind: NodeKind) -> int:
    """
    Estimate the rendered height of an Epic or Feature card.

    Args:
        description: Plain or rich text description; None counts as empty.
        kind: NodeKind.EPIC or NodeKind.FEATURE.

    Returns:
        Height in canvas units, clamped to the kind's [base, max] range.

    Raises:
        ValueError: If kind is not an Epic or Feature (task markers use a
            fixed cell size).
    """
    base, maximum, chars_per_line = _rules_for(kind)

    description_length = len(description or "")
    estimated_lines = math.ceil(description_length / chars_per_line)
    description_height = min(
        estimated_lines * DESCRIPTION_LINE_HEIGHT, maximum - base
    )
    return min(maximum, base + description_height)


def _rules_for(kind: NodeKind):
    try:
        return SIZE_RULES[NodeKind(kind)]
    except (KeyError, ValueError):
        raise ValueError(f"No size rule for node kind {kind!r}") from None
