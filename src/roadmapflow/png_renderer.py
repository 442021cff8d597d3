"""
Preview renderer for roadmap layouts.

Draws a LayoutResult into an in-memory Pillow image: Epic and Feature cards,
task markers, connectors and Feature progress bars. The image covers the
viewport bounds, so it doubles as a picture of the pannable area. Saving the
image is left to the caller.
"""

import math
import os
from typing import Dict, Optional, Tuple

from PIL import Image, ImageDraw, ImageFont

from .connectors import (
    EPIC_BOTTOM_HANDLE,
    EPIC_RIGHT_HANDLE,
    EPIC_TOP_HANDLE,
    FEATURE_LEFT_HANDLE,
)
from .minimap import marker_colors, minimap_node_color
from .models import Connector, LayoutResult, NodeKind, PlanGraph, PositionedNode
from .progress import effective_progress

Point = Tuple[float, float]


def _hex_to_rgb(color: str) -> Tuple[int, int, int]:
    color = color.lstrip("#")
    return tuple(int(color[i : i + 2], 16) for i in (0, 2, 4))


class PreviewRenderer:
    """Renders roadmap layouts as Pillow images."""

    def __init__(
        self,
        scale: float = 0.5,
        margin: int = 0,
        font_size: int = 14,
        font_path: Optional[str] = None,
        line_width: int = 2,
        dash_length: int = 10,
        show_labels: bool = True,
    ):
        if scale <= 0:
            raise ValueError("scale must be positive")
        self.scale = scale
        self.margin = margin
        self.font_size = font_size
        self.font_path = font_path
        self.line_width = line_width
        self.dash_length = dash_length
        self.show_labels = show_labels

        # Colors
        self.bg_color = (255, 255, 255)
        self.card_fill = (255, 255, 255)
        self.text_color = (17, 24, 39)
        self.progress_track = _hex_to_rgb("#e5e7eb")
        self.progress_fill = _hex_to_rgb("#22c55e")

        self.font = None
        self._origin: Point = (0, 0)

    def _get_font(self) -> ImageFont.ImageFont:
        """Get a font for rendering labels."""
        if self.font is not None:
            return self.font

        font_size = max(1, int(self.font_size * self.scale * 2))

        if self.font_path and os.path.exists(self.font_path):
            try:
                self.font = ImageFont.truetype(self.font_path, font_size)
                return self.font
            except OSError:
                pass  # Fall through to system fonts

        for path in (
            "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
            "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
            "/System/Library/Fonts/Helvetica.ttc",
            "C:/Windows/Fonts/arial.ttf",
        ):
            if os.path.exists(path):
                try:
                    self.font = ImageFont.truetype(path, font_size)
                    return self.font
                except OSError:
                    continue

        self.font = ImageFont.load_default()
        return self.font

    def _to_image(self, x: float, y: float) -> Point:
        ox, oy = self._origin
        return (
            (x - ox) * self.scale + self.margin,
            (y - oy) * self.scale + self.margin,
        )

    def _box(self, node: PositionedNode):
        left, top = self._to_image(node.x, node.y)
        right, bottom = self._to_image(node.x + node.width, node.y + node.height)
        return [left, top, right, bottom]

    def render(
        self, result: LayoutResult, plan: Optional[PlanGraph] = None
    ) -> Image.Image:
        """
        Render a layout to an RGB image.

        Args:
            result: The layout to draw.
            plan: Optional plan used to draw Feature progress bars.

        Returns:
            A new PIL image spanning the viewport bounds.
        """
        (min_x, min_y), (max_x, max_y) = result.viewport_bounds
        self._origin = (min_x, min_y)

        width = max(1, math.ceil((max_x - min_x) * self.scale) + 2 * self.margin)
        height = max(1, math.ceil((max_y - min_y) * self.scale) + 2 * self.margin)

        img = Image.new("RGB", (width, height), self.bg_color)
        draw = ImageDraw.Draw(img)

        nodes_by_id: Dict[str, PositionedNode] = {}
        for node in result.nodes:
            nodes_by_id.setdefault(node.id, node)

        for connector in result.connectors:
            self._draw_connector(draw, connector, nodes_by_id)

        progress = self._progress_by_feature(plan) if plan else {}
        for node in result.nodes:
            if node.kind == NodeKind.TASK_MARKER:
                self._draw_marker(draw, node)
            else:
                self._draw_card(draw, node, progress.get(node.id))

        return img

    def _progress_by_feature(self, plan: PlanGraph) -> Dict[str, int]:
        progress: Dict[str, int] = {}
        for feature in plan.all_features():
            progress.setdefault(feature.id, effective_progress(feature))
        return progress

    def _draw_card(
        self,
        draw: ImageDraw.ImageDraw,
        node: PositionedNode,
        progress: Optional[int],
    ):
        """Draw an Epic or Feature card with an optional progress bar."""
        box = self._box(node)
        outline = _hex_to_rgb(minimap_node_color(node))
        draw.rectangle(
            box, fill=self.card_fill, outline=outline, width=self.line_width
        )

        if self.show_labels:
            inset = 12 * self.scale
            draw.text(
                (box[0] + inset, box[1] + inset),
                node.id,
                fill=self.text_color,
                font=self._get_font(),
            )

        if progress is not None and node.kind == NodeKind.FEATURE:
            inset = 16 * self.scale
            bar_height = max(2, 8 * self.scale)
            left = box[0] + inset
            right = box[2] - inset
            bottom = box[3] - inset
            draw.rectangle(
                [left, bottom - bar_height, right, bottom], fill=self.progress_track
            )
            filled = left + (right - left) * max(0, min(100, progress)) / 100
            if filled > left:
                draw.rectangle(
                    [left, bottom - bar_height, filled, bottom],
                    fill=self.progress_fill,
                )

    def _draw_marker(self, draw: ImageDraw.ImageDraw, node: PositionedNode):
        stroke, fill = marker_colors(node.status)
        draw.rectangle(
            self._box(node),
            fill=_hex_to_rgb(fill),
            outline=_hex_to_rgb(stroke),
            width=max(1, self.line_width // 2),
        )

    def _handle_point(self, node: PositionedNode, handle: str) -> Point:
        if handle == EPIC_RIGHT_HANDLE:
            return (node.x + node.width, node.y + node.height / 2)
        if handle == FEATURE_LEFT_HANDLE:
            return (node.x, node.y + node.height / 2)
        if handle == EPIC_BOTTOM_HANDLE:
            return (node.x + node.width / 2, node.y + node.height)
        if handle == EPIC_TOP_HANDLE:
            return (node.x + node.width / 2, node.y)
        return (node.x + node.width / 2, node.y + node.height / 2)

    def _draw_connector(
        self,
        draw: ImageDraw.ImageDraw,
        connector: Connector,
        nodes_by_id: Dict[str, PositionedNode],
    ):
        """Draw a straight connector; dashed for the Epic chain."""
        source = nodes_by_id.get(connector.source_id)
        target = nodes_by_id.get(connector.target_id)
        if source is None or target is None:
            return

        start = self._to_image(*self._handle_point(source, connector.source_handle))
        end = self._to_image(*self._handle_point(target, connector.target_handle))
        color = _hex_to_rgb(connector.color)

        if connector.dashed:
            self._draw_dashed_line(draw, start, end, color)
        else:
            draw.line([start, end], fill=color, width=self.line_width)

    def _draw_dashed_line(
        self,
        draw: ImageDraw.ImageDraw,
        start: Point,
        end: Point,
        color: Tuple[int, int, int],
    ):
        x1, y1 = start
        x2, y2 = end
        length = math.hypot(x2 - x1, y2 - y1)
        if length == 0:
            return

        dash = max(1.0, self.dash_length * self.scale)
        dx = (x2 - x1) / length
        dy = (y2 - y1) / length
        position = 0.0
        while position < length:
            segment_end = min(position + dash, length)
            draw.line(
                [
                    (x1 + dx * position, y1 + dy * position),
                    (x1 + dx * segment_end, y1 + dy * segment_end),
                ],
                fill=color,
                width=self.line_width,
            )
            position += 2 * dash


def render_preview(
    result: LayoutResult, plan: Optional[PlanGraph] = None, **kwargs
) -> Image.Image:
    """
    Convenience function to render a layout preview.

    Args:
        result: The layout to draw.
        plan: Optional plan for Feature progress bars.
        **kwargs: Additional parameters for PreviewRenderer.
    """
    return PreviewRenderer(**kwargs).render(result, plan)
