"""
Strip preview image for the design editor.

Paints the stamp strip of a design with Pillow: the gradient background,
the two-row stamp grid and a marker on the reward stamp. Icon glyphs are
drawn by the pass service on the real strip; the preview marks filled
stamps with a dot in the icon color.
"""

from dataclasses import dataclass
from typing import List, Optional
import io

from PIL import Image, ImageDraw

from cardstudio.domain.schemas import CardDesignContent
from cardstudio.services import colors
from cardstudio.services.stamp_layout import StampLayout, layout


@dataclass
class CirclePosition:
    """A stamp circle with its center position and radius."""
    center_x: float
    center_y: float
    radius: float
    row: int
    index: int


@dataclass
class CircleLayout:
    """Layout information for circle placement."""
    circles: List[CirclePosition]
    diameter: float
    radius: float
    canvas_width: int
    canvas_height: int


@dataclass
class StripConfig:
    """Strip preview dimensions (@3x strip of a store card)."""
    width: int = 1125
    height: int = 432
    min_padding: int = 24
    side_padding: int = 32


def calculate_circle_layout(
    grid: StampLayout,
    canvas_width: int = 1125,
    canvas_height: int = 432,
    min_padding: int = 24,
    side_padding: int = 32,
) -> CircleLayout:
    """
    Place the stamps of a two-row grid on the canvas.

    Circles share one diameter, sized so the fuller row fits between the
    side paddings and both rows fit vertically. Each row is centered.
    """
    distribution = [count for count in (grid.row1_count, grid.row2_count) if count > 0]
    if not distribution:
        return CircleLayout(
            circles=[],
            diameter=0,
            radius=0,
            canvas_width=canvas_width,
            canvas_height=canvas_height,
        )

    rows = len(distribution)
    max_in_row = max(distribution)

    available_width = canvas_width - 2 * side_padding
    max_diameter_by_width = (available_width - (max_in_row - 1) * min_padding) / max_in_row
    max_diameter_by_height = (canvas_height - (rows + 1) * min_padding) / rows
    diameter = max(0.0, min(max_diameter_by_width, max_diameter_by_height))
    radius = diameter / 2

    vertical_padding = (canvas_height - rows * diameter) / (rows + 1)

    circles = []
    for row_index in range(rows):
        slots = grid.row(row_index + 1)
        row_content_width = len(slots) * diameter + (len(slots) - 1) * min_padding
        row_side_padding = (canvas_width - row_content_width) / 2
        y = vertical_padding * (row_index + 1) + diameter * row_index + radius

        for slot in slots:
            circles.append(CirclePosition(
                center_x=row_side_padding + radius + slot.position * (diameter + min_padding),
                center_y=y,
                radius=radius,
                row=row_index,
                index=slot.index,
            ))

    return CircleLayout(
        circles=circles,
        diameter=diameter,
        radius=radius,
        canvas_width=canvas_width,
        canvas_height=canvas_height,
    )


class StripPreviewGenerator:
    """Generates strip preview PNGs from a design."""

    def __init__(self, design: CardDesignContent, config: Optional[StripConfig] = None):
        self.design = design
        self.config = config or StripConfig()

    def _create_background(self, width: int, height: int) -> Image.Image:
        start, end = colors.gradient_stops(self.design.background_color)
        r1, g1, b1 = colors.to_rgb(start)
        r2, g2, b2 = colors.to_rgb(end)

        img = Image.new("RGB", (width, height), (r1, g1, b1))
        draw = ImageDraw.Draw(img)
        for y in range(height):
            ratio = y / height
            r = int(r1 + (r2 - r1) * ratio)
            g = int(g1 + (g2 - g1) * ratio)
            b = int(b1 + (b2 - b1) * ratio)
            draw.line([(0, y), (width, y)], fill=(r, g, b))
        return img

    def _draw_stamp(
        self,
        draw: ImageDraw.ImageDraw,
        circle: CirclePosition,
        filled: bool,
        is_reward: bool,
        border_width: int,
    ) -> None:
        x = int(circle.center_x)
        y = int(circle.center_y)
        radius = int(circle.radius)
        box = [x - radius, y - radius, x + radius, y + radius]

        # Filled stamps have no outline, empty stamps do
        if filled:
            draw.ellipse(box, fill=colors.to_rgb(self.design.stamp_filled_color))
            icon_color = colors.to_rgb(self.design.icon_color or self.design.label_color)
            dot = max(1, radius // 4)
            draw.ellipse([x - dot, y - dot, x + dot, y + dot], fill=icon_color)
        else:
            draw.ellipse(
                box,
                fill=colors.to_rgb(self.design.stamp_empty_color),
                outline=colors.to_rgb(self.design.stamp_border_color),
                width=border_width,
            )

        if is_reward:
            inset = max(2, radius // 6)
            draw.ellipse(
                [x - radius + inset, y - radius + inset, x + radius - inset, y + radius - inset],
                outline=colors.to_rgb(self.design.stamp_border_color),
                width=border_width,
            )

    def generate(self, filled: int = 0) -> bytes:
        """Render the strip with ``filled`` stamps collected, as PNG bytes."""
        grid = layout(self.design.total_stamps, filled)
        width, height = self.config.width, self.config.height

        img = self._create_background(width, height)
        draw = ImageDraw.Draw(img)

        circles = calculate_circle_layout(
            grid,
            canvas_width=width,
            canvas_height=height,
            min_padding=self.config.min_padding,
            side_padding=self.config.side_padding,
        )
        border_width = max(1, int(circles.radius / 20)) if circles.radius > 0 else 1

        slots = {slot.index: slot for slot in grid.stamps}
        for circle in circles.circles:
            slot = slots[circle.index]
            self._draw_stamp(draw, circle, slot.is_filled, slot.is_reward, border_width)

        buffer = io.BytesIO()
        img.save(buffer, format="PNG", optimize=True)
        return buffer.getvalue()
