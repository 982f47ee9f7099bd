"""
Rendering contract shared by every card surface.

The dashboard shows a design in several places: the compact card in the
design list, the full editor preview, the tilting 3D preview and the back
of the card. Each surface builds its view from the same palette and stamp
layout here instead of re-deriving colors and rows on its own.
"""

from dataclasses import asdict, dataclass, field, replace
from enum import Enum
from typing import List, Optional

from cardstudio.domain.schemas import CardDesignContent, PassField
from cardstudio.services import colors, placeholder_pattern
from cardstudio.services.stamp_layout import StampLayout, clamp_filled, icon_for, layout

DEFAULT_DISPLAY_NAME = "Your Business"
DEFAULT_DESCRIPTION = "Loyalty Card"

# Compact list cards show a short sample row
COMPACT_MAX_STAMPS = 6
COMPACT_FILLED = 3

# Maximum tilt of the 3D preview, in degrees
MAX_TILT = 4.0

CODE_PREVIEW_SIZE = 70


class Surface(str, Enum):
    COMPACT = "compact"
    EDITOR = "editor"
    TILT = "tilt"
    BACK = "back"


@dataclass(frozen=True)
class CardPalette:
    """Presentation colors derived from a design."""
    background: str
    gradient_from: str
    gradient_to: str
    is_light: bool
    text: str
    muted_text: str
    label: str
    accent: str
    icon: str
    empty_stamp: str
    empty_stamp_background: str
    empty_stamp_border: str
    stamp_border: str
    divider: str


@dataclass(frozen=True)
class RenderedStamp:
    index: int
    row: int
    position: int
    is_filled: bool
    is_reward: bool
    icon: Optional[str]


@dataclass(frozen=True)
class Tilt:
    rotate_x: float
    rotate_y: float
    glare_x: float
    glare_y: float
    glare_opacity: float


@dataclass
class CardRenderModel:
    """Everything a surface needs to paint one design."""
    surface: Surface
    palette: CardPalette
    display_name: str
    description: str
    logo_url: Optional[str]
    logo_initials: str
    logo_text: Optional[str]
    strip_background_url: Optional[str]
    total_stamps: int
    filled_stamps: int
    progress_label: str
    stamp_size: str
    row1: List[RenderedStamp] = field(default_factory=list)
    row2: List[RenderedStamp] = field(default_factory=list)
    secondary_fields: List[PassField] = field(default_factory=list)
    auxiliary_fields: List[PassField] = field(default_factory=list)
    back_fields: List[PassField] = field(default_factory=list)
    code_pattern: Optional[List[List[bool]]] = None

    def to_dict(self) -> dict:
        data = asdict(self)
        data["surface"] = self.surface.value
        for list_name in ("secondary_fields", "auxiliary_fields", "back_fields"):
            data[list_name] = [f.model_dump() for f in getattr(self, list_name)]
        return data


def get_initials(name: str) -> str:
    """Logo fallback: two letters from the business name."""
    words = name.split()
    if not words:
        return "YB"
    if len(words) == 1:
        return words[0][:2].upper()
    return (words[0][0] + words[1][0]).upper()


def stamp_size_for(total: int) -> str:
    """Size tier of stamp circles; more stamps means smaller circles."""
    if total <= 6:
        return "large"
    if total <= 10:
        return "medium"
    return "small"


def build_palette(design: CardDesignContent) -> CardPalette:
    background = colors.to_hex(design.background_color)
    gradient_from, gradient_to = colors.gradient_stops(background)
    light = colors.is_light(background)

    # An explicit foreground color overrides the auto-contrast choice
    if design.foreground_color:
        text = colors.to_hex(design.foreground_color)
        muted_text = f"{text}80"
    else:
        text = colors.auto_text_color(background)
        muted_text = colors.auto_muted_color(background)

    label = colors.to_hex(design.label_color)
    return CardPalette(
        background=background,
        gradient_from=gradient_from,
        gradient_to=gradient_to,
        is_light=light,
        text=text,
        muted_text=muted_text,
        label=label,
        accent=colors.to_hex(design.stamp_filled_color),
        icon=colors.to_hex(design.icon_color) if design.icon_color else label,
        empty_stamp=colors.to_hex(design.stamp_empty_color),
        empty_stamp_background=colors.contrast_overlay(background, 0.1),
        empty_stamp_border=colors.contrast_overlay(background, 0.2),
        stamp_border=colors.to_hex(design.stamp_border_color),
        divider=colors.contrast_overlay(background, 0.1),
    )


def tilt_for_pointer(x: float, y: float, width: float, height: float) -> Tilt:
    """Rotation and glare of the 3D preview for a pointer at (x, y) inside the card."""
    if width <= 0 or height <= 0:
        return Tilt(rotate_x=0.0, rotate_y=0.0, glare_x=50.0, glare_y=50.0, glare_opacity=0.0)

    center_x = width / 2
    center_y = height / 2
    return Tilt(
        rotate_x=((center_y - y) / center_y) * MAX_TILT,
        rotate_y=((x - center_x) / center_x) * MAX_TILT,
        glare_x=(x / width) * 100,
        glare_y=(y / height) * 100,
        glare_opacity=1.0,
    )


def _rendered_row(grid: StampLayout, row: int, design: CardDesignContent) -> List[RenderedStamp]:
    return [
        RenderedStamp(
            index=slot.index,
            row=slot.row,
            position=slot.position,
            is_filled=slot.is_filled,
            is_reward=slot.is_reward,
            icon=icon_for(slot, design.stamp_icon.value, design.reward_icon.value),
        )
        for slot in grid.row(row)
    ]


class DesignRenderer:
    """Base surface: full front of the card."""

    surface = Surface.EDITOR
    show_code = True

    def __init__(self, organization_name: Optional[str] = None):
        # Editor previews pass the organization name being typed
        self.organization_name = organization_name

    def stamp_count(self, design: CardDesignContent) -> int:
        return design.total_stamps

    def filled_count(self, design: CardDesignContent, filled: int) -> int:
        return clamp_filled(filled, self.stamp_count(design))

    def render(self, design: CardDesignContent, filled: int = 0) -> CardRenderModel:
        total = self.stamp_count(design)
        filled = self.filled_count(design, filled)
        grid = layout(total, filled)
        display_name = self.organization_name or design.organization_name or DEFAULT_DISPLAY_NAME

        return CardRenderModel(
            surface=self.surface,
            palette=build_palette(design),
            display_name=display_name,
            description=design.description or DEFAULT_DESCRIPTION,
            logo_url=design.logo_url,
            logo_initials=get_initials(display_name),
            logo_text=design.logo_text,
            strip_background_url=design.strip_background_url,
            total_stamps=design.total_stamps,
            filled_stamps=filled,
            progress_label=f"{filled} / {design.total_stamps}",
            stamp_size=stamp_size_for(total),
            row1=_rendered_row(grid, 1, design),
            row2=_rendered_row(grid, 2, design),
            secondary_fields=list(design.secondary_fields),
            auxiliary_fields=list(design.auxiliary_fields),
            code_pattern=(
                placeholder_pattern.generate(CODE_PREVIEW_SIZE).cells if self.show_code else None
            ),
        )


class CompactCardRenderer(DesignRenderer):
    """Mini card in the design list: a single sample row with three stamps collected."""

    surface = Surface.COMPACT
    show_code = False

    def stamp_count(self, design: CardDesignContent) -> int:
        return min(design.total_stamps, COMPACT_MAX_STAMPS)

    def filled_count(self, design: CardDesignContent, filled: int) -> int:
        return min(COMPACT_FILLED, self.stamp_count(design))

    def render(self, design: CardDesignContent, filled: int = 0) -> CardRenderModel:
        model = super().render(design, filled)
        # The sample is one row; the label still reports the real total
        model.row1 = [
            replace(stamp, row=1, position=stamp.index) for stamp in model.row1 + model.row2
        ]
        model.row2 = []
        model.progress_label = f"{design.total_stamps} stamps total"
        return model


class EditorPreviewRenderer(DesignRenderer):
    surface = Surface.EDITOR


class TiltPreviewRenderer(DesignRenderer):
    """3D preview; same content as the editor plus pointer-driven tilt."""

    surface = Surface.TILT

    @staticmethod
    def tilt(x: float, y: float, width: float, height: float) -> Tilt:
        return tilt_for_pointer(x, y, width, height)


class BackPreviewRenderer(DesignRenderer):
    """Back of the card: back fields separated by dividers, no stamps."""

    surface = Surface.BACK
    show_code = False

    def render(self, design: CardDesignContent, filled: int = 0) -> CardRenderModel:
        model = super().render(design, filled)
        model.row1 = []
        model.row2 = []
        model.secondary_fields = []
        model.auxiliary_fields = []
        model.back_fields = list(design.back_fields)
        return model


RENDERERS = {
    Surface.COMPACT: CompactCardRenderer,
    Surface.EDITOR: EditorPreviewRenderer,
    Surface.TILT: TiltPreviewRenderer,
    Surface.BACK: BackPreviewRenderer,
}


def get_renderer(surface: Surface, organization_name: Optional[str] = None) -> DesignRenderer:
    return RENDERERS[surface](organization_name=organization_name)
