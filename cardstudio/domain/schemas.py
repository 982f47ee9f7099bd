from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from cardstudio.core.config import settings
from cardstudio.services.colors import to_notation


MIN_STAMPS = 2
MAX_STAMPS = 20

# Hard caps per field list; exceeding one fails validation, nothing is truncated
FIELD_LIST_LIMITS = {
    "secondary_fields": 3,
    "auxiliary_fields": 3,
    "back_fields": 10,
}

COLOR_FIELDS = (
    "foreground_color",
    "background_color",
    "label_color",
    "stamp_filled_color",
    "stamp_empty_color",
    "stamp_border_color",
    "icon_color",
)


class StampIcon(str, Enum):
    """Predefined icons painted inside filled stamps."""
    CHECKMARK = "checkmark"
    COFFEE = "coffee"
    STAR = "star"
    HEART = "heart"
    GIFT = "gift"
    THUMBSUP = "thumbsup"
    SPARKLE = "sparkle"
    TROPHY = "trophy"
    CROWN = "crown"
    LIGHTNING = "lightning"
    FIRE = "fire"
    SUN = "sun"
    LEAF = "leaf"
    FLOWER = "flower"
    DIAMOND = "diamond"
    SMILEY = "smiley"
    MUSIC = "music"
    PAW = "paw"
    SCISSORS = "scissors"
    FOOD = "food"
    SHOPPING = "shopping"
    PERCENT = "percent"


# May be left unset: foreground falls back to auto-contrast, icon to the label color
OPTIONAL_COLOR_FIELDS = ("foreground_color", "icon_color")

# Fields a patch may clear by sending null
NULLABLE_FIELDS = frozenset({
    "logo_text",
    "logo_url",
    "strip_background_url",
    *OPTIONAL_COLOR_FIELDS,
})


def _normalize_color(value: Any) -> str:
    # Absent or malformed colors degrade to the default; never a validation error
    return to_notation(value, settings.color_notation)


# Card Design Schemas

class PassField(BaseModel):
    """A field on the pass (secondary, auxiliary, or back field)."""
    key: str
    label: str
    value: str


def _default_secondary_fields() -> list[PassField]:
    return [PassField(key="reward", label="REWARD", value="Free item at 10 stamps!")]


def _default_back_fields() -> list[PassField]:
    return [
        PassField(
            key="terms",
            label="Terms & Conditions",
            value="Earn 1 stamp per purchase. Stamps expire after 1 year.",
        )
    ]


class CardDesignContent(BaseModel):
    """Everything a design carries besides identity, lifecycle and timestamps."""
    model_config = ConfigDict(validate_default=True)

    name: str
    organization_name: str
    description: str
    logo_text: Optional[str] = None

    # Asset URLs (from image uploads)
    logo_url: Optional[str] = None
    strip_background_url: Optional[str] = None

    # Colors
    foreground_color: Optional[str] = "rgb(255, 255, 255)"
    background_color: str = "rgb(139, 90, 43)"
    label_color: str = "rgb(255, 255, 255)"

    # Stamp config
    total_stamps: int = Field(default=10, ge=MIN_STAMPS, le=MAX_STAMPS)
    stamp_filled_color: str = "rgb(255, 215, 0)"
    stamp_empty_color: str = "rgb(80, 50, 20)"
    stamp_border_color: str = "rgb(255, 255, 255)"

    # Icon configuration
    stamp_icon: StampIcon = StampIcon.CHECKMARK
    reward_icon: StampIcon = StampIcon.GIFT
    icon_color: Optional[str] = None

    # Pass fields
    secondary_fields: list[PassField] = Field(default_factory=_default_secondary_fields)
    auxiliary_fields: list[PassField] = []
    back_fields: list[PassField] = Field(default_factory=_default_back_fields)

    @field_validator(*COLOR_FIELDS, mode="before")
    @classmethod
    def normalize_colors(cls, value: Any, info: ValidationInfo) -> Optional[str]:
        if value is None and info.field_name in OPTIONAL_COLOR_FIELDS:
            return None
        return _normalize_color(value)

    def content(self) -> dict:
        """Field values shared by every design model, as plain data."""
        return self.model_dump(include=set(CardDesignContent.model_fields), mode="json")


class CardDesignCreate(CardDesignContent):
    """Request body for creating a card design."""


class CardDesignUpdate(BaseModel):
    """Request body for updating a card design. All fields optional."""
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = None
    organization_name: Optional[str] = None
    description: Optional[str] = None
    logo_text: Optional[str] = None

    logo_url: Optional[str] = None
    strip_background_url: Optional[str] = None

    # Colors
    foreground_color: Optional[str] = None
    background_color: Optional[str] = None
    label_color: Optional[str] = None

    # Stamp config
    total_stamps: Optional[int] = Field(default=None, ge=MIN_STAMPS, le=MAX_STAMPS)
    stamp_filled_color: Optional[str] = None
    stamp_empty_color: Optional[str] = None
    stamp_border_color: Optional[str] = None

    # Icon configuration
    stamp_icon: Optional[StampIcon] = None
    reward_icon: Optional[StampIcon] = None
    icon_color: Optional[str] = None

    # Pass fields
    secondary_fields: Optional[list[PassField]] = None
    auxiliary_fields: Optional[list[PassField]] = None
    back_fields: Optional[list[PassField]] = None

    @field_validator(*COLOR_FIELDS, mode="before")
    @classmethod
    def normalize_colors(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        return _normalize_color(value)

    def changes(self) -> dict:
        """Fields the caller sent. Null clears a nullable field and is ignored elsewhere."""
        return {
            key: value
            for key, value in self.model_dump(exclude_unset=True, mode="json").items()
            if value is not None or key in NULLABLE_FIELDS
        }


class CardDesign(CardDesignContent):
    """A card design owned by one business."""
    id: str
    business_id: str
    is_active: bool = False

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: dict) -> "CardDesign":
        """Build from a stored row (assets live in *_path columns)."""
        data = dict(record)
        if "logo_url" not in data and "logo_path" in data:
            data["logo_url"] = data.get("logo_path")
        if "strip_background_url" not in data and "strip_background_path" in data:
            data["strip_background_url"] = data.get("strip_background_path")
        for list_field in FIELD_LIST_LIMITS:
            if data.get(list_field) is None:
                data[list_field] = []
        data["is_active"] = bool(data.get("is_active"))
        return cls.model_validate(data)

