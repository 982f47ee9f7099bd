"""
Save-time validation and defaults for card designs.
"""

from cardstudio.core.exceptions import DesignValidationError, FieldError
from cardstudio.domain.schemas import (
    FIELD_LIST_LIMITS,
    MAX_STAMPS,
    MIN_STAMPS,
    CardDesignContent,
    CardDesignCreate,
    PassField,
)

REQUIRED_FIELDS = {
    "name": "Name is required",
    "organization_name": "Organization name is required",
    "description": "Description is required",
}


def _validate_field_list(list_name: str, fields: list[PassField]) -> list[FieldError]:
    errors = []
    limit = FIELD_LIST_LIMITS[list_name]
    if len(fields) > limit:
        errors.append(FieldError(list_name, f"At most {limit} fields allowed, got {len(fields)}"))

    # Keys only need to be unique within their own list
    seen: set[str] = set()
    for position, pass_field in enumerate(fields):
        if not pass_field.key.strip():
            errors.append(FieldError(f"{list_name}[{position}].key", "Field key is required"))
        elif pass_field.key in seen:
            errors.append(
                FieldError(f"{list_name}[{position}].key", f"Duplicate field key '{pass_field.key}'")
            )
        seen.add(pass_field.key)
    return errors


def validate_for_save(design: CardDesignContent) -> list[FieldError]:
    """Field-level errors blocking a save. An empty list means the design is valid."""
    errors = []

    for field_name, message in REQUIRED_FIELDS.items():
        value = getattr(design, field_name)
        if not value or not value.strip():
            errors.append(FieldError(field_name, message))

    if not MIN_STAMPS <= design.total_stamps <= MAX_STAMPS:
        errors.append(
            FieldError("total_stamps", f"Must be between {MIN_STAMPS} and {MAX_STAMPS}")
        )

    for list_name in FIELD_LIST_LIMITS:
        errors.extend(_validate_field_list(list_name, getattr(design, list_name)))

    return errors


def ensure_valid(design: CardDesignContent) -> None:
    """Raise DesignValidationError if the design cannot be saved."""
    errors = validate_for_save(design)
    if errors:
        raise DesignValidationError(errors)


def clamp_total_stamps(value: int) -> int:
    return max(MIN_STAMPS, min(value, MAX_STAMPS))


def step_total_stamps(current: int, step: int) -> int:
    """Increment/decrement control: never moves past the allowed range."""
    return clamp_total_stamps(current + step)


def new_design_draft(organization_name: str = "") -> CardDesignCreate:
    """Starting point for a brand new design."""
    return CardDesignCreate(
        name="",
        organization_name=organization_name,
        description="",
    )
