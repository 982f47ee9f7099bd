"""
Editing session for one card design.

Holds the local form state of the design editor (new or existing design),
applies edits with the same rules the saved model uses, and talks to the
design service for save and activate. Nothing is treated as committed
until the service answers; when several saves are in flight, the response
that completes last is the one displayed.
"""

import logging
import threading
from typing import Any, Optional

from cardstudio.core.exceptions import (
    ActivationConflict,
    DesignError,
    DesignValidationError,
    FieldError,
)
from cardstudio.domain.schemas import (
    COLOR_FIELDS,
    FIELD_LIST_LIMITS,
    CardDesign,
    CardDesignContent,
    CardDesignUpdate,
    PassField,
)
from cardstudio.services.design_service import CardDesignService
from cardstudio.services.rendering import CardRenderModel, Surface, get_renderer
from cardstudio.services.stamp_layout import clamp_filled
from cardstudio.services.validation import new_design_draft, step_total_stamps, validate_for_save

logger = logging.getLogger(__name__)

DEFAULT_PREVIEW_STAMPS = 3


class EditorSession:
    """Local editor state for a single design of one business."""

    def __init__(
        self,
        service: CardDesignService,
        business_id: str,
        design: Optional[CardDesign] = None,
        organization_name: str = "",
    ):
        self.service = service
        self.business_id = business_id

        if design is not None:
            self.form = CardDesignContent.model_validate(design.content())
            self.design_id: Optional[str] = design.id
            self.is_active = design.is_active
        else:
            # New designs start from the defaults, prefilled with the business name
            self.form = CardDesignContent.model_validate(new_design_draft(organization_name).content())
            self.design_id = None
            self.is_active = False

        self.preview_stamps = clamp_filled(DEFAULT_PREVIEW_STAMPS, self.form.total_stamps)
        self.errors: list[FieldError] = []
        self.error: Optional[str] = None
        self.refresh_passes = False

        self._lock = threading.Lock()
        self._issued = 0
        self._pending: set[int] = set()

    @property
    def is_new(self) -> bool:
        return self.design_id is None

    # Form edits

    def set_field(self, name: str, value: Any) -> None:
        """Set one design field; colors are normalized to the configured notation."""
        if name not in CardDesignContent.model_fields:
            raise KeyError(name)
        self.form = CardDesignContent.model_validate({**self.form.content(), name: value})
        self.preview_stamps = clamp_filled(self.preview_stamps, self.form.total_stamps)

    def set_color(self, name: str, value: Any) -> str:
        if name not in COLOR_FIELDS:
            raise KeyError(name)
        self.set_field(name, value)
        return getattr(self.form, name)

    def step_total_stamps(self, step: int) -> int:
        """Increment or decrement the stamp count, stopping at the range limits."""
        self.set_field("total_stamps", step_total_stamps(self.form.total_stamps, step))
        return self.form.total_stamps

    def set_preview_stamps(self, value: int) -> int:
        self.preview_stamps = clamp_filled(value, self.form.total_stamps)
        return self.preview_stamps

    # Pass fields

    def _fields(self, list_name: str) -> list[PassField]:
        if list_name not in FIELD_LIST_LIMITS:
            raise KeyError(list_name)
        return list(getattr(self.form, list_name))

    def _set_fields(self, list_name: str, fields: list[PassField]) -> None:
        self.set_field(list_name, [f.model_dump() for f in fields])

    def _new_key(self) -> str:
        used = {
            f.key
            for list_name in FIELD_LIST_LIMITS
            for f in getattr(self.form, list_name)
        }
        n = 1
        while f"field_{n}" in used:
            n += 1
        return f"field_{n}"

    def add_field(self, list_name: str, label: str = "", value: str = "") -> Optional[PassField]:
        """Append a field; returns None when the list is already at its cap."""
        fields = self._fields(list_name)
        if len(fields) >= FIELD_LIST_LIMITS[list_name]:
            return None

        field = PassField(key=self._new_key(), label=label, value=value)
        self._set_fields(list_name, fields + [field])
        return field

    def update_field(self, list_name: str, index: int, **changes) -> PassField:
        fields = self._fields(list_name)
        fields[index] = fields[index].model_copy(update=changes)
        self._set_fields(list_name, fields)
        return fields[index]

    def remove_field(self, list_name: str, index: int) -> None:
        fields = self._fields(list_name)
        del fields[index]
        self._set_fields(list_name, fields)

    def move_field(self, list_name: str, index: int, direction: int) -> bool:
        """Swap a field with its neighbour (direction -1 up, +1 down)."""
        fields = self._fields(list_name)
        target = index + direction
        if not (0 <= index < len(fields)) or not (0 <= target < len(fields)):
            return False
        fields[index], fields[target] = fields[target], fields[index]
        self._set_fields(list_name, fields)
        return True

    # Preview

    def preview(self, surface: Surface = Surface.EDITOR) -> CardRenderModel:
        return get_renderer(surface).render(self.form, self.preview_stamps)

    # Requests

    def begin(self) -> int:
        """Issue a ticket for a request about to be sent."""
        with self._lock:
            self._issued += 1
            self._pending.add(self._issued)
            return self._issued

    @property
    def pending(self) -> int:
        """Requests sent whose response has not arrived yet."""
        return len(self._pending)

    def complete(self, ticket: int, design: CardDesign) -> None:
        """
        Apply a server response as it arrives.

        Responses are applied in completion order, so whichever response
        completes last is what the form shows, even if its request was
        issued earlier.
        """
        with self._lock:
            self._pending.discard(ticket)
            self.design_id = design.id
            self.is_active = design.is_active
            self.form = CardDesignContent.model_validate(design.content())
            self.preview_stamps = clamp_filled(self.preview_stamps, self.form.total_stamps)

    def save(self) -> CardDesign:
        """Create or update the design from the current form."""
        self.errors = validate_for_save(self.form)
        if self.errors:
            self.error = "Please fill in all required fields (Name, Organization, Description)"
            raise DesignValidationError(self.errors)

        self.error = None
        ticket = self.begin()
        try:
            if self.is_new:
                design = self.service.create(self.business_id, self.form)
                self.refresh_passes = False
            else:
                outcome = self.service.update(
                    self.business_id,
                    self.design_id,
                    CardDesignUpdate(**self.form.content()),
                )
                design = outcome.design
                self.refresh_passes = outcome.refresh_passes
        except DesignError as e:
            self.error = e.message
            raise

        self.complete(ticket, design)
        return design

    def activate(self) -> CardDesign:
        """Activate the saved design. Local state only changes on success."""
        if self.is_new:
            raise ActivationConflict("", "Save the design before activating it")

        self.error = None
        ticket = self.begin()
        try:
            design = self.service.activate(self.business_id, self.design_id)
        except DesignError as e:
            self.error = e.message
            raise

        self.complete(ticket, design)
        return design
