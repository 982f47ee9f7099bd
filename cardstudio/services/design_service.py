"""
Card design operations: create, update, activate, duplicate, delete.

Each operation validates and guards locally, then issues exactly one
request to the design store (the external API). Nothing is applied
locally as committed; the returned design is always what the store sent
back. Activation additionally re-fetches the business's designs and only
succeeds once exactly one active design is confirmed.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from cardstudio.core.config import settings
from cardstudio.core.exceptions import DesignNotFound, LimitExceededError, TransportFailure
from cardstudio.core.features import get_design_limit
from cardstudio.domain.schemas import CardDesign, CardDesignContent, CardDesignUpdate
from cardstudio.repositories.business import BusinessRepository
from cardstudio.repositories.card_design import CardDesignRepository
from cardstudio.services.activation import ActivationStateMachine, Transition
from cardstudio.services.pass_coordinator import affects_strips
from cardstudio.services.validation import ensure_valid

logger = logging.getLogger(__name__)


class DesignStore(Protocol):
    def create(self, business_id: str, **fields) -> dict | None: ...
    def get_by_id(self, design_id: str) -> dict | None: ...
    def get_active(self, business_id: str) -> dict | None: ...
    def get_all(self, business_id: str) -> list[dict]: ...
    def update(self, design_id: str, **kwargs) -> dict | None: ...
    def delete(self, design_id: str) -> bool: ...
    def set_active(self, business_id: str, design_id: str) -> dict | None: ...
    def count(self, business_id: str) -> int: ...


class BusinessStore(Protocol):
    def get_by_id(self, business_id: str) -> dict | None: ...


@dataclass
class UpdateOutcome:
    design: CardDesign
    # The active design changed in a way issued passes must pick up
    refresh_passes: bool


class CardDesignService:

    def __init__(
        self,
        store: DesignStore = CardDesignRepository,
        businesses: BusinessStore = BusinessRepository,
        verify_attempts: Optional[int] = None,
        enforce_plan_limits: Optional[bool] = None,
    ):
        self.store = store
        self.businesses = businesses
        self.verify_attempts = max(1, verify_attempts or settings.activation_verify_attempts)
        self.enforce_plan_limits = (
            settings.enforce_plan_limits if enforce_plan_limits is None else enforce_plan_limits
        )

    # Reads

    def list_designs(self, business_id: str) -> list[CardDesign]:
        return [CardDesign.from_record(r) for r in self.store.get_all(business_id)]

    def get_active(self, business_id: str) -> CardDesign | None:
        record = self.store.get_active(business_id)
        return CardDesign.from_record(record) if record else None

    def get_design(self, business_id: str, design_id: str) -> CardDesign:
        record = self.store.get_by_id(design_id)
        # Designs of another business are reported as missing
        if not record or str(record.get("business_id")) != str(business_id):
            raise DesignNotFound(design_id)
        return CardDesign.from_record(record)

    # Transitions

    def create(self, business_id: str, draft: CardDesignContent) -> CardDesign:
        """Validate and create a new Draft design."""
        ensure_valid(draft)
        self._check_plan_limit(business_id)

        record = self.store.create(business_id, **draft.content())
        if not record:
            raise TransportFailure("create", "no design returned")

        design = CardDesign.from_record(record)
        logger.info(f"Created design {design.id} for business {business_id}")
        return design

    def update(self, business_id: str, design_id: str, patch: CardDesignUpdate) -> UpdateOutcome:
        """Apply a partial update. ``is_active`` is never part of a patch."""
        existing = self.get_design(business_id, design_id)
        changes = patch.changes()

        merged = CardDesignContent.model_validate({**existing.content(), **changes})
        ensure_valid(merged)

        if not changes:
            return UpdateOutcome(design=existing, refresh_passes=False)

        record = self.store.update(design_id, **changes)
        if not record:
            raise TransportFailure("update", "no design returned")

        return UpdateOutcome(
            design=CardDesign.from_record(record),
            refresh_passes=existing.is_active and affects_strips(changes, existing),
        )

    def activate(self, business_id: str, design_id: str) -> CardDesign:
        """Make a Draft design the single active design of its business."""
        design = self.get_design(business_id, design_id)
        ActivationStateMachine.guard(design, Transition.ACTIVATE)

        for attempt in range(1, self.verify_attempts + 1):
            self.store.set_active(business_id, design_id)

            # Trust the re-fetched list, not the activation response
            designs = self.list_designs(business_id)
            if ActivationStateMachine.is_consistent_after_activation(designs, business_id, design_id):
                logger.info(f"Activated design {design_id} for business {business_id}")
                return next(d for d in designs if d.id == design_id)

            active_ids = [d.id for d in ActivationStateMachine.active_designs(designs, business_id)]
            logger.warning(
                f"Activation of {design_id} not confirmed (attempt {attempt}/{self.verify_attempts}), "
                f"active designs: {active_ids}"
            )

        logger.error(f"Giving up on activation of design {design_id} for business {business_id}")
        raise TransportFailure("activate", "the design list did not confirm a single active design")

    def duplicate(self, business_id: str, design_id: str) -> CardDesign:
        """Copy a design (from any state) into a new Draft."""
        source = self.get_design(business_id, design_id)
        ActivationStateMachine.guard(source, Transition.DUPLICATE)
        self._check_plan_limit(business_id)

        record = self.store.create(business_id, **ActivationStateMachine.duplicate_content(source))
        if not record:
            raise TransportFailure("duplicate", "no design returned")

        copy = CardDesign.from_record(record)
        logger.info(f"Duplicated design {design_id} into {copy.id} for business {business_id}")
        return copy

    def delete(self, business_id: str, design_id: str) -> None:
        """Permanently delete a Draft design. Active designs are rejected."""
        design = self.get_design(business_id, design_id)
        ActivationStateMachine.guard(design, Transition.DELETE)

        if not self.store.delete(design_id):
            raise DesignNotFound(design_id)
        logger.info(f"Deleted design {design_id} for business {business_id}")

    def push(self, business_id: str, design_id: str) -> CardDesign:
        """Check that a design can be re-pushed to issued passes (it must be active)."""
        design = self.get_design(business_id, design_id)
        ActivationStateMachine.guard(design, Transition.PUSH)
        return design

    def _check_plan_limit(self, business_id: str) -> None:
        if not self.enforce_plan_limits:
            return

        business = self.businesses.get_by_id(business_id)
        limit = get_design_limit(business.get("subscription_tier") if business else None)
        if limit is None:
            return

        current = self.store.count(business_id)
        if current >= limit:
            raise LimitExceededError(limit=limit, current=current)
