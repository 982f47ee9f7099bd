"""
Activation lifecycle of card designs.

A design is either a Draft or Active. A business has at most one Active
design. ``activate`` is the only transition that changes ``is_active`` on
any record: it promotes the target and demotes every sibling. There is no
direct deactivation, and an Active design cannot be deleted.

Everything here is pure; the service layer performs the request against
the external API and uses these functions to guard it and to check the
state that comes back.
"""

from enum import Enum
from typing import Iterable, List

from cardstudio.core.exceptions import ActivationConflict
from cardstudio.domain.schemas import CardDesign


class DesignState(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"


class Transition(str, Enum):
    ACTIVATE = "activate"
    DUPLICATE = "duplicate"
    DELETE = "delete"
    PUSH = "push"


# Source states each transition may start from
ALLOWED_FROM = {
    Transition.ACTIVATE: {DesignState.DRAFT},
    Transition.DUPLICATE: {DesignState.DRAFT, DesignState.ACTIVE},
    Transition.DELETE: {DesignState.DRAFT},
    Transition.PUSH: {DesignState.ACTIVE},
}

_REJECTIONS = {
    Transition.ACTIVATE: "Design is already active.",
    Transition.DELETE: "Cannot delete the active design. Activate another design first.",
    Transition.PUSH: "Only the active design can be pushed to customer cards.",
}


def state_of(design: CardDesign) -> DesignState:
    return DesignState.ACTIVE if design.is_active else DesignState.DRAFT


class ActivationStateMachine:
    """Guards and local projections for design lifecycle transitions."""

    @staticmethod
    def can(design: CardDesign, transition: Transition) -> bool:
        return state_of(design) in ALLOWED_FROM[transition]

    @staticmethod
    def guard(design: CardDesign, transition: Transition) -> None:
        """Raise ActivationConflict if ``transition`` is not allowed for ``design``."""
        if not ActivationStateMachine.can(design, transition):
            raise ActivationConflict(design.id, _REJECTIONS[transition])

    @staticmethod
    def activate(designs: Iterable[CardDesign], design_id: str) -> List[CardDesign]:
        """
        Project the effect of activating ``design_id``.

        Returns a new list where the target is Active and every other design
        of the same business is Draft. Designs of other businesses are left
        untouched. The result is a hint; the external API owns the real state.
        """
        designs = list(designs)
        target = next((d for d in designs if d.id == design_id), None)
        if target is None:
            return designs

        projected = []
        for design in designs:
            if design.id == design_id:
                projected.append(design.model_copy(update={"is_active": True}))
            elif design.business_id == target.business_id and design.is_active:
                projected.append(design.model_copy(update={"is_active": False}))
            else:
                projected.append(design)
        return projected

    @staticmethod
    def duplicate_content(design: CardDesign) -> dict:
        """Content of a copy: every field except identity, lifecycle and timestamps."""
        return design.content()

    @staticmethod
    def active_designs(designs: Iterable[CardDesign], business_id: str) -> List[CardDesign]:
        return [d for d in designs if d.business_id == business_id and d.is_active]

    @staticmethod
    def is_consistent_after_activation(
        designs: Iterable[CardDesign], business_id: str, design_id: str
    ) -> bool:
        """
        True when ``design_id`` is the one and only active design of the business.

        That is, the fetched designs already look like the projection of
        activating ``design_id``.
        """
        designs = [d for d in designs if d.business_id == business_id]
        if not any(d.id == design_id for d in designs):
            return False
        projected = ActivationStateMachine.activate(designs, design_id)
        return [d.is_active for d in designs] == [d.is_active for d in projected]
