import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException

from cardstudio.api.deps import get_design_service, get_pass_coordinator
from cardstudio.core.exceptions import (
    ActivationConflict,
    DesignError,
    DesignNotFound,
    DesignValidationError,
    LimitExceededError,
    TransportFailure,
)
from cardstudio.domain.schemas import CardDesign, CardDesignCreate, CardDesignUpdate
from cardstudio.services.design_service import CardDesignService
from cardstudio.services.pass_coordinator import PassCoordinator

logger = logging.getLogger(__name__)

router = APIRouter()


def http_error(error: DesignError) -> HTTPException:
    """Map a design error onto the HTTP status the dashboard expects."""
    if isinstance(error, DesignValidationError):
        return HTTPException(status_code=422, detail=error.to_detail())
    if isinstance(error, LimitExceededError):
        return HTTPException(status_code=403, detail=error.to_detail())
    if isinstance(error, ActivationConflict):
        return HTTPException(status_code=409, detail=error.message)
    if isinstance(error, DesignNotFound):
        return HTTPException(status_code=404, detail=error.message)
    if isinstance(error, TransportFailure):
        return HTTPException(status_code=502, detail=error.message)
    return HTTPException(status_code=400, detail=error.message)


@router.get("/{business_id}", response_model=list[CardDesign])
def list_designs(
    business_id: str,
    service: CardDesignService = Depends(get_design_service),
):
    """Get all card designs for a business, newest first."""
    try:
        return service.list_designs(business_id)
    except DesignError as e:
        raise http_error(e)


@router.get("/{business_id}/active", response_model=CardDesign | None)
def get_active_design(
    business_id: str,
    service: CardDesignService = Depends(get_design_service),
):
    """Get the currently active card design for a business."""
    try:
        return service.get_active(business_id)
    except DesignError as e:
        raise http_error(e)


@router.get("/{business_id}/{design_id}", response_model=CardDesign)
def get_design(
    business_id: str,
    design_id: str,
    service: CardDesignService = Depends(get_design_service),
):
    try:
        return service.get_design(business_id, design_id)
    except DesignError as e:
        raise http_error(e)


@router.post("/{business_id}", response_model=CardDesign)
def create_design(
    business_id: str,
    data: CardDesignCreate,
    service: CardDesignService = Depends(get_design_service),
):
    """Create a new draft card design for a business."""
    try:
        return service.create(business_id, data)
    except DesignError as e:
        raise http_error(e)


@router.put("/{business_id}/{design_id}", response_model=CardDesign)
def update_design(
    business_id: str,
    design_id: str,
    data: CardDesignUpdate,
    background_tasks: BackgroundTasks,
    service: CardDesignService = Depends(get_design_service),
    coordinator: PassCoordinator = Depends(get_pass_coordinator),
):
    """Update a card design.

    If the design is active and the change affects the stamp strip, issued
    passes are refreshed in the background.
    """
    try:
        outcome = service.update(business_id, design_id, data)
    except DesignError as e:
        raise http_error(e)

    if outcome.refresh_passes:
        logger.info(f"Design {design_id} changed its strip, queueing pass refresh")
        background_tasks.add_task(
            coordinator.on_design_updated, business_id, outcome.design, True
        )

    return outcome.design


@router.delete("/{business_id}/{design_id}")
def delete_design(
    business_id: str,
    design_id: str,
    service: CardDesignService = Depends(get_design_service),
):
    """Delete a draft card design. The active design cannot be deleted."""
    try:
        service.delete(business_id, design_id)
    except DesignError as e:
        raise http_error(e)
    return {"message": "Design deleted"}


@router.post("/{business_id}/{design_id}/activate", response_model=CardDesign)
def activate_design(
    business_id: str,
    design_id: str,
    background_tasks: BackgroundTasks,
    service: CardDesignService = Depends(get_design_service),
    coordinator: PassCoordinator = Depends(get_pass_coordinator),
):
    """Set a design as active and push it to all issued passes."""
    try:
        design = service.activate(business_id, design_id)
    except DesignError as e:
        raise http_error(e)

    background_tasks.add_task(coordinator.on_design_activated, business_id, design)
    return design


@router.post("/{business_id}/{design_id}/duplicate", response_model=CardDesign)
def duplicate_design(
    business_id: str,
    design_id: str,
    service: CardDesignService = Depends(get_design_service),
):
    """Copy a design into a new draft."""
    try:
        return service.duplicate(business_id, design_id)
    except DesignError as e:
        raise http_error(e)


@router.post("/{business_id}/{design_id}/push", response_model=CardDesign)
def push_design(
    business_id: str,
    design_id: str,
    background_tasks: BackgroundTasks,
    service: CardDesignService = Depends(get_design_service),
    coordinator: PassCoordinator = Depends(get_pass_coordinator),
):
    """Re-send the active design to every issued pass."""
    try:
        design = service.push(business_id, design_id)
    except DesignError as e:
        raise http_error(e)

    background_tasks.add_task(coordinator.on_design_updated, business_id, design, True)
    return design
