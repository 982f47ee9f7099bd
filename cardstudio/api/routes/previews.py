from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response

from cardstudio.api.deps import get_design_service
from cardstudio.api.routes.designs import http_error
from cardstudio.core.exceptions import DesignError
from cardstudio.domain.schemas import MAX_STAMPS, CardDesignContent
from cardstudio.services import placeholder_pattern
from cardstudio.services.design_service import CardDesignService
from cardstudio.services.preview_image import StripPreviewGenerator
from cardstudio.services.rendering import CODE_PREVIEW_SIZE, Surface, TiltPreviewRenderer, get_renderer

router = APIRouter()


def _png(content: bytes) -> Response:
    return Response(
        content=content,
        media_type="image/png",
        headers={"Cache-Control": "no-store"},
    )


@router.post("/render/{surface}")
def render_design(
    surface: Surface,
    design: CardDesignContent,
    filled: int = Query(0, ge=0),
    organization_name: Optional[str] = Query(None),
    pointer_x: Optional[float] = Query(None),
    pointer_y: Optional[float] = Query(None),
    width: Optional[float] = Query(None),
    height: Optional[float] = Query(None),
):
    """Render model of an unsaved design for one card surface."""
    model = get_renderer(surface, organization_name=organization_name).render(design, filled)
    data = model.to_dict()

    if model.code_pattern is not None:
        data["code_image"] = placeholder_pattern.render_data_url(
            placeholder_pattern.generate(CODE_PREVIEW_SIZE)
        )

    if surface == Surface.TILT and None not in (pointer_x, pointer_y, width, height):
        data["tilt"] = asdict(TiltPreviewRenderer.tilt(pointer_x, pointer_y, width, height))

    return data


@router.post("/strip.png")
def render_strip(
    design: CardDesignContent,
    stamps: int = Query(0, ge=0, le=MAX_STAMPS),
):
    """PNG strip preview of an unsaved design."""
    return _png(StripPreviewGenerator(design).generate(stamps))


@router.get("/placeholder-code.png")
def render_placeholder_code(size: int = Query(140, ge=21, le=1024)):
    """The illustrative scan code shown on card previews."""
    return _png(placeholder_pattern.render_png(placeholder_pattern.generate(size)))


@router.get("/{business_id}/{design_id}/strip.png")
def render_saved_strip(
    business_id: str,
    design_id: str,
    stamps: int = Query(0, ge=0, le=MAX_STAMPS),
    service: CardDesignService = Depends(get_design_service),
):
    """PNG strip preview of a saved design."""
    try:
        design = service.get_design(business_id, design_id)
    except DesignError as e:
        raise http_error(e)

    return _png(StripPreviewGenerator(design).generate(stamps))
