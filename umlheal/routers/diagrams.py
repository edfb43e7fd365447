"""
Diagram API Endpoints

REST endpoints for healing generated diagram text, validating a single
fragment and rendering a finalized diagram to PNG.
"""

from fastapi import APIRouter, Depends, HTTPException
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import Response
import logging

from ..pipeline import DiagramPipeline
from ..plantuml_validator import PlantUMLValidator, get_plantuml_validator
from ..schemas import (
    DiagramTextRequest,
    HealedDiagramResponse,
    HealResponse,
    RenderRequest,
    ValidationResponse,
)
from ..tools.plantuml_renderer import PlantUMLRenderer, get_plantuml_renderer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/diagrams", tags=["diagrams"])


def get_pipeline() -> DiagramPipeline:
    return DiagramPipeline()


@router.post("/heal", response_model=HealResponse)
async def heal_diagram_text(
    request: DiagramTextRequest,
    pipeline: DiagramPipeline = Depends(get_pipeline),
):
    """Return one valid diagram per fragment found in the text."""
    # Blocking work runs in the threadpool
    results = await run_in_threadpool(pipeline.process, request.text)
    diagrams = [
        HealedDiagramResponse(
            ordinal=result.ordinal,
            title=result.diagram.title,
            plantuml=result.diagram.to_plantuml(),
            state=result.state.value,
            attempts=result.attempts_made,
            level=result.level,
            fallback_used=result.fallback_used,
            reasons=[reason.value for reason in result.reasons],
        )
        for result in results
    ]
    return HealResponse(diagrams=diagrams, fragment_count=len(diagrams))


@router.post("/validate", response_model=ValidationResponse)
async def validate_fragment(
    request: DiagramTextRequest,
    validator: PlantUMLValidator = Depends(get_plantuml_validator),
):
    """Validate a single fragment without repairing it."""
    verdict = validator.validate(request.text)
    return ValidationResponse(
        valid=verdict.is_valid,
        reason=verdict.reason.value if verdict.reason else None,
        detail=verdict.detail,
    )


@router.post("/render")
async def render_diagram(
    request: RenderRequest,
    renderer: PlantUMLRenderer = Depends(get_plantuml_renderer),
):
    """Render PlantUML source to a PNG image."""
    png = await run_in_threadpool(renderer.render_png, request.plantuml)
    if png is None:
        logger.warning("Render request failed; renderer unavailable or rejected the source")
        raise HTTPException(status_code=503, detail="Diagram rendering unavailable")
    return Response(content=png, media_type="image/png")
