"""JSON API endpoints (catalogue and one-shot generation)."""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from kingdom_gen.exceptions import (
    ConflictError,
    GenerationError,
    GeneratorNotReadyError,
    GeneratorUnavailableError,
    InternalDefectError,
    KingdomGenError,
    user_message,
)
from kingdom_gen.services.catalogue_loader import get_catalogue_state

from ..models.kingdom_api import CatalogueOut, DisplayModelOut, GenerateRequestBody, SetupOut
from ..services.orchestrator import SubmitOk, generate_display


router = APIRouter(prefix="/api")


def _status_for(error: BaseException) -> int:
    if isinstance(error, ConflictError):
        return 409
    if isinstance(error, (GeneratorUnavailableError, GeneratorNotReadyError)):
        return 503
    # Unsatisfiable constraints and any other failure the Generator reported
    if isinstance(error, GenerationError):
        return 422
    return 500


def _error_response(error: KingdomGenError) -> JSONResponse:
    payload = error.to_dict()
    payload["message"] = user_message(error)
    if isinstance(error, InternalDefectError):
        payload["details"] = {}
    return JSONResponse({"ok": False, "error": payload}, status_code=_status_for(error))


@router.get("/catalogue")
async def get_catalogue():
    """
    Catalogue as loaded at startup.

    Returns:
        JSON with ``expansion_cards`` plus the legal project and bane counts
    """
    try:
        state = get_catalogue_state()
    except GeneratorNotReadyError as e:
        return _error_response(e)
    out = CatalogueOut(
        expansion_cards={exp: list(cards) for exp, cards in state.catalogue.items()},
        project_counts=list(state.project_count_options),
        bane_counts=list(state.bane_count_options),
    )
    return JSONResponse(out.model_dump())


@router.post("/generate")
def api_generate(body: GenerateRequestBody):
    """
    Generate a setup from explicit constraints.

    Returns:
        ``{"ok": true, "display": ..., "setup": ...}`` or ``{"ok": false, "error": ...}``
    """
    try:
        state = get_catalogue_state()
    except GeneratorNotReadyError as e:
        return _error_response(e)
    request = body.to_generation_request()
    outcome = generate_display(state, request)
    if isinstance(outcome, SubmitOk):
        return JSONResponse({
            "ok": True,
            "request": request.to_payload(),
            "display": DisplayModelOut(**outcome.display.to_dict()).model_dump(),
            "setup": SetupOut(**outcome.setup.to_payload()).model_dump(),
        })
    return _error_response(outcome.error)
