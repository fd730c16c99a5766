from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Form, HTTPException, Request
from fastapi.responses import HTMLResponse, Response

from kingdom_gen.exceptions import (
    GeneratorNotReadyError,
    InvalidCountChoiceError,
    NodeNotToggleableError,
    UnknownNodeError,
    user_message,
)
from kingdom_gen.kingdom.request_builder import parse_count_choice
from kingdom_gen.kingdom.selection_tree import TreePurpose
from kingdom_gen.services.catalogue_loader import CatalogueState, get_catalogue_state
from kingdom_gen.settings import RANDOM_CHOICE

from ..app import templates
from ..services.orchestrator import SubmitOk, SubmitStale, submit_setup
from ..services.tasks import cleanup_expired, ensure_selection_trees, get_session, new_sid

router = APIRouter()


def _ensure_session(request: Request) -> tuple[str, Dict[str, Any]]:
    sid = request.cookies.get("sid") or new_sid()
    return sid, get_session(sid)


def _ready_state() -> CatalogueState:
    try:
        return get_catalogue_state()
    except GeneratorNotReadyError as e:
        raise HTTPException(status_code=503, detail=e.message) from e


def _purpose(raw: str) -> TreePurpose:
    try:
        return TreePurpose(raw)
    except ValueError:
        raise HTTPException(status_code=404, detail=f"Unknown tree '{raw}'") from None


@router.get("/", response_class=HTMLResponse)
async def home(request: Request) -> HTMLResponse:
    cleanup_expired()
    sid, sess = _ensure_session(request)
    try:
        state = get_catalogue_state()
    except GeneratorNotReadyError as e:
        resp = templates.TemplateResponse(
            request, "kingdom/index.html", {"ready": False, "message": e.message}, status_code=503
        )
        resp.set_cookie("sid", sid, httponly=True, samesite="lax")
        return resp
    trees = ensure_selection_trees(sess, state.catalogue)
    ctx = {
        "ready": True,
        "trees": [trees[purpose].to_context() for purpose in TreePurpose],
        "project_counts": list(state.project_count_options),
        "bane_counts": list(state.bane_count_options),
        "project_choice": sess.get("project_choice", RANDOM_CHOICE),
        "bane_choice": sess.get("bane_choice", RANDOM_CHOICE),
    }
    resp = templates.TemplateResponse(request, "kingdom/index.html", ctx)
    resp.set_cookie("sid", sid, httponly=True, samesite="lax")
    return resp


@router.post("/trees/{purpose}/toggle", response_class=HTMLResponse)
async def toggle_tree_node(request: Request, purpose: str, node_id: str = Form(...)) -> HTMLResponse:
    tree_purpose = _purpose(purpose)
    state = _ready_state()
    sid, sess = _ensure_session(request)
    tree = ensure_selection_trees(sess, state.catalogue)[tree_purpose]
    try:
        tree.toggle(node_id)
    except UnknownNodeError as e:
        raise HTTPException(status_code=404, detail=e.message) from e
    except NodeNotToggleableError as e:
        raise HTTPException(status_code=400, detail=e.message) from e
    resp = templates.TemplateResponse(request, "kingdom/_tree.html", {"tree": tree.to_context()})
    resp.set_cookie("sid", sid, httponly=True, samesite="lax")
    return resp


@router.post("/generate", response_class=HTMLResponse)
def generate(
    request: Request,
    project_count: str | None = Form(None),
    bane_count: str | None = Form(None),
) -> Response:
    # Sync handler: runs in the threadpool while the Generator is called.
    state = _ready_state()
    sid, sess = _ensure_session(request)
    try:
        projects = parse_count_choice(project_count, state.project_count_options, "project_count")
        banes = parse_count_choice(bane_count, state.bane_count_options, "bane_count")
    except InvalidCountChoiceError as e:
        raise HTTPException(status_code=400, detail=e.message) from e
    sess["project_choice"] = str(projects) if projects is not None else RANDOM_CHOICE
    sess["bane_choice"] = str(banes) if banes is not None else RANDOM_CHOICE

    outcome = submit_setup(sess, state, project_count=projects, bane_count=banes)
    if isinstance(outcome, SubmitStale):
        return Response(status_code=204, headers={"HX-Reswap": "none"})
    if isinstance(outcome, SubmitOk):
        ctx: Dict[str, Any] = {"display": outcome.display, "error_message": None, "error_code": None}
    else:
        ctx = {
            "display": None,
            "error_message": user_message(outcome.error),
            "error_code": getattr(outcome.error, "code", "ERROR"),
        }
    resp = templates.TemplateResponse(request, "kingdom/_results.html", ctx)
    resp.set_cookie("sid", sid, httponly=True, samesite="lax")
    return resp
