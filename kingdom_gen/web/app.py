from __future__ import annotations

from fastapi import FastAPI, Request, HTTPException
from fastapi.responses import HTMLResponse, PlainTextResponse, JSONResponse
from fastapi.templating import Jinja2Templates
from fastapi.staticfiles import StaticFiles
from pathlib import Path
import time
import uuid
import logging
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.gzip import GZipMiddleware
from contextlib import asynccontextmanager

from kingdom_gen import settings
from kingdom_gen.exceptions import KingdomGenError
from kingdom_gen.services import catalogue_loader

# Resolve template/static dirs relative to this file
_THIS_DIR = Path(__file__).resolve().parent
_TEMPLATES_DIR = _THIS_DIR / "templates"
_STATIC_DIR = _THIS_DIR / "static"


@asynccontextmanager
async def _lifespan(app: FastAPI):  # pragma: no cover - simple infra glue
    """Load the Generator catalogue once before serving.

    A Generator that cannot be reached leaves the app up but not ready: the
    page explains the problem and submits answer 503 until a restart.
    """
    try:
        catalogue_loader.initialize()
    except KingdomGenError as e:
        logging.getLogger("web").error(f"Generator initialization failed: {e}")
    yield  # (no shutdown tasks currently)


app = FastAPI(title="Dominion Kingdom Setup", lifespan=_lifespan)
app.add_middleware(GZipMiddleware, minimum_size=500)

# Mount static if present
if _STATIC_DIR.exists():
    app.mount("/static", StaticFiles(directory=str(_STATIC_DIR)), name="static")

# Jinja templates
templates = Jinja2Templates(directory=str(_TEMPLATES_DIR))

# Expose as Jinja globals so all templates can reference without passing per-view
templates.env.globals.update({
    "show_diagnostics": settings.SHOW_DIAGNOSTICS,
    "app_version": settings.APP_VERSION,
    "random_choice": settings.RANDOM_CHOICE,
    "tree_titles": settings.TREE_TITLES,
})

# --- Diagnostics: request-id and uptime ---
_APP_START_TIME = time.time()


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    """Assign or propagate a request id and attach to response headers."""
    rid = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    request.state.request_id = rid
    try:
        response = await call_next(request)
    except Exception as ex:
        # Log and re-raise so FastAPI exception handlers can format the response.
        logging.getLogger("web").error(f"Unhandled error [rid={rid}]: {ex}", exc_info=True)
        raise
    response.headers["X-Request-ID"] = rid
    return response


# Simple health check
@app.get("/healthz")
async def healthz():
    return {
        "status": "ok" if catalogue_loader.is_initialized() else "degraded",
        "version": settings.APP_VERSION,
        "uptime_seconds": int(time.time() - _APP_START_TIME),
        "generator_ready": catalogue_loader.is_initialized(),
    }


from .routes import kingdom as kingdom_routes  # noqa: E402
from .routes import api as api_routes  # noqa: E402
app.include_router(kingdom_routes.router)
app.include_router(api_routes.router)


# --- Exception handling ---
def _wants_html(request: Request) -> bool:
    accept = request.headers.get('accept', '')
    is_htmx = request.headers.get('hx-request') == 'true'
    return ("text/html" in accept) and not is_htmx


def _http_error_response(request: Request, status_code: int, detail, headers: dict | None, label: str):
    rid = getattr(request.state, "request_id", None) or uuid.uuid4().hex
    logging.getLogger("web").warning(
        f"{label} [rid={rid}] {status_code} {request.method} {request.url.path}: {detail}"
    )
    merged = {"X-Request-ID": rid}
    merged.update(headers or {})
    if _wants_html(request):
        template = "errors/404.html" if status_code == 404 else "errors/4xx.html"
        return templates.TemplateResponse(
            request,
            template,
            {"status": status_code, "detail": detail, "request_id": rid},
            status_code=status_code,
            headers=merged,
        )
    # JSON structure for HTMX/API
    return JSONResponse(status_code=status_code, content={
        "error": True,
        "status": status_code,
        "detail": detail,
        "request_id": rid,
        "path": str(request.url.path),
    }, headers=merged)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return _http_error_response(request, exc.status_code, exc.detail, getattr(exc, "headers", None), "HTTPException")


# Also handle Starlette's HTTPException (e.g., 404 route not found)
@app.exception_handler(StarletteHTTPException)
async def starlette_http_exception_handler(request: Request, exc: StarletteHTTPException):
    return _http_error_response(request, exc.status_code, exc.detail, getattr(exc, "headers", None), "HTTPException*")


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    rid = getattr(request.state, "request_id", None) or uuid.uuid4().hex
    logging.getLogger("web").error(
        f"Unhandled exception [rid={rid}] {request.method} {request.url.path}", exc_info=True
    )
    if _wants_html(request):
        try:
            return templates.TemplateResponse(request, "errors/500.html", {"request_id": rid}, status_code=500, headers={"X-Request-ID": rid})
        except Exception:
            return PlainTextResponse(f"Internal Server Error\nRequest-ID: {rid}", status_code=500, headers={"X-Request-ID": rid})
    return JSONResponse(status_code=500, content={
        "error": True,
        "status": 500,
        "detail": "Internal Server Error",
        "request_id": rid,
        "path": str(request.url.path),
    }, headers={"X-Request-ID": rid})
