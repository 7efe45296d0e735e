"""Doc Creator FastAPI application."""

import logging
from datetime import datetime, timezone
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import settings
from errors import DocCreatorError
from document.exporter import cleanup_old_files
from document.store import select_store
from api import ai, docs, export, github

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(title="Doc Creator API", version="1.0.0")


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


@app.middleware("http")
async def limit_body_size(request: Request, call_next):
    length = request.headers.get("content-length")
    if length and length.isdigit() and int(length) > settings.max_body_bytes:
        return _error_response(413, "Request body too large")
    return await call_next(request)


# Added after the size check so CORS headers also reach 413 responses.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(DocCreatorError)
async def doc_creator_error_handler(request: Request, exc: DocCreatorError):
    return _error_response(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    problems = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        problems.append(f"{field}: {err.get('msg')}" if field else str(err.get("msg")))
    return _error_response(400, "Invalid request: " + "; ".join(problems))


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return _error_response(404, "Route not found")
    return _error_response(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    message = "Internal server error" if settings.is_production else str(exc) or "Internal server error"
    return _error_response(500, message)


app.include_router(github.router)
app.include_router(ai.router)
app.include_router(docs.router)
app.include_router(export.router)


@app.on_event("startup")
async def startup():
    """Pick the document store, prepare directories and sweep old exports."""
    app.state.store = await select_store(settings.database_url)

    for directory in (settings.upload_dir, settings.temp_dir):
        Path(directory).mkdir(parents=True, exist_ok=True)
    cleanup_old_files(settings.upload_dir, settings.export_retention_hours)

    logger.info(
        f"Doc Creator ready: env={settings.app_env}, storage={app.state.store.mode}, "
        f"openrouter={'configured' if settings.has_openrouter_key else 'missing'}, "
        f"github={'token' if settings.github_token else 'anonymous'}"
    )


@app.on_event("shutdown")
async def shutdown():
    store = getattr(app.state, "store", None)
    close = getattr(store, "close", None)
    if close is not None:
        await close()


@app.get("/api/health")
async def health(request: Request):
    store = getattr(request.app.state, "store", None)
    return {
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.app_env,
        "openrouter": "configured" if settings.has_openrouter_key else "missing",
        "github": "configured" if settings.github_token else "anonymous",
        "storage": store.mode if store is not None else "uninitialized",
    }
