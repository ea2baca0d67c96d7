"""FastAPI application entry point: local API for the editor UI."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from editorstore import __version__
from editorstore.changelog.routes import router as changes_router
from editorstore.config import get_settings
from editorstore.errors import (
    AlreadyExistsError,
    MalformedChangeError,
    NotFoundError,
    TransactionAbortedError,
)
from editorstore.files.routes import router as files_router
from editorstore.limiter import limiter
from editorstore.projects.routes import router as projects_router
from editorstore.settings.routes import router as settings_router
from editorstore.storage import LocalStorage
from editorstore.sync.routes import router as sync_router

log = logging.getLogger(__name__)


def _setup_logging() -> None:
    """Configure logging from settings (stderr always; optional file)."""
    settings = get_settings()
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    fmt = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    root = logging.getLogger("editorstore")
    root.setLevel(level)
    root.handlers.clear()
    sh = logging.StreamHandler()
    sh.setLevel(level)
    sh.setFormatter(fmt)
    root.addHandler(sh)
    if settings.log_file and str(settings.log_file).strip():
        try:
            fh = logging.FileHandler(settings.log_file, encoding="utf-8")
            fh.setLevel(level)
            fh.setFormatter(fmt)
            root.addHandler(fh)
            root.info("Logging to file %s", settings.log_file)
        except OSError as e:
            root.warning("Could not open log file %s: %s", settings.log_file, e)
    else:
        root.debug("Logging to stderr only (no log_file set)")


_setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the store on startup, close it on shutdown."""
    settings = get_settings()
    log.info("Startup: opening store %s", settings.db_path)
    storage = LocalStorage(settings.db_path)
    await storage.connect()
    app.state.storage = storage
    log.info("Startup complete")
    yield
    await storage.close()
    log.info("Shutdown")


app = FastAPI(title="Editor Store API", version=__version__, lifespan=lifespan)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["*"],
)


def _error(status_code: int, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return _error(404, exc)


@app.exception_handler(AlreadyExistsError)
async def already_exists_handler(request: Request, exc: AlreadyExistsError):
    return _error(409, exc)


@app.exception_handler(MalformedChangeError)
async def malformed_handler(request: Request, exc: MalformedChangeError):
    log.warning("Rejected malformed change: %s", exc)
    return _error(422, exc)


@app.exception_handler(TransactionAbortedError)
async def aborted_handler(request: Request, exc: TransactionAbortedError):
    """Storage failure; the caller may retry."""
    return _error(503, exc)


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    """Return generic 500 without leaking stack trace or internals."""
    if isinstance(exc, HTTPException):
        raise exc
    log.exception("Unhandled exception: %s", exc)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )


app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.include_router(projects_router)
app.include_router(files_router)
app.include_router(settings_router)
app.include_router(changes_router)
app.include_router(sync_router)


@app.get("/health")
@limiter.exempt
def health() -> JSONResponse:
    """Health check. Exempt from rate limiting."""
    return JSONResponse(content={"status": "ok"})
