"""
CatRouter - FastAPI Application Factory
=======================================

What:  Creates the host FastAPI application and wires the cat route module into it.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
       The route module is mounted and unmounted by the app lifespan.
Who:   Called by uvicorn (`uvicorn catrouter.main:app`) and by `python -m catrouter`.
When:  Once at server startup.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────────────────────┐ ┌──────┐ ┌──────┐     │
    │  │ AccessLog (+ request ID) │→│ GZip │→│ CORS │     │
    │  └──────────────────────────┘ └──────┘ └──────┘     │
    │                                                     │
    │  Routes:                                            │
    │  ┌───────────────────────────────┐ ┌─────────────┐  │
    │  │ /api/tutorials-router/cats    │ │ GET /health │  │
    │  │ (mounted by HostServer.use)   │ └─────────────┘  │
    │  └───────────────────────────────┘                  │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ UploadRejected→400 │ CatRouterError→500 │ 500 │  │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Load the cat router into the host (mounts its routes)

    Shutdown:
    1. Unload the cat router (unmounts its routes)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from catrouter import __version__
from catrouter.config import Settings, settings as default_settings
from catrouter.exceptions import CatRouterError, UploadRejectedError
from catrouter.host import HostServer
from catrouter.middleware.logging import AccessLogMiddleware, request_id_var
from catrouter.routes import health
from catrouter.routes.cats import CatRouter
from catrouter.services.upload_service import UploadConfig

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Output: stdout (Docker captures it)
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("multipart").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Load the cat router on startup and unload it on shutdown.

    Lifecycle errors are not caught here: a module that cannot be mounted
    aborts startup.
    """
    app_settings: Settings = app.state.settings
    setup_logging(app_settings.log_level)
    logger.info("CatRouter %s starting up...", __version__)

    host: HostServer = app.state.host
    cat_router: CatRouter = app.state.cat_router

    await cat_router.load(host)
    if cat_router.accepts_uploads:
        logger.info("Uploads stored in %s", host.temp_dir())
    logger.info(
        "Server ready at http://%s:%d",
        app_settings.backend_host,
        app_settings.backend_port,
    )

    yield

    logger.info("CatRouter shutting down...")
    if cat_router.loaded:
        await cat_router.unload()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes and response bodies.

    Handler hierarchy:
        UploadRejectedError    → 400 Bad Request (client can fix the form)
        CatRouterError (base)  → 500 Internal Server Error
        Exception (fallback)   → 500 Internal Server Error

    Storage and existence failures never reach these handlers: the upload
    service reports them in the POST body.
    """

    @app.exception_handler(UploadRejectedError)
    async def handle_upload_rejected(request: Request, exc: UploadRejectedError):
        """Multipart form did not carry exactly one file under the upload field."""
        rid = request_id_var.get("")
        request.state.upload_outcome = "rejected"
        logger.warning("[%s] Upload rejected: %s", rid, exc.message)
        return JSONResponse(
            status_code=400,
            content={
                "error": "upload_rejected",
                "message": exc.message,
                "details": exc.context,
                "request_id": rid,
            },
        )

    @app.exception_handler(CatRouterError)
    async def handle_cat_router_error(request: Request, exc: CatRouterError):
        rid = request_id_var.get("")
        logger.error("[%s] Application error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={
                "error": "server_error",
                "message": exc.message,
                "request_id": rid,
            },
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """
        Catch-all for truly unexpected errors.

        Stack trace is logged server-side only; the client gets a generic
        message and the request ID.
        """
        rid = request_id_var.get("")
        logger.error(
            "[%s] Unexpected error: %s",
            rid,
            str(exc),
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred. Please try again or contact support.",
                "request_id": rid,
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def build_cat_router(app_settings: Settings, host: HostServer) -> CatRouter:
    """Build the GET-only or the upload variant of the cat router."""
    upload = None
    if app_settings.enable_uploads:
        upload = UploadConfig.from_settings(app_settings, host.temp_dir())
    return CatRouter(upload=upload, mount_path=app_settings.mount_path)


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        app_settings: Settings to use; defaults to the module-level singleton.

    Returns:
        FastAPI instance with the host adapter and the cat router attached to
        `app.state`. The cat routes appear once the lifespan has started.
    """
    app_settings = app_settings or default_settings

    app = FastAPI(
        title="CatRouter API",
        description="Pluggable cat route module with a single-file upload endpoint.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition:
    # AccessLog → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(AccessLogMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(health.router)

    # ── Host & Route Module ───────────────────────────────────────────────
    host = HostServer(app, app_settings.upload_dir_path)
    app.state.settings = app_settings
    app.state.host = host
    app.state.cat_router = build_cat_router(app_settings, host)

    return app


# ── Application Instance ─────────────────────────────────────────────────
# uvicorn expects `catrouter.main:app` to be importable
app = create_app()
