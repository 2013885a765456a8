"""
FormBridge - FastAPI Application Factory
=========================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() wires middleware, exception handlers, routes and the
       SubmissionService; uvicorn imports the module-level ``app``.
Who:   ``uvicorn formbridge.main:app`` or ``python -m formbridge``.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌──────────┐ ┌──────┐ ┌──────┐        │
    │  │  Req ID  │→│ Logging  │→│ GZip │→│ CORS │        │
    │  └──────────┘ └──────────┘ └──────┘ └──────┘        │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────┐ ┌────────────────┐ ┌───────────┐  │
    │  │ POST /submit │ │ OPTIONS /submit│ │GET /health│  │
    │  └──────────────┘ └────────────────┘ └───────────┘  │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌───────────────────────────────────────────────┐  │
    │  │ ValidationError→400 │ RemoteStoreError→500    │  │
    │  │ FormBridgeError→500 │ Exception→500           │  │
    │  └───────────────────────────────────────────────┘  │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, validate GITHUB_TOKEN (startup aborts without it),
              build GitHubContentStore + SubmissionService unless one was injected
    Shutdown: close the store's HTTP connection pool
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from formbridge import __version__
from formbridge.config import Settings, settings as default_settings
from formbridge.exceptions import FormBridgeError, RemoteStoreError, ValidationError
from formbridge.middleware.logging import RequestLoggingMiddleware
from formbridge.middleware.request_id import RequestIDMiddleware, request_id_var
from formbridge.routes import health, submit
from formbridge.services.content_store import ContentStore
from formbridge.services.github_store import GitHubContentStore
from formbridge.services.submission_service import SubmissionService
from formbridge.services.variants import get_variant

logger = logging.getLogger(__name__)

GENERIC_ERROR = "Internal error"


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(config: Settings) -> None:
    """
    Configure logging for the whole process.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s, to stdout.
    httpx logs every outbound request at INFO; it is raised to WARNING since
    the content store logs its own calls with paths and shas.
    """
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def build_submission_service(config: Settings, store: ContentStore) -> SubmissionService:
    variant = get_variant(
        config.submission_variant,
        records_path=config.records_path,
        images_dir=config.images_dir,
    )
    return SubmissionService(
        store=store,
        variant=variant,
        max_attempts=config.conflict_retry_attempts,
        min_wait=config.conflict_retry_min_wait,
        max_wait=config.conflict_retry_max_wait,
    )


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP responses.

        ValidationError   → 400 {"error": "Missing required fields", "details": {...}}
        RemoteStoreError  → 500 {"error": "Internal error"}   (GitHub detail logged)
        FormBridgeError   → 500 {"error": "Internal error"}
        Exception         → 500 {"error": "Internal error"}   (stack trace logged)

    No partial-completion state is reported: an image committed before a
    failed record-list write is not mentioned in the response.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Validation error: %s %s", rid, exc.message, exc.missing)
        return JSONResponse(
            status_code=400,
            content={
                "error": exc.message,
                "details": exc.context,
                "request_id": rid,
            },
        )

    @app.exception_handler(RemoteStoreError)
    async def handle_remote_store_error(request: Request, exc: RemoteStoreError):
        rid = request_id_var.get("")
        logger.error(
            "[%s] %s: %s | Context: %s",
            rid,
            type(exc).__name__,
            exc.message,
            exc.context,
        )
        return JSONResponse(
            status_code=500,
            content={"error": GENERIC_ERROR, "request_id": rid},
        )

    @app.exception_handler(FormBridgeError)
    async def handle_app_error(request: Request, exc: FormBridgeError):
        rid = request_id_var.get("")
        logger.error("[%s] %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={"error": GENERIC_ERROR, "request_id": rid},
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"error": GENERIC_ERROR, "request_id": rid},
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    config: Optional[Settings] = None,
    store: Optional[ContentStore] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config: Settings to use; defaults to the environment-loaded singleton.
        store:  Pre-built content store. When given, the SubmissionService is
                wired immediately and the lifespan neither validates the token
                nor closes the store (the caller owns it). Tests pass a fake here.
    """
    config = config or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        setup_logging(config)
        logger.info("=" * 60)
        logger.info("FormBridge %s starting up (variant=%s)", __version__, config.submission_variant)

        owned_store: Optional[ContentStore] = None
        if getattr(app.state, "submission_service", None) is None:
            try:
                config.validate_required()
            except ValueError as e:
                logger.error("Configuration error: %s", str(e))
                raise RuntimeError("FormBridge cannot start without a valid configuration") from e
            owned_store = GitHubContentStore(config.content_store_config())
            app.state.submission_service = build_submission_service(config, owned_store)

        service: SubmissionService = app.state.submission_service
        logger.info(
            "Records: %s | images: %s/ | conflict attempts: %d",
            service.variant.records_path,
            service.variant.images_dir,
            service.max_attempts,
        )
        logger.info("Server ready at http://%s:%d", config.host, config.port)
        logger.info("=" * 60)

        yield

        logger.info("FormBridge shutting down...")
        if owned_store is not None:
            await owned_store.close()
        logger.info("Shutdown complete.")

    app = FastAPI(
        title="FormBridge API",
        description=(
            "Accepts public form submissions and stores them in a GitHub repository: "
            "images as new files, entries appended to a JSON list."
        ),
        version=__version__,
        lifespan=lifespan,
    )
    app.state.submission_service = (
        build_submission_service(config, store) if store is not None else None
    )

    # Executes in reverse order of addition: RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins_list,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(submit.router)
    app.include_router(health.router)

    return app


app = create_app()
