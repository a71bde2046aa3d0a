"""
Questions Unlimited Backend: FastAPI Application Factory
=========================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() wires middleware, exception handlers and routers, and
       returns the app; uvicorn serves the module-level `app`
       (uvicorn questionbank.main:app).

Application Architecture:
    ┌───────────────────────────────────────────────────────────┐
    │                       FastAPI App                         │
    │                                                           │
    │  Middleware Chain:                                        │
    │  ┌──────────┐ ┌──────────┐ ┌──────┐ ┌──────┐              │
    │  │  Req ID  │→│ Logging  │→│ GZip │→│ CORS │              │
    │  └──────────┘ └──────────┘ └──────┘ └──────┘              │
    │                                                           │
    │  Routes:                                                  │
    │  ┌────────────────┐ ┌────────────────┐ ┌───────────────┐  │
    │  │ /api/v1/quest… │ │ …/{id}/answer  │ │ /, /health    │  │
    │  └────────────────┘ └────────────────┘ └───────────────┘  │
    │                                                           │
    │  Exception Handlers → {"status", "error"}:                │
    │  NotFound/Pagination/NoPayload→404  Unprocessable→422     │
    │  Store→400 (writes) / 500 (reads)   anything else→500     │
    └───────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:   logging, then QuestionBank.connect(); a configuration or
               connection failure aborts startup.
    Shutdown:  dispose the engine (close all pooled connections).
"""

import logging
import sys
from contextlib import asynccontextmanager
from http import HTTPStatus
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError

from questionbank import __version__
from questionbank.config import settings
from questionbank.database import QuestionBank
from questionbank.exceptions import (
    ConfigurationError,
    NoPayloadError,
    NotFoundError,
    PaginationInvalidError,
    QuestionBankError,
    StoreError,
    UnprocessableError,
)
from questionbank.middleware.logging import RequestLoggingMiddleware
from questionbank.middleware.request_id import RequestIDMiddleware, request_id_var
from questionbank.routes import answers, health, questions, web

logger = logging.getLogger(__name__)

# Methods whose StoreError is the client's fault (bad ids, constraint hits)
WRITE_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Handler: stdout (Docker captures it).
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # uvicorn.access duplicates questionbank.access
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    if settings.log_level != "DEBUG":
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup connects the QuestionBank (unless one was injected through
    create_app) and stores it on `app.state`; shutdown disposes it.

    A missing PG_* variable, an unreadable password file or an unreachable
    database is logged and re-raised, so uvicorn exits instead of serving
    requests that can only fail.
    """
    setup_logging()
    logger.info("=" * 60)
    logger.info("Questions Unlimited %s starting up...", __version__)

    if getattr(app.state, "question_bank", None) is None:
        try:
            app.state.question_bank = await QuestionBank.connect(settings)
        except ConfigurationError as e:
            logger.error("Configuration error: %s", e.message)
            logger.error("Fix the configuration and restart the server.")
            raise
        except (SQLAlchemyError, OSError) as e:
            logger.error("Could not connect to the database: %s", str(e))
            raise

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("API docs: http://%s:%d/docs", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("Questions Unlimited shutting down...")
    await app.state.question_bank.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def current_request_id(request: Request) -> str:
    # The catch-all handler runs outside RequestIDMiddleware, after the
    # ContextVar was reset; request.state still holds the id.
    return getattr(request.state, "request_id", None) or request_id_var.get("")


def error_response(request: Request, status_code: int, message: str) -> JSONResponse:
    """The one error body every failure is rendered as."""
    content = {
        "status": f"{status_code} {HTTPStatus(status_code).phrase}",
        "error": message,
    }
    rid = current_request_id(request)
    if rid:
        content["request_id"] = rid
    return JSONResponse(status_code=status_code, content=content)


def status_for(request: Request, exc: QuestionBankError) -> int:
    """Map an error kind to its HTTP status."""
    if isinstance(exc, (NotFoundError, PaginationInvalidError, NoPayloadError)):
        return 404
    if isinstance(exc, UnprocessableError):
        return 422
    if isinstance(exc, StoreError) and request.method in WRITE_METHODS:
        return 400
    return 500


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register global exception handlers for consistent error responses.

    Handler hierarchy:
        NotFoundError / PaginationInvalidError / NoPayloadError  → 404
        UnprocessableError, RequestValidationError               → 422
        StoreError on POST/PUT/DELETE                            → 400
        StoreError on GET                                        → 500
        Exception (fallback)                                     → 500

    Driver errors and stack traces are logged server-side, never returned.
    """

    @app.exception_handler(QuestionBankError)
    async def handle_question_bank_error(request: Request, exc: QuestionBankError):
        code = status_for(request, exc)
        rid = current_request_id(request)
        if code >= 500:
            logger.error("[%s] %s | Context: %s", rid, exc.message, exc.context)
        else:
            logger.warning("[%s] %s: %s", rid, type(exc).__name__, exc.message)
        return error_response(request, code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        """Malformed JSON, missing fields or bad query values."""
        problems = []
        for err in exc.errors():
            location = ".".join(str(part) for part in err.get("loc", ()))
            problems.append(f"{location}: {err.get('msg')}")
        message = "Unprocessable entity: " + "; ".join(problems)
        logger.warning("[%s] %s", current_request_id(request), message)
        return error_response(request, 422, message)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            current_request_id(request),
            str(exc),
            exc_info=True,
        )
        return error_response(
            request,
            500,
            "An unexpected error occurred. Please try again later.",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(question_bank: Optional[QuestionBank] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        question_bank: an already-connected bank (tests pass one backed by
                       in-memory SQLite); when None the lifespan connects
                       using the environment settings.
    """
    app = FastAPI(
        title="Questions Unlimited API",
        description=(
            "A trivia question bank: questions with tags and answers, "
            "stored in PostgreSQL and served as JSON."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/api-docs/openapi.json",
        lifespan=lifespan,
    )
    app.state.question_bank = question_bank

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Total-Count"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(questions.router, prefix=settings.api_prefix)
    app.include_router(answers.router, prefix=settings.api_prefix)
    app.include_router(health.router)
    app.include_router(web.router)
    app.mount("/static", StaticFiles(directory=str(web.STATIC_DIR)), name="static")

    return app


app = create_app()
