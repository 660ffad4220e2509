"""
FITNESS CHAT MAIN API
=====================

This module defines the FastAPI application and its HTTP endpoints. The server
is a thin relay: it takes one chat message, asks OpenRouter for a fitness coach
reply (rotating API keys on rate limits), and returns the reply.

ENDPOINTS:
  GET  /api/test  - Connectivity check; also reports how many API keys are configured.
  POST /api/chat  - Send {"message": "..."}; returns {"message": "<reply>"}.
  GET  /*         - Production only: the built frontend (STATIC_DIR), if present.

ERRORS:
  400 {"error": "Message is required"}           - missing or empty message.
  500 {"error": "No API keys configured"}        - key pool is empty.
  500 {"error": "Failed to process your request. Please try again later."}
      - anything else; with NODE_ENV=development a "details" field is added.

  A missing body or a non-string message on /api/chat is also a 400, not a 422.

STARTUP:
  create_app() receives a Settings object (config.load_settings() by default).
  It builds the key pool; the lifespan function opens one shared httpx client and
  the CompletionService; on shutdown it closes the client.
"""


from fastapi import FastAPI, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
from typing import Any, Optional
import httpx
import logging

from config import Settings, load_settings
from fitness_chat.errors import CompletionError, NoCredentialsConfigured
from fitness_chat.models import ChatRequest, ChatResponse, ConnectionTestResponse, ErrorResponse
from fitness_chat.services.completion_service import CompletionService
from fitness_chat.services.key_pool import KeyPool

MESSAGE_REQUIRED = "Message is required"
NO_KEYS_MESSAGE = "No API keys configured"
GENERIC_FAILURE_MESSAGE = "Failed to process your request. Please try again later."


# -----------------------------------------------------------------------------
# LOGGING
# -----------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s | %(levelname)-8s | %(name)-20s | %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
logger = logging.getLogger("fitness_chat")


class SPAStaticFiles(StaticFiles):
    """StaticFiles that falls back to index.html so client-side routes still load."""

    async def get_response(self, path: str, scope):
        try:
            response = await super().get_response(path, scope)
        except StarletteHTTPException as e:
            if e.status_code != 404:
                raise
            return await super().get_response("index.html", scope)
        if response.status_code == 404:
            return await super().get_response("index.html", scope)
        return response


def _error_response(settings: Settings, error: str, details: Any = None, status_code: int = 500) -> JSONResponse:
    """Build an error body; details only when the environment is explicitly development."""
    body = {"error": error}
    if details is not None and settings.show_error_details and not settings.is_production:
        body["details"] = details
    return JSONResponse(status_code=status_code, content=body)


def create_app(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """
    Build the FastAPI app for the given settings.

    transport is handed to the upstream httpx client; tests pass an
    httpx.MockTransport here instead of calling OpenRouter.
    """
    if settings is None:
        settings = load_settings()

    key_pool = KeyPool.initialize(settings.credentials)

    # -------------------------------------------------------------------------
    # LIFESPAN (STARTUP / SHUTDOWN)
    # -------------------------------------------------------------------------
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        STARTUP: open the shared httpx client and create the CompletionService.
        SHUTDOWN: close the httpx client.

        An empty key pool is not fatal here; /api/chat reports it per request.
        """
        logger.info("=" * 60)
        logger.info("Fitness Chat - Starting Up...")
        logger.info("=" * 60)

        async with httpx.AsyncClient(transport=transport, timeout=settings.request_timeout) as http_client:
            app.state.completion_service = CompletionService(key_pool, http_client, settings)

            logger.info("Server running on port %s (%s mode)", settings.port, settings.mode.value)
            logger.info("Frontend should be available at %s", settings.app_url)
            logger.info("Configured with %s API keys", key_pool.size)
            if not key_pool:
                logger.warning("No API keys configured. Set OPENROUTER_API_KEY_1 .. OPENROUTER_API_KEY_5 in .env.")
            logger.info("=" * 60)

            yield

            logger.info("Shutting down Fitness Chat...")

    # -------------------------------------------------------------------------
    # FASTAPI APP AND CORS
    # -------------------------------------------------------------------------
    app = FastAPI(
        title="Fitness Chat API",
        description="Fitness coach chat relay for OpenRouter",
        lifespan=lifespan
    )
    app.state.settings = settings
    app.state.key_pool = key_pool

    # Production accepts requests only from APP_URL; development from the local frontend.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.cors_origin],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # =========================================================================
    # API ENDPOINTS
    # =========================================================================

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        """/api/chat body errors (no body, bad JSON, non-string message) count as a missing message."""
        if request.url.path == "/api/chat":
            return _error_response(settings, MESSAGE_REQUIRED, status_code=400)
        return await request_validation_exception_handler(request, exc)

    @app.get("/api/test", response_model=ConnectionTestResponse)
    async def api_test():
        """Connectivity check for the frontend; reports the number of configured keys."""
        return ConnectionTestResponse(
            message="Backend connection successful!",
            availableKeys=key_pool.size,
        )

    @app.post(
        "/api/chat",
        response_model=ChatResponse,
        responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    )
    async def chat(request: ChatRequest):
        """
        Chat endpoint - send one message to the fitness coach.

        HOW IT WORKS:
        1. Rejects a missing/empty message with 400 before any upstream call.
        2. Rejects the request with 500 if no API keys are configured.
        3. Calls CompletionService.complete(), which rotates keys on rate limits.
        4. Returns {"message": reply}, or a generic 500 on any failure.
        """
        if not request.message:
            return _error_response(settings, MESSAGE_REQUIRED, status_code=400)

        if not key_pool:
            return _error_response(settings, NO_KEYS_MESSAGE)

        try:
            reply = await app.state.completion_service.complete(request.message)
            return ChatResponse(message=reply)
        except NoCredentialsConfigured:
            return _error_response(settings, NO_KEYS_MESSAGE)
        except CompletionError as e:
            logger.error(f"Error calling AI API: {e} ({e.details()})")
            return _error_response(settings, GENERIC_FAILURE_MESSAGE, details=e.details())
        except Exception as e:
            logger.error(f"Unexpected error processing chat: {e}", exc_info=True)
            return _error_response(settings, GENERIC_FAILURE_MESSAGE, details=str(e))

    # -------------------------------------------------------------------------
    # BUILT FRONTEND (production only)
    # -------------------------------------------------------------------------
    # Mounted last so /api/* routes win over the catch-all static mount.
    if settings.is_production:
        if settings.static_dir.is_dir():
            app.mount("/", SPAStaticFiles(directory=settings.static_dir, html=True), name="frontend")
            logger.info("Serving frontend from %s", settings.static_dir)
        else:
            logger.info("No frontend build at %s; running API-only", settings.static_dir)

    return app


app = create_app()
