"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Query, Request
from fastapi.responses import JSONResponse

from life_tracker.api.models import VoiceCommandRequest, VoiceRequest
from life_tracker.app_logging import configure_logging
from life_tracker.containers import AppContainer
from life_tracker.domain.errors import (
    InvalidInputError,
    MalformedResponseError,
    NotFoundError,
    NutritionLookupFailedError,
    ServiceUnavailableError,
    UpstreamError,
    VoiceError,
)


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(VoiceError)
    async def voice_error_handler(request: Request, exc: VoiceError) -> JSONResponse:
        status_code = _status_for(exc)
        if status_code >= 500:
            logger.warning("Voice request failed: %s: %s", type(exc).__name__, exc)
        state_container: AppContainer = request.app.state.container
        return JSONResponse(
            status_code=status_code,
            content={"error": _format_error(state_container, exc)},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/voice/understand")
    async def voice_understand(
        body: VoiceRequest, request: Request
    ) -> dict[str, object]:
        """Parse a transcript into actions without applying them."""
        state_container: AppContainer = request.app.state.container
        result = await state_container.voice_assistant.understand(
            body.transcript, body.language_hint, body.today
        )
        return result.to_payload()

    @app.post("/voice/command")
    async def voice_command(
        body: VoiceCommandRequest, request: Request
    ) -> dict[str, object]:
        """Parse a transcript and apply its actions to the user's stores."""
        state_container: AppContainer = request.app.state.container
        handles = state_container.build_handles(body.user_id)
        outcome = await state_container.voice_assistant.handle(
            body.transcript, handles, body.language_hint, body.today
        )
        return outcome.to_payload()

    @app.get("/foods/search")
    async def foods_search(
        request: Request,
        q: str = "",
        limit: int = Query(default=10),
    ) -> dict[str, object]:
        """Return candidate foods with macros per 100 g."""
        state_container: AppContainer = request.app.state.container
        results = await state_container.nutrition_resolver.search(q, limit=limit)
        return {"items": [facts.to_payload() for facts in results]}

    return app


def _status_for(exc: VoiceError) -> int:
    if isinstance(exc, InvalidInputError):
        return 400
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, ServiceUnavailableError):
        return 503
    if isinstance(
        exc, UpstreamError | MalformedResponseError | NutritionLookupFailedError
    ):
        return 502
    return 500


def _format_error(state_container: AppContainer, exc: VoiceError) -> str:
    """Return a user-facing error message with local debug info."""
    message = str(exc) or type(exc).__name__
    cause = exc.__cause__
    if state_container.settings.environment == "local" and cause is not None:
        detail = f"{type(cause).__name__}: {cause}".strip()
        return f"{message} (debug: {detail})"
    return message
