"""FastAPI application entry point."""
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from api.dependencies import set_board_services
from api.routers import health, layouts, notes, settings
from core.config import get_settings
from db.session import create_store_engine, get_session_factory
from services.exceptions import PersistenceError
from services.gateway import SimulatedNoteGateway
from services.kv_store import SqlKeyValueStore
from services.note_service import NoteLifecycleService
from services.preferences_service import PreferencesService

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None]:
    """Manage application lifespan - startup and shutdown."""
    app_settings = get_settings()

    # Startup: open the store and load the board
    engine = create_store_engine(app_settings.database_url)
    store = SqlKeyValueStore(get_session_factory(engine))
    note_service = NoteLifecycleService.from_settings(
        app_settings, store, SimulatedNoteGateway.from_settings(app_settings),
    )
    set_board_services(note_service, PreferencesService(store, app_settings.theme_key))
    logger.info(
        "Board loaded: %d active, %d trashed",
        len(note_service.active_notes),
        len(note_service.trashed_notes),
    )

    yield

    # Shutdown: drop services and release the store
    set_board_services(None, None)
    engine.dispose()


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint,
    ) -> Response:
        """Process request and add security headers to response."""
        response = await call_next(request)
        # Prevent MIME type sniffing
        response.headers["X-Content-Type-Options"] = "nosniff"
        # Prevent clickjacking - API shouldn't be framed
        response.headers["X-Frame-Options"] = "DENY"
        return response


app_settings = get_settings()

app = FastAPI(
    title="Sticky Board API",
    description="Freeform sticky notes on a grid, with trash and restore.",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(PersistenceError)
async def persistence_exception_handler(
    _request: Request, exc: PersistenceError,
) -> JSONResponse:
    """Surface gateway and store rejections as a bad gateway."""
    return JSONResponse(
        status_code=502,
        content={"detail": str(exc), "operation": exc.operation, "note_id": exc.note_id},
    )


# Security headers middleware (runs after CORS, adds headers to responses)
app.add_middleware(SecurityHeadersMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=app_settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(notes.router)
app.include_router(layouts.router)
app.include_router(settings.router)


def main() -> None:
    """Entry point for serving the API as a script."""
    import uvicorn  # noqa: PLC0415

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    uvicorn.run(app, host="127.0.0.1", port=8000)


if __name__ == "__main__":
    main()
