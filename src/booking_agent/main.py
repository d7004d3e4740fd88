from __future__ import annotations

import logging
import sys

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from .api import router
from .blob_store import PUBLIC_UPLOAD_PREFIX
from .config import Settings, get_settings
from .errors import ConversationNotFound, MalformedInput, ModelProviderError, Unauthorized

logger = logging.getLogger(__name__)


def configure_logging(debug: bool = False) -> None:
    """Send package logs to stdout; use rich's handler when debugging locally."""
    if debug:
        from rich.logging import RichHandler

        handlers: list[logging.Handler] = [RichHandler(rich_tracebacks=True, show_path=False)]
        fmt = "%(name)s: %(message)s"
    else:
        handlers = [logging.StreamHandler(sys.stdout)]
        fmt = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

    logging.basicConfig(level=logging.INFO, format=fmt, handlers=handlers)
    logging.getLogger("booking_agent").setLevel(logging.DEBUG if debug else logging.INFO)


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(Unauthorized)
    async def _unauthorized(request: Request, exc: Unauthorized) -> JSONResponse:
        return JSONResponse(status_code=status.HTTP_401_UNAUTHORIZED, content={"error": "Unauthorized"})

    @app.exception_handler(ConversationNotFound)
    async def _not_found(request: Request, exc: ConversationNotFound) -> JSONResponse:
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"error": "Not Found"})

    @app.exception_handler(MalformedInput)
    async def _malformed(request: Request, exc: MalformedInput) -> JSONResponse:
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": str(exc)})

    @app.exception_handler(RequestValidationError)
    async def _invalid_request(request: Request, exc: RequestValidationError) -> JSONResponse:
        problems = ", ".join(
            f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg')}"
            for error in exc.errors()
        )
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": problems or "Invalid request"})

    @app.exception_handler(ModelProviderError)
    async def _model_provider(request: Request, exc: ModelProviderError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"error": exc.user_message})

    @app.exception_handler(Exception)
    async def _unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "An error occurred while processing your request"},
        )


def create_app(settings: Settings | None = None) -> FastAPI:
    resolved = settings or get_settings()
    app = FastAPI(
        title="Booking Agent",
        description="Flight booking assistant service",
        version="0.1.0",
        debug=resolved.debug,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Conversation-Id"],
    )

    _register_exception_handlers(app)
    app.include_router(router)

    if resolved.blob_store_backend == "local":
        app.mount(
            PUBLIC_UPLOAD_PREFIX,
            StaticFiles(directory=resolved.upload_dir, check_dir=False),
            name="uploads",
        )
    return app


configure_logging(get_settings().debug)
app = create_app()
