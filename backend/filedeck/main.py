"""FileDeck FastAPI application factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from filedeck import __version__
from filedeck.config import settings
from filedeck.errors import ErrorKind, FileDeckError
from filedeck.services import init_services, shutdown_services

logger = logging.getLogger(__name__)

ERROR_STATUS: dict[ErrorKind, int] = {
    ErrorKind.PATH_VALIDATION: 400,
    ErrorKind.MALFORMED_REQUEST: 400,
    ErrorKind.FILE_NOT_FOUND: 404,
    ErrorKind.DIR_NOT_FOUND: 404,
    ErrorKind.NOT_AN_IMAGE: 415,
    ErrorKind.IMAGE_PROCESSING: 422,
    ErrorKind.CACHE_WRITE: 503,
    ErrorKind.SOURCE_ACCESS: 500,
    ErrorKind.CACHE_READ_PARSE: 500,
}


@asynccontextmanager
async def _lifespan(app: FastAPI):
    """Startup / shutdown lifecycle."""
    # === STARTUP ===
    _setup_logging()
    init_services()
    logger.info("FileDeck v%s started — listening on %s:%s", __version__, settings.host, settings.port)

    try:
        yield
    finally:
        # === SHUTDOWN ===
        shutdown_services()
        logger.info("FileDeck shutting down")


def _setup_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.getLogger("PIL").setLevel(logging.WARNING)
    if not settings.debug:
        logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


async def _filedeck_error_handler(request: Request, exc: FileDeckError) -> JSONResponse:
    status_code = ERROR_STATUS.get(exc.kind, 500)
    log = logger.error if status_code >= 500 else logger.warning
    log("%s %s failed: %r %s", request.method, request.url.path, exc, exc.context)
    return JSONResponse(status_code=status_code, content={"error": exc.to_dict(), "data": None})


def create_app() -> FastAPI:
    """Application factory."""
    from filedeck.api.routes import api_router

    app = FastAPI(
        title=settings.app_name,
        version=__version__,
        debug=settings.debug,
        lifespan=_lifespan,
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(FileDeckError, _filedeck_error_handler)

    # Mount API routes
    app.include_router(api_router, prefix=settings.api_prefix)

    return app


app = create_app()


def run(**kwargs: Any) -> None:
    import uvicorn

    uvicorn.run(
        "filedeck.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
        **kwargs,
    )


if __name__ == "__main__":
    run()
