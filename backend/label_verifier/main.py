"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import router
from .services import OCRService
from .config import Settings, get_settings
from . import __version__

API_PREFIX = "/api/v1"

DESCRIPTION = """
Checks declared label data (brand, class/type, alcohol content, net contents)
against the text on a photographed alcohol label, field by field.

- `POST /verify` verifies an uploaded label image
- `POST /verify/text` verifies text from your own OCR provider
- `POST /extract` shows what OCR reads from an image
- `GET /health` reports OCR readiness
"""


def configure_logging(settings: Settings) -> None:
    """Root logging setup; level comes from LOG_LEVEL."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


configure_logging(get_settings())
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Warm the OCR engine before serving; image endpoints report not ready if this fails."""
    settings = get_settings()
    policy = "required" if settings.require_government_warning else "advisory"
    logger.info(f"Starting {settings.app_name} {__version__} (government warning {policy})")

    if OCRService().initialize():
        logger.info("OCR engine ready")
    else:
        logger.warning("OCR engine failed to initialize - /verify and /extract will fail until restart")

    yield

    logger.info(f"Stopping {settings.app_name}")


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description=DESCRIPTION,
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    app.include_router(router, prefix=API_PREFIX)

    @app.get("/", include_in_schema=False)
    async def root():
        return {
            "message": settings.app_name,
            "version": __version__,
            "docs": "/docs",
            "api": API_PREFIX,
        }

    return app


app = create_app()
