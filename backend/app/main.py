"""
FastAPI application entry point

Run with ``uvicorn app.main:app`` from the ``backend`` directory, or
``python -m app.main``.
"""
import logging
from typing import Optional

from fastapi import FastAPI

from app.api import scan
from app.core.config import Settings, get_settings
from app.middleware import setup_middleware
from app.scanner import ScanAggregator

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Explicit configuration; defaults to the environment-backed settings
    """
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title=settings.APP_NAME,
        description="Scores a website's TLS, security headers, technology stack and reputation.",
        version=settings.APP_VERSION,
    )
    app.state.aggregator = ScanAggregator.from_settings(settings)

    setup_middleware(app)

    app.include_router(scan.router, prefix=settings.API_PREFIX)
    # Same handler at the path the existing front end calls
    app.add_api_route(
        settings.FUNCTION_PATH,
        scan.run_security_scan,
        methods=["POST"],
        tags=["Security Scan"],
    )

    @app.get("/health", tags=["meta"])
    async def health():
        return {"status": "ok"}

    logger.info(
        f"{settings.APP_NAME} v{settings.APP_VERSION} ready "
        f"(tls_source={settings.TLS_SOURCE})"
    )
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
