import logging
from datetime import datetime, timezone

from fastapi import APIRouter, FastAPI, Response
from prometheus_client import REGISTRY, generate_latest

from modelscout import __version__
from modelscout.config import Config
from modelscout.config.logging_config import configure_logging
from modelscout.routes.catalog import router as catalog_router

configure_logging()
logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(
        title="ModelScout Catalog API",
        description="Normalized, ordered OpenRouter model catalog with offline fallback",
        version=__version__,
    )

    v1_router = APIRouter(prefix="/v1")
    v1_router.include_router(catalog_router)
    app.include_router(v1_router)
    logger.info("  [OK] Catalog routes mounted at /v1/models")

    @app.get("/health", tags=["health"])
    async def health_check():
        """Liveness check; catalog reads degrade to the fallback list, never to errors."""
        return {
            "status": "healthy",
            "environment": Config.APP_ENV,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    @app.get("/metrics", tags=["monitoring"], include_in_schema=False)
    async def metrics():
        """Prometheus metrics in text exposition format"""
        return Response(generate_latest(REGISTRY), media_type="text/plain; charset=utf-8")

    logger.info("  [OK] Prometheus metrics endpoint at /metrics")
    return app


app = create_app()
