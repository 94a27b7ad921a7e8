"""
API routes for the model catalog

Serves the normalized, ordered catalog together with cache management
and statistics endpoints. Catalog reads never fail: when the upstream API is
unreachable the embedded fallback catalog is returned instead.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from modelscout.config import Config
from modelscout.schemas.models_catalog import CatalogModel, CatalogResponse, CatalogStatistics
from modelscout.services.model_catalog import (
    ModelCatalogService,
    filter_models,
    get_catalog_service,
    get_unique_providers,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/models", tags=["models"])

security = HTTPBearer(auto_error=False)


async def get_optional_api_key(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> str | None:
    """
    OpenRouter API key for the authenticated strategy.

    Uses the Bearer token when one is sent, otherwise the configured key.
    """
    if credentials and credentials.credentials:
        return credentials.credentials
    return Config.OPENROUTER_API_KEY


def build_catalog_response(models: list[CatalogModel]) -> CatalogResponse:
    return CatalogResponse(
        data=models,
        count=len(models),
        free_count=sum(1 for model in models if model.pricing.is_free),
        timestamp=datetime.now(timezone.utc),
    )


@router.get("", response_model=CatalogResponse)
async def list_models(
    free_only: bool = Query(False, description="Only return free models"),
    force_refresh: bool = Query(False, description="Bypass the cache"),
    search: str | None = Query(None, description="Search display name, provider and description"),
    provider: str | None = Query(None, description="Filter by provider label ('all' for every provider)"),
    api_key: str | None = Depends(get_optional_api_key),
    service: ModelCatalogService = Depends(get_catalog_service),
):
    """
    Get the model catalog

    Free models come first, then by descending compatibility score, then
    alphabetically by display name.
    """
    models = await service.fetch_models(
        free_only=free_only, api_key=api_key, force_refresh=force_refresh
    )
    return build_catalog_response(filter_models(models, search=search, provider=provider))


@router.get("/free", response_model=CatalogResponse)
async def list_free_models(
    api_key: str | None = Depends(get_optional_api_key),
    service: ModelCatalogService = Depends(get_catalog_service),
):
    """Get only the models classified as free"""
    return build_catalog_response(await service.get_free_models(api_key))


@router.post("/refresh", response_model=CatalogResponse)
async def refresh_models(
    api_key: str | None = Depends(get_optional_api_key),
    service: ModelCatalogService = Depends(get_catalog_service),
):
    """Force a fresh fetch of the full catalog"""
    logger.info("Catalog refresh requested")
    return build_catalog_response(await service.refresh_models(api_key))


@router.get("/providers", response_model=list[str])
async def list_providers(
    free_only: bool = Query(False, description="Only consider free models"),
    api_key: str | None = Depends(get_optional_api_key),
    service: ModelCatalogService = Depends(get_catalog_service),
):
    """Distinct provider labels present in the catalog"""
    models = await service.fetch_models(free_only=free_only, api_key=api_key)
    return get_unique_providers(models)


@router.get("/stats", response_model=CatalogStatistics)
async def get_catalog_statistics(
    service: ModelCatalogService = Depends(get_catalog_service),
):
    """Cache statistics: entry count, model totals and last update time"""
    return service.get_statistics()


@router.delete("/cache")
async def clear_catalog_cache(
    service: ModelCatalogService = Depends(get_catalog_service),
):
    """Remove every cached catalog"""
    removed = service.clear_cache()
    return {"removed": removed}
