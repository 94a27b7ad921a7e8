"""
Model catalog acquisition service.

Top-level entry point for the catalog pipeline:

    cache hit -> return
    cache miss -> try strategies (each wrapped in retry) -> normalize -> cache -> return
    every strategy failed -> embedded fallback catalog -> cache (short TTL) -> return

The service never raises to its caller. Total failure degrades to the
embedded fallback catalog, which is never empty.

Concurrent requests for the same cache key share one acquisition: the first
caller fetches while the others wait on a per-key lock and then read the
freshly written cache entry.
"""

import asyncio
import functools
import logging
from collections.abc import Awaitable, Callable
from typing import Any

import httpx

from modelscout.config import Config
from modelscout.schemas.models_catalog import CatalogModel, CatalogStatistics
from modelscout.services.fallback_catalog import get_fallback_records
from modelscout.services.fetch_strategies import (
    CatalogFetchStrategy,
    FetchSettings,
    build_strategy_chain,
)
from modelscout.services.model_catalog_cache import (
    SOURCE_API,
    SOURCE_FALLBACK,
    CatalogCache,
    build_cache_key,
)
from modelscout.services.model_normalizer import normalize_catalog, sort_models
from modelscout.services.prometheus_metrics import (
    record_fallback_activation,
    record_strategy_attempt,
)
from modelscout.utils.exceptions import (
    CatalogFetchError,
    CatalogResponseShapeError,
    CatalogTooSmallError,
    StrategyExhaustedError,
)
from modelscout.utils.retry import retry_async

logger = logging.getLogger(__name__)

# Missing API keys and undersized catalogs are not transient
RETRYABLE_ERRORS = (CatalogFetchError, CatalogResponseShapeError)


class ModelCatalogService:
    """
    Fetches, normalizes, caches and orders the model catalog.

    Every collaborator is injectable so tests can control time, the network
    and the strategy list:

    Args:
        cache: Catalog cache (a fresh CatalogCache by default)
        strategies: Ordered strategy chain (build_strategy_chain() by default)
        settings: Request settings shared by the default strategies
        client_factory: Zero-argument callable returning an httpx.AsyncClient
        sleep: Awaitable sleep used for retry backoff and strategy pacing
    """

    def __init__(
        self,
        cache: CatalogCache | None = None,
        strategies: list[CatalogFetchStrategy] | None = None,
        settings: FetchSettings | None = None,
        client_factory: Callable[[], httpx.AsyncClient] | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        retry_attempts: int | None = None,
        retry_base_delay: float | None = None,
        strategy_delay: float | None = None,
        cache_ttl: float | None = None,
        fallback_ttl: float | None = None,
        match_free_name: bool | None = None,
    ):
        self.settings = settings or FetchSettings.from_config()
        self.cache = cache if cache is not None else CatalogCache()
        self.strategies = (
            strategies if strategies is not None else build_strategy_chain(self.settings)
        )
        self._client_factory = client_factory or self._default_client
        self._sleep = sleep

        self.retry_attempts = (
            retry_attempts if retry_attempts is not None else Config.CATALOG_RETRY_ATTEMPTS
        )
        self.retry_base_delay = (
            retry_base_delay
            if retry_base_delay is not None
            else Config.CATALOG_RETRY_BASE_DELAY_SECONDS
        )
        self.strategy_delay = (
            strategy_delay if strategy_delay is not None else Config.CATALOG_STRATEGY_DELAY_SECONDS
        )
        self.cache_ttl = cache_ttl if cache_ttl is not None else Config.CATALOG_CACHE_TTL_SECONDS
        self.fallback_ttl = (
            fallback_ttl if fallback_ttl is not None else Config.CATALOG_FALLBACK_CACHE_TTL_SECONDS
        )
        self.match_free_name = match_free_name

        self._locks: dict[str, asyncio.Lock] = {}

    def _default_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.settings.timeout_seconds)

    # ==================== Public API ====================

    async def fetch_models(
        self,
        free_only: bool = False,
        api_key: str | None = None,
        force_refresh: bool = False,
    ) -> list[CatalogModel]:
        """
        Return the sorted catalog for the requested variant.

        Args:
            free_only: Keep only models classified as free
            api_key: Optional OpenRouter API key for the authenticated strategy
            force_refresh: Skip the cache read (the result is still written back)

        Returns:
            Non-empty list of CatalogModel, free models first
        """
        key = build_cache_key(free_only, bool(api_key))

        if not force_refresh:
            entry = self.cache.get_entry(key)
            if entry is not None:
                return list(entry.models)

        lock = self._locks.setdefault(key, asyncio.Lock())
        async with lock:
            if not force_refresh:
                # Another caller may have filled the entry while we waited
                entry = self.cache.get_entry(key)
                if entry is not None:
                    return list(entry.models)

            try:
                models, source = await self._acquire(free_only, api_key)
            except Exception:
                logger.exception(f"Unexpected error while fetching catalog '{key}'")
                models, source = self._fallback_models(free_only), SOURCE_FALLBACK

            ttl = self.fallback_ttl if source == SOURCE_FALLBACK else self.cache_ttl
            self.cache.put(key, models, ttl=ttl, source=source)
            return list(models)

    async def refresh_models(self, api_key: str | None = None) -> list[CatalogModel]:
        """Force a fresh fetch of the full catalog."""
        return await self.fetch_models(free_only=False, api_key=api_key, force_refresh=True)

    async def get_free_models(self, api_key: str | None = None) -> list[CatalogModel]:
        return await self.fetch_models(free_only=True, api_key=api_key)

    def clear_cache(self) -> int:
        """Remove every cached catalog. Returns the number of entries removed."""
        count = self.cache.invalidate_all()
        logger.info(f"🗑️ Cleared {count} cached catalog entries")
        return count

    def get_statistics(self) -> CatalogStatistics:
        return self.cache.stats()

    # ==================== Acquisition ====================

    async def _acquire(self, free_only: bool, api_key: str | None) -> tuple[list[CatalogModel], str]:
        try:
            records = await self._run_strategies(api_key)
        except StrategyExhaustedError as e:
            logger.warning(f"⚠️ All catalog strategies failed, using fallback catalog: {e}")
            return self._fallback_models(free_only), SOURCE_FALLBACK

        models = sort_models(normalize_catalog(records, match_free_name=self.match_free_name))
        if free_only:
            models = [model for model in models if model.pricing.is_free]

        if not models:
            logger.warning(
                f"⚠️ Live catalog had no usable models (free_only={free_only}), using fallback catalog"
            )
            return self._fallback_models(free_only), SOURCE_FALLBACK

        free_count = sum(1 for model in models if model.pricing.is_free)
        logger.info(f"✅ Catalog ready: {len(models)} models ({free_count} free)")
        return models, SOURCE_API

    async def _run_strategies(self, api_key: str | None) -> list[Any]:
        """
        Try each strategy in order and return the first viable raw record list.

        A strategy succeeds only when it returns more than
        settings.min_viable_models records. Each strategy is retried with
        exponential backoff; between a failed strategy and the next one a
        fixed delay is inserted.

        Raises:
            StrategyExhaustedError: when every strategy failed
        """
        errors: dict[str, Exception] = {}
        minimum = self.settings.min_viable_models

        async with self._client_factory() as client:
            for index, strategy in enumerate(self.strategies):
                logger.info(f"🔄 Trying catalog strategy '{strategy.name}'")
                try:
                    records = await retry_async(
                        functools.partial(strategy.fetch, client, api_key),
                        max_attempts=self.retry_attempts,
                        base_delay=self.retry_base_delay,
                        exceptions=RETRYABLE_ERRORS,
                        sleep=self._sleep,
                        label=f"Catalog strategy '{strategy.name}'",
                    )
                    if len(records) <= minimum:
                        raise CatalogTooSmallError(strategy.name, len(records), minimum)
                except Exception as e:
                    errors[strategy.name] = e
                    record_strategy_attempt(strategy.name, type(e).__name__)
                    logger.warning(f"❌ Catalog strategy '{strategy.name}' failed: {e}")

                    if index < len(self.strategies) - 1:
                        await self._sleep(self.strategy_delay)
                    continue

                record_strategy_attempt(strategy.name, "success")
                logger.info(
                    f"✅ Catalog strategy '{strategy.name}' returned {len(records)} raw records"
                )
                return records

        raise StrategyExhaustedError(errors)

    def _fallback_models(self, free_only: bool) -> list[CatalogModel]:
        record_fallback_activation()
        models = sort_models(
            normalize_catalog(get_fallback_records(), match_free_name=self.match_free_name)
        )
        if free_only:
            models = [model for model in models if model.pricing.is_free]
        return models


# ==================== Catalog views ====================


def filter_models(
    models: list[CatalogModel],
    search: str | None = None,
    provider: str | None = None,
) -> list[CatalogModel]:
    """
    Narrow a catalog without changing its order.

    Args:
        search: Case-insensitive substring matched against display name,
            provider and description
        provider: Case-insensitive substring of the provider label; "all"
            or None keeps every provider
    """
    result = models
    if search and search.strip():
        needle = search.strip().lower()
        result = [
            model
            for model in result
            if needle in model.display_name.lower()
            or needle in model.provider.lower()
            or needle in model.description.lower()
        ]

    if provider and provider.strip().lower() != "all":
        wanted = provider.strip().lower()
        result = [model for model in result if wanted in model.provider.lower()]
    return list(result)


def get_unique_providers(models: list[CatalogModel]) -> list[str]:
    """Sorted distinct non-empty provider labels in a catalog."""
    return sorted(
        {model.provider for model in models if model.provider},
        key=lambda label: (label.casefold(), label),
    )


# ==================== Service singleton ====================

_catalog_service: ModelCatalogService | None = None


def get_catalog_service() -> ModelCatalogService:
    """Get the process-wide catalog service, creating it on first use."""
    global _catalog_service
    if _catalog_service is None:
        _catalog_service = ModelCatalogService()
        logger.info("Model catalog service initialized")
    return _catalog_service


def reset_catalog_service() -> None:
    """Drop the process-wide service (its cache goes with it)."""
    global _catalog_service
    _catalog_service = None


# Convenience functions over the process-wide service


async def fetch_models(
    free_only: bool = False,
    api_key: str | None = None,
    force_refresh: bool = False,
) -> list[CatalogModel]:
    return await get_catalog_service().fetch_models(
        free_only=free_only, api_key=api_key, force_refresh=force_refresh
    )


async def refresh_models(api_key: str | None = None) -> list[CatalogModel]:
    return await get_catalog_service().refresh_models(api_key)


async def get_free_models(api_key: str | None = None) -> list[CatalogModel]:
    return await get_catalog_service().get_free_models(api_key)


def clear_cache() -> int:
    return get_catalog_service().clear_cache()


def get_statistics() -> CatalogStatistics:
    return get_catalog_service().get_statistics()
