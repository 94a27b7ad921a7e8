"""
Catalog fetch strategies.

Each strategy is one single-shot way of retrieving the raw catalog from the
OpenRouter models endpoint. The service tries them in a fixed order:

1. AuthenticatedStrategy - bearer-authorized request, requires an API key
2. PublicStrategy - same endpoint without authentication
3. PaginatedStrategy - alternate "results per page" query parameter spellings
4. ProxiedStrategy - the public request routed through CORS relay services

Every request shares the same guards: a hard timeout, a JSON content type
and one of three accepted top-level body shapes ({"data": [...]}, a bare
list, or {"models": [...]}).
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Annotated, Any, Union
from urllib.parse import quote, urlencode

import httpx
from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from modelscout.config import Config
from modelscout.utils.exceptions import (
    CatalogFetchError,
    CatalogResponseShapeError,
    CatalogTimeoutError,
    MissingApiKeyError,
)
from modelscout.utils.security_validators import mask_api_key, sanitize_for_logging

logger = logging.getLogger(__name__)

USER_AGENT = "Mozilla/5.0 (compatible; ModelScout/1.0)"

PAGINATION_PARAMETERS = ("per_page", "limit", "page_size", "count")


@dataclass(frozen=True)
class FetchSettings:
    """Request-level settings shared by every strategy."""

    base_url: str = "https://openrouter.ai/api/v1"
    models_path: str = "/models"
    site_url: str = "https://localhost"
    site_name: str = "AI Assistant Web App"
    timeout_seconds: float = 15.0
    min_viable_models: int = 10
    page_size: int = 1000
    cors_proxies: tuple[str, ...] = ()

    @classmethod
    def from_config(cls) -> "FetchSettings":
        return cls(
            base_url=Config.OPENROUTER_BASE_URL,
            models_path=Config.OPENROUTER_MODELS_PATH,
            site_url=Config.OPENROUTER_SITE_URL,
            site_name=Config.OPENROUTER_SITE_NAME,
            timeout_seconds=Config.CATALOG_REQUEST_TIMEOUT_SECONDS,
            min_viable_models=Config.CATALOG_MIN_VIABLE_MODELS,
            page_size=Config.CATALOG_PAGE_SIZE,
            cors_proxies=tuple(Config.CATALOG_CORS_PROXIES),
        )

    @property
    def models_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/{self.models_path.lstrip('/')}"


# ==================== Response shapes ====================


class DataEnvelope(BaseModel):
    """{"data": [...]}, the documented OpenRouter shape."""

    data: list[Any]


class ModelsEnvelope(BaseModel):
    """{"models": [...]}, seen from some mirrors and relays."""

    models: list[Any]


# Tried left to right; the first shape that validates wins
CatalogPayload = TypeAdapter(
    Annotated[
        Union[DataEnvelope, list[Any], ModelsEnvelope],
        Field(union_mode="left_to_right"),
    ]
)


def decode_catalog_payload(payload: Any, *, url: str | None = None) -> list[Any]:
    """
    Extract the raw record list from a decoded JSON body.

    Raises:
        CatalogResponseShapeError: if the body matches none of the accepted shapes
    """
    try:
        decoded = CatalogPayload.validate_python(payload)
    except ValidationError as e:
        raise CatalogResponseShapeError(
            f"Unexpected response format ({type(payload).__name__})", url=url
        ) from e

    if isinstance(decoded, DataEnvelope):
        return decoded.data
    if isinstance(decoded, ModelsEnvelope):
        return decoded.models
    return decoded


async def request_catalog(
    client: httpx.AsyncClient,
    url: str,
    headers: dict[str, str],
    timeout: float,
) -> list[Any]:
    """
    GET a catalog URL and return its raw record list.

    Raises:
        CatalogTimeoutError: if no response arrives within `timeout` seconds
        CatalogFetchError: on connection errors and non-2xx responses
        CatalogResponseShapeError: on non-JSON responses or unexpected body shapes
    """
    try:
        response = await asyncio.wait_for(client.get(url, headers=headers), timeout=timeout)
    except (asyncio.TimeoutError, httpx.TimeoutException) as e:
        raise CatalogTimeoutError(f"Request timeout after {timeout}s", url=url) from e
    except httpx.HTTPError as e:
        raise CatalogFetchError(
            f"Request failed: {sanitize_for_logging(str(e)) or type(e).__name__}", url=url
        ) from e

    if not response.is_success:
        raise CatalogFetchError(
            f"HTTP {response.status_code}: {response.reason_phrase}",
            url=url,
            status_code=response.status_code,
        )

    content_type = response.headers.get("content-type", "")
    if "json" not in content_type.lower():
        raise CatalogResponseShapeError(
            f"Unexpected content type '{sanitize_for_logging(content_type) or 'none'}'", url=url
        )

    try:
        payload = response.json()
    except ValueError as e:
        raise CatalogResponseShapeError("Response body is not valid JSON", url=url) from e

    return decode_catalog_payload(payload, url=url)


# ==================== Strategies ====================


class CatalogFetchStrategy(ABC):
    """Abstract base class for catalog retrieval strategies.

    Subclasses set `name` and implement fetch(), which performs one attempt
    and either returns the raw record list or raises a CatalogError.
    """

    name: str = "base"

    def __init__(self, settings: FetchSettings | None = None):
        self.settings = settings or FetchSettings.from_config()

    def base_headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "HTTP-Referer": self.settings.site_url,
            "X-Title": self.settings.site_name,
        }

    async def request(self, client: httpx.AsyncClient, url: str, headers: dict[str, str]) -> list[Any]:
        try:
            return await request_catalog(client, url, headers, self.settings.timeout_seconds)
        except CatalogFetchError as e:
            e.strategy = self.name
            raise

    @abstractmethod
    async def fetch(self, client: httpx.AsyncClient, api_key: str | None) -> list[Any]:
        """Retrieve the raw catalog once."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r}>"


class AuthenticatedStrategy(CatalogFetchStrategy):
    name = "authenticated"

    async def fetch(self, client: httpx.AsyncClient, api_key: str | None) -> list[Any]:
        if not api_key:
            raise MissingApiKeyError()

        headers = self.base_headers()
        headers["Authorization"] = f"Bearer {api_key}"
        logger.debug(f"Fetching catalog with API key {mask_api_key(api_key)}")
        return await self.request(client, self.settings.models_url, headers)


class PublicStrategy(CatalogFetchStrategy):
    name = "public"

    async def fetch(self, client: httpx.AsyncClient, api_key: str | None) -> list[Any]:
        headers = self.base_headers()
        headers["User-Agent"] = USER_AGENT
        return await self.request(client, self.settings.models_url, headers)


class PaginatedStrategy(CatalogFetchStrategy):
    """
    Tries each pagination parameter spelling in turn and accepts the first
    response with more than `min_viable_models` records. The upstream
    parameter name is not stable, so individual endpoint failures are
    logged and skipped.
    """

    name = "paginated"

    def endpoint_urls(self) -> list[str]:
        return [
            f"{self.settings.models_url}?{urlencode({parameter: self.settings.page_size})}"
            for parameter in PAGINATION_PARAMETERS
        ]

    async def fetch(self, client: httpx.AsyncClient, api_key: str | None) -> list[Any]:
        headers = self.base_headers()
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"

        for url in self.endpoint_urls():
            try:
                records = await self.request(client, url, headers)
            except (CatalogFetchError, CatalogResponseShapeError) as e:
                logger.warning(f"Pagination endpoint {url} failed: {e}")
                continue

            if len(records) > self.settings.min_viable_models:
                return records
            logger.debug(f"Pagination endpoint {url} returned only {len(records)} records")

        raise CatalogFetchError("All pagination endpoints failed", strategy=self.name)


class ProxiedStrategy(CatalogFetchStrategy):
    """
    Routes the public request through CORS relay services, in order.

    The API key is never forwarded to a third-party relay.
    """

    name = "proxied"

    def proxy_urls(self) -> list[str]:
        target = quote(self.settings.models_url, safe="")
        return [f"{proxy}{target}" for proxy in self.settings.cors_proxies]

    async def fetch(self, client: httpx.AsyncClient, api_key: str | None) -> list[Any]:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}

        for url in self.proxy_urls():
            try:
                return await self.request(client, url, headers)
            except (CatalogFetchError, CatalogResponseShapeError) as e:
                logger.warning(f"CORS proxy {url} failed: {e}")

        raise CatalogFetchError("All CORS proxies failed", strategy=self.name)


def build_strategy_chain(settings: FetchSettings | None = None) -> list[CatalogFetchStrategy]:
    """The default strategy order: authenticated, public, paginated, proxied."""
    settings = settings or FetchSettings.from_config()
    return [
        AuthenticatedStrategy(settings),
        PublicStrategy(settings),
        PaginatedStrategy(settings),
        ProxiedStrategy(settings),
    ]
