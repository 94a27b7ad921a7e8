"""
Catalog error taxonomy.

Every failure the acquisition pipeline can produce derives from CatalogError:

- CatalogFetchError / CatalogTimeoutError: transport failures and non-2xx responses
- CatalogResponseShapeError: the body is not JSON or not one of the accepted shapes
- CatalogTooSmallError: a strategy answered with too few records to be a real catalog
- MissingApiKeyError: the authenticated strategy was attempted without a key
- ModelValidationError: a single raw record was rejected by the normalizer
- StrategyExhaustedError: every strategy in the chain failed

Usage:
    from modelscout.utils.exceptions import CatalogFetchError

    raise CatalogFetchError("HTTP 503: Service Unavailable", status_code=503, url=url)
"""

from typing import Any


class CatalogError(Exception):
    """Base class for all catalog acquisition errors."""


class CatalogFetchError(CatalogError):
    """Transport-level failure: connection error or non-2xx HTTP status."""

    def __init__(
        self,
        message: str,
        *,
        strategy: str | None = None,
        url: str | None = None,
        status_code: int | None = None,
    ):
        super().__init__(message)
        self.strategy = strategy
        self.url = url
        self.status_code = status_code


class CatalogTimeoutError(CatalogFetchError):
    """The hard per-request timeout elapsed before a response arrived."""


class CatalogResponseShapeError(CatalogError):
    """The response was not JSON, or its top-level shape is not accepted."""

    def __init__(self, message: str, *, url: str | None = None):
        super().__init__(message)
        self.url = url


class CatalogTooSmallError(CatalogError):
    """A strategy returned a record list not exceeding the minimum viable size."""

    def __init__(self, strategy: str, count: int, minimum: int):
        super().__init__(
            f"Strategy '{strategy}' returned {count} records (need more than {minimum})"
        )
        self.strategy = strategy
        self.count = count
        self.minimum = minimum


class MissingApiKeyError(CatalogError):
    """Authenticated strategy attempted without an API key."""

    def __init__(self, message: str = "No API key provided for authenticated request"):
        super().__init__(message)


class ModelValidationError(CatalogError, ValueError):
    """A raw catalog record failed validation and must be dropped."""

    def __init__(self, reason: str, model_id: Any = None):
        detail = f"Invalid catalog record ({reason})"
        if model_id:
            detail += f": {model_id}"
        super().__init__(detail)
        self.reason = reason
        self.model_id = model_id


class StrategyExhaustedError(CatalogError):
    """Every strategy in the fetch chain failed."""

    def __init__(self, errors: dict[str, Exception]):
        summary = "; ".join(f"{name}: {error}" for name, error in errors.items())
        super().__init__(f"All catalog strategies failed ({summary or 'no strategies'})")
        self.errors = errors

    @property
    def last_error(self) -> Exception | None:
        if not self.errors:
            return None
        return list(self.errors.values())[-1]
