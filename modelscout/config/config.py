import os

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


DEFAULT_CORS_PROXIES = (
    "https://api.allorigins.win/raw?url=",
    "https://cors-anywhere.herokuapp.com/",
    "https://corsproxy.io/?",
)


def _get_env_var(name: str, default: str | None = None, *, strip: bool = True) -> str | None:
    """
    Fetch an environment variable with optional whitespace trimming.

    Args:
        name: Environment variable to look up.
        default: Value to return when the env var is unset or empty.
        strip: Whether to strip leading/trailing whitespace (default: True).

    Returns:
        The normalized string value or the provided default when empty.
    """
    value = os.environ.get(name)
    if value is None:
        return default

    if strip:
        value = value.strip()

    return value or default


def _get_float_env(name: str, default: float) -> float:
    """Read a float from the environment, falling back to the default on bad input."""
    value = _get_env_var(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _get_int_env(name: str, default: int) -> int:
    """Read an int from the environment, falling back to the default on bad input."""
    value = _get_env_var(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_bool_env(name: str, default: bool) -> bool:
    value = _get_env_var(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "yes", "on"}


def _get_list_env(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    """Parse a comma-separated environment variable into a tuple of strings."""
    value = _get_env_var(name)
    if value is None:
        return default
    items = tuple(item.strip() for item in value.split(",") if item.strip())
    return items or default


class Config:
    """Configuration class for the application"""

    # Environment Detection
    APP_ENV = _get_env_var("APP_ENV", "development")  # development, staging, production
    IS_PRODUCTION = APP_ENV == "production"
    IS_STAGING = APP_ENV == "staging"
    IS_DEVELOPMENT = APP_ENV == "development"
    IS_TESTING = APP_ENV in {"testing", "test"} or os.environ.get("TESTING", "").lower() in {
        "1",
        "true",
        "yes",
    }
    LOG_LEVEL = _get_env_var("LOG_LEVEL", "INFO").upper()

    # OpenRouter Configuration
    OPENROUTER_API_KEY = _get_env_var("OPENROUTER_API_KEY")
    OPENROUTER_BASE_URL = _get_env_var("OPENROUTER_BASE_URL", "https://openrouter.ai/api/v1")
    OPENROUTER_MODELS_PATH = _get_env_var("OPENROUTER_MODELS_PATH", "/models")
    OPENROUTER_SITE_URL = _get_env_var("OPENROUTER_SITE_URL", "https://localhost")
    OPENROUTER_SITE_NAME = _get_env_var("OPENROUTER_SITE_NAME", "AI Assistant Web App")

    # Catalog cache
    CATALOG_CACHE_TTL_SECONDS = _get_float_env("CATALOG_CACHE_TTL_SECONDS", 30 * 60.0)
    CATALOG_FALLBACK_CACHE_TTL_SECONDS = _get_float_env(
        "CATALOG_FALLBACK_CACHE_TTL_SECONDS", 5 * 60.0
    )

    # Catalog acquisition
    CATALOG_REQUEST_TIMEOUT_SECONDS = _get_float_env("CATALOG_REQUEST_TIMEOUT_SECONDS", 15.0)
    CATALOG_RETRY_ATTEMPTS = _get_int_env("CATALOG_RETRY_ATTEMPTS", 3)
    CATALOG_RETRY_BASE_DELAY_SECONDS = _get_float_env("CATALOG_RETRY_BASE_DELAY_SECONDS", 2.0)
    CATALOG_STRATEGY_DELAY_SECONDS = _get_float_env("CATALOG_STRATEGY_DELAY_SECONDS", 1.0)
    CATALOG_MIN_VIABLE_MODELS = _get_int_env("CATALOG_MIN_VIABLE_MODELS", 10)
    CATALOG_PAGE_SIZE = _get_int_env("CATALOG_PAGE_SIZE", 1000)
    CATALOG_CORS_PROXIES = _get_list_env("CATALOG_CORS_PROXIES", DEFAULT_CORS_PROXIES)

    # Classification
    CATALOG_FREE_NAME_HEURISTIC = _get_bool_env("CATALOG_FREE_NAME_HEURISTIC", True)
