"""
Helpers for handling untrusted strings and secrets in logs.
"""


def sanitize_for_logging(value: str) -> str:
    """Sanitize user-controlled strings for safe logging.

    Prevents log injection attacks by removing newlines and other control characters
    that could be used to forge log entries.

    Args:
        value: String value to sanitize (can be None)

    Returns:
        Sanitized string with newlines replaced by spaces
    """
    if value is None:
        return ""
    if not isinstance(value, str):
        value = str(value)
    # Replace newlines and carriage returns with spaces to prevent log injection
    return value.replace("\n", " ").replace("\r", " ").replace("\x00", "")


def mask_api_key(api_key: str | None) -> str:
    """Return a log-safe representation of an API key."""
    if not api_key:
        return "<none>"
    if len(api_key) <= 8:
        return "***"
    return f"{api_key[:4]}...{api_key[-4:]}"
