"""
Model classification heuristics.

Derives facts about a raw catalog record without trusting any of its fields:

- is_free: OR of three independent signals (pricing, id markers, name/description words)
- capabilities: keyword matches against a fixed vocabulary
- provider: label inferred from the id namespace
- context_length: tolerant parsing of numbers and "128k"/"1m" strings
- compatibility score: 0-100 ranking signal

Free detection deliberately over-approximates. A paid model whose name happens
to contain a free synonym is reported as free; "free" is a filter convenience
in the catalog UI, not a billing guarantee.
"""

import logging
import math
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from modelscout.config import Config
from modelscout.schemas.models_catalog import Capability
from modelscout.services.pricing_normalization import parse_leading_number, parse_price

logger = logging.getLogger(__name__)

DEFAULT_CONTEXT_LENGTH = 4096
DEFAULT_PROVIDER = "OpenRouter"

FREE_ID_MARKERS = (":free", "/free", "-free", "_free", "free-", "free_")

# Whole-word matches so that e.g. "freedom" does not count
FREE_NAME_PATTERN = re.compile(r"\b(?:free|gratis|complimentary|no cost)\b", re.IGNORECASE)

# Ordered: iteration order is the output order of capability tags
CAPABILITY_KEYWORDS: dict[Capability, tuple[str, ...]] = {
    Capability.VISION: ("vision", "image", "visual", "multimodal"),
    Capability.CODE: (
        "code",
        "coder",
        "coding",
        "programming",
        "developer",
        # Model families that are strong general-purpose coders
        "llama-3",
        "gpt-4",
        "gpt-3.5",
        "claude",
        "gemini",
        "gemma",
        "mistral",
        "mixtral",
        "phi-3",
        "deepseek",
        "qwen",
        "command-r",
    ),
    Capability.CHAT: ("chat", "conversation", "instruct"),
    Capability.COMPLETION: ("completion", "generate", "text"),
    Capability.FUNCTION_CALLING: ("function", "tool", "api"),
    Capability.REASONING: ("reasoning", "logic", "analysis"),
    Capability.MATH: ("math", "calculation", "arithmetic"),
}

# First match wins
PROVIDER_PREFIXES: tuple[tuple[str, str], ...] = (
    ("openai/", "OpenAI"),
    ("anthropic/", "Anthropic"),
    ("google/", "Google"),
    ("meta-llama/", "Meta"),
    ("mistralai/", "Mistral AI"),
    ("microsoft/", "Microsoft"),
    ("cohere/", "Cohere"),
    ("openrouter/", "OpenRouter"),
)

TOP_PROVIDERS = ("openai", "anthropic", "google", "meta", "microsoft")

# (minimum context length, bonus); only the highest matching tier applies
CONTEXT_LENGTH_TIERS = (
    (128_000, 25),
    (32_000, 20),
    (16_000, 15),
    (8_000, 10),
    (4_000, 5),
)

BASE_COMPATIBILITY_SCORE = 50
TOP_PROVIDER_BONUS = 15
MAX_CAPABILITY_BONUS = 10


@dataclass(frozen=True)
class ModelClassification:
    """Classifier output for one raw record."""

    is_free: bool
    provider: str
    context_length: int
    capabilities: list[Capability] = field(default_factory=list)
    compatibility_score: int = BASE_COMPATIBILITY_SCORE


def _text_field(record: Mapping[str, Any], key: str) -> str:
    value = record.get(key)
    return value if isinstance(value, str) else ""


def _pricing_field(record: Mapping[str, Any]) -> Mapping[str, Any]:
    pricing = record.get("pricing")
    return pricing if isinstance(pricing, Mapping) else {}


def build_haystack(record: Mapping[str, Any]) -> str:
    """Lowercase search text made of id, name and description."""
    return " ".join(
        (_text_field(record, "id"), _text_field(record, "name"), _text_field(record, "description"))
    ).lower()


def has_free_pricing(record: Mapping[str, Any]) -> bool:
    """Both prompt and completion prices are zero once negatives are clamped to zero."""
    pricing = _pricing_field(record)
    prompt = max(0.0, parse_price(pricing.get("prompt")))
    completion = max(0.0, parse_price(pricing.get("completion")))
    return prompt == 0 and completion == 0


def has_free_id_marker(model_id: str) -> bool:
    lowered = model_id.lower()
    return any(marker in lowered for marker in FREE_ID_MARKERS)


def has_free_name_marker(record: Mapping[str, Any]) -> bool:
    text = f"{_text_field(record, 'name')} {_text_field(record, 'description')}"
    return bool(FREE_NAME_PATTERN.search(text))


def is_free_model(record: Mapping[str, Any], *, match_name: bool | None = None) -> bool:
    """
    Decide whether a raw record is free.

    Any one of the signals is enough:
    1. parsed prompt and completion prices are both 0 (negatives count as 0)
    2. the id contains a free marker such as ":free" or "-free"
    3. the name or description contains a free synonym (when enabled)

    Args:
        record: Raw catalog record
        match_name: Enable the name/description signal; defaults to
            Config.CATALOG_FREE_NAME_HEURISTIC

    Returns:
        True when any enabled signal fires
    """
    if match_name is None:
        match_name = Config.CATALOG_FREE_NAME_HEURISTIC

    if has_free_pricing(record):
        return True
    if has_free_id_marker(_text_field(record, "id")):
        return True
    return match_name and has_free_name_marker(record)


def extract_capabilities(record: Mapping[str, Any]) -> list[Capability]:
    """Capability tags whose keywords appear in the record text, in vocabulary order."""
    haystack = build_haystack(record)
    return [
        capability
        for capability, keywords in CAPABILITY_KEYWORDS.items()
        if any(keyword in haystack for keyword in keywords)
    ]


def detect_provider(model_id: str) -> str:
    """
    Infer a provider label from a model id.

    Examples:
        >>> detect_provider("meta-llama/llama-3.2-3b-instruct:free")
        'Meta'
        >>> detect_provider("nousresearch/nous-capybara-7b")
        'Nousresearch'
        >>> detect_provider("gpt-4")
        'OpenRouter'
    """
    if not isinstance(model_id, str) or not model_id:
        return DEFAULT_PROVIDER

    lowered = model_id.lower()
    for prefix, label in PROVIDER_PREFIXES:
        if lowered.startswith(prefix):
            return label

    namespace, separator, _ = model_id.partition("/")
    if separator and namespace:
        return namespace[:1].upper() + namespace[1:]

    return DEFAULT_PROVIDER


def parse_context_length(value: Any) -> int:
    """
    Parse a context length into a positive token count.

    Numbers pass through; strings may use thousands separators and a trailing
    "k" (x1,000) or "m" (x1,000,000). Anything unparseable or non-positive
    yields DEFAULT_CONTEXT_LENGTH.

    Examples:
        >>> parse_context_length("128k")
        128000
        >>> parse_context_length("1,048,576")
        1048576
        >>> parse_context_length("lots")
        4096
    """
    parsed: float | None = None

    if isinstance(value, bool):
        parsed = None
    elif isinstance(value, int):
        parsed = value
    elif isinstance(value, float):
        parsed = value if math.isfinite(value) else None
    elif isinstance(value, str):
        cleaned = re.sub(r"[,\s]", "", value.lower())
        multiplier = 1
        if cleaned.endswith("k"):
            cleaned, multiplier = cleaned[:-1], 1_000
        elif cleaned.endswith("m"):
            cleaned, multiplier = cleaned[:-1], 1_000_000

        number = parse_leading_number(cleaned)
        if number is not None and math.isfinite(number * multiplier):
            parsed = round(number * multiplier) if multiplier > 1 else int(number)

    if parsed is None or parsed < 1:
        return DEFAULT_CONTEXT_LENGTH
    return int(parsed)


def context_length_bonus(context_length: int) -> int:
    for minimum, bonus in CONTEXT_LENGTH_TIERS:
        if context_length >= minimum:
            return bonus
    return 0


def calculate_compatibility_score(
    model_id: str,
    context_length: int,
    capabilities: list[Capability],
) -> int:
    """
    Heuristic 0-100 ranking score.

    50, plus a context-length tier bonus, plus 15 for a top provider, plus
    2 per capability (capped at 10), clamped to [0, 100].
    """
    score = BASE_COMPATIBILITY_SCORE
    score += context_length_bonus(context_length)

    lowered = (model_id or "").lower()
    if any(provider in lowered for provider in TOP_PROVIDERS):
        score += TOP_PROVIDER_BONUS

    score += min(len(capabilities) * 2, MAX_CAPABILITY_BONUS)

    return max(0, min(100, score))


def classify_model(
    record: Mapping[str, Any], *, match_free_name: bool | None = None
) -> ModelClassification:
    """Run every classifier over one raw record."""
    model_id = _text_field(record, "id")
    context_length = parse_context_length(record.get("context_length"))
    capabilities = extract_capabilities(record)

    return ModelClassification(
        is_free=is_free_model(record, match_name=match_free_name),
        provider=detect_provider(model_id),
        context_length=context_length,
        capabilities=capabilities,
        compatibility_score=calculate_compatibility_score(model_id, context_length, capabilities),
    )
