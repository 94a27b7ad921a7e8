"""
Catalog record normalization.

Maps untrusted raw catalog records onto the CatalogModel schema. A record is
rejected (never defaulted) when it lacks an id, a name or a pricing object,
or when its text carries a known "unavailable" marker. Rejected records are
dropped from the catalog so a partially malformed upstream response degrades
to fewer models rather than a failed fetch.
"""

import logging
import math
import re
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from modelscout.schemas.models_catalog import Capability, CatalogModel, ModelPricing
from modelscout.services.model_classifier import classify_model
from modelscout.services.pricing_normalization import parse_price
from modelscout.services.prometheus_metrics import record_rejected
from modelscout.utils.exceptions import ModelValidationError
from modelscout.utils.security_validators import sanitize_for_logging

logger = logging.getLogger(__name__)

UNAVAILABLE_PATTERN = re.compile(
    r"deprecated|disabled|unavailable|maintenance|beta.*unstable", re.IGNORECASE
)

METADATA_PASSTHROUGH_FIELDS = ("created", "updated", "top_provider")

DESCRIPTION_SEPARATOR = " • "
DEFAULT_DESCRIPTION = "Language Model"
DEFAULT_CURRENCY = "USD"


def validate_raw_record(record: Any) -> None:
    """
    Check the fields a record must carry before it can be normalized.

    Raises:
        ModelValidationError: with reason "not_a_mapping", "missing_id",
            "missing_name", "missing_pricing" or "unavailable"
    """
    if not isinstance(record, Mapping):
        raise ModelValidationError("not_a_mapping")

    model_id = record.get("id")
    if not isinstance(model_id, str) or not model_id.strip():
        raise ModelValidationError("missing_id")

    name = record.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ModelValidationError("missing_name", model_id)

    if not isinstance(record.get("pricing"), Mapping):
        raise ModelValidationError("missing_pricing", model_id)

    description = record.get("description")
    text = f"{model_id} {name} {description if isinstance(description, str) else ''}"
    if UNAVAILABLE_PATTERN.search(text):
        raise ModelValidationError("unavailable", model_id)


def format_display_name(name: str) -> str:
    """
    Human-format a model name.

    Strips the provider segment before the first "/", replaces dashes and
    underscores with spaces and upper-cases the first letter of each word.

    Examples:
        >>> format_display_name("meta-llama/llama-3.2-3b-instruct")
        'Llama 3.2 3b Instruct'
        >>> format_display_name("GPT-4 Turbo")
        'GPT 4 Turbo'
    """
    formatted = re.sub(r"^[^/]+/", "", name)
    formatted = re.sub(r"[-_]", " ", formatted)
    formatted = re.sub(r"\b\w", lambda match: match.group(0).upper(), formatted)
    return formatted.strip()


def format_price_clause(is_free: bool, prompt_cost: float) -> str | None:
    if is_free:
        return "🆓 Free"
    if prompt_cost <= 0:
        return None
    if prompt_cost < 0.001:
        return f"${prompt_cost * 1_000_000:.1f}/1M tokens"
    return f"${prompt_cost * 1000:.2f}/1K tokens"


def format_context_clause(context_length: int) -> str | None:
    if context_length < 1000:
        return None
    # Round half up
    return f"{math.floor(context_length / 1000 + 0.5)}K context"


def format_description(
    is_free: bool,
    prompt_cost: float,
    context_length: int,
    capabilities: Iterable[Capability],
) -> str:
    """Presentational one-line summary: price, context window and badges."""
    capabilities = set(capabilities)
    parts = [
        format_price_clause(is_free, prompt_cost),
        format_context_clause(context_length),
        "👁️ Vision" if Capability.VISION in capabilities else None,
        "💻 Code" if Capability.CODE in capabilities else None,
    ]
    return DESCRIPTION_SEPARATOR.join(part for part in parts if part) or DEFAULT_DESCRIPTION


def normalize_model(record: Any, *, match_free_name: bool | None = None) -> CatalogModel:
    """
    Normalize one raw catalog record.

    Args:
        record: Raw record from the catalog API (untrusted)
        match_free_name: Override for the name/description free heuristic

    Returns:
        CatalogModel

    Raises:
        ModelValidationError: if the record is rejected
    """
    validate_raw_record(record)

    model_id: str = record["id"].strip()
    pricing: Mapping[str, Any] = record["pricing"]
    classification = classify_model(record, match_free_name=match_free_name)

    prompt_cost = max(0.0, float(parse_price(pricing.get("prompt"))))
    completion_cost = max(0.0, float(parse_price(pricing.get("completion"))))
    currency = pricing.get("currency")
    if not isinstance(currency, str) or not currency.strip():
        currency = DEFAULT_CURRENCY

    display_name = format_display_name(record["name"]) or format_display_name(model_id) or model_id

    try:
        return CatalogModel(
            id=model_id,
            display_name=display_name,
            provider=classification.provider,
            pricing=ModelPricing(
                prompt_cost=prompt_cost,
                completion_cost=completion_cost,
                is_free=classification.is_free,
                currency=currency.strip(),
            ),
            context_length=classification.context_length,
            capabilities=classification.capabilities,
            compatibility_score=classification.compatibility_score,
            description=format_description(
                classification.is_free,
                prompt_cost,
                classification.context_length,
                classification.capabilities,
            ),
            metadata={
                key: record[key] for key in METADATA_PASSTHROUGH_FIELDS if key in record
            },
        )
    except ValidationError as e:
        raise ModelValidationError("schema", model_id) from e


def normalize_catalog(
    records: Iterable[Any], *, match_free_name: bool | None = None
) -> list[CatalogModel]:
    """
    Normalize a raw catalog, silently dropping rejected and duplicate records.

    The first occurrence of an id wins. Output order follows input order;
    use sort_models for presentation order.
    """
    models: list[CatalogModel] = []
    seen_ids: set[str] = set()
    rejected: dict[str, int] = {}

    for record in records:
        try:
            model = normalize_model(record, match_free_name=match_free_name)
        except ModelValidationError as e:
            rejected[e.reason] = rejected.get(e.reason, 0) + 1
            record_rejected(e.reason)
            logger.debug("Dropping catalog record: %s", sanitize_for_logging(str(e)))
            continue

        if model.id in seen_ids:
            rejected["duplicate"] = rejected.get("duplicate", 0) + 1
            record_rejected("duplicate")
            continue

        seen_ids.add(model.id)
        models.append(model)

    if rejected:
        logger.info(
            f"Normalized {len(models)} catalog models, dropped {sum(rejected.values())} "
            f"records {rejected}"
        )
    return models


def model_sort_key(model: CatalogModel) -> tuple:
    return (
        not model.pricing.is_free,
        -model.compatibility_score,
        model.display_name.casefold(),
        model.display_name,
        model.id,
    )


def sort_models(models: Iterable[CatalogModel]) -> list[CatalogModel]:
    """
    Presentation order: free models first, then descending compatibility
    score, then display name alphabetically (case-insensitive, ties broken
    by exact name and id).
    """
    return sorted(models, key=model_sort_key)
