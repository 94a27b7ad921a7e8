"""
Prometheus metrics for the model catalog pipeline.

This module initializes and exposes Prometheus metrics for monitoring:
- Fetch strategy attempts (success/failure by strategy)
- Catalog cache operations (hits, misses, expirations, writes)
- Fallback catalog activations
- Raw records rejected by the normalizer
"""

import logging

from prometheus_client import Counter

logger = logging.getLogger(__name__)

# ==================== Acquisition Metrics ====================
strategy_attempts = Counter(
    "catalog_strategy_attempts_total",
    "Total catalog fetch strategy attempts",
    ["strategy", "result"],
)

fallback_activations = Counter(
    "catalog_fallback_activations_total",
    "Total times the embedded fallback catalog was served",
)

# ==================== Cache Metrics ====================
cache_operations = Counter(
    "catalog_cache_operations_total",
    "Total catalog cache operations",
    ["operation", "result"],
)

# ==================== Normalization Metrics ====================
records_rejected = Counter(
    "catalog_records_rejected_total",
    "Total raw catalog records dropped during normalization",
    ["reason"],
)


def record_strategy_attempt(strategy: str, result: str):
    """Record a strategy outcome (result is "success" or an error class name)."""
    strategy_attempts.labels(strategy=strategy, result=result).inc()


def record_fallback_activation():
    fallback_activations.inc()


def record_cache_operation(operation: str, result: str):
    """Record a cache operation such as ("get", "hit") or ("put", "api")."""
    cache_operations.labels(operation=operation, result=result).inc()


def record_rejected(reason: str):
    records_rejected.labels(reason=reason).inc()


def get_metrics_summary() -> dict:
    """Current counter values, keyed by metric name and label values."""
    summary: dict[str, float] = {}
    for metric in (strategy_attempts, fallback_activations, cache_operations, records_rejected):
        for family in metric.collect():
            for sample in family.samples:
                if not sample.name.endswith("_total"):
                    continue
                labels = ",".join(f"{k}={v}" for k, v in sorted(sample.labels.items()))
                key = f"{sample.name}{{{labels}}}" if labels else sample.name
                summary[key] = sample.value
    return summary
