"""
Tests for catalog Prometheus metrics
"""

from prometheus_client import REGISTRY

from modelscout.services.model_catalog_cache import CatalogCache
from modelscout.services.model_normalizer import normalize_catalog
from modelscout.services.prometheus_metrics import (
    get_metrics_summary,
    record_cache_operation,
    record_fallback_activation,
    record_rejected,
    record_strategy_attempt,
)


def sample(name: str, labels: dict | None = None) -> float:
    return REGISTRY.get_sample_value(name, labels or {}) or 0.0


class TestRecorders:
    """Test the counter helpers"""

    def test_strategy_attempt(self):
        labels = {"strategy": "public", "result": "success"}
        before = sample("catalog_strategy_attempts_total", labels)

        record_strategy_attempt("public", "success")

        assert sample("catalog_strategy_attempts_total", labels) == before + 1

    def test_fallback_activation(self):
        before = sample("catalog_fallback_activations_total")

        record_fallback_activation()

        assert sample("catalog_fallback_activations_total") == before + 1

    def test_cache_operation(self):
        labels = {"operation": "get", "result": "hit"}
        before = sample("catalog_cache_operations_total", labels)

        record_cache_operation("get", "hit")

        assert sample("catalog_cache_operations_total", labels) == before + 1

    def test_rejected(self):
        labels = {"reason": "missing_id"}
        before = sample("catalog_records_rejected_total", labels)

        record_rejected("missing_id")

        assert sample("catalog_records_rejected_total", labels) == before + 1


class TestInstrumentation:
    """Test that pipeline components feed the counters"""

    def test_cache_miss_counted(self):
        labels = {"operation": "get", "result": "miss"}
        before = sample("catalog_cache_operations_total", labels)

        CatalogCache(default_ttl=60.0).get("models_all_public")

        assert sample("catalog_cache_operations_total", labels) == before + 1

    def test_normalizer_rejections_counted(self):
        labels = {"reason": "missing_pricing"}
        before = sample("catalog_records_rejected_total", labels)

        normalize_catalog([{"id": "acme/x", "name": "X"}, {"id": "acme/y", "name": "Y"}])

        assert sample("catalog_records_rejected_total", labels) == before + 2

    def test_summary_includes_recorded_values(self):
        record_strategy_attempt("proxied", "CatalogFetchError")

        summary = get_metrics_summary()

        key = "catalog_strategy_attempts_total{result=CatalogFetchError,strategy=proxied}"
        assert summary[key] >= 1
