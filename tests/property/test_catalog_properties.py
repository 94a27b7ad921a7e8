"""
Property-based tests for the catalog pipeline

Uses Hypothesis to generate random inputs and verify that parsing is total,
ordering is stable and cache expiry follows the TTL exactly.
"""

import math

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from modelscout.services.model_catalog_cache import CatalogCache
from modelscout.services.model_classifier import detect_provider, parse_context_length
from modelscout.services.model_normalizer import model_sort_key, normalize_model, sort_models
from modelscout.services.pricing_normalization import parse_price
from modelscout.utils.exceptions import ModelValidationError
from tests.helpers.data_generators import CatalogModelGenerator

price_values = st.one_of(
    st.none(),
    st.booleans(),
    st.integers(min_value=-(10**12), max_value=10**12),
    st.floats(allow_nan=True, allow_infinity=True),
    st.text(max_size=30),
    st.sampled_from(["$0.0005", "€12.50", "£1", "¥", "1e400", "-3", " 0.000002 ", "NaN"]),
    st.lists(st.integers(), max_size=2),
    st.dictionaries(st.text(max_size=3), st.integers(), max_size=2),
)

context_values = st.one_of(
    st.none(),
    st.integers(min_value=-(10**9), max_value=10**9),
    st.floats(allow_nan=True, allow_infinity=True),
    st.text(max_size=20),
    st.sampled_from(["128k", "1m", "1,048,576", "8 K", "1e400m", "-5", "0"]),
)

slugs = st.text(alphabet="abcdefghijklmnopqrstuvwxyz0123456789-.", min_size=1, max_size=20)

raw_records = st.fixed_dictionaries(
    {
        "id": st.builds(lambda namespace, name: f"{namespace}/{name}", slugs, slugs),
        "name": st.text(min_size=1, max_size=40),
        "pricing": st.fixed_dictionaries({"prompt": price_values, "completion": price_values}),
    },
    optional={
        "description": st.text(max_size=60),
        "context_length": context_values,
    },
)


# ============================================================================
# Parsing Properties
# ============================================================================

class TestParsingProperties:
    """Property-based tests for price and context parsing"""

    @pytest.mark.property
    @given(value=price_values)
    @settings(max_examples=200)
    def test_parse_price_is_total_and_finite(self, value):
        """Property: parse_price never raises and always returns a finite number"""
        result = parse_price(value)

        assert isinstance(result, (int, float))
        assert math.isfinite(result)

    @pytest.mark.property
    @given(value=context_values)
    @settings(max_examples=200)
    def test_context_length_is_positive(self, value):
        """Property: parsed context length is always a positive int"""
        result = parse_context_length(value)

        assert isinstance(result, int)
        assert result >= 1

    @pytest.mark.property
    @given(model_id=st.text(max_size=40))
    @settings(max_examples=100)
    def test_provider_is_never_empty(self, model_id):
        assert detect_provider(model_id)


# ============================================================================
# Normalization Properties
# ============================================================================

class TestNormalizationProperties:
    """Property-based tests for record normalization"""

    @pytest.mark.property
    @given(record=raw_records)
    @settings(max_examples=100)
    def test_normalization_is_deterministic(self, record):
        """Property: the same record always normalizes to the same model or the same rejection"""
        try:
            first = normalize_model(record)
        except ModelValidationError as e:
            with pytest.raises(ModelValidationError) as exc_info:
                normalize_model(record)
            assert exc_info.value.reason == e.reason
            return

        assert normalize_model(record) == first
        assert first.pricing.prompt_cost >= 0
        assert first.pricing.completion_cost >= 0
        assert first.context_length >= 1
        assert 0 <= first.compatibility_score <= 100
        assert first.display_name


# ============================================================================
# Ordering Properties
# ============================================================================

catalog_models = st.builds(
    CatalogModelGenerator.create_model,
    display_name=st.text(alphabet="abcABC xyz", min_size=1, max_size=8).filter(str.strip),
    is_free=st.booleans(),
    compatibility_score=st.integers(min_value=0, max_value=100),
)


class TestOrderingProperties:
    """Property-based tests for catalog ordering"""

    @pytest.mark.property
    @given(models=st.lists(catalog_models, max_size=25))
    @settings(max_examples=75)
    def test_sorted_output_respects_ordering(self, models):
        """Property: free before paid, then score descending, then name"""
        ordered = sort_models(models)

        assert sorted(ordered, key=lambda model: model.id) == sorted(models, key=lambda model: model.id)
        for earlier, later in zip(ordered, ordered[1:]):
            assert model_sort_key(earlier) <= model_sort_key(later)
            if earlier.pricing.is_free == later.pricing.is_free:
                assert earlier.compatibility_score >= later.compatibility_score
            else:
                assert earlier.pricing.is_free

    @pytest.mark.property
    @given(models=st.lists(catalog_models, max_size=15))
    @settings(max_examples=50)
    def test_sorting_is_independent_of_input_order(self, models):
        assert sort_models(models) == sort_models(list(reversed(models)))


# ============================================================================
# Cache Properties
# ============================================================================

class ManualClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class TestCacheProperties:
    """Property-based tests for cache expiry"""

    @pytest.mark.property
    @given(
        ttl=st.integers(min_value=1, max_value=10_000),
        elapsed=st.integers(min_value=0, max_value=20_000),
    )
    @settings(max_examples=100)
    def test_entry_visible_exactly_until_ttl(self, ttl, elapsed):
        """Property: an entry is served iff less than ttl seconds have passed"""
        clock = ManualClock()
        cache = CatalogCache(clock=clock, default_ttl=ttl)
        models = [CatalogModelGenerator.create_model()]
        cache.put("models_all_public", models)

        clock.now = float(elapsed)

        if elapsed < ttl:
            assert cache.get("models_all_public") == models
        else:
            assert cache.get("models_all_public") is None
