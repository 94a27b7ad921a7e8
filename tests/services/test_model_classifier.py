"""
Tests for model classification heuristics
"""

import pytest

from modelscout.schemas.models_catalog import Capability
from modelscout.services.model_classifier import (
    DEFAULT_CONTEXT_LENGTH,
    DEFAULT_PROVIDER,
    calculate_compatibility_score,
    classify_model,
    context_length_bonus,
    detect_provider,
    extract_capabilities,
    is_free_model,
    parse_context_length,
)
from tests.helpers.data_generators import LLAMA_RECORD


class TestIsFreeModel:
    """Test the OR-combination of free signals"""

    def test_free_id_marker_with_nonzero_pricing(self):
        """Test id marker alone makes a model free"""
        record = {"id": "foo/bar:free", "name": "Bar", "pricing": {"prompt": "0.01", "completion": "0.02"}}
        assert is_free_model(record) is True

    def test_zero_pricing_without_markers(self):
        """Test zero pricing alone makes a model free"""
        record = {"id": "foo/bar", "name": "Bar", "pricing": {"prompt": 0, "completion": "0"}}
        assert is_free_model(record) is True

    def test_paid_model_without_markers(self):
        record = {"id": "foo/bar", "name": "Bar", "pricing": {"prompt": "0.01", "completion": "0.02"}}
        assert is_free_model(record) is False

    def test_negative_prices_count_as_zero(self):
        """Test that sentinel negative prices are treated as free"""
        record = {"id": "openrouter/auto", "name": "Auto Router", "pricing": {"prompt": "-1", "completion": "-1"}}
        assert is_free_model(record, match_name=False) is True

    def test_one_zero_price_is_not_enough(self):
        record = {"id": "foo/bar", "name": "Bar", "pricing": {"prompt": "0", "completion": "0.02"}}
        assert is_free_model(record) is False

    @pytest.mark.parametrize("suffix", [":free", "/free", "-free", "_free"])
    def test_id_markers(self, suffix):
        record = {"id": f"foo/bar{suffix}", "name": "Bar", "pricing": {"prompt": "1", "completion": "1"}}
        assert is_free_model(record) is True

    def test_id_marker_is_case_insensitive(self):
        record = {"id": "foo/bar:FREE", "name": "Bar", "pricing": {"prompt": "1", "completion": "1"}}
        assert is_free_model(record) is True

    def test_name_synonym_when_enabled(self):
        record = {"id": "foo/bar", "name": "Bar (no cost tier)", "pricing": {"prompt": "1", "completion": "1"}}
        assert is_free_model(record, match_name=True) is True

    def test_description_synonym_when_enabled(self):
        record = {
            "id": "foo/bar",
            "name": "Bar",
            "description": "Gratis access for everyone",
            "pricing": {"prompt": "1", "completion": "1"},
        }
        assert is_free_model(record, match_name=True) is True

    def test_name_synonym_when_disabled(self):
        record = {"id": "foo/bar", "name": "Bar Free", "pricing": {"prompt": "1", "completion": "1"}}
        assert is_free_model(record, match_name=False) is False

    def test_name_match_requires_whole_word(self):
        """Test names that merely contain "free" inside a word stay paid"""
        record = {"id": "foo/creative-7b", "name": "Freeform 7B", "pricing": {"prompt": "1", "completion": "1"}}
        assert is_free_model(record, match_name=True) is False

    def test_missing_pricing_counts_as_zero(self):
        assert is_free_model({"id": "foo/bar", "name": "Bar"}) is True


class TestExtractCapabilities:
    """Test keyword-based capability extraction"""

    def test_llama_instruct_has_code_and_chat(self):
        assert extract_capabilities(LLAMA_RECORD) == [Capability.CODE, Capability.CHAT]

    def test_order_follows_vocabulary(self):
        record = {
            "id": "acme/x",
            "name": "X",
            "description": "math reasoning with vision and chat",
        }
        assert extract_capabilities(record) == [
            Capability.VISION,
            Capability.CHAT,
            Capability.REASONING,
            Capability.MATH,
        ]

    def test_no_keywords(self):
        assert extract_capabilities({"id": "acme/x", "name": "X"}) == []

    def test_non_string_fields_are_ignored(self):
        assert extract_capabilities({"id": 5, "name": None, "description": ["vision"]}) == []

    def test_function_calling(self):
        record = {"id": "acme/x", "name": "X", "description": "supports tool use"}
        assert Capability.FUNCTION_CALLING in extract_capabilities(record)


class TestDetectProvider:
    """Test provider inference from the id namespace"""

    @pytest.mark.parametrize(
        "model_id,expected",
        [
            ("openai/gpt-4", "OpenAI"),
            ("anthropic/claude-3-opus", "Anthropic"),
            ("google/gemma-2-9b-it:free", "Google"),
            ("meta-llama/llama-3.2-3b-instruct:free", "Meta"),
            ("mistralai/mistral-7b-instruct", "Mistral AI"),
            ("microsoft/phi-3-mini-128k-instruct", "Microsoft"),
            ("OpenAI/gpt-4", "OpenAI"),
            ("openrouter/auto", "OpenRouter"),
        ],
    )
    def test_known_prefixes(self, model_id, expected):
        assert detect_provider(model_id) == expected

    def test_unknown_namespace_is_capitalized(self):
        assert detect_provider("nousresearch/hermes-3") == "Nousresearch"

    def test_no_namespace_uses_default(self):
        assert detect_provider("gpt-4") == DEFAULT_PROVIDER

    @pytest.mark.parametrize("model_id", ["", "/orphan", None])
    def test_empty_namespace_uses_default(self, model_id):
        assert detect_provider(model_id) == DEFAULT_PROVIDER


class TestParseContextLength:
    """Test tolerant context length parsing"""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (131072, 131072),
            (8192.9, 8192),
            ("128k", 128000),
            ("128K", 128000),
            ("1m", 1_000_000),
            ("1.5k", 1500),
            ("1,048,576", 1048576),
            ("32 768", 32768),
            ("4096", 4096),
        ],
    )
    def test_parses(self, value, expected):
        assert parse_context_length(value) == expected

    @pytest.mark.parametrize(
        "value",
        [None, "", "lots", 0, -5, "0.5", True, float("nan"), float("inf"), [], {}],
    )
    def test_defaults(self, value):
        assert parse_context_length(value) == DEFAULT_CONTEXT_LENGTH


class TestCompatibilityScore:
    """Test compatibility score heuristic"""

    @pytest.mark.parametrize(
        "context_length,bonus",
        [
            (200_000, 25),
            (128_000, 25),
            (127_999, 20),
            (32_000, 20),
            (16_000, 15),
            (8_000, 10),
            (4_000, 5),
            (3_999, 0),
        ],
    )
    def test_context_tiers_are_exclusive(self, context_length, bonus):
        assert context_length_bonus(context_length) == bonus

    def test_base_score(self):
        assert calculate_compatibility_score("acme/x", 1000, []) == 50

    def test_top_provider_bonus(self):
        assert calculate_compatibility_score("openai/x", 1000, []) == 65

    def test_capability_bonus_is_capped(self):
        capabilities = list(Capability)
        assert calculate_compatibility_score("acme/x", 1000, capabilities) == 60

    def test_maximum(self):
        assert calculate_compatibility_score("openai/x", 200_000, list(Capability)) == 100


class TestClassifyModel:
    """Test the combined classifier"""

    def test_llama_record(self):
        result = classify_model(LLAMA_RECORD)

        assert result.is_free is True
        assert result.provider == "Meta"
        assert result.context_length == 131072
        assert result.capabilities == [Capability.CODE, Capability.CHAT]
        # 50 + 25 (context) + 15 (top provider) + 4 (two capabilities)
        assert result.compatibility_score == 94

    def test_empty_record(self):
        result = classify_model({})

        assert result.is_free is True
        assert result.provider == DEFAULT_PROVIDER
        assert result.context_length == DEFAULT_CONTEXT_LENGTH
        assert result.capabilities == []
        assert result.compatibility_score == 55
