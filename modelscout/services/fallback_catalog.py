"""
Embedded fallback catalog.

A small static list of well-known free and paid OpenRouter models, served
when every fetch strategy fails. Records use the same raw shape as the live
API (per-token string prices) and go through the normal normalizer, so the
fallback catalog is classified and ordered exactly like a live one.
"""

import copy
from typing import Any

FALLBACK_MODELS: tuple[dict[str, Any], ...] = (
    # Free models
    {
        "id": "meta-llama/llama-3.2-3b-instruct:free",
        "name": "Llama 3.2 3B Instruct",
        "description": "Compact multilingual instruct model tuned for dialogue and coding help.",
        "pricing": {"prompt": "0", "completion": "0"},
        "context_length": 131072,
    },
    {
        "id": "meta-llama/llama-3.2-1b-instruct:free",
        "name": "Llama 3.2 1B Instruct",
        "description": "Smallest Llama 3.2 instruct model, fast responses for simple chat.",
        "pricing": {"prompt": "0", "completion": "0"},
        "context_length": 131072,
    },
    {
        "id": "google/gemma-2-9b-it:free",
        "name": "Gemma 2 9B IT",
        "description": "Instruction-tuned Gemma 2 model for chat and code generation.",
        "pricing": {"prompt": "0", "completion": "0"},
        "context_length": 8192,
    },
    {
        "id": "microsoft/phi-3-mini-128k-instruct:free",
        "name": "Phi-3 Mini 128K Instruct",
        "description": "Small instruct model with strong reasoning and coding for its size.",
        "pricing": {"prompt": "0", "completion": "0"},
        "context_length": 128000,
    },
    {
        "id": "huggingfaceh4/zephyr-7b-beta:free",
        "name": "Zephyr 7B Beta",
        "description": "Fine-tuned Mistral 7B assistant trained for helpful chat.",
        "pricing": {"prompt": "0", "completion": "0"},
        "context_length": 32768,
    },
    {
        "id": "openchat/openchat-7b:free",
        "name": "OpenChat 7B",
        "description": "Open-source chat model fine-tuned with mixed-quality conversation data.",
        "pricing": {"prompt": "0", "completion": "0"},
        "context_length": 8192,
    },
    {
        "id": "mistralai/mistral-7b-instruct:free",
        "name": "Mistral 7B Instruct",
        "description": "Instruct-tuned 7B model with solid code and chat performance.",
        "pricing": {"prompt": "0", "completion": "0"},
        "context_length": 32768,
    },
    # Paid models
    {
        "id": "openai/gpt-4-turbo",
        "name": "GPT-4 Turbo",
        "description": "Multimodal GPT-4 model with vision support and a 128K window.",
        "pricing": {"prompt": "0.00001", "completion": "0.00003"},
        "context_length": 128000,
    },
    {
        "id": "openai/gpt-4",
        "name": "GPT-4",
        "description": "OpenAI flagship model for complex reasoning and coding.",
        "pricing": {"prompt": "0.00003", "completion": "0.00006"},
        "context_length": 8192,
    },
    {
        "id": "openai/gpt-3.5-turbo",
        "name": "GPT-3.5 Turbo",
        "description": "Fast, inexpensive chat model for everyday tasks.",
        "pricing": {"prompt": "0.0000005", "completion": "0.0000015"},
        "context_length": 16385,
    },
    {
        "id": "anthropic/claude-3-opus",
        "name": "Claude 3 Opus",
        "description": "Most capable Claude 3 model, with vision and deep analysis.",
        "pricing": {"prompt": "0.000015", "completion": "0.000075"},
        "context_length": 200000,
    },
    {
        "id": "anthropic/claude-3-sonnet",
        "name": "Claude 3 Sonnet",
        "description": "Balanced Claude 3 model with vision input.",
        "pricing": {"prompt": "0.000003", "completion": "0.000015"},
        "context_length": 200000,
    },
    {
        "id": "anthropic/claude-3-haiku",
        "name": "Claude 3 Haiku",
        "description": "Fastest Claude 3 model with image understanding.",
        "pricing": {"prompt": "0.00000025", "completion": "0.00000125"},
        "context_length": 200000,
    },
    {
        "id": "google/gemini-pro",
        "name": "Gemini Pro",
        "description": "Google's general model for chat and code generation.",
        "pricing": {"prompt": "0.0000005", "completion": "0.0000015"},
        "context_length": 32768,
    },
    {
        "id": "google/gemini-pro-vision",
        "name": "Gemini Pro Vision",
        "description": "Multimodal Gemini model accepting image and text input.",
        "pricing": {"prompt": "0.0000005", "completion": "0.0000015"},
        "context_length": 16384,
    },
    {
        "id": "meta-llama/llama-2-70b-chat",
        "name": "Llama 2 70B Chat",
        "description": "Llama 2 70B tuned for dialogue.",
        "pricing": {"prompt": "0.0000007", "completion": "0.0000009"},
        "context_length": 4096,
    },
    {
        "id": "mistralai/mixtral-8x7b-instruct",
        "name": "Mixtral 8x7B Instruct",
        "description": "Sparse mixture-of-experts instruct model, strong at code.",
        "pricing": {"prompt": "0.00000024", "completion": "0.00000024"},
        "context_length": 32768,
    },
    {
        "id": "cohere/command-r-plus",
        "name": "Command R+",
        "description": "Retrieval-optimized model with tool use for enterprise workloads.",
        "pricing": {"prompt": "0.000003", "completion": "0.000015"},
        "context_length": 128000,
    },
)


def get_fallback_records() -> list[dict[str, Any]]:
    """Return a fresh copy of the fallback records, safe for callers to mutate."""
    return copy.deepcopy(list(FALLBACK_MODELS))
