"""
Pydantic schemas for the normalized model catalog
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Capability(str, Enum):
    """Controlled capability vocabulary, in declaration (output) order."""

    VISION = "vision"
    CODE = "code"
    CHAT = "chat"
    COMPLETION = "completion"
    FUNCTION_CALLING = "function_calling"
    REASONING = "reasoning"
    MATH = "math"


class ModelPricing(BaseModel):
    """Normalized pricing; costs are in `currency` per token as the catalog reports them."""

    model_config = ConfigDict(frozen=True)

    prompt_cost: float = Field(0.0, ge=0, description="Prompt (input) cost")
    completion_cost: float = Field(0.0, ge=0, description="Completion (output) cost")
    is_free: bool = Field(False, description="Heuristic free flag, a filter convenience only")
    currency: str = Field("USD", description="Pricing currency")


class CatalogModel(BaseModel):
    """A fully validated and normalized catalog entry."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Catalog model identifier")
    display_name: str = Field(..., min_length=1, description="Human-formatted model name")
    provider: str = Field(..., description="Provider label inferred from the id namespace")
    pricing: ModelPricing
    context_length: int = Field(4096, ge=1, description="Context window in tokens")
    capabilities: list[Capability] = Field(default_factory=list)
    compatibility_score: int = Field(50, ge=0, le=100, description="Heuristic ranking signal")
    description: str = Field("Language Model", description="Presentational summary")
    metadata: dict[str, Any] = Field(
        default_factory=dict, description="Opaque passthrough fields (created, updated, top_provider)"
    )

    @property
    def is_free(self) -> bool:
        return self.pricing.is_free


class CacheEntrySummary(BaseModel):
    """Inspectable view of one cache partition."""

    key: str
    count: int
    free_count: int
    age_seconds: float
    ttl_seconds: float
    expired: bool
    source: str


class CatalogStatistics(BaseModel):
    """Aggregate cache statistics."""

    entry_count: int = 0
    total_models: int = 0
    total_free_models: int = 0
    last_updated: datetime | None = None
    entries: list[CacheEntrySummary] = Field(default_factory=list)


class CatalogResponse(BaseModel):
    """Response body for catalog listing endpoints."""

    data: list[CatalogModel]
    count: int
    free_count: int
    timestamp: datetime
