"""
AI Gateway — Model Tier Selector
=================================

What:  Static mapping from operation name to execution tier, model id and
       generation parameters.
Why:   Interactive operations (chat, translation) need low latency and can
       tolerate varied phrasing; structured reasoning (summaries, notes,
       explanations, rewrites) needs consistency. Two tiers cover both.
How:   A fixed table decides the tier; only the model identifiers come from
       settings. Callers cannot override the binding per request.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from ai_gateway.config import Settings


class ModelTier(str, Enum):
    FAST = "fast"
    DEEP = "deep"


@dataclass(frozen=True)
class GenerationParams:
    temperature: float
    top_p: float
    top_k: int
    max_output_tokens: int


@dataclass(frozen=True)
class TierBinding:
    """A tier resolved against configuration: what to call and how."""
    tier: ModelTier
    model_id: str
    params: GenerationParams


TIER_PARAMS: Mapping[ModelTier, GenerationParams] = MappingProxyType({
    ModelTier.FAST: GenerationParams(
        temperature=0.7,
        top_p=0.95,
        top_k=40,
        max_output_tokens=2048,
    ),
    ModelTier.DEEP: GenerationParams(
        temperature=0.3,
        top_p=0.9,
        top_k=32,
        max_output_tokens=4096,
    ),
})

OPERATION_TIERS: Mapping[str, ModelTier] = MappingProxyType({
    "chat": ModelTier.FAST,
    "translate": ModelTier.FAST,
    "summarize": ModelTier.DEEP,
    "create_note": ModelTier.DEEP,
    "explain": ModelTier.DEEP,
    "improve_writing": ModelTier.DEEP,
})


def model_for_tier(tier: ModelTier, settings: Settings) -> str:
    if tier is ModelTier.FAST:
        return settings.gemini_fast_model
    return settings.gemini_deep_model


def select_tier(operation: str, settings: Settings) -> TierBinding:
    """
    Resolve the tier binding for an operation.

    Raises:
        KeyError: operation is not one of the six known operations.
    """
    tier = OPERATION_TIERS[operation]
    return TierBinding(
        tier=tier,
        model_id=model_for_tier(tier, settings),
        params=TIER_PARAMS[tier],
    )
