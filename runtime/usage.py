"""
Token usage and cost accounting for reasoning-engine calls.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Optional

logger = logging.getLogger(__name__)

# USD per 1M tokens (input, output). Update when provider pricing changes.
MODEL_PRICING: Dict[str, Dict[str, float]] = {
    "gpt-4o-mini": {"input": 0.15, "output": 0.60},
    "gpt-4o": {"input": 2.50, "output": 10.00},
    "gpt-4.1": {"input": 2.00, "output": 8.00},
    "gpt-4.1-mini": {"input": 0.40, "output": 1.60},
    "gpt-4.1-nano": {"input": 0.10, "output": 0.40},
}


@dataclass
class TokenUsage:
    """Token counts reported for one or more requests."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    def __add__(self, other: "TokenUsage") -> "TokenUsage":
        return TokenUsage(
            prompt_tokens=self.prompt_tokens + other.prompt_tokens,
            completion_tokens=self.completion_tokens + other.completion_tokens,
            total_tokens=self.total_tokens + other.total_tokens,
        )

    @classmethod
    def total(cls, usages: Iterable[Optional["TokenUsage"]]) -> "TokenUsage":
        result = cls()
        for usage in usages:
            if usage is not None:
                result = result + usage
        return result


@dataclass
class CostInfo:
    """Dollar cost of a set of requests."""

    input_cost: float
    output_cost: float
    total_cost: float
    model: Optional[str] = None

    def __add__(self, other: "CostInfo") -> "CostInfo":
        models = [m for m in (self.model, other.model) if m]
        return CostInfo(
            input_cost=self.input_cost + other.input_cost,
            output_cost=self.output_cost + other.output_cost,
            total_cost=self.total_cost + other.total_cost,
            model=" + ".join(models) or None,
        )


@dataclass
class TurnTokenUsage:
    """Usage split by phase: tool simulation loop vs. the narrative request."""

    simulation: TokenUsage
    narrative: TokenUsage
    total: TokenUsage


def calculate_cost(usage: TokenUsage, model_id: str) -> Optional[CostInfo]:
    """
    Price a usage record for one model.

    Returns None when the model has no entry in MODEL_PRICING.
    """
    pricing = MODEL_PRICING.get(model_id)
    if pricing is None:
        logger.warning(f"No pricing found for model: {model_id}")
        return None

    input_cost = usage.prompt_tokens / 1_000_000 * pricing["input"]
    output_cost = usage.completion_tokens / 1_000_000 * pricing["output"]
    return CostInfo(
        input_cost=input_cost,
        output_cost=output_cost,
        total_cost=input_cost + output_cost,
        model=model_id,
    )


def combine_costs(*costs: Optional[CostInfo]) -> Optional[CostInfo]:
    """Sum the known costs; None when none of them is known."""
    known = [c for c in costs if c is not None]
    if not known:
        return None
    result = known[0]
    for cost in known[1:]:
        result = result + cost
    return result
