"""
Per-request statistics for conversion responses.

Pure computation over data the pipeline already has: elapsed time, the model
used, reported token usage and the currency quote (if any). Cost and water
figures are rough illustrative estimates, not measurements.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, Optional, Tuple

from everything_converter.models.chat_schemas import ConversionStats, CurrencyInfo, UsageInfo
from everything_converter.models.conversion import ConversionQuote

# USD per 1M tokens: (input, output)
MODEL_PRICING: Dict[str, Tuple[float, float]] = {
    "openai/gpt-5": (1.25, 10.00),
    "openai/gpt-5-mini": (0.25, 2.00),
    "openai/gpt-4o": (2.50, 10.00),
    "openai/gpt-4o-mini": (0.15, 0.60),
    "anthropic/claude-3.5-sonnet": (3.00, 15.00),
    "anthropic/claude-3.5-haiku": (0.80, 4.00),
    "google/gemini-2.5-flash": (0.30, 2.50),
    "google/gemini-2.5-pro": (1.25, 10.00),
    "deepseek/deepseek-chat": (0.27, 1.10),
    # Free-tier models
    "openai/gpt-oss-20b:free": (0.0, 0.0),
    "z-ai/glm-4.5-air:free": (0.0, 0.0),
    "qwen/qwen3-coder:free": (0.0, 0.0),
    "moonshotai/kimi-k2:free": (0.0, 0.0),
    "meta-llama/llama-3.3-70b-instruct:free": (0.0, 0.0),
}

# Conservative flat estimate for models missing from the table
FALLBACK_PRICING: Tuple[float, float] = (1.0, 3.0)

# Illustrative only: litres of cooling water per 1K tokens
WATER_LITERS_PER_1K_TOKENS = 1.0


def estimate_cost(model: str, prompt_tokens: int, completion_tokens: int) -> float:
    """Estimate the USD cost of one completion."""
    input_price, output_price = MODEL_PRICING.get(model, FALLBACK_PRICING)
    return (prompt_tokens * input_price + completion_tokens * output_price) / 1_000_000


def estimate_water_liters(total_tokens: int) -> float:
    """Linear tokens-to-litres heuristic; a talking point, not a measurement."""
    return total_tokens / 1000 * WATER_LITERS_PER_1K_TOKENS


def usage_from_completion(completion) -> Optional[UsageInfo]:
    """Read the usage block of an OpenAI-style completion, if it has one."""
    usage = getattr(completion, "usage", None)
    if usage is None:
        return None
    prompt_tokens = getattr(usage, "prompt_tokens", None) or 0
    completion_tokens = getattr(usage, "completion_tokens", None) or 0
    total_tokens = getattr(usage, "total_tokens", None) or (prompt_tokens + completion_tokens)
    return UsageInfo(
        prompt_tokens=prompt_tokens,
        completion_tokens=completion_tokens,
        total_tokens=total_tokens,
    )


def collect_stats(
    elapsed_seconds: float,
    model: str,
    usage: Optional[UsageInfo] = None,
    quote: Optional[ConversionQuote] = None,
    now: Optional[datetime] = None,
) -> ConversionStats:
    """
    Build the stats record for one conversion.

    Args:
        elapsed_seconds: Wall-clock time around the primary and validator calls
        model: Effective model name used for the primary call
        usage: Token usage reported upstream, if any
        quote: Currency quote injected into the prompt, if any
        now: Timestamp override (defaults to the current UTC time)

    Returns:
        ConversionStats ready for serialization
    """
    cost = None
    water = None
    if usage is not None:
        cost = estimate_cost(model, usage.prompt_tokens, usage.completion_tokens)
        water = estimate_water_liters(usage.total_tokens)

    currency_info = None
    if quote is not None:
        currency_info = CurrencyInfo(
            from_currency=quote.from_currency,
            to_currency=quote.to_currency,
            rate=quote.rate,
            amount=quote.amount,
        )

    return ConversionStats(
        conversion_time_seconds=elapsed_seconds,
        model=model,
        timestamp=(now or datetime.now(timezone.utc)).isoformat(),
        usage=usage,
        estimated_cost_usd=cost,
        estimated_water_liters=water,
        currency_info=currency_info,
    )
