"""
LLM call tracking helpers.

Records token usage, cost, and latency metrics for OpenAI-style completions.
Tracking is observational: a failure here is logged and never reaches the caller.
"""

import logging
from typing import Optional, Dict, List

from everything_converter.services.token_counter import get_token_counter, TokenUsage
from everything_converter.services.stats_collector import estimate_cost
from everything_converter.services.metrics import (
    llm_token_usage_counter,
    llm_request_counter,
    llm_cost_counter,
    llm_request_duration_histogram,
)

logger = logging.getLogger(__name__)


class LLMTracker:
    """Utility class that records metrics for LLM API calls."""

    def __init__(self):
        self.token_counter = get_token_counter()

    def _record(self, usage: TokenUsage, duration: float, endpoint: str) -> None:
        model = usage.model
        llm_token_usage_counter.labels(model=model, token_type="prompt").inc(usage.prompt_tokens)
        llm_token_usage_counter.labels(model=model, token_type="completion").inc(
            usage.completion_tokens
        )
        llm_request_counter.labels(model=model, endpoint=endpoint, status="success").inc()

        cost = estimate_cost(model, usage.prompt_tokens, usage.completion_tokens)
        llm_cost_counter.labels(model=model).inc(cost)
        llm_request_duration_histogram.labels(model=model, endpoint=endpoint).observe(duration)

        logger.info(
            f"LLM call tracked - Model: {model}, "
            f"Endpoint: {endpoint}, "
            f"Prompt tokens: {usage.prompt_tokens}, "
            f"Completion tokens: {usage.completion_tokens}, "
            f"Cost: ${cost:.6f}, "
            f"Duration: {duration:.2f}s"
        )

    def track_completion(
        self,
        model: str,
        completion,
        duration: float,
        endpoint: str = "chat",
    ) -> Optional[TokenUsage]:
        """
        Track a non-streaming completion using the usage block it reports.

        Args:
            model: Effective model identifier
            completion: OpenAI ChatCompletion object
            duration: Request duration in seconds
            endpoint: Metrics label for the calling flow

        Returns:
            TokenUsage, or None when the upstream reported no usage
        """
        try:
            usage = getattr(completion, "usage", None)
            if usage is None:
                llm_request_counter.labels(model=model, endpoint=endpoint, status="success").inc()
                llm_request_duration_histogram.labels(model=model, endpoint=endpoint).observe(duration)
                return None

            prompt_tokens = usage.prompt_tokens or 0
            completion_tokens = usage.completion_tokens or 0
            token_usage = TokenUsage(
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
                total_tokens=usage.total_tokens or prompt_tokens + completion_tokens,
                model=model,
            )
            self._record(token_usage, duration, endpoint)
            return token_usage

        except Exception as e:
            logger.error(f"Error tracking LLM call: {e}", exc_info=True)
            return None

    def track_streaming_completion(
        self,
        model: str,
        messages: List[Dict[str, str]],
        collected_chunks: List[str],
        duration: float,
        endpoint: str = "chat",
    ) -> Optional[TokenUsage]:
        """
        Track a streaming completion, estimating tokens locally.

        Streaming responses carry no usage block, so prompt and completion
        tokens are counted with tiktoken.
        """
        try:
            usage = self.token_counter.count_chat_completion(
                messages, "".join(collected_chunks), model
            )
            self._record(usage, duration, endpoint)
            return usage
        except Exception as e:
            logger.error(f"Error tracking streaming LLM call: {e}", exc_info=True)
            return None

    def track_failure(self, model: str, duration: float, endpoint: str = "chat") -> None:
        llm_request_counter.labels(model=model, endpoint=endpoint, status="error").inc()
        llm_request_duration_histogram.labels(model=model, endpoint=endpoint).observe(duration)


# Global singleton
_tracker: Optional[LLMTracker] = None


def get_llm_tracker() -> LLMTracker:
    """Return the shared LLMTracker instance."""
    global _tracker
    if _tracker is None:
        _tracker = LLMTracker()
    return _tracker
