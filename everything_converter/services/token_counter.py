"""
Token accounting utilities.

Estimates token usage for completions whose upstream response carries no
usage block (streaming responses):
- Exact counting via tiktoken where an encoding is available
- Character-based fallback when it is not
"""

import tiktoken
from typing import Optional, Dict, List
from dataclasses import dataclass
import logging

logger = logging.getLogger(__name__)


# Mapping between model-name prefixes and tiktoken encodings
MODEL_ENCODINGS = {
    "openai/gpt-4o": "o200k_base",
    "openai/gpt-5": "o200k_base",
    "openai/gpt-oss": "o200k_base",
    "openai/gpt-4": "cl100k_base",
    "openai/gpt-3.5": "cl100k_base",

    # Default encoding fallback (approximate for non-OpenAI models)
    "default": "cl100k_base",
}


@dataclass
class TokenUsage:
    """Token usage statistics for a single API call."""
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int
    model: str


class TokenCounter:
    """Utility for counting tokens across LLM interactions."""

    def __init__(self):
        self._encoders: Dict[str, tiktoken.Encoding] = {}

    def _encoding_name(self, model: str) -> str:
        for prefix, encoding_name in MODEL_ENCODINGS.items():
            if prefix != "default" and model.startswith(prefix):
                return encoding_name
        return MODEL_ENCODINGS["default"]

    def _get_encoder(self, model: str) -> tiktoken.Encoding:
        """Return the encoding for the given model name."""
        encoding_name = self._encoding_name(model)

        if encoding_name not in self._encoders:
            self._encoders[encoding_name] = tiktoken.get_encoding(encoding_name)

        return self._encoders[encoding_name]

    def count_tokens(self, text: str, model: str) -> int:
        """
        Compute the number of tokens in a plain text string.

        Args:
            text: Text to evaluate
            model: Model identifier

        Returns:
            Token count estimate
        """
        if not text:
            return 0

        try:
            encoder = self._get_encoder(model)
            return len(encoder.encode(text))
        except Exception as e:
            logger.warning(f"Token encoding unavailable ({e}), estimating from characters")
            # Simple fallback heuristic: 1 token ~ 4 characters
            return len(text) // 4

    def count_messages_tokens(self, messages: List[Dict[str, str]], model: str) -> int:
        """
        Compute token usage for a ChatCompletion-style payload.

        Each message carries a fixed overhead for role and separators, plus a
        fixed overhead per reply.
        """
        tokens_per_message = 3
        num_tokens = 0
        for message in messages:
            num_tokens += tokens_per_message
            for value in message.values():
                if value:
                    num_tokens += self.count_tokens(str(value), model)

        return num_tokens + 3

    def count_chat_completion(
        self,
        messages: List[Dict[str, str]],
        completion: str,
        model: str
    ) -> TokenUsage:
        """Calculate token usage for a single ChatCompletion call."""
        prompt_tokens = self.count_messages_tokens(messages, model)
        completion_tokens = self.count_tokens(completion, model)

        return TokenUsage(
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=prompt_tokens + completion_tokens,
            model=model,
        )


# Global singleton instance
_token_counter: Optional[TokenCounter] = None


def get_token_counter() -> TokenCounter:
    """Return the global TokenCounter instance."""
    global _token_counter
    if _token_counter is None:
        _token_counter = TokenCounter()
    return _token_counter
