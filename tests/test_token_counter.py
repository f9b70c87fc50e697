"""Unit tests for local token accounting (character fallback in tests)."""
from dataclasses import asdict

from everything_converter.services.token_counter import TokenCounter


def test_chat_completion_usage_from_character_fallback():
    counter = TokenCounter()

    usage = counter.count_chat_completion(
        [{"role": "user", "content": "abcdefgh"}], "abcdefghijkl", "openai/gpt-5"
    )

    # 3 per message + "user" (1) + content (2) + 3 reply overhead
    assert asdict(usage) == {
        "prompt_tokens": 9,
        "completion_tokens": 3,
        "total_tokens": 12,
        "model": "openai/gpt-5",
    }


def test_empty_text_counts_zero():
    assert TokenCounter().count_tokens("", "openai/gpt-5") == 0

