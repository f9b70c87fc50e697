"""
Creative helpers around the conversion pipeline.

- Target suggestions: three short things the user might convert *into*
- Surprise pairs: fun from/to pairs generated without the validator pass
"""
import json
import logging
import re
from typing import Any, List, Optional

from everything_converter.config.settings import PIPELINE_CONFIG
from everything_converter.models.chat_schemas import ChatMessage
from everything_converter.models.conversion import ModelSelection
from everything_converter.models.conversion_schemas import ConversionPair
from everything_converter.services.completion_client import CompletionClient, get_completion_client
from everything_converter.services.conversion_pipeline import (
    ConversionPipeline,
    SamplingOptions,
    get_conversion_pipeline,
)
from everything_converter.utils.openai import strip_code_fences

logger = logging.getLogger(__name__)

SUGGESTION_COUNT = 3
SUGGESTION_FILLER = "other units"

SUGGESTIONS_SYSTEM_PROMPT = """You are a conversion suggestion assistant. Given what the user wants to convert FROM, suggest 3 creative and useful things they might want to convert TO.

Rules:
1. Provide exactly 3 suggestions
2. Make suggestions relevant and creative
3. Consider different types of conversions: units, currencies, measurements, time zones, etc.
4. Keep suggestions concise (2-5 words each)
5. Return ONLY valid JSON with a "suggestions" array containing 3 strings
6. Example format: {"suggestions": ["meters", "football fields", "light years"]}

Do not include explanations, just the JSON object with suggestions array."""

SURPRISE_SYSTEM_PROMPT = (
    "Generate {count} fun, creative, and simple conversion pairs. "
    'Return ONLY strict JSON: {{"pairs": [{{"from": "string", "to": "string"}}]}} '
    "with exactly {count} entries. No extra text."
)

_JSON_ARRAY = re.compile(r"\[[\s\S]*\]")


class SuggestionFormatError(ValueError):
    """Model output could not be turned into suggestions or pairs."""


def unwrap_suggestions(data: Any) -> List[str]:
    """
    Pull a list of suggestions out of whatever shape the model returned.

    Accepts a bare array, ``{"suggestions": [...]}``, or an object whose
    first value is an array (otherwise its first values are used).
    """
    if isinstance(data, list):
        items = data
    elif isinstance(data, dict):
        if isinstance(data.get("suggestions"), list):
            items = data["suggestions"]
        else:
            values = list(data.values())
            items = values[0] if values and isinstance(values[0], list) else values
    else:
        raise SuggestionFormatError("Invalid response format")

    return [str(item).strip() for item in items if str(item).strip()][:SUGGESTION_COUNT]


def pad_suggestions(suggestions: List[str]) -> List[str]:
    padded = list(suggestions[:SUGGESTION_COUNT])
    while len(padded) < SUGGESTION_COUNT:
        padded.append(SUGGESTION_FILLER)
    return padded


def parse_conversion_pairs(text: str) -> List[ConversionPair]:
    """Find the pairs array in model text and keep entries with both sides."""
    cleaned = strip_code_fences(text or "")
    try:
        data = json.loads(cleaned)
    except ValueError:
        match = _JSON_ARRAY.search(cleaned)
        if not match:
            raise SuggestionFormatError("Invalid JSON response")
        try:
            data = json.loads(match.group(0))
        except ValueError as exc:
            raise SuggestionFormatError("Invalid JSON response") from exc

    if isinstance(data, dict):
        data = data.get("pairs", [])
    if not isinstance(data, list):
        raise SuggestionFormatError("Invalid JSON response")

    pairs = []
    for item in data:
        if not isinstance(item, dict):
            continue
        from_text = str(item.get("from") or "").strip()
        to_text = str(item.get("to") or "").strip()
        if from_text and to_text:
            pairs.append(ConversionPair(from_text=from_text, to_text=to_text))
    return pairs


class SuggestionService:
    """Suggestion and surprise generation"""

    def __init__(
        self,
        completion_client: CompletionClient,
        pipeline: ConversionPipeline,
        model: str = "google/gemini-2.5-flash",
        max_tokens: int = 100,
    ):
        self.completion_client = completion_client
        self.pipeline = pipeline
        self.selection = ModelSelection(name=model)
        self.max_tokens = max_tokens

    async def suggest(self, from_text: str) -> List[str]:
        """
        Return exactly three conversion targets for ``from_text``.

        Raises:
            SuggestionFormatError: If the model output is unusable or empty
        """
        messages = [
            ChatMessage(role="system", content=SUGGESTIONS_SYSTEM_PROMPT),
            ChatMessage(
                role="user",
                content=f"What are 3 good conversion targets for: {json.dumps(from_text, ensure_ascii=False)}",
            ),
        ]
        response = await self.completion_client.create_completion(
            messages,
            selection=self.selection,
            temperature=0.7,
            max_tokens=self.max_tokens,
            endpoint="suggestions",
        )
        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise SuggestionFormatError("No response from AI")

        try:
            data = json.loads(strip_code_fences(content))
        except ValueError as exc:
            logger.error(f"Failed to parse suggestions: {content!r}")
            raise SuggestionFormatError("Invalid response format") from exc

        suggestions = unwrap_suggestions(data)
        if not suggestions:
            raise SuggestionFormatError("No suggestions generated")
        return pad_suggestions(suggestions)

    async def surprise(self, count: int = 2, selection: Optional[ModelSelection] = None) -> List[ConversionPair]:
        """Generate fun conversion pairs; the validator pass is skipped."""
        messages = [
            ChatMessage(role="system", content=SURPRISE_SYSTEM_PROMPT.format(count=count)),
            ChatMessage(role="user", content=f"Surprise me with {count} fun conversions."),
        ]
        chat = await self.pipeline.run_chat(
            messages,
            selection=selection or ModelSelection(),
            sampling=SamplingOptions(temperature=0.7),
            skip_validation=True,
        )
        pairs = parse_conversion_pairs(chat.content)
        if not pairs:
            raise SuggestionFormatError("No conversion pairs generated")
        return pairs[:count]


_suggestion_service: Optional[SuggestionService] = None


def get_suggestion_service() -> SuggestionService:
    """Get or create the global SuggestionService instance"""
    global _suggestion_service
    if _suggestion_service is None:
        _suggestion_service = SuggestionService(
            get_completion_client(),
            get_conversion_pipeline(),
            model=PIPELINE_CONFIG["suggestions_model"],
            max_tokens=PIPELINE_CONFIG["suggestions_max_tokens"],
        )
    return _suggestion_service
