"""
Conversion request pipeline.

Per request:
- Currency detection on the free-text endpoints
- Live quote lookup and directive injection for monetary conversions
- Primary completion (streaming or not, never both)
- Best-effort validator pass and stats for non-streaming requests
"""

import time
import logging
from dataclasses import dataclass
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence

from everything_converter.config.settings import PIPELINE_CONFIG
from everything_converter.models.chat_schemas import ChatMessage, ConversionStats
from everything_converter.models.conversion import ConversionAnswer, ConversionQuote, ModelSelection
from everything_converter.services.completion_client import CompletionClient, get_completion_client
from everything_converter.services.currency_detector import detect_currency_conversion, extract_amount
from everything_converter.services.fx_service import FXService, UnknownCurrencyError, get_fx_service
from everything_converter.services.metrics import currency_detection_counter
from everything_converter.services.prompt_builder import apply_currency_directive, build_conversion_prompt
from everything_converter.services.result_validator import ResultValidator
from everything_converter.services.stats_collector import collect_stats, usage_from_completion
from everything_converter.utils.openai import normalize_answer

logger = logging.getLogger(__name__)


@dataclass
class SamplingOptions:
    """Caller-controlled sampling parameters for the primary call"""
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    max_tokens: Optional[int] = None


@dataclass
class ChatResult:
    """Outcome of one non-streaming chat request"""
    content: str
    model: str
    raw: Dict[str, Any]
    stats: ConversionStats


@dataclass
class ConvertResult:
    """Chat outcome plus the normalized two-field answer"""
    answer: ConversionAnswer
    chat: ChatResult


def _message_content(response) -> str:
    choices = getattr(response, "choices", None) or []
    if not choices:
        return ""
    return choices[0].message.content or ""


def _raw_payload(response) -> Dict[str, Any]:
    dump = getattr(response, "model_dump", None)
    return dump() if callable(dump) else {}


class ConversionPipeline:
    """Orchestrates detection, quoting, completion, validation and stats"""

    def __init__(
        self,
        completion_client: CompletionClient,
        fx_service: FXService,
        validator: Optional[ResultValidator] = None,
    ):
        self.completion_client = completion_client
        self.fx_service = fx_service
        self.validator = validator or ResultValidator(
            completion_client, max_tokens=PIPELINE_CONFIG["validator_max_tokens"]
        )

    async def quote_for(
        self,
        from_text: Optional[str],
        to_text: Optional[str],
    ) -> Optional[ConversionQuote]:
        """
        Return a live quote when both endpoints name a currency.

        Unknown codes fall back to an unaided model answer; provider failures
        (missing key, auth, no cache to fall back on) propagate.
        """
        if not from_text or not to_text:
            return None

        pair = detect_currency_conversion(from_text, to_text)
        currency_detection_counter.labels(detected="true" if pair else "false").inc()
        if pair is None:
            return None

        amount = extract_amount(from_text)
        try:
            quote = await self.fx_service.convert(amount, pair.from_currency, pair.to_currency)
        except UnknownCurrencyError as e:
            logger.warning(f"⚠️  Currency detected but not quotable, continuing without rates: {e}")
            return None

        logger.info(
            f"💱 Currency conversion detected: {quote.amount} {quote.from_currency} -> "
            f"{quote.converted_amount} {quote.to_currency} (rate {quote.rate})"
        )
        return quote

    async def _complete_and_validate(
        self,
        messages: Sequence[ChatMessage],
        selection: ModelSelection,
        sampling: SamplingOptions,
        from_text: Optional[str],
        to_text: Optional[str],
        skip_validation: bool,
        quote: Optional[ConversionQuote],
    ) -> ChatResult:
        start_time = time.perf_counter()

        response = await self.completion_client.create_completion(
            messages,
            selection=selection,
            temperature=sampling.temperature,
            top_p=sampling.top_p,
            max_tokens=sampling.max_tokens,
        )
        content = _message_content(response)

        if skip_validation:
            ResultValidator.record_skipped()
        else:
            outcome = await self.validator.validate(from_text, to_text, content, selection)
            content = outcome.unwrap_or(content)

        elapsed = time.perf_counter() - start_time
        effective_model = self.completion_client.resolve_model(selection)
        stats = collect_stats(
            elapsed_seconds=elapsed,
            model=effective_model,
            usage=usage_from_completion(response),
            quote=quote,
        )

        return ChatResult(
            content=content,
            model=getattr(response, "model", None) or effective_model,
            raw=_raw_payload(response),
            stats=stats,
        )

    async def run_chat(
        self,
        messages: List[ChatMessage],
        selection: ModelSelection,
        sampling: SamplingOptions,
        from_text: Optional[str] = None,
        to_text: Optional[str] = None,
        skip_validation: bool = False,
    ) -> ChatResult:
        """Non-streaming chat with caller-supplied messages."""
        quote = await self.quote_for(from_text, to_text)
        prepared = apply_currency_directive(messages, quote)
        return await self._complete_and_validate(
            prepared, selection, sampling, from_text, to_text, skip_validation, quote
        )

    async def open_chat_stream(
        self,
        messages: List[ChatMessage],
        selection: ModelSelection,
        sampling: SamplingOptions,
        from_text: Optional[str] = None,
        to_text: Optional[str] = None,
    ) -> AsyncIterator[str]:
        """Streaming chat: quote injection applies, validation and stats do not."""
        quote = await self.quote_for(from_text, to_text)
        prepared = apply_currency_directive(messages, quote)
        return await self.completion_client.open_stream(
            prepared,
            selection=selection,
            temperature=sampling.temperature,
            top_p=sampling.top_p,
            max_tokens=sampling.max_tokens,
        )

    async def convert(
        self,
        from_text: str,
        to_text: str,
        selection: ModelSelection,
        sampling: SamplingOptions,
        skip_validation: bool = False,
    ) -> ConvertResult:
        """Full server-side conversion: prompt, completion, validation, normalization."""
        quote = await self.quote_for(from_text, to_text)
        messages = build_conversion_prompt(from_text, to_text, quote)
        chat = await self._complete_and_validate(
            messages, selection, sampling, from_text, to_text, skip_validation, quote
        )
        return ConvertResult(answer=normalize_answer(chat.content), chat=chat)


_pipeline: Optional[ConversionPipeline] = None


def get_conversion_pipeline() -> ConversionPipeline:
    """Get or create the global ConversionPipeline instance"""
    global _pipeline
    if _pipeline is None:
        _pipeline = ConversionPipeline(get_completion_client(), get_fx_service())
    return _pipeline
