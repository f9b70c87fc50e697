"""
Completion client: the only egress point to the language-model backend.

Talks to an OpenAI-compatible gateway (OpenRouter by default) and always
requests a strict JSON object response. Errors propagate unchanged; there
are no retries here.
"""

import time
import logging
from typing import Any, AsyncGenerator, AsyncIterator, Dict, List, Optional, Sequence

from openai import AsyncOpenAI

from everything_converter.config.settings import OPENROUTER_CONFIG, PIPELINE_CONFIG
from everything_converter.models.chat_schemas import ChatMessage
from everything_converter.models.conversion import ModelSelection
from everything_converter.services.llm_tracker import get_llm_tracker
from everything_converter.utils.openai import sanitize_messages

logger = logging.getLogger(__name__)

JSON_RESPONSE_FORMAT = {"type": "json_object"}


class CompletionClient:
    """Chat completion wrapper with model resolution and telemetry"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        default_model: str = "openai/gpt-5",
        referrer: str = "",
        site_name: str = "my-website",
        default_temperature: float = 0.7,
        client: Optional[Any] = None,
    ):
        """Initialize with an OpenAI-compatible client (built from the key unless given)"""
        if client is None:
            if not api_key:
                raise ValueError("Missing OPENROUTER_API_KEY. Set it in your environment.")
            client = AsyncOpenAI(
                api_key=api_key,
                base_url=base_url,
                default_headers={
                    "HTTP-Referer": referrer,
                    "X-Title": site_name,
                },
            )

        self.client = client
        self.default_model = default_model
        self.default_temperature = default_temperature
        self.tracker = get_llm_tracker()

        logger.info(f"✅ CompletionClient initialized with default model: {self.default_model}")

    def resolve_model(self, selection: Optional[ModelSelection]) -> str:
        return (selection or ModelSelection()).resolve(self.default_model)

    def _request_kwargs(
        self,
        model: str,
        messages: List[Dict[str, str]],
        temperature: Optional[float],
        top_p: Optional[float],
        max_tokens: Optional[int],
    ) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {
            "model": model,
            "messages": messages,
            "temperature": self.default_temperature if temperature is None else temperature,
            "response_format": JSON_RESPONSE_FORMAT,
        }
        # Unset sampling options are omitted rather than sent as null
        if top_p is not None:
            kwargs["top_p"] = top_p
        if max_tokens is not None:
            kwargs["max_tokens"] = max_tokens
        return kwargs

    async def create_completion(
        self,
        messages: Sequence[ChatMessage],
        selection: Optional[ModelSelection] = None,
        temperature: Optional[float] = None,
        top_p: Optional[float] = None,
        max_tokens: Optional[int] = None,
        endpoint: str = "chat",
    ):
        """
        Non-streaming chat completion.

        Args:
            messages: Conversation to send
            selection: Default or explicitly named model
            temperature: Sampling temperature (client default when None)
            top_p: Nucleus sampling, omitted when None
            max_tokens: Completion budget, omitted when None
            endpoint: Metrics label for the calling flow

        Returns:
            The upstream ChatCompletion, including usage accounting
        """
        model = self.resolve_model(selection)
        kwargs = self._request_kwargs(
            model, sanitize_messages(messages), temperature, top_p, max_tokens
        )

        start_time = time.time()
        try:
            response = await self.client.chat.completions.create(stream=False, **kwargs)
        except Exception as e:
            self.tracker.track_failure(model, time.time() - start_time, endpoint)
            logger.error(f"❌ Completion failed ({model}): {e}")
            raise

        self.tracker.track_completion(model, response, time.time() - start_time, endpoint)
        return response

    async def open_stream(
        self,
        messages: Sequence[ChatMessage],
        selection: Optional[ModelSelection] = None,
        temperature: Optional[float] = None,
        top_p: Optional[float] = None,
        max_tokens: Optional[int] = None,
        endpoint: str = "chat",
    ) -> AsyncIterator[str]:
        """
        Streaming chat completion.

        The upstream request is issued (and may fail) before this returns;
        the returned iterator then yields non-empty content deltas.
        """
        model = self.resolve_model(selection)
        payload_messages = sanitize_messages(messages)
        kwargs = self._request_kwargs(model, payload_messages, temperature, top_p, max_tokens)

        start_time = time.time()
        try:
            response = await self.client.chat.completions.create(stream=True, **kwargs)
        except Exception as e:
            self.tracker.track_failure(model, time.time() - start_time, endpoint)
            logger.error(f"❌ Streaming completion failed ({model}): {e}")
            raise

        return self._iterate_deltas(response, model, payload_messages, start_time, endpoint)

    async def _iterate_deltas(
        self,
        response,
        model: str,
        payload_messages: List[Dict[str, str]],
        start_time: float,
        endpoint: str,
    ) -> AsyncGenerator[str, None]:
        collected_chunks: List[str] = []

        try:
            async for chunk in response:
                if chunk.choices and chunk.choices[0].delta.content:
                    content = chunk.choices[0].delta.content
                    collected_chunks.append(content)
                    yield content
        except Exception as e:
            self.tracker.track_failure(model, time.time() - start_time, endpoint)
            logger.error(f"❌ Streaming completion failed mid-stream ({model}): {e}", exc_info=True)
            raise
        finally:
            # Also reached when the consumer stops reading early
            close = getattr(response, "close", None)
            if callable(close):
                await close()

        duration = time.time() - start_time
        self.tracker.track_streaming_completion(
            model=model,
            messages=payload_messages,
            collected_chunks=collected_chunks,
            duration=duration,
            endpoint=endpoint,
        )
        logger.info(
            f"✅ Streaming completion finished - "
            f"Chunks: {len(collected_chunks)}, Latency: {duration*1000:.2f}ms"
        )


# Global completion client instance
_completion_client: Optional[CompletionClient] = None


def get_completion_client() -> CompletionClient:
    """Get or create global CompletionClient instance"""
    global _completion_client
    if _completion_client is None:
        _completion_client = CompletionClient(
            api_key=OPENROUTER_CONFIG["api_key"],
            base_url=OPENROUTER_CONFIG["base_url"],
            default_model=OPENROUTER_CONFIG["default_model"],
            referrer=OPENROUTER_CONFIG["referrer"],
            site_name=OPENROUTER_CONFIG["site_name"],
            default_temperature=PIPELINE_CONFIG["temperature"],
        )
    return _completion_client
