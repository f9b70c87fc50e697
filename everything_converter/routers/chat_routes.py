"""
Chat API Endpoint

Endpoints:
- POST /api/chat - Chat completion (raw text stream, or JSON with stats)
"""

import logging
from fastapi import APIRouter
from fastapi.responses import JSONResponse, StreamingResponse

from everything_converter.models.chat_schemas import ChatRequest
from everything_converter.models.conversion import ModelSelection
from everything_converter.services.conversion_pipeline import SamplingOptions, get_conversion_pipeline
from everything_converter.utils.openai import sanitize_messages

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("")
async def chat(request: ChatRequest):
    """
    Chat completion for caller-built messages.

    When ``from`` and ``to`` both name a currency, a live-rate directive is
    injected ahead of the system prompt. Streaming responses are plain text
    deltas; non-streaming responses carry the validated content and stats.
    """
    if not request.messages or not sanitize_messages(request.messages):
        return JSONResponse(status_code=400, content={"error": "messages[] is required"})

    selection = ModelSelection.from_request(request.model)
    sampling = SamplingOptions(
        temperature=request.temperature,
        top_p=request.top_p,
        max_tokens=request.max_tokens,
    )

    try:
        pipeline = get_conversion_pipeline()

        if request.stream:
            deltas = await pipeline.open_chat_stream(
                request.messages,
                selection=selection,
                sampling=sampling,
                from_text=request.from_text,
                to_text=request.to_text,
            )
            return StreamingResponse(
                deltas,
                media_type="text/plain; charset=utf-8",
                headers={"cache-control": "no-store"},
            )

        result = await pipeline.run_chat(
            request.messages,
            selection=selection,
            sampling=sampling,
            from_text=request.from_text,
            to_text=request.to_text,
            skip_validation=request.skip_validation,
        )
        return JSONResponse(content={
            "content": result.content,
            "model": result.model,
            "raw": result.raw,
            "stats": result.stats.to_payload(),
        })

    except Exception as e:
        logger.error(f"Chat request failed: {e}", exc_info=True)
        return JSONResponse(status_code=500, content={"error": str(e) or "Unknown error"})
