"""
Conversion API Endpoints

Endpoints:
- POST /api/convert - Full server-side conversion with a normalized answer
- POST /api/benchmark - Compare several models on one conversion
- GET /api/models - Selectable models and the configured default
"""

import logging
from fastapi import APIRouter
from fastapi.responses import JSONResponse

from everything_converter.config.settings import MODEL_OPTIONS, OPENROUTER_CONFIG, PIPELINE_CONFIG
from everything_converter.models.chat_schemas import ConvertRequest
from everything_converter.models.conversion import ModelSelection
from everything_converter.models.conversion_schemas import (
    BenchmarkRequest,
    BenchmarkResponse,
    ModelCatalog,
    ModelOption,
)
from everything_converter.services.benchmark_service import get_benchmark_service
from everything_converter.services.conversion_pipeline import SamplingOptions, get_conversion_pipeline

logger = logging.getLogger(__name__)

router = APIRouter()

MIN_BENCHMARK_MODELS = 2


@router.post("/convert")
async def convert(request: ConvertRequest):
    """
    Convert ``from`` into ``to``.

    The prompt is built server-side; monetary conversions get a live quote,
    and the answer is validated and normalized to ``{result, explanation}``.
    """
    from_text = request.from_text.strip()
    to_text = request.to_text.strip()
    if not from_text or not to_text:
        return JSONResponse(status_code=400, content={"error": "Both 'from' and 'to' are required"})

    try:
        pipeline = get_conversion_pipeline()
        converted = await pipeline.convert(
            from_text,
            to_text,
            selection=ModelSelection.from_request(request.model),
            sampling=SamplingOptions(
                temperature=request.temperature,
                top_p=request.top_p,
                max_tokens=request.max_tokens,
            ),
            skip_validation=request.skip_validation,
        )
        return {
            **converted.answer.to_dict(),
            "content": converted.chat.content,
            "model": converted.chat.model,
            "stats": converted.chat.stats.to_payload(),
        }
    except Exception as e:
        logger.error(f"Conversion failed: {e}", exc_info=True)
        return JSONResponse(status_code=500, content={"error": str(e) or "Conversion failed"})


@router.post("/benchmark")
async def benchmark(request: BenchmarkRequest):
    """Run one conversion against each requested model and rank them."""
    from_text = request.from_text.strip()
    to_text = request.to_text.strip()
    models = [m.strip() for m in request.models if m and m.strip()]
    max_models = PIPELINE_CONFIG["benchmark_max_models"]

    if not from_text or not to_text:
        return JSONResponse(status_code=400, content={"error": "Both 'from' and 'to' are required"})
    if not MIN_BENCHMARK_MODELS <= len(models) <= max_models:
        return JSONResponse(
            status_code=400,
            content={"error": f"Select between {MIN_BENCHMARK_MODELS} and {max_models} models"},
        )

    try:
        service = get_benchmark_service()
        results = await service.run(from_text, to_text, models)
        response = BenchmarkResponse(from_text=from_text, to_text=to_text, results=results)
        return response.model_dump(by_alias=True)
    except Exception as e:
        logger.error(f"Benchmark failed: {e}", exc_info=True)
        return JSONResponse(status_code=500, content={"error": str(e) or "Benchmark failed"})


@router.get("/models")
async def list_models():
    catalog = ModelCatalog(
        default_model=OPENROUTER_CONFIG["default_model"],
        options=[ModelOption(**option) for option in MODEL_OPTIONS],
    )
    return catalog.model_dump(by_alias=True)
