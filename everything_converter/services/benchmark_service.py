"""
Model benchmark: run one conversion against several models and rank them.
"""
import time
import logging
from typing import List, Optional

from everything_converter.config.settings import MODEL_OPTIONS
from everything_converter.models.conversion import ModelSelection
from everything_converter.models.conversion_schemas import BenchmarkResult
from everything_converter.services.conversion_pipeline import (
    ConversionPipeline,
    SamplingOptions,
    get_conversion_pipeline,
)

logger = logging.getLogger(__name__)

BENCHMARK_SAMPLING = SamplingOptions(temperature=0.2, top_p=0.1)


def model_label(model_id: str) -> str:
    for option in MODEL_OPTIONS:
        if option["value"] == model_id:
            return option["label"]
    return model_id


def rank_results(results: List[BenchmarkResult]) -> List[BenchmarkResult]:
    """Order by response time with failures last; rank and flag the winner."""
    ordered = sorted(
        results,
        key=lambda r: (r.status != "success", r.response_time_ms),
    )
    ranked = []
    for index, result in enumerate(ordered):
        succeeded = result.status == "success"
        ranked.append(result.model_copy(update={
            "rank": index + 1 if succeeded else None,
            "is_winner": succeeded and index == 0,
        }))
    return ranked


class BenchmarkService:
    """Sequential multi-model comparison built on the conversion pipeline"""

    def __init__(self, pipeline: ConversionPipeline):
        self.pipeline = pipeline

    async def _run_one(self, from_text: str, to_text: str, model_id: str) -> BenchmarkResult:
        start_time = time.perf_counter()
        try:
            converted = await self.pipeline.convert(
                from_text,
                to_text,
                selection=ModelSelection.from_request(model_id),
                sampling=BENCHMARK_SAMPLING,
            )
        except Exception as e:
            logger.warning(f"⚠️  Benchmark model {model_id} failed: {e}")
            return BenchmarkResult(
                model_id=model_id,
                model_name=model_label(model_id),
                status="error",
                error_message=str(e) or type(e).__name__,
            )

        stats = converted.chat.stats
        return BenchmarkResult(
            model_id=model_id,
            model_name=model_label(model_id),
            status="success",
            result=converted.answer.result,
            explanation=converted.answer.explanation,
            response_time_ms=(time.perf_counter() - start_time) * 1000,
            token_count=stats.usage.total_tokens if stats.usage else 0,
            estimated_cost_usd=stats.estimated_cost_usd or 0.0,
        )

    async def run(self, from_text: str, to_text: str, models: List[str]) -> List[BenchmarkResult]:
        """
        Convert ``from_text`` into ``to_text`` with each model in turn.

        One model failing is recorded as an error entry; it does not stop the run.
        """
        logger.info(f"🏁 Benchmarking {len(models)} models: {from_text!r} -> {to_text!r}")
        results = []
        for model_id in models:
            results.append(await self._run_one(from_text, to_text, model_id))
        return rank_results(results)


_benchmark_service: Optional[BenchmarkService] = None


def get_benchmark_service() -> BenchmarkService:
    """Get or create the global BenchmarkService instance"""
    global _benchmark_service
    if _benchmark_service is None:
        _benchmark_service = BenchmarkService(get_conversion_pipeline())
    return _benchmark_service
