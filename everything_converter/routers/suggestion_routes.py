"""
Suggestion API Endpoints

Endpoints:
- POST /api/suggestions - Three conversion targets for a "from" value
- POST /api/surprise - Randomly generated conversion pairs
"""

import logging
from fastapi import APIRouter
from fastapi.responses import JSONResponse

from everything_converter.models.conversion import ModelSelection
from everything_converter.models.conversion_schemas import (
    SuggestionRequest,
    SuggestionResponse,
    SurpriseRequest,
    SurpriseResponse,
)
from everything_converter.services.suggestion_service import SuggestionFormatError, get_suggestion_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/suggestions")
async def suggest_targets(request: SuggestionRequest):
    """Suggest exactly three things to convert ``fromText`` into."""
    from_text = (request.from_text or "").strip()
    if not from_text:
        return JSONResponse(status_code=400, content={"error": "From text is required"})

    try:
        service = get_suggestion_service()
        suggestions = await service.suggest(from_text)
        return SuggestionResponse(suggestions=suggestions).model_dump()
    except SuggestionFormatError as e:
        logger.error(f"Suggestion output unusable: {e}")
        return JSONResponse(status_code=500, content={"error": str(e)})
    except Exception as e:
        logger.error(f"Suggestion request failed: {e}", exc_info=True)
        return JSONResponse(status_code=500, content={"error": "Failed to generate suggestions"})


@router.post("/surprise")
async def surprise(request: SurpriseRequest):
    """Generate ``count`` fun conversion pairs (validation skipped)."""
    try:
        service = get_suggestion_service()
        pairs = await service.surprise(
            count=request.count,
            selection=ModelSelection.from_request(request.model),
        )
        return SurpriseResponse(pairs=pairs).model_dump(by_alias=True)
    except Exception as e:
        logger.error(f"Surprise request failed: {e}", exc_info=True)
        return JSONResponse(status_code=500, content={"error": str(e) or "Failed to generate conversions"})
