"""
Route handlers for text actions: prompt improvement and keyword extraction.
"""
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from models.api_models import (
    ExtractKeywordsRequest,
    ExtractKeywordsResponse,
    ImproveTextRequest,
    ImproveTextResponse
)
from services.chat_service import ChatService
from utils.errors import ProviderError
from utils.logger import get_logger

router = APIRouter(prefix="/api")
logger = get_logger("routes.actions")


@router.post("/improve-text", response_model=ImproveTextResponse)
async def improve_text(request: ImproveTextRequest):
    """Rewrite the given prompt with the selected model."""
    if not request.text or not request.text.strip():
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"message": "Text is required"})

    try:
        improved = await ChatService.improve_text(
            request.text,
            request.model_name,
            request.api_settings,
            temperature=request.temperature
        )
    except ProviderError as e:
        logger.error(f"Error improving text: {e}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": "Error improving text", "error": str(e)}
        )

    return ImproveTextResponse(improved_text=improved)


@router.post("/extract-keywords", response_model=ExtractKeywordsResponse)
async def extract_keywords(request: ExtractKeywordsRequest):
    """Keywords for a text; never fails once the text is present."""
    if not request.text or not request.text.strip():
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"message": "Text is required"})

    keywords = await ChatService.extract_keywords(request.text, request.model_name, request.api_settings)
    return ExtractKeywordsResponse(keywords=keywords)
