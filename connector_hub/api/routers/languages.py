"""Supported translation languages API router."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from connector_hub.api.dependencies import get_language_service
from connector_hub.api.models import LanguagesResponse
from connector_hub.services.language_service import LanguageService

router = APIRouter()


@router.get("/languages", tags=["Languages"], response_model=LanguagesResponse)
async def get_languages(language_service: LanguageService = Depends(get_language_service)):
    """List languages supported for translation. Cached for 24 hours."""
    try:
        return await language_service.get_languages()
    except Exception as e:
        return JSONResponse(status_code=500, content={"error": str(e) or "Unknown error", "languages": []})
