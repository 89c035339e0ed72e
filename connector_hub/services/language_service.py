"""Supported translation languages, fetched from Google Cloud Translation and cached."""

import logging
from typing import Any, Dict, List, Optional

import httpx

from connector_hub.infra.cache import TTLCache
from connector_hub.infra.errors import UpstreamError
from connector_hub.infra.timeout import LANGUAGE_FETCH_TIMEOUT

logger = logging.getLogger(__name__)

LANGUAGES_URL = "https://translation.googleapis.com/language/translate/v2/languages"


class LanguageService:
    def __init__(
        self,
        cache: TTLCache,
        api_key: Optional[str] = None,
        timeout: float = LANGUAGE_FETCH_TIMEOUT,
    ):
        self.cache = cache
        self.api_key = api_key
        self.timeout = timeout

    async def get_languages(self) -> Dict[str, Any]:
        """
        Return ``{"languages": [{"code", "name"}], "cached": bool}``.

        Raises:
            RuntimeError: If no API key is configured
            UpstreamError: If the translation API answers outside 2xx
        """
        cached = self.cache.get()
        if cached is not None:
            logger.debug("Returning cached languages")
            return {"languages": cached, "cached": True}

        languages = await self.fetch_languages()
        self.cache.set(languages)
        logger.info(f"Fetched and cached {len(languages)} languages")
        return {"languages": languages, "cached": False}

    async def fetch_languages(self) -> List[Dict[str, str]]:
        if not self.api_key:
            raise RuntimeError("GOOGLE_TRANSLATE_API_KEY not configured")

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.get(LANGUAGES_URL, params={"key": self.api_key, "target": "en"})

        if not 200 <= response.status_code < 300:
            logger.error(
                "Google API error",
                extra={"status_code": response.status_code, "response_body": response.text},
            )
            raise UpstreamError(
                response.status_code,
                response.text,
                message=f"Google API error: {response.status_code}",
            )

        data = response.json()
        return [
            {"code": lang["language"], "name": lang.get("name", lang["language"])}
            for lang in data.get("data", {}).get("languages", [])
        ]
