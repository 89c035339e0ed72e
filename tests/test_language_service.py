"""Unit tests for the language list and its cache."""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from connector_hub.infra.cache import TTLCache
from connector_hub.infra.errors import UpstreamError
from connector_hub.services.language_service import LANGUAGES_URL, LanguageService

GOOGLE_RESPONSE = {
    "data": {
        "languages": [
            {"language": "de", "name": "German"},
            {"language": "fr", "name": "French"},
        ]
    }
}


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


def mock_get(mock_client_class, status_code=200, json_data=None, text=""):
    mock_client = AsyncMock()
    mock_response = MagicMock()
    mock_response.status_code = status_code
    mock_response.json.return_value = json_data
    mock_response.text = text
    mock_client.get = AsyncMock(return_value=mock_response)
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=None)
    mock_client_class.return_value = mock_client
    return mock_client


class TestTTLCache:
    def test_expires_after_ttl(self):
        clock = FakeClock()
        cache = TTLCache(ttl_seconds=60, clock=clock)
        cache.set(["x"])

        clock.now += 59
        assert cache.get() == ["x"]
        assert cache.ttl_remaining == 1

        clock.now += 1
        assert cache.get() is None
        assert cache.stats() == {"has_value": False, "ttl_remaining": 0.0}

    def test_clear(self):
        cache = TTLCache(ttl_seconds=60, clock=FakeClock())
        cache.set("v")
        cache.clear()
        assert cache.get() is None


class TestLanguageService:
    @pytest.fixture
    def clock(self):
        return FakeClock()

    @pytest.fixture
    def service(self, clock):
        return LanguageService(TTLCache(ttl_seconds=86400, clock=clock), api_key="g-key")

    @pytest.mark.asyncio
    async def test_fetches_then_serves_from_cache(self, service, clock):
        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client = mock_get(mock_client_class, json_data=GOOGLE_RESPONSE)

            first = await service.get_languages()
            second = await service.get_languages()

            mock_client.get.assert_called_once()
            assert mock_client.get.call_args[0][0] == LANGUAGES_URL
            assert mock_client.get.call_args[1]["params"] == {"key": "g-key", "target": "en"}

        assert first == {
            "languages": [{"code": "de", "name": "German"}, {"code": "fr", "name": "French"}],
            "cached": False,
        }
        assert second["cached"] is True
        assert second["languages"] == first["languages"]

    @pytest.mark.asyncio
    async def test_refetches_after_expiry(self, service, clock):
        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client = mock_get(mock_client_class, json_data=GOOGLE_RESPONSE)

            await service.get_languages()
            clock.now += 86400
            result = await service.get_languages()

            assert mock_client.get.call_count == 2

        assert result["cached"] is False

    @pytest.mark.asyncio
    async def test_missing_api_key(self):
        service = LanguageService(TTLCache(ttl_seconds=10), api_key=None)

        with pytest.raises(RuntimeError, match="GOOGLE_TRANSLATE_API_KEY not configured"):
            await service.get_languages()

    @pytest.mark.asyncio
    async def test_google_error(self, service):
        with patch("httpx.AsyncClient") as mock_client_class:
            mock_get(mock_client_class, status_code=403, text="forbidden")

            with pytest.raises(UpstreamError) as exc_info:
                await service.get_languages()

        assert exc_info.value.status_code == 403
        assert exc_info.value.message == "Google API error: 403"
        assert "forbidden" not in exc_info.value.message
        assert service.cache.get() is None
