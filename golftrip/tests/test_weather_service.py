"""
Tests for weather_service against a mocked OpenWeatherMap.
"""

from unittest.mock import patch

import httpx
import pytest

from golftrip.services import weather_service

ONECALL_RESPONSE = {
    "lat": 41.3436,
    "lon": -86.3103,
    "current": {
        "temp": 72.5,
        "humidity": 48,
        "wind_speed": 8.1,
        "weather": [{"main": "Clouds", "description": "scattered clouds", "icon": "03d"}],
    },
}


def _patched_client(handler):
    """Route the service's AsyncClient through an httpx MockTransport."""
    real_client = httpx.AsyncClient
    transport = httpx.MockTransport(handler)
    return patch.object(
        weather_service.httpx,
        "AsyncClient",
        side_effect=lambda **kwargs: real_client(transport=transport, **kwargs),
    )


class TestCurrentWeather:
    @pytest.mark.asyncio
    async def test_no_api_key(self, monkeypatch):
        monkeypatch.delenv("OPENWEATHERMAP_API_KEY", raising=False)
        assert await weather_service.get_current_weather() is None

    @pytest.mark.asyncio
    async def test_success(self, monkeypatch):
        monkeypatch.setenv("OPENWEATHERMAP_API_KEY", "owm-key")
        seen = {}

        def handler(request):
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json=ONECALL_RESPONSE)

        with _patched_client(handler):
            weather = await weather_service.get_current_weather()

        assert weather == {
            "temperature": 72.5,
            "condition": "Clouds",
            "description": "scattered clouds",
            "humidity": 48,
            "wind_speed": 8.1,
            "icon": "03d",
        }
        assert seen["params"]["appid"] == "owm-key"
        assert seen["params"]["units"] == "imperial"
        assert seen["params"]["lat"] == "41.3436"

    @pytest.mark.asyncio
    async def test_http_error(self, monkeypatch):
        monkeypatch.setenv("OPENWEATHERMAP_API_KEY", "owm-key")
        with _patched_client(lambda request: httpx.Response(401, json={"message": "Invalid API key"})):
            assert await weather_service.get_current_weather() is None

    @pytest.mark.asyncio
    async def test_unexpected_payload(self, monkeypatch):
        monkeypatch.setenv("OPENWEATHERMAP_API_KEY", "owm-key")
        with _patched_client(lambda request: httpx.Response(200, json={"current": {}})):
            assert await weather_service.get_current_weather() is None

    @pytest.mark.asyncio
    async def test_network_failure(self, monkeypatch):
        monkeypatch.setenv("OPENWEATHERMAP_API_KEY", "owm-key")

        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        with _patched_client(handler):
            assert await weather_service.get_current_weather() is None
