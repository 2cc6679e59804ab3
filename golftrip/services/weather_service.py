"""
OpenWeatherMap client for current conditions at the venue.

Falls back to None on any failure so the dashboard is never blocked.
"""

import logging
import os
from typing import Dict, Optional

import httpx

logger = logging.getLogger(__name__)

ONECALL_URL = "https://api.openweathermap.org/data/3.0/onecall"

# Plymouth, Indiana
VENUE_LATITUDE = 41.3436
VENUE_LONGITUDE = -86.3103


def _get_api_key() -> Optional[str]:
    return os.environ.get("OPENWEATHERMAP_API_KEY")


async def get_current_weather(
    latitude: float = VENUE_LATITUDE, longitude: float = VENUE_LONGITUDE
) -> Optional[Dict]:
    """
    Current conditions in imperial units.

    Returns:
        ``{"temperature", "condition", "description", "humidity", "wind_speed", "icon"}``
        or None if the key is missing or the request fails
    """
    api_key = _get_api_key()
    if not api_key:
        logger.warning("OPENWEATHERMAP_API_KEY not set, skipping weather lookup")
        return None

    try:
        async with httpx.AsyncClient(timeout=10.0) as client:
            resp = await client.get(
                ONECALL_URL,
                params={
                    "lat": latitude,
                    "lon": longitude,
                    "appid": api_key,
                    "units": "imperial",
                },
                headers={"User-Agent": "Golf Trip App"},
            )
            resp.raise_for_status()
            data = resp.json()

        current = data["current"]
        weather = current["weather"][0]
        return {
            "temperature": current["temp"],
            "condition": weather["main"],
            "description": weather["description"],
            "humidity": current["humidity"],
            "wind_speed": current["wind_speed"],
            "icon": weather["icon"],
        }

    except Exception:
        logger.warning("Weather lookup failed", exc_info=True)
        return None
