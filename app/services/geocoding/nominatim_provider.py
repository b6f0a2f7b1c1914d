import logging
from typing import Any, Dict, Optional

import requests

from app.core.settings import settings
from .base import GeocodedAddress, GeocodingProvider

logger = logging.getLogger(__name__)


class NominatimProvider(GeocodingProvider):
    """OpenStreetMap Nominatim. No key needed, but the usage policy requires a User-Agent."""

    name = "nominatim"
    BASE_URL = "https://nominatim.openstreetmap.org/reverse"

    def __init__(self, user_agent: Optional[str] = None):
        self.user_agent = user_agent or f"community-help-api/{settings.APP_VERSION}"

    def _fetch(self, latitude: float, longitude: float) -> Optional[Dict[str, Any]]:
        resp = requests.get(
            self.BASE_URL,
            params={"lat": latitude, "lon": longitude, "format": "json", "addressdetails": 1},
            headers={"User-Agent": self.user_agent},
            timeout=self.timeout,
        )
        if resp.status_code != 200:
            logger.warning(f"Nominatim answered {resp.status_code}")
            return None
        return resp.json()

    def _parse(self, payload: Dict[str, Any]) -> GeocodedAddress:
        address = payload.get("address") or {}
        city = next(
            (address[k] for k in ("city", "town", "village", "municipality") if address.get(k)),
            None,
        )
        return GeocodedAddress(
            provider=self.name,
            street=address.get("road") or address.get("pedestrian"),
            house_number=address.get("house_number"),
            city=city,
            country=address.get("country"),
            formatted_address=payload.get("display_name"),
        )
