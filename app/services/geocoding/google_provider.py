import logging
from typing import Any, Dict, List, Optional

import requests

from .base import GeocodedAddress, GeocodingProvider

logger = logging.getLogger(__name__)


def _component(components: List[Dict[str, Any]], *types: str) -> Optional[str]:
    for component in components:
        if set(types) & set(component.get("types", [])):
            return component.get("long_name")
    return None


class GoogleMapsProvider(GeocodingProvider):
    """Google Geocoding API; only selected when an API key is configured."""

    name = "google"
    BASE_URL = "https://maps.googleapis.com/maps/api/geocode/json"

    def __init__(self, api_key: Optional[str]):
        self.api_key = api_key

    def _fetch(self, latitude: float, longitude: float) -> Optional[Dict[str, Any]]:
        if not self.api_key:
            return None
        resp = requests.get(
            self.BASE_URL,
            params={"latlng": f"{latitude},{longitude}", "key": self.api_key},
            timeout=self.timeout,
        )
        if resp.status_code != 200:
            logger.warning(f"Google geocoding answered {resp.status_code}")
            return None
        results = resp.json().get("results") or []
        return results[0] if results else None

    def _parse(self, payload: Dict[str, Any]) -> GeocodedAddress:
        components = payload.get("address_components") or []
        return GeocodedAddress(
            provider=self.name,
            street=_component(components, "route"),
            house_number=_component(components, "street_number", "premise"),
            city=_component(components, "locality", "postal_town"),
            country=_component(components, "country"),
            formatted_address=payload.get("formatted_address"),
        )
