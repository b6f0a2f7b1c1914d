"""
Reverse geocoding: coordinates -> a short address label for report cards.

Providers fetch and parse; the shared reverse_geocode() wrapper owns the
error handling, so a slow or failing geocoder never blocks a report.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, NamedTuple, Optional
import logging

import requests

logger = logging.getLogger(__name__)


class GeocodedAddress(NamedTuple):
    provider: str
    street: Optional[str] = None
    house_number: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    formatted_address: Optional[str] = None

    def label(self) -> Optional[str]:
        """
        "Street number, City", degrading to whatever parts are known.
        house_number plays the part of the device geocoder's `name` field.
        """
        street = " ".join(p for p in (self.street, self.house_number) if p)
        if street and self.city:
            return f"{street}, {self.city}"
        return street or self.city or self.formatted_address


class GeocodingProvider(ABC):
    name = "base"
    timeout = 3.0

    @abstractmethod
    def _fetch(self, latitude: float, longitude: float) -> Optional[Dict[str, Any]]:
        """Raw JSON payload, or None when the provider answered without a result."""

    @abstractmethod
    def _parse(self, payload: Dict[str, Any]) -> GeocodedAddress:
        ...

    def reverse_geocode(self, latitude: float, longitude: float) -> GeocodedAddress:
        try:
            payload = self._fetch(latitude, longitude)
            if payload is None:
                return GeocodedAddress(self.name)
            return self._parse(payload)
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"{self.name} reverse-geocode error at ({latitude}, {longitude}): {e}")
            return GeocodedAddress(self.name)
