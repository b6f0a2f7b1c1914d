import logging
import threading
from typing import Dict, Optional, Tuple

from app.core.settings import settings
from .base import GeocodingProvider
from .google_provider import GoogleMapsProvider
from .nominatim_provider import NominatimProvider

logger = logging.getLogger(__name__)

# 5 decimals is about 1 m; repeat submissions from the same spot reuse the label
COORDINATE_PRECISION = 5
MAX_CACHED_LABELS = 1024

_provider_instance: Optional[GeocodingProvider] = None
_label_cache: Dict[Tuple[float, float], str] = {}
_cache_lock = threading.Lock()


def get_geocoding_provider() -> GeocodingProvider:
    """Google when GEOCODING_PROVIDER=google and a key is set, Nominatim otherwise."""
    global _provider_instance
    if _provider_instance is not None:
        return _provider_instance

    wanted = (settings.GEOCODING_PROVIDER or "nominatim").lower()
    if wanted == "google" and settings.GOOGLE_MAPS_API_KEY:
        _provider_instance = GoogleMapsProvider(api_key=settings.GOOGLE_MAPS_API_KEY)
    else:
        if wanted == "google":
            logger.warning("GEOCODING_PROVIDER=google without GOOGLE_MAPS_API_KEY; using Nominatim")
        _provider_instance = NominatimProvider()

    clear_label_cache()
    logger.info(f"Geocoding provider: {_provider_instance.name}")
    return _provider_instance


def clear_label_cache() -> None:
    with _cache_lock:
        _label_cache.clear()


def reverse_geocode_location(latitude: float, longitude: float) -> Optional[str]:
    """
    Short location label for coordinates, or None when nothing is known.
    Only found labels are cached, so a geocoder outage is retried next time.
    """
    key = (round(latitude, COORDINATE_PRECISION), round(longitude, COORDINATE_PRECISION))
    with _cache_lock:
        if key in _label_cache:
            return _label_cache[key]

    label = get_geocoding_provider().reverse_geocode(*key).label()
    if label:
        with _cache_lock:
            if len(_label_cache) >= MAX_CACHED_LABELS:
                _label_cache.pop(next(iter(_label_cache)))
            _label_cache[key] = label
    return label
