from .base import GeocodedAddress, GeocodingProvider
from .resolver import clear_label_cache, get_geocoding_provider, reverse_geocode_location

__all__ = [
    "GeocodedAddress",
    "GeocodingProvider",
    "clear_label_cache",
    "get_geocoding_provider",
    "reverse_geocode_location",
]
