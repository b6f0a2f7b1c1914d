import pytest
import requests

from app.services.geocoding import GeocodedAddress, GeocodingProvider, clear_label_cache, resolver
from app.services.geocoding import google_provider, nominatim_provider
from app.services.geocoding.google_provider import GoogleMapsProvider
from app.services.geocoding.nominatim_provider import NominatimProvider
from tests.conftest import FakeResponse

NOMINATIM_PAYLOAD = {
    "display_name": "12, Rizal Street, Poblacion, Marilao, Bulacan, 3019, Philippines",
    "address": {
        "house_number": "12",
        "road": "Rizal Street",
        "town": "Marilao",
        "country": "Philippines",
    },
}


class CountingProvider(GeocodingProvider):
    name = "counting"

    def __init__(self, payload):
        self.payload = payload
        self.calls = 0

    def _fetch(self, latitude, longitude):
        self.calls += 1
        return self.payload

    def _parse(self, payload):
        return GeocodedAddress(self.name, street=payload["street"], city=payload["city"])


@pytest.fixture(autouse=True)
def fresh_cache():
    clear_label_cache()
    yield
    clear_label_cache()


def test_address_label():
    assert GeocodedAddress("x", street="Rizal Street", house_number="12", city="Marilao").label() == "Rizal Street 12, Marilao"
    assert GeocodedAddress("x", street="Rizal Street").label() == "Rizal Street"
    assert GeocodedAddress("x", city="Marilao").label() == "Marilao"
    assert GeocodedAddress("x", formatted_address="Somewhere in Bulacan").label() == "Somewhere in Bulacan"
    assert GeocodedAddress("x").label() is None


def test_nominatim_parses_address(monkeypatch):
    seen = {}

    def fake_get(url, params=None, headers=None, timeout=None):
        seen.update(params=params, headers=headers, timeout=timeout)
        return FakeResponse(200, NOMINATIM_PAYLOAD)

    monkeypatch.setattr(nominatim_provider.requests, "get", fake_get)
    address = NominatimProvider(user_agent="tests").reverse_geocode(14.7566, 120.9466)

    assert address.label() == "Rizal Street 12, Marilao"
    assert address.country == "Philippines"
    assert address.provider == "nominatim"
    assert seen["params"]["lat"] == 14.7566
    assert seen["headers"] == {"User-Agent": "tests"}
    assert seen["timeout"] <= 3.0


def test_nominatim_failures_return_empty(monkeypatch):
    provider = NominatimProvider()
    empty = GeocodedAddress("nominatim")

    monkeypatch.setattr(nominatim_provider.requests, "get", lambda *a, **k: FakeResponse(503))
    assert provider.reverse_geocode(0, 0) == empty

    def boom(*args, **kwargs):
        raise requests.Timeout("slow")

    monkeypatch.setattr(nominatim_provider.requests, "get", boom)
    assert provider.reverse_geocode(0, 0) == empty

    monkeypatch.setattr(nominatim_provider.requests, "get", lambda *a, **k: FakeResponse(200, None))
    assert provider.reverse_geocode(0, 0) == empty


def test_google_parses_components(monkeypatch):
    payload = {"results": [{
        "formatted_address": "12 Rizal St, Marilao, Bulacan, Philippines",
        "address_components": [
            {"long_name": "12", "types": ["street_number"]},
            {"long_name": "Rizal Street", "types": ["route"]},
            {"long_name": "Marilao", "types": ["locality", "political"]},
            {"long_name": "Philippines", "types": ["country", "political"]},
        ],
    }]}
    monkeypatch.setattr(google_provider.requests, "get", lambda *a, **k: FakeResponse(200, payload))

    address = GoogleMapsProvider(api_key="key").reverse_geocode(14.7566, 120.9466)
    assert address.label() == "Rizal Street 12, Marilao"
    assert address.country == "Philippines"


def test_google_without_key_or_results(monkeypatch):
    assert GoogleMapsProvider(api_key=None).reverse_geocode(0, 0) == GeocodedAddress("google")

    monkeypatch.setattr(google_provider.requests, "get", lambda *a, **k: FakeResponse(200, {"results": []}))
    assert GoogleMapsProvider(api_key="key").reverse_geocode(0, 0) == GeocodedAddress("google")


def test_provider_selection(monkeypatch):
    monkeypatch.setattr(resolver, "_provider_instance", None)
    monkeypatch.setattr(resolver.settings, "GEOCODING_PROVIDER", "google")
    monkeypatch.setattr(resolver.settings, "GOOGLE_MAPS_API_KEY", None)
    assert isinstance(resolver.get_geocoding_provider(), NominatimProvider)

    monkeypatch.setattr(resolver, "_provider_instance", None)
    monkeypatch.setattr(resolver.settings, "GOOGLE_MAPS_API_KEY", "key")
    assert isinstance(resolver.get_geocoding_provider(), GoogleMapsProvider)


def test_labels_are_cached_per_rounded_coordinate(monkeypatch):
    provider = CountingProvider({"street": "MacArthur Highway", "city": "Marilao"})
    monkeypatch.setattr(resolver, "_provider_instance", provider)

    assert resolver.reverse_geocode_location(14.750001, 120.950001) == "MacArthur Highway, Marilao"
    assert resolver.reverse_geocode_location(14.750002, 120.950002) == "MacArthur Highway, Marilao"
    assert provider.calls == 1


def test_missing_labels_are_not_cached(monkeypatch):
    provider = CountingProvider(None)
    monkeypatch.setattr(resolver, "_provider_instance", provider)

    assert resolver.reverse_geocode_location(14.75, 120.95) is None
    assert resolver.reverse_geocode_location(14.75, 120.95) is None
    assert provider.calls == 2


def test_label_cache_evicts_oldest(monkeypatch):
    provider = CountingProvider({"street": "Rizal Street", "city": "Marilao"})
    monkeypatch.setattr(resolver, "_provider_instance", provider)
    monkeypatch.setattr(resolver, "MAX_CACHED_LABELS", 2)

    resolver.reverse_geocode_location(14.1, 120.1)
    resolver.reverse_geocode_location(14.2, 120.2)
    resolver.reverse_geocode_location(14.3, 120.3)

    assert list(resolver._label_cache) == [(14.2, 120.2), (14.3, 120.3)]
    resolver.reverse_geocode_location(14.1, 120.1)
    assert provider.calls == 4
