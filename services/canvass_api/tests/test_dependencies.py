from packages.address_pipeline.geocode import NominatimClient
from services.canvass_api.app.config import Settings
from services.canvass_api.app.dependencies import get_geocoder, get_street_resolver


def test_outbound_clients_are_reused_across_requests() -> None:
    settings = Settings(app_name="canvass-test", app_url="https://canvass.example")

    geocoder = get_geocoder(settings)
    assert isinstance(geocoder, NominatimClient)
    assert get_geocoder(settings) is geocoder
    assert geocoder.user_agent == "canvass-test (https://canvass.example)"

    resolver = get_street_resolver(settings)
    assert get_street_resolver(settings) is resolver
    assert resolver.client.session is get_street_resolver(settings).client.session


def test_disabled_geocoding_yields_no_client() -> None:
    assert get_geocoder(Settings(geocoding_enabled=False)) is None


def test_distinct_settings_get_distinct_clients() -> None:
    first = get_street_resolver(Settings(overpass_timeout_sec=5))
    second = get_street_resolver(Settings(overpass_timeout_sec=30))
    assert first is not second
    assert second.client.timeout_sec == 30
