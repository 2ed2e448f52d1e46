import pytest

from fake_http import FakeResponse, FakeSession

from packages.address_pipeline.errors import UpstreamUnavailableError
from packages.address_pipeline.overpass import OverpassClient
from packages.address_pipeline.streets import (
    StreetResolver,
    addresses_from_elements,
    features_from_elements,
    filter_by_city,
)
from packages.address_pipeline.types import AddressCandidate, BoundingBox, PlaceHints


BBOX = BoundingBox(45.5, -73.6, 45.6, -73.5)


def _resolver(responses: list) -> tuple[StreetResolver, FakeSession]:
    session = FakeSession(responses)
    client = OverpassClient(user_agent="canvass", endpoints=["https://mirror-a", "https://mirror-b"], session=session)
    return StreetResolver(client), session


def test_addresses_from_elements_uses_point_or_center() -> None:
    elements = [
        {"type": "node", "lat": 45.51, "lon": -73.55, "tags": {"addr:housenumber": "10", "addr:street": "Rue Peel"}},
        {"type": "way", "center": {"lat": 45.52, "lon": -73.56}, "tags": {"addr:housenumber": "12"}},
        {"type": "node", "lat": 45.53, "lon": -73.57, "tags": {"addr:street": "Rue Peel"}},
        {"type": "relation", "tags": {"addr:housenumber": "14"}},
    ]
    candidates = addresses_from_elements(elements, "Rue Peel", PlaceHints(city="Montreal", country="CA"))

    assert [(c.civic_number, c.street, c.lat, c.lng) for c in candidates] == [
        ("10", "Rue Peel", 45.51, -73.55),
        ("12", "Rue Peel", 45.52, -73.56),
    ]
    assert candidates[0].label == "10 Rue Peel"
    assert candidates[1].city == "Montreal"
    assert candidates[1].country == "CA"


def test_addresses_from_elements_prefers_tags_over_hints() -> None:
    elements = [
        {
            "type": "node",
            "lat": 1,
            "lon": 2,
            "tags": {
                "addr:housenumber": "5",
                "addr:city": "Laval",
                "addr:province": "QC",
                "addr:country_code": "CA",
                "addr:postcode": "H7A 1A1",
            },
        }
    ]
    [candidate] = addresses_from_elements(elements, "Oak", PlaceHints(city="Montreal", region="ON", country="US"))
    assert candidate.city == "Laval"
    assert candidate.region == "QC"
    assert candidate.country == "CA"
    assert candidate.postal_code == "H7A 1A1"


def test_filter_by_city_keeps_rows_without_city() -> None:
    rows = [
        AddressCandidate(civic_number="1", street="A", city="Montréal"),
        AddressCandidate(civic_number="2", street="A", city="Laval"),
        AddressCandidate(civic_number="3", street="A", city=None),
    ]
    kept = filter_by_city(rows, "MONTREAL")
    assert [row.civic_number for row in kept] == ["1", "3"]
    assert len(filter_by_city(rows, "  ")) == 3


def test_features_from_elements_builds_lon_lat_linestrings() -> None:
    elements = [
        {
            "type": "way",
            "id": 99,
            "tags": {"name": "Oak Street"},
            "geometry": [{"lat": 45.5, "lon": -73.6}, {"lat": 45.51, "lon": -73.61}],
        },
        {"type": "way", "id": 100, "geometry": [{"lat": 45.5, "lon": -73.6}]},
        {"type": "way", "id": 101, "geometry": [{"lat": 45.5, "lon": -73.6}, {"lat": 45.6}]},
        {"type": "node", "id": 102, "lat": 1, "lon": 2},
    ]
    features = features_from_elements(elements, "oak street")

    assert len(features) == 1
    assert features[0]["properties"] == {"name": "Oak Street", "osm_id": 99}
    assert features[0]["geometry"] == {"type": "LineString", "coordinates": [[-73.6, 45.5], [-73.61, 45.51]]}


def test_lookup_street_dedups_on_postal_code_and_filters_city() -> None:
    elements = [
        {"type": "node", "lat": 1, "lon": 1, "tags": {"addr:housenumber": "1", "addr:postcode": "A1"}},
        {"type": "node", "lat": 1, "lon": 1, "tags": {"addr:housenumber": "1", "addr:postcode": "a1"}},
        {"type": "node", "lat": 1, "lon": 1, "tags": {"addr:housenumber": "1", "addr:postcode": "B2"}},
        {"type": "node", "lat": 1, "lon": 1, "tags": {"addr:housenumber": "3", "addr:city": "Elsewhere"}},
    ]
    resolver, _ = _resolver([FakeResponse(200, {"elements": elements})])

    rows = resolver.lookup_street("Oak", BBOX, PlaceHints(city="Springfield"))

    assert [(r.civic_number, r.postal_code) for r in rows] == [("1", "A1"), ("1", "B2")]
    assert all(r.city == "Springfield" for r in rows)


def test_lookup_street_caps_results() -> None:
    elements = [
        {"type": "node", "lat": 1, "lon": 1, "tags": {"addr:housenumber": str(n)}} for n in range(1, 620)
    ]
    resolver, _ = _resolver([FakeResponse(200, {"elements": elements})])
    assert len(resolver.lookup_street("Oak", BBOX)) == 500


def test_lookup_street_propagates_upstream_failure() -> None:
    resolver, _ = _resolver([FakeResponse(502, None, text="bad"), FakeResponse(502, None, text="bad")])
    with pytest.raises(UpstreamUnavailableError):
        resolver.lookup_street("Oak", BBOX)


def test_lookup_street_no_match_is_empty_not_error() -> None:
    resolver, _ = _resolver([FakeResponse(200, {"elements": []})])
    assert resolver.lookup_street("Oak", BBOX) == []


def test_fetch_street_geojson_is_best_effort() -> None:
    resolver, _ = _resolver([FakeResponse(500, None, text="down"), FakeResponse(500, None, text="down")])
    assert resolver.fetch_street_geojson("Oak", BBOX) is None

    resolver, _ = _resolver([FakeResponse(200, {"elements": []})])
    assert resolver.fetch_street_geojson("Oak", BBOX) is None


def test_fetch_street_geojson_returns_feature_collection() -> None:
    way = {"type": "way", "id": 7, "geometry": [{"lat": 1, "lon": 2}, {"lat": 3, "lon": 4}]}
    resolver, session = _resolver([FakeResponse(200, {"elements": [way]})])

    geojson = resolver.fetch_street_geojson("Oak Street", BBOX)

    assert geojson["type"] == "FeatureCollection"
    assert geojson["features"][0]["properties"] == {"name": "Oak Street", "osm_id": 7}
    assert "out geom;" in session.calls[0]["data"].decode("utf-8")


def test_addresses_from_elements_skips_malformed_coordinates() -> None:
    elements = [
        {"type": "node", "lat": "n/a", "lon": -73.55, "tags": {"addr:housenumber": "8"}},
        {"type": "node", "lat": "nan", "lon": -73.55, "tags": {"addr:housenumber": "9"}},
        {"type": "way", "center": {"lat": [45.5], "lon": -73.56}, "tags": {"addr:housenumber": "11"}},
        {"type": "node", "lat": "45.51", "lon": "-73.57", "tags": {"addr:housenumber": "13"}},
    ]
    candidates = addresses_from_elements(elements, "Rue Peel")

    assert [(c.civic_number, c.lat, c.lng) for c in candidates] == [("13", 45.51, -73.57)]


def test_features_from_elements_skips_malformed_points() -> None:
    elements = [
        {"type": "way", "id": 1, "geometry": [{"lat": "x", "lon": -73.5}, {"lat": 45.5, "lon": -73.5}]},
        {"type": "way", "id": 2, "geometry": [
            {"lat": 45.5, "lon": -73.5}, {"lat": "x", "lon": -73.51}, {"lat": 45.52, "lon": -73.52},
        ]},
    ]
    features = features_from_elements(elements, "Rue Peel")

    assert [f["properties"]["osm_id"] for f in features] == [2]
    assert features[0]["geometry"]["coordinates"] == [[-73.5, 45.5], [-73.52, 45.52]]


def test_filter_by_city_matches_transliterated_names() -> None:
    rows = [AddressCandidate(civic_number="1", street="Piotrkowska", city="Lodz")]
    assert filter_by_city(rows, "Łódź") == rows
