from __future__ import annotations

import logging
import math
from typing import Any, Dict, Iterable, List, Optional

from packages.address_pipeline.errors import UpstreamUnavailableError
from packages.address_pipeline.normalize import normalize_place_name
from packages.address_pipeline.overpass import OverpassClient, build_address_query, build_street_geometry_query
from packages.address_pipeline.reconcile import MAX_LOOKUP_RESULTS, lookup_key, unique_by
from packages.address_pipeline.types import AddressCandidate, BoundingBox, PlaceHints


logger = logging.getLogger(__name__)


def _first_tag(tags: Dict[str, Any], *names: str) -> Optional[str]:
    for name in names:
        value = tags.get(name)
        if value is not None:
            return value
    return None


def _as_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _element_point(element: Dict[str, Any]) -> tuple[Optional[float], Optional[float]]:
    center = element.get("center") or {}
    lat = _as_float(element.get("lat", center.get("lat")))
    lng = _as_float(element.get("lon", center.get("lon")))
    return lat, lng


def addresses_from_elements(
    elements: Iterable[Dict[str, Any]],
    street: str,
    hints: Optional[PlaceHints] = None,
) -> List[AddressCandidate]:
    hints = hints or PlaceHints()
    candidates: List[AddressCandidate] = []
    for element in elements:
        if not isinstance(element, dict):
            continue
        tags = element.get("tags") or {}
        house_number = tags.get("addr:housenumber")
        if not house_number:
            continue

        lat, lng = _element_point(element)
        if lat is None or lng is None:
            continue

        street_name = str(tags.get("addr:street") or street)
        candidates.append(
            AddressCandidate(
                civic_number=str(house_number),
                street=street_name,
                label=f"{house_number} {street_name}".strip(),
                city=_first_tag(tags, "addr:city") or hints.city,
                region=_first_tag(tags, "addr:state", "addr:province", "addr:region") or hints.region,
                postal_code=tags.get("addr:postcode"),
                country=_first_tag(tags, "addr:country", "addr:country_code") or hints.country,
                lat=lat,
                lng=lng,
            )
        )
    return candidates


def filter_by_city(candidates: Iterable[AddressCandidate], expected_city: Optional[str]) -> List[AddressCandidate]:
    expected = normalize_place_name(expected_city)
    if not expected:
        return list(candidates)
    # Rows without a city tag are kept; only a conflicting city excludes a row.
    return [item for item in candidates if not item.city or normalize_place_name(item.city) == expected]


def features_from_elements(elements: Iterable[Dict[str, Any]], street: str) -> List[Dict[str, Any]]:
    features: List[Dict[str, Any]] = []
    for element in elements:
        if not isinstance(element, dict) or element.get("type") != "way":
            continue
        geometry = element.get("geometry")
        if not isinstance(geometry, list) or len(geometry) < 2:
            continue

        coordinates = []
        for point in geometry:
            if not isinstance(point, dict):
                continue
            lng, lat = _as_float(point.get("lon")), _as_float(point.get("lat"))
            # Unparseable points are skipped; the way still needs two good ones.
            if lng is not None and lat is not None:
                coordinates.append([lng, lat])
        if len(coordinates) < 2:
            continue

        features.append(
            {
                "type": "Feature",
                "properties": {
                    "name": (element.get("tags") or {}).get("name") or street,
                    "osm_id": element.get("id"),
                },
                "geometry": {"type": "LineString", "coordinates": coordinates},
            }
        )
    return features


class StreetResolver:
    def __init__(self, client: OverpassClient) -> None:
        self.client = client

    def lookup_street(
        self,
        street: str,
        bbox: BoundingBox,
        hints: Optional[PlaceHints] = None,
    ) -> List[AddressCandidate]:
        """Address points tagged with ``street`` inside ``bbox``.

        Raises ``UpstreamUnavailableError`` when no mirror answered, which
        callers must keep distinct from an empty result.
        """
        hints = hints or PlaceHints()
        payload = self.client.query(build_address_query(street, bbox))
        elements = payload.get("elements") or []

        candidates = filter_by_city(addresses_from_elements(elements, street, hints), hints.city)
        rows = unique_by((item.to_row() for item in candidates), lookup_key)[:MAX_LOOKUP_RESULTS]
        logger.debug("Street lookup %r matched %s of %s elements", street, len(rows), len(elements))
        return [AddressCandidate(**row) for row in rows]

    def fetch_street_geojson(self, street: str, bbox: BoundingBox) -> Optional[Dict[str, Any]]:
        try:
            payload = self.client.query(build_street_geometry_query(street, bbox))
        except UpstreamUnavailableError as exc:
            logger.warning("Street geometry fetch for %r skipped: %s", street, exc)
            return None

        features = features_from_elements(payload.get("elements") or [], street)
        if not features:
            return None
        return {"type": "FeatureCollection", "features": features}
