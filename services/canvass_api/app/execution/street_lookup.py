from __future__ import annotations

import logging
from typing import Any, List, Optional

from packages.address_pipeline.normalize import normalize_street_name
from packages.address_pipeline.streets import StreetResolver
from packages.address_pipeline.types import AddressCandidate, BoundingBox, PlaceHints
from services.canvass_api.app.repositories.canvass_repository import CanvassRepository


logger = logging.getLogger(__name__)

STREET_SOURCE_OVERPASS = "overpass"


def _has_features(geojson: Any) -> bool:
    return isinstance(geojson, dict) and bool(geojson.get("features"))


def store_street_geometry(
    repository: CanvassRepository,
    resolver: StreetResolver,
    territory_id: int,
    street: str,
    bbox: BoundingBox,
) -> Optional[dict[str, Any]]:
    """Cache the street's line geometry for the territory, at most once.

    An existing row with geometry short-circuits before any upstream call.
    Nothing is written when the fetch yields no usable feature.
    """
    street = street.strip()
    normalized = normalize_street_name(street)
    if not normalized:
        return None

    existing = repository.get_street(territory_id, normalized)
    if existing and _has_features(existing.get("geojson")):
        logger.debug("Street %r already cached for territory %s", normalized, territory_id)
        return existing

    geojson = resolver.fetch_street_geojson(street, bbox)
    if geojson is None:
        return None
    return repository.upsert_street(territory_id, street, normalized, geojson, source=STREET_SOURCE_OVERPASS)


def street_lookup(
    repository: CanvassRepository,
    resolver: StreetResolver,
    territory_id: int,
    street: str,
    bbox: BoundingBox,
    hints: PlaceHints,
    store_street: bool = False,
) -> List[AddressCandidate]:
    street = street.strip()
    if not street:
        return []

    if store_street:
        store_street_geometry(repository, resolver, territory_id, street, bbox)

    return resolver.lookup_street(street, bbox, hints)
