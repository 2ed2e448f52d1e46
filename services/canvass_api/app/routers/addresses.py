from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, Response
from fastapi.responses import JSONResponse

from packages.address_pipeline.errors import UpstreamUnavailableError
from packages.address_pipeline.geocode import NominatimClient
from packages.address_pipeline.streets import StreetResolver
from packages.address_pipeline.types import BoundingBox, PlaceHints
from services.canvass_api.app.config import Settings
from services.canvass_api.app.dependencies import (
    Actor,
    ensure_organization,
    get_actor,
    get_geocoder,
    get_repository,
    get_settings,
    get_street_resolver,
)
from services.canvass_api.app.execution import address_import
from services.canvass_api.app.execution.street_lookup import street_lookup
from services.canvass_api.app.models.address_models import (
    AddressCreateRequest,
    AddressUpdateRequest,
    BatchCreatedResponse,
    BulkStoreRequest,
    ImportScanRequest,
    StreetLookupCandidate,
    StreetLookupResponse,
)
from services.canvass_api.app.repositories.canvass_repository import CanvassRepository

router = APIRouter()
logger = logging.getLogger(__name__)


def _territory(repository: CanvassRepository, actor: Actor, territory_id: int) -> dict[str, Any]:
    return ensure_organization(repository.get_territory(territory_id), actor, "territory not found")


def _address(repository: CanvassRepository, actor: Actor, address_id: int) -> dict[str, Any]:
    return ensure_organization(repository.get_address(address_id), actor, "address not found")


@router.post("/territories/{territory_id}/addresses", status_code=201)
def create_address(
    territory_id: int,
    payload: AddressCreateRequest,
    actor: Actor = Depends(get_actor),
    repository: CanvassRepository = Depends(get_repository),
    geocoder: Optional[NominatimClient] = Depends(get_geocoder),
) -> dict[str, Any]:
    territory = _territory(repository, actor, territory_id)
    return address_import.store_address(repository, geocoder, territory, actor, payload)


@router.post("/territories/{territory_id}/addresses/import-scan", response_model=BatchCreatedResponse)
def import_scan(
    territory_id: int,
    payload: ImportScanRequest,
    actor: Actor = Depends(get_actor),
    repository: CanvassRepository = Depends(get_repository),
    geocoder: Optional[NominatimClient] = Depends(get_geocoder),
) -> BatchCreatedResponse:
    territory = _territory(repository, actor, territory_id)
    created = address_import.import_scan(repository, geocoder, territory, actor, payload)
    return BatchCreatedResponse(created=created)


@router.post("/territories/{territory_id}/addresses/bulk", response_model=BatchCreatedResponse)
def bulk_store(
    territory_id: int,
    payload: BulkStoreRequest,
    actor: Actor = Depends(get_actor),
    repository: CanvassRepository = Depends(get_repository),
) -> BatchCreatedResponse:
    territory = _territory(repository, actor, territory_id)
    return BatchCreatedResponse(created=address_import.bulk_store(repository, territory, actor, payload))


@router.get("/territories/{territory_id}/addresses/street-lookup", response_model=StreetLookupResponse)
def lookup_street(
    territory_id: int,
    street: str = Query(max_length=255),
    min_lat: float = Query(ge=-90, le=90),
    min_lng: float = Query(ge=-180, le=180),
    max_lat: float = Query(ge=-90, le=90),
    max_lng: float = Query(ge=-180, le=180),
    city: Optional[str] = Query(default=None, max_length=255),
    region: Optional[str] = Query(default=None, max_length=255),
    country: Optional[str] = Query(default=None, max_length=255),
    store_street: bool = False,
    actor: Actor = Depends(get_actor),
    repository: CanvassRepository = Depends(get_repository),
    resolver: StreetResolver = Depends(get_street_resolver),
    settings: Settings = Depends(get_settings),
) -> Any:
    territory = _territory(repository, actor, territory_id)
    bbox = BoundingBox.from_corners(min_lat, min_lng, max_lat, max_lng)
    hints = PlaceHints(city=city, region=region, country=country)

    try:
        candidates = street_lookup(repository, resolver, territory["id"], street, bbox, hints, store_street)
    except UpstreamUnavailableError as exc:
        logger.warning("Street lookup for territory %s failed: %s", territory["id"], exc)
        content: dict[str, Any] = {"error": "Street lookup failed."}
        if settings.is_local():
            content["status"] = exc.status
            content["body"] = exc.body
        return JSONResponse(status_code=502, content=content)

    return StreetLookupResponse(
        addresses=[StreetLookupCandidate(**item.to_row()) for item in candidates],
    )


@router.get("/addresses/{address_id}")
def get_address(
    address_id: int,
    actor: Actor = Depends(get_actor),
    repository: CanvassRepository = Depends(get_repository),
) -> dict[str, Any]:
    address = _address(repository, actor, address_id)
    return {**address, "visits": repository.list_visits(address_id)}


@router.patch("/addresses/{address_id}")
def patch_address(
    address_id: int,
    payload: AddressUpdateRequest,
    actor: Actor = Depends(get_actor),
    repository: CanvassRepository = Depends(get_repository),
    geocoder: Optional[NominatimClient] = Depends(get_geocoder),
) -> dict[str, Any]:
    address = _address(repository, actor, address_id)
    return address_import.update_address(repository, geocoder, address, payload)


@router.delete("/addresses/{address_id}", status_code=204)
def delete_address(
    address_id: int,
    actor: Actor = Depends(get_actor),
    repository: CanvassRepository = Depends(get_repository),
) -> Response:
    _address(repository, actor, address_id)
    repository.delete_address(address_id)
    return Response(status_code=204)
