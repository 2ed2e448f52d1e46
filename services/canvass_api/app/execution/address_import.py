from __future__ import annotations

import logging
from typing import Any, Optional

from packages.address_pipeline.geocode import NominatimClient
from packages.address_pipeline.parse import ImportDefaults, parse_scan_text
from packages.address_pipeline.reconcile import (
    DEFAULT_STATUS,
    DO_NOT_CALL_STATUS,
    batch_key,
    resolve_status,
    retain_candidates,
    unique_by,
)
from packages.address_pipeline.types import AddressCandidate
from services.canvass_api.app.dependencies import Actor
from services.canvass_api.app.errors import CanvassError
from services.canvass_api.app.models.address_models import (
    AddressCreateRequest,
    AddressUpdateRequest,
    BulkStoreRequest,
    ImportScanRequest,
)
from services.canvass_api.app.repositories.canvass_repository import CanvassRepository


logger = logging.getLogger(__name__)

_CANDIDATE_FIELDS = ("civic_number", "unit", "street", "street2", "label", "city", "region", "postal_code", "country")


def _candidate_from(values: dict[str, Any]) -> AddressCandidate:
    return AddressCandidate(**{name: values.get(name) for name in _CANDIDATE_FIELDS})


def _apply_geocode(row: dict[str, Any], geocoder: Optional[NominatimClient]) -> dict[str, Any]:
    if geocoder is None or row.get("lat") is not None or row.get("lng") is not None:
        return row
    coordinates = geocoder.geocode(_candidate_from(row))
    if coordinates:
        row["lat"] = coordinates.lat
        row["lng"] = coordinates.lng
    return row


def store_address(
    repository: CanvassRepository,
    geocoder: Optional[NominatimClient],
    territory: dict[str, Any],
    actor: Actor,
    payload: AddressCreateRequest,
) -> dict[str, Any]:
    values = payload.model_dump(exclude={"status", "do_not_call", "next_visit_at"})
    if not retain_candidates([values]):
        raise CanvassError(
            code="STREET_OR_LABEL_REQUIRED",
            message="An address needs a street or a label.",
            status_code=422,
        )

    status, do_not_call = resolve_status(payload.status, payload.do_not_call)
    row = {
        **values,
        "organization_id": actor.organization_id,
        "territory_id": territory["id"],
        "status": status,
        "do_not_call": do_not_call,
        "next_visit_at": payload.next_visit_at,
    }
    return repository.insert_address(_apply_geocode(row, geocoder))


def import_scan(
    repository: CanvassRepository,
    geocoder: Optional[NominatimClient],
    territory: dict[str, Any],
    actor: Actor,
    payload: ImportScanRequest,
) -> int:
    """Parse an OCR text block and insert one row per surviving line.

    Geocoding runs sequentially per candidate before the single batch insert.
    """
    defaults = ImportDefaults(
        city=payload.default_city,
        region=payload.default_region,
        postal_code=payload.default_postal_code,
        country=payload.default_country,
    )
    status, do_not_call = resolve_status(payload.status)

    rows = []
    for candidate in parse_scan_text(payload.lines, defaults):
        row = {
            **candidate.to_row(),
            "organization_id": actor.organization_id,
            "territory_id": territory["id"],
            "status": status,
            "do_not_call": do_not_call,
        }
        rows.append(_apply_geocode(row, geocoder))

    rows = retain_candidates(rows)
    logger.info("Scan import for territory %s produced %s rows", territory["id"], len(rows))
    return repository.insert_addresses(rows)


def bulk_store(
    repository: CanvassRepository,
    territory: dict[str, Any],
    actor: Actor,
    payload: BulkStoreRequest,
) -> int:
    status, do_not_call = resolve_status(payload.status, payload.do_not_call)
    rows = [
        {
            **item.model_dump(),
            "organization_id": actor.organization_id,
            "territory_id": territory["id"],
            "status": status,
            "do_not_call": do_not_call,
        }
        for item in payload.addresses
    ]
    rows = unique_by(retain_candidates(rows), batch_key)
    return repository.insert_addresses(rows)


def update_address(
    repository: CanvassRepository,
    geocoder: Optional[NominatimClient],
    address: dict[str, Any],
    payload: AddressUpdateRequest,
) -> dict[str, Any]:
    values = payload.model_dump(exclude_unset=True)
    status = values.pop("status", None) or address.get("status") or DEFAULT_STATUS
    requested_flag = values.pop("do_not_call", None)
    do_not_call = bool(address.get("do_not_call") if requested_flag is None else requested_flag)

    # The flag and the status never disagree in the do-not-call direction.
    if status == DO_NOT_CALL_STATUS:
        do_not_call = True
    if do_not_call:
        status = DO_NOT_CALL_STATUS

    values["status"] = status
    values["do_not_call"] = do_not_call

    merged = {**address, **values}
    if merged.get("lat") is None and merged.get("lng") is None:
        geocoded = _apply_geocode(dict(merged), geocoder)
        if geocoded.get("lat") is not None:
            values["lat"] = geocoded["lat"]
            values["lng"] = geocoded["lng"]

    return repository.update_address(address["id"], values)
