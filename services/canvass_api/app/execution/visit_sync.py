from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from packages.address_pipeline.reconcile import DEFAULT_STATUS, DO_NOT_CALL_STATUS
from services.canvass_api.app.dependencies import Actor
from services.canvass_api.app.models.visit_models import VisitRequest
from services.canvass_api.app.repositories.canvass_repository import CanvassRepository


def _visit_values(payload: VisitRequest) -> dict[str, Any]:
    do_not_call = bool(payload.do_not_call) or payload.result == DO_NOT_CALL_STATUS
    values = payload.model_dump(exclude={"next_visit_at"})
    values["do_not_call"] = do_not_call
    return values


def sync_address_from_latest_visit(
    repository: CanvassRepository,
    address_id: int,
    next_visit_at: Optional[datetime],
    update_next_visit: bool,
) -> dict[str, Any]:
    """Project the most recent visit onto the address.

    With no visit left the address falls back to its pristine state.
    """
    latest = repository.latest_visit(address_id)
    if latest:
        values: dict[str, Any] = {
            "status": DO_NOT_CALL_STATUS if latest["do_not_call"] else latest["result"],
            "do_not_call": bool(latest["do_not_call"]),
            "last_visit_at": latest["visited_at"],
        }
        if update_next_visit:
            values["next_visit_at"] = next_visit_at
    else:
        values = {
            "status": DEFAULT_STATUS,
            "do_not_call": False,
            "last_visit_at": None,
            "next_visit_at": None,
        }
    return repository.update_address(address_id, values)


def _latest_id(repository: CanvassRepository, address_id: int) -> Optional[int]:
    latest = repository.latest_visit(address_id)
    return latest["id"] if latest else None


def create_visit(
    repository: CanvassRepository,
    address: dict[str, Any],
    actor: Actor,
    payload: VisitRequest,
) -> dict[str, Any]:
    visit = repository.insert_visit(
        {
            **_visit_values(payload),
            "organization_id": actor.organization_id,
            "address_id": address["id"],
            "user_id": actor.user_id,
        }
    )
    is_latest = _latest_id(repository, address["id"]) == visit["id"]
    sync_address_from_latest_visit(repository, address["id"], payload.next_visit_at, is_latest)
    return visit


def update_visit(
    repository: CanvassRepository,
    address: dict[str, Any],
    visit: dict[str, Any],
    payload: VisitRequest,
) -> dict[str, Any]:
    was_latest = _latest_id(repository, address["id"]) == visit["id"]
    updated = repository.update_visit(visit["id"], _visit_values(payload))

    is_latest = _latest_id(repository, address["id"]) == visit["id"]
    reset_next_visit = was_latest and not is_latest
    sync_address_from_latest_visit(
        repository,
        address["id"],
        payload.next_visit_at if is_latest else None,
        is_latest or reset_next_visit,
    )
    return updated


def delete_visit(repository: CanvassRepository, address: dict[str, Any], visit: dict[str, Any]) -> None:
    was_latest = _latest_id(repository, address["id"]) == visit["id"]
    repository.delete_visit(visit["id"])
    sync_address_from_latest_visit(repository, address["id"], None, was_latest)
