from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Response

from services.canvass_api.app.dependencies import Actor, ensure_organization, get_actor, get_repository
from services.canvass_api.app.execution import visit_sync
from services.canvass_api.app.models.visit_models import VisitRequest
from services.canvass_api.app.repositories.canvass_repository import CanvassRepository

router = APIRouter()


def _address_and_visit(
    repository: CanvassRepository,
    actor: Actor,
    address_id: int,
    visit_id: int,
) -> tuple[dict[str, Any], dict[str, Any]]:
    address = ensure_organization(repository.get_address(address_id), actor, "address not found")
    visit = repository.get_visit(visit_id)
    if not visit or visit["address_id"] != address["id"]:
        raise HTTPException(status_code=404, detail="visit not found")
    return address, visit


@router.post("/addresses/{address_id}/visits", status_code=201)
def create_visit(
    address_id: int,
    payload: VisitRequest,
    actor: Actor = Depends(get_actor),
    repository: CanvassRepository = Depends(get_repository),
) -> dict[str, Any]:
    address = ensure_organization(repository.get_address(address_id), actor, "address not found")
    return visit_sync.create_visit(repository, address, actor, payload)


@router.patch("/addresses/{address_id}/visits/{visit_id}")
def update_visit(
    address_id: int,
    visit_id: int,
    payload: VisitRequest,
    actor: Actor = Depends(get_actor),
    repository: CanvassRepository = Depends(get_repository),
) -> dict[str, Any]:
    address, visit = _address_and_visit(repository, actor, address_id, visit_id)
    return visit_sync.update_visit(repository, address, visit, payload)


@router.delete("/addresses/{address_id}/visits/{visit_id}", status_code=204)
def delete_visit(
    address_id: int,
    visit_id: int,
    actor: Actor = Depends(get_actor),
    repository: CanvassRepository = Depends(get_repository),
) -> Response:
    address, visit = _address_and_visit(repository, actor, address_id, visit_id)
    visit_sync.delete_visit(repository, address, visit)
    return Response(status_code=204)
