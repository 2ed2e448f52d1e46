from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Response

from services.canvass_api.app.dependencies import Actor, ensure_organization, get_actor, get_repository
from services.canvass_api.app.errors import CanvassError
from services.canvass_api.app.models.territory_models import TerritoryCreateRequest, TerritoryUpdateRequest
from services.canvass_api.app.repositories.canvass_repository import CanvassRepository

router = APIRouter()


@router.get("/territories")
def list_territories(
    actor: Actor = Depends(get_actor),
    repository: CanvassRepository = Depends(get_repository),
) -> dict[str, Any]:
    return {"territories": repository.list_territories(actor.organization_id)}


@router.post("/territories", status_code=201)
def create_territory(
    payload: TerritoryCreateRequest,
    actor: Actor = Depends(get_actor),
    repository: CanvassRepository = Depends(get_repository),
) -> dict[str, Any]:
    if repository.find_territory_by_code(actor.organization_id, payload.code):
        raise CanvassError(
            code="TERRITORY_CODE_TAKEN",
            message=f"territory code {payload.code!r} already exists",
            status_code=409,
        )
    if payload.parent_id is not None:
        ensure_organization(repository.get_territory(payload.parent_id), actor, "parent territory not found")
    return repository.create_territory(actor.organization_id, payload.model_dump())


@router.get("/territories/{territory_id}")
def get_territory(
    territory_id: int,
    actor: Actor = Depends(get_actor),
    repository: CanvassRepository = Depends(get_repository),
) -> dict[str, Any]:
    territory = ensure_organization(repository.get_territory(territory_id), actor, "territory not found")
    return {**territory, "addresses": repository.list_territory_addresses(territory_id)}


@router.get("/territories/{territory_id}/streets")
def list_streets(
    territory_id: int,
    actor: Actor = Depends(get_actor),
    repository: CanvassRepository = Depends(get_repository),
) -> dict[str, Any]:
    ensure_organization(repository.get_territory(territory_id), actor, "territory not found")
    return {"streets": repository.list_streets(territory_id)}


@router.patch("/territories/{territory_id}")
def update_territory(
    territory_id: int,
    payload: TerritoryUpdateRequest,
    actor: Actor = Depends(get_actor),
    repository: CanvassRepository = Depends(get_repository),
) -> dict[str, Any]:
    ensure_organization(repository.get_territory(territory_id), actor, "territory not found")
    values = payload.model_dump(exclude_unset=True)
    # code and name are required columns; an explicit null leaves them as they are.
    for key in ("code", "name"):
        if values.get(key) is None:
            values.pop(key, None)

    code = values.get("code")
    if code:
        existing = repository.find_territory_by_code(actor.organization_id, code)
        if existing and existing["id"] != territory_id:
            raise CanvassError(
                code="TERRITORY_CODE_TAKEN",
                message=f"territory code {code!r} already exists",
                status_code=409,
            )

    parent_id = values.get("parent_id")
    if parent_id is not None:
        if parent_id == territory_id:
            raise CanvassError(
                code="TERRITORY_PARENT_INVALID",
                message="a territory cannot be its own parent",
                status_code=422,
            )
        ensure_organization(repository.get_territory(parent_id), actor, "parent territory not found")

    if not values:
        return repository.get_territory(territory_id)
    return repository.update_territory(territory_id, values)


@router.delete("/territories/{territory_id}", status_code=204)
def delete_territory(
    territory_id: int,
    actor: Actor = Depends(get_actor),
    repository: CanvassRepository = Depends(get_repository),
) -> Response:
    ensure_organization(repository.get_territory(territory_id), actor, "territory not found")
    repository.delete_territory(territory_id)
    return Response(status_code=204)
