from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Response

from services.canvass_api.app.dependencies import Actor, ensure_organization, get_actor, get_repository
from services.canvass_api.app.execution.organization_options import grouped_options, save_option
from services.canvass_api.app.models.option_models import OptionCreateRequest
from services.canvass_api.app.repositories.canvass_repository import CanvassRepository

router = APIRouter()


@router.get("/options")
def list_options(
    actor: Actor = Depends(get_actor),
    repository: CanvassRepository = Depends(get_repository),
) -> dict[str, Any]:
    return {"options": grouped_options(repository, actor)}


@router.post("/options", status_code=201)
def create_option(
    payload: OptionCreateRequest,
    actor: Actor = Depends(get_actor),
    repository: CanvassRepository = Depends(get_repository),
) -> dict[str, Any]:
    return save_option(repository, actor, payload)


@router.delete("/options/{option_id}", status_code=204)
def delete_option(
    option_id: int,
    actor: Actor = Depends(get_actor),
    repository: CanvassRepository = Depends(get_repository),
) -> Response:
    ensure_organization(repository.get_option(option_id), actor, "option not found")
    repository.delete_option(option_id)
    return Response(status_code=204)
