from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Response

from services.canvass_api.app.dependencies import Actor, ensure_organization, get_actor, get_repository
from services.canvass_api.app.execution import assignments as assignment_use_cases
from services.canvass_api.app.models.assignment_models import AssignmentCreateRequest, AssignmentUpdateRequest
from services.canvass_api.app.repositories.canvass_repository import CanvassRepository

router = APIRouter()


def _assignment(repository: CanvassRepository, actor: Actor, assignment_id: int) -> dict[str, Any]:
    return ensure_organization(repository.get_assignment(assignment_id), actor, "assignment not found")


def _ensure_territory(repository: CanvassRepository, actor: Actor, territory_id: int) -> None:
    ensure_organization(repository.get_territory(territory_id), actor, "territory not found")


@router.get("/assignments")
def list_assignments(
    actor: Actor = Depends(get_actor),
    repository: CanvassRepository = Depends(get_repository),
) -> dict[str, Any]:
    return {"assignments": repository.list_assignments(actor.organization_id)}


@router.post("/assignments", status_code=201)
def create_assignment(
    payload: AssignmentCreateRequest,
    actor: Actor = Depends(get_actor),
    repository: CanvassRepository = Depends(get_repository),
) -> dict[str, Any]:
    _ensure_territory(repository, actor, payload.territory_id)
    return assignment_use_cases.create_assignment(repository, actor, payload)


@router.get("/assignments/{assignment_id}")
def get_assignment(
    assignment_id: int,
    actor: Actor = Depends(get_actor),
    repository: CanvassRepository = Depends(get_repository),
) -> dict[str, Any]:
    return _assignment(repository, actor, assignment_id)


@router.put("/assignments/{assignment_id}")
def update_assignment(
    assignment_id: int,
    payload: AssignmentUpdateRequest,
    actor: Actor = Depends(get_actor),
    repository: CanvassRepository = Depends(get_repository),
) -> dict[str, Any]:
    assignment = _assignment(repository, actor, assignment_id)
    _ensure_territory(repository, actor, payload.territory_id)
    return assignment_use_cases.update_assignment(repository, assignment, payload)


@router.delete("/assignments/{assignment_id}", status_code=204)
def delete_assignment(
    assignment_id: int,
    actor: Actor = Depends(get_actor),
    repository: CanvassRepository = Depends(get_repository),
) -> Response:
    _assignment(repository, actor, assignment_id)
    repository.delete_assignment(assignment_id)
    return Response(status_code=204)
