from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

from services.canvass_api.app.dependencies import Actor
from services.canvass_api.app.errors import CanvassError
from services.canvass_api.app.models.assignment_models import AssignmentCreateRequest, AssignmentUpdateRequest
from services.canvass_api.app.repositories.canvass_repository import CanvassRepository


ACTIVE_STATUS = "active"
RETURNED_STATUS = "returned"
MAX_ASSIGNMENT_DAYS = 30


def _utc(value: datetime) -> datetime:
    # Naive timestamps from clients are read as UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def check_window(start_at: datetime, due_at: datetime) -> None:
    start, due = _utc(start_at), _utc(due_at)
    if due < start:
        raise CanvassError(
            code="ASSIGNMENT_WINDOW_INVALID",
            message="due_at must not be before start_at",
            status_code=422,
        )
    if due > start + timedelta(days=MAX_ASSIGNMENT_DAYS):
        raise CanvassError(
            code="ASSIGNMENT_WINDOW_INVALID",
            message=f"due_at must fall within {MAX_ASSIGNMENT_DAYS} days of start_at",
            status_code=422,
        )


def create_assignment(
    repository: CanvassRepository,
    actor: Actor,
    payload: AssignmentCreateRequest,
) -> dict[str, Any]:
    check_window(payload.start_at, payload.due_at)
    return repository.insert_assignment(
        {
            **payload.model_dump(),
            "organization_id": actor.organization_id,
            "status": ACTIVE_STATUS,
        }
    )


def update_assignment(
    repository: CanvassRepository,
    assignment: dict[str, Any],
    payload: AssignmentUpdateRequest,
) -> dict[str, Any]:
    """Replace the assignment window and keep ``returned_at`` in step with the status.

    A returned assignment always carries a return time; any other status
    clears it unless the caller supplies one explicitly.
    """
    check_window(payload.start_at, payload.due_at)

    status = payload.status or assignment["status"]
    returned_at = payload.returned_at or assignment.get("returned_at")
    if status == RETURNED_STATUS and not returned_at:
        returned_at = datetime.now(timezone.utc)
    if status != RETURNED_STATUS and payload.returned_at is None:
        returned_at = None

    values = payload.model_dump(exclude={"status", "returned_at"})
    values.update(status=status, returned_at=returned_at)
    return repository.update_assignment(assignment["id"], values)
