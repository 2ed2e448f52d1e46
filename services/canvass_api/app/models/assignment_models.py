from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class AssignmentCreateRequest(BaseModel):
    territory_id: int
    assignee_user_id: Optional[int] = None
    start_at: datetime
    due_at: datetime
    notes: Optional[str] = None


class AssignmentUpdateRequest(AssignmentCreateRequest):
    returned_at: Optional[datetime] = None
    status: Optional[str] = Field(default=None, max_length=50)
