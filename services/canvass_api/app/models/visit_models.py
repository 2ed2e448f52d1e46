from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class VisitRequest(BaseModel):
    visited_at: datetime
    result: str = Field(min_length=1, max_length=100)
    action: Optional[str] = Field(default=None, max_length=100)
    openness: Optional[str] = Field(default=None, max_length=100)
    observed_language: Optional[str] = Field(default=None, max_length=100)
    notes: Optional[str] = None
    person_name: Optional[str] = Field(default=None, max_length=255)
    do_not_call: Optional[bool] = None
    next_visit_at: Optional[datetime] = None
