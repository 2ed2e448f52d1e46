from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field


OptionListKey = Literal["address_status", "visit_result", "visit_action"]


class OptionCreateRequest(BaseModel):
    list_key: OptionListKey
    label: str = Field(min_length=1, max_length=100)
    value: Optional[str] = Field(default=None, max_length=100)
    sort: Optional[int] = Field(default=None, ge=0, le=1000)
