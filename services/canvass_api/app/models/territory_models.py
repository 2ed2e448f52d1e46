from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class TerritoryCreateRequest(BaseModel):
    code: str = Field(min_length=1, max_length=50)
    name: str = Field(min_length=1, max_length=255)
    parent_id: Optional[int] = None
    territory_type: Optional[str] = Field(default=None, max_length=100)
    dominant_language: Optional[str] = Field(default=None, max_length=100)
    notes: Optional[str] = None
    boundary_geojson: Optional[Dict[str, Any]] = None


class TerritoryUpdateRequest(BaseModel):
    code: Optional[str] = Field(default=None, min_length=1, max_length=50)
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    parent_id: Optional[int] = None
    territory_type: Optional[str] = Field(default=None, max_length=100)
    dominant_language: Optional[str] = Field(default=None, max_length=100)
    notes: Optional[str] = None
    boundary_geojson: Optional[Dict[str, Any]] = None
