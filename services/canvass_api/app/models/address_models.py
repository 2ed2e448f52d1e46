from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from packages.address_pipeline.reconcile import MAX_BULK_ADDRESSES, MAX_SCAN_CHARS


class AddressFields(BaseModel):
    civic_number: Optional[str] = Field(default=None, max_length=50)
    unit: Optional[str] = Field(default=None, max_length=50)
    label: Optional[str] = Field(default=None, max_length=255)
    contact_name: Optional[str] = Field(default=None, max_length=255)
    street: Optional[str] = Field(default=None, max_length=255)
    street2: Optional[str] = Field(default=None, max_length=255)
    city: Optional[str] = Field(default=None, max_length=255)
    region: Optional[str] = Field(default=None, max_length=255)
    postal_code: Optional[str] = Field(default=None, max_length=50)
    country: Optional[str] = Field(default=None, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=50)
    notes: Optional[str] = None
    lat: Optional[float] = Field(default=None, ge=-90, le=90)
    lng: Optional[float] = Field(default=None, ge=-180, le=180)


class AddressCreateRequest(AddressFields):
    status: Optional[str] = Field(default=None, max_length=50)
    do_not_call: Optional[bool] = None
    next_visit_at: Optional[datetime] = None


class AddressUpdateRequest(AddressCreateRequest):
    pass


class ImportScanRequest(BaseModel):
    lines: str = Field(min_length=1, max_length=MAX_SCAN_CHARS)
    default_city: Optional[str] = Field(default=None, max_length=255)
    default_region: Optional[str] = Field(default=None, max_length=255)
    default_postal_code: Optional[str] = Field(default=None, max_length=50)
    default_country: Optional[str] = Field(default=None, max_length=255)
    status: Optional[str] = Field(default=None, max_length=50)


class BulkStoreRequest(BaseModel):
    addresses: List[AddressFields] = Field(min_length=1, max_length=MAX_BULK_ADDRESSES)
    status: Optional[str] = Field(default=None, max_length=50)
    do_not_call: Optional[bool] = None


class BatchCreatedResponse(BaseModel):
    created: int


class StreetLookupCandidate(BaseModel):
    civic_number: Optional[str] = None
    street: Optional[str] = None
    label: Optional[str] = None
    city: Optional[str] = None
    region: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None


class StreetLookupResponse(BaseModel):
    addresses: List[StreetLookupCandidate] = Field(default_factory=list)
