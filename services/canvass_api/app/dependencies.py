from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Optional

from fastapi import Depends, Header, HTTPException

from packages.address_pipeline.geocode import NominatimClient
from packages.address_pipeline.overpass import OverpassClient
from packages.address_pipeline.streets import StreetResolver
from services.canvass_api.app.config import Settings, load_settings
from services.canvass_api.app.repositories.canvass_repository import CanvassRepository


@dataclass(frozen=True)
class Actor:
    organization_id: int
    user_id: int


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()


@lru_cache(maxsize=1)
def _repository_for(database_url: str) -> CanvassRepository:
    repository = CanvassRepository(database_url)
    if database_url.startswith("sqlite"):
        repository.create_schema()
    return repository


def get_repository(settings: Settings = Depends(get_settings)) -> CanvassRepository:
    return _repository_for(settings.database_url)


# Clients hold a pooled requests.Session, so one instance serves every request.
@lru_cache(maxsize=4)
def _geocoder_for(settings: Settings) -> NominatimClient:
    return NominatimClient(
        user_agent=settings.user_agent(),
        endpoint=settings.nominatim_url,
        timeout_sec=settings.geocode_timeout_sec,
    )


@lru_cache(maxsize=4)
def _resolver_for(settings: Settings) -> StreetResolver:
    client = OverpassClient(
        user_agent=settings.user_agent(),
        endpoints=settings.overpass_endpoints,
        timeout_sec=settings.overpass_timeout_sec,
    )
    return StreetResolver(client)


def get_geocoder(settings: Settings = Depends(get_settings)) -> Optional[NominatimClient]:
    if not settings.geocoding_enabled:
        return None
    return _geocoder_for(settings)


def get_street_resolver(settings: Settings = Depends(get_settings)) -> StreetResolver:
    return _resolver_for(settings)


def get_actor(
    x_organization_id: Optional[int] = Header(default=None),
    x_user_id: Optional[int] = Header(default=None),
) -> Actor:
    # Identity is resolved upstream; this service only scopes by organization.
    if x_organization_id is None or x_user_id is None:
        raise HTTPException(status_code=401, detail="organization_context_required")
    return Actor(organization_id=x_organization_id, user_id=x_user_id)


def ensure_organization(record: Optional[dict[str, Any]], actor: Actor, detail: str) -> dict[str, Any]:
    if not record or record.get("organization_id") != actor.organization_id:
        raise HTTPException(status_code=404, detail=detail)
    return record
