from __future__ import annotations

from typing import Any, Dict, Iterator, List, Optional

import pytest
from fastapi.testclient import TestClient

from packages.address_pipeline.streets import StreetResolver
from packages.address_pipeline.types import AddressCandidate, Coordinates
from services.canvass_api.app.config import Settings
from services.canvass_api.app.dependencies import get_geocoder, get_repository, get_settings, get_street_resolver
from services.canvass_api.app.main import create_app
from services.canvass_api.app.repositories.canvass_repository import CanvassRepository


class FakeGeocoder:
    def __init__(self) -> None:
        self.coordinates: Optional[Coordinates] = None
        self.calls: List[AddressCandidate] = []

    def geocode(self, candidate: AddressCandidate) -> Optional[Coordinates]:
        self.calls.append(candidate)
        return self.coordinates


class FakeOverpassClient:
    """Answers address queries and street geometry queries from canned elements."""

    def __init__(self) -> None:
        self.address_elements: List[Dict[str, Any]] = []
        self.street_elements: List[Dict[str, Any]] = []
        self.error: Optional[Exception] = None
        self.queries: List[str] = []

    def query(self, ql: str) -> Dict[str, Any]:
        self.queries.append(ql)
        if self.error is not None:
            raise self.error
        if ql.rstrip().endswith("out geom;"):
            return {"elements": self.street_elements}
        return {"elements": self.address_elements}

    def geometry_queries(self) -> List[str]:
        return [ql for ql in self.queries if ql.rstrip().endswith("out geom;")]


@pytest.fixture()
def repository(tmp_path) -> Iterator[CanvassRepository]:
    repo = CanvassRepository(f"sqlite:///{tmp_path / 'canvass.db'}")
    repo.create_schema()
    yield repo
    repo.dispose()


@pytest.fixture()
def geocoder() -> FakeGeocoder:
    return FakeGeocoder()


@pytest.fixture()
def overpass() -> FakeOverpassClient:
    return FakeOverpassClient()


@pytest.fixture()
def settings() -> Settings:
    return Settings(app_env="local", database_url="sqlite://", geocoding_enabled=True)


@pytest.fixture()
def client(repository, geocoder, overpass, settings) -> Iterator[TestClient]:
    app = create_app()
    app.dependency_overrides[get_repository] = lambda: repository
    app.dependency_overrides[get_geocoder] = lambda: geocoder
    app.dependency_overrides[get_street_resolver] = lambda: StreetResolver(overpass)
    app.dependency_overrides[get_settings] = lambda: settings
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def headers() -> Dict[str, str]:
    return {"X-Organization-Id": "1", "X-User-Id": "10"}


@pytest.fixture()
def other_headers() -> Dict[str, str]:
    return {"X-Organization-Id": "2", "X-User-Id": "20"}


@pytest.fixture()
def territory(client, headers) -> Dict[str, Any]:
    resp = client.post("/territories", json={"code": "T-01", "name": "Oak district"}, headers=headers)
    assert resp.status_code == 201
    return resp.json()
