"""Forward geocoding against a Nominatim-compatible search endpoint."""

from __future__ import annotations

import time
from typing import Any, List, Optional

import requests

from packages.address_pipeline.http_client import APIErrorType, ExternalAPIClient
from packages.address_pipeline.types import AddressCandidate, Coordinates


DEFAULT_NOMINATIM_URL = "https://nominatim.openstreetmap.org/search"


def build_geocode_query(candidate: AddressCandidate) -> List[str]:
    street_line = " ".join(part for part in (candidate.civic_number, candidate.street) if part).strip()
    parts = [
        street_line or candidate.street,
        candidate.street2,
        candidate.city,
        candidate.region,
        candidate.postal_code,
        candidate.country,
    ]
    return [str(part) for part in parts if part]


class NominatimClient(ExternalAPIClient):
    api_name = "nominatim"
    timeout_sec = 8
    max_retries = 2

    def __init__(
        self,
        user_agent: str,
        endpoint: str = DEFAULT_NOMINATIM_URL,
        session: Optional[requests.Session] = None,
        timeout_sec: Optional[float] = None,
    ) -> None:
        super().__init__(user_agent, session=session, timeout_sec=timeout_sec)
        self.endpoint = endpoint

    def geocode(self, candidate: AddressCandidate) -> Optional[Coordinates]:
        """Resolve a candidate to the first search hit, or ``None``.

        A single query part is too ambiguous to search for, so nothing is
        sent in that case. Every upstream problem degrades to ``None``.
        """
        parts = build_geocode_query(candidate)
        if len(parts) < 2:
            return None

        params = {"format": "json", "limit": 1, "q": ", ".join(parts)}
        started_at = time.time()
        try:
            response = self.session.get(
                self.endpoint,
                params=params,
                headers=self._headers(**{"Accept-Language": "en"}),
                timeout=self.timeout_sec,
            )
        except requests.RequestException as exc:
            self._log_call(self.endpoint, None, self._classify_error(exc), started_at)
            return None

        if not response.ok:
            self._log_call(self.endpoint, response.status_code, APIErrorType.HTTP_STATUS, started_at)
            return None

        self._log_call(self.endpoint, response.status_code, None, started_at)
        return self._first_coordinates(self._json_or_none(response))

    def _first_coordinates(self, results: Any) -> Optional[Coordinates]:
        if not isinstance(results, list) or not results:
            return None
        first = results[0]
        if not isinstance(first, dict) or first.get("lat") is None or first.get("lon") is None:
            return None
        try:
            return Coordinates(lat=float(first["lat"]), lng=float(first["lon"]))
        except (TypeError, ValueError):
            self.logger.debug("Discarding non-numeric coordinates: %s", first)
            return None
