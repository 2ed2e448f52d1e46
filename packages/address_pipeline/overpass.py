"""Overpass QL builders and a client that walks a list of public mirrors."""

from __future__ import annotations

import time
from typing import Any, Dict, Optional, Sequence

import requests

from packages.address_pipeline.errors import UpstreamUnavailableError
from packages.address_pipeline.http_client import APIErrorType, ExternalAPIClient
from packages.address_pipeline.types import BoundingBox


DEFAULT_OVERPASS_ENDPOINTS = (
    "https://overpass-api.de/api/interpreter",
    "https://overpass.kumi.systems/api/interpreter",
    "https://overpass.nchc.org.tw/api/interpreter",
)

_REGEX_SPECIAL = frozenset(".\\+*?[^]$(){}=!<>|:-#/")


def escape_overpass_regex(value: str) -> str:
    escaped = "".join(f"\\{ch}" if ch in _REGEX_SPECIAL else ch for ch in value)
    return escaped.replace('"', '\\"')


def build_address_query(street: str, bbox: BoundingBox) -> str:
    pattern = escape_overpass_regex(street)
    area = bbox.as_overpass()
    lines = ["[out:json][timeout:25];", "("]
    for element in ("node", "way", "relation"):
        lines.append(f'  {element}["addr:street"~"^{pattern}",i]["addr:housenumber"]({area});')
    lines += [");", "out center;"]
    return "\n".join(lines)


def build_street_geometry_query(street: str, bbox: BoundingBox) -> str:
    pattern = escape_overpass_regex(street)
    return "\n".join(
        [
            "[out:json][timeout:25];",
            "(",
            f'  way["highway"]["name"~"^{pattern}$",i]({bbox.as_overpass()});',
            ");",
            "out geom;",
        ]
    )


class OverpassClient(ExternalAPIClient):
    api_name = "overpass"
    timeout_sec = 20
    max_retries = 0

    def __init__(
        self,
        user_agent: str,
        endpoints: Sequence[str] = DEFAULT_OVERPASS_ENDPOINTS,
        session: Optional[requests.Session] = None,
        timeout_sec: Optional[float] = None,
    ) -> None:
        super().__init__(user_agent, session=session, timeout_sec=timeout_sec)
        self.endpoints = list(endpoints)

    def query(self, ql: str) -> Dict[str, Any]:
        """Return the first successful JSON payload across the mirrors.

        Mirrors are tried once each, in order. When none answers with a
        usable payload, ``UpstreamUnavailableError`` carries the last HTTP
        status and a truncated body for diagnostics.
        """
        last_status: Optional[int] = None
        last_body = ""
        for endpoint in self.endpoints:
            started_at = time.time()
            try:
                response = self.session.post(
                    endpoint,
                    data=ql.encode("utf-8"),
                    headers=self._headers(**{"Content-Type": "text/plain"}),
                    timeout=self.timeout_sec,
                )
            except requests.RequestException as exc:
                self._log_call(endpoint, None, self._classify_error(exc), started_at)
                continue

            if not response.ok:
                last_status = response.status_code
                last_body = (response.text or "")[:500]
                self._log_call(endpoint, last_status, APIErrorType.HTTP_STATUS, started_at)
                continue

            payload = self._json_or_none(response)
            if not isinstance(payload, dict):
                last_status = response.status_code
                last_body = (response.text or "")[:500]
                self._log_call(endpoint, last_status, APIErrorType.INVALID_RESPONSE, started_at)
                continue

            self._log_call(endpoint, response.status_code, None, started_at)
            return payload

        raise UpstreamUnavailableError(self.api_name, status=last_status, body=last_body)
