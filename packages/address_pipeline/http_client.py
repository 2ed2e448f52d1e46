"""Base external API client with session setup, retries, and call logging."""

from __future__ import annotations

import logging
import time
from enum import Enum
from typing import Any, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry


class APIErrorType(Enum):
    """API error classification."""

    TIMEOUT = "timeout"
    HTTP_STATUS = "http_status"
    INVALID_RESPONSE = "invalid_response"
    SERVICE_UNAVAILABLE = "service_unavailable"


class ExternalAPIClient:
    """Shared plumbing for the outbound HTTP clients.

    Subclasses set ``api_name``, ``timeout_sec`` and ``max_retries``. Retries
    only cover transport failures (connect and read errors); HTTP error
    statuses are returned to the caller as-is.
    """

    api_name: str = "external"
    timeout_sec: float = 10
    max_retries: int = 0
    retry_backoff_sec: float = 0.2

    def __init__(
        self,
        user_agent: str,
        session: Optional[requests.Session] = None,
        timeout_sec: Optional[float] = None,
    ) -> None:
        self.user_agent = user_agent
        if timeout_sec is not None:
            self.timeout_sec = timeout_sec
        self.session = session if session is not None else self._build_session()
        self.logger = logging.getLogger(f"external_api.{self.api_name}")

    def _build_session(self) -> requests.Session:
        session = requests.Session()
        retry = Retry(
            total=self.max_retries,
            connect=self.max_retries,
            read=self.max_retries,
            status=0,
            backoff_factor=self.retry_backoff_sec,
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry)
        session.mount("https://", adapter)
        session.mount("http://", adapter)
        return session

    def _headers(self, **extra: str) -> dict[str, str]:
        return {"User-Agent": self.user_agent, **extra}

    def _classify_error(self, exc: Exception) -> APIErrorType:
        if isinstance(exc, requests.Timeout):
            return APIErrorType.TIMEOUT
        return APIErrorType.SERVICE_UNAVAILABLE

    def _log_call(
        self,
        url: str,
        status: Optional[int],
        error_type: Optional[APIErrorType],
        started_at: float,
    ) -> None:
        latency = int((time.time() - started_at) * 1000)
        if error_type is None:
            self.logger.debug("%s %s -> %s in %sms", self.api_name, url, status, latency)
        else:
            self.logger.warning(
                "%s %s failed: %s (status=%s, %sms)", self.api_name, url, error_type.value, status, latency
            )

    @staticmethod
    def _json_or_none(response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return None
