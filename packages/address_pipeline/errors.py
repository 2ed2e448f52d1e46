from __future__ import annotations

from typing import Optional


class AddressPipelineError(Exception):
    """Base error for the address pipeline."""


class UpstreamUnavailableError(AddressPipelineError):
    """Raised when every endpoint of an external service failed."""

    def __init__(self, service: str, status: Optional[int] = None, body: str = "") -> None:
        super().__init__(f"{service} unavailable (last status: {status})")
        self.service = service
        self.status = status
        self.body = body
