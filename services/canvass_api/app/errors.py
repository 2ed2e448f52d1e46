from __future__ import annotations

from fastapi import Request
from fastapi.responses import JSONResponse


class CanvassError(Exception):
    def __init__(self, *, code: str, message: str, status_code: int) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code


async def canvass_error_handler(_request: Request, exc: CanvassError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": {"code": exc.code, "message": exc.message}},
    )
