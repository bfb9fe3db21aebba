"""Error responses in the single ErrorResponse JSON shape."""

from __future__ import annotations

from typing import Any

from fastapi.responses import JSONResponse

from renova.models.contracts import ErrorResponse, InsufficientCreditsResponse
from renova.services.credits import InsufficientCredits


class ApiError(Exception):
    """Raised from dependencies, where returning a response is not possible."""

    def __init__(
        self,
        status: int,
        code: str,
        message: str,
        *,
        retryable: bool = False,
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.code = code
        self.message = message
        self.retryable = retryable
        self.headers = headers


def error_response(
    status: int,
    code: str,
    message: str,
    *,
    retryable: bool = False,
    detail: str | None = None,
) -> JSONResponse:
    body: dict[str, Any] = ErrorResponse(
        error=code, message=message, retryable=retryable, detail=detail
    ).model_dump()
    return JSONResponse(status_code=status, content=body)


def insufficient_credits_response(shortfall: InsufficientCredits) -> JSONResponse:
    body = InsufficientCreditsResponse(
        error="insufficient_credits",
        message=shortfall.message,
        retryable=False,
        required=shortfall.required,
        balance=shortfall.balance,
    )
    return JSONResponse(status_code=402, content=body.model_dump())


NOT_FOUND = ("not_found", "Not found")
