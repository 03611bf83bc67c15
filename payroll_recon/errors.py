from __future__ import annotations

from fastapi import Request
from fastapi.responses import JSONResponse


class ApiError(Exception):
    def __init__(self, status_code: int, code: str, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.message = message


class ReconciliationError(Exception):
    """Caller-facing validation failure raised by the reconciliation core."""

    code = "RECONCILIATION_ERROR"

    def __init__(self, message: str, *, code: str | None = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code


class RosterValidationError(ReconciliationError):
    code = "INVALID_ROSTER"


class AdjustmentError(ReconciliationError):
    code = "INVALID_ADJUSTMENT"


class HolidaySelectionError(ReconciliationError):
    code = "INVALID_HOLIDAY_SELECTION"


class SheetFormatError(ReconciliationError):
    code = "INVALID_SHEET"


def get_request_id(request: Request) -> str:
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        return str(request_id)
    return "unknown"


def error_response(request: Request, *, status_code: int, code: str, message: str) -> JSONResponse:
    payload = {
        "error": {
            "code": code,
            "message": message,
            "request_id": get_request_id(request),
        }
    }
    return JSONResponse(status_code=status_code, content=payload)
