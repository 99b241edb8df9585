# app/core/response.py
from typing import Any, Optional, Dict
from pydantic import BaseModel
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
import traceback
from app.core.config import settings


class ErrorDetail(BaseModel):
    """Field-level error information"""
    field: Optional[str] = None
    message: str


class ErrorResponseModel(BaseModel):
    """Error body shared by every endpoint: {error} or {error, details}"""
    error: str
    details: Optional[Any] = None
    # Only include debug info in development
    debug_info: Optional[Dict[str, Any]] = None


def json_response(data: Any, status_code: int = 200) -> JSONResponse:
    """Serialize pydantic models, ORM-derived dicts, datetimes and UUIDs."""
    return JSONResponse(status_code=status_code, content=jsonable_encoder(data))


def error_response(
    error: str,
    status_code: int = 400,
    details: Any = None,
    include_debug: bool = False,
) -> JSONResponse:
    """Build the {error, details?} body used by all failure paths"""
    debug_info = None
    if include_debug and settings.DEBUG:
        debug_info = {
            "traceback": traceback.format_exc(),
            "environment": settings.ENVIRONMENT,
        }

    if isinstance(details, list):
        details = [
            d.model_dump(exclude_none=True) if isinstance(d, ErrorDetail) else d
            for d in details
        ]

    payload = ErrorResponseModel(
        error=error,
        details=details,
        debug_info=debug_info,
    ).model_dump(exclude_none=True)

    return JSONResponse(status_code=status_code, content=jsonable_encoder(payload))


def validation_error_response(
    errors: list[Dict[str, Any]],
    status_code: int = 400,
) -> JSONResponse:
    """Create a standardized validation error response"""
    details = []
    for err in errors:
        loc = err.get("loc", [])
        field = ".".join(str(x) for x in loc if x != "body")
        if err.get("type") == "json_invalid":
            return error_response("Invalid JSON payload", status_code=status_code)
        details.append(ErrorDetail(
            field=field or None,
            message=err.get("msg", "Validation error"),
        ))

    return error_response(
        "Invalid input data",
        details=details,
        status_code=status_code,
    )
