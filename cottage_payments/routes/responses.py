"""JSON response helpers shared by the function routes"""

from typing import Any, Optional

from fastapi.responses import JSONResponse, Response

PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Headers": "Content-Type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}


def json_response(status_code: int, content: dict[str, Any]) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=content)


def failed(status_code: int, error: str, **extra: Optional[Any]) -> JSONResponse:
    """FAILED envelope; extra fields set to None are left out"""
    content: dict[str, Any] = {"status": "FAILED", "error": error}
    content.update({key: value for key, value in extra.items() if value is not None})
    return json_response(status_code, content)


def preflight() -> Response:
    """Answer a bare OPTIONS request"""
    return Response(status_code=200, headers=PREFLIGHT_HEADERS)


def method_not_allowed() -> JSONResponse:
    return failed(405, "Method not allowed")
