"""Response envelopes shared by the HTTP routes."""

import time
from typing import Any

from fastapi.responses import JSONResponse


def elapsed_ms(started: float) -> int:
    """Milliseconds since a time.perf_counter() reading."""
    return int((time.perf_counter() - started) * 1000)


def live_response(started: float, **body: Any) -> dict[str, Any]:
    """Successful envelope for data read straight from the provider."""
    return {"success": True, "source": "live", "loadTime": elapsed_ms(started), **body}


def error_response(status_code: int, message: str) -> JSONResponse:
    """Failure envelope; never carries partial data."""
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})
