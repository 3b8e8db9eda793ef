from __future__ import annotations

import base64
from datetime import datetime, timezone
from typing import Any

from geostamp.exceptions import WatermarkError
from geostamp.models import WatermarkResult

SUCCESS_MESSAGE = "Image processed successfully"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def data_uri(data: bytes, mime_type: str) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def build_envelope(result: WatermarkResult, **extra: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "image": data_uri(result.data, result.mime_type),
        "size": result.size,
        "originalSize": result.original_size,
    }
    payload.update(extra)
    return {
        "success": True,
        "message": SUCCESS_MESSAGE,
        "timestamp": _now_iso(),
        "data": payload,
    }


def error_envelope(exc: Exception) -> dict[str, Any]:
    if isinstance(exc, WatermarkError):
        message = exc.message
        error = {"code": exc.error_code, "status": exc.status, "statusCode": exc.status_code}
    else:
        message = str(exc) or exc.__class__.__name__
        error = {"code": None, "status": "error", "statusCode": 500}
    return {
        "success": False,
        "message": message,
        "timestamp": _now_iso(),
        "error": error,
    }
