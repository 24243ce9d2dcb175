"""
Purpose:
- Every response body is JSON with an explicit utf-8 charset.
- error_response() builds the fixed {ok:false,error} shape.
"""

from __future__ import annotations
from typing import Mapping, Optional
from fastapi.responses import JSONResponse

class JSONUTF8Response(JSONResponse):
    media_type = "application/json; charset=utf-8"

def error_response(status_code: int, message: str, headers: Optional[Mapping[str, str]] = None) -> JSONUTF8Response:
    return JSONUTF8Response(
        status_code=status_code,
        content={"ok": False, "error": message},
        headers=dict(headers) if headers else None,
    )
