"""
Purpose:
- Pydantic models for validation outcomes, extraction results and response bodies,
  so the API is self-documenting and stable.
"""

from __future__ import annotations
from enum import Enum
from pydantic import BaseModel, Field
from typing import Optional

class ErrorCode(str, Enum):
    NAV_TIMEOUT = "NAV_TIMEOUT"
    DNS_FAIL = "DNS_FAIL"
    NET_TIMEOUT = "NET_TIMEOUT"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    REQ_TIMEOUT = "REQ_TIMEOUT"   # watchdog, never raised by an extractor

class UrlValidation(BaseModel):
    valid: bool
    error: Optional[str] = None

class PageTitle(BaseModel):
    title: Optional[str] = None
    status: Optional[int] = Field(None, description="HTTP status of the navigation response")

class TitleResponse(BaseModel):
    ok: bool = True
    title: Optional[str] = None
    url: str
    status: Optional[int] = None
    timing_ms: int = Field(..., ge=0)

class ErrorResponse(BaseModel):
    ok: bool = False
    error: str

class StatusResponse(BaseModel):
    ok: bool = True
    service: str
    version: str
    timestamp: str
