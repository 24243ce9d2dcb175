"""
Purpose:
- Expose GET /title: validate `url`, run the extraction delegate under the
  overall-timeout watchdog, and map the outcome to a status code + JSON body.
- Emits one structured log line when the request starts and one when it ends.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Optional
from uuid import uuid4

from fastapi import APIRouter, Query, Request

from ..browser.extractor import ExtractionError, classify_error
from ..browser.schema import ErrorCode, TitleResponse
from ..browser.validation import validate_url
from ..core.logging import log_event
from ..core.responses import JSONUTF8Response, error_response
from ..services.watchdog import Watchdog

router = APIRouter(tags=["title"])
logger = logging.getLogger(__name__)

def _epoch_ms() -> int:
    return int(time.time() * 1000)

def _late_logger(trace_id: str, url: str):
    def _on_late(task: asyncio.Task) -> None:
        if task.cancelled():
            outcome, detail = "cancelled", None
        elif task.exception() is not None:
            outcome, detail = "error", str(task.exception())
        else:
            outcome, detail = "success", None
        log_event(logger, "late_completion_discarded", trace_id=trace_id, url=url,
                  outcome=outcome, error_message=detail)
    return _on_late

@router.get("/title")
async def get_title(request: Request, url: Optional[str] = Query(None, description="Absolute http(s) URL")):
    settings = request.app.state.settings
    watchdog = Watchdog(settings.req_timeout_ms)
    trace_id = uuid4().hex[:12]
    headers = {"X-Request-ID": trace_id}
    start_ts = _epoch_ms()

    check = validate_url(url, settings.allowed_host_list)
    if not check.valid:
        log_event(logger, "request_rejected", trace_id=trace_id, url=url, start_ts=start_ts,
                  end_ts=_epoch_ms(), timing_ms=watchdog.elapsed_ms(),
                  outcome="rejected", error_message=check.error)
        return error_response(400, check.error, headers)

    log_event(logger, "request_start", trace_id=trace_id, url=url, start_ts=start_ts)

    task = asyncio.create_task(
        request.app.state.extractor.extract_title(
            url,
            nav_timeout_ms=settings.nav_timeout_ms,
            wait_until=settings.wait_until,
            cancel=watchdog.cancel,
        )
    )
    finished = await watchdog.run(task, request.app.state.inflight, on_late=_late_logger(trace_id, url))
    timing = watchdog.elapsed_ms()
    common = dict(trace_id=trace_id, url=url, start_ts=start_ts, end_ts=_epoch_ms(), timing_ms=timing)

    if not finished:
        log_event(logger, "request_timeout", logging.WARNING, outcome="error",
                  error_code=ErrorCode.REQ_TIMEOUT.value, **common)
        return error_response(504, f"Request timed out after {settings.req_timeout_ms} ms", headers)

    try:
        page = task.result()
    except Exception as exc:
        err = exc if isinstance(exc, ExtractionError) else ExtractionError(classify_error(exc), str(exc))
        log_event(logger, "request_error", logging.WARNING, outcome="error",
                  error_code=err.code.value, error_message=err.message, **common)
        return error_response(err.http_status, err.message or "Internal server error", headers)

    log_event(logger, "request_success", outcome="success", status=page.status, **common)
    body = TitleResponse(title=page.title, url=url, status=page.status, timing_ms=timing)
    return JSONUTF8Response(content=body.model_dump(), headers=headers)
