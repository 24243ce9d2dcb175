# Liveness probe for the platform: static payload, never touches the browser.

from fastapi import APIRouter, Request
from ..browser.schema import StatusResponse
from ..core.logging import utc_iso
from ..core.responses import JSONUTF8Response

router = APIRouter(tags=["health"])

@router.get("/status")
@router.get("/healthz")
def status(request: Request):
    settings = request.app.state.settings
    body = StatusResponse(
        service=settings.service_name,
        version=settings.service_version,
        timestamp=utc_iso(),
    )
    return JSONUTF8Response(content=body.model_dump())
