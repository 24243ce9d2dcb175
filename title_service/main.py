"""
Purpose:
- FastAPI application factory and router mounts.
- Settings and the extraction delegate are injected, so tests can run the app
  with their own configuration and a fake browser.
- run() serves the app with Uvicorn on 0.0.0.0:8080 by default
  (or: uvicorn title_service.main:create_app --factory).
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api.health import router as health_router
from .api.title import router as title_router
from .browser.extractor import PlaywrightTitleExtractor, TitleExtractor
from .core.logging import configure_logging, log_event
from .core.responses import JSONUTF8Response, error_response
from .core.settings import Settings, get_settings
from .services.watchdog import InFlight

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    log_event(logger, "server_start", host=settings.host, port=settings.port, pid=os.getpid(),
              wait_until=settings.wait_until, nav_timeout_ms=settings.nav_timeout_ms,
              req_timeout_ms=settings.req_timeout_ms, allowed_hosts=settings.allowed_host_list,
              debug=settings.debug)
    yield
    pending = await app.state.inflight.drain(settings.shutdown_grace_ms / 1000.0)
    log_event(logger, "server_shutdown", abandoned_extractions=pending)

async def _http_error(request: Request, exc: StarletteHTTPException):
    # Unknown paths and wrong methods both answer as "Not found".
    if exc.status_code in (404, 405):
        return error_response(404, "Not found")
    return error_response(exc.status_code, str(exc.detail))

async def _unhandled_error(request: Request, exc: Exception):
    logger.exception("unhandled error on %s", request.url.path)
    return error_response(500, "Internal server error")

def create_app(settings: Optional[Settings] = None, extractor: Optional[TitleExtractor] = None) -> FastAPI:
    settings = settings or get_settings()
    if settings.debug_enabled:
        logging.getLogger("title_service.browser").setLevel(logging.DEBUG)

    app = FastAPI(
        title="Page Title API",
        version=settings.service_version,
        default_response_class=JSONUTF8Response,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        redirect_slashes=False,
    )
    app.state.settings = settings
    app.state.extractor = extractor or PlaywrightTitleExtractor(browser_args=settings.browser_arg_list)
    app.state.inflight = InFlight()

    app.add_exception_handler(StarletteHTTPException, _http_error)
    app.add_exception_handler(Exception, _unhandled_error)

    app.include_router(health_router)
    app.include_router(title_router)
    return app

def run() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    # One process; the platform caps concurrency per instance.
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        workers=1,
        log_config=None,
        timeout_graceful_shutdown=max(settings.shutdown_grace_ms // 1000, 1),
    )

if __name__ == "__main__":
    run()
