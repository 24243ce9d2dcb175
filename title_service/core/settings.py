"""
Purpose:
- Centralized configuration using pydantic-settings.
- Reads from environment variables and optional .env file, once, at startup.
- The resulting Settings is frozen and handed to create_app() explicitly.
"""

from typing import List, Literal
import ipaddress
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_BROWSER_ARGS = "--no-sandbox,--disable-dev-shm-usage,--disable-gpu,--disable-extensions"

def _split_csv(raw: str) -> List[str]:
    return [part.strip() for part in (raw or "").split(",") if part.strip()]

def is_loopback_host(host: str) -> bool:
    h = (host or "").strip().strip("[]").lower()
    if h == "localhost" or h.endswith(".localhost"):
        return True
    try:
        return ipaddress.ip_address(h).is_loopback
    except ValueError:
        return False

class Settings(BaseSettings):
    # Pydantic v2 config (env file + ignore unexpected env vars)
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # HTTP bind
    host: str = Field(default="0.0.0.0", description="Bind address for Uvicorn; never loopback")
    port: int = Field(default=8080, gt=0, lt=65536, description="Port for Uvicorn")

    # Browser delegate
    debug: str = Field(default="", description="Non-empty enables extractor debug logging")
    wait_until: Literal["load", "domcontentloaded", "networkidle", "commit"] = Field(
        default="load", description="Page readiness criterion passed to page.goto"
    )
    nav_timeout_ms: int = Field(default=15000, gt=0, description="Navigation timeout")
    req_timeout_ms: int = Field(default=30000, gt=0, description="Overall request budget (watchdog)")
    allowed_hosts: str = Field(default="", description="Comma-separated hostname allowlist; empty allows all")
    browser_args: str = Field(default=DEFAULT_BROWSER_ARGS, description="Comma-separated Chromium flags")

    # Service identity (reported by /status)
    service_name: str = Field(default="playwright-title-service")
    service_version: str = Field(default="1.0.0")

    # Ops
    log_level: str = Field(default="INFO")
    shutdown_grace_ms: int = Field(default=10000, ge=0, description="Wait for background extractions on shutdown")

    @field_validator("host")
    @classmethod
    def _reject_loopback(cls, v: str) -> str:
        # The platform load balancer connects from outside the container.
        if is_loopback_host(v):
            raise ValueError(f"refusing to bind to loopback address {v!r}; use 0.0.0.0")
        return v

    @property
    def allowed_host_list(self) -> List[str]:
        return [h.lower() for h in _split_csv(self.allowed_hosts)]

    @property
    def browser_arg_list(self) -> List[str]:
        return _split_csv(self.browser_args)

    @property
    def debug_enabled(self) -> bool:
        return bool(self.debug.strip())

def get_settings() -> Settings:
    return Settings()
