"""Fetcher configuration."""

from typing import Optional

import httpx
from pydantic import BaseModel, ConfigDict, field_validator

from .npm_name import DEFAULT_PROVIDER_SCOPE

DEFAULT_HOST = "https://jsr.io/"
DEFAULT_NPM_COMP_HOST = "https://npm.jsr.io/"


class FetcherConfig(BaseModel):
    """Hosts and naming used by a Fetcher. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    host: str = DEFAULT_HOST
    npm_comp_host: str = DEFAULT_NPM_COMP_HOST
    provider_scope: str = DEFAULT_PROVIDER_SCOPE
    timeout: Optional[float] = 30.0

    @field_validator("host", "npm_comp_host")
    @classmethod
    def _check_host(cls, value: str) -> str:
        try:
            url = httpx.URL(value)
        except httpx.InvalidURL as exc:
            raise ValueError(f"invalid host URL: {exc}") from None
        if url.scheme not in ("http", "https") or not url.host:
            raise ValueError("host must be an absolute http(s) URL")
        # Relative joins drop the last path segment unless it ends with "/"
        if not value.endswith("/"):
            value += "/"
        return value

    @field_validator("provider_scope")
    @classmethod
    def _check_provider_scope(cls, value: str) -> str:
        if not value or "/" in value or value.startswith("@"):
            raise ValueError("provider scope must be a bare scope name like 'jsr'")
        return value

    def get_provider_scope(self) -> str:
        return self.provider_scope
