"""Environment-driven configuration for the DocuWriter.ai MCP server."""

import os
from typing import Mapping, Optional
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field

from docuwriter_mcp.errors import ConfigurationError

# ─── Configuration ───────────────────────────────────────────────────────────

TOKEN_ENV = "DOCUWRITER_API_TOKEN"
BASE_URL_ENV = "DOCUWRITER_API_URL"
LOG_LEVEL_ENV = "DOCUWRITER_LOG_LEVEL"

DEFAULT_BASE_URL = "https://app.docuwriter.ai/api"
DEFAULT_LOG_LEVEL = "WARNING"
REQUEST_TIMEOUT = 30.0

# Hosts used for local development against a self-signed backend.
LOCAL_HOSTS = ("localhost", "127.0.0.1")
LOCAL_DOMAIN = "docs-ai.test"


def log_level_from_env(environ: Optional[Mapping[str, str]] = None) -> str:
    env = os.environ if environ is None else environ
    return (env.get(LOG_LEVEL_ENV) or DEFAULT_LOG_LEVEL).upper()


def is_local_development(base_url: str) -> bool:
    """Return True when ``base_url`` points at a local development backend."""
    hostname = (urlparse(base_url).hostname or "").lower()
    if hostname in LOCAL_HOSTS:
        return True
    return hostname == LOCAL_DOMAIN or hostname.endswith("." + LOCAL_DOMAIN)


class Settings(BaseModel):
    """Resolved server settings."""
    model_config = ConfigDict(frozen=True)

    api_token: str = Field(..., min_length=1)
    base_url: str = DEFAULT_BASE_URL
    timeout: float = REQUEST_TIMEOUT
    log_level: str = DEFAULT_LOG_LEVEL

    @property
    def verify_tls(self) -> bool:
        return not is_local_development(self.base_url)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from environment variables.

        Raises:
            ConfigurationError: if DOCUWRITER_API_TOKEN is unset or blank.
        """
        env = os.environ if environ is None else environ
        token = (env.get(TOKEN_ENV) or "").strip()
        if not token:
            raise ConfigurationError(
                f"{TOKEN_ENV} environment variable is required. "
                "Generate a token in your DocuWriter.ai account settings."
            )
        return cls(
            api_token=token,
            base_url=env.get(BASE_URL_ENV) or DEFAULT_BASE_URL,
            log_level=log_level_from_env(env),
        )
