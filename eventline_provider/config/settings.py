"""Settings loader with environment variable and Docker secrets integration."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from eventline_provider.core.eventline import DEFAULT_PAGE_SIZE, REQUEST_TIMEOUT, Cursor, EventlineClient

logger = logging.getLogger(__name__)


def _load_secret_from_file(secret_name: str, env_var: str | None = None) -> str | None:
    """
    Load secret from /run/secrets (Docker secrets pattern).

    Priority:
    1. /run/secrets/{secret_name} (Docker secrets mount)
    2. Environment variable (fallback)

    Args:
        secret_name: Name of the secret file in /run/secrets
        env_var: Optional environment variable name to check as fallback

    Returns:
        Secret value or None if not found
    """
    secret_file = Path("/run/secrets") / secret_name

    if secret_file.exists() and secret_file.is_file():
        try:
            secret_value = secret_file.read_text().strip()
            if secret_value:
                logger.debug("Loaded %s from /run/secrets", secret_name)
                return secret_value
        except OSError as e:
            logger.warning("Failed to read /run/secrets/%s: %s", secret_name, e)

    if env_var:
        secret_value = os.getenv(env_var)
        if secret_value:
            logger.debug("Loaded %s from environment", env_var)
            return secret_value

    return None


def _positive_number(var_name: str, default: str, cast=float):
    raw = os.environ.get(var_name, default)
    try:
        value = cast(raw)
    except ValueError:
        raise RuntimeError(f"Environment variable {var_name} must be a number, got {raw!r}") from None
    if value <= 0:
        raise RuntimeError(f"Environment variable {var_name} must be positive, got {raw!r}")
    return value


@dataclass(frozen=True)
class EventlineSettings:
    """Provider configuration container."""
    endpoint: str
    api_key: Optional[str] = None
    timeout: float = REQUEST_TIMEOUT
    page_size: int = DEFAULT_PAGE_SIZE
    log_level: str = "INFO"
    log_json: bool = False

    def default_cursor(self) -> Cursor:
        return Cursor(size=self.page_size)

    def __repr__(self) -> str:
        key = "***" if self.api_key else None
        return (
            f"EventlineSettings(endpoint={self.endpoint!r}, api_key={key!r}, "
            f"timeout={self.timeout}, page_size={self.page_size}, log_level={self.log_level!r})"
        )


def load_settings() -> EventlineSettings:
    """Load provider settings from the environment and /run/secrets.

    Raises:
        RuntimeError: If EVENTLINE_ENDPOINT is missing or a numeric setting is malformed
    """
    endpoint = os.environ.get("EVENTLINE_ENDPOINT", "").strip()
    if not endpoint:
        raise RuntimeError("Environment variable EVENTLINE_ENDPOINT is required.")

    api_key = _load_secret_from_file("eventline_api_key", "EVENTLINE_API_KEY")
    if not api_key:
        logger.warning("No Eventline API key configured; requests will be unauthenticated")

    timeout = _positive_number("EVENTLINE_TIMEOUT", str(REQUEST_TIMEOUT))
    page_size = _positive_number("EVENTLINE_PAGE_SIZE", str(DEFAULT_PAGE_SIZE), cast=int)
    log_level = os.environ.get("EVENTLINE_LOG_LEVEL", "INFO").strip().upper()
    log_json = os.environ.get("EVENTLINE_LOG_JSON", "false").lower() == "true"

    settings = EventlineSettings(
        endpoint=endpoint,
        api_key=api_key,
        timeout=timeout,
        page_size=page_size,
        log_level=log_level,
        log_json=log_json,
    )
    logger.info("Eventline endpoint=%s; timeout=%ss; page_size=%d", endpoint, timeout, page_size)
    return settings


def build_client(settings: EventlineSettings) -> EventlineClient:
    """Create an unscoped API client from settings."""
    return EventlineClient(settings.endpoint, settings.api_key, timeout=settings.timeout)
