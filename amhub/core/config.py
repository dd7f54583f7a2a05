"""
Console Settings
================
Author: AMHUB Member
Date: 2026-10-18

Upstream credentials, endpoints, poll cadence and alert-form defaults,
read from AMHUB_* variables (a project-root .env is loaded first with
python-dotenv). Settings edited in the console are applied to a copy via
Config.with_overrides(); nothing is written back to disk.

Usage:
    from amhub.core.config import get_config

    config = get_config()
    config.topology_url()
"""

from __future__ import annotations

import os
import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional
from urllib.parse import quote, urlsplit

# Third-party imports
try:
    from dotenv import load_dotenv
except ImportError:
    raise ImportError(
        "python-dotenv is required. Install with: pip install python-dotenv"
    )

logger = logging.getLogger("AMHUB.Config")

# =============================================================================
# Constants
# =============================================================================

PROJECT_ROOT = Path(__file__).parent.parent.parent
ENV_FILE = PROJECT_ROOT / ".env"

DEFAULT_API_URL = "https://fh.dji.com/openapi/v0.1/workflow"
TOPOLOGY_PATH = "/manage/api/v1.0/projects/{project_uuid}/topologies"

DEFAULT_LATITUDE = 25.276987
DEFAULT_LONGITUDE = 55.296249
DEFAULT_DESCRIPTION = "Suspicious activity reported. Dispatch drone for visual confirmation."


class ConfigError(ValueError):
    """Raised when a configuration value is out of range."""


# =============================================================================
# Configuration Dataclass
# =============================================================================

@dataclass(frozen=True)
class Config:
    """
    Console configuration with type-safe access to environment variables.

    Attributes:
        api_url: Workflow endpoint; its origin also hosts the topology API
        user_token: Bearer token forwarded as X-User-Token
        project_uuid: Project identifier forwarded as x-project-uuid
        workflow_uuid: Workflow triggered by the alert action
        creator_id: Creator recorded on triggered alerts
        proxy_base: Optional prefix; the target URL is URL-encoded after it
        poll_interval_ms: Background topology poll cadence
        request_timeout_s: Per-request HTTP timeout
        default_latitude: Initial target latitude
        default_longitude: Initial target longitude
        default_level: Initial threat level (1-5)
        default_description: Initial alert description
        log_level: Logging verbosity level
        project_root: Path to project root directory
    """
    api_url: str = DEFAULT_API_URL
    user_token: str = ""
    project_uuid: str = ""
    workflow_uuid: str = ""
    creator_id: str = ""
    proxy_base: str = ""
    poll_interval_ms: int = 1000
    request_timeout_s: float = 10.0
    default_latitude: float = DEFAULT_LATITUDE
    default_longitude: float = DEFAULT_LONGITUDE
    default_level: int = 1
    default_description: str = DEFAULT_DESCRIPTION
    log_level: str = "INFO"
    project_root: Path = PROJECT_ROOT

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.poll_interval_ms <= 0:
            raise ConfigError(f"poll_interval_ms must be positive, got {self.poll_interval_ms}")
        if self.request_timeout_s <= 0:
            raise ConfigError(f"request_timeout_s must be positive, got {self.request_timeout_s}")
        if not 1 <= self.default_level <= 5:
            raise ConfigError(f"default_level must be between 1 and 5, got {self.default_level}")
        if not self.user_token:
            logger.warning(
                "AMHUB_USER_TOKEN not configured. Topology polling will report UNAUTHORIZED. "
                "Please set AMHUB_USER_TOKEN in .env file."
            )

    def origin(self) -> str:
        """Scheme and host of the configured API URL."""
        parts = urlsplit(self.api_url)
        return f"{parts.scheme}://{parts.netloc}"

    def proxied(self, url: str) -> str:
        """Route a URL through the configured proxy, if any."""
        if not self.proxy_base:
            return url
        return self.proxy_base + quote(url, safe="")

    def topology_url(self) -> str:
        """
        Get the project topology endpoint.

        Example:
            >>> Config(api_url="https://fh.example.com/openapi/x", project_uuid="p1").topology_url()
            'https://fh.example.com/manage/api/v1.0/projects/p1/topologies'
        """
        return self.origin() + TOPOLOGY_PATH.format(project_uuid=self.project_uuid)

    def with_overrides(self, **changes) -> "Config":
        """Return a copy with in-session setting edits applied (validated again)."""
        return replace(self, **changes)


# =============================================================================
# Module-level singleton
# =============================================================================

_config: Optional[Config] = None


def load_env(env_file: Optional[Path] = None) -> bool:
    """Load a .env file (project root by default) over the process environment; False if absent."""
    target = env_file or ENV_FILE

    if not target.exists():
        logger.debug(f"No .env at {target}, using process environment only")
        return False
    load_dotenv(target, override=True)
    logger.info(f"Settings loaded from {target}")
    return True


def config_from_env() -> Config:
    """Build a Config from AMHUB_* environment variables."""
    try:
        return Config(
            api_url=os.getenv("AMHUB_API_URL", DEFAULT_API_URL),
            user_token=os.getenv("AMHUB_USER_TOKEN", ""),
            project_uuid=os.getenv("AMHUB_PROJECT_UUID", ""),
            workflow_uuid=os.getenv("AMHUB_WORKFLOW_UUID", ""),
            creator_id=os.getenv("AMHUB_CREATOR_ID", ""),
            proxy_base=os.getenv("AMHUB_PROXY_BASE", ""),
            poll_interval_ms=int(os.getenv("AMHUB_POLL_INTERVAL_MS", "1000")),
            request_timeout_s=float(os.getenv("AMHUB_REQUEST_TIMEOUT_S", "10")),
            default_latitude=float(os.getenv("AMHUB_DEFAULT_LAT", str(DEFAULT_LATITUDE))),
            default_longitude=float(os.getenv("AMHUB_DEFAULT_LNG", str(DEFAULT_LONGITUDE))),
            default_level=int(os.getenv("AMHUB_DEFAULT_LEVEL", "1")),
            default_description=os.getenv("AMHUB_DEFAULT_DESC", DEFAULT_DESCRIPTION),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )
    except ValueError as e:
        if isinstance(e, ConfigError):
            raise
        raise ConfigError(f"Invalid numeric setting in environment: {e}") from e


def get_config(reload: bool = False) -> Config:
    """Process-wide settings, built on first use (or again with reload=True)."""
    global _config

    if _config is None or reload:
        load_env()
        _config = config_from_env()

    return _config


# =============================================================================
# Settings dump
# =============================================================================

if __name__ == "__main__":
    config = get_config()

    print("=" * 60)
    print("AMHUB Configuration")
    print("=" * 60)
    print(f"Project Root:   {config.project_root}")
    print(f"API URL:        {config.api_url}")
    print(f"Topology URL:   {config.topology_url()}")
    print(f"Poll Interval:  {config.poll_interval_ms} ms")
    print(f"Log Level:      {config.log_level}")
    print(f"Token Set:      {'Yes' if config.user_token else 'No'}")
    print("=" * 60)
