"""
Core Module for AMHUB
=====================
Author: AMHUB Member
Date: 2026-10-18

Cross-cutting pieces every console layer leans on: the AMHUB logger tree,
.env-backed configuration and the Nominatim target search.

USAGE:
    from amhub.core import get_config, setup_logging

    config = get_config()
    setup_logging(config.log_level)
"""

# Logging
from .logging_config import (
    get_logger,
    log_exception,
    setup_logging,
    shutdown_logging,
)

# Configuration
from .config import (
    Config,
    ConfigError,
    get_config,
    load_env,
)

# Target search
from .geocoder import (
    GeocodingError,
    geocode,
    search_target,
)

__all__ = [
    # Logging
    "get_logger",
    "log_exception",
    "setup_logging",
    "shutdown_logging",

    # Configuration
    "Config",
    "ConfigError",
    "get_config",
    "load_env",

    # Target search
    "GeocodingError",
    "geocode",
    "search_target",
]
