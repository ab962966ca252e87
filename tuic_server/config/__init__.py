"""Configuration management.

This module parses the command line, loads the optional JSON config file and
assembles the final server configuration.
"""

from __future__ import annotations

from tuic_server.config.config import Config, hash_token
from tuic_server.config.options import (
    load_config_file,
    parse_raw_config,
    render_usage,
    resolve_optional,
    resolve_required,
)

__all__ = [
    "Config",
    "hash_token",
    "load_config_file",
    "parse_raw_config",
    "render_usage",
    "resolve_optional",
    "resolve_required",
]
