"""tuic-server - startup configuration for a TUIC proxy server."""

from __future__ import annotations

__version__ = "0.1.0"
