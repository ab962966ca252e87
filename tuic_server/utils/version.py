"""Version lookup for tuic-server."""

from __future__ import annotations

import importlib.metadata
from typing import Final

DISTRIBUTION_NAME: Final[str] = "tuic-server"


def get_version() -> str:
    """Get the installed package version.

    Uses importlib.metadata to get version from installed package.
    Falls back to tuic_server.__version__ if metadata is unavailable.
    """
    try:
        return importlib.metadata.version(DISTRIBUTION_NAME)
    except importlib.metadata.PackageNotFoundError:
        import tuic_server

        return tuic_server.__version__
