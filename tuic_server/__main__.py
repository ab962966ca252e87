#!/usr/bin/env python3
"""tuic-server entry point.

Resolves the startup configuration and reports the outcome. Help and version
output go to stdout with exit status 0; configuration errors go to stderr with
a non-zero status.
"""

from __future__ import annotations

import sys
from collections.abc import Sequence

from rich.console import Console
from rich.markup import escape

from tuic_server.config import Config
from tuic_server.utils.exceptions import ConfigError, InformationalExit
from tuic_server.utils.logging_config import get_logger, setup_logging

logger = get_logger(__name__)


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point for the server."""
    args = sys.argv[1:] if argv is None else list(argv)

    try:
        config = Config.parse(args)
    except InformationalExit as e:
        print(e.message)
        return e.exit_code
    except ConfigError as e:
        Console(stderr=True, highlight=False).print(
            f"[red]Error:[/red] {escape(e.message)}", markup=True, soft_wrap=True
        )
        return e.exit_code

    setup_logging(config.log_level)
    logger.info("Server configuration resolved: %s", config.summary())
    return 0


if __name__ == "__main__":
    sys.exit(main())
