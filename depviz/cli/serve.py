"""Serve command implementation."""

import logging

import uvicorn

from depviz.cli.options import config_from_args
from depviz.server import create_app

logger = logging.getLogger("depviz.cli.serve")


def serve_command(args) -> int:
    """Execute serve command.

    Args:
        args: Parsed command-line arguments containing:
            - root: Default root unit (optional)
            - addr: Listen address (optional)
            - config / shared configuration flags

    Returns:
        int: Exit code (0 for success, non-zero for failure).
    """
    try:
        config = config_from_args(args)
    except (OSError, ValueError) as exc:
        logger.error("Invalid configuration: %s", exc)
        return 2

    host, port = config.bind()
    logger.info("=== depviz server ===")
    logger.info("Default root: %s", config.default_root)
    logger.info("Max depth: %d, format: %s", config.max_depth, config.output_format)
    logger.info("Listening on http://%s:%d/", host, port)

    # log_config=None keeps uvicorn on the handlers installed by setup_logging.
    uvicorn.run(create_app(config), host=host, port=port, log_config=None)
    return 0
