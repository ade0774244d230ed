"""Export command implementation."""

import logging
from pathlib import Path

from depviz.cli.options import config_from_args
from depviz.errors import DepvizError
from depviz.export.dot import write_dot
from depviz.runtime.api import build

logger = logging.getLogger("depviz.cli.export")


def export_command(args) -> int:
    """Execute export command.

    Args:
        args: Parsed command-line arguments containing:
            - root: Root unit (optional, defaults to the configured root)
            - output: Output DOT file path
            - view: ``graph`` or ``focus``

    Returns:
        int: Exit code (0 for success, non-zero for failure).
    """
    try:
        config = config_from_args(args)
    except (OSError, ValueError) as exc:
        logger.error("Invalid configuration: %s", exc)
        return 2

    root = config.default_root
    output_path = Path(args.output)
    view = getattr(args, "view", "graph")
    logger.info("Exporting %s (view=%s, max depth %d)", root, view, config.max_depth)

    try:
        graph = build(root, config, view=view)
        write_dot(graph, output_path)
    except DepvizError as exc:
        logger.error("Export failed: %s", exc)
        return 1
    except OSError as exc:
        logger.error("Cannot write %s: %s", output_path, exc)
        return 1

    logger.info("Export successful: %s", output_path)
    return 0
