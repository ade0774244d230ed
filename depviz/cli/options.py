"""Command-line options shared by every depviz command."""

import argparse
import logging
from typing import Any, Dict

from depviz.config import SUPPORTED_FORMATS, ServerConfig, load_server_config

logger = logging.getLogger("depviz.cli.options")


def add_config_arguments(parser: argparse.ArgumentParser) -> None:
    """Register the options that map onto ServerConfig fields.

    Every option defaults to None so that only flags given explicitly
    override values from the configuration file.
    """
    parser.add_argument(
        "-c",
        "--config",
        help=(
            "Optional configuration. Can be a path to a TOML/JSON file "
            "or an inline TOML/JSON string. Explicit flags take precedence."
        ),
    )
    parser.add_argument(
        "--tests",
        action="store_true",
        default=None,
        help="Include test files (test_*.py, *_test.py, conftest.py) when loading units",
    )
    parser.add_argument(
        "-d",
        "--max-depth",
        type=int,
        help="Maximum traversal depth; the root is depth 0 (default: 3)",
    )
    parser.add_argument(
        "--format",
        choices=SUPPORTED_FORMATS,
        help="Rendered output format (default: svg)",
    )
    parser.add_argument(
        "--search-path",
        action="append",
        help="Extra directory searched when resolving dotted unit names (repeatable)",
    )
    parser.add_argument(
        "--no-sort",
        action="store_true",
        default=None,
        help="Expand imports in discovery order instead of sorted by name",
    )


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    """Merge the configuration source with explicit command-line flags.

    Raises:
        OSError: If the configuration file cannot be read.
        ValueError: If the configuration is invalid (includes pydantic
            ValidationError).
    """
    overrides: Dict[str, Any] = {
        "include_tests": getattr(args, "tests", None),
        "max_depth": getattr(args, "max_depth", None),
        "output_format": getattr(args, "format", None),
        "search_paths": getattr(args, "search_path", None),
        "default_root": getattr(args, "root", None),
        "listen_address": getattr(args, "addr", None),
    }
    if getattr(args, "no_sort", None):
        overrides["sort_imports"] = False

    config = load_server_config(getattr(args, "config", None), overrides)
    logger.debug("Effective configuration: %s", config.to_dict())
    return config


__all__ = ["add_config_arguments", "config_from_args"]
