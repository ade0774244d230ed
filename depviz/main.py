"""Main CLI entry point for depviz.

Provides commands: serve, export
"""

import argparse
import logging
import sys
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from depviz.cli.export import export_command
from depviz.cli.options import add_config_arguments
from depviz.cli.serve import serve_command

logger = logging.getLogger("depviz.cli")


def setup_logging(
    verbose: bool = False,
    log_file: Optional[str] = None,
    console: Optional[Console] = None,
) -> None:
    """Setup logging configuration with Rich integration.

    Args:
        verbose: Enable verbose logging.
        log_file: Optional file receiving the same records in plain text.
        console: Rich Console instance for coordinated output (optional).
    """
    level = logging.DEBUG if verbose else logging.INFO

    handlers: list[logging.Handler] = [
        RichHandler(
            console=console,
            show_time=True,
            show_path=False,
            markup=False,
            rich_tracebacks=True,
            tracebacks_show_locals=verbose,
            log_time_format="[%H:%M:%S]",
        )
    ]
    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s [%(name)s] [%(levelname)s] %(message)s")
        )
        handlers.append(file_handler)

    logging.basicConfig(
        level=level,
        format="[%(name)s] [%(levelname)s] %(message)s",
        handlers=handlers,
        force=True,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="depviz",
        description="depviz - Python import dependency graph server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--log-file",
        help="Also write logs to this file",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Serve command
    serve_parser = subparsers.add_parser(
        "serve",
        help="Serve rendered dependency graphs over HTTP",
    )
    serve_parser.add_argument(
        "--root",
        help="Unit rendered when a request has no f= parameter (default: .)",
    )
    serve_parser.add_argument(
        "--addr",
        help="Listen address as [host]:port (default: :9000)",
    )
    add_config_arguments(serve_parser)

    # Export command
    export_parser = subparsers.add_parser(
        "export",
        help="Write the DOT description of a dependency graph",
    )
    export_parser.add_argument(
        "root",
        nargs="?",
        help="Directory, .py file or dotted unit name (default: configured root)",
    )
    export_parser.add_argument(
        "-o",
        "--output",
        required=True,
        help="Output DOT file",
    )
    export_parser.add_argument(
        "--view",
        choices=["graph", "focus"],
        default="graph",
        help="graph: recursive view (default); focus: direct imports only",
    )
    add_config_arguments(export_parser)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main CLI entry point.

    Returns:
        int: Exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose, getattr(args, "log_file", None))

    if args.command == "serve":
        return serve_command(args)
    elif args.command == "export":
        return export_command(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
