"""HTTP server for rendered dependency graphs."""

from depviz.server.app import APP_VERSION, create_app

__all__ = ["APP_VERSION", "create_app"]
