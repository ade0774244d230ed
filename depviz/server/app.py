"""HTTP surface: a single ``GET /`` endpoint returning the rendered graph.

``/?f=<unit>`` roots the graph at ``unit`` (``config.default_root`` when
absent); ``view=focus`` switches to the one-level view. Failures are
reported as ``500`` with a plain-text message.
"""

import logging
from pathlib import Path
from typing import Literal, Optional

from fastapi import FastAPI
from fastapi.responses import FileResponse, PlainTextResponse
from starlette.background import BackgroundTask

from depviz.config import ServerConfig
from depviz.errors import DepvizError
from depviz.export.render import media_type
from depviz.loader import StandardClassifier
from depviz.runtime.api import classifier_for, visualize

logger = logging.getLogger("depviz.server.app")

APP_VERSION = "0.1.0"


def _discard_artifact(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass
    except OSError as exc:
        logger.warning("Failed to remove rendered artifact %s: %s", path, exc)


def create_app(
    config: Optional[ServerConfig] = None,
    classifier: Optional[StandardClassifier] = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        config: Server configuration; defaults when omitted.
        classifier: Shared standard library classifier; built from
            ``config`` when omitted.

    Returns:
        Configured FastAPI instance.
    """
    config = config or ServerConfig.default()
    classifier = classifier or classifier_for(config)

    app = FastAPI(title="depviz", version=APP_VERSION)
    app.state.config = config

    @app.get("/")
    def index(f: Optional[str] = None, view: Literal["graph", "focus"] = "graph"):
        pattern = f or config.default_root
        logger.info("Rendering %s (view=%s)", pattern, view)
        try:
            artifact = visualize(pattern, config, classifier=classifier, view=view)
        except DepvizError as exc:
            logger.error("Request for %s failed: %s", pattern, exc)
            return PlainTextResponse(str(exc), status_code=500)

        return FileResponse(
            artifact,
            media_type=media_type(config.output_format),
            background=BackgroundTask(_discard_artifact, artifact),
        )

    return app


__all__ = ["APP_VERSION", "create_app"]
