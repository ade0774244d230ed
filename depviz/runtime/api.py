"""Library-facing helpers for rendering one dependency graph.

``visualize`` runs the whole request pipeline (load, walk, serialize,
render) and returns the path of the rendered artifact. ``describe`` stops
after serialization and returns the DOT text. Every call builds its own
loader and traversal state; only the standard library classifier may be
shared between calls.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from depviz.config import ServerConfig
from depviz.errors import LoadFailure
from depviz.export.dot import serialize
from depviz.export.render import render
from depviz.graph import DotGraph, build_focus_graph, build_graph
from depviz.loader import StandardClassifier, Unit, default_classifier, load_units

logger = logging.getLogger("depviz.runtime.api")

VIEWS = ("graph", "focus")


def classifier_for(config: ServerConfig) -> StandardClassifier:
    """Classifier honoring ``config.standard_fail_open``."""
    if config.standard_fail_open:
        return default_classifier()
    return StandardClassifier(fail_open=False)


def _load(pattern: str, config: ServerConfig, classifier: StandardClassifier) -> List[Unit]:
    try:
        return load_units(pattern, config, classifier=classifier)
    except OSError as exc:
        raise LoadFailure(f"load unit {pattern} failed: {exc}") from exc


def build(
    pattern: str,
    config: Optional[ServerConfig] = None,
    classifier: Optional[StandardClassifier] = None,
    view: str = "graph",
) -> DotGraph:
    """Load ``pattern`` and build its graph model.

    Raises:
        ValueError: If ``view`` is unknown.
        LoadFailure: If the root unit cannot be loaded.
    """
    if view not in VIEWS:
        raise ValueError(f"unknown view {view!r}, expected one of {VIEWS}")
    config = config or ServerConfig.default()
    classifier = classifier or classifier_for(config)

    units = _load(pattern, config, classifier)
    builder = build_focus_graph if view == "focus" else build_graph
    return builder(units, config, classifier=classifier)


def describe(
    pattern: str,
    config: Optional[ServerConfig] = None,
    classifier: Optional[StandardClassifier] = None,
    view: str = "graph",
) -> bytes:
    """DOT description of the graph rooted at ``pattern``."""
    return serialize(build(pattern, config, classifier=classifier, view=view))


def visualize(
    pattern: str,
    config: Optional[ServerConfig] = None,
    classifier: Optional[StandardClassifier] = None,
    view: str = "graph",
) -> Path:
    """Render the graph rooted at ``pattern``.

    Args:
        pattern: Directory, ``.py`` file or dotted unit name.
        config: Server configuration; defaults when omitted.
        classifier: Standard library classifier; built from ``config``
            when omitted.
        view: ``"graph"`` for the recursive view, ``"focus"`` for direct
            imports only.

    Returns:
        Path of the rendered artifact. The caller deletes it.

    Raises:
        LoadFailure: If the root unit cannot be loaded (EmptyResult when
            nothing was found).
        SerializationFailure: If the graph cannot be encoded.
        RenderFailure: If Graphviz fails.
    """
    config = config or ServerConfig.default()
    description = describe(pattern, config, classifier=classifier, view=view)
    logger.debug("Rendering %s as %s", pattern, config.output_format)
    return render(
        description,
        output_format=config.output_format,
        program=config.render_program,
        timeout=config.render_timeout,
    )


__all__ = ["VIEWS", "build", "classifier_for", "describe", "visualize"]
