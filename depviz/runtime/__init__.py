"""Request pipeline: load, walk, serialize, render."""

from depviz.runtime.api import VIEWS, build, classifier_for, describe, visualize

__all__ = ["VIEWS", "build", "classifier_for", "describe", "visualize"]
