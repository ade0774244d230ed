"""Graph export: DOT serialization and Graphviz rendering."""

from depviz.export.dot import serialize, to_pydot, write_dot
from depviz.export.render import MEDIA_TYPES, media_type, render

__all__ = ["MEDIA_TYPES", "media_type", "render", "serialize", "to_pydot", "write_dot"]
