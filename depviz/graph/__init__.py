"""Public graph API surface."""

from depviz.graph.model import DotAttrs, DotCluster, DotEdge, DotGraph, DotNode
from depviz.graph.walker import (
    GRAPH_OPTIONS,
    DependencyWalker,
    TraversalContext,
    build_focus_graph,
    build_graph,
    check_root,
    unit_cluster,
    unit_to_node,
    unit_url,
)

__all__ = [
    "DependencyWalker",
    "DotAttrs",
    "DotCluster",
    "DotEdge",
    "DotGraph",
    "DotNode",
    "GRAPH_OPTIONS",
    "TraversalContext",
    "build_focus_graph",
    "build_graph",
    "check_root",
    "unit_cluster",
    "unit_to_node",
    "unit_url",
]
