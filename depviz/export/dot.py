"""DOT export for dependency graphs.

Builds a ``pydot.Dot`` digraph from a :class:`DotGraph`: one
``pydot.Cluster`` per graph cluster (pydot names them ``cluster_*``, which
Graphviz draws as frames), each holding its own nodes, and every edge
declared at the outermost scope so edges can cross cluster boundaries.

Child clusters and attributes are emitted in sorted order, so equal models
serialize to identical bytes.
"""

import logging
import re
from pathlib import Path
from typing import Dict, Iterable, Set, Union

import pydot

from depviz.errors import SerializationFailure
from depviz.graph.model import DotCluster, DotGraph, DotNode

logger = logging.getLogger("depviz.export.dot")

GRAPH_NAME = "depviz"

GRAPH_ATTRS = {
    "labeljust": "l",
    "fontname": "Arial",
    "fontsize": "14",
    "bgcolor": "lightgray",
    "style": "solid",
    "penwidth": "0.5",
    "pad": "0.0",
}

NODE_DEFAULTS = {
    "fillcolor": "honeydew",
    "fontname": "Verdana",
    "penwidth": "1.0",
    "margin": "0.05,0.0",
}

_UNSAFE_ID_CHARS = re.compile(r"[^0-9A-Za-z_]")


def _apply_attrs(obj: Union[pydot.Graph, pydot.Node, pydot.Edge], attrs: Dict[str, str]) -> None:
    for key in sorted(attrs):
        obj.set(key, str(attrs[key]))


class _DotBuilder:
    """Converts one DotGraph; holds the per-graph cluster name counter."""

    def __init__(self, graph: DotGraph) -> None:
        self.graph = graph
        self._counter = 0

    def build(self) -> pydot.Dot:
        graph = self.graph
        options = graph.options

        dot = pydot.Dot(graph_name=GRAPH_NAME, graph_type="digraph")
        graph_attrs = dict(GRAPH_ATTRS)
        graph_attrs["label"] = graph.title
        if "rankdir" in options:
            graph_attrs["rankdir"] = options["rankdir"]
        if "nodesep" in options:
            graph_attrs["nodesep"] = options["nodesep"]
        _apply_attrs(dot, graph_attrs)

        node_defaults = dict(NODE_DEFAULTS)
        if "nodeshape" in options:
            node_defaults["shape"] = options["nodeshape"]
        if "nodestyle" in options:
            node_defaults["style"] = options["nodestyle"]
        dot.set_node_defaults(**{key: node_defaults[key] for key in sorted(node_defaults)})
        if "minlen" in options:
            dot.set_edge_defaults(minlen=options["minlen"])

        dot.add_subgraph(self._cluster(graph.cluster))

        clustered: Set[str] = {node.id for node in graph.clustered_nodes()}
        for node in self._unique(graph.nodes):
            if node.id not in clustered:
                dot.add_node(self._node(node))

        for edge in graph.edges:
            dot_edge = pydot.Edge(edge.source.id, edge.target.id)
            _apply_attrs(dot_edge, edge.attrs)
            dot.add_edge(dot_edge)

        return dot

    def _cluster(self, cluster: DotCluster) -> pydot.Cluster:
        self._counter += 1
        safe = _UNSAFE_ID_CHARS.sub("_", cluster.name) or "unit"
        subgraph = pydot.Cluster(graph_name=f"{safe}_{self._counter}")
        _apply_attrs(subgraph, cluster.attrs)

        for node in cluster.nodes:
            subgraph.add_node(self._node(node))
        for key in sorted(cluster.clusters):
            subgraph.add_subgraph(self._cluster(cluster.clusters[key]))
        return subgraph

    @staticmethod
    def _node(node: DotNode) -> pydot.Node:
        dot_node = pydot.Node(node.id)
        _apply_attrs(dot_node, node.attrs)
        return dot_node

    @staticmethod
    def _unique(nodes: Iterable[DotNode]) -> Iterable[DotNode]:
        seen: Set[str] = set()
        for node in nodes:
            if node.id not in seen:
                seen.add(node.id)
                yield node


def to_pydot(graph: DotGraph) -> pydot.Dot:
    """Build the pydot representation of ``graph``."""
    return _DotBuilder(graph).build()


def serialize(graph: DotGraph) -> bytes:
    """Encode ``graph`` as a DOT description.

    Args:
        graph: Graph model produced by the walker.

    Returns:
        UTF-8 encoded DOT text.

    Raises:
        SerializationFailure: If an edge references an undeclared node or
            pydot rejects the model.
    """
    dangling = graph.dangling_edges()
    if dangling:
        first = dangling[0]
        raise SerializationFailure(
            f"edge {first.source.id} -> {first.target.id} references an unknown node "
            f"({len(dangling)} dangling edges)"
        )

    try:
        text = to_pydot(graph).to_string()
    except (TypeError, ValueError) as exc:
        raise SerializationFailure(f"cannot serialize graph {graph.title}: {exc}") from exc

    logger.debug(
        "Serialized %s: %d nodes, %d edges, %d bytes",
        graph.title,
        len(graph.all_nodes()),
        len(graph.edges),
        len(text),
    )
    return text.encode("utf-8")


def write_dot(graph: DotGraph, output_path: Path) -> None:
    """Export graph to a DOT file.

    Args:
        graph: Graph model to export.
        output_path: Output file path.
    """
    logger.info("Exporting graph to DOT: %s", output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(serialize(graph))
    logger.info(
        "DOT export completed: %d nodes, %d edges",
        len(graph.all_nodes()),
        len(graph.edges),
    )


__all__ = ["GRAPH_NAME", "serialize", "to_pydot", "write_dot"]
