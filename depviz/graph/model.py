"""In-memory graph model handed from the walker to the DOT serializer.

Nodes and edges carry ordered string attribute maps. Clusters nest by
import alias and mirror the traversal: one cluster per visited unit. The
top-level :class:`DotGraph` also keeps flat node and edge lists, so edges
that cross cluster boundaries can be declared outside every cluster.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Set

DotAttrs = Dict[str, str]


@dataclass
class DotNode:
    """A rendering-ready vertex; ``id`` is the unit identity."""

    id: str
    attrs: DotAttrs = field(default_factory=dict)


@dataclass
class DotEdge:
    """A directed edge between two nodes."""

    source: DotNode
    target: DotNode
    attrs: DotAttrs = field(default_factory=dict)


@dataclass
class DotCluster:
    """A named, attributed container of nodes and child clusters.

    Attributes:
        name: Cluster name (the unit identity).
        attrs: Cluster attributes (label, colors, tooltip, URL).
        nodes: Nodes that belong directly to this cluster.
        clusters: Child clusters keyed by import alias.
    """

    name: str
    attrs: DotAttrs = field(default_factory=dict)
    nodes: List[DotNode] = field(default_factory=list)
    clusters: Dict[str, "DotCluster"] = field(default_factory=dict)

    def walk(self) -> Iterator["DotCluster"]:
        """Yield this cluster and all descendants, parents first."""
        yield self
        for child in self.clusters.values():
            yield from child.walk()

    def depth(self) -> int:
        """Number of cluster levels from this cluster down (a leaf is 1)."""
        if not self.clusters:
            return 1
        return 1 + max(child.depth() for child in self.clusters.values())


@dataclass
class DotGraph:
    """Top-level container: title, layout options, root cluster, flat lists.

    Attributes:
        title: Graph label.
        cluster: Root cluster of the traversal.
        nodes: Every node produced by the traversal; the root unit's node
            is first.
        edges: Every edge produced by the traversal.
        options: Layout options (``rankdir``, ``nodesep``, ``minlen``,
            ``nodeshape``, ``nodestyle``).
    """

    title: str
    cluster: DotCluster
    nodes: List[DotNode] = field(default_factory=list)
    edges: List[DotEdge] = field(default_factory=list)
    options: Dict[str, str] = field(default_factory=dict)

    def clustered_nodes(self) -> List[DotNode]:
        """Nodes that sit inside some cluster, in cluster order."""
        return [node for cluster in self.cluster.walk() for node in cluster.nodes]

    def all_nodes(self) -> List[DotNode]:
        """Every distinct node of the graph, top-level list first."""
        result: List[DotNode] = []
        seen: Set[str] = set()
        for node in self.nodes + self.clustered_nodes():
            if node.id not in seen:
                seen.add(node.id)
                result.append(node)
        return result

    def node_ids(self) -> Set[str]:
        return {node.id for node in self.all_nodes()}

    def find_node(self, node_id: str) -> Optional[DotNode]:
        for node in self.all_nodes():
            if node.id == node_id:
                return node
        return None

    def cluster_depth(self) -> int:
        """Number of nested cluster levels, the root cluster included."""
        return self.cluster.depth()

    def dangling_edges(self) -> List[DotEdge]:
        """Edges whose endpoints are not declared as nodes anywhere."""
        known = self.node_ids()
        return [
            edge
            for edge in self.edges
            if edge.source.id not in known or edge.target.id not in known
        ]


__all__ = ["DotAttrs", "DotCluster", "DotEdge", "DotGraph", "DotNode"]
