"""Dependency walker: turns a loaded unit tree into a :class:`DotGraph`.

The walk is a depth-first recursion from the root unit. Each visited unit
becomes a cluster nested inside its importer's cluster, plus a node wired
to its importer's node. Three rules keep the graph finite and readable:

* standard library units are pruned,
* a unit already seen in this traversal is not expanded again,
* a branch stops once the next level would reach ``max_depth``.

All mutable traversal state lives in a :class:`TraversalContext` created
for one request, so concurrent requests never suppress each other's units.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional, Protocol, Sequence, Set, Tuple
from urllib.parse import quote

from depviz.errors import EmptyResult, LoadFailure
from depviz.graph.model import DotCluster, DotEdge, DotGraph, DotNode
from depviz.loader.classifier import default_classifier
from depviz.loader.unit import Unit

if TYPE_CHECKING:
    from depviz.config import ServerConfig

logger = logging.getLogger("depviz.graph.walker")

GRAPH_OPTIONS = {
    "minlen": "2",
    "nodesep": "0.35",
    "nodeshape": "box",
    "nodestyle": "filled,rounded",
    "rankdir": "LR",
}

EDGE_ATTRS = {"color": "saddlebrown"}

WalkResult = Tuple[DotCluster, List[DotNode], List[DotEdge]]


class Classifier(Protocol):
    def is_standard(self, path: str) -> bool: ...


@dataclass
class TraversalContext:
    """Per-request traversal state.

    Attributes:
        max_depth: Depth at which branches stop expanding.
        sort_imports: Expand imports in alias order.
        seen: Identities of units already claimed by this traversal.
        nodes: Nodes built so far, by unit identity.
    """

    max_depth: int
    sort_imports: bool = True
    seen: Set[str] = field(default_factory=set)
    nodes: Dict[str, DotNode] = field(default_factory=dict)

    def mark_seen(self, path: str) -> bool:
        """Claim ``path``; return False if it was already claimed."""
        if path in self.seen:
            return False
        self.seen.add(path)
        return True


def unit_url(unit: Unit) -> str:
    """Link that roots a fresh graph at ``unit``."""
    return f"/?f={quote(unit.locator, safe='/')}"


def unit_to_node(unit: Unit) -> DotNode:
    node = DotNode(
        id=unit.path,
        attrs={
            "fillcolor": "lightblue",
            "label": unit.name,
            "penwidth": "0.5",
        },
    )
    if unit.errors:
        node.attrs["color"] = "red"
        node.attrs["tooltip"] = "\n".join(str(err) for err in unit.errors)
    return node


def unit_cluster(unit: Unit, label: Optional[str] = None) -> DotCluster:
    """New cluster for ``unit`` seeded with its presentation attributes."""
    cluster = DotCluster(name=unit.path)
    cluster.attrs = {
        "penwidth": "0.8",
        "fontsize": "16",
        "label": label if label is not None else unit.path,
        "style": "filled",
        "fillcolor": "lightyellow",
        "URL": unit_url(unit),
        "fontname": "Tahoma bold",
        "tooltip": f"package: {unit.path}",
        "rank": "sink",
        "bgcolor": "#e6ecfa",
    }
    return cluster


class DependencyWalker:
    """Recursive traversal producing clusters, nodes and edges.

    Args:
        classifier: Object with ``is_standard(path)``; standard units are
            pruned from the graph.
        max_depth: Maximum traversal depth (root is depth 0).
        sort_imports: Expand imports sorted by alias rather than in the
            loader's insertion order.
    """

    def __init__(
        self,
        classifier: Optional[Classifier] = None,
        max_depth: int = 3,
        sort_imports: bool = True,
    ) -> None:
        self.classifier = classifier or default_classifier()
        self.max_depth = max_depth
        self.sort_imports = sort_imports

    def new_context(self, root: Unit) -> TraversalContext:
        """Fresh traversal state with the root already claimed."""
        ctx = TraversalContext(max_depth=self.max_depth, sort_imports=self.sort_imports)
        ctx.mark_seen(root.path)
        return ctx

    def walk(self, unit: Unit, depth: int, ctx: TraversalContext) -> WalkResult:
        """Expand ``unit`` at ``depth``.

        Returns:
            (cluster, nodes, edges). ``nodes[0]`` is always the unit's own
            node; for non-root calls the node also sits in ``cluster``.
        """
        cluster = unit_cluster(unit)
        own = unit_to_node(unit)
        ctx.nodes[unit.path] = own
        nodes: List[DotNode] = [own]
        edges: List[DotEdge] = []

        for alias, dep in self._imports(unit, ctx.sort_imports):
            if self.classifier.is_standard(dep.path):
                continue
            if not ctx.mark_seen(dep.path):
                logger.debug("Unit %s seen before, not expanding from %s", dep.path, unit.path)
                existing = ctx.nodes.get(dep.path)
                if existing is not None:
                    edges.append(DotEdge(source=own, target=existing, attrs=dict(EDGE_ATTRS)))
                continue
            if depth + 1 == ctx.max_depth:
                logger.debug("Depth limit %d reached at %s", ctx.max_depth, dep.path)
                continue

            child_cluster, child_nodes, child_edges = self.walk(dep, depth + 1, ctx)
            edges.append(DotEdge(source=own, target=child_nodes[0], attrs=dict(EDGE_ATTRS)))
            edges.extend(child_edges)
            nodes.extend(child_nodes)
            cluster.clusters[alias] = child_cluster

        if depth > 0:
            cluster.nodes.append(own)

        return cluster, nodes, edges

    @staticmethod
    def _imports(unit: Unit, sort: bool) -> Iterable[Tuple[str, Unit]]:
        if sort:
            return sorted(unit.imports.items(), key=lambda item: item[0])
        return list(unit.imports.items())

    def focus(self, unit: Unit) -> WalkResult:
        """One-level view: the unit plus a cluster per direct import."""
        cluster = DotCluster(name="focus")
        cluster.attrs = {
            "bgcolor": "#e6ecfa",
            "label": unit.name,
            "labelloc": "t",
            "labeljust": "c",
            "fontsize": "18",
        }

        own = unit_to_node(unit)
        nodes: List[DotNode] = [own]
        edges: List[DotEdge] = []

        for alias, dep in self._imports(unit, self.sort_imports):
            if self.classifier.is_standard(dep.path):
                continue
            node = unit_to_node(dep)
            child = unit_cluster(dep, label=alias)
            child.nodes.append(node)
            edges.append(DotEdge(source=own, target=node, attrs=dict(EDGE_ATTRS)))
            cluster.clusters[alias] = child

        return cluster, nodes, edges


def check_root(units: Sequence[Unit]) -> Unit:
    """Return the root unit, or raise if the load cannot be graphed.

    Raises:
        EmptyResult: If ``units`` is empty.
        LoadFailure: If the root unit carries errors.
    """
    if not units:
        raise EmptyResult("no unit found")
    root = units[0]
    if root.errors:
        details = "; ".join(str(err) for err in root.errors)
        raise LoadFailure(f"load {root.path} failed: {details}")
    return root


def _walker_for(config: "ServerConfig", classifier: Optional[Classifier]) -> DependencyWalker:
    return DependencyWalker(
        classifier=classifier,
        max_depth=config.max_depth,
        sort_imports=config.sort_imports,
    )


def build_graph(
    units: Sequence[Unit],
    config: "ServerConfig",
    classifier: Optional[Classifier] = None,
) -> DotGraph:
    """Walk the root of ``units`` into a complete :class:`DotGraph`."""
    root = check_root(units)
    walker = _walker_for(config, classifier)
    ctx = walker.new_context(root)

    cluster, nodes, edges = walker.walk(root, 0, ctx)
    logger.info(
        "Built graph for %s: %d nodes, %d edges, %d units seen",
        root.path,
        len(nodes),
        len(edges),
        len(ctx.seen),
    )
    return DotGraph(
        title=root.path,
        cluster=cluster,
        nodes=nodes,
        edges=edges,
        options=dict(GRAPH_OPTIONS),
    )


def build_focus_graph(
    units: Sequence[Unit],
    config: "ServerConfig",
    classifier: Optional[Classifier] = None,
) -> DotGraph:
    """Build the one-level focus view of the root of ``units``."""
    root = check_root(units)
    cluster, nodes, edges = _walker_for(config, classifier).focus(root)
    return DotGraph(
        title=root.path,
        cluster=cluster,
        nodes=nodes,
        edges=edges,
        options=dict(GRAPH_OPTIONS),
    )


__all__ = [
    "DependencyWalker",
    "GRAPH_OPTIONS",
    "TraversalContext",
    "build_focus_graph",
    "build_graph",
    "check_root",
    "unit_cluster",
    "unit_to_node",
    "unit_url",
]
