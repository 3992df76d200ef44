import logging
from collections import Counter, defaultdict
from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Set, Tuple

import networkx as nx

from collabgraph.constants import UNKNOWN_GROUP
from collabgraph.data_loader import WorkItem
from collabgraph.relations import is_pair, is_wait

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Edge:
    source: str
    target: str
    relation: str
    count: int


@dataclass(frozen=True)
class Node:
    id: str
    group: str
    degree: int = 0
    pair_count: int = 0
    outbound_wait: int = 0
    inbound_wait: int = 0
    # owned references per relation kind, every kind we saw for this member
    relation_counts: Dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class CollaborationGraph:
    nodes: Tuple[Node, ...]
    edges: Tuple[Edge, ...]

    def node(self, node_id: str):
        for n in self.nodes:
            if n.id == node_id:
                return n
        return None

    def node_ids(self) -> List[str]:
        return [n.id for n in self.nodes]

    def neighbors(self, node_id: str) -> Set[str]:
        """everything directly connected, either direction"""
        out = set()
        for e in self.edges:
            if e.source == node_id:
                out.add(e.target)
            elif e.target == node_id:
                out.add(e.source)
        return out

    def is_empty(self) -> bool:
        return not self.nodes


def resolve_groups(items: Sequence[WorkItem]) -> Dict[str, str]:
    # first group we see for an owner wins, no reconciliation beyond that
    groups = {}
    for item in items:
        if item.owner not in groups and item.group:
            groups[item.owner] = item.group
    return groups


def aggregate_edges(items: Sequence[WorkItem]) -> List[Edge]:
    """collapse repeated (owner, collaborator, relation) triples into counted edges"""
    counts = Counter()
    for item in items:
        for name, relation in item.references():
            counts[(item.owner, name, relation)] += 1

    # Counter keeps first-insertion order, so edge order is stable run to run
    return [Edge(source=s, target=t, relation=r, count=c) for (s, t, r), c in counts.items()]


def build_graph(items: Sequence[WorkItem]) -> CollaborationGraph:

    items = list(items or [])

    # node set in order of first appearance, owner or collaborator
    order = {}
    for item in items:
        order.setdefault(item.owner, None)
        for name, _ in item.references():
            order.setdefault(name, None)

    edges = aggregate_edges(items)
    groups = resolve_groups(items)

    degree = Counter()
    pair = Counter()
    outbound = Counter()
    inbound = Counter()
    rel_counts = defaultdict(Counter)

    for e in edges:
        degree[e.source] += e.count
        if e.target != e.source:
            degree[e.target] += e.count
        rel_counts[e.source][e.relation] += e.count
        if is_pair(e.relation):
            pair[e.source] += e.count
        elif is_wait(e.relation):
            outbound[e.source] += e.count
            # waiting on yourself blocks nobody
            if e.target != e.source:
                inbound[e.target] += e.count

    nodes = tuple(
        Node(
            id=name,
            group=groups.get(name, UNKNOWN_GROUP),
            degree=degree[name],
            pair_count=pair[name],
            outbound_wait=outbound[name],
            inbound_wait=inbound[name],
            relation_counts=dict(rel_counts[name]),
        )
        for name in order
    )

    logger.debug("built collaboration graph: %d nodes, %d edges", len(nodes), len(edges))
    return CollaborationGraph(nodes=nodes, edges=tuple(edges))


def to_networkx(graph: CollaborationGraph) -> nx.MultiDiGraph:
    """multigraph, one edge per aggregated relation (so pair + wait between the same two survive)"""
    G = nx.MultiDiGraph()
    for n in graph.nodes:
        G.add_node(n.id, group=n.group, degree=n.degree)
    for e in graph.edges:
        G.add_edge(e.source, e.target, key=e.relation, relation=e.relation, count=e.count)
    return G
