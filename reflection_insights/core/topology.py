"""
Bridge Topology
===============

Structural view of a bridge set as a directed graph of reflections.

STRUCTURE, NOT IMPORTANCE:
==========================
ALLOWED:
- Graph construction from bridges
- Narrative threads (weakly connected components)
- Path finding (traceability)
- Structural metrics (density, component count, longest chain)

FORBIDDEN:
- Centrality measures (PageRank, Betweenness) - implies ranking
- Re-weighting or filtering bridges
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

import networkx as nx

from ..contracts.bridges import NarrativeBridge


@dataclass(frozen=True)
class GraphMetrics:
    """Immutable structural metrics for a bridge graph."""
    node_count: int
    edge_count: int
    density: float
    is_connected: bool
    thread_count: int
    longest_chain: Optional[int] = None  # edges on the longest directed path


class BridgeGraph:
    """
    Directed graph of reflections linked by narrative bridges.

    Nodes are reflection ids; each edge carries the bridge's weight and
    primary type.
    """

    def __init__(self):
        self._graph = nx.DiGraph()

    @staticmethod
    def from_bridges(bridges: Iterable[NarrativeBridge]) -> BridgeGraph:
        graph = BridgeGraph()
        graph.build(bridges)
        return graph

    def build(self, bridges: Iterable[NarrativeBridge]) -> None:
        """
        Build the graph from bridges.

        Replaces internal graph state.
        """
        self._graph = nx.DiGraph()
        for bridge in bridges:
            self._graph.add_edge(
                bridge.from_id,
                bridge.to_id,
                weight=bridge.weight,
                bridge_type=bridge.primary_type.value,
            )

    def threads(self) -> List[Tuple[str, ...]]:
        """
        Narrative threads: weakly connected groups of reflections.

        Each thread is sorted by id; threads are ordered by their first id.
        """
        if not self._graph:
            return []
        components = [tuple(sorted(c)) for c in nx.weakly_connected_components(self._graph)]
        return sorted(components)

    def thread_of(self, reflection_id: str) -> Tuple[str, ...]:
        """The thread containing a reflection, or an empty tuple."""
        if reflection_id not in self._graph:
            return ()
        return tuple(sorted(nx.node_connected_component(self._graph.to_undirected(), reflection_id)))

    def metrics(self) -> GraphMetrics:
        if not self._graph:
            return GraphMetrics(0, 0, 0.0, False, 0, None)

        longest = None
        if nx.is_directed_acyclic_graph(self._graph):
            longest = nx.dag_longest_path_length(self._graph, weight=None)

        return GraphMetrics(
            node_count=self._graph.number_of_nodes(),
            edge_count=self._graph.number_of_edges(),
            density=nx.density(self._graph),
            is_connected=nx.is_weakly_connected(self._graph),
            thread_count=nx.number_weakly_connected_components(self._graph),
            longest_chain=longest,
        )

    def get_shortest_path(self, start_id: str, end_id: str) -> Optional[List[str]]:
        """
        Forward path between two reflections along bridges.

        A purely structural trace; it does not imply causality.
        """
        try:
            return nx.shortest_path(self._graph, source=start_id, target=end_id)
        except (nx.NetworkXNoPath, nx.NodeNotFound):
            return None

    def clear(self):
        self._graph.clear()
