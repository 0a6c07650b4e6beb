"""
relmap Relationship Graph
=========================

NetworkX-based representation of a bounded entity relationship graph.

Design Decisions:
-----------------
1. Uses a NetworkX MultiDiGraph keyed by node identity (id, kind); the edge
   key is the connection category, so one pair can carry several categories
2. Admission is first-write-wins: re-adding an identity is a no-op
3. Edges are only accepted between nodes already in the graph
4. No node may sit deeper than the graph's configured max_depth
5. Connections keep their own insertion-ordered index so iteration order is
   stable regardless of NetworkX adjacency order

The graph has a single writer: builders collect discoveries concurrently and
then admit them one at a time from the coordinating task.
"""

import networkx as nx
from typing import Iterator, Optional
from collections import defaultdict

from .schemas import Node, Connection, EntityKind, LookupFailure


class RelationshipGraph:
    """Abstraction layer over NetworkX for relationship graphs.

    Example Usage:
        graph = RelationshipGraph(max_depth=3)
        graph.add_node(Node(id=1, kind=EntityKind.COMPANY, name="Acme"))
        graph.add_node(Node(id=7, kind=EntityKind.EMPLOYEE, name="Ann", depth=1))
        graph.add_connection(Connection(7, 1, ConnectionCategory.RESPONSIBLE_FOR))

        for connection, neighbor in graph.get_neighbors(root):
            ...
    """

    def __init__(self, max_depth: int = 3):
        """Initialize an empty graph.

        Args:
            max_depth: Configured depth bound (not the observed maximum)
        """
        if max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {max_depth}")

        self._graph = nx.MultiDiGraph()
        self.max_depth = max_depth

        # Index structures
        self._connections: dict[tuple, Connection] = {}
        self._nodes_by_kind: dict[EntityKind, list[tuple]] = defaultdict(list)
        self._nodes_by_email: dict[str, list[tuple]] = defaultdict(list)

        self.root_keys: list[tuple] = []
        self.lookup_failures: list[LookupFailure] = []
        self.visual_tree: Optional[str] = None

    @property
    def nx_graph(self) -> nx.MultiDiGraph:
        """Access underlying NetworkX graph for advanced operations."""
        return self._graph

    @property
    def root_key(self) -> Optional[tuple]:
        """Identity of the first root, or None for an empty graph."""
        return self.root_keys[0] if self.root_keys else None

    @property
    def root(self) -> Optional[Node]:
        if self.root_key is None:
            return None
        return self.get_node(*self.root_key)

    def add_node(self, node: Node) -> bool:
        """Admit a node unless its identity is already present.

        Args:
            node: Node to admit

        Returns:
            True if the node was added, False if the identity already existed

        Raises:
            ValueError: If the node is deeper than max_depth
        """
        if self._graph.has_node(node.key):
            return False
        if node.depth > self.max_depth:
            raise ValueError(
                f"Node {node.key} at depth {node.depth} exceeds max_depth {self.max_depth}"
            )

        self._graph.add_node(node.key, node_obj=node, kind=node.kind, name=node.name)

        self._nodes_by_kind[node.kind].append(node.key)
        if node.email:
            self._nodes_by_email[node.email.strip().lower()].append(node.key)
        return True

    def add_connection(self, connection: Connection) -> bool:
        """Add a connection unless (from_id, to_id, category) is already present.

        Returns:
            True if the connection was added, False for a duplicate

        Raises:
            ValueError: If either endpoint is not in the graph
        """
        if connection.key in self._connections:
            return False
        for endpoint in (connection.from_key, connection.to_key):
            if not self._graph.has_node(endpoint):
                raise ValueError(
                    f"Cannot connect {connection.from_key} -> {connection.to_key}: "
                    f"node {endpoint} is not in the graph"
                )

        self._graph.add_edge(
            connection.from_key,
            connection.to_key,
            key=connection.category.value,
            connection=connection,
            strength=connection.strength
        )
        self._connections[connection.key] = connection
        return True

    def has_node(self, entity_id: int, kind: EntityKind) -> bool:
        return self._graph.has_node((entity_id, kind))

    def has_connection(self, from_id: int, to_id: int, category) -> bool:
        return (from_id, to_id, category) in self._connections

    def get_node(self, entity_id: int, kind: EntityKind) -> Optional[Node]:
        """Get a node by identity.

        Returns:
            Node or None if not found
        """
        key = (entity_id, kind)
        if not self._graph.has_node(key):
            return None
        return self._graph.nodes[key].get("node_obj")

    def get_nodes_by_kind(self, kind: EntityKind) -> Iterator[Node]:
        """Iterate over nodes of one kind in admission order."""
        for key in self._nodes_by_kind[kind]:
            yield self._graph.nodes[key]["node_obj"]

    def get_nodes_by_email(self, email: str) -> list[Node]:
        """Nodes whose email matches (case-insensitive)."""
        if not email:
            return []
        keys = self._nodes_by_email.get(email.strip().lower(), [])
        return [self._graph.nodes[key]["node_obj"] for key in keys]

    def get_neighbors(self, node: Node) -> Iterator[tuple]:
        """Yield (connection, neighbor) for every connection touching a node.

        Both directions are included; a neighbor may appear more than once if
        several categories connect the same pair.
        """
        if not self._graph.has_node(node.key):
            return

        for _, target, connection in self._graph.out_edges(node.key, data="connection"):
            yield connection, self._graph.nodes[target]["node_obj"]
        for source, _, connection in self._graph.in_edges(node.key, data="connection"):
            yield connection, self._graph.nodes[source]["node_obj"]

    def get_incoming(self, node: Node, category=None) -> Iterator[Connection]:
        """Connections pointing at a node, optionally of one category."""
        if not self._graph.has_node(node.key):
            return
        for _, _, connection in self._graph.in_edges(node.key, data="connection"):
            if category is None or connection.category == category:
                yield connection

    def get_outgoing(self, node: Node, category=None) -> Iterator[Connection]:
        """Connections leaving a node, optionally of one category."""
        if not self._graph.has_node(node.key):
            return
        for _, _, connection in self._graph.out_edges(node.key, data="connection"):
            if category is None or connection.category == category:
                yield connection

    @property
    def nodes(self) -> list[Node]:
        """All nodes in admission order."""
        return [attrs["node_obj"] for _, attrs in self._graph.nodes(data=True)]

    @property
    def connections(self) -> list[Connection]:
        """All connections in insertion order."""
        return list(self._connections.values())

    @property
    def total_nodes(self) -> int:
        """Total number of nodes in the graph."""
        return self._graph.number_of_nodes()

    @property
    def connection_count(self) -> int:
        """Total number of connections in the graph."""
        return len(self._connections)

    def merge(self, other: "RelationshipGraph") -> tuple[int, int]:
        """Merge another graph into this one.

        Nodes and connections already present are kept as they are (first
        write wins). Roots and lookup failures of the other graph are carried
        over.

        Args:
            other: Graph to merge

        Returns:
            Tuple of (nodes_added, connections_added)
        """
        nodes_added = 0
        for node in other.nodes:
            if self.add_node(node):
                nodes_added += 1

        connections_added = 0
        for connection in other.connections:
            if self.add_connection(connection):
                connections_added += 1

        for key in other.root_keys:
            if key not in self.root_keys:
                self.root_keys.append(key)
        self.lookup_failures.extend(other.lookup_failures)

        return nodes_added, connections_added

    def to_dict(self) -> dict:
        """Convert graph to dictionary for serialization."""
        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "connections": [connection.to_dict() for connection in self.connections],
            "total_nodes": self.total_nodes,
            "max_depth": self.max_depth,
            "roots": [{"id": key[0], "kind": key[1].value} for key in self.root_keys],
            "lookup_failures": [failure.to_dict() for failure in self.lookup_failures],
            "visual_tree": self.visual_tree,
        }
