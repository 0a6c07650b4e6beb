"""
relmap Model Module
===================

Contains the core data models and graph representation for CRM entities.

Key Components:
- schemas.py: Typed dataclasses for entities, nodes, connections and results
- graph.py: NetworkX-based relationship graph with identity dedup

Design Philosophy:
- A node's identity is (id, kind), a connection's is (from_id, to_id, category)
- The graph enforces its own invariants; builders only decide what to add
"""

from .schemas import (
    EntityKind,
    ResourceType,
    ConnectionCategory,
    ConnectionType,
    Entity,
    Node,
    Connection,
    BuildOptions,
    LookupFailure,
    RelationshipStats,
    CompanySummary,
    MappingResult,
)
from .graph import RelationshipGraph
