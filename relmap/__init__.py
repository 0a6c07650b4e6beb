"""
relmap - Entity Relationship Mapping for Workbook CRM
=====================================================

Discovers how companies, employees and contact persons in a Workbook CRM
relate to each other, scores those relationships and renders them as a tree.

Architecture Overview:
----------------------
- ingestion/: Entity sources (JSON export, live Workbook API)
- model/: Graph representation and typed data models
- analysis/: Scoring, graph building, network merging, summaries
- reporting/: Text tree rendering and report generation
- integration/: Bridge used by the CLI and other front ends

Design Decisions:
-----------------
1. NetworkX is used as the graph backend
2. All data models use Python dataclasses for type safety and clarity
3. Entity lookups are async so one traversal level expands concurrently
4. A build either returns a complete graph or fails on a missing root;
   everything below the root is best effort
"""

__version__ = "1.0.0"

from .config import RelmapConfig
from .exceptions import RelmapError, EntityNotFound, SourceError
from .model import (
    BuildOptions,
    Connection,
    ConnectionCategory,
    Entity,
    EntityKind,
    Node,
    RelationshipGraph,
)
from .analysis import ConnectionScorer, GraphBuilder, NetworkMerger, RelationshipSummarizer
from .reporting import TreeRenderer
