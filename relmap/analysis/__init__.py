"""
relmap Analysis Module
======================

Graph construction and relationship assessment.

Components:
- connection_scoring.py: Heuristic connection strength
- graph_builder.py: Bounded expansion from one root
- network_merger.py: Multi-root builds merged into one network
- summarizer.py: Statistics and per-company summaries

Design Philosophy:
- Traversal is deterministic: same source data, same graph
- One bad lookup never aborts a build; only a missing root does
"""

from .connection_scoring import ConnectionScorer
from .graph_builder import GraphBuilder
from .network_merger import NetworkMerger
from .summarizer import RelationshipSummarizer
