"""
relmap Integration Module
=========================

Bridge between presentation layers and the mapping pipeline.
"""

from .bridge import map_relationships, run_mapping, select_targets
