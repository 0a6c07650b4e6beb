"""
relmap Reporting Module
=======================

Text rendering and report output.

Components:
- tree_renderer.py: Deterministic, cycle-safe text tree of a graph
- report_builder.py: JSON report files and the plain-text CLI report
"""

from .tree_renderer import TreeRenderer
from .report_builder import ReportBuilder, generate_text_report
