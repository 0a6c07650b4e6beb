"""
relmap Ingestion Module
=======================

Entity sources the graph builder can expand against.

Components:
- entity_source.py: EntitySource / CompanyDirectory protocols, record parsing
- json_loader.py: In-memory source from a Workbook JSON export
- workbook_client.py: Async httpx client for the live Workbook API
"""

from .entity_source import (
    EntitySource,
    CompanyDirectory,
    entity_from_resource,
    entity_from_contact,
)
from .json_loader import JsonEntitySource
from .workbook_client import WorkbookClient
