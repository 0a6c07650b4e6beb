"""
relmap Exceptions
=================

Errors raised across the relationship mapping pipeline.

Only two conditions ever reach a caller of the graph core:
- EntityNotFound: the root entity of a single-root build is missing
- SourceError: the transport under an entity source failed

Everything else that goes wrong while expanding a graph is recorded on the
graph and skipped.
"""


class RelmapError(Exception):
    """Base class for all relmap errors."""


class EntityNotFound(RelmapError, LookupError):
    """Raised when an entity cannot be fetched from the data source.

    Attributes:
        entity_id: The id that was looked up
        reason: Optional detail from the underlying failure
    """

    def __init__(self, entity_id, reason: str = None):
        self.entity_id = entity_id
        self.reason = reason
        message = f"Entity with ID {entity_id} not found"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class SourceError(RelmapError):
    """Raised when a data source request fails (HTTP error, network error,
    unparseable response)."""
