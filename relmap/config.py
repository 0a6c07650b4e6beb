"""
relmap Configuration Module
===========================

Centralized configuration management for the relmap framework.
Supports environment variables for sensitive data (API keys, endpoints).

Design Decision:
- Configuration is a dataclass tree that can be passed through the pipeline
- Scoring heuristics are plain numbers here so deployments can tune them
- Traversal bounds live next to the scoring weights they interact with
"""

import os
from dataclasses import dataclass, field, asdict
from typing import Optional


@dataclass
class ScoringConfig:
    """Weights used by the ConnectionScorer.

    Attributes:
        base_strengths: Starting strength per connection category
        inactive_penalty: Multiplier applied when either endpoint is inactive
        email_bonus: Added when both endpoints have an email address
        phone_bonus: Added when both endpoints have a phone number
        strong_threshold: Strength at or above which a connection counts as strong
    """
    base_strengths: dict = field(default_factory=lambda: {
        "responsible_for": 0.9,   # Account ownership
        "parent_of": 0.8,         # Company hierarchy
        "child_of": 0.8,
        "contact_of": 0.7,        # Contact person at a company
        "related_to": 0.5,        # Same party seen under another kind
    })
    default_strength: float = 0.5
    inactive_penalty: float = 0.7
    email_bonus: float = 0.1
    phone_bonus: float = 0.1
    strong_threshold: float = 0.8


@dataclass
class TraversalConfig:
    """Bounds for graph expansion.

    Attributes:
        max_depth: Default expansion depth for single-root builds
        network_max_depth: Default expansion depth for network builds
        max_depth_limit: Largest depth the bridge/CLI accept
        associate_sample_size: Contacts taken per company (first N)
        max_network_roots: Roots taken per network build (first N)
        max_concurrent_expansions: Nodes expanded at once within one level
        follow_reporting_lines: Expand employees to their own responsible party
        link_same_party: Add related_to links between kinds sharing an email
    """
    max_depth: int = 3
    network_max_depth: int = 2
    max_depth_limit: int = 5
    associate_sample_size: int = 5
    max_network_roots: int = 10
    max_concurrent_expansions: int = 8
    follow_reporting_lines: bool = False
    link_same_party: bool = True


@dataclass
class SourceConfig:
    """Configuration for the Workbook CRM API client.

    Attributes:
        api_base: Base URL of the Workbook instance
        api_key: Bearer token (loaded from environment if not provided)
        timeout: Request timeout in seconds
    """
    api_base: Optional[str] = None
    api_key: Optional[str] = None
    timeout: float = 30.0

    def __post_init__(self):
        """Load endpoint and key from environment if not explicitly provided."""
        if self.api_base is None:
            self.api_base = os.environ.get("WORKBOOK_API_URL")
        if self.api_key is None:
            self.api_key = os.environ.get("WORKBOOK_API_KEY")


@dataclass
class OutputConfig:
    """Configuration for output and reporting.

    Attributes:
        output_dir: Directory for output files
        generate_json: Whether to write the JSON report
        include_tree: Whether to render the relationship tree
    """
    output_dir: str = "output"
    generate_json: bool = True
    include_tree: bool = True


@dataclass
class RelmapConfig:
    """Main configuration container for relmap.

    Usage:
        config = RelmapConfig()  # Uses all defaults
        config = RelmapConfig(traversal=TraversalConfig(max_depth=2))
    """
    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    traversal: TraversalConfig = field(default_factory=TraversalConfig)
    source: SourceConfig = field(default_factory=SourceConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    verbose: bool = False

    @classmethod
    def from_dict(cls, config_dict: dict) -> "RelmapConfig":
        """Create configuration from a dictionary.

        Useful for loading from JSON files or CLI arguments.
        """
        scoring = ScoringConfig(**config_dict.get("scoring", {}))
        traversal = TraversalConfig(**config_dict.get("traversal", {}))
        source = SourceConfig(**config_dict.get("source", {}))
        output = OutputConfig(**config_dict.get("output", {}))

        return cls(
            scoring=scoring,
            traversal=traversal,
            source=source,
            output=output,
            verbose=config_dict.get("verbose", False)
        )

    def to_dict(self) -> dict:
        """Convert configuration to dictionary for serialization."""
        return asdict(self)


# Default global configuration instance
_default_config: Optional[RelmapConfig] = None


def get_config() -> RelmapConfig:
    """Get the global configuration instance."""
    global _default_config
    if _default_config is None:
        _default_config = RelmapConfig()
    return _default_config


def set_config(config: RelmapConfig) -> None:
    """Set the global configuration instance."""
    global _default_config
    _default_config = config
