"""
Integration Bridge Module
=========================

High-level interface for presentation layers (CLI, chat tools, GUIs).

This module orchestrates a whole mapping run:
1. Target selection (explicit ids, company name search, or top companies)
2. Graph building (single root) or network merging (several roots)
3. Company summaries and statistics
4. Optional JSON report

Design Decisions:
-----------------
1. Single entry point (map_relationships) plus a sync wrapper (run_mapping)
2. Returns MappingResult which contains everything a presentation layer needs
3. A missing root becomes an unsuccessful result, not an exception
4. Progress updates via callback for real-time display
"""

import asyncio
from typing import Callable, Optional

from ..config import RelmapConfig, get_config
from ..exceptions import EntityNotFound
from ..analysis.connection_scoring import ConnectionScorer
from ..analysis.graph_builder import GraphBuilder
from ..analysis.network_merger import NetworkMerger
from ..analysis.summarizer import RelationshipSummarizer
from ..ingestion.entity_source import CompanyDirectory
from ..model.schemas import BuildOptions, MappingResult
from ..reporting.report_builder import ReportBuilder


NAME_SEARCH_LIMIT = 5


async def select_targets(
    source,
    company_ids: Optional[list] = None,
    company_name: Optional[str] = None,
    include_inactive: bool = False,
    limit: int = 10
) -> list:
    """Decide which company ids to map.

    Args:
        source: Entity source (must be a CompanyDirectory for name/top lookups)
        company_ids: Explicit ids, used as given
        company_name: Name fragment to search for (first 5 matches)
        include_inactive: Whether top-company selection includes inactive ones
        limit: Number of top companies when neither ids nor a name are given

    Returns:
        List of company ids (possibly empty)
    """
    if company_ids:
        return list(company_ids)

    if not isinstance(source, CompanyDirectory):
        raise ValueError("Source cannot search companies; pass explicit company ids")

    if company_name:
        matches = await source.find_companies_by_name(company_name)
        return [entity.id for entity in matches[:NAME_SEARCH_LIMIT]]

    companies = await source.list_companies(include_inactive=include_inactive)
    return [entity.id for entity in companies[:limit]]


async def map_relationships(
    source,
    company_ids: Optional[list] = None,
    company_name: Optional[str] = None,
    max_depth: Optional[int] = None,
    include_inactive: bool = False,
    include_tree: Optional[bool] = None,
    config: Optional[RelmapConfig] = None,
    progress_callback: Optional[Callable[[str], None]] = None,
    save_report: bool = False
) -> MappingResult:
    """Main entry point for relationship mapping.

    Args:
        source: EntitySource to expand against
        company_ids: Company ids to map
        company_name: Company name to search for (alternative to ids)
        max_depth: Expansion depth, 1-5 (config default if None)
        include_inactive: Whether to include inactive entities
        include_tree: Whether to render the text tree (config default if None)
        config: relmap configuration
        progress_callback: Optional callback for progress updates
        save_report: Whether to write the JSON report

    Returns:
        MappingResult with summaries, stats, tree and graph

    Raises:
        ValueError: If max_depth is outside 1..max_depth_limit
    """
    config = config or get_config()
    traversal = config.traversal

    def log(message: str):
        """Log message to callback if provided."""
        if progress_callback:
            progress_callback(message)
        elif config.verbose:
            print(message)

    if include_tree is None:
        include_tree = config.output.include_tree

    log("[*] Starting relationship mapping...")
    targets = await select_targets(
        source,
        company_ids=company_ids,
        company_name=company_name,
        include_inactive=include_inactive,
        limit=traversal.max_network_roots
    )
    if not targets:
        log("[!] No companies found")
        return MappingResult(message="No companies found matching the criteria", success=False)

    single = len(targets) == 1
    if max_depth is None:
        max_depth = traversal.max_depth if single else traversal.network_max_depth
    if not 1 <= max_depth <= traversal.max_depth_limit:
        raise ValueError(f"max_depth must be between 1 and {traversal.max_depth_limit}, got {max_depth}")

    options = BuildOptions(
        max_depth=max_depth,
        include_inactive=include_inactive,
        include_rendering=include_tree
    )
    builder = GraphBuilder(
        source,
        config=traversal,
        scorer=ConnectionScorer(config.scoring),
        log_func=log
    )

    if single:
        try:
            graph = await builder.build_from_root(targets[0], options)
        except EntityNotFound as e:
            log(f"[!] {e}")
            return MappingResult(message=f"Error mapping relationships: {e}", success=False)
    else:
        merger = NetworkMerger(builder, log_func=log)
        graph = await merger.build_network(targets, options)

    summarizer = RelationshipSummarizer(graph, config.scoring)
    relationships = summarizer.summarize_companies()

    result = MappingResult(
        relationships=relationships,
        network_map=graph.visual_tree if include_tree else None,
        total_mapped=graph.total_nodes,
        total_connections=graph.connection_count,
        stats=summarizer.get_relationship_stats(),
        graph=graph,
        message=(
            f"Successfully mapped {len(relationships)} companies with "
            f"{graph.connection_count} connections across {graph.total_nodes} total entities "
            f"(companies, contacts, employees)."
        ),
        success=graph.total_nodes > 0,
        metadata={
            "targets": targets,
            "max_depth": max_depth,
            "include_inactive": include_inactive,
            "skipped_lookups": len(graph.lookup_failures),
        }
    )
    if not result.success:
        result.message = "No companies could be mapped"

    if save_report:
        path = ReportBuilder(config.output.output_dir).save_json(result)
        log(f"[+] Report saved to {path}")

    log(f"[+] {result.message}")
    return result


def run_mapping(source, **kwargs) -> MappingResult:
    """Synchronous wrapper around map_relationships.

    Accepts the same keyword arguments. Must not be called from inside a
    running event loop.
    """
    return asyncio.run(map_relationships(source, **kwargs))
