"""
Network Merger
==============

Builds one relationship graph per root and merges them into a network view.

Design Decisions:
-----------------
1. Only the first N roots are used (resource guard, default 10)
2. Per-root builds run concurrently; merging is sequential in root order so
   first-write-wins dedup is deterministic
3. A root that fails to build is logged and skipped; the network call itself
   never fails because of one root
4. The first successfully merged root is the display root of the tree
"""

import asyncio
from dataclasses import replace
from typing import Callable, Iterable, Optional

from ..config import TraversalConfig
from ..model.graph import RelationshipGraph
from ..model.schemas import BuildOptions
from ..reporting.tree_renderer import TreeRenderer
from .graph_builder import GraphBuilder


class NetworkMerger:
    """Merges several single-root graphs into one deduplicated graph.

    Usage:
        merger = NetworkMerger(GraphBuilder(source))
        graph = await merger.build_network([101, 102, 103])

        print(graph.root_keys)   # roots that built successfully
    """

    def __init__(
        self,
        builder: GraphBuilder,
        config: Optional[TraversalConfig] = None,
        renderer: Optional[TreeRenderer] = None,
        verbose: bool = False,
        log_func: Optional[Callable[[str], None]] = None
    ):
        """Initialize the merger.

        Args:
            builder: GraphBuilder used for each root
            config: Traversal bounds (builder's config if None)
            renderer: Tree renderer (builder's renderer if None)
            verbose: Whether to print progress messages
            log_func: Optional logging function
        """
        self.builder = builder
        self.config = config or builder.config
        self.renderer = renderer or builder.renderer
        self.verbose = verbose
        self.log_func = log_func

    def _log(self, message: str) -> None:
        if self.log_func:
            self.log_func(message)
        elif self.verbose:
            print(message)

    def default_options(self) -> BuildOptions:
        return BuildOptions(max_depth=self.config.network_max_depth)

    async def build_network(
        self,
        root_ids: Iterable[int],
        options: Optional[BuildOptions] = None
    ) -> RelationshipGraph:
        """Build and merge graphs for several roots.

        Args:
            root_ids: Root entity ids; only the first max_network_roots are used
            options: Build options (network defaults if None)

        Returns:
            Merged RelationshipGraph (possibly empty if every root failed)
        """
        options = options or self.default_options()
        capped = list(root_ids)[:self.config.max_network_roots]
        roots = list(dict.fromkeys(capped))
        self._log(f"[*] Mapping network for {len(roots)} root(s)")

        per_root = replace(options, include_rendering=False)
        graphs = await asyncio.gather(*(self._build_one(root_id, per_root) for root_id in roots))

        merged = RelationshipGraph(max_depth=options.max_depth)
        for root_id, graph in zip(roots, graphs):
            if graph is None:
                continue
            nodes_added, connections_added = merged.merge(graph)
            self._log(
                f"[*] Merged root {root_id}: +{nodes_added} nodes, +{connections_added} connections"
            )

        if options.include_rendering and merged.root is not None:
            merged.visual_tree = self.renderer.render(merged, merged.root)

        self._log(
            f"[+] Network complete: {len(merged.root_keys)}/{len(roots)} roots, "
            f"{merged.total_nodes} nodes, {merged.connection_count} connections"
        )
        return merged

    async def _build_one(self, root_id: int, options: BuildOptions) -> Optional[RelationshipGraph]:
        try:
            return await self.builder.build_from_root(root_id, options)
        except Exception as e:
            self._log(f"[!] Failed to map root {root_id}: {e}")
            return None
