"""
Relationship Graph Builder
==========================

Bounded expansion of a relationship graph from one root entity.

Expansion Rules:
- Company nodes expand to their responsible employee; client, supplier and
  prospect companies also expand to their contacts (first N contacts only)
- Employee nodes expand to their own responsible party when reporting lines
  are followed
- Contact nodes never expand
- Nodes at max_depth are kept but never expanded

Design Decisions:
-----------------
1. Level-by-level: every node of the current frontier is expanded
   concurrently, and for each node the responsible-party and associate
   lookups also run concurrently
2. Expansions only return discoveries. The coordinating task admits them in
   frontier order, so the graph has a single writer and identical inputs give
   identical graphs
3. A failed lookup below the root is logged, recorded on the graph and
   skipped; only a missing root aborts the build
"""

import asyncio
from dataclasses import dataclass, field
from typing import Callable, Optional

from ..config import TraversalConfig, ScoringConfig
from ..exceptions import EntityNotFound
from ..model.graph import RelationshipGraph
from ..model.schemas import (
    Entity, Node, Connection, EntityKind, ConnectionCategory,
    ConnectionType, BuildOptions, LookupFailure, ResourceType
)
from ..reporting.tree_renderer import TreeRenderer
from .connection_scoring import ConnectionScorer


@dataclass
class Discovery:
    """A related entity found while expanding a parent.

    The resulting connection always runs from the discovered entity to the
    parent (employee -> company, contact -> company, manager -> employee).
    """
    entity: Entity
    category: ConnectionCategory


@dataclass
class Expansion:
    """Everything one node's lookups produced."""
    discoveries: list = field(default_factory=list)
    failures: list = field(default_factory=list)


class GraphBuilder:
    """Builds a single-root relationship graph.

    Usage:
        builder = GraphBuilder(source)
        graph = await builder.build_from_root(101, BuildOptions(max_depth=2))

        print(graph.total_nodes)
        print(graph.visual_tree)
    """

    def __init__(
        self,
        source,
        config: Optional[TraversalConfig] = None,
        scorer: Optional[ConnectionScorer] = None,
        renderer: Optional[TreeRenderer] = None,
        verbose: bool = False,
        log_func: Optional[Callable[[str], None]] = None
    ):
        """Initialize the builder.

        Args:
            source: EntitySource to expand against
            config: Traversal bounds (defaults if None)
            scorer: Connection scorer (default weights if None)
            renderer: Tree renderer used when rendering is requested
            verbose: Whether to print progress messages
            log_func: Optional logging function (overrides verbose printing)
        """
        self.source = source
        self.config = config or TraversalConfig()
        self.scorer = scorer or ConnectionScorer(ScoringConfig())
        self.renderer = renderer or TreeRenderer()
        self.verbose = verbose
        self.log_func = log_func

    def _log(self, message: str) -> None:
        if self.log_func:
            self.log_func(message)
        elif self.verbose:
            print(message)

    def default_options(self) -> BuildOptions:
        return BuildOptions(max_depth=self.config.max_depth)

    async def build_from_root(
        self,
        root_id: int,
        options: Optional[BuildOptions] = None
    ) -> RelationshipGraph:
        """Build the relationship graph around one root entity.

        Args:
            root_id: Id of the root entity
            options: Build options (config defaults if None)

        Returns:
            Fully populated RelationshipGraph

        Raises:
            EntityNotFound: If the root entity cannot be fetched
        """
        options = options or self.default_options()
        self._log(f"[*] Mapping relationships for entity {root_id} (depth: {options.max_depth})")

        root_entity = await self._fetch_root(root_id)

        graph = RelationshipGraph(max_depth=options.max_depth)
        root_node = Node.from_entity(root_entity, depth=0, connection_strength=1.0)
        graph.add_node(root_node)
        graph.root_keys.append(root_node.key)

        semaphore = asyncio.Semaphore(max(1, self.config.max_concurrent_expansions))
        frontier = [(root_node, root_entity)]

        while frontier:
            expandable = [
                (node, entity) for node, entity in frontier
                if node.depth < options.max_depth and self._is_expandable(node)
            ]
            if not expandable:
                break

            expansions = await asyncio.gather(*(
                self._expand(entity, options, semaphore) for _, entity in expandable
            ))

            next_frontier = []
            for (parent_node, parent_entity), expansion in zip(expandable, expansions):
                graph.lookup_failures.extend(expansion.failures)
                for discovery in expansion.discoveries:
                    admitted = self._admit(graph, parent_node, discovery, options)
                    if admitted is not None:
                        next_frontier.append((admitted, discovery.entity))
            frontier = next_frontier

        if options.include_rendering:
            graph.visual_tree = self.renderer.render(graph, root_node)

        self._log(
            f"[+] Mapped {graph.total_nodes} nodes and {graph.connection_count} connections "
            f"for {root_node.name}"
        )
        return graph

    async def _fetch_root(self, root_id: int) -> Entity:
        try:
            entity = await self.source.get_entity(root_id)
        except EntityNotFound:
            raise
        except Exception as e:
            raise EntityNotFound(root_id, str(e)) from e

        if entity is None:
            raise EntityNotFound(root_id)
        return entity

    def _is_expandable(self, node: Node) -> bool:
        if node.kind == EntityKind.COMPANY:
            return True
        if node.kind == EntityKind.EMPLOYEE:
            return self.config.follow_reporting_lines
        return False

    async def _expand(
        self,
        entity: Entity,
        options: BuildOptions,
        semaphore: asyncio.Semaphore
    ) -> Expansion:
        """Run all lookups for one node and collect what they found."""
        lookups = [self._lookup_responsible(entity)]
        if entity.kind == EntityKind.COMPANY and ResourceType.is_business_partner(entity.type_id):
            lookups.append(self._lookup_associates(entity, options))

        async with semaphore:
            results = await asyncio.gather(*lookups)

        expansion = Expansion()
        for discoveries, failure in results:
            expansion.discoveries.extend(discoveries)
            if failure is not None:
                expansion.failures.append(failure)
        return expansion

    async def _lookup_responsible(self, entity: Entity) -> tuple:
        try:
            responsible = await self.source.get_responsible_party(
                entity.id, responsible_id=entity.responsible_id
            )
        except Exception as e:
            self._log(f"[!] Failed to fetch responsible party for {entity.id}: {e}")
            return [], LookupFailure(entity.id, "responsible_party", str(e))

        if responsible is None:
            return [], None
        return [Discovery(responsible, ConnectionCategory.RESPONSIBLE_FOR)], None

    async def _lookup_associates(self, entity: Entity, options: BuildOptions) -> tuple:
        try:
            associates = await self.source.get_associates(
                entity.id, active_only=not options.include_inactive
            )
        except Exception as e:
            self._log(f"[!] Failed to fetch contacts for {entity.id}: {e}")
            return [], LookupFailure(entity.id, "associates", str(e))

        sample = list(associates or [])[:self.config.associate_sample_size]
        return [Discovery(contact, ConnectionCategory.CONTACT_OF) for contact in sample], None

    def _admit(
        self,
        graph: RelationshipGraph,
        parent: Node,
        discovery: Discovery,
        options: BuildOptions
    ) -> Optional[Node]:
        """Admit one discovery into the graph.

        Returns:
            The newly admitted node, or None if the entity was skipped or its
            identity was already present
        """
        entity = discovery.entity
        if not entity.active and not options.include_inactive:
            return None
        if entity.key == parent.key:
            return None

        category = discovery.category
        strength = self.scorer.score_entities(category, entity, parent)

        node = Node.from_entity(
            entity,
            depth=parent.depth + 1,
            connection_strength=strength,
            connection_type=category.node_connection_type
        )
        added = graph.add_node(node)
        if not added:
            node = graph.get_node(entity.id, entity.kind)

        graph.add_connection(Connection(
            from_id=node.id,
            to_id=parent.id,
            category=category,
            strength=strength,
            description=describe(node, parent, category),
            from_kind=node.kind,
            to_kind=parent.kind
        ))

        if not added:
            return None

        if self.config.link_same_party:
            self._link_same_party(graph, node)
        return node

    def _link_same_party(self, graph: RelationshipGraph, node: Node) -> None:
        """Connect a new node to nodes of other kinds sharing its email."""
        for other in graph.get_nodes_by_email(node.email):
            if other.kind == node.kind:
                continue
            category = ConnectionCategory.RELATED_TO
            graph.add_connection(Connection(
                from_id=node.id,
                to_id=other.id,
                category=category,
                strength=self.scorer.score_entities(category, node, other),
                description=describe(node, other, category),
                from_kind=node.kind,
                to_kind=other.kind
            ))


def describe(source: Node, target: Node, category: ConnectionCategory) -> str:
    """Human-readable sentence for a connection."""
    if category == ConnectionCategory.RESPONSIBLE_FOR:
        return f"{source.name} is responsible for {target.name}"
    if category == ConnectionCategory.CONTACT_OF:
        return f"{source.name} is a contact person for {target.name}"
    if category == ConnectionCategory.PARENT_OF:
        return f"{source.name} is the parent company of {target.name}"
    if category == ConnectionCategory.CHILD_OF:
        return f"{source.name} is a subsidiary of {target.name}"
    return f"{source.name} is the same party as {target.name}"
