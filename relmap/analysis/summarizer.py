"""
Relationship Summarizer
=======================

Condenses a relationship graph into statistics and per-company overviews.

This module creates:
- Aggregate statistics (counts by kind, active nodes, strong links)
- One CompanySummary per company node (account manager, contacts,
  portfolio, strength and the reasons behind it)
- A plain-text overview for reports

Design Decisions:
-----------------
1. Everything is derived from the graph; no source lookups
2. Portfolio companies are the other companies the same account manager is
   responsible for in this graph, so a network build shows more of them
"""

from typing import Optional

from ..config import ScoringConfig
from ..model.graph import RelationshipGraph
from ..model.schemas import (
    CompanySummary, ConnectionCategory, EntityKind, RelationshipStats, ResourceType
)


ACCOUNT_MANAGER_ROLE = "Account Manager"


class RelationshipSummarizer:
    """Creates summaries of a relationship graph.

    Usage:
        summarizer = RelationshipSummarizer(graph)
        stats = summarizer.get_relationship_stats()
        companies = summarizer.summarize_companies()
        text = summarizer.create_text_summary()
    """

    def __init__(self, graph: RelationshipGraph, config: Optional[ScoringConfig] = None):
        """Initialize the summarizer.

        Args:
            graph: Graph to summarize
            config: Scoring configuration (for the strong-link threshold)
        """
        self.graph = graph
        self.config = config or ScoringConfig()

    def get_relationship_stats(self) -> RelationshipStats:
        """Calculate aggregate statistics."""
        nodes = self.graph.nodes
        connections = self.graph.connections

        stats = RelationshipStats(
            companies_count=sum(1 for n in nodes if n.kind == EntityKind.COMPANY),
            contacts_count=sum(1 for n in nodes if n.kind == EntityKind.CONTACT),
            employees_count=sum(1 for n in nodes if n.kind == EntityKind.EMPLOYEE),
            active_nodes_count=sum(1 for n in nodes if n.active),
            strong_connections_count=sum(
                1 for c in connections if c.strength >= self.config.strong_threshold
            ),
        )
        if connections:
            stats.average_connection_strength = round(
                sum(c.strength for c in connections) / len(connections), 4
            )
        return stats

    def summarize_companies(self) -> list[CompanySummary]:
        """Build a CompanySummary for every company node in admission order."""
        return [
            self._summarize_company(company)
            for company in self.graph.get_nodes_by_kind(EntityKind.COMPANY)
        ]

    def _summarize_company(self, company) -> CompanySummary:
        responsible = None
        for connection in self.graph.get_incoming(company, ConnectionCategory.RESPONSIBLE_FOR):
            candidate = self.graph.get_node(connection.from_id, connection.from_kind)
            if candidate is not None and candidate.kind == EntityKind.EMPLOYEE:
                responsible = candidate
                break

        contacts = []
        for connection in self.graph.get_incoming(company, ConnectionCategory.CONTACT_OF):
            contact = self.graph.get_node(connection.from_id, connection.from_kind)
            if contact is not None:
                contacts.append(contact)

        portfolio = []
        if responsible is not None:
            for connection in self.graph.get_outgoing(responsible, ConnectionCategory.RESPONSIBLE_FOR):
                if connection.to_id == company.id:
                    continue
                other = self.graph.get_node(connection.to_id, connection.to_kind)
                if other is not None and other.kind == EntityKind.COMPANY:
                    portfolio.append(other)

        touching = [connection for connection, _ in self.graph.get_neighbors(company)]
        average = sum(c.strength for c in touching) / len(touching) if touching else 0.0

        reasons = []
        if responsible is not None:
            reasons.append("Has dedicated account manager")
        if contacts:
            reasons.append(f"{len(contacts)} contact person(s)")
        if portfolio:
            reasons.append(f"Portfolio of {len(portfolio)} companies")
        if company.active:
            reasons.append("Active company")

        return CompanySummary(
            company_id=company.id,
            company_name=company.name,
            company_type=ResourceType.display_name(company.type_id),
            active=company.active,
            responsible_employee=responsible,
            contacts=contacts,
            portfolio_companies=portfolio,
            related_employees=[(responsible, ACCOUNT_MANAGER_ROLE)] if responsible else [],
            connection_strength=round(average * 100),
            strength_reason=", ".join(reasons) or "Basic company information available"
        )

    def create_text_summary(self) -> str:
        """Create a plain-text overview of the graph."""
        stats = self.get_relationship_stats()
        lines = [
            "## Relationship Overview",
            "",
            f"- Entities: {self.graph.total_nodes} "
            f"({stats.companies_count} companies, {stats.employees_count} employees, "
            f"{stats.contacts_count} contacts)",
            f"- Active entities: {stats.active_nodes_count}",
            f"- Connections: {self.graph.connection_count} "
            f"({stats.strong_connections_count} strong)",
            f"- Average connection strength: {stats.average_connection_strength:.2f}",
        ]

        summaries = self.summarize_companies()
        if summaries:
            lines.extend(["", "## Companies", ""])
            for summary in summaries:
                manager = summary.responsible_employee.name if summary.responsible_employee else "none"
                lines.append(
                    f"- {summary.company_name} [{summary.company_type}] "
                    f"strength {summary.connection_strength}/100, account manager: {manager}"
                )
                lines.append(f"  {summary.strength_reason}")

        if self.graph.lookup_failures:
            lines.extend(["", "## Skipped Lookups", ""])
            for failure in self.graph.lookup_failures:
                lines.append(f"- {failure.lookup} for {failure.entity_id}: {failure.error}")

        return "\n".join(lines)
