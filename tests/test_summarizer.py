import pytest

from relmap.analysis.graph_builder import GraphBuilder
from relmap.analysis.network_merger import NetworkMerger
from relmap.analysis.summarizer import ACCOUNT_MANAGER_ROLE, RelationshipSummarizer
from relmap.config import ScoringConfig
from relmap.ingestion.json_loader import JsonEntitySource
from relmap.model.graph import RelationshipGraph
from relmap.model.schemas import EntityKind, LookupFailure, Node

from conftest import resource


def lone_company(active=True):
    graph = RelationshipGraph(max_depth=0)
    graph.add_node(Node(id=5, kind=EntityKind.COMPANY, name="Solo", type_id=4, active=active))
    return graph


@pytest.mark.asyncio
async def test_relationship_stats(acme_source):
    graph = await GraphBuilder(acme_source).build_from_root(100)
    stats = RelationshipSummarizer(graph).get_relationship_stats()

    assert stats.companies_count == 1
    assert stats.employees_count == 1
    assert stats.contacts_count == 2
    assert stats.active_nodes_count == 4
    assert stats.strong_connections_count == 3
    assert stats.average_connection_strength == pytest.approx(0.9)


@pytest.mark.asyncio
async def test_strong_threshold_is_configurable(acme_source):
    graph = await GraphBuilder(acme_source).build_from_root(100)
    stats = RelationshipSummarizer(graph, ScoringConfig(strong_threshold=0.95)).get_relationship_stats()
    assert stats.strong_connections_count == 1


def test_empty_graph_stats():
    stats = RelationshipSummarizer(RelationshipGraph()).get_relationship_stats()
    assert stats.to_dict() == {
        "companies_count": 0,
        "contacts_count": 0,
        "employees_count": 0,
        "active_nodes_count": 0,
        "strong_connections_count": 0,
        "average_connection_strength": 0.0,
    }


@pytest.mark.asyncio
async def test_company_summary(acme_source):
    graph = await GraphBuilder(acme_source).build_from_root(100)
    [summary] = RelationshipSummarizer(graph).summarize_companies()

    assert summary.company_id == 100
    assert summary.company_name == "Acme A/S"
    assert summary.company_type == "Client"
    assert summary.responsible_employee.name == "Ann Berg"
    assert [c.name for c in summary.contacts] == ["Carl Dahl", "Eva Falk"]
    assert summary.portfolio_companies == []
    assert [(e.id, role) for e, role in summary.related_employees] == [(1, ACCOUNT_MANAGER_ROLE)]
    assert summary.connection_strength == 90
    assert summary.strength_reason == (
        "Has dedicated account manager, 2 contact person(s), Active company"
    )


@pytest.mark.asyncio
async def test_summary_serialization(acme_source):
    graph = await GraphBuilder(acme_source).build_from_root(100)
    [summary] = RelationshipSummarizer(graph).summarize_companies()
    data = summary.to_dict()

    assert data["responsible_employee"] == {"id": 1, "name": "Ann Berg", "email": "ann@ours.dk"}
    assert data["structure"]["contacts"][1] == {
        "id": 202, "name": "Eva Falk", "email": "eva@acme.dk", "phone": "+45 3333"
    }
    assert data["structure"]["related_employees"] == [
        {"id": 1, "name": "Ann Berg", "role": "Account Manager"}
    ]


@pytest.mark.asyncio
async def test_portfolio_in_network(network_source):
    graph = await NetworkMerger(GraphBuilder(network_source)).build_network([100, 200])
    summaries = {s.company_id: s for s in RelationshipSummarizer(graph).summarize_companies()}

    assert [c.id for c in summaries[100].portfolio_companies] == [200]
    assert [c.id for c in summaries[200].portfolio_companies] == [100]
    assert "Portfolio of 1 companies" in summaries[100].strength_reason


def test_lone_company_reasons():
    [active] = RelationshipSummarizer(lone_company()).summarize_companies()
    assert active.connection_strength == 0
    assert active.strength_reason == "Active company"
    assert active.company_type == "Supplier"
    assert active.responsible_employee is None

    [inactive] = RelationshipSummarizer(lone_company(active=False)).summarize_companies()
    assert inactive.strength_reason == "Basic company information available"


@pytest.mark.asyncio
async def test_text_summary(acme_source):
    graph = await GraphBuilder(acme_source).build_from_root(100)
    graph.lookup_failures.append(LookupFailure(100, "associates", "timeout"))

    text = RelationshipSummarizer(graph).create_text_summary()

    assert "- Entities: 4 (1 companies, 1 employees, 2 contacts)" in text
    assert "- Connections: 3 (3 strong)" in text
    assert "Acme A/S [Client] strength 90/100, account manager: Ann Berg" in text
    assert "## Skipped Lookups" in text
    assert "- associates for 100: timeout" in text


@pytest.mark.asyncio
async def test_owner_company_type_is_unknown():
    source = JsonEntitySource(resources=[
        resource(1, "Our Company", type_id=1, responsible=7),
        resource(7, "Ann Berg", type_id=2),
    ])
    graph = await GraphBuilder(source).build_from_root(1)
    [summary] = RelationshipSummarizer(graph).summarize_companies()

    assert summary.company_type == "Unknown"
    assert summary.responsible_employee.name == "Ann Berg"
