import pytest

from relmap.analysis.graph_builder import GraphBuilder
from relmap.analysis.network_merger import NetworkMerger
from relmap.config import TraversalConfig
from relmap.ingestion.json_loader import JsonEntitySource
from relmap.model.schemas import BuildOptions, ConnectionCategory, EntityKind

from conftest import DelayedSource, FlakySource, resource


def merger_for(source, **kwargs):
    return NetworkMerger(GraphBuilder(source), **kwargs)


def root_ids(graph):
    return [key[0] for key in graph.root_keys]


@pytest.mark.asyncio
async def test_shared_account_manager_appears_once(network_source):
    graph = await merger_for(network_source).build_network([100, 200])

    employees = list(graph.get_nodes_by_kind(EntityKind.EMPLOYEE))
    assert [e.id for e in employees] == [1]
    assert graph.has_connection(1, 100, ConnectionCategory.RESPONSIBLE_FOR)
    assert graph.has_connection(1, 200, ConnectionCategory.RESPONSIBLE_FOR)
    assert graph.total_nodes == 6
    assert graph.connection_count == 5
    assert root_ids(graph) == [100, 200]


@pytest.mark.asyncio
async def test_default_network_depth(network_source):
    merger = merger_for(network_source)
    assert merger.default_options().max_depth == 2

    graph = await merger.build_network([100])
    assert graph.max_depth == 2


@pytest.mark.asyncio
async def test_partial_lookup_failure_keeps_other_roots(network_data):
    source = FlakySource.from_dict(network_data)
    source.failing_associates.add(300)

    graph = await merger_for(source).build_network([100, 200, 300])

    assert root_ids(graph) == [100, 200, 300]
    assert graph.has_node(211, EntityKind.CONTACT)
    assert graph.has_node(202, EntityKind.CONTACT)
    assert graph.has_node(2, EntityKind.EMPLOYEE)
    assert not graph.has_node(301, EntityKind.CONTACT)
    assert len(graph.lookup_failures) == 1
    assert graph.lookup_failures[0].entity_id == 300


@pytest.mark.asyncio
async def test_missing_root_is_skipped(network_source):
    messages = []
    merger = merger_for(network_source, log_func=messages.append)

    graph = await merger.build_network([100, 999])

    assert root_ids(graph) == [100]
    assert graph.total_nodes == 4
    assert any(m.startswith("[!] Failed to map root 999") for m in messages)


@pytest.mark.asyncio
async def test_all_roots_failing_gives_empty_graph(network_source):
    graph = await merger_for(network_source).build_network([998, 999])

    assert graph.total_nodes == 0
    assert graph.connection_count == 0
    assert graph.root is None
    assert graph.visual_tree is None


@pytest.mark.asyncio
async def test_only_first_ten_roots_are_used():
    source = JsonEntitySource(resources=[
        resource(1000 + i, f"Company {i:02d}") for i in range(12)
    ])

    graph = await merger_for(source).build_network([1000 + i for i in range(12)])

    assert root_ids(graph) == [1000 + i for i in range(10)]
    assert not graph.has_node(1010, EntityKind.COMPANY)
    assert not graph.has_node(1011, EntityKind.COMPANY)


@pytest.mark.asyncio
async def test_root_cap_is_configurable(network_source):
    merger = merger_for(network_source, config=TraversalConfig(max_network_roots=1))
    graph = await merger.build_network([100, 200])
    assert root_ids(graph) == [100]


@pytest.mark.asyncio
async def test_duplicate_roots_are_built_once(network_data):
    source = FlakySource.from_dict(network_data)
    graph = await merger_for(source).build_network([100, 100, 200])

    assert root_ids(graph) == [100, 200]
    assert [call[0] for call in source.associate_calls].count(100) == 1


@pytest.mark.asyncio
async def test_tree_uses_first_successful_root(network_source):
    graph = await merger_for(network_source).build_network([999, 200, 100])

    assert graph.visual_tree.startswith("\n🔗 Relationship Tree for Birk ApS")
    assert graph.visual_tree.count("Acme A/S") == 1
    assert "Total nodes: 6 | Total connections: 5" in graph.visual_tree


@pytest.mark.asyncio
async def test_tree_walks_across_roots(network_source):
    graph = await merger_for(network_source).build_network([100, 200])

    tree = graph.visual_tree
    assert "🏢 Birk ApS ✅" in tree
    assert "📧 Gry Iversen ✅" in tree


@pytest.mark.asyncio
async def test_rendering_can_be_skipped(network_source):
    options = BuildOptions(max_depth=2, include_rendering=False)
    graph = await merger_for(network_source).build_network([100, 200], options)
    assert graph.visual_tree is None


@pytest.mark.asyncio
async def test_merge_order_follows_root_order_not_completion_order(network_data):
    quick = await merger_for(DelayedSource.from_dict(network_data)).build_network([100, 200])
    delayed = await merger_for(
        DelayedSource(
            resources=network_data["resources"],
            contacts=network_data["contacts"],
            delays={100: 0.02}
        )
    ).build_network([100, 200])

    assert [n.key for n in delayed.nodes] == [n.key for n in quick.nodes]
    assert delayed.nodes[0].key == (100, EntityKind.COMPANY)
    assert [c.key for c in delayed.connections] == [c.key for c in quick.connections]
