import pytest

from flowpatch.catalog.node_catalog import StaticNodeCatalog
from flowpatch.errors import NotFound
from flowpatch.graph.graph_diff import ConnectionStep, GraphDiff, NodeStep
from flowpatch.graph.graph_query import GraphQueryEngine
from flowpatch.graph.graph_schema import Connection, Node
from flowpatch.graph.graph_store import GraphStore
from flowpatch.graph.workflow_graph import WorkflowGraph


def _node(node_id: str, node_type: str = "n8n-nodes-base.set", *, name: str | None = None) -> Node:
    return Node(id=node_id, name=name or node_id, type=node_type)


def _chain(*ids: str) -> WorkflowGraph:
    graph = WorkflowGraph("g")
    graph.add_node(_node(ids[0], "n8n-nodes-base.manualTrigger"))
    for node_id in ids[1:]:
        graph.add_node(_node(node_id))
    for source, target in zip(ids, ids[1:]):
        graph.insert_connection(graph.connection_count(), Connection(source, target))
    return graph


def test_workflow_graph_resolves_by_id_then_name():
    graph = WorkflowGraph("g")
    graph.add_node(_node("a", name="Alpha"))
    graph.add_node(_node("Alpha", name="Other"))

    assert graph.resolve("Alpha") == "Alpha"
    assert graph.resolve("Other") == "Alpha"
    assert graph.resolve("a") == "a"
    assert graph.resolve("missing") is None

    with pytest.raises(ValueError):
        graph.add_node(_node("a"))


def test_clone_is_independent_of_the_original():
    graph = _chain("t", "a")
    copy = graph.clone()

    copy.remove_node("a")
    copy.remove_connection_at(0)

    assert graph.node_count() == 2
    assert graph.connection_count() == 1
    assert not graph.same_structure(copy)


def test_to_networkx_skips_unresolved_connections():
    graph = _chain("t", "a")
    graph.insert_connection(1, Connection("a", "ghost"))

    g = graph.to_networkx()

    assert set(g.nodes) == {"t", "a"}
    assert g.number_of_edges() == 1


def test_graph_diff_replays_forwards_and_backwards():
    graph = _chain("t", "a")
    before = graph.clone()

    diff = GraphDiff()
    for step in (
        NodeStep(node_id="b", before=None, after=_node("b")),
        ConnectionStep(kind="insert", index=1, connection=Connection("a", "b")),
        ConnectionStep(kind="remove", index=0, connection=Connection("t", "a")),
        NodeStep(node_id="a", before=graph.get_node("a"), after=graph.get_node("a").with_note("x")),
    ):
        step.forward(graph)
        diff.record(step)
    after = graph.clone()

    diff.revert(graph)
    assert graph.same_structure(before)

    diff.apply(graph)
    assert graph.same_structure(after)
    assert diff.touched_nodes() == ["b", "a"]
    assert len(diff) == 4


def test_query_engine_traversal_and_paths():
    graph = _chain("t", "a", "b")
    graph.add_node(_node("c"))
    graph.insert_connection(graph.connection_count(), Connection("a", "c"))

    query = GraphQueryEngine(graph, StaticNodeCatalog())

    assert query.triggers() == ["t"]
    traversal = query.bfs_from_triggers()
    assert traversal.order[0] == "t"
    assert set(traversal.order) == {"t", "a", "b", "c"}
    assert traversal.predecessors["b"] == ["a"]

    paths = query.trigger_to_sink_paths(limit=10)
    assert sorted(paths) == [["t", "a", "b"], ["t", "a", "c"]]
    assert len(query.trigger_to_sink_paths(limit=1)) == 1
    assert not query.has_cycle()


def test_query_engine_detects_cycles():
    graph = _chain("t", "a", "b")
    graph.insert_connection(graph.connection_count(), Connection("b", "a"))

    query = GraphQueryEngine(graph, StaticNodeCatalog())

    assert query.has_cycle()
    assert query.bfs_from_triggers().order == ["t", "a", "b"]


def test_graph_store_lifecycle():
    store = GraphStore()

    with pytest.raises(NotFound):
        store.get("g")

    created = store.get_or_create("g")
    assert created.version == 0
    assert store.exists("g")
    assert store.get_or_create("g") is created

    snapshot = store.snapshot("g")
    snapshot.add_node(_node("x"))
    assert store.get("g").node_count() == 0

    store.import_graph(_chain("t", "a"))
    assert store.get("g").node_count() == 2
    assert [g.id for g in store.list_graphs()] == ["g"]

    store.reset()
    assert not store.exists("g")


def test_graph_store_locks_are_per_graph():
    store = GraphStore()

    assert store.lock("a") is store.lock("a")
    assert store.lock("a") is not store.lock("b")


def test_node_step_restores_removed_node_in_place():
    graph = _chain("t", "a", "b")
    step = NodeStep(node_id="a", before=graph.get_node("a"), after=None, slot=graph.node_index("a"))

    step.forward(graph)
    assert [n.id for n in graph.get_nodes()] == ["t", "b"]

    step.backward(graph)
    assert [n.id for n in graph.get_nodes()] == ["t", "a", "b"]
    with pytest.raises(KeyError):
        graph.node_index("ghost")


def test_dependency_order_follows_edges_and_keeps_cycles_as_given():
    graph = _chain("t", "a", "b")
    graph.insert_connection(graph.connection_count(), Connection("t", "b"))
    query = GraphQueryEngine(graph, StaticNodeCatalog())

    assert query.dependency_order(["t", "b", "a"]) == ["t", "a", "b"]

    graph.insert_connection(graph.connection_count(), Connection("b", "a"))
    cyclic = GraphQueryEngine(graph, StaticNodeCatalog())
    assert cyclic.dependency_order(["t", "b", "a"]) == ["t", "b", "a"]
