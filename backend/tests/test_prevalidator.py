from flowpatch.catalog.node_catalog import NodeSchema, StaticNodeCatalog, is_trigger_type
from flowpatch.config.settings import LintConfig
from flowpatch.graph.graph_schema import Connection, Node
from flowpatch.graph.workflow_graph import WorkflowGraph
from flowpatch.lint.findings import has_errors
from flowpatch.lint.prevalidator import Prevalidator

from backend.tests.factories import HTTP, MANUAL, SLACK, WEBHOOK


def _graph(*nodes: Node, connections=()) -> WorkflowGraph:
    graph = WorkflowGraph("g")
    for node in nodes:
        graph.add_node(node)
    for index, (source, target) in enumerate(connections):
        graph.insert_connection(index, Connection(source, target))
    return graph


def _trigger() -> Node:
    return Node(id="t", name="Start", type=MANUAL)


def _by_code(findings):
    return {f.code: f for f in findings}


def test_clean_graph_only_flags_its_sink():
    http = Node(id="h", name="Fetch", type=HTTP, parameters={"url": "https://x.org", "method": "GET"})
    findings = Prevalidator(StaticNodeCatalog()).lint(
        _graph(_trigger(), http, connections=[("t", "h")]),
    )
    assert [f.code for f in findings] == ["dangling_branch"]
    assert findings[0].level == "warning"
    assert findings[0].node_ref == "h"


def test_missing_required_param_carries_catalog_default():
    hook = Node(id="w", name="Hook", type=WEBHOOK, parameters={"path": "  "})
    findings = Prevalidator(StaticNodeCatalog()).lint(_graph(hook))

    finding = _by_code(findings)["missing_required_param"]
    assert finding.level == "error"
    assert finding.node_ref == "w"
    assert finding.param == "path"
    assert finding.details["default"] == "webhook-endpoint"


def test_invalid_enum_lists_allowed_values():
    http = Node(id="h", name="Fetch", type=HTTP, parameters={"url": "https://x.org", "method": "get"})
    findings = Prevalidator(StaticNodeCatalog()).lint(_graph(_trigger(), http, connections=[("t", "h")]))

    finding = _by_code(findings)["invalid_enum"]
    assert finding.details["value"] == "get"
    assert "GET" in finding.details["allowed"]


def test_credentials_checks():
    bare = Node(id="s", name="Notify", type=SLACK, parameters={"channel": "#a", "text": "hi"})
    blank = Node(
        id="s2",
        name="Notify 2",
        type=SLACK,
        parameters={"channel": "#a", "text": "hi"},
        credentials={"slackApi": " "},
    )
    findings = Prevalidator(StaticNodeCatalog()).lint(
        _graph(_trigger(), bare, blank, connections=[("t", "s"), ("t", "s2")])
    )

    codes = _by_code(findings)
    assert codes["missing_credentials"].level == "warning"
    assert codes["invalid_credentials"].level == "error"
    assert codes["invalid_credentials"].node_ref == "s2"


def test_graph_level_findings():
    a = Node(id="a", name="Same", type="n8n-nodes-base.set")
    b = Node(id="b", name="Same", type="n8n-nodes-base.set")
    graph = _graph(a, b, connections=[("a", "b"), ("b", "a"), ("a", "ghost")])

    findings = Prevalidator(StaticNodeCatalog()).lint(graph)
    codes = _by_code(findings)

    assert codes["dangling_connection"].node_ref == "ghost"
    assert codes["dangling_connection"].details == {"connectionIndex": 2, "side": "to"}
    assert "missing_trigger" in codes
    assert "circular_dependency" in codes
    assert codes["duplicate_node_name"].level == "warning"
    assert has_errors(findings)


def test_errors_sort_before_warnings():
    orphan = Node(id="o", name="Orphan", type="vendor.custom")
    findings = Prevalidator(StaticNodeCatalog()).lint(_graph(orphan))

    levels = [f.level for f in findings]
    assert levels == sorted(levels, key=lambda level: 0 if level == "error" else 1)
    assert {f.code for f in findings} >= {"missing_trigger", "unknown_node_type", "unconnected_node"}


def test_lint_toggles():
    orphan = Node(id="o", name="Orphan", type="n8n-nodes-base.set")
    config = LintConfig(detect_cycles=False, warn_unconnected=False, warn_dangling=False)
    graph = _graph(_trigger(), orphan, connections=[("o", "o")])

    codes = {f.code for f in Prevalidator(StaticNodeCatalog(), config).lint(graph)}
    assert "circular_dependency" not in codes
    assert "unconnected_node" not in codes
    assert "dangling_branch" not in codes


def test_dangling_branch_skips_triggers_and_inner_nodes():
    set_node = Node(id="x", name="Shape", type="n8n-nodes-base.set")
    http = Node(id="h", name="Fetch", type=HTTP, parameters={"url": "https://x.org"})
    lone_trigger = Node(id="t2", name="Second Start", type=MANUAL)
    graph = _graph(_trigger(), set_node, http, lone_trigger, connections=[("t", "x"), ("Shape", "h")])

    dangling = [f for f in Prevalidator(StaticNodeCatalog()).lint(graph) if f.code == "dangling_branch"]

    assert [f.node_ref for f in dangling] == ["h"]
    assert dangling[0].message == "Node 'Fetch' has no outgoing connections"


def test_custom_catalog_registration():
    catalog = StaticNodeCatalog(schemas=[])
    catalog.register(NodeSchema(type="acme.poller", is_trigger=True, required_params=("feed",)))

    assert catalog.types() == ["acme.poller"]
    assert is_trigger_type(catalog, "acme.poller")
    assert is_trigger_type(catalog, "acme.cronTrigger")
    assert not is_trigger_type(catalog, "acme.sink")

    findings = Prevalidator(catalog).lint(_graph(Node(id="p", name="Poll", type="acme.poller")))
    assert [f.code for f in findings] == ["missing_required_param"]
