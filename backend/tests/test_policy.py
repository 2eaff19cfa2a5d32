import pytest

from flowpatch.catalog.node_catalog import StaticNodeCatalog
from flowpatch.config.settings import FlowpatchConfig, PolicyConfig
from flowpatch.errors import PolicyViolation
from flowpatch.graph.graph_mutator import GraphMutator
from flowpatch.graph.workflow_graph import WorkflowGraph
from flowpatch.history.journal import BatchState
from flowpatch.operations.validator import OperationValidator
from flowpatch.policy.enforcer import PolicyEnforcer
from flowpatch.utils.text import extract_host, host_matches

from backend.app.services.workflow_service import WorkflowService
from backend.tests.factories import HTTP, SET, add_node, batch, batch_of, connect, set_params, webhook


def _evaluate(raw, config: PolicyConfig, graph: WorkflowGraph | None = None):
    parsed = OperationValidator().validate(raw)
    working = (graph or WorkflowGraph("g")).clone()
    GraphMutator(working).apply_batch(parsed)
    return PolicyEnforcer(StaticNodeCatalog()).evaluate(parsed, working, config)


def _codes(violations):
    return [v["code"] for v in violations]


def test_clean_batch_has_no_violations():
    assert _evaluate(batch(webhook("n1")), PolicyConfig()) == []


def test_too_many_nodes_added():
    ops = [webhook("t")] + [add_node(f"s{i}", SET) for i in range(3)]
    violations = _evaluate(batch_of(ops), PolicyConfig(max_nodes_added=3))

    assert _codes(violations) == ["too_many_nodes_added"]
    assert violations[0]["details"]["addedNodes"] == 4


def test_node_type_whitelist_and_blacklist():
    whitelisted = PolicyConfig(node_whitelist=("n8n-nodes-base.webhook",))
    assert _codes(_evaluate(batch(webhook("t"), add_node("h", HTTP)), whitelisted)) == [
        "node_type_not_allowed"
    ]

    blacklisted = PolicyConfig(node_blacklist=(HTTP,))
    violations = _evaluate(batch(webhook("t"), add_node("h", HTTP)), blacklisted)
    assert violations[0]["details"]["types"] == [HTTP]


def test_domain_blacklist_scans_nested_parameters():
    config = PolicyConfig(domain_blacklist=("*.evil.test", "tracker.io"))

    nested = add_node(
        "h",
        HTTP,
        parameters={"url": "https://ok.example.org", "headers": [{"value": "https://api.evil.test/x"}]},
    )
    violations = _evaluate(batch(webhook("t"), nested), config)
    assert _codes(violations) == ["domain_blacklist"]
    assert violations[0]["details"]["urls"] == ["https://api.evil.test/x"]

    graph = WorkflowGraph("g")
    violations = _evaluate(batch(webhook("t"), set_params("t", path="tracker.io")), config, graph)
    assert _codes(violations) == ["domain_blacklist"]


def test_missing_trigger_is_evaluated_on_the_resulting_graph():
    violations = _evaluate(batch(add_node("s", SET)), PolicyConfig())
    assert _codes(violations) == ["missing_trigger"]

    assert _evaluate(batch(add_node("s", SET)), PolicyConfig(require_trigger=False)) == []


def test_check_raises_with_every_violation():
    parsed = OperationValidator().validate(batch(add_node("h", HTTP, parameters={"url": "http://tracker.io"})))
    working = WorkflowGraph("g")
    GraphMutator(working).apply_batch(parsed)

    with pytest.raises(PolicyViolation) as excinfo:
        PolicyEnforcer(StaticNodeCatalog()).check(
            parsed,
            working,
            PolicyConfig(domain_blacklist=("tracker.io",), node_blacklist=(HTTP,)),
        )

    assert excinfo.value.code == "policy_violation"
    assert set(_codes(excinfo.value.violations)) == {
        "node_type_not_allowed",
        "domain_blacklist",
        "missing_trigger",
    }


@pytest.mark.parametrize(
    "value, host",
    [
        ("https://Api.Example.com/path?q=1", "api.example.com"),
        ("example.com", "example.com"),
        ("example.com/hook", "example.com"),
        ("just some text", None),
        ("hello", None),
        ("http://[oops", None),
        ("//[::1", None),
        ("", None),
    ],
)
def test_extract_host(value, host):
    assert extract_host(value) == host


def test_host_matches_exact_and_suffix():
    assert host_matches("example.com", "example.com")
    assert not host_matches("api.example.com", "example.com")
    assert host_matches("api.example.com", "*.example.com")
    assert not host_matches("badexample.com", "*.example.com")


def test_malformed_url_is_not_a_blacklisted_host(store, catalog, history, journal):
    config = FlowpatchConfig(policy=PolicyConfig(domain_blacklist=("evil.com",)))
    service = WorkflowService(
        store=store,
        catalog=catalog,
        history=history,
        journal=journal,
        config=config,
    )
    broken = add_node("h", HTTP, parameters={"url": "http://[oops", "method": "GET"})

    result = service.submit_batch("wf", 0, batch(webhook("n1"), broken, connect("n1", "h")))

    assert result.new_version == 1
    assert [r.state for r in journal.all()] == [BatchState.APPLIED]


def test_unexpected_failure_rejects_the_batch(applier, journal, store, monkeypatch):
    def explode(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(applier.policy, "check", explode)

    with pytest.raises(RuntimeError):
        applier.apply("wf", 0, batch(webhook("n1")))

    record = journal.all()[-1]
    assert record.state == BatchState.REJECTED
    assert record.error_code == "internal_error"
    assert store.version("wf") == 0
