import pytest

from flowpatch.config.settings import BatchLimitsConfig
from flowpatch.errors import InvalidOperationBatch
from flowpatch.operations.schema import AddNodeOp, ConnectOp, OperationBatch
from flowpatch.operations.validator import OperationValidator

from backend.tests.factories import annotate, batch, batch_of, connect, webhook


def test_valid_batch_parses_into_tagged_operations():
    parsed = OperationValidator().validate(
        batch(webhook("n1"), connect("n1", "n2", outputIndex=0))
    )

    assert isinstance(parsed, OperationBatch)
    assert isinstance(parsed.ops[0], AddNodeOp)
    assert isinstance(parsed.ops[1], ConnectOp)
    assert parsed.ops[1].from_ == "n1"
    assert parsed.ops[1].output_index == 0
    assert parsed.count("add_node") == 1


def test_version_defaults_to_v1():
    parsed = OperationValidator().validate({"ops": [annotate("n1", "note")]})
    assert parsed.version == "v1"


@pytest.mark.parametrize(
    "op",
    [
        {"op": "rename", "name": "n1"},
        {"op": "delete"},
        {"op": "delete", "name": ""},
        {"op": "annotate", "name": "n1", "text": "   "},
        {"op": "delete", "name": "n1", "extra": True},
        {"op": "connect", "from": "a", "to": "b", "outputIndex": -1},
        {"op": "add_node", "node": {"id": "x", "name": "x", "type": "t", "typeVersion": 0}},
    ],
)
def test_malformed_operations_are_rejected(op):
    with pytest.raises(InvalidOperationBatch) as excinfo:
        OperationValidator().validate(batch(op))

    assert excinfo.value.code == "invalid_operation_batch"
    assert excinfo.value.issues
    assert {"loc", "msg", "type"} <= set(excinfo.value.issues[0])


def test_wrong_batch_version_is_rejected():
    with pytest.raises(InvalidOperationBatch):
        OperationValidator().validate({"version": "v2", "ops": []})


def test_non_mapping_batch_is_rejected():
    with pytest.raises(InvalidOperationBatch):
        OperationValidator().validate(["not", "a", "batch"])


def test_operation_count_boundary():
    validator = OperationValidator()

    ops = [annotate("n1", f"note {i}") for i in range(500)]
    assert len(validator.validate(batch_of(ops)).ops) == 500

    with pytest.raises(InvalidOperationBatch) as excinfo:
        validator.validate(batch_of(ops + [annotate("n1", "one too many")]))
    assert excinfo.value.issues[0]["type"] == "too_many_operations"


def test_payload_size_limit():
    validator = OperationValidator(BatchLimitsConfig(max_payload_bytes=200))

    with pytest.raises(InvalidOperationBatch) as excinfo:
        validator.validate(batch(annotate("n1", "x" * 300)))
    assert excinfo.value.issues[0]["type"] == "payload_too_large"


def test_prebuilt_batch_is_checked_against_limits():
    validator = OperationValidator(BatchLimitsConfig(max_operations=1))
    parsed = OperationValidator().validate(
        batch(annotate("n1", "a"), annotate("n1", "b"))
    )

    with pytest.raises(InvalidOperationBatch):
        validator.validate(parsed)
