import json

import pytest

from devassist_mcp.models import GetCalendarEventsParams, RepoParams
from devassist_mcp.registry import (
    ToolDescriptor,
    ToolExecutionError,
    ToolRegistry,
    ToolValidationError,
    UnknownToolError,
)
from devassist_mcp.results import AdapterResult, UpstreamFailure


class _Spy:
    def __init__(self, outcome):
        self.outcome = outcome
        self.calls = []

    def __call__(self, params):
        self.calls.append(params)
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome


def _registry(handler, params=RepoParams, name="t"):
    reg = ToolRegistry()
    reg.register(ToolDescriptor(name=name, description="d", params=params, handler=handler))
    return reg


def test_duplicate_names_are_rejected():
    reg = _registry(_Spy({}))
    with pytest.raises(ValueError, match="already registered"):
        reg.register(ToolDescriptor(name="t", description="again", params=RepoParams, handler=_Spy({})))


def test_unknown_tool():
    with pytest.raises(UnknownToolError) as ei:
        ToolRegistry().call("nope", {})
    assert ei.value.envelope()["error"]["code"] == "unknown_tool"


@pytest.mark.parametrize("arguments", [
    {"owner": "x"},  # missing required
    {"owner": "x", "repo": "y", "branch": "main"},  # unknown field
    {"owner": "x", "repo": 7},  # type mismatch
    {"owner": "", "repo": "y"},  # empty
])
def test_invalid_parameters_never_reach_the_handler(arguments):
    spy = _Spy(AdapterResult.success({}))
    reg = _registry(spy)

    with pytest.raises(ToolValidationError) as ei:
        reg.call("t", arguments)

    assert spy.calls == []
    env = ei.value.envelope()
    assert env["error"]["code"] == "invalid_params"
    assert env["error"]["details"]["errors"]
    assert env["tool"] == "t"


@pytest.mark.parametrize("value", ["3", 0, -1, 2.5, True])
def test_max_results_is_a_strict_positive_int(value):
    spy = _Spy([])
    reg = _registry(spy, params=GetCalendarEventsParams)
    with pytest.raises(ToolValidationError):
        reg.call("t", {"maxResults": value})
    assert spy.calls == []


def test_defaults_are_applied():
    spy = _Spy([])
    _registry(spy, params=GetCalendarEventsParams).call("t", {})
    assert spy.calls[0].maxResults == 10


def test_success_is_serialized_with_field_order_and_nesting():
    payload = {"z": 1, "a": {"nested": [1, {"deep": "ü"}]}}
    out = _registry(_Spy(AdapterResult.success(payload))).call("t", {"owner": "x", "repo": "y"})

    assert out == json.dumps(payload, indent=2, ensure_ascii=False)
    assert list(json.loads(out)) == ["z", "a"]


def test_plain_values_are_serialized_too():
    out = _registry(_Spy({"ok": True})).call("t", {"owner": "x", "repo": "y"})
    assert json.loads(out) == {"ok": True}


def test_adapter_failure_becomes_execution_error():
    failure = UpstreamFailure("not_found", "404 Client Error: Not Found", 404)
    reg = _registry(_Spy(AdapterResult.fail(failure)))

    with pytest.raises(ToolExecutionError) as ei:
        reg.call("t", {"owner": "x", "repo": "y"})

    env = json.loads(ei.value.to_text())
    assert env["error"] == {
        "code": "not_found",
        "message": "404 Client Error: Not Found",
        "details": {"status": 404},
    }


def test_handler_crash_is_internal_execution_error():
    reg = _registry(_Spy(RuntimeError("kaput")))
    with pytest.raises(ToolExecutionError) as ei:
        reg.call("t", {"owner": "x", "repo": "y"})
    assert ei.value.code == "internal"
    assert "kaput" in ei.value.message


def test_input_schema_lists_required_fields_and_forbids_extras():
    reg = _registry(_Spy({}))
    schema = reg.get("t").input_schema()
    assert schema["type"] == "object"
    assert set(schema["required"]) == {"owner", "repo"}
    assert schema["additionalProperties"] is False
