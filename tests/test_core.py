import pytest

from aonyx_tools.core import SafetyClass, ToolCall, ToolError, ToolHandler, ToolResult


class _Echo(ToolHandler):
    name = "echo"

    def classify(self):
        return SafetyClass.SAFE

    def schema(self):
        return {"type": "object", "properties": {}}

    def invoke(self, call):
        return ToolResult(call_id=call.id, output=call.args)


class _Partial(ToolHandler):
    name = "partial"

    def classify(self):
        return SafetyClass.SAFE


def test_safety_class_round_trips_through_value():
    for member in SafetyClass:
        assert SafetyClass(member.value) is member


def test_handler_interface_cannot_be_instantiated():
    with pytest.raises(TypeError):
        ToolHandler()


def test_incomplete_handler_cannot_be_instantiated():
    with pytest.raises(TypeError, match="invoke"):
        _Partial()
    assert {"classify", "schema", "invoke"} <= set(ToolHandler.__abstractmethods__)

    class Completed(_Partial):
        def schema(self):
            return {"type": "object"}

        def invoke(self, call):
            return ToolResult(call_id=call.id, output={"name": call.name})

    tool = Completed()
    res = tool.invoke(ToolCall(id="7", name="partial"))
    assert res.call_id == "7"
    assert res.output == {"name": "partial"}
    assert tool.classify() is SafetyClass.SAFE


def test_concrete_handler_invokes():
    tool = _Echo()
    res = tool.invoke(ToolCall(id="1", name="echo", args={"a": 1}))
    assert res.call_id == "1"
    assert res.output == {"a": 1}
    assert res.error is None
    assert tool.classify() is SafetyClass.SAFE
    assert tool.name == "echo"


def test_tool_call_args_default_is_independent():
    a = ToolCall(id="1", name="x")
    b = ToolCall(id="2", name="x")
    a.args["k"] = 1
    assert b.args == {}


def test_tool_error_carries_message():
    message = "bash args: missing field"
    err = ToolError(message)
    assert str(err) == message
    with pytest.raises(ToolError, match="bash args"):
        raise err