"""Pure node handlers (math, logic, input/output, loops, utility)."""

from __future__ import annotations

import asyncio
import logging

import pytest

from solflow.errors import MissingRequiredInputError
from solflow.visual.builtins import BUILTIN_HANDLERS, get_builtin_handler


def call(node_type: str, **inputs):
    result = get_builtin_handler(node_type)(inputs, None)
    if asyncio.iscoroutine(result):
        return asyncio.run(result)
    return result


def test_math_nodes_keep_integer_results_integral() -> None:
    assert call("math-add", a=3, b=4) == {"result": 7}
    assert call("math-subtract", a=10, b=4) == {"result": 6}
    assert call("math-multiply", a="3", b=2.5) == {"result": 7.5}
    assert call("math-divide", a=9, b=3) == {"result": 3}
    assert call("math-divide", a=1, b=4) == {"result": 0.25}


def test_missing_math_operands_default_to_zero() -> None:
    assert call("math-add", a=5) == {"result": 5}
    assert call("math-multiply", a="", b=3) == {"result": 0}


def test_divide_is_pure_and_rejects_zero_denominator() -> None:
    assert call("math-divide", a=8, b=2) == call("math-divide", a=8, b=2)
    with pytest.raises(ValueError, match="Division by zero"):
        call("math-divide", a=1, b=0)
    with pytest.raises(ValueError, match="Division by zero"):
        call("math-divide", a=1)


def test_non_numeric_math_input_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        call("math-add", a="three", b=1)


def test_lamport_conversions() -> None:
    assert call("lamports-to-sol", lamports=1_500_000_000) == {"sol": 1.5}
    assert call("lamports-to-sol", lamports=2_000_000_000) == {"sol": 2}
    assert call("sol-to-lamports", sol=0.5) == {"lamports": 500_000_000}
    assert call("sol-to-lamports", sol="2") == {"lamports": 2_000_000_000}


def test_logic_compare_reports_equality_and_ordering() -> None:
    assert call("logic-compare", a=2, b=3) == {"equal": False, "greater": False, "less": True}
    assert call("logic-compare", a="b", b="a") == {"equal": False, "greater": True, "less": False}
    assert call("logic-compare", a=None, b=None) == {"equal": True, "greater": False, "less": False}


def test_logic_compare_rejects_unorderable_values() -> None:
    with pytest.raises(ValueError, match="Cannot compare"):
        call("logic-compare", a=1, b="x")


def test_boolean_logic_and_switch() -> None:
    assert call("logic-and", a=True, b=1) == {"result": True}
    assert call("logic-and", a=True, b=0) == {"result": False}
    assert call("logic-or", a=False, b="") == {"result": False}
    assert call("logic-not", a=False) == {"result": True}
    assert call("logic-switch", condition=True, trueValue="yes", falseValue="no") == {"result": "yes"}
    assert call("logic-switch", condition=0, trueValue="yes", falseValue="no") == {"result": "no"}


def test_input_nodes_emit_their_configured_values() -> None:
    assert call("input-string", value="hello") == {"value": "hello"}
    assert call("input-string") == {"value": ""}
    assert call("input-number", value="42") == {"value": 42}
    assert call("input-number") == {"value": 0}
    assert call("input-boolean", value=True) == {"value": True}
    assert call("input-publickey", publicKey=" 11111111111111111111111111111111 ") == {
        "publicKey": "11111111111111111111111111111111"
    }


def test_output_display_passes_value_through() -> None:
    assert call("output-display", value={"x": 1}) == {"displayValue": {"x": 1}}


def test_output_log_writes_through_node_logger(caplog) -> None:
    with caplog.at_level(logging.INFO, logger="solflow.nodes"):
        assert call("output-log", value=42, label="Balance") == {"logged": True, "value": 42}
    assert "[Balance]: 42" in caplog.text


def test_for_each_is_an_aggregate_over_the_array() -> None:
    assert call("loop-for-each", array=["a", "b", "c"]) == {
        "item": "c",
        "index": 2,
        "result": [{"item": "a", "index": 0}, {"item": "b", "index": 1}, {"item": "c", "index": 2}],
    }
    assert call("loop-for-each", array=[]) == {"item": None, "index": -1, "result": []}
    with pytest.raises(ValueError, match="must be an array"):
        call("loop-for-each", array="abc")


def test_loop_repeat_and_range() -> None:
    assert call("loop-repeat", times=3, value="x") == {"index": 2, "results": ["x", "x", "x"]}
    assert call("loop-repeat", value="x") == {"index": 0, "results": ["x"]}
    assert call("loop-repeat", times=0, value="x") == {"index": 0, "results": ["x"]}
    assert call("loop-range", start=0, end=5) == {"array": [0, 1, 2, 3, 4]}
    assert call("loop-range", start=1, end=10, step=3) == {"array": [1, 4, 7]}
    assert call("loop-range", start=3, end=0, step=-1) == {"array": [3, 2, 1]}
    assert call("loop-range") == {"array": list(range(10))}
    with pytest.raises(ValueError, match="step cannot be zero"):
        call("loop-range", start=0, end=3, step=0)


def test_array_nodes_check_bounds() -> None:
    assert call("array-length", array=[1, 2, 3]) == {"length": 3}
    assert call("array-get-item", array=["a", "b"], index=1) == {"item": "b"}
    assert call("array-get-item", array=["a", "b"]) == {"item": "a"}
    with pytest.raises(ValueError, match="out of bounds"):
        call("array-get-item", array=["a", "b"], index=2)
    with pytest.raises(ValueError, match="out of bounds"):
        call("array-get-item", array=["a", "b"], index=-1)


def test_delay_passes_input_through() -> None:
    assert call("utility-delay", input={"k": "v"}, ms=0) == {"output": {"k": "v"}}


def test_json_parse_and_stringify() -> None:
    assert call("utility-json-parse", json='{"a": [1, 2]}') == {"object": {"a": [1, 2]}}
    assert call("utility-json-stringify", object={"a": [1, 2]}) == {"json": '{"a":[1,2]}'}
    with pytest.raises(ValueError, match="Invalid JSON"):
        call("utility-json-parse", json="{nope")
    with pytest.raises(MissingRequiredInputError):
        call("utility-json-parse")


def test_get_property_supports_exact_and_dotted_keys() -> None:
    obj = {"a.b": "exact", "a": {"b": "nested", "list": [10, 20]}}
    assert call("utility-get-property", object=obj, key="a.b") == {"value": "exact"}
    assert call("utility-get-property", object=obj, key="a.list.1") == {"value": 20}
    assert call("utility-get-property", object=obj, key="missing.path") == {"value": None}
    assert call("utility-get-property", object=None, key="x") == {"value": None}


def test_every_builtin_returns_a_dict() -> None:
    for node_type in ("math-add", "logic-and", "input-string", "output-display", "loop-repeat"):
        assert isinstance(BUILTIN_HANDLERS[node_type]({}, None), dict)
