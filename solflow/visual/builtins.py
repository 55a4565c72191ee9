"""Built-in handlers for the pure node families.

Math, logic, input, output, loop/collection and utility nodes. None of them
touch the network; all of them take `(inputs, context)` like every other
handler so the dispatcher can treat the registry uniformly.
"""

from __future__ import annotations

import asyncio
import json
import logging
import math
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from ..adapters.inputs import require_input, to_int, to_number
from ..constants import LAMPORTS_PER_SOL

NodeOutputs = Dict[str, Any]
NodeHandler = Callable[[Dict[str, Any], Any], Union[NodeOutputs, Awaitable[NodeOutputs]]]

# `output-log` writes here; hosts can route it separately from engine logs.
node_logger = logging.getLogger("solflow.nodes")

# Node types whose outputs are captured for presentation.
PRESENTATION_NODE_TYPES = frozenset({"output-display", "output-log"})


def get_builtin_handler(node_type: str) -> Optional[NodeHandler]:
    """Get a built-in handler function for a node type."""
    return BUILTIN_HANDLERS.get(node_type)


def _tidy(value: Union[int, float]) -> Union[int, float]:
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


# Math operations
def math_add(inputs: Dict[str, Any], context: Any = None) -> NodeOutputs:
    """Add two numbers."""
    return {"result": _tidy(to_number(inputs.get("a")) + to_number(inputs.get("b")))}


def math_subtract(inputs: Dict[str, Any], context: Any = None) -> NodeOutputs:
    """Subtract b from a."""
    return {"result": _tidy(to_number(inputs.get("a")) - to_number(inputs.get("b")))}


def math_multiply(inputs: Dict[str, Any], context: Any = None) -> NodeOutputs:
    """Multiply two numbers."""
    return {"result": _tidy(to_number(inputs.get("a")) * to_number(inputs.get("b")))}


def math_divide(inputs: Dict[str, Any], context: Any = None) -> NodeOutputs:
    """Divide a by b."""
    b = to_number(inputs.get("b"))
    if b == 0:
        raise ValueError("Division by zero")
    return {"result": _tidy(to_number(inputs.get("a")) / b)}


def lamports_to_sol(inputs: Dict[str, Any], context: Any = None) -> NodeOutputs:
    return {"sol": _tidy(to_number(inputs.get("lamports")) / LAMPORTS_PER_SOL)}


def sol_to_lamports(inputs: Dict[str, Any], context: Any = None) -> NodeOutputs:
    return {"lamports": int(math.floor(to_number(inputs.get("sol")) * LAMPORTS_PER_SOL))}


# Logic
def _ordered(a: Any, b: Any, op: Callable[[Any, Any], bool]) -> bool:
    if a is None or b is None:
        return False
    try:
        return bool(op(a, b))
    except TypeError as e:
        raise ValueError(f"Cannot compare {type(a).__name__} with {type(b).__name__}") from e


def logic_compare(inputs: Dict[str, Any], context: Any = None) -> NodeOutputs:
    """Compare two values: equality plus ordering in both directions."""
    a = inputs.get("a")
    b = inputs.get("b")
    return {
        "equal": a == b,
        "greater": _ordered(a, b, lambda x, y: x > y),
        "less": _ordered(a, b, lambda x, y: x < y),
    }


def logic_and(inputs: Dict[str, Any], context: Any = None) -> NodeOutputs:
    return {"result": bool(inputs.get("a")) and bool(inputs.get("b"))}


def logic_or(inputs: Dict[str, Any], context: Any = None) -> NodeOutputs:
    return {"result": bool(inputs.get("a")) or bool(inputs.get("b"))}


def logic_not(inputs: Dict[str, Any], context: Any = None) -> NodeOutputs:
    return {"result": not bool(inputs.get("a"))}


def logic_switch(inputs: Dict[str, Any], context: Any = None) -> NodeOutputs:
    """Pick `trueValue` or `falseValue` by `condition`."""
    key = "trueValue" if bool(inputs.get("condition")) else "falseValue"
    return {"result": inputs.get(key)}


# Input nodes (their configured values arrive through the resolver)
def input_string(inputs: Dict[str, Any], context: Any = None) -> NodeOutputs:
    value = inputs.get("value")
    return {"value": "" if value is None else str(value)}


def input_number(inputs: Dict[str, Any], context: Any = None) -> NodeOutputs:
    return {"value": to_number(inputs.get("value"))}


def input_publickey(inputs: Dict[str, Any], context: Any = None) -> NodeOutputs:
    value = inputs.get("publicKey")
    return {"publicKey": "" if value is None else str(value).strip()}


def input_boolean(inputs: Dict[str, Any], context: Any = None) -> NodeOutputs:
    return {"value": bool(inputs.get("value"))}


# Output nodes
def output_display(inputs: Dict[str, Any], context: Any = None) -> NodeOutputs:
    return {"displayValue": inputs.get("value")}


def output_log(inputs: Dict[str, Any], context: Any = None) -> NodeOutputs:
    value = inputs.get("value")
    label = inputs.get("label") or "Log"
    node_logger.info("[%s]: %s", label, value)
    return {"logged": True, "value": value}


# Loops and collections
def _require_array(inputs: Dict[str, Any], key: str = "array") -> List[Any]:
    value = inputs.get(key)
    if not isinstance(value, (list, tuple)):
        raise ValueError("Input must be an array")
    return list(value)


def loop_for_each(inputs: Dict[str, Any], context: Any = None) -> NodeOutputs:
    """Aggregate view of an iteration: last item, last index and every (item, index) pair.

    Downstream nodes run once, after the whole array has been mapped. An empty
    array yields `item=None` and `index=-1`.
    """
    array = _require_array(inputs)
    return {
        "item": array[-1] if array else None,
        "index": len(array) - 1,
        "result": [{"item": item, "index": i} for i, item in enumerate(array)],
    }


def loop_repeat(inputs: Dict[str, Any], context: Any = None) -> NodeOutputs:
    times = to_int(inputs.get("times"), 1) or 1
    value = inputs.get("value")
    return {"index": times - 1, "results": [value for _ in range(max(times, 0))]}


def loop_range(inputs: Dict[str, Any], context: Any = None) -> NodeOutputs:
    """Numbers from `start` (inclusive) to `end` (exclusive) by `step`.

    A negative step counts down. A zero step is rejected.
    """
    start = to_number(inputs.get("start"), 0)
    end = to_number(inputs.get("end"), 10)
    step = to_number(inputs.get("step"), 1)
    if step == 0:
        raise ValueError("Range step cannot be zero")

    values: List[Union[int, float]] = []
    current = start
    if step > 0:
        while current < end:
            values.append(current)
            current += step
    else:
        while current > end:
            values.append(current)
            current += step
    return {"array": values}


def array_length(inputs: Dict[str, Any], context: Any = None) -> NodeOutputs:
    return {"length": len(_require_array(inputs))}


def array_get_item(inputs: Dict[str, Any], context: Any = None) -> NodeOutputs:
    array = _require_array(inputs)
    index = to_int(inputs.get("index"), 0)
    if index < 0 or index >= len(array):
        raise ValueError(f"Index {index} out of bounds (array length: {len(array)})")
    return {"item": array[index]}


# Utility
async def utility_delay(inputs: Dict[str, Any], context: Any = None) -> NodeOutputs:
    ms = to_number(inputs.get("ms"), 1000)
    await asyncio.sleep(max(ms, 0) / 1000.0)
    return {"output": inputs.get("input")}


def utility_json_parse(inputs: Dict[str, Any], context: Any = None) -> NodeOutputs:
    text = require_input(inputs, "json", "JSON string")
    try:
        return {"object": json.loads(str(text))}
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON: {e.msg} (line {e.lineno}, column {e.colno})") from e


def utility_json_stringify(inputs: Dict[str, Any], context: Any = None) -> NodeOutputs:
    return {"json": json.dumps(inputs.get("object"), separators=(",", ":"), default=str)}


def utility_get_property(inputs: Dict[str, Any], context: Any = None) -> NodeOutputs:
    """Read `key` from `object`; dotted keys walk nested objects and arrays."""
    obj = inputs.get("object")
    key = "" if inputs.get("key") is None else str(inputs.get("key"))

    if isinstance(obj, dict) and key in obj:
        return {"value": obj[key]}

    current: Any = obj
    for part in key.split("."):
        if isinstance(current, dict):
            current = current.get(part)
        elif isinstance(current, list) and part.isdigit() and int(part) < len(current):
            current = current[int(part)]
        else:
            return {"value": None}
    return {"value": current}


BUILTIN_HANDLERS: Dict[str, NodeHandler] = {
    # Math
    "math-add": math_add,
    "math-subtract": math_subtract,
    "math-multiply": math_multiply,
    "math-divide": math_divide,
    "lamports-to-sol": lamports_to_sol,
    "sol-to-lamports": sol_to_lamports,
    # Logic
    "logic-compare": logic_compare,
    "logic-and": logic_and,
    "logic-or": logic_or,
    "logic-not": logic_not,
    "logic-switch": logic_switch,
    # Input
    "input-string": input_string,
    "input-number": input_number,
    "input-publickey": input_publickey,
    "input-boolean": input_boolean,
    # Output
    "output-display": output_display,
    "output-log": output_log,
    # Loops / collections
    "loop-for-each": loop_for_each,
    "loop-repeat": loop_repeat,
    "loop-range": loop_range,
    "array-length": array_length,
    "array-get-item": array_get_item,
    # Utility
    "utility-delay": utility_delay,
    "utility-json-parse": utility_json_parse,
    "utility-json-stringify": utility_json_stringify,
    "utility-get-property": utility_get_property,
}
