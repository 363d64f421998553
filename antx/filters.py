"""Action parameters from the command line and matching of node filters."""

from __future__ import annotations

import math
import operator as _op
from typing import Any, Callable, Iterable, Iterator

from antx.models import Node
from antx.utils import convert_value

_NODE_FIELDS: dict[str, Callable[[Node], Any]] = {
    "title": lambda node: node.title,
    "mimetype": lambda node: node.mimetype,
    "size": lambda node: node.size,
    "owner": lambda node: node.owner,
}

_NUMERIC_COMPARISONS: dict[str, Callable[[float, float], bool]] = {
    ">": _op.gt,
    "gt": _op.gt,
    "<": _op.lt,
    "lt": _op.lt,
    ">=": _op.ge,
    "gte": _op.ge,
    "<=": _op.le,
    "lte": _op.le,
}


def _format_value(value: Any) -> str:
    """Render a value the way the server-side tools print it."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "<nil>"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "+Inf" if value > 0 else "-Inf"
        if value.is_integer() and abs(value) < 1e21:
            return str(int(value))
        return repr(value)
    if isinstance(value, (list, tuple)):
        return "[" + " ".join(_format_value(item) for item in value) + "]"
    if isinstance(value, dict):
        items = sorted(value.items(), key=lambda item: str(item[0]))
        inner = " ".join(f"{_format_value(k)}:{_format_value(v)}" for k, v in items)
        return "map[" + inner + "]"
    return str(value)


def _parse_number(text: str) -> float | None:
    if not text or text != text.strip() or "_" in text:
        return None
    try:
        return float(text)
    except ValueError:
        return None


def _convert_parameter(value: str) -> Any:
    if value == "true":
        return True
    if value == "false":
        return False
    converted = convert_value(value)
    # Only the exact words true/false become booleans here.
    return value if isinstance(converted, bool) else converted


def parse_parameters(args: Iterable[str]) -> tuple[dict[str, Any], list[str]]:
    """Parse key=value arguments; return the parameters and the ignored arguments."""
    parameters: dict[str, Any] = {}
    ignored: list[str] = []
    for arg in args:
        if "=" not in arg:
            ignored.append(arg)
            continue
        key, value = arg.split("=", 1)
        parameters[key.strip()] = _convert_parameter(value.strip())
    return parameters, ignored


def evaluate_filter(node: Node, field: str, operator: str, value: Any) -> bool:
    """True when the node's field satisfies the condition."""
    getter = _NODE_FIELDS.get(field.lower())
    if getter is None:
        return False
    node_text = _format_value(getter(node))
    value_text = _format_value(value)
    op = operator.lower()

    if op in ("=", "==", "eq", "equals"):
        return node_text == value_text
    if op in ("!=", "ne", "not_equals"):
        return node_text != value_text
    if op in ("contains", "match"):
        return value_text.lower() in node_text.lower()
    if op in ("starts_with", "startswith"):
        return node_text.lower().startswith(value_text.lower())
    if op in ("ends_with", "endswith"):
        return node_text.lower().endswith(value_text.lower())

    compare = _NUMERIC_COMPARISONS.get(op)
    if compare is None:
        return False
    node_number = _parse_number(node_text)
    value_number = _parse_number(value_text)
    if node_number is None or value_number is None:
        return False
    return compare(node_number, value_number)


def _conditions(group: Iterable[Any]) -> Iterator[tuple[str, str, Any]]:
    for condition in group:
        if isinstance(condition, (list, tuple)) and len(condition) >= 3:
            field = condition[0] if isinstance(condition[0], str) else ""
            operator = condition[1] if isinstance(condition[1], str) else ""
            yield field, operator, condition[2]


def _group_matches(node: Node, group: Iterable[Any]) -> bool:
    return all(evaluate_filter(node, *condition) for condition in _conditions(group))


def _is_two_dimensional(filters: list[Any] | tuple[Any, ...]) -> bool:
    return bool(filters) and all(
        isinstance(group, (list, tuple))
        and bool(group)
        and all(isinstance(condition, (list, tuple)) for condition in group)
        for group in filters
    )


def node_matches_filters(node: Node, filters: Any) -> bool:
    """Match a node against AND-ed conditions or an OR of AND-ed groups."""
    if not isinstance(filters, (list, tuple)):
        return True
    if _is_two_dimensional(filters):
        return any(_group_matches(node, group) for group in filters)
    return _group_matches(node, filters)