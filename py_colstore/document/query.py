import json
from typing import Any


EQ_OPERATORS = ("=", "==", "eq")
CONTAINS_OPERATORS = ("like", "LIKE", "contains")


def _is_number(val: Any) -> bool:
    return isinstance(val, (int, float)) and not isinstance(val, bool)


def render_number(val) -> str:
    """
    String form of a JSON number, as it would appear in the file.

    Large and tiny floats use exponent form (``1e+20``, ``1.5e-07``).
    """
    return json.dumps(val)


def field_equals(doc, field: str, value: str) -> bool:
    if not isinstance(doc, dict):
        return False
    val = doc.get(field)
    return isinstance(val, str) and val == value


def field_matches(doc, field: str, value: str, operator: str) -> bool:
    if not isinstance(doc, dict) or not isinstance(value, str):
        return False
    val = doc.get(field)

    if isinstance(val, str):
        if operator in EQ_OPERATORS:
            return val == value
        if operator in CONTAINS_OPERATORS:
            return value in val
        if operator == "starts_with":
            return val.startswith(value)
        if operator == "ends_with":
            return val.endswith(value)
        return False

    if _is_number(val):
        # numbers only support equality, compared by their rendering
        return operator in EQ_OPERATORS and render_number(val) == value

    return False
