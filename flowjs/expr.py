# flowjs/expr.py
# Micro-expression parser for flow node properties.
# There is no precedence and no parenthesization. Checks run in a fixed order
# and the first one that matches decides the shape:
#   1. $name / $object/property      reference (bare references only)
#   2. left + right                  split on the first "+"
#   3. left === right                split on the first "==="
#   4. numeric text                  number literal
#   5. anything else                 opaque literal, kept verbatim
# Because "+" is checked before "===", "a === b + c" parses as (a === b) + c.

from __future__ import annotations
import math
import re
from typing import Any

from .errors import UnparsablePattern
from .nodes import Node, binary, identifier, literal, member

SIGIL = "$"
PATH_SEP = "/"
OPERATORS = ("+", "===")  # in check order

NAME_RE = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")
NUMBER_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$")


def _is_bare_reference(rest: str) -> bool:
    return not any(op in rest for op in OPERATORS)

def _parse_reference(text: str, rest: str) -> Node:
    if PATH_SEP in rest:
        obj, _, prop = rest.partition(PATH_SEP)
        if PATH_SEP in prop:
            raise UnparsablePattern(text, "member references take a single '/'")
        for part in (obj, prop):
            if not NAME_RE.match(part):
                raise UnparsablePattern(text, f"invalid reference name {part!r}")
        return member(identifier(obj), identifier(prop))
    if not NAME_RE.match(rest):
        raise UnparsablePattern(text, f"invalid reference name {rest!r}")
    return identifier(rest)

def _coerce_number(text: str):
    s = text.strip()
    if not NUMBER_RE.match(s):
        return None
    if re.match(r"^[+-]?\d+$", s):
        return int(s)
    value = float(s)
    if not math.isfinite(value):
        return None
    return value

def _parse_binary(text: str, op: str) -> Node:
    left, _, right = text.partition(op)
    left, right = left.strip(), right.strip()
    if not left or not right:
        raise UnparsablePattern(text, f"operator {op!r} needs an operand on both sides")
    return binary(op, _parse_text(left), _parse_text(right))

def _parse_text(text: str) -> Node:
    if text.startswith(SIGIL) and _is_bare_reference(text[1:]):
        return _parse_reference(text, text[1:])
    for op in OPERATORS:
        if op in text:
            return _parse_binary(text, op)
    number = _coerce_number(text)
    if number is not None:
        return literal(number)
    return literal(text)


def parse_expr(value: Any) -> Node:
    """Parse a single property value into an expression node.

    Numbers become numeric literals, booleans and null stay opaque literals,
    strings go through the ordered checks above. An empty string is an opaque
    literal; an empty operand inside a binary expression is an error.
    """
    if isinstance(value, bool) or value is None:
        return literal(value)
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            raise UnparsablePattern(value, "number is not finite")
        return literal(value)
    if not isinstance(value, str):
        raise UnparsablePattern(value, f"expected a string or number, got {type(value).__name__}")
    if not value.strip():
        return literal(value)
    return _parse_text(value)
