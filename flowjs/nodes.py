# flowjs/nodes.py
# Constructors for the intermediate tree. Nodes are plain dicts tagged by
# "type" so the finished tree dumps straight to JSON.

from __future__ import annotations
from typing import Any, Dict, List, Optional, Tuple

Node = Dict[str, Any]

STATEMENT_TYPES = frozenset({
    "Program",
    "BlockStatement",
    "ExpressionStatement",
    "VariableDeclaration",
    "IfStatement",
    "ForEachStatement",
    "ReturnStatement",
})

EXPRESSION_TYPES = frozenset({
    "AssignmentExpression",
    "AsyncCallExpression",
    "MemberExpression",
    "BinaryExpression",
    "ObjectExpression",
    "Identifier",
    "Literal",
})

# ---------- expressions ----------

def identifier(name: str) -> Node:
    return {"type": "Identifier", "name": name}

def literal(value: Any) -> Node:
    return {"type": "Literal", "value": value}

def member(obj: Node, prop: Node) -> Node:
    return {"type": "MemberExpression", "object": obj, "property": prop}

def binary(operator: str, left: Node, right: Node) -> Node:
    return {"type": "BinaryExpression", "operator": operator, "left": left, "right": right}

def assignment(left: Node, right: Node, operator: str = "=") -> Node:
    return {"type": "AssignmentExpression", "operator": operator, "left": left, "right": right}

def object_expression(pairs: List[Tuple[str, Node]]) -> Node:
    return {
        "type": "ObjectExpression",
        "properties": [{"key": identifier(k), "value": v} for k, v in pairs],
    }

def async_call(callee: Node, arguments: List[Node]) -> Node:
    return {"type": "AsyncCallExpression", "callee": callee, "arguments": list(arguments)}

# ---------- statements ----------

def program(body: Optional[List[Node]] = None) -> Node:
    return {"type": "Program", "body": list(body or [])}

def block(body: Optional[List[Node]] = None) -> Node:
    return {"type": "BlockStatement", "body": list(body or [])}

def expression_statement(expression: Node) -> Node:
    return {"type": "ExpressionStatement", "expression": expression}

def variable_declaration(name: str, init: Node, kind: str = "const") -> Node:
    return {"type": "VariableDeclaration", "kind": kind, "id": identifier(name), "init": init}

def if_statement(test: Node) -> Node:
    """Both branches always exist; traversal fills them in afterwards."""
    return {"type": "IfStatement", "test": test, "consequent": block(), "alternate": block()}

def for_each(variable: str, iterable: Node) -> Node:
    return {"type": "ForEachStatement", "variable": identifier(variable), "iterable": iterable, "body": block()}

def return_statement(argument: Node) -> Node:
    return {"type": "ReturnStatement", "argument": argument}


def count_types(tree: Any, type_name: str) -> int:
    """Count nodes tagged `type_name` anywhere in `tree`."""
    if isinstance(tree, dict):
        own = 1 if tree.get("type") == type_name else 0
        return own + sum(count_types(v, type_name) for v in tree.values())
    if isinstance(tree, list):
        return sum(count_types(v, type_name) for v in tree)
    return 0
