# flowjs/codegen.py
# Render the intermediate tree as JavaScript source.
# Statements append whole lines to `out`; expressions return inline text.

from __future__ import annotations
import json
from typing import Any, Callable, Dict, List, Optional

from .errors import UnknownNodeKind
from .expr import NAME_RE
from .nodes import Node
from .options import CompileOptions

# ---------- expressions ----------

def _literal(node: Node) -> str:
    return json.dumps(node.get("value"), ensure_ascii=False)

def _identifier(node: Node) -> str:
    return node["name"]

def _binary(node: Node) -> str:
    return f"{_emit_expr(node['left'])} {node['operator']} {_emit_expr(node['right'])}"

def _member(node: Node) -> str:
    obj = _emit_expr(node["object"])
    if node["object"].get("type") in ("AsyncCallExpression", "BinaryExpression", "AssignmentExpression"):
        obj = f"({obj})"
    return f"{obj}.{_emit_expr(node['property'])}"

def _async_call(node: Node) -> str:
    args = ", ".join(_emit_expr(a) for a in node["arguments"])
    return f"await {_emit_expr(node['callee'])}({args})"

def _object_key(key: Node) -> str:
    name = key["name"]
    return name if NAME_RE.match(name) else json.dumps(name, ensure_ascii=False)

def _object(node: Node) -> str:
    props = node["properties"]
    if not props:
        return "{}"
    inner = ", ".join(f"{_object_key(p['key'])}: {_emit_expr(p['value'])}" for p in props)
    return "{ " + inner + " }"

EXPRESSIONS: Dict[str, Callable[[Node], str]] = {
    "Literal": _literal,
    "Identifier": _identifier,
    "BinaryExpression": _binary,
    "AssignmentExpression": _binary,
    "MemberExpression": _member,
    "AsyncCallExpression": _async_call,
    "ObjectExpression": _object,
}

def _emit_expr(node: Node) -> str:
    kind = node.get("type") if isinstance(node, dict) else None
    fn = EXPRESSIONS.get(kind)
    if fn is None:
        raise UnknownNodeKind(kind)
    return fn(node)

# ---------- statements ----------

class _Emitter:
    def __init__(self, options: CompileOptions):
        self.options = options
        self.out: List[str] = []
        self.handlers: Dict[str, Callable[[Node, int], None]] = {
            "Program": self._program,
            "BlockStatement": self._block,
            "ExpressionStatement": self._expression_statement,
            "VariableDeclaration": self._declaration,
            "IfStatement": self._if,
            "ForEachStatement": self._for_each,
            "ReturnStatement": self._return,
        }

    def line(self, depth: int, text: str) -> None:
        self.out.append(f"{self.options.indent * depth}{text}\n")

    def emit(self, node: Node, depth: int) -> None:
        kind = node.get("type") if isinstance(node, dict) else None
        fn = self.handlers.get(kind)
        if fn is None:
            raise UnknownNodeKind(kind)
        fn(node, depth)

    def _program(self, node: Node, depth: int) -> None:
        self.line(depth, f"async function {self.options.function_name}() {{")
        for stmt in node["body"]:
            self.emit(stmt, depth + 1)
        self.line(depth, "}")

    def _block(self, node: Node, depth: int) -> None:
        for stmt in node["body"]:
            self.emit(stmt, depth)

    def _expression_statement(self, node: Node, depth: int) -> None:
        self.line(depth, f"{_emit_expr(node['expression'])};")

    def _declaration(self, node: Node, depth: int) -> None:
        self.line(depth, f"{node['kind']} {_emit_expr(node['id'])} = {_emit_expr(node['init'])};")

    def _if(self, node: Node, depth: int) -> None:
        self.line(depth, f"if ({_emit_expr(node['test'])}) {{")
        self.emit(node["consequent"], depth + 1)
        self.line(depth, "} else {")
        self.emit(node["alternate"], depth + 1)
        self.line(depth, "}")

    def _for_each(self, node: Node, depth: int) -> None:
        self.line(depth, f"for (let {_emit_expr(node['variable'])} of {_emit_expr(node['iterable'])}) {{")
        self.emit(node["body"], depth + 1)
        self.line(depth, "}")

    def _return(self, node: Node, depth: int) -> None:
        self.line(depth, f"return {_emit_expr(node['argument'])};")


def render(tree: Node, options: Optional[CompileOptions] = None) -> str:
    """Render a Program (or any statement node) to source text. Does not mutate `tree`."""
    emitter = _Emitter(options or CompileOptions())
    emitter.emit(tree, 0)
    return "".join(emitter.out)


def render_expression(node: Any) -> str:
    return _emit_expr(node)
