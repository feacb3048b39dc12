# flowjs/ast_builder.py
# Depth-first walk of a FlowGraph producing the intermediate tree.
#
# Every walk carries an explicit insertion target (the statement list that
# receives new statements). Conditional branches and loop bodies are walked
# with their own block as the target; the outer walk keeps its own.

from __future__ import annotations
import logging
from typing import Any, Callable, Dict, List, Optional, Set

from . import nodes
from .errors import CyclicGraph, UnparsablePattern
from .expr import NAME_RE, parse_expr
from .graph import FlowGraph, FlowNode
from .nodes import Node
from .options import CompileOptions

log = logging.getLogger(__name__)

_MISSING = object()

Handler = Callable[[FlowNode, List[Node]], Optional[str]]


class AstBuilder:
    """Builds one Program tree from one graph. Not reusable."""

    def __init__(self, graph: FlowGraph, options: Optional[CompileOptions] = None):
        self.graph = graph
        self.options = options or CompileOptions()
        self.program = nodes.program()
        self._has_return = False
        self._path: List[str] = []
        self._on_path: Set[str] = set()
        # node kind -> handler; each handler returns the id of the next node
        # on the same insertion target, or None when the chain stops there.
        self._dispatch: Dict[str, Handler] = {
            "start": self._start,
            "set-variable": self._set_variable,
            "if": self._if,
            "http-call": self._http_call,
            "loop": self._loop,
            "end": self._end,
        }

    def build(self) -> Node:
        start = self.graph.start_node()
        self._walk(start.id, self.program["body"], via=None)
        return self.program

    # ----------------------------- traversal ------------------------------

    def _walk(self, node_id: str, target: List[Node], via: Optional[str], follow: bool = True) -> None:
        entered: List[str] = []
        try:
            current: Optional[str] = node_id
            while current is not None:
                node = self.graph.node(current, via)
                if node.id in self._on_path:
                    raise CyclicGraph(self._path[self._path.index(node.id):] + [node.id])
                self._path.append(node.id)
                self._on_path.add(node.id)
                entered.append(node.id)
                log.debug("visit %s (%s) depth=%d", node.id, node.kind, len(self._path))

                nxt = self._dispatch[node.kind](node, target)
                if not follow:
                    break
                current, via = nxt, f"edge from '{node.id}'"
        finally:
            for nid in reversed(entered):
                self._path.pop()
                self._on_path.discard(nid)

    def _next(self, node: FlowNode) -> Optional[str]:
        edge = self.graph.outgoing(node.id)
        return edge.target if edge else None

    # ----------------------------- properties -----------------------------

    def _prop(self, node: FlowNode, prop: str) -> Any:
        value = node.properties.get(prop, _MISSING)
        if value is _MISSING:
            raise UnparsablePattern(None, "property is missing", node.id, prop)
        return value

    def _expr(self, node: FlowNode, prop: str, value: Any = _MISSING) -> Node:
        if value is _MISSING:
            value = self._prop(node, prop)
        try:
            return parse_expr(value)
        except UnparsablePattern as exc:
            raise UnparsablePattern(exc.pattern, exc.reason, node.id, prop) from exc

    def _name(self, node: FlowNode, prop: str) -> str:
        value = self._prop(node, prop)
        if not isinstance(value, str) or not NAME_RE.match(value):
            raise UnparsablePattern(value, "not a valid variable name", node.id, prop)
        return value

    def _assign_target(self, node: FlowNode) -> Node:
        left = self._expr(node, "key")
        if left["type"] in ("Identifier", "MemberExpression"):
            return left
        # a bare name without the sigil parses as an opaque literal
        value = left.get("value")
        if left["type"] == "Literal" and isinstance(value, str) and NAME_RE.match(value):
            return nodes.identifier(value)
        raise UnparsablePattern(self._prop(node, "key"), "not an assignable target", node.id, "key")

    # ----------------------------- handlers -------------------------------

    def _start(self, node: FlowNode, target: List[Node]) -> Optional[str]:
        return self._next(node)

    def _set_variable(self, node: FlowNode, target: List[Node]) -> Optional[str]:
        expr = nodes.assignment(self._assign_target(node), self._expr(node, "value"))
        target.append(nodes.expression_statement(expr))
        return self._next(node)

    def _if(self, node: FlowNode, target: List[Node]) -> Optional[str]:
        stmt = nodes.if_statement(self._expr(node, "expression"))
        # conditionals land on the Program root unless nesting is asked for;
        # their branches still fill the conditional's own blocks
        if self.options.nest_conditionals:
            target.append(stmt)
        else:
            self.program["body"].append(stmt)
        for flag, branch in ((True, "consequent"), (False, "alternate")):
            edge = self.graph.outgoing(node.id, flag)
            if edge is None:
                log.debug("if %s: no %s branch", node.id, str(flag).lower())
                continue
            self._walk(edge.target, stmt[branch]["body"], via=f"{str(flag).lower()} edge from '{node.id}'")
        return None

    def _http_call(self, node: FlowNode, target: List[Node]) -> Optional[str]:
        url = self._prop(node, "url")
        method = node.properties.get("method") or "get"
        if not isinstance(method, str) or not NAME_RE.match(method):
            raise UnparsablePattern(method, "not a valid method name", node.id, "method")

        pairs = []
        for i, param in enumerate(node.properties.get("params") or []):
            prop = f"params[{i}]"
            if not isinstance(param, dict) or "key" not in param or "value" not in param:
                raise UnparsablePattern(param, "expected an object with key and value", node.id, prop)
            pairs.append((str(param["key"]), self._expr(node, prop + ".value", param["value"])))

        callee = nodes.member(nodes.identifier(self.options.http_client), nodes.identifier(method.lower()))
        call = nodes.async_call(callee, [nodes.literal(url), nodes.object_expression(pairs)])
        data = nodes.member(call, nodes.identifier("data"))
        target.append(nodes.variable_declaration(self._name(node, "saveAs"), data))
        return self._next(node)

    def _loop(self, node: FlowNode, target: List[Node]) -> Optional[str]:
        stmt = nodes.for_each(self._name(node, "currentItemName"), self._expr(node, "loopArray"))
        target.append(stmt)
        body = stmt["body"]["body"]
        for child_id in node.children:
            self._walk(child_id, body, via=f"children of loop '{node.id}'", follow=False)
        return self._next(node)

    def _end(self, node: FlowNode, target: List[Node]) -> Optional[str]:
        if self._has_return:
            log.debug("end %s: return already emitted, skipping", node.id)
            return None
        self.program["body"].append(nodes.return_statement(self._expr(node, "output")))
        self._has_return = True
        return None


def build_ast(graph: FlowGraph, options: Optional[CompileOptions] = None) -> Node:
    return AstBuilder(graph, options).build()
