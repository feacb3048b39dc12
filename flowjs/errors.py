# flowjs/errors.py
# Error taxonomy for the flow compiler. Every failure is fail-fast: the first
# error aborts compilation and no partial output is produced.

from __future__ import annotations
from typing import List, Optional


class FlowError(Exception):
    code = "flow-error"
    exit_code = 1


# ----------------------------
# Graph errors
# ----------------------------

class GraphError(FlowError):
    code = "graph-error"


class MissingStart(GraphError):
    code = "missing-start"
    exit_code = 10

    def __init__(self, count: int):
        if count == 0:
            msg = "Flow has no start node"
        else:
            msg = f"Flow has {count} start nodes; exactly one is required"
        super().__init__(msg)
        self.count = count


class MissingNode(GraphError):
    code = "missing-node"
    exit_code = 11

    def __init__(self, node_id: str, referenced_by: Optional[str] = None):
        msg = f"Node '{node_id}' does not exist"
        if referenced_by:
            msg += f" (referenced by {referenced_by})"
        super().__init__(msg)
        self.node_id = node_id
        self.referenced_by = referenced_by


class DanglingEdge(GraphError):
    code = "dangling-edge"
    exit_code = 12

    def __init__(self, source: str, target: str, missing: str):
        super().__init__(f"Edge {source} -> {target} points at unknown node '{missing}'")
        self.source = source
        self.target = target
        self.missing = missing


class CyclicGraph(GraphError):
    code = "cyclic-graph"
    exit_code = 13

    def __init__(self, path: List[str]):
        super().__init__("Flow contains a cycle: " + " -> ".join(path))
        self.path = list(path)


class InvalidDocument(GraphError):
    code = "invalid-document"
    exit_code = 14

    def __init__(self, reason: str, where: Optional[str] = None):
        msg = f"Invalid flow document: {reason}"
        if where:
            msg += f" (at {where})"
        super().__init__(msg)
        self.reason = reason
        self.where = where


# ----------------------------
# Expression errors
# ----------------------------

class ExpressionError(FlowError):
    code = "expression-error"


class UnparsablePattern(ExpressionError):
    code = "unparsable-pattern"
    exit_code = 20

    def __init__(self, pattern, reason: str, node_id: Optional[str] = None, prop: Optional[str] = None):
        msg = f"Cannot parse expression {pattern!r}: {reason}"
        if node_id is not None:
            msg += f" (node '{node_id}'"
            msg += f", property '{prop}')" if prop else ")"
        super().__init__(msg)
        self.pattern = pattern
        self.reason = reason
        self.node_id = node_id
        self.prop = prop


# ----------------------------
# Render errors
# ----------------------------

class RenderError(FlowError):
    code = "render-error"


class UnknownNodeKind(RenderError):
    code = "unknown-node-kind"
    exit_code = 30

    def __init__(self, kind):
        super().__init__(f"Cannot render tree node of type {kind!r}")
        self.kind = kind
