"""flowjs: compile low-code flow graphs to an intermediate tree and async JavaScript."""

from .ast_builder import AstBuilder, build_ast
from .codegen import render
from .compiler import compile_flow, compile_flow_file
from .errors import (
    CyclicGraph,
    DanglingEdge,
    ExpressionError,
    FlowError,
    GraphError,
    InvalidDocument,
    MissingNode,
    MissingStart,
    RenderError,
    UnknownNodeKind,
    UnparsablePattern,
)
from .expr import parse_expr
from .graph import FlowEdge, FlowGraph, FlowNode, load_flow_file, load_flow_json
from .options import CompileOptions

__all__ = [
    "AstBuilder",
    "CompileOptions",
    "CyclicGraph",
    "DanglingEdge",
    "ExpressionError",
    "FlowEdge",
    "FlowError",
    "FlowGraph",
    "FlowNode",
    "GraphError",
    "InvalidDocument",
    "MissingNode",
    "MissingStart",
    "RenderError",
    "UnknownNodeKind",
    "UnparsablePattern",
    "build_ast",
    "compile_flow",
    "compile_flow_file",
    "load_flow_file",
    "load_flow_json",
    "parse_expr",
    "render",
]
