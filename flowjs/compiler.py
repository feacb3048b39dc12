# flowjs/compiler.py
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional, Tuple, Union

from .ast_builder import build_ast
from .codegen import render
from .errors import FlowError
from .expr import NAME_RE
from .graph import FlowGraph, load_flow_json
from .nodes import Node
from .options import CompileOptions

log = logging.getLogger(__name__)

SAMPLE_FLOW = Path(__file__).resolve().parent / "samples" / "sample.flow.json"


def compile_flow(
    flow: Union[FlowGraph, dict],
    options: Optional[CompileOptions] = None,
) -> Tuple[Node, str]:
    """Compile a flow document (or an already built FlowGraph) to (tree, source)."""
    options = options or CompileOptions()
    graph = flow if isinstance(flow, FlowGraph) else load_flow_json(flow)
    tree = build_ast(graph, options)
    code = render(tree, options)
    log.debug("compiled %d top-level statements, %d bytes of source", len(tree["body"]), len(code))
    return tree, code


def compile_flow_file(path: Union[str, Path], options: Optional[CompileOptions] = None) -> Tuple[Node, str]:
    doc = json.loads(Path(path).read_text(encoding="utf-8"))
    return compile_flow(doc, options)


def dump_ast(tree: Node) -> str:
    return json.dumps(tree, ensure_ascii=False, sort_keys=True, indent=2)


def main(argv: Optional[list] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="flowjs",
        description="Compile a flow graph document to an intermediate tree and async JavaScript.",
    )
    parser.add_argument("flow", nargs="?", help="Flow graph JSON (default: bundled sample flow)")
    shown = parser.add_mutually_exclusive_group()
    shown.add_argument("--ast-only", action="store_true", help="Print only the intermediate tree")
    shown.add_argument("--code-only", action="store_true", help="Print only the generated source")
    parser.add_argument("--emit-ast", metavar="PATH", help="Also write the tree JSON to PATH")
    parser.add_argument("--out", metavar="PATH", help="Also write the generated source to PATH")
    parser.add_argument("--function-name", default="flow", help="Name of the generated function (default: flow)")
    parser.add_argument("--indent", type=int, default=2, help="Spaces per nesting level (default: 2)")
    parser.add_argument("--nest-conditionals", action="store_true",
                        help="Place a conditional inside the branch that reaches it instead of the function body")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging on stderr")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if args.indent < 0:
        parser.error("--indent must be >= 0")
    if not NAME_RE.match(args.function_name):
        parser.error(f"--function-name {args.function_name!r} is not a valid identifier")

    in_path = Path(args.flow) if args.flow else SAMPLE_FLOW
    if not in_path.is_file():
        print(f"flowjs: input not found: {in_path}", file=sys.stderr)
        return 2
    try:
        doc: Any = json.loads(in_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        print(f"flowjs: {in_path} is not valid JSON: {e}", file=sys.stderr)
        return 2

    options = CompileOptions(
        function_name=args.function_name,
        indent=" " * args.indent,
        nest_conditionals=bool(args.nest_conditionals),
    )

    try:
        tree, code = compile_flow(doc, options)
    except FlowError as e:
        print(f"flowjs: error [{e.code}]: {e}", file=sys.stderr)
        return e.exit_code

    ast_text = dump_ast(tree)
    if not args.code_only:
        print("ast")
        print(ast_text)
    if not args.ast_only:
        print("code")
        sys.stdout.write(code)

    for path, text in ((args.emit_ast, ast_text + "\n"), (args.out, code)):
        if path:
            out_path = Path(path)
            out_path.parent.mkdir(parents=True, exist_ok=True)
            out_path.write_text(text, encoding="utf-8")
            print(f"flowjs: wrote {out_path}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
