# scripts/peek_ast.py
# Show what's inside the tree built for a flow document: statement counts and
# the first few top-level statements.

import json, os, sys
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from flowjs.ast_builder import build_ast
from flowjs.errors import FlowError
from flowjs.graph import load_flow_file
from flowjs.nodes import STATEMENT_TYPES, count_types

def main():
    if len(sys.argv) < 2:
        print("Usage: python scripts/peek_ast.py <flow.json>")
        sys.exit(2)
    try:
        tree = build_ast(load_flow_file(sys.argv[1]))
    except FlowError as e:
        print(f"peek_ast: error [{e.code}]: {e}")
        sys.exit(e.exit_code)
    print("top-level statements:", len(tree["body"]))
    for kind in sorted(STATEMENT_TYPES - {"Program", "BlockStatement"}):
        print(f"  {kind}: {count_types(tree, kind)}")
    for i, stmt in enumerate(tree["body"][:12]):
        print(f"    {i:02d}: {json.dumps(stmt, sort_keys=True)[:100]}")

if __name__ == "__main__":
    main()
