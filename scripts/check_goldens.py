# scripts/check_goldens.py
# Recompile every *.flow.json under a directory and compare the generated
# source with the <name>.js golden next to it.
from __future__ import annotations
import sys
from pathlib import Path

# Ensure project root (which contains `flowjs/`) is on sys.path
ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from flowjs.compiler import compile_flow_file  # noqa: E402
from flowjs.errors import FlowError  # noqa: E402

def golden_for(path: Path) -> Path:
    return path.with_name(path.name[: -len(".flow.json")] + ".js")

def check_flow(path: Path) -> int:
    golden_path = golden_for(path)
    if not golden_path.exists():
        print(f"[ERROR] Missing golden: {golden_path}. Export via: python -m flowjs {path} --code-only --out <file>")
        return 1
    try:
        _, code = compile_flow_file(path)
    except FlowError as e:
        print(f"[FAIL] {path.name}: [{e.code}] {e}")
        return 2
    if code == golden_path.read_text(encoding="utf-8"):
        print(f"[OK] {path.name} matches golden.")
        return 0
    print(f"[FAIL] Generated source changed for {path.name}.")
    print(f"       Update golden: python -m flowjs {path} --code-only --out {golden_path}")
    return 3

def main():
    base = Path(sys.argv[1]) if len(sys.argv) > 1 else ROOT / "flowjs" / "samples"
    if not base.exists():
        print(f"[ERROR] {base} not found."); sys.exit(1)
    rc = 0
    for p in sorted(base.glob("*.flow.json")):
        rc |= check_flow(p)
    sys.exit(1 if rc else 0)

if __name__ == "__main__":
    main()
