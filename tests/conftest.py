# tests/conftest.py
# Ensure the project root (the folder that contains 'flowjs' and 'tests') is on
# sys.path so `import flowjs` works without an editable install.

import copy
import json
import sys
import pathlib

import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]
ROOT_STR = str(ROOT)

if ROOT_STR not in sys.path:
    sys.path.insert(0, ROOT_STR)

SAMPLE_PATH = ROOT / "flowjs" / "samples" / "sample.flow.json"
_SAMPLE = json.loads(SAMPLE_PATH.read_text(encoding="utf-8"))


@pytest.fixture
def sample_doc():
    return copy.deepcopy(_SAMPLE)


def make_doc(nodes, edges):
    """Canonical-format document from (id, kind, props[, children]) tuples and (src, dst[, cond]) tuples."""
    out_nodes = []
    for n in nodes:
        nid, kind, props = n[0], n[1], n[2]
        node = {"id": nid, "type": kind}
        if props is not None:
            node["properties"] = props
        if len(n) > 3:
            node["children"] = list(n[3])
        out_nodes.append(node)
    out_edges = []
    for e in edges:
        edge = {"source": e[0], "target": e[1]}
        if len(e) > 2:
            edge["conditionValue"] = e[2]
        out_edges.append(edge)
    return {"nodes": out_nodes, "edges": out_edges}
