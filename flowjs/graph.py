# flowjs/graph.py
# Graph model for flow documents: nodes indexed by id, edges indexed by source.
#
# - Validates the raw document against schemas/flow-graph.schema.json.
# - Normalizes editor spellings ("if-node", "saveResponseAsVariableName", ...)
#   to the canonical kinds and property names.
# - Read-only after construction.

from __future__ import annotations
import json
import logging
from dataclasses import dataclass, field, replace
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

from jsonschema import Draft202012Validator
from jsonschema.exceptions import best_match

from .errors import DanglingEdge, InvalidDocument, MissingNode, MissingStart

log = logging.getLogger(__name__)

SCHEMA_DIR = Path(__file__).resolve().parent / "schemas"

KINDS = ("start", "set-variable", "if", "http-call", "loop", "end")

KIND_ALIASES = {
    "start-node": "start",
    "set-variable-node": "set-variable",
    "if-node": "if",
    "http-node": "http-call",
    "loop-node": "loop",
    "end-node": "end",
}

# editor property name -> canonical name, per kind
PROPERTY_ALIASES = {
    "http-call": {"saveResponseAsVariableName": "saveAs"},
    "loop": {"currentItem": "currentItemName"},
}

ANY = object()  # outgoing(): match edges regardless of their condition flag


@lru_cache(maxsize=None)
def load_schema(name: str) -> Dict[str, Any]:
    return json.loads((SCHEMA_DIR / name).read_text(encoding="utf-8"))


def normalize_kind(raw: Any) -> str:
    kind = KIND_ALIASES.get(raw, raw)
    if kind not in KINDS:
        raise InvalidDocument(f"unknown node kind {raw!r}")
    return kind


def _normalize_properties(kind: str, props: Dict[str, Any]) -> Dict[str, Any]:
    aliases = PROPERTY_ALIASES.get(kind) or {}
    out = dict(props)
    for old, new in aliases.items():
        if old in out:
            value = out.pop(old)
            out.setdefault(new, value)
    return out


@dataclass(frozen=True)
class FlowNode:
    id: str
    kind: str
    properties: Dict[str, Any] = field(default_factory=dict)
    children: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class FlowEdge:
    source: str
    target: str
    condition: Optional[bool] = None  # None: unconditional


def _normalize_node(node: FlowNode) -> FlowNode:
    try:
        kind = normalize_kind(node.kind)
    except InvalidDocument:
        raise InvalidDocument(f"unknown node kind {node.kind!r}", f"node '{node.id}'") from None
    props = _normalize_properties(kind, node.properties or {})
    if kind == node.kind and props == node.properties:
        return node
    return replace(node, kind=kind, properties=props)


class FlowGraph:
    def __init__(self, nodes: List[FlowNode], edges: List[FlowEdge]):
        self._nodes: Dict[str, FlowNode] = {}
        for node in nodes:
            node = _normalize_node(node)
            if node.id in self._nodes:
                raise InvalidDocument(f"duplicate node id {node.id!r}")
            self._nodes[node.id] = node
        self._edges: Dict[str, List[FlowEdge]] = {}
        for edge in edges:
            for end in (edge.source, edge.target):
                if end not in self._nodes:
                    raise DanglingEdge(edge.source, edge.target, end)
            self._edges.setdefault(edge.source, []).append(edge)

    def node(self, node_id: str, referenced_by: Optional[str] = None) -> FlowNode:
        try:
            return self._nodes[node_id]
        except KeyError:
            raise MissingNode(node_id, referenced_by) from None

    def outgoing(self, node_id: str, condition: Any = ANY) -> Optional[FlowEdge]:
        """First edge leaving `node_id`, optionally only those whose flag is `condition`.

        Returns None when there is no such edge (no outgoing path).
        """
        edges = self._edges.get(node_id, [])
        if condition is not ANY:
            edges = [e for e in edges if e.condition is condition]
        if not edges:
            return None
        if condition is ANY and len(edges) > 1:
            log.warning("node %s has %d outgoing edges; following %s -> %s",
                        node_id, len(edges), edges[0].source, edges[0].target)
        return edges[0]

    def start_node(self) -> FlowNode:
        starts = [n for n in self._nodes.values() if n.kind == "start"]
        if len(starts) != 1:
            raise MissingStart(len(starts))
        return starts[0]


def validate_document(raw: Any) -> None:
    validator = Draft202012Validator(load_schema("flow-graph.schema.json"))
    err = best_match(validator.iter_errors(raw))
    if err is not None:
        where = "/".join(str(p) for p in err.absolute_path) or None
        raise InvalidDocument(err.message, where)


def load_flow_json(raw: Any) -> FlowGraph:
    """Build a FlowGraph from a parsed JSON document (dict with nodes/edges)."""
    validate_document(raw)

    nodes: List[FlowNode] = []
    for n in raw["nodes"]:
        nodes.append(FlowNode(
            id=n["id"],
            kind=n["type"],
            properties=dict(n.get("properties") or {}),
            children=list(n.get("children") or []),
        ))

    edges: List[FlowEdge] = []
    for e in raw["edges"]:
        cond = e.get("conditionValue", e.get("condition"))
        edges.append(FlowEdge(source=e["source"], target=e["target"], condition=cond))

    log.debug("loaded flow: %d nodes, %d edges", len(nodes), len(edges))
    return FlowGraph(nodes, edges)


def load_flow_file(path) -> FlowGraph:
    return load_flow_json(json.loads(Path(path).read_text(encoding="utf-8")))
