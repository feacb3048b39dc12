import pytest

from flowjs.ast_builder import build_ast
from flowjs.errors import CyclicGraph, MissingNode, MissingStart, UnparsablePattern
from flowjs.graph import FlowEdge, FlowGraph, FlowNode, load_flow_json
from flowjs.nodes import count_types
from flowjs.options import CompileOptions

from conftest import make_doc


def _build(nodes, edges, **opts):
    return build_ast(load_flow_json(make_doc(nodes, edges)), CompileOptions(**opts))

def _set(nid, key, value):
    return (nid, "set-variable", {"key": key, "value": value})

def _end(nid, output):
    return (nid, "end", {"output": output})


def test_start_to_end_yields_single_return():
    tree = _build([("s", "start", None), _end("e", "$x")], [("s", "e")])
    assert tree == {
        "type": "Program",
        "body": [{"type": "ReturnStatement", "argument": {"type": "Identifier", "name": "x"}}],
    }

def test_set_variable_assignment():
    tree = _build([("s", "start", None), _set("a", "$x", "5")], [("s", "a")])
    stmt = tree["body"][0]
    assert stmt["type"] == "ExpressionStatement"
    assert stmt["expression"] == {
        "type": "AssignmentExpression",
        "operator": "=",
        "left": {"type": "Identifier", "name": "x"},
        "right": {"type": "Literal", "value": 5},
    }

def test_bare_key_becomes_identifier():
    tree = _build([("s", "start", None), _set("a", "res", "$name")], [("s", "a")])
    assert tree["body"][0]["expression"]["left"] == {"type": "Identifier", "name": "res"}

@pytest.mark.parametrize("key", ["12", "$a + 1", "not a name"])
def test_unassignable_key(key):
    with pytest.raises(UnparsablePattern) as ex:
        _build([("s", "start", None), _set("a", key, "1")], [("s", "a")])
    assert ex.value.node_id == "a"
    assert ex.value.prop == "key"

def test_bad_value_reports_node_and_property():
    with pytest.raises(UnparsablePattern) as ex:
        _build([("s", "start", None), _set("a", "$x", "$a/b/c")], [("s", "a")])
    assert (ex.value.node_id, ex.value.prop) == ("a", "value")
    assert "node 'a'" in str(ex.value)

def test_first_end_wins_later_ends_are_noops():
    tree = _build(
        [("s", "start", None), ("c", "if", {"expression": "$ok"}), _end("t", "yes"), _end("f", "no")],
        [("s", "c"), ("c", "t", True), ("c", "f", False)],
    )
    assert count_types(tree, "ReturnStatement") == 1
    ret = tree["body"][-1]
    assert ret == {"type": "ReturnStatement", "argument": {"type": "Literal", "value": "yes"}}

def test_if_with_both_branches_populated():
    tree = _build(
        [("s", "start", None), ("c", "if", {"expression": "$a === 1"}),
         _set("t", "$x", "1"), _set("f", "$x", "2")],
        [("s", "c"), ("c", "t", True), ("c", "f", False)],
    )
    stmt = tree["body"][0]
    assert stmt["type"] == "IfStatement"
    assert len(stmt["consequent"]["body"]) == 1
    assert len(stmt["alternate"]["body"]) == 1
    assert stmt["alternate"]["body"][0]["expression"]["right"]["value"] == 2

def test_if_with_only_true_branch_has_empty_alternate():
    tree = _build(
        [("s", "start", None), ("c", "if", {"expression": "$a"}), _set("t", "$x", "1")],
        [("s", "c"), ("c", "t", True)],
    )
    stmt = tree["body"][0]
    assert len(stmt["consequent"]["body"]) == 1
    assert stmt["alternate"] == {"type": "BlockStatement", "body": []}

def test_branch_chain_stays_inside_branch():
    tree = _build(
        [("s", "start", None), ("c", "if", {"expression": "$a"}),
         _set("t1", "$x", "1"), _set("t2", "$y", "2")],
        [("s", "c"), ("c", "t1", True), ("t1", "t2")],
    )
    assert len(tree["body"]) == 1
    assert len(tree["body"][0]["consequent"]["body"]) == 2

def _nested_ifs():
    return (
        [("s", "start", None), ("c1", "if", {"expression": "$a"}),
         ("c2", "if", {"expression": "$b"}), _set("t", "$x", "1")],
        [("s", "c1"), ("c1", "c2", True), ("c2", "t", True)],
    )

def test_nested_if_goes_to_program_root():
    tree = _build(*_nested_ifs())
    assert [s["type"] for s in tree["body"]] == ["IfStatement", "IfStatement"]
    assert tree["body"][0]["consequent"]["body"] == []
    assert len(tree["body"][1]["consequent"]["body"]) == 1

def test_nest_conditionals_keeps_if_in_enclosing_branch():
    tree = _build(*_nested_ifs(), nest_conditionals=True)
    assert len(tree["body"]) == 1
    inner = tree["body"][0]["consequent"]["body"][0]
    assert inner["type"] == "IfStatement"
    assert len(inner["consequent"]["body"]) == 1

def test_http_call_declaration_and_param_order():
    params = [{"key": k, "value": v} for k, v in (("z", "1"), ("a", "$res"), ("m", "x"))]
    tree = _build(
        [("s", "start", None),
         ("h", "http-call", {"url": "http://api/x", "params": params, "saveAs": "data1", "method": "POST"})],
        [("s", "h")],
    )
    decl = tree["body"][0]
    assert decl["type"] == "VariableDeclaration"
    assert decl["kind"] == "const"
    assert decl["id"] == {"type": "Identifier", "name": "data1"}
    assert decl["init"]["type"] == "MemberExpression"
    assert decl["init"]["property"] == {"type": "Identifier", "name": "data"}
    call = decl["init"]["object"]
    assert call["type"] == "AsyncCallExpression"
    assert call["callee"]["property"]["name"] == "post"
    url, obj = call["arguments"]
    assert url == {"type": "Literal", "value": "http://api/x"}
    assert [p["key"]["name"] for p in obj["properties"]] == ["z", "a", "m"]
    assert obj["properties"][1]["value"] == {"type": "Identifier", "name": "res"}

def test_http_call_defaults_to_get_without_params():
    tree = _build([("s", "start", None), ("h", "http-call", {"url": "u", "saveAs": "r"})], [("s", "h")])
    call = tree["body"][0]["init"]["object"]
    assert call["callee"]["object"]["name"] == "axios"
    assert call["callee"]["property"]["name"] == "get"
    assert call["arguments"][1] == {"type": "ObjectExpression", "properties": []}

def test_http_client_option():
    tree = _build([("s", "start", None), ("h", "http-call", {"url": "u", "saveAs": "r"})], [("s", "h")],
                  http_client="http")
    assert tree["body"][0]["init"]["object"]["callee"]["object"]["name"] == "http"

def test_loop_body_follows_child_list_not_edges():
    tree = _build(
        [("s", "start", None),
         ("l", "loop", {"loopArray": "$items", "currentItemName": "it"}, ["b", "a"]),
         _set("a", "$x", "1"), _set("b", "$y", "2"), _set("after", "$z", "3")],
        # a -> b edge must not be followed from inside the loop body
        [("s", "l"), ("l", "after"), ("a", "b")],
    )
    loop, after = tree["body"]
    assert loop["type"] == "ForEachStatement"
    assert loop["variable"] == {"type": "Identifier", "name": "it"}
    assert loop["iterable"] == {"type": "Identifier", "name": "items"}
    body = loop["body"]["body"]
    assert [s["expression"]["left"]["name"] for s in body] == ["y", "x"]
    assert after["expression"]["left"]["name"] == "z"

def test_loop_child_missing():
    with pytest.raises(MissingNode) as ex:
        _build([("s", "start", None), ("l", "loop", {"loopArray": "$xs", "currentItemName": "i"}, ["ghost"])],
               [("s", "l")])
    assert ex.value.node_id == "ghost"
    assert "loop 'l'" in str(ex.value)

def test_cycle_is_reported():
    with pytest.raises(CyclicGraph) as ex:
        _build([("s", "start", None), _set("a", "$x", "1"), _set("b", "$y", "2")],
               [("s", "a"), ("a", "b"), ("b", "a")])
    assert ex.value.path == ["a", "b", "a"]

def test_loop_child_pointing_at_loop_is_a_cycle():
    with pytest.raises(CyclicGraph):
        _build([("s", "start", None), ("l", "loop", {"loopArray": "$xs", "currentItemName": "i"}, ["l"])],
               [("s", "l")])

def test_converging_branches_are_not_cycles():
    tree = _build(
        [("s", "start", None), ("c", "if", {"expression": "$a"}), _set("m", "$x", "1")],
        [("s", "c"), ("c", "m", True), ("c", "m", False)],
    )
    stmt = tree["body"][0]
    assert stmt["consequent"]["body"] == stmt["alternate"]["body"]

def test_missing_start():
    with pytest.raises(MissingStart):
        _build([_end("e", 1)], [])

def test_programmatic_graph_missing_property():
    graph = FlowGraph([FlowNode("s", "start"), FlowNode("e", "end")], [FlowEdge("s", "e")])
    with pytest.raises(UnparsablePattern) as ex:
        build_ast(graph)
    assert ex.value.prop == "output"

def test_sample_tree_shape(sample_doc):
    tree = build_ast(load_flow_json(sample_doc))
    assert [s["type"] for s in tree["body"]] == ["ExpressionStatement", "IfStatement", "ReturnStatement"]
    cond = tree["body"][1]
    assert [s["type"] for s in cond["consequent"]["body"]] == [
        "ExpressionStatement", "VariableDeclaration", "ForEachStatement",
    ]
    assert cond["alternate"]["body"] == []
    assert tree["body"][2]["argument"] == {"type": "Identifier", "name": "orders"}

def test_programmatic_editor_kinds_build():
    graph = FlowGraph(
        [FlowNode("s", "start"), FlowNode("x", "if-node", {"expression": "$a"})],
        [FlowEdge("s", "x")],
    )
    tree = build_ast(graph)
    assert [s["type"] for s in tree["body"]] == ["IfStatement"]

def test_loop_child_if_still_walks_its_branches():
    tree = _build(
        [("s", "start", None),
         ("l", "loop", {"loopArray": "$xs", "currentItemName": "i"}, ["c"]),
         ("c", "if", {"expression": "$i"}), _set("t", "$x", "1")],
        [("s", "l"), ("c", "t", True)],
    )
    loop, cond = tree["body"]
    assert loop["body"]["body"] == []
    assert cond["type"] == "IfStatement"
    assert len(cond["consequent"]["body"]) == 1

def test_loop_child_if_nests_in_body_when_asked():
    tree = _build(
        [("s", "start", None),
         ("l", "loop", {"loopArray": "$xs", "currentItemName": "i"}, ["c"]),
         ("c", "if", {"expression": "$i"}), _set("t", "$x", "1")],
        [("s", "l"), ("c", "t", True)],
        nest_conditionals=True,
    )
    (loop,) = tree["body"]
    (cond,) = loop["body"]["body"]
    assert len(cond["consequent"]["body"]) == 1
