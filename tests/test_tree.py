# Copyright 2025 Amazon.com, Inc. or its affiliates.
# SPDX-License-Identifier: Apache-2.0

import json

import pytest

from ui_accessibility_analyzer.tree.action_tree import ActionNode, ActionTree
from ui_accessibility_analyzer.tree.node_views import CallView, JsxAttributeView, MemberAccessView, UnaryOpView
from ui_accessibility_analyzer.utils.logging_helper import TreeLoadError

from conftest import call, ident, lit, make_tree, member, set_attr


def test_children_sorted_by_sequence_number():
    data = {
        "actionType": "program",
        "children": [
            {"actionType": "identifier", "sequenceNumber": 20, "attributes": {"name": "b"}},
            {"actionType": "identifier", "sequenceNumber": 10, "attributes": {"name": "a"}},
        ],
    }
    tree = ActionTree.from_dict(data)
    assert [c.get("name") for c in tree.root.children] == ["a", "b"]


def test_default_sequence_numbers_step_by_ten():
    root = ActionNode("program", children=[ident("a"), ident("b")])
    assert [c.sequence_number for c in root.children] == [10, 20]


def test_document_round_trip():
    tree = make_tree(set_attr(ident("el"), "role", "tab"), source="app.js")
    loaded = ActionTree.from_json(tree.to_json())
    assert loaded.source == "app.js"
    assert loaded.root.to_dict() == tree.root.to_dict()


def test_null_root_document_loads():
    tree = ActionTree.from_dict({"metadata": {"source": "x.js"}, "root": None})
    assert tree.root is None
    valid, errors = tree.validate()
    assert not valid
    assert errors == ["Tree has no root action"]


def test_malformed_json_raises_tree_load_error():
    with pytest.raises(TreeLoadError):
        ActionTree.from_json("{not json")


def test_node_without_action_type_raises():
    with pytest.raises(TreeLoadError):
        ActionTree.from_dict({"root": {"attributes": {}}})


def test_load_missing_file_raises(tmp_path):
    with pytest.raises(TreeLoadError):
        ActionTree.load(str(tmp_path / "missing.json"))


def test_load_errors_carry_the_file_path(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("[1, 2", encoding="utf-8")
    with pytest.raises(TreeLoadError) as excinfo:
        ActionTree.load(str(path))
    assert excinfo.value.path == str(path)


def test_load_uses_path_as_source(tmp_path):
    path = tmp_path / "tree.json"
    path.write_text(json.dumps({"actionType": "program"}), encoding="utf-8")
    assert ActionTree.load(str(path)).source == str(path)


def test_validate_detects_repeated_node():
    shared = ident("x")
    root = ActionNode("program")
    root.children = [shared, shared]
    valid, errors = ActionTree(root).validate()
    assert not valid
    assert any("Circular reference" in e for e in errors)


def test_views_return_none_for_missing_fields():
    node = ActionNode("call")
    view = CallView.of(node)
    assert view.callee == ""
    assert view.method is None
    assert view.argument(0) is None
    assert CallView.of(ident("x")) is None
    assert MemberAccessView.of(ActionNode("memberAccess")).object_name is None


def test_call_view_method_from_member_callee():
    node = call("a.b.focus", callee_node=member(ident("a"), "focus"))
    assert CallView(node).method == "focus"
    assert CallView(node).calls("focus")


def test_jsx_attribute_event_type():
    node = ActionNode("jsxAttribute", {"name": "onKeyDown"})
    assert JsxAttributeView(node).event_type == "keydown"
    assert JsxAttributeView(ActionNode("jsxAttribute", {"name": "onClick", "eventType": "click"})).event_type == "click"
    assert lit(1).get("value") == 1


def test_member_access_view_fields():
    view = MemberAccessView(member(ident("dialog"), "hidden"))
    assert view.property_name == "hidden"
    assert view.object_name == "dialog"
    assert view.object_node.action_type == "identifier"
    assert MemberAccessView(ActionNode("memberAccess")).property_name == ""


@pytest.mark.parametrize("action_type", ["unaryOp", "unary"])
def test_unary_view_accepts_both_spellings(action_type):
    view = UnaryOpView.of(ActionNode(action_type, {"operator": "-"}, children=[lit(1)]))
    assert view.operator == "-"
    assert view.operand.get("value") == 1


def test_children_without_numbers_keep_file_order():
    data = {
        "actionType": "program",
        "children": [
            {"actionType": "identifier", "sequenceNumber": 50, "attributes": {"name": "a"}},
            {"actionType": "identifier", "attributes": {"name": "b"}},
            {"actionType": "identifier", "attributes": {"name": "c"}},
        ],
    }
    root = ActionTree.from_dict(data).root
    assert [c.get("name") for c in root.children] == ["a", "b", "c"]
    assert [c.sequence_number for c in root.children] == [50, 60, 70]


def test_children_must_be_a_list():
    with pytest.raises(TreeLoadError):
        ActionNode.from_dict({"actionType": "program", "children": {"actionType": "call"}})


def _chain(depth):
    data = {"actionType": "identifier", "attributes": {"name": "leaf"}}
    for _ in range(depth):
        data = {"actionType": "binaryOp", "attributes": {"operator": "+"}, "children": [data]}
    return data


def test_deep_tree_loads_walks_and_serializes():
    tree = ActionTree.from_dict({"root": _chain(3000)})
    nodes = list(tree.walk())
    assert len(nodes) == 3001
    assert nodes[-1].get("name") == "leaf"
    assert tree.validate() == (True, [])

    again = ActionTree.from_dict(tree.to_dict())
    assert [n.id for n in again.walk()] == [n.id for n in nodes]
    assert len(tree.root.find_all("binaryOp")) == 3000
