# Copyright 2025 Amazon.com, Inc. or its affiliates.
# SPDX-License-Identifier: Apache-2.0

"""
Shared fixtures and action tree builders for the test suite.

The builders produce nodes shaped the way the source front end emits them:
call nodes carry a ``callee`` string plus ``callee``/``argument`` children,
member accesses carry a ``property`` and an ``object`` child, and so on.
"""

import pytest

from ui_accessibility_analyzer.tree.action_tree import ActionNode, ActionTree
from ui_accessibility_analyzer.utils.config import config_manager


def _as(node, role):
    if role is not None:
        node.attributes["role"] = role
    return node


def lit(value, role=None):
    return _as(ActionNode("literal", {"value": value}), role)


def ident(name, role=None):
    return _as(ActionNode("identifier", {"name": name}), role)


def member(obj, prop, role=None):
    return _as(ActionNode("memberAccess", {"property": prop}, children=[_as(obj, "object")]), role)


def func(*body, role=None):
    return _as(ActionNode("functionExpr", children=list(body)), role)


def call(callee, *args, callee_node=None, role=None, **attrs):
    children = []
    if callee_node is not None:
        children.append(_as(callee_node, "callee"))
    children.extend(_as(arg, "argument") for arg in args)
    attributes = {"callee": callee}
    attributes.update(attrs)
    return _as(ActionNode("call", attributes, children=children), role)


def by_id(element_id, role=None):
    """document.getElementById('<element_id>')"""
    return call(
        "document.getElementById",
        lit(element_id),
        callee_node=member(ident("document"), "getElementById"),
        role=role,
    )


def method_call(target, method, *args, role=None):
    """target.method(...args), with the callee as a member access."""
    return call(f"el.{method}", *args, callee_node=member(target, method), role=role)


def set_attr(target, name, value, role=None):
    return method_call(target, "setAttribute", lit(name), lit(value), role=role)


def listen(target, event, *body, line=None):
    """target.addEventListener('<event>', function () { ...body })"""
    attrs = {"pattern": "eventHandler"}
    if line is not None:
        attrs["line"] = line
    return call("el.addEventListener", lit(event), func(*body), callee_node=target, **attrs)


def compare(prop, value, operator="==="):
    """e.<prop> <operator> <value>"""
    return ActionNode(
        "binaryOp",
        {"operator": operator},
        children=[member(ident("e"), prop, role="left"), lit(value, role="right")],
    )


def assign(left, right):
    return ActionNode("assign", children=[_as(left, "left"), _as(right, "right")])


def focus_call(name, method="focus"):
    return call(f"{name}.{method}", callee_node=ident(name), pattern="focusOp")


def make_tree(*nodes, source="test.js"):
    return ActionTree(ActionNode("program", children=list(nodes)), source=source)


def write_tree(path, tree):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(tree.to_json(), encoding="utf-8")
    return str(path)


@pytest.fixture(autouse=True)
def reset_config():
    """Drop user configuration set by a test."""
    yield
    config_manager.reset_user_config()


@pytest.fixture
def empty_tree():
    return make_tree()


@pytest.fixture
def mouse_only_tree():
    """One click handler on #save and no keyboard handler."""
    return make_tree(listen(by_id("save"), "click", line=3))


@pytest.fixture
def dialog_tree():
    """setAttribute('role', 'dialog') on #modal with no label."""
    return make_tree(set_attr(by_id("modal"), "role", "dialog"))


@pytest.fixture
def quick_nav_tree():
    """A keydown handler on document checking e.key === 'h' without modifiers."""
    return make_tree(listen(ident("document"), "keydown", compare("key", "h")))


@pytest.fixture
def interval_tree():
    return make_tree(call("setInterval", func(), lit(1000), line=7))


@pytest.fixture
def tabindex_tree():
    return make_tree(set_attr(ident("item"), "tabindex", "3"))


@pytest.fixture
def invalid_role_tree():
    return make_tree(set_attr(ident("widget"), "role", "buttonx"))
