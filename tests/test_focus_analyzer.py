# Copyright 2025 Amazon.com, Inc. or its affiliates.
# SPDX-License-Identifier: Apache-2.0

import pytest

from ui_accessibility_analyzer.audit.analyzers.focus_analyzer import (
    FocusAnalyzer,
    get_hiding_operations,
    has_focus_management,
    is_potential_hiding_class,
    parse_int,
)
from ui_accessibility_analyzer.tree.action_tree import ActionNode

from conftest import (
    assign,
    call,
    focus_call,
    ident,
    listen,
    lit,
    make_tree,
    member,
    set_attr,
)


def _issues(results, issue_type):
    return [i for i in results["issues"] if i["type"] == issue_type]


def _hide_display(name):
    return assign(member(member(ident(name), "style"), "display"), lit("none"))


def test_positive_tabindex(tabindex_tree):
    results = FocusAnalyzer().analyze(tabindex_tree)
    change = results["tabIndexChanges"][0]
    assert change["elementRef"] == "item"
    assert change["value"] == 3
    issue = _issues(results, "positive-tabindex")[0]
    assert issue["value"] == 3
    assert issue["elementRef"] == "item"
    assert issue["severity"] == "warning"


@pytest.mark.parametrize("action_type", ["unaryOp", "unary"])
def test_negative_tabindex_assignment_is_not_an_issue(action_type):
    minus_one = ActionNode(action_type, {"operator": "-"}, children=[lit(1, role="argument")])
    tree = make_tree(assign(member(ident("panel"), "tabIndex"), minus_one))
    results = FocusAnalyzer().analyze(tree)
    assert results["tabIndexChanges"][0]["value"] == -1
    assert _issues(results, "positive-tabindex") == []
    assert has_focus_management(results)


def test_focus_on_non_focusable_tag():
    results = FocusAnalyzer().analyze(make_tree(focus_call("div")))
    assert results["focusOperations"][0]["elementRef"] == "div"
    assert len(_issues(results, "possibly-non-focusable")) == 1


def test_focus_on_tag_with_tabindex_is_fine():
    tree = make_tree(set_attr(ident("div"), "tabindex", "-1"), focus_call("div"))
    assert _issues(FocusAnalyzer().analyze(tree), "possibly-non-focusable") == []


def test_hiding_without_focus_management():
    results = FocusAnalyzer().analyze(make_tree(_hide_display("panel")))
    change = results["visibilityChanges"][0]
    assert change["property"] == "style.display"
    assert change["hidesElement"] is True
    issue = _issues(results, "hiding-without-focus-management")[0]
    assert issue["elementRef"] == "panel"


def test_hiding_with_focus_move_in_same_handler():
    tree = make_tree(listen(ident("close"), "click", _hide_display("panel"), focus_call("opener")))
    results = FocusAnalyzer().analyze(tree)
    assert results["visibilityChanges"][0]["eventType"] == "click"
    assert _issues(results, "hiding-without-focus-management") == []
    assert results["patterns"]["returns"][0]["type"] == "click-focus"


def test_focus_move_in_other_handler_does_not_count():
    tree = make_tree(
        listen(ident("close"), "click", _hide_display("panel")),
        listen(ident("other"), "keydown", focus_call("opener")),
    )
    results = FocusAnalyzer().analyze(tree)
    assert len(_issues(results, "hiding-without-focus-management")) == 1
    assert results["patterns"]["traps"][0]["type"] == "keyboard-focus"


def test_showing_is_not_hiding():
    tree = make_tree(assign(member(member(ident("panel"), "style"), "display"), lit("block")))
    results = FocusAnalyzer().analyze(tree)
    assert results["visibilityChanges"][0]["hidesElement"] is False
    assert results["issues"] == []


def test_hidden_attribute_and_property():
    tree = make_tree(
        set_attr(ident("menu"), "hidden", ""),
        assign(member(ident("tip"), "hidden"), lit(True)),
    )
    results = FocusAnalyzer().analyze(tree)
    assert [v["elementRef"] for v in results["visibilityChanges"]] == ["menu", "tip"]
    assert all(v["hidesElement"] for v in results["visibilityChanges"])
    assert len(get_hiding_operations(results)) == 2


def test_standalone_blur():
    results = FocusAnalyzer().analyze(make_tree(focus_call("input", method="blur")))
    assert results["stats"]["totalBlurCalls"] == 1
    assert _issues(results, "standalone-blur")[0]["severity"] == "info"


def test_blur_in_handler_is_not_reported():
    tree = make_tree(listen(ident("input"), "change", focus_call("input", method="blur")))
    assert _issues(FocusAnalyzer().analyze(tree), "standalone-blur") == []


def test_hiding_class_added():
    tree = make_tree(
        call(
            "menu.classList.add",
            lit("is-hidden"),
            callee_node=member(member(ident("menu"), "classList"), "add"),
        )
    )
    results = FocusAnalyzer().analyze(tree)
    change = results["classListChanges"][0]
    assert change["elementRef"] == "menu"
    assert change["mayHideElement"] is True
    assert results["elementRemovals"] == []
    assert _issues(results, "hiding-class-without-focus-management")[0]["severity"] == "info"


def test_class_removal_is_not_element_removal():
    tree = make_tree(
        call(
            "menu.classList.remove",
            lit("open"),
            callee_node=member(member(ident("menu"), "classList"), "remove"),
        )
    )
    results = FocusAnalyzer().analyze(tree)
    assert results["elementRemovals"] == []
    assert results["classListChanges"][0]["mayHideElement"] is False


def test_element_removal():
    tree = make_tree(call("modal.remove", callee_node=member(ident("modal"), "remove")))
    results = FocusAnalyzer().analyze(tree)
    assert results["elementRemovals"][0]["elementRef"] == "modal"
    assert _issues(results, "removal-without-focus-management")[0]["elementRef"] == "modal"


def test_active_element_access():
    results = FocusAnalyzer().analyze(make_tree(member(ident("document"), "activeElement")))
    assert results["stats"]["activeElementAccess"] == 1
    assert results["patterns"]["returns"][0]["type"] == "activeElement-save"


def test_visibility_detection_can_be_disabled():
    analyzer = FocusAnalyzer({"detectVisibilityChanges": False})
    results = analyzer.analyze(make_tree(_hide_display("panel")))
    assert results["visibilityChanges"] == []
    assert results["issues"] == []


def test_helpers():
    assert parse_int("3px") == 3
    assert parse_int("-1") == -1
    assert parse_int(True) is None
    assert parse_int("abc") is None
    assert is_potential_hiding_class("d-none", "add")
    assert not is_potential_hiding_class("d-none", "remove")
    assert not is_potential_hiding_class("active", "add")
