# Copyright 2025 Amazon.com, Inc. or its affiliates.
# SPDX-License-Identifier: Apache-2.0

from ui_accessibility_analyzer.audit.analyzers.event_analyzer import EventAnalyzer
from ui_accessibility_analyzer.audit.analyzers.keyboard_analyzer import (
    KeyboardAnalyzer,
    get_screen_reader_conflicts_by_key,
    has_arrow_navigation,
    has_escape_handler,
    is_likely_key_value,
)
from ui_accessibility_analyzer.tree.action_tree import ActionNode

from conftest import by_id, call, compare, ident, lit, listen, make_tree, member


def _issue_types(results):
    return [issue["type"] for issue in results["issues"]]


def test_mouse_only_click(mouse_only_tree):
    results = KeyboardAnalyzer().analyze(mouse_only_tree)
    assert results["mouseOnlyElements"] == ["#save"]
    issues = [i for i in results["issues"] if i["type"] == "mouse-only-click"]
    assert len(issues) == 1
    assert issues[0]["severity"] == "warning"
    assert issues[0]["elementRef"] == "#save"
    assert results["stats"]["mouseOnlyElements"] == 1


def test_keyboard_handler_on_same_element_clears_mouse_only():
    tree = make_tree(listen(by_id("save"), "click"), listen(by_id("save"), "keydown"))
    results = KeyboardAnalyzer().analyze(tree)
    assert results["mouseOnlyElements"] == []
    assert "mouse-only-click" not in _issue_types(results)


def test_global_targets_never_mouse_only():
    results = KeyboardAnalyzer().analyze(make_tree(listen(ident("document"), "click")))
    assert results["mouseOnlyElements"] == []


def test_uses_supplied_event_results(mouse_only_tree):
    events = EventAnalyzer().analyze(mouse_only_tree)
    results = KeyboardAnalyzer().analyze(mouse_only_tree, events)
    assert results["stats"]["totalMouseHandlers"] == 1


def test_quick_nav_conflict(quick_nav_tree):
    results = KeyboardAnalyzer().analyze(quick_nav_tree)
    conflicts = [i for i in results["issues"] if i["type"] == "screen-reader-conflict"]
    assert len(conflicts) == 1
    assert conflicts[0]["severity"] == "warning"
    assert conflicts[0]["screenReaderFunction"] == "heading"
    assert "heading" in conflicts[0]["message"]
    assert len(get_screen_reader_conflicts_by_key(results, "h")) == 1


def test_modifier_in_same_handler_suppresses_conflict():
    tree = make_tree(listen(ident("document"), "keydown", compare("key", "h"), member(ident("e"), "ctrlKey")))
    results = KeyboardAnalyzer().analyze(tree)
    assert results["screenReaderConflicts"] == []
    assert results["keyboardShortcuts"][0]["modifiers"] == ["ctrlKey"]


def test_modifier_in_other_handler_does_not_suppress_conflict():
    tree = make_tree(
        listen(ident("document"), "keydown", compare("key", "h")),
        listen(ident("document"), "keyup", member(ident("e"), "ctrlKey")),
    )
    results = KeyboardAnalyzer().analyze(tree)
    assert len(results["screenReaderConflicts"]) == 1


def test_number_key_conflict_message():
    tree = make_tree(listen(ident("document"), "keydown", compare("key", "1")))
    issue = next(i for i in KeyboardAnalyzer().analyze(tree)["issues"] if i["type"] == "screen-reader-conflict")
    assert issue["message"].startswith('Number key "1"')


def test_key_checks_outside_keyboard_handler_are_ignored():
    tree = make_tree(listen(ident("btn"), "click", compare("key", "Enter")))
    assert KeyboardAnalyzer().analyze(tree)["keyChecks"] == []


def test_tab_with_prevent_default_is_potential_trap():
    tree = make_tree(
        listen(ident("menu"), "keydown", compare("key", "Tab"), call("e.preventDefault")),
    )
    results = KeyboardAnalyzer().analyze(tree)
    assert results["trapPatterns"][0]["type"] == "potential-trap"
    assert "potential-keyboard-trap" in _issue_types(results)
    assert "tab-without-shift" in _issue_types(results)


def test_tab_trap_with_escape_and_shift_is_intentional():
    tree = make_tree(
        listen(
            ident("dialog"),
            "keydown",
            compare("key", "Tab"),
            compare("key", "Escape"),
            member(ident("e"), "shiftKey"),
            call("e.preventDefault"),
        ),
    )
    results = KeyboardAnalyzer().analyze(tree)
    assert results["trapPatterns"][0]["type"] == "intentional-trap"
    assert "potential-keyboard-trap" not in _issue_types(results)
    assert "tab-without-shift" not in _issue_types(results)
    assert has_escape_handler(results)


def test_deprecated_key_code_and_activation_pattern():
    tree = make_tree(listen(ident("btn"), "keydown", compare("keyCode", 13, "==")))
    results = KeyboardAnalyzer().analyze(tree)
    deprecated = [i for i in results["issues"] if i["type"] == "deprecated-keycode"]
    assert len(deprecated) == 1
    assert deprecated[0]["severity"] == "info"
    activation = next(p for p in results["navigationPatterns"] if p["type"] == "activation-keys")
    assert activation["hasEnter"] is True
    assert activation["hasSpace"] is False


def test_switch_case_labels_count_as_key_checks():
    case = ActionNode("case", children=[lit("ArrowDown", role="test")])
    tree = make_tree(listen(ident("list"), "keydown", ActionNode("switch", children=[case])))
    results = KeyboardAnalyzer().analyze(tree)
    assert [k["key"] for k in results["keyChecks"]] == ["ArrowDown"]
    assert has_arrow_navigation(results)
    assert "screen-reader-arrow-conflict" in _issue_types(results)


def test_stats_by_key_and_event_type():
    tree = make_tree(listen(ident("list"), "keydown", compare("key", "Home"), compare("key", "End")))
    stats = KeyboardAnalyzer().analyze(tree)["stats"]
    assert stats["byKey"] == {"Home": 1, "End": 1}
    assert stats["byEventType"] == {"keydown": 1}
    assert stats["totalKeyboardHandlers"] == 1


def test_is_likely_key_value():
    assert is_likely_key_value("Enter")
    assert is_likely_key_value("F5")
    assert is_likely_key_value(27)
    assert not is_likely_key_value(1234)
    assert not is_likely_key_value(True)
    assert not is_likely_key_value("not-a-key")


def test_null_root_yields_empty_results():
    results = KeyboardAnalyzer().analyze(None)
    assert results["keyboardHandlers"] == []
    assert results["issues"] == []
