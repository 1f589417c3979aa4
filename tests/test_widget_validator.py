# Copyright 2025 Amazon.com, Inc. or its affiliates.
# SPDX-License-Identifier: Apache-2.0

import pytest

from ui_accessibility_analyzer.audit.analyzers.aria_analyzer import ARIAAnalyzer
from ui_accessibility_analyzer.audit.analyzers.focus_analyzer import FocusAnalyzer
from ui_accessibility_analyzer.audit.analyzers.keyboard_analyzer import KeyboardAnalyzer
from ui_accessibility_analyzer.audit.widget_patterns import WIDGET_PATTERNS, normalize_key
from ui_accessibility_analyzer.audit.widget_validator import (
    WidgetPatternValidator,
    format_validation_summary,
    get_pattern_documentation,
    get_supported_patterns,
)

from conftest import compare, focus_call, ident, listen, make_tree, member, set_attr


def _analyzer_results(tree):
    return {
        "aria": ARIAAnalyzer().analyze(tree),
        "keyboard": KeyboardAnalyzer().analyze(tree),
        "focus": FocusAnalyzer().analyze(tree),
    }


def test_unlabelled_dialog(dialog_tree):
    results = WidgetPatternValidator().validate(_analyzer_results(dialog_tree))
    assert [p["type"] for p in results["detectedPatterns"]] == ["dialog"]
    assert results["detectedPatterns"][0]["source"] == "aria-role"

    validation = results["validationResults"][0]
    assert validation["patternName"] == "Dialog (Modal)"
    assert (validation["passed"], validation["failed"], validation["warnings"]) == (1, 0, 4)
    assert results["summary"]["totalChecks"] == 5

    assert [i["type"] for i in results["issues"]] == [
        "missing-required-attribute",
        "missing-required-key",
        "missing-required-key",
        "missing-focus-trap",
    ]
    assert all(i["severity"] == "warning" for i in results["issues"])
    assert all(i["elementRef"] == "#modal" for i in results["issues"])


def test_strict_mode_fails_missing_attributes_and_keys(dialog_tree):
    results = WidgetPatternValidator({"strictMode": True}).validate(_analyzer_results(dialog_tree))
    summary = results["summary"]
    assert (summary["passed"], summary["failed"], summary["warnings"]) == (1, 3, 1)
    assert [i["severity"] for i in results["issues"]] == ["error", "error", "error", "warning"]


def test_complete_dialog_passes():
    tree = make_tree(
        set_attr(ident("modal"), "role", "dialog"),
        set_attr(ident("modal"), "aria-labelledby", "title"),
        listen(
            ident("modal"),
            "keydown",
            compare("key", "Tab"),
            compare("key", "Escape"),
            member(ident("e"), "shiftKey"),
            focus_call("first"),
        ),
    )
    results = WidgetPatternValidator().validate(_analyzer_results(tree))
    validation = results["validationResults"][0]
    assert validation["failed"] == 0
    assert validation["warnings"] == 0
    assert results["issues"] == []
    assert "[+] All detected patterns" in format_validation_summary(results)


def test_patterns_are_detected_once():
    tree = make_tree(
        set_attr(ident("list"), "role", "tablist"),
        set_attr(ident("tab1"), "role", "tab"),
        set_attr(ident("tab2"), "role", "tab"),
    )
    results = WidgetPatternValidator().validate(_analyzer_results(tree))
    assert [p["type"] for p in results["detectedPatterns"]] == ["tabs"]


def test_dialog_detected_from_keyboard_evidence():
    tree = make_tree(listen(ident("panel"), "keydown", compare("key", "Tab"), compare("keyCode", 27)))
    results = WidgetPatternValidator().validate(_analyzer_results(tree))
    pattern = results["detectedPatterns"][0]
    assert pattern["type"] == "dialog"
    assert pattern["source"] == "keyboard"


def test_missing_required_role_is_an_error():
    tree = make_tree(set_attr(ident("box"), "role", "combobox"))
    results = WidgetPatternValidator().validate(_analyzer_results(tree))
    role_issues = [i for i in results["issues"] if i["type"] == "missing-required-role"]
    assert len(role_issues) == 1
    assert role_issues[0]["severity"] == "error"
    assert '"listbox"' in role_issues[0]["message"]


def test_missing_analyzer_data_is_skipped():
    aria = ARIAAnalyzer().analyze(make_tree(set_attr(ident("modal"), "role", "dialog")))
    results = WidgetPatternValidator().validate({"aria": aria})
    statuses = {c["type"]: c["status"] for c in results["validationResults"][0]["checks"]}
    assert statuses["keyboard"] == "skipped"
    assert statuses["focus"] == "skipped"


def test_no_input():
    results = WidgetPatternValidator().validate(None)
    assert results["detectedPatterns"] == []
    assert results["summary"]["totalChecks"] == 0
    assert "No widget patterns detected" in format_validation_summary(results)


@pytest.mark.parametrize(
    "key,expected",
    [(27, "Escape"), (27.0, "Escape"), ("Esc", "Escape"), (" ", "Space"), ("Up", "ArrowUp"), ("Tab", "Tab")],
)
def test_normalize_key(key, expected):
    assert normalize_key(key) == expected


def test_documentation_helpers():
    supported = get_supported_patterns()
    assert len(supported) == len(WIDGET_PATTERNS) == 19
    assert {"id", "name", "description", "url"} == set(supported[0])

    docs = get_pattern_documentation("dialog")
    assert docs["requiredKeys"] == ["Tab", "Escape"]
    assert docs["url"].startswith("https://www.w3.org/WAI/ARIA/apg/patterns/")
    assert get_pattern_documentation("carousel-of-doom") is None
