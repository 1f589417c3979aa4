# Copyright 2025 Amazon.com, Inc. or its affiliates.
# SPDX-License-Identifier: Apache-2.0

from ui_accessibility_analyzer.audit.analyzers.timing_analyzer import (
    TimingAnalyzer,
    contains_navigation,
    has_uncleared_intervals,
)
from ui_accessibility_analyzer.tree.action_tree import ActionNode, ActionTree

from conftest import assign, call, func, ident, lit, make_tree, member


def _navigate():
    return assign(member(ident("window"), "location"), lit("/next"))


def test_interval_without_clear(interval_tree):
    results = TimingAnalyzer().analyze(interval_tree)
    issue = results["issues"][0]
    assert issue["type"] == "uncontrolled-auto-update"
    assert issue["wcag"] == ["2.2.2"]
    assert issue["interval"] == 1000
    assert issue["location"]["line"] == 7
    assert has_uncleared_intervals(results)
    assert results["stats"]["unclearedIntervals"] == 1


def test_interval_with_clear_anywhere():
    tree = make_tree(
        call("setInterval", func(), lit(1000)),
        call("clearInterval", ident("timer")),
    )
    results = TimingAnalyzer().analyze(tree)
    assert results["issues"] == []
    assert results["stats"]["clearedIntervals"] == 1
    assert not has_uncleared_intervals(results)


def test_long_timeout_with_navigation():
    tree = make_tree(call("window.setTimeout", func(_navigate()), lit(6000)))
    results = TimingAnalyzer().analyze(tree)
    issue = results["issues"][0]
    assert issue["type"] == "unannounced-timeout"
    assert issue["wcag"] == ["2.2.1"]
    assert issue["delay"] == 6000
    assert "navigation" in issue["message"]


def test_long_timeout_with_dom_rewrite():
    rewrite = assign(member(ident("box"), "innerHTML"), lit(""))
    results = TimingAnalyzer().analyze(make_tree(call("setTimeout", func(rewrite), lit("8000"))))
    issue = results["issues"][0]
    assert issue["delay"] == 8000
    assert "major DOM changes" in issue["message"]


def test_short_or_harmless_timeouts_are_fine():
    tree = make_tree(
        call("setTimeout", func(_navigate()), lit(1000)),
        call("setTimeout", func(call("console.log", lit("tick"))), lit(9000)),
    )
    results = TimingAnalyzer().analyze(tree)
    assert results["stats"]["totalTimeouts"] == 2
    assert results["issues"] == []


def test_significant_delay_option():
    tree = make_tree(call("setTimeout", func(_navigate()), lit(6000)))
    assert TimingAnalyzer({"significantDelay": 10000}).analyze(tree)["issues"] == []


def test_contains_navigation_via_location_method():
    reload = call("location.reload", callee_node=member(ident("location"), "reload"))
    assert contains_navigation(func(reload))
    assert not contains_navigation(None)


def _deep_callback(depth):
    node = call("location.reload", callee_node=member(ident("location"), "reload"))
    for _ in range(depth):
        node.attributes["role"] = "right"
        node = ActionNode("binaryOp", {"operator": "+"}, children=[ident("x", role="left"), node])
    return func(node)


def test_navigation_found_in_deeply_nested_callback():
    tree = make_tree(call("setTimeout", _deep_callback(2000), lit(6000)))
    loaded = ActionTree.from_dict(tree.to_dict())
    issue = TimingAnalyzer().analyze(loaded)["issues"][0]
    assert issue["type"] == "unannounced-timeout"
    assert "navigation" in issue["message"]
