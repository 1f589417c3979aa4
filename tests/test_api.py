# Copyright 2025 Amazon.com, Inc. or its affiliates.
# SPDX-License-Identifier: Apache-2.0

import json

import pytest

from ui_accessibility_analyzer import analyze, analyze_file
from ui_accessibility_analyzer.audit.base_analyzer import CancellationToken
from ui_accessibility_analyzer.utils.config import config_manager
from ui_accessibility_analyzer.utils.logging_helper import AnalysisCancelledError, TreeLoadError
from ui_accessibility_analyzer.tree.action_tree import ActionNode, ActionTree

from conftest import call, func, ident, lit, make_tree, member, write_tree


def test_analyze_uses_configured_options(dialog_tree):
    assert analyze(dialog_tree).scores.widgets == 12
    config_manager.set_user_config({"strictMode": True}, section="analysis")
    assert analyze(dialog_tree).scores.widgets == 3
    assert analyze(dialog_tree, options={"strictMode": False}).scores.widgets == 12


def test_analyze_file_writes_report(tmp_path, mouse_only_tree):
    tree_path = write_tree(tmp_path / "mouse.json", mouse_only_tree)
    output = tmp_path / "out" / "mouse.txt"
    report = analyze_file(tree_path, output_path=str(output), report_format="text")
    assert report.source == "test.js"
    assert "Grade: A" in output.read_text(encoding="utf-8")


def test_analyze_file_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        analyze_file(str(tmp_path / "missing.json"))


def test_analyze_file_rejects_duplicate_action_ids(tmp_path):
    path = tmp_path / "duplicate.json"
    node = {"id": "n1", "actionType": "call", "children": []}
    root = {"id": "root", "actionType": "program", "children": [node, node]}
    path.write_text(json.dumps({"root": root}), encoding="utf-8")
    with pytest.raises(TreeLoadError):
        analyze_file(str(path))


def test_analyze_file_with_null_root(tmp_path):
    path = tmp_path / "empty.json"
    path.write_text(json.dumps({"metadata": {"source": "empty.js"}, "root": None}), encoding="utf-8")
    report = analyze_file(str(path))
    assert report.issues == []
    assert report.source == "empty.js"


def test_cancelled_file_analysis(tmp_path, mouse_only_tree):
    tree_path = write_tree(tmp_path / "mouse.json", mouse_only_tree)
    token = CancellationToken()
    token.cancel()
    with pytest.raises(AnalysisCancelledError):
        analyze_file(tree_path, cancel_token=token)


def test_analyze_handles_deeply_nested_trees():
    node = call("location.reload", callee_node=member(ident("location"), "reload"))
    for _ in range(2000):
        node.attributes["role"] = "right"
        node = ActionNode("binaryOp", {"operator": "+"}, children=[ident("x", role="left"), node])
    tree = ActionTree.from_dict(make_tree(call("setTimeout", func(node), lit(6000))).to_dict())

    report = analyze(tree)
    assert any(issue.type == "unannounced-timeout" for issue in report.issues)
