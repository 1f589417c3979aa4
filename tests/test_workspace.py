# Copyright 2025 Amazon.com, Inc. or its affiliates.
# SPDX-License-Identifier: Apache-2.0

import os
import threading

import pytest

from ui_accessibility_analyzer.batch import WorkspaceAnalyzer, find_tree_files
from ui_accessibility_analyzer.batch.workspace import summarize_results

from conftest import by_id, ident, listen, make_tree, set_attr, write_tree


@pytest.fixture
def workspace(tmp_path):
    write_tree(tmp_path / "a.json", make_tree(listen(by_id("save"), "click")))
    write_tree(tmp_path / "sub" / "b.json", make_tree(set_attr(ident("w"), "role", "buttonx")))
    write_tree(tmp_path / "node_modules" / "c.json", make_tree())
    write_tree(tmp_path / ".hidden" / "d.json", make_tree())
    write_tree(tmp_path / "skip" / "e.json", make_tree())
    (tmp_path / ".a11yrc.json").write_text("{}", encoding="utf-8")
    (tmp_path / "a11y.config.json").write_text("{}", encoding="utf-8")
    (tmp_path / "notes.txt").write_text("not a tree", encoding="utf-8")
    return tmp_path


def _names(paths, root):
    return [os.path.relpath(p, root) for p in paths]


def test_find_tree_files(workspace):
    found = find_tree_files(str(workspace), exclude_patterns=["skip"])
    assert _names(found, workspace) == ["a.json", os.path.join("sub", "b.json")]


def test_find_tree_files_options(workspace):
    assert _names(find_tree_files(str(workspace), recursive=False), workspace) == ["a.json"]
    assert len(find_tree_files(str(workspace), max_files=1)) == 1
    assert len(find_tree_files(str(workspace))) == 3


def test_analyze_files_keeps_input_order(workspace):
    paths = [str(workspace / "sub" / "b.json"), str(workspace / "a.json"), str(workspace / "missing.json")]
    with WorkspaceAnalyzer(workers=2, show_progress=False) as analyzer:
        results = analyzer.analyze_files(paths)
    assert list(results) == paths
    assert results[paths[0]]["report"].has_errors()
    assert results[paths[1]]["report"].scores.keyboard == 87
    assert "not found" in results[paths[2]]["error"]

    summary = summarize_results(results)
    assert summary == {"files": 3, "analyzed": 2, "failed": 1, "cancelled": 0, "issues": 3, "errors": 1}


def test_malformed_file_is_an_error(tmp_path):
    broken = tmp_path / "broken.json"
    broken.write_text("{oops", encoding="utf-8")
    with WorkspaceAnalyzer(workers=1, show_progress=False) as analyzer:
        result = analyzer.submit(str(broken)).result(timeout=10)
    assert "Invalid action tree JSON" in result["error"]


def test_analyze_workspace(workspace):
    with WorkspaceAnalyzer(workers=2, show_progress=False) as analyzer:
        results = analyzer.analyze_workspace(str(workspace), exclude_patterns=["skip"])
    assert _names(results, workspace) == ["a.json", os.path.join("sub", "b.json")]


def test_newer_submission_supersedes_queued_one(workspace):
    started = threading.Event()
    release = threading.Event()

    def hold(path, result):
        started.set()
        release.wait(10)

    a = str(workspace / "a.json")
    b = str(workspace / "sub" / "b.json")
    with WorkspaceAnalyzer(workers=1, show_progress=False) as analyzer:
        first = analyzer.submit(a, callback=hold)
        assert started.wait(10)
        stale = analyzer.submit(b)
        fresh = analyzer.submit(b)
        release.set()
        assert first.result(timeout=10)["report"].scores.keyboard == 87
        assert stale.result(timeout=10) == {"cancelled": True}
        assert "report" in fresh.result(timeout=10)
    assert analyzer.in_flight() == []


def test_cancel_all_counts_in_flight(workspace):
    started = threading.Event()
    release = threading.Event()

    def hold(path, result):
        started.set()
        release.wait(10)

    a = str(workspace / "a.json")
    b = str(workspace / "sub" / "b.json")
    with WorkspaceAnalyzer(workers=1, show_progress=False) as analyzer:
        analyzer.submit(a, callback=hold)
        assert started.wait(10)
        queued = analyzer.submit(b)
        assert analyzer.token_for(b) is not None
        assert analyzer.cancel_all() == 1
        release.set()
        assert queued.result(timeout=10) == {"cancelled": True}


def test_cancel_single_path(workspace):
    started = threading.Event()
    release = threading.Event()

    def hold(path, result):
        started.set()
        release.wait(10)

    b = str(workspace / "sub" / "b.json")
    with WorkspaceAnalyzer(workers=1, show_progress=False) as analyzer:
        analyzer.submit(str(workspace / "a.json"), callback=hold)
        assert started.wait(10)
        queued = analyzer.submit(b)
        assert analyzer.cancel(b) is True
        assert analyzer.cancel(str(workspace / "nothing.json")) is False
        release.set()
        assert queued.result(timeout=10) == {"cancelled": True}


def test_worker_count_from_config():
    with WorkspaceAnalyzer(show_progress=False) as analyzer:
        assert analyzer.workers == 4
