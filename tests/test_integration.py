# Copyright 2025 Amazon.com, Inc. or its affiliates.
# SPDX-License-Identifier: Apache-2.0

import json
import os

import pytest

from ui_accessibility_analyzer.audit.reporter import AccessibilityReporter
from ui_accessibility_analyzer.batch import WorkspaceAnalyzer
from ui_accessibility_analyzer.integration.commands import (
    COMMAND_ANALYZE_FILE,
    COMMAND_CLEAR_DIAGNOSTICS,
    DISABLED_MESSAGE,
    CommandDispatcher,
)
from ui_accessibility_analyzer.integration.diagnostics import (
    Diagnostic,
    DiagnosticCollection,
    diagnostics_from_report,
)
from ui_accessibility_analyzer.integration.scheduler import AnalyzeOnTypeScheduler
from ui_accessibility_analyzer.integration.settings import EditorSettings
from ui_accessibility_analyzer.utils.logging_helper import UIAccessibilityError

from conftest import by_id, ident, listen, make_tree, set_attr, write_tree


@pytest.fixture
def workspace(tmp_path):
    write_tree(tmp_path / "a.json", make_tree(listen(by_id("save"), "click", line=3)))
    write_tree(tmp_path / "b.json", make_tree(set_attr(ident("w"), "role", "buttonx")))
    write_tree(tmp_path / "nested" / "c.json", make_tree())
    return tmp_path


@pytest.fixture
def analyzer():
    with WorkspaceAnalyzer(workers=2, show_progress=False) as workspace_analyzer:
        yield workspace_analyzer


def _dispatcher(workspace, analyzer, **settings):
    return CommandDispatcher(EditorSettings(**settings), str(workspace), analyzer)


def _stored(workspace):
    with open(workspace / ".a11y" / "diagnostics.json", encoding="utf-8") as f:
        return json.load(f)


# Diagnostics


def test_diagnostics_from_report(mouse_only_tree):
    report = AccessibilityReporter().analyze(mouse_only_tree)
    assert len(diagnostics_from_report(report)) == 2

    diagnostics = diagnostics_from_report(report, "warning")
    assert diagnostics == [
        Diagnostic(
            severity="warning",
            message=diagnostics[0].message,
            line=3,
            column=0,
            code="mouse-only-click",
            source="keyboard",
            wcag=["2.1.1"],
        )
    ]


def test_collection_round_trip(tmp_path, mouse_only_tree):
    report = AccessibilityReporter().analyze(mouse_only_tree)
    collection = DiagnosticCollection(str(tmp_path), min_severity="warning")
    collection.set_from_report(str(tmp_path / "src" / "a.json"), report)
    assert collection.files() == [os.path.join("src", "a.json")]
    assert len(collection) == 1

    saved = collection.save()
    assert saved == os.path.join(str(tmp_path), ".a11y", "diagnostics.json")

    restored = DiagnosticCollection(str(tmp_path))
    assert restored.load() == 1
    assert restored.get(str(tmp_path / "src" / "a.json")) == collection.get(str(tmp_path / "src" / "a.json"))

    assert restored.delete(str(tmp_path / "src" / "a.json")) is True
    assert restored.delete(str(tmp_path / "src" / "a.json")) is False
    assert len(restored) == 0


def test_load_without_file(tmp_path):
    assert DiagnosticCollection(str(tmp_path)).load() == 0


def test_load_corrupt_file(tmp_path):
    (tmp_path / ".a11y").mkdir()
    (tmp_path / ".a11y" / "diagnostics.json").write_text("[1, 2", encoding="utf-8")
    with pytest.raises(UIAccessibilityError):
        DiagnosticCollection(str(tmp_path)).load()


# Commands


def test_files_for_modes(workspace, analyzer):
    def names(paths):
        return sorted(os.path.relpath(p, workspace) for p in paths)

    a = str(workspace / "a.json")
    assert _dispatcher(workspace, analyzer, analysis_mode="file").files_for(a) == [a]

    smart = _dispatcher(workspace, analyzer, analysis_mode="smart").files_for(a)
    assert smart[0] == a
    assert names(smart) == ["a.json", "b.json"]

    project = _dispatcher(workspace, analyzer, analysis_mode="project").files_for(a)
    assert names(project) == ["a.json", "b.json", os.path.join("nested", "c.json")]

    capped = _dispatcher(workspace, analyzer, analysis_mode="project", max_project_files=1).files_for(a)
    assert len(capped) == 1


def test_analyze_file_records_diagnostics(workspace, analyzer):
    result = _dispatcher(workspace, analyzer, analysis_mode="file").execute(
        COMMAND_ANALYZE_FILE, str(workspace / "a.json")
    )
    assert result["status"] == "ok"
    assert result["summary"]["analyzed"] == 1
    stored = _stored(workspace)
    assert list(stored) == ["a.json"]
    assert stored["a.json"][0]["code"] == "mouse-only-click"


def test_analyze_workspace_reports_partial_failure(workspace, analyzer):
    (workspace / "broken.json").write_text("{", encoding="utf-8")
    result = _dispatcher(workspace, analyzer).analyze_workspace()
    assert result["status"] == "partial"
    assert result["summary"]["failed"] == 1
    assert sorted(_stored(workspace)) == ["a.json", "b.json", os.path.join("nested", "c.json")]


def test_disabled_dispatcher(workspace, analyzer):
    dispatcher = _dispatcher(workspace, analyzer, enable=False)
    result = dispatcher.analyze_file(str(workspace / "a.json"))
    assert result == {"status": "disabled", "message": DISABLED_MESSAGE, "files": {}}
    assert dispatcher.analyze_workspace()["status"] == "disabled"


def test_clear_diagnostics(workspace, analyzer):
    dispatcher = _dispatcher(workspace, analyzer, analysis_mode="smart")
    dispatcher.analyze_file(str(workspace / "a.json"))
    assert sorted(_stored(workspace)) == ["a.json", "b.json"]

    result = dispatcher.execute(COMMAND_CLEAR_DIAGNOSTICS, str(workspace / "b.json"))
    assert result["message"].startswith("Cleared diagnostics for")
    assert list(_stored(workspace)) == ["a.json"]

    dispatcher.clear_diagnostics()
    assert _stored(workspace) == {}


def test_unknown_command(workspace, analyzer):
    with pytest.raises(ValueError):
        _dispatcher(workspace, analyzer).execute("format-disk")


# Scheduler


def test_analyze_on_type_is_off_by_default(workspace, analyzer):
    scheduler = AnalyzeOnTypeScheduler(EditorSettings(), analyzer)
    assert scheduler.notify_changed(str(workspace / "a.json")) is False
    assert scheduler.pending() == []


def test_changes_are_debounced_per_file(workspace, analyzer):
    settings = EditorSettings(analyze_on_type=True, analyze_on_type_delay=60000)
    diagnostics = DiagnosticCollection(str(workspace))
    scheduler = AnalyzeOnTypeScheduler(settings, analyzer, diagnostics)
    a = str(workspace / "a.json")

    assert scheduler.notify_changed(a) is True
    assert scheduler.notify_changed(a) is True
    assert scheduler.pending() == [a]

    futures = scheduler.flush()
    assert len(futures) == 1
    assert "report" in futures[0].result(timeout=10)
    assert scheduler.pending() == []
    assert scheduler.last_future(a) is futures[0]
    assert diagnostics.get(a)[0].code == "mouse-only-click"


def test_save_analyzes_immediately(workspace, analyzer):
    settings = EditorSettings(analyze_on_type=True, analyze_on_type_delay=60000)
    scheduler = AnalyzeOnTypeScheduler(settings, analyzer)
    a = str(workspace / "a.json")
    scheduler.notify_changed(a)

    future = scheduler.notify_saved(a)
    assert "report" in future.result(timeout=10)
    assert scheduler.pending() == []


def test_save_respects_settings(workspace, analyzer):
    scheduler = AnalyzeOnTypeScheduler(EditorSettings(analyze_on_save=False), analyzer)
    assert scheduler.notify_saved(str(workspace / "a.json")) is None


def test_cancel_all_drops_pending_timers(workspace, analyzer):
    settings = EditorSettings(analyze_on_type=True, analyze_on_type_delay=60000)
    scheduler = AnalyzeOnTypeScheduler(settings, analyzer)
    scheduler.notify_changed(str(workspace / "a.json"))
    scheduler.notify_changed(str(workspace / "b.json"))
    assert len(scheduler.pending()) == 2
    scheduler.cancel_all()
    assert scheduler.pending() == []
