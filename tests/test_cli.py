# Copyright 2025 Amazon.com, Inc. or its affiliates.
# SPDX-License-Identifier: Apache-2.0

import json
import os

import pytest
import yaml

from ui_accessibility_analyzer import __version__
from ui_accessibility_analyzer.cli import EXIT_ISSUES, EXIT_OK, EXIT_USAGE, create_parser, main

from conftest import by_id, ident, listen, make_tree, set_attr, write_tree


@pytest.fixture
def trees(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    project = tmp_path / "project"
    return {
        "mouse": write_tree(project / "mouse.json", make_tree(listen(by_id("save"), "click", line=3))),
        "invalid": write_tree(project / "invalid.json", make_tree(set_attr(ident("w"), "role", "buttonx"))),
        "dialog": write_tree(tmp_path / "dialog" / "dialog.json", make_tree(set_attr(by_id("modal"), "role", "dialog"))),
        "project": str(project),
        "root": tmp_path,
    }


def test_version(capsys):
    with pytest.raises(SystemExit) as exc:
        main(["--version"])
    assert exc.value.code == EXIT_OK
    assert __version__ in capsys.readouterr().out


def test_no_command_prints_help(capsys):
    with pytest.raises(SystemExit) as exc:
        main([])
    assert exc.value.code == EXIT_USAGE
    assert "usage: ui-a11y" in capsys.readouterr().out


def test_parser_defaults():
    args = create_parser().parse_args(["analyze", "x.json"])
    assert args.format is None
    assert args.strict is False
    assert args.paths == ["x.json"]


def test_analyze_json(trees, capsys):
    assert main(["analyze", trees["mouse"], "-f", "json", "-q"]) == EXIT_OK
    report = json.loads(capsys.readouterr().out)
    assert report["scores"]["keyboard"] == 87
    assert report["issues"][0]["type"] == "mouse-only-click"


def test_analyze_text_with_min_severity(trees, capsys):
    assert main(["analyze", trees["mouse"], "-f", "text", "--min-severity", "warning", "-q"]) == EXIT_OK
    out = capsys.readouterr().out
    assert "Warnings: 1" in out
    assert "Info:     0" in out


def test_errors_set_exit_code(trees):
    assert main(["analyze", trees["invalid"], "-f", "json", "-q"]) == EXIT_ISSUES


def test_strict_mode_flag(trees):
    assert main(["analyze", trees["dialog"], "-f", "json", "-q"]) == EXIT_OK
    assert main(["analyze", trees["dialog"], "-f", "json", "--strict", "-q"]) == EXIT_ISSUES


def test_missing_input(trees, capsys):
    assert main(["analyze", "nope.json", "-q"]) == EXIT_USAGE
    assert "Input not found" in capsys.readouterr().err


def test_directory_input_writes_one_report_per_file(trees):
    out_dir = trees["root"] / "reports"
    assert main(["analyze", trees["project"], "-f", "html", "-o", str(out_dir), "-q"]) == EXIT_ISSUES
    assert sorted(os.listdir(out_dir)) == ["invalid.a11y.html", "mouse.a11y.html"]


def test_single_output_file(trees):
    out_file = trees["root"] / "out" / "mouse.json"
    assert main(["analyze", trees["mouse"], "-f", "json", "-o", str(out_file), "-q"]) == EXIT_OK
    assert json.loads(out_file.read_text(encoding="utf-8"))["grade"] == "A"


def test_config_file_is_applied(trees, capsys):
    config = trees["root"] / "a11y.yaml"
    config.write_text(yaml.safe_dump({"analysis": {"includeKeyboard": False}}), encoding="utf-8")
    assert main(["analyze", trees["mouse"], "-f", "json", "-c", str(config), "-q"]) == EXIT_OK
    assert json.loads(capsys.readouterr().out)["scores"]["keyboard"] == 50


def test_default_config_file_in_working_directory(trees, capsys):
    (trees["root"] / ".a11yrc.json").write_text(json.dumps({"report": {"format": "json"}}), encoding="utf-8")
    assert main(["analyze", trees["mouse"], "-q"]) == EXIT_OK
    assert json.loads(capsys.readouterr().out)["grade"] == "A"


def test_bad_config_file(trees, capsys):
    config = trees["root"] / "broken.json"
    config.write_text("{", encoding="utf-8")
    assert main(["analyze", trees["mouse"], "-c", str(config), "-q"]) == EXIT_USAGE
    assert "Error parsing configuration file" in capsys.readouterr().err


def test_save_config(trees, capsys):
    saved = trees["root"] / "saved.json"
    args = ["analyze", trees["mouse"], "-f", "json", "--strict", "--save-config", str(saved), "-q"]
    assert main(args) == EXIT_OK
    config = json.loads(saved.read_text(encoding="utf-8"))
    assert config["analysis"]["strictMode"] is True
    assert config["report"]["format"] == "json"
    assert set(config) == {"analysis", "report", "editor", "batch"}


def test_analyze_file_updates_diagnostics(trees):
    project = trees["project"]
    code = main(["analyze-file", trees["mouse"], "-w", project, "--mode", "file", "-q"])
    assert code == EXIT_OK
    with open(os.path.join(project, ".a11y", "diagnostics.json"), encoding="utf-8") as f:
        assert list(json.load(f)) == ["mouse.json"]


def test_analyze_file_missing(trees, capsys):
    assert main(["analyze-file", "nope.json", "-q"]) == EXIT_USAGE


def test_analyze_workspace_and_clear(trees, capsys):
    project = trees["project"]
    assert main(["analyze-workspace", project, "--workers", "2"]) == EXIT_ISSUES
    out = capsys.readouterr().out
    assert "Analyzed 2 of 2 files" in out
    assert "grade" in out

    storage = os.path.join(project, ".a11y", "diagnostics.json")
    with open(storage, encoding="utf-8") as f:
        assert sorted(json.load(f)) == ["invalid.json", "mouse.json"]

    assert main(["clear-diagnostics", "-w", project, "-q"]) == EXIT_OK
    with open(storage, encoding="utf-8") as f:
        assert json.load(f) == {}


def test_analyze_workspace_missing_directory(trees):
    assert main(["analyze-workspace", "nowhere", "-q"]) == EXIT_USAGE
