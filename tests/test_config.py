# Copyright 2025 Amazon.com, Inc. or its affiliates.
# SPDX-License-Identifier: Apache-2.0

import json

import pytest
import yaml

from ui_accessibility_analyzer.integration.settings import EditorSettings, load_editor_settings
from ui_accessibility_analyzer.utils.config import (
    ConfigManager,
    config_manager,
    find_config_file,
    load_config_file,
    save_config,
    validate_options,
)
from ui_accessibility_analyzer.utils.logging_helper import ConfigurationError


@pytest.fixture
def manager():
    return ConfigManager({"analysis": {"strictMode": False, "significantDelay": 5000, "tags": ["a"]}})


def test_section_defaults(manager):
    assert manager.get_config(section="analysis") == {"strictMode": False, "significantDelay": 5000, "tags": ["a"]}


def test_cascade_order(manager, monkeypatch):
    manager.set_user_config({"significantDelay": 7000}, section="analysis")
    assert manager.get_config(section="analysis")["significantDelay"] == 7000

    monkeypatch.setenv("UI_A11Y_ANALYSIS_SIGNIFICANTDELAY", "9000")
    assert manager.get_config(section="analysis")["significantDelay"] == 9000

    resolved = manager.get_config(user_options={"significantDelay": 1}, section="analysis")
    assert resolved["significantDelay"] == 1


def test_env_values_are_coerced(manager, monkeypatch):
    monkeypatch.setenv("UI_A11Y_ANALYSIS_STRICTMODE", "yes")
    monkeypatch.setenv("UI_A11Y_ANALYSIS_TAGS", "x, y")
    resolved = manager.get_config(section="analysis")
    assert resolved["strictMode"] is True
    assert resolved["tags"] == ["x", "y"]


def test_env_var_that_cannot_be_converted_is_kept_as_text(manager, monkeypatch):
    monkeypatch.setenv("UI_A11Y_ANALYSIS_SIGNIFICANTDELAY", "soon")
    assert manager.get_config(section="analysis")["significantDelay"] == "soon"


def test_defaults_are_not_mutated(manager):
    manager.get_config(section="analysis")["tags"].append("b")
    assert manager.get_config(section="analysis")["tags"] == ["a"]


def test_reset_user_config(manager):
    manager.set_user_config({"strictMode": True}, section="analysis")
    manager.reset_user_config()
    assert manager.get_config(section="analysis")["strictMode"] is False


def test_global_sections():
    assert config_manager.get_config(section="analysis")["includeWidgets"] is True
    assert config_manager.get_config(section="batch")["workers"] == 4
    assert config_manager.get_config(section="editor")["analysisMode"] == "smart"


def test_load_yaml_and_json(tmp_path):
    yaml_path = tmp_path / "a11y.yaml"
    yaml_path.write_text(yaml.safe_dump({"analysis": {"strictMode": True}}), encoding="utf-8")
    assert load_config_file(str(yaml_path)) == {"analysis": {"strictMode": True}}

    json_path = tmp_path / "a11y.json"
    json_path.write_text(json.dumps({"report": {"format": "html"}}), encoding="utf-8")
    assert load_config_file(str(json_path)) == {"report": {"format": "html"}}


def test_empty_yaml_is_an_empty_mapping(tmp_path):
    path = tmp_path / "empty.yml"
    path.write_text("", encoding="utf-8")
    assert load_config_file(str(path)) == {}


@pytest.mark.parametrize(
    "name,content",
    [
        ("config.toml", "x = 1"),
        ("broken.json", "{not json"),
        ("list.yaml", "- a\n- b\n"),
    ],
)
def test_bad_config_files(tmp_path, name, content):
    path = tmp_path / name
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_config_file(str(path))


def test_missing_config_file(tmp_path):
    with pytest.raises(ConfigurationError):
        load_config_file(str(tmp_path / "nope.yaml"))


def test_find_config_file(tmp_path):
    assert find_config_file(str(tmp_path)) is None
    (tmp_path / ".a11yrc.yaml").write_text("report: {}\n", encoding="utf-8")
    assert find_config_file(str(tmp_path)).endswith(".a11yrc.yaml")


@pytest.mark.parametrize("file_format", ["yaml", "json"])
def test_save_config_round_trip(tmp_path, file_format):
    path = tmp_path / f"saved.{file_format}"
    config = {"analysis": {"strictMode": True}, "batch": {"workers": 2}}
    save_config(config, str(path), file_format)
    assert load_config_file(str(path)) == config


def test_save_config_rejects_unknown_format(tmp_path):
    with pytest.raises(ConfigurationError):
        save_config({}, str(tmp_path / "x.ini"), "ini")


def test_validate_options():
    validate_options({"workers": 2}, required_fields={"workers": int})
    with pytest.raises(ConfigurationError):
        validate_options({}, required_fields={"workers": int})
    with pytest.raises(ConfigurationError):
        validate_options({"format": 3}, optional_fields={"format": str})


def test_editor_settings_defaults():
    settings = load_editor_settings()
    assert settings == EditorSettings()
    assert settings.analysis_mode == "smart"
    assert settings.analyze_on_type_delay == 500


def test_editor_settings_from_environment(monkeypatch):
    monkeypatch.setenv("UI_A11Y_EDITOR_ANALYSISMODE", "project")
    monkeypatch.setenv("UI_A11Y_EDITOR_MAXPROJECTFILES", "5")
    settings = load_editor_settings()
    assert settings.analysis_mode == "project"
    assert settings.max_project_files == 5


def test_editor_settings_overrides_and_user_config():
    config_manager.set_user_config({"analyzeOnType": True}, section="editor")
    settings = load_editor_settings({"analyzeOnTypeDelay": 0})
    assert settings.analyze_on_type is True
    assert settings.analyze_on_type_delay == 0


@pytest.mark.parametrize(
    "overrides",
    [{"analysisMode": "everything"}, {"maxProjectFiles": 0}, {"minSeverity": "fatal"}],
)
def test_invalid_editor_settings(overrides):
    with pytest.raises(ConfigurationError):
        load_editor_settings(overrides)


def test_apply_config_data_sets_known_sections(manager):
    manager.apply_config_data({"analysis": {"strictMode": True}, "plugins": {"x": 1}})
    assert manager.get_config(section="analysis")["strictMode"] is True
    assert "plugins" not in manager.user_config


@pytest.mark.parametrize(
    "data",
    [{"analysis": ["strictMode"]}, {"analysis": {"significantDelay": "soon"}}],
)
def test_apply_config_data_rejects_malformed_sections(manager, data):
    with pytest.raises(ConfigurationError):
        manager.apply_config_data(data)


def test_resolve_sections_covers_every_section():
    resolved = config_manager.resolve_sections()
    assert list(resolved) == ["analysis", "report", "editor", "batch"]
    assert resolved["report"]["format"] == "text"
