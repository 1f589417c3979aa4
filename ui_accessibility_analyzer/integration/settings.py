# Copyright 2025 Amazon.com, Inc. or its affiliates.
# SPDX-License-Identifier: Apache-2.0

"""
Editor integration settings.

The ``editor`` configuration section, validated into a pydantic model.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from ui_accessibility_analyzer.utils.config import config_manager
from ui_accessibility_analyzer.utils.logging_helper import ConfigurationError, setup_logger

logger = setup_logger(__name__)


class EditorSettings(BaseModel):
    """Settings controlling when and how much of a workspace is analyzed."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    enable: bool = True
    analysis_mode: Literal["file", "smart", "project"] = "smart"
    analyze_on_save: bool = True
    analyze_on_type: bool = False
    analyze_on_type_delay: int = Field(default=500, ge=0)
    max_project_files: int = Field(default=1000, ge=1)
    min_severity: Literal["error", "warning", "info"] = "info"
    exclude_patterns: List[str] = Field(default_factory=lambda: ["node_modules", "dist", "build"])


def load_editor_settings(overrides: Optional[Dict[str, Any]] = None) -> EditorSettings:
    """
    Resolve the ``editor`` section and validate it.

    Args:
        overrides: camelCase option overrides

    Returns:
        EditorSettings

    Raises:
        ConfigurationError: If a setting has an invalid value
    """
    options = config_manager.get_config(user_options=overrides, section="editor")
    try:
        return EditorSettings.model_validate(options)
    except ValidationError as e:
        logger.error(f"Invalid editor settings: {e}")
        raise ConfigurationError(f"Invalid editor settings: {e}") from e
