# Copyright 2025 Amazon.com, Inc. or its affiliates.
# SPDX-License-Identifier: Apache-2.0

"""
UI Accessibility Analyzer API.

This module provides the primary entry points of the package: analyzing an
in-memory action tree, and analyzing an action tree file with an optional
report written next to it.
"""

import os
from typing import Any, Dict, Optional

from ui_accessibility_analyzer.audit.base_analyzer import CancellationToken
from ui_accessibility_analyzer.audit.report_generator import generate_report
from ui_accessibility_analyzer.audit.reporter import AccessibilityReporter
from ui_accessibility_analyzer.tree.action_tree import ActionTree
from ui_accessibility_analyzer.utils.config import config_manager
from ui_accessibility_analyzer.utils.logging_helper import (
    AccessibilityAnalysisError,
    AnalysisCancelledError,
    TreeLoadError,
    handle_exception,
    setup_logger,
)
from ui_accessibility_analyzer.utils.report_models import Report

# Set up module-level logger
logger = setup_logger(__name__)


def analyze(
    tree: Optional[ActionTree],
    options: Optional[Dict[str, Any]] = None,
    cancel_token: Optional[CancellationToken] = None,
) -> Report:
    """
    Analyze an action tree for accessibility issues.

    Args:
        tree: The tree to analyze. A missing tree or root yields an empty report.
        options: Analysis options overriding the configured ``analysis`` section:
            - includeEvents, includeFocus, includeAria, includeKeyboard,
              includeContext, includeTiming, includeSemantic, includeWidgets (bool)
            - strictMode (bool): Missing widget attributes and keys fail instead of warn
            - significantDelay (int): Timeout delay (ms) considered significant
        cancel_token: Optional token; cancelling it aborts the analysis

    Returns:
        The Report

    Raises:
        AnalysisCancelledError: If the token was cancelled
    """
    analysis_config = config_manager.get_config(user_options=options, section="analysis")
    return AccessibilityReporter(analysis_config).analyze(tree, cancel_token=cancel_token)


def analyze_file(
    tree_path: str,
    options: Optional[Dict[str, Any]] = None,
    output_path: Optional[str] = None,
    report_format: str = "json",
    cancel_token: Optional[CancellationToken] = None,
) -> Report:
    """
    Analyze an action tree JSON file.

    Args:
        tree_path: Path to the action tree file
        options: Analysis options (see ``analyze``)
        output_path: Where to write the report, if anywhere
        report_format: Format of the written report (json, text or html)
        cancel_token: Optional token; cancelling it aborts the analysis

    Returns:
        The Report

    Raises:
        FileNotFoundError: If the tree file doesn't exist
        TreeLoadError: If the tree file cannot be decoded
        AccessibilityAnalysisError: If analysis fails for any other reason
    """
    try:
        if not os.path.isfile(tree_path):
            raise FileNotFoundError(f"Action tree file not found: {tree_path}")

        tree = ActionTree.load(tree_path)
        valid, errors = tree.validate()
        if not valid and tree.root is not None:
            raise TreeLoadError(f"Invalid action tree {tree_path}: {'; '.join(errors)}", path=tree_path)

        logger.debug(f"Analyzing action tree: {tree_path}")
        report = analyze(tree, options=options, cancel_token=cancel_token)

        if output_path:
            generate_report(report, output_path, report_format)

        return report

    except (FileNotFoundError, TreeLoadError, AnalysisCancelledError):
        raise
    except Exception as e:
        handle_exception(
            e,
            logger,
            custom_message=f"Error analyzing {tree_path}",
            custom_exception=AccessibilityAnalysisError,
            path=tree_path,
        )
