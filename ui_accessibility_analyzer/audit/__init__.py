# Copyright 2025 Amazon.com, Inc. or its affiliates.
# SPDX-License-Identifier: Apache-2.0

"""
Accessibility analysis of action trees.

This module provides the analyzers, the widget pattern validator and the
reporter that combines their results into a scored report.
"""

from ui_accessibility_analyzer.audit.reporter import AccessibilityReporter
from ui_accessibility_analyzer.audit.report_generator import generate_report

__all__ = ["AccessibilityReporter", "generate_report"]
