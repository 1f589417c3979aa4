# Copyright 2025 Amazon.com, Inc. or its affiliates.
# SPDX-License-Identifier: Apache-2.0

"""
UI Accessibility Analyzer Package.

This package analyzes the intermediate action tree of UI interaction code
for keyboard, focus, ARIA, timing and widget-pattern accessibility issues,
and reports them against WCAG 2.1 success criteria.

Main Components:
- Interaction analyzers over the action tree
- Widget pattern validation against ARIA authoring practices
- Scored reports with WCAG compliance and recommendations
"""

__version__ = "0.1.0"

from ui_accessibility_analyzer.api import analyze, analyze_file  # noqa: E402

__all__ = ["__version__", "analyze", "analyze_file"]
