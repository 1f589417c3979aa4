# Copyright 2025 Amazon.com, Inc. or its affiliates.
# SPDX-License-Identifier: Apache-2.0

"""Interaction analyzers, one per accessibility concern."""

from ui_accessibility_analyzer.audit.analyzers.aria_analyzer import ARIAAnalyzer
from ui_accessibility_analyzer.audit.analyzers.context_change_analyzer import ContextChangeAnalyzer
from ui_accessibility_analyzer.audit.analyzers.event_analyzer import EventAnalyzer
from ui_accessibility_analyzer.audit.analyzers.focus_analyzer import FocusAnalyzer
from ui_accessibility_analyzer.audit.analyzers.keyboard_analyzer import KeyboardAnalyzer
from ui_accessibility_analyzer.audit.analyzers.semantic_analyzer import SemanticAnalyzer
from ui_accessibility_analyzer.audit.analyzers.timing_analyzer import TimingAnalyzer

__all__ = [
    "ARIAAnalyzer",
    "ContextChangeAnalyzer",
    "EventAnalyzer",
    "FocusAnalyzer",
    "KeyboardAnalyzer",
    "SemanticAnalyzer",
    "TimingAnalyzer",
]
