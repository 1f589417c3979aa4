# Copyright 2025 Amazon.com, Inc. or its affiliates.
# SPDX-License-Identifier: Apache-2.0

"""
Accessibility standards reference data.

This module provides the tracked WCAG 2.1 success criteria, severity levels,
and the issue type to criteria tables used when building reports.
"""

from typing import Any, Dict, List, Optional

# WCAG 2.1 success criteria relevant to scripted interaction
WCAG_CRITERIA = {
    # Perceivable
    "1.3.1": {
        "name": "Info and Relationships",
        "level": "A",
        "description": "Information, structure, and relationships conveyed through presentation can be programmatically determined",
        "category": "aria",
    },
    "1.4.13": {
        "name": "Content on Hover or Focus",
        "level": "AA",
        "description": "Content appearing on hover/focus is dismissible, hoverable, and persistent",
        "category": "focus",
    },
    # Operable
    "2.1.1": {
        "name": "Keyboard",
        "level": "A",
        "description": "All functionality is available from a keyboard",
        "category": "keyboard",
    },
    "2.1.2": {
        "name": "No Keyboard Trap",
        "level": "A",
        "description": "Keyboard focus can be moved away from any component",
        "category": "keyboard",
    },
    "2.1.4": {
        "name": "Character Key Shortcuts",
        "level": "A",
        "description": "Single character key shortcuts can be turned off or remapped",
        "category": "keyboard",
    },
    "2.2.1": {
        "name": "Timing Adjustable",
        "level": "A",
        "description": "Users can turn off, adjust, or extend time limits",
        "category": "timing",
    },
    "2.2.2": {
        "name": "Pause, Stop, Hide",
        "level": "A",
        "description": "Moving, blinking, scrolling, or auto-updating information can be paused, stopped, or hidden",
        "category": "timing",
    },
    "2.4.3": {
        "name": "Focus Order",
        "level": "A",
        "description": "Focusable components receive focus in an order that preserves meaning",
        "category": "focus",
    },
    "2.4.7": {
        "name": "Focus Visible",
        "level": "AA",
        "description": "Keyboard focus indicator is visible",
        "category": "focus",
    },
    "2.4.11": {
        "name": "Focus Not Obscured (Minimum)",
        "level": "AA",
        "description": "Focused component is not entirely hidden",
        "category": "focus",
    },
    "2.5.3": {
        "name": "Label in Name",
        "level": "A",
        "description": "UI components with labels include visible label text in accessible name",
        "category": "aria",
    },
    # Understandable
    "3.2.1": {
        "name": "On Focus",
        "level": "A",
        "description": "Receiving focus does not cause a change of context",
        "category": "focus",
    },
    "3.2.2": {
        "name": "On Input",
        "level": "A",
        "description": "Changing input does not cause unexpected context changes",
        "category": "events",
    },
    # Robust
    "4.1.2": {
        "name": "Name, Role, Value",
        "level": "A",
        "description": "UI components have accessible name, role, states, and properties",
        "category": "aria",
    },
    "4.1.3": {
        "name": "Status Messages",
        "level": "AA",
        "description": "Status messages can be programmatically determined without focus",
        "category": "aria",
    },
}

# Severity levels, most severe first
SEVERITY_LEVELS = {
    "error": {
        "weight": 15,
        "description": "Blocks access for some users",
    },
    "warning": {
        "weight": 8,
        "description": "Degrades the experience for some users",
    },
    "info": {
        "weight": 3,
        "description": "Advisory; worth reviewing",
    },
}

SEVERITY_ORDER = ("error", "warning", "info")

ISSUE_CATEGORIES = ("keyboard", "aria", "focus", "widget", "events", "timing", "context", "semantic")

FOCUS_ISSUE_WCAG = {
    "possibly-non-focusable": ["2.4.3", "4.1.2"],
    "positive-tabindex": ["2.4.3"],
    "standalone-blur": ["2.4.7"],
    "hiding-without-focus-management": ["2.4.3", "2.4.7"],
    # A removed focused element loses visible focus and breaks focus order
    "removal-without-focus-management": ["2.4.3", "2.4.7"],
    "hiding-class-without-focus-management": ["2.4.7"],
}

ARIA_ISSUE_WCAG = {
    "invalid-role": ["4.1.2"],
    "aria-hidden-true": ["4.1.2", "1.3.1"],
    "interactive-role-static": ["2.1.1", "4.1.2"],
    "assertive-live-region": ["4.1.3"],
    "missing-required-aria": ["4.1.2"],
    "dialog-missing-label": ["4.1.2", "2.5.3"],
}

KEYBOARD_ISSUE_WCAG = {
    "mouse-only-click": ["2.1.1"],
    "potential-keyboard-trap": ["2.1.2"],
    "deprecated-keycode": ["4.1.2"],
    "tab-without-shift": ["2.1.1"],
    "screen-reader-conflict": ["2.1.4"],
    "screen-reader-arrow-conflict": ["2.1.4"],
}

ISSUE_WCAG_TABLES = {
    "focus": FOCUS_ISSUE_WCAG,
    "aria": ARIA_ISSUE_WCAG,
    "keyboard": KEYBOARD_ISSUE_WCAG,
}

DEFAULT_CATEGORY_WCAG = {
    "focus": ["2.4.3"],
    "aria": ["4.1.2"],
    "keyboard": ["2.1.1"],
    "widget": ["4.1.2"],
    "events": ["2.1.1"],
    "timing": ["2.2.1"],
    "context": ["3.2.2"],
    "semantic": ["4.1.2"],
}

DEFAULT_SUGGESTIONS = {
    "keyboard": "Ensure all interactive elements are keyboard accessible",
    "aria": "Follow WAI-ARIA specifications for proper attribute usage",
    "focus": "Manage focus appropriately when content changes",
    "widget": "Follow WAI-ARIA Authoring Practices for this widget pattern",
}

RECOMMENDATION_TITLES = {
    "mouse-only-click": "Add Keyboard Support",
    "potential-keyboard-trap": "Fix Keyboard Trap",
    "screen-reader-conflict": "Resolve Screen Reader Conflict",
    "invalid-role": "Use Valid ARIA Role",
    "missing-required-aria": "Add Required ARIA Attribute",
    "possibly-non-focusable": "Fix Focus Target",
    "positive-tabindex": "Remove Positive tabindex",
    "hiding-without-focus-management": "Manage Focus on Hide",
}


def get_criterion_info(criterion_id: str) -> Optional[Dict[str, Any]]:
    """
    Get information about a tracked WCAG criterion.

    Args:
        criterion_id: The criterion ID (e.g., '2.1.1')

    Returns:
        Dictionary with criterion information or None if it is not tracked
    """
    info = WCAG_CRITERIA.get(criterion_id)
    return dict(info, id=criterion_id) if info else None


def wcag_for_issue(category: str, issue: Dict[str, Any]) -> List[str]:
    """
    Criteria an issue maps to.

    Issues that name their own criteria keep them; otherwise the category's
    type table is consulted, falling back to the category default.
    """
    if issue.get("wcag"):
        return list(issue["wcag"])
    table = ISSUE_WCAG_TABLES.get(category, {})
    return list(table.get(issue.get("type"), DEFAULT_CATEGORY_WCAG.get(category, ["4.1.2"])))


def default_suggestion(category: str) -> str:
    return DEFAULT_SUGGESTIONS.get(category, "Review accessibility best practices")


def severity_rank(severity: str) -> int:
    """0 for the most severe level; unknown levels rank last."""
    try:
        return SEVERITY_ORDER.index(severity)
    except ValueError:
        return len(SEVERITY_ORDER)
