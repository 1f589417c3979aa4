# Copyright 2025 Amazon.com, Inc. or its affiliates.
# SPDX-License-Identifier: Apache-2.0

"""
Unexpected context change detection.

Flags ``form.submit()`` and navigation (``location``/``href`` assignment,
``location.assign/replace/reload()``) that run inside an input/change
handler (WCAG 3.2.2) or a focus handler (WCAG 3.2.1).
"""

from typing import Any, Dict, Optional

from ui_accessibility_analyzer.audit.base_analyzer import (
    BaseAnalyzer,
    CancellationToken,
    TraversalContext,
    count_into,
    location_of,
    safe_check,
    walk,
)
from ui_accessibility_analyzer.tree.action_tree import ActionNode, ActionTree
from ui_accessibility_analyzer.tree.node_views import AssignView, CallView, MemberAccessView
from ui_accessibility_analyzer.utils.logging_helper import setup_logger

logger = setup_logger(__name__)

INPUT_EVENTS = ("input", "change")
FOCUS_IN_EVENTS = ("focus", "focusin")
NAVIGATION_PROPERTIES = ("location", "href")
LOCATION_METHODS = ("assign", "replace", "reload")


def empty_context_results() -> Dict[str, Any]:
    return {
        "formSubmissions": [],
        "navigationChanges": [],
        "issues": [],
        "stats": {"totalFormSubmits": 0, "totalNavigations": 0, "byEventType": {}},
    }


def object_reference(node: Optional[ActionNode]) -> str:
    """Root object name of a callee: ``window.location.assign`` -> ``window``."""
    while node is not None and node.action_type == "memberAccess":
        obj = node.child_with_role("object")
        if obj is None or obj.action_type not in ("identifier", "memberAccess"):
            return node.get("property") or "unknown"
        node = obj
    if node is not None and node.action_type == "identifier":
        return node.get("name") or "unknown"
    return "unknown"


def _callee_mentions_location(call: CallView) -> bool:
    callee_node = call.callee_node or call.node.first_child
    if callee_node is not None and callee_node.action_type == "memberAccess":
        obj = callee_node.child_with_role("object")
        while obj is not None:
            if obj.get("property") == "location" or obj.get("name") == "location":
                return True
            obj = obj.child_with_role("object")
    return "location" in call.callee or "location" in object_reference(callee_node)


class ContextChangeAnalyzer(BaseAnalyzer):
    """Detects context changes triggered by input, change and focus events."""

    name = "ContextChangeAnalyzer"
    default_options = {
        "detectFormSubmit": True,
        "detectNavigation": True,
    }

    def analyze(
        self,
        tree: Optional[ActionTree],
        event_results: Optional[Dict[str, Any]] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Dict[str, Any]:
        results = empty_context_results()
        for node, context in walk(tree, cancel_token):
            self._check_form_submit(node, context, results)
            self._check_navigation(node, context, results)

        self._compute_stats(results)
        self._detect_issues(results)
        logger.debug(f"ContextChangeAnalyzer found {len(results['issues'])} issues")
        return results

    @staticmethod
    def _handler_flags(context: TraversalContext) -> Dict[str, bool]:
        in_input = context.inside(INPUT_EVENTS)
        return {
            "inInputHandler": in_input,
            "inChangeHandler": in_input,
            "inFocusHandler": context.inside(FOCUS_IN_EVENTS),
        }

    @safe_check
    def _check_form_submit(self, node: ActionNode, context: TraversalContext, results: Dict) -> None:
        call = CallView.of(node)
        if call is None or call.method != "submit":
            return
        callee_node = call.callee_node or node.first_child
        if callee_node is None:
            return

        flags = self._handler_flags(context)
        results["formSubmissions"].append(
            {
                "formRef": object_reference(callee_node),
                "inInputHandler": flags["inInputHandler"],
                "inChangeHandler": flags["inChangeHandler"],
                "location": location_of(node),
                "actionId": node.id,
            }
        )

    @safe_check
    def _check_navigation(self, node: ActionNode, context: TraversalContext, results: Dict) -> None:
        navigation_type = None

        if node.action_type == "propertySet" and node.get("property") in NAVIGATION_PROPERTIES:
            navigation_type = f"{node.get('property')} assignment"

        assign = AssignView.of(node)
        if assign is not None:
            left = assign.target or MemberAccessView.of(node.first_child)
            if left is not None and left.property_name in NAVIGATION_PROPERTIES:
                navigation_type = f"{left.property_name} assignment"

        call = CallView.of(node)
        if call is not None and call.method in LOCATION_METHODS and _callee_mentions_location(call):
            navigation_type = f"location.{call.method}()"

        if navigation_type is None:
            return
        results["navigationChanges"].append(
            {
                "type": navigation_type,
                **self._handler_flags(context),
                "location": location_of(node),
                "actionId": node.id,
            }
        )

    def _detect_issues(self, results: Dict) -> None:
        issues = results["issues"]

        if self.options["detectFormSubmit"]:
            for submission in results["formSubmissions"]:
                if not submission["inInputHandler"]:
                    continue
                issues.append(
                    {
                        "type": "unexpected-form-submit",
                        "severity": "warning",
                        "message": "Form submission in input/change handler - unexpected context change that may disorient users",
                        "formRef": submission["formRef"],
                        "elementRef": submission["formRef"],
                        "location": submission["location"],
                        "actionId": submission["actionId"],
                        "wcag": ["3.2.2"],
                        "suggestion": "Form submission should be triggered by explicit user action (button click), not automatically on input/change",
                    }
                )

        if not self.options["detectNavigation"]:
            return
        for navigation in results["navigationChanges"]:
            if navigation["inInputHandler"]:
                issues.append(
                    {
                        "type": "unexpected-navigation",
                        "severity": "warning",
                        "message": f"Navigation ({navigation['type']}) in input/change handler - unexpected context change",
                        "navigationType": navigation["type"],
                        "location": navigation["location"],
                        "actionId": navigation["actionId"],
                        "wcag": ["3.2.2"],
                        "suggestion": "Navigation should be triggered by explicit user action (button/link click), not automatically on input/change",
                    }
                )
            elif navigation["inFocusHandler"]:
                issues.append(
                    {
                        "type": "unexpected-navigation",
                        "severity": "warning",
                        "message": f"Navigation ({navigation['type']}) in focus handler - unexpected context change",
                        "navigationType": navigation["type"],
                        "location": navigation["location"],
                        "actionId": navigation["actionId"],
                        "wcag": ["3.2.1"],
                        "suggestion": "Navigation should not occur automatically when an element receives focus",
                    }
                )

    @staticmethod
    def _compute_stats(results: Dict) -> None:
        stats = results["stats"]
        stats["totalFormSubmits"] = len(results["formSubmissions"])
        stats["totalNavigations"] = len(results["navigationChanges"])
        for submission in results["formSubmissions"]:
            if submission["inInputHandler"]:
                count_into(stats["byEventType"], "input")
                count_into(stats["byEventType"], "change")
        for navigation in results["navigationChanges"]:
            if navigation["inInputHandler"]:
                count_into(stats["byEventType"], "input")
                count_into(stats["byEventType"], "change")
            if navigation["inFocusHandler"]:
                count_into(stats["byEventType"], "focus")
