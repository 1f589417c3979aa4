# Copyright 2025 Amazon.com, Inc. or its affiliates.
# SPDX-License-Identifier: Apache-2.0

"""
Timing analysis.

Flags long ``setTimeout`` delays whose callback navigates or rewrites the DOM
(WCAG 2.2.1) and ``setInterval`` calls in a tree with no ``clearInterval``
anywhere (WCAG 2.2.2). The interval check is tree-wide, it does not track
interval ids.
"""

from typing import Any, Dict, Optional

from ui_accessibility_analyzer.audit.analyzers.focus_analyzer import parse_int
from ui_accessibility_analyzer.audit.base_analyzer import (
    BaseAnalyzer,
    CancellationToken,
    location_of,
    safe_check,
    walk,
)
from ui_accessibility_analyzer.tree.action_tree import ActionNode, ActionTree
from ui_accessibility_analyzer.tree.node_views import AssignView, CallView, MemberAccessView, literal_value
from ui_accessibility_analyzer.utils.logging_helper import setup_logger

logger = setup_logger(__name__)

NAVIGATION_PROPERTIES = ("location", "href")
NAVIGATION_METHODS = ("assign", "replace", "reload")
DOM_REMOVAL_METHODS = ("remove", "removeChild", "replaceChild", "replaceWith")
CONTENT_PROPERTIES = ("innerHTML", "outerHTML", "textContent")


def _calls_timer(node: ActionNode, name: str) -> bool:
    call = CallView.of(node)
    return call is not None and (call.node.get("method") == name or call.calls(name))


def _assigned_property(node: ActionNode) -> Optional[str]:
    if node.action_type == "propertySet":
        return node.get("property")
    assign = AssignView.of(node)
    if assign is not None:
        target = assign.target or MemberAccessView.of(node.first_child)
        if target is not None:
            return target.property_name
    return None


def _call_method(node: ActionNode) -> Optional[str]:
    call = CallView.of(node)
    return call.method if call is not None else None


def contains_navigation(node: Optional[ActionNode]) -> bool:
    if node is None:
        return False
    for descendant in node.walk():
        if _assigned_property(descendant) in NAVIGATION_PROPERTIES:
            return True
        if _call_method(descendant) in NAVIGATION_METHODS:
            return True
    return False


def contains_major_dom_change(node: Optional[ActionNode]) -> bool:
    if node is None:
        return False
    for descendant in node.walk():
        if _call_method(descendant) in DOM_REMOVAL_METHODS:
            return True
        if _assigned_property(descendant) in CONTENT_PROPERTIES:
            return True
    return False


def empty_timing_results() -> Dict[str, Any]:
    return {
        "timeouts": [],
        "intervals": [],
        "clearTimeouts": [],
        "clearIntervals": [],
        "issues": [],
        "stats": {
            "totalTimeouts": 0,
            "totalIntervals": 0,
            "clearedTimeouts": 0,
            "clearedIntervals": 0,
            "unclearedIntervals": 0,
        },
    }


class TimingAnalyzer(BaseAnalyzer):
    """Detects timing-related accessibility issues."""

    name = "TimingAnalyzer"
    default_options = {
        "detectTimeouts": True,
        "detectIntervals": True,
        "significantDelay": 5000,
    }

    def analyze(
        self,
        tree: Optional[ActionTree],
        cancel_token: Optional[CancellationToken] = None,
    ) -> Dict[str, Any]:
        results = empty_timing_results()
        for node, _context in walk(tree, cancel_token):
            self._check_timer(node, results)

        self._compute_stats(results)
        self._detect_issues(results)
        logger.debug(
            f"TimingAnalyzer found {len(results['timeouts'])} timeouts, {len(results['intervals'])} intervals"
        )
        return results

    @safe_check
    def _check_timer(self, node: ActionNode, results: Dict) -> None:
        if node.action_type != "call":
            return

        if _calls_timer(node, "clearTimeout"):
            results["clearTimeouts"].append({"location": location_of(node), "actionId": node.id})
            return
        if _calls_timer(node, "clearInterval"):
            results["clearIntervals"].append({"location": location_of(node), "actionId": node.id})
            return

        args = node.children_with_role("argument")
        if len(args) < 2:
            return

        if _calls_timer(node, "setTimeout"):
            callback = args[0]
            results["timeouts"].append(
                {
                    "delay": literal_value(args[1]),
                    "hasNavigation": contains_navigation(callback),
                    "hasMajorDOMChange": contains_major_dom_change(callback),
                    "location": location_of(node),
                    "actionId": node.id,
                }
            )
        elif _calls_timer(node, "setInterval"):
            results["intervals"].append(
                {
                    "interval": literal_value(args[1]),
                    "location": location_of(node),
                    "actionId": node.id,
                }
            )

    def _detect_issues(self, results: Dict) -> None:
        issues = results["issues"]

        if self.options["detectTimeouts"]:
            for timeout in results["timeouts"]:
                delay = timeout["delay"]
                if isinstance(delay, bool) or not isinstance(delay, (int, float)):
                    delay = parse_int(delay) or 0
                if delay < self.options["significantDelay"]:
                    continue
                if not (timeout["hasNavigation"] or timeout["hasMajorDOMChange"]):
                    continue
                action = "navigation" if timeout["hasNavigation"] else "major DOM changes"
                issues.append(
                    {
                        "type": "unannounced-timeout",
                        "severity": "warning",
                        "message": f"setTimeout with {delay}ms delay performs {action} - users may be surprised",
                        "delay": delay,
                        "hasNavigation": timeout["hasNavigation"],
                        "hasMajorDOMChange": timeout["hasMajorDOMChange"],
                        "location": timeout["location"],
                        "actionId": timeout["actionId"],
                        "wcag": ["2.2.1"],
                        "suggestion": "Provide a visible warning before automatic actions, allow users to extend or disable the timeout, or use explicit user action instead",
                    }
                )

        if self.options["detectIntervals"] and not results["clearIntervals"]:
            for interval in results["intervals"]:
                issues.append(
                    {
                        "type": "uncontrolled-auto-update",
                        "severity": "warning",
                        "message": "setInterval without clearInterval - auto-updating content cannot be paused or stopped by user",
                        "interval": interval["interval"],
                        "location": interval["location"],
                        "actionId": interval["actionId"],
                        "wcag": ["2.2.2"],
                        "suggestion": "Provide pause/stop controls for auto-updating content, and use clearInterval to stop updates when requested",
                    }
                )

    @staticmethod
    def _compute_stats(results: Dict) -> None:
        stats = results["stats"]
        stats["totalTimeouts"] = len(results["timeouts"])
        stats["totalIntervals"] = len(results["intervals"])
        stats["clearedTimeouts"] = len(results["clearTimeouts"])
        stats["clearedIntervals"] = len(results["clearIntervals"])
        stats["unclearedIntervals"] = max(0, len(results["intervals"]) - len(results["clearIntervals"]))


def has_uncleared_intervals(results: Dict[str, Any]) -> bool:
    return bool(results.get("intervals")) and not results.get("clearIntervals")
