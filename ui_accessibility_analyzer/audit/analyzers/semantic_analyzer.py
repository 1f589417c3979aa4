# Copyright 2025 Amazon.com, Inc. or its affiliates.
# SPDX-License-Identifier: Apache-2.0

"""
Non-semantic markup detection (WCAG 4.1.2).

Suggests native ``<button>``/``<a>`` elements where generic elements are
given ``role="button"``/``role="link"`` or carry click handlers. The
findings are info-level suggestions, not proven defects.
"""

from typing import Any, Dict, Optional

from ui_accessibility_analyzer.audit.base_analyzer import (
    BaseAnalyzer,
    CancellationToken,
    TraversalContext,
    element_reference,
    location_of,
    safe_check,
    walk,
)
from ui_accessibility_analyzer.tree.action_tree import ActionNode, ActionTree
from ui_accessibility_analyzer.tree.node_views import AssignView, CallView, literal_value
from ui_accessibility_analyzer.utils.logging_helper import setup_logger

logger = setup_logger(__name__)

NON_SEMANTIC_ELEMENTS = ("div", "span", "p", "section", "article")
NATIVE_REPLACEMENTS = {"button": "button", "link": "a"}


def _assigned_name(node: ActionNode, parent: Optional[ActionNode]) -> Optional[str]:
    """Variable a ``createElement`` result is stored in, when visible."""
    if parent is None:
        return None
    assign = AssignView.of(parent)
    if assign is not None:
        if assign.right is not node:
            return None
        return element_reference(assign.left) if assign.left is not None else None
    if parent.action_type in ("variableDeclarator", "variableDecl", "declaration"):
        return parent.get("name")
    return None


def empty_semantic_results() -> Dict[str, Any]:
    return {
        "createdElements": [],
        "roleAssignments": [],
        "issues": [],
        "stats": {"totalElementsCreated": 0, "nonSemanticButtons": 0, "nonSemanticLinks": 0},
    }


class SemanticAnalyzer(BaseAnalyzer):
    """Detects generic elements standing in for native controls."""

    name = "SemanticAnalyzer"
    default_options = {
        "detectNonSemanticButtons": True,
        "detectNonSemanticLinks": True,
    }

    def analyze(
        self,
        tree: Optional[ActionTree],
        event_results: Optional[Dict[str, Any]] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Dict[str, Any]:
        """
        Analyze a tree for non-semantic interactive elements.

        Args:
            tree: The tree to analyze (None yields empty results)
            event_results: EventAnalyzer output used for click-handler suggestions
            cancel_token: Optional token checked between nodes

        Returns:
            Dict with created elements, role assignments, issues and stats
        """
        results = empty_semantic_results()
        for node, context in walk(tree, cancel_token):
            self._check_element_creation(node, context, results)
            self._check_role_assignment(node, results)

        self._detect_issues(results, event_results)
        self._compute_stats(results)
        return results

    @safe_check
    def _check_element_creation(self, node: ActionNode, context: TraversalContext, results: Dict) -> None:
        call = CallView.of(node)
        if call is None or call.method != "createElement":
            return
        tag = literal_value(call.argument(0))
        if tag not in NON_SEMANTIC_ELEMENTS:
            return
        results["createdElements"].append(
            {
                "type": tag,
                "elementRef": _assigned_name(node, context.parent),
                "location": location_of(node),
                "actionId": node.id,
            }
        )

    @safe_check
    def _check_role_assignment(self, node: ActionNode, results: Dict) -> None:
        call = CallView.of(node)
        if call is None or call.method != "setAttribute":
            return
        if literal_value(call.argument(0)) != "role":
            return
        role = literal_value(call.argument(1))
        if role not in NATIVE_REPLACEMENTS:
            return
        results["roleAssignments"].append(
            {
                "role": role,
                "elementRef": element_reference(call.callee_node),
                "location": location_of(node),
                "actionId": node.id,
            }
        )

    def _detect_issues(self, results: Dict, event_results: Optional[Dict[str, Any]]) -> None:
        issues = results["issues"]

        if event_results:
            reported = set()
            for handler in event_results.get("handlers", []):
                ref = handler.get("elementRef")
                if handler.get("eventType") != "click" or not ref or ref == "unknown" or ref in reported:
                    continue
                reported.add(ref)
                issues.append(
                    {
                        "type": "non-semantic-button",
                        "severity": "info",
                        "message": f'Element "{ref}" has click handler - consider using <button> element for better semantics and accessibility',
                        "elementRef": ref,
                        "location": handler.get("location"),
                        "actionId": handler.get("actionId"),
                        "wcag": ["4.1.2"],
                        "suggestion": 'Use document.createElement("button") instead of non-semantic elements for interactive controls',
                    }
                )

        created = {e["elementRef"]: e for e in results["createdElements"] if e["elementRef"]}
        for assignment in results["roleAssignments"]:
            role = assignment["role"]
            if role == "button" and not self.options["detectNonSemanticButtons"]:
                continue
            if role == "link" and not self.options["detectNonSemanticLinks"]:
                continue

            native = NATIVE_REPLACEMENTS[role]
            element = created.get(assignment["elementRef"])
            if element is not None:
                message = (
                    f'Element "{assignment["elementRef"]}" created as <{element["type"]}> and assigned '
                    f'role="{role}" - use a native <{native}> element instead'
                )
            else:
                message = f'Element assigned role="{role}" - consider using <{native}> element instead'
            issues.append(
                {
                    "type": f"non-semantic-{role}",
                    "severity": "info",
                    "message": message,
                    "role": role,
                    "elementRef": assignment["elementRef"],
                    "createdAs": element["type"] if element is not None else None,
                    "location": assignment["location"],
                    "actionId": assignment["actionId"],
                    "wcag": ["4.1.2"],
                    "suggestion": f"Native <{native}> elements provide better browser support, keyboard handling, "
                    f'and semantics than role="{role}" on non-semantic elements',
                }
            )

    @staticmethod
    def _compute_stats(results: Dict) -> None:
        stats = results["stats"]
        stats["totalElementsCreated"] = len(results["createdElements"])
        stats["nonSemanticButtons"] = sum(1 for i in results["issues"] if i["type"] == "non-semantic-button")
        stats["nonSemanticLinks"] = sum(1 for i in results["issues"] if i["type"] == "non-semantic-link")
