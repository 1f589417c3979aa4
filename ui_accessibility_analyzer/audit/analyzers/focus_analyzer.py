# Copyright 2025 Amazon.com, Inc. or its affiliates.
# SPDX-License-Identifier: Apache-2.0

"""
Focus management analysis.

Detects ``focus()``/``blur()`` calls, tabindex writes, ``document.activeElement``
reads and four families of hiding operations (style display/visibility,
the ``hidden`` property or attribute, element removal, and hiding-class
``classList`` mutations). Every hiding operation is correlated with focus
moves made in the same event-handler context; a hide with no such move is
reported, since focus left on a hidden element is lost for keyboard users.
"""

import re
from typing import Any, Dict, List, Optional

from ui_accessibility_analyzer.audit.base_analyzer import (
    BaseAnalyzer,
    CancellationToken,
    TraversalContext,
    count_into,
    element_reference,
    location_of,
    safe_check,
    walk,
)
from ui_accessibility_analyzer.tree.action_tree import ActionNode, ActionTree
from ui_accessibility_analyzer.tree.node_views import (
    AssignView,
    CallView,
    LiteralView,
    MemberAccessView,
    UnaryOpView,
    literal_value,
)
from ui_accessibility_analyzer.utils.logging_helper import setup_logger

logger = setup_logger(__name__)

# Tags that are not focusable without a tabindex
NON_FOCUSABLE_TAGS = ("div", "span", "section", "article", "header", "footer", "main", "aside")

HIDING_CLASS_PATTERNS = (
    "hidden", "hide", "invisible", "visually-hidden", "sr-only",
    "d-none", "display-none", "is-hidden", "is-invisible",
    "collapse", "collapsed", "closed", "inactive",
)

CLASSLIST_METHODS = ("classList.add", "classList.remove", "classList.toggle", "classList.replace")

_LEADING_INT = re.compile(r"^\s*([-+]?\d+)")


def parse_int(value: Any) -> Optional[int]:
    """Leading integer of a literal value, the way a browser parses tabindex."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str):
        match = _LEADING_INT.match(value)
        if match:
            return int(match.group(1))
    return None


def is_hiding_value(css_property: str, value: Any) -> bool:
    if css_property == "display":
        return value == "none"
    if css_property == "visibility":
        return value in ("hidden", "collapse")
    return False


def is_potential_hiding_class(class_name: Any, method: str) -> bool:
    """Adding or toggling a class whose name suggests hiding may hide the element."""
    if not class_name or not isinstance(class_name, str):
        return False
    if method not in ("add", "toggle"):
        return False
    lower = class_name.lower()
    return any(pattern in lower for pattern in HIDING_CLASS_PATTERNS)


def empty_focus_results() -> Dict[str, Any]:
    return {
        "focusOperations": [],
        "blurOperations": [],
        "tabIndexChanges": [],
        "activeElementAccess": [],
        "visibilityChanges": [],
        "elementRemovals": [],
        "classListChanges": [],
        "focusInHandlers": [],
        "patterns": {"traps": [], "returns": []},
        "issues": [],
        "stats": {
            "totalFocusCalls": 0,
            "totalBlurCalls": 0,
            "tabIndexChanges": 0,
            "focusInEventHandlers": 0,
            "activeElementAccess": 0,
            "visibilityChanges": 0,
            "elementRemovals": 0,
            "classListChanges": 0,
            "hidingOperations": 0,
            "byElement": {},
        },
    }


def _context_fields(context: TraversalContext) -> Dict[str, Any]:
    return {
        "inEventHandler": context.in_event_handler,
        "eventType": context.event_type,
    }


class FocusAnalyzer(BaseAnalyzer):
    """Analyzes focus management and hiding operations."""

    name = "FocusAnalyzer"
    default_options = {
        "detectTraps": True,
        "detectReturnPatterns": True,
        "detectVisibilityChanges": True,
    }

    def analyze(
        self,
        tree: Optional[ActionTree],
        cancel_token: Optional[CancellationToken] = None,
    ) -> Dict[str, Any]:
        """
        Analyze a tree for focus operations and focus-related issues.

        Args:
            tree: The tree to analyze (None yields empty results)
            cancel_token: Optional token checked between nodes

        Returns:
            Dict with the detections, patterns, issues and stats
        """
        results = empty_focus_results()
        for node, context in walk(tree, cancel_token):
            self._check_focus_operation(node, context, results)
            self._check_tab_index_change(node, context, results)
            self._check_active_element_access(node, context, results)
            if self.options["detectVisibilityChanges"]:
                self._check_visibility_change(node, context, results)
                self._check_element_removal(node, context, results)
                self._check_class_list_change(node, context, results)

        self._analyze_patterns(results)
        self._detect_issues(results)
        self._compute_stats(results)
        logger.debug(
            f"FocusAnalyzer found {len(results['focusOperations'])} focus calls, "
            f"{len(results['issues'])} issues"
        )
        return results

    @safe_check
    def _check_focus_operation(self, node: ActionNode, context: TraversalContext, results: Dict) -> None:
        if node.get("pattern") != "focusOp":
            return
        callee = node.get("callee") or ""
        is_focus = callee.endswith(".focus") or callee == "focus"
        is_blur = callee.endswith(".blur") or callee == "blur"
        if not is_focus and not is_blur:
            return

        entry = {
            "type": "focus" if is_focus else "blur",
            "elementRef": element_reference(node.child_with_role("callee")),
            **_context_fields(context),
            "handlerActionId": context.handler_action_id,
            "location": location_of(node),
            "actionId": node.id,
            "depth": context.depth,
        }
        if is_focus:
            results["focusOperations"].append(entry)
            if context.in_event_handler:
                results["focusInHandlers"].append(entry)
        else:
            results["blurOperations"].append(entry)

    @safe_check
    def _check_tab_index_change(self, node: ActionNode, context: TraversalContext, results: Dict) -> None:
        assign = AssignView.of(node)
        if assign is not None:
            target = assign.target
            if target is not None and target.property_name in ("tabIndex", "tabindex"):
                self._record_tab_index(target.node, assign.right, node, context, results)
            return

        call = CallView.of(node)
        if call is None or not call.callee.endswith("setAttribute"):
            return
        args = call.arguments
        if len(args) >= 2 and literal_value(args[0]) in ("tabindex", "tabIndex"):
            self._record_tab_index(call.callee_node, args[1], node, context, results)

    def _record_tab_index(
        self,
        element_node: Optional[ActionNode],
        value_node: Optional[ActionNode],
        node: ActionNode,
        context: TraversalContext,
        results: Dict,
    ) -> None:
        value = None
        literal = LiteralView.of(value_node)
        unary = UnaryOpView.of(value_node)
        if literal is not None:
            parsed = parse_int(literal.value)
            value = parsed if parsed is not None else literal.value
        elif unary is not None and unary.operator == "-":
            # tabIndex = -1
            parsed = parse_int(literal_value(unary.operand))
            if parsed is not None:
                value = -parsed

        results["tabIndexChanges"].append(
            {
                "elementRef": element_reference(element_node),
                "value": value,
                "inEventHandler": context.in_event_handler,
                "location": location_of(node),
                "actionId": node.id,
            }
        )

    @safe_check
    def _check_active_element_access(self, node: ActionNode, context: TraversalContext, results: Dict) -> None:
        member = MemberAccessView.of(node)
        if member is None or member.property_name != "activeElement":
            return
        if member.object_name != "document":
            return
        results["activeElementAccess"].append(
            {
                **_context_fields(context),
                "location": location_of(node),
                "actionId": node.id,
            }
        )

    @safe_check
    def _check_visibility_change(self, node: ActionNode, context: TraversalContext, results: Dict) -> None:
        assign = AssignView.of(node)
        if assign is not None:
            self._check_visibility_assignment(assign, context, results)
            return

        call = CallView.of(node)
        if call is None:
            return
        if call.callee.endswith("setAttribute"):
            args = call.arguments
            if args and literal_value(args[0]) == "hidden":
                value = literal_value(args[1]) if len(args) > 1 else None
                self._record_visibility(
                    results, context, node,
                    change_type="hidden-attribute",
                    prop='setAttribute("hidden")',
                    value=value if value is not None else "",
                    hides=True,
                    element_node=self._callee_object(call),
                )
        elif call.callee.endswith("removeAttribute"):
            args = call.arguments
            if args and literal_value(args[0]) == "hidden":
                self._record_visibility(
                    results, context, node,
                    change_type="hidden-attribute",
                    prop='removeAttribute("hidden")',
                    value=None,
                    hides=False,
                    element_node=self._callee_object(call),
                )

    def _check_visibility_assignment(self, assign: AssignView, context: TraversalContext, results: Dict) -> None:
        target = assign.target
        if target is None:
            return
        value = assign.right.get("value") if assign.right is not None else None

        if target.property_name in ("display", "visibility"):
            style = MemberAccessView.of(target.object_node)
            if style is not None and style.property_name == "style":
                self._record_visibility(
                    results, context, assign.node,
                    change_type=target.property_name,
                    prop=f"style.{target.property_name}",
                    value=value,
                    hides=is_hiding_value(target.property_name, value),
                    element_node=style.object_node,
                )
                return

        if target.property_name == "hidden":
            self._record_visibility(
                results, context, assign.node,
                change_type="hidden",
                prop="hidden",
                value=value,
                hides=value is True or value == "true",
                element_node=target.object_node,
            )

    @staticmethod
    def _callee_object(call: CallView) -> Optional[ActionNode]:
        callee = call.callee_node
        return callee.child_with_role("object") if callee is not None else None

    @staticmethod
    def _record_visibility(results, context, node, change_type, prop, value, hides, element_node) -> None:
        results["visibilityChanges"].append(
            {
                "type": change_type,
                "property": prop,
                "value": value,
                "hidesElement": hides,
                "elementRef": element_reference(element_node),
                **_context_fields(context),
                "location": location_of(node),
                "actionId": node.id,
            }
        )

    @safe_check
    def _check_element_removal(self, node: ActionNode, context: TraversalContext, results: Dict) -> None:
        call = CallView.of(node)
        if call is None:
            return
        callee = call.callee

        if callee.endswith(".remove") and not any(
            part in callee for part in ("Attribute", "EventListener", "Class", "classList")
        ):
            removal_type, method = "remove", "remove()"
            element_node = self._callee_object(call)
        elif call.calls("removeChild"):
            removal_type, method = "removeChild", "removeChild()"
            element_node = call.argument(0)
        else:
            return

        results["elementRemovals"].append(
            {
                "type": removal_type,
                "method": method,
                "elementRef": element_reference(element_node),
                **_context_fields(context),
                "location": location_of(node),
                "actionId": node.id,
            }
        )

    @safe_check
    def _check_class_list_change(self, node: ActionNode, context: TraversalContext, results: Dict) -> None:
        call = CallView.of(node)
        if call is None:
            return
        callee = call.callee
        matched = next(
            (m for m in CLASSLIST_METHODS if callee.endswith(m) or f".{m}" in callee),
            None,
        )
        if matched is None:
            return

        class_name = literal_value(call.argument(0))
        element_ref = "unknown"
        callee_member = MemberAccessView.of(call.callee_node)
        if callee_member is not None:
            # element.classList.add: the element is one level further up
            class_list = MemberAccessView.of(callee_member.object_node)
            if class_list is not None:
                element_ref = element_reference(class_list.object_node)

        method = matched.split(".")[-1]
        results["classListChanges"].append(
            {
                "type": "classList",
                "method": method,
                "className": class_name,
                "mayHideElement": is_potential_hiding_class(class_name, method),
                "elementRef": element_ref,
                **_context_fields(context),
                "location": location_of(node),
                "actionId": node.id,
            }
        )

    def _analyze_patterns(self, results: Dict) -> None:
        patterns = results["patterns"]

        if self.options["detectTraps"]:
            for op in results["focusInHandlers"]:
                if op["eventType"] in ("focus", "focusin"):
                    patterns["traps"].append(
                        {
                            "type": "focus-redirect",
                            "description": "Focus event handler calls focus() - may be intentional trap or focus redirect",
                            "focusOperation": op,
                            "severity": "info",
                        }
                    )
                if op["eventType"] in ("keydown", "keyup"):
                    patterns["traps"].append(
                        {
                            "type": "keyboard-focus",
                            "description": "Keyboard handler manages focus - check for proper trap behavior",
                            "focusOperation": op,
                            "severity": "info",
                        }
                    )

        if self.options["detectReturnPatterns"]:
            access = results["activeElementAccess"]
            if access:
                patterns["returns"].append(
                    {
                        "type": "activeElement-save",
                        "description": "Code accesses document.activeElement - may be saving focus for later return",
                        "accessCount": len(access),
                        "locations": [a["location"] for a in access],
                    }
                )
            click_focus = [f for f in results["focusInHandlers"] if f["eventType"] == "click"]
            if click_focus:
                patterns["returns"].append(
                    {
                        "type": "click-focus",
                        "description": "Click handlers move focus - may be dialog/modal opening",
                        "operations": len(click_focus),
                    }
                )

    @staticmethod
    def _same_context(op: Dict, other: Dict) -> bool:
        return op["inEventHandler"] == other["inEventHandler"] and op["eventType"] == other["eventType"]

    def _detect_issues(self, results: Dict) -> None:
        issues = results["issues"]
        focus_ops = results["focusOperations"]
        blur_ops = results["blurOperations"]
        tab_changes = results["tabIndexChanges"]

        for op in focus_ops:
            ref = op["elementRef"].lower()
            if not any(ref == tag or ref.startswith(tag + ".") for tag in NON_FOCUSABLE_TAGS):
                continue
            has_tab_index = any(
                t["elementRef"].lower() == ref or ref in t["elementRef"].lower()
                for t in tab_changes
            )
            if not has_tab_index:
                issues.append(
                    {
                        "type": "possibly-non-focusable",
                        "severity": "warning",
                        "message": f'focus() called on "{op["elementRef"]}" which may not be focusable without tabindex',
                        "elementRef": op["elementRef"],
                        "location": op["location"],
                        "actionId": op["actionId"],
                        "suggestion": 'Ensure element has tabindex="-1" or is natively focusable',
                    }
                )

        for change in tab_changes:
            value = change["value"]
            if isinstance(value, int) and not isinstance(value, bool) and value > 0:
                issues.append(
                    {
                        "type": "positive-tabindex",
                        "severity": "warning",
                        "message": f'tabindex="{value}" on "{change["elementRef"]}" disrupts natural tab order',
                        "elementRef": change["elementRef"],
                        "value": value,
                        "location": change["location"],
                        "actionId": change["actionId"],
                        "suggestion": 'Use tabindex="0" to add to natural tab order, or tabindex="-1" for programmatic focus only',
                    }
                )

        for op in blur_ops:
            if not op["inEventHandler"]:
                issues.append(
                    {
                        "type": "standalone-blur",
                        "severity": "info",
                        "message": f'blur() called on "{op["elementRef"]}" outside event handler - ensure focus moves appropriately',
                        "elementRef": op["elementRef"],
                        "location": op["location"],
                        "actionId": op["actionId"],
                        "suggestion": "Consider where focus should move after blur",
                    }
                )

        for change in results["visibilityChanges"]:
            if not change["hidesElement"]:
                continue
            moved = any(self._same_context(f, change) for f in focus_ops + blur_ops)
            if not moved:
                issues.append(
                    {
                        "type": "hiding-without-focus-management",
                        "severity": "warning",
                        "message": f'Element "{change["elementRef"]}" is hidden via {change["property"]} without explicit focus management',
                        "elementRef": change["elementRef"],
                        "location": change["location"],
                        "actionId": change["actionId"],
                        "suggestion": "Move focus to another element before hiding, or check if element had focus",
                    }
                )

        for removal in results["elementRemovals"]:
            if not any(self._same_context(f, removal) for f in focus_ops):
                issues.append(
                    {
                        "type": "removal-without-focus-management",
                        "severity": "warning",
                        "message": f'Element "{removal["elementRef"]}" is removed via {removal["method"]} without explicit focus management',
                        "elementRef": removal["elementRef"],
                        "location": removal["location"],
                        "actionId": removal["actionId"],
                        "suggestion": "If removed element could have focus, move focus before removal",
                    }
                )

        for change in results["classListChanges"]:
            if not (change["mayHideElement"] and change["method"] == "add"):
                continue
            if not any(self._same_context(f, change) for f in focus_ops):
                issues.append(
                    {
                        "type": "hiding-class-without-focus-management",
                        "severity": "info",
                        "message": f'Element "{change["elementRef"]}" has hiding class "{change["className"]}" added without explicit focus management',
                        "elementRef": change["elementRef"],
                        "location": change["location"],
                        "actionId": change["actionId"],
                        "suggestion": "Consider moving focus if this class hides the element",
                    }
                )

    @staticmethod
    def _compute_stats(results: Dict) -> None:
        stats = results["stats"]
        stats["totalFocusCalls"] = len(results["focusOperations"])
        stats["totalBlurCalls"] = len(results["blurOperations"])
        stats["tabIndexChanges"] = len(results["tabIndexChanges"])
        stats["focusInEventHandlers"] = len(results["focusInHandlers"])
        stats["activeElementAccess"] = len(results["activeElementAccess"])
        stats["visibilityChanges"] = len(results["visibilityChanges"])
        stats["elementRemovals"] = len(results["elementRemovals"])
        stats["classListChanges"] = len(results["classListChanges"])
        stats["hidingOperations"] = len(get_hiding_operations(results))
        for op in results["focusOperations"] + results["blurOperations"]:
            count_into(stats["byElement"], op["elementRef"])


def has_focus_management(results: Dict[str, Any]) -> bool:
    return bool(results.get("focusOperations") or results.get("tabIndexChanges"))


def has_visibility_changes(results: Dict[str, Any]) -> bool:
    return bool(
        results.get("visibilityChanges")
        or results.get("elementRemovals")
        or results.get("classListChanges")
    )


def get_hiding_operations(results: Dict[str, Any]) -> List[Dict]:
    return (
        [v for v in results.get("visibilityChanges", []) if v["hidesElement"]]
        + list(results.get("elementRemovals", []))
        + [c for c in results.get("classListChanges", []) if c["mayHideElement"]]
    )


def get_focus_by_element(results: Dict[str, Any], element_ref: str) -> List[Dict]:
    return [f for f in results.get("focusOperations", []) if f["elementRef"] == element_ref]


def get_visibility_by_element(results: Dict[str, Any], element_ref: str) -> List[Dict]:
    return [v for v in results.get("visibilityChanges", []) if v["elementRef"] == element_ref]
