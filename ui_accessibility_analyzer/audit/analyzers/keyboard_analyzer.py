# Copyright 2025 Amazon.com, Inc. or its affiliates.
# SPDX-License-Identifier: Apache-2.0

"""
Keyboard navigation analysis.

Detects:
- keyboard and mouse handlers (taken from EventAnalyzer output, so every
  registration idiom counts)
- key comparisons (``e.key === 'Enter'``, ``e.keyCode == 13``, ``case 'Escape':``)
- ``preventDefault()`` calls and modifier reads, scoped to the enclosing handler
- navigation, trap and shortcut patterns
- mouse-only elements and screen reader quick-navigation conflicts
"""

import re
from typing import Any, Dict, List, Optional, Set

from ui_accessibility_analyzer.audit.analyzers.event_analyzer import EventAnalyzer
from ui_accessibility_analyzer.audit.base_analyzer import (
    BaseAnalyzer,
    CancellationToken,
    KEYBOARD_EVENTS,
    MOUSE_EVENTS,
    TraversalContext,
    count_into,
    location_of,
    safe_check,
    walk,
)
from ui_accessibility_analyzer.tree.action_tree import ActionNode, ActionTree
from ui_accessibility_analyzer.tree.node_views import (
    BinaryOpView,
    CallView,
    LiteralView,
    MemberAccessView,
)
from ui_accessibility_analyzer.utils.logging_helper import setup_logger

logger = setup_logger(__name__)

KEY_PROPERTIES = ("key", "keyCode", "which", "code")
COMPARISON_OPERATORS = ("===", "==", "!==", "!=")
MODIFIER_PROPERTIES = ("ctrlKey", "altKey", "shiftKey", "metaKey")
# Shift alone does not make a shortcut safe: Shift+letter is reverse quick navigation
REQUIRED_MODIFIERS = ("ctrlKey", "altKey", "metaKey")

KNOWN_KEYS = frozenset(
    [
        "Tab", "Enter", "Escape", "Esc", "Space", " ",
        "ArrowUp", "ArrowDown", "ArrowLeft", "ArrowRight",
        "Up", "Down", "Left", "Right",
        "Home", "End", "PageUp", "PageDown",
        "Backspace", "Delete", "Insert",
    ]
)
COMMON_KEY_CODES = frozenset([8, 9, 13, 27, 32, 35, 36, 37, 38, 39, 40, 46])
_FUNCTION_KEY = re.compile(r"^F\d+$")

VERTICAL_ARROWS = ("ArrowUp", "ArrowDown", "Up", "Down", 38, 40)
HORIZONTAL_ARROWS = ("ArrowLeft", "ArrowRight", "Left", "Right", 37, 39)
TAB_KEYS = ("Tab", 9)
HOME_END_KEYS = ("Home", "End", 36, 35)
ENTER_KEYS = ("Enter", 13)
SPACE_KEYS = ("Space", " ", 32)
ESCAPE_KEYS = ("Escape", "Esc", 27)

GLOBAL_TARGETS = ("document", "window")

# Single-key quick navigation in browse mode (NVDA, JAWS, VoiceOver Quick Nav).
# Shift+letter moves to the previous element of the same type.
SR_QUICK_NAV_KEYS = {
    "h": "heading",
    "H": "heading (previous)",
    "1": "heading level 1",
    "2": "heading level 2",
    "3": "heading level 3",
    "4": "heading level 4",
    "5": "heading level 5",
    "6": "heading level 6",
    "b": "button",
    "B": "button (previous)",
    "k": "link",
    "K": "link (previous)",
    "u": "unvisited link",
    "U": "unvisited link (previous)",
    "v": "visited link",
    "V": "visited link (previous)",
    "a": "anchor/link",
    "A": "anchor/link (previous)",
    "y": "clickable element",
    "Y": "clickable element (previous)",
    "f": "form field",
    "F": "form field (previous)",
    "e": "edit field",
    "E": "edit field (previous)",
    "x": "checkbox",
    "X": "checkbox (previous)",
    "r": "radio button",
    "R": "radio button (previous)",
    "c": "combobox",
    "C": "combobox (previous)",
    "d": "landmark",
    "D": "landmark (previous)",
    "z": "landmark",
    "Z": "landmark (previous)",
    "t": "table",
    "T": "table (previous)",
    "l": "list",
    "L": "list (previous)",
    "i": "list item",
    "I": "list item (previous)",
    "p": "paragraph",
    "P": "paragraph (previous)",
    "g": "graphic/image",
    "G": "graphic/image (previous)",
    "m": "frame",
    "M": "frame (previous)",
    "n": "non-link text",
    "N": "non-link text (previous)",
    "o": "embedded object",
    "O": "embedded object (previous)",
    "q": "blockquote",
    "Q": "blockquote (previous)",
    "s": "separator",
    "S": "separator (previous)",
    "w": "ARIA widget",
    "W": "ARIA widget (previous)",
}

# Browse-mode reading keys
SR_READING_KEYS = frozenset(
    ["ArrowUp", "ArrowDown", "ArrowLeft", "ArrowRight", "Up", "Down", "Left", "Right"]
)


def is_likely_key_value(value: Any) -> bool:
    """Heuristic for ``case`` labels: known key names, single characters, F-keys or common keyCodes."""
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return value in COMMON_KEY_CODES
    if not isinstance(value, str):
        return False
    return value in KNOWN_KEYS or len(value) == 1 or bool(_FUNCTION_KEY.match(value))


def key_string(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value)


def _key_in(check: Dict, keys) -> bool:
    key = check["key"]
    return not isinstance(key, bool) and key in keys


def empty_keyboard_results() -> Dict[str, Any]:
    return {
        "keyboardHandlers": [],
        "mouseHandlers": [],
        "keyChecks": [],
        "preventDefaultCalls": [],
        "modifierChecks": [],
        "navigationPatterns": [],
        "trapPatterns": [],
        "keyboardShortcuts": [],
        "screenReaderConflicts": [],
        "mouseOnlyElements": [],
        "issues": [],
        "stats": {
            "totalKeyboardHandlers": 0,
            "totalMouseHandlers": 0,
            "keyboardOnlyElements": 0,
            "mouseOnlyElements": 0,
            "screenReaderConflicts": 0,
            "byKey": {},
            "byElement": {},
            "byEventType": {},
        },
    }


def _handler_entry(handler: Dict) -> Dict:
    return {
        "type": handler.get("type"),
        "eventType": handler.get("eventType"),
        "elementRef": handler.get("elementRef"),
        "location": handler.get("location"),
        "actionId": handler.get("actionId"),
        "handlerActionId": handler.get("actionId"),
    }


class KeyboardAnalyzer(BaseAnalyzer):
    """Analyzes keyboard navigation patterns."""

    name = "KeyboardAnalyzer"
    default_options = {
        "detectTraps": True,
        "detectMouseOnly": True,
        "detectPatterns": True,
        "detectScreenReaderConflicts": True,
    }

    def analyze(
        self,
        tree: Optional[ActionTree],
        event_results: Optional[Dict[str, Any]] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Dict[str, Any]:
        """
        Analyze a tree for keyboard accessibility.

        Args:
            tree: The tree to analyze (None yields empty results)
            event_results: EventAnalyzer output; computed here when omitted
            cancel_token: Optional token checked between nodes

        Returns:
            Dict with handlers, key checks, patterns, conflicts, issues and stats
        """
        results = empty_keyboard_results()
        if tree is None or tree.root is None:
            return results

        if event_results is None:
            event_results = EventAnalyzer().analyze(tree, cancel_token)

        for handler in event_results.get("handlers", []):
            if handler.get("eventType") in KEYBOARD_EVENTS:
                results["keyboardHandlers"].append(_handler_entry(handler))
            elif handler.get("eventType") in MOUSE_EVENTS:
                results["mouseHandlers"].append(_handler_entry(handler))

        for node, context in walk(tree, cancel_token):
            self._check_key_comparison(node, context, results)
            self._check_case_label(node, context, results)
            self._check_prevent_default(node, context, results)
            self._check_modifier(node, context, results)

        if self.options["detectPatterns"]:
            self._detect_navigation_patterns(results)
            self._detect_trap_patterns(results)
            self._detect_shortcut_patterns(results)

        self._compute_stats(results)
        self._detect_issues(results)

        logger.debug(
            f"KeyboardAnalyzer found {len(results['keyboardHandlers'])} keyboard handlers, "
            f"{len(results['keyChecks'])} key checks"
        )
        return results

    # Detection

    @staticmethod
    def _key_check(node: ActionNode, context: TraversalContext, prop: str, key: Any, operator: str) -> Dict:
        handler = context.innermost(KEYBOARD_EVENTS)
        return {
            "property": prop,
            "key": key,
            "operator": operator,
            "isNegated": operator in ("!==", "!="),
            "inKeyboardHandler": True,
            "handlerActionId": handler.id,
            "location": location_of(node),
            "actionId": node.id,
        }

    @safe_check
    def _check_key_comparison(self, node: ActionNode, context: TraversalContext, results: Dict) -> None:
        binary = BinaryOpView.of(node)
        if binary is None or not context.inside(KEYBOARD_EVENTS):
            return
        if binary.operator not in COMPARISON_OPERATORS:
            return

        for access_node, value_node in ((binary.left, binary.right), (binary.right, binary.left)):
            access = MemberAccessView.of(access_node)
            if access is None or access.property_name not in KEY_PROPERTIES:
                continue
            key = value_node.get("value") if value_node is not None else None
            if key is None:
                return
            results["keyChecks"].append(
                self._key_check(node, context, access.property_name, key, binary.operator)
            )
            return

    @safe_check
    def _check_case_label(self, node: ActionNode, context: TraversalContext, results: Dict) -> None:
        if node.action_type != "case" or not context.inside(KEYBOARD_EVENTS):
            return
        test = LiteralView.of(node.child_with_role("test"))
        if test is None or test.value is None or not is_likely_key_value(test.value):
            return
        # switch (e.key) is assumed
        results["keyChecks"].append(self._key_check(node, context, "key", test.value, "==="))

    @safe_check
    def _check_prevent_default(self, node: ActionNode, context: TraversalContext, results: Dict) -> None:
        call = CallView.of(node)
        if call is None or not call.callee.endswith("preventDefault"):
            return
        keyboard_handler = context.innermost(KEYBOARD_EVENTS)
        results["preventDefaultCalls"].append(
            {
                "inKeyboardHandler": keyboard_handler is not None,
                "inMouseHandler": context.inside(MOUSE_EVENTS),
                "handlerActionId": keyboard_handler.id if keyboard_handler is not None else None,
                "location": location_of(node),
                "actionId": node.id,
            }
        )

    @safe_check
    def _check_modifier(self, node: ActionNode, context: TraversalContext, results: Dict) -> None:
        access = MemberAccessView.of(node)
        if access is None or access.property_name not in MODIFIER_PROPERTIES:
            return
        keyboard_handler = context.innermost(KEYBOARD_EVENTS)
        if keyboard_handler is None:
            return
        results["modifierChecks"].append(
            {
                "modifier": access.property_name,
                "handlerActionId": keyboard_handler.id,
                "location": location_of(node),
                "actionId": node.id,
                "parentActionId": context.parent.id if context.parent is not None else None,
            }
        )

    # Patterns

    def _detect_navigation_patterns(self, results: Dict) -> None:
        checks = results["keyChecks"]
        patterns = results["navigationPatterns"]

        arrows = [k for k in checks if _key_in(k, VERTICAL_ARROWS + HORIZONTAL_ARROWS)]
        if arrows:
            vertical = any(_key_in(k, VERTICAL_ARROWS) for k in arrows)
            horizontal = any(_key_in(k, HORIZONTAL_ARROWS) for k in arrows)
            patterns.append(
                {
                    "type": "arrow-navigation",
                    "description": "Arrow key navigation detected",
                    "directions": {
                        "vertical": vertical,
                        "horizontal": horizontal,
                        "bidirectional": vertical and horizontal,
                    },
                    "keyCount": len(arrows),
                }
            )

        tabs = [k for k in checks if _key_in(k, TAB_KEYS)]
        if tabs:
            patterns.append(
                {
                    "type": "tab-handling",
                    "description": "Tab key handling detected",
                    "count": len(tabs),
                    "hasPreventDefault": any(p["inKeyboardHandler"] for p in results["preventDefaultCalls"]),
                }
            )

        home_end = [k for k in checks if _key_in(k, HOME_END_KEYS)]
        if home_end:
            patterns.append(
                {
                    "type": "home-end-navigation",
                    "description": "Home/End key navigation detected",
                    "count": len(home_end),
                }
            )

        activation = [k for k in checks if _key_in(k, ENTER_KEYS + SPACE_KEYS)]
        if activation:
            patterns.append(
                {
                    "type": "activation-keys",
                    "description": "Enter/Space activation handling detected",
                    "hasEnter": any(_key_in(k, ENTER_KEYS) for k in activation),
                    "hasSpace": any(_key_in(k, SPACE_KEYS) for k in activation),
                }
            )

        escapes = [k for k in checks if _key_in(k, ESCAPE_KEYS)]
        if escapes:
            patterns.append(
                {
                    "type": "escape-dismissal",
                    "description": "Escape key handling detected",
                    "count": len(escapes),
                }
            )

    def _detect_trap_patterns(self, results: Dict) -> None:
        if not self.options["detectTraps"]:
            return

        prevented = {p["handlerActionId"] for p in results["preventDefaultCalls"] if p["inKeyboardHandler"]}
        seen: Set[str] = set()
        for check in results["keyChecks"]:
            handler_id = check["handlerActionId"]
            if handler_id in seen or not _key_in(check, TAB_KEYS) or handler_id not in prevented:
                continue
            seen.add(handler_id)
            has_escape = any(
                _key_in(k, ESCAPE_KEYS) and k["handlerActionId"] == handler_id for k in results["keyChecks"]
            )
            results["trapPatterns"].append(
                {
                    "type": "intentional-trap" if has_escape else "potential-trap",
                    "description": "Focus trap with Escape handling (likely intentional, e.g., dialog)"
                    if has_escape
                    else "Tab handling with preventDefault - potential keyboard trap",
                    "hasEscapeHandler": has_escape,
                    "handlerActionId": handler_id,
                    "location": check["location"],
                    "severity": "info" if has_escape else "warning",
                }
            )

    def _detect_shortcut_patterns(self, results: Dict) -> None:
        modifiers = list(dict.fromkeys(m["modifier"] for m in results["modifierChecks"]))
        if modifiers:
            results["keyboardShortcuts"].append(
                {
                    "type": "modifier-combination",
                    "description": "Keyboard shortcut with modifier key detected",
                    "modifiers": modifiers,
                }
            )

        letters = [
            k["key"] for k in results["keyChecks"]
            if isinstance(k["key"], str) and len(k["key"]) == 1 and k["key"].isascii() and k["key"].isalnum()
        ]
        if letters:
            results["keyboardShortcuts"].append(
                {
                    "type": "letter-keys",
                    "description": "Letter/number key handling detected (possible shortcuts or type-ahead)",
                    "keys": list(dict.fromkeys(letters)),
                }
            )

    # Issues

    @staticmethod
    def mouse_only_elements(results: Dict) -> List[str]:
        keyboard_elements = {h["elementRef"] for h in results["keyboardHandlers"]}
        elements = []
        for handler in results["mouseHandlers"]:
            ref = handler["elementRef"]
            if ref in keyboard_elements or ref in GLOBAL_TARGETS or ref in elements:
                continue
            elements.append(ref)
        return elements

    def _detect_issues(self, results: Dict) -> None:
        issues = results["issues"]

        if self.options["detectMouseOnly"]:
            for element in results["mouseOnlyElements"]:
                click = next(
                    (h for h in results["mouseHandlers"] if h["elementRef"] == element and h["eventType"] == "click"),
                    None,
                )
                if click is None:
                    continue
                issues.append(
                    {
                        "type": "mouse-only-click",
                        "severity": "warning",
                        "message": f'Element "{element}" has click handler but no keyboard handler',
                        "elementRef": element,
                        "location": click["location"],
                        "actionId": click["actionId"],
                        "suggestion": "Add keydown handler for Enter/Space to ensure keyboard accessibility",
                    }
                )

        for trap in results["trapPatterns"]:
            if trap["type"] == "potential-trap":
                issues.append(
                    {
                        "type": "potential-keyboard-trap",
                        "severity": "warning",
                        "message": "Tab key handling with preventDefault detected without Escape handler",
                        "location": trap["location"],
                        "actionId": trap["handlerActionId"],
                        "suggestion": "Ensure users can exit the component using Escape key or other means",
                    }
                )

        legacy = [k for k in results["keyChecks"] if k["property"] in ("keyCode", "which")]
        if legacy:
            issues.append(
                {
                    "type": "deprecated-keycode",
                    "severity": "info",
                    "message": f"Using deprecated {legacy[0]['property']} property ({len(legacy)} occurrences)",
                    "location": legacy[0]["location"],
                    "actionId": legacy[0]["actionId"],
                    "suggestion": "Consider using event.key instead for better readability and compatibility",
                }
            )

        shift_handlers = {m["handlerActionId"] for m in results["modifierChecks"] if m["modifier"] == "shiftKey"}
        bare_tab = next(
            (
                k for k in results["keyChecks"]
                if _key_in(k, TAB_KEYS) and k["handlerActionId"] not in shift_handlers
            ),
            None,
        )
        if bare_tab is not None:
            issues.append(
                {
                    "type": "tab-without-shift",
                    "severity": "info",
                    "message": "Tab key handling detected - ensure Shift+Tab is also handled for reverse navigation",
                    "location": bare_tab["location"],
                    "actionId": bare_tab["actionId"],
                    "suggestion": "Check event.shiftKey to handle both forward and backward tab navigation",
                }
            )

        if self.options["detectScreenReaderConflicts"]:
            self._detect_screen_reader_conflicts(results)

    def _detect_screen_reader_conflicts(self, results: Dict) -> None:
        issues = results["issues"]
        guarded = {
            m["handlerActionId"] for m in results["modifierChecks"] if m["modifier"] in REQUIRED_MODIFIERS
        }

        for check in results["keyChecks"]:
            key = key_string(check["key"])
            function = SR_QUICK_NAV_KEYS.get(key)
            if function is None or check["handlerActionId"] in guarded:
                continue
            results["screenReaderConflicts"].append(
                {
                    "key": key,
                    "screenReaderFunction": function,
                    "location": check["location"],
                    "actionId": check["actionId"],
                    "handlerActionId": check["handlerActionId"],
                    "severity": "warning",
                }
            )
            if key.isdigit():
                message = (
                    f'Number key "{key}" without modifier conflicts with screen reader '
                    f"heading navigation ({function})"
                )
                suggestion = "Require a modifier key (Ctrl, Alt, Meta) for shortcuts using number keys"
            else:
                message = (
                    f'Single-letter key "{key}" without modifier conflicts with screen reader '
                    f"quick navigation ({function})"
                )
                suggestion = (
                    "Require a modifier key (Ctrl, Alt, Meta) or only activate in "
                    'application mode (role="application")'
                )
            issues.append(
                {
                    "type": "screen-reader-conflict",
                    "severity": "warning",
                    "message": message,
                    "key": key,
                    "screenReaderFunction": function,
                    "location": check["location"],
                    "actionId": check["actionId"],
                    "suggestion": suggestion,
                }
            )

        arrows = [k for k in results["keyChecks"] if key_string(k["key"]) in SR_READING_KEYS]
        if arrows:
            issues.append(
                {
                    "type": "screen-reader-arrow-conflict",
                    "severity": "info",
                    "message": "Arrow key handling detected - may interfere with screen reader browse mode navigation",
                    "keys": list(dict.fromkeys(k["key"] for k in arrows)),
                    "location": arrows[0]["location"],
                    "actionId": arrows[0]["actionId"],
                    "suggestion": 'Ensure the component uses role="application" or is in a form control for custom arrow key behavior',
                }
            )

        results["stats"]["screenReaderConflicts"] = len(results["screenReaderConflicts"])

    def _compute_stats(self, results: Dict) -> None:
        stats = results["stats"]
        stats["totalKeyboardHandlers"] = len(results["keyboardHandlers"])
        stats["totalMouseHandlers"] = len(results["mouseHandlers"])

        for check in results["keyChecks"]:
            count_into(stats["byKey"], key_string(check["key"]))
        for handler in results["keyboardHandlers"] + results["mouseHandlers"]:
            count_into(stats["byElement"], handler["elementRef"])
        for handler in results["keyboardHandlers"]:
            count_into(stats["byEventType"], handler["eventType"])

        results["mouseOnlyElements"] = self.mouse_only_elements(results)
        mouse_elements = {h["elementRef"] for h in results["mouseHandlers"]}
        keyboard_only = {
            h["elementRef"] for h in results["keyboardHandlers"]
            if h["elementRef"] not in mouse_elements and h["elementRef"] not in GLOBAL_TARGETS
        }
        stats["mouseOnlyElements"] = len(results["mouseOnlyElements"])
        stats["keyboardOnlyElements"] = len(keyboard_only)


def has_escape_handler(results: Dict[str, Any]) -> bool:
    return any(_key_in(k, ESCAPE_KEYS) for k in results.get("keyChecks", []))


def has_arrow_navigation(results: Dict[str, Any]) -> bool:
    return any(p["type"] == "arrow-navigation" for p in results.get("navigationPatterns", []))


def get_key_checks(results: Dict[str, Any], key: Any) -> List[Dict]:
    return [k for k in results.get("keyChecks", []) if k["key"] == key]


def get_screen_reader_conflicts_by_key(results: Dict[str, Any], key: str) -> List[Dict]:
    return [c for c in results.get("screenReaderConflicts", []) if c["key"] == key]
