# Copyright 2025 Amazon.com, Inc. or its affiliates.
# SPDX-License-Identifier: Apache-2.0

"""
Event handler discovery.

Catalogs every event registration in a tree regardless of idiom: native
``addEventListener``, ``el.onX = fn`` assignment, ``setAttribute('onX', ...)``,
jQuery ``.on()`` (direct and delegated), jQuery shorthand methods, and JSX
``onX`` props. Listener removals are tracked separately. The handler list is
consumed by the keyboard, context-change and semantic analyzers.
"""

from typing import Any, Dict, List, Optional

from ui_accessibility_analyzer.audit.base_analyzer import (
    BaseAnalyzer,
    CancellationToken,
    FOCUS_EVENTS,
    KEYBOARD_EVENTS,
    argument_value,
    count_into,
    element_reference,
    handler_info,
    location_of,
    safe_check,
    walk,
)
from ui_accessibility_analyzer.tree.action_tree import ActionNode, ActionTree
from ui_accessibility_analyzer.tree.node_views import (
    AssignView,
    CallView,
    JsxAttributeView,
    LiteralView,
)
from ui_accessibility_analyzer.utils.logging_helper import setup_logger

logger = setup_logger(__name__)

JQUERY_EVENT_METHODS = (
    "click", "dblclick", "mousedown", "mouseup", "mousemove", "mouseover",
    "mouseout", "mouseenter", "mouseleave",
    "keydown", "keyup", "keypress",
    "focus", "blur", "focusin", "focusout",
    "change", "select", "submit",
    "scroll", "resize",
    "load", "unload", "ready",
    "hover",
)

JQUERY_FACTORIES = ("$", "jQuery")


def empty_event_results() -> Dict[str, Any]:
    return {
        "handlers": [],
        "removals": [],
        "issues": [],
        "stats": {
            "totalHandlers": 0,
            "byEventType": {},
            "byElement": {},
            "byPattern": {},
        },
    }


def _jquery_factory_call(node: Optional[ActionNode]) -> Optional[CallView]:
    call = CallView.of(node)
    if call is not None and call.callee in JQUERY_FACTORIES:
        return call
    return None


def is_jquery_chain(callee: Optional[ActionNode]) -> bool:
    """True when a member access hangs off a ``$(...)``/``jQuery(...)`` call."""
    while callee is not None and callee.action_type == "memberAccess":
        obj = callee.child_with_role("object")
        if obj is not None and obj.action_type == "call":
            return _jquery_factory_call(obj) is not None
        callee = obj
    return False


def jquery_selector(callee: Optional[ActionNode]) -> str:
    """Selector passed to the ``$()`` call at the root of a jQuery chain."""
    if callee is None or callee.action_type != "memberAccess":
        return "unknown"
    obj = callee.child_with_role("object")
    factory = _jquery_factory_call(obj)
    if factory is not None:
        if factory.arguments:
            return argument_value(factory.argument(0)) or "$()"
    return jquery_selector(obj)


def event_options(node: Optional[ActionNode]) -> Optional[Dict[str, Any]]:
    """Listener options from a literal capture flag or an options object."""
    if node is None:
        return None

    literal = LiteralView.of(node)
    if literal is not None:
        if literal.value is True or literal.value == "true":
            return {"capture": True}
        return None

    if node.action_type == "object":
        options = {}
        for prop in node.children:
            if prop.action_type != "property":
                continue
            key = prop.get("key")
            value_node = prop.child_with_role("value")
            if key and value_node is not None:
                options[key] = argument_value(value_node)
        return options or None

    return None


class EventAnalyzer(BaseAnalyzer):
    """Discovers and catalogs event handlers in action trees."""

    name = "EventAnalyzer"
    default_options = {
        "trackRemovals": True,
        "includeInlineHandlers": True,
    }

    def analyze(
        self,
        tree: Optional[ActionTree],
        cancel_token: Optional[CancellationToken] = None,
    ) -> Dict[str, Any]:
        """
        Analyze a tree for event handler registrations.

        Args:
            tree: The tree to analyze (None yields empty results)
            cancel_token: Optional token checked between nodes

        Returns:
            Dict with handlers, removals, issues and stats
        """
        results = empty_event_results()
        for node, context in walk(tree, cancel_token):
            self._check_node(node, context.parent, results)

        self._compute_stats(results)
        logger.debug(f"EventAnalyzer found {len(results['handlers'])} handlers")
        return results

    @safe_check
    def _check_node(self, node: ActionNode, parent: Optional[ActionNode], results: Dict) -> None:
        # The first matching idiom wins
        if node.get("pattern") == "eventHandler":
            self._extract_add_event_listener(node, results)
            return

        call = CallView.of(node)
        if call is not None and self.options["trackRemovals"]:
            if call.callee.endswith("removeEventListener"):
                self._extract_removal(call, results)
                return

        assign = AssignView.of(node)
        if assign is not None:
            self._check_property_assignment(assign, results)
            return

        if call is not None:
            if self.options["includeInlineHandlers"] and call.callee.endswith("setAttribute"):
                self._check_set_attribute(call, results)
                return
            if call.calls("on"):
                self._check_jquery_on(call, results)
                return
            self._check_jquery_shorthand(call, results)

        if node.action_type == "jsxAttribute" and node.get("pattern") == "jsxEventHandler":
            self._extract_jsx_handler(JsxAttributeView(node), parent, results)

    def _extract_add_event_listener(self, node: ActionNode, results: Dict) -> None:
        args = node.children_with_role("argument")
        results["handlers"].append(
            {
                "type": "addEventListener",
                "elementRef": element_reference(node.child_with_role("callee")),
                "eventType": argument_value(args[0]) if args else None,
                "handler": handler_info(args[1] if len(args) > 1 else None),
                "options": event_options(args[2] if len(args) > 2 else None),
                "location": location_of(node, with_offsets=True),
                "actionId": node.id,
            }
        )

    def _extract_removal(self, call: CallView, results: Dict) -> None:
        handler = call.argument(1)
        results["removals"].append(
            {
                "type": "removeEventListener",
                "elementRef": element_reference(call.callee_node),
                "eventType": argument_value(call.argument(0)),
                "handler": {
                    "actionId": handler.id,
                    "actionType": handler.action_type,
                    "name": handler.get("name"),
                }
                if handler is not None
                else None,
                "location": location_of(call.node),
                "actionId": call.node.id,
            }
        )

    def _check_property_assignment(self, assign: AssignView, results: Dict) -> None:
        target = assign.target
        if target is None or not target.property_name.startswith("on"):
            return

        results["handlers"].append(
            {
                "type": "propertyAssignment",
                "elementRef": element_reference(target.node),
                "eventType": target.property_name[2:].lower(),
                "property": target.property_name,
                "handler": handler_info(assign.right),
                "location": location_of(assign.node),
                "actionId": assign.node.id,
            }
        )

    def _check_set_attribute(self, call: CallView, results: Dict) -> None:
        args = call.arguments
        if len(args) < 2:
            return
        attr_name = argument_value(args[0])
        if not isinstance(attr_name, str) or not attr_name.startswith("on"):
            return

        results["handlers"].append(
            {
                "type": "setAttribute",
                "elementRef": element_reference(call.callee_node),
                "eventType": attr_name[2:].lower(),
                "attribute": attr_name,
                "handler": {
                    "actionId": args[1].id,
                    "actionType": args[1].action_type,
                    "value": argument_value(args[1]),
                },
                "location": location_of(call.node),
                "actionId": call.node.id,
            }
        )

    def _check_jquery_on(self, call: CallView, results: Dict) -> None:
        args = call.arguments
        if len(args) < 2:
            return

        element_ref = jquery_selector(call.callee_node)
        event_types = argument_value(args[0])

        delegate_selector = None
        if len(args) >= 3 and args[1].action_type == "literal":
            # .on('click', '.child', handler)
            delegate_selector = argument_value(args[1])
            handler = args[2]
        else:
            handler = args[1]

        events = str(event_types).split() if event_types else []
        for event_type in events or ["unknown"]:
            results["handlers"].append(
                {
                    "type": "jQueryOn",
                    "elementRef": element_ref,
                    "eventType": event_type,
                    "delegateSelector": delegate_selector,
                    "handler": handler_info(handler),
                    "location": location_of(call.node),
                    "actionId": call.node.id,
                }
            )

    def _check_jquery_shorthand(self, call: CallView, results: Dict) -> None:
        method = next((m for m in JQUERY_EVENT_METHODS if call.calls(m)), None)
        if method is None or not call.arguments:
            return
        if not is_jquery_chain(call.callee_node):
            return

        results["handlers"].append(
            {
                "type": "jQueryShorthand",
                "elementRef": jquery_selector(call.callee_node),
                "eventType": method,
                "method": method,
                "handler": handler_info(call.argument(0)),
                "location": location_of(call.node),
                "actionId": call.node.id,
            }
        )

    def _extract_jsx_handler(
        self, attribute: JsxAttributeView, parent: Optional[ActionNode], results: Dict
    ) -> None:
        element_ref = "JSXElement"
        if parent is not None and parent.action_type == "jsxElement":
            element_ref = parent.get("tagName") or "JSXElement"

        results["handlers"].append(
            {
                "type": "jsxEventHandler",
                "elementRef": element_ref,
                "eventType": attribute.event_type,
                "attribute": attribute.name,
                "handler": handler_info(attribute.value_node),
                "location": location_of(attribute.node),
                "actionId": attribute.node.id,
            }
        )

    @staticmethod
    def _compute_stats(results: Dict) -> None:
        stats = results["stats"]
        stats["totalHandlers"] = len(results["handlers"])
        for handler in results["handlers"]:
            count_into(stats["byEventType"], handler.get("eventType"))
            count_into(stats["byElement"], handler.get("elementRef"))
            count_into(stats["byPattern"], handler["type"])


def get_handlers_by_event_type(results: Dict[str, Any], event_type: str) -> List[Dict]:
    return [h for h in results.get("handlers", []) if h.get("eventType") == event_type]


def get_handlers_by_element(results: Dict[str, Any], element_ref: str) -> List[Dict]:
    return [h for h in results.get("handlers", []) if h.get("elementRef") == element_ref]


def has_keyboard_handlers(results: Dict[str, Any]) -> bool:
    return any(h.get("eventType") in KEYBOARD_EVENTS for h in results.get("handlers", []))


def has_click_handlers(results: Dict[str, Any]) -> bool:
    return any(h.get("eventType") == "click" for h in results.get("handlers", []))


def has_focus_handlers(results: Dict[str, Any]) -> bool:
    return any(h.get("eventType") in FOCUS_EVENTS for h in results.get("handlers", []))
