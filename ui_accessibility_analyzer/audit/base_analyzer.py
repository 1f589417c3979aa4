# Copyright 2025 Amazon.com, Inc. or its affiliates.
# SPDX-License-Identifier: Apache-2.0

"""
Base classes and shared traversal helpers for accessibility analyzers.

This module provides the foundation for all analyzers in the system: the
immutable TraversalContext threaded through every walk, the single predicate
deciding where an event-handler context begins, element-reference resolution,
and the cancellation token checked between nodes.
"""

import functools
import threading
from dataclasses import dataclass, replace
from typing import Any, Dict, Iterator, Optional, Tuple

from ui_accessibility_analyzer.tree.action_tree import ActionNode, ActionTree
from ui_accessibility_analyzer.tree.node_views import (
    AssignView,
    CallView,
    JsxAttributeView,
    LiteralView,
    IdentifierView,
    is_function,
    literal_value,
)
from ui_accessibility_analyzer.utils.logging_helper import (
    setup_logger,
    AnalysisCancelledError,
)

logger = setup_logger(__name__)

KEYBOARD_EVENTS = ("keydown", "keyup", "keypress")
MOUSE_EVENTS = (
    "click",
    "dblclick",
    "mousedown",
    "mouseup",
    "mouseover",
    "mouseout",
    "mouseenter",
    "mouseleave",
    "contextmenu",
)
FOCUS_EVENTS = ("focus", "blur", "focusin", "focusout")


def safe_check(check_func):
    """
    Decorator for safely running a single detection.

    Catches exceptions and logs them without crashing the whole traversal.
    Cancellation is never swallowed.
    """

    @functools.wraps(check_func)
    def wrapper(*args, **kwargs):
        try:
            return check_func(*args, **kwargs)
        except AnalysisCancelledError:
            raise
        except Exception as e:
            logger.error(f"Error in {check_func.__name__}: {str(e)}")
            return None

    return wrapper


class CancellationToken:
    """Thread-safe flag checked by analyzers between visited nodes."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise AnalysisCancelledError("Analysis was cancelled")


def registration_event_type(node: ActionNode) -> Optional[str]:
    """
    Event type registered by this node, or None if it registers nothing.

    Recognizes listener calls marked ``pattern=eventHandler`` or calling
    ``addEventListener`` (event name in the first literal argument), JSX
    event props and ``el.onX = fn`` assignments.
    """
    pattern = node.get("pattern")
    if pattern == "jsxEventHandler":
        return JsxAttributeView(node).event_type or None

    assign = AssignView.of(node)
    if assign is not None:
        target = assign.target
        if target is not None and target.property_name.startswith("on") and is_function(assign.right):
            return target.property_name[2:].lower() or None
        return None

    call = CallView.of(node)
    if pattern == "eventHandler" or (call and call.callee.endswith("addEventListener")):
        args = node.children_with_role("argument")
        value = literal_value(args[0]) if args else None
        return value if isinstance(value, str) else None
    return None


def is_handler_boundary(node: ActionNode) -> bool:
    """True where an event-handler context begins: a registration or a function body."""
    pattern = node.get("pattern")
    return pattern in ("eventHandler", "jsxEventHandler") or is_function(node)


@dataclass(frozen=True)
class TraversalContext:
    """
    Immutable per-node traversal state.

    ``event_type`` and ``handler`` belong to the outermost enclosing handler,
    while ``registrations`` lists every enclosing registration, innermost last.
    """

    depth: int = 0
    parent: Optional[ActionNode] = None
    in_event_handler: bool = False
    event_type: Optional[str] = None
    handler: Optional[ActionNode] = None
    registrations: Tuple[Tuple[str, ActionNode], ...] = ()

    def enter(self, node: ActionNode) -> "TraversalContext":
        """Context seen by the children of ``node``."""
        boundary = is_handler_boundary(node)
        registered = registration_event_type(node)
        registrations = self.registrations
        if registered:
            registrations = registrations + ((registered, node),)
        return replace(
            self,
            depth=self.depth + 1,
            parent=node,
            in_event_handler=self.in_event_handler or boundary,
            event_type=self.event_type or registered,
            handler=self.handler if self.in_event_handler else (node if boundary else None),
            registrations=registrations,
        )

    def innermost(self, event_types) -> Optional[ActionNode]:
        """Innermost enclosing registration for one of ``event_types``."""
        for event_type, node in reversed(self.registrations):
            if event_type in event_types:
                return node
        return None

    def inside(self, event_types) -> bool:
        return self.innermost(event_types) is not None

    @property
    def handler_action_id(self) -> Optional[str]:
        return self.handler.id if self.handler is not None else None


def walk(
    tree: Optional[ActionTree], cancel_token: Optional[CancellationToken] = None
) -> Iterator[Tuple[ActionNode, TraversalContext]]:
    """
    Pre-order walk yielding each node with the context it is visited in.

    The token is checked before every node.
    """
    if tree is None or tree.root is None:
        return
    stack = [(tree.root, TraversalContext())]
    while stack:
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()
        node, context = stack.pop()
        yield node, context
        child_context = context.enter(node)
        for child in reversed(node.children):
            stack.append((child, child_context))


def argument_value(node: Optional[ActionNode]) -> Any:
    """Literal value or identifier name of an argument node."""
    literal = LiteralView.of(node)
    if literal is not None:
        return literal.value
    identifier = IdentifierView.of(node)
    if identifier is not None:
        return identifier.name
    return None


def element_reference(node: Optional[ActionNode]) -> str:
    """
    Best-effort string naming the element an expression refers to.

    identifier -> its name; memberAccess -> reference of its object;
    getElementById('x') -> '#x'; querySelector('sel') -> 'sel'; any other
    call -> its callee.
    """
    while node is not None and node.action_type == "memberAccess":
        node = node.child_with_role("object")

    if node is None:
        return "unknown"

    if node.action_type == "identifier":
        return node.get("name") or "unknown"

    call = CallView.of(node)
    if call is not None and call.callee:
        callee = call.callee
        if "getElementById" in callee:
            element_id = argument_value(call.argument(0))
            return f"#{element_id}" if element_id else callee
        if "querySelector" in callee:
            return argument_value(call.argument(0)) or callee
        return callee

    return "unknown"


def location_of(node: ActionNode, with_offsets: bool = False) -> Dict[str, Any]:
    location = {"line": node.get("line"), "column": node.get("column")}
    if with_offsets:
        location["sourceStart"] = node.get("sourceStart")
        location["sourceEnd"] = node.get("sourceEnd")
    return location


def handler_info(node: Optional[ActionNode], **extra) -> Optional[Dict[str, Any]]:
    """Metadata describing a handler expression."""
    if node is None:
        return None
    info = {
        "actionId": node.id,
        "actionType": node.action_type,
        "isInline": is_function(node),
        "name": node.get("name"),
    }
    info.update(extra)
    return info


def count_into(counter: Dict[str, int], key: Optional[str]) -> None:
    key = key if key is not None else "unknown"
    counter[key] = counter.get(key, 0) + 1


class BaseAnalyzer:
    """
    Base class for all analyzers.

    Subclasses declare ``default_options`` and implement ``analyze``, which
    must build a fresh result bundle per call. Instances keep nothing but
    their options, so one instance may serve concurrent calls.
    """

    name = "BaseAnalyzer"
    default_options: Dict[str, Any] = {}

    def __init__(self, options: Optional[Dict[str, Any]] = None):
        self.options = dict(self.default_options)
        if options:
            self.options.update(options)

    def analyze(self, tree: Optional[ActionTree], *args, **kwargs) -> Dict[str, Any]:
        """
        Analyze the tree and return a result bundle.

        This method must be implemented by all subclasses.
        """
        raise NotImplementedError("Subclasses must implement analyze()")
