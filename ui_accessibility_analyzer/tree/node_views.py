# Copyright 2025 Amazon.com, Inc. or its affiliates.
# SPDX-License-Identifier: Apache-2.0

"""
Typed read-only views over ActionNodes.

A view names the fields a node of a known shape carries, so analyzers read
``CallView.callee`` instead of poking the attribute bag. Every accessor
returns None (or an empty value) when the field is missing; views never raise.
"""

from typing import Any, List, Optional

from ui_accessibility_analyzer.tree.action_tree import ActionNode

FUNCTION_TYPES = ("functionExpr", "arrowFunction")


class NodeView:
    """Base view; ``of`` returns None when the node has a different shape."""

    action_types = ()

    def __init__(self, node: ActionNode):
        self.node = node

    @classmethod
    def of(cls, node: Optional[ActionNode]):
        if node is None or node.action_type not in cls.action_types:
            return None
        return cls(node)

    @property
    def line(self):
        return self.node.get("line")

    @property
    def column(self):
        return self.node.get("column")


class CallView(NodeView):
    action_types = ("call",)

    @property
    def callee(self) -> str:
        return self.node.get("callee") or ""

    @property
    def method(self) -> Optional[str]:
        """Method name, falling back to the property of a leading memberAccess."""
        method = self.node.get("method")
        if not method:
            first = self.node.first_child
            if first is not None and first.action_type == "memberAccess":
                method = first.get("property")
        return method

    @property
    def callee_node(self) -> Optional[ActionNode]:
        return self.node.child_with_role("callee")

    @property
    def arguments(self) -> List[ActionNode]:
        return self.node.children_with_role("argument")

    def argument(self, index: int) -> Optional[ActionNode]:
        args = self.arguments
        return args[index] if index < len(args) else None

    def callee_ends_with(self, *names: str) -> bool:
        return any(self.callee.endswith(name) for name in names)

    def calls(self, name: str) -> bool:
        """True for a bare ``name(...)`` or any ``x.name(...)``."""
        callee = self.callee
        return callee == name or callee.endswith("." + name)


class AssignView(NodeView):
    action_types = ("assign", "assignment")

    @property
    def left(self) -> Optional[ActionNode]:
        return self.node.child_with_role("left")

    @property
    def right(self) -> Optional[ActionNode]:
        return self.node.child_with_role("right")

    @property
    def target(self) -> Optional["MemberAccessView"]:
        return MemberAccessView.of(self.left)


class MemberAccessView(NodeView):
    action_types = ("memberAccess",)

    @property
    def property_name(self) -> str:
        return self.node.get("property") or ""

    @property
    def object_node(self) -> Optional[ActionNode]:
        return self.node.child_with_role("object")

    @property
    def object_name(self) -> Optional[str]:
        obj = self.object_node
        return obj.get("name") if obj is not None else None


class LiteralView(NodeView):
    action_types = ("literal",)

    @property
    def value(self) -> Any:
        return self.node.get("value")


class IdentifierView(NodeView):
    action_types = ("identifier",)

    @property
    def name(self) -> Optional[str]:
        return self.node.get("name")


class BinaryOpView(NodeView):
    action_types = ("binaryOp", "binary")

    @property
    def operator(self) -> Optional[str]:
        return self.node.get("operator")

    @property
    def left(self) -> Optional[ActionNode]:
        return self.node.child_with_role("left")

    @property
    def right(self) -> Optional[ActionNode]:
        return self.node.child_with_role("right")


class UnaryOpView(NodeView):
    action_types = ("unaryOp", "unary")

    @property
    def operator(self) -> Optional[str]:
        return self.node.get("operator")

    @property
    def operand(self) -> Optional[ActionNode]:
        return self.node.child_with_role("argument") or self.node.first_child


class JsxAttributeView(NodeView):
    action_types = ("jsxAttribute",)

    @property
    def name(self) -> str:
        return self.node.get("name") or ""

    @property
    def event_type(self) -> str:
        return self.node.get("eventType") or self.name[2:].lower()

    @property
    def value_node(self) -> Optional[ActionNode]:
        return self.node.child_with_role("value")


def literal_value(node: Optional[ActionNode]) -> Any:
    """Value of a literal node, else None."""
    view = LiteralView.of(node)
    return view.value if view is not None else None


def is_function(node: Optional[ActionNode]) -> bool:
    return node is not None and node.action_type in FUNCTION_TYPES
