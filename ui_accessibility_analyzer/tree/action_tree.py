# Copyright 2025 Amazon.com, Inc. or its affiliates.
# SPDX-License-Identifier: Apache-2.0

"""
Intermediate action tree consumed by the analyzers.

An external front end turns UI source code into an ActionTree: a tree of
tagged ActionNodes whose ``actionType`` names the construct (call, assign,
memberAccess, literal, ...) and whose string attributes carry the details
(callee, property, value, line, ...). Each child may carry a ``role``
attribute (callee, argument, left, right, object, value, test) describing
its position relative to its parent.
"""

import json
import uuid
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional, Tuple

from ui_accessibility_analyzer.utils.logging_helper import setup_logger, TreeLoadError

logger = setup_logger(__name__)

TREE_FORMAT_VERSION = "1.0.0"


class ActionNode:
    """A single node of the action tree."""

    def __init__(
        self,
        action_type: str,
        attributes: Optional[Dict[str, Any]] = None,
        children: Optional[List["ActionNode"]] = None,
        node_id: Optional[str] = None,
        sequence_number: Optional[int] = None,
    ):
        self.id = node_id or f"action-{uuid.uuid4().hex[:12]}"
        self.action_type = action_type
        self.attributes = dict(attributes or {})
        self.sequence_number = sequence_number or 0
        self.children: List[ActionNode] = []
        for child in children or []:
            self.add_child(child, child.sequence_number or None)

    def __repr__(self) -> str:
        return f"ActionNode({self.action_type!r}, id={self.id!r})"

    def add_child(self, child: "ActionNode", sequence_number: Optional[int] = None) -> "ActionNode":
        """
        Append a child, keeping children ordered by sequence number.

        A child without a number goes after the current last child, so
        children loaded in file order keep that order.
        """
        if sequence_number is None:
            sequence_number = (len(self.children) + 1) * 10
            if self.children:
                sequence_number = max(sequence_number, self.children[-1].sequence_number + 10)
            child.sequence_number = sequence_number
            self.children.append(child)
            return child
        child.sequence_number = sequence_number
        self.children.append(child)
        # sort is stable, so equal numbers keep insertion order
        self.children.sort(key=lambda c: c.sequence_number)
        return child

    def get(self, name: str, default: Any = None) -> Any:
        return self.attributes.get(name, default)

    @property
    def role(self) -> Optional[str]:
        return self.attributes.get("role")

    def child_with_role(self, role: str) -> Optional["ActionNode"]:
        """Return the first child tagged with the given role."""
        for child in self.children:
            if child.role == role:
                return child
        return None

    def children_with_role(self, role: str) -> List["ActionNode"]:
        return [child for child in self.children if child.role == role]

    @property
    def first_child(self) -> Optional["ActionNode"]:
        return self.children[0] if self.children else None

    def walk(self) -> Iterator["ActionNode"]:
        """Pre-order traversal including this node."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def find_all(self, action_type: str) -> List["ActionNode"]:
        return [node for node in self.walk() if node.action_type == action_type]

    def _shallow_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "actionType": self.action_type,
            "attributes": dict(self.attributes),
            "sequenceNumber": self.sequence_number,
            "children": [],
        }

    def to_dict(self) -> Dict[str, Any]:
        root = self._shallow_dict()
        stack = [(self, root)]
        while stack:
            node, data = stack.pop()
            for child in node.children:
                child_data = child._shallow_dict()
                data["children"].append(child_data)
                stack.append((child, child_data))
        return root

    @classmethod
    def _from_mapping(cls, data: Any) -> "ActionNode":
        if not isinstance(data, dict):
            raise TreeLoadError(f"Action node must be an object, got {type(data).__name__}")
        action_type = data.get("actionType")
        if not action_type:
            raise TreeLoadError(f"Action node {data.get('id', '?')} has no actionType")

        attributes = data.get("attributes") or {}
        if not isinstance(attributes, dict):
            raise TreeLoadError(f"Attributes of action {data.get('id', '?')} must be an object")

        node = cls(action_type, attributes, node_id=data.get("id"))
        if data.get("sequenceNumber") is not None:
            node.sequence_number = data["sequenceNumber"]
        return node

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ActionNode":
        """
        Build a node (and its subtree) from a plain mapping.

        Raises:
            TreeLoadError: If a node lacks an actionType or is not a mapping
        """
        root = cls._from_mapping(data)
        stack = [(data, root)]
        while stack:
            node_data, node = stack.pop()
            children = node_data.get("children") or []
            if not isinstance(children, list):
                raise TreeLoadError(f"Children of action {node.id} must be a list")
            for child_data in children:
                child = cls._from_mapping(child_data)
                node.add_child(child, child_data.get("sequenceNumber"))
                stack.append((child_data, child))
        return root


class ActionTree:
    """A root ActionNode plus document metadata."""

    def __init__(
        self,
        root: Optional[ActionNode] = None,
        source: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        now = datetime.now().isoformat()
        self.root = root
        self.metadata = {
            "created": now,
            "modified": now,
            "version": TREE_FORMAT_VERSION,
            "source": source,
        }
        if metadata:
            self.metadata.update(metadata)
        if source is not None:
            self.metadata["source"] = source
        self.action_types: List[str] = []
        self.attribute_types: Dict[str, Any] = {}
        self.data_types: List[str] = []

    @property
    def source(self) -> Optional[str]:
        return self.metadata.get("source")

    def walk(self) -> Iterator[ActionNode]:
        if self.root is not None:
            yield from self.root.walk()

    def validate(self) -> Tuple[bool, List[str]]:
        """
        Check structural soundness of the tree.

        Returns:
            Tuple of (valid, errors)
        """
        errors: List[str] = []
        if self.root is None:
            errors.append("Tree has no root action")
            return False, errors

        seen_nodes = set()
        seen_ids = set()
        stack = [self.root]
        while stack:
            node = stack.pop()
            if id(node) in seen_nodes or node.id in seen_ids:
                errors.append(f"Circular reference detected at action {node.id}")
                continue
            seen_nodes.add(id(node))
            seen_ids.add(node.id)
            if self.action_types and node.action_type not in self.action_types:
                errors.append(f"Unknown action type: {node.action_type}")
            stack.extend(reversed(node.children))

        return not errors, errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            "metadata": dict(self.metadata),
            "actionTypes": list(self.action_types),
            "attributeTypes": dict(self.attribute_types),
            "dataTypes": list(self.data_types),
            "root": self.root.to_dict() if self.root is not None else None,
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], source: Optional[str] = None) -> "ActionTree":
        """
        Build a tree from either a full tree document or a bare root node.

        Args:
            data: Decoded JSON document
            source: Source identifier, used when the document carries none

        Returns:
            The ActionTree
        """
        if not isinstance(data, dict):
            raise TreeLoadError("Action tree document must be a JSON object")

        # A bare node document has an actionType at the top level
        if "actionType" in data:
            return cls(ActionNode.from_dict(data), source=source)

        metadata = data.get("metadata") or {}
        tree = cls(source=metadata.get("source") or source, metadata=metadata)
        tree.action_types = list(data.get("actionTypes") or [])
        tree.attribute_types = dict(data.get("attributeTypes") or {})
        tree.data_types = list(data.get("dataTypes") or [])
        if data.get("root") is not None:
            tree.root = ActionNode.from_dict(data["root"])
        return tree

    @classmethod
    def from_json(cls, text: str, source: Optional[str] = None) -> "ActionTree":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise TreeLoadError(f"Invalid action tree JSON: {e}") from e
        except RecursionError as e:
            raise TreeLoadError("Action tree JSON is nested too deeply to decode") from e
        return cls.from_dict(data, source=source)

    @classmethod
    def load(cls, path: str) -> "ActionTree":
        """
        Read an action tree JSON file.

        Raises:
            TreeLoadError: If the file is missing, unreadable or malformed
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                text = f.read()
        except OSError as e:
            raise TreeLoadError(f"Cannot read action tree {path}: {e}", path=path) from e

        logger.debug(f"Loaded action tree file: {path}")
        try:
            return cls.from_json(text, source=path)
        except TreeLoadError as e:
            e.path = e.path or path
            raise
