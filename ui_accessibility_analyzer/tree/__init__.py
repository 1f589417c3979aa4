# Copyright 2025 Amazon.com, Inc. or its affiliates.
# SPDX-License-Identifier: Apache-2.0

"""
Intermediate action tree model.

This module provides the node and tree types produced by the source front end
and consumed read-only by every analyzer.
"""

from ui_accessibility_analyzer.tree.action_tree import ActionNode, ActionTree

__all__ = ["ActionNode", "ActionTree"]
