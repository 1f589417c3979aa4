# Copyright 2025 Amazon.com, Inc. or its affiliates.
# SPDX-License-Identifier: Apache-2.0

"""Parallel analysis of the action tree files in a workspace."""

from ui_accessibility_analyzer.batch.workspace import WorkspaceAnalyzer, find_tree_files

__all__ = ["WorkspaceAnalyzer", "find_tree_files"]
