# Copyright 2025 Amazon.com, Inc. or its affiliates.
# SPDX-License-Identifier: Apache-2.0

"""
Editor commands.

Each command returns a plain dict describing what happened, so the same
dispatcher can back the CLI subcommands and an editor extension host.
"""

import os
from typing import Any, Dict, List, Optional

from ui_accessibility_analyzer.batch.workspace import (
    WorkspaceAnalyzer,
    find_tree_files,
    summarize_results,
)
from ui_accessibility_analyzer.integration.diagnostics import DiagnosticCollection
from ui_accessibility_analyzer.integration.settings import EditorSettings
from ui_accessibility_analyzer.utils.logging_helper import setup_logger

logger = setup_logger(__name__)

COMMAND_ANALYZE_FILE = "analyze-file"
COMMAND_ANALYZE_WORKSPACE = "analyze-workspace"
COMMAND_CLEAR_DIAGNOSTICS = "clear-diagnostics"

DISABLED_MESSAGE = "UI accessibility analyzer is disabled"


class CommandDispatcher:
    """Runs editor commands against a workspace."""

    def __init__(
        self,
        settings: EditorSettings,
        workspace_root: str = ".",
        analyzer: Optional[WorkspaceAnalyzer] = None,
        diagnostics: Optional[DiagnosticCollection] = None,
    ):
        self.settings = settings
        self.workspace_root = workspace_root
        self.analyzer = analyzer or WorkspaceAnalyzer(show_progress=False)
        self.diagnostics = diagnostics or DiagnosticCollection(workspace_root, settings.min_severity)

    def execute(self, command: str, *args, **kwargs) -> Dict[str, Any]:
        """Dispatch a command by its name."""
        handlers = {
            COMMAND_ANALYZE_FILE: self.analyze_file,
            COMMAND_ANALYZE_WORKSPACE: self.analyze_workspace,
            COMMAND_CLEAR_DIAGNOSTICS: self.clear_diagnostics,
        }
        if command not in handlers:
            raise ValueError(f"Unknown command: {command}")
        return handlers[command](*args, **kwargs)

    def files_for(self, path: str) -> List[str]:
        """
        Files analyzed for a change to ``path`` under the current analysis mode.

        ``file`` analyzes only the path, ``smart`` adds the tree files beside
        it, and ``project`` covers the whole workspace.
        """
        mode = self.settings.analysis_mode
        limit = self.settings.max_project_files
        excludes = self.settings.exclude_patterns

        if mode == "file":
            return [path]
        if mode == "smart":
            directory = os.path.dirname(path) or "."
            siblings = find_tree_files(directory, excludes, recursive=False)
            others = [p for p in siblings if os.path.abspath(p) != os.path.abspath(path)]
            return [path] + others[: max(0, limit - 1)]
        files = find_tree_files(self.workspace_root, excludes, limit)
        if os.path.abspath(path) not in {os.path.abspath(p) for p in files}:
            files = [path] + files[: max(0, limit - 1)]
        return files

    def _record(self, results: Dict[str, Dict[str, Any]]) -> None:
        for path, result in results.items():
            if "report" in result:
                self.diagnostics.set_from_report(path, result["report"])
            elif "error" in result:
                self.diagnostics.delete(path)
        self.diagnostics.save()

    def _disabled(self) -> Dict[str, Any]:
        logger.info(DISABLED_MESSAGE)
        return {"status": "disabled", "message": DISABLED_MESSAGE, "files": {}}

    def _completed(self, results: Dict[str, Dict[str, Any]]) -> Dict[str, Any]:
        self._record(results)
        summary = summarize_results(results)
        return {
            "status": "ok" if not summary["failed"] else "partial",
            "message": f"Analyzed {summary['analyzed']} of {summary['files']} files, found {summary['issues']} issues",
            "files": results,
            "summary": summary,
        }

    def analyze_file(self, path: str) -> Dict[str, Any]:
        if not self.settings.enable:
            return self._disabled()
        files = self.files_for(path)
        logger.debug(f"analyze-file {path} ({self.settings.analysis_mode} mode): {len(files)} files")
        return self._completed(self.analyzer.analyze_files(files))

    def analyze_workspace(self, root: Optional[str] = None) -> Dict[str, Any]:
        if not self.settings.enable:
            return self._disabled()
        results = self.analyzer.analyze_workspace(
            root or self.workspace_root,
            self.settings.exclude_patterns,
            self.settings.max_project_files,
        )
        return self._completed(results)

    def clear_diagnostics(self, path: Optional[str] = None) -> Dict[str, Any]:
        if path:
            removed = self.diagnostics.delete(path)
            message = f"Cleared diagnostics for {path}" if removed else f"No diagnostics for {path}"
        else:
            self.diagnostics.clear()
            message = "Cleared all diagnostics"
        self.diagnostics.save()
        return {"status": "ok", "message": message, "files": {}}
