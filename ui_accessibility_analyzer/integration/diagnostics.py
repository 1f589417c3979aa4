# Copyright 2025 Amazon.com, Inc. or its affiliates.
# SPDX-License-Identifier: Apache-2.0

"""
Per-file diagnostics store.

Reports are converted into editor diagnostics, filtered by a minimum
severity, and persisted under ``.a11y/diagnostics.json`` in the workspace.
"""

import json
import os
import threading
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ui_accessibility_analyzer.audit.standards import SEVERITY_ORDER, severity_rank
from ui_accessibility_analyzer.utils.logging_helper import UIAccessibilityError, setup_logger
from ui_accessibility_analyzer.utils.report_models import Report

logger = setup_logger(__name__)

DIAGNOSTICS_DIR = ".a11y"
DIAGNOSTICS_FILE = "diagnostics.json"


class Diagnostic(BaseModel):
    """One editor diagnostic derived from a report issue."""

    model_config = ConfigDict(frozen=True)

    severity: str
    message: str
    line: int = 0
    column: int = 0
    code: Optional[str] = None
    source: Optional[str] = None
    wcag: List[str] = Field(default_factory=list)


def diagnostics_from_report(report: Report, min_severity: str = "info") -> List[Diagnostic]:
    """Convert a report's issues to diagnostics at or above ``min_severity``."""
    limit = severity_rank(min_severity) if min_severity in SEVERITY_ORDER else len(SEVERITY_ORDER)
    diagnostics = []
    for issue in report.issues:
        if severity_rank(issue.severity) > limit:
            continue
        location = issue.location
        diagnostics.append(
            Diagnostic(
                severity=issue.severity,
                message=issue.message,
                line=(location.line or 0) if location else 0,
                column=(location.column or 0) if location else 0,
                code=issue.type,
                source=issue.category,
                wcag=list(issue.wcag),
            )
        )
    return diagnostics


class DiagnosticCollection:
    """Thread-safe mapping of file path to its diagnostics."""

    def __init__(self, workspace_root: str = ".", min_severity: str = "info"):
        self.workspace_root = workspace_root
        self.min_severity = min_severity
        self._lock = threading.Lock()
        self._entries: Dict[str, List[Diagnostic]] = {}

    @property
    def storage_path(self) -> str:
        return os.path.join(self.workspace_root, DIAGNOSTICS_DIR, DIAGNOSTICS_FILE)

    def _key(self, path: str) -> str:
        return os.path.relpath(os.path.abspath(path), os.path.abspath(self.workspace_root))

    def set(self, path: str, diagnostics: List[Diagnostic]) -> None:
        with self._lock:
            self._entries[self._key(path)] = list(diagnostics)

    def set_from_report(self, path: str, report: Report) -> List[Diagnostic]:
        diagnostics = diagnostics_from_report(report, self.min_severity)
        self.set(path, diagnostics)
        return diagnostics

    def get(self, path: str) -> List[Diagnostic]:
        with self._lock:
            return list(self._entries.get(self._key(path), []))

    def delete(self, path: str) -> bool:
        with self._lock:
            return self._entries.pop(self._key(path), None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def files(self) -> List[str]:
        with self._lock:
            return sorted(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return sum(len(items) for items in self._entries.values())

    def save(self) -> str:
        """
        Persist the collection to the workspace.

        Returns:
            The path written

        Raises:
            UIAccessibilityError: If the file cannot be written
        """
        with self._lock:
            data = {
                path: [diagnostic.model_dump() for diagnostic in items]
                for path, items in sorted(self._entries.items())
            }
        path = self.storage_path
        try:
            os.makedirs(os.path.dirname(path), exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
        except OSError as e:
            raise UIAccessibilityError(f"Could not save diagnostics to {path}: {e}") from e
        logger.debug(f"Saved diagnostics for {len(data)} files to {path}")
        return path

    def load(self) -> int:
        """
        Replace the collection with the persisted diagnostics, if any.

        Returns:
            Number of files loaded
        """
        path = self.storage_path
        if not os.path.isfile(path):
            return 0
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
            entries = {
                file_path: [Diagnostic.model_validate(item) for item in items]
                for file_path, items in data.items()
            }
        except (OSError, json.JSONDecodeError, ValidationError, AttributeError) as e:
            raise UIAccessibilityError(f"Could not load diagnostics from {path}: {e}") from e
        with self._lock:
            self._entries = entries
        return len(entries)
