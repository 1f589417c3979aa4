# Copyright 2025 Amazon.com, Inc. or its affiliates.
# SPDX-License-Identifier: Apache-2.0

"""
Analyze-on-type and analyze-on-save scheduling.
"""

import threading
from concurrent.futures import Future
from typing import Dict, List, Optional

from ui_accessibility_analyzer.batch.workspace import WorkspaceAnalyzer
from ui_accessibility_analyzer.integration.diagnostics import DiagnosticCollection
from ui_accessibility_analyzer.integration.settings import EditorSettings
from ui_accessibility_analyzer.utils.logging_helper import setup_logger

logger = setup_logger(__name__)


class AnalyzeOnTypeScheduler:
    """
    Debounces change notifications per file.

    Each change restarts the file's timer. When a timer fires the file is
    submitted to the WorkspaceAnalyzer, which cancels any analysis of the same
    file that is still running.
    """

    def __init__(
        self,
        settings: EditorSettings,
        analyzer: WorkspaceAnalyzer,
        diagnostics: Optional[DiagnosticCollection] = None,
    ):
        self.settings = settings
        self.analyzer = analyzer
        self.diagnostics = diagnostics
        self._lock = threading.Lock()
        self._timers: Dict[str, threading.Timer] = {}
        self._futures: Dict[str, Future] = {}

    def _on_result(self, path: str, result: Dict) -> None:
        if self.diagnostics is not None and "report" in result:
            self.diagnostics.set_from_report(path, result["report"])

    def _fire(self, path: str) -> None:
        with self._lock:
            self._timers.pop(path, None)
        self._submit(path)

    def _submit(self, path: str) -> Future:
        future = self.analyzer.submit(path, callback=self._on_result)
        with self._lock:
            self._futures[path] = future
        return future

    def notify_changed(self, path: str) -> bool:
        """
        Record an edit to ``path``.

        Returns:
            True if an analysis was scheduled
        """
        if not self.settings.enable or not self.settings.analyze_on_type:
            return False

        delay = self.settings.analyze_on_type_delay / 1000.0
        timer = threading.Timer(delay, self._fire, args=(path,))
        timer.daemon = True
        with self._lock:
            previous = self._timers.pop(path, None)
            if previous is not None:
                previous.cancel()
            self._timers[path] = timer
        timer.start()
        logger.debug(f"Scheduled analysis of {path} in {self.settings.analyze_on_type_delay}ms")
        return True

    def notify_saved(self, path: str) -> Optional[Future]:
        """Analyze ``path`` at once if analyze-on-save is on."""
        if not self.settings.enable or not self.settings.analyze_on_save:
            return None
        with self._lock:
            pending = self._timers.pop(path, None)
        if pending is not None:
            pending.cancel()
        return self._submit(path)

    def pending(self) -> List[str]:
        with self._lock:
            return sorted(self._timers)

    def last_future(self, path: str) -> Optional[Future]:
        with self._lock:
            return self._futures.get(path)

    def flush(self) -> List[Future]:
        """Fire every pending timer now."""
        with self._lock:
            timers = dict(self._timers)
            self._timers.clear()
        futures = []
        for path, timer in timers.items():
            timer.cancel()
            futures.append(self._submit(path))
        return futures

    def cancel_all(self) -> None:
        """Drop pending timers and cancel in-flight analyses."""
        with self._lock:
            timers = list(self._timers.values())
            self._timers.clear()
        for timer in timers:
            timer.cancel()
        self.analyzer.cancel_all()
