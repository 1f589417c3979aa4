# Copyright 2025 Amazon.com, Inc. or its affiliates.
# SPDX-License-Identifier: Apache-2.0

"""
Workspace analysis.

Discovers action tree files under a workspace root and analyzes them on a
bounded thread pool. Each submission gets its own cancellation token, and a
newer submission for the same file cancels the one still in flight.
"""

import fnmatch
import os
import threading
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import Any, Callable, Dict, Iterable, List, Optional

from tqdm import tqdm

from ui_accessibility_analyzer.api import analyze_file
from ui_accessibility_analyzer.audit.base_analyzer import CancellationToken
from ui_accessibility_analyzer.utils.config import DEFAULT_CONFIG_FILES, config_manager
from ui_accessibility_analyzer.utils.logging_helper import (
    AnalysisCancelledError,
    UIAccessibilityError,
    setup_logger,
)

logger = setup_logger(__name__)

TREE_FILE_PATTERN = "*.json"
SKIPPED_DIRECTORIES = ("node_modules", "dist", "build")

ResultCallback = Callable[[str, Dict[str, Any]], None]


def _excluded(name: str, exclude_patterns: Iterable[str]) -> bool:
    return any(fnmatch.fnmatch(name, pattern) for pattern in exclude_patterns)


def find_tree_files(
    root: str,
    exclude_patterns: Optional[Iterable[str]] = None,
    max_files: Optional[int] = None,
    recursive: bool = True,
) -> List[str]:
    """
    Find action tree files under a directory.

    Args:
        root: Directory to search
        exclude_patterns: Glob patterns matched against file and directory names
        max_files: Cap on the number of files returned
        recursive: Whether to descend into subdirectories

    Returns:
        Sorted list of file paths
    """
    exclude_patterns = list(exclude_patterns or [])
    found = []

    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = [
            d for d in dirnames
            if not d.startswith(".") and d not in SKIPPED_DIRECTORIES and not _excluded(d, exclude_patterns)
        ]
        for filename in filenames:
            if filename.startswith(".") or filename in DEFAULT_CONFIG_FILES:
                continue
            if fnmatch.fnmatch(filename, TREE_FILE_PATTERN) and not _excluded(filename, exclude_patterns):
                found.append(os.path.join(dirpath, filename))
        if not recursive:
            break

    found.sort()
    if max_files is not None and len(found) > max_files:
        logger.warning(f"Found {len(found)} action tree files under {root}, analyzing only the first {max_files}")
        found = found[:max_files]
    return found


class WorkspaceAnalyzer:
    """
    Analyzes many action tree files in parallel.

    Use as a context manager, or call ``shutdown`` when done.
    """

    def __init__(
        self,
        workers: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None,
        show_progress: bool = True,
    ):
        """
        Initialize the workspace analyzer.

        Args:
            workers: Worker thread count (defaults to the ``batch.workers`` setting)
            options: Analysis options passed to every file analysis
            show_progress: Whether ``analyze_files`` shows a progress bar
        """
        if workers is None:
            workers = config_manager.get_config(section="batch").get("workers", 4)
        self.workers = max(1, int(workers))
        self.options = dict(options or {})
        self.show_progress = show_progress
        self._executor = ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="a11y")
        self._lock = threading.Lock()
        self._in_flight: Dict[str, CancellationToken] = {}

    def __enter__(self) -> "WorkspaceAnalyzer":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.shutdown()

    def submit(self, path: str, callback: Optional[ResultCallback] = None) -> Future:
        """
        Queue one file for analysis, superseding any in-flight analysis of it.

        Args:
            path: Action tree file
            callback: Called in the worker thread with ``(path, result)``
                before the future completes

        Returns:
            Future resolving to ``{"report": Report}``, ``{"error": str}``
            or ``{"cancelled": True}``
        """
        key = os.path.abspath(path)
        token = CancellationToken()
        with self._lock:
            previous = self._in_flight.get(key)
            if previous is not None:
                logger.debug(f"Superseding in-flight analysis of {path}")
                previous.cancel()
            self._in_flight[key] = token
        return self._executor.submit(self._analyze_one, path, key, token, callback)

    def _analyze_one(
        self, path: str, key: str, token: CancellationToken, callback: Optional[ResultCallback]
    ) -> Dict[str, Any]:
        try:
            token.raise_if_cancelled()
            result = {"report": analyze_file(path, options=self.options, cancel_token=token)}
        except AnalysisCancelledError:
            logger.debug(f"Analysis of {path} was cancelled")
            result = {"cancelled": True}
        except (FileNotFoundError, UIAccessibilityError) as e:
            logger.error(f"Failed to analyze {path}: {e}")
            result = {"error": str(e)}
        finally:
            with self._lock:
                if self._in_flight.get(key) is token:
                    del self._in_flight[key]

        if callback is not None:
            callback(path, result)
        return result

    def analyze_files(self, paths: Iterable[str]) -> Dict[str, Dict[str, Any]]:
        """
        Analyze files in parallel.

        Args:
            paths: Action tree files

        Returns:
            Mapping of path to its result, in input order
        """
        paths = list(paths)
        future_to_path = {self.submit(path): path for path in paths}
        results: Dict[str, Dict[str, Any]] = {}

        iterator = tqdm(
            as_completed(future_to_path),
            total=len(future_to_path),
            desc="Analyzing action trees",
            unit="file",
            disable=not self.show_progress,
        )
        for future in iterator:
            results[future_to_path[future]] = future.result()

        return {path: results[path] for path in paths if path in results}

    def analyze_workspace(
        self,
        root: str,
        exclude_patterns: Optional[Iterable[str]] = None,
        max_files: Optional[int] = None,
    ) -> Dict[str, Dict[str, Any]]:
        """Find and analyze every action tree file under ``root``."""
        paths = find_tree_files(root, exclude_patterns, max_files)
        logger.info(f"Analyzing {len(paths)} action tree files with {self.workers} workers")
        return self.analyze_files(paths)

    def token_for(self, path: str) -> Optional[CancellationToken]:
        with self._lock:
            return self._in_flight.get(os.path.abspath(path))

    def in_flight(self) -> List[str]:
        with self._lock:
            return list(self._in_flight)

    def cancel(self, path: str) -> bool:
        """Cancel the in-flight analysis of one file, if any."""
        with self._lock:
            token = self._in_flight.get(os.path.abspath(path))
        if token is None:
            return False
        token.cancel()
        return True

    def cancel_all(self) -> int:
        """Cancel every in-flight analysis and return how many were cancelled."""
        with self._lock:
            tokens = list(self._in_flight.values())
        for token in tokens:
            token.cancel()
        if tokens:
            logger.debug(f"Cancelled {len(tokens)} in-flight analyses")
        return len(tokens)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)


def summarize_results(results: Dict[str, Dict[str, Any]]) -> Dict[str, Any]:
    """Counts over a workspace run: analyzed, failed, cancelled, issues and errors."""
    summary = {"files": len(results), "analyzed": 0, "failed": 0, "cancelled": 0, "issues": 0, "errors": 0}
    for result in results.values():
        if "report" in result:
            summary["analyzed"] += 1
            summary["issues"] += len(result["report"].issues)
            summary["errors"] += len(result["report"].get_errors())
        elif result.get("cancelled"):
            summary["cancelled"] += 1
        else:
            summary["failed"] += 1
    return summary
