# Copyright 2025 Amazon.com, Inc. or its affiliates.
# SPDX-License-Identifier: Apache-2.0

"""
Accessibility reporter.

Runs every analyzer over an action tree in a fixed order, merges their issues
into one WCAG-mapped list, and derives scores, compliance status,
recommendations and statistics into a Report.
"""

import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from ui_accessibility_analyzer.audit.analyzers.aria_analyzer import ARIAAnalyzer, empty_aria_results
from ui_accessibility_analyzer.audit.analyzers.context_change_analyzer import (
    ContextChangeAnalyzer,
    empty_context_results,
)
from ui_accessibility_analyzer.audit.analyzers.event_analyzer import EventAnalyzer, empty_event_results
from ui_accessibility_analyzer.audit.analyzers.focus_analyzer import FocusAnalyzer, empty_focus_results
from ui_accessibility_analyzer.audit.analyzers.keyboard_analyzer import (
    ENTER_KEYS,
    ESCAPE_KEYS,
    SPACE_KEYS,
    KeyboardAnalyzer,
    empty_keyboard_results,
)
from ui_accessibility_analyzer.audit.analyzers.semantic_analyzer import SemanticAnalyzer, empty_semantic_results
from ui_accessibility_analyzer.audit.analyzers.timing_analyzer import TimingAnalyzer, empty_timing_results
from ui_accessibility_analyzer.audit.base_analyzer import CancellationToken
from ui_accessibility_analyzer.audit.standards import (
    ISSUE_CATEGORIES,
    RECOMMENDATION_TITLES,
    SEVERITY_LEVELS,
    SEVERITY_ORDER,
    WCAG_CRITERIA,
    default_suggestion,
    wcag_for_issue,
)
from ui_accessibility_analyzer.audit.widget_validator import WidgetPatternValidator, empty_widget_results
from ui_accessibility_analyzer.tree.action_tree import ActionTree
from ui_accessibility_analyzer.utils.logging_helper import (
    AnalysisCancelledError,
    log_exception,
    setup_logger,
)
from ui_accessibility_analyzer.utils.report_models import Report

logger = setup_logger(__name__)

UNKNOWN_SCORE = 50
SCORE_WEIGHTS = {"keyboard": 0.30, "aria": 0.25, "focus": 0.25, "widgets": 0.20}
GRADE_THRESHOLDS = ((90, "A"), (80, "B"), (70, "C"), (60, "D"))
MAX_PRIORITY_RECOMMENDATIONS = 5

# analyzerResults key -> (issue category, analyzer name)
ISSUE_SOURCES = (
    ("events", "events", "EventAnalyzer"),
    ("focus", "focus", "FocusAnalyzer"),
    ("aria", "aria", "ARIAAnalyzer"),
    ("keyboard", "keyboard", "KeyboardAnalyzer"),
    ("contextChange", "context", "ContextChangeAnalyzer"),
    ("timing", "timing", "TimingAnalyzer"),
    ("semantic", "semantic", "SemanticAnalyzer"),
)

# Fields every collected issue already carries under its own name
_COLLECTED_FIELDS = (
    "type", "severity", "message", "elementRef", "suggestion", "wcag", "location", "actionId",
)


def calculate_grade(score: int) -> str:
    for threshold, grade in GRADE_THRESHOLDS:
        if score >= threshold:
            return grade
    return "F"


def clamp_score(score: float) -> int:
    return int(max(0, min(100, round(score))))


def overall_score(scores: Dict[str, int]) -> int:
    return int(round(sum(scores[category] * weight for category, weight in SCORE_WEIGHTS.items())))


def _deduct(issues: List[Dict[str, Any]], category: str) -> int:
    return sum(
        SEVERITY_LEVELS.get(issue["severity"], {}).get("weight", 0)
        for issue in issues
        if issue["category"] == category
    )


def _has_key(keyboard: Dict[str, Any], keys) -> bool:
    return any(
        not isinstance(check.get("key"), bool) and check.get("key") in keys
        for check in keyboard.get("keyChecks", [])
    )


class AccessibilityReporter:
    """
    Orchestrates all analyzers and compiles a Report.

    Analyzer instances are created per ``analyze`` call, so one reporter may
    be shared between threads.
    """

    default_options = {
        "includeEvents": True,
        "includeFocus": True,
        "includeAria": True,
        "includeKeyboard": True,
        "includeContext": True,
        "includeTiming": True,
        "includeSemantic": True,
        "includeWidgets": True,
        "strictMode": False,
        "significantDelay": 5000,
    }

    def __init__(self, options: Optional[Dict[str, Any]] = None):
        self.options = dict(self.default_options)
        if options:
            self.options.update(options)

    def analyze(self, tree: Optional[ActionTree], cancel_token: Optional[CancellationToken] = None) -> Report:
        """
        Analyze an action tree and generate a report.

        Args:
            tree: The tree to analyze; a missing tree or root yields an empty report
            cancel_token: Optional token checked between stages and nodes

        Returns:
            Report for the tree

        Raises:
            AnalysisCancelledError: If the token is cancelled mid-analysis
        """
        start = time.perf_counter()
        source = tree.source if tree is not None else None

        if tree is None or tree.root is None:
            logger.debug("No tree root to analyze, returning empty report")
            return self.compile_report({}, None, 0, source)

        options = self.options
        results: Dict[str, Any] = {}

        def stage(key: str, enabled: bool, run: Callable[[], Dict[str, Any]], empty: Callable[[], Dict]) -> None:
            if not enabled:
                return
            if cancel_token is not None:
                cancel_token.raise_if_cancelled()
            results[key] = self._run_stage(key, run, empty)

        stage("events", options["includeEvents"], lambda: EventAnalyzer().analyze(tree, cancel_token),
              empty_event_results)
        stage("focus", options["includeFocus"], lambda: FocusAnalyzer().analyze(tree, cancel_token),
              empty_focus_results)
        stage("aria", options["includeAria"], lambda: ARIAAnalyzer().analyze(tree, cancel_token),
              empty_aria_results)
        stage(
            "keyboard",
            options["includeKeyboard"],
            lambda: KeyboardAnalyzer().analyze(tree, results.get("events"), cancel_token),
            empty_keyboard_results,
        )
        stage(
            "contextChange",
            options["includeContext"],
            lambda: ContextChangeAnalyzer().analyze(tree, results.get("events"), cancel_token),
            empty_context_results,
        )
        stage(
            "timing",
            options["includeTiming"],
            lambda: TimingAnalyzer({"significantDelay": options["significantDelay"]}).analyze(tree, cancel_token),
            empty_timing_results,
        )
        stage(
            "semantic",
            options["includeSemantic"],
            lambda: SemanticAnalyzer().analyze(tree, results.get("events"), cancel_token),
            empty_semantic_results,
        )

        widget_results = None
        if options["includeWidgets"]:
            if cancel_token is not None:
                cancel_token.raise_if_cancelled()
            widget_results = self._run_stage(
                "widgets",
                lambda: WidgetPatternValidator({"strictMode": options["strictMode"]}).validate(results),
                empty_widget_results,
            )

        analysis_time = int(round((time.perf_counter() - start) * 1000))
        return self.compile_report(results, widget_results, analysis_time, source)

    @staticmethod
    def _run_stage(key: str, run: Callable[[], Dict[str, Any]], empty: Callable[[], Dict]) -> Dict[str, Any]:
        try:
            logger.debug(f"Running {key} analysis")
            return run()
        except AnalysisCancelledError:
            raise
        except Exception as e:
            log_exception(logger, e, f"{key} analysis failed, continuing with empty results")
            return empty()

    def compile_report(
        self,
        analyzer_results: Dict[str, Any],
        widget_results: Optional[Dict[str, Any]],
        analysis_time: int,
        source: Optional[str] = None,
    ) -> Report:
        """Build the Report from raw analyzer bundles."""
        issues = self.collect_issues(analyzer_results, widget_results)
        compliance = self.map_issues_to_wcag(issues)
        scores = self.calculate_scores(analyzer_results, widget_results, issues)

        return Report(
            timestamp=datetime.now(timezone.utc).isoformat(),
            analysis_time=analysis_time,
            source=source,
            scores=scores,
            grade=calculate_grade(scores["overall"]),
            issues=issues,
            issues_by_category=self.group_by_category(issues),
            issues_by_severity=self.group_by_severity(issues),
            wcag_compliance=compliance,
            recommendations=self.generate_recommendations(issues, analyzer_results),
            statistics=self.compile_statistics(analyzer_results, widget_results),
            analyzer_results=analyzer_results,
            widget_validation=widget_results,
        )

    @staticmethod
    def collect_issues(
        analyzer_results: Dict[str, Any], widget_results: Optional[Dict[str, Any]]
    ) -> List[Dict[str, Any]]:
        """Merge analyzer issues into one list with category-prefixed ids."""
        issues: List[Dict[str, Any]] = []

        def add(category: str, source: str, raw: Dict[str, Any]) -> None:
            issue = {
                "id": f"{category}-{len(issues)}",
                "type": raw.get("type"),
                "category": category,
                "severity": raw.get("severity", "info"),
                "message": raw.get("message", ""),
                "elementRef": raw.get("elementRef"),
                "suggestion": raw.get("suggestion") or default_suggestion(category),
                "wcag": wcag_for_issue(category, raw),
                "source": source,
                "location": raw.get("location"),
                "actionId": raw.get("actionId"),
            }
            for key, value in raw.items():
                if key not in _COLLECTED_FIELDS and key not in issue:
                    issue[key] = value
            issues.append(issue)

        for key, category, source in ISSUE_SOURCES:
            for raw in (analyzer_results.get(key) or {}).get("issues", []):
                add(category, source, raw)

        for raw in (widget_results or {}).get("issues", []):
            add("widget", "WidgetPatternValidator", raw)

        return issues

    @staticmethod
    def map_issues_to_wcag(issues: List[Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
        """
        Compliance status of every tracked criterion.

        A criterion fails if any mapped issue is an error, is a warning if any
        mapped issue is a warning, and passes otherwise.
        """
        compliance = {
            criterion_id: dict(info, id=criterion_id, status="pass", issues=[])
            for criterion_id, info in WCAG_CRITERIA.items()
        }
        for issue in issues:
            for criterion_id in issue["wcag"]:
                entry = compliance.get(criterion_id)
                if entry is None:
                    continue
                entry["issues"].append(issue["id"])
                if issue["severity"] == "error":
                    entry["status"] = "fail"
                elif issue["severity"] == "warning" and entry["status"] != "fail":
                    entry["status"] = "warning"
        return compliance

    def calculate_scores(
        self,
        analyzer_results: Dict[str, Any],
        widget_results: Optional[Dict[str, Any]],
        issues: List[Dict[str, Any]],
    ) -> Dict[str, int]:
        options = self.options
        scores = {
            "keyboard": self._keyboard_score(analyzer_results.get("keyboard"), issues)
            if options["includeKeyboard"] else UNKNOWN_SCORE,
            "aria": self._aria_score(analyzer_results.get("aria"), issues)
            if options["includeAria"] else UNKNOWN_SCORE,
            "focus": self._focus_score(analyzer_results.get("focus"), issues)
            if options["includeFocus"] else UNKNOWN_SCORE,
            "widgets": self._widget_score(widget_results)
            if options["includeWidgets"] else UNKNOWN_SCORE,
        }
        scores["overall"] = overall_score(scores)
        return scores

    @staticmethod
    def _keyboard_score(keyboard: Optional[Dict[str, Any]], issues: List[Dict[str, Any]]) -> int:
        if keyboard is None:
            return 100
        score = 100 - _deduct(issues, "keyboard")
        if keyboard.get("navigationPatterns"):
            score += 5
        if _has_key(keyboard, ESCAPE_KEYS):
            score += 3
        if _has_key(keyboard, ENTER_KEYS + SPACE_KEYS):
            score += 3
        score -= 5 * keyboard.get("stats", {}).get("mouseOnlyElements", 0)
        return clamp_score(score)

    @staticmethod
    def _aria_score(aria: Optional[Dict[str, Any]], issues: List[Dict[str, Any]]) -> int:
        if aria is None:
            return 100
        score = 100 - _deduct(issues, "aria")
        if aria.get("ariaAttributes"):
            score += 5
        if any(r.get("role") and r.get("isValid") for r in aria.get("roleChanges", [])):
            score += 3
        if aria.get("labelPatterns"):
            score += 5
        if aria.get("liveRegions"):
            score += 3
        return clamp_score(score)

    @staticmethod
    def _focus_score(focus: Optional[Dict[str, Any]], issues: List[Dict[str, Any]]) -> int:
        if focus is None:
            return 100
        score = 100 - _deduct(issues, "focus")
        if focus.get("focusOperations"):
            score += 5
        if any(t.get("type") == "keyboard-focus" for t in focus.get("patterns", {}).get("traps", [])):
            score += 5
        if focus.get("activeElementAccess"):
            score += 3
        return clamp_score(score)

    @staticmethod
    def _widget_score(widget_results: Optional[Dict[str, Any]]) -> int:
        if not widget_results or not widget_results.get("detectedPatterns"):
            return 100
        summary = widget_results["summary"]
        total = summary["totalChecks"]
        if total == 0:
            return 100
        score = round(summary["passed"] / total * 100)
        score -= 5 * summary["failed"] + 2 * summary["warnings"]
        return clamp_score(score)

    @staticmethod
    def group_by_category(issues: List[Dict[str, Any]]) -> Dict[str, int]:
        counts = {category: 0 for category in ISSUE_CATEGORIES}
        for issue in issues:
            counts[issue["category"]] = counts.get(issue["category"], 0) + 1
        return counts

    @staticmethod
    def group_by_severity(issues: List[Dict[str, Any]]) -> Dict[str, int]:
        counts = {severity: 0 for severity in SEVERITY_ORDER}
        for issue in issues:
            counts[issue["severity"]] = counts.get(issue["severity"], 0) + 1
        return counts

    @staticmethod
    def generate_recommendations(
        issues: List[Dict[str, Any]], analyzer_results: Dict[str, Any]
    ) -> List[Dict[str, Any]]:
        recommendations = []

        def from_issue(issue: Dict[str, Any], priority: str, impact: str) -> Dict[str, Any]:
            return {
                "priority": priority,
                "title": RECOMMENDATION_TITLES.get(issue["type"], "Fix Accessibility Issue"),
                "description": issue["message"],
                "suggestion": issue["suggestion"] or default_suggestion(issue["category"]),
                "impact": impact,
                "wcag": issue["wcag"],
                "category": issue["category"],
                "issueId": issue["id"],
            }

        errors = [i for i in issues if i["severity"] == "error"]
        warnings = [i for i in issues if i["severity"] == "warning"]
        for issue in errors[:MAX_PRIORITY_RECOMMENDATIONS]:
            recommendations.append(from_issue(issue, "high", "Critical - blocks accessibility"))
        for issue in warnings[:MAX_PRIORITY_RECOMMENDATIONS]:
            recommendations.append(from_issue(issue, "medium", "Significant - degrades accessibility"))

        aria = analyzer_results.get("aria")
        focus = analyzer_results.get("focus")

        if aria is not None and not aria.get("labelPatterns"):
            recommendations.append(
                {
                    "priority": "low",
                    "title": "Add Accessible Labels",
                    "description": "No ARIA labels detected in the code",
                    "suggestion": "Consider adding aria-label or aria-labelledby to interactive elements",
                    "impact": "Improves screen reader experience",
                    "wcag": ["2.5.3", "4.1.2"],
                    "category": "aria",
                }
            )

        has_dialog = aria is not None and any(r.get("role") == "dialog" for r in aria.get("roleChanges", []))
        if has_dialog and focus is not None and not focus.get("focusOperations"):
            recommendations.append(
                {
                    "priority": "medium",
                    "title": "Add Dialog Focus Management",
                    "description": "Dialog detected but no focus management code found",
                    "suggestion": "Move focus to dialog on open, trap focus within, return focus on close",
                    "impact": "Essential for dialog accessibility",
                    "wcag": ["2.4.3", "2.1.2"],
                    "category": "focus",
                }
            )

        if focus is not None and focus.get("visibilityChanges") and aria is not None and not aria.get("liveRegions"):
            recommendations.append(
                {
                    "priority": "low",
                    "title": "Consider Live Regions",
                    "description": "Dynamic content changes detected without live regions",
                    "suggestion": "Use aria-live regions to announce dynamic content changes to screen readers",
                    "impact": "Improves dynamic content accessibility",
                    "wcag": ["4.1.3"],
                    "category": "aria",
                }
            )

        return recommendations

    @staticmethod
    def compile_statistics(
        analyzer_results: Dict[str, Any], widget_results: Optional[Dict[str, Any]]
    ) -> Dict[str, Dict[str, Any]]:
        stats: Dict[str, Dict[str, Any]] = {}

        events = analyzer_results.get("events")
        if events is not None:
            by_type = events["stats"].get("byEventType", {})
            stats["events"] = {
                "totalHandlers": events["stats"].get("totalHandlers", 0),
                "keyboardHandlers": by_type.get("keydown", 0),
                "clickHandlers": by_type.get("click", 0),
            }

        focus = analyzer_results.get("focus")
        if focus is not None:
            stats["focus"] = {
                "focusCalls": len(focus.get("focusOperations", [])),
                "blurCalls": len(focus.get("blurOperations", [])),
                "tabIndexChanges": len(focus.get("tabIndexChanges", [])),
                "visibilityChanges": len(focus.get("visibilityChanges", [])),
            }

        aria = analyzer_results.get("aria")
        if aria is not None:
            stats["aria"] = {
                "ariaAttributes": aria["stats"].get("totalAriaChanges", 0),
                "roleChanges": len(aria.get("roleChanges", [])),
                "liveRegions": len(aria.get("liveRegions", [])),
                "widgetPatterns": len(aria.get("widgetPatterns", [])),
            }

        keyboard = analyzer_results.get("keyboard")
        if keyboard is not None:
            stats["keyboard"] = {
                "keyboardHandlers": len(keyboard.get("keyboardHandlers", [])),
                "mouseHandlers": len(keyboard.get("mouseHandlers", [])),
                "keyChecks": len(keyboard.get("keyChecks", [])),
                "navigationPatterns": len(keyboard.get("navigationPatterns", [])),
                "screenReaderConflicts": len(keyboard.get("screenReaderConflicts", [])),
            }

        if widget_results is not None:
            stats["widgets"] = {
                "patternsDetected": widget_results["summary"]["patternsDetected"],
                "validationsPassed": widget_results["summary"]["passed"],
                "validationsFailed": widget_results["summary"]["failed"],
            }

        for key, section in (("timing", "timing"), ("contextChange", "context"), ("semantic", "semantic")):
            bundle = analyzer_results.get(key)
            if bundle is not None:
                stats[section] = {
                    name: value for name, value in bundle.get("stats", {}).items() if not isinstance(value, dict)
                }

        return stats
