# Copyright 2025 Amazon.com, Inc. or its affiliates.
# SPDX-License-Identifier: Apache-2.0

"""
Widget pattern validation.

Detects which APG widget patterns a tree implements, from ARIA roles, the
ARIAAnalyzer's widget patterns and keyboard navigation evidence, and checks
each detected pattern against the catalogue in widget_patterns.py.

Checks are tree-wide: a required role, attribute or key counts as present if
it appears anywhere in the analyzed tree, not only on the widget instance.
"""

from typing import Any, Dict, List, Optional

from ui_accessibility_analyzer.audit.widget_patterns import (
    WIDGET_PATTERNS,
    WidgetPatternDefinition,
    normalize_key,
    pattern_for_role,
    pattern_for_widget_type,
)
from ui_accessibility_analyzer.utils.logging_helper import setup_logger

logger = setup_logger(__name__)

DIALOG_PATTERNS = ("dialog", "alertdialog")


def empty_widget_results() -> Dict[str, Any]:
    return {
        "detectedPatterns": [],
        "validationResults": [],
        "issues": [],
        "summary": {"patternsDetected": 0, "totalChecks": 0, "passed": 0, "failed": 0, "warnings": 0},
    }


def _check(check_type: str, status: str, message: str, severity: Optional[str] = None, **extra) -> Dict[str, Any]:
    check = {"type": check_type, "status": status, "message": message}
    if severity is not None:
        check["severity"] = severity
    check.update(extra)
    return check


class WidgetPatternValidator:
    """Validates detected widgets against WAI-ARIA Authoring Practices."""

    name = "WidgetPatternValidator"
    default_options = {
        "strictMode": False,
        "validateKeyboard": True,
        "validateAria": True,
        "validateFocus": True,
    }

    def __init__(self, options: Optional[Dict[str, Any]] = None):
        self.options = dict(self.default_options)
        if options:
            self.options.update(options)

    def validate(self, analyzer_results: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        """
        Validate widget patterns using results from the other analyzers.

        Args:
            analyzer_results: Mapping with optional ``aria``, ``keyboard`` and
                ``focus`` result bundles

        Returns:
            Dict with detected patterns, per-pattern validations, issues and a summary
        """
        results = empty_widget_results()
        analyzer_results = analyzer_results or {}
        aria = analyzer_results.get("aria")
        keyboard = analyzer_results.get("keyboard")
        focus = analyzer_results.get("focus")

        results["detectedPatterns"] = self.detect_patterns(aria, keyboard)
        for pattern in results["detectedPatterns"]:
            self._validate_pattern(pattern, aria, keyboard, focus, results)

        summary = results["summary"]
        validations = results["validationResults"]
        summary["patternsDetected"] = len(results["detectedPatterns"])
        summary["passed"] = sum(v["passed"] for v in validations)
        summary["failed"] = sum(v["failed"] for v in validations)
        summary["warnings"] = sum(v["warnings"] for v in validations)
        summary["totalChecks"] = summary["passed"] + summary["failed"] + summary["warnings"]
        logger.debug(
            f"WidgetPatternValidator detected {summary['patternsDetected']} patterns "
            f"({summary['passed']} passed, {summary['failed']} failed, {summary['warnings']} warnings)"
        )
        return results

    @staticmethod
    def detect_patterns(aria: Optional[Dict[str, Any]], keyboard: Optional[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Detected widget patterns, one per pattern id, in discovery order."""
        patterns: List[Dict[str, Any]] = []
        if not aria and not keyboard:
            return patterns
        seen = set()

        for role_change in (aria or {}).get("roleChanges", []):
            pattern_id = pattern_for_role(role_change.get("role"))
            if pattern_id and pattern_id not in seen:
                seen.add(pattern_id)
                patterns.append(
                    {
                        "type": pattern_id,
                        "source": "aria-role",
                        "role": role_change.get("role"),
                        "element": role_change.get("elementRef"),
                        "location": role_change.get("location"),
                    }
                )

        for widget in (aria or {}).get("widgetPatterns", []):
            pattern_id = pattern_for_widget_type(widget.get("type"))
            if pattern_id and pattern_id not in seen:
                seen.add(pattern_id)
                patterns.append(
                    {
                        "type": pattern_id,
                        "source": "aria-widget",
                        "element": widget.get("element"),
                        "isComplete": widget.get("isComplete"),
                        "detectedRoles": list(widget.get("roles", [])),
                    }
                )

        if keyboard:
            has_escape = any(normalize_key(k.get("key")) == "Escape" for k in keyboard.get("keyChecks", []))
            for nav in keyboard.get("navigationPatterns", []):
                # Arrow navigation alone is ambiguous between several widgets
                if nav.get("type") == "tab-handling" and has_escape and "dialog" not in seen:
                    seen.add("dialog")
                    patterns.append({"type": "dialog", "source": "keyboard", "keyboardPattern": nav["type"]})

        return patterns

    def _validate_pattern(self, pattern, aria, keyboard, focus, results: Dict) -> None:
        definition = WIDGET_PATTERNS.get(pattern["type"])
        if definition is None:
            return

        validation = {
            "pattern": pattern["type"],
            "patternName": definition.name,
            "element": pattern.get("element"),
            "source": pattern["source"],
            "url": definition.url,
            "checks": [],
            "passed": 0,
            "failed": 0,
            "warnings": 0,
        }

        if self.options["validateAria"]:
            self._validate_aria(pattern, definition, aria, validation, results)
        if self.options["validateKeyboard"]:
            self._validate_keyboard(pattern, definition, keyboard, validation, results)
        if self.options["validateFocus"]:
            self._validate_focus(pattern, definition, focus, validation, results)

        results["validationResults"].append(validation)

    def _record_miss(self, validation: Dict, check_type: str, message: str) -> str:
        """Record a missing attribute/key check, which only fails in strict mode."""
        strict = self.options["strictMode"]
        severity = "error" if strict else "warning"
        validation["checks"].append(_check(check_type, "fail" if strict else "warn", message, severity))
        if strict:
            validation["failed"] += 1
        else:
            validation["warnings"] += 1
        return severity

    def _validate_aria(self, pattern, definition: WidgetPatternDefinition, aria, validation, results) -> None:
        if not aria:
            validation["checks"].append(_check("aria", "skipped", "No ARIA data available"))
            return

        roles = {r.get("role") for r in aria.get("roleChanges", [])}
        roles.update(pattern.get("detectedRoles", []))
        for role in definition.required_roles:
            if role in roles:
                validation["checks"].append(_check("aria-role", "pass", f'Required role "{role}" is present'))
                validation["passed"] += 1
            else:
                validation["checks"].append(_check("aria-role", "fail", f'Missing required role "{role}"', "error"))
                validation["failed"] += 1
                self._add_issue(
                    results, "error", pattern, "missing-required-role",
                    f'Missing required ARIA role "{role}" for {definition.name} pattern',
                )

        attributes = {a.get("attribute") for a in aria.get("ariaAttributes", [])}
        for attribute in definition.required_attributes:
            if attribute in attributes:
                validation["checks"].append(
                    _check("aria-attr", "pass", f'Required attribute "{attribute}" is present')
                )
                validation["passed"] += 1
            else:
                severity = self._record_miss(validation, "aria-attr", f'Missing required attribute "{attribute}"')
                self._add_issue(
                    results, severity, pattern, "missing-required-attribute",
                    f'Missing required ARIA attribute "{attribute}" for {definition.name} pattern',
                )

        for attribute in definition.recommended_attributes:
            if attribute not in attributes:
                validation["checks"].append(
                    _check("aria-attr", "info", f'Recommended attribute "{attribute}" not detected')
                )

    def _validate_keyboard(self, pattern, definition: WidgetPatternDefinition, keyboard, validation, results) -> None:
        if not keyboard:
            validation["checks"].append(_check("keyboard", "skipped", "No keyboard data available"))
            return

        detected = {normalize_key(k.get("key")) for k in keyboard.get("keyChecks", [])}
        for key in definition.required_keys:
            if normalize_key(key) in detected:
                validation["checks"].append(_check("keyboard", "pass", f'Required key "{key}" handling detected'))
                validation["passed"] += 1
            else:
                severity = self._record_miss(validation, "keyboard", f'Missing required key "{key}" handling')
                self._add_issue(
                    results, severity, pattern, "missing-required-key",
                    f'{definition.name} pattern should handle "{key}" key per WAI-ARIA APG',
                )

        for key in definition.recommended_keys:
            if normalize_key(key) not in detected:
                validation["checks"].append(
                    _check("keyboard", "info", f'Recommended key "{key}" handling not detected')
                )

    def _validate_focus(self, pattern, definition: WidgetPatternDefinition, focus, validation, results) -> None:
        if not focus:
            validation["checks"].append(_check("focus", "skipped", "No focus data available"))
            return

        has_focus_management = bool(focus.get("focusOperations")) or bool(focus.get("tabIndexChanges"))
        if definition.focus_requirements:
            if has_focus_management:
                validation["checks"].append(_check("focus", "pass", "Focus management detected"))
                validation["passed"] += 1
            else:
                validation["checks"].append(
                    _check(
                        "focus", "info", "No explicit focus management detected",
                        requirements=list(definition.focus_requirements),
                    )
                )

        if pattern["type"] in DIALOG_PATTERNS:
            multiple_focus_calls = len(focus.get("focusOperations", [])) > 1
            keyboard_focus = any(op.get("eventType") == "keydown" for op in focus.get("focusInHandlers", []))
            if not multiple_focus_calls and not keyboard_focus:
                validation["checks"].append(
                    _check("focus", "warn", "Dialog may not have focus trapping implemented", "warning")
                )
                validation["warnings"] += 1
                self._add_issue(
                    results, "warning", pattern, "missing-focus-trap",
                    "Dialog should trap focus within it - no focus trap pattern detected",
                )

    @staticmethod
    def _add_issue(results: Dict, severity: str, pattern: Dict, issue_type: str, message: str) -> None:
        definition = WIDGET_PATTERNS.get(pattern["type"])
        results["issues"].append(
            {
                "type": issue_type,
                "severity": severity,
                "pattern": pattern["type"],
                "element": pattern.get("element"),
                "elementRef": pattern.get("element"),
                "message": message,
                "url": definition.url if definition else None,
                "location": pattern.get("location"),
            }
        )


def get_pattern_documentation(pattern_id: str) -> Optional[Dict[str, Any]]:
    definition = WIDGET_PATTERNS.get(pattern_id)
    return definition.to_documentation() if definition else None


def get_supported_patterns() -> List[Dict[str, str]]:
    return [
        {"id": d.id, "name": d.name, "description": d.description, "url": d.url}
        for d in WIDGET_PATTERNS.values()
    ]


def format_validation_summary(results: Dict[str, Any]) -> str:
    """Plain-text summary of a validation run."""
    lines = [
        "Widget Pattern Validation Report",
        "================================",
        "",
        f"Patterns Detected: {len(results['detectedPatterns'])}",
        "",
    ]
    if not results["detectedPatterns"]:
        lines.append("No widget patterns detected in the code.")
        return "\n".join(lines)

    lines.append("Detected Patterns:")
    for pattern in results["detectedPatterns"]:
        definition = WIDGET_PATTERNS.get(pattern["type"])
        lines.append(f"  - {definition.name if definition else pattern['type']} (from {pattern['source']})")
    lines.append("")

    for validation in results["validationResults"]:
        lines.append(f"{validation['patternName']} Validation:")
        lines.append(f"  Reference: {validation['url']}")
        lines.append(
            f"  Checks: {validation['passed']} passed, {validation['failed']} failed, "
            f"{validation['warnings']} warnings"
        )
        problems = [c for c in validation["checks"] if c["status"] in ("fail", "warn")]
        if problems:
            lines.append("  Issues:")
            for check in problems:
                icon = "!" if check["status"] == "fail" else "?"
                lines.append(f"    [{icon}] {check['message']}")
        lines.append("")

    summary = results["summary"]
    lines.append("Summary:")
    lines.append(f"  Total checks: {summary['totalChecks']}")
    lines.append(f"  Passed: {summary['passed']}")
    lines.append(f"  Failed: {summary['failed']}")
    lines.append(f"  Warnings: {summary['warnings']}")
    if summary["failed"] == 0 and summary["warnings"] == 0:
        lines.append("")
        lines.append("[+] All detected patterns follow WAI-ARIA Authoring Practices")
    return "\n".join(lines)
