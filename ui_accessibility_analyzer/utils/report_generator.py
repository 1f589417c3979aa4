# Copyright 2025 Amazon.com, Inc. or its affiliates.
# SPDX-License-Identifier: Apache-2.0

"""
Generate accessibility reports in various formats.

This module renders a Report as JSON, as a plain-text summary for terminals,
or as HTML through Flask's render_template.
"""

import os
from typing import List, Optional

from flask import Flask, render_template

from ui_accessibility_analyzer.audit.standards import SEVERITY_ORDER, severity_rank
from ui_accessibility_analyzer.utils.logging_helper import ReportGenerationError, setup_logger
from ui_accessibility_analyzer.utils.report_models import Report

# Set up module-level logger
logger = setup_logger(__name__)

REPORT_FORMATS = ("json", "text", "html")

GRADE_COLORS = {
    "A": "#22c55e",
    "B": "#84cc16",
    "C": "#eab308",
    "D": "#f97316",
    "F": "#ef4444",
}

PRIORITY_CLASSES = {"high": "error", "medium": "warning", "low": "info"}
PRIORITY_ICONS = {"high": "[!]", "medium": "[?]", "low": "[i]"}

ANSI_COLORS = {"green": "\033[32m", "yellow": "\033[33m", "red": "\033[31m", "bold": "\033[1m"}
ANSI_RESET = "\033[0m"

BOX_WIDTH = 57


def _colorize(text: str, color: str, use_color: bool) -> str:
    return f"{ANSI_COLORS[color]}{text}{ANSI_RESET}" if use_color else text


def _score_color(score: int) -> str:
    if score >= 80:
        return "green"
    if score >= 60:
        return "yellow"
    return "red"


def render_score_bar(score: int, use_color: bool = False) -> str:
    filled = int(round(score / 10))
    bar = "█" * filled + "░" * (10 - filled)
    if score >= 80:
        label = "Good"
    elif score >= 60:
        label = "Fair"
    else:
        label = "Needs Work"
    return _colorize(f"{bar} {score}/100 ({label})", _score_color(score), use_color)


def _section_header(title: str) -> List[str]:
    return [
        "┌" + "─" * BOX_WIDTH + "┐",
        "│  " + title.ljust(BOX_WIDTH - 2) + "│",
        "└" + "─" * BOX_WIDTH + "┘",
        "",
    ]


def filter_report(report: Report, min_severity: Optional[str]) -> Report:
    """Copy of ``report`` keeping only issues at or above ``min_severity``."""
    if not min_severity or min_severity not in SEVERITY_ORDER:
        return report
    limit = severity_rank(min_severity)
    issues = [issue for issue in report.issues if severity_rank(issue.severity) <= limit]
    return report.model_copy(update={"issues": issues})


def generate_json_report(report: Report) -> str:
    """Serialize a report to JSON with camelCase field names."""
    return report.to_json()


def generate_text_report(report: Report, use_color: bool = False) -> str:
    """
    Generate a plain-text summary report.

    Args:
        report: The report to render
        use_color: Whether to add ANSI colours for terminals

    Returns:
        The text report
    """
    scores = report.scores
    stats = report.statistics
    lines = [
        "╔" + "═" * (BOX_WIDTH + 1) + "╗",
        "║" + "           Accessibility Analysis Report".ljust(BOX_WIDTH + 1) + "║",
        "╚" + "═" * (BOX_WIDTH + 1) + "╝",
        "",
    ]
    if report.source:
        lines.append(f"Source: {report.source}")
    lines.extend(
        [
            f"Analysis Date: {report.timestamp}",
            f"Analysis Time: {report.analysis_time}ms",
            "",
        ]
    )

    lines.extend(_section_header("OVERALL SCORE"))
    lines.extend(
        [
            "  Grade: " + _colorize(f"{report.grade}  ({scores.overall}/100)", _score_color(scores.overall), use_color),
            f"  WCAG 2.1 Level: {report.get_wcag_level()}",
            "",
            "  Category Scores:",
            f"    Keyboard:  {render_score_bar(scores.keyboard, use_color)}",
            f"    ARIA:      {render_score_bar(scores.aria, use_color)}",
            f"    Focus:     {render_score_bar(scores.focus, use_color)}",
            f"    Widgets:   {render_score_bar(scores.widgets, use_color)}",
            "",
        ]
    )

    errors = report.get_errors()
    warnings = report.get_warnings()
    infos = report.get_issues_by_severity("info")
    lines.extend(_section_header("ISSUES FOUND"))
    lines.append("  Errors:   " + _colorize(str(len(errors)), "red", use_color and bool(errors)))
    lines.append("  Warnings: " + _colorize(str(len(warnings)), "yellow", use_color and bool(warnings)))
    lines.append(f"  Info:     {len(infos)}")
    lines.append("")

    if errors:
        lines.append("  Critical Issues:")
        for error in errors[:5]:
            lines.append(f"    [!] {error.message}")
        if len(errors) > 5:
            lines.append(f"    ... and {len(errors) - 5} more")
        lines.append("")

    if report.recommendations:
        lines.extend(_section_header("TOP RECOMMENDATIONS"))
        for rec in report.recommendations[:5]:
            lines.append(f"  {PRIORITY_ICONS.get(rec.priority, '[i]')} {rec.title}")
            lines.append(f"      {rec.suggestion}")
            lines.append("")

    lines.extend(_section_header("WCAG 2.1 COMPLIANCE"))
    failed = report.get_failed_criteria()
    if not failed:
        lines.append("  All tested criteria passed!")
    else:
        lines.append("  Failed Criteria:")
        for criterion in failed:
            lines.append(f"    {criterion.id} {criterion.name} (Level {criterion.level})")
    lines.append("")

    lines.extend(_section_header("STATISTICS"))
    lines.append(f"  Event handlers: {stats.get('events', {}).get('totalHandlers', 0)}")
    lines.append(f"  Keyboard handlers: {stats.get('keyboard', {}).get('keyboardHandlers', 0)}")
    lines.append(f"  ARIA attributes: {stats.get('aria', {}).get('ariaAttributes', 0)}")
    lines.append(f"  Focus operations: {stats.get('focus', {}).get('focusCalls', 0)}")
    lines.append(f"  Widget patterns: {stats.get('widgets', {}).get('patternsDetected', 0)}")
    lines.append("")

    return "\n".join(lines)


def generate_html_report(report: Report) -> str:
    """
    Generate an HTML report using Flask's render_template.

    Args:
        report: The report to render

    Returns:
        The rendered HTML

    Raises:
        ReportGenerationError: If the template cannot be rendered
    """
    try:
        # Create a temporary Flask app context
        app = Flask(__name__)

        with app.app_context():
            template_file = "accessibility_report.html"
            logger.debug(f"Using template file: {template_file}")
            html = render_template(
                template_file,
                report=report,
                wcag_level=report.get_wcag_level(),
                grade_color=GRADE_COLORS.get(report.grade, GRADE_COLORS["F"]),
                category_scores=[
                    ("Keyboard", report.scores.keyboard),
                    ("ARIA", report.scores.aria),
                    ("Focus", report.scores.focus),
                    ("Widgets", report.scores.widgets),
                ],
                priority_class=PRIORITY_CLASSES,
            )

        logger.debug("Using Flask's render_template for secure HTML generation")
        return html
    except Exception as e:
        logger.error(f"Failed to generate HTML report with Flask: {e}", exc_info=True)
        raise ReportGenerationError(f"Failed to render HTML report: {e}") from e


def generate_report(report: Report, output_path: str, report_format: str = "json", use_color: bool = False) -> str:
    """
    Generate a report in the specified format and write it to disk.

    Args:
        report: The report to render
        output_path: Path where the report will be saved
        report_format: Type of report to generate ('json', 'text' or 'html')
        use_color: Whether text reports include ANSI colours

    Returns:
        The path written
    """
    # Make sure the output directory exists
    output_dir = os.path.dirname(output_path)
    if output_dir:
        os.makedirs(output_dir, exist_ok=True)

    content = render_report(report, report_format, use_color)

    try:
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(content)
    except OSError as e:
        raise ReportGenerationError(f"Could not write report to {output_path}: {e}") from e

    logger.info(f"Generated {report_format} report: {output_path}")
    return output_path


def render_report(report: Report, report_format: str = "json", use_color: bool = False) -> str:
    """Render a report to a string, falling back to JSON for unknown formats."""
    if report_format == "json":
        return generate_json_report(report)
    elif report_format == "text":
        return generate_text_report(report, use_color=use_color)
    elif report_format == "html":
        try:
            return generate_html_report(report)
        except ReportGenerationError:
            logger.warning("Falling back to JSON report since Flask rendering failed")
            return generate_json_report(report)
    else:
        # Default to JSON
        logger.warning(f"Unknown report format: {report_format}, using JSON")
        return generate_json_report(report)
