# Copyright 2025 Amazon.com, Inc. or its affiliates.
# SPDX-License-Identifier: Apache-2.0

"""
Generate accessibility analysis reports in various formats.

Thin entry point over the shared report generation in utils.
"""

from ui_accessibility_analyzer.utils.logging_helper import setup_logger
from ui_accessibility_analyzer.utils.report_generator import (
    generate_report as utils_generate_report,
)
from ui_accessibility_analyzer.utils.report_models import Report

logger = setup_logger(__name__)


def generate_report(
    report: Report,
    output_path: str,
    report_format: str = "json",
    use_color: bool = False,
) -> str:
    """
    Generate an accessibility analysis report in the specified format.

    Args:
        report: The analysis report
        output_path: Path where the report should be saved
        report_format: Format of the report (json, html, or text)
        use_color: Whether text reports include ANSI colours

    Returns:
        The path written
    """
    logger.info(f"Generating {report_format} accessibility report at {output_path}")

    return utils_generate_report(
        report=report,
        output_path=output_path,
        report_format=report_format,
        use_color=use_color,
    )
