# Copyright 2025 Amazon.com, Inc. or its affiliates.
# SPDX-License-Identifier: Apache-2.0

"""
Command-line interface for the ui_accessibility_analyzer package.

This module provides a command-line interface for analyzing action tree files
and for running the editor integration commands against a workspace.
"""

import os
import sys
import argparse
from typing import Any, Dict, List, Optional

from ui_accessibility_analyzer import __version__
from ui_accessibility_analyzer.api import analyze_file
from ui_accessibility_analyzer.batch.workspace import WorkspaceAnalyzer, find_tree_files
from ui_accessibility_analyzer.integration.commands import CommandDispatcher
from ui_accessibility_analyzer.integration.diagnostics import DiagnosticCollection
from ui_accessibility_analyzer.integration.settings import load_editor_settings
from ui_accessibility_analyzer.utils.config import (
    config_manager,
    find_config_file,
    load_config_file,
    save_config,
)
from ui_accessibility_analyzer.utils.logging_helper import (
    ConfigurationError,
    UIAccessibilityError,
    configure_logging,
    setup_logger,
)
from ui_accessibility_analyzer.utils.report_generator import (
    REPORT_FORMATS,
    filter_report,
    generate_report,
    render_report,
)

# Set up module-level logger
logger = setup_logger(__name__)

EXIT_OK = 0
EXIT_ISSUES = 1
EXIT_USAGE = 2


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    """Add arguments shared by every command."""
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Only output reports, suppress other output",
    )
    parser.add_argument("--config", "-c", help="Path to configuration file")
    parser.add_argument(
        "--save-config",
        metavar="CONFIG_PATH",
        help="Save current configuration to the specified file path",
    )


def _add_analyze_arguments(parser: argparse.ArgumentParser) -> None:
    """Add arguments to the analyze command parser."""
    _add_common_arguments(parser)
    parser.add_argument("paths", nargs="+", help="Action tree files or directories")
    parser.add_argument(
        "--format",
        "-f",
        choices=list(REPORT_FORMATS),
        help="Report format (defaults to the report.format setting)",
    )
    parser.add_argument(
        "--output",
        "-o",
        help="Write the report to this file, or into this directory when analyzing several files",
    )
    parser.add_argument(
        "--min-severity",
        choices=["error", "warning", "info"],
        help="Only show issues at or above this severity",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail widget checks for missing attributes and keys instead of warning",
    )
    parser.add_argument("--no-color", action="store_true", help="Disable coloured text output")


def _add_workspace_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--workspace", "-w", default=".", help="Workspace root directory")


def create_parser() -> argparse.ArgumentParser:
    """Create the command-line argument parser."""
    parser = argparse.ArgumentParser(
        prog="ui-a11y",
        description="Analyze UI interaction code for keyboard, focus, ARIA and widget accessibility issues.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Analyze action tree files and print a report",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    _add_analyze_arguments(analyze_parser)

    analyze_file_parser = subparsers.add_parser(
        "analyze-file",
        help="Analyze a file using the editor analysis mode and update diagnostics",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    _add_common_arguments(analyze_file_parser)
    _add_workspace_arguments(analyze_file_parser)
    analyze_file_parser.add_argument("path", help="Action tree file")
    analyze_file_parser.add_argument(
        "--mode",
        choices=["file", "smart", "project"],
        help="Analysis mode (defaults to the editor.analysisMode setting)",
    )

    workspace_parser = subparsers.add_parser(
        "analyze-workspace",
        help="Analyze every action tree file in a workspace and update diagnostics",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    _add_common_arguments(workspace_parser)
    workspace_parser.add_argument("root", nargs="?", default=".", help="Workspace root directory")
    workspace_parser.add_argument("--workers", type=int, help="Number of worker threads")

    clear_parser = subparsers.add_parser(
        "clear-diagnostics",
        help="Clear stored diagnostics",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    _add_common_arguments(clear_parser)
    _add_workspace_arguments(clear_parser)
    clear_parser.add_argument("--file", help="Only clear diagnostics for this file")

    # Version information
    parser.add_argument(
        "--version", action="store_true", help="Show version information"
    )

    return parser


def apply_config_file(config_path: Optional[str]) -> None:
    """
    Load a configuration file into the shared config manager.

    Without an explicit path, a default configuration file in the working
    directory is used when present.

    Raises:
        ConfigurationError: If the file cannot be read
    """
    if not config_path:
        config_path = find_config_file(".")
        if not config_path:
            return

    logger.info(f"Loading configuration from {config_path}")
    config_manager.apply_config_data(load_config_file(config_path))


def parse_arguments(argv: Optional[List[str]] = None) -> Dict[str, Any]:
    """Parse command-line arguments into a dictionary."""
    parser = create_parser()
    args = parser.parse_args(argv)

    # Show version if requested
    if args.version:
        print(f"UI Accessibility Analyzer v{__version__}")
        sys.exit(EXIT_OK)

    # If no command specified, show help and exit
    if args.command is None:
        parser.print_help()
        sys.exit(EXIT_USAGE)

    configure_logging(debug=args.debug, quiet=args.quiet)

    return vars(args)


def save_configuration_from_args(args_dict: Dict[str, Any]) -> None:
    """
    Save the resolved configuration, with command-line overrides, to a file.

    Args:
        args_dict: Dictionary of command-line arguments

    Raises:
        ConfigurationError: If the file cannot be written
    """
    config_path = args_dict.get("save_config")
    if not config_path:
        return

    file_format = "json" if config_path.lower().endswith(".json") else "yaml"

    config = config_manager.resolve_sections()

    if args_dict.get("strict"):
        config["analysis"]["strictMode"] = True
    if args_dict.get("format"):
        config["report"]["format"] = args_dict["format"]
    if args_dict.get("min_severity"):
        config["report"]["minSeverity"] = args_dict["min_severity"]
    if args_dict.get("no_color"):
        config["report"]["useColor"] = False
    if args_dict.get("mode"):
        config["editor"]["analysisMode"] = args_dict["mode"]
    if args_dict.get("workers"):
        config["batch"]["workers"] = args_dict["workers"]

    save_config(config, config_path, file_format=file_format)
    if not args_dict.get("quiet"):
        print(f"Configuration saved to {config_path}")


def _collect_inputs(paths: List[str]) -> List[str]:
    """Expand directories to the tree files inside them."""
    editor = config_manager.get_config(section="editor")
    files = []
    for path in paths:
        if os.path.isdir(path):
            files.extend(find_tree_files(path, editor.get("excludePatterns"), editor.get("maxProjectFiles")))
        elif os.path.isfile(path):
            files.append(path)
        else:
            raise FileNotFoundError(f"Input not found: {path}")
    return files


def _report_path(output: str, tree_path: str, report_format: str, several: bool) -> str:
    if not several and not os.path.isdir(output):
        return output
    base = os.path.splitext(os.path.basename(tree_path))[0]
    return os.path.join(output, f"{base}.a11y.{report_format}")


def run_analyze_command(args: Dict[str, Any]) -> int:
    """Run the analyze command."""
    report_config = config_manager.get_config(section="report")
    report_format = args.get("format") or report_config.get("format", "text")
    min_severity = args.get("min_severity") or report_config.get("minSeverity")
    use_color = (
        bool(report_config.get("useColor", True))
        and not args.get("no_color")
        and not args.get("output")
        and sys.stdout.isatty()
    )

    options = {"strictMode": True} if args.get("strict") else None

    try:
        files = _collect_inputs(args["paths"])
    except FileNotFoundError as e:
        logger.error(str(e))
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE

    if not files:
        print("Error: no action tree files found", file=sys.stderr)
        return EXIT_USAGE

    several = len(files) > 1
    exit_code = EXIT_OK
    for tree_path in files:
        try:
            report = analyze_file(tree_path, options=options)
        except (FileNotFoundError, UIAccessibilityError) as e:
            logger.error(f"Error analyzing {tree_path}: {e}")
            print(f"Error: {tree_path}: {e}", file=sys.stderr)
            exit_code = EXIT_ISSUES
            continue

        if report.has_errors():
            exit_code = EXIT_ISSUES

        shown = filter_report(report, min_severity)
        if args.get("output"):
            generate_report(
                shown,
                _report_path(args["output"], tree_path, report_format, several),
                report_format,
                use_color=False,
            )
        else:
            if several:
                print(f"\n== {tree_path} ==")
            print(render_report(shown, report_format, use_color))

    return exit_code


def _print_command_result(result: Dict[str, Any], quiet: bool) -> None:
    if quiet:
        return
    print(result["message"])
    for path, outcome in result.get("files", {}).items():
        if "report" in outcome:
            report = outcome["report"]
            print(f"  {path}: grade {report.grade}, {len(report.issues)} issues")
        elif outcome.get("cancelled"):
            print(f"  {path}: cancelled")
        else:
            print(f"  {path}: error: {outcome.get('error')}")


def _command_exit_code(result: Dict[str, Any]) -> int:
    for outcome in result.get("files", {}).values():
        if "error" in outcome:
            return EXIT_ISSUES
        if "report" in outcome and outcome["report"].has_errors():
            return EXIT_ISSUES
    return EXIT_OK


def run_editor_command(args: Dict[str, Any]) -> int:
    """Run one of the editor integration commands."""
    command = args["command"]
    overrides = {"analysisMode": args["mode"]} if args.get("mode") else None
    settings = load_editor_settings(overrides)

    workspace_root = args.get("workspace") or args.get("root") or "."
    if command == "analyze-file" and not os.path.isfile(args["path"]):
        print(f"Error: file not found: {args['path']}", file=sys.stderr)
        return EXIT_USAGE
    if command == "analyze-workspace" and not os.path.isdir(workspace_root):
        print(f"Error: directory not found: {workspace_root}", file=sys.stderr)
        return EXIT_USAGE

    diagnostics = DiagnosticCollection(workspace_root, settings.min_severity)
    diagnostics.load()

    with WorkspaceAnalyzer(workers=args.get("workers"), show_progress=not args.get("quiet")) as analyzer:
        dispatcher = CommandDispatcher(settings, workspace_root, analyzer, diagnostics)
        if command == "analyze-file":
            result = dispatcher.analyze_file(args["path"])
        elif command == "analyze-workspace":
            result = dispatcher.analyze_workspace(workspace_root)
        else:
            result = dispatcher.clear_diagnostics(args.get("file"))

    _print_command_result(result, args.get("quiet", False))
    return _command_exit_code(result)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    args = parse_arguments(argv)

    try:
        apply_config_file(args.get("config"))
        save_configuration_from_args(args)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE

    try:
        if args["command"] == "analyze":
            return run_analyze_command(args)
        return run_editor_command(args)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE
    except UIAccessibilityError as e:
        logger.error(f"Unexpected error: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ISSUES


if __name__ == "__main__":
    sys.exit(main())
