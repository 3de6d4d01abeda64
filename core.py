#!/usr/bin/env python3
"""
Core operations shared between MCP server and CLI.
Contains the business logic for report discovery, parsing and analysis.
"""

import os
import logging
from pathlib import Path
from string import Template
from typing import Optional

import yaml

from junit_analyzer.analyzer import analyze
from junit_analyzer.config import get_default_options, get_discovery_max_depth
from junit_analyzer.discovery import list_junit_xml_paths
from junit_analyzer.junit_parser import JUnitParser
from junit_analyzer.models import AnalysisOptions

logger = logging.getLogger(__name__)

PROMPTS_FILE = Path(__file__).parent / "junit_analyzer" / "prompts.yaml"

_FALLBACK_PROMPTS = {
    "junit_parse": {
        "header_found": "Found $count JUnit-like XML file(s) within depth <= $max_depth:",
        "header_none": "No JUnit-like XML files found within depth <= $max_depth.",
        "body": (
            "You are a test analysis assistant.\n\n$header\n$file_list\n\n"
            "Ask the user which file to analyze if several are listed, then call the tool "
            "\"parse_junit_xml\" with slowTestThresholdSec: $threshold, topSlowTests: $top, "
            "slowSuitesQuantile: $quantile, minKeepSuites: $min_keep and summarize the stats, "
            "slowest tests, slowest suites and failed tests."
        ),
    },
}

# Global parser (stateless, safe to share)
_parser = JUnitParser()


def build_options(
    slow_test_threshold_sec: Optional[float] = None,
    top_slow_tests: Optional[int] = None,
    slow_suites_quantile: Optional[float] = None,
    min_keep_suites: Optional[int] = None,
) -> AnalysisOptions:
    """
    Build analysis options, falling back to the configured defaults.

    Raises:
        ValueError: if a resulting value is out of range
    """
    defaults = get_default_options()
    return AnalysisOptions(
        slow_test_threshold_sec=defaults.slow_test_threshold_sec if slow_test_threshold_sec is None else slow_test_threshold_sec,
        top_slow_tests=defaults.top_slow_tests if top_slow_tests is None else top_slow_tests,
        slow_suites_quantile=defaults.slow_suites_quantile if slow_suites_quantile is None else slow_suites_quantile,
        min_keep_suites=defaults.min_keep_suites if min_keep_suites is None else min_keep_suites,
    )


def parse_junit_xml(xml_text: str, options: Optional[AnalysisOptions] = None) -> dict:
    """
    Parse JUnit XML text and return stats + failures + slow tests/suites.

    Args:
        xml_text: Report content
        options: Selection policy (configured defaults if not specified)

    Returns:
        dict with stats, failed, slowTopQuantileTests and slowTopQuantileSuites

    Raises:
        JUnitParseError: if the text is not well-formed XML
    """
    suites = _parser.parse_string(xml_text)
    return analyze(suites, options or get_default_options()).to_dict()


def parse_junit_file(path: str, options: Optional[AnalysisOptions] = None) -> dict:
    """
    Read a JUnit XML report file and analyze it.

    Raises:
        ReportReadError: if the file cannot be read
        JUnitParseError: if the file is not well-formed XML
    """
    logger.info(f"Parsing JUnit report {path}")
    suites = _parser.parse_file(path)
    return analyze(suites, options or get_default_options()).to_dict()


def discovery_message(files: list[str]) -> str:
    """Tell the assistant what to do with the discovered files."""
    if not files:
        return "No JUnit XML files were found. Please provide a path to the JUnit XML file you want to use."
    if len(files) > 1:
        return ("Multiple JUnit XML files were found. Please specify which file you'd like to use: "
                + ", ".join(files))
    return f"Found one JUnit XML file: {files[0]}. Proceeding with this file."


def discover_junit_files(root: str = ".", max_depth: Optional[int] = None) -> dict:
    """
    Discover JUnit XML files under a directory.

    Args:
        root: Directory to search (default: current directory)
        max_depth: Maximum search depth (configured default if not specified)

    Returns:
        dict with root, max_depth, files and a message for the user
    """
    if max_depth is None:
        max_depth = get_discovery_max_depth()
    files = list_junit_xml_paths(root, max_depth)
    return {
        "root": root,
        "max_depth": max_depth,
        "files": files,
        "message": discovery_message(files),
    }


def path_relative(base_file_name: str, target_file_name: str) -> str:
    """Relative path from base to target; empty when both resolve to the same path."""
    rel = os.path.relpath(os.path.abspath(target_file_name), os.path.abspath(base_file_name))
    return "" if rel == os.curdir else rel


def get_working_directory() -> str:
    return os.getcwd()


def load_prompt_templates() -> dict:
    """Load prompt templates from YAML. Reads fresh on each call for live updates."""
    try:
        with open(PROMPTS_FILE, 'r') as f:
            return yaml.safe_load(f) or _FALLBACK_PROMPTS
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Failed to load prompts.yaml: {e}, using defaults")
        return _FALLBACK_PROMPTS


def render_junit_parse_prompt(cwd: Optional[str] = None, max_depth: Optional[int] = None) -> str:
    """
    Render the JunitParse prompt: discovered files plus analysis instructions.

    Args:
        cwd: Directory to search (current working directory if not specified)
        max_depth: Maximum search depth (configured default if not specified)
    """
    cwd = cwd or os.getcwd()
    if max_depth is None:
        max_depth = get_discovery_max_depth()
    files = list_junit_xml_paths(cwd, max_depth)
    options = get_default_options()

    templates = load_prompt_templates().get("junit_parse") or _FALLBACK_PROMPTS["junit_parse"]
    header_key = "header_found" if files else "header_none"
    header = Template(templates[header_key]).safe_substitute(count=len(files), max_depth=max_depth)
    file_list = "\n".join(
        f"{i}. {os.path.abspath(os.path.join(cwd, f))}" for i, f in enumerate(files, start=1)
    )

    return Template(templates["body"]).safe_substitute(
        header=header,
        file_list=file_list,
        threshold=f"{options.slow_test_threshold_sec:g}",
        top=options.top_slow_tests,
        quantile=f"{options.slow_suites_quantile:g}",
        top_percent=f"{(1 - options.slow_suites_quantile) * 100:.0f}",
        min_keep=options.min_keep_suites,
    ).strip()
