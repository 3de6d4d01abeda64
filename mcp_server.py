#!/usr/bin/env python3
"""
MCP Server for junit-test-analyzer.
Provides tools for locating and analyzing JUnit XML test reports.
"""

import logging
import json
import asyncio
from fastmcp import FastMCP

# Local imports
from junit_analyzer.config import get_server_settings
import core

SERVER_SETTINGS = get_server_settings()

# Configure logging (stderr, stdout carries the stdio transport)
logging.basicConfig(
    level=SERVER_SETTINGS["log_level"],
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# FastMCP server
mcp = FastMCP("various-utils")


@mcp.tool(
    name="path_relative",
    description="""Calculate the relative path from one file path to another.
    Args:
        base_file_name: Base file path to resolve from
        target_file_name: Target file path to resolve to
    """
)
async def path_relative(base_file_name: str, target_file_name: str) -> str:
    return core.path_relative(base_file_name, target_file_name)


@mcp.tool(
    name="get_working_directory",
    description="""Get the current working directory."""
)
async def get_working_directory() -> str:
    return core.get_working_directory()


@mcp.tool(
    name="discover_junit_files",
    description="""Discover JUnit XML files in the project.

    Always run this first when a user asks for a JUnit XML file or wants to analyze test results.

    Args:
        maxDepth: Optional: the maximum depth to search for files. Defaults to 3.
    """
)
async def discover_junit_files(maxDepth: int = None) -> str:
    try:
        result = core.discover_junit_files(".", maxDepth)
        return result["message"]
    except Exception as e:
        logger.error(f"Error in discover_junit_files: {str(e)}")
        return json.dumps({"error": str(e)})


@mcp.tool(
    name="parse_junit_xml",
    description="""Parse JUnit XML: failures + slow tests (threshold) & slow suites (percentile).

    Parses a JUnit XML report file and returns:
    - General stats: total suites, failed suites, total tests, failed tests, passed tests.
    - List of failed tests with suite/class names, execution time, status, message, type, details, and file.
    - Slow tests selected by fixed threshold and top-N (time > thresholdSec, sorted desc, take first topN).
    - Slow suites selected by percentile threshold (inclusive nearest-rank), includes suite file if available.

    Args:
        junit_xml_path: Absolute or relative path to a JUnit XML report file to parse
        slowTestThresholdSec: Threshold in seconds to consider a test "slow" (default: 5)
        topSlowTests: Max number of slow tests to keep after sorting desc (default: 20)
        slowSuitesQuantile: Percentile in range 0..1 for slow suites (default: 0.8, slowest ~20%)
        minKeepSuites: Minimum number of suites to keep regardless of percentile (default: 1)

    Returns:
        {
          stats: { totalSuites, failedSuites, totalTests, failedTests, passedTests },
          failed: FailedTest[],
          slowTopQuantileTests: SlowTest[],
          slowTopQuantileSuites: SlowSuite[]
        }
        FailedTest: { suiteName?, className?, testName, time?, status, message?, type?, details?, file? }
        SlowTest:   { suiteName?, className?, testName, time, file? }
        SlowSuite:  { suiteName?, totalTime, totalTests, failedTests, file? }
    """
)
async def parse_junit_xml(
    junit_xml_path: str,
    slowTestThresholdSec: float = None,
    topSlowTests: int = None,
    slowSuitesQuantile: float = None,
    minKeepSuites: int = None
) -> str:
    try:
        options = core.build_options(
            slow_test_threshold_sec=slowTestThresholdSec,
            top_slow_tests=topSlowTests,
            slow_suites_quantile=slowSuitesQuantile,
            min_keep_suites=minKeepSuites,
        )
        result = core.parse_junit_file(junit_xml_path, options)
        return json.dumps(result, indent=2)
    except Exception as e:
        logger.error(f"Error in parse_junit_xml: {str(e)}")
        return json.dumps({"error": str(e)})


# ============== PROMPTS ==============

@mcp.prompt(
    name="JunitParse",
    description="Discover JUnit XML files, let the user pick, then analyze failures, "
                "slow tests by threshold+topN, and slow suites by percentile."
)
async def prompt_junit_parse():
    """Discovered report files plus analysis instructions. Template reloads on each call."""
    return core.render_junit_parse_prompt()


async def main():
    transport = SERVER_SETTINGS["transport"]
    if transport == "stdio":
        logger.info("Starting MCP server on stdio")
        await mcp.run_async(transport="stdio")
    else:
        host, port = SERVER_SETTINGS["host"], SERVER_SETTINGS["port"]
        logger.info(f"Starting MCP server ({transport}) on {host}:{port}")
        await mcp.run_async(transport=transport, host=host, port=port)


def run():
    asyncio.run(main())


if __name__ == "__main__":
    run()
