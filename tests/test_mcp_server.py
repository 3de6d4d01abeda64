"""Tests for the MCP server tools and prompt."""

import json

import pytest
from fastmcp import Client

from mcp_server import mcp


async def _call(name: str, arguments: dict = None) -> str:
    async with Client(mcp) as client:
        result = await client.call_tool(name, arguments or {})
        return result.content[0].text


@pytest.mark.asyncio
async def test_registered_tools_and_prompts():
    async with Client(mcp) as client:
        tools = {t.name for t in await client.list_tools()}
        prompts = {p.name for p in await client.list_prompts()}

    assert tools == {"path_relative", "get_working_directory", "discover_junit_files", "parse_junit_xml"}
    assert prompts == {"JunitParse"}


@pytest.mark.asyncio
async def test_parse_junit_xml_tool(write_report, two_suite_xml):
    path = write_report("junit.xml", two_suite_xml)

    text = await _call("parse_junit_xml", {"junit_xml_path": str(path), "topSlowTests": 1})

    result = json.loads(text)
    assert result["stats"]["passedTests"] == 2
    assert [t["time"] for t in result["slowTopQuantileTests"]] == [7.0]


@pytest.mark.asyncio
async def test_parse_junit_xml_tool_reports_errors(write_report):
    path = write_report("broken.xml", "<testsuites><testsuite>")

    malformed = json.loads(await _call("parse_junit_xml", {"junit_xml_path": str(path)}))
    missing = json.loads(await _call("parse_junit_xml", {"junit_xml_path": "nope.xml"}))

    assert malformed.keys() == {"error"}
    assert "Malformed JUnit XML" in malformed["error"]
    assert "nope.xml" in missing["error"]


@pytest.mark.asyncio
async def test_discover_junit_files_tool(write_report):
    assert (await _call("discover_junit_files")).startswith("No JUnit XML files were found")

    write_report("reports/junit.xml", "<testsuites/>")
    write_report("test-e2e.xml", "<testsuites/>")

    text = await _call("discover_junit_files", {"maxDepth": 1})
    assert text == "Found one JUnit XML file: test-e2e.xml. Proceeding with this file."


@pytest.mark.asyncio
async def test_path_tools(isolated_config):
    assert await _call("path_relative", {"base_file_name": "a/b", "target_file_name": "a/b/c.txt"}) == "c.txt"
    assert await _call("get_working_directory") == str(isolated_config)


@pytest.mark.asyncio
async def test_junit_parse_prompt(write_report, isolated_config):
    write_report("junit.xml", "<testsuites/>")

    async with Client(mcp) as client:
        result = await client.get_prompt("JunitParse")

    text = result.messages[0].content.text
    assert "Found 1 JUnit-like XML file(s)" in text
    assert str(isolated_config / "junit.xml") in text
