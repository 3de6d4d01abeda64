"""Tests for JUnit report discovery."""

import pytest

from junit_analyzer.discovery import list_junit_xml_paths


@pytest.fixture
def project(tmp_path):
    files = [
        "junit.xml",
        "TEST-results.XML",
        "coverage.xml",
        "reports/junit-unit.xml",
        "reports/test-integration.xml",
        "reports/summary.xml",
        "reports/deep/nested/junit.xml",
        "junit/results.xml",
        "node_modules/pkg/junit.xml",
        "build/test-out.xml",
        "out/junit.xml",
        ".hidden/junit.xml",
        ".junit.xml",
        "junit.txt",
    ]
    for f in files:
        path = tmp_path / f
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("<testsuites/>")
    return tmp_path


def test_discovers_report_names(project):
    found = list_junit_xml_paths(str(project), max_depth=3)

    assert found == [
        "TEST-results.XML",
        "junit.xml",
        "junit/results.xml",
        "reports/junit-unit.xml",
        "reports/test-integration.xml",
    ]


def test_depth_limit(project):
    assert list_junit_xml_paths(str(project), max_depth=1) == ["TEST-results.XML", "junit.xml"]
    assert "reports/deep/nested/junit.xml" in list_junit_xml_paths(str(project), max_depth=4)


def test_ignored_directories(project):
    found = list_junit_xml_paths(str(project), max_depth=10)

    assert not any(p.startswith(("node_modules/", "build/", "out/", ".hidden/")) for p in found)
    assert ".junit.xml" not in found


def test_forward_slash_separators(project):
    assert all("\\" not in p for p in list_junit_xml_paths(str(project), max_depth=5))


def test_empty_directory(tmp_path):
    assert list_junit_xml_paths(str(tmp_path)) == []


def test_invalid_depth(tmp_path):
    with pytest.raises(ValueError):
        list_junit_xml_paths(str(tmp_path), max_depth=0)


def test_ignored_directories_any_case(tmp_path):
    for rel in ["Build/junit.xml", "OUT/test-x.xml", "Node_Modules/junit.xml", "junit.xml"]:
        path = tmp_path / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("<testsuites/>")

    assert list_junit_xml_paths(str(tmp_path), max_depth=3) == ["junit.xml"]
