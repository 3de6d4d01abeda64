"""Pytest configuration for the junit analyzer tests."""

import pytest

from junit_analyzer.config import CONFIG_KEYS


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Run each test without ambient config: no env overrides, no .env in cwd."""
    for key in CONFIG_KEYS + ["JUNIT_ANALYZER_CONFIG"]:
        monkeypatch.delenv(key, raising=False)
    work_dir = tmp_path / "work"
    work_dir.mkdir()
    monkeypatch.chdir(work_dir)
    return work_dir


@pytest.fixture
def two_suite_xml():
    """2 suites x 2 tests, one distinct failure per suite, times 1/6/2/7s."""
    return """<?xml version="1.0" encoding="UTF-8"?>
<testsuites>
  <testsuite name="alpha" file="tests/test_alpha.py">
    <testcase classname="tests.test_alpha" name="test_fast" time="1.0"/>
    <testcase classname="tests.test_alpha" name="test_slow" time="6.0">
      <failure message="assert 1 == 2" type="AssertionError">Traceback: alpha</failure>
    </testcase>
  </testsuite>
  <testsuite name="beta">
    <testcase classname="tests.test_beta" name="test_ok" time="2.0" file="tests/test_beta.py"/>
    <testcase classname="tests.test_beta" name="test_slower" time="7.0" file="tests/test_beta.py">
      <failure message="timed out" type="TimeoutError"/>
    </testcase>
  </testsuite>
</testsuites>
"""


@pytest.fixture
def write_report(isolated_config):
    """Factory fixture writing report text into the working directory."""
    def _write(relative_path: str, content: str):
        path = isolated_config / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path
    return _write
