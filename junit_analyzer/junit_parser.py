"""Parser for JUnit-style XML test reports."""

import codecs
import logging
import math
import re
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Optional
from xml.parsers import expat

from .errors import JUnitParseError, ReportReadError
from .models import UNNAMED_TEST, AnnotationKind, FailureAnnotation, TestCase, TestSuite

logger = logging.getLogger(__name__)

# Several <testsuite> elements at the top level are wrapped in this element and reparsed
_FRAGMENT_ROOT = "junit-fragment"
_JUNK_AFTER_ROOT = expat.errors.codes[expat.errors.XML_ERROR_JUNK_AFTER_DOC_ELEMENT]
_XML_DECLARATION = re.compile(r'^\ufeff?\s*<\?xml[^>]*\?>')
_ENCODING_DECLARATION = re.compile(rb'^\s*<\?xml[^>]*encoding=["\']([A-Za-z0-9._-]+)["\']')
_BOMS = [
    (codecs.BOM_UTF8, "utf-8-sig"),
    (codecs.BOM_UTF16_LE, "utf-16"),
    (codecs.BOM_UTF16_BE, "utf-16"),
]


def first_present(attrs: dict, *keys: str) -> Optional[str]:
    """Return the value of the first key present in attrs."""
    for key in keys:
        value = attrs.get(key)
        if value is not None:
            return value
    return None


def parse_seconds(value: Optional[str]) -> Optional[float]:
    """Parse a time attribute. Non-numeric or non-finite values resolve to None."""
    if value is None:
        return None
    # float() would accept digit separators such as "1_000"
    if "_" in value:
        logger.debug(f"Ignoring non-numeric time value: {value!r}")
        return None
    try:
        seconds = float(value.strip())
    except ValueError:
        logger.debug(f"Ignoring non-numeric time value: {value!r}")
        return None
    return seconds if math.isfinite(seconds) else None


def _decode(data: bytes) -> str:
    """Decode report bytes by BOM, then by the XML declaration, else as UTF-8."""
    for bom, encoding in _BOMS:
        if data.startswith(bom):
            return data.decode(encoding)
    match = _ENCODING_DECLARATION.match(data)
    return data.decode(match.group(1).decode("ascii") if match else "utf-8")


class JUnitParser:
    """Normalizes JUnit XML into TestSuite/TestCase models."""

    def parse_file(self, path) -> list[TestSuite]:
        """Read a report from disk and parse it."""
        try:
            data = Path(path).read_bytes()
        except OSError as e:
            raise ReportReadError(path, str(e)) from e
        return self.parse_string(data)

    def parse_string(self, xml_text) -> list[TestSuite]:
        """Parse report text into an ordered list of suites.

        Accepts a <testsuites> wrapper, a single <testsuite> root, or several
        <testsuite> elements at the top level. A well-formed document with any
        other root yields no suites. Bytes are decoded by the parser using
        the declared encoding.
        """
        root = self._parse_root(xml_text)
        if root.tag == "testsuite":
            suite_nodes = [root]
        elif root.tag == "testsuites":
            suite_nodes = root.findall("testsuite")
        elif root.tag == _FRAGMENT_ROOT:
            suite_nodes = []
            for node in root:
                if node.tag == "testsuites":
                    suite_nodes.extend(node.findall("testsuite"))
                elif node.tag == "testsuite":
                    suite_nodes.append(node)
        else:
            logger.debug(f"Unrecognized report root <{root.tag}>, no suites found")
            suite_nodes = []

        suites = [self._parse_suite(node) for node in suite_nodes]
        logger.debug(f"Parsed {len(suites)} suites, {sum(s.tests for s in suites)} test cases")
        return suites

    def _parse_root(self, xml_text) -> ET.Element:
        try:
            return ET.fromstring(xml_text)
        except ET.ParseError as e:
            if e.code != _JUNK_AFTER_ROOT:
                raise JUnitParseError(f"Malformed JUnit XML: {e}") from e
            first_error = e

        try:
            text = _decode(xml_text) if isinstance(xml_text, bytes) else xml_text
        except (UnicodeDecodeError, LookupError):
            raise JUnitParseError(f"Malformed JUnit XML: {first_error}") from first_error
        body = _XML_DECLARATION.sub("", text, count=1)
        try:
            fragment = ET.fromstring(f"<{_FRAGMENT_ROOT}>{body}</{_FRAGMENT_ROOT}>")
        except ET.ParseError:
            raise JUnitParseError(f"Malformed JUnit XML: {first_error}") from first_error
        # Only elements may follow the first root, not stray text
        stray = [fragment.text] + [child.tail for child in fragment]
        if any(s and s.strip() for s in stray):
            raise JUnitParseError(f"Malformed JUnit XML: {first_error}") from first_error
        return fragment

    def _parse_suite(self, node: ET.Element) -> TestSuite:
        attrs = node.attrib
        return TestSuite(
            name=attrs.get("name"),
            file=first_present(attrs, "file", "filename"),
            time_seconds=parse_seconds(attrs.get("time")),
            test_cases=[self._parse_test_case(tc) for tc in node.findall("testcase")],
        )

    def _parse_test_case(self, node: ET.Element) -> TestCase:
        attrs = node.attrib
        return TestCase(
            name=attrs.get("name", UNNAMED_TEST),
            classname=first_present(attrs, "classname", "class"),
            time_seconds=parse_seconds(attrs.get("time")),
            file=first_present(attrs, "file", "filename"),
            failures=[self._parse_annotation(n, AnnotationKind.FAILURE) for n in node.findall("failure")],
            errors=[self._parse_annotation(n, AnnotationKind.ERROR) for n in node.findall("error")],
        )

    @staticmethod
    def _parse_annotation(node: ET.Element, kind: AnnotationKind) -> FailureAnnotation:
        details = "".join(node.itertext()).strip()
        return FailureAnnotation(
            kind=kind,
            message=node.get("message"),
            type=node.get("type"),
            details=details or None,
        )
