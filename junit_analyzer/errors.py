"""Exceptions raised by the JUnit analyzer."""


class JUnitAnalyzerError(Exception):
    """Base class for analyzer errors."""


class JUnitParseError(JUnitAnalyzerError):
    """The report text is not well-formed XML."""


class ReportReadError(JUnitAnalyzerError):
    """The report file could not be read."""

    def __init__(self, path, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Cannot read JUnit report {self.path}: {reason}")
