"""
Data models for JUnit report analysis.
"""

import math
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

UNNAMED_TEST = "(unnamed)"


class AnnotationKind(Enum):
    """Kind of a failure annotation attached to a test case."""
    FAILURE = "failure"
    ERROR = "error"


@dataclass
class FailureAnnotation:
    """One <failure> or <error> node of a test case."""
    kind: AnnotationKind
    message: Optional[str] = None
    type: Optional[str] = None
    details: Optional[str] = None


@dataclass
class TestCase:
    """Represents a single test case result."""
    __test__ = False

    name: str = UNNAMED_TEST
    classname: Optional[str] = None
    time_seconds: Optional[float] = None
    file: Optional[str] = None
    failures: list[FailureAnnotation] = field(default_factory=list)
    errors: list[FailureAnnotation] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        return bool(self.failures or self.errors)

    @property
    def annotations(self) -> list[FailureAnnotation]:
        """Failures first, then errors, each in node order."""
        return self.failures + self.errors


@dataclass
class TestSuite:
    """Represents a test suite (collection of test cases)."""
    __test__ = False

    name: Optional[str] = None
    file: Optional[str] = None
    time_seconds: Optional[float] = None
    test_cases: list[TestCase] = field(default_factory=list)

    @property
    def tests(self) -> int:
        return len(self.test_cases)

    @property
    def failed_tests(self) -> int:
        return sum(1 for tc in self.test_cases if tc.failed)

    @property
    def total_time(self) -> float:
        """Declared suite time, or the sum of the known test case times."""
        if self.time_seconds is not None:
            return self.time_seconds
        return sum(tc.time_seconds for tc in self.test_cases if tc.time_seconds is not None)

    @property
    def resolved_file(self) -> Optional[str]:
        """Declared suite file, or the most frequent file among its test cases."""
        if self.file is not None:
            return self.file
        # most_common keeps first-encountered order among equal counts
        counts = Counter(tc.file for tc in self.test_cases if tc.file)
        if not counts:
            return None
        return counts.most_common(1)[0][0]


@dataclass(frozen=True)
class AnalysisOptions:
    """Selection policy for slow tests and slow suites."""
    slow_test_threshold_sec: float = 5
    top_slow_tests: int = 20
    slow_suites_quantile: float = 0.8
    min_keep_suites: int = 1

    def __post_init__(self):
        if isinstance(self.slow_test_threshold_sec, bool) or not math.isfinite(self.slow_test_threshold_sec):
            raise ValueError(f"slow_test_threshold_sec must be a finite number, got {self.slow_test_threshold_sec!r}")
        if not 0 <= self.slow_suites_quantile <= 1:
            raise ValueError(f"slow_suites_quantile must be within [0, 1], got {self.slow_suites_quantile!r}")
        for name in ("top_slow_tests", "min_keep_suites"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValueError(f"{name} must be a non-negative integer, got {value!r}")


def _compact(data: dict) -> dict:
    """Drop keys whose value is None."""
    return {k: v for k, v in data.items() if v is not None}


@dataclass
class FailedTest:
    """One failure/error annotation flattened with its test and suite context."""
    test_name: str
    status: AnnotationKind
    suite_name: Optional[str] = None
    class_name: Optional[str] = None
    time: Optional[float] = None
    message: Optional[str] = None
    type: Optional[str] = None
    details: Optional[str] = None
    file: Optional[str] = None

    def to_dict(self) -> dict:
        return _compact({
            "suiteName": self.suite_name,
            "className": self.class_name,
            "testName": self.test_name,
            "time": self.time,
            "status": self.status.value,
            "message": self.message,
            "type": self.type,
            "details": self.details,
            "file": self.file,
        })


@dataclass
class SlowTest:
    test_name: str
    time: float
    suite_name: Optional[str] = None
    class_name: Optional[str] = None
    file: Optional[str] = None

    def to_dict(self) -> dict:
        return _compact({
            "suiteName": self.suite_name,
            "className": self.class_name,
            "testName": self.test_name,
            "time": self.time,
            "file": self.file,
        })


@dataclass
class SlowSuite:
    total_time: float
    total_tests: int
    failed_tests: int
    suite_name: Optional[str] = None
    file: Optional[str] = None

    def to_dict(self) -> dict:
        return _compact({
            "suiteName": self.suite_name,
            "totalTime": self.total_time,
            "totalTests": self.total_tests,
            "failedTests": self.failed_tests,
            "file": self.file,
        })


@dataclass
class TestStats:
    __test__ = False

    total_suites: int = 0
    failed_suites: int = 0
    total_tests: int = 0
    failed_tests: int = 0

    @property
    def passed_tests(self) -> int:
        return self.total_tests - self.failed_tests

    def to_dict(self) -> dict:
        return {
            "totalSuites": self.total_suites,
            "failedSuites": self.failed_suites,
            "totalTests": self.total_tests,
            "failedTests": self.failed_tests,
            "passedTests": self.passed_tests,
        }


@dataclass
class JUnitReport:
    """Stats, failures and the two slow-item selections for one report."""
    stats: TestStats = field(default_factory=TestStats)
    failed: list[FailedTest] = field(default_factory=list)
    slow_tests: list[SlowTest] = field(default_factory=list)
    slow_suites: list[SlowSuite] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "stats": self.stats.to_dict(),
            "failed": [f.to_dict() for f in self.failed],
            "slowTopQuantileTests": [t.to_dict() for t in self.slow_tests],
            "slowTopQuantileSuites": [s.to_dict() for s in self.slow_suites],
        }
