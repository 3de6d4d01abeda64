"""
Selection engine: stats, failures, slow tests and slow suites for parsed suites.
"""

import logging
import math
from typing import Optional

from .models import (
    AnalysisOptions,
    FailedTest,
    JUnitReport,
    SlowSuite,
    SlowTest,
    TestStats,
    TestSuite,
)

logger = logging.getLogger(__name__)


def quantile_inclusive(values: list[float], q: float) -> Optional[float]:
    """Inclusive nearest-rank quantile. Returns None for an empty list."""
    if not values:
        return None
    ordered = sorted(values)
    rank = max(1, math.ceil(q * len(ordered)))  # 1-based
    return ordered[min(rank, len(ordered)) - 1]


def select_slow_tests(timed: list[SlowTest], threshold: float, top_n: int) -> list[SlowTest]:
    """Tests strictly slower than threshold, slowest first, at most top_n."""
    slow = [t for t in timed if t.time > threshold]
    # sorted() is stable, ties keep encounter order
    return sorted(slow, key=lambda t: t.time, reverse=True)[:top_n]


def select_slow_suites(pool: list[SlowSuite], quantile: float, min_keep: int) -> list[SlowSuite]:
    """Suites at or above the quantile duration, padded up to min_keep from the full pool."""
    threshold = quantile_inclusive([s.total_time for s in pool], quantile)
    if threshold is None:
        return []

    selected = sorted(
        (s for s in pool if s.total_time >= threshold),
        key=lambda s: s.total_time,
        reverse=True,
    )
    if len(selected) < min_keep:
        logger.debug(f"Quantile {quantile} kept {len(selected)} suites, using top {min_keep} instead")
        selected = sorted(pool, key=lambda s: s.total_time, reverse=True)[:min_keep]
    return selected


def analyze(suites: list[TestSuite], options: Optional[AnalysisOptions] = None) -> JUnitReport:
    """Compute the report for already parsed suites. The suites are not modified."""
    options = options or AnalysisOptions()
    report = JUnitReport()
    stats = report.stats
    stats.total_suites = len(suites)

    timed_tests: list[SlowTest] = []
    suite_pool: list[SlowSuite] = []

    for suite in suites:
        stats.total_tests += suite.tests
        failed_in_suite = 0

        for tc in suite.test_cases:
            if tc.time_seconds is not None:
                timed_tests.append(SlowTest(
                    test_name=tc.name,
                    time=tc.time_seconds,
                    suite_name=suite.name,
                    class_name=tc.classname,
                    file=tc.file,
                ))

            if not tc.failed:
                continue
            failed_in_suite += 1
            for annotation in tc.annotations:
                report.failed.append(FailedTest(
                    test_name=tc.name,
                    status=annotation.kind,
                    suite_name=suite.name,
                    class_name=tc.classname,
                    time=tc.time_seconds,
                    message=annotation.message,
                    type=annotation.type,
                    details=annotation.details,
                    file=tc.file,
                ))

        stats.failed_tests += failed_in_suite
        if failed_in_suite:
            stats.failed_suites += 1

        total_time = suite.total_time
        if math.isfinite(total_time):
            suite_pool.append(SlowSuite(
                total_time=total_time,
                total_tests=suite.tests,
                failed_tests=failed_in_suite,
                suite_name=suite.name,
                file=suite.resolved_file,
            ))

    report.slow_tests = select_slow_tests(
        timed_tests, options.slow_test_threshold_sec, options.top_slow_tests
    )
    report.slow_suites = select_slow_suites(
        suite_pool, options.slow_suites_quantile, options.min_keep_suites
    )

    logger.debug(
        f"Analyzed {stats.total_suites} suites: {stats.failed_tests}/{stats.total_tests} failed, "
        f"{len(report.slow_tests)} slow tests, {len(report.slow_suites)} slow suites"
    )
    return report
