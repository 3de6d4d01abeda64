#!/usr/bin/env python3
"""CLI for JUnit Test Analyzer."""

import argparse
import json
import logging
import sys

import core
from junit_analyzer.errors import JUnitAnalyzerError


def setup_logging(verbose: bool = False):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(levelname)s: %(message)s'
    )


def cmd_parse(args):
    """Parse and analyze a JUnit XML report."""
    try:
        options = core.build_options(
            slow_test_threshold_sec=args.threshold,
            top_slow_tests=args.top,
            slow_suites_quantile=args.quantile,
            min_keep_suites=args.min_keep_suites,
        )
        result = core.parse_junit_file(args.path, options)
    except (JUnitAnalyzerError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.format == 'json':
        print(json.dumps(result, indent=2))
    else:
        _print_report(args.path, result, options)

    return 0 if result["stats"]["failedTests"] == 0 else 1


def _print_report(path: str, result: dict, options):
    """Print human-readable report."""
    stats = result["stats"]
    print(f"\n{'='*60}")
    print(f"File: {path}")
    print(f"Suites: {stats['totalSuites']} (failed: {stats['failedSuites']})")
    print(f"Tests: {stats['totalTests']} (failed: {stats['failedTests']}, passed: {stats['passedTests']})")

    slow_tests = result["slowTopQuantileTests"]
    if slow_tests:
        print(f"\nSlowest Tests (> {options.slow_test_threshold_sec:g}s, top {options.top_slow_tests}):")
        for t in slow_tests:
            name = ".".join(p for p in (t.get("className"), t["testName"]) if p)
            print(f"  {t['time']:8.1f}s  {name[:70]}  [{t.get('suiteName', '-')}] {t.get('file', '')}")

    slow_suites = result["slowTopQuantileSuites"]
    if slow_suites:
        print(f"\nSlowest Suites (quantile {options.slow_suites_quantile:g}):")
        for s in slow_suites:
            print(f"  {s['totalTime']:8.1f}s  {s.get('suiteName', '(unnamed)')}  "
                  f"{s['failedTests']}/{s['totalTests']} failed  {s.get('file', '')}")

    failed = result["failed"]
    if failed:
        print(f"\nFailed Tests ({len(failed)}):")
        for t in failed[:20]:
            time = f" ({t['time']:.1f}s)" if "time" in t else ""
            print(f"  - [{t['status']}] {t.get('suiteName', '-')} > {t.get('className', '-')} > {t['testName']}{time}")
            if t.get("message"):
                print(f"      {t['message'][:100]}")
        if len(failed) > 20:
            print(f"  ... and {len(failed) - 20} more")
    elif stats["totalTests"]:
        print("\nAll tests passed.")

    print(f"{'='*60}\n")


def cmd_discover(args):
    """Discover JUnit XML files."""
    try:
        result = core.discover_junit_files(args.root, args.max_depth)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.format == 'json':
        print(json.dumps(result, indent=2))
        return 0

    files = result["files"]
    print(f"JUnit XML files under {args.root} (depth <= {result['max_depth']}): {len(files)}")
    for f in files:
        print(f"  - {f}")
    return 0


def cmd_relpath(args):
    """Print the relative path from base to target."""
    print(core.path_relative(args.base, args.target))
    return 0


def cmd_cwd(_args):
    """Print the working directory."""
    print(core.get_working_directory())
    return 0


def cmd_prompt(args):
    """Print the rendered JunitParse prompt."""
    print(core.render_junit_parse_prompt(max_depth=args.max_depth))
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(description='JUnit Test Analyzer')
    parser.add_argument('-v', '--verbose', action='store_true')

    sub = parser.add_subparsers(dest='command')

    # parse (mirrors parse_junit_xml)
    p = sub.add_parser('parse', help='Analyze a JUnit XML report (MCP: parse_junit_xml)')
    p.add_argument('path', help='Path to a JUnit XML report file')
    p.add_argument('--threshold', type=float, help='Slow test threshold in seconds (default: 5)')
    p.add_argument('--top', type=int, help='Max number of slow tests (default: 20)')
    p.add_argument('--quantile', type=float, help='Slow suite quantile 0..1 (default: 0.8)')
    p.add_argument('--min-keep-suites', type=int, help='Minimum slow suites to keep (default: 1)')
    p.add_argument('--format', '-f', choices=['text', 'json'], default='text')

    # discover (mirrors discover_junit_files)
    p = sub.add_parser('discover', help='Discover JUnit XML files (MCP: discover_junit_files)')
    p.add_argument('--root', default='.', help='Directory to search (default: .)')
    p.add_argument('--max-depth', type=int, help='Maximum search depth (default: 3)')
    p.add_argument('--format', '-f', choices=['text', 'json'], default='text')

    # relpath (mirrors path_relative)
    p = sub.add_parser('relpath', help='Relative path between two files (MCP: path_relative)')
    p.add_argument('base', help='Base file path to resolve from')
    p.add_argument('target', help='Target file path to resolve to')

    # cwd (mirrors get_working_directory)
    sub.add_parser('cwd', help='Print the working directory (MCP: get_working_directory)')

    # prompt (mirrors JunitParse)
    p = sub.add_parser('prompt', help='Render the analysis prompt (MCP prompt: JunitParse)')
    p.add_argument('--max-depth', type=int, help='Maximum search depth (default: 3)')

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    setup_logging(args.verbose)

    cmds = {
        'parse': cmd_parse,
        'discover': cmd_discover,
        'relpath': cmd_relpath,
        'cwd': cmd_cwd,
        'prompt': cmd_prompt,
    }
    return cmds[args.command](args)


if __name__ == '__main__':
    sys.exit(main())
