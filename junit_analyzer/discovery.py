"""
Discovery of JUnit-like XML report files in a project tree.
"""

import logging
import os
import re

logger = logging.getLogger(__name__)

# Directories never descended into
DEFAULT_IGNORE_DIRS = {
    "node_modules",
    ".git",
    "dist",
    "build",
    "out",
    ".next",
}

# Matched against the root-relative path, so a "junit" directory also qualifies
JUNIT_PATH_PATTERN = re.compile(r'(?:^|/)(?:test-.*|.*junit.*)\.xml$', re.IGNORECASE)


def list_junit_xml_paths(root: str = ".", max_depth: int = 3) -> list[str]:
    """
    Find JUnit-like XML files up to a given depth.

    Args:
        root: Directory to search
        max_depth: Maximum number of path components below root; a file
            directly in root has depth 1

    Returns:
        Root-relative paths using "/" separators, in sorted walk order
    """
    if max_depth < 1:
        raise ValueError(f"max_depth must be at least 1, got {max_depth}")

    found = []
    for dirpath, dirs, files in os.walk(root, followlinks=False):
        rel_dir = os.path.relpath(dirpath, root)
        depth = 0 if rel_dir == os.curdir else len(rel_dir.split(os.sep))

        if depth + 1 >= max_depth:
            dirs[:] = []
        else:
            kept = []
            for d in sorted(dirs):
                if d.lower() in DEFAULT_IGNORE_DIRS or d.startswith('.'):
                    logger.debug(f"Skipping ignored directory: {os.path.join(dirpath, d)}")
                    continue
                kept.append(d)
            dirs[:] = kept

        for name in sorted(files):
            if name.startswith('.') or not name.lower().endswith('.xml'):
                continue
            rel_path = name if depth == 0 else os.path.join(rel_dir, name)
            rel_path = rel_path.replace('\\', '/')
            if JUNIT_PATH_PATTERN.search(rel_path):
                found.append(rel_path)

    logger.info(f"Discovered {len(found)} JUnit XML files under {root} (max depth {max_depth})")
    return found
