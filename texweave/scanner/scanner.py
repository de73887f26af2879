"""Worklist-based directory walk collecting source documents."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from texweave.reporting import Level, NullReporter, Reporter

logger = logging.getLogger(__name__)


def _relative(path: Path, root: Path) -> str:
    try:
        return str(path.relative_to(root))
    except ValueError:
        return str(path)


def scan_tree(
    root: Path,
    extension: str = ".tex",
    reporter: Reporter | None = None,
) -> list[Path]:
    """Return every regular file under *root* whose suffix is exactly *extension*.

    Directories are visited from an explicit stack, so arbitrarily deep trees
    never hit the recursion limit. Directory symlinks are followed, but a
    directory whose resolved form was already visited is skipped, which also
    breaks symlink cycles. Unreadable directories are reported and skipped.

    Returns an empty list when *root* is missing or not a directory. The
    order of the result is not part of the contract.
    """
    reporter = reporter or NullReporter()
    root = Path(root)
    if not root.is_dir():
        logger.debug("Scan root %s is not a directory", root)
        return []

    matches: list[Path] = []
    visited: set[str] = set()
    stack: list[Path] = [root]

    while stack:
        directory = stack.pop()
        real = os.path.realpath(directory)
        if real in visited:
            logger.debug("Already visited %s, skipping", directory)
            continue
        visited.add(real)

        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            reporter.report(
                Level.WARN, _relative(directory, root), f"Could not read directory: {e}"
            )
            logger.debug("Could not read directory %s: %s", directory, e)
            continue

        subdirs: list[Path] = []
        for entry in entries:
            try:
                if entry.is_dir():
                    subdirs.append(Path(entry.path))
                elif entry.is_file() and Path(entry.name).suffix == extension:
                    matches.append(Path(entry.path))
            except OSError as e:
                logger.debug("Skipping %s: %s", entry.path, e)

        # Reversed so the stack pops subdirectories in name order
        stack.extend(reversed(subdirs))

    logger.debug("Found %d %s file(s) under %s", len(matches), extension, root)
    return matches
