"""Source tree enumeration."""

from texweave.scanner.scanner import scan_tree

__all__ = ["scan_tree"]
