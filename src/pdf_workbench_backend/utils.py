"""
Utility functions for file system operations and string sanitization.

This module provides helper functions for:
- Sanitizing uploaded filenames for safe filesystem usage
- Ensuring directory creation
- Removing per-request upload directories
"""

from __future__ import annotations

import re
import shutil
from pathlib import Path

# Characters allowed in a stored filename stem
SANITIZE_PATTERN = re.compile(r"[^a-zA-Z0-9_-]+")


def sanitize_filename(filename: str, fallback: str = "document") -> str:
    """
    Generate a filesystem-safe ``.pdf`` filename from user input.

    Args:
        filename: The original filename as sent by the client
        fallback: Stem to use if sanitization leaves nothing

    Returns:
        A safe filename that always ends in ``.pdf``

    Example:
        >>> sanitize_filename("../My Report (final).PDF")
        "My-Report-final.pdf"
        >>> sanitize_filename("@#$")
        "document.pdf"
    """
    stem = Path(filename).stem
    cleaned = SANITIZE_PATTERN.sub("-", stem).strip("-_")
    return f"{cleaned or fallback}.pdf"


def ensure_directory(path: Path) -> Path:
    """
    Create a directory if it doesn't exist, including parent directories.

    Args:
        path: The directory path to create

    Returns:
        The same path object for chaining

    Raises:
        OSError: If directory creation fails due to permissions or other I/O errors
    """
    path.mkdir(parents=True, exist_ok=True)
    return path


def remove_tree(path: Path) -> None:
    """Delete a directory and everything below it; missing paths are ignored."""
    shutil.rmtree(path, ignore_errors=True)
