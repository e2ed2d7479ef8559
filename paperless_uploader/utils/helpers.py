"""
Helper utilities for the Paperless uploader.

Common path and formatting functions used across modules.
"""

from pathlib import Path
from typing import Iterator


def normalise_path(path: Path) -> Path:
    """Return a resolved version of ``path`` without forcing existence."""

    try:
        return path.expanduser().resolve()
    except FileNotFoundError:
        return path.expanduser().absolute()


def ensure_directory(path: Path) -> bool:
    """
    Create ``path`` (and parents) if it does not exist yet.

    Returns:
        True if the directory was created, False if it already existed
    """
    if path.is_dir():
        return False
    path.mkdir(parents=True, exist_ok=True)
    return True


def iter_regular_files(root: Path) -> Iterator[Path]:
    """Yield every regular file below ``root``, descending into subdirectories."""

    for child in sorted(root.rglob("*")):
        if child.is_file():
            yield child


def mask_api_key(api_key: str) -> str:
    """Keep only the last four characters of an API key for logging."""
    if len(api_key) > 4:
        return "..." + api_key[-4:]
    return "(too short to be valid)"


def truncate(text: str, limit: int = 2048) -> str:
    """Cap ``text`` at ``limit`` characters, marking the cut."""
    if len(text) <= limit:
        return text
    return text[:limit] + "...(truncated)"
