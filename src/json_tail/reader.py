"""Reading and diffing the watched JSON file.

The watched file holds a single JSON array of strings. Every poll re-reads and
re-decodes the whole file; entries are identified by position only.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from pathlib import Path

from .exceptions import EntryFormatError, EntryReadError, WatchTargetError


def validate_file(path: Path) -> Path:
    """Check that the target exists, is a regular file and can be opened.

    Args:
        path: File path given on the command line

    Returns:
        Absolute path to the file

    Raises:
        WatchTargetError: If the file is missing, a directory, or unreadable
    """
    try:
        is_dir = path.is_dir()
        exists = is_dir or path.exists()
    except OSError as err:
        raise WatchTargetError(f"error accessing file: {err}") from err

    if not exists:
        raise WatchTargetError(f"file not found: {path}")
    if is_dir:
        raise WatchTargetError(f"{path} is a directory")

    try:
        with path.open("rb"):
            pass
    except OSError as err:
        raise WatchTargetError(f"error opening file: {err}") from err

    return path.absolute()


def read_entries(path: Path) -> list[str]:
    """Read and decode the watched file.

    Args:
        path: Path to a UTF-8 file containing a JSON array of strings

    Returns:
        Decoded entries in file order

    Raises:
        EntryReadError: If the file cannot be read
        EntryFormatError: If the content is not a JSON array of strings
    """
    try:
        raw = path.read_bytes()
    except OSError as err:
        raise EntryReadError(f"error reading file: {err}") from err

    try:
        data = json.loads(raw.decode("utf-8"))
    except UnicodeDecodeError as err:
        raise EntryFormatError(f"file is not valid UTF-8: {err}") from err
    except json.JSONDecodeError as err:
        raise EntryFormatError(f"error parsing JSON: {err}") from err

    if not isinstance(data, list):
        raise EntryFormatError(f"expected a JSON array, got {type(data).__name__}")
    for index, item in enumerate(data):
        if not isinstance(item, str):
            raise EntryFormatError(
                f"expected string at index {index}, got {type(item).__name__}"
            )
    return data


def last_n(entries: Sequence[str], n: int) -> list[str]:
    """Return the last n entries, or all of them if there are fewer."""
    if n <= 0:
        return []
    if len(entries) <= n:
        return list(entries)
    return list(entries[len(entries) - n :])


def new_entries(entries: Sequence[str], last_seen_count: int) -> list[str]:
    """Return the entries appended after the first last_seen_count ones.

    A list that did not grow (or shrank) yields an empty list.
    """
    if len(entries) <= last_seen_count:
        return []
    return list(entries[last_seen_count:])
