"""Custom exceptions for json-tail.

Startup errors (bad config, inaccessible target file) are fatal and end the
process. Entry errors are raised per poll cycle and are recoverable.
"""


class JsonTailError(Exception):
    """Base exception for all json-tail errors."""


class ConfigError(JsonTailError):
    """Raised when configuration is invalid or cannot be loaded."""


class WatchTargetError(JsonTailError):
    """Raised when the file to watch is missing, a directory, or unreadable."""


class EntryError(JsonTailError):
    """Base class for recoverable failures while reading entries."""


class EntryReadError(EntryError):
    """Raised when the watched file cannot be read."""


class EntryFormatError(EntryError):
    """Raised when file content is not a JSON array of strings."""


class TerminalBusyError(JsonTailError):
    """Raised when writing to a terminal currently held by someone else."""


class ChannelClosedError(JsonTailError):
    """Raised when sending to or receiving from a closed channel."""
