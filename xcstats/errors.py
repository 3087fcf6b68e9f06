"""
Exception types raised by the query layer.

"No such entity" and "no matching flights" are not errors: lookups return
None and listings return an empty page. Only malformed input and an
unreachable data store are raised.
"""


class XCStatsError(Exception):
    """Base class for all XC Stats errors."""


class InvalidFilterError(XCStatsError, ValueError):
    """A filter or paging parameter could not be coerced to its type."""

    def __init__(self, key: str, value, reason: str):
        self.key = key
        self.value = value
        self.reason = reason
        super().__init__(f'Invalid value for {key!r}: {value!r} ({reason})')


class StoreUnavailableError(XCStatsError):
    """The flight database could not be reached."""
