"""
Normalized REPL error codes (taxonomy).

Defines the `ErrorCode` enumeration shared by the context store, persistence,
command dispatcher and completion layers. Values are lowercase snake_case and
are considered a stable contract for logging.
"""
from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Enumerated normalized error codes representing failure categories."""

    UNKNOWN_COMMAND = "unknown_command"
    INVALID_ARGUMENT_COUNT = "invalid_argument_count"
    MISSING_ARGUMENT = "missing_argument"
    INVALID_ARGUMENT = "invalid_argument"
    INVALID_ROLE = "invalid_role"
    INVALID_RANGE = "invalid_range"
    PARSE = "parse"
    IO = "io"
    # Network family: anything raised while establishing or consuming an exchange.
    NETWORK = "network"
    AUTH = "auth"
    RATE_LIMIT = "rate_limit"
    TIMEOUT = "timeout"
    UNAVAILABLE = "unavailable"

    @property
    def is_network(self) -> bool:
        return self in NETWORK_CODES


NETWORK_CODES = frozenset(
    {
        ErrorCode.NETWORK,
        ErrorCode.AUTH,
        ErrorCode.RATE_LIMIT,
        ErrorCode.TIMEOUT,
        ErrorCode.UNAVAILABLE,
    }
)


__all__ = ["ErrorCode", "NETWORK_CODES"]
