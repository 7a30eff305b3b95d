"""
Error classification helpers mapping exceptions to normalized ErrorCode values.

Implements HTTP status extraction, status-to-code mapping, and message-based
heuristics as a fallback so SDK and transport exceptions land in the network
family of the taxonomy.
"""
from __future__ import annotations

import asyncio
import json
from typing import Dict, Optional

from .error_code import ErrorCode
from .repl_error import ReplError


def _extract_status(exc: BaseException) -> Optional[int]:
    """Attempt to extract an HTTP status code from an SDK exception.

    Supported attribute shapes (checked in order):
    - ``exc.status_code``
    - ``exc.status``
    - ``exc.response.status_code``
    Returns ``None`` if no valid status can be found.
    """
    for attr in ("status_code", "status"):
        val = getattr(exc, attr, None)
        if isinstance(val, int) and 100 <= val < 600:
            return val
    resp = getattr(exc, "response", None)
    if resp is not None:
        sc = getattr(resp, "status_code", None)
        if isinstance(sc, int) and 100 <= sc < 600:
            return sc
    return None


_HTTP_STATUS_MAP: Dict[int, ErrorCode] = {
    401: ErrorCode.AUTH,
    403: ErrorCode.AUTH,
    408: ErrorCode.TIMEOUT,
    429: ErrorCode.RATE_LIMIT,
    502: ErrorCode.UNAVAILABLE,
    503: ErrorCode.UNAVAILABLE,
    504: ErrorCode.TIMEOUT,
}


def _heuristic_from_message(msg: str) -> Optional[ErrorCode]:  # pragma: no cover - simple mapping
    """Substring heuristic mapping for exceptions without a status code."""
    if "rate" in msg and "limit" in msg:
        return ErrorCode.RATE_LIMIT
    pattern_groups = (
        (ErrorCode.TIMEOUT, ("timeout", "timed out")),
        (ErrorCode.AUTH, ("unauthorized", "api key", "forbidden")),
        (ErrorCode.UNAVAILABLE, ("unavailable", "temporarily down")),
    )
    for code, patterns in pattern_groups:
        if any(p in msg for p in patterns):
            return code
    return None


def classify_exception(exc: BaseException) -> ErrorCode:
    """Classify an exception into a normalized :class:`ErrorCode`.

    Precedence:
        1. ReplError passthrough.
        2. Timeout exceptions (sync/async).
        3. Local failures: JSON decoding or ``ValueError`` -> ``PARSE``, other
           ``OSError`` -> ``IO``.
        4. HTTP status mapping.
        5. Substring heuristics.
        6. ``NETWORK`` fallback.
    """
    if isinstance(exc, ReplError):
        return exc.code
    if isinstance(exc, (TimeoutError, asyncio.TimeoutError)):
        return ErrorCode.TIMEOUT
    if isinstance(exc, (json.JSONDecodeError, ValueError)):
        return ErrorCode.PARSE
    status = _extract_status(exc)
    if status is not None:
        return _HTTP_STATUS_MAP.get(status, ErrorCode.NETWORK)
    if isinstance(exc, ConnectionError):
        return ErrorCode.NETWORK
    if isinstance(exc, OSError):
        return ErrorCode.IO
    code = _heuristic_from_message(str(exc).lower())
    return code if code is not None else ErrorCode.NETWORK


__all__ = [
    "classify_exception",
    "_extract_status",
    "_HTTP_STATUS_MAP",
]
