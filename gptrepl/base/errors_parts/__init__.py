"""Errors parts package public surface.

Re-exports individual error taxonomy components for optional direct imports.
Prefer importing from `gptrepl.base.errors` for the stable surface.
"""

from .error_code import ErrorCode, NETWORK_CODES
from .repl_error import ReplError
from .classification import classify_exception

__all__ = ["ErrorCode", "NETWORK_CODES", "ReplError", "classify_exception"]
