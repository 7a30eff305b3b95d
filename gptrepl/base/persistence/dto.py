"""
Pydantic DTOs for persisted context files.

Purpose
-------
Validate the records of a context file before they become
:class:`~gptrepl.base.models.Message` instances. Field types are enforced
strictly (a numeric ``content`` is a parse error, not coerced); missing fields
default to the empty string so a record without ``role`` reaches the role
check and is reported with its index.

Unknown keys are ignored.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, TypeAdapter


class MessageRecordDTO(BaseModel):
    """One ``{role, content}`` record as stored on disk."""

    model_config = ConfigDict(extra="ignore", strict=True)

    role: str = ""
    content: str = ""


ContextFileAdapter: TypeAdapter[Optional[List[MessageRecordDTO]]] = TypeAdapter(
    Optional[List[MessageRecordDTO]]
)


__all__ = ["MessageRecordDTO", "ContextFileAdapter"]
