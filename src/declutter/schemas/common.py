"""Response envelopes shared by every router.

Success bodies are either `{"data": ...}` (reads, creates, updates) or
`{"success": true, "message": ...}` (deletes, logout).
"""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class DataResponse(BaseModel, Generic[T]):
    data: T


class SuccessResponse(BaseModel):
    success: bool = True
    message: str


class StatusChange(BaseModel):
    """Body of PATCH /quotes/:id/status and /jobs/:id/status.

    Untyped: the workflow decides what's valid so a bad
    value gets the same "Invalid status" error as everywhere else.
    """
    status: Any = None
