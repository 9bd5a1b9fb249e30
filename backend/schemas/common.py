from typing import Optional

from pydantic import BaseModel

from errors import ErrorCode


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    """Body of every error produced from a domain error."""

    status: int
    code: ErrorCode
    message: str
    field: Optional[str] = None
