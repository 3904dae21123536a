# app/schemas/common.py
from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """
    Envelope shared by every response: {success, message?, data?, error?}.

    `count` is only filled by list endpoints.
    """

    success: bool = True
    message: str | None = None
    data: T | None = None
    error: str | None = None
    count: int | None = None
