"""
Shared schema building blocks.

Request bodies accept camelCase keys (snake_case also works); responses are
serialized with camelCase keys.
"""

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base model with camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class SuccessResponse(BaseModel, Generic[T]):
    """Envelope for a successful response."""

    success: bool = True
    data: T


class ListResponse(BaseModel, Generic[T]):
    """Envelope for a list response with a total count."""

    success: bool = True
    data: list[T]
    total: int


class MessageResponse(BaseModel):
    """Envelope carrying a human-readable message only."""

    success: bool = True
    message: str


class ErrorResponse(BaseModel):
    """Envelope for an error response."""

    success: bool = False
    error: str
