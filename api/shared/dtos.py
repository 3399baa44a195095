"""Shared DTOs for the Chat API."""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class BaseDTO(BaseModel):
    """Base DTO: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class PaginationDTO(BaseDTO):
    """Page metadata for list endpoints."""

    page: int = Field(description="Current page (1-based)")
    limit: int = Field(description="Page size")
    total_pages: int = Field(description="Number of pages")
    total_items: int = Field(description="Number of items across all pages")
    has_next_page: bool = Field(description="Whether a next page exists")
    has_previous_page: bool = Field(description="Whether a previous page exists")
    next_page: Optional[int] = Field(default=None, description="Next page number")
    previous_page: Optional[int] = Field(default=None, description="Previous page number")

