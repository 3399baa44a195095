from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field

from api.shared.dtos import PaginationDTO

T = TypeVar("T")


class ResponseModel(BaseModel, Generic[T]):
    success: bool = Field(default=True, description="Whether the request succeeded")
    data: Optional[T] = Field(description="Response data", default=None)
    message: Optional[str] = Field(description="Response message", examples=["Success"])

    @classmethod
    def ok(
        cls, data: Optional[T] = None, message: str = "Success"
    ) -> "ResponseModel[T]":
        """Create a successful response."""
        return cls(success=True, data=data, message=message)


class PaginatedResponseModel(BaseModel, Generic[T]):
    success: bool = Field(default=True, description="Whether the request succeeded")
    data: List[T] = Field(description="Items on the requested page")
    message: Optional[str] = Field(description="Response message", examples=["Success"])
    pagination: PaginationDTO = Field(description="Page metadata")

    @classmethod
    def ok(
        cls, data: List[T], pagination: PaginationDTO, message: str = "Success"
    ) -> "PaginatedResponseModel[T]":
        """Create a successful paginated response."""
        return cls(success=True, data=data, message=message, pagination=pagination)


class ErrorResponse(BaseModel):
    """Error envelope returned for every non-streaming failure."""

    success: bool = Field(default=False)
    error: str = Field(description="Human-readable error message")

    @classmethod
    def of(cls, error: str) -> "ErrorResponse":
        return cls(success=False, error=error)
