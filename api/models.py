"""
API response models and schemas for the FastAPI application.
"""

from datetime import datetime
from typing import Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class AuthorResponse(BaseModel):
    """Author response model for API."""
    id: str = Field(..., description="Unique author identifier")
    first_name: Optional[str] = Field(None, alias="firstName", description="Author first name")
    last_name: Optional[str] = Field(None, alias="lastName", description="Author last name")
    bio: Optional[str] = Field(None, description="Short biography")

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)


class BookResponse(BaseModel):
    """Book response model, author left as a raw reference."""
    id: str = Field(..., description="Unique book identifier")
    title: Optional[str] = Field(None, description="Book title")
    year: Optional[Union[int, float]] = Field(None, description="Publication year")
    code_isbn: Optional[str] = Field(None, alias="codeISBN", description="ISBN code")
    quantity: Optional[Union[int, float]] = Field(None, description="Copies in stock")
    genre: Optional[str] = Field(None, description="Book genre")
    author: Optional[str] = Field(None, description="Referenced author id")

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)


class BookDetailResponse(BookResponse):
    """Book response model with the author reference populated."""
    author: Optional[AuthorResponse] = Field(None, description="Referenced author record")


class ErrorResponse(BaseModel):
    """Error response model."""
    error: str = Field(..., description="Error message")
    detail: Optional[str] = Field(None, description="Additional error details")
    status_code: int = Field(..., description="HTTP status code")


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(..., description="Service status")
    timestamp: datetime = Field(..., description="Current timestamp")
    version: str = Field(..., description="API version")
    database_status: str = Field(..., description="Database connection status")
    counts: Dict[str, int] = Field(default_factory=dict, description="Documents per collection")
