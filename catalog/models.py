"""
Pydantic record models for the authors and books collections.
Defines the stored schema of each document and how request data is coerced into it.
"""

from typing import Any, Dict, Optional, Union

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field, field_validator


class AuthorRecord(BaseModel):
    """
    Author document schema. Every field is optional free-form text.
    """
    first_name: Optional[str] = Field(None, alias="firstName", description="Author first name")
    last_name: Optional[str] = Field(None, alias="lastName", description="Author last name")
    bio: Optional[str] = Field(None, description="Short biography")

    model_config = ConfigDict(
        populate_by_name=True,
        coerce_numbers_to_str=True,
        extra="ignore",
        json_schema_extra={
            "example": {
                "firstName": "Jane",
                "lastName": "Doe",
                "bio": "Writes about libraries.",
            }
        },
    )

    def to_document(self) -> Dict[str, Any]:
        """Fields the client actually sent, keyed the way they are stored."""
        return self.model_dump(by_alias=True, exclude_unset=True)


class BookRecord(BaseModel):
    """
    Book document schema.

    ``author`` is a weak reference to an author ``_id``. It is kept as a hex
    string on the model and stored as an ObjectId; nothing checks that the
    author exists.
    """
    title: Optional[str] = Field(None, description="Book title")
    year: Optional[Union[int, float]] = Field(None, description="Publication year")
    code_isbn: Optional[str] = Field(None, alias="codeISBN", description="ISBN code, not unique")
    quantity: Optional[Union[int, float]] = Field(None, description="Copies in stock")
    genre: Optional[str] = Field(None, description="Book genre")
    author: Optional[str] = Field(None, description="Referenced author id")

    model_config = ConfigDict(
        populate_by_name=True,
        coerce_numbers_to_str=True,
        extra="ignore",
        json_schema_extra={
            "example": {
                "title": "A Light in the Attic",
                "year": 1981,
                "codeISBN": "978-0060256739",
                "quantity": 3,
                "genre": "Poetry",
                "author": "65a1f0c2e4b0a1b2c3d4e5f6",
            }
        },
    )

    @field_validator("author", mode="before")
    @classmethod
    def validate_author_reference(cls, v):
        """Accept ObjectIds and their hex form only."""
        if v is None:
            return v
        if isinstance(v, ObjectId):
            return str(v)
        if not isinstance(v, str) or not ObjectId.is_valid(v):
            raise ValueError("author must be a valid ObjectId")
        return v

    def to_document(self) -> Dict[str, Any]:
        """
        Fields the client actually sent, keyed the way they are stored.

        Used for inserts and for the ``$set`` of a partial update alike, so
        unset fields never overwrite stored values.
        """
        document = self.model_dump(by_alias=True, exclude_unset=True)
        if document.get("author") is not None:
            document["author"] = ObjectId(document["author"])
        return document
