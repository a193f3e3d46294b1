"""
Database service layer for the FastAPI application.

Route handlers talk to the store only through ``LibraryStore``. The motor
backed ``APIDatabaseService`` is the production implementation; tests swap in
their own.
"""

from typing import Any, Dict, List, Optional, Protocol

import structlog
from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from api.models import AuthorResponse, BookDetailResponse, BookResponse
from catalog.models import AuthorRecord, BookRecord

logger = structlog.get_logger(__name__)


class LibraryStore(Protocol):
    """Contract between the route handlers and the document store."""

    async def list_authors(self) -> List[AuthorResponse]: ...

    async def create_author(self, payload: Dict[str, Any]) -> AuthorResponse: ...

    async def list_books(self) -> List[BookResponse]: ...

    async def get_book_by_id(self, book_id: str) -> Optional[BookDetailResponse]: ...

    async def create_book(self, payload: Dict[str, Any]) -> BookResponse: ...

    async def update_book(self, book_id: str, payload: Dict[str, Any]) -> Optional[BookResponse]: ...

    async def delete_book(self, book_id: str) -> bool: ...

    async def health_check(self) -> Dict: ...


def serialize_document(document: Dict[str, Any]) -> Dict[str, Any]:
    """Rename ``_id`` to ``id`` and render ObjectIds as hex strings."""
    serialized = {}
    for key, value in document.items():
        if key == "_id":
            key = "id"
        if isinstance(value, ObjectId):
            value = str(value)
        serialized[key] = value
    return serialized


def _as_object_id(value: Any) -> Optional[ObjectId]:
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return None


class APIDatabaseService:
    """Database service for API operations."""

    def __init__(
        self,
        database: AsyncIOMotorDatabase,
        books_collection: str = "books",
        authors_collection: str = "authors",
    ):
        self.database = database
        self.books_collection = database[books_collection]
        self.authors_collection = database[authors_collection]

    async def list_authors(self) -> List[AuthorResponse]:
        """Get every author, unfiltered."""
        try:
            author_docs = await self.authors_collection.find({}).to_list(length=None)
            return [AuthorResponse(**serialize_document(doc)) for doc in author_docs]
        except Exception as e:
            logger.error("Failed to list authors", error=str(e))
            raise

    async def create_author(self, payload: Dict[str, Any]) -> AuthorResponse:
        """
        Insert a new author.

        Args:
            payload: Request body; only the author fields are kept

        Returns:
            The stored author with its generated id
        """
        try:
            document = AuthorRecord.model_validate(payload).to_document()
            result = await self.authors_collection.insert_one(document)
            document["_id"] = result.inserted_id
            logger.debug("Inserted author", author_id=str(result.inserted_id))
            return AuthorResponse(**serialize_document(document))
        except Exception as e:
            logger.error("Failed to create author", error=str(e))
            raise

    async def list_books(self) -> List[BookResponse]:
        """Get every book, author left as a raw reference."""
        try:
            book_docs = await self.books_collection.find({}).to_list(length=None)
            return [BookResponse(**serialize_document(doc)) for doc in book_docs]
        except Exception as e:
            logger.error("Failed to list books", error=str(e))
            raise

    async def get_book_by_id(self, book_id: str) -> Optional[BookDetailResponse]:
        """
        Get a single book by ID with its author populated.

        Args:
            book_id: Book identifier (24 character hex ObjectId)

        Returns:
            BookDetailResponse if found, None otherwise. A reference to a
            missing author populates as None.

        Raises:
            bson.errors.InvalidId: if ``book_id`` is not an ObjectId
        """
        try:
            book_doc = await self.books_collection.find_one({"_id": ObjectId(book_id)})
            if not book_doc:
                return None

            author_id = _as_object_id(book_doc.get("author"))
            book = serialize_document(book_doc)
            book["author"] = None

            if author_id is not None:
                author_doc = await self.authors_collection.find_one({"_id": author_id})
                if author_doc:
                    book["author"] = AuthorResponse(**serialize_document(author_doc))

            return BookDetailResponse(**book)

        except Exception as e:
            logger.error("Failed to get book by ID", book_id=book_id, error=str(e))
            raise

    async def create_book(self, payload: Dict[str, Any]) -> BookResponse:
        """
        Insert a new book.

        Args:
            payload: Request body; only the book fields are kept

        Returns:
            The stored book with its generated id
        """
        try:
            document = BookRecord.model_validate(payload).to_document()
            result = await self.books_collection.insert_one(document)
            document["_id"] = result.inserted_id
            logger.debug("Inserted book", book_id=str(result.inserted_id))
            return BookResponse(**serialize_document(document))
        except Exception as e:
            logger.error("Failed to create book", error=str(e))
            raise

    async def update_book(self, book_id: str, payload: Dict[str, Any]) -> Optional[BookResponse]:
        """
        Set the provided fields on a book and return the updated document.

        Args:
            book_id: Book identifier
            payload: Partial book fields; absent fields keep their stored value

        Returns:
            BookResponse after the update, None if no book matched
        """
        try:
            object_id = ObjectId(book_id)
            changes = BookRecord.model_validate(payload).to_document()

            if changes:
                book_doc = await self.books_collection.find_one_and_update(
                    {"_id": object_id},
                    {"$set": changes},
                    return_document=ReturnDocument.AFTER,
                )
            else:
                # MongoDB rejects an empty $set
                book_doc = await self.books_collection.find_one({"_id": object_id})

            if not book_doc:
                logger.warning("Book not found for update", book_id=book_id)
                return None
            return BookResponse(**serialize_document(book_doc))

        except Exception as e:
            logger.error("Failed to update book", book_id=book_id, error=str(e))
            raise

    async def delete_book(self, book_id: str) -> bool:
        """
        Delete a book by ID.

        Returns:
            bool: True if deleted, False if not found
        """
        try:
            result = await self.books_collection.delete_one({"_id": ObjectId(book_id)})
            if result.deleted_count > 0:
                logger.debug("Deleted book", book_id=book_id)
                return True
            logger.warning("Book not found for deletion", book_id=book_id)
            return False
        except Exception as e:
            logger.error("Failed to delete book", book_id=book_id, error=str(e))
            raise

    async def health_check(self) -> Dict:
        """
        Perform database health check.

        Returns:
            Dictionary with health status
        """
        try:
            await self.database.command("ping")

            books_count = await self.books_collection.count_documents({})
            authors_count = await self.authors_collection.count_documents({})

            return {
                "status": "healthy",
                "books_count": books_count,
                "authors_count": authors_count
            }
        except Exception as e:
            logger.error("Database health check failed", error=str(e))
            return {
                "status": "unhealthy",
                "error": str(e)
            }
