"""
Pytest configuration and shared fixtures.
"""

from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from api.database import serialize_document
from api.main import create_app
from api.models import AuthorResponse, BookDetailResponse, BookResponse
from catalog.models import AuthorRecord, BookRecord


class InMemoryLibraryStore:
    """
    LibraryStore double keeping documents in dicts.

    Uses the same record models as the motor service, so coercion and
    population behave the same. Set ``failure`` to make every call raise it.
    """

    def __init__(self):
        self.authors: Dict[ObjectId, Dict[str, Any]] = {}
        self.books: Dict[ObjectId, Dict[str, Any]] = {}
        self.failure: Optional[Exception] = None

    def _check(self):
        if self.failure is not None:
            raise self.failure

    async def list_authors(self) -> List[AuthorResponse]:
        self._check()
        return [AuthorResponse(**serialize_document(doc)) for doc in self.authors.values()]

    async def create_author(self, payload: Dict[str, Any]) -> AuthorResponse:
        self._check()
        document = AuthorRecord.model_validate(payload).to_document()
        document["_id"] = ObjectId()
        self.authors[document["_id"]] = document
        return AuthorResponse(**serialize_document(document))

    async def list_books(self) -> List[BookResponse]:
        self._check()
        return [BookResponse(**serialize_document(doc)) for doc in self.books.values()]

    async def get_book_by_id(self, book_id: str) -> Optional[BookDetailResponse]:
        self._check()
        book_doc = self.books.get(ObjectId(book_id))
        if book_doc is None:
            return None
        book = serialize_document(book_doc)
        author_doc = self.authors.get(book_doc.get("author"))
        book["author"] = AuthorResponse(**serialize_document(author_doc)) if author_doc else None
        return BookDetailResponse(**book)

    async def create_book(self, payload: Dict[str, Any]) -> BookResponse:
        self._check()
        document = BookRecord.model_validate(payload).to_document()
        document["_id"] = ObjectId()
        self.books[document["_id"]] = document
        return BookResponse(**serialize_document(document))

    async def update_book(self, book_id: str, payload: Dict[str, Any]) -> Optional[BookResponse]:
        self._check()
        object_id = ObjectId(book_id)
        changes = BookRecord.model_validate(payload).to_document()
        book_doc = self.books.get(object_id)
        if book_doc is None:
            return None
        book_doc.update(changes)
        return BookResponse(**serialize_document(book_doc))

    async def delete_book(self, book_id: str) -> bool:
        self._check()
        return self.books.pop(ObjectId(book_id), None) is not None

    async def health_check(self) -> Dict:
        if self.failure is not None:
            return {"status": "unhealthy", "error": str(self.failure)}
        return {"status": "healthy", "books_count": len(self.books), "authors_count": len(self.authors)}


@pytest.fixture
def store():
    """Create an empty in-memory store."""
    return InMemoryLibraryStore()


@pytest.fixture
def client(store, tmp_path):
    """Create test client bound to the in-memory store."""
    return TestClient(create_app(db_service=store, static_dir=str(tmp_path / "missing")))


@pytest.fixture
def author_payload():
    """Sample author request body."""
    return {"firstName": "Jane", "lastName": "Doe", "bio": "x"}


@pytest.fixture
def book_payload():
    """Sample book request body without an author."""
    return {
        "title": "A Light in the Attic",
        "year": 1981,
        "codeISBN": "978-0060256739",
        "quantity": 3,
        "genre": "Poetry",
    }


@pytest.fixture
def mock_database():
    """Create a mock motor database with books and authors collections."""
    collections = {"books": MagicMock(), "authors": MagicMock()}
    for collection in collections.values():
        collection.find_one = AsyncMock(return_value=None)
        collection.insert_one = AsyncMock()
        collection.find_one_and_update = AsyncMock(return_value=None)
        collection.delete_one = AsyncMock()
        collection.count_documents = AsyncMock(return_value=0)
        collection.find.return_value.to_list = AsyncMock(return_value=[])

    database = MagicMock()
    database.__getitem__.side_effect = collections.__getitem__
    database.command = AsyncMock(return_value={"ok": 1})
    database.collections = collections
    return database
