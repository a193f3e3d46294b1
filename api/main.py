"""
FastAPI main application for the Library Catalog API.
"""

import time
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

import structlog
from fastapi import APIRouter, Body, Depends, FastAPI, Request, Response, status
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from pymongo.errors import ConnectionFailure
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.config import config as api_config
from api.database import APIDatabaseService, LibraryStore
from api.deps import get_db_service
from api.models import ErrorResponse, HealthResponse
from catalog.database import MongoDBManager
from utilities.config import config
from utilities.logger import AccessLogger, setup_logging

# Setup logging
logger = structlog.get_logger(__name__)

router = APIRouter()


def error_response(message: str, exc: Optional[Exception] = None) -> JSONResponse:
    """Generic 500 envelope; the exception text is only exposed in debug mode."""
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(
            error=message,
            detail=str(exc) if exc is not None and api_config.debug else None,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
        ).model_dump(exclude_none=True)
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    setup_logging(
        log_level=config.log_level,
        log_format=config.log_format,
        log_file=config.get_log_file_path(),
        debug=config.debug
    )
    logger.info("Starting Library Catalog API")

    manager = None
    if app.state.db_service is None:
        manager = MongoDBManager(
            connection_url=config.mongodb_url,
            database_name=config.mongodb_database,
            server_selection_timeout_ms=config.mongodb_timeout_ms
        )
        try:
            await manager.connect()
        except ConnectionFailure as e:
            # Keep serving; each request fails on its own until the store is back
            logger.error("Error connecting to MongoDB", error=str(e))

        app.state.db_service = APIDatabaseService(
            manager.database,
            books_collection=config.books_collection,
            authors_collection=config.authors_collection
        )

    yield

    logger.info("Shutting down Library Catalog API")
    if manager:
        await manager.disconnect()


# Health check endpoint
@router.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check(db_service: LibraryStore = Depends(get_db_service)):
    """Health check endpoint."""
    health_info = await db_service.health_check()
    db_status = health_info.get("status", "unknown")

    counts = {}
    if db_status == "healthy":
        counts = {
            "books": health_info.get("books_count", 0),
            "authors": health_info.get("authors_count", 0)
        }

    return HealthResponse(
        status="healthy" if db_status == "healthy" else "degraded",
        timestamp=datetime.utcnow(),
        version=api_config.api_version,
        database_status=db_status,
        counts=counts
    )


# Authors endpoints
@router.get("/authors", tags=["Authors"])
async def get_authors(db_service: LibraryStore = Depends(get_db_service)):
    """Get all authors."""
    try:
        authors = await db_service.list_authors()
        logger.info("Retrieved authors", count=len(authors))
        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content=[author.model_dump(by_alias=True) for author in authors]
        )
    except Exception as e:
        logger.error("Error while retrieving authors", error=str(e))
        return error_response("Failed to retrieve authors", e)


@router.post("/authors", tags=["Authors"])
async def create_author(
    payload: Dict[str, Any] = Body(default={}),
    db_service: LibraryStore = Depends(get_db_service)
):
    """
    Create an author.

    - **firstName**, **lastName**, **bio**: free-form text, all optional
    """
    try:
        author = await db_service.create_author(payload)
        logger.info("Author added", author_id=author.id)
        return JSONResponse(
            status_code=status.HTTP_201_CREATED,
            content=author.model_dump(by_alias=True)
        )
    except Exception as e:
        logger.error("Error while creating the author", error=str(e))
        return error_response("Failed to create the author", e)


# Books endpoints
@router.get("/books", tags=["Books"])
async def get_books(db_service: LibraryStore = Depends(get_db_service)):
    """Get all books. The author field is the raw author id."""
    try:
        books = await db_service.list_books()
        logger.info("Retrieved books", count=len(books))
        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content=[book.model_dump(by_alias=True) for book in books]
        )
    except Exception as e:
        logger.error("Error while retrieving books", error=str(e))
        return error_response("Failed to retrieve books", e)


@router.get("/books/{book_id}", tags=["Books"])
async def get_book(book_id: str, db_service: LibraryStore = Depends(get_db_service)):
    """
    Get a single book by ID with the author populated.

    An unknown ID answers 200 with a `null` body.
    """
    try:
        book = await db_service.get_book_by_id(book_id)
        logger.info("Retrieved book with author details", book_id=book_id, found=book is not None)
        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content=book.model_dump(by_alias=True) if book is not None else None
        )
    except Exception as e:
        logger.error("Error while retrieving book", book_id=book_id, error=str(e))
        return error_response("Failed to retrieve book", e)


@router.post("/books", tags=["Books"])
async def create_book(
    payload: Dict[str, Any] = Body(default={}),
    db_service: LibraryStore = Depends(get_db_service)
):
    """
    Create a book.

    - **title**, **year**, **codeISBN**, **quantity**, **genre**
    - **author**: id of an existing author (not verified)
    """
    try:
        book = await db_service.create_book(payload)
        logger.info("Book created", book_id=book.id)
        return JSONResponse(
            status_code=status.HTTP_201_CREATED,
            content=book.model_dump(by_alias=True)
        )
    except Exception as e:
        logger.error("Error while creating the book", error=str(e))
        return error_response("Failed to create the book", e)


@router.put("/books/{book_id}", tags=["Books"])
async def update_book(
    book_id: str,
    payload: Dict[str, Any] = Body(default={}),
    db_service: LibraryStore = Depends(get_db_service)
):
    """
    Update the given fields of a book and return the updated book.

    An unknown ID answers 200 with a `null` body.
    """
    try:
        book = await db_service.update_book(book_id, payload)
        logger.info("Updated book", book_id=book_id, found=book is not None)
        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content=book.model_dump(by_alias=True) if book is not None else None
        )
    except Exception as e:
        logger.error("Error while updating the book", book_id=book_id, error=str(e))
        return error_response("Failed to update the book", e)


@router.delete("/books/{book_id}", status_code=status.HTTP_204_NO_CONTENT, tags=["Books"])
async def delete_book(book_id: str, db_service: LibraryStore = Depends(get_db_service)):
    """Delete a book by ID. Answers 204 whether or not the book existed."""
    try:
        deleted = await db_service.delete_book(book_id)
        logger.info("Book deleted", book_id=book_id, deleted=deleted)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except Exception as e:
        logger.error("Error while deleting the book", book_id=book_id, error=str(e))
        return error_response("Deleting book failed", e)


def create_app(db_service: Optional[LibraryStore] = None, static_dir: Optional[str] = None) -> FastAPI:
    """
    Build the application.

    Args:
        db_service: Store client to use. When omitted, the lifespan connects
            to MongoDB with the configured settings.
        static_dir: Directory served at the site root, defaults to the configured one
    """
    app = FastAPI(
        title=api_config.api_title,
        description=api_config.api_description,
        version=api_config.api_version,
        lifespan=lifespan
    )
    app.state.db_service = db_service

    access_logger = AccessLogger()

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        access_logger.log_request(
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=(time.perf_counter() - start) * 1000,
            content_length=response.headers.get("content-length")
        )
        return response

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Handle HTTP exceptions."""
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                error=str(exc.detail),
                status_code=exc.status_code
            ).model_dump(exclude_none=True),
            headers=getattr(exc, "headers", None)
        )

    app.include_router(router)

    # Mounted last so the API routes take precedence
    static_path = Path(static_dir or api_config.static_dir)
    if static_path.is_dir():
        app.mount("/", StaticFiles(directory=static_path, html=True), name="static")
    else:
        logger.warning("Static directory not found, not serving assets", directory=str(static_path))

    return app


app = create_app()
