"""FastAPI dependency implementations."""

from fastapi import HTTPException, Request, status

from api.database import LibraryStore


def get_db_service(request: Request) -> LibraryStore:
    """Get the store client attached to the application."""
    db_service = getattr(request.app.state, "db_service", None)
    if db_service is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database service not available"
        )
    return db_service
