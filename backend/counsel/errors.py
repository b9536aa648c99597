"""
Domain errors raised by the service layer.

They subclass HTTPException so FastAPI renders them as the terminal outcome of
a request without any extra exception handlers.
"""

from fastapi import HTTPException, status


class NotFoundError(HTTPException):
    """Referenced entity does not exist."""

    def __init__(self, detail: str = "Resource not found") -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class ForbiddenError(HTTPException):
    """Caller's role, ownership or assignment does not permit the operation."""

    def __init__(self, detail: str = "You do not have permission to access this resource") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class ConflictError(HTTPException):
    """Uniqueness violation, e.g. a duplicate username."""

    def __init__(self, detail: str = "Resource already exists") -> None:
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)
