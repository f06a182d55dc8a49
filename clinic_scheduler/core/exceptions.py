"""
Error categories surfaced to API callers.

Services raise these directly; FastAPI renders them as ``{"detail": message}``
with the matching status code.
"""
from fastapi import HTTPException, status


class AuthenticationError(HTTPException):
    """Missing, invalid or expired token, or role mismatch."""

    def __init__(self, detail: str = "Could not validate credentials"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class AuthorizationError(HTTPException):
    """Authenticated, but not the owner of the resource."""

    def __init__(self, detail: str = "Not enough permissions"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
        )


class NotFoundError(HTTPException):
    def __init__(self, detail: str = "Resource not found."):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class ConflictError(HTTPException):
    """Duplicate unique field or an already booked slot."""

    def __init__(self, detail: str = "Conflict with existing data."):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class InvalidInputError(HTTPException):
    def __init__(self, detail: str = "Invalid input."):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class InternalError(HTTPException):
    """Storage or signing failure; the message never carries internals."""

    def __init__(self, detail: str = "An unexpected error occurred"):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
        )
