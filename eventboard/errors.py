"""Domain error taxonomy.

Services raise these directly; each one is an ``HTTPException`` carrying the
status code the routers should answer with, so no translation layer is
needed between the service and HTTP layers.
"""
from fastapi import HTTPException, status


class NotFoundError(HTTPException):
    """Referenced entity does not exist or is not visible to the caller."""

    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class ConflictError(HTTPException):
    """Business rule violated given the current state."""

    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class ValidationError(HTTPException):
    """Well-formed input that breaks a domain rule (lead time, date range, paging)."""

    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class AuthorizationError(HTTPException):
    """Actor exists but may not perform the action on this resource."""

    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
