"""
Error taxonomy.

Each error is an ``HTTPException`` so services can raise it directly and
FastAPI renders it without a translation layer. ``StoreFailure`` is the one
raised by the app itself when a database error escapes a request; its detail
is always generic.
"""

from __future__ import annotations

from fastapi import HTTPException


class Unauthenticated(HTTPException):
    def __init__(self, detail: str = "Authentication required"):
        super().__init__(
            status_code=401,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class Forbidden(HTTPException):
    def __init__(self, detail: str = "Administrator access required"):
        super().__init__(status_code=403, detail=detail)


class NotFound(HTTPException):
    """Missing resource, or a transition whose expected prior state did not match."""

    def __init__(self, detail: str = "Not found"):
        super().__init__(status_code=404, detail=detail)


class Conflict(HTTPException):
    def __init__(self, detail: str = "Conflict"):
        super().__init__(status_code=409, detail=detail)


class StoreFailure(HTTPException):
    def __init__(self, detail: str = "An unexpected error occurred."):
        super().__init__(status_code=500, detail=detail)
