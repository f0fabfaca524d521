"""
Domain errors raised below the API layer.

Routers never build HTTP errors for these by hand; the handlers registered in
`wkn.main` translate them into responses.
"""
from __future__ import annotations


class DomainError(Exception):
    status_code: int = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(DomainError):
    """Missing or malformed input. Nothing was mutated."""
    status_code = 400


class NotFoundError(DomainError):
    status_code = 404


class AuthError(DomainError):
    """Credential mismatch (401) or an unverified/mismatched code (400)."""
    status_code = 401

    def __init__(self, message: str, *, status_code: int = 401):
        super().__init__(message)
        self.status_code = status_code


class StorageError(DomainError):
    """Any failure of the persistence store. Never retried."""
    status_code = 500
