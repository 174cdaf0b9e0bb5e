"""
Error taxonomy shared by services and routes.

Services raise these; the app factory maps them to JSON responses.
"""

from __future__ import annotations


class ServiceError(Exception):
    """Base class for failures that map to an HTTP status."""

    status_code: int = 500
    code: str = "internal_error"

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message or self.code

    def as_dict(self) -> dict:
        return {"error": self.code, "message": self.message}


class InvalidArgument(ServiceError):
    status_code = 400
    code = "invalid_argument"


class Unauthenticated(ServiceError):
    status_code = 401
    code = "unauthenticated"


class Forbidden(ServiceError):
    status_code = 403
    code = "forbidden"


class NotFound(ServiceError):
    status_code = 404
    code = "not_found"


class DependencyFailure(ServiceError):
    status_code = 500
    code = "dependency_failure"


class StorageError(DependencyFailure):
    """The database rejected or failed a read/write."""

    code = "storage_failure"


class ObjectStoreError(DependencyFailure):
    code = "object_store_failure"


class ProviderError(DependencyFailure):
    """An external AI provider call failed."""

    code = "provider_failure"
