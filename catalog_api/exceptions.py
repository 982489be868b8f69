"""
Error taxonomy for the catalogue core.

Services raise these; the application maps them onto HTTP responses in one
place (see main.py). Each operation raises at most one of them.
"""
from fastapi import status


class CatalogError(Exception):
    """Base class: carries the HTTP status and machine-readable code"""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "INTERNAL"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationFailure(CatalogError):
    """Malformed or out-of-range input"""
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "VALIDATION_ERROR"


class NotFound(CatalogError):
    """Referenced movie (or its rating set) does not exist"""
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"


class InternalFailure(CatalogError):
    """Store or transaction error, surfaced opaquely"""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "INTERNAL"
