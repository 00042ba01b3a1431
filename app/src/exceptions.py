"""
Centralized exception handling for GoCab API.

This module provides:
- Base APIException class extending FastAPI's HTTPException.
- Custom domain-specific exceptions with appropriate status codes and headers.
- Utility functions for formatting DB errors, logging, and routing exceptions.

Usage:
    - Raise specific exceptions in engines, validators or route handlers.
    - Use `handle()` to normalize raw exceptions (DB, Pydantic) into API-friendly responses.
"""

from traceback import format_exception
from logging import getLogger
from typing import Iterable
from fastapi import status, HTTPException
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from pydantic import ValidationError


# ---------------------------------------------------------------------------
# Utility functions
# ---------------------------------------------------------------------------
def formatIntegrityError(e: IntegrityError) -> str:
    """
    Format a database integrity error into a user-friendly message.

    PostgreSQL (psycopg2) errors carry a diagnostic detail which is cleaned up,
    other drivers fall back to the plain driver message.
    """
    diag = getattr(e.orig, "diag", None)
    errorMessage = getattr(diag, "message_detail", None)
    if not errorMessage:
        return str(e.orig)
    errorMessage = errorMessage.translate({ord(i): None for i in '\\"\\.\\(\\)'})
    errorMessage = errorMessage.replace("Key ", "For ")
    errorMessage = errorMessage.replace("=", " value ")
    return errorMessage


def logException(e: Exception) -> None:
    """Log an exception with traceback using Uvicorn's error logger."""
    detail = str(format_exception(type(e), e, e.__traceback__))
    logger = getLogger("uvicorn.error")
    logger.error(detail)


# ---------------------------------------------------------------------------
# Base Exception
# ---------------------------------------------------------------------------
class APIException(HTTPException):
    """
    Base class for all application-specific exceptions.

    Provides default handling of status_code, detail, and headers.
    """

    status_code = status.HTTP_400_BAD_REQUEST
    detail = None
    headers = None

    def __init__(self, *args, **kwargs):
        kwargs.setdefault("status_code", self.status_code)
        kwargs.setdefault("detail", self.detail)
        kwargs.setdefault("headers", self.headers)
        super().__init__(*args, **kwargs)


# ---------------------------------------------------------------------------
# Exception handling entrypoint
# ---------------------------------------------------------------------------
def handle(e: Exception):
    """
    Normalize and re-raise exceptions as API-friendly errors.

    Converts raw exceptions from the DB and Pydantic into
    corresponding APIException subclasses.
    """
    if isinstance(e, APIException):
        raise e
    if isinstance(e, IntegrityError):
        logException(e)
        raise PersistenceError(formatIntegrityError(e)) from e
    if isinstance(e, SQLAlchemyError):
        logException(e)
        raise PersistenceError() from e
    if isinstance(e, ValidationError):
        raise PydanticError(detail=str(e)) from e

    logException(e)
    raise e


# ---------------------------------------------------------------------------
# Exception Classes
# ---------------------------------------------------------------------------
class PydanticError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    headers = {"X-Error": "PydanticError"}

    def __init__(self, detail: str):
        super().__init__(detail=detail)


class PersistenceError(APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail = "The data store failed to complete the operation"
    headers = {"X-Error": "PersistenceError"}

    def __init__(self, detail: str | None = None):
        super().__init__(detail=detail or self.detail)


class MissingParameter(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    headers = {"X-Error": "MissingParameter"}

    def __init__(self, field_names: Iterable[str]):
        self.field_names = list(field_names)
        detail = f"Missing required fields: {', '.join(self.field_names)}"
        super().__init__(detail=detail)


class InvalidDecision(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    detail = "The decision must be either APPROVED or REJECTED"
    headers = {"X-Error": "InvalidDecision"}


class RoleConflict(APIException):
    status_code = status.HTTP_409_CONFLICT
    detail = "The identity is already registered with a different role"
    headers = {"X-Error": "RoleConflict"}


class UnknownIdentity(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    detail = "User not found"
    headers = {"X-Error": "UnknownIdentity"}


class UnknownStudent(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    detail = "Student not found"
    headers = {"X-Error": "UnknownStudent"}


class UnknownDriver(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    detail = "Driver not found"
    headers = {"X-Error": "UnknownDriver"}


class UnknownMaintenanceMember(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    detail = "Maintenance member not found"
    headers = {"X-Error": "UnknownMaintenanceMember"}


class LocationNotFound(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Location not found"
    headers = {"X-Error": "LocationNotFound"}


class LocationServiceUnavailable(APIException):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    headers = {"X-Error": "LocationServiceUnavailable"}

    def __init__(self, detail: str):
        super().__init__(detail=detail)


class InvalidValue(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    headers = {"X-Error": "InvalidValue"}

    def __init__(self, field_name: str):
        detail = f"Invalid {field_name} is provided"
        super().__init__(detail=detail)
