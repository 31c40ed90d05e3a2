"""
core/errors.py -- Application error taxonomy.

Stores and auth gates raise these; api/main.py maps every AppError to the
shared ErrorResponse envelope using the class's status_code and code. No
layer below api/ knows about HTTP responses -- status_code is just metadata
carried on the exception.

Hierarchy:
  AppError
    BadRequestError   400  malformed or conflicting input
      DuplicateError  400  unique key already taken on create
      EmptyUpdateError 400 partial update called with no fields
    UnauthorizedError 401  missing/insufficient identity for a route
    ForbiddenError    403  reserved for explicit policy denials
    NotFoundError     404  key does not resolve to a record
"""


class AppError(Exception):
    """Base class for errors that cross the store/route boundary."""

    status_code: int = 500
    code: str = "internal_error"
    default_message: str = "An unexpected error occurred."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class BadRequestError(AppError):
    status_code = 400
    code = "bad_request"
    default_message = "Bad request."


class DuplicateError(BadRequestError):
    code = "duplicate"
    default_message = "Record already exists."


class EmptyUpdateError(BadRequestError):
    code = "empty_update"
    default_message = "No data."


class UnauthorizedError(AppError):
    status_code = 401
    code = "unauthorized"
    default_message = "Unauthorized."


class ForbiddenError(AppError):
    status_code = 403
    code = "forbidden"
    default_message = "Forbidden."


class NotFoundError(AppError):
    status_code = 404
    code = "not_found"
    default_message = "Not found."
