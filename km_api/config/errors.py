class ErrorMessages:
    # 사용자
    EMAIL_ALREADY_EXISTS = "user with this email already exists"
    USER_NOT_FOUND = "user not found"
    INVALID_CREDENTIALS = "invalid email or password"
    INVALID_USER_ID = "invalid user id"
    NAME_REQUIRED = "name is required"
    EMAIL_REQUIRED = "email is required"
    INVALID_EMAIL = "email must be a valid email address"
    PASSWORD_REQUIRED = "password is required"
    PASSWORD_TOO_SHORT = "password must be at least 8 characters"
    PASSWORD_TOO_LONG = "password must be at most 72 bytes"

    # 회사
    COMPANY_EMAIL_ALREADY_EXISTS = "company with this email already exists"
    COMPANY_NOT_FOUND = "company not found"
    INVALID_COMPANY_ID = "invalid company id"
    INVALID_COMPANY_DATA = "invalid company data"
    SEARCH_NAME_REQUIRED = "search name is required"

    # 소속 (company_users)
    RELATION_ALREADY_EXISTS = "user is already associated with this company"
    RELATION_NOT_FOUND = "user is not associated with this company"
    ROLE_REQUIRED = "role is required"

    # 공통
    DATABASE_ERROR = "database error"


class ErrorCode:
    VALIDATION = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    ALREADY_EXISTS = "ALREADY_EXISTS"
    UNAUTHORIZED = "UNAUTHORIZED"
    DATABASE_ERROR = "DATABASE_ERROR"


class AppError(Exception):
    """Base class for every failure the core reports to its callers."""

    code = "INTERNAL_ERROR"

    def __init__(self, message: str, details: str | None = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(AppError):
    code = ErrorCode.VALIDATION


class NotFoundError(AppError):
    code = ErrorCode.NOT_FOUND


class AlreadyExistsError(AppError):
    code = ErrorCode.ALREADY_EXISTS


class StorageError(AppError):
    code = ErrorCode.DATABASE_ERROR


class AuthenticationError(AppError):
    code = ErrorCode.UNAUTHORIZED


def with_context(err: AppError, context: str) -> AppError:
    """Return a copy of ``err`` of the same kind with ``context`` prefixed to its message."""
    wrapped = type(err)(f"{context}: {err.message}", err.details)
    wrapped.__cause__ = err
    return wrapped
