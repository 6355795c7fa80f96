"""
Error taxonomy. Validation and identity errors map to 4xx; collaborator
faults (the managed store or the auth API) surface as 500 with the
collaborator's own message.
"""
from fastapi import HTTPException


def err(code: str, message: str, status_code: int = 400, details: dict | None = None) -> HTTPException:
    detail = {"error": {"code": code, "message": message}}
    if details is not None:
        detail["error"]["details"] = details
    return HTTPException(status_code=status_code, detail=detail)


class StoreError(Exception):
    """A data-store call failed. Carries the store-reported message."""

    def __init__(self, message: str, operation: str | None = None):
        self.message = message
        self.operation = operation
        super().__init__(message)


class IdentityError(Exception):
    """Token was rejected by the identity service."""

    def __init__(self, message: str = "Invalid token"):
        self.message = message
        super().__init__(message)


class IdentityUnavailableError(Exception):
    """Identity service could not be reached."""


class InvalidFileError(Exception):
    """Raised when file type is not allowed (e.g. not CSV) or too large."""

    def __init__(self, code: str = "invalid_file", message: str = "Only CSV files are allowed"):
        self.code = code
        self.message = message
        super().__init__(message)


class IngestionError(Exception):
    """Upload rejected during validation (bad platform, empty file, row limit)."""

    def __init__(self, code: str, message: str, stage: str | None = None):
        self.code = code
        self.message = message
        self.stage = stage
        super().__init__(message)
