from fastapi import HTTPException
from app.constants.error_codes import ErrorCode


class AppException(HTTPException):
    def __init__(
        self,
        status_code: int,
        message: str,
        error_code: ErrorCode,
        details: dict | list | str | None = None,
        headers: dict | None = None,
    ):
        super().__init__(status_code=status_code, detail=message, headers=headers)
        self.error_code = error_code
        self.details = details


class UpstreamServiceError(Exception):
    """A hosted collaborator (invoicing, payments, partner endpoint) refused or failed a call."""

    def __init__(
        self,
        service: str,
        message: str,
        status_code: int | None = None,
        body: str | None = None,
    ):
        super().__init__(message)
        self.service = service
        self.message = message
        self.status_code = status_code
        self.body = body

    @property
    def is_client_error(self) -> bool:
        return self.status_code is not None and 400 <= self.status_code < 500

    def __str__(self):
        if self.status_code is None:
            return f"{self.service}: {self.message}"
        return f"{self.service}: {self.message} (Status: {self.status_code})"
