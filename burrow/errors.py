from typing import Optional


class AppError(Exception):
    status_code: int = 400
    code: str = "APP_ERROR"

    def __init__(self, message: str, *, code: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        if code:
            self.code = code
        if status_code:
            self.status_code = status_code
        self.message = message


class ValidationError(AppError):
    code = "VALIDATION_ERROR"
    status_code = 400


class AuthError(AppError):
    code = "AUTH_ERROR"
    status_code = 401


class VerificationRequiredError(AuthError):
    code = "VERIFICATION_REQUIRED"
    status_code = 403

    def __init__(self, message: str, *, email: Optional[str] = None):
        super().__init__(message)
        self.email = email


class NotFoundError(AppError):
    code = "NOT_FOUND"
    status_code = 404


class ExternalServiceError(AppError):
    code = "EXTERNAL_SERVICE_ERROR"
    status_code = 502
