"""
Domain Errors

Typed failures raised by the service layer. Each carries the HTTP status the
API layer responds with, so callers outside HTTP can still branch on kind.
"""


class BankingError(Exception):
    """Base class for all domain errors"""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(BankingError):
    """Raised when a requested entity id does not exist"""
    status_code = 404


class ValidationError(BankingError):
    """Raised when input violates a business rule (bounds, missing owner, currency mismatch)"""
    status_code = 400


class AuthenticationError(BankingError):
    """Raised when credentials or tokens cannot be verified"""
    status_code = 401


class ForbiddenError(BankingError):
    """Raised when the caller is authenticated but not allowed to act"""
    status_code = 403
