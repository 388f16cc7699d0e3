from fastapi import HTTPException, status
from typing import Optional, Dict, Any


class BaseAPIException(HTTPException):
    """Base exception for API errors"""

    def __init__(
        self,
        status_code: int,
        error_code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.error_code = error_code
        self.message = message
        self.details = details or {}

        super().__init__(
            status_code=status_code,
            detail={
                "success": False,
                "error": message,
                "code": error_code,
                "details": self.details,
            },
        )

    def __str__(self) -> str:
        return self.message


class AuthenticationError(BaseAPIException):
    """Missing, malformed or expired bearer credential"""

    def __init__(self, message: str = "Unauthorized", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            error_code="AUTH_001",
            message=message,
            details=details,
        )


class AuthorizationError(BaseAPIException):
    """Authenticated, but lacking privilege or ownership"""

    def __init__(self, message: str = "Forbidden", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            error_code="AUTH_002",
            message=message,
            details=details,
        )


class ValidationError(BaseAPIException):
    """Missing or malformed input"""

    def __init__(self, message: str = "Invalid input", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="VALIDATION_001",
            message=message,
            details=details,
        )


class InsufficientBalanceError(BaseAPIException):
    def __init__(
        self, message: str = "Insufficient diamonds", details: Optional[Dict] = None
    ):
        super().__init__(
            status_code=status.HTTP_402_PAYMENT_REQUIRED,
            error_code="BALANCE_001",
            message=message,
            details=details,
        )


class NotFoundError(BaseAPIException):
    def __init__(self, message: str = "Resource not found", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="NOT_FOUND_001",
            message=message,
            details=details,
        )


class ConflictError(BaseAPIException):
    def __init__(self, message: str = "Resource conflict", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            error_code="CONFLICT_001",
            message=message,
            details=details,
        )


class RateLimitError(BaseAPIException):
    """Action already taken for the current period"""

    def __init__(self, message: str = "Rate limit exceeded", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            error_code="RATE_LIMIT_001",
            message=message,
            details=details,
        )


class StorageError(BaseAPIException):
    """The data store rejected a write"""

    def __init__(self, message: str = "Storage error", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_code="STORAGE_001",
            message=message,
            details=details,
        )


class InternalServerError(BaseAPIException):
    def __init__(self, message: str = "Internal server error", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_code="INTERNAL_001",
            message=message,
            details=details,
        )


class ServiceUnavailableError(BaseAPIException):
    """An external collaborator is not configured or not reachable"""

    def __init__(
        self, message: str = "Service unavailable", details: Optional[Dict] = None
    ):
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            error_code="UNAVAILABLE_001",
            message=message,
            details=details,
        )
