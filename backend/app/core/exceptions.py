"""
Custom Exceptions for the RANZ Wage Survey backend
==================================================

Use these instead of generic Exception to:
1. Make errors more specific and debuggable
2. Map every failure to one HTTP status at the API layer
3. Keep store details out of client responses

Usage:
    from app.core.exceptions import SubmissionWriteError

    try:
        await writer.submit(payload)
    except SQLAlchemyError as e:
        logger.error(f"Submission insert failed: {e}")
        raise SubmissionWriteError() from e
"""

from typing import Optional, Any, Dict


class SurveyError(Exception):
    """Base exception for all survey backend errors"""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "error": self.message,
            "code": self.code,
        }
        if self.details:
            data["details"] = self.details
        return data


# ============================================
# Validation Errors (400-type)
# ============================================

class ValidationError(SurveyError):
    """Input validation failed"""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class MissingCredentialsError(ValidationError):
    """Login request without email or password"""

    def __init__(self):
        super().__init__("Email and password are required")
        self.code = "MISSING_CREDENTIALS"


class WeakPasswordError(ValidationError):
    """New password does not meet the minimum length"""

    def __init__(self, min_length: int = 8):
        super().__init__(
            f"Password must be at least {min_length} characters",
            field="newPassword"
        )
        self.code = "WEAK_PASSWORD"


# ============================================
# Authentication Errors (401-type)
# ============================================

class AuthenticationError(SurveyError):
    """Authentication failed"""

    status_code = 401

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message, code="AUTH_FAILED")


class InvalidCredentialsError(AuthenticationError):
    """Unknown email or wrong password"""

    def __init__(self):
        super().__init__("Invalid email or password")
        self.code = "INVALID_CREDENTIALS"


class UnauthorizedError(AuthenticationError):
    """No bearer token on a protected route"""

    def __init__(self, message: str = "Authorization required"):
        super().__init__(message)
        self.code = "UNAUTHORIZED"


class InvalidTokenError(AuthenticationError):
    """JWT token is malformed, badly signed or of the wrong type"""

    def __init__(self):
        super().__init__("Invalid or expired token")
        self.code = "INVALID_TOKEN"


class TokenExpiredError(AuthenticationError):
    """JWT token has expired"""

    def __init__(self):
        super().__init__("Invalid or expired token")
        self.code = "TOKEN_EXPIRED"


class PasswordChangeRequiredError(AuthenticationError):
    """Token was issued while the account still needed a password change"""

    def __init__(self):
        super().__init__("Password change required")
        self.code = "PASSWORD_CHANGE_REQUIRED"


# ============================================
# Storage Errors (500-type)
# ============================================

class StorageError(SurveyError):
    """Storage operation failed. Message is generic, cause is logged only"""

    status_code = 500

    def __init__(self, message: str, code: str = "STORAGE_ERROR"):
        super().__init__(message, code=code)


class SubmissionWriteError(StorageError):
    """Survey submission could not be persisted"""

    def __init__(self):
        super().__init__("Database insert failed", code="WRITE_FAILED")


class ExportError(StorageError):
    """Export or stats query failed"""

    def __init__(self):
        super().__init__("Export failed", code="EXPORT_FAILED")


class CredentialUpdateError(StorageError):
    """Password hash could not be stored"""

    def __init__(self):
        super().__init__("Failed to update password", code="CREDENTIAL_UPDATE_FAILED")


# ============================================
# Helper function for API responses
# ============================================

def error_response(error: SurveyError) -> Dict[str, Any]:
    """Convert exception to API error response format"""
    return error.to_dict()
