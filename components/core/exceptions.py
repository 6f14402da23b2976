"""
Typed errors shared by validators, credential utilities and storage backends.

Every error carries the HTTP status code the API boundary responds with.
"""

from typing import Dict, List, Optional


class DebtLiteError(Exception):
    """Base exception for all application errors."""
    status_code = 500
    error = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.error)
        self.message = message or self.error


class ValidationError(DebtLiteError):
    """Raised when a payload violates its schema."""
    status_code = 400
    error = "Validation error"

    def __init__(self, message: Optional[str] = None, violations: Optional[List[Dict[str, str]]] = None):
        self.violations = violations or []
        if message is None and self.violations:
            message = ", ".join(f"{v['field']}: {v['message']}" for v in self.violations)
        super().__init__(message)


class NotFoundError(DebtLiteError):
    """Raised when a requested entity does not exist in scope."""
    status_code = 404
    error = "Not found"


class UnauthorizedError(DebtLiteError):
    """Raised when a request is not authenticated."""
    status_code = 401
    error = "Unauthorized access"


class InvalidTokenError(UnauthorizedError):
    """Raised when a session token is tampered with, malformed or expired."""
    error = "Invalid or expired token"


class InvalidCredentialsError(UnauthorizedError):
    """Raised on failed login; never tells a missing email from a wrong password."""
    error = "Invalid email or password"


class ConflictError(DebtLiteError):
    """Raised when a unique key is already taken."""
    status_code = 409
    error = "Conflict"


class StorageUnavailableError(DebtLiteError):
    """Raised when the storage backend or network cannot be reached."""
    status_code = 500
    error = "Storage unavailable"


class StorageConfigurationError(DebtLiteError):
    """Raised when the configured storage backend cannot be constructed."""
    error = "Storage misconfigured"
