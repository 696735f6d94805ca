"""Exception taxonomy for the personal access token store"""

from typing import Any, Dict, Optional


class PatStoreError(Exception):
    """Base exception for all token store errors"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    @property
    def operation(self) -> Optional[str]:
        return self.details.get("operation")


class InvalidArgumentError(PatStoreError):
    """Raised when caller input is malformed"""

    def __init__(self, operation: str, errors: list):
        self.errors = errors
        super().__init__(
            f"Invalid argument for '{operation}': {', '.join(errors)}",
            {"operation": operation, "errors": errors},
        )


class ConflictError(PatStoreError):
    """Raised when a token with the same identifier already exists"""

    def __init__(self, operation: str, resource_id: str):
        self.resource_id = resource_id
        super().__init__(
            f"PersonalAccessToken already exists: {resource_id}",
            {"operation": operation, "resource_id": resource_id},
        )


class NotFoundError(PatStoreError):
    """Raised when no token matches the identifier"""

    def __init__(self, operation: str, resource_id: str):
        self.resource_id = resource_id
        super().__init__(
            f"PersonalAccessToken not found: {resource_id}",
            {"operation": operation, "resource_id": resource_id},
        )


class UnavailableError(PatStoreError):
    """Raised when the backend cannot be reached or fails"""

    def __init__(
        self, operation: str, reason: str, resource_id: Optional[str] = None
    ):
        self.reason = reason
        details: Dict[str, Any] = {"operation": operation, "reason": reason}
        if resource_id is not None:
            details["resource_id"] = resource_id
        super().__init__(f"Token store unavailable during '{operation}': {reason}", details)


class DeadlineExceededError(PatStoreError):
    """Raised when an operation does not finish before its deadline"""

    def __init__(
        self, operation: str, timeout: float, resource_id: Optional[str] = None
    ):
        self.timeout = timeout
        details: Dict[str, Any] = {"operation": operation, "timeout": timeout}
        if resource_id is not None:
            details["resource_id"] = resource_id
        super().__init__(
            f"Operation '{operation}' exceeded its deadline of {timeout}s", details
        )


class ManifestError(PatStoreError):
    """Raised when a manifest configuration cannot be rendered"""
    pass
