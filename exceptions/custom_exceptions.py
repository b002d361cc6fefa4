"""
Custom Exception Classes for the club statistics backend

Provides a hierarchy of exceptions for consistent error responses.
All custom exceptions inherit from ClubException which carries a status code and details.
"""

from typing import Any


class ClubException(Exception):
    """Base exception for all club backend errors"""

    def __init__(self, message: str, status_code: int = 500, details: dict[Any, Any] | None = None):
        """
        Args:
            message: Human-readable error message
            status_code: HTTP status code for the error
            details: Additional context as a dictionary
        """
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class ResourceNotFoundException(ClubException):
    """Raised when a requested resource doesn't exist"""

    def __init__(
        self, resource_type: str, resource_id: str = "", details: dict[Any, Any] | None = None
    ):
        """
        Args:
            resource_type: Type of resource (e.g., 'Player', 'Season', 'SeasonStatistics')
            resource_id: ID of the missing resource
            details: Additional context

        Example:
            raise ResourceNotFoundException('Season', season_id)
        """
        message = f"{resource_type} with resource ID '{resource_id}' not found"
        extra_details = {"resource_type": resource_type, "resource_id": resource_id}
        if details:
            extra_details.update(details)
        super().__init__(message, status_code=404, details=extra_details)


class ValidationException(ClubException):
    """Raised when input validation fails"""

    def __init__(self, field: str, message: str, details: dict[Any, Any] | None = None):
        full_message = f"Validation error on field '{field}': {message}"
        extra_details = {"field": field}
        if details:
            extra_details.update(details)
        super().__init__(full_message, status_code=400, details=extra_details)


class DatabaseOperationException(ClubException):
    """Raised when document store operations fail"""

    def __init__(
        self,
        operation: str,
        message: str = "",
        collection: str = "",
        details: dict[Any, Any] | None = None,
    ):
        """
        Args:
            operation: Type of operation (e.g., 'get', 'put')
            message: Description of the database error
            collection: Name of the collection
            details: Additional context (e.g., key, error message)

        Example:
            raise DatabaseOperationException('put', collection='player-statistics', details={'key': key})
        """
        self.operation = operation
        self.collection = collection

        error_message = message or f"Database operation '{operation}' failed"
        if collection and not message:
            error_message += f" on collection '{collection}'"

        extra_details = {"operation": operation}
        if collection:
            extra_details["collection"] = collection
        if details:
            extra_details.update(details)
        super().__init__(error_message, status_code=500, details=extra_details)


class StatsCalculationException(ClubException):
    """Raised when stats calculation fails"""

    def __init__(
        self, calculation_type: str, message: str = "", details: dict[Any, Any] | None = None
    ):
        """
        Args:
            calculation_type: Type of stats being calculated (e.g., 'player', 'season', 'advanced')
            message: Description of the calculation error
            details: Additional context
        """
        full_message = f"Stats calculation failed for '{calculation_type}': {message}"
        extra_details = {"calculation_type": calculation_type}
        if details:
            extra_details.update(details)
        super().__init__(full_message, status_code=500, details=extra_details)


class AuthenticationException(ClubException):
    """Raised when authentication fails"""

    def __init__(
        self, message: str = "Authentication failed", details: dict[Any, Any] | None = None
    ):
        super().__init__(message, status_code=401, details=details)


class AuthorizationException(ClubException):
    """Raised when user lacks permission for an action"""

    def __init__(
        self, message: str = "Insufficient permissions", details: dict[Any, Any] | None = None
    ):
        """
        Args:
            message: Description of the authorization error
            details: Additional context (e.g., required role, user role)

        Example:
            raise AuthorizationException('Admin role required', {'user_roles': ['MEMBER']})
        """
        super().__init__(message, status_code=403, details=details)
