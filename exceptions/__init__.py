# Exceptions package
from .custom_exceptions import (
    AuthenticationException,
    AuthorizationException,
    ClubException,
    DatabaseOperationException,
    ResourceNotFoundException,
    StatsCalculationException,
    ValidationException,
)

__all__ = [
    'ClubException',
    'ResourceNotFoundException',
    'ValidationException',
    'DatabaseOperationException',
    'StatsCalculationException',
    'AuthenticationException',
    'AuthorizationException',
]
