"""Custom domain exceptions for the application."""

# Stable, machine-readable error codes for API consumers.
NOT_FOUND = "NOT_FOUND"
DUPLICATE_RESOURCE = "DUPLICATE_RESOURCE"
VALIDATION_ERROR = "VALIDATION_ERROR"
EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"


class DomainError(Exception):
    """Base exception for domain/business logic errors."""

    pass


class NotFoundError(DomainError):
    """Raised when a project, tenant, scenario or snapshot does not exist."""

    pass


class DuplicateResourceError(DomainError):
    """Raised when an id is already taken (e.g. a scenario or adjustment id)."""

    pass


class DomainValidationError(DomainError):
    """Raised when a business rule rejects a request (e.g. deferring a month with nothing due)."""

    pass


class ExternalServiceError(DomainError):
    """Raised when a collaborator outside the service (text generation) fails or answers badly."""

    pass
