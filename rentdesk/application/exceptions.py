"""Application-layer exceptions. Do not reuse domain exceptions."""


class ApplicationError(Exception):
    """Base for all application-layer errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class EntityNotFoundError(ApplicationError):
    """Raised when the addressed row does not exist (or is outside what the caller may see)."""


class ConflictError(ApplicationError):
    """Raised when the store rejects a write on a uniqueness or reference constraint."""


class StoreError(ApplicationError):
    """Raised when the database call itself fails. Not retried."""


class ProvisioningError(ApplicationError):
    """Raised when a multi-step provisioning sequence failed and was rolled back."""
