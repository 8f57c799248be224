"""
Error kinds shared by every service layer.

Services raise subclasses of these; views turn them into HTTP responses
(see ``apps.common.responses``). Every error carries a ``kind`` and a
human-readable message.
"""


class ServiceError(Exception):
    """Base exception for all service errors."""

    kind = 'error'
    default_message = 'Operation failed.'

    def __init__(self, message=None):
        super().__init__(message or self.default_message)

    @property
    def message(self):
        return str(self)


class InvalidArgumentError(ServiceError):
    """Malformed or missing identifier or enum value. Never reaches the store."""

    kind = 'invalid_argument'
    default_message = 'Invalid argument.'


class NotFoundError(ServiceError):
    """A referenced record does not exist."""

    kind = 'not_found'
    default_message = 'Not found.'


class ConflictError(ServiceError):
    """The operation would violate a state invariant."""

    kind = 'conflict'
    default_message = 'Operation conflicts with the current state.'


class StoreFailureError(ServiceError):
    """The database failed; the transaction was rolled back."""

    kind = 'store_failure'
    default_message = 'Data store failure.'
