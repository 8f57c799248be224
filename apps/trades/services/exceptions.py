"""
Domain-specific exceptions for trades app.

These exceptions represent business rule violations and are converted
to HTTP responses in views by their kind.
"""

from apps.common.exceptions import ConflictError, NotFoundError

# Re-exported: reservation and listing operations reference caps and barcodes
from apps.barcodes.services.exceptions import BarcodeNotFoundError, CapNotFoundError  # noqa: F401


class TradeNotFoundError(NotFoundError):
    """Raised when a trade does not exist."""
    default_message = 'Trade not found'


class TraderNotFoundError(NotFoundError):
    """Raised when a trader does not exist."""
    default_message = 'Trader not found'


class CountryNotFoundError(NotFoundError):
    """Raised when a trader references an unknown country."""
    default_message = 'Invalid country_id.'


class TradeNotPendingError(ConflictError):
    """Raised when a transition requires a pending trade."""
    default_message = 'Trade is not pending'


class InstanceNotAvailableError(ConflictError):
    """Raised when a barcode instance cannot be reserved."""
    default_message = 'Barcode instance not available'


class InstanceNotReservedError(ConflictError):
    """Raised when a barcode is not reserved for the given trade."""
    default_message = 'Barcode is not reserved for this trade'


class TraderHasTradesError(ConflictError):
    """Raised when deleting a trader that is referenced by trades."""
    default_message = 'Cannot delete trader with existing trades'


class BarcodeCapMismatchError(ConflictError):
    """Raised when a scanned barcode belongs to a different cap design."""
    default_message = 'Scanned barcode does not belong to this cap id'
