"""
Domain-specific exceptions for barcodes services.

Each one is a kind from ``apps.common.exceptions`` so views can map it
to an HTTP status without knowing the details.
"""

from apps.common.exceptions import ConflictError, NotFoundError


class BarcodeNotFoundError(NotFoundError):
    """Raised when a barcode or barcode instance does not exist."""
    default_message = 'Barcode not found'


class CapNotFoundError(NotFoundError):
    """Raised when a cap design does not exist."""
    default_message = 'Cap not found'


class BarcodeAllocationError(ConflictError):
    """Raised when no unique barcode could be allocated."""
    default_message = 'Could not allocate a unique barcode (try again)'


class SwitchNotAllowedError(ConflictError):
    """Raised when a barcode cannot become its cap's original."""
    default_message = 'Switch not allowed for this barcode state'
