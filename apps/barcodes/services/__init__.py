"""
Barcodes app services layer.

Services contain business logic over barcode instances. State-changing
operations run inside ``store_transaction()``.
"""

from .exceptions import (
    BarcodeNotFoundError,
    CapNotFoundError,
    BarcodeAllocationError,
    SwitchNotAllowedError,
)

from .allocation import (
    generate_barcode,
    code_to_number,
    number_to_code,
)

from .inspection import (
    inspect_barcode,
    list_cap_barcodes,
    barcode_summary,
    list_caps_missing_barcodes,
    switch_original,
)


__all__ = [
    # Exceptions
    'BarcodeNotFoundError',
    'CapNotFoundError',
    'BarcodeAllocationError',
    'SwitchNotAllowedError',

    # Allocation
    'generate_barcode',
    'code_to_number',
    'number_to_code',

    # Inspection
    'inspect_barcode',
    'list_cap_barcodes',
    'barcode_summary',
    'list_caps_missing_barcodes',
    'switch_original',
]
