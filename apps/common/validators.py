"""Identifier and literal validation used before any store access."""

import re

from .exceptions import InvalidArgumentError

# Printed barcodes are three base62 characters.
BARCODE_RE = re.compile(r'^[A-Za-z0-9]{3}$')

# Largest value a BigAutoField primary key can hold
MAX_ID = 2 ** 63 - 1


def require_positive_id(value, name='id'):
    """Return ``value`` as an int, or raise if it is not a positive integer."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgumentError(f"Invalid {name}")
    if value < 1 or value > MAX_ID:
        raise InvalidArgumentError(f"Invalid {name}")
    return value


def require_positive_ids(values, name='ids'):
    """Validate a non-empty collection of ids and return them as a sorted, de-duplicated list."""
    if values is None or isinstance(values, (str, bytes)):
        raise InvalidArgumentError(f"Invalid {name}")
    try:
        ids = {require_positive_id(v, name) for v in values}
    except TypeError:
        raise InvalidArgumentError(f"Invalid {name}")
    if not ids:
        raise InvalidArgumentError(f"{name} must not be empty")
    return sorted(ids)


def require_choice(value, choices, name):
    """Ensure ``value`` is one of ``choices``."""
    if value not in choices:
        raise InvalidArgumentError(f"Invalid {name}")
    return value


def normalize_barcode(value):
    """Strip and check a scanned barcode."""
    barcode = str(value or '').strip()
    if not BARCODE_RE.match(barcode):
        raise InvalidArgumentError("Invalid barcode")
    return barcode
