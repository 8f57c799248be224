"""
Barcode allocation service.

Attaches a barcode to a cap design. Printed stickers that came back from a
completed trade (free tokens) are reused first; otherwise the next code
after the newest barcode is inserted.

Codes are three characters over a fixed base62 alphabet, so the space
holds 62**3 barcodes. The alphabet order must never change: it defines
which code comes next.
"""

import logging
from typing import Optional, Tuple

from django.conf import settings
from django.db import IntegrityError

from apps.catalog.models import BeerCap
from apps.common.exceptions import ConflictError, StoreFailureError
from apps.common.transactions import store_transaction
from apps.common.validators import require_positive_id
from apps.barcodes.models import BarcodeInstance, ControlBar

from .exceptions import BarcodeAllocationError, CapNotFoundError

logger = logging.getLogger(__name__)

ALPHABET = 'ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789'
BASE = len(ALPHABET)
MAX_CODE = BASE ** 3 - 1


def code_to_number(code: str) -> int:
    """Position of a barcode in the allocation sequence."""
    if len(code) != 3 or any(ch not in ALPHABET for ch in code):
        raise ValueError(f"Bad barcode format in store: {code!r}")
    a, b, c = (ALPHABET.index(ch) for ch in code)
    return a * BASE * BASE + b * BASE + c


def number_to_code(number: int) -> str:
    """Barcode at a position of the allocation sequence."""
    if number < 0 or number > MAX_CODE:
        raise ConflictError("Barcode space exhausted")
    a, rem = divmod(number, BASE * BASE)
    b, c = divmod(rem, BASE)
    return ALPHABET[a] + ALPHABET[b] + ALPHABET[c]


def generate_barcode(
    *,
    beer_cap_id: int,
    sheet: Optional[str] = None
) -> Tuple[BarcodeInstance, bool]:
    """
    Attach a barcode to a cap design.

    The first barcode of a cap becomes its original (control_bar=1) and
    copies the cap's sheet; later ones are available duplicates
    (control_bar=2) stored on the given sheet.

    Each attempt is its own transaction, so a unique-key collision with a
    concurrent allocation only costs a retry.

    Args:
        beer_cap_id: Cap design to attach the barcode to
        sheet: Sheet where the duplicate is stored (ignored for originals)

    Returns:
        Tuple of (BarcodeInstance, reused) where ``reused`` tells whether a
        free token was recycled

    Raises:
        InvalidArgumentError: If beer_cap_id is not a positive integer
        CapNotFoundError: If the cap does not exist
        BarcodeAllocationError: If every attempt collided
        ConflictError: If the barcode space is exhausted
    """
    require_positive_id(beer_cap_id, 'beer_cap_id')
    sheet = (sheet or '').strip() or None
    attempts = settings.BARCODE_ALLOCATION_ATTEMPTS

    for attempt in range(attempts):
        try:
            with store_transaction():
                # Lock the cap so two allocations cannot both create its original
                try:
                    cap = BeerCap.objects.select_for_update().get(pk=beer_cap_id)
                except BeerCap.DoesNotExist:
                    raise CapNotFoundError()

                has_original = BarcodeInstance.objects.filter(
                    beer_cap=cap,
                    control_bar=ControlBar.ORIGINAL
                ).exists()
                control_bar = ControlBar.DUPLICATE if has_original else ControlBar.ORIGINAL
                sheet_to_store = cap.sheet if control_bar == ControlBar.ORIGINAL else sheet

                instance = _claim_free_token(cap, control_bar, sheet_to_store)
                reused = instance is not None
                if instance is None:
                    instance = _insert_next_barcode(cap, control_bar, sheet_to_store)
        except StoreFailureError as exc:
            if not isinstance(exc.__cause__, IntegrityError):
                raise
            logger.warning(
                "Barcode collision for cap %s (attempt %d/%d)",
                beer_cap_id, attempt + 1, attempts
            )
            continue

        logger.info(
            "Barcode %s attached to cap %s (control_bar=%s, reused=%s)",
            instance.barcode, beer_cap_id, control_bar, reused
        )
        return instance, reused

    raise BarcodeAllocationError()


def _claim_free_token(cap, control_bar, sheet):
    token = (
        BarcodeInstance.objects
        .filter(control_bar=ControlBar.FREE_TOKEN)
        .order_by('id')
        .first()
    )
    if token is None:
        return None

    claimed = BarcodeInstance.objects.filter(
        pk=token.pk,
        control_bar=ControlBar.FREE_TOKEN
    ).update(beer_cap=cap, sheet=sheet, control_bar=control_bar)
    if not claimed:
        # Taken by a concurrent allocation; fall back to a fresh barcode
        return None

    token.refresh_from_db()
    return token


def _insert_next_barcode(cap, control_bar, sheet):
    last = (
        BarcodeInstance.objects
        .order_by('-id')
        .values_list('barcode', flat=True)
        .first()
    )
    next_number = code_to_number(last) + 1 if last else 0

    return BarcodeInstance.objects.create(
        beer_cap=cap,
        barcode=number_to_code(next_number),
        sheet=sheet,
        control_bar=control_bar,
    )
