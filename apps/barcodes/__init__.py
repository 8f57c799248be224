"""
Barcodes App - physical barcode instances of cap designs.

Every printed barcode sticker is one BarcodeInstance. Its ``control_bar``
tracks where the physical cap is: kept as the collection original,
available as a tradeable duplicate, reserved for a pending trade, or
freed as an unassigned token after the cap left in a trade.

Services:
- allocation: attach a (new or recycled) barcode to a cap design
- inspection: look up barcodes, list a cap's barcodes, switch the original
"""
