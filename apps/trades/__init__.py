"""
Trades App - peer-to-peer exchange of duplicate caps.

A Trade with a Trader starts pending. While pending it reserves available
duplicate barcodes (control_bar 2 -> 3). Cancelling releases them back
(3 -> 2); completing records them as traded caps and frees the barcode
stickers as tokens (3 -> 0). Trades are never deleted.

Architecture:
- Models: Trader, Trade, TradeCap
- Services: trader_management, trade_management, reservation
- Views: TraderViewSet, TradeViewSet (staff only)
"""
