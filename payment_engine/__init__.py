"""
Payment Engine

Per-client ledger of deposits, withdrawals and the dispute lifecycle
(dispute, resolve, chargeback) using exact fixed-point currency.
"""

__version__ = "1.0.0"
