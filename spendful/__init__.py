"""
Spendful - Local Spend Ledger

A personal, local-first ledger that records whether (and how much)
the user spent on a given day, and derives weekly/monthly awareness
statistics from it.

DESIGN PRINCIPLES:
1. The ledger lives on the device, in a key-value store
2. Reads never crash the caller (safe defaults on bad storage)
3. Writes are all-or-nothing
4. Restricted history is hidden, never deleted
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Spendful Team"
