"""
Pocket Bank

A small single-user banking ledger driven by a numbered text menu,
with persisted accounts, deposits and transfers using Decimal amounts.
"""

__version__ = "1.0.0"
