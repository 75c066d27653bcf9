"""
Local Ledger - Source Package

The account ledger and validation engine behind a single-device personal
banking demo: register, sign in, view a balance, deposit funds.

DESIGN PRINCIPLES:
1. Nothing is written unless it passed validation
2. A deposit updates the balance and the history, or counts only once settled
3. The dashboard always reflects the latest write
4. Every step must be auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Local Ledger Team"
