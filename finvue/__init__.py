"""
FinVue Ledger - Source Package

A multi-role expense/revenue ledger for a small organization.
Members submit entries, privileged roles verify and approve them,
and balances are derived per payment channel.

DESIGN PRINCIPLES:
1. Submit → Verify → Approve (roles decide, never the system)
2. One capability table decides who may do what
3. Every figure is recomputed from the ledger, never cached
4. Every step must be auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "FinVue Team"
