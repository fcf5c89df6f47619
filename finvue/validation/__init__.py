"""Two-stage validation of transaction submissions."""

from finvue.validation.validator import TransactionValidator

__all__ = [
    "TransactionValidator",
]
