"""ORM models for the tax kernel."""

from tax_kernel.models.config import ExemptEntry, LpAccountEntry, TaxConfig
from tax_kernel.models.ledger import MintRecord, TokenAccountRecord

__all__ = [
    "TaxConfig",
    "ExemptEntry",
    "LpAccountEntry",
    "MintRecord",
    "TokenAccountRecord",
]
