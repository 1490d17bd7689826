"""
Kernel services.

Every service takes the caller's Session and flushes only; the caller owns
the transaction.
"""

from tax_kernel.services.authority_service import AuthorityService
from tax_kernel.services.config_registry import ConfigRegistry
from tax_kernel.services.ledger_service import SessionLedger
from tax_kernel.services.transfer_router import (
    TransferLeg,
    TransferReceipt,
    TransferRouter,
)

__all__ = [
    "AuthorityService",
    "ConfigRegistry",
    "SessionLedger",
    "TransferRouter",
    "TransferLeg",
    "TransferReceipt",
]
