"""
LedgerPrimitive -- the interface the kernel uses to reach the token ledger.

The kernel never moves balances itself.  It reads raw account records
through ``account_handle`` and hands fully-encoded instructions to
``invoke``.  Balance integrity and signer checks belong to the ledger.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from tax_kernel.domain.account_view import AccountHandle
from tax_kernel.domain.identity import Identity, IdentityLike
from tax_kernel.domain.instructions import Instruction


@runtime_checkable
class LedgerPrimitive(Protocol):
    """External value-transfer primitive."""

    @property
    def program_id(self) -> Identity: ...

    def account_handle(self, key: IdentityLike) -> AccountHandle:
        """Raw record of the token account stored under ``key``."""
        ...

    def invoke(self, instruction: Instruction) -> None:
        """Execute one instruction or raise; never partially applies it."""
        ...
