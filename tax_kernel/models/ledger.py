"""
Module: tax_kernel.models.ledger
Responsibility: ORM persistence for the reference token ledger (mints and
    token accounts) used by SessionLedger.
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - Keys are unique per table.
    - Amounts and supply are u64 (U64Amount), never negative; SessionLedger
      checks balances before debiting.
    - mint_authority NULL means minting is permanently locked.
"""

from sqlalchemy import Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from tax_kernel.db.base import TrackedBase
from tax_kernel.db.types import U64Amount
from tax_kernel.domain.identity import Identity


class MintRecord(TrackedBase):
    """A token mint."""

    __tablename__ = "ledger_mints"

    __table_args__ = (
        UniqueConstraint("key", name="uq_ledger_mint_key"),
    )

    key: Mapped[Identity] = mapped_column(nullable=False)
    supply: Mapped[int] = mapped_column(U64Amount(), nullable=False, default=0)
    decimals: Mapped[int] = mapped_column(Integer, nullable=False)
    mint_authority: Mapped[Identity | None] = mapped_column(nullable=True)

    @property
    def is_locked(self) -> bool:
        return self.mint_authority is None


class TokenAccountRecord(TrackedBase):
    """A balance-holding token account."""

    __tablename__ = "ledger_token_accounts"

    __table_args__ = (
        UniqueConstraint("key", name="uq_ledger_token_account_key"),
    )

    key: Mapped[Identity] = mapped_column(nullable=False)
    mint: Mapped[Identity] = mapped_column(nullable=False)
    owner: Mapped[Identity] = mapped_column(nullable=False)
    amount: Mapped[int] = mapped_column(U64Amount(), nullable=False, default=0)
