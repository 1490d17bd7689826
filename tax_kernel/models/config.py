"""
Module: tax_kernel.models.config
Responsibility: ORM persistence for the per-deployment configuration record
    and its two bounded identity lists (tax exemptions, LP destinations).
Architecture position: Kernel > Models.  May import from db/ only.
    MUST NOT import from services/.

Invariants enforced:
    - One record per deployment: address is derived from the program id and
      the fixed "config" seed, and is unique (uq_tax_config_address).
    - An identity appears at most once per list (uq_*_entry constraints).
    - authority, wallets and bps columns are written once by initialize and
      have no update path in the service layer.

Non-goals:
    - Capacity is NOT enforced here; ConfigRegistry checks it before insert.
    - founder_bps + marketing_bps == tax_bps is NOT a DB constraint; the
      router re-checks the split on every taxed transfer.
"""

from uuid import UUID

from sqlalchemy import ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tax_kernel.db.base import Base, TrackedBase, UUIDString
from tax_kernel.domain.identity import Identity


class TaxConfig(TrackedBase):
    """
    The configuration record.

    Created once by ConfigRegistry.initialize() and never deleted.
    """

    __tablename__ = "tax_configs"

    __table_args__ = (
        UniqueConstraint("address", name="uq_tax_config_address"),
    )

    address: Mapped[Identity] = mapped_column(nullable=False)
    program_id: Mapped[Identity] = mapped_column(nullable=False)

    authority: Mapped[Identity] = mapped_column(nullable=False)
    founder_wallet: Mapped[Identity] = mapped_column(nullable=False)
    marketing_wallet: Mapped[Identity] = mapped_column(nullable=False)
    ritual_vault_wallet: Mapped[Identity] = mapped_column(nullable=False)

    tax_bps: Mapped[int] = mapped_column(Integer, nullable=False)
    founder_bps: Mapped[int] = mapped_column(Integer, nullable=False)
    marketing_bps: Mapped[int] = mapped_column(Integer, nullable=False)

    exempt_entries: Mapped[list["ExemptEntry"]] = relationship(
        back_populates="config",
        cascade="all, delete-orphan",
        order_by="ExemptEntry.position",
    )

    lp_entries: Mapped[list["LpAccountEntry"]] = relationship(
        back_populates="config",
        cascade="all, delete-orphan",
        order_by="LpAccountEntry.position",
    )

    def __repr__(self) -> str:
        return f"<TaxConfig {self.address}>"


class ExemptEntry(Base):
    """One explicitly tax-exempt wallet owner."""

    __tablename__ = "tax_config_exempt"

    __table_args__ = (
        UniqueConstraint("config_id", "identity", name="uq_exempt_entry"),
    )

    config_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("tax_configs.id", ondelete="CASCADE"),
        nullable=False,
    )
    identity: Mapped[Identity] = mapped_column(nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False)

    config: Mapped[TaxConfig] = relationship(back_populates="exempt_entries")


class LpAccountEntry(Base):
    """One registered LP destination token account."""

    __tablename__ = "tax_config_lp_accounts"

    __table_args__ = (
        UniqueConstraint("config_id", "identity", name="uq_lp_account_entry"),
    )

    config_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("tax_configs.id", ondelete="CASCADE"),
        nullable=False,
    )
    identity: Mapped[Identity] = mapped_column(nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False)

    config: Mapped[TaxConfig] = relationship(back_populates="lp_entries")
