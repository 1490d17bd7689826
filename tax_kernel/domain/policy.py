"""
Tax policy snapshot and transfer classification.

Pure domain logic.  ConfigSnapshot is the immutable view of the configuration
record that every read path works from; the ORM row never leaves the
registry service.
"""

from __future__ import annotations

from dataclasses import dataclass

from tax_kernel.domain.account_view import TokenAccountView
from tax_kernel.domain.identity import Identity


@dataclass(frozen=True)
class ConfigSnapshot:
    """Immutable DTO of the configuration record."""

    address: Identity
    authority: Identity
    founder_wallet: Identity
    marketing_wallet: Identity
    ritual_vault_wallet: Identity
    tax_bps: int
    founder_bps: int
    marketing_bps: int
    exempt: tuple[Identity, ...]
    lp_accounts: tuple[Identity, ...]

    @property
    def core_wallets(self) -> frozenset[Identity]:
        return frozenset(
            (self.founder_wallet, self.marketing_wallet, self.ritual_vault_wallet)
        )

    @property
    def bps_consistent(self) -> bool:
        return self.founder_bps + self.marketing_bps == self.tax_bps

    def is_exempt(self, identity: Identity) -> bool:
        """
        Core wallets are always exempt, whatever the explicit list says.
        Anyone else is exempt only through explicit membership.
        """
        return identity in self.core_wallets or identity in self.exempt

    def is_lp_account(self, account: Identity) -> bool:
        return account in self.lp_accounts


@dataclass(frozen=True)
class TransferClassification:
    is_sell: bool
    is_exempt: bool

    @property
    def taxed(self) -> bool:
        return self.is_sell and not self.is_exempt


def classify_transfer(
    config: ConfigSnapshot,
    source: TokenAccountView,
    destination: TokenAccountView,
) -> TransferClassification:
    """
    A sell is a transfer whose destination account is a registered LP account.
    It is exempt when either side's owner is exempt.
    """
    return TransferClassification(
        is_sell=config.is_lp_account(destination.key),
        is_exempt=(
            config.is_exempt(source.owning_identity)
            or config.is_exempt(destination.owning_identity)
        ),
    )
