"""
Deployment configuration schema.

Frozen dataclasses the loader produces from a YAML deployment file plus
environment overrides.  Nothing here reaches the kernel's fee economics:
rates and capacities are kernel constants, not deployment settings.
"""

from __future__ import annotations

from dataclasses import dataclass

from tax_kernel.constants import TOKEN_DECIMALS, TOKEN_NAME, TOKEN_SYMBOL, TOTAL_SUPPLY
from tax_kernel.domain.identity import Identity


@dataclass(frozen=True)
class TokenMetadata:
    """Cosmetic token description shown by operator tooling."""

    name: str = TOKEN_NAME
    symbol: str = TOKEN_SYMBOL
    decimals: int = TOKEN_DECIMALS
    total_supply: int = TOTAL_SUPPLY  # raw units

    def display_supply(self) -> str:
        whole, frac = divmod(self.total_supply, 10**self.decimals)
        if not frac:
            return f"{whole:,}"
        return f"{whole:,}.{frac:0{self.decimals}d}".rstrip("0")


@dataclass(frozen=True)
class WalletSet:
    """Routing wallets handed to initialize(). Any may be unset."""

    founder_fee_wallet: Identity | None = None
    marketing_wallet: Identity | None = None
    ritual_vault_wallet: Identity | None = None

    def missing(self) -> tuple[str, ...]:
        """Environment variable names of the wallets that are not set."""
        names = {
            "FOUNDER_FEE_WALLET": self.founder_fee_wallet,
            "MARKETING_WALLET": self.marketing_wallet,
            "RITUAL_VAULT_WALLET": self.ritual_vault_wallet,
        }
        return tuple(name for name, value in names.items() if value is None)


@dataclass(frozen=True)
class DeploymentConfig:
    """One deployment of the tax kernel."""

    name: str
    program_id: Identity
    token_program_id: Identity
    database_url: str
    log_level: str = "INFO"
    wallets: WalletSet = WalletSet()
    token: TokenMetadata = TokenMetadata()
    checksum: str = ""
