"""
AuthorityService -- the two single-purpose, signer-gated operations.

burn():
    Supply-control chokepoint.  Only the configured ritual-vault wallet may
    burn through the kernel, and only from a token account it owns.

lock_mint_authority():
    One-way switch.  Clears the mint authority on the ledger; nothing in the
    kernel can set it again.  No registry check: the ledger itself requires
    the signer to be the current mint authority.
"""

from __future__ import annotations

from sqlalchemy.orm import Session

from tax_kernel.domain.account_view import AccountHandle, inspect
from tax_kernel.domain.fees import require_amount
from tax_kernel.domain.identity import Identity, IdentityLike
from tax_kernel.domain.instructions import (
    burn_instruction,
    set_mint_authority_none_instruction,
)
from tax_kernel.domain.ledger import LedgerPrimitive
from tax_kernel.exceptions import (
    InvalidMintError,
    UnauthorizedError,
)
from tax_kernel.logging_config import get_logger
from tax_kernel.services.base import BaseService
from tax_kernel.services.config_registry import ConfigRegistry

logger = get_logger("services.authority")


class AuthorityService(BaseService):
    """Ritual-vault burn and mint authority lock."""

    def __init__(
        self,
        session: Session,
        ledger: LedgerPrimitive,
        program_id: IdentityLike,
    ):
        super().__init__(session)
        self._ledger = ledger
        self._registry = ConfigRegistry(session, program_id)

    def burn(
        self,
        amount: int,
        vault_account: AccountHandle,
        mint: IdentityLike,
        ritual_vault_signer: IdentityLike,
    ) -> None:
        """
        Burn ``amount`` from the ritual vault's token account.

        Raises:
            InvalidAmountError: amount is zero.
            UnauthorizedError: signer is not the ritual-vault wallet, or the
                account is not owned by the signer.
            InvalidAccountError: vault account record too short.
            InvalidMintError: vault account holds a different mint.
        """
        require_amount(amount)

        config = self._registry.get_config()
        signer = Identity.coerce(ritual_vault_signer)
        mint_id = Identity.coerce(mint)

        if signer != config.ritual_vault_wallet:
            raise UnauthorizedError(str(signer), str(config.ritual_vault_wallet), "ritual vault")

        vault = inspect(vault_account)
        if vault.owning_identity != signer:
            raise UnauthorizedError(str(vault.owning_identity), str(signer), "vault account owner")
        if vault.asset_identity != mint_id:
            raise InvalidMintError(str(vault.key), str(mint_id), str(vault.asset_identity))

        self._ledger.invoke(
            burn_instruction(self._ledger.program_id, vault.key, mint_id, signer, amount)
        )
        logger.info("burn_executed", extra={"amount": amount, "vault_account": str(vault.key)})

    def lock_mint_authority(
        self,
        mint: IdentityLike,
        current_mint_authority: IdentityLike,
    ) -> None:
        """Set the mint authority of ``mint`` to None. Irreversible."""
        mint_id = Identity.coerce(mint)
        self._ledger.invoke(
            set_mint_authority_none_instruction(
                self._ledger.program_id,
                mint_id,
                Identity.coerce(current_mint_authority),
            )
        )
        logger.warning("mint_authority_locked", extra={"locked_mint": str(mint_id)})
