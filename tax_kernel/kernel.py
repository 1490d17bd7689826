"""
TaxKernel -- public operation surface.

Each public operation runs in exactly one transaction (session_scope): the
registry read, every ledger leg and every registry write commit together or
roll back together.  This is the whole-operation rollback the multi-leg
transfer relies on; the services underneath only flush.

Account arguments are ledger keys.  The kernel resolves them to raw account
handles through the ledger, the way a host runtime presents accounts to a
program.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Callable, Iterator
from uuid import uuid4

from sqlalchemy.orm import Session, sessionmaker

from tax_kernel.db.engine import session_scope
from tax_kernel.domain.fees import require_amount
from tax_kernel.domain.identity import Identity, IdentityLike
from tax_kernel.domain.ledger import LedgerPrimitive
from tax_kernel.domain.policy import ConfigSnapshot
from tax_kernel.exceptions import TaxKernelError
from tax_kernel.logging_config import LogContext, get_logger
from tax_kernel.services.authority_service import AuthorityService
from tax_kernel.services.config_registry import ConfigRegistry
from tax_kernel.services.transfer_router import TransferReceipt, TransferRouter

logger = get_logger("kernel")

LedgerFactory = Callable[[Session], LedgerPrimitive]


def _context_value(value: IdentityLike | None) -> str | None:
    """Log rendering of an identity argument that has not been validated yet."""
    if value is None:
        return None
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).hex()
    return str(value)


class TaxKernel:
    """
    Entry point for one deployment.

    Args:
        program_id: Identity of this deployment; fixes the config address.
        ledger_factory: Builds the ledger primitive bound to a session.
        session_factory: Optional sessionmaker; defaults to the engine's.
    """

    def __init__(
        self,
        program_id: IdentityLike,
        ledger_factory: LedgerFactory,
        session_factory: sessionmaker[Session] | None = None,
    ):
        self.program_id = Identity.coerce(program_id)
        self._ledger_factory = ledger_factory
        self._session_factory = session_factory

    @contextmanager
    def _operation(self, name: str, signer: IdentityLike | None = None, mint: IdentityLike | None = None) -> Iterator[Session]:
        with LogContext.bind(
            correlation_id=str(uuid4()),
            operation=name,
            signer=_context_value(signer),
            mint=_context_value(mint),
        ):
            try:
                with session_scope(self._session_factory) as session:
                    yield session
            except TaxKernelError as exc:
                logger.warning(
                    "operation_rejected",
                    extra={"error_code": exc.code, "error": str(exc)},
                )
                raise
            logger.info("operation_committed")

    # ------------------------------------------------------------------
    # Configuration registry
    # ------------------------------------------------------------------

    def initialize(
        self,
        authority: IdentityLike,
        founder_wallet: IdentityLike,
        marketing_wallet: IdentityLike,
        ritual_vault_wallet: IdentityLike,
    ) -> ConfigSnapshot:
        with self._operation("initialize", signer=authority) as session:
            return ConfigRegistry(session, self.program_id).initialize(
                authority, founder_wallet, marketing_wallet, ritual_vault_wallet
            )

    def add_exempt(self, authority: IdentityLike, identity: IdentityLike) -> ConfigSnapshot:
        with self._operation("add_exempt", signer=authority) as session:
            return ConfigRegistry(session, self.program_id).add_exempt(authority, identity)

    def remove_exempt(self, authority: IdentityLike, identity: IdentityLike) -> ConfigSnapshot:
        with self._operation("remove_exempt", signer=authority) as session:
            return ConfigRegistry(session, self.program_id).remove_exempt(authority, identity)

    def add_lp_account(self, authority: IdentityLike, lp_token_account: IdentityLike) -> ConfigSnapshot:
        with self._operation("add_lp_account", signer=authority) as session:
            return ConfigRegistry(session, self.program_id).add_lp_account(authority, lp_token_account)

    def remove_lp_account(self, authority: IdentityLike, lp_token_account: IdentityLike) -> ConfigSnapshot:
        with self._operation("remove_lp_account", signer=authority) as session:
            return ConfigRegistry(session, self.program_id).remove_lp_account(authority, lp_token_account)

    def show_config(self) -> ConfigSnapshot | None:
        with self._operation("show_config") as session:
            return ConfigRegistry(session, self.program_id).find_config()

    # ------------------------------------------------------------------
    # Transfers and gated operations
    # ------------------------------------------------------------------

    def transfer_with_tax(
        self,
        amount: int,
        from_account: IdentityLike,
        to_account: IdentityLike,
        founder_fee_account: IdentityLike,
        marketing_fee_account: IdentityLike,
        mint: IdentityLike,
        signer: IdentityLike,
    ) -> TransferReceipt:
        with self._operation("transfer_with_tax", signer=signer, mint=mint) as session:
            require_amount(amount)
            ledger = self._ledger_factory(session)
            return TransferRouter(session, ledger, self.program_id).transfer_with_tax(
                amount,
                ledger.account_handle(from_account),
                ledger.account_handle(to_account),
                ledger.account_handle(founder_fee_account),
                ledger.account_handle(marketing_fee_account),
                mint,
                signer,
            )

    def burn(
        self,
        amount: int,
        vault_account: IdentityLike,
        mint: IdentityLike,
        ritual_vault: IdentityLike,
    ) -> None:
        with self._operation("burn", signer=ritual_vault, mint=mint) as session:
            require_amount(amount)
            ledger = self._ledger_factory(session)
            AuthorityService(session, ledger, self.program_id).burn(
                amount, ledger.account_handle(vault_account), mint, ritual_vault
            )

    def lock_mint_authority(self, mint: IdentityLike, mint_authority: IdentityLike) -> None:
        with self._operation("lock_mint_authority", signer=mint_authority, mint=mint) as session:
            ledger = self._ledger_factory(session)
            AuthorityService(session, ledger, self.program_id).lock_mint_authority(
                mint, mint_authority
            )
