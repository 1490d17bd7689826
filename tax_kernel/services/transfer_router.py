"""
TransferRouter -- classifies a transfer and issues its one or three legs.

Responsibility:
    Validates the accounts a caller presents, decides whether the transfer is
    a taxed sell, computes the fee split, and hands transfer instructions to
    the ledger primitive.

Precondition order (all checked before any ledger call):
    1. amount > 0                                  -> InvalidAmountError
    2. from / to / founder / marketing mint        -> InvalidMintError
    3. from owner == signing authority             -> UnauthorizedError
    4. fee accounts owned by configured wallets    -> UnauthorizedError

Invariants enforced:
    - Fee legs only credit accounts owned by the configured founder and
      marketing wallets, even though the account handles are caller-supplied.
    - founder_fee + marketing_fee == tax_total (compute_fee_split).
    - No compensation logic: a failing leg propagates, and the caller's
      transaction discards the legs already applied.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.orm import Session

from tax_kernel.domain.account_view import AccountHandle, TokenAccountView, inspect
from tax_kernel.domain.fees import FeeSplit, compute_fee_split, require_amount
from tax_kernel.domain.identity import Identity, IdentityLike
from tax_kernel.domain.instructions import transfer_instruction
from tax_kernel.domain.ledger import LedgerPrimitive
from tax_kernel.domain.policy import ConfigSnapshot, classify_transfer
from tax_kernel.exceptions import (
    InvalidMintError,
    TaxSplitMismatchError,
    UnauthorizedError,
)
from tax_kernel.logging_config import get_logger
from tax_kernel.services.base import BaseService
from tax_kernel.services.config_registry import ConfigRegistry

logger = get_logger("services.transfer_router")


@dataclass(frozen=True)
class TransferLeg:
    source: Identity
    destination: Identity
    amount: int


@dataclass(frozen=True)
class TransferReceipt:
    """What a routed transfer did."""

    taxed: bool
    is_sell: bool
    is_exempt: bool
    legs: tuple[TransferLeg, ...]
    fee_split: FeeSplit | None = None

    @property
    def total_debited(self) -> int:
        return sum(leg.amount for leg in self.legs)


class TransferRouter(BaseService):
    """
    Mediates every transfer of the taxed token.

    ``program_id`` identifies this deployment (and therefore its config
    record); the token program receiving the instructions is
    ``ledger.program_id``.
    """

    def __init__(
        self,
        session: Session,
        ledger: LedgerPrimitive,
        program_id: IdentityLike,
    ):
        super().__init__(session)
        self._ledger = ledger
        self._registry = ConfigRegistry(session, program_id)

    def transfer_with_tax(
        self,
        amount: int,
        from_account: AccountHandle,
        to_account: AccountHandle,
        founder_fee_account: AccountHandle,
        marketing_fee_account: AccountHandle,
        mint: IdentityLike,
        signing_authority: IdentityLike,
    ) -> TransferReceipt:
        """
        Transfer ``amount`` from ``from_account`` to ``to_account``.

        Sells into a registered LP account by non-exempt parties are split
        into net, founder-fee and marketing-fee legs; everything else moves
        as a single leg.

        Raises:
            InvalidAmountError, InvalidAccountError, InvalidMintError,
            UnauthorizedError, TaxSplitMismatchError,
            InsufficientNetAmountError, MathOverflowError,
            ConfigNotInitializedError, or any LedgerError from a leg.
        """
        require_amount(amount)

        config = self._registry.get_config()
        mint_id = Identity.coerce(mint)
        signer = Identity.coerce(signing_authority)

        source, destination, founder, marketing = (
            inspect(handle)
            for handle in (from_account, to_account, founder_fee_account, marketing_fee_account)
        )
        for view in (source, destination, founder, marketing):
            self._require_mint(view, mint_id)

        if source.owning_identity != signer:
            raise UnauthorizedError(str(signer), str(source.owning_identity), "source owner")
        if founder.owning_identity != config.founder_wallet:
            raise UnauthorizedError(
                str(founder.owning_identity), str(config.founder_wallet), "founder fee account owner"
            )
        if marketing.owning_identity != config.marketing_wallet:
            raise UnauthorizedError(
                str(marketing.owning_identity), str(config.marketing_wallet), "marketing fee account owner"
            )

        classification = classify_transfer(config, source, destination)

        if classification.taxed:
            split = self._split(amount, config)
            legs = (
                TransferLeg(source.key, destination.key, split.net),
                TransferLeg(source.key, founder.key, split.founder_fee),
                TransferLeg(source.key, marketing.key, split.marketing_fee),
            )
        else:
            split = None
            legs = (TransferLeg(source.key, destination.key, amount),)

        for leg in legs:
            self._ledger.invoke(
                transfer_instruction(
                    self._ledger.program_id,
                    leg.source,
                    leg.destination,
                    signer,
                    leg.amount,
                )
            )

        logger.info(
            "transfer_routed",
            extra={
                "amount": amount,
                "taxed": classification.taxed,
                "is_sell": classification.is_sell,
                "is_exempt": classification.is_exempt,
                "leg_count": len(legs),
                "tax_total": split.tax_total if split else 0,
            },
        )
        return TransferReceipt(
            taxed=classification.taxed,
            is_sell=classification.is_sell,
            is_exempt=classification.is_exempt,
            legs=legs,
            fee_split=split,
        )

    route_transfer = transfer_with_tax

    @staticmethod
    def _require_mint(view: TokenAccountView, mint: Identity) -> None:
        if view.asset_identity != mint:
            raise InvalidMintError(str(view.key), str(mint), str(view.asset_identity))

    @staticmethod
    def _split(amount: int, config: ConfigSnapshot) -> FeeSplit:
        try:
            return compute_fee_split(
                amount, config.tax_bps, config.founder_bps, config.marketing_bps
            )
        except TaxSplitMismatchError:
            logger.error(
                "tax_split_mismatch",
                extra={
                    "amount": amount,
                    "bps_consistent": config.bps_consistent,
                },
            )
            raise
