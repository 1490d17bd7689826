"""
SessionLedger -- database-backed reference implementation of the token ledger.

Responsibility:
    Stands in for the external value-transfer primitive in tests and local
    runs.  Stores mints and token accounts in the same session as the
    configuration record, so one transaction covers the registry read and
    every leg a transfer issues.

Raw account layout served by account_handle() (165 bytes):

    offset  0..32    mint
    offset 32..64    owner
    offset 64..72    amount, u64 little-endian
    offset 72..165   zero (delegate, state and extension fields unused here)

Invariants enforced:
    - Transfer: the signer owns the source, source and destination share a
      mint, and the source balance covers the amount.
    - Burn: the signer owns the account, the account belongs to the mint,
      and balance and supply both decrease by the amount.
    - SetAuthority(None): the signer is the current mint authority.  Once
      cleared, no instruction can set it again.
    - Every instruction is validated fully before any row changes.

Failure modes:
    - UnsupportedInstructionError on foreign program id or unknown data.
    - LedgerAccountNotFoundError, OwnerMismatchError, InvalidMintError,
      InsufficientFundsError, MintAuthorityError from the checks above.
"""

from __future__ import annotations

import struct

from sqlalchemy import select
from sqlalchemy.orm import Session

from tax_kernel.constants import TOKEN_DECIMALS
from tax_kernel.domain.account_view import AccountHandle
from tax_kernel.domain.identity import Identity, IdentityLike
from tax_kernel.domain.instructions import (
    AccountMeta,
    Instruction,
    InstructionTag,
    decode_instruction,
)
from tax_kernel.exceptions import (
    InsufficientFundsError,
    InvalidMintError,
    LedgerAccountNotFoundError,
    MintAuthorityError,
    OwnerMismatchError,
    UnsupportedInstructionError,
)
from tax_kernel.logging_config import get_logger
from tax_kernel.models.ledger import MintRecord, TokenAccountRecord
from tax_kernel.services.base import BaseService

logger = get_logger("services.ledger")

TOKEN_ACCOUNT_LENGTH = 165
_ACCOUNT_HEADER = struct.Struct("<32s32sQ")


def encode_token_account(mint: Identity, owner: Identity, amount: int) -> bytes:
    header = _ACCOUNT_HEADER.pack(mint.raw, owner.raw, amount)
    return header + bytes(TOKEN_ACCOUNT_LENGTH - len(header))


class SessionLedger(BaseService):
    """
    Token ledger backed by the caller's SQLAlchemy session.

    ``invocations`` records every instruction passed to invoke(), in order,
    whether or not it succeeded.
    """

    def __init__(self, session: Session, program_id: IdentityLike):
        super().__init__(session)
        self._program_id = Identity.coerce(program_id)
        self.invocations: list[Instruction] = []

    @property
    def program_id(self) -> Identity:
        return self._program_id

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _get_account(self, key: Identity, for_update: bool = False) -> TokenAccountRecord:
        stmt = select(TokenAccountRecord).where(TokenAccountRecord.key == key)
        if for_update:
            stmt = stmt.with_for_update()
        record = self.session.execute(stmt).scalar_one_or_none()
        if record is None:
            raise LedgerAccountNotFoundError(str(key))
        return record

    def _get_mint(self, key: Identity, for_update: bool = False) -> MintRecord:
        stmt = select(MintRecord).where(MintRecord.key == key)
        if for_update:
            stmt = stmt.with_for_update()
        record = self.session.execute(stmt).scalar_one_or_none()
        if record is None:
            raise LedgerAccountNotFoundError(str(key))
        return record

    def account_handle(self, key: IdentityLike) -> AccountHandle:
        record = self._get_account(Identity.coerce(key))
        return AccountHandle(
            key=record.key,
            data=encode_token_account(record.mint, record.owner, record.amount),
        )

    def balance_of(self, key: IdentityLike) -> int:
        return self._get_account(Identity.coerce(key)).amount

    def supply_of(self, mint: IdentityLike) -> int:
        return self._get_mint(Identity.coerce(mint)).supply

    def mint_authority_of(self, mint: IdentityLike) -> Identity | None:
        return self._get_mint(Identity.coerce(mint)).mint_authority

    # ------------------------------------------------------------------
    # Seeding
    # ------------------------------------------------------------------

    def create_mint(
        self,
        key: IdentityLike,
        mint_authority: IdentityLike,
        decimals: int = TOKEN_DECIMALS,
    ) -> None:
        self.session.add(
            MintRecord(
                key=Identity.coerce(key),
                supply=0,
                decimals=decimals,
                mint_authority=Identity.coerce(mint_authority),
            )
        )
        self.session.flush()

    def create_account(self, key: IdentityLike, mint: IdentityLike, owner: IdentityLike) -> None:
        mint_id = Identity.coerce(mint)
        self._get_mint(mint_id)
        self.session.add(
            TokenAccountRecord(
                key=Identity.coerce(key),
                mint=mint_id,
                owner=Identity.coerce(owner),
                amount=0,
            )
        )
        self.session.flush()

    def mint_to(self, account: IdentityLike, amount: int, signer: IdentityLike) -> None:
        """Issue new supply into ``account``. Seeding helper only."""
        signer_id = Identity.coerce(signer)
        record = self._get_account(Identity.coerce(account), for_update=True)
        mint = self._get_mint(record.mint, for_update=True)
        if mint.mint_authority is None or mint.mint_authority != signer_id:
            raise MintAuthorityError(
                str(mint.key),
                str(mint.mint_authority) if mint.mint_authority else None,
                str(signer_id),
            )
        mint.supply += amount
        record.amount += amount
        self.session.flush()

    # ------------------------------------------------------------------
    # Instruction execution
    # ------------------------------------------------------------------

    def invoke(self, instruction: Instruction) -> None:
        self.invocations.append(instruction)
        if instruction.program_id != self._program_id:
            raise UnsupportedInstructionError(
                instruction.data[0] if instruction.data else None,
                len(instruction.data),
            )

        decoded = decode_instruction(instruction.data)
        accounts = instruction.accounts

        if decoded.tag == InstructionTag.TRANSFER:
            self._require_shape(instruction, 3)
            self._transfer(accounts[0], accounts[1], accounts[2], decoded.amount)
        elif decoded.tag == InstructionTag.BURN:
            self._require_shape(instruction, 3)
            self._burn(accounts[0], accounts[1], accounts[2], decoded.amount)
        else:
            self._require_shape(instruction, 2)
            self._set_mint_authority(accounts[0], accounts[1], decoded.new_authority)

        logger.debug(
            "ledger_instruction_applied",
            extra={"tag": int(decoded.tag), "amount": decoded.amount},
        )

    @staticmethod
    def _require_shape(instruction: Instruction, count: int) -> None:
        accounts = instruction.accounts
        signer = accounts[-1] if accounts else None
        if (
            len(accounts) != count
            or signer is None
            or not signer.is_signer
            or not all(meta.is_writable for meta in accounts[:-1])
        ):
            raise UnsupportedInstructionError(instruction.data[0], len(instruction.data))

    def _transfer(
        self,
        source_meta: AccountMeta,
        destination_meta: AccountMeta,
        authority_meta: AccountMeta,
        amount: int,
    ) -> None:
        source = self._get_account(source_meta.key, for_update=True)
        destination = self._get_account(destination_meta.key, for_update=True)

        if source.owner != authority_meta.key:
            raise OwnerMismatchError(str(source.key), str(source.owner), str(authority_meta.key))
        if destination.mint != source.mint:
            raise InvalidMintError(str(destination.key), str(source.mint), str(destination.mint))
        if source.amount < amount:
            raise InsufficientFundsError(str(source.key), source.amount, amount)

        source.amount -= amount
        destination.amount += amount
        self.session.flush()

    def _burn(
        self,
        account_meta: AccountMeta,
        mint_meta: AccountMeta,
        authority_meta: AccountMeta,
        amount: int,
    ) -> None:
        account = self._get_account(account_meta.key, for_update=True)
        mint = self._get_mint(mint_meta.key, for_update=True)

        if account.owner != authority_meta.key:
            raise OwnerMismatchError(str(account.key), str(account.owner), str(authority_meta.key))
        if account.mint != mint.key:
            raise InvalidMintError(str(account.key), str(mint.key), str(account.mint))
        if account.amount < amount:
            raise InsufficientFundsError(str(account.key), account.amount, amount)

        account.amount -= amount
        mint.supply -= amount
        self.session.flush()

    def _set_mint_authority(
        self,
        mint_meta: AccountMeta,
        authority_meta: AccountMeta,
        new_authority: Identity | None,
    ) -> None:
        mint = self._get_mint(mint_meta.key, for_update=True)
        if mint.mint_authority is None or mint.mint_authority != authority_meta.key:
            raise MintAuthorityError(
                str(mint.key),
                str(mint.mint_authority) if mint.mint_authority else None,
                str(authority_meta.key),
            )
        mint.mint_authority = new_authority
        self.session.flush()
