"""
Instruction builders for the external token ledger.

The exact call shapes the kernel emits:

    Transfer       data = 0x03 | u64 LE amount
                   accounts = [source (w), destination (w), authority (signer)]
    Burn           data = 0x08 | u64 LE amount
                   accounts = [account (w), mint (w), authority (signer)]
    SetAuthority   data = 0x06 | 0x00 (mint authority) | 0x00 (None)
                   accounts = [mint (w), current authority (signer)]

decode_instruction() is the inverse, used by the reference ledger.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntEnum

from tax_kernel.domain.identity import Identity
from tax_kernel.exceptions import UnsupportedInstructionError

_AMOUNT_DATA = struct.Struct("<BQ")
_SET_AUTHORITY_DATA = struct.Struct("<BBB")


class InstructionTag(IntEnum):
    TRANSFER = 3
    SET_AUTHORITY = 6
    BURN = 8


class AuthorityType(IntEnum):
    MINT_TOKENS = 0


@dataclass(frozen=True)
class AccountMeta:
    key: Identity
    is_signer: bool
    is_writable: bool

    @classmethod
    def writable(cls, key: Identity) -> AccountMeta:
        return cls(key=key, is_signer=False, is_writable=True)

    @classmethod
    def readonly_signer(cls, key: Identity) -> AccountMeta:
        return cls(key=key, is_signer=True, is_writable=False)


@dataclass(frozen=True)
class Instruction:
    program_id: Identity
    accounts: tuple[AccountMeta, ...]
    data: bytes


@dataclass(frozen=True)
class DecodedInstruction:
    """Typed view of instruction data. amount is None for SET_AUTHORITY."""

    tag: InstructionTag
    amount: int | None = None
    authority_type: AuthorityType | None = None
    new_authority: Identity | None = None


def transfer_instruction(
    program_id: Identity,
    source: Identity,
    destination: Identity,
    authority: Identity,
    amount: int,
) -> Instruction:
    return Instruction(
        program_id=program_id,
        accounts=(
            AccountMeta.writable(source),
            AccountMeta.writable(destination),
            AccountMeta.readonly_signer(authority),
        ),
        data=_AMOUNT_DATA.pack(InstructionTag.TRANSFER, amount),
    )


def burn_instruction(
    program_id: Identity,
    account: Identity,
    mint: Identity,
    authority: Identity,
    amount: int,
) -> Instruction:
    return Instruction(
        program_id=program_id,
        accounts=(
            AccountMeta.writable(account),
            AccountMeta.writable(mint),
            AccountMeta.readonly_signer(authority),
        ),
        data=_AMOUNT_DATA.pack(InstructionTag.BURN, amount),
    )


def set_mint_authority_none_instruction(
    program_id: Identity,
    mint: Identity,
    current_authority: Identity,
) -> Instruction:
    return Instruction(
        program_id=program_id,
        accounts=(
            AccountMeta.writable(mint),
            AccountMeta.readonly_signer(current_authority),
        ),
        # option byte 0 = None, so no new authority follows
        data=_SET_AUTHORITY_DATA.pack(
            InstructionTag.SET_AUTHORITY, AuthorityType.MINT_TOKENS, 0
        ),
    )


def decode_instruction(data: bytes) -> DecodedInstruction:
    """
    Parse instruction data produced by the builders above.

    Raises:
        UnsupportedInstructionError: unknown tag, wrong length, or a
            SetAuthority shape other than mint-authority.
    """
    if not data:
        raise UnsupportedInstructionError(None, 0)

    tag = data[0]
    if tag in (InstructionTag.TRANSFER, InstructionTag.BURN):
        if len(data) != _AMOUNT_DATA.size:
            raise UnsupportedInstructionError(tag, len(data))
        _, amount = _AMOUNT_DATA.unpack(data)
        return DecodedInstruction(tag=InstructionTag(tag), amount=amount)

    if tag == InstructionTag.SET_AUTHORITY:
        if len(data) < _SET_AUTHORITY_DATA.size:
            raise UnsupportedInstructionError(tag, len(data))
        _, authority_type, option = _SET_AUTHORITY_DATA.unpack_from(data)
        if authority_type != AuthorityType.MINT_TOKENS:
            raise UnsupportedInstructionError(tag, len(data))
        if option == 0 and len(data) == _SET_AUTHORITY_DATA.size:
            return DecodedInstruction(
                tag=InstructionTag.SET_AUTHORITY,
                authority_type=AuthorityType.MINT_TOKENS,
            )
        if option == 1 and len(data) == _SET_AUTHORITY_DATA.size + 32:
            return DecodedInstruction(
                tag=InstructionTag.SET_AUTHORITY,
                authority_type=AuthorityType.MINT_TOKENS,
                new_authority=Identity(bytes(data[_SET_AUTHORITY_DATA.size:])),
            )
        raise UnsupportedInstructionError(tag, len(data))

    raise UnsupportedInstructionError(tag, len(data))
