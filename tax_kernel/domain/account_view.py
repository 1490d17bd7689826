"""
Account introspector.

Narrow adapter over the ledger's raw token-account layout.  Only the first
64 bytes matter here:

    offset  0..32   asset (mint) identity
    offset 32..64   owning identity

Everything after byte 64 (amount, delegate, state, ...) belongs to the ledger
and is never read by the kernel.  No other module slices account bytes.
"""

from __future__ import annotations

from dataclasses import dataclass

from tax_kernel.constants import IDENTITY_LENGTH
from tax_kernel.domain.identity import Identity, IdentityLike
from tax_kernel.exceptions import InvalidAccountError

MINT_OFFSET = 0
OWNER_OFFSET = MINT_OFFSET + IDENTITY_LENGTH
MIN_ACCOUNT_LENGTH = OWNER_OFFSET + IDENTITY_LENGTH


@dataclass(frozen=True)
class AccountHandle:
    """An account as presented by the host: its key plus raw record bytes."""

    key: Identity
    data: bytes

    @classmethod
    def of(cls, key: IdentityLike, data: bytes) -> AccountHandle:
        return cls(key=Identity.coerce(key), data=bytes(data))


@dataclass(frozen=True)
class TokenAccountView:
    """Read-only projection of a token account. Re-derived on every call."""

    key: Identity
    asset_identity: Identity
    owning_identity: Identity


def inspect(handle: AccountHandle) -> TokenAccountView:
    """
    Decode the asset and owner identities of a raw token account.

    Raises:
        InvalidAccountError: record shorter than MIN_ACCOUNT_LENGTH bytes.
    """
    data = handle.data
    if len(data) < MIN_ACCOUNT_LENGTH:
        raise InvalidAccountError(str(handle.key), len(data), MIN_ACCOUNT_LENGTH)
    return TokenAccountView(
        key=handle.key,
        asset_identity=Identity(data[MINT_OFFSET:MINT_OFFSET + IDENTITY_LENGTH]),
        owning_identity=Identity(data[OWNER_OFFSET:OWNER_OFFSET + IDENTITY_LENGTH]),
    )
