"""
Identity - 32-byte public identities used for wallets, accounts and mints.

Pure value object. The textual form is 64 lowercase hex characters; that is
also the form stored in the database and emitted in logs.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Union

from tax_kernel.constants import CONFIG_SEED, IDENTITY_LENGTH
from tax_kernel.exceptions import InvalidIdentityError

_DERIVATION_MARKER = b"ProgramDerivedAddress"


@dataclass(frozen=True, slots=True)
class Identity:
    """
    A 32-byte public identity.

    Equality and hashing are by raw bytes, so identities can be used directly
    as set members and dict keys.
    """

    raw: bytes

    def __post_init__(self) -> None:
        if not isinstance(self.raw, bytes):
            raise InvalidIdentityError(repr(self.raw), "raw value must be bytes")
        if len(self.raw) != IDENTITY_LENGTH:
            raise InvalidIdentityError(
                self.raw.hex(),
                f"expected {IDENTITY_LENGTH} bytes, got {len(self.raw)}",
            )

    @classmethod
    def from_hex(cls, value: str) -> Identity:
        try:
            raw = bytes.fromhex(value)
        except ValueError:
            raise InvalidIdentityError(value, "not a hex string") from None
        return cls(raw)

    @classmethod
    def coerce(cls, value: IdentityLike) -> Identity:
        """Accept an Identity, 32 raw bytes, or a 64-character hex string."""
        if isinstance(value, Identity):
            return value
        if isinstance(value, (bytes, bytearray, memoryview)):
            return cls(bytes(value))
        if isinstance(value, str):
            return cls.from_hex(value.strip())
        raise InvalidIdentityError(repr(value), f"unsupported type {type(value).__name__}")

    def __str__(self) -> str:
        return self.raw.hex()

    def __repr__(self) -> str:
        return f"Identity({self.short()})"

    def short(self) -> str:
        """Abbreviated form for human-facing output."""
        h = self.raw.hex()
        return f"{h[:6]}..{h[-4:]}"


IdentityLike = Union[Identity, bytes, bytearray, memoryview, str]


def derive_config_address(program_id: IdentityLike, seed: bytes = CONFIG_SEED) -> Identity:
    """
    Deterministic address of the single configuration record of a deployment.

    Same program id and seed always yield the same address, so there is
    exactly one configuration record per deployment.
    """
    program = Identity.coerce(program_id)
    digest = hashlib.sha256(seed + program.raw + _DERIVATION_MARKER).digest()
    return Identity(digest)
