"""
Module: tax_kernel.db.types
Responsibility: Column types shared by every model: identities and u64 token
    amounts.
Architecture position: Kernel > DB.  May be imported by models/ and
    services/.  MUST NOT import from either.

Invariants enforced:
    - Identities round-trip as Identity objects, stored as 64 hex chars.
    - U64Amount stores u64 values in Numeric(20, 0) (BigInteger is signed
      and tops out at 2**63 - 1) and always loads them back as int.
      SQLite gets zero-padded 20-digit text instead: its NUMERIC results
      pass through float, which is not exact above 2**53, and its INTEGER
      is signed 64-bit.
"""

from sqlalchemy import Numeric, String
from sqlalchemy.types import TypeDecorator

from tax_kernel.domain.identity import Identity


class IdentityString(TypeDecorator):
    """32-byte Identity stored as 64 lowercase hex characters."""

    impl = String(64)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return str(Identity.coerce(value))

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return Identity.from_hex(value)


class U64Amount(TypeDecorator):
    """Unsigned 64-bit token amount, loaded back as int."""

    impl = Numeric(20, 0)
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "sqlite":
            return dialect.type_descriptor(String(20))
        return dialect.type_descriptor(Numeric(20, 0))

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if dialect.name == "sqlite":
            return f"{int(value):020d}"
        return int(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return int(value)
