"""Database layer - engine, base classes and column types."""

from tax_kernel.db.base import Base, TrackedBase, UUIDString
from tax_kernel.db.engine import (
    create_tables,
    get_engine,
    get_session,
    session_scope,
)
from tax_kernel.db.types import IdentityString, U64Amount

__all__ = [
    "get_engine",
    "get_session",
    "session_scope",
    "create_tables",
    "Base",
    "TrackedBase",
    "UUIDString",
    "IdentityString",
    "U64Amount",
]
