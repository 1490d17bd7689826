"""
Pure domain layer.

Value objects, fee arithmetic, account decoding, instruction encoding and
transfer classification, with NO dependencies on:
- ORM (SQLAlchemy)
- Database
- I/O

All domain objects are immutable and deterministic.
"""

from tax_kernel.domain.account_view import (
    MIN_ACCOUNT_LENGTH,
    AccountHandle,
    TokenAccountView,
    inspect,
)
from tax_kernel.domain.fees import FeeSplit, compute_fee_split, share_of
from tax_kernel.domain.identity import Identity, derive_config_address
from tax_kernel.domain.instructions import (
    AccountMeta,
    DecodedInstruction,
    Instruction,
    InstructionTag,
    burn_instruction,
    decode_instruction,
    set_mint_authority_none_instruction,
    transfer_instruction,
)
from tax_kernel.domain.policy import (
    ConfigSnapshot,
    TransferClassification,
    classify_transfer,
)

__all__ = [
    "AccountHandle",
    "TokenAccountView",
    "inspect",
    "MIN_ACCOUNT_LENGTH",
    "FeeSplit",
    "share_of",
    "compute_fee_split",
    "Identity",
    "derive_config_address",
    "AccountMeta",
    "Instruction",
    "InstructionTag",
    "DecodedInstruction",
    "transfer_instruction",
    "burn_instruction",
    "set_mint_authority_none_instruction",
    "decode_instruction",
    "ConfigSnapshot",
    "TransferClassification",
    "classify_transfer",
]
