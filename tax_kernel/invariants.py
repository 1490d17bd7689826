"""
Kernel Invariants Contract.

These invariants are hardcoded in the fee calculator, the registry and the
transfer router. No deployment file, environment variable or caller
argument can switch them off.

This module only declares them. Enforcement lives in domain/fees.py,
domain/policy.py, services/config_registry.py and services/transfer_router.py.
"""

from enum import Enum, unique


@unique
class KernelInvariant(str, Enum):
    """Non-configurable guarantees of the tax kernel."""

    TAX_SPLIT_CONSISTENCY = "tax_split_consistency"
    """founder_fee + marketing_fee == tax_total for every taxed transfer.
    Checked by compute_fee_split before any leg is issued."""

    INTEGER_FEE_MATH = "integer_fee_math"
    """Fee shares are floor(amount * bps / 10000) in u64 integer math.
    No floating point or Decimal participates in a split."""

    CORE_WALLET_EXEMPTION = "core_wallet_exemption"
    """Founder, marketing and ritual-vault wallets are exempt even after
    being removed from the explicit exemption list."""

    AUTHORITY_GATE = "authority_gate"
    """Only the configured authority mutates the registry. Only the
    ritual-vault wallet burns through the kernel."""

    FEE_ROUTING = "fee_routing"
    """Fee legs only credit accounts owned by the configured founder and
    marketing wallets."""

    CAPACITY_CEILING = "capacity_ceiling"
    """At most 64 exemptions and 16 LP destinations per deployment."""

    ATOMIC_LEGS = "atomic_legs"
    """All legs of one transfer commit together or not at all. Enforced by
    the single transaction around every public operation."""

    IMMUTABLE_ECONOMICS = "immutable_economics"
    """Authority, rates and routing wallets never change after initialize."""


ALL_KERNEL_INVARIANTS: frozenset[KernelInvariant] = frozenset(KernelInvariant)

# The kernel package may not import from these packages.
# Enforced by tests/architecture/test_kernel_boundary.py.
FORBIDDEN_KERNEL_IMPORTS: tuple[str, ...] = (
    "tax_config",
    "scripts",
)
