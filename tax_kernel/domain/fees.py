"""
Fixed-point fee calculator.

Responsibility:
    Computes basis-point shares of u64 token amounts and the three-way sell-tax
    split.  Pure functions only: no ORM, no logging, no I/O.

Invariants enforced:
    - Integer math only.  share_of() is floor(amount * bps / 10000) computed
      with int arithmetic; floats and Decimals never participate.
    - u64 working width.  Inputs outside u64/u16 and products that do not fit
      in u64 raise MathOverflowError (Python ints never overflow on their own,
      so the ceiling is checked explicitly).
    - Split consistency.  compute_fee_split() rejects any split where
      founder_fee + marketing_fee != tax_total.

Failure modes:
    - MathOverflowError: amount or bps out of range, or product > u64 max.
    - TaxSplitMismatchError: separate flooring made the legs disagree with the
      total (e.g. amount=99 at 300/200/100 gives 2 != 1 + 0).
    - InsufficientNetAmountError: tax_total >= amount.
"""

from __future__ import annotations

from dataclasses import dataclass

from tax_kernel.constants import BPS_DENOMINATOR
from tax_kernel.exceptions import (
    InsufficientNetAmountError,
    InvalidAmountError,
    MathOverflowError,
    TaxSplitMismatchError,
)

U64_MAX = 2**64 - 1
U16_MAX = 2**16 - 1


def require_amount(amount: int) -> None:
    """Raise InvalidAmountError unless 0 < amount <= u64 max."""
    if not 0 < amount <= U64_MAX:
        raise InvalidAmountError(amount)


def share_of(amount: int, bps: int) -> int:
    """
    Return floor(amount * bps / 10000).

    Raises:
        MathOverflowError: amount not in u64, bps not in u16, or the
            intermediate product exceeds u64.
    """
    if not 0 <= amount <= U64_MAX or not 0 <= bps <= U16_MAX:
        raise MathOverflowError(amount, bps)
    product = amount * bps
    if product > U64_MAX:
        raise MathOverflowError(amount, bps)
    return product // BPS_DENOMINATOR


@dataclass(frozen=True)
class FeeSplit:
    """Outcome of splitting one taxed amount into net and fee legs."""

    amount: int
    tax_total: int
    founder_fee: int
    marketing_fee: int
    net: int


def compute_fee_split(
    amount: int,
    tax_bps: int,
    founder_bps: int,
    marketing_bps: int,
) -> FeeSplit:
    """
    Split ``amount`` into net, founder fee and marketing fee.

    Checks run in a fixed order: overflow, split consistency, then net
    positivity.
    """
    tax_total = share_of(amount, tax_bps)
    founder_fee = share_of(amount, founder_bps)
    marketing_fee = share_of(amount, marketing_bps)

    if founder_fee + marketing_fee != tax_total:
        raise TaxSplitMismatchError(amount, tax_total, founder_fee, marketing_fee)
    if amount <= tax_total:
        raise InsufficientNetAmountError(amount, tax_total)

    return FeeSplit(
        amount=amount,
        tax_total=tax_total,
        founder_fee=founder_fee,
        marketing_fee=marketing_fee,
        net=amount - tax_total,
    )
