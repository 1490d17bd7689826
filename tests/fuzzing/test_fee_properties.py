"""
Property tests for the fee calculator.

Skipped when hypothesis is not installed.
"""

import pytest

hypothesis = pytest.importorskip("hypothesis")

from hypothesis import given, settings  # noqa: E402
from hypothesis import strategies as st  # noqa: E402

from tax_kernel.domain.fees import U64_MAX, compute_fee_split, share_of  # noqa: E402
from tax_kernel.exceptions import (  # noqa: E402
    InsufficientNetAmountError,
    MathOverflowError,
    TaxSplitMismatchError,
)

SAFE_AMOUNTS = st.integers(min_value=1, max_value=U64_MAX // 10_000)
BPS = st.integers(min_value=0, max_value=10_000)


@given(amount=SAFE_AMOUNTS, bps=BPS)
@settings(max_examples=300)
def test_share_never_exceeds_amount(amount, bps):
    share = share_of(amount, bps)
    assert 0 <= share <= amount
    assert share * 10_000 <= amount * bps < (share + 1) * 10_000


@given(amount=SAFE_AMOUNTS, founder_bps=BPS, marketing_bps=BPS)
@settings(max_examples=300)
def test_successful_split_conserves_amount(amount, founder_bps, marketing_bps):
    tax_bps = founder_bps + marketing_bps
    try:
        split = compute_fee_split(amount, tax_bps, founder_bps, marketing_bps)
    except (TaxSplitMismatchError, InsufficientNetAmountError, MathOverflowError):
        return
    assert split.founder_fee + split.marketing_fee == split.tax_total
    assert split.net + split.tax_total == amount
    assert split.net > 0


@given(multiple=st.integers(min_value=1, max_value=U64_MAX // 3_000_000))
def test_default_split_exact_on_multiples_of_denominator(multiple):
    amount = multiple * 10_000
    split = compute_fee_split(amount, 300, 200, 100)
    assert split.tax_total == multiple * 300
    assert split.founder_fee == multiple * 200
    assert split.marketing_fee == multiple * 100
