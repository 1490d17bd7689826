"""
Tests for TransferRouter against the session-backed ledger.

Verifies:
- Taxed sells issue net, founder and marketing legs in that order
- Non-sells and exempt parties move as a single leg
- Precondition checks run before any ledger call
- Fee legs can only credit accounts owned by the configured wallets
"""

import pytest

from tax_kernel.domain.account_view import AccountHandle
from tax_kernel.domain.fees import U64_MAX
from tax_kernel.domain.instructions import (
    InstructionTag,
    decode_instruction,
    transfer_instruction,
)
from tax_kernel.exceptions import (
    ConfigNotInitializedError,
    InsufficientFundsError,
    InvalidAccountError,
    InvalidAmountError,
    InvalidMintError,
    TaxSplitMismatchError,
    UnauthorizedError,
)
from tax_kernel.services.transfer_router import TransferLeg, TransferRouter
from tests.conftest import STARTING_BALANCE


@pytest.fixture
def route(router, ledger, deployment):
    """Call transfer_with_tax with ledger-rendered handles; overrides by key."""

    def _route(amount, **overrides):
        keys = {
            "from_account": deployment.alice_account,
            "to_account": deployment.lp_account,
            "founder_fee_account": deployment.founder_account,
            "marketing_fee_account": deployment.marketing_account,
        }
        handles = {
            name: ledger.account_handle(key)
            for name, key in keys.items()
            if name not in overrides
        }
        handles.update({k: v for k, v in overrides.items() if k in keys})
        return router.transfer_with_tax(
            amount,
            mint=overrides.get("mint", deployment.mint),
            signing_authority=overrides.get("signer", deployment.alice),
            **handles,
        )

    return _route


def decoded_legs(ledger):
    return [
        (ix.accounts[0].key, ix.accounts[1].key, decode_instruction(ix.data).amount)
        for ix in ledger.invocations
    ]


class TestTaxedSell:
    def test_ten_million_sell(self, route, ledger, deployment):
        receipt = route(10_000_000)

        assert receipt.taxed
        assert receipt.legs == (
            TransferLeg(deployment.alice_account, deployment.lp_account, 9_700_000),
            TransferLeg(deployment.alice_account, deployment.founder_account, 200_000),
            TransferLeg(deployment.alice_account, deployment.marketing_account, 100_000),
        )
        assert decoded_legs(ledger) == [
            (deployment.alice_account, deployment.lp_account, 9_700_000),
            (deployment.alice_account, deployment.founder_account, 200_000),
            (deployment.alice_account, deployment.marketing_account, 100_000),
        ]
        assert receipt.total_debited == 10_000_000
        assert receipt.fee_split.tax_total == 300_000

    def test_balances_after_sell(self, route, ledger, deployment):
        route(10_000_000)
        assert ledger.balance_of(deployment.alice_account) == STARTING_BALANCE - 10_000_000
        assert ledger.balance_of(deployment.lp_account) == 9_700_000
        assert ledger.balance_of(deployment.founder_account) == 200_000
        assert ledger.balance_of(deployment.marketing_account) == 100_000

    def test_every_leg_is_a_signed_transfer(self, route, ledger, deployment):
        route(10_000_000)
        for ix in ledger.invocations:
            assert ix.program_id == deployment.token_program_id
            assert ix.data[0] == InstructionTag.TRANSFER
            assert ix.accounts[2].key == deployment.alice
            assert ix.accounts[2].is_signer

    def test_amount_one_zero_fee_legs_still_issued(self, route, ledger, deployment):
        receipt = route(1)
        assert receipt.taxed
        assert [leg.amount for leg in receipt.legs] == [1, 0, 0]
        assert len(ledger.invocations) == 3
        assert ledger.balance_of(deployment.lp_account) == 1

    def test_amount_99_mismatch_before_any_leg(self, route, ledger, captured_logs):
        with pytest.raises(TaxSplitMismatchError):
            route(99)
        assert ledger.invocations == []
        assert any(r["message"] == "tax_split_mismatch" for r in captured_logs())

    def test_logs_routed_transfer(self, route, captured_logs):
        route(10_000_000)
        record = next(r for r in captured_logs() if r["message"] == "transfer_routed")
        assert record["leg_count"] == 3
        assert record["tax_total"] == 300_000
        assert record["taxed"] is True


class TestUntaxed:
    def test_unregistered_destination_single_leg(self, route, ledger, deployment):
        receipt = route(10_000_000, to_account=ledger.account_handle(deployment.bob_account))
        assert not receipt.taxed
        assert not receipt.is_sell
        assert receipt.fee_split is None
        assert decoded_legs(ledger) == [
            (deployment.alice_account, deployment.bob_account, 10_000_000)
        ]
        assert ledger.balance_of(deployment.founder_account) == 0

    def test_amount_99_untaxed_passes(self, route, ledger, deployment):
        receipt = route(99, to_account=ledger.account_handle(deployment.bob_account))
        assert receipt.total_debited == 99

    def test_exempt_seller(self, route, registry, ledger, deployment):
        registry.add_exempt(deployment.authority, deployment.alice)
        receipt = route(10_000_000)
        assert receipt.is_sell
        assert receipt.is_exempt
        assert len(receipt.legs) == 1
        assert ledger.balance_of(deployment.lp_account) == 10_000_000

    def test_core_wallet_seller_exempt_after_removal(self, route, registry, ledger, deployment):
        registry.remove_exempt(deployment.authority, deployment.ritual_vault_wallet)
        receipt = route(
            1_000,
            from_account=ledger.account_handle(deployment.vault_account),
            signer=deployment.ritual_vault_wallet,
        )
        assert not receipt.taxed

    def test_exempt_destination_owner(self, route, registry, ledger, deployment):
        registry.add_exempt(deployment.authority, deployment.lp_owner)
        receipt = route(10_000_000)
        assert not receipt.taxed

    def test_deregistered_lp_account(self, route, registry, deployment):
        registry.remove_lp_account(deployment.authority, deployment.lp_account)
        assert not route(10_000_000).is_sell


class TestPreconditions:
    @pytest.mark.parametrize("amount", [0, -1, U64_MAX + 1])
    def test_invalid_amount(self, route, ledger, amount):
        with pytest.raises(InvalidAmountError):
            route(amount)
        assert ledger.invocations == []

    def test_config_not_initialized(self, session, ledger, deployment):
        router = TransferRouter(session, ledger, deployment.program_id)
        with pytest.raises(ConfigNotInitializedError):
            router.transfer_with_tax(
                10,
                ledger.account_handle(deployment.alice_account),
                ledger.account_handle(deployment.bob_account),
                ledger.account_handle(deployment.founder_account),
                ledger.account_handle(deployment.marketing_account),
                deployment.mint,
                deployment.alice,
            )

    def test_wrong_mint_argument(self, route, ledger, deployment):
        with pytest.raises(InvalidMintError) as exc_info:
            route(10_000_000, mint=deployment.other_mint)
        assert exc_info.value.expected_mint == str(deployment.other_mint)
        assert ledger.invocations == []

    def test_source_of_other_mint(self, route, ledger, deployment):
        with pytest.raises(InvalidMintError) as exc_info:
            route(10_000_000, from_account=ledger.account_handle(deployment.foreign_mint_account))
        assert exc_info.value.account == str(deployment.foreign_mint_account)

    def test_fee_account_of_other_mint(self, route, ledger, deployment):
        with pytest.raises(InvalidMintError):
            route(
                10_000_000,
                marketing_fee_account=ledger.account_handle(deployment.foreign_mint_account),
            )
        assert ledger.invocations == []

    def test_short_account_record(self, route, ledger, deployment):
        with pytest.raises(InvalidAccountError):
            route(10_000_000, to_account=AccountHandle(deployment.lp_account, b"\x00" * 40))
        assert ledger.invocations == []

    def test_signer_must_own_source(self, route, ledger, deployment):
        with pytest.raises(UnauthorizedError) as exc_info:
            route(10_000_000, signer=deployment.mallory)
        assert exc_info.value.role == "source owner"
        assert ledger.invocations == []

    def test_founder_fee_account_not_owned_by_founder(self, route, ledger, deployment):
        with pytest.raises(UnauthorizedError) as exc_info:
            route(
                10_000_000,
                founder_fee_account=ledger.account_handle(deployment.mallory_account),
            )
        assert exc_info.value.role == "founder fee account owner"
        assert exc_info.value.expected == str(deployment.founder_wallet)
        assert ledger.invocations == []
        assert ledger.balance_of(deployment.mallory_account) == 0

    def test_marketing_fee_account_not_owned_by_marketing(self, route, ledger, deployment):
        with pytest.raises(UnauthorizedError) as exc_info:
            route(
                10_000_000,
                marketing_fee_account=ledger.account_handle(deployment.mallory_account),
            )
        assert exc_info.value.role == "marketing fee account owner"

    def test_fee_accounts_checked_on_untaxed_path(self, route, ledger, deployment):
        with pytest.raises(UnauthorizedError):
            route(
                10_000_000,
                to_account=ledger.account_handle(deployment.bob_account),
                founder_fee_account=ledger.account_handle(deployment.mallory_account),
            )

    def test_mint_checked_before_owner(self, route, ledger, deployment):
        with pytest.raises(InvalidMintError):
            route(
                10_000_000,
                signer=deployment.mallory,
                to_account=ledger.account_handle(deployment.foreign_mint_account),
            )


class TestLedgerFailure:
    def test_third_leg_failure_propagates(self, route, ledger, deployment):
        # Drain alice so the marketing leg cannot be covered
        ledger.invoke(
            transfer_instruction(
                deployment.token_program_id,
                deployment.alice_account,
                deployment.bob_account,
                deployment.alice,
                STARTING_BALANCE - 9_950_000,
            )
        )
        ledger.invocations.clear()

        with pytest.raises(InsufficientFundsError):
            route(10_000_000)
        assert len(ledger.invocations) == 3
