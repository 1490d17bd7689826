"""Configuration record sizing."""

from tax_kernel.constants import (
    CONFIG_BASE_SIZE,
    CONFIG_DISCRIMINATOR_SIZE,
    MAX_EXEMPT_ADDRS,
    MAX_LP_ACCOUNTS,
    config_account_space,
)


class TestConfigAccountSpace:
    def test_base_layout(self):
        # bump + authority + 3 wallets + 3 bps + 2 list headers
        assert CONFIG_BASE_SIZE == 1 + 4 * 32 + 3 * 2 + 2 * 4 == 143

    def test_default_capacity(self):
        assert config_account_space() == 2711
        assert config_account_space() == config_account_space(MAX_EXEMPT_ADDRS, MAX_LP_ACCOUNTS)

    def test_empty_lists(self):
        assert config_account_space(0, 0) == CONFIG_DISCRIMINATOR_SIZE + CONFIG_BASE_SIZE

    def test_grows_by_one_identity_per_slot(self):
        assert config_account_space(1, 0) - config_account_space(0, 0) == 32
        assert config_account_space(0, 1) - config_account_space(0, 0) == 32
