"""
Fixed token and deployment constants.

Fee economics are set at launch and never change afterwards; there is no
runtime path that overrides anything declared here.
"""

# Token metadata (cosmetic; the mint's metadata lives with the ledger)
TOKEN_NAME = "9LIVES"
TOKEN_SYMBOL = "9LIVES"
TOKEN_DECIMALS = 9
TOTAL_SUPPLY = 999_000_000_000  # raw units at 9 decimals

# Default tax: 3% (300 bps) split 2% founder / 1% marketing
BPS_DENOMINATOR = 10_000
DEFAULT_TAX_BPS = 300
DEFAULT_FOUNDER_BPS = 200
DEFAULT_MARKETING_BPS = 100

# Registry capacities (hard ceilings, fixed at creation)
MAX_EXEMPT_ADDRS = 64
MAX_LP_ACCOUNTS = 16

# Domain tag the configuration address is derived from
CONFIG_SEED = b"config"

IDENTITY_LENGTH = 32

# Persisted layout of the configuration record:
# bump(1) + authority + 3 wallets (32 each) + 3 bps (2 each) + 2 list headers (4 each)
CONFIG_DISCRIMINATOR_SIZE = 8
CONFIG_BASE_SIZE = 1 + 4 * IDENTITY_LENGTH + 3 * 2 + 2 * 4


def config_account_space(
    exempt_capacity: int = MAX_EXEMPT_ADDRS,
    lp_capacity: int = MAX_LP_ACCOUNTS,
) -> int:
    """Total bytes reserved for one configuration record."""
    return (
        CONFIG_DISCRIMINATOR_SIZE
        + CONFIG_BASE_SIZE
        + IDENTITY_LENGTH * (exempt_capacity + lp_capacity)
    )
