#!/usr/bin/env python3
"""
Print the derived config address and the stored configuration record.

Usage:
    python scripts/show_config.py [--config path.yaml]

Wallets stored on the record are compared with the deployment file /
environment, and any difference is flagged.
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from tax_config import get_deployment_config
from tax_config.schema import DeploymentConfig
from tax_kernel.constants import config_account_space
from tax_kernel.db.engine import create_tables, init_engine_from_url
from tax_kernel.domain.identity import derive_config_address
from tax_kernel.domain.policy import ConfigSnapshot
from tax_kernel.kernel import TaxKernel
from tax_kernel.logging_config import configure_logging
from tax_kernel.services.ledger_service import SessionLedger


def wallet_mismatches(snapshot: ConfigSnapshot, config: DeploymentConfig) -> list[str]:
    """Names of wallets whose stored value differs from the deployment config."""
    expected = {
        "founder_wallet": config.wallets.founder_fee_wallet,
        "marketing_wallet": config.wallets.marketing_wallet,
        "ritual_vault_wallet": config.wallets.ritual_vault_wallet,
    }
    return [
        name for name, value in expected.items()
        if value is not None and getattr(snapshot, name) != value
    ]


def run(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Show the tax configuration record.")
    parser.add_argument("--config", type=Path, default=None, help="Deployment YAML file")
    args = parser.parse_args(argv)

    config = get_deployment_config(args.config)
    print(f"Config address: {derive_config_address(config.program_id)}")
    token = config.token
    print(
        f"Token: {token.name} ({token.symbol}), {token.decimals} decimals, "
        f"total supply {token.display_supply()}"
    )
    print(f"Config record size: {config_account_space()} bytes")

    configure_logging(level=config.log_level)
    init_engine_from_url(config.database_url)
    create_tables()
    kernel = TaxKernel(
        config.program_id,
        ledger_factory=lambda session: SessionLedger(session, config.token_program_id),
    )
    snapshot = kernel.show_config()
    if snapshot is None:
        print("Config not initialized.")
        return 1

    print(f"  authority:           {snapshot.authority}")
    print(f"  founder_wallet:      {snapshot.founder_wallet}")
    print(f"  marketing_wallet:    {snapshot.marketing_wallet}")
    print(f"  ritual_vault_wallet: {snapshot.ritual_vault_wallet}")
    print(f"  tax_bps:             {snapshot.tax_bps}")
    print(f"  founder_bps:         {snapshot.founder_bps}")
    print(f"  marketing_bps:       {snapshot.marketing_bps}")
    print(f"  exempt ({len(snapshot.exempt)}):")
    for identity in snapshot.exempt:
        print(f"    - {identity}")
    print(f"  lp_accounts ({len(snapshot.lp_accounts)}):")
    for identity in snapshot.lp_accounts:
        print(f"    - {identity}")

    mismatches = wallet_mismatches(snapshot, config)
    for name in mismatches:
        print(f"WARNING: {name} differs from deployment config")
    return 0


def main():
    sys.exit(run())


if __name__ == "__main__":
    main()
