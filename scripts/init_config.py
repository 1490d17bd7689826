#!/usr/bin/env python3
"""
Create the configuration record of a deployment.

Usage:
    python scripts/init_config.py --authority <hex> [--config path.yaml]

Reads the deployment file (tax_config/sets/devnet.yaml by default) with
FOUNDER_FEE_WALLET, MARKETING_WALLET and RITUAL_VAULT_WALLET taken from the
environment when set.  The authority given here becomes the only principal
allowed to edit the exemption and LP registries.

Exit codes:
    0  record created
    1  a wallet is missing, or the kernel rejected the call
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from tax_config import get_deployment_config
from tax_kernel.db.engine import create_tables, init_engine_from_url
from tax_kernel.domain.identity import derive_config_address
from tax_kernel.exceptions import TaxKernelError
from tax_kernel.kernel import TaxKernel
from tax_kernel.logging_config import configure_logging
from tax_kernel.services.ledger_service import SessionLedger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Initialize the tax configuration record.")
    parser.add_argument("--authority", required=True, help="Authority identity (64 hex chars)")
    parser.add_argument("--config", type=Path, default=None, help="Deployment YAML file")
    return parser


def run(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    config = get_deployment_config(args.config)

    missing = config.wallets.missing()
    if missing:
        print(f"Missing required environment variables: {', '.join(missing)}", file=sys.stderr)
        return 1

    configure_logging(level=config.log_level)
    init_engine_from_url(config.database_url)
    create_tables()

    kernel = TaxKernel(
        config.program_id,
        ledger_factory=lambda session: SessionLedger(session, config.token_program_id),
    )
    try:
        snapshot = kernel.initialize(
            args.authority,
            config.wallets.founder_fee_wallet,
            config.wallets.marketing_wallet,
            config.wallets.ritual_vault_wallet,
        )
    except TaxKernelError as exc:
        print(f"Failed to initialize config at {derive_config_address(config.program_id)}", file=sys.stderr)
        print(f"Error [{exc.code}]: {exc}", file=sys.stderr)
        return 1

    print(f"Initialized config at: {snapshot.address}")
    print(f"  authority: {snapshot.authority}")
    print(f"  tax:       {snapshot.tax_bps} bps "
          f"({snapshot.founder_bps} founder / {snapshot.marketing_bps} marketing)")
    print(f"  exempt:    {len(snapshot.exempt)} wallet(s)")
    return 0


def main():
    sys.exit(run())


if __name__ == "__main__":
    main()
