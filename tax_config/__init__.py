"""
tax_config -- single entrypoint for deployment configuration.

Responsibility:
    Provides the ONLY way operator tooling obtains deployment settings:
    ``get_deployment_config()``.  The kernel never imports this package;
    scripts read the config and pass plain values (program id, database URL,
    wallets) into the kernel.

Failure modes:
    - ``FileNotFoundError`` -- the deployment file does not exist.
    - ``KeyError`` / ``ValueError`` -- required keys missing or malformed.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

from tax_config.loader import load_deployment
from tax_config.schema import DeploymentConfig, TokenMetadata, WalletSet

_logger = logging.getLogger("tax_kernel.config")

_DEFAULT_CONFIG_DIR = Path(__file__).parent / "sets"
DEFAULT_DEPLOYMENT = "devnet"


def get_deployment_config(
    path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> DeploymentConfig:
    """The ONLY public configuration entrypoint.

    Args:
        path: Deployment YAML file.  Defaults to ``$TAX_KERNEL_CONFIG`` or
            ``tax_config/sets/devnet.yaml``.
        environ: Environment mapping for overrides.  Defaults to os.environ.

    Returns:
        Frozen DeploymentConfig.
    """
    env = os.environ if environ is None else environ
    if path is None:
        path = Path(env.get("TAX_KERNEL_CONFIG") or _DEFAULT_CONFIG_DIR / f"{DEFAULT_DEPLOYMENT}.yaml")

    config = load_deployment(path, env)

    _logger.info(
        "TAX_KERNEL_CONFIG_TRACE",
        extra={
            "deployment": config.name,
            "program_id": str(config.program_id),
            "checksum": config.checksum,
            "missing_wallets": list(config.wallets.missing()),
        },
    )
    return config


__all__ = [
    "get_deployment_config",
    "DeploymentConfig",
    "TokenMetadata",
    "WalletSet",
]
