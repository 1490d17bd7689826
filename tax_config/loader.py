"""
Deployment Configuration Loader (``tax_config.loader``).

Loads a YAML deployment file, applies environment overrides, and parses the
result into a frozen ``DeploymentConfig``.

Environment overrides (non-empty values win over the file):

    TAX_KERNEL_PROGRAM_ID       program_id
    TAX_KERNEL_TOKEN_PROGRAM    token_program_id
    TAX_KERNEL_DATABASE_URL     database_url
    TAX_KERNEL_LOG_LEVEL        log_level
    FOUNDER_FEE_WALLET          wallets.founder_fee_wallet
    MARKETING_WALLET            wallets.marketing_wallet
    RITUAL_VAULT_WALLET         wallets.ritual_vault_wallet

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` naming the key.
* Malformed identity  -> ``InvalidIdentityError`` from the kernel.
* Unknown log level  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from tax_config.schema import DeploymentConfig, TokenMetadata, WalletSet
from tax_kernel.domain.identity import Identity

_ENV_OVERRIDES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("TAX_KERNEL_PROGRAM_ID", ("program_id",)),
    ("TAX_KERNEL_TOKEN_PROGRAM", ("token_program_id",)),
    ("TAX_KERNEL_DATABASE_URL", ("database_url",)),
    ("TAX_KERNEL_LOG_LEVEL", ("log_level",)),
    ("FOUNDER_FEE_WALLET", ("wallets", "founder_fee_wallet")),
    ("MARKETING_WALLET", ("wallets", "marketing_wallet")),
    ("RITUAL_VAULT_WALLET", ("wallets", "ritual_vault_wallet")),
)


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def apply_env_overrides(data: dict[str, Any], environ: Mapping[str, str]) -> dict[str, Any]:
    """Return a copy of ``data`` with non-empty environment values applied."""
    merged = json.loads(json.dumps(data))
    for env_name, path in _ENV_OVERRIDES:
        value = environ.get(env_name, "").strip()
        if not value:
            continue
        target = merged
        for key in path[:-1]:
            target = target.setdefault(key, {})
        target[path[-1]] = value
    return merged


def compute_checksum(data: dict[str, Any]) -> str:
    """Deterministic SHA-256 of the effective configuration."""
    canonical = json.dumps(data, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def _optional_identity(value: Any) -> Identity | None:
    if value is None or value == "":
        return None
    return Identity.coerce(str(value))


def parse_wallets(data: dict[str, Any]) -> WalletSet:
    return WalletSet(
        founder_fee_wallet=_optional_identity(data.get("founder_fee_wallet")),
        marketing_wallet=_optional_identity(data.get("marketing_wallet")),
        ritual_vault_wallet=_optional_identity(data.get("ritual_vault_wallet")),
    )


def parse_token(data: dict[str, Any]) -> TokenMetadata:
    defaults = TokenMetadata()
    return TokenMetadata(
        name=data.get("name", defaults.name),
        symbol=data.get("symbol", defaults.symbol),
        decimals=int(data.get("decimals", defaults.decimals)),
        total_supply=int(data.get("total_supply", defaults.total_supply)),
    )


def parse_deployment(data: dict[str, Any]) -> DeploymentConfig:
    """
    Parse a ``DeploymentConfig`` from a merged dict.

    Raises:
        KeyError: if ``name``, ``program_id``, ``token_program_id`` or
            ``database_url`` is missing.
        ValueError: if ``log_level`` is not a logging level name.
    """
    log_level = str(data.get("log_level", "INFO")).upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise ValueError(f"Unknown log level: {log_level!r}")

    return DeploymentConfig(
        name=data["name"],
        program_id=Identity.coerce(str(data["program_id"])),
        token_program_id=Identity.coerce(str(data["token_program_id"])),
        database_url=data["database_url"],
        log_level=log_level,
        wallets=parse_wallets(data.get("wallets") or {}),
        token=parse_token(data.get("token") or {}),
        checksum=compute_checksum(data),
    )


def load_deployment(path: Path, environ: Mapping[str, str]) -> DeploymentConfig:
    """Load ``path``, apply ``environ`` overrides, and parse."""
    return parse_deployment(apply_env_overrides(load_yaml_file(path), environ))
