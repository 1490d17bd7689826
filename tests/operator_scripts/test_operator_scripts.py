"""Tests for scripts/init_config.py and scripts/show_config.py."""

import pytest
import yaml

from scripts import init_config, show_config
from tax_config.schema import DeploymentConfig, WalletSet
from tax_kernel.db.engine import reset_engine
from tax_kernel.domain.identity import Identity, derive_config_address
from tests.conftest import ident

PROGRAM = ident("script-program")
AUTHORITY = ident("script-authority")
FOUNDER = ident("script-founder")
MARKETING = ident("script-marketing")
VAULT = ident("script-vault")

_OVERRIDE_VARS = (
    "TAX_KERNEL_CONFIG",
    "TAX_KERNEL_PROGRAM_ID",
    "TAX_KERNEL_TOKEN_PROGRAM",
    "TAX_KERNEL_DATABASE_URL",
    "TAX_KERNEL_LOG_LEVEL",
    "FOUNDER_FEE_WALLET",
    "MARKETING_WALLET",
    "RITUAL_VAULT_WALLET",
)


@pytest.fixture
def config_path(tmp_path, monkeypatch):
    for name in _OVERRIDE_VARS:
        monkeypatch.delenv(name, raising=False)
    path = tmp_path / "deployment.yaml"
    path.write_text(
        yaml.safe_dump(
            {
                "name": "script-test",
                "program_id": str(PROGRAM),
                "token_program_id": str(ident("script-token-program")),
                "database_url": f"sqlite:///{tmp_path / 'kernel.db'}",
            }
        )
    )
    yield path
    reset_engine()


@pytest.fixture
def wallets_env(monkeypatch):
    monkeypatch.setenv("FOUNDER_FEE_WALLET", str(FOUNDER))
    monkeypatch.setenv("MARKETING_WALLET", str(MARKETING))
    monkeypatch.setenv("RITUAL_VAULT_WALLET", str(VAULT))


class TestInitConfig:
    def test_missing_wallets(self, config_path, capsys):
        assert init_config.run(["--authority", str(AUTHORITY), "--config", str(config_path)]) == 1
        err = capsys.readouterr().err
        assert "FOUNDER_FEE_WALLET" in err
        assert "RITUAL_VAULT_WALLET" in err

    def test_partial_wallets(self, config_path, monkeypatch, capsys):
        monkeypatch.setenv("FOUNDER_FEE_WALLET", str(FOUNDER))
        assert init_config.run(["--authority", str(AUTHORITY), "--config", str(config_path)]) == 1
        err = capsys.readouterr().err
        assert "FOUNDER_FEE_WALLET" not in err
        assert "MARKETING_WALLET" in err

    def test_initializes(self, config_path, wallets_env, capsys):
        assert init_config.run(["--authority", str(AUTHORITY), "--config", str(config_path)]) == 0
        out = capsys.readouterr().out
        assert str(derive_config_address(PROGRAM)) in out
        assert "300 bps" in out

    def test_second_run_fails(self, config_path, wallets_env, capsys):
        argv = ["--authority", str(AUTHORITY), "--config", str(config_path)]
        assert init_config.run(argv) == 0
        assert init_config.run(argv) == 1
        assert "ALREADY_INITIALIZED" in capsys.readouterr().err

    def test_authority_required(self, config_path):
        with pytest.raises(SystemExit):
            init_config.run(["--config", str(config_path)])


class TestShowConfig:
    def test_not_initialized(self, config_path, capsys):
        assert show_config.run(["--config", str(config_path)]) == 1
        out = capsys.readouterr().out
        assert str(derive_config_address(PROGRAM)) in out
        assert "not initialized" in out
        assert "Token: 9LIVES (9LIVES), 9 decimals, total supply 999" in out
        assert "Config record size: 2711 bytes" in out

    def test_shows_record(self, config_path, wallets_env, capsys):
        init_config.run(["--authority", str(AUTHORITY), "--config", str(config_path)])
        capsys.readouterr()

        assert show_config.run(["--config", str(config_path)]) == 0
        out = capsys.readouterr().out
        assert str(AUTHORITY) in out
        assert "exempt (3)" in out
        assert "WARNING" not in out

    def test_flags_changed_wallet(self, config_path, wallets_env, monkeypatch, capsys):
        init_config.run(["--authority", str(AUTHORITY), "--config", str(config_path)])
        monkeypatch.setenv("MARKETING_WALLET", str(ident("someone-else")))
        capsys.readouterr()

        assert show_config.run(["--config", str(config_path)]) == 0
        out = capsys.readouterr().out
        assert "WARNING: marketing_wallet differs from deployment config" in out
        assert "founder_wallet differs" not in out


class TestWalletMismatches:
    def test_unset_wallets_never_flagged(self, kernel, deployment):
        snapshot = kernel.show_config()
        config = DeploymentConfig(
            name="x",
            program_id=deployment.program_id,
            token_program_id=deployment.token_program_id,
            database_url="sqlite://",
        )
        assert show_config.wallet_mismatches(snapshot, config) == []

    def test_differing_wallet_named(self, kernel, deployment):
        snapshot = kernel.show_config()
        config = DeploymentConfig(
            name="x",
            program_id=deployment.program_id,
            token_program_id=deployment.token_program_id,
            database_url="sqlite://",
            wallets=WalletSet(
                founder_fee_wallet=deployment.founder_wallet,
                ritual_vault_wallet=Identity(b"\x00" * 32),
            ),
        )
        assert show_config.wallet_mismatches(snapshot, config) == ["ritual_vault_wallet"]
