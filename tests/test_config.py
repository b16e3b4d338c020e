"""TOML config loading and profile overlay."""

from pathlib import Path

from pnpmarkets.config import get_settings, load_config


def write_config(directory: Path) -> None:
    directory.mkdir(parents=True, exist_ok=True)
    (directory / "default.toml").write_text(
        '[registry]\ndir = "markets"\nlock_timeout_sec = 10\n\n'
        '[chain]\nrpc_url = "https://mainnet.base.org"\n\n'
        '[logging]\nlevel = "info"\nformat = "console"\n'
    )
    (directory / "dev.toml").write_text('[registry]\ndir = "data/markets"\n\n[logging]\nlevel = "DEBUG"\n')


def test_profile_overlay_deep_merges(tmp_path):
    write_config(tmp_path)
    raw = load_config("dev", tmp_path)
    assert raw["registry"] == {"dir": "data/markets", "lock_timeout_sec": 10}
    settings = get_settings("dev", tmp_path)
    assert settings.registry_dir == Path("data/markets")
    assert settings.logging_level == "DEBUG"
    assert settings.lock_timeout_sec == 10.0


def test_defaults_without_config(tmp_path):
    settings = get_settings(config_dir=tmp_path)
    assert settings.registry_dir == Path("markets")
    assert settings.rpc_url == "https://mainnet.base.org"
    assert settings.explorer_url == "https://basescan.org"
    assert settings.default_collateral == "USDC"
    assert settings.require_settled_before_create is True
    assert settings.client_factory == ""


def test_unknown_profile_falls_back_to_default(tmp_path):
    write_config(tmp_path)
    settings = get_settings("prod", tmp_path)
    assert settings.registry_dir == Path("markets")
    assert settings.logging_level == "INFO"
