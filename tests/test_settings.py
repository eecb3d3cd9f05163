"""Config loading tests: default + profile overlay, validation."""

import tempfile
from pathlib import Path

import pytest

from poolprice.config import Settings, get_settings, load_config
from poolprice.errors import ConfigError


def _write(directory: Path, name: str, text: str) -> None:
    (directory / name).write_text(text, encoding="utf-8")


def test_profile_overlay_deep_merges():
    with tempfile.TemporaryDirectory() as d:
        cfg = Path(d)
        _write(cfg, "default.toml", '[engine]\nanchor_symbol = "KLV"\nmax_iterations = 10\n\n[cache]\nbackend = "memory"\nttl_sec = 300\n')
        _write(cfg, "dev.toml", "[engine]\nmax_iterations = 4\n\n[cache]\nttl_sec = 30\n")
        settings = get_settings("dev", cfg)
        assert settings.anchor_symbol == "KLV"
        assert settings.max_iterations == 4
        assert settings.cache_backend == "memory"
        assert settings.cache_ttl_sec == 30
        # unknown profile falls back to defaults
        assert get_settings("nope", cfg).max_iterations == 10


def test_missing_config_dir_uses_defaults():
    with tempfile.TemporaryDirectory() as d:
        assert load_config(None, Path(d)) == {}
        settings = get_settings(None, Path(d))
    assert settings.anchor_symbol == "KLV"
    assert settings.max_pair_slots == 50
    assert settings.stablecoins == {
        "USDT": {"price_usd": 1.0, "peg": "USD"},
        "USDC": {"price_usd": 1.0, "peg": "USD"},
    }


def test_stablecoins_accept_bare_numbers():
    settings = Settings(engine={"stablecoins": {"USDT": 1, "EURC": {"price_usd": 1.08, "peg": "EUR"}}})
    assert settings.stablecoins == {
        "USDT": {"price_usd": 1.0, "peg": "USD"},
        "EURC": {"price_usd": 1.08, "peg": "EUR"},
    }


def test_invalid_values_raise_config_error():
    with pytest.raises(ConfigError):
        Settings(engine={"max_iterations": 0}).max_iterations
    with pytest.raises(ConfigError):
        Settings(engine={"stablecoins": {"USDT": -1}}).stablecoins
    with pytest.raises(ConfigError):
        Settings(cache={"backend": "redis"}).cache_backend
    with pytest.raises(ConfigError):
        Settings(oracle={"timeout_sec": "soon"}).oracle_timeout_sec


def test_shipped_config_loads():
    cfg = Path(__file__).resolve().parent.parent / "config"
    settings = get_settings("dev", cfg)
    assert settings.precision["DGKO"] == 10_000
    assert settings.cache_backend == "duckdb"
    assert settings.record_snapshots is True
    assert settings.logging_level == "DEBUG"


def test_bad_precision_raises_config_error():
    with pytest.raises(ConfigError):
        Settings(pairs={"precision": {"KLV": "six"}}).precision
    with pytest.raises(ConfigError):
        Settings(pairs={"precision": {"KLV": 0}}).precision
    assert Settings(pairs={"precision": {"DGKO": "10000"}}).precision == {"DGKO": 10_000}


def test_invalid_toml_raises_config_error():
    with tempfile.TemporaryDirectory() as d:
        cfg = Path(d)
        _write(cfg, "default.toml", "[engine\nanchor_symbol = ")
        with pytest.raises(ConfigError):
            load_config(None, cfg)
