"""TOML config loading and profiles."""

from __future__ import annotations

import logging
import sys
import tomllib
from pathlib import Path
from typing import Any

from poolprice.errors import ConfigError

# Default config search path (project root or cwd)
_CONFIG_DIR = Path(__file__).resolve().parent.parent.parent.parent / "config"
_CWD_CONFIG = Path.cwd() / "config"

DEFAULT_STABLECOINS: dict[str, dict[str, Any]] = {
    "USDT": {"price_usd": 1.0, "peg": "USD"},
    "USDC": {"price_usd": 1.0, "peg": "USD"},
}


def _load_toml(path: Path) -> dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into base. Override values take precedence."""
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _find_config_dir(config_dir: Path | None = None) -> Path:
    if config_dir is not None:
        return config_dir
    if _CWD_CONFIG.exists():
        return _CWD_CONFIG
    return _CONFIG_DIR


def load_config(profile: str | None = None, config_dir: Path | None = None) -> dict[str, Any]:
    """Load merged config from default.toml and optional profile overlay."""
    directory = _find_config_dir(config_dir)
    default_path = directory / "default.toml"
    if not default_path.exists():
        return {}
    base = _load_toml(default_path)
    if profile:
        profile_path = directory / f"{profile}.toml"
        if profile_path.exists():
            overlay = _load_toml(profile_path)
            base = _deep_merge(base, overlay)
    return base


def get_settings(profile: str | None = None, config_dir: Path | None = None) -> Settings:
    """Return Settings instance from merged config."""
    raw = load_config(profile, config_dir)
    return Settings.from_dict(raw)


def _as_int(section: dict[str, Any], key: str, default: int, minimum: int = 0) -> int:
    value = section.get(key, default)
    try:
        result = int(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{key} must be an integer, got {value!r}") from e
    if result < minimum:
        raise ConfigError(f"{key} must be >= {minimum}, got {result}")
    return result


def _as_float(section: dict[str, Any], key: str, default: float) -> float:
    value = section.get(key, default)
    try:
        result = float(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{key} must be a number, got {value!r}") from e
    if result <= 0:
        raise ConfigError(f"{key} must be positive, got {result}")
    return result


class Settings:
    """Application settings from TOML config."""

    def __init__(
        self,
        *,
        engine: dict[str, Any] | None = None,
        pairs: dict[str, Any] | None = None,
        oracle: dict[str, Any] | None = None,
        trades: dict[str, Any] | None = None,
        network: dict[str, Any] | None = None,
        cache: dict[str, Any] | None = None,
        storage: dict[str, Any] | None = None,
        api: dict[str, Any] | None = None,
        logging: dict[str, Any] | None = None,
    ):
        self.engine = engine or {}
        self.pairs = pairs or {}
        self.oracle = oracle or {}
        self.trades = trades or {}
        self.network = network or {}
        self.cache = cache or {}
        self.storage = storage or {}
        self.api = api or {}
        self.logging = logging or {}

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Settings:
        return cls(
            engine=raw.get("engine"),
            pairs=raw.get("pairs"),
            oracle=raw.get("oracle"),
            trades=raw.get("trades"),
            network=raw.get("network"),
            cache=raw.get("cache"),
            storage=raw.get("storage"),
            api=raw.get("api"),
            logging=raw.get("logging"),
        )

    # Engine
    @property
    def anchor_symbol(self) -> str:
        return str(self.engine.get("anchor_symbol", "KLV"))

    @property
    def max_iterations(self) -> int:
        return _as_int(self.engine, "max_iterations", 10, minimum=1)

    @property
    def symbol_separator(self) -> str:
        return str(self.engine.get("symbol_separator", "-"))

    @property
    def stablecoins(self) -> dict[str, dict[str, Any]]:
        """Stablecoin symbol -> {price_usd, peg}. A bare number is read as a USD peg."""
        raw = self.engine.get("stablecoins")
        if raw is None:
            raw = DEFAULT_STABLECOINS
        out: dict[str, dict[str, Any]] = {}
        for symbol, value in raw.items():
            if isinstance(value, dict):
                price = value.get("price_usd", 1.0)
                peg = str(value.get("peg", "USD"))
            else:
                price, peg = value, "USD"
            try:
                price = float(price)
            except (TypeError, ValueError) as e:
                raise ConfigError(f"stablecoin {symbol} price must be a number, got {price!r}") from e
            if price <= 0:
                raise ConfigError(f"stablecoin {symbol} price must be positive, got {price}")
            out[str(symbol)] = {"price_usd": price, "peg": peg}
        return out

    # Pair reader
    @property
    def max_pair_slots(self) -> int:
        return _as_int(self.pairs, "max_pair_slots", 50)

    @property
    def node_api_base(self) -> str:
        return self.pairs.get("node_api_base", "https://api.mainnet.klever.org")

    @property
    def contract_address(self) -> str:
        return self.pairs.get(
            "contract_address", "klv1qqqqqqqqqqqqqpgq2jqc28xwmk82mng4kwpm3j9vkq3vyga8xw9qq85y6h"
        )

    @property
    def pair_timeout_sec(self) -> float:
        return _as_float(self.pairs, "timeout_sec", 10.0)

    @property
    def default_precision(self) -> int:
        return _as_int(self.pairs, "default_precision", 1_000_000, minimum=1)

    @property
    def precision(self) -> dict[str, int]:
        out: dict[str, int] = {}
        for symbol, value in (self.pairs.get("precision") or {}).items():
            try:
                scale = int(value)
            except (TypeError, ValueError) as e:
                raise ConfigError(f"precision for {symbol} must be an integer, got {value!r}") from e
            if scale < 1:
                raise ConfigError(f"precision for {symbol} must be >= 1, got {scale}")
            out[str(symbol)] = scale
        return out

    # Anchor oracle
    @property
    def oracle_url(self) -> str:
        return self.oracle.get("url", "https://api.coingecko.com/api/v3/simple/price")

    @property
    def oracle_coin_id(self) -> str:
        return self.oracle.get("coin_id", "klever")

    @property
    def oracle_timeout_sec(self) -> float:
        return _as_float(self.oracle, "timeout_sec", 10.0)

    # Trade history
    @property
    def trade_history_url(self) -> str:
        return self.trades.get("history_url", "http://localhost:3000/api/swap-history")

    @property
    def trade_timeout_sec(self) -> float:
        return _as_float(self.trades, "timeout_sec", 10.0)

    @property
    def network_name(self) -> str:
        return self.network.get("name", "mainnet")

    # Cache
    @property
    def cache_backend(self) -> str:
        backend = str(self.cache.get("backend", "memory")).lower()
        if backend not in ("memory", "duckdb", "none"):
            raise ConfigError(f"Unknown cache backend: {backend}")
        return backend

    @property
    def cache_ttl_sec(self) -> int:
        return _as_int(self.cache, "ttl_sec", 300)

    @property
    def cache_key(self) -> str:
        return self.cache.get("key", "poolprice:prices")

    # Storage
    @property
    def db_path(self) -> str:
        return self.storage.get("db_path", "data/poolprice.duckdb")

    @property
    def record_snapshots(self) -> bool:
        return bool(self.storage.get("record_snapshots", False))

    # API
    @property
    def cache_control(self) -> str:
        return self.api.get("cache_control", "public, s-maxage=60, stale-while-revalidate=300")

    # Logging
    @property
    def logging_level(self) -> str:
        return self.logging.get("level", "INFO").upper()

    @property
    def logging_format(self) -> str:
        return self.logging.get("format", "console")

    @property
    def logging_level_num(self) -> int:
        return getattr(logging, self.logging_level, logging.INFO)


def configure_logging(settings: Settings) -> None:
    """Configure structlog with settings. Call once at application entry."""
    import structlog

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if settings.logging_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(settings.logging_level_num),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )
