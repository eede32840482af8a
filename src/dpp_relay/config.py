"""Configuration loading: TOML file + environment variables."""

from __future__ import annotations

import os
from pathlib import Path

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:
    import tomli as tomllib  # type: ignore[no-redef]

from dpp_relay.models.config import RelayConfig


def _optional_int(value: object) -> int | None:
    if value is None or value == "":
        return None
    return int(value)  # type: ignore[arg-type]


def load_config(
    config_path: str | Path | None = None,
    env_prefix: str = "DPP_RELAY_",
    environ: dict[str, str] | None = None,
) -> RelayConfig:
    """Load relay configuration from a TOML file and env vars.

    Priority (highest wins):
        1. Environment variables (DPP_RELAY_RPC_URL, ..., and bare PORT)
        2. TOML config file
        3. Defaults from RelayConfig
    """
    env = os.environ if environ is None else environ

    raw: dict = {}
    if config_path is not None:
        p = Path(config_path).expanduser()
        if p.exists():
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    cfg = RelayConfig()

    # ── Server section ─────────────────────────────────────
    server = raw.get("server", {})
    if v := server.get("host"):
        cfg.host = str(v)
    if v := server.get("port"):
        cfg.port = int(v)

    # ── Ledger section ─────────────────────────────────────
    ledger = raw.get("ledger", {})
    if v := ledger.get("rpc_url"):
        cfg.rpc_url = str(v)
    if v := ledger.get("contract_address"):
        cfg.contract_address = str(v)
    if v := ledger.get("request_timeout"):
        cfg.request_timeout = int(v)
    if "start_block" in ledger:
        cfg.start_block = _optional_int(ledger["start_block"])

    # ── Relay section ──────────────────────────────────────
    relay = raw.get("relay", {})
    if v := relay.get("poll_interval"):
        cfg.poll_interval = float(v)
    if v := relay.get("error_backoff"):
        cfg.error_backoff = float(v)
    if v := relay.get("max_backoff"):
        cfg.max_backoff = float(v)
    if v := relay.get("failure_threshold"):
        cfg.failure_threshold = int(v)
    if v := relay.get("send_timeout"):
        cfg.send_timeout = float(v)
    if v := relay.get("shutdown_grace"):
        cfg.shutdown_grace = float(v)
    if v := relay.get("log_level"):
        cfg.log_level = str(v)

    # ── Environment variable overrides (highest priority) ──
    # Hosting platforms hand out the listening port as a bare PORT.
    if port := env.get("PORT"):
        cfg.port = int(port)
    if port := env.get(f"{env_prefix}PORT"):
        cfg.port = int(port)
    if host := env.get(f"{env_prefix}HOST"):
        cfg.host = host
    if rpc := env.get(f"{env_prefix}RPC_URL"):
        cfg.rpc_url = rpc
    if addr := env.get(f"{env_prefix}CONTRACT_ADDRESS"):
        cfg.contract_address = addr
    if start := env.get(f"{env_prefix}START_BLOCK"):
        cfg.start_block = _optional_int(start)
    if v := env.get(f"{env_prefix}REQUEST_TIMEOUT"):
        cfg.request_timeout = int(v)
    if interval := env.get(f"{env_prefix}POLL_INTERVAL"):
        cfg.poll_interval = float(interval)
    if v := env.get(f"{env_prefix}ERROR_BACKOFF"):
        cfg.error_backoff = float(v)
    if v := env.get(f"{env_prefix}MAX_BACKOFF"):
        cfg.max_backoff = float(v)
    if v := env.get(f"{env_prefix}FAILURE_THRESHOLD"):
        cfg.failure_threshold = int(v)
    if v := env.get(f"{env_prefix}SEND_TIMEOUT"):
        cfg.send_timeout = float(v)
    if v := env.get(f"{env_prefix}SHUTDOWN_GRACE"):
        cfg.shutdown_grace = float(v)
    if level := env.get(f"{env_prefix}LOG_LEVEL"):
        cfg.log_level = level

    if cfg.poll_interval <= 0:
        raise ValueError(f"poll_interval must be positive, got {cfg.poll_interval}")

    return cfg
