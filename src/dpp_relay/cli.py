"""CLI entry point for the dpp_relay daemon."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from dataclasses import asdict

import click

from dpp_relay.config import load_config
from dpp_relay.daemon import run_daemon
from dpp_relay.ethereum.client import Web3LedgerClient


def _ledger(cfg) -> Web3LedgerClient:
    return Web3LedgerClient(cfg.rpc_url, cfg.contract_address, cfg.request_timeout)


@click.group()
@click.option("-c", "--config", "config_path", default=None, help="Path to config TOML file")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """dpp_relay - relays DPP registry panel events to WebSocket clients."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["verbose"] = verbose

    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


# ── Daemon ─────────────────────────────────────────────


@cli.command()
@click.pass_context
def run(ctx: click.Context) -> None:
    """Start the relay daemon."""
    cfg = load_config(ctx.obj["config_path"])
    if not ctx.obj["verbose"]:
        logging.getLogger().setLevel(cfg.log_level.upper())

    click.echo(f"Starting dpp_relay on {cfg.host}:{cfg.port}")
    try:
        asyncio.run(run_daemon(cfg))
    except OSError as exc:
        click.echo(f"Error: could not start listener: {exc}", err=True)
        sys.exit(1)


# ── Info ───────────────────────────────────────────────


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show resolved configuration."""
    cfg = load_config(ctx.obj["config_path"])
    click.echo(f"Listen:          {cfg.host}:{cfg.port}")
    click.echo(f"RPC URL:         {cfg.rpc_url}")
    click.echo(f"Contract:        {cfg.contract_address}")
    click.echo(f"Start block:     {cfg.start_block if cfg.start_block is not None else '(head)'}")
    click.echo(f"Poll interval:   {cfg.poll_interval}s")
    click.echo(f"Backoff:         {cfg.error_backoff}s doubling, max {cfg.max_backoff}s")
    click.echo(f"Unhealthy after: {cfg.failure_threshold} failures")
    click.echo(f"Send timeout:    {cfg.send_timeout}s")
    click.echo(f"Shutdown grace:  {cfg.shutdown_grace}s")


@cli.command()
@click.pass_context
def head(ctx: click.Context) -> None:
    """Print the ledger's current block number."""
    cfg = load_config(ctx.obj["config_path"])

    async def _head():
        ledger = _ledger(cfg)
        try:
            click.echo(await ledger.get_current_height())
        finally:
            await ledger.close()

    asyncio.run(_head())


@cli.command()
@click.option("--from-block", type=int, required=True, help="First block (inclusive)")
@click.option("--to-block", type=int, default=None, help="Last block (inclusive, default: head)")
@click.pass_context
def events(ctx: click.Context, from_block: int, to_block: int | None) -> None:
    """Fetch PanelEventAdded events in a block range as JSON lines."""
    cfg = load_config(ctx.obj["config_path"])

    async def _events():
        ledger = _ledger(cfg)
        try:
            end = to_block if to_block is not None else await ledger.get_current_height()
            if end < from_block:
                click.echo(f"Empty range: {from_block}-{end}", err=True)
                return
            for ev in await ledger.get_events(from_block, end):
                click.echo(json.dumps(asdict(ev)))
        finally:
            await ledger.close()

    asyncio.run(_events())


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
