"""CLI entry point for thor_connex."""

from __future__ import annotations

import asyncio
import dataclasses
import json
import logging
import sys

import click

from thor_connex.config import load_config
from thor_connex.connex import Connex
from thor_connex.errors import ConnexError, Rejected
from thor_connex.models.config import ConnexConfig
from thor_connex.models.filter import EventCriteria, FilterKind, TransferCriteria
from thor_connex.models.signing import CertMessage, CertOptions, SigningKind


def _dump(obj) -> str:
    if dataclasses.is_dataclass(obj):
        obj = dataclasses.asdict(obj)
    elif isinstance(obj, list):
        obj = [dataclasses.asdict(o) if dataclasses.is_dataclass(o) else o for o in obj]
    return json.dumps(obj, indent=2, default=str)


def _run(cfg: ConnexConfig, work) -> None:
    """Run work(connex) inside a started Connex; exit 1 on library errors."""

    async def _main():
        async with Connex(cfg) as connex:
            await work(connex)

    try:
        asyncio.run(_main())
    except Rejected as exc:
        click.echo(f"Rejected: {exc.reason}", err=True)
        sys.exit(1)
    except ConnexError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


def _require_relay(cfg: ConnexConfig) -> None:
    """Exit with error if no signer relay is configured."""
    if not cfg.relay_url:
        click.echo("Error: No signer relay configured.", err=True)
        click.echo("Set THOR_CONNEX_SIGNER_RELAY_URL or [signer] relay_url in config.", err=True)
        sys.exit(1)


@click.group()
@click.option("-c", "--config", "config_path", default=None, help="Path to config TOML file")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """thor-connex - query VeChainThor and request signatures."""
    ctx.ensure_object(dict)
    cfg = load_config(config_path)
    ctx.obj["cfg"] = cfg

    level = logging.DEBUG if verbose else getattr(logging, cfg.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


# ── Info ───────────────────────────────────────────────


@cli.command("config")
@click.pass_context
def show_config(ctx: click.Context) -> None:
    """Show effective configuration."""
    cfg: ConnexConfig = ctx.obj["cfg"]
    click.echo(f"Network:    {cfg.network}")
    click.echo(f"Node URL:   {cfg.resolved_node_url or '(not set)'}")
    click.echo(f"Timeout:    {cfg.request_timeout}s")
    click.echo(f"Head poll:  {cfg.poll_interval}s")
    click.echo(f"Relay:      {cfg.relay_url or '(not set)'}")
    click.echo(f"Wallet:     {cfg.wallet_url or '(not set)'}")


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show genesis and current head."""

    async def _status(connex: Connex) -> None:
        thor = connex.thor
        st = thor.status
        click.echo(f"Genesis:    {thor.genesis.id}")
        click.echo(f"Head:       #{st.head.number} {st.head.id}")
        click.echo(f"Timestamp:  {st.head.timestamp}")
        click.echo(f"Progress:   {st.progress:.2%}")

    _run(ctx.obj["cfg"], _status)


# ── Queries ────────────────────────────────────────────


@cli.command()
@click.argument("revision", default="best")
@click.pass_context
def block(ctx: click.Context, revision: str) -> None:
    """Print a block by id or number (default: best)."""

    async def _block(connex: Connex) -> None:
        result = await connex.thor.block(revision).get()
        if result is None:
            click.echo("Block not found", err=True)
            sys.exit(1)
        click.echo(_dump(result))

    _run(ctx.obj["cfg"], _block)


@cli.command()
@click.argument("address")
@click.option("--revision", default=None, help="Block id or number (default: tracked head)")
@click.pass_context
def account(ctx: click.Context, address: str, revision: str | None) -> None:
    """Print an account's balance, energy and code flag."""

    async def _account(connex: Connex) -> None:
        result = await connex.thor.account(address, revision).get()
        click.echo(_dump(result))

    _run(ctx.obj["cfg"], _account)


@cli.command()
@click.argument("tx_id")
@click.option("--receipt", is_flag=True, help="Print the receipt instead")
@click.option("--pending", is_flag=True, help="Include pending transactions")
@click.pass_context
def tx(ctx: click.Context, tx_id: str, receipt: bool, pending: bool) -> None:
    """Print a transaction or its receipt."""

    async def _tx(connex: Connex) -> None:
        visitor = connex.thor.transaction(tx_id, pending=pending)
        result = await (visitor.get_receipt() if receipt else visitor.get())
        if result is None:
            click.echo("Not found", err=True)
            sys.exit(1)
        click.echo(_dump(result))

    _run(ctx.obj["cfg"], _tx)


@cli.command()
@click.argument("kind", type=click.Choice(["event", "transfer"]))
@click.option("--address", multiple=True, help="Event emitter (event) or sender (transfer); repeatable")
@click.option("--topic0", default=None, help="Event signature topic")
@click.option("--unit", type=click.Choice(["block", "time"]), default="block")
@click.option("--from", "from_", type=int, default=0)
@click.option("--to", type=int, default=2**32 - 1)
@click.option("--desc", is_flag=True, help="Newest first")
@click.option("--offset", type=int, default=0)
@click.option("--limit", type=int, default=10)
@click.pass_context
def logs(
    ctx: click.Context,
    kind: str,
    address: tuple[str, ...],
    topic0: str | None,
    unit: str,
    from_: int,
    to: int,
    desc: bool,
    offset: int,
    limit: int,
) -> None:
    """Search event or transfer logs."""
    if kind == FilterKind.EVENT.value:
        criteria = [EventCriteria(address=a, topic0=topic0) for a in address]
        if not criteria and topic0:
            criteria = [EventCriteria(topic0=topic0)]
    else:
        criteria = [TransferCriteria(sender=a) for a in address]

    async def _logs(connex: Connex) -> None:
        flt = connex.thor.filter(kind, criteria).range(unit, from_, to)
        if desc:
            flt.desc()
        click.echo(_dump(await flt.apply(offset, limit)))

    _run(ctx.obj["cfg"], _logs)


@cli.command()
@click.option("--count", type=int, default=0, help="Stop after N heads (0 = forever)")
@click.pass_context
def tick(ctx: click.Context, count: int) -> None:
    """Print each new head as the chain advances."""

    async def _tick(connex: Connex) -> None:
        ticker = connex.thor.ticker()
        seen = 0
        while count == 0 or seen < count:
            await ticker.next()
            head = connex.thor.status.head
            click.echo(f"#{head.number} {head.id} ts={head.timestamp}")
            seen += 1

    _run(ctx.obj["cfg"], _tick)


# ── Signing ────────────────────────────────────────────


@cli.command()
@click.argument("content")
@click.option("--purpose", type=click.Choice(["identification", "agreement"]), default="identification")
@click.option("--signer", default=None, help="Expected signer address")
@click.pass_context
def cert(ctx: click.Context, content: str, purpose: str, signer: str | None) -> None:
    """Request a signed identity certificate over CONTENT."""
    cfg: ConnexConfig = ctx.obj["cfg"]
    _require_relay(cfg)

    async def _cert(connex: Connex) -> None:
        session = connex.vendor.sign(SigningKind.CERT)
        session.message(CertMessage(content=content, purpose=purpose))
        click.echo("Waiting for the signer...")
        result = await session.request(CertOptions(signer=signer))
        click.echo(_dump(result))

    _run(cfg, _cert)
