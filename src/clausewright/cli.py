"""
Clausewright CLI

Command-line helpers around the contract test harness, handy when a test
fails and the chain state has to be looked at by hand.

Commands:
  info     - Show the effective configuration
  receipt  - Wait for a transaction receipt and print it
  call     - Run a read-only contract call
  decode   - Decode a raw event against an artifact's ABI
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional

import click

from .config import HarnessConfig
from .errors import HarnessError
from .pneuma.abi import load_abi
from .pneuma.contract import Contract
from .pneuma.events import EventDecoder
from .pneuma.receipt import Event, OutcomePoller
from .pneuma.rpc import ThorClient
from .utils import hex_to_bytes


# ============ Constants ============

VERSION = "0.3.0"


# ============ Helpers ============


def _jsonable(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, int) and not isinstance(value, bool) and value.bit_length() > 53:
        # Keep wide integers exact for JSON consumers
        return str(value)
    return value


def _echo_json(payload: Any) -> None:
    click.echo(json.dumps(_jsonable(payload), indent=2))


def _fail(exc: HarnessError) -> None:
    click.secho(f"ERROR: {exc}", fg="red", err=True)
    sys.exit(exc.exit_code)


def _client(ctx: click.Context, node_url: Optional[str]) -> ThorClient:
    config: HarnessConfig = ctx.obj
    return ThorClient(url=node_url or config.node_url, timeout=config.http_timeout)


# ============ Main CLI Group ============


@click.group()
@click.version_option(version=VERSION, prog_name="clausewright")
@click.option("-v", "--verbose", is_flag=True, help="Log polling and HTTP activity")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Clausewright: contract test harness for clause-based chains."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    ctx.obj = HarnessConfig.from_env()


@cli.command()
@click.pass_obj
def info(config: HarnessConfig) -> None:
    """Show the effective configuration."""
    click.echo(click.style("  ◆ clausewright", fg="cyan", bold=True) + click.style(f"  v{VERSION}", dim=True))
    click.echo()
    click.echo(f"  Node URL:       {config.node_url}")
    click.echo(f"  Poll attempts:  {config.poll_attempts}")
    click.echo(f"  Poll interval:  {config.poll_interval}s")
    click.echo(f"  HTTP timeout:   {config.http_timeout}s")


@cli.command()
@click.argument("tx_id")
@click.option("--attempts", type=int, default=None, help="Receipt queries before giving up")
@click.option("--interval", type=float, default=None, help="Seconds between queries")
@click.option("--node-url", envvar="THOR_NODE_URL", default=None, help="Thor node URL")
@click.pass_context
def receipt(ctx: click.Context, tx_id: str, attempts: Optional[int], interval: Optional[float], node_url: Optional[str]) -> None:
    """Wait for the receipt of TX_ID and print it as JSON."""
    config: HarnessConfig = ctx.obj
    try:
        with _client(ctx, node_url) as client:
            poller = OutcomePoller(
                client,
                max_attempts=attempts if attempts is not None else config.poll_attempts,
                interval=interval if interval is not None else config.poll_interval,
            )
            result = poller.await_outcome(tx_id)
    except HarnessError as exc:
        _fail(exc)
        return
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="TX_ID") from exc

    _echo_json(result.to_dict())
    if result.reverted:
        click.secho("FAILED: Transaction reverted", fg="red", err=True)
        sys.exit(1)


@cli.command()
@click.argument("artifact", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("address")
@click.argument("function")
@click.argument("args", nargs=-1)
@click.option("--caller", default=None, help="Caller address for the simulation")
@click.option("--node-url", envvar="THOR_NODE_URL", default=None, help="Thor node URL")
@click.pass_context
def call(
    ctx: click.Context,
    artifact: Path,
    address: str,
    function: str,
    args: tuple[str, ...],
    caller: Optional[str],
    node_url: Optional[str],
) -> None:
    """
    Call FUNCTION on the contract at ADDRESS without a transaction.

    ARTIFACT is the compiler output holding the ABI. ARGS are passed as
    strings; integers and bytes accept decimal or 0x-hex.
    """
    try:
        with _client(ctx, node_url) as client:
            contract = Contract.from_artifact(artifact, ledger=client, address=address)
            result = contract.call(function, *args, caller=caller)
    except HarnessError as exc:
        _fail(exc)
        return
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc

    _echo_json(result)


@cli.command()
@click.argument("artifact", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("event_name")
@click.option("--topic", "topics", multiple=True, required=True, help="Event topic, in order (repeatable)")
@click.option("--data", default="0x", help="Event data segment")
@click.option("--address", default="0x" + "00" * 20, help="Emitting contract address")
def decode(artifact: Path, event_name: str, topics: tuple[str, ...], data: str, address: str) -> None:
    """Decode a raw event emitted by EVENT_NAME."""
    try:
        event = Event(
            address=address.lower(),
            topics=tuple(hex_to_bytes(t) for t in topics),
            data=hex_to_bytes(data),
        )
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc

    try:
        decoded = EventDecoder(load_abi(artifact)).decode_by_name(event, event_name)
    except HarnessError as exc:
        _fail(exc)
        return

    _echo_json({"name": decoded.name, "address": decoded.address, "args": decoded.args})


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
