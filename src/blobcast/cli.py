"""
Blobcast CLI

Command-line interface for building and checking EIP-4844 / EIP-7594 blob
transactions on an Ethereum test network.

Identity = ECDSA/secp256k1 wallet loaded from PRIVATE_KEY.  KZG work runs
on ckzg (native) with py_ecc (portable) as the comparison backend.

Commands:
  send         - Build, sign and broadcast a blob transaction
  verify       - Run the KZG / wallet round-trip checks
  bench        - Time both KZG backends
  evaluate     - Point evaluation at a root of unity
  lookup       - Show a transaction and its receipt
  fetch-setup  - Download the KZG trusted setup
  keygen       - Generate a devnet signing key
  whoami       - Show current wallet address
  info         - Show system information
"""

from __future__ import annotations

import sys

import click

from .kzg import TrustedSetupError, resolve_trusted_setup
from .pneuma.rpc import get_chain_id, get_rpc_url
from .sigil.eth import get_address, load_env, load_private_key


# ============ Constants ============

VERSION = "1.0.0"


# ============ Banner ============


def _print_banner() -> None:
    """Print the Blobcast CLI banner."""
    border = click.style("  ◆ ═══════════════════════════════════════ ◆", fg="cyan")
    click.echo()
    click.echo(border)
    click.echo()
    click.echo(
        click.style("        B L O B C A S T", fg="bright_white", bold=True)
        + click.style(f"        v{VERSION}", dim=True)
    )
    click.secho("        ─── EIP-4844 / EIP-7594 blobs ───", fg="cyan")
    click.echo()
    click.echo(border)
    click.echo()


# ============ Main CLI Group ============


@click.group(invoke_without_command=True)
@click.version_option(version=VERSION, prog_name="blobcast")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Blobcast: blob transactions and KZG proofs."""
    load_env()
    if ctx.invoked_subcommand is None:
        _print_banner()
        click.echo(ctx.get_help())


# ============ Top-level Commands ============

from .theurgy.send import send
from .theurgy.verify import verify
from .theurgy.bench import bench
from .theurgy.evaluate import evaluate
from .theurgy.lookup import lookup
from .theurgy.fetch_setup import fetch_setup
from .theurgy.keygen import keygen

cli.add_command(send)
cli.add_command(verify)
cli.add_command(bench)
cli.add_command(evaluate)
cli.add_command(lookup)
cli.add_command(fetch_setup)
cli.add_command(keygen)


# ============ Identity ============


@cli.command()
def whoami() -> None:
    """Show current wallet identity."""
    try:
        pk = load_private_key()
        address = get_address(pk)
        click.echo(f"Address: {address}")
    except ValueError:
        click.echo("No wallet found.")
        click.echo("Run 'blobcast keygen' to create one.")
        sys.exit(1)


# ============ Info ============


@cli.command()
def info() -> None:
    """Show system information."""
    _print_banner()

    # ── Status ──
    click.secho("  Status ─────────────────────────────────", fg="cyan")
    click.echo()

    try:
        pk = load_private_key()
        address = get_address(pk)
        click.echo(
            click.style("  Address:       ", dim=True)
            + click.style(address, fg="bright_white")
        )
    except ValueError:
        click.echo(
            click.style("  Address:       ", dim=True)
            + click.style("not initialized", fg="yellow")
            + click.style("  (run: blobcast keygen)", dim=True)
        )

    click.echo(
        click.style("  RPC:           ", dim=True)
        + click.style(f"{get_rpc_url()} (chain {get_chain_id()})", fg="bright_white")
    )

    try:
        setup_text = click.style(str(resolve_trusted_setup()), fg="green")
    except TrustedSetupError:
        setup_text = click.style("not found", fg="yellow") + click.style("  (run: blobcast fetch-setup)", dim=True)
    click.echo(click.style("  Trusted setup: ", dim=True) + setup_text)

    click.echo()

    # ── Commands ──
    click.secho("  Commands ───────────────────────────────", fg="cyan")
    click.echo()

    commands = [
        ("send       ", "Build, sign and broadcast a blob tx"),
        ("verify     ", "Run the KZG / wallet round-trip checks"),
        ("bench      ", "Time native vs portable KZG"),
        ("evaluate   ", "Point evaluation at a root of unity"),
        ("lookup     ", "Show a transaction and its receipt"),
        ("fetch-setup", "Download the KZG trusted setup"),
        ("keygen     ", "Generate a devnet signing key"),
        ("whoami     ", "Show current wallet address"),
    ]
    for cmd, desc in commands:
        click.echo(
            click.style("  ", dim=True)
            + click.style(cmd, fg="bright_white", bold=True)
            + click.style("  ◇  ", fg="cyan")
            + click.style(desc, dim=True)
        )

    click.echo()


# ============ Entry Points ============


def main() -> None:
    """Blobcast CLI entry point."""
    # Ensure UTF-8 output on Windows (for Unicode box-drawing / symbols)
    if sys.platform == "win32":
        try:
            sys.stdout.reconfigure(encoding="utf-8")  # type: ignore[union-attr]
            sys.stderr.reconfigure(encoding="utf-8")  # type: ignore[union-attr]
        except (AttributeError, OSError):
            pass  # Fallback: old Python or non-tty
    cli()


if __name__ == "__main__":
    main()
