"""
Theurgy Keygen - Generate a devnet signing key.

The key is written to ~/.blobcast/.env as PRIVATE_KEY.  Fund the printed
address from a Sepolia faucet before sending blob transactions.
"""

from __future__ import annotations

import sys

import click

from ..sigil.eth import generate_eoa, get_address, load_private_key, save_private_key


@click.command()
@click.option("--force", is_flag=True, help="Replace an existing key")
def keygen(force: bool) -> None:
    """Generate a throwaway signing key."""
    if not force:
        try:
            address = get_address(load_private_key())
        except ValueError:
            address = None
        if address is not None:
            click.secho(f"A key already exists: {address}", fg="yellow")
            click.echo("Use --force to replace it.")
            sys.exit(1)

    private_key, address = generate_eoa()
    path = save_private_key(private_key)

    click.secho("Key generated.", fg="green")
    click.echo(f"  Address: {address}")
    click.echo(f"  Saved:   {path}")
