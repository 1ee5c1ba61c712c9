"""
Theurgy Lookup - Show a transaction and its receipt.
"""

from __future__ import annotations

import sys
from typing import Any, Optional

import click
from eth_utils import from_wei

from ..pneuma.rpc import DEFAULT_RPC_URL, RPCError, get_transaction, get_transaction_receipt


def _int(value: Optional[str]) -> Optional[int]:
    return int(value, 16) if value else None


def _gwei(value: Optional[str]) -> str:
    wei = _int(value)
    return "-" if wei is None else f"{from_wei(wei, 'gwei')} gwei"


def _print_transaction(tx: dict[str, Any]) -> None:
    click.echo(f"  From:              {tx.get('from')}")
    click.echo(f"  To:                {tx.get('to')}")
    click.echo(f"  Type:              {_int(tx.get('type'))}")
    click.echo(f"  Nonce:             {_int(tx.get('nonce'))}")
    click.echo(f"  Gas:               {_int(tx.get('gas'))}")
    click.echo(f"  Max fee:           {_gwei(tx.get('maxFeePerGas'))}")
    click.echo(f"  Max priority fee:  {_gwei(tx.get('maxPriorityFeePerGas'))}")
    click.echo(f"  Max blob fee:      {_gwei(tx.get('maxFeePerBlobGas'))}")
    hashes = tx.get("blobVersionedHashes") or []
    click.echo(f"  Blob hashes:       {len(hashes)}")
    for vhash in hashes:
        click.echo(f"    {vhash}")
    block = tx.get("blockNumber")
    click.echo(f"  Block:             {_int(block) if block else 'pending'}")


def _print_receipt(receipt: dict[str, Any]) -> None:
    status = _int(receipt.get("status"))
    if status == 1:
        click.secho("  Status:            success", fg="green")
    else:
        click.secho("  Status:            reverted", fg="red")
    click.echo(f"  Gas used:          {_int(receipt.get('gasUsed'))}")
    click.echo(f"  Blob gas used:     {_int(receipt.get('blobGasUsed'))}")
    click.echo(f"  Blob gas price:    {_gwei(receipt.get('blobGasPrice'))}")


@click.command()
@click.argument("tx_hash")
@click.option(
    "--rpc-url",
    envvar="BLOBCAST_RPC_URL",
    default=DEFAULT_RPC_URL,
    help="JSON-RPC endpoint",
)
def lookup(tx_hash: str, rpc_url: str) -> None:
    """Print a transaction and its receipt."""
    click.echo("=== Blobcast Lookup ===")
    click.echo("")
    click.echo(f"  TX: {tx_hash}")

    try:
        tx = get_transaction(tx_hash, rpc_url=rpc_url)
        if tx is None:
            click.secho("Transaction not found.", fg="yellow")
            sys.exit(1)
        _print_transaction(tx)

        receipt = get_transaction_receipt(tx_hash, rpc_url=rpc_url)
    except RPCError as exc:
        click.secho(f"ERROR: {exc}", fg="red")
        sys.exit(exc.exit_code)

    click.echo("")
    if receipt is None:
        click.secho("  Receipt:           not yet mined", fg="yellow")
        return
    _print_receipt(receipt)
