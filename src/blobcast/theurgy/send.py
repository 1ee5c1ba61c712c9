"""
Theurgy Send - Build, sign and broadcast a blob transaction.

Flow:
1. Load the signing key
2. Encode the message into blobs and compute commitments + proofs
3. Fill fees, nonce, chain ID and gas from the RPC node
4. Sign with eth-account and attach the sidecar
5. Broadcast (unless --dry-run), optionally wait for inclusion
"""

from __future__ import annotations

import json
import os
import sys
import time
from pathlib import Path
from typing import Optional

import click
from eth_utils import from_wei, to_wei

from ..blobs import ENCODINGS, BlobError, encode_payload
from ..kzg import KZGError, load_backend
from ..pneuma.rpc import DEFAULT_RPC_URL, RPCError, get_transaction, wait_for_receipt
from ..pneuma.tx import (
    EIPS,
    AccessListEntry,
    prepare_blob_transaction,
    send_blob_transaction,
    sign_blob_transaction,
)
from ..sigil.eth import get_account, load_private_key
from ..utils import hex_to_bytes, short_hex

DEFAULT_RECIPIENT = "0x9F3f11d72d96910df008Cfe3aBA40F361D2EED03"
DEFAULT_MESSAGE = "Long live the BLOBs!"
DEFAULT_EXPLORER = "https://sepolia.blobscan.com/tx/{}"


def _parse_access_list(access_list_json: str) -> list[AccessListEntry]:
    entries = json.loads(access_list_json)
    if not isinstance(entries, list):
        raise ValueError("Access list must be a JSON array")
    return [AccessListEntry.from_dict(entry) for entry in entries]


@click.command()
@click.option("--eip", type=click.Choice(EIPS), default="4844", show_default=True,
              help="4844: blob proofs, 7594: cell proofs (wrapper version 1)")
@click.option("--message", default=DEFAULT_MESSAGE, show_default=True, help="Payload carried in the blob")
@click.option("--encoding", type=click.Choice(ENCODINGS), default="raw", show_default=True,
              help="raw: zero-padded single blob, packed: 31 bytes per field element")
@click.option("--to", "recipient", default=DEFAULT_RECIPIENT, show_default=True, help="Recipient address")
@click.option("--data", "calldata", default="0x", help="Transaction calldata (hex)")
@click.option("--value", default=0, type=int, help="ETH value in wei")
@click.option("--gas-limit", default=None, type=int, help="Gas limit (default: eth_estimateGas)")
@click.option("--max-fee-per-blob-gas", "blob_fee_gwei", default=30.0, type=float, show_default=True,
              help="Blob fee cap in gwei")
@click.option("--access-list", "access_list_json", default="[]",
              help='Access list as JSON: [{"address": "0x..", "storageKeys": ["0x.."]}]')
@click.option("--no-sidecar", is_flag=True, help="Sign the bare payload without blobs attached")
@click.option("--dry-run", is_flag=True, help="Sign but do not broadcast")
@click.option("--wait/--no-wait", default=False, help="Wait for the transaction to be mined")
@click.option("--propagation-delay", default=12.0, type=float, show_default=True,
              help="Seconds to wait before looking up the broadcast transaction")
@click.option(
    "--rpc-url",
    envvar="BLOBCAST_RPC_URL",
    default=DEFAULT_RPC_URL,
    help="JSON-RPC endpoint",
)
@click.option(
    "--trusted-setup",
    envvar="KZG_TRUSTED_SETUP",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="c-kzg trusted setup file",
)
def send(
    eip: str,
    message: str,
    encoding: str,
    recipient: str,
    calldata: str,
    value: int,
    gas_limit: Optional[int],
    blob_fee_gwei: float,
    access_list_json: str,
    no_sidecar: bool,
    dry_run: bool,
    wait: bool,
    propagation_delay: float,
    rpc_url: str,
    trusted_setup: Optional[Path],
) -> None:
    """Build, sign and broadcast an EIP-4844 / EIP-7594 blob transaction."""
    click.echo(f"=== Blobcast Send (EIP-{eip}) ===")
    click.echo("")

    os.environ["BLOBCAST_RPC_URL"] = rpc_url

    try:
        access_list = _parse_access_list(access_list_json)
    except (json.JSONDecodeError, ValueError, KeyError) as exc:
        click.secho(f"ERROR: Invalid access list: {exc}", fg="red")
        sys.exit(1)

    try:
        private_key = load_private_key()
        account = get_account(private_key)
    except ValueError as exc:
        click.secho(f"ERROR: {exc}", fg="red")
        sys.exit(1)

    click.echo(f"  Sender:    {account.address}")
    click.echo(f"  Recipient: {recipient}")
    click.echo(f"  RPC:       {rpc_url}")
    click.echo("")

    try:
        blobs = encode_payload(message.encode("utf-8"), encoding)
        backend = load_backend("native", trusted_setup)
        request = prepare_blob_transaction(
            sender=account.address,
            to=recipient,
            blobs=blobs,
            backend=backend,
            eip=eip,
            value=value,
            data=hex_to_bytes(calldata),
            access_list=access_list,
            gas_limit=gas_limit,
            max_fee_per_blob_gas=to_wei(blob_fee_gwei, "gwei"),
            rpc_url=rpc_url,
        )
        signed = sign_blob_transaction(request, account, include_sidecar=not no_sidecar)
    except (BlobError, KZGError, RPCError, ValueError) as exc:
        click.secho(f"ERROR: {exc}", fg="red")
        sys.exit(getattr(exc, "exit_code", 1))

    click.echo(f"  Blobs:            {len(request.sidecar.blobs)} ({encoding})")
    for index, (commitment, vhash) in enumerate(
        zip(request.sidecar.commitments, request.blob_versioned_hashes)
    ):
        click.echo(f"  Commitment [{index}]:   {short_hex(commitment)}")
        click.echo(f"  Versioned hash [{index}]: 0x{vhash.hex()}")
    click.echo(f"  Proofs:           {len(request.sidecar.proofs)} (wrapper v{request.sidecar.wrapper_version})")
    click.echo(f"  Nonce:            {request.nonce}")
    click.echo(f"  Gas limit:        {request.gas}")
    click.echo(f"  Max fee:          {from_wei(request.max_fee_per_gas, 'gwei')} gwei")
    click.echo(f"  Max priority fee: {from_wei(request.max_priority_fee_per_gas, 'gwei')} gwei")
    click.echo(f"  Max blob fee:     {from_wei(request.max_fee_per_blob_gas, 'gwei')} gwei")
    click.echo(f"  Raw tx length:    {len(signed.raw_hex)} hex chars")
    click.echo(f"  Local tx hash:    {signed.hash_hex}")
    click.echo("")

    if dry_run:
        click.secho("DRY RUN: transaction signed, not broadcast.", fg="yellow")
        click.echo(f"  Raw: {short_hex(signed.raw_transaction, keep=32)}")
        return

    try:
        tx_hash = send_blob_transaction(signed, rpc_url=rpc_url)
    except Exception as exc:
        click.secho(f"Broadcast failed: {exc}", fg="red")
        sys.exit(getattr(exc, "exit_code", 1))

    click.secho("SUCCESS: Transaction sent!", fg="green")
    click.echo(f"  TX: {tx_hash}")
    explorer = os.environ.get("BLOBCAST_EXPLORER_URL", DEFAULT_EXPLORER)
    click.echo(f"  Explorer: {explorer.format(tx_hash)}")
    if tx_hash and tx_hash.lower() != signed.hash_hex.lower():
        click.secho(f"  Node reported a different hash than the local one ({signed.hash_hex})", fg="yellow")

    if not wait:
        return

    click.echo("")
    click.echo(f"  Waiting {propagation_delay:g}s for propagation...")
    time.sleep(propagation_delay)

    try:
        tx = get_transaction(tx_hash, rpc_url=rpc_url)
        if tx is None:
            click.secho("  Node does not know the transaction yet", fg="yellow")
        else:
            click.echo(f"  Found: type {tx.get('type')}, {len(tx.get('blobVersionedHashes') or [])} blob hash(es)")
        receipt = wait_for_receipt(tx_hash, rpc_url=rpc_url)
    except (RPCError, TimeoutError) as exc:
        click.secho(f"ERROR: {exc}", fg="red")
        sys.exit(1)

    status = int(receipt.get("status", "0x0"), 16)
    block = int(receipt.get("blockNumber", "0x0"), 16)
    if status == 1:
        click.secho(f"  Mined in block {block}", fg="green")
    else:
        click.secho(f"  Transaction reverted in block {block}", fg="red")
        sys.exit(1)
