"""
Theurgy Verify - Round-trip checks on a blob payload.

Runs, in order, stopping at the first failure:
1. native and portable backends produce the same commitments
2. every sidecar proof verifies
3. manually derived versioned hashes match the wallet's
4. cells recovered from a random half equal the computed cells
5. point evaluation at a root of unity returns the stored field element

Needs no RPC access: the transaction used for the versioned hash check is
filled with placeholder fees and never broadcast.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable, Optional

import click
from eth_account import Account

from ..blobs import ENCODINGS, BlobError, encode_payload
from ..checks import (
    MIN_CELLS_FOR_RECOVERY,
    IntegrityError,
    check_backends_agree,
    check_blob_proofs,
    check_cell_recovery,
    check_point_evaluation,
    check_versioned_hashes,
)
from ..kzg import KZGError, load_backend
from ..pneuma.rpc import get_chain_id
from ..pneuma.tx import (
    DEFAULT_MAX_FEE_PER_BLOB_GAS,
    EIPS,
    BlobTransactionRequest,
    build_sidecar,
    wrapper_version_for,
)
from ..sigil.eth import get_account, load_private_key
from ..utils import short_hex
from .send import DEFAULT_MESSAGE, DEFAULT_RECIPIENT

_OFFLINE_GAS = 50_000
_OFFLINE_FEE = 10**9


def _run(label: str, check: Callable[[], str]) -> None:
    click.echo(f"  {label}...", nl=False)
    try:
        detail = check()
    except (BlobError, KZGError, IntegrityError, ValueError) as exc:
        click.secho(" FAILED", fg="red")
        click.secho(f"ERROR: {exc}", fg="red")
        sys.exit(getattr(exc, "exit_code", 1))
    click.secho(" ok", fg="green")
    if detail:
        click.echo(f"      {detail}")


@click.command()
@click.option("--eip", type=click.Choice(EIPS), default="4844", show_default=True,
              help="Proof flavour of the sidecar under test")
@click.option("--message", default=DEFAULT_MESSAGE, show_default=True, help="Payload carried in the blob")
@click.option("--encoding", type=click.Choice(ENCODINGS), default="raw", show_default=True)
@click.option("--keep", default=MIN_CELLS_FOR_RECOVERY, type=int, show_default=True,
              help="Cells kept for the recovery check")
@click.option("--seed", default=None, type=int, help="Seed for the kept cell sample")
@click.option("--index", "eval_index", default=0, type=int, show_default=True,
              help="Root of unity index for the point evaluation check")
@click.option("--skip-portable", is_flag=True, help="Skip the py_ecc backend (slow)")
@click.option(
    "--trusted-setup",
    envvar="KZG_TRUSTED_SETUP",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="c-kzg trusted setup file",
)
def verify(
    eip: str,
    message: str,
    encoding: str,
    keep: int,
    seed: Optional[int],
    eval_index: int,
    skip_portable: bool,
    trusted_setup: Optional[Path],
) -> None:
    """Run the KZG and wallet round-trip checks on a payload."""
    click.echo(f"=== Blobcast Verify (EIP-{eip}) ===")
    click.echo("")

    try:
        blobs = encode_payload(message.encode("utf-8"), encoding)
        native = load_backend("native", trusted_setup)
        portable = None if skip_portable else load_backend("portable", trusted_setup)
        sidecar = build_sidecar(blobs, native, wrapper_version_for(eip))
    except (BlobError, KZGError) as exc:
        click.secho(f"ERROR: {exc}", fg="red")
        sys.exit(exc.exit_code)

    try:
        account = get_account(load_private_key())
        signer = account.address
    except ValueError:
        account = Account.create()
        signer = f"{account.address} (throwaway)"

    click.echo(f"  Blobs:  {len(blobs)} ({encoding})")
    click.echo(f"  Signer: {signer}")
    click.echo("")

    if portable is not None:
        def agree() -> str:
            commitments = [check_backends_agree(blob, native, portable) for blob in blobs]
            return ", ".join(short_hex(c) for c in commitments)

        _run("Backend commitments agree", agree)
    else:
        click.secho("  Backend commitments agree... skipped", fg="yellow")

    def proofs() -> str:
        check_blob_proofs(sidecar, native)
        return f"{len(sidecar.proofs)} proof(s), wrapper v{sidecar.wrapper_version}"

    _run("Sidecar proofs verify", proofs)

    def hashes() -> str:
        request = BlobTransactionRequest(
            to=DEFAULT_RECIPIENT,
            nonce=0,
            chain_id=get_chain_id(),
            gas=_OFFLINE_GAS,
            max_fee_per_gas=_OFFLINE_FEE,
            max_priority_fee_per_gas=_OFFLINE_FEE,
            max_fee_per_blob_gas=DEFAULT_MAX_FEE_PER_BLOB_GAS,
            sidecar=sidecar,
        )
        versioned = check_versioned_hashes(request, account)
        return ", ".join(f"0x{h.hex()}" for h in versioned)

    _run("Versioned hashes match the wallet", hashes)

    def recovery() -> str:
        result = check_cell_recovery(blobs[0], native, keep=keep, seed=seed)
        return f"kept {len(result.kept_indices)} of {len(result.cells)} cells"

    _run("Cells recover from a partial set", recovery)

    def evaluation() -> str:
        result = check_point_evaluation(blobs[0], eval_index, native, verifier=portable)
        return f"y = 0x{result.y.hex()}"

    _run(f"Point evaluation at root {eval_index}", evaluation)

    click.echo("")
    click.secho("SUCCESS: All checks passed.", fg="green")
