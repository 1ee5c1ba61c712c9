"""
Theurgy Evaluate - Point evaluation of a blob at a root of unity.

Computes the KZG proof that the blob polynomial evaluates to field element
``index`` at the ``index``-th bit-reversed root of unity, verifies it
locally, and optionally through the point evaluation precompile.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Optional

import click

from ..blobs import ENCODINGS, BlobError, encode_payload
from ..checks import IntegrityError, check_point_evaluation
from ..kzg import KZGError, load_backend
from ..kzg.roots import (
    bit_reversal_permutation,
    compute_roots_of_unity,
    dump_roots_of_unity,
    load_roots_of_unity,
)
from ..pneuma.precompile import POINT_EVALUATION_ADDRESS, call_point_evaluation
from ..pneuma.rpc import DEFAULT_RPC_URL, RPCError
from ..utils import short_hex
from .send import DEFAULT_MESSAGE


@click.command()
@click.option("--message", default=DEFAULT_MESSAGE, show_default=True, help="Payload carried in the blob")
@click.option("--encoding", type=click.Choice(ENCODINGS), default="raw", show_default=True)
@click.option("--index", "eval_index", default=0, type=int, show_default=True,
              help="Bit-reversed root of unity index")
@click.option("--roots", "roots_path", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              default=None, help="JSON root-of-unity table (natural order) instead of computing it")
@click.option("--export-roots", "export_path", type=click.Path(dir_okay=False, path_type=Path),
              default=None, help="Write the natural-order root table as JSON and continue")
@click.option("--onchain", is_flag=True, help="Also verify through the 0x0a precompile via eth_call")
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
def evaluate(
    message: str,
    encoding: str,
    eval_index: int,
    roots_path: Optional[Path],
    export_path: Optional[Path],
    onchain: bool,
    rpc_url: str,
    trusted_setup: Optional[Path],
) -> None:
    """Prove and verify a blob evaluation at a root of unity."""
    click.echo("=== Blobcast Evaluate ===")
    click.echo("")

    os.environ["BLOBCAST_RPC_URL"] = rpc_url

    try:
        roots = load_roots_of_unity(roots_path) if roots_path else compute_roots_of_unity()
    except (OSError, ValueError) as exc:
        click.secho(f"ERROR: Invalid root table: {exc}", fg="red")
        sys.exit(1)

    if export_path:
        dump_roots_of_unity(export_path, roots)
        click.echo(f"  Root table written to {export_path} ({len(roots)} roots)")

    try:
        blob = encode_payload(message.encode("utf-8"), encoding)[0]
        backend = load_backend("native", trusted_setup)
        result = check_point_evaluation(
            blob, eval_index, backend, roots=bit_reversal_permutation(roots)
        )
    except (BlobError, KZGError, IntegrityError, ValueError) as exc:
        click.secho(f"ERROR: {exc}", fg="red")
        sys.exit(getattr(exc, "exit_code", 1))

    click.echo(f"  Commitment: {short_hex(result.commitment)}")
    click.echo(f"  z:          0x{result.z.hex()}")
    click.echo(f"  y:          0x{result.y.hex()}")
    click.echo(f"  Proof:      {short_hex(result.proof)}")
    click.secho("  Local verification: ok", fg="green")

    if onchain:
        click.echo(f"  Calling precompile {POINT_EVALUATION_ADDRESS} on {rpc_url}...")
        try:
            onchain_result = call_point_evaluation(
                result.commitment, result.z, result.y, result.proof, rpc_url=rpc_url
            )
        except (KZGError, RPCError) as exc:
            click.secho(f"ERROR: {exc}", fg="red")
            sys.exit(exc.exit_code)

        if not onchain_result.ok:
            click.secho(
                f"ERROR: Unexpected precompile output: {onchain_result.field_elements_per_blob}, "
                f"{onchain_result.bls_modulus}",
                fg="red",
            )
            sys.exit(IntegrityError.exit_code)
        click.secho("  On-chain verification: ok", fg="green")

    click.echo("")
    click.secho("SUCCESS: Evaluation verified.", fg="green")
