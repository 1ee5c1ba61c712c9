"""
Theurgy Bench - Time KZG operations on the native and portable backends.

The portable backend only commits and verifies point proofs, so those are
the operations compared side by side.  The native blob proof round trip is
timed on its own.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import click

from ..blobs import BlobError, random_blob, raw_blob
from ..checks import IntegrityError, check_backends_agree
from ..kzg import KZGBackend, KZGError, load_backend
from ..kzg.roots import roots_of_unity_brp, scalar_to_bytes
from ..utils import Timing, timed
from .send import DEFAULT_MESSAGE


def _report(timings: list[Timing]) -> None:
    best = min(t.seconds for t in timings)
    mean = sum(t.seconds for t in timings) / len(timings)
    click.echo(f"    {timings[0].label:<28} best {best * 1000:10.2f} ms   mean {mean * 1000:10.2f} ms")


def _bench_backend(backend: KZGBackend, blob: bytes, rounds: int, proof_material: tuple) -> None:
    commitment, z, y, proof = proof_material
    commits: list[Timing] = []
    verifies: list[Timing] = []
    for _ in range(rounds):
        with timed("blob_to_kzg_commitment") as timing:
            backend.blob_to_kzg_commitment(blob)
        commits.append(timing)
        with timed("verify_kzg_proof") as timing:
            ok = backend.verify_kzg_proof(commitment, z, y, proof)
        verifies.append(timing)
        if not ok:
            raise IntegrityError(f"{backend.name} rejected a native point proof")
    _report(commits)
    _report(verifies)


@click.command()
@click.option("--rounds", default=3, type=click.IntRange(min=1), show_default=True, help="Repetitions per operation")
@click.option("--random", "use_random", is_flag=True,
              help="Benchmark a fully random blob instead of the message (portable commit gets slow)")
@click.option("--message", default=DEFAULT_MESSAGE, show_default=True, help="Payload carried in the blob")
@click.option("--seed", default=None, type=int, help="Seed for --random")
@click.option("--skip-portable", is_flag=True, help="Only benchmark the native backend")
@click.option(
    "--trusted-setup",
    envvar="KZG_TRUSTED_SETUP",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="c-kzg trusted setup file",
)
def bench(
    rounds: int,
    use_random: bool,
    message: str,
    seed: Optional[int],
    skip_portable: bool,
    trusted_setup: Optional[Path],
) -> None:
    """Time commitment and proof verification on both KZG backends."""
    click.echo("=== Blobcast Bench ===")
    click.echo("")

    try:
        blob = random_blob(seed) if use_random else raw_blob(message.encode("utf-8"))
        backends: list[KZGBackend] = []
        with timed("load native") as native_load:
            backends.append(load_backend("native", trusted_setup))
        click.echo(f"  native setup loaded in {native_load.millis:.1f} ms")
        if not skip_portable:
            backends.append(load_backend("portable", trusted_setup))
    except (BlobError, KZGError) as exc:
        click.secho(f"ERROR: {exc}", fg="red")
        sys.exit(exc.exit_code)

    native = backends[0]
    click.echo(f"  Blob:   {'random' if use_random else repr(message)}")
    click.echo(f"  Rounds: {rounds}")
    click.echo("")

    try:
        commitment = native.blob_to_kzg_commitment(blob)
        z = scalar_to_bytes(roots_of_unity_brp()[1])
        proof, y = native.compute_kzg_proof(blob, z)

        for backend in backends:
            click.secho(f"  [{backend.name}]", fg="cyan")
            _bench_backend(backend, blob, rounds, (commitment, z, y, proof))

        click.secho("  [native blob proofs]", fg="cyan")
        computes: list[Timing] = []
        checks: list[Timing] = []
        for _ in range(rounds):
            with timed("compute_blob_kzg_proof") as timing:
                blob_proof = native.compute_blob_kzg_proof(blob, commitment)
            computes.append(timing)
            with timed("verify_blob_kzg_proof") as timing:
                native.verify_blob_kzg_proof(blob, commitment, blob_proof)
            checks.append(timing)
        _report(computes)
        _report(checks)

        if len(backends) > 1:
            check_backends_agree(blob, native, backends[1])
    except (KZGError, IntegrityError) as exc:
        click.secho(f"ERROR: {exc}", fg="red")
        sys.exit(exc.exit_code)

    click.echo("")
    if len(backends) > 1:
        click.secho("SUCCESS: Backends agree on the commitment.", fg="green")
    else:
        click.secho("SUCCESS: Benchmark finished.", fg="green")
