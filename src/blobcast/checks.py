"""
Round-trip checks over the KZG backends and the wallet library.

Each check raises on the first mismatch and returns what it computed, so
commands can print the details.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Optional, Sequence

from eth_account.signers.local import LocalAccount

from .blobs import (
    BYTES_PER_FIELD_ELEMENT,
    CELLS_PER_EXT_BLOB,
    BlobCountError,
    BlobSidecar,
)
from .kzg.backend import KZGBackend, ProofVerificationError
from .kzg.roots import roots_of_unity_brp, scalar_to_bytes
from .pneuma.tx import BlobTransactionRequest, decode_raw_transaction
from .utils import bytes_to_hex

MIN_CELLS_FOR_RECOVERY = CELLS_PER_EXT_BLOB // 2


class IntegrityError(RuntimeError):
    exit_code: int = 5


@dataclass(frozen=True)
class PointEvaluation:
    index: int
    commitment: bytes
    z: bytes
    y: bytes
    proof: bytes


@dataclass(frozen=True)
class CellRecovery:
    kept_indices: list[int]
    cells: list[bytes]
    proofs: list[bytes]


def check_backends_agree(blob: bytes, first: KZGBackend, second: KZGBackend) -> bytes:
    """Commitments from two backends for the same blob must be identical."""
    expected = first.blob_to_kzg_commitment(blob)
    actual = second.blob_to_kzg_commitment(blob)
    if expected != actual:
        raise IntegrityError(
            f"{first.name} and {second.name} commitments differ: "
            f"{bytes_to_hex(expected)} != {bytes_to_hex(actual)}"
        )
    return expected


def check_versioned_hashes(request: BlobTransactionRequest, account: LocalAccount) -> list[bytes]:
    """
    Manually derived versioned hashes must equal the ones eth-account puts
    into the transaction it prepares from the same blobs.
    """
    tx = request.to_tx_dict()
    tx.pop("blobVersionedHashes")
    signed = account.sign_transaction(tx, blobs=list(request.sidecar.blobs))
    decoded = decode_raw_transaction(bytes(signed.raw_transaction))

    expected = request.blob_versioned_hashes
    if len(decoded.versioned_hashes) != len(expected):
        raise BlobCountError(
            f"Wallet prepared {len(decoded.versioned_hashes)} blob hashes, expected {len(expected)}"
        )
    for index, (ours, theirs) in enumerate(zip(expected, decoded.versioned_hashes)):
        if ours != theirs:
            raise IntegrityError(
                f"Versioned hash {index} mismatch: {bytes_to_hex(ours)} != {bytes_to_hex(theirs)}"
            )
    if decoded.sidecar is not None and decoded.sidecar.commitments != request.sidecar.commitments:
        raise IntegrityError("Wallet commitments differ from locally computed commitments")
    return list(expected)


def check_blob_proofs(sidecar: BlobSidecar, backend: KZGBackend) -> None:
    """Every proof in the sidecar must verify against its blob and commitment."""
    if sidecar.proofs_per_blob == 1:
        for index, (blob, commitment, proof) in enumerate(
            zip(sidecar.blobs, sidecar.commitments, sidecar.proofs)
        ):
            if not backend.verify_blob_kzg_proof(blob, commitment, proof):
                raise ProofVerificationError(f"Blob proof {index} does not verify")
        if not backend.verify_blob_kzg_proof_batch(sidecar.blobs, sidecar.commitments, sidecar.proofs):
            raise ProofVerificationError("Batched blob proof verification failed")
        return

    for index, (blob, commitment) in enumerate(zip(sidecar.blobs, sidecar.commitments)):
        cells = backend.compute_cells(blob)
        if not backend.verify_cell_kzg_proof_batch(
            [commitment] * CELLS_PER_EXT_BLOB,
            list(range(CELLS_PER_EXT_BLOB)),
            cells,
            sidecar.blob_proofs(index),
        ):
            raise ProofVerificationError(f"Cell proofs of blob {index} do not verify")


def check_cell_recovery(
    blob: bytes,
    backend: KZGBackend,
    keep: int = MIN_CELLS_FOR_RECOVERY,
    seed: Optional[int] = None,
) -> CellRecovery:
    """
    Drop all but ``keep`` random cells, recover the rest, and compare.

    Raises:
        ValueError: If ``keep`` is outside [64, 128]
        IntegrityError: If recovered cells or proofs differ
        ProofVerificationError: If recovered proofs do not verify
    """
    if not MIN_CELLS_FOR_RECOVERY <= keep <= CELLS_PER_EXT_BLOB:
        raise ValueError(
            f"Recovery needs between {MIN_CELLS_FOR_RECOVERY} and {CELLS_PER_EXT_BLOB} cells, got {keep}"
        )

    commitment = backend.blob_to_kzg_commitment(blob)
    cells, proofs = backend.compute_cells_and_kzg_proofs(blob)

    kept = sorted(random.Random(seed).sample(range(CELLS_PER_EXT_BLOB), keep))
    recovered_cells, recovered_proofs = backend.recover_cells_and_kzg_proofs(
        kept, [cells[i] for i in kept]
    )

    if len(recovered_cells) != CELLS_PER_EXT_BLOB:
        raise IntegrityError(f"Recovered {len(recovered_cells)} cells, expected {CELLS_PER_EXT_BLOB}")
    for index, (original, recovered) in enumerate(zip(cells, recovered_cells)):
        if original != recovered:
            raise IntegrityError(f"Recovered cell {index} differs from the computed cell")
    if recovered_proofs != proofs:
        raise IntegrityError("Recovered cell proofs differ from the computed proofs")

    if not backend.verify_cell_kzg_proof_batch(
        [commitment] * CELLS_PER_EXT_BLOB,
        list(range(CELLS_PER_EXT_BLOB)),
        recovered_cells,
        recovered_proofs,
    ):
        raise ProofVerificationError("Recovered cell proofs do not verify")

    return CellRecovery(kept, recovered_cells, recovered_proofs)


def check_point_evaluation(
    blob: bytes,
    index: int,
    backend: KZGBackend,
    roots: Optional[Sequence[int]] = None,
    verifier: Optional[KZGBackend] = None,
) -> PointEvaluation:
    """
    Evaluating the blob polynomial at the ``index``-th bit-reversed root of
    unity must give back field element ``index``, with a verifying proof.

    Args:
        roots: Bit-reversed roots (computed when None)
        verifier: Backend that verifies the proof (default: ``backend``)
    """
    roots = roots if roots is not None else roots_of_unity_brp()
    if not 0 <= index < len(roots):
        raise ValueError(f"Evaluation index must be in [0, {len(roots)}), got {index}")

    commitment = backend.blob_to_kzg_commitment(blob)
    z = scalar_to_bytes(roots[index])
    proof, y = backend.compute_kzg_proof(blob, z)

    start = index * BYTES_PER_FIELD_ELEMENT
    expected = blob[start:start + BYTES_PER_FIELD_ELEMENT]
    if y != expected:
        raise IntegrityError(
            f"Evaluation at root {index} is {bytes_to_hex(y)}, blob holds {bytes_to_hex(expected)}"
        )

    verifier = verifier or backend
    if not verifier.verify_kzg_proof(commitment, z, y, proof):
        raise ProofVerificationError(f"Point proof at root {index} does not verify ({verifier.name})")

    return PointEvaluation(index, commitment, z, y, proof)
