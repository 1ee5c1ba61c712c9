"""
Native KZG backend backed by ckzg (the c-kzg-4844 Python bindings).

Supports the full EIP-4844 and EIP-7594 operation set.
"""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

import ckzg  # type: ignore

from .backend import TrustedSetupError


class NativeBackend:
    name = "native"

    def __init__(self, setup_path: Path, precompute: int = 0) -> None:
        self.setup_path = Path(setup_path)
        try:
            self._settings = ckzg.load_trusted_setup(str(self.setup_path), precompute)
        except (RuntimeError, ValueError, OSError) as exc:
            raise TrustedSetupError(
                f"ckzg could not load trusted setup {self.setup_path}: {exc}"
            ) from exc

    def blob_to_kzg_commitment(self, blob: bytes) -> bytes:
        return bytes(ckzg.blob_to_kzg_commitment(blob, self._settings))

    def compute_kzg_proof(self, blob: bytes, z: bytes) -> tuple[bytes, bytes]:
        proof, y = ckzg.compute_kzg_proof(blob, z, self._settings)
        return bytes(proof), bytes(y)

    def verify_kzg_proof(self, commitment: bytes, z: bytes, y: bytes, proof: bytes) -> bool:
        return bool(ckzg.verify_kzg_proof(commitment, z, y, proof, self._settings))

    def compute_blob_kzg_proof(self, blob: bytes, commitment: bytes) -> bytes:
        return bytes(ckzg.compute_blob_kzg_proof(blob, commitment, self._settings))

    def verify_blob_kzg_proof(self, blob: bytes, commitment: bytes, proof: bytes) -> bool:
        return bool(ckzg.verify_blob_kzg_proof(blob, commitment, proof, self._settings))

    def verify_blob_kzg_proof_batch(
        self,
        blobs: Sequence[bytes],
        commitments: Sequence[bytes],
        proofs: Sequence[bytes],
    ) -> bool:
        # ckzg takes the batch as concatenated byte strings
        return bool(
            ckzg.verify_blob_kzg_proof_batch(
                b"".join(blobs),
                b"".join(commitments),
                b"".join(proofs),
                self._settings,
            )
        )

    def compute_cells(self, blob: bytes) -> list[bytes]:
        return [bytes(cell) for cell in ckzg.compute_cells(blob, self._settings)]

    def compute_cells_and_kzg_proofs(self, blob: bytes) -> tuple[list[bytes], list[bytes]]:
        cells, proofs = ckzg.compute_cells_and_kzg_proofs(blob, self._settings)
        return [bytes(c) for c in cells], [bytes(p) for p in proofs]

    def recover_cells_and_kzg_proofs(
        self,
        cell_indices: Sequence[int],
        cells: Sequence[bytes],
    ) -> tuple[list[bytes], list[bytes]]:
        recovered_cells, recovered_proofs = ckzg.recover_cells_and_kzg_proofs(
            list(cell_indices), list(cells), self._settings
        )
        return [bytes(c) for c in recovered_cells], [bytes(p) for p in recovered_proofs]

    def verify_cell_kzg_proof_batch(
        self,
        commitments: Sequence[bytes],
        cell_indices: Sequence[int],
        cells: Sequence[bytes],
        proofs: Sequence[bytes],
    ) -> bool:
        return bool(
            ckzg.verify_cell_kzg_proof_batch(
                list(commitments),
                list(cell_indices),
                list(cells),
                list(proofs),
                self._settings,
            )
        )
