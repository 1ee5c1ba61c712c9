from __future__ import annotations

from typing import Protocol, Sequence


class KZGError(RuntimeError):
    exit_code: int = 1


class ProofVerificationError(KZGError):
    exit_code = 4


class TrustedSetupError(KZGError):
    exit_code = 6


class UnsupportedOperation(KZGError):
    exit_code = 7


class KZGBackend(Protocol):
    """Operations shared by the native (ckzg) and portable (py_ecc) backends.

    All inputs and outputs are raw bytes: blobs are 131072 bytes, commitments
    and proofs 48 bytes, field elements 32 bytes big-endian, cells 2048 bytes.
    """

    name: str

    def blob_to_kzg_commitment(self, blob: bytes) -> bytes:
        ...

    def compute_kzg_proof(self, blob: bytes, z: bytes) -> tuple[bytes, bytes]:
        ...

    def verify_kzg_proof(self, commitment: bytes, z: bytes, y: bytes, proof: bytes) -> bool:
        ...

    def compute_blob_kzg_proof(self, blob: bytes, commitment: bytes) -> bytes:
        ...

    def verify_blob_kzg_proof(self, blob: bytes, commitment: bytes, proof: bytes) -> bool:
        ...

    def verify_blob_kzg_proof_batch(
        self,
        blobs: Sequence[bytes],
        commitments: Sequence[bytes],
        proofs: Sequence[bytes],
    ) -> bool:
        ...

    def compute_cells(self, blob: bytes) -> list[bytes]:
        ...

    def compute_cells_and_kzg_proofs(self, blob: bytes) -> tuple[list[bytes], list[bytes]]:
        ...

    def recover_cells_and_kzg_proofs(
        self,
        cell_indices: Sequence[int],
        cells: Sequence[bytes],
    ) -> tuple[list[bytes], list[bytes]]:
        ...

    def verify_cell_kzg_proof_batch(
        self,
        commitments: Sequence[bytes],
        cell_indices: Sequence[int],
        cells: Sequence[bytes],
        proofs: Sequence[bytes],
    ) -> bool:
        ...
