"""
Portable KZG backend in pure Python (py_ecc).

Pure Python and slow: it exists to compare timings and outputs
against the native ckzg backend.  Only commitments and single-point proof
verification are available; every other operation raises
UnsupportedOperation.

Commitment: linear combination of the bit-reversed Lagrange G1 setup
points weighted by the blob's field elements.  Zero elements are skipped
and setup points are decompressed on first use, so sparse blobs stay cheap.

Verification: pairing check e(P - [y]G1, -G2) * e(Q, [s - z]G2) == 1.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Sequence

from py_ecc.bls.g2_primitives import G1_to_pubkey, pubkey_to_G1, signature_to_G2
from py_ecc.fields import optimized_bls12_381_FQ12 as FQ12
from py_ecc.optimized_bls12_381 import G1, G2, Z1, add, multiply, neg
from py_ecc.optimized_bls12_381.optimized_pairing import final_exponentiate, pairing

from ..blobs import (
    BLS_MODULUS,
    BYTES_PER_COMMITMENT,
    BYTES_PER_FIELD_ELEMENT,
    BYTES_PER_PROOF,
    field_elements,
    validate_blob,
)
from ..utils import hex_to_bytes
from .backend import KZGError, TrustedSetupError, UnsupportedOperation
from .roots import bit_reversal_permutation
from .trusted_setup import TrustedSetup, read_trusted_setup

# [s]G2 from the Ethereum KZG ceremony (second G2 monomial point), used when
# no setup file is given
KZG_SETUP_G2_MONOMIAL_1 = "0xb5bfd7dd8cdeb128843bc287230af38926187075cbfbefa81009a2ce615ac53d2914e5870cb452d2afaaab24f3499f72185cbfee53492714734429b7b38608e23926c911cceceac9a36851477ba4c60b087041de621000edc98edada20c1def2"  # noqa: E501


def _scalar(value: bytes) -> int:
    if len(value) != BYTES_PER_FIELD_ELEMENT:
        raise KZGError(f"Field element must be {BYTES_PER_FIELD_ELEMENT} bytes, got {len(value)}")
    scalar = int.from_bytes(value, "big")
    if scalar >= BLS_MODULUS:
        raise KZGError("Field element is not canonical (>= BLS modulus)")
    return scalar


def _pairing_check(pairs: Sequence[tuple[Any, Any]]) -> bool:
    product = FQ12.one()
    for g1_point, g2_point in pairs:
        product = product * pairing(g2_point, g1_point, final_exponentiate=False)
    return final_exponentiate(product) == FQ12.one()


class PortableBackend:
    name = "portable"

    def __init__(self, setup_path: Optional[Path] = None) -> None:
        self.setup_path = Path(setup_path) if setup_path is not None else None
        self._setup: Optional[TrustedSetup] = None
        self._lagrange_brp: Optional[list[bytes]] = None
        self._points: dict[int, Any] = {}
        self._s_g2: Any = None

    def _trusted_setup(self) -> TrustedSetup:
        if self._setup is None:
            if self.setup_path is None:
                raise TrustedSetupError("The portable backend needs a trusted setup for commitments")
            self._setup = read_trusted_setup(self.setup_path)
        return self._setup

    def _setup_g2(self) -> Any:
        """[s]G2 of the loaded setup; the ceremony point when there is none."""
        if self._s_g2 is None:
            if self.setup_path is None:
                encoded = hex_to_bytes(KZG_SETUP_G2_MONOMIAL_1)
            else:
                encoded = self._trusted_setup().g2_monomial[1]
            self._s_g2 = signature_to_G2(encoded)
        return self._s_g2

    def _lagrange_point(self, index: int) -> Any:
        if self._lagrange_brp is None:
            self._lagrange_brp = bit_reversal_permutation(self._trusted_setup().g1_lagrange)
        point = self._points.get(index)
        if point is None:
            point = pubkey_to_G1(self._lagrange_brp[index])
            self._points[index] = point
        return point

    def blob_to_kzg_commitment(self, blob: bytes) -> bytes:
        validate_blob(blob)
        result = Z1
        for index, scalar in enumerate(field_elements(blob)):
            if scalar:
                result = add(result, multiply(self._lagrange_point(index), scalar))
        return bytes(G1_to_pubkey(result))

    def verify_kzg_proof(self, commitment: bytes, z: bytes, y: bytes, proof: bytes) -> bool:
        if len(commitment) != BYTES_PER_COMMITMENT or len(proof) != BYTES_PER_PROOF:
            raise KZGError("Commitment and proof must be 48 bytes")
        z_int = _scalar(z)
        y_int = _scalar(y)

        # Verify: P - y = Q * (X - z)
        x_minus_z = add(self._setup_g2(), multiply(G2, (BLS_MODULUS - z_int) % BLS_MODULUS))
        p_minus_y = add(pubkey_to_G1(commitment), multiply(G1, (BLS_MODULUS - y_int) % BLS_MODULUS))
        return _pairing_check(
            [
                (p_minus_y, neg(G2)),
                (pubkey_to_G1(proof), x_minus_z),
            ]
        )

    def _unsupported(self, operation: str) -> UnsupportedOperation:
        return UnsupportedOperation(
            f"{operation} is not available on the portable backend; use the native backend"
        )

    def compute_kzg_proof(self, blob: bytes, z: bytes) -> tuple[bytes, bytes]:
        raise self._unsupported("compute_kzg_proof")

    def compute_blob_kzg_proof(self, blob: bytes, commitment: bytes) -> bytes:
        raise self._unsupported("compute_blob_kzg_proof")

    def verify_blob_kzg_proof(self, blob: bytes, commitment: bytes, proof: bytes) -> bool:
        raise self._unsupported("verify_blob_kzg_proof")

    def verify_blob_kzg_proof_batch(
        self,
        blobs: Sequence[bytes],
        commitments: Sequence[bytes],
        proofs: Sequence[bytes],
    ) -> bool:
        raise self._unsupported("verify_blob_kzg_proof_batch")

    def compute_cells(self, blob: bytes) -> list[bytes]:
        raise self._unsupported("compute_cells")

    def compute_cells_and_kzg_proofs(self, blob: bytes) -> tuple[list[bytes], list[bytes]]:
        raise self._unsupported("compute_cells_and_kzg_proofs")

    def recover_cells_and_kzg_proofs(
        self,
        cell_indices: Sequence[int],
        cells: Sequence[bytes],
    ) -> tuple[list[bytes], list[bytes]]:
        raise self._unsupported("recover_cells_and_kzg_proofs")

    def verify_cell_kzg_proof_batch(
        self,
        commitments: Sequence[bytes],
        cell_indices: Sequence[int],
        cells: Sequence[bytes],
        proofs: Sequence[bytes],
    ) -> bool:
        raise self._unsupported("verify_cell_kzg_proof_batch")
