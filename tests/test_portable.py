"""Tests for the pure Python (py_ecc) KZG backend."""

from __future__ import annotations

from pathlib import Path

import pytest
from py_ecc.bls.g2_primitives import G1_to_pubkey, G2_to_signature
from py_ecc.optimized_bls12_381 import G1, G2

from blobcast.blobs import BYTES_PER_BLOB, BlobSizeError, raw_blob
from blobcast.kzg import UnsupportedOperation
from blobcast.kzg.backend import KZGError, TrustedSetupError
from blobcast.kzg.portable import KZG_SETUP_G2_MONOMIAL_1, PortableBackend
from blobcast.kzg.trusted_setup import G2_POINTS, read_trusted_setup
from blobcast.utils import hex_to_bytes

# G1 point at infinity, compressed
INFINITY_G1 = b"\xc0" + b"\x00" * 47
ZERO = b"\x00" * 32
ONE = b"\x00" * 31 + b"\x01"


@pytest.fixture(scope="module")
def portable() -> PortableBackend:
    return PortableBackend()


class TestCommitment:
    def test_zero_blob_commits_to_infinity(self, portable: PortableBackend) -> None:
        # zero elements need no setup points
        assert portable.blob_to_kzg_commitment(b"\x00" * BYTES_PER_BLOB) == INFINITY_G1

    def test_needs_setup_for_nonzero_blob(self, portable: PortableBackend) -> None:
        with pytest.raises(TrustedSetupError):
            portable.blob_to_kzg_commitment(raw_blob(b"hello"))

    def test_invalid_blob(self, portable: PortableBackend) -> None:
        with pytest.raises(BlobSizeError):
            portable.blob_to_kzg_commitment(b"\x00" * 10)


@pytest.mark.slow
class TestVerifyKzgProof:
    def test_trivial_proof_verifies(self, portable: PortableBackend) -> None:
        # zero polynomial: commitment and quotient are both the point at infinity
        assert portable.verify_kzg_proof(INFINITY_G1, ONE, ZERO, INFINITY_G1) is True

    def test_wrong_evaluation_rejected(self, portable: PortableBackend) -> None:
        assert portable.verify_kzg_proof(INFINITY_G1, ONE, ONE, INFINITY_G1) is False

    def test_non_canonical_scalar(self, portable: PortableBackend) -> None:
        with pytest.raises(KZGError):
            portable.verify_kzg_proof(INFINITY_G1, b"\xff" * 32, ZERO, INFINITY_G1)

    def test_wrong_lengths(self, portable: PortableBackend) -> None:
        with pytest.raises(KZGError):
            portable.verify_kzg_proof(INFINITY_G1[:47], ONE, ZERO, INFINITY_G1)


class TestUnsupported:
    @pytest.mark.parametrize(
        "operation,args",
        [
            ("compute_kzg_proof", (b"", ZERO)),
            ("compute_blob_kzg_proof", (b"", INFINITY_G1)),
            ("verify_blob_kzg_proof", (b"", INFINITY_G1, INFINITY_G1)),
            ("verify_blob_kzg_proof_batch", ([], [], [])),
            ("compute_cells", (b"",)),
            ("compute_cells_and_kzg_proofs", (b"",)),
            ("recover_cells_and_kzg_proofs", ([], [])),
            ("verify_cell_kzg_proof_batch", ([], [], [], [])),
        ],
    )
    def test_raises(self, portable: PortableBackend, operation: str, args: tuple) -> None:
        with pytest.raises(UnsupportedOperation, match=operation) as exc_info:
            getattr(portable, operation)(*args)
        assert exc_info.value.exit_code == 7


class TestAgainstNative:
    @pytest.mark.slow
    def test_commitments_agree(self, trusted_setup_path: Path, native_backend) -> None:
        portable = PortableBackend(trusted_setup_path)
        blob = raw_blob(b"Long live the BLOBs!")
        assert portable.blob_to_kzg_commitment(blob) == native_backend.blob_to_kzg_commitment(blob)

    @pytest.mark.slow
    def test_verifies_native_proof(self, native_backend) -> None:
        portable = PortableBackend()
        blob = raw_blob(b"Long live the BLOBs!")
        commitment = native_backend.blob_to_kzg_commitment(blob)
        proof, y = native_backend.compute_kzg_proof(blob, ONE)
        assert portable.verify_kzg_proof(commitment, ONE, y, proof) is True


def _setup_with_secret_one(path: Path) -> Path:
    """A well-formed setup whose [s]G2 is the G2 generator (s = 1)."""
    g1 = "c0" + "00" * 47
    g2 = "c0" + "00" * 95
    lines = ["4096", str(G2_POINTS)] + [g1] * 4096
    lines += [g2, G2_to_signature(G2).hex()] + [g2] * (G2_POINTS - 2)
    lines += [g1] * 4096
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


class TestSetupG2:
    def test_ceremony_constant_matches_setup(self, trusted_setup_path: Path) -> None:
        setup = read_trusted_setup(trusted_setup_path)
        assert setup.g2_monomial[1] == hex_to_bytes(KZG_SETUP_G2_MONOMIAL_1)

    @pytest.mark.slow
    def test_verifier_uses_setup_point(self, tmp_path: Path) -> None:
        # with s = 1: C - y = Q * (s - z) holds for C = Q = G1, y = z = 0
        generator = bytes(G1_to_pubkey(G1))
        backend = PortableBackend(_setup_with_secret_one(tmp_path / "setup.txt"))
        assert backend.verify_kzg_proof(generator, ZERO, ZERO, generator) is True

    @pytest.mark.slow
    def test_same_proof_fails_against_ceremony(self, portable: PortableBackend) -> None:
        generator = bytes(G1_to_pubkey(G1))
        assert portable.verify_kzg_proof(generator, ZERO, ZERO, generator) is False
