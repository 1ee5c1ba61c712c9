"""
EIP-4844 point evaluation precompile (address 0x0a).

Input:  versioned_hash (32) | z (32) | y (32) | commitment (48) | proof (48)
Output: FIELD_ELEMENTS_PER_BLOB and BLS_MODULUS as two uint256 words.
The call reverts when the proof does not verify.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from eth_abi import decode

from ..blobs import (
    BLS_MODULUS,
    BYTES_PER_COMMITMENT,
    BYTES_PER_FIELD_ELEMENT,
    BYTES_PER_PROOF,
    FIELD_ELEMENTS_PER_BLOB,
    kzg_to_versioned_hash,
)
from ..kzg.backend import ProofVerificationError
from ..utils import bytes_to_hex, hex_to_bytes
from .rpc import RPCError, eth_call

POINT_EVALUATION_ADDRESS = "0x000000000000000000000000000000000000000a"
POINT_EVALUATION_INPUT_LENGTH = 192


@dataclass(frozen=True)
class PointEvaluationResult:
    field_elements_per_blob: int
    bls_modulus: int

    @property
    def ok(self) -> bool:
        return (
            self.field_elements_per_blob == FIELD_ELEMENTS_PER_BLOB
            and self.bls_modulus == BLS_MODULUS
        )


def point_evaluation_input(commitment: bytes, z: bytes, y: bytes, proof: bytes) -> bytes:
    """Assemble the 192-byte precompile input for a point proof."""
    if len(commitment) != BYTES_PER_COMMITMENT:
        raise ValueError(f"Commitment must be {BYTES_PER_COMMITMENT} bytes")
    if len(proof) != BYTES_PER_PROOF:
        raise ValueError(f"Proof must be {BYTES_PER_PROOF} bytes")
    if len(z) != BYTES_PER_FIELD_ELEMENT or len(y) != BYTES_PER_FIELD_ELEMENT:
        raise ValueError(f"z and y must be {BYTES_PER_FIELD_ELEMENT} bytes")

    return kzg_to_versioned_hash(commitment) + z + y + commitment + proof


def call_point_evaluation(
    commitment: bytes,
    z: bytes,
    y: bytes,
    proof: bytes,
    rpc_url: Optional[str] = None,
) -> PointEvaluationResult:
    """
    Verify a point proof on-chain through eth_call.

    Raises:
        ProofVerificationError: If the precompile rejects the proof
    """
    calldata = point_evaluation_input(commitment, z, y, proof)
    try:
        result = eth_call(POINT_EVALUATION_ADDRESS, bytes_to_hex(calldata), rpc_url=rpc_url)
    except RPCError as exc:
        raise ProofVerificationError(f"Point evaluation precompile rejected the proof: {exc.message}") from exc

    if not result or result == "0x":
        raise ProofVerificationError("Point evaluation precompile returned no data")

    field_elements_per_blob, bls_modulus = decode(["uint256", "uint256"], hex_to_bytes(result))
    return PointEvaluationResult(field_elements_per_blob, bls_modulus)
