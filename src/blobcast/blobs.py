"""
Blobs - EIP-4844 blob layout, payload encoding and versioned hashes.

A blob is 4096 field elements of 32 bytes each.  Every element is a
big-endian integer that must stay below the BLS12-381 scalar modulus.

Two payload encodings are provided:

- raw:    payload copied verbatim at offset 0 of a single zeroed blob.
          Only works when every 32-byte chunk is a canonical field element.
- packed: 31 payload bytes per field element behind a 0x00 lead byte, with
          a 0x80 terminator after the last byte.  Always canonical and may
          span several blobs.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Any, Iterator, Optional, Sequence

from .utils import bytes_to_hex, sha256

BYTES_PER_FIELD_ELEMENT = 32
FIELD_ELEMENTS_PER_BLOB = 4096
BYTES_PER_BLOB = BYTES_PER_FIELD_ELEMENT * FIELD_ELEMENTS_PER_BLOB
BYTES_PER_COMMITMENT = 48
BYTES_PER_PROOF = 48

# EIP-7594
FIELD_ELEMENTS_PER_CELL = 64
BYTES_PER_CELL = BYTES_PER_FIELD_ELEMENT * FIELD_ELEMENTS_PER_CELL
CELLS_PER_EXT_BLOB = 128

MAX_BLOBS_PER_TRANSACTION = 6

BLS_MODULUS = 52435875175126190479447740508185965837690552500527637822603658699938581184513

VERSIONED_HASH_VERSION_KZG = 0x01

# Sidecar wrapper versions: 0 carries one blob proof per blob,
# 1 carries CELLS_PER_EXT_BLOB cell proofs per blob.
WRAPPER_VERSION_BLOB_PROOFS = 0
WRAPPER_VERSION_CELL_PROOFS = 1

_PACKED_CHUNK = BYTES_PER_FIELD_ELEMENT - 1
_TERMINATOR = 0x80

MAX_PACKED_BYTES = MAX_BLOBS_PER_TRANSACTION * FIELD_ELEMENTS_PER_BLOB * _PACKED_CHUNK - 1


class BlobError(RuntimeError):
    exit_code: int = 1


class BlobSizeError(BlobError):
    exit_code = 2


class BlobCountError(BlobError):
    exit_code = 3


def field_element(blob: bytes, index: int) -> int:
    start = index * BYTES_PER_FIELD_ELEMENT
    return int.from_bytes(blob[start:start + BYTES_PER_FIELD_ELEMENT], "big")


def field_elements(blob: bytes) -> Iterator[int]:
    for index in range(len(blob) // BYTES_PER_FIELD_ELEMENT):
        yield field_element(blob, index)


def validate_blob(blob: bytes) -> None:
    """
    Check blob size and that every element is a canonical field element.

    Raises:
        BlobSizeError: If the blob is not exactly BYTES_PER_BLOB long
        BlobError: If an element is >= BLS_MODULUS
    """
    if len(blob) != BYTES_PER_BLOB:
        raise BlobSizeError(
            f"Blob must be {BYTES_PER_BLOB} bytes, got {len(blob)}"
        )
    for index, value in enumerate(field_elements(blob)):
        if value >= BLS_MODULUS:
            raise BlobError(
                f"Field element {index} is not canonical (>= BLS modulus)"
            )


def raw_blob(data: bytes) -> bytes:
    """Zero-pad ``data`` into a single blob without re-encoding it."""
    if len(data) > BYTES_PER_BLOB:
        raise BlobSizeError(
            f"Payload too large for a single blob: {len(data)} > {BYTES_PER_BLOB} bytes"
        )
    blob = bytes(data) + b"\x00" * (BYTES_PER_BLOB - len(data))
    validate_blob(blob)
    return blob


def to_blobs(data: bytes) -> list[bytes]:
    """
    Pack arbitrary bytes into as many blobs as needed.

    Args:
        data: Payload bytes (non-empty)

    Returns:
        List of BYTES_PER_BLOB sized blobs

    Raises:
        BlobSizeError: If ``data`` is empty
        BlobCountError: If the payload needs more than MAX_BLOBS_PER_TRANSACTION blobs
    """
    if not data:
        raise BlobSizeError("Blob payload must not be empty")
    if len(data) > MAX_PACKED_BYTES:
        raise BlobCountError(
            f"Payload of {len(data)} bytes needs more than "
            f"{MAX_BLOBS_PER_TRANSACTION} blobs (max {MAX_PACKED_BYTES} bytes)"
        )

    blobs: list[bytes] = []
    position = 0
    active = True
    while active:
        blob = bytearray()
        for _ in range(FIELD_ELEMENTS_PER_BLOB):
            chunk = data[position:position + _PACKED_CHUNK]
            blob.append(0x00)
            blob.extend(chunk)
            if len(chunk) < _PACKED_CHUNK:
                blob.append(_TERMINATOR)
                active = False
                break
            position += _PACKED_CHUNK
        blobs.append(bytes(blob.ljust(BYTES_PER_BLOB, b"\x00")))
    return blobs


def from_blobs(blobs: Sequence[bytes]) -> bytes:
    """Decode blobs produced by :func:`to_blobs` back into the payload."""
    payload = bytearray()
    for blob in blobs:
        if len(blob) != BYTES_PER_BLOB:
            raise BlobSizeError(
                f"Blob must be {BYTES_PER_BLOB} bytes, got {len(blob)}"
            )
        for start in range(0, BYTES_PER_BLOB, BYTES_PER_FIELD_ELEMENT):
            payload.extend(blob[start + 1:start + BYTES_PER_FIELD_ELEMENT])

    end = len(payload.rstrip(b"\x00"))
    if end == 0 or payload[end - 1] != _TERMINATOR:
        raise BlobError("Packed blob data has no 0x80 terminator")
    return bytes(payload[:end - 1])


def kzg_to_versioned_hash(commitment: bytes) -> bytes:
    """Versioned hash is the 0x01 version byte + last 31 bytes of sha256(commitment)."""
    if len(commitment) != BYTES_PER_COMMITMENT:
        raise BlobSizeError(
            f"Commitment must be {BYTES_PER_COMMITMENT} bytes, got {len(commitment)}"
        )
    return bytes([VERSIONED_HASH_VERSION_KZG]) + sha256(commitment)[1:]


@dataclass(frozen=True)
class BlobSidecar:
    """
    Blob data travelling next to a type-3 transaction.

    Attributes:
        blobs: Blob payloads
        commitments: One KZG commitment per blob
        proofs: One blob proof per blob (wrapper version 0) or
                CELLS_PER_EXT_BLOB cell proofs per blob (wrapper version 1)
        wrapper_version: Network wrapper version
    """
    blobs: list[bytes]
    commitments: list[bytes]
    proofs: list[bytes]
    wrapper_version: int = WRAPPER_VERSION_BLOB_PROOFS
    versioned_hashes: list[bytes] = field(init=False)

    def __post_init__(self) -> None:
        if not self.blobs:
            raise BlobCountError("A blob sidecar needs at least one blob")
        if len(self.blobs) > MAX_BLOBS_PER_TRANSACTION:
            raise BlobCountError(
                f"At most {MAX_BLOBS_PER_TRANSACTION} blobs per transaction, got {len(self.blobs)}"
            )
        if len(self.commitments) != len(self.blobs):
            raise BlobCountError(
                f"Expected {len(self.blobs)} commitments, got {len(self.commitments)}"
            )
        expected = len(self.blobs) * self.proofs_per_blob
        if len(self.proofs) != expected:
            raise BlobCountError(f"Expected {expected} proofs, got {len(self.proofs)}")
        object.__setattr__(
            self,
            "versioned_hashes",
            [kzg_to_versioned_hash(c) for c in self.commitments],
        )

    @property
    def proofs_per_blob(self) -> int:
        if self.wrapper_version == WRAPPER_VERSION_CELL_PROOFS:
            return CELLS_PER_EXT_BLOB
        if self.wrapper_version == WRAPPER_VERSION_BLOB_PROOFS:
            return 1
        raise BlobError(f"Unknown blob wrapper version: {self.wrapper_version}")

    def blob_proofs(self, index: int) -> list[bytes]:
        """Proofs belonging to the blob at ``index``."""
        step = self.proofs_per_blob
        return self.proofs[index * step:(index + 1) * step]

    def to_dict(self) -> dict[str, Any]:
        return {
            "wrapper_version": self.wrapper_version,
            "blob_count": len(self.blobs),
            "commitments": [bytes_to_hex(c) for c in self.commitments],
            "versioned_hashes": [bytes_to_hex(h) for h in self.versioned_hashes],
            "proof_count": len(self.proofs),
        }


ENCODINGS = ("raw", "packed")


def encode_payload(data: bytes, encoding: str = "packed") -> list[bytes]:
    """Turn payload bytes into blobs with the named encoding."""
    if encoding == "raw":
        return [raw_blob(data)]
    if encoding == "packed":
        return to_blobs(data)
    raise ValueError(f"Unknown blob encoding {encoding!r}; choose from {', '.join(ENCODINGS)}")


def random_blob(seed: Optional[int] = None) -> bytes:
    """A blob of uniformly random canonical field elements."""
    rng = random.Random(seed)
    return b"".join(
        rng.randrange(BLS_MODULUS).to_bytes(BYTES_PER_FIELD_ELEMENT, "big")
        for _ in range(FIELD_ELEMENTS_PER_BLOB)
    )
