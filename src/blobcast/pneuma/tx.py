"""
Blob transaction builder - prepare, sign, wrap and send type-3 transactions.

eth-account signs the transaction payload; the network form is the signed
payload followed by its sidecar in one RLP list:

    EIP-4844: 0x03 || rlp([payload, blobs, commitments, proofs])
    EIP-7594: 0x03 || rlp([payload, 1, blobs, commitments, cell_proofs])
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

import rlp
from eth_account.signers.local import LocalAccount
from eth_utils import to_checksum_address, to_wei

from ..blobs import (
    WRAPPER_VERSION_BLOB_PROOFS,
    WRAPPER_VERSION_CELL_PROOFS,
    BlobSidecar,
    validate_blob,
)
from ..kzg.backend import KZGBackend
from ..utils import bytes_to_hex
from .rpc import (
    estimate_gas,
    get_chain_id,
    get_fee_data,
    get_nonce,
    send_raw_transaction,
)

BLOB_TX_TYPE = 3
DEFAULT_MAX_FEE_PER_BLOB_GAS = to_wei(30, "gwei")
EIPS = ("4844", "7594")

# Position of blob_versioned_hashes in the signed type-3 payload:
# [chain_id, nonce, max_priority_fee, max_fee, gas, to, value, data,
#  access_list, max_fee_per_blob_gas, blob_versioned_hashes, y_parity, r, s]
_VERSIONED_HASHES_FIELD = 10


@dataclass(frozen=True)
class AccessListEntry:
    address: str
    storage_keys: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "address": to_checksum_address(self.address),
            "storageKeys": list(self.storage_keys),
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "AccessListEntry":
        return cls(
            address=payload["address"],
            storage_keys=tuple(payload.get("storageKeys", [])),
        )


@dataclass(frozen=True)
class BlobTransactionRequest:
    """Unsigned type-3 transaction with its blob sidecar."""
    to: str
    nonce: int
    chain_id: int
    gas: int
    max_fee_per_gas: int
    max_priority_fee_per_gas: int
    max_fee_per_blob_gas: int
    sidecar: BlobSidecar
    value: int = 0
    data: bytes = b""
    access_list: list[AccessListEntry] = field(default_factory=list)
    type: int = BLOB_TX_TYPE

    @property
    def blob_versioned_hashes(self) -> list[bytes]:
        return self.sidecar.versioned_hashes

    def to_tx_dict(self) -> dict[str, Any]:
        """Transaction dict in the shape eth-account signs."""
        return {
            "type": self.type,
            "chainId": self.chain_id,
            "nonce": self.nonce,
            "to": to_checksum_address(self.to),
            "value": self.value,
            "gas": self.gas,
            "maxFeePerGas": self.max_fee_per_gas,
            "maxPriorityFeePerGas": self.max_priority_fee_per_gas,
            "maxFeePerBlobGas": self.max_fee_per_blob_gas,
            "data": bytes_to_hex(self.data),
            "accessList": [entry.to_dict() for entry in self.access_list],
            "blobVersionedHashes": [bytes_to_hex(h) for h in self.blob_versioned_hashes],
        }


@dataclass(frozen=True)
class SignedBlobTransaction:
    raw_transaction: bytes
    tx_hash: bytes
    request: BlobTransactionRequest
    includes_sidecar: bool = True

    @property
    def raw_hex(self) -> str:
        return bytes_to_hex(self.raw_transaction)

    @property
    def hash_hex(self) -> str:
        return bytes_to_hex(self.tx_hash)


@dataclass(frozen=True)
class DecodedBlobTransaction:
    payload: list
    versioned_hashes: list[bytes]
    sidecar: Optional[BlobSidecar]


def wrapper_version_for(eip: str) -> int:
    if eip not in EIPS:
        raise ValueError(f"Unsupported EIP {eip!r}; choose from {', '.join(EIPS)}")
    return WRAPPER_VERSION_CELL_PROOFS if eip == "7594" else WRAPPER_VERSION_BLOB_PROOFS


def build_sidecar(
    blobs: Sequence[bytes],
    backend: KZGBackend,
    wrapper_version: int = WRAPPER_VERSION_BLOB_PROOFS,
) -> BlobSidecar:
    """
    Commit to and prove every blob.

    Wrapper version 0 attaches one blob proof per blob, version 1 the
    CELLS_PER_EXT_BLOB cell proofs of each blob.
    """
    commitments: list[bytes] = []
    proofs: list[bytes] = []
    for blob in blobs:
        validate_blob(blob)
        commitment = backend.blob_to_kzg_commitment(blob)
        commitments.append(commitment)
        if wrapper_version == WRAPPER_VERSION_CELL_PROOFS:
            _, cell_proofs = backend.compute_cells_and_kzg_proofs(blob)
            proofs.extend(cell_proofs)
        else:
            proofs.append(backend.compute_blob_kzg_proof(blob, commitment))

    return BlobSidecar(
        blobs=list(blobs),
        commitments=commitments,
        proofs=proofs,
        wrapper_version=wrapper_version,
    )


def prepare_blob_transaction(
    sender: str,
    to: str,
    blobs: Sequence[bytes],
    backend: KZGBackend,
    eip: str = "4844",
    value: int = 0,
    data: bytes = b"",
    access_list: Optional[list[AccessListEntry]] = None,
    gas_limit: Optional[int] = None,
    max_fee_per_blob_gas: Optional[int] = None,
    nonce: Optional[int] = None,
    chain_id: Optional[int] = None,
    rpc_url: Optional[str] = None,
) -> BlobTransactionRequest:
    """
    Fill in fees, nonce, chain ID and gas, and attach the blob sidecar.

    Args:
        sender: Address whose nonce is used
        to: Recipient address (blob transactions cannot create contracts)
        blobs: Blob payloads
        backend: KZG backend producing commitments and proofs
        eip: "4844" (blob proofs) or "7594" (cell proofs)
        gas_limit: Execution gas (default: eth_estimateGas)
        max_fee_per_blob_gas: Blob fee cap in wei (default: 30 gwei)
        nonce: Sender nonce (default: eth_getTransactionCount)
        chain_id: Chain ID (default: CHAIN_ID env / Sepolia)

    Returns:
        BlobTransactionRequest ready for signing
    """
    sidecar = build_sidecar(blobs, backend, wrapper_version_for(eip))

    fees = get_fee_data(rpc_url=rpc_url)
    if nonce is None:
        nonce = get_nonce(sender, rpc_url=rpc_url)
    if gas_limit is None:
        gas_limit = estimate_gas(
            {
                "from": sender,
                "to": to,
                "value": hex(value),
                "data": bytes_to_hex(data),
            },
            rpc_url=rpc_url,
        )

    return BlobTransactionRequest(
        to=to,
        nonce=nonce,
        chain_id=chain_id if chain_id is not None else get_chain_id(),
        gas=gas_limit,
        max_fee_per_gas=fees.max_fee_per_gas,
        max_priority_fee_per_gas=fees.max_priority_fee_per_gas,
        max_fee_per_blob_gas=(
            max_fee_per_blob_gas if max_fee_per_blob_gas is not None else DEFAULT_MAX_FEE_PER_BLOB_GAS
        ),
        sidecar=sidecar,
        value=value,
        data=data,
        access_list=list(access_list or []),
    )


def wrap_sidecar(payload: bytes, sidecar: BlobSidecar) -> bytes:
    """Attach a sidecar to a signed 0x03-prefixed payload."""
    if not payload or payload[0] != BLOB_TX_TYPE:
        raise ValueError("Signed payload is not a type-3 transaction")

    fields = rlp.decode(payload[1:])
    body: list[Any] = [fields]
    if sidecar.wrapper_version != WRAPPER_VERSION_BLOB_PROOFS:
        body.append(sidecar.wrapper_version)
    body.extend([list(sidecar.blobs), list(sidecar.commitments), list(sidecar.proofs)])
    return bytes([BLOB_TX_TYPE]) + rlp.encode(body)


def sign_blob_transaction(
    request: BlobTransactionRequest,
    account: LocalAccount,
    include_sidecar: bool = True,
) -> SignedBlobTransaction:
    """
    Sign a prepared request.

    Args:
        request: Prepared transaction
        account: eth-account signer
        include_sidecar: Return the network form (payload + sidecar) instead
                         of the bare signed payload

    Returns:
        SignedBlobTransaction; tx_hash always covers the bare payload
    """
    signed = account.sign_transaction(request.to_tx_dict())
    payload = bytes(signed.raw_transaction)
    raw = wrap_sidecar(payload, request.sidecar) if include_sidecar else payload
    return SignedBlobTransaction(
        raw_transaction=raw,
        tx_hash=bytes(signed.hash),
        request=request,
        includes_sidecar=include_sidecar,
    )


def decode_raw_transaction(raw: bytes) -> DecodedBlobTransaction:
    """
    Split a type-3 transaction into payload fields, versioned hashes and sidecar.

    Handles the bare payload as well as both network wrapper versions.
    """
    if not raw or raw[0] != BLOB_TX_TYPE:
        raise ValueError("Not a type-3 transaction")

    items = rlp.decode(bytes(raw[1:]))
    sidecar: Optional[BlobSidecar] = None
    if items and isinstance(items[0], list):
        payload = items[0]
        rest = items[1:]
        wrapper_version = WRAPPER_VERSION_BLOB_PROOFS
        if len(rest) == 4:
            wrapper_version = int.from_bytes(rest[0], "big")
            rest = rest[1:]
        if len(rest) != 3:
            raise ValueError("Malformed blob transaction network wrapper")
        blobs, commitments, proofs = rest
        sidecar = BlobSidecar(
            blobs=list(blobs),
            commitments=list(commitments),
            proofs=list(proofs),
            wrapper_version=wrapper_version,
        )
    else:
        payload = items

    return DecodedBlobTransaction(
        payload=payload,
        versioned_hashes=list(payload[_VERSIONED_HASHES_FIELD]),
        sidecar=sidecar,
    )


def send_blob_transaction(signed: SignedBlobTransaction, rpc_url: Optional[str] = None) -> str:
    """Broadcast a signed transaction; returns the hash reported by the node."""
    return send_raw_transaction(signed.raw_hex, rpc_url=rpc_url)
