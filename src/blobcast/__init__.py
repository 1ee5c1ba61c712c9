__all__ = [
    # Blobs
    "BlobError",
    "BlobSizeError",
    "BlobCountError",
    "BlobSidecar",
    "encode_payload",
    "from_blobs",
    "kzg_to_versioned_hash",
    "raw_blob",
    "to_blobs",
    "validate_blob",
    # KZG
    "KZGBackend",
    "KZGError",
    "ProofVerificationError",
    "TrustedSetupError",
    "UnsupportedOperation",
    "load_backend",
    "resolve_trusted_setup",
    # Transactions
    "AccessListEntry",
    "BlobTransactionRequest",
    "SignedBlobTransaction",
    "build_sidecar",
    "decode_raw_transaction",
    "prepare_blob_transaction",
    "send_blob_transaction",
    "sign_blob_transaction",
    # RPC
    "RPCError",
    # Checks
    "IntegrityError",
    "check_backends_agree",
    "check_blob_proofs",
    "check_cell_recovery",
    "check_point_evaluation",
    "check_versioned_hashes",
    # ECDSA Identity
    "generate_eoa",
    "get_account",
    "get_address",
    "load_private_key",
]

from .blobs import (
    BlobCountError,
    BlobError,
    BlobSidecar,
    BlobSizeError,
    encode_payload,
    from_blobs,
    kzg_to_versioned_hash,
    raw_blob,
    to_blobs,
    validate_blob,
)
from .kzg import (
    KZGBackend,
    KZGError,
    ProofVerificationError,
    TrustedSetupError,
    UnsupportedOperation,
    load_backend,
    resolve_trusted_setup,
)
from .pneuma.rpc import RPCError
from .pneuma.tx import (
    AccessListEntry,
    BlobTransactionRequest,
    SignedBlobTransaction,
    build_sidecar,
    decode_raw_transaction,
    prepare_blob_transaction,
    send_blob_transaction,
    sign_blob_transaction,
)
from .checks import (
    IntegrityError,
    check_backends_agree,
    check_blob_proofs,
    check_cell_recovery,
    check_point_evaluation,
    check_versioned_hashes,
)
from .sigil.eth import generate_eoa, get_account, get_address, load_private_key
