"""
KZG backends for blob commitments and proofs.

- native:   ckzg (c-kzg-4844), full EIP-4844 + EIP-7594 operation set
- portable: py_ecc, commitments and point-proof verification only
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from .backend import (
    KZGBackend,
    KZGError,
    ProofVerificationError,
    TrustedSetupError,
    UnsupportedOperation,
)
from .trusted_setup import resolve_trusted_setup

BACKENDS = ("native", "portable")


def load_backend(name: str = "native", setup_path: Optional[Path] = None) -> KZGBackend:
    """
    Instantiate a KZG backend by name.

    Args:
        name: "native" or "portable"
        setup_path: Trusted setup file; resolved with resolve_trusted_setup when None

    Raises:
        ValueError: Unknown backend name
        TrustedSetupError: No usable trusted setup
    """
    if name not in BACKENDS:
        raise ValueError(f"Unknown KZG backend {name!r}; choose from {', '.join(BACKENDS)}")

    path = resolve_trusted_setup(setup_path)
    if name == "native":
        from .native import NativeBackend

        return NativeBackend(path)

    from .portable import PortableBackend

    return PortableBackend(path)


__all__ = [
    "BACKENDS",
    "KZGBackend",
    "KZGError",
    "ProofVerificationError",
    "TrustedSetupError",
    "UnsupportedOperation",
    "load_backend",
    "resolve_trusted_setup",
]
