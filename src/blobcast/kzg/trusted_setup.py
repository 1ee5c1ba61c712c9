"""
Trusted setup discovery, download and parsing.

The file format is the c-kzg-4844 text format:

    4096                      number of G1 points
    65                        number of G2 points
    <4096 G1 Lagrange points> 48-byte compressed, hex, natural order
    <65 G2 monomial points>   96-byte compressed, hex
    <4096 G1 monomial points> 48-byte compressed, hex (needed for EIP-7594)

Resolution order for the file used by the KZG backends:
1. Explicit path (command-line option)
2. KZG_TRUSTED_SETUP environment variable
3. ~/.blobcast/kzg/trusted_setup.txt (written by ``blobcast fetch-setup``)
4. The copy bundled with the installed eth-account package
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import httpx

from ..blobs import BYTES_PER_COMMITMENT, FIELD_ELEMENTS_PER_BLOB
from ..sigil.eth import BLOBCAST_DIR
from .backend import TrustedSetupError

TRUSTED_SETUP_URL = (
    "https://raw.githubusercontent.com/ethereum/c-kzg-4844/main/src/trusted_setup.txt"
)
CACHE_DIR = BLOBCAST_DIR / "kzg"
CACHED_SETUP = CACHE_DIR / "trusted_setup.txt"

BYTES_PER_G2_POINT = 96
G2_POINTS = 65


@dataclass(frozen=True)
class TrustedSetup:
    g1_lagrange: list[bytes]
    g2_monomial: list[bytes]
    g1_monomial: list[bytes]


def read_trusted_setup(path: Path) -> TrustedSetup:
    """
    Parse a c-kzg text trusted setup.

    Raises:
        TrustedSetupError: If the file is missing or malformed
    """
    path = Path(path)
    if not path.is_file():
        raise TrustedSetupError(f"Trusted setup not found: {path}")

    lines = [line.strip() for line in path.read_text(encoding="utf-8").splitlines() if line.strip()]
    try:
        n_g1 = int(lines[0])
        n_g2 = int(lines[1])
    except (IndexError, ValueError) as exc:
        raise TrustedSetupError(f"Malformed trusted setup header in {path}") from exc

    if n_g1 != FIELD_ELEMENTS_PER_BLOB or n_g2 != G2_POINTS:
        raise TrustedSetupError(
            f"Unexpected trusted setup sizes in {path}: {n_g1} G1 / {n_g2} G2 points"
        )

    body = lines[2:]
    if len(body) < n_g1 + n_g2:
        raise TrustedSetupError(f"Truncated trusted setup: {path}")

    try:
        g1_lagrange = [bytes.fromhex(line) for line in body[:n_g1]]
        g2_monomial = [bytes.fromhex(line) for line in body[n_g1:n_g1 + n_g2]]
        g1_monomial = [bytes.fromhex(line) for line in body[n_g1 + n_g2:n_g1 + n_g2 + n_g1]]
    except ValueError as exc:
        raise TrustedSetupError(f"Non-hex point in trusted setup {path}") from exc

    if any(len(p) != BYTES_PER_COMMITMENT for p in g1_lagrange + g1_monomial):
        raise TrustedSetupError(f"G1 point with wrong length in {path}")
    if any(len(p) != BYTES_PER_G2_POINT for p in g2_monomial):
        raise TrustedSetupError(f"G2 point with wrong length in {path}")

    return TrustedSetup(g1_lagrange, g2_monomial, g1_monomial)


def bundled_trusted_setup() -> Optional[Path]:
    """Locate the trusted setup shipped inside the eth-account package, if any."""
    import eth_account

    package_dir = Path(eth_account.__file__).resolve().parent
    matches = sorted(package_dir.rglob("*trusted_setup*.txt"))
    return matches[0] if matches else None


def resolve_trusted_setup(path: Optional[Path] = None) -> Path:
    """
    Find a trusted setup file without touching the network.

    Raises:
        TrustedSetupError: If no candidate exists
    """
    if path is not None:
        path = Path(path).expanduser()
        if not path.is_file():
            raise TrustedSetupError(f"Trusted setup not found: {path}")
        return path

    from_env = os.environ.get("KZG_TRUSTED_SETUP")
    if from_env:
        env_path = Path(from_env).expanduser()
        if not env_path.is_file():
            raise TrustedSetupError(f"KZG_TRUSTED_SETUP points to a missing file: {env_path}")
        return env_path

    if CACHED_SETUP.is_file():
        return CACHED_SETUP

    bundled = bundled_trusted_setup()
    if bundled is not None:
        return bundled

    raise TrustedSetupError(
        "No trusted setup found. Run 'blobcast fetch-setup' or set KZG_TRUSTED_SETUP."
    )


def fetch_trusted_setup(
    url: str = TRUSTED_SETUP_URL,
    dest: Optional[Path] = None,
    force: bool = False,
) -> Path:
    """
    Download the trusted setup into the local cache.

    Args:
        url: Source URL
        dest: Target file (default: ~/.blobcast/kzg/trusted_setup.txt)
        force: Re-download even if the file exists

    Returns:
        Path to the downloaded file (validated by parsing it)
    """
    dest = Path(dest) if dest is not None else CACHED_SETUP
    if dest.is_file() and not force:
        return dest

    with httpx.Client(timeout=60, follow_redirects=True) as client:
        response = client.get(url)
        response.raise_for_status()
        text = response.text

    dest.parent.mkdir(parents=True, exist_ok=True)
    tmp = dest.with_suffix(".tmp")
    tmp.write_text(text, encoding="utf-8")
    try:
        read_trusted_setup(tmp)
    except TrustedSetupError:
        tmp.unlink(missing_ok=True)
        raise
    tmp.replace(dest)
    return dest
