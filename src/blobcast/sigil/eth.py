"""
ECDSA / secp256k1 key management for blobcast.

The signing key is read from PRIVATE_KEY, looked up in this order:
1. The process environment
2. A .env file in the current working directory
3. ~/.blobcast/.env

Dependencies: eth-account (signing), python-dotenv (.env loading)
"""

from __future__ import annotations

import os
import secrets
from pathlib import Path
from typing import Optional

from dotenv import find_dotenv, load_dotenv
from eth_account import Account
from eth_account.signers.local import LocalAccount


# Default config directory
BLOBCAST_DIR = Path.home() / ".blobcast"
BLOBCAST_ENV = BLOBCAST_DIR / ".env"


def load_env(env_path: Optional[Path] = None) -> None:
    """Load .env files into the process environment without overriding it."""
    local_env = find_dotenv(usecwd=True)
    if local_env:
        load_dotenv(local_env, override=False)

    env_path = env_path or BLOBCAST_ENV
    if env_path.exists():
        load_dotenv(env_path, override=False)


def generate_eoa() -> tuple[str, str]:
    """
    Generate a new throwaway keypair for devnet use.

    Returns:
        Tuple of (private_key_hex, address)
    """
    private_key = "0x" + secrets.token_hex(32)
    account = Account.from_key(private_key)
    return private_key, account.address


def save_private_key(private_key: str, env_path: Optional[Path] = None) -> Path:
    """
    Save private key to the blobcast .env file, keeping other entries.

    Args:
        private_key: 0x-prefixed hex private key
        env_path: Path to .env file (default: ~/.blobcast/.env)

    Returns:
        Path to the saved .env file
    """
    env_path = env_path or BLOBCAST_ENV
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing = {}
    if env_path.exists():
        for line in env_path.read_text(encoding="utf-8").splitlines():
            line = line.strip()
            if line and not line.startswith("#") and "=" in line:
                k, v = line.split("=", 1)
                existing[k.strip()] = v.strip()

    existing["PRIVATE_KEY"] = private_key

    lines = [f"{k}={v}" for k, v in existing.items()]
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")

    if os.name != "nt":
        env_path.chmod(0o600)

    return env_path


def load_private_key(env_path: Optional[Path] = None) -> str:
    """
    Load private key from the environment or .env files.

    Returns:
        0x-prefixed hex private key

    Raises:
        ValueError: If PRIVATE_KEY is not set anywhere
    """
    load_env(env_path)

    private_key = os.environ.get("PRIVATE_KEY", "").strip()
    if not private_key:
        raise ValueError(
            f"PRIVATE_KEY is not set. Export it, add it to a local .env, "
            f"or run 'blobcast keygen' to create {env_path or BLOBCAST_ENV}"
        )

    if not private_key.startswith("0x"):
        private_key = "0x" + private_key

    return private_key


def get_account(private_key: Optional[str] = None) -> LocalAccount:
    """
    Get an eth-account LocalAccount from a private key.

    Args:
        private_key: 0x-prefixed hex private key.
                     If None, loads from the environment.
    """
    if private_key is None:
        private_key = load_private_key()
    return Account.from_key(private_key)


def get_address(private_key: Optional[str] = None) -> str:
    """Checksummed address for a private key (loaded from env when None)."""
    return get_account(private_key).address
