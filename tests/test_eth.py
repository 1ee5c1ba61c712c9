"""Tests for signing key management (sigil.eth)."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from blobcast.sigil import eth
from blobcast.sigil.eth import (
    generate_eoa,
    get_account,
    get_address,
    load_env,
    load_private_key,
    save_private_key,
)


class TestGenerate:
    def test_generate_eoa(self) -> None:
        private_key, address = generate_eoa()
        assert private_key.startswith("0x")
        assert len(private_key) == 66
        assert address.startswith("0x")
        assert get_address(private_key) == address

    def test_keys_are_random(self) -> None:
        assert generate_eoa()[0] != generate_eoa()[0]


class TestSaveAndLoad:
    def test_save_creates_env(self, tmp_path: Path) -> None:
        private_key, _ = generate_eoa()
        env_path = tmp_path / "nested" / ".env"
        saved = save_private_key(private_key, env_path)
        assert saved == env_path
        assert f"PRIVATE_KEY={private_key}" in env_path.read_text(encoding="utf-8")

    def test_save_keeps_other_entries(self, tmp_path: Path) -> None:
        env_path = tmp_path / ".env"
        env_path.write_text("CHAIN_ID=1\nPRIVATE_KEY=0xold\n", encoding="utf-8")
        private_key, _ = generate_eoa()
        save_private_key(private_key, env_path)
        text = env_path.read_text(encoding="utf-8")
        assert "CHAIN_ID=1" in text
        assert "0xold" not in text

    def test_save_defaults_to_home(self, isolated_env: Path) -> None:
        private_key, _ = generate_eoa()
        saved = save_private_key(private_key)
        assert saved == isolated_env / ".env"

    def test_load_from_environment(self) -> None:
        private_key, _ = generate_eoa()
        os.environ["PRIVATE_KEY"] = private_key
        assert load_private_key() == private_key

    def test_load_adds_prefix(self) -> None:
        private_key, _ = generate_eoa()
        os.environ["PRIVATE_KEY"] = private_key[2:]
        assert load_private_key() == private_key

    def test_load_from_home_env(self, isolated_env: Path) -> None:
        private_key, _ = generate_eoa()
        save_private_key(private_key)
        assert load_private_key() == private_key

    def test_load_from_local_env(self, tmp_path: Path) -> None:
        private_key, _ = generate_eoa()
        (tmp_path / ".env").write_text(f"PRIVATE_KEY={private_key}\n", encoding="utf-8")
        assert load_private_key() == private_key

    def test_environment_wins_over_files(self, isolated_env: Path) -> None:
        file_key, _ = generate_eoa()
        env_key, _ = generate_eoa()
        save_private_key(file_key)
        os.environ["PRIVATE_KEY"] = env_key
        assert load_private_key() == env_key

    def test_missing_key(self) -> None:
        with pytest.raises(ValueError, match="PRIVATE_KEY is not set"):
            load_private_key()

    def test_load_env_ignores_missing_files(self, tmp_path: Path) -> None:
        load_env(tmp_path / "missing.env")
        assert "PRIVATE_KEY" not in os.environ


class TestAccount:
    def test_get_account(self) -> None:
        private_key, address = generate_eoa()
        assert get_account(private_key).address == address

    def test_get_account_from_env(self) -> None:
        private_key, address = generate_eoa()
        os.environ["PRIVATE_KEY"] = private_key
        assert get_account().address == address

    def test_home_dir_is_patched(self, isolated_env: Path) -> None:
        assert eth.BLOBCAST_ENV == isolated_env / ".env"
