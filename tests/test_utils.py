"""Unit tests for utils.py functions."""

from __future__ import annotations

import hashlib

import pytest

from blobcast.utils import bytes_to_hex, hex_to_bytes, sha256, short_hex, timed


class TestSha256:
    def test_empty(self) -> None:
        assert sha256(b"").hex() == "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"

    def test_matches_hashlib(self) -> None:
        assert sha256(b"hello") == hashlib.sha256(b"hello").digest()


class TestHex:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("0x", b""),
            ("0x00ff", b"\x00\xff"),
            ("00ff", b"\x00\xff"),
            ("0XABCD", b"\xab\xcd"),
            ("0xf", b"\x0f"),
        ],
    )
    def test_hex_to_bytes(self, value: str, expected: bytes) -> None:
        assert hex_to_bytes(value) == expected

    def test_bytes_to_hex(self) -> None:
        assert bytes_to_hex(b"\x01\x02") == "0x0102"
        assert bytes_to_hex(b"") == "0x"

    def test_invalid_hex(self) -> None:
        with pytest.raises(ValueError):
            hex_to_bytes("0xzz")


class TestShortHex:
    def test_short_values_unchanged(self) -> None:
        assert short_hex(b"\x01\x02\x03") == "0x010203"

    def test_long_values_abbreviated(self) -> None:
        value = bytes(range(48))
        text = short_hex(value, keep=4)
        assert text.startswith("0x0001")
        assert text.endswith("2e2f")
        assert "…" in text


class TestTimed:
    def test_records_duration(self) -> None:
        with timed("work") as timing:
            sum(range(1000))
        assert timing.label == "work"
        assert timing.seconds >= 0
        assert timing.millis == timing.seconds * 1000

    def test_records_on_error(self) -> None:
        with pytest.raises(RuntimeError):
            with timed("boom") as timing:
                raise RuntimeError("boom")
        assert timing.seconds >= 0
