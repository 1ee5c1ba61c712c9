from __future__ import annotations

import hashlib
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator


def sha256(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


def hex_to_bytes(value: str) -> bytes:
    if value.startswith(("0x", "0X")):
        value = value[2:]
    if len(value) % 2:
        value = "0" + value
    return bytes.fromhex(value)


def bytes_to_hex(data: bytes) -> str:
    return "0x" + bytes(data).hex()


def short_hex(data: bytes, keep: int = 8) -> str:
    """Abbreviate a long byte string for console output."""
    hexed = bytes(data).hex()
    if len(hexed) <= keep * 2:
        return "0x" + hexed
    return f"0x{hexed[:keep]}…{hexed[-keep:]}"


@dataclass
class Timing:
    label: str
    seconds: float = 0.0

    @property
    def millis(self) -> float:
        return self.seconds * 1000


@contextmanager
def timed(label: str) -> Iterator[Timing]:
    timing = Timing(label)
    start = time.perf_counter()
    try:
        yield timing
    finally:
        timing.seconds = time.perf_counter() - start
