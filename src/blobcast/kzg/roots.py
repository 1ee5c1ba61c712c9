"""
Roots of unity over the BLS12-381 scalar field.

Blob field element ``i`` is the evaluation of the blob polynomial at the
``i``-th root of unity in bit-reversed order, so evaluating at that point
must return the stored element.
"""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Sequence, TypeVar

from ..blobs import BLS_MODULUS, BYTES_PER_FIELD_ELEMENT, FIELD_ELEMENTS_PER_BLOB

PRIMITIVE_ROOT_OF_UNITY = 7

T = TypeVar("T")


def _is_power_of_two(value: int) -> bool:
    return value > 0 and value & (value - 1) == 0


def reverse_bits(n: int, order: int) -> int:
    """Reverse the low log2(order) bits of ``n``."""
    if not _is_power_of_two(order):
        raise ValueError(f"Order must be a power of two, got {order}")
    width = order.bit_length() - 1
    return int(format(n, f"0{width}b")[::-1], 2) if width else 0


def bit_reversal_permutation(sequence: Sequence[T]) -> list[T]:
    return [sequence[reverse_bits(i, len(sequence))] for i in range(len(sequence))]


def compute_roots_of_unity(order: int = FIELD_ELEMENTS_PER_BLOB) -> list[int]:
    """The ``order`` roots of unity in natural order: w^0, w^1, ..."""
    if (BLS_MODULUS - 1) % order:
        raise ValueError(f"No subgroup of order {order} in the scalar field")
    root = pow(PRIMITIVE_ROOT_OF_UNITY, (BLS_MODULUS - 1) // order, BLS_MODULUS)
    roots = [1]
    for _ in range(order - 1):
        roots.append(roots[-1] * root % BLS_MODULUS)
    return roots


@lru_cache(maxsize=4)
def roots_of_unity_brp(order: int = FIELD_ELEMENTS_PER_BLOB) -> tuple[int, ...]:
    return tuple(bit_reversal_permutation(compute_roots_of_unity(order)))


def load_roots_of_unity(path: Path) -> list[int]:
    """
    Load a root-of-unity table (natural order) from JSON.

    Accepts a JSON list of integers, decimal strings or 0x-hex strings, or
    an object with a ``roots`` list.  The table is checked to be the powers
    of its second entry, and that entry to be the primitive root of the
    table's order derived from PRIMITIVE_ROOT_OF_UNITY.

    Raises:
        ValueError: If the table is malformed
    """
    with Path(path).open("r", encoding="utf-8") as f:
        payload = json.load(f)

    if isinstance(payload, dict):
        payload = payload.get("roots")
    if not isinstance(payload, list):
        raise ValueError(f"Root table in {path} must be a JSON list")

    roots = [_parse_scalar(item) for item in payload]
    order = len(roots)
    if not _is_power_of_two(order) or order < 2:
        raise ValueError(f"Root table length must be a power of two, got {order}")
    if roots[0] != 1:
        raise ValueError("Root table must start with 1")

    generator = roots[1]
    for i in range(1, order):
        if roots[i] != roots[i - 1] * generator % BLS_MODULUS:
            raise ValueError(f"Root table entry {i} is not the next power of the generator")
    if pow(generator, order, BLS_MODULUS) != 1 or pow(generator, order // 2, BLS_MODULUS) == 1:
        raise ValueError(f"Root table generator is not a primitive {order}-th root of unity")
    if generator != pow(PRIMITIVE_ROOT_OF_UNITY, (BLS_MODULUS - 1) // order, BLS_MODULUS):
        raise ValueError(
            f"Root table generator is not 7^((r - 1) / {order}), the blob domain generator"
        )
    return roots


def dump_roots_of_unity(path: Path, roots: Sequence[int]) -> None:
    """Write a natural-order table as 0x-hex strings."""
    Path(path).write_text(
        json.dumps([hex(r) for r in roots], indent=2) + "\n",
        encoding="utf-8",
    )


def _parse_scalar(item: object) -> int:
    if isinstance(item, bool):
        raise ValueError(f"Not a field element: {item!r}")
    if isinstance(item, int):
        value = item
    elif isinstance(item, str):
        value = int(item, 16) if item.lower().startswith("0x") else int(item)
    else:
        raise ValueError(f"Not a field element: {item!r}")
    if not 0 <= value < BLS_MODULUS:
        raise ValueError(f"Field element out of range: {item!r}")
    return value


def scalar_to_bytes(value: int) -> bytes:
    """32-byte big-endian encoding of a field element."""
    return (value % BLS_MODULUS).to_bytes(BYTES_PER_FIELD_ELEMENT, "big")
