"""Tests for roots of unity and bit-reversal ordering."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from blobcast.blobs import BLS_MODULUS, FIELD_ELEMENTS_PER_BLOB
from blobcast.kzg.roots import (
    bit_reversal_permutation,
    compute_roots_of_unity,
    dump_roots_of_unity,
    load_roots_of_unity,
    reverse_bits,
    roots_of_unity_brp,
    scalar_to_bytes,
)


class TestBitReversal:
    @pytest.mark.parametrize("n,order,expected", [(0, 8, 0), (1, 8, 4), (3, 8, 6), (6, 8, 3), (1, 4096, 2048)])
    def test_reverse_bits(self, n: int, order: int, expected: int) -> None:
        assert reverse_bits(n, order) == expected

    def test_order_one(self) -> None:
        assert reverse_bits(0, 1) == 0

    def test_order_must_be_power_of_two(self) -> None:
        with pytest.raises(ValueError):
            reverse_bits(1, 6)

    def test_permutation(self) -> None:
        assert bit_reversal_permutation([0, 1, 2, 3, 4, 5, 6, 7]) == [0, 4, 2, 6, 1, 5, 3, 7]

    def test_permutation_is_involution(self) -> None:
        values = list(range(16))
        assert bit_reversal_permutation(bit_reversal_permutation(values)) == values


class TestRootsOfUnity:
    def test_blob_domain(self) -> None:
        roots = compute_roots_of_unity()
        assert len(roots) == FIELD_ELEMENTS_PER_BLOB
        assert roots[0] == 1
        assert pow(roots[1], FIELD_ELEMENTS_PER_BLOB, BLS_MODULUS) == 1
        assert pow(roots[1], FIELD_ELEMENTS_PER_BLOB // 2, BLS_MODULUS) == BLS_MODULUS - 1
        assert len(set(roots)) == FIELD_ELEMENTS_PER_BLOB

    def test_small_domain(self) -> None:
        roots = compute_roots_of_unity(4)
        assert roots[2] == BLS_MODULUS - 1
        assert roots[1] * roots[3] % BLS_MODULUS == 1

    def test_brp_order(self) -> None:
        natural = compute_roots_of_unity()
        brp = roots_of_unity_brp()
        assert brp[0] == 1
        assert brp[1] == natural[2048] == BLS_MODULUS - 1
        assert brp[2] == natural[1024]

    def test_no_subgroup(self) -> None:
        with pytest.raises(ValueError):
            compute_roots_of_unity(5)


class TestRootTable:
    def test_dump_and_load(self, tmp_path: Path) -> None:
        roots = compute_roots_of_unity(16)
        path = tmp_path / "roots.json"
        dump_roots_of_unity(path, roots)
        assert json.loads(path.read_text(encoding="utf-8"))[1] == hex(roots[1])
        assert load_roots_of_unity(path) == roots

    def test_object_with_decimal_strings(self, tmp_path: Path) -> None:
        roots = compute_roots_of_unity(8)
        path = tmp_path / "roots.json"
        path.write_text(json.dumps({"roots": [str(r) for r in roots]}), encoding="utf-8")
        assert load_roots_of_unity(path) == roots

    def test_rejects_wrong_start(self, tmp_path: Path) -> None:
        roots = compute_roots_of_unity(8)
        path = tmp_path / "roots.json"
        path.write_text(json.dumps(roots[1:] + roots[:1]), encoding="utf-8")
        with pytest.raises(ValueError, match="start with 1"):
            load_roots_of_unity(path)

    def test_rejects_non_powers(self, tmp_path: Path) -> None:
        roots = compute_roots_of_unity(8)
        roots[5] = 12345
        path = tmp_path / "roots.json"
        path.write_text(json.dumps(roots), encoding="utf-8")
        with pytest.raises(ValueError, match="entry 5"):
            load_roots_of_unity(path)

    def test_rejects_non_primitive(self, tmp_path: Path) -> None:
        # powers of a 4th root listed as an 8 entry table wrap around early
        root = compute_roots_of_unity(4)[1]
        table = [pow(root, i, BLS_MODULUS) for i in range(8)]
        path = tmp_path / "roots.json"
        path.write_text(json.dumps(table), encoding="utf-8")
        with pytest.raises(ValueError, match="primitive"):
            load_roots_of_unity(path)

    def test_rejects_other_primitive_root(self, tmp_path: Path) -> None:
        # w^3 also generates the subgroup, but in a different order
        root = pow(compute_roots_of_unity(8)[1], 3, BLS_MODULUS)
        table = [pow(root, i, BLS_MODULUS) for i in range(8)]
        path = tmp_path / "roots.json"
        path.write_text(json.dumps(table), encoding="utf-8")
        with pytest.raises(ValueError, match="domain generator"):
            load_roots_of_unity(path)

    def test_rejects_bad_length(self, tmp_path: Path) -> None:
        path = tmp_path / "roots.json"
        path.write_text(json.dumps([1, 2, 3]), encoding="utf-8")
        with pytest.raises(ValueError, match="power of two"):
            load_roots_of_unity(path)

    def test_rejects_out_of_range(self, tmp_path: Path) -> None:
        path = tmp_path / "roots.json"
        path.write_text(json.dumps([1, hex(BLS_MODULUS)]), encoding="utf-8")
        with pytest.raises(ValueError, match="out of range"):
            load_roots_of_unity(path)

    def test_rejects_non_list(self, tmp_path: Path) -> None:
        path = tmp_path / "roots.json"
        path.write_text(json.dumps({"values": []}), encoding="utf-8")
        with pytest.raises(ValueError, match="JSON list"):
            load_roots_of_unity(path)


class TestScalarToBytes:
    def test_encoding(self) -> None:
        assert scalar_to_bytes(1) == b"\x00" * 31 + b"\x01"
        assert scalar_to_bytes(BLS_MODULUS) == b"\x00" * 32
