"""Tests for byte/state conversions and number-theory helpers."""

import secrets

import pytest

from crypto_trace.arith import (
    extended_gcd,
    gcd,
    gf256_multiply,
    is_prime,
    mod_inverse,
    mod_pow,
    xtime,
)
from crypto_trace.errors import FormatError, LengthMismatch, NoInverseError
from crypto_trace.utils import (
    bytes_to_hex,
    bytes_to_matrix,
    diff_indices,
    format_state_grid,
    freeze_state,
    hex_to_bytes,
    hex_to_state,
    matrix_to_bytes,
    state_to_hex,
    xor_bytes,
    xor_states,
)


class TestHexConversion:
    """Tests for hex_to_bytes / bytes_to_hex."""

    def test_round_trip(self) -> None:
        data = bytes(range(256))
        assert hex_to_bytes(bytes_to_hex(data)) == data

    def test_case_insensitive(self) -> None:
        assert hex_to_bytes("DEADbeef") == bytes([0xde, 0xad, 0xbe, 0xef])

    def test_output_is_lowercase(self) -> None:
        assert bytes_to_hex(bytes([0xAB, 0xCD])) == "abcd"

    def test_empty(self) -> None:
        assert hex_to_bytes("") == b""

    def test_odd_length_rejected(self) -> None:
        with pytest.raises(FormatError, match="even length"):
            hex_to_bytes("abc")

    @pytest.mark.parametrize("bad", ["zz", "0g", "ab cd", "12-4"])
    def test_non_hex_rejected(self, bad: str) -> None:
        with pytest.raises(FormatError):
            hex_to_bytes(bad)

    def test_format_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            hex_to_bytes("xyz0")


class TestStateConversion:
    """Tests for the column-major 4x4 mapping."""

    def test_column_major_fill(self) -> None:
        state = bytes_to_matrix(bytes(range(16)))
        assert state[0] == [0, 4, 8, 12]
        assert state[1] == [1, 5, 9, 13]
        assert state[3][3] == 15

    def test_fips197_layout(self) -> None:
        state = hex_to_state("3243f6a8885a308d313198a2e0370734")
        assert state[0] == [0x32, 0x88, 0x31, 0xe0]
        assert state[3] == [0xa8, 0x8d, 0xa2, 0x34]

    def test_round_trip_random(self) -> None:
        for _ in range(50):
            data = secrets.token_bytes(16)
            assert matrix_to_bytes(bytes_to_matrix(data)) == data

    def test_round_trip_from_matrix(self) -> None:
        state = [[r * 4 + c for c in range(4)] for r in range(4)]
        assert bytes_to_matrix(matrix_to_bytes(state)) == state

    def test_frozen_state_accepted(self) -> None:
        data = bytes(range(16, 32))
        assert matrix_to_bytes(freeze_state(bytes_to_matrix(data))) == data

    def test_wrong_length_rejected(self) -> None:
        with pytest.raises(LengthMismatch):
            bytes_to_matrix(bytes(15))

    @pytest.mark.parametrize("bad", [256, -1, 0x1ff])
    def test_out_of_range_value_rejected(self, bad: int) -> None:
        data = list(range(16))
        data[7] = bad
        with pytest.raises(FormatError, match="Byte 7"):
            bytes_to_matrix(data)

    def test_int_list_accepted(self) -> None:
        assert bytes_to_matrix([255] * 16)[3][3] == 255

    def test_wrong_shape_rejected(self) -> None:
        with pytest.raises(LengthMismatch):
            matrix_to_bytes([[0, 0, 0, 0]] * 3)

    def test_state_to_hex(self) -> None:
        hex_str = "00112233445566778899aabbccddeeff"
        assert state_to_hex(hex_to_state(hex_str)) == hex_str

    def test_format_state_grid_marks_cells(self) -> None:
        grid = format_state_grid(bytes_to_matrix(bytes(16)), marked=[0, 15])
        lines = grid.splitlines()
        assert len(lines) == 4
        assert lines[0].strip().startswith("00*")
        assert lines[3].endswith("00*")


class TestXor:
    """Tests for xor_bytes / xor_states."""

    def test_xor_bytes(self) -> None:
        assert xor_bytes(b"\x0f\xf0", b"\xff\xff") == b"\xf0\x0f"

    def test_xor_self_is_zero(self) -> None:
        data = secrets.token_bytes(16)
        assert xor_bytes(data, data) == bytes(16)

    def test_length_mismatch(self) -> None:
        with pytest.raises(LengthMismatch, match="3 vs 2"):
            xor_bytes(b"abc", b"ab")

    def test_xor_states(self) -> None:
        a = bytes_to_matrix(bytes(range(16)))
        b = bytes_to_matrix(bytes([0xff] * 16))
        assert matrix_to_bytes(xor_states(a, b)) == bytes(0xff ^ i for i in range(16))

    def test_diff_indices_row_major(self) -> None:
        a = bytes_to_matrix(bytes(16))
        b = [row[:] for row in a]
        b[1][2] = 7
        b[3][0] = 1
        assert diff_indices(a, b) == (6, 12)


class TestGF256:
    """Tests for GF(2^8) multiplication."""

    def test_fips197_example(self) -> None:
        # FIPS-197 section 4.2: {57} * {83} = {c1}
        assert gf256_multiply(0x57, 0x83) == 0xc1
        assert gf256_multiply(0x57, 0x13) == 0xfe

    def test_xtime(self) -> None:
        assert xtime(0x57) == 0xae
        assert xtime(0xae) == 0x47

    def test_identity_and_zero(self) -> None:
        for a in range(256):
            assert gf256_multiply(a, 1) == a
            assert gf256_multiply(a, 0) == 0

    def test_commutative(self) -> None:
        for a in range(0, 256, 7):
            for b in range(0, 256, 11):
                assert gf256_multiply(a, b) == gf256_multiply(b, a)

    def test_result_is_byte(self) -> None:
        for a in range(256):
            assert 0 <= gf256_multiply(a, 0xff) <= 0xff


class TestNumberTheory:
    """Tests for mod_pow, gcd and mod_inverse."""

    def test_mod_pow_matches_builtin(self) -> None:
        for base, exp, mod in [(65, 17, 3233), (2790, 2753, 3233), (2, 100, 97), (0, 5, 7)]:
            assert mod_pow(base, exp, mod) == pow(base, exp, mod)

    def test_mod_pow_large_operands(self) -> None:
        p = 2 ** 127 - 1
        assert mod_pow(3, p - 1, p) == 1

    def test_mod_pow_zero_exponent(self) -> None:
        assert mod_pow(12, 0, 7) == 1

    def test_mod_pow_modulus_one(self) -> None:
        assert mod_pow(12, 3, 1) == 0

    def test_mod_pow_invalid(self) -> None:
        with pytest.raises(ValueError):
            mod_pow(2, -1, 7)
        with pytest.raises(ValueError):
            mod_pow(2, 3, 0)

    def test_gcd(self) -> None:
        assert gcd(17, 3120) == 1
        assert gcd(12, 18) == 6
        assert gcd(-12, 18) == 6
        assert gcd(0, 5) == 5

    def test_extended_gcd_identity(self) -> None:
        g, x, y = extended_gcd(240, 46)
        assert g == 2
        assert 240 * x + 46 * y == g

    def test_mod_inverse_textbook(self) -> None:
        assert mod_inverse(17, 3120) == 2753

    def test_mod_inverse_normalized(self) -> None:
        for a in range(1, 50):
            if gcd(a, 97) == 1:
                inv = mod_inverse(a, 97)
                assert 0 <= inv < 97
                assert (a * inv) % 97 == 1

    def test_mod_inverse_missing(self) -> None:
        with pytest.raises(NoInverseError) as exc:
            mod_inverse(4, 8)
        assert exc.value.a == 4
        assert exc.value.m == 8

    @pytest.mark.parametrize("n", [2, 3, 5, 7, 11, 13, 53, 61, 7919])
    def test_is_prime_primes(self, n: int) -> None:
        assert is_prime(n)

    @pytest.mark.parametrize("n", [-7, 0, 1, 4, 9, 25, 49, 3233, 7917])
    def test_is_prime_composites(self, n: int) -> None:
        assert not is_prime(n)
