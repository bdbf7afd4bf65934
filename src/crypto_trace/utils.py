"""
Utility functions for byte/state conversions and hex formatting.

AES state is 4x4 bytes in column-major order:
  state[row][col] where row, col in [0..3]

Column-major mapping from 16-byte array:
  byte[0]  -> state[0][0]
  byte[1]  -> state[1][0]
  byte[2]  -> state[2][0]
  byte[3]  -> state[3][0]
  byte[4]  -> state[0][1]
  ...
  byte[15] -> state[3][3]

Step records hold frozen copies (tuples of tuples); every function here
accepts either form.
"""

from __future__ import annotations

import re
from typing import Sequence

from .errors import FormatError, LengthMismatch

State = list[list[int]]
FrozenState = tuple[tuple[int, ...], ...]

_HEX_RE = re.compile(r"[0-9a-fA-F]*")


def bytes_to_matrix(data: bytes | Sequence[int]) -> State:
    """
    Convert 16 bytes to 4x4 AES state (column-major).

    Args:
        data: 16 bytes of input

    Returns:
        4x4 list of integers (0-255)

    Raises:
        LengthMismatch: if data is not 16 long
        FormatError: if a value is outside 0..255
    """
    if len(data) != 16:
        raise LengthMismatch(len(data), 16, what="Block size")

    state = [[0 for _ in range(4)] for _ in range(4)]
    for i, value in enumerate(data):
        if not 0 <= value <= 0xff:
            raise FormatError(f"Byte {i} out of range 0..255: {value}")
        state[i % 4][i // 4] = value
    return state


def matrix_to_bytes(state: Sequence[Sequence[int]]) -> bytes:
    """
    Convert 4x4 AES state to 16 bytes (column-major).

    Args:
        state: 4x4 matrix of integers

    Returns:
        16 bytes
    """
    _check_shape(state)
    result = []
    for col in range(4):
        for row in range(4):
            result.append(state[row][col])
    return bytes(result)


def hex_to_bytes(hex_str: str) -> bytes:
    """
    Convert hex string to bytes.

    Accepts upper or lower case. Odd length or any non-hex character
    (including whitespace) raises FormatError.
    """
    if len(hex_str) % 2 != 0:
        raise FormatError(f"Hex string must have even length, got {len(hex_str)} chars")
    if not _HEX_RE.fullmatch(hex_str):
        raise FormatError(f"Invalid hex string: {hex_str!r}")
    return bytes.fromhex(hex_str)


def bytes_to_hex(data: bytes | Sequence[int]) -> str:
    """
    Convert bytes to lowercase hex string.
    """
    return bytes(data).hex()


def state_to_hex(state: Sequence[Sequence[int]]) -> str:
    """
    Convert state to hex string (via bytes).
    """
    return bytes_to_hex(matrix_to_bytes(state))


def hex_to_state(hex_str: str) -> State:
    """
    Convert hex string to state.
    """
    return bytes_to_matrix(hex_to_bytes(hex_str))


def format_state_grid(
    state: Sequence[Sequence[int]],
    marked: Sequence[int] = (),
) -> str:
    """
    Format state as a readable 4x4 grid.

    Returns multi-line string like:
      2b 28 ab 09
      7e ae f7 cf
      15 d2 15 4f
      16 a6 88 3c

    Cells whose row-major index (row * 4 + col) is in ``marked`` get a
    trailing ``*``.
    """
    marked_set = set(marked)
    lines = []
    for row in range(4):
        cells = []
        for col in range(4):
            flag = "*" if row * 4 + col in marked_set else " "
            cells.append(f"{state[row][col]:02x}{flag}")
        lines.append("  " + " ".join(cells).rstrip())
    return "\n".join(lines)


def xor_bytes(a: bytes | Sequence[int], b: bytes | Sequence[int]) -> bytes:
    """
    XOR two byte sequences of equal length.
    """
    if len(a) != len(b):
        raise LengthMismatch(len(a), len(b))
    return bytes(x ^ y for x, y in zip(a, b))


def xor_states(a: Sequence[Sequence[int]], b: Sequence[Sequence[int]]) -> State:
    """
    XOR two 4x4 states element-wise.
    """
    _check_shape(a)
    _check_shape(b)
    result = [[0 for _ in range(4)] for _ in range(4)]
    for row in range(4):
        for col in range(4):
            result[row][col] = a[row][col] ^ b[row][col]
    return result


def copy_state(state: Sequence[Sequence[int]]) -> State:
    """
    Deep copy a 4x4 state.
    """
    return [[state[row][col] for col in range(4)] for row in range(4)]


def freeze_state(state: Sequence[Sequence[int]]) -> FrozenState:
    """
    Immutable copy of a 4x4 state, as stored in step records.
    """
    return tuple(tuple(state[row][col] for col in range(4)) for row in range(4))


def diff_indices(
    prev: Sequence[Sequence[int]],
    curr: Sequence[Sequence[int]],
) -> tuple[int, ...]:
    """
    Row-major indices (row * 4 + col) of cells that differ between states.
    """
    _check_shape(prev)
    _check_shape(curr)
    return tuple(
        row * 4 + col
        for row in range(4)
        for col in range(4)
        if prev[row][col] != curr[row][col]
    )


def _check_shape(state: Sequence[Sequence[int]]) -> None:
    if len(state) != 4:
        raise LengthMismatch(len(state), 4, what="State rows")
    for row in state:
        if len(row) != 4:
            raise LengthMismatch(len(row), 4, what="State columns")
