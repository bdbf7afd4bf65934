"""
AES-128 step builder.

Produces the 42-step trace of one block encryption:
- Step 0:      initial state (plaintext loaded into the 4x4 matrix)
- Step 1:      AddRoundKey with round key 0
- Steps 2-37:  rounds 1-9 (SubBytes, ShiftRows, MixColumns, AddRoundKey)
- Steps 38-40: round 10 (SubBytes, ShiftRows, AddRoundKey, no MixColumns)
- Step 41:     completion, carrying the ciphertext hex
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from .aes_core import (
    NR,
    key_expansion,
    sub_bytes,
    shift_rows,
    mix_columns,
    add_round_key,
)
from .errors import FormatError
from .steps import AESStep, frozen_mapping
from .utils import (
    FrozenState,
    bytes_to_matrix,
    copy_state,
    diff_indices,
    freeze_state,
    hex_to_bytes,
    state_to_hex,
)

AES_STEP_COUNT = 42

_BLOCK_HEX_RE = re.compile(r"[0-9a-fA-F]{32}")

# Round schedule (round, operations)
ROUND_SCHEDULE = [(0, ["addRoundKey"])] + [
    (r, ["subBytes", "shiftRows", "mixColumns", "addRoundKey"]) for r in range(1, NR)
] + [
    (NR, ["subBytes", "shiftRows", "addRoundKey"]),  # Final round: no MixColumns
]

_TRANSFORMS = {
    "subBytes": sub_bytes,
    "shiftRows": shift_rows,
    "mixColumns": mix_columns,
}

_OP_NAMES = {
    "subBytes": "SubBytes",
    "shiftRows": "ShiftRows",
    "mixColumns": "MixColumns",
    "addRoundKey": "AddRoundKey",
}


@dataclass(frozen=True)
class AESTrace:
    """Steps of one AES run plus the round keys used by it."""

    steps: tuple[AESStep, ...]
    round_keys: tuple[FrozenState, ...]
    ciphertext_hex: str


def validate_block_hex(value: str, name: str) -> str:
    """Require exactly 32 hex characters; returns the lowercase form."""
    if not _BLOCK_HEX_RE.fullmatch(value):
        raise FormatError(
            f"{name} must be 32 hex characters (16 bytes), got {len(value)} chars"
        )
    return value.lower()


def _describe(round_num: int, op: str) -> tuple[str, str, str]:
    """Label, description and formula for one transform."""
    final = round_num == NR
    prefix = "Final round: " if final else ""
    if round_num == 0:
        return (
            "Initial AddRoundKey",
            "XOR the plaintext state with round key 0.",
            "state = state XOR K0",
        )
    label = f"Round {round_num} - {_OP_NAMES[op]}"
    if op == "subBytes":
        desc = "replace every byte with its S-box entry."
        formula = "s[r][c] = SBOX[s[r][c]]"
    elif op == "shiftRows":
        desc = "rotate row r left by r positions (row 0: 0, row 1: 1, row 2: 2, row 3: 3)."
        formula = "s[r][c] = s[r][(c + r) mod 4]"
    elif op == "mixColumns":
        desc = "multiply each column by a fixed matrix over GF(2^8)."
        formula = "s[:, c] = M x s[:, c]  (GF(2^8), poly 0x11b)"
    else:
        desc = f"XOR the state with round key {round_num}."
        formula = f"state = state XOR K{round_num}"
    if final:
        return label, prefix + desc, formula
    return label, desc[0].upper() + desc[1:], formula


def build_aes_trace(plaintext_hex: str, key_hex: str) -> AESTrace:
    """
    Build the full AES-128 encryption trace.

    Args:
        plaintext_hex: 32 hex characters
        key_hex: 32 hex characters

    Returns:
        AESTrace with 42 steps, the 11 round keys and the ciphertext

    Raises:
        FormatError: if either input is not exactly 32 hex characters
    """
    validate_block_hex(plaintext_hex, "Plaintext")
    validate_block_hex(key_hex, "Key")

    plaintext = hex_to_bytes(plaintext_hex)
    key = hex_to_bytes(key_hex)
    round_keys = key_expansion(key)
    frozen_keys = tuple(freeze_state(rk) for rk in round_keys)

    state = bytes_to_matrix(plaintext)
    steps: list[AESStep] = [AESStep(
        id="aes-initial",
        round=0,
        operation="initial",
        label="Initial state",
        description="Load the 16 plaintext bytes column by column into the 4x4 state.",
        formula=f"state = {plaintext_hex.lower()}",
        state=freeze_state(state),
    )]

    for round_num, operations in ROUND_SCHEDULE:
        for op in operations:
            prev_state = copy_state(state)
            round_key = None
            detail = {"type": op}
            if op == "addRoundKey":
                state = add_round_key(state, round_keys[round_num])
                round_key = frozen_keys[round_num]
                detail["roundKeyIndex"] = round_num
            else:
                state = _TRANSFORMS[op](state)

            label, description, formula = _describe(round_num, op)
            steps.append(AESStep(
                id=f"aes-round{round_num}-{op}",
                round=round_num,
                operation=op,
                label=label,
                description=description,
                formula=formula,
                state=freeze_state(state),
                prev_state=freeze_state(prev_state),
                round_key=round_key,
                changed_indices=diff_indices(prev_state, state),
                detail=frozen_mapping(detail),
            ))

    cipher_hex = state_to_hex(state)
    steps.append(AESStep(
        id="aes-complete",
        round=NR,
        operation="complete",
        label="Encryption complete",
        description=f"Ciphertext: {cipher_hex}",
        formula=f"ciphertext = {cipher_hex}",
        state=freeze_state(state),
        detail=frozen_mapping({"type": "complete", "cipherHex": cipher_hex}),
    ))

    return AESTrace(
        steps=tuple(steps),
        round_keys=frozen_keys,
        ciphertext_hex=cipher_hex,
    )


def build_aes_steps(plaintext_hex: str, key_hex: str) -> tuple[AESStep, ...]:
    """Steps only; see build_aes_trace."""
    return build_aes_trace(plaintext_hex, key_hex).steps
