"""Step records produced by the trace builders.

One frozen dataclass per algorithm. A trace is a tuple of these, built
once and never mutated afterwards. ``to_dict()`` gives the JSON form used
by the JSON Lines trace output, keyed with the field names front ends
expect (``prevState``, ``changedIndices``, ``charResults`` ...).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Union

from .utils import FrozenState

AES_OPERATIONS = (
    "initial",
    "subBytes",
    "shiftRows",
    "mixColumns",
    "addRoundKey",
    "complete",
)

RSA_PHASES = ("keygen", "encrypt", "decrypt")

RSA_OPERATIONS = (
    "choosePrimes",
    "computeN",
    "computePhi",
    "chooseE",
    "computeD",
    "showKeys",
    "inputMessage",
    "computePower",
    "showCipher",
    "inputCipher",
    "computeDecrypt",
    "showPlain",
)

CAESAR_PHASES = ("overview", "encrypt", "result", "decrypt")

CHAR_STATUSES = ("pending", "active", "done")


def frozen_mapping(values: Mapping[str, Any] | None = None) -> Mapping[str, Any]:
    """Read-only copy of ``values`` for storage inside a step."""
    return MappingProxyType(dict(values or {}))


def _matrix_or_none(state: FrozenState | None) -> list[list[int]] | None:
    if state is None:
        return None
    return [list(row) for row in state]


@dataclass(frozen=True)
class AESStep:
    """One AES transform applied to the 4x4 state."""

    id: str
    round: int
    operation: str
    label: str
    description: str
    state: FrozenState
    prev_state: FrozenState | None = None
    round_key: FrozenState | None = None
    changed_indices: tuple[int, ...] = ()
    detail: Mapping[str, Any] = field(default_factory=frozen_mapping)
    formula: str = ""
    algorithm: str = field(default="aes", init=False)

    def __post_init__(self) -> None:
        if self.operation not in AES_OPERATIONS:
            raise ValueError(f"Unknown AES operation: {self.operation}")
        if not 0 <= self.round <= 10:
            raise ValueError(f"AES round must be 0..10, got {self.round}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "algorithm": self.algorithm,
            "id": self.id,
            "round": self.round,
            "operation": self.operation,
            "label": self.label,
            "description": self.description,
            "formula": self.formula,
            "state": _matrix_or_none(self.state),
            "prevState": _matrix_or_none(self.prev_state),
            "roundKey": _matrix_or_none(self.round_key),
            "changedIndices": list(self.changed_indices),
            "detail": dict(self.detail) if self.detail else None,
        }


@dataclass(frozen=True)
class RSAStep:
    """One arithmetic step of RSA key generation, encryption or decryption."""

    id: str
    phase: str
    operation: str
    label: str
    description: str
    formula: str
    values: Mapping[str, Any] = field(default_factory=frozen_mapping)
    algorithm: str = field(default="rsa", init=False)

    def __post_init__(self) -> None:
        if self.phase not in RSA_PHASES:
            raise ValueError(f"Unknown RSA phase: {self.phase}")
        if self.operation not in RSA_OPERATIONS:
            raise ValueError(f"Unknown RSA operation: {self.operation}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "algorithm": self.algorithm,
            "id": self.id,
            "phase": self.phase,
            "operation": self.operation,
            "label": self.label,
            "description": self.description,
            "formula": self.formula,
            "values": dict(self.values),
        }


@dataclass(frozen=True)
class CharResult:
    """Shift outcome for a single character, with its trace status."""

    original: str
    shifted: str
    is_alpha: bool
    pos: int = 0
    new_pos: int = 0
    status: str = "pending"

    def with_status(self, status: str) -> CharResult:
        if status not in CHAR_STATUSES:
            raise ValueError(f"Unknown character status: {status}")
        return CharResult(
            original=self.original,
            shifted=self.shifted,
            is_alpha=self.is_alpha,
            pos=self.pos,
            new_pos=self.new_pos,
            status=status,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "original": self.original,
            "shifted": self.shifted,
            "isAlpha": self.is_alpha,
            "pos": self.pos,
            "newPos": self.new_pos,
            "status": self.status,
        }


@dataclass(frozen=True)
class CaesarStep:
    """Caesar trace step: overview, one character, result or verification."""

    id: str
    phase: str
    label: str
    description: str
    formula: str
    plaintext: str
    shift: int
    char_results: tuple[CharResult, ...]
    ciphertext_so_far: str
    current_char_index: int | None = None
    values: Mapping[str, Any] = field(default_factory=frozen_mapping)
    algorithm: str = field(default="caesar", init=False)

    def __post_init__(self) -> None:
        if self.phase not in CAESAR_PHASES:
            raise ValueError(f"Unknown Caesar phase: {self.phase}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "algorithm": self.algorithm,
            "id": self.id,
            "phase": self.phase,
            "label": self.label,
            "description": self.description,
            "formula": self.formula,
            "plaintext": self.plaintext,
            "shift": self.shift,
            "currentCharIndex": self.current_char_index,
            "charResults": [cr.to_dict() for cr in self.char_results],
            "ciphertextSoFar": self.ciphertext_so_far,
            "values": dict(self.values),
        }


Step = Union[AESStep, RSAStep, CaesarStep]
