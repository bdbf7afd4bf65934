"""Named example inputs and helpers for building AES input blocks."""

from __future__ import annotations

import secrets

from . import DEFAULT_KEY_HEX, DEFAULT_PT_HEX
from .errors import FormatError

AES_BLOCK_BYTES = 16

AES_PRESETS: dict[str, dict[str, str]] = {
    "hello": {
        "text": "Hello, World!!!",
        "key": "0123456789abcdef0123456789abcdef",
    },
    # FIPS-197 Appendix B
    "nist": {
        "plaintext": DEFAULT_PT_HEX,
        "key": DEFAULT_KEY_HEX,
    },
}

RSA_PRESETS: dict[str, dict[str, int]] = {
    "textbook": {"p": 61, "q": 53, "e": 17, "message": 65},
    "small": {"p": 11, "q": 13, "e": 7, "message": 9},
}

CAESAR_PRESETS: dict[str, dict[str, object]] = {
    "hello": {"text": "Hello, World!", "shift": 3},
    "rot13": {"text": "Why did the chicken cross the road?", "shift": 13},
}


def text_to_hex(text: str) -> str:
    """
    Encode the first 16 characters of ``text`` as a 32-char hex block.

    Characters are taken as Latin-1 bytes and the block is zero padded.

    Raises:
        FormatError: a character above U+00FF within the first 16
    """
    head = text[:AES_BLOCK_BYTES]
    try:
        data = head.encode("latin-1")
    except UnicodeEncodeError as e:
        raise FormatError(f"Character {head[e.start]!r} cannot be stored in one byte") from e
    return data.hex().ljust(AES_BLOCK_BYTES * 2, "0")


def random_hex() -> str:
    """16 random bytes as 32 hex characters."""
    return secrets.token_bytes(AES_BLOCK_BYTES).hex()


def aes_preset(name: str) -> tuple[str, str]:
    """
    Resolve an AES preset to (plaintext_hex, key_hex).

    Raises:
        KeyError: if the preset does not exist
    """
    if name not in AES_PRESETS:
        available = ", ".join(AES_PRESETS.keys())
        raise KeyError(f"Unknown AES preset '{name}'. Available: {available}")
    preset = AES_PRESETS[name]
    if "text" in preset:
        return text_to_hex(preset["text"]), preset["key"]
    return preset["plaintext"], preset["key"]


def list_presets() -> list[dict[str, str]]:
    """All presets with a short description, for the CLI listing."""
    result = []
    for name, preset in CAESAR_PRESETS.items():
        result.append({
            "algorithm": "caesar",
            "name": name,
            "description": f"text={preset['text']!r} shift={preset['shift']}",
        })
    for name, preset in AES_PRESETS.items():
        pt = preset.get("text") or preset["plaintext"]
        result.append({
            "algorithm": "aes",
            "name": name,
            "description": f"plaintext={pt!r} key={preset['key']}",
        })
    for name, preset in RSA_PRESETS.items():
        result.append({
            "algorithm": "rsa",
            "name": name,
            "description": " ".join(f"{k}={v}" for k, v in preset.items()),
        })
    return result
