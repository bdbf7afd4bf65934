"""
Reference AES implementation using PyCryptodome for cross-checking traces.
"""

from Crypto.Cipher import AES

from .aes import AESTrace
from .errors import LengthMismatch
from .utils import hex_to_bytes


def aes128_encrypt(key: bytes, plaintext: bytes) -> bytes:
    """
    Encrypt a single 16-byte block using AES-128 ECB.

    Args:
        key: 16-byte AES key
        plaintext: 16-byte plaintext block

    Returns:
        16-byte ciphertext
    """
    if len(key) != 16:
        raise LengthMismatch(len(key), 16, what="Key size")
    if len(plaintext) != 16:
        raise LengthMismatch(len(plaintext), 16, what="Block size")

    cipher = AES.new(key, AES.MODE_ECB)
    return cipher.encrypt(plaintext)


def verify_ciphertext(computed: bytes, key: bytes, plaintext: bytes) -> bool:
    """
    True if ``computed`` matches the PyCryptodome ciphertext.
    """
    return computed == aes128_encrypt(key, plaintext)


def verify_trace(trace: AESTrace, plaintext_hex: str, key_hex: str) -> tuple[bool, str]:
    """
    Check the final ciphertext of a trace against PyCryptodome.

    Returns:
        Tuple of (is_correct, expected_hex)
    """
    expected = aes128_encrypt(hex_to_bytes(key_hex), hex_to_bytes(plaintext_hex)).hex()
    return trace.ciphertext_hex == expected, expected
