"""
Cipher Step Tracer

Step-by-step traces of three classical ciphers for teaching:
1. Caesar shift cipher
2. AES-128 single-block encryption (42 annotated steps)
3. Textbook RSA key generation, encryption and decryption

Every run is computed up front into an immutable sequence of step records
that a Stepper (and optionally an Animator) walks through.
"""

__version__ = "1.0.0"

# Default AES-128 test values from FIPS-197 Appendix B
DEFAULT_KEY_HEX = "2b7e151628aed2a6abf7158809cf4f3c"
DEFAULT_PT_HEX = "3243f6a8885a308d313198a2e0370734"
DEFAULT_CT_HEX = "3925841d02dc09fbdc118597196a0b32"

# Milliseconds between auto-advanced steps
DEFAULT_SPEED_MS = 800

from .errors import (  # noqa: E402
    CryptoTraceError,
    FormatError,
    LengthMismatch,
    NoInverseError,
    InvalidInput,
    RSAParameterError,
    InvalidPrime,
    EqualPrimesError,
    InvalidExponent,
    NotCoprimeError,
    OutOfRangeError,
)
from .steps import AESStep, RSAStep, CaesarStep, CharResult  # noqa: E402
from .caesar import caesar_encrypt, caesar_decrypt, build_caesar_steps  # noqa: E402
from .aes import AESTrace, build_aes_trace, build_aes_steps  # noqa: E402
from .rsa import RSAKeys, generate_keys, rsa_encrypt, rsa_decrypt, build_rsa_steps  # noqa: E402
from .stepper import Stepper  # noqa: E402
from .animator import Animator, ManualScheduler, ThreadingScheduler  # noqa: E402

__all__ = [
    "DEFAULT_KEY_HEX",
    "DEFAULT_PT_HEX",
    "DEFAULT_CT_HEX",
    "DEFAULT_SPEED_MS",
    "CryptoTraceError",
    "FormatError",
    "LengthMismatch",
    "NoInverseError",
    "InvalidInput",
    "RSAParameterError",
    "InvalidPrime",
    "EqualPrimesError",
    "InvalidExponent",
    "NotCoprimeError",
    "OutOfRangeError",
    "AESStep",
    "RSAStep",
    "CaesarStep",
    "CharResult",
    "caesar_encrypt",
    "caesar_decrypt",
    "build_caesar_steps",
    "AESTrace",
    "build_aes_trace",
    "build_aes_steps",
    "RSAKeys",
    "generate_keys",
    "rsa_encrypt",
    "rsa_decrypt",
    "build_rsa_steps",
    "Stepper",
    "Animator",
    "ManualScheduler",
    "ThreadingScheduler",
]
