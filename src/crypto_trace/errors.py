"""Exception types raised by the trace engines.

Every error derives from ValueError so callers that only check for bad
input (the CLI, tests written against ValueError) keep working.
"""

from __future__ import annotations


class CryptoTraceError(ValueError):
    """Base class for all engine errors."""


class FormatError(CryptoTraceError):
    """Malformed hex or text input."""


class LengthMismatch(CryptoTraceError):
    """Operands of an element-wise operation have different sizes."""

    def __init__(self, left: int, right: int, what: str = "Length"):
        self.left = left
        self.right = right
        super().__init__(f"{what} mismatch: {left} vs {right}")


class NoInverseError(CryptoTraceError):
    """Modular inverse requested for a value not coprime to the modulus."""

    def __init__(self, a: int, m: int):
        self.a = a
        self.m = m
        super().__init__(f"{a} has no inverse modulo {m}")


class InvalidInput(CryptoTraceError):
    """Caesar input that cannot produce a meaningful trace."""


# ------------------------------------------------------------------
# RSA parameter validation
# ------------------------------------------------------------------

class RSAParameterError(CryptoTraceError):
    """Base class for RSA key-generation and range failures."""


class InvalidPrime(RSAParameterError):
    def __init__(self, name: str, value: int):
        self.name = name
        self.value = value
        super().__init__(f"{name} = {value} is not prime")


class EqualPrimesError(RSAParameterError):
    def __init__(self, value: int):
        self.value = value
        super().__init__(f"p and q must be different primes (both are {value})")


class InvalidExponent(RSAParameterError):
    def __init__(self, e: int, phi: int):
        self.e = e
        self.phi = phi
        super().__init__(f"e = {e} must satisfy 2 <= e < phi(n) = {phi}")


class NotCoprimeError(RSAParameterError):
    def __init__(self, e: int, phi: int, divisor: int):
        self.e = e
        self.phi = phi
        self.divisor = divisor
        super().__init__(
            f"e = {e} and phi(n) = {phi} are not coprime (gcd = {divisor})"
        )


class OutOfRangeError(RSAParameterError):
    def __init__(self, message: int, n: int):
        self.message = message
        self.n = n
        super().__init__(f"message M = {message} must satisfy 0 <= M < n = {n}")
