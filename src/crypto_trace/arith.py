"""Field and number-theory helpers shared by the AES and RSA engines."""

from __future__ import annotations

from .errors import NoInverseError

# AES reduction polynomial x^8 + x^4 + x^3 + x + 1
AES_POLY = 0x11B


def xtime(a: int) -> int:
    """Multiply by x in GF(2^8)."""
    return ((a << 1) ^ AES_POLY) & 0xff if a & 0x80 else (a << 1) & 0xff


def gf256_multiply(a: int, b: int) -> int:
    """
    Multiply two bytes in GF(2^8) modulo the AES polynomial.

    Shift-and-reduce over the 8 bits of ``b``: whenever the low bit of
    ``b`` is set the running ``a`` is folded into the result, then ``a`` is
    doubled (xtime) and ``b`` shifted right.
    """
    result = 0
    a &= 0xff
    b &= 0xff
    for _ in range(8):
        if b & 1:
            result ^= a
        a = xtime(a)
        b >>= 1
    return result


def mod_pow(base: int, exp: int, modulus: int) -> int:
    """
    Square-and-multiply modular exponentiation.

    Python integers are arbitrary precision, so intermediate squares never
    overflow regardless of the size of p and q.
    """
    if modulus <= 0:
        raise ValueError(f"Modulus must be positive, got {modulus}")
    if exp < 0:
        raise ValueError(f"Exponent must be non-negative, got {exp}")
    if modulus == 1:
        return 0

    result = 1
    b = base % modulus
    e = exp
    while e > 0:
        if e & 1:
            result = (result * b) % modulus
        e >>= 1
        b = (b * b) % modulus
    return result


def gcd(a: int, b: int) -> int:
    """Greatest common divisor (Euclid) on absolute values."""
    a, b = abs(a), abs(b)
    while b:
        a, b = b, a % b
    return a


def extended_gcd(a: int, b: int) -> tuple[int, int, int]:
    """
    Extended Euclidean algorithm.

    Returns:
        Tuple (g, x, y) with a*x + b*y == g
    """
    old_r, r = a, b
    old_s, s = 1, 0
    old_t, t = 0, 1
    while r != 0:
        q = old_r // r
        old_r, r = r, old_r - q * r
        old_s, s = s, old_s - q * s
        old_t, t = t, old_t - q * t
    return old_r, old_s, old_t


def mod_inverse(a: int, m: int) -> int:
    """
    Modular multiplicative inverse of ``a`` modulo ``m``.

    Raises:
        NoInverseError: if gcd(a, m) != 1
    """
    if m <= 0:
        raise NoInverseError(a, m)
    g, x, _ = extended_gcd(a % m, m)
    if g != 1:
        raise NoInverseError(a, m)
    return x % m


def is_prime(n: int) -> bool:
    """Trial division over 6k +/- 1 candidates up to sqrt(n)."""
    if n < 2:
        return False
    if n < 4:
        return True
    if n % 2 == 0 or n % 3 == 0:
        return False
    i = 5
    while i * i <= n:
        if n % i == 0 or n % (i + 2) == 0:
            return False
        i += 6
    return True
