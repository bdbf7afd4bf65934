"""
Textbook RSA: key generation, encryption, decryption and step builder.

Teaching-scale only. Python integers never overflow, so mod_pow is exact
for any size of p and q, but is_prime uses trial division and becomes
slow long before the numbers become cryptographically interesting.
"""

from __future__ import annotations

from dataclasses import dataclass

from .arith import gcd, is_prime, mod_inverse, mod_pow
from .errors import (
    EqualPrimesError,
    InvalidExponent,
    InvalidPrime,
    NotCoprimeError,
    OutOfRangeError,
)
from .steps import RSAStep, frozen_mapping

# Classic textbook parameters (p=61, q=53 gives n=3233, d=2753)
DEFAULT_P = 61
DEFAULT_Q = 53
DEFAULT_E = 17

RSA_STEP_COUNT = 12


@dataclass(frozen=True)
class RSAKeys:
    """Complete RSA key material derived from p, q and e."""

    p: int
    q: int
    n: int
    phi: int
    e: int
    d: int

    @property
    def public_key(self) -> tuple[int, int]:
        return (self.e, self.n)

    @property
    def private_key(self) -> tuple[int, int]:
        return (self.d, self.n)


def generate_keys(p: int, q: int, e: int) -> RSAKeys:
    """
    Derive n, phi(n) and d from two primes and a public exponent.

    Raises:
        InvalidPrime: p or q is not prime
        EqualPrimesError: p == q
        InvalidExponent: e outside 2 <= e < phi
        NotCoprimeError: gcd(e, phi) != 1
    """
    if not is_prime(p):
        raise InvalidPrime("p", p)
    if not is_prime(q):
        raise InvalidPrime("q", q)
    if p == q:
        raise EqualPrimesError(p)

    n = p * q
    phi = (p - 1) * (q - 1)
    if e < 2 or e >= phi:
        raise InvalidExponent(e, phi)
    divisor = gcd(e, phi)
    if divisor != 1:
        raise NotCoprimeError(e, phi, divisor)

    d = mod_inverse(e, phi)
    return RSAKeys(p=p, q=q, n=n, phi=phi, e=e, d=d)


def rsa_encrypt(m: int, e: int, n: int) -> int:
    """C = M^e mod n, for 0 <= M < n."""
    if m < 0 or m >= n:
        raise OutOfRangeError(m, n)
    return mod_pow(m, e, n)


def rsa_decrypt(c: int, d: int, n: int) -> int:
    """M = C^d mod n."""
    return mod_pow(c, d, n)


def build_rsa_steps(
    message: int,
    p: int = DEFAULT_P,
    q: int = DEFAULT_Q,
    e: int = DEFAULT_E,
) -> tuple[RSAStep, ...]:
    """
    Build the 12-step RSA trace.

    Six key-generation steps, three encryption steps and three decryption
    steps. The last step decrypts the ciphertext and compares it with the
    original message; ``values["match"]`` is False if anything upstream
    went wrong.

    Raises:
        RSAParameterError subclasses for invalid p, q, e or message
    """
    keys = generate_keys(p, q, e)
    n, phi, d = keys.n, keys.phi, keys.d
    ciphertext = rsa_encrypt(message, e, n)

    steps: list[RSAStep] = []

    # ---- key generation ----
    steps.append(RSAStep(
        id="rsa-keygen-primes", phase="keygen", operation="choosePrimes",
        label="Choose primes",
        description="Pick two distinct primes p and q. They stay secret.",
        formula=f"p = {p}, q = {q}",
        values=frozen_mapping({"p": p, "q": q}),
    ))
    steps.append(RSAStep(
        id="rsa-keygen-n", phase="keygen", operation="computeN",
        label="Compute n",
        description="The modulus n = p * q becomes part of both keys.",
        formula=f"n = p x q = {p} x {q} = {n}",
        values=frozen_mapping({"p": p, "q": q, "n": n}),
    ))
    steps.append(RSAStep(
        id="rsa-keygen-phi", phase="keygen", operation="computePhi",
        label="Compute phi(n)",
        description="Euler's totient of n is (p - 1)(q - 1).",
        formula=f"phi(n) = (p-1)(q-1) = {p - 1} x {q - 1} = {phi}",
        values=frozen_mapping({"p": p, "q": q, "n": n, "phi": phi}),
    ))
    gcd_result = gcd(e, phi)
    steps.append(RSAStep(
        id="rsa-keygen-e", phase="keygen", operation="chooseE",
        label="Choose public exponent e",
        description="e must satisfy 1 < e < phi(n) and gcd(e, phi(n)) = 1.",
        formula=f"e = {e} (gcd({e}, {phi}) = {gcd_result})",
        values=frozen_mapping({"e": e, "phi": phi, "gcd": gcd_result}),
    ))
    steps.append(RSAStep(
        id="rsa-keygen-d", phase="keygen", operation="computeD",
        label="Compute private exponent d",
        description=(
            "d is the inverse of e modulo phi(n), found with the extended "
            "Euclidean algorithm, so that e * d = 1 (mod phi(n))."
        ),
        formula=f"d = e^-1 mod phi(n) = {e}^-1 mod {phi} = {d}",
        values=frozen_mapping({"e": e, "phi": phi, "d": d, "check": (e * d) % phi}),
    ))
    steps.append(RSAStep(
        id="rsa-keygen-keys", phase="keygen", operation="showKeys",
        label="Key pair",
        description="Public key (e, n) and private key (d, n) are ready.",
        formula=f"public key (e, n) = ({e}, {n})\nprivate key (d, n) = ({d}, {n})",
        values=frozen_mapping({"e": e, "n": n, "d": d}),
    ))

    # ---- encryption ----
    steps.append(RSAStep(
        id="rsa-encrypt-input", phase="encrypt", operation="inputMessage",
        label="Plaintext message",
        description="The message M is a number with 0 <= M < n.",
        formula=f"M = {message}",
        values=frozen_mapping({"message": message, "n": n}),
    ))
    steps.append(RSAStep(
        id="rsa-encrypt-compute", phase="encrypt", operation="computePower",
        label="Modular exponentiation",
        description="Encrypt with the public key: C = M^e mod n.",
        formula=f"C = M^e mod n = {message}^{e} mod {n}",
        values=frozen_mapping({"message": message, "e": e, "n": n}),
    ))
    steps.append(RSAStep(
        id="rsa-encrypt-result", phase="encrypt", operation="showCipher",
        label="Ciphertext",
        description="The ciphertext C can be sent in the open.",
        formula=f"C = {ciphertext}",
        values=frozen_mapping({"ciphertext": ciphertext}),
    ))

    # ---- decryption ----
    decrypted = rsa_decrypt(ciphertext, d, n)
    match = decrypted == message
    steps.append(RSAStep(
        id="rsa-decrypt-input", phase="decrypt", operation="inputCipher",
        label="Received ciphertext",
        description="The receiver starts from the ciphertext C.",
        formula=f"C = {ciphertext}",
        values=frozen_mapping({"ciphertext": ciphertext}),
    ))
    steps.append(RSAStep(
        id="rsa-decrypt-compute", phase="decrypt", operation="computeDecrypt",
        label="Decrypt",
        description="Decrypt with the private key: M = C^d mod n.",
        formula=f"M = C^d mod n = {ciphertext}^{d} mod {n}",
        values=frozen_mapping({"ciphertext": ciphertext, "d": d, "n": n}),
    ))
    steps.append(RSAStep(
        id="rsa-decrypt-result", phase="decrypt", operation="showPlain",
        label="Recovered plaintext",
        description=(
            "The decrypted value matches the original message."
            if match else
            "The decrypted value does NOT match the original message."
        ),
        formula=f"M = {decrypted} ({'match' if match else 'MISMATCH'})",
        values=frozen_mapping({
            "decrypted": decrypted,
            "original": message,
            "match": match,
        }),
    ))

    return tuple(steps)
