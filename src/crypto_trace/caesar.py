"""
Caesar cipher and its step builder.

Only ASCII letters are shifted; every other character (digits, spaces,
punctuation, non-ASCII) passes through unchanged. Decryption is
encryption with the negated shift.
"""

from __future__ import annotations

from .errors import InvalidInput
from .steps import CaesarStep, CharResult, frozen_mapping

ALPHABET_SIZE = 26


def shift_char(char: str, shift: int) -> CharResult:
    """
    Shift a single character by ``shift`` positions within its case.

    Args:
        char: Single character
        shift: Shift amount (negative for decryption)

    Returns:
        CharResult with the original and shifted character
    """
    if "A" <= char <= "Z":
        base = ord("A")
    elif "a" <= char <= "z":
        base = ord("a")
    else:
        return CharResult(original=char, shifted=char, is_alpha=False)

    pos = ord(char) - base
    new_pos = ((pos + shift) % ALPHABET_SIZE + ALPHABET_SIZE) % ALPHABET_SIZE
    return CharResult(
        original=char,
        shifted=chr(base + new_pos),
        is_alpha=True,
        pos=pos,
        new_pos=new_pos,
    )


def caesar_encrypt(text: str, shift: int) -> str:
    """Encrypt ``text`` by shifting every letter ``shift`` places."""
    return "".join(shift_char(ch, shift).shifted for ch in text)


def caesar_decrypt(text: str, shift: int) -> str:
    """Undo caesar_encrypt with the same shift."""
    return caesar_encrypt(text, -shift)


def normalize_shift(shift: int) -> int:
    return ((shift % ALPHABET_SIZE) + ALPHABET_SIZE) % ALPHABET_SIZE


def _with_statuses(
    char_results: tuple[CharResult, ...],
    active: int | None,
) -> tuple[CharResult, ...]:
    """Mark results before ``active`` done, ``active`` active, rest pending.

    ``active=None`` marks everything done.
    """
    if active is None:
        return tuple(cr.with_status("done") for cr in char_results)
    statuses = []
    for j, cr in enumerate(char_results):
        if j < active:
            statuses.append(cr.with_status("done"))
        elif j == active:
            statuses.append(cr.with_status("active"))
        else:
            statuses.append(cr.with_status("pending"))
    return tuple(statuses)


def build_caesar_steps(plaintext: str, shift: int) -> tuple[CaesarStep, ...]:
    """
    Build the full Caesar trace.

    Layout: overview, one step per input character, result, decryption
    check. The total is ``len(plaintext) + 3`` steps.

    Raises:
        InvalidInput: empty text, or a shift that is a multiple of 26
    """
    if len(plaintext) == 0:
        raise InvalidInput("Text to encrypt must not be empty")
    k = normalize_shift(shift)
    if k == 0:
        raise InvalidInput(f"Shift {shift} is a multiple of 26; use 1..25")

    char_results = tuple(shift_char(ch, k) for ch in plaintext)
    steps: list[CaesarStep] = []

    steps.append(CaesarStep(
        id="caesar-overview",
        phase="overview",
        label="Caesar cipher overview",
        description=(
            f"Every letter is moved {k} places along the alphabet. "
            "Digits, spaces and punctuation are left as they are."
        ),
        formula=f"shift = {k}",
        plaintext=plaintext,
        shift=k,
        char_results=tuple(cr.with_status("pending") for cr in char_results),
        ciphertext_so_far="",
    ))

    ciphertext_so_far = ""
    for i, r in enumerate(char_results):
        ciphertext_so_far += r.shifted
        if r.is_alpha:
            label = f"Character {i + 1}: {r.original} -> {r.shifted}"
            description = (
                f"'{r.original}' is letter {r.pos + 1} of the alphabet. "
                f"Moving {k} places lands on letter {r.new_pos + 1}, '{r.shifted}'."
            )
            formula = f"{r.original}({r.pos}) + {k} = {r.new_pos} -> {r.shifted}"
        else:
            label = f"Character {i + 1}: {r.original!r} (unchanged)"
            description = f"{r.original!r} is not a letter, so it is copied as is."
            formula = f"{r.original} -> {r.shifted} (unchanged)"

        steps.append(CaesarStep(
            id=f"caesar-char-{i}",
            phase="encrypt",
            label=label,
            description=description,
            formula=formula,
            plaintext=plaintext,
            shift=k,
            char_results=_with_statuses(char_results, i),
            ciphertext_so_far=ciphertext_so_far,
            current_char_index=i,
        ))

    ciphertext = ciphertext_so_far
    done = _with_statuses(char_results, None)
    steps.append(CaesarStep(
        id="caesar-result",
        phase="result",
        label="Encryption complete",
        description="Every character has been processed.",
        formula=f"plaintext: {plaintext}\nciphertext: {ciphertext}",
        plaintext=plaintext,
        shift=k,
        char_results=done,
        ciphertext_so_far=ciphertext,
        values=frozen_mapping({
            "plaintext": plaintext,
            "ciphertext": ciphertext,
            "shift": k,
        }),
    ))

    decrypted = caesar_decrypt(ciphertext, k)
    match = decrypted == plaintext
    steps.append(CaesarStep(
        id="caesar-decrypt-verify",
        phase="decrypt",
        label="Decryption check",
        description=(
            f"Moving every letter of the ciphertext back {k} places "
            + ("recovers the original text." if match
               else "does NOT recover the original text.")
        ),
        formula=f"ciphertext: {ciphertext}\ndecrypted: {decrypted}",
        plaintext=plaintext,
        shift=k,
        char_results=done,
        ciphertext_so_far=ciphertext,
        values=frozen_mapping({
            "ciphertext": ciphertext,
            "decrypted": decrypted,
            "match": match,
        }),
    ))

    return tuple(steps)
