"""Command-line interface for the cipher step tracer.

Usage:
    crypto-trace list
    crypto-trace caesar "Hello, World!" --shift 3 --verbose
    crypto-trace aes --preset nist --trace aes.jsonl
    crypto-trace aes --text "attack at dawn" --random-key --play --speed 300
    crypto-trace rsa --message 65 --p 61 --q 53 --e 17 --step 7
"""

from __future__ import annotations

import sys
import threading
from typing import Any, Callable, Sequence, TextIO

import click

from . import DEFAULT_KEY_HEX, DEFAULT_PT_HEX, DEFAULT_SPEED_MS, __version__
from .aes import build_aes_trace
from .animator import Animator, ThreadingScheduler
from .caesar import build_caesar_steps
from .errors import CryptoTraceError
from .presets import (
    AES_PRESETS,
    CAESAR_PRESETS,
    RSA_PRESETS,
    aes_preset,
    list_presets,
    random_hex,
    text_to_hex,
)
from .reference import verify_trace
from .rsa import DEFAULT_E, DEFAULT_P, DEFAULT_Q, build_rsa_steps
from .stepper import Stepper
from .trace import TraceRecorder, print_header, print_result

ALGORITHMS: dict[str, str] = {
    "caesar": "Caesar shift cipher, one step per character",
    "aes": "AES-128 single block encryption, every round transform",
    "rsa": "Textbook RSA key generation, encryption and decryption",
}


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _build(builder: Callable[[], Any]) -> Any:
    """Run a trace builder, turning engine errors into a CLI error."""
    try:
        return builder()
    except CryptoTraceError as e:
        _fail(str(e))


def _walk(
    steps: Sequence[Any],
    verbose: bool,
    trace_file: TextIO | None,
    play: bool,
    speed: int,
    step: int | None,
) -> TraceRecorder:
    """Drive a Stepper over ``steps``, echoing each position change."""
    recorder = TraceRecorder(verbose=verbose, trace_file=trace_file, echo=click.echo)
    stepper = Stepper(steps, recorder.on_step_change)

    if step is not None:
        if stepper.go_to(step) == 0:
            stepper.start()
        return recorder

    stepper.start()
    if play:
        finished = threading.Event()

        def on_state_change(is_playing: bool) -> None:
            if not is_playing:
                finished.set()

        animator = Animator(
            stepper,
            speed_ms=speed,
            on_state_change=on_state_change,
            scheduler=ThreadingScheduler(),
        )
        animator.play()
        try:
            finished.wait()
        except KeyboardInterrupt:
            animator.pause()
            click.echo("Playback interrupted.", err=True)
            return recorder
        # The animator also pauses when a tick fails on the timer thread
        if not stepper.is_at_end:
            _fail(f"Playback stopped at step {stepper.current_index + 1}/{stepper.total_steps}")
    else:
        while not stepper.is_at_end:
            stepper.next()
    return recorder


def walk_options(func: Callable) -> Callable:
    """Options shared by every algorithm command."""
    func = click.option(
        "--step",
        type=int,
        default=None,
        help="Show only this step (0-based, clamped to the trace)",
    )(func)
    func = click.option(
        "--speed",
        type=click.IntRange(min=1),
        default=DEFAULT_SPEED_MS,
        show_default=True,
        help="Milliseconds between steps with --play",
    )(func)
    func = click.option(
        "--play",
        is_flag=True,
        help="Auto-advance through the steps on a timer",
    )(func)
    func = click.option(
        "--trace",
        "trace_file",
        type=click.File("w"),
        default=None,
        help="Write every step notification as JSON Lines to FILE",
    )(func)
    func = click.option(
        "--verbose", "-v",
        is_flag=True,
        help="Print full step details instead of one line per step",
    )(func)
    return func


@click.group()
@click.version_option(version=__version__, prog_name="crypto-trace")
def main() -> None:
    """Step-by-step traces of the Caesar, AES-128 and RSA ciphers."""
    pass


@main.command(name="list")
def list_cmd() -> None:
    """List algorithms and named presets."""
    click.echo("Available algorithms:")
    click.echo("")
    for name, description in ALGORITHMS.items():
        click.echo(f"  {name}")
        click.echo(f"    {description}")
    click.echo("")
    click.echo("Presets:")
    for preset in list_presets():
        click.echo(f"  {preset['algorithm']}/{preset['name']}: {preset['description']}")


@main.command()
@click.argument("text", required=False)
@click.option("--shift", type=int, default=None, help="Shift amount  [default: 3]")
@click.option(
    "--preset",
    type=click.Choice(sorted(CAESAR_PRESETS)),
    default=None,
    help="Use a named preset; explicit TEXT/--shift override it",
)
@walk_options
def caesar(
    text: str | None,
    shift: int | None,
    preset: str | None,
    verbose: bool,
    trace_file: TextIO | None,
    play: bool,
    speed: int,
    step: int | None,
) -> None:
    """Trace Caesar encryption of TEXT."""
    values = CAESAR_PRESETS[preset] if preset is not None else {}
    if text is None and "text" in values:
        text = str(values["text"])
    if shift is None:
        shift = int(values.get("shift", 3))
    if text is None:
        _fail("TEXT is required unless --preset is given")

    steps = _build(lambda: build_caesar_steps(text, shift))
    print_header(f"Caesar cipher: shift {steps[0].shift}", echo=click.echo)
    _walk(steps, verbose, trace_file, play, speed, step)

    final = steps[-1]
    print_result(
        "Ciphertext",
        final.ciphertext_so_far,
        len(steps),
        passed=bool(final.values["match"]),
        echo=click.echo,
    )
    if not final.values["match"]:
        sys.exit(1)


@main.command()
@click.option("--pt", help="Plaintext as 32 hex chars (default: FIPS-197 test plaintext)")
@click.option("--text", help="Plaintext as text, first 16 chars, zero padded")
@click.option("--random", "random_pt", is_flag=True, help="Use a random plaintext block")
@click.option("--key", help="AES-128 key as 32 hex chars (default: FIPS-197 test key)")
@click.option("--random-key", is_flag=True, help="Use a random key")
@click.option(
    "--preset",
    type=click.Choice(sorted(AES_PRESETS)),
    default=None,
    help="Use a named plaintext/key preset",
)
@walk_options
def aes(
    pt: str | None,
    text: str | None,
    random_pt: bool,
    key: str | None,
    random_key: bool,
    preset: str | None,
    verbose: bool,
    trace_file: TextIO | None,
    play: bool,
    speed: int,
    step: int | None,
) -> None:
    """Trace AES-128 encryption of one block."""
    if sum(1 for given in (pt, text, random_pt, preset) if given) > 1:
        _fail("Use only one of --pt, --text, --random and --preset")

    try:
        if preset is not None:
            pt_hex, key_hex = aes_preset(preset)
        elif text is not None:
            pt_hex = text_to_hex(text)
            key_hex = DEFAULT_KEY_HEX
        elif random_pt:
            pt_hex, key_hex = random_hex(), DEFAULT_KEY_HEX
        else:
            pt_hex, key_hex = pt or DEFAULT_PT_HEX, DEFAULT_KEY_HEX
    except CryptoTraceError as e:
        _fail(str(e))

    if key is not None:
        key_hex = key
    elif random_key:
        key_hex = random_hex()

    trace = _build(lambda: build_aes_trace(pt_hex, key_hex))
    print_header("AES-128 Encryption", echo=click.echo)
    click.echo(f"Key:       {key_hex}")
    click.echo(f"Plaintext: {pt_hex}")
    _walk(trace.steps, verbose, trace_file, play, speed, step)

    passed, expected = verify_trace(trace, pt_hex, key_hex)
    print_result("Ciphertext", trace.ciphertext_hex, len(trace.steps), passed, echo=click.echo)
    if not passed:
        click.echo(f"Expected: {expected}")
        click.echo(f"Got:      {trace.ciphertext_hex}")
        sys.exit(1)


@main.command()
@click.option("--message", "-m", type=int, default=None, help="Plaintext number M (0 <= M < n)")
@click.option("--p", "p", type=int, default=None, help=f"First prime  [default: {DEFAULT_P}]")
@click.option("--q", "q", type=int, default=None, help=f"Second prime  [default: {DEFAULT_Q}]")
@click.option("--e", "e", type=int, default=None, help=f"Public exponent  [default: {DEFAULT_E}]")
@click.option(
    "--preset",
    type=click.Choice(sorted(RSA_PRESETS)),
    default=None,
    help="Use a named preset; explicit --p/--q/--e/--message override it",
)
@walk_options
def rsa(
    message: int | None,
    p: int | None,
    q: int | None,
    e: int | None,
    preset: str | None,
    verbose: bool,
    trace_file: TextIO | None,
    play: bool,
    speed: int,
    step: int | None,
) -> None:
    """Trace RSA key generation, encryption and decryption of a number."""
    # Explicit options win over the preset, as --key does for aes
    values = RSA_PRESETS[preset] if preset is not None else {}
    p = p if p is not None else values.get("p", DEFAULT_P)
    q = q if q is not None else values.get("q", DEFAULT_Q)
    e = e if e is not None else values.get("e", DEFAULT_E)
    if message is None:
        message = values.get("message")
    if message is None:
        _fail("--message is required unless --preset is given")

    steps = _build(lambda: build_rsa_steps(message, p, q, e))
    print_header(f"RSA: p={p} q={q} e={e}", echo=click.echo)
    _walk(steps, verbose, trace_file, play, speed, step)

    ciphertext = steps[8].values["ciphertext"]
    final = steps[-1]
    print_result(
        "Ciphertext",
        str(ciphertext),
        len(steps),
        passed=bool(final.values["match"]),
        echo=click.echo,
    )
    if not final.values["match"]:
        sys.exit(1)


if __name__ == "__main__":
    main()
