"""
Trace recording and pretty printing for step sequences.

Contains:
- format_step: readable text for any step variant
- TraceRecorder: Stepper observer writing JSON Lines + verbose text
- print_header / print_result: shared formatting helpers
"""

from __future__ import annotations

import json
from typing import Any, Callable, TextIO

from .steps import AESStep, CaesarStep, RSAStep, Step
from .utils import format_state_grid


# ------------------------------------------------------------------
# Formatting helpers
# ------------------------------------------------------------------

def _fmt_state_words(state) -> str:
    """Format state as 4 space-separated 32-bit words (column-major)."""
    words = []
    for col in range(4):
        w = ""
        for row in range(4):
            w += f"{state[row][col]:02x}"
        words.append(w)
    return " ".join(words)


def _fmt_aes(step: AESStep) -> list[str]:
    lines = []
    if step.prev_state is not None:
        lines.append("  before:")
        lines.append(format_state_grid(step.prev_state))
    if step.round_key is not None:
        lines.append(f"  round key {step.round}:")
        lines.append(format_state_grid(step.round_key))
    lines.append("  after:" if step.prev_state is not None else "  state:")
    lines.append(format_state_grid(step.state, step.changed_indices))
    if step.prev_state is not None:
        lines.append(f"  changed: {len(step.changed_indices)}/16 bytes")
    return lines


def _fmt_caesar(step: CaesarStep) -> list[str]:
    marks = {"pending": " ", "active": ">", "done": "+"}
    top = " ".join(f"{marks[cr.status]}{cr.original}" for cr in step.char_results)
    bottom = " ".join(
        f" {cr.shifted if cr.status != 'pending' else '.'}" for cr in step.char_results
    )
    return [f"  in : {top}", f"  out: {bottom}", f"  ciphertext so far: {step.ciphertext_so_far}"]


def _fmt_values(values) -> list[str]:
    if not values:
        return []
    return ["  " + ", ".join(f"{k}={v}" for k, v in values.items())]


def format_step(step: Step, index: int | None = None, total: int | None = None) -> str:
    """
    Render a step as multi-line text.

    The first line is ``[index/total] label`` (1-based) when a position is
    given, followed by the description, formula and variant-specific body.
    """
    head = step.label
    if index is not None and total is not None:
        head = f"[{index + 1}/{total}] {head}"
    lines = [head, f"  {step.description}"]
    if step.formula:
        lines.extend(f"  {line}" for line in step.formula.splitlines())

    if isinstance(step, AESStep):
        lines.extend(_fmt_aes(step))
    elif isinstance(step, CaesarStep):
        lines.extend(_fmt_caesar(step))
        lines.extend(_fmt_values(step.values))
    elif isinstance(step, RSAStep):
        lines.extend(_fmt_values(step.values))
    return "\n".join(lines)


def format_step_line(step: Step, index: int, total: int) -> str:
    """Compact single-line form used when not verbose."""
    if isinstance(step, AESStep):
        return f"S{index:02d}/{total} R{step.round:<2d} {step.operation:12s} STATE:{_fmt_state_words(step.state)}"
    if isinstance(step, RSAStep):
        return f"S{index:02d}/{total} {step.phase:8s} {step.operation:15s} {step.formula.splitlines()[0]}"
    return f"S{index:02d}/{total} {step.phase:8s} {step.label}"


# ------------------------------------------------------------------
# TraceRecorder: Stepper observer
# ------------------------------------------------------------------

class TraceRecorder:
    """
    Records step notifications coming from a Stepper.

    Supports:
    - JSON Lines file output  (one line per notification, when trace_file is set)
    - Compact stdout          (one line per step)
    - Verbose stdout          (full format_step output)
    """

    def __init__(
        self,
        verbose: bool = False,
        trace_file: TextIO | None = None,
        echo: Callable[[str], None] | None = print,
    ):
        self.verbose = verbose
        self.trace_file = trace_file
        self.echo = echo
        self._records: list[dict[str, Any]] = []

    def on_step_change(self, step: Step, previous: Step | None, index: int, total: int) -> None:
        """Stepper callback."""
        self.record(
            index=index,
            total=total,
            previous_id=previous.id if previous is not None else None,
            step=step.to_dict(),
        )
        if self.echo is not None:
            if self.verbose:
                self.echo(format_step(step, index, total))
            else:
                self.echo(format_step_line(step, index, total))

    def record(self, **kwargs) -> None:
        """Store a trace entry and mirror it to the JSON Lines file."""
        self._records.append(kwargs)
        if self.trace_file:
            self._write_jsonl(kwargs)

    def _write_jsonl(self, record: dict[str, Any]) -> None:
        serializable = self._make_serializable(record)
        self.trace_file.write(json.dumps(serializable) + "\n")
        self.trace_file.flush()

    def _make_serializable(self, obj: Any) -> Any:
        if isinstance(obj, dict):
            return {k: self._make_serializable(v) for k, v in obj.items()}
        elif isinstance(obj, (list, tuple)):
            return [self._make_serializable(item) for item in obj]
        elif isinstance(obj, bytes):
            return obj.hex()
        else:
            return obj

    def get_records(self) -> list[dict[str, Any]]:
        return list(self._records)

    def clear(self) -> None:
        self._records.clear()


# ------------------------------------------------------------------
# Shared formatting functions
# ------------------------------------------------------------------

def print_header(title: str, echo: Callable[[str], None] = print) -> None:
    """Print a section header."""
    echo(f"\n{'#'*70}")
    echo(f"# {title}")
    echo(f"{'#'*70}")


def print_result(
    label: str,
    value: str,
    total_steps: int,
    passed: bool = True,
    echo: Callable[[str], None] = print,
) -> None:
    """Print the final outcome of a trace."""
    echo(f"\n{'='*70}")
    echo("RESULT")
    echo(f"{'='*70}")
    echo(f"{label}: {value}")
    echo(f"Steps: {total_steps}")

    status = "PASS" if passed else "FAIL"
    marker = "[OK]" if passed else "[ERROR]"
    echo(f"Verification: {marker} {status}")
    echo(f"{'='*70}")
