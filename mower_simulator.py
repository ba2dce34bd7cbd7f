#!/usr/bin/env python3
"""mower_simulator.py

Simulates autonomous mowers on a rectangular lawn from a plain-text program.

Key features:
- Tolerant line-oriented parser: malformed mower records are skipped, not fatal.
- Deterministic grid state machine with boundary clamping.
- Streaming pose trace (no need to keep every intermediate pose).
- Diagnostics collected alongside results and sent to the logger.
- Random input generator for experimentation.

Run:
  python mower_simulator.py run lawn.txt
  python mower_simulator.py validate lawn.txt
  python mower_simulator.py random out.txt --seed 123
  python mower_simulator.py --help
"""

from __future__ import annotations

import argparse
import enum
import json
import logging
import os
import random
import sys
from collections.abc import Generator
from dataclasses import asdict, dataclass, field
from typing import Literal, cast

logger = logging.getLogger("mower_simulator")
logger.addHandler(logging.NullHandler())


# -------------------------
# Errors / Diagnostics
# -------------------------


class InputError(ValueError):
    pass


def _require(cond: bool, msg: str) -> None:
    if not cond:
        raise InputError(msg)


class DiagnosticKind(enum.Enum):
    EMPTY_INPUT = "empty_input"
    INVALID_LAWN = "invalid_lawn"
    SKIPPED_RECORD = "skipped_record"
    IGNORED_INSTRUCTION = "ignored_instruction"
    CLAMPED_START = "clamped_start"

    @property
    def fatal(self) -> bool:
        return self in (DiagnosticKind.EMPTY_INPUT, DiagnosticKind.INVALID_LAWN)


@dataclass(frozen=True)
class Diagnostic:
    kind: DiagnosticKind
    message: str
    line: int | None = None

    def __str__(self) -> str:
        where = f"line {self.line}: " if self.line is not None else ""
        return f"{where}{self.message}"


def _emit(
    diagnostics: list[Diagnostic] | None,
    kind: DiagnosticKind,
    message: str,
    line: int | None = None,
) -> Diagnostic:
    diag = Diagnostic(kind, message, line)
    if kind.fatal:
        logger.error("%s", diag)
    else:
        logger.warning("%s", diag)
    if diagnostics is not None:
        diagnostics.append(diag)
    return diag


# -------------------------
# Model
# -------------------------


class Orientation(enum.Enum):
    """Compass heading; member order is the clockwise turn cycle."""

    NORTH = "N"
    EAST = "E"
    SOUTH = "S"
    WEST = "W"

    def rotate_right(self) -> Orientation:
        cycle = list(Orientation)
        return cycle[(cycle.index(self) + 1) % len(cycle)]

    def rotate_left(self) -> Orientation:
        cycle = list(Orientation)
        return cycle[(cycle.index(self) - 1) % len(cycle)]

    @property
    def step(self) -> tuple[int, int]:
        return _STEPS[self]


_STEPS: dict[Orientation, tuple[int, int]] = {
    Orientation.NORTH: (0, 1),
    Orientation.EAST: (1, 0),
    Orientation.SOUTH: (0, -1),
    Orientation.WEST: (-1, 0),
}


@dataclass(frozen=True)
class Lawn:
    max_x: int
    max_y: int

    def contains(self, x: int, y: int) -> bool:
        return 0 <= x <= self.max_x and 0 <= y <= self.max_y

    def clamp(self, pose: Pose) -> Pose:
        x = min(max(pose.x, 0), self.max_x)
        y = min(max(pose.y, 0), self.max_y)
        return Pose(x, y, pose.orientation)


@dataclass(frozen=True)
class Pose:
    x: int
    y: int
    orientation: Orientation

    def to_dict(self) -> dict[str, int | str]:
        return {"x": self.x, "y": self.y, "orientation": self.orientation.value}


@dataclass(frozen=True)
class MowerDefinition:
    start: Pose
    instructions: str
    # 1-based line of the position record, for diagnostics only
    line: int | None = None


@dataclass(frozen=True)
class ParsedInput:
    lawn: Lawn
    mowers: list[MowerDefinition]
    diagnostics: list[Diagnostic] = field(default_factory=list)


@dataclass(frozen=True)
class ParseFailure:
    diagnostic: Diagnostic


# -------------------------
# Parsing
# -------------------------


def _parse_digits(s: str) -> int | None:
    """Parse a non-negative base-10 integer, or None unless every char is a digit."""
    if not s or not (s.isascii() and s.isdigit()):
        return None
    return int(s)


def parse_lawn(line: str) -> Lawn | None:
    """All but the last character is max_x, the last character is max_y."""
    line = line.strip()
    max_x = _parse_digits(line[:-1])
    max_y = _parse_digits(line[-1:])
    if max_x is None or max_y is None:
        return None
    return Lawn(max_x, max_y)


def parse_position(line: str) -> Pose | None:
    """Parse ``<x><y><sep><orientation>``; the separator is not checked."""
    line = line.strip()
    if len(line) < 3:
        return None
    x = _parse_digits(line[0])
    y = _parse_digits(line[1])
    letter = line[3] if len(line) > 3 else ""
    if x is None or y is None or letter not in _ORIENTATION_LETTERS:
        return None
    return Pose(x, y, Orientation(letter))


_ORIENTATION_LETTERS = frozenset(o.value for o in Orientation)


def parse_input(content: str) -> ParsedInput | ParseFailure:
    """Parse a lawn program into a lawn and its mower definitions.

    Fatal problems (empty content, bad lawn line) return a ParseFailure.
    A malformed mower record only drops that record and is reported in
    ParsedInput.diagnostics; parsing then carries on with the next pair.
    A start outside the lawn is moved onto its nearest edge cell and kept.
    """
    text = content.strip()
    if not text:
        return ParseFailure(_emit(None, DiagnosticKind.EMPTY_INPUT, "empty file"))

    lines = [ln.strip() for ln in text.split("\n")]
    lawn = parse_lawn(lines[0])
    if lawn is None:
        return ParseFailure(
            _emit(None, DiagnosticKind.INVALID_LAWN, f"invalid lawn {lines[0]!r}", 1)
        )

    diagnostics: list[Diagnostic] = []
    mowers: list[MowerDefinition] = []

    # Mower records start on line 2 and take two lines each.
    for i in range(1, len(lines), 2):
        lineno = i + 1
        position_line = lines[i]
        instructions = lines[i + 1] if i + 1 < len(lines) else ""

        if not position_line or not instructions or len(position_line) < 3:
            _emit(
                diagnostics,
                DiagnosticKind.SKIPPED_RECORD,
                f"wrong initial setup {position_line!r}",
                lineno,
            )
            continue

        start = parse_position(position_line)
        if start is None:
            _emit(
                diagnostics,
                DiagnosticKind.SKIPPED_RECORD,
                f"setup not valid {position_line!r}",
                lineno,
            )
            continue

        if not lawn.contains(start.x, start.y):
            clamped = lawn.clamp(start)
            _emit(
                diagnostics,
                DiagnosticKind.CLAMPED_START,
                f"start ({start.x}, {start.y}) outside lawn "
                f"{lawn.max_x}x{lawn.max_y}, moved to ({clamped.x}, {clamped.y})",
                lineno,
            )
            start = clamped

        mowers.append(MowerDefinition(start, instructions, lineno))

    return ParsedInput(lawn, mowers, diagnostics)


# -------------------------
# Simulation
# -------------------------


def step_forward(pose: Pose, lawn: Lawn) -> Pose:
    dx, dy = pose.orientation.step
    nx, ny = pose.x + dx, pose.y + dy
    if not lawn.contains(nx, ny):
        # Blocked by the lawn edge: stay put.
        return pose
    return Pose(nx, ny, pose.orientation)


def iter_poses(
    mower: MowerDefinition,
    lawn: Lawn,
    *,
    diagnostics: list[Diagnostic] | None = None,
) -> Generator[Pose, None, None]:
    """Yield the mower's pose after each instruction character, in order.

    ``L``/``R`` turn in place, ``F`` moves one cell unless that would leave
    the lawn. Any other character is reported and otherwise ignored, so
    every character yields exactly one pose.
    """
    pose = mower.start
    for ch in mower.instructions:
        if ch == "L":
            pose = Pose(pose.x, pose.y, pose.orientation.rotate_left())
        elif ch == "R":
            pose = Pose(pose.x, pose.y, pose.orientation.rotate_right())
        elif ch == "F":
            pose = step_forward(pose, lawn)
        else:
            _emit(
                diagnostics,
                DiagnosticKind.IGNORED_INSTRUCTION,
                f"wrong instruction: {ch!r}",
                None if mower.line is None else mower.line + 1,
            )
        yield pose


def simulate(
    mower: MowerDefinition,
    lawn: Lawn,
    *,
    diagnostics: list[Diagnostic] | None = None,
) -> Pose:
    pose = mower.start
    for pose in iter_poses(mower, lawn, diagnostics=diagnostics):
        pass
    return pose


@dataclass(frozen=True)
class SimulationReport:
    lawn: Lawn | None
    mowers: list[MowerDefinition]
    poses: list[Pose]
    diagnostics: list[Diagnostic]
    # per-mower intermediate poses, only filled when tracing
    traces: list[list[Pose]] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        return any(d.kind.fatal for d in self.diagnostics)


def run_simulation(content: str, *, trace: bool = False) -> SimulationReport:
    """Parse ``content`` and simulate every mower in input order."""
    parsed = parse_input(content)
    if isinstance(parsed, ParseFailure):
        return SimulationReport(
            lawn=None, mowers=[], poses=[], diagnostics=[parsed.diagnostic]
        )

    diagnostics = list(parsed.diagnostics)
    poses: list[Pose] = []
    traces: list[list[Pose]] = []
    for n, mower in enumerate(parsed.mowers, start=1):
        if trace:
            steps = list(iter_poses(mower, parsed.lawn, diagnostics=diagnostics))
            traces.append(steps)
            pose = steps[-1] if steps else mower.start
        else:
            pose = simulate(mower, parsed.lawn, diagnostics=diagnostics)
        logger.debug("mower %d: %s -> %s", n, mower.start, pose)
        poses.append(pose)
    return SimulationReport(
        lawn=parsed.lawn,
        mowers=parsed.mowers,
        poses=poses,
        diagnostics=diagnostics,
        traces=traces,
    )


# -------------------------
# Output
# -------------------------


def format_pose(index: int, pose: Pose) -> str:
    return f"Mower {index}: [{pose.x}, {pose.y}] facing {pose.orientation.value}"


def format_results(poses: list[Pose]) -> str:
    return "\n".join(format_pose(i, p) for i, p in enumerate(poses, start=1))


def report_to_dict(report: SimulationReport) -> dict[str, object]:
    return {
        "lawn": None if report.lawn is None else asdict(report.lawn),
        "mowers": [p.to_dict() for p in report.poses],
        "diagnostics": [
            {"kind": d.kind.value, "message": d.message, "line": d.line}
            for d in report.diagnostics
        ],
    }


# -------------------------
# Input / logging helpers
# -------------------------


def _ensure_parent_dir(path: str) -> None:
    os.makedirs(os.path.dirname(os.path.abspath(path)) or ".", exist_ok=True)


def load_input(path: str) -> str:
    """Read a lawn program from ``path`` (``-`` reads stdin)."""
    if path == "-":
        return sys.stdin.read()
    with open(path, "rb") as f:
        raw = f.read()
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise InputError(f"{path} is not UTF-8 text: {e}") from e


def setup_logging(level: int = logging.WARNING, log_file: str | None = None) -> None:
    """
    Configures the 'mower_simulator' logger.

    Args:
        level: Logging level (e.g. logging.DEBUG, logging.WARNING)
        log_file: Optional path to save logs to a file.
    """
    logger.setLevel(level)

    # Avoid duplicate handlers when main() runs more than once in a process
    if logger.hasHandlers():
        logger.handlers.clear()

    # Results go to stdout, so diagnostics use stderr
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%H:%M:%S"
    )
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        _ensure_parent_dir(log_file)
        file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.debug("Logging initialized.")


# -------------------------
# Random input generator
# -------------------------


def generate_random_input(seed: int | None = None, mowers: int | None = None) -> str:
    """Build a random lawn program that always parses without diagnostics.

    Lawn sides stay within one digit because position records encode each
    coordinate as a single character.
    """
    _require(mowers is None or mowers >= 0, "mowers must be >= 0")
    rng = random.Random(seed)

    max_x = rng.randint(1, 9)
    max_y = rng.randint(1, 9)
    count = mowers if mowers is not None else rng.randint(1, 4)

    lines = [f"{max_x}{max_y}"]
    for _ in range(count):
        x = rng.randint(0, max_x)
        y = rng.randint(0, max_y)
        letter = rng.choice([o.value for o in Orientation])
        # Forward moves are twice as likely as either turn.
        program = "".join(rng.choice("FFLR") for _ in range(rng.randint(5, 15)))
        lines.append(f"{x}{y} {letter}")
        lines.append(program)
    text = "\n".join(lines) + "\n"

    # Internal sanity check: generated input must always parse cleanly.
    parsed = parse_input(text)
    _require(
        isinstance(parsed, ParsedInput) and not parsed.diagnostics,
        "generated input does not parse cleanly",
    )
    return text


def dump_text(text: str, path: str) -> None:
    _ensure_parent_dir(path)
    with open(path, "w", encoding="utf-8") as f:
        f.write(text)


# -------------------------
# CLI / Help
# -------------------------

HELP_EPILOG = r"""
INPUT FORMAT (run, validate)

A lawn program is plain UTF-8 text. Surrounding whitespace on each line is
ignored.

  Line 1: lawn size
      <maxX><maxY>
      Every character but the last is maxX, the last character is maxY.
      "55" is a 6x6 grid of cells (0..5 on each axis).

  Then two lines per mower:

      <x><y> <orientation>
          Single-digit start coordinates, one separator character, and an
          orientation letter: N, E, S or W.

      <instructions>
          L  turn left 90 degrees in place
          R  turn right 90 degrees in place
          F  move forward one cell; a move that would leave the lawn is
             ignored
          Any other character is reported and ignored.

  Mowers move one after another, in file order.

Example

    55
    12 N
    FFRFF
    33 E
    FFRFFRFRR

  gives

    Mower 1: [3, 4] facing E
    Mower 2: [4, 1] facing E

ERRORS

  An empty file or an unreadable lawn line aborts the run (exit code 2).
  A malformed mower record is skipped with a warning; the other mowers
  still run.
  A start outside the lawn is moved to the nearest lawn cell, with a
  warning.

RANDOM INPUT GENERATION (random)

  python mower_simulator.py random out.txt --seed 123
"""


def build_argparser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="mower_simulator.py",
        description="Simulate mowers on a rectangular lawn from a text program.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=HELP_EPILOG,
    )
    p.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Diagnostics verbosity. Default: WARNING.",
    )
    p.add_argument("--log-file", default=None, help="Also write logs to this file.")

    sub = p.add_subparsers(dest="cmd", required=True)

    pr = sub.add_parser(
        "run",
        help="Simulate every mower and print final positions.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    pr.add_argument("input", help="Path to the lawn program ('-' for stdin).")
    pr.add_argument(
        "--format",
        choices=["text", "json"],
        default="text",
        help="Output format. Default: text.",
    )
    pr.add_argument(
        "--trace",
        action="store_true",
        help="Also print the pose after every instruction (text format only).",
    )

    pv = sub.add_parser(
        "validate",
        help="Parse a lawn program and print a brief summary.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    pv.add_argument("input", help="Path to the lawn program ('-' for stdin).")

    pg = sub.add_parser(
        "random",
        help="Generate a random lawn program for experimentation.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    pg.add_argument("output", help="Where to write the generated program.")
    pg.add_argument(
        "--seed", type=int, default=None, help="Seed for repeatable randomness."
    )
    pg.add_argument(
        "--mowers", type=int, default=None, help="Number of mowers (default: 1-4)."
    )

    return p


# -------------------------
# Commands
# -------------------------

_OutputFormat = Literal["text", "json"]


def cmd_run(input_path: str, output_format: _OutputFormat, trace: bool) -> int:
    report = run_simulation(
        load_input(input_path), trace=trace and output_format == "text"
    )

    if output_format == "json":
        print(json.dumps(report_to_dict(report), indent=2))
        return 2 if report.failed else 0

    if report.failed:
        print(f"Input error: {report.diagnostics[0]}", file=sys.stderr)
        return 2

    for n, (mower, steps) in enumerate(zip(report.mowers, report.traces), start=1):
        print(format_pose(n, mower.start) + " (start)")
        for ch, pose in zip(mower.instructions, steps):
            print(f"  {ch} -> [{pose.x}, {pose.y}] {pose.orientation.value}")

    if report.poses:
        print(format_results(report.poses))
    return 0


def cmd_validate(input_path: str) -> int:
    parsed = parse_input(load_input(input_path))
    if isinstance(parsed, ParseFailure):
        print(f"Input error: {parsed.diagnostic}", file=sys.stderr)
        return 2

    print(f"lawn: {parsed.lawn.max_x}x{parsed.lawn.max_y}")
    print(f"mowers: {len(parsed.mowers)}")
    skipped = [
        d for d in parsed.diagnostics if d.kind is DiagnosticKind.SKIPPED_RECORD
    ]
    print(f"skipped records: {len(skipped)}")
    for diag in parsed.diagnostics:
        print(f"  {diag}")
    return 0


def cmd_random(output_path: str, seed: int | None, mowers: int | None) -> None:
    dump_text(generate_random_input(seed, mowers), output_path)


def main(argv: list[str] | None = None) -> int:
    ap = build_argparser()
    args = ap.parse_args(argv)
    setup_logging(getattr(logging, args.log_level), args.log_file)

    try:
        if args.cmd == "run":
            return cmd_run(args.input, cast(_OutputFormat, args.format), args.trace)
        elif args.cmd == "validate":
            return cmd_validate(args.input)
        elif args.cmd == "random":
            cmd_random(args.output, args.seed, args.mowers)
        else:
            raise AssertionError("unreachable")
    except InputError as e:
        print(f"Input error: {e}", file=sys.stderr)
        return 2
    except OSError as e:
        print(f"File error: {e}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
