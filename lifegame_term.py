#!/usr/bin/env python3
"""
Terminal driver for the Game of Life.

Prints one generation per tick, clearing the screen in between.

Usage:
  python3 lifegame_term.py                       # load init.txt
  python3 lifegame_term.py glider.txt            # load another pattern file
  python3 lifegame_term.py --pattern pulsar      # built-in pattern, centred
  python3 lifegame_term.py --random 0.3 --seed 7 # random soup
  python3 lifegame_term.py --curses              # full-screen, q quits
  python3 lifegame_term.py -g 50 --no-clear      # 50 generations, then exit

Per-generation stats can be written to CSV with --stats.
"""

from __future__ import annotations

import argparse
import curses
import os
import subprocess
import sys
import time
from collections.abc import Callable
from pathlib import Path
from typing import IO, ClassVar, Protocol, TextIO

from lifegame import PATTERNS, Life, LifeError

# ── Defaults ────────────────────────────────────────────────────────────
INTERVAL: float = 0.1              # seconds between generations
DEFAULT_PATTERN_FILE: str = "init.txt"
DEFAULT_HEIGHT: int = 24
DEFAULT_WIDTH: int = 60
DEFAULT_DENSITY: float = 0.3

# Cursor home + erase display
CLEAR_SEQUENCE: str = "\x1b[H\x1b[2J"


# ═══════════════════════════════════════════════════════════════════════
#  Stats logger
# ═══════════════════════════════════════════════════════════════════════

class StatsLogger:
    """Writes per-generation telemetry to CSV."""

    HEADER: ClassVar[str] = "gen,time_s,population,event\n"

    def __init__(self, path: Path) -> None:
        self._path = path
        self._fh: IO[str] | None = None
        self._t0: float = time.monotonic()

    @property
    def active(self) -> bool:
        return self._fh is not None

    def open(self) -> None:
        try:
            self._fh = open(self._path, "w")
            self._fh.write(self.HEADER)
            self._fh.flush()
        except OSError as exc:
            print(f"Warning: stats disabled, cannot write {self._path}: {exc}",
                  file=sys.stderr)
            self._fh = None

    def log(self, gen: int, pop: int, event: str = "") -> None:
        if self._fh is None:
            return
        t = time.monotonic() - self._t0
        try:
            self._fh.write(f"{gen},{t:.2f},{pop},{event}\n")
            # Flush on events or periodically
            if event or gen % 50 == 0:
                self._fh.flush()
        except OSError:
            self.close()

    def close(self) -> None:
        if self._fh is not None:
            try:
                self._fh.close()
            except OSError:
                pass
            self._fh = None


# ═══════════════════════════════════════════════════════════════════════
#  Screen clearing
# ═══════════════════════════════════════════════════════════════════════

def ansi_clear(out: TextIO) -> None:
    out.write(CLEAR_SEQUENCE)


def command_clear(out: TextIO) -> None:
    """Shell out to the platform's clear command."""
    out.flush()
    if os.name == "nt":
        subprocess.run("cls", shell=True, check=False)
    else:
        subprocess.run(["clear"], check=False)


CLEARERS: dict[str, Callable[[TextIO], None] | None] = {
    "ansi": ansi_clear,
    "command": command_clear,
    "none": None,
}


# ═══════════════════════════════════════════════════════════════════════
#  Renderers
# ═══════════════════════════════════════════════════════════════════════

class Renderer(Protocol):
    def draw(self, life: Life) -> None: ...

    def quit_requested(self) -> bool: ...


class PlainRenderer:
    """Prints frames to a text stream, optionally clearing it first."""

    def __init__(
        self,
        out: TextIO | None = None,
        clear: Callable[[TextIO], None] | None = ansi_clear,
    ) -> None:
        self._out = out if out is not None else sys.stdout
        self._clear = clear

    def draw(self, life: Life) -> None:
        if self._clear is not None:
            self._clear(self._out)
        self._out.write("\n".join(life.frame()) + "\n")
        self._out.flush()

    def quit_requested(self) -> bool:
        return False


class CursesRenderer:
    """Full-screen renderer; rows beyond the window are cropped."""

    def __init__(self, stdscr: curses.window) -> None:
        self._scr = stdscr
        try:
            curses.curs_set(0)
        except curses.error:
            pass
        stdscr.nodelay(True)

    def draw(self, life: Life) -> None:
        max_y, max_x = self._scr.getmaxyx()
        self._scr.erase()
        for y, line in enumerate(life.frame()[:max_y]):
            try:
                self._scr.addstr(y, 0, line[: max_x - 1])
            except curses.error:
                pass
        self._scr.refresh()

    def quit_requested(self) -> bool:
        try:
            key = self._scr.getch()
        except curses.error:
            key = -1
        return key in (ord("q"), ord("Q"))


# ═══════════════════════════════════════════════════════════════════════
#  Main loop
# ═══════════════════════════════════════════════════════════════════════

def run(
    life: Life,
    renderer: Renderer,
    interval: float = INTERVAL,
    generations: int | None = None,
    logger: StatsLogger | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """Draw, wait, advance; repeat until ``generations`` is reached.

    Returns the generation shown last.
    """
    prev_pop = -1
    while True:
        renderer.draw(life)

        if logger is not None:
            pop = life.population()
            event = ""
            if life.generation == 0:
                event = "start"
            elif pop == 0 and prev_pop > 0:
                event = "extinct"
            if event or life.generation % 10 == 0:
                logger.log(life.generation, pop, event)
            prev_pop = pop

        if generations is not None and life.generation >= generations:
            break
        if renderer.quit_requested():
            break
        sleep(interval)
        life.advance()
    return life.generation


def parse_size(text: str) -> tuple[int, int]:
    """Parse ``HxW`` into ``(height, width)``."""
    try:
        h, w = (int(part) for part in text.lower().split("x"))
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected HxW, got {text!r}") from None
    if h < 1 or w < 1:
        raise argparse.ArgumentTypeError(f"size must be positive, got {text!r}")
    return h, w


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Conway's Game of Life on a wrap-around grid",
    )
    parser.add_argument(
        "pattern_file", nargs="?", type=Path, default=Path(DEFAULT_PATTERN_FILE),
        help=f"Text pattern, 'o' = alive (default: {DEFAULT_PATTERN_FILE})",
    )
    seed_group = parser.add_mutually_exclusive_group()
    seed_group.add_argument(
        "--pattern", choices=sorted(PATTERNS), default=None,
        help="Start from a built-in pattern instead of a file",
    )
    seed_group.add_argument(
        "--random", type=float, default=None, metavar="DENSITY",
        help=f"Start from random soup (e.g. {DEFAULT_DENSITY})",
    )
    parser.add_argument(
        "--size", type=parse_size, default=None, metavar="HxW",
        help=f"Grid size for --pattern/--random (default: {DEFAULT_HEIGHT}x{DEFAULT_WIDTH}); "
             "a pattern file sets its own size",
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed for --random")
    parser.add_argument(
        "--interval", type=float, default=INTERVAL * 1000, metavar="MS",
        help=f"Milliseconds between generations (default: {INTERVAL * 1000:g})",
    )
    parser.add_argument(
        "-g", "--generations", type=int, default=None,
        help="Stop after this many generations (default: run until interrupted)",
    )
    parser.add_argument(
        "--clear", choices=sorted(CLEARERS), default="ansi",
        help="How to clear the screen between frames (default: ansi)",
    )
    parser.add_argument(
        "--no-clear", dest="clear", action="store_const", const="none",
        help="Same as --clear none",
    )
    parser.add_argument(
        "--curses", action="store_true",
        help="Full-screen curses display",
    )
    parser.add_argument(
        "--stats", type=Path, default=None, metavar="CSV",
        help="Write per-generation stats to this CSV file",
    )
    return parser


def build_life(args: argparse.Namespace) -> Life:
    height, width = args.size or (DEFAULT_HEIGHT, DEFAULT_WIDTH)
    if args.pattern is not None:
        return Life.from_pattern(args.pattern, height, width)
    if args.random is not None:
        return Life.random(height, width, args.random, seed=args.seed)
    return Life.from_file(args.pattern_file)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    if args.interval < 0:
        print("Error: --interval must not be negative", file=sys.stderr)
        return 1
    if args.size is not None and args.pattern is None and args.random is None:
        print("Error: --size needs --pattern or --random; a pattern file sets its own size",
              file=sys.stderr)
        return 1

    try:
        life = build_life(args)
    except (LifeError, OSError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    logger: StatsLogger | None = None
    if args.stats is not None:
        logger = StatsLogger(args.stats)
        logger.open()

    interval = args.interval / 1000.0
    try:
        if args.curses:
            curses.wrapper(
                lambda stdscr: run(life, CursesRenderer(stdscr), interval,
                                   args.generations, logger)
            )
        else:
            print("Lifegame")
            run(life, PlainRenderer(clear=CLEARERS[args.clear]), interval,
                args.generations, logger)
    except KeyboardInterrupt:
        pass
    finally:
        if logger is not None:
            logger.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
