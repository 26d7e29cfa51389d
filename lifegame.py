"""
Conway's Game of Life on a fixed-size torus.

The grid wraps at every edge, so a glider leaving on the right re-enters on
the left. A `Life` owns two `Field` buffers: the current generation is read,
the next is written, and then the freshly written buffer is promoted while a
blank one takes its place.

Pattern files are plain text, one row per line, with 'o' for a live cell and
anything else for a dead one:

     o
      o
    ooo
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from pathlib import Path

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy.ndimage import convolve

# ── Glyphs ──────────────────────────────────────────────────────────────
ALIVE_GLYPH = "o"
DEAD_GLYPH = " "

# ── Convolution kernel (8 neighbours, self excluded) ──────────────────
NEIGHBOR_KERNEL: NDArray = np.array([[1, 1, 1], [1, 0, 1], [1, 1, 1]], dtype=np.int16)

# ── Pattern library ─────────────────────────────────────────────────────
PATTERNS: dict[str, list[tuple[int, int]]] = {
    "block": [(0, 0), (0, 1), (1, 0), (1, 1)],
    "blinker": [(0, 0), (0, 1), (0, 2)],
    "toad": [(0, 1), (0, 2), (0, 3), (1, 0), (1, 1), (1, 2)],
    "beacon": [
        (0, 0), (0, 1), (1, 0), (1, 1),
        (2, 2), (2, 3), (3, 2), (3, 3),
    ],
    "glider": [(0, 1), (1, 2), (2, 0), (2, 1), (2, 2)],
    "lwss": [
        (0, 1), (0, 4), (1, 0), (2, 0), (2, 4),
        (3, 0), (3, 1), (3, 2), (3, 3),
    ],
    "r_pentomino": [(0, 1), (0, 2), (1, 0), (1, 1), (2, 1)],
    "pulsar": [
        (0, 2), (0, 3), (0, 4), (0, 8), (0, 9), (0, 10),
        (2, 0), (2, 5), (2, 7), (2, 12),
        (3, 0), (3, 5), (3, 7), (3, 12),
        (4, 0), (4, 5), (4, 7), (4, 12),
        (5, 2), (5, 3), (5, 4), (5, 8), (5, 9), (5, 10),
        (7, 2), (7, 3), (7, 4), (7, 8), (7, 9), (7, 10),
        (8, 0), (8, 5), (8, 7), (8, 12),
        (9, 0), (9, 5), (9, 7), (9, 12),
        (10, 0), (10, 5), (10, 7), (10, 12),
        (12, 2), (12, 3), (12, 4), (12, 8), (12, 9), (12, 10),
    ],
}


# ═══════════════════════════════════════════════════════════════════════
#  Errors
# ═══════════════════════════════════════════════════════════════════════

class LifeError(Exception):
    """Base class for everything this module raises on purpose."""


class OutOfBoundsError(LifeError, IndexError):
    """A direct cell write addressed a cell outside the grid."""


class InvalidDimensionsError(LifeError, ValueError):
    """A grid size or an initial pattern's shape is unusable."""


class MalformedInputError(LifeError, ValueError):
    """A text pattern was empty or had rows of different lengths."""


def frame_header(generation: int) -> str:
    return f"---------- {generation}th generation"


# ═══════════════════════════════════════════════════════════════════════
#  Field
# ═══════════════════════════════════════════════════════════════════════

class RenderedRows:
    """Row strings of a field, built on demand.

    Iterating again starts over from the top row and reflects the field as
    it is at that moment.
    """

    def __init__(self, field: Field, alive: str, dead: str) -> None:
        self._field = field
        self._alive = alive
        self._dead = dead

    def __iter__(self) -> Iterator[str]:
        for row in self._field.cs:
            yield "".join(np.where(row, self._alive, self._dead).tolist())

    def __len__(self) -> int:
        return self._field.h


class Field:
    """A fixed ``h × w`` grid of cells with wrap-around reads."""

    def __init__(self, height: int, width: int) -> None:
        if height < 1 or width < 1:
            raise InvalidDimensionsError(
                f"field must be at least 1x1, got {height}x{width}"
            )
        self.h: int = height
        self.w: int = width
        self.cs: NDArray[np.bool_] = np.zeros((height, width), dtype=np.bool_)

    @classmethod
    def from_array(cls, cells: ArrayLike) -> Field:
        data = np.array(cells, dtype=np.bool_)
        if data.ndim != 2:
            raise InvalidDimensionsError(
                f"expected a 2-D pattern, got {data.ndim} dimension(s)"
            )
        field = cls(*data.shape)
        field.cs = data
        return field

    @property
    def shape(self) -> tuple[int, int]:
        return self.h, self.w

    def set(self, row: int, col: int, alive: bool) -> None:
        """Write one cell. Coordinates do not wrap."""
        if not (0 <= row < self.h and 0 <= col < self.w):
            raise OutOfBoundsError(
                f"cell ({row}, {col}) is outside a {self.h}x{self.w} field"
            )
        self.cs[row, col] = alive

    def is_alive(self, row: int, col: int) -> bool:
        """Read one cell, wrapping both coordinates around the torus."""
        return bool(self.cs[row % self.h, col % self.w])

    def will_be_alive_next(self, row: int, col: int) -> bool:
        """Apply B3/S23 to a single cell without touching the grid."""
        alive = 0
        for dr in (-1, 0, 1):
            for dc in (-1, 0, 1):
                if (dr != 0 or dc != 0) and self.is_alive(row + dr, col + dc):
                    alive += 1
        return alive == 3 or (alive == 2 and self.is_alive(row, col))

    def neighbour_counts(self) -> NDArray[np.int16]:
        """Live-neighbour count of every cell, wrapping at the edges."""
        return convolve(self.cs.astype(np.int16), NEIGHBOR_KERNEL, mode="wrap")

    def population(self) -> int:
        return int(np.count_nonzero(self.cs))

    def place(self, cells: Iterable[tuple[int, int]], top: int, left: int) -> None:
        """Stamp live cells at ``(top + dy, left + dx)``, wrapping at the edges."""
        for dy, dx in cells:
            self.cs[(top + dy) % self.h, (left + dx) % self.w] = True

    def render(self, alive: str = ALIVE_GLYPH, dead: str = DEAD_GLYPH) -> RenderedRows:
        if len(alive) != 1 or len(dead) != 1:
            raise ValueError("alive and dead glyphs must be single characters")
        return RenderedRows(self, alive, dead)

    def copy(self) -> Field:
        return Field.from_array(self.cs.copy())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Field):
            return NotImplemented
        return self.shape == other.shape and bool(np.array_equal(self.cs, other.cs))

    def __repr__(self) -> str:
        return f"Field({self.h}x{self.w}, alive={self.population()})"


# ═══════════════════════════════════════════════════════════════════════
#  Life
# ═══════════════════════════════════════════════════════════════════════

def _has_shape(rows: Sequence[Sequence[object]], height: int, width: int) -> bool:
    try:
        return len(rows) == height and all(len(row) == width for row in rows)
    except TypeError:
        return False


class Life:
    """
    Double-buffered Game of Life.

    ``current`` is only ever read during `advance`; the rule is written into
    ``next``, which then becomes ``current`` while a blank buffer is
    allocated as the new ``next``.
    """

    def __init__(
        self, height: int, width: int, initial: Sequence[Sequence[object]]
    ) -> None:
        if not _has_shape(initial, height, width):
            raise InvalidDimensionsError(
                f"initial pattern does not match a {height}x{width} field"
            )
        self.current: Field = Field.from_array(initial)
        self.next: Field = Field(height, width)
        self._generation: int = 0

    # ── Constructors ────────────────────────────────────────────────

    @classmethod
    def from_lines(cls, lines: Iterable[str], alive: str = ALIVE_GLYPH) -> Life:
        """Build a Life from text rows, ``alive`` marking live cells.

        Line terminators are stripped before the rows are compared.
        """
        return cls._from_rows([line.rstrip("\r\n") for line in lines], alive)

    @classmethod
    def from_file(cls, path: str | Path, alive: str = ALIVE_GLYPH) -> Life:
        """Load a pattern file.

        A line's terminator counts as one more dead column, so a file of
        ``n``-character lines ending in ``\\n`` gives a grid ``n + 1`` wide.
        A last line without a terminator borrows the first line's; trailing
        blank lines are ignored.
        """
        try:
            with open(path, encoding="utf-8", newline="") as fh:
                lines = fh.readlines()
        except UnicodeDecodeError as exc:
            raise MalformedInputError(f"{path} is not UTF-8 text: {exc.reason}") from exc
        while lines and not lines[-1].rstrip("\r\n"):
            lines.pop()
        if not lines:
            raise MalformedInputError(f"{path} has no lines")
        first = lines[0]
        terminator = first[len(first.rstrip("\r\n")):] or "\n"
        if not lines[-1].endswith(("\n", "\r")):
            lines[-1] += terminator
        return cls._from_rows(lines, alive)

    @classmethod
    def _from_rows(cls, rows: list[str], alive: str) -> Life:
        if not rows:
            raise MalformedInputError("pattern has no lines")
        width = len(rows[0])
        if width == 0:
            raise MalformedInputError("first line of the pattern is empty")
        for number, row in enumerate(rows[1:], start=2):
            if len(row) != width:
                raise MalformedInputError(
                    f"line {number} has {len(row)} columns, expected {width}"
                )
        cells = [[ch == alive for ch in row] for row in rows]
        return cls(len(rows), width, cells)

    @classmethod
    def from_pattern(cls, name: str, height: int, width: int) -> Life:
        """Centre a pattern from `PATTERNS` on an otherwise empty grid."""
        cells = PATTERNS[name]
        ph = max(dy for dy, _ in cells) + 1
        pw = max(dx for _, dx in cells) + 1
        if ph > height or pw > width:
            raise InvalidDimensionsError(
                f"pattern {name!r} is {ph}x{pw}, too big for {height}x{width}"
            )
        field = Field(height, width)
        field.place(cells, (height - ph) // 2, (width - pw) // 2)
        return cls(height, width, field.cs)

    @classmethod
    def random(
        cls, height: int, width: int, density: float = 0.3, seed: int | None = None
    ) -> Life:
        if not 0.0 <= density <= 1.0:
            raise ValueError(f"density must be within [0, 1], got {density}")
        if height < 1 or width < 1:
            raise InvalidDimensionsError(
                f"field must be at least 1x1, got {height}x{width}"
            )
        rng = np.random.default_rng(seed)
        cells = rng.random((height, width)) < density
        return cls(height, width, cells)

    # ── Simulation ──────────────────────────────────────────────────

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def height(self) -> int:
        return self.current.h

    @property
    def width(self) -> int:
        return self.current.w

    def advance(self) -> None:
        """Compute the next generation and promote it to current."""
        cur = self.current.cs
        n = self.current.neighbour_counts()
        n_is_3 = n == 3
        np.logical_or(n_is_3, cur & (n == 2), out=self.next.cs)

        self.current = self.next
        self.next = Field(self.height, self.width)
        self._generation += 1

    def population(self) -> int:
        return self.current.population()

    # ── Display ─────────────────────────────────────────────────────

    def current_generation(self) -> tuple[int, tuple[str, ...]]:
        """Generation number plus a snapshot of the rendered rows."""
        return self._generation, tuple(self.current.render())

    def frame(self) -> list[str]:
        """Header line followed by one line per row."""
        generation, rows = self.current_generation()
        return [frame_header(generation), *rows]

    def __repr__(self) -> str:
        return (
            f"Life({self.height}x{self.width}, gen={self._generation}, "
            f"alive={self.population()})"
        )
