"""Life: construction, double buffering and known patterns."""

from __future__ import annotations

import numpy as np
import pytest

from lifegame import PATTERNS, Field, InvalidDimensionsError, Life


def _life_with(height: int, width: int, cells: list[tuple[int, int]]) -> Life:
    f = Field(height, width)
    f.place(cells, 0, 0)
    return Life(height, width, f.cs)


def _alive(life: Life) -> set[tuple[int, int]]:
    ys, xs = np.nonzero(life.current.cs)
    return set(zip(ys.tolist(), xs.tolist()))


def test_new_life_starts_at_generation_zero():
    life = Life(2, 3, [[True, False, False], [False, False, True]])
    assert life.generation == 0
    assert (life.height, life.width) == (2, 3)
    assert life.current.shape == life.next.shape == (2, 3)
    assert life.next.population() == 0
    assert _alive(life) == {(0, 0), (1, 2)}


@pytest.mark.parametrize(
    "h, w, initial",
    [
        (3, 2, [[0, 0], [0, 0]]),
        (2, 3, [[0, 0], [0, 0]]),
        (2, 2, [[0, 0], [0, 0, 0]]),
        (2, 2, [[0, 0], [0]]),
        (2, 2, []),
        (2, 2, [0, 0]),
    ],
)
def test_mismatched_initial_pattern(h, w, initial):
    with pytest.raises(InvalidDimensionsError):
        Life(h, w, initial)


def test_initial_pattern_is_copied():
    initial = np.zeros((3, 3), dtype=bool)
    life = Life(3, 3, initial)
    initial[1, 1] = True
    assert life.population() == 0


def test_dead_grid_stays_dead():
    life = Life(6, 7, np.zeros((6, 7), dtype=bool))
    for _ in range(10):
        life.advance()
    assert life.population() == 0
    assert life.generation == 10


def test_block_is_still():
    cells = [(1, 1), (1, 2), (2, 1), (2, 2)]
    life = _life_with(4, 4, cells)
    life.advance()
    assert _alive(life) == set(cells)
    life.advance()
    assert _alive(life) == set(cells)


def test_blinker_has_period_two():
    life = _life_with(5, 5, [(2, 1), (2, 2), (2, 3)])
    start = _alive(life)
    life.advance()
    assert _alive(life) == {(1, 2), (2, 2), (3, 2)}
    life.advance()
    assert _alive(life) == start


def test_beacon_returns_after_two_generations():
    # two diagonal blocks with their inner corners missing
    cells = [(1, 1), (1, 2), (2, 1), (3, 4), (4, 3), (4, 4)]
    life = _life_with(6, 6, cells)
    life.advance()
    assert _alive(life) == set(cells) | {(2, 2), (3, 3)}
    life.advance()
    assert _alive(life) == set(cells)


def test_glider_moves_diagonally_on_torus():
    life = _life_with(10, 10, PATTERNS["glider"])
    start = _alive(life)
    for _ in range(4):
        life.advance()
    assert _alive(life) == {((r + 1) % 10, (c + 1) % 10) for r, c in start}
    for _ in range(36):
        life.advance()
    assert _alive(life) == start
    assert life.generation == 40


def test_advance_matches_per_cell_rule():
    life = Life.random(12, 17, 0.35, seed=5)
    before = life.current.copy()
    life.advance()
    for r in range(12):
        for c in range(17):
            assert life.current.is_alive(r, c) == before.will_be_alive_next(r, c)


def test_advance_counts_every_generation():
    life = Life.random(5, 5, 0.5, seed=1)
    for n in range(1, 8):
        life.advance()
        assert life.generation == n


def test_buffers_never_share_storage():
    life = Life.random(8, 8, 0.5, seed=2)
    for _ in range(5):
        old_current = life.current
        life.advance()
        assert life.current is not life.next
        assert not np.shares_memory(life.current.cs, life.next.cs)
        assert life.next.population() == 0
        assert life.current.shape == life.next.shape
        assert not np.shares_memory(life.current.cs, old_current.cs)


def test_current_generation_snapshot():
    life = _life_with(3, 4, [(0, 0), (2, 3)])
    gen, rows = life.current_generation()
    assert gen == 0
    assert rows == ("o   ", "    ", "   o")
    life.advance()
    # the earlier snapshot is unaffected
    assert rows == ("o   ", "    ", "   o")
    assert life.current_generation() == (1, ("    ", "    ", "    "))


def test_frame_has_header_then_rows():
    life = _life_with(2, 3, [(0, 1)])
    life.advance()
    assert life.frame() == ["---------- 1th generation", "   ", "   "]


def test_from_pattern_centres():
    life = Life.from_pattern("block", 6, 6)
    assert _alive(life) == {(2, 2), (2, 3), (3, 2), (3, 3)}


def test_from_pattern_too_big():
    with pytest.raises(InvalidDimensionsError):
        Life.from_pattern("pulsar", 10, 10)


def test_from_pattern_unknown():
    with pytest.raises(KeyError):
        Life.from_pattern("nope", 10, 10)


def test_pulsar_has_period_three():
    life = Life.from_pattern("pulsar", 19, 19)
    start = _alive(life)
    life.advance()
    assert _alive(life) != start
    life.advance()
    life.advance()
    assert _alive(life) == start


def test_random_is_reproducible():
    a = Life.random(10, 10, 0.4, seed=9)
    b = Life.random(10, 10, 0.4, seed=9)
    assert a.current == b.current
    assert Life.random(4, 4, 0.0).population() == 0
    assert Life.random(4, 4, 1.0).population() == 16


@pytest.mark.parametrize("density", [-0.1, 1.5])
def test_random_rejects_bad_density(density):
    with pytest.raises(ValueError):
        Life.random(4, 4, density)
