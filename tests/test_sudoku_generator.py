# tests/test_sudoku_generator.py
import random
import time

import pytest

import sudoku_generator
from sudoku_config import RELAX_AFTER_ATTEMPTS
from sudoku_core import (
    Difficulty,
    GenerationTimeout,
    SearchResult,
    Uniqueness,
    Unsolvable,
    check_unique,
    copy_grid,
    count_empty,
    is_complete_solution,
)
from sudoku_generator import carve, generate, generate_full_grid, generate_puzzles


def _assert_sound(puzzle):
    """Indices cohérents avec la solution, et solution unique."""
    assert is_complete_solution(puzzle.solution)
    for r in range(9):
        for c in range(9):
            v = puzzle.givens[r][c]
            assert v == 0 or v == puzzle.solution[r][c]
    check = check_unique(puzzle.givens)
    assert check.status is Uniqueness.UNIQUE
    assert check.solution == puzzle.solution_grid()


def test_full_grid_is_valid_and_reproducible():
    a = generate_full_grid(random.Random(42))
    b = generate_full_grid(random.Random(42))
    assert is_complete_solution(a)
    assert a == b


def test_full_grids_vary_with_the_seed():
    grids = {str(generate_full_grid(random.Random(seed))) for seed in range(5)}
    assert len(grids) > 1


def test_carve_keeps_a_unique_solution(rng):
    full = generate_full_grid(rng)
    puzzle, empties = carve(full, 30, rng)
    assert empties == count_empty(puzzle)
    assert empties <= 30
    check = check_unique(puzzle)
    assert check.is_unique
    assert check.solution == full


def test_carve_with_zero_target_changes_nothing(rng):
    full = generate_full_grid(rng)
    puzzle, empties = carve(full, 0, rng)
    assert empties == 0
    assert puzzle == full
    assert puzzle is not full


@pytest.mark.parametrize(
    "difficulty",
    [Difficulty.EASY, Difficulty.MEDIUM, Difficulty.HARD, Difficulty.EXPERT],
)
def test_generate_is_sound(difficulty):
    puzzle = generate(difficulty, rng=random.Random(7))
    _assert_sound(puzzle)
    assert puzzle.difficulty is difficulty
    assert 0 < puzzle.empty_count <= difficulty.target_empty


@pytest.mark.parametrize("seed", [1, 2, 3])
def test_generate_expert_is_sound_across_seeds(seed):
    puzzle = generate("expert", rng=random.Random(seed))
    _assert_sound(puzzle)
    assert puzzle.empty_count <= Difficulty.EXPERT.target_empty


def test_every_carving_step_keeps_a_unique_solution(monkeypatch, rng):
    remove = sudoku_generator._remove_keeping_unique
    statuses = []

    def checked_remove(puzzle, r, c):
        try:
            remove(puzzle, r, c)
        finally:
            statuses.append(check_unique(puzzle).status)

    monkeypatch.setattr(sudoku_generator, "_remove_keeping_unique", checked_remove)
    full = generate_full_grid(rng)
    puzzle, empties = carve(full, Difficulty.HARD.target_empty, rng)

    assert len(statuses) >= empties > 0
    assert all(s is Uniqueness.UNIQUE for s in statuses)


def test_full_grid_without_solution_raises(monkeypatch):
    monkeypatch.setattr(
        sudoku_generator, "search", lambda grid, limit=1, rng=None: SearchResult(0, None, 0)
    )
    with pytest.raises(Unsolvable):
        generate_full_grid(random.Random(1))


def test_generate_is_reproducible_with_a_seed():
    a = generate(Difficulty.EASY, rng=random.Random(99))
    b = generate(Difficulty.EASY, rng=random.Random(99))
    assert a == b


def test_generate_relaxes_target_after_repeated_failures(monkeypatch):
    targets = []

    def stubborn_carve(solution, target_empty, rng=None, deadline=None):
        targets.append(target_empty)
        return copy_grid(solution), 20

    monkeypatch.setattr(sudoku_generator, "carve", stubborn_carve)
    puzzle = generate(Difficulty.EASY, rng=random.Random(1), target_empty=25)

    assert targets[:RELAX_AFTER_ATTEMPTS + 1] == [25] * (RELAX_AFTER_ATTEMPTS + 1)
    assert targets[RELAX_AFTER_ATTEMPTS + 1:] == [24, 23, 22, 21, 20]
    assert puzzle.difficulty is Difficulty.EASY


def test_generate_raises_when_attempts_run_out(monkeypatch):
    monkeypatch.setattr(
        sudoku_generator, "carve", lambda solution, target, rng=None, deadline=None: (copy_grid(solution), 0)
    )
    with pytest.raises(GenerationTimeout):
        generate(Difficulty.MEDIUM, rng=random.Random(1), max_attempts=3)


def _slow_carve(solution, target_empty, rng=None, deadline=None):
    time.sleep(0.01)
    return copy_grid(solution), 0


def test_generate_timeout_raises(monkeypatch):
    monkeypatch.setattr(sudoku_generator, "carve", _slow_carve)
    with pytest.raises(GenerationTimeout):
        generate(Difficulty.EASY, rng=random.Random(1), timeout=0.001)


def test_generate_timeout_best_effort_returns_best_so_far(monkeypatch):
    monkeypatch.setattr(sudoku_generator, "carve", _slow_carve)
    puzzle = generate(Difficulty.EASY, rng=random.Random(1), timeout=0.001, best_effort=True)
    assert puzzle.empty_count == 0
    assert is_complete_solution(puzzle.solution)


def test_generate_rejects_unknown_difficulty():
    with pytest.raises(ValueError):
        generate("legendary")


def test_generate_puzzles_are_distinct():
    puzzles = generate_puzzles(Difficulty.EASY, 3, rng=random.Random(5))
    assert len(puzzles) == 3
    assert len({p.signature() for p in puzzles}) == 3
    for p in puzzles:
        _assert_sound(p)
