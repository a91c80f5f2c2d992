# tests/test_sudoku_difficulty.py
import random

import pytest

from sudoku_core import Difficulty, Unsolvable, count_empty, empty_grid
from sudoku_difficulty import LogicSolver, _tier, difficulty_score, rate
from sudoku_generator import generate


def test_singles_only_puzzle_rates_easy(known_puzzle):
    rating = rate(known_puzzle)
    assert rating.solved_logically
    assert rating.guesses == 0
    assert rating.techniques["single"] == known_puzzle.empty_count
    assert rating.score >= known_puzzle.empty_count
    assert rating.tier is Difficulty.EASY
    assert rating.techniques == {"single": known_puzzle.empty_count}


def test_rate_accepts_a_plain_grid(known_puzzle, puzzle_grid):
    assert rate(puzzle_grid) == rate(known_puzzle)


def test_empty_grid_needs_guessing():
    rating = rate(empty_grid())
    assert not rating.solved_logically
    assert rating.guesses >= 1
    assert rating.tier is Difficulty.EXPERT
    assert rating.score >= 20


def test_rate_rejects_unsolvable_grids():
    grid = empty_grid()
    grid[0][0] = 7
    grid[0][8] = 7
    with pytest.raises(Unsolvable):
        rate(grid)


def test_logic_solver_place_updates_peer_candidates(puzzle_grid):
    solver = LogicSolver(puzzle_grid)
    solver.place(0, 2, 4)
    assert (0, 2) not in solver.cands
    assert 4 not in solver.cands[(0, 3)]
    assert 4 not in solver.cands[(2, 0)]
    assert solver.grid[0][2] == 4


def test_logic_solver_reaches_the_solution(puzzle_grid, solution_grid):
    solver = LogicSolver(puzzle_grid)
    assert solver.run()
    assert solver.grid == solution_grid
    assert count_empty(solver.grid) == 0


def test_difficulty_score_weights():
    assert difficulty_score({"single": 3}) == 3
    assert difficulty_score({"single": 1, "xwing": 1}, guesses=1) == 1 + 8 + 20


def test_generated_puzzle_can_be_rated():
    puzzle = generate(Difficulty.MEDIUM, rng=random.Random(3))
    rating = rate(puzzle)
    assert rating.score > 0
    assert rating.tier in set(Difficulty)


# ---------- techniques ----------

XWING_GRID = (
    "100000569"
    "492056108"
    "056109240"
    "009640801"
    "064010000"
    "218035604"
    "040500016"
    "905061402"
    "621000005"
)


def _grid(s):
    return [[int(ch) for ch in s[r * 9:(r + 1) * 9]] for r in range(9)]


def test_pointing_removes_digit_from_the_rest_of_the_row():
    solver = LogicSolver(empty_grid())
    for p in [(0, 2), (1, 0), (1, 1), (1, 2), (2, 0), (2, 1), (2, 2)]:
        solver.cands[p].discard(5)

    assert solver.locked_candidates() == 6
    for c in range(3, 9):
        assert 5 not in solver.cands[(0, c)]
    assert 5 in solver.cands[(1, 5)]
    assert solver.used["pointing"] == 1


def test_claiming_removes_digit_from_the_rest_of_the_box():
    solver = LogicSolver(empty_grid())
    for c in range(3, 9):
        solver.cands[(0, c)].discard(7)

    assert solver.locked_candidates() == 6
    for r in (1, 2):
        for c in range(3):
            assert 7 not in solver.cands[(r, c)]
    assert solver.cands[(0, 0)] == set(range(1, 10))
    assert solver.used["pointing"] == 1


def test_naked_pair_clears_its_row_and_box():
    solver = LogicSolver(empty_grid())
    solver.cands[(0, 0)] = {1, 2}
    solver.cands[(0, 1)] = {1, 2}

    # 7 cases de la ligne + 6 autres cases du bloc, deux chiffres chacune
    assert solver.naked_pairs() == 26
    assert solver.cands[(0, 8)] == set(range(3, 10))
    assert solver.cands[(2, 2)] == set(range(3, 10))
    assert solver.cands[(4, 0)] == set(range(1, 10))
    assert solver.used["naked_pair"] == 2


def test_hidden_pair_strips_other_candidates():
    solver = LogicSolver(empty_grid())
    for c in range(2, 9):
        solver.cands[(0, c)] -= {3, 4}

    assert solver.hidden_pairs() == 14
    assert solver.cands[(0, 0)] == {3, 4}
    assert solver.cands[(0, 1)] == {3, 4}
    assert solver.used["hidden_pair"] == 1


def test_xwing_eliminations_on_known_grid():
    solver = LogicSolver(_grid(XWING_GRID))
    assert solver.xwing() == 8
    assert solver.used["xwing"] >= 1


def test_xwing_grid_rates_hard():
    rating = rate(_grid(XWING_GRID))
    assert rating.solved_logically
    assert rating.tier is Difficulty.HARD
    assert rating.techniques["xwing"] >= 1
    assert rating.score == difficulty_score(rating.techniques)


def test_techniques_find_nothing_on_a_solved_grid(puzzle_grid):
    solver = LogicSolver(puzzle_grid)
    solver.run()
    assert solver.solved
    assert solver.locked_candidates() == 0
    assert solver.naked_pairs() == 0
    assert solver.hidden_pairs() == 0
    assert solver.xwing() == 0


def test_tier_follows_the_hardest_technique():
    assert _tier({"single": 10}, True) is Difficulty.EASY
    assert _tier({"single": 10, "pointing": 1}, True) is Difficulty.MEDIUM
    assert _tier({"naked_pair": 1}, True) is Difficulty.MEDIUM
    assert _tier({"hidden_pair": 2}, True) is Difficulty.MEDIUM
    assert _tier({"pointing": 1, "xwing": 1}, True) is Difficulty.HARD
    assert _tier({"single": 3}, False) is Difficulty.EXPERT
