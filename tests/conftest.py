# tests/conftest.py
import random

import pytest

from sudoku_board import Session
from sudoku_core import Difficulty, Puzzle

# Grille classique à solution unique, résoluble par singles
PUZZLE = (
    "530070000"
    "600195000"
    "098000060"
    "800060003"
    "400803001"
    "700020006"
    "060000280"
    "000419005"
    "000080079"
)
SOLUTION = (
    "534678912"
    "672195348"
    "198342567"
    "859761423"
    "426853791"
    "713924856"
    "961537284"
    "287419635"
    "345286179"
)


def _to_grid(s):
    return [[int(ch) for ch in s[r * 9:(r + 1) * 9]] for r in range(9)]


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def puzzle_grid():
    return _to_grid(PUZZLE)


@pytest.fixture
def solution_grid():
    return _to_grid(SOLUTION)


@pytest.fixture
def known_puzzle(puzzle_grid, solution_grid):
    return Puzzle.from_grids(puzzle_grid, solution_grid, Difficulty.EASY)


@pytest.fixture
def session(known_puzzle):
    return Session(known_puzzle)
