# sudoku_core.py
"""
Moteur Sudoku commun :
- grille 9x9 (0 = case vide)
- UNITS / PEERS et requêtes de géométrie
- solveur backtracking à bitsets (MRV)
- test d'unicité plafonné à 2 solutions
- erreurs du moteur
"""

from __future__ import annotations

import hashlib
import random
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence, Set, Tuple

from sudoku_config import TIER_TARGET_EMPTY, UNIQUENESS_LIMIT

Grid = List[List[int]]
Pos = Tuple[int, int]
GridTuple = Tuple[Tuple[int, ...], ...]

DIGITS = range(1, 10)
FULL_MASK = (1 << 9) - 1  # 9 bits, bit (v-1) pour le chiffre v


# ---------- Erreurs ----------

class SudokuError(Exception):
    """Erreur de base du moteur."""


class Unsolvable(SudokuError):
    """La grille n'admet aucune solution."""


class NotUnique(SudokuError):
    """La grille admet plusieurs solutions (signal interne du creusage)."""


class GenerationTimeout(SudokuError, RuntimeError):
    """Le générateur n'a pas convergé dans le budget de tentatives / de temps."""


class IllegalEdit(SudokuError, ValueError):
    """Entrée mal formée pour une opération de session (coordonnées, chiffre, mode)."""


# ---------- UNITS & PEERS ----------

def box_index(r: int, c: int) -> int:
    return (r // 3) * 3 + (c // 3)


ROWS: List[List[Pos]] = [[(r, c) for c in range(9)] for r in range(9)]
COLS: List[List[Pos]] = [[(r, c) for r in range(9)] for c in range(9)]
BOXES: List[List[Pos]] = [
    [(br + dr, bc + dc) for dr in range(3) for dc in range(3)]
    for br in range(0, 9, 3)
    for bc in range(0, 9, 3)
]

# 27 unités : lignes, puis colonnes, puis blocs
UNITS: List[List[Pos]] = ROWS + COLS + BOXES

PEERS: Dict[Pos, Set[Pos]] = {}
for _r in range(9):
    for _c in range(9):
        _cells = set(ROWS[_r]) | set(COLS[_c]) | set(BOXES[box_index(_r, _c)])
        _cells.discard((_r, _c))
        PEERS[(_r, _c)] = _cells
del _r, _c, _cells


def peers(r: int, c: int) -> Set[Pos]:
    """Les 20 cases qui partagent une ligne, une colonne ou un bloc avec (r, c)."""
    return set(PEERS[(r, c)])


def units_of(r: int, c: int) -> Tuple[List[Pos], List[Pos], List[Pos]]:
    """(ligne, colonne, bloc) contenant (r, c)."""
    return list(ROWS[r]), list(COLS[c]), list(BOXES[box_index(r, c)])


# ---------- Utilitaires de grille ----------

def empty_grid() -> Grid:
    return [[0] * 9 for _ in range(9)]


def copy_grid(grid: Sequence[Sequence[int]]) -> Grid:
    return [list(row) for row in grid]


def validate_grid(grid: Sequence[Sequence[int]]) -> None:
    """Lève ValueError si la grille n'est pas un 9x9 de valeurs 0..9."""
    if len(grid) != 9 or any(len(row) != 9 for row in grid):
        raise ValueError("La grille doit faire 9x9")
    for r, row in enumerate(grid):
        for c, v in enumerate(row):
            if not isinstance(v, int) or not 0 <= v <= 9:
                raise ValueError(f"Valeur invalide {v!r} en ({r}, {c})")


def count_empty(grid: Sequence[Sequence[int]]) -> int:
    return sum(1 for row in grid for v in row if v == 0)


def candidates(grid: Sequence[Sequence[int]], r: int, c: int) -> List[int]:
    """Chiffres absents des trois unités de (r, c)."""
    used = {grid[pr][pc] for (pr, pc) in PEERS[(r, c)]}
    return [v for v in DIGITS if v not in used]


def grid_candidates(grid: Sequence[Sequence[int]]) -> Dict[Pos, Set[int]]:
    """Retourne un dict {(r,c): {candidats}} pour les cellules vides."""
    return {
        (r, c): set(candidates(grid, r, c))
        for r in range(9)
        for c in range(9)
        if grid[r][c] == 0
    }


def is_complete_solution(grid: Sequence[Sequence[int]]) -> bool:
    """True si chaque unité contient exactement les chiffres 1..9."""
    full = set(DIGITS)
    return all({grid[r][c] for (r, c) in unit} == full for unit in UNITS)


def canon_str(grid: Sequence[Sequence[int]]) -> str:
    """Chaîne canonique pour une grille (ligne par ligne)."""
    return "".join("".join(str(v) for v in row) for row in grid)


# ---------- Niveaux & puzzle ----------

class Difficulty(Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    EXPERT = "expert"

    @property
    def target_empty(self) -> int:
        return TIER_TARGET_EMPTY[self.value]

    @classmethod
    def parse(cls, value: str | Difficulty) -> Difficulty:
        """Accepte un membre ou un nom ("Hard", "expert"...), insensible à la casse."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Difficulté inconnue : {value!r}") from None


@dataclass(frozen=True)
class Puzzle:
    """Indices + solution complète, figés une fois générés."""

    givens: GridTuple
    solution: GridTuple
    difficulty: Optional[Difficulty] = None

    @classmethod
    def from_grids(
        cls,
        givens: Sequence[Sequence[int]],
        solution: Sequence[Sequence[int]],
        difficulty: Optional[Difficulty] = None,
    ) -> Puzzle:
        validate_grid(givens)
        validate_grid(solution)
        return cls(
            tuple(tuple(row) for row in givens),
            tuple(tuple(row) for row in solution),
            difficulty,
        )

    @property
    def empty_count(self) -> int:
        return count_empty(self.givens)

    def givens_grid(self) -> Grid:
        return copy_grid(self.givens)

    def solution_grid(self) -> Grid:
        return copy_grid(self.solution)

    def signature(self) -> str:
        """Hash hex (64) des indices, sert à dédoublonner une série."""
        return hashlib.sha256(canon_str(self.givens).encode("utf-8")).hexdigest()


# ====================================================
#   SOLVEUR : BITSETS + MRV
# ====================================================

@dataclass
class SearchResult:
    count: int
    solution: Optional[Grid]
    guesses: int = 0  # points de choix à plus d'un candidat visités


class Uniqueness(Enum):
    UNIQUE = "unique"
    NOT_UNIQUE = "not_unique"
    UNSOLVABLE = "unsolvable"


@dataclass
class UniqueCheck:
    status: Uniqueness
    solution: Optional[Grid] = None

    @property
    def is_unique(self) -> bool:
        return self.status is Uniqueness.UNIQUE


def _init_masks(grid: Sequence[Sequence[int]]):
    """
    Masques de chiffres utilisés par ligne / colonne / bloc + liste des vides.
    Retourne None si deux indices se contredisent déjà.
    """
    row_used = [0] * 9
    col_used = [0] * 9
    box_used = [0] * 9
    empties: List[Pos] = []
    for r in range(9):
        for c in range(9):
            v = grid[r][c]
            if not v:
                empties.append((r, c))
                continue
            b = 1 << (v - 1)
            bi = box_index(r, c)
            if (row_used[r] | col_used[c] | box_used[bi]) & b:
                return None
            row_used[r] |= b
            col_used[c] |= b
            box_used[bi] |= b
    return row_used, col_used, box_used, empties


def search(
    grid: Sequence[Sequence[int]],
    limit: int = 1,
    rng: Optional[random.Random] = None,
) -> SearchResult:
    """
    Backtracking en profondeur : compte les solutions jusqu'à `limit`
    et garde la première trouvée.

    La case choisie est celle qui a le moins de candidats (à égalité, la plus
    petite en ordre ligne-colonne). Les chiffres sont essayés en ordre croissant,
    ou dans un ordre mélangé par `rng` s'il est fourni.
    La grille d'entrée n'est jamais modifiée.
    """
    if limit < 1:
        raise ValueError("limit doit être >= 1")
    validate_grid(grid)

    masks = _init_masks(grid)
    if masks is None:
        return SearchResult(0, None, 0)
    row_used, col_used, box_used, empties = masks

    work = copy_grid(grid)
    n = len(empties)
    count = 0
    guesses = 0
    first: Optional[Grid] = None

    def dfs(depth: int) -> None:
        nonlocal count, guesses, first
        if depth == n:
            count += 1
            if first is None:
                first = copy_grid(work)
            return

        # MRV : case la plus contrainte parmi empties[depth:]
        best_k = -1
        best_mask = 0
        best_n = 10
        for k in range(depth, n):
            r, c = empties[k]
            mask = FULL_MASK ^ (row_used[r] | col_used[c] | box_used[box_index(r, c)])
            cnt = mask.bit_count()
            if cnt == 0:
                return
            if cnt < best_n or (cnt == best_n and empties[k] < empties[best_k]):
                best_k, best_mask, best_n = k, mask, cnt
        empties[depth], empties[best_k] = empties[best_k], empties[depth]
        r, c = empties[depth]
        bi = box_index(r, c)

        digits = [v for v in DIGITS if best_mask & (1 << (v - 1))]
        if rng is not None:
            rng.shuffle(digits)
        if len(digits) > 1:
            guesses += 1

        for v in digits:
            b = 1 << (v - 1)
            row_used[r] |= b
            col_used[c] |= b
            box_used[bi] |= b
            work[r][c] = v
            dfs(depth + 1)
            work[r][c] = 0
            row_used[r] ^= b
            col_used[c] ^= b
            box_used[bi] ^= b
            if count >= limit:
                return

    dfs(0)
    return SearchResult(count, first, guesses)


def solve_one(grid: Sequence[Sequence[int]]) -> Grid:
    """Première solution trouvée ; lève Unsolvable s'il n'y en a aucune."""
    result = search(grid, 1)
    if result.solution is None:
        raise Unsolvable("La grille n'admet aucune solution")
    return result.solution


def check_unique(grid: Sequence[Sequence[int]]) -> UniqueCheck:
    """Unicité en s'arrêtant à la 2e solution (jamais d'énumération complète)."""
    result = search(grid, UNIQUENESS_LIMIT)
    if result.count == 0:
        return UniqueCheck(Uniqueness.UNSOLVABLE)
    if result.count == 1:
        return UniqueCheck(Uniqueness.UNIQUE, result.solution)
    return UniqueCheck(Uniqueness.NOT_UNIQUE)


def count_solutions(grid: Sequence[Sequence[int]], limit: int = 2) -> int:
    return search(grid, limit).count


def has_unique_solution(grid: Sequence[Sequence[int]]) -> bool:
    return check_unique(grid).is_unique
