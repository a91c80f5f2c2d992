# sudoku_difficulty.py
"""
Estimation de la difficulté d'un puzzle, indépendamment du niveau demandé au
générateur.

Résolution « humaine » par techniques de coût croissant :
singles (nus / cachés), candidats verrouillés (pointing / claiming),
paires nues, paires cachées, X-Wing. Si la logique bloque, on termine par
le solveur et on compte les essais (points de choix).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from itertools import combinations
from typing import Dict, List, Sequence, Set, Tuple, Union

from sudoku_config import GUESS_WEIGHT, TECHNIQUE_WEIGHTS
from sudoku_core import (
    BOXES,
    COLS,
    DIGITS,
    PEERS,
    ROWS,
    UNITS,
    Difficulty,
    Grid,
    Pos,
    Puzzle,
    Unsolvable,
    box_index,
    copy_grid,
    grid_candidates,
    search,
    validate_grid,
)


@dataclass
class Rating:
    score: int
    tier: Difficulty
    techniques: Dict[str, int] = field(default_factory=dict)
    guesses: int = 0
    solved_logically: bool = True


# ====================================================
#   RÉSOLUTION LOGIQUE (candidats persistants)
# ====================================================

class LogicSolver:
    """
    Grille + candidats des cases vides. Les éliminations sont conservées
    d'une étape à l'autre ; poser un chiffre le retire des candidats des pairs.
    """

    def __init__(self, grid: Sequence[Sequence[int]]):
        self.grid: Grid = copy_grid(grid)
        self.cands: Dict[Pos, Set[int]] = grid_candidates(self.grid)
        self.used: Dict[str, int] = {name: 0 for name in TECHNIQUE_WEIGHTS}

    # ---------- état ----------

    @property
    def solved(self) -> bool:
        return not self.cands

    @property
    def stuck(self) -> bool:
        """Contradiction : une case vide sans candidat."""
        return any(not opts for opts in self.cands.values())

    def place(self, r: int, c: int, v: int) -> None:
        self.grid[r][c] = v
        del self.cands[(r, c)]
        for p in PEERS[(r, c)]:
            opts = self.cands.get(p)
            if opts is not None:
                opts.discard(v)

    def _eliminate(self, cells, v: int) -> int:
        removed = 0
        for p in cells:
            opts = self.cands.get(p)
            if opts is not None and v in opts:
                opts.discard(v)
                removed += 1
        return removed

    def _record(self, name: str, found: List[int]) -> int:
        """
        Compte une application de la technique par motif qui a éliminé au
        moins un candidat ; retourne le total de candidats éliminés.
        """
        self.used[name] += sum(1 for n in found if n)
        return sum(found)

    # ---------- singles ----------

    def naked_single(self) -> bool:
        for (r, c), opts in sorted(self.cands.items()):
            if len(opts) == 1:
                self.place(r, c, next(iter(opts)))
                self.used["single"] += 1
                return True
        return False

    def hidden_single(self) -> bool:
        for unit in UNITS:
            for v in DIGITS:
                places = [p for p in unit if v in self.cands.get(p, ())]
                if len(places) == 1:
                    r, c = places[0]
                    self.place(r, c, v)
                    self.used["single"] += 1
                    return True
        return False

    # ---------- éliminations ----------

    def locked_candidates(self) -> int:
        """Pointing (bloc -> ligne/colonne) puis claiming (ligne/colonne -> bloc)."""
        found: List[int] = []
        for b, box in enumerate(BOXES):
            for v in DIGITS:
                pos = [p for p in box if v in self.cands.get(p, ())]
                if not pos:
                    continue
                rows = {r for (r, _c) in pos}
                cols = {c for (_r, c) in pos}
                if len(rows) == 1:
                    line = ROWS[next(iter(rows))]
                    found.append(self._eliminate([p for p in line if box_index(*p) != b], v))
                if len(cols) == 1:
                    line = COLS[next(iter(cols))]
                    found.append(self._eliminate([p for p in line if box_index(*p) != b], v))
        for line in ROWS + COLS:
            for v in DIGITS:
                pos = [p for p in line if v in self.cands.get(p, ())]
                boxes = {box_index(*p) for p in pos}
                if len(boxes) == 1:
                    b = next(iter(boxes))
                    found.append(self._eliminate([p for p in BOXES[b] if p not in line], v))
        return self._record("pointing", found)

    def naked_pairs(self) -> int:
        found: List[int] = []
        for unit in UNITS:
            pairs: Dict[Tuple[int, ...], List[Pos]] = {}
            for p in unit:
                opts = self.cands.get(p)
                if opts is not None and len(opts) == 2:
                    pairs.setdefault(tuple(sorted(opts)), []).append(p)
            for key, cells in pairs.items():
                if len(cells) != 2:
                    continue
                others = [p for p in unit if p not in cells]
                found.append(sum(self._eliminate(others, v) for v in key))
        return self._record("naked_pair", found)

    def hidden_pairs(self) -> int:
        found: List[int] = []
        for unit in UNITS:
            pos_by_val = {v: [p for p in unit if v in self.cands.get(p, ())] for v in DIGITS}
            twos = [v for v in DIGITS if len(pos_by_val[v]) == 2]
            for v1, v2 in combinations(twos, 2):
                if pos_by_val[v1] != pos_by_val[v2]:
                    continue
                keep = {v1, v2}
                removed = 0
                for p in pos_by_val[v1]:
                    extra = self.cands[p] - keep
                    if extra:
                        self.cands[p] = set(keep)
                        removed += len(extra)
                found.append(removed)
        return self._record("hidden_pair", found)

    def xwing(self) -> int:
        found: List[int] = []
        for lines, cross in ((ROWS, COLS), (COLS, ROWS)):
            for v in DIGITS:
                spots = []
                for i, line in enumerate(lines):
                    idx = tuple(j for j, p in enumerate(line) if v in self.cands.get(p, ()))
                    if len(idx) == 2:
                        spots.append((i, idx))
                for (i1, idx1), (i2, idx2) in combinations(spots, 2):
                    if idx1 != idx2:
                        continue
                    targets = [
                        p
                        for j in idx1
                        for k, p in enumerate(cross[j])
                        if k not in (i1, i2)
                    ]
                    found.append(self._eliminate(targets, v))
        return self._record("xwing", found)

    # ---------- boucle ----------

    def step(self) -> bool:
        """Applique la technique la moins chère qui progresse."""
        if self.naked_single() or self.hidden_single():
            return True
        for technique in (self.locked_candidates, self.naked_pairs, self.hidden_pairs, self.xwing):
            if technique():
                return True
        return False

    def run(self) -> bool:
        while not self.solved and not self.stuck:
            if not self.step():
                break
        return self.solved


# ====================================================
#   NOTE
# ====================================================

def difficulty_score(used: Dict[str, int], guesses: int = 0) -> int:
    return sum(TECHNIQUE_WEIGHTS[k] * n for k, n in used.items()) + GUESS_WEIGHT * guesses


def _tier(used: Dict[str, int], solved_logically: bool) -> Difficulty:
    if not solved_logically:
        return Difficulty.EXPERT
    if used.get("xwing", 0):
        return Difficulty.HARD
    if used.get("pointing", 0) or used.get("naked_pair", 0) or used.get("hidden_pair", 0):
        return Difficulty.MEDIUM
    return Difficulty.EASY


def rate(puzzle: Union[Puzzle, Sequence[Sequence[int]]]) -> Rating:
    """
    Note un puzzle (ou une grille 9x9, 0 = vide).
    Lève Unsolvable si la grille n'a aucune solution.
    """
    grid = puzzle.givens if isinstance(puzzle, Puzzle) else puzzle
    validate_grid(grid)
    if search(grid, 1).count == 0:
        raise Unsolvable("Impossible de noter une grille sans solution")

    solver = LogicSolver(grid)
    solved = solver.run()
    guesses = 0
    if not solved:
        guesses = max(1, search(solver.grid, 1).guesses)

    used = {k: n for k, n in solver.used.items() if n}
    return Rating(
        score=difficulty_score(used, guesses),
        tier=_tier(used, solved),
        techniques=used,
        guesses=guesses,
        solved_logically=solved,
    )
