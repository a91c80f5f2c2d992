# sudoku_generator.py
"""
Génération de puzzles :
1. grille complète aléatoire (backtracking à ordre de chiffres mélangé),
2. creusage case par case en gardant une solution unique,
3. relance avec cible assouplie quand une tentative n'atteint pas la cible.
"""

from __future__ import annotations

import logging
import random
import time
from typing import List, Optional, Set, Tuple

from sudoku_config import (
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_TIMEOUT,
    RELAX_AFTER_ATTEMPTS,
)
from sudoku_core import (
    Difficulty,
    GenerationTimeout,
    Grid,
    NotUnique,
    Pos,
    Puzzle,
    Unsolvable,
    check_unique,
    copy_grid,
    count_empty,
    empty_grid,
    search,
)
from sudoku_difficulty import rate
from sudoku_logging import get_logger

log = get_logger("generator")


# ---------- Grille complète ----------

def generate_full_grid(rng: Optional[random.Random] = None) -> Grid:
    """Grille complète valide : première solution d'une recherche à ordre mélangé."""
    rng = rng or random.Random()
    result = search(empty_grid(), 1, rng=rng)
    if result.solution is None:
        raise Unsolvable("Aucune grille complète trouvée depuis une grille vide")
    return result.solution


# ---------- Creusage ----------

def _remove_keeping_unique(puzzle: Grid, r: int, c: int) -> None:
    """Vide (r, c) ; remet la valeur et lève NotUnique si l'unicité est perdue."""
    keep = puzzle[r][c]
    puzzle[r][c] = 0
    if not check_unique(puzzle).is_unique:
        puzzle[r][c] = keep
        raise NotUnique(f"retrait de ({r}, {c}) impossible")


def carve(
    solution: Grid,
    target_empty: int,
    rng: Optional[random.Random] = None,
    deadline: Optional[float] = None,
) -> Tuple[Grid, int]:
    """
    Vide des cases de `solution` tant que le puzzle reste à solution unique.

    Chaque case remplie est tirée au plus une fois (ordre aléatoire) ; une case
    dont le retrait casse l'unicité est remise et n'est plus retentée.
    Retourne (puzzle, nb de cases vides). S'arrête à `target_empty`, quand plus
    aucune case n'est retirable, ou quand `deadline` (time.monotonic) est passé.
    """
    rng = rng or random.Random()
    puzzle = copy_grid(solution)
    empties = count_empty(puzzle)

    cells: List[Pos] = [(r, c) for r in range(9) for c in range(9) if puzzle[r][c]]
    rng.shuffle(cells)
    blocked: Set[Pos] = set()

    for (r, c) in cells:
        if empties >= target_empty:
            break
        if deadline is not None and time.monotonic() > deadline:
            break
        try:
            _remove_keeping_unique(puzzle, r, c)
        except NotUnique:
            blocked.add((r, c))
        else:
            empties += 1

    log.debug("creusage : %d vides (cible %d), %d cases bloquées", empties, target_empty, len(blocked))
    return puzzle, empties


# ---------- Génération ----------

def _to_puzzle(best: Tuple[Grid, Grid, int], difficulty: Difficulty) -> Puzzle:
    givens, solution, _empties = best
    puzzle = Puzzle.from_grids(givens, solution, difficulty)
    if log.isEnabledFor(logging.DEBUG):
        rating = rate(puzzle)
        log.debug(
            "niveau demandé %s, estimé %s (score %d, %d essai(s))",
            difficulty.value, rating.tier.value, rating.score, rating.guesses,
        )
    return puzzle


def generate(
    difficulty: Difficulty | str = Difficulty.MEDIUM,
    rng: Optional[random.Random] = None,
    timeout: Optional[float] = DEFAULT_TIMEOUT,
    max_attempts: Optional[int] = None,
    best_effort: bool = False,
    target_empty: Optional[int] = None,
) -> Puzzle:
    """
    Génère un puzzle à solution unique pour le niveau demandé.

    Chaque tentative part d'une nouvelle grille complète et d'un nouvel ordre
    de retrait. Après RELAX_AFTER_ATTEMPTS tentatives ratées, la cible perd
    une case vide par tentative. Le meilleur puzzle vu est rendu dès qu'il
    atteint la cible courante.

    `timeout` (secondes) interrompt la tentative en cours : avec
    `best_effort=True` on rend le meilleur puzzle obtenu, sinon
    GenerationTimeout. Dépasser `max_attempts` lève aussi GenerationTimeout.
    `target_empty` remplace la cible du niveau (réglage, tests).
    """
    difficulty = Difficulty.parse(difficulty)
    rng = rng or random.Random()
    max_attempts = max_attempts or DEFAULT_MAX_ATTEMPTS
    target = difficulty.target_empty if target_empty is None else target_empty
    target = max(0, min(81, target))
    deadline = None if timeout is None else time.monotonic() + timeout

    best: Optional[Tuple[Grid, Grid, int]] = None
    attempts = 0

    while True:
        attempts += 1
        solution = generate_full_grid(rng)
        puzzle, empties = carve(solution, target, rng, deadline)

        if best is None or empties > best[2]:
            best = (puzzle, solution, empties)

        if best[2] >= target:
            log.info(
                "puzzle %s généré : %d vides (cible %d) en %d tentative(s)",
                difficulty.value, best[2], target, attempts,
            )
            return _to_puzzle(best, difficulty)

        if deadline is not None and time.monotonic() > deadline:
            if best_effort:
                log.warning(
                    "délai dépassé : meilleur puzzle rendu (%d vides, cible %d)", best[2], target
                )
                return _to_puzzle(best, difficulty)
            raise GenerationTimeout(
                f"Délai de {timeout}s dépassé pour le niveau {difficulty.value} "
                f"({attempts} tentative(s), meilleur : {best[2]} vides)"
            )

        if attempts >= max_attempts:
            raise GenerationTimeout(
                f"Impossible de générer un puzzle {difficulty.value} "
                f"après {attempts} tentatives (meilleur : {best[2]} vides)"
            )

        if attempts > RELAX_AFTER_ATTEMPTS and target > 0:
            target -= 1
            log.info("tentative %d ratée : cible assouplie à %d vides", attempts, target)
        else:
            log.debug("tentative %d ratée : %d/%d vides", attempts, empties, target)


def generate_puzzles(
    difficulty: Difficulty | str,
    count: int,
    rng: Optional[random.Random] = None,
    max_tries: Optional[int] = None,
) -> List[Puzzle]:
    """
    Génère `count` puzzles distincts (pas de doublon d'indices dans la série).
    """
    rng = rng or random.Random()
    max_tries = max_tries or count * 50

    puzzles: List[Puzzle] = []
    seen: Set[str] = set()
    tries = 0
    while len(puzzles) < count and tries < max_tries:
        tries += 1
        puzzle = generate(difficulty, rng=rng)
        sig = puzzle.signature()
        if sig in seen:
            log.debug("doublon ignoré (%s)", sig[:8])
            continue
        seen.add(sig)
        puzzles.append(puzzle)

    if len(puzzles) < count:
        raise GenerationTimeout(
            f"Seulement {len(puzzles)} puzzles générés sur {count} demandés"
        )
    return puzzles
