# sudoku_board.py
"""
Plateau de jeu interactif (session) :
- grille vivante : indices figés, chiffres saisis, notes de coin / de centre
- détection des conflits après chaque modification
- compte des chiffres posés, victoire
- annulation illimitée (instantanés complets pris AVANT chaque modification)
- modes de saisie (direct / notes de coin / notes de centre) et verrou de chiffre

Toutes les actions de l'interface passent par des commandes et `apply()` ;
une action refusée par les règles est un no-op signalé par `applied=False`.
Une entrée mal formée (coordonnées, chiffre, mode) lève IllegalEdit.
"""

from __future__ import annotations

import bisect
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Set, Union

from sudoku_core import DIGITS, PEERS, IllegalEdit, Pos, Puzzle
from sudoku_logging import get_logger

log = get_logger("board")


# ---------- Cases ----------

@dataclass
class Notes:
    """Annotations d'une case sans réponse ; chaque liste reste triée, sans doublon."""

    corner: List[int] = field(default_factory=list)
    middle: List[int] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.corner and not self.middle

    def copy(self) -> Notes:
        return Notes(list(self.corner), list(self.middle))

    def discard(self, v: int) -> None:
        if v in self.corner:
            self.corner.remove(v)
        if v in self.middle:
            self.middle.remove(v)


Cell = Union[int, Notes]
BoardGrid = List[List[Cell]]


def _toggle_ordered(values: List[int], v: int) -> None:
    if v in values:
        values.remove(v)
    else:
        bisect.insort(values, v)


def copy_board(grid: BoardGrid) -> BoardGrid:
    """Copie profonde : les Notes ne sont jamais partagées entre deux grilles."""
    return [[cell.copy() if isinstance(cell, Notes) else cell for cell in row] for row in grid]


# ---------- Modes ----------

class EditMode(Enum):
    DIRECT = "direct"
    CORNER = "corner"
    MIDDLE = "middle"

    def next(self) -> EditMode:
        order = list(EditMode)
        return order[(order.index(self) + 1) % len(order)]


class Direction(Enum):
    UP = (-1, 0)
    DOWN = (1, 0)
    LEFT = (0, -1)
    RIGHT = (0, 1)


# ---------- Vues dérivées ----------

def check_error(grid: BoardGrid) -> List[List[bool]]:
    """
    Marque chaque chiffre qui a un double dans sa ligne, sa colonne ou son bloc
    (les deux cases sont marquées). Les cases de notes ne sont jamais marquées.
    """
    errors = [[False] * 9 for _ in range(9)]
    for r in range(9):
        for c in range(9):
            v = grid[r][c]
            if not isinstance(v, int):
                continue
            for (pr, pc) in PEERS[(r, c)]:
                if grid[pr][pc] == v:
                    errors[r][c] = True
                    errors[pr][pc] = True
    return errors


def count_placed(grid: BoardGrid) -> List[int]:
    """Nombre de cases contenant chaque chiffre (index 0 -> chiffre 1)."""
    counts = [0] * 9
    for row in grid:
        for v in row:
            if isinstance(v, int):
                counts[v - 1] += 1
    return counts


def check_win(grid: BoardGrid, errors: List[List[bool]]) -> bool:
    return all(isinstance(v, int) for row in grid for v in row) and not any(
        e for row in errors for e in row
    )


# ---------- Session ----------

@dataclass(frozen=True)
class _Snapshot:
    grid: BoardGrid
    focus: Optional[Pos]
    conflicts: List[List[bool]]


class Session:
    """
    État de jeu d'un puzzle. Seul propriétaire de sa grille : les vues
    renvoient des copies et l'historique garde des copies profondes.
    """

    def __init__(self, puzzle: Puzzle):
        self.load(puzzle)

    def load(self, puzzle: Puzzle) -> None:
        """(Ré)initialise la session sur un nouveau puzzle ; vide l'historique."""
        self.puzzle = puzzle
        self._grid: BoardGrid = [[v if v else Notes() for v in row] for row in puzzle.givens]
        self._mutable = [[v == 0 for v in row] for row in puzzle.givens]
        self._conflicts = check_error(self._grid)
        self._placed = count_placed(self._grid)
        self._undo: List[_Snapshot] = []
        self._focus: Optional[Pos] = None
        self._mode = EditMode.DIRECT
        self._lock: Optional[int] = None
        self._mistakes: Set[Pos] = set()
        self.started_at = time.monotonic()

    # ---------- validation des entrées ----------

    @staticmethod
    def _check_pos(r: int, c: int) -> None:
        if not (isinstance(r, int) and isinstance(c, int) and 0 <= r < 9 and 0 <= c < 9):
            raise IllegalEdit(f"Case hors grille : ({r!r}, {c!r})")

    @staticmethod
    def _check_digit(digit: int) -> None:
        if not isinstance(digit, int) or digit not in DIGITS:
            raise IllegalEdit(f"Chiffre invalide : {digit!r}")

    # ---------- historique ----------

    def _push(self) -> None:
        self._undo.append(
            _Snapshot(copy_board(self._grid), self._focus, [row[:] for row in self._conflicts])
        )

    def _after_edit(self) -> None:
        self._conflicts = check_error(self._grid)
        self._placed = count_placed(self._grid)
        self._mistakes.clear()

    # ---------- modifications ----------

    def place(self, r: int, c: int, digit: int) -> bool:
        """
        Mode direct : pose `digit` et le retire des notes des 20 pairs.
        Modes notes : bascule `digit` dans les notes de coin / de centre.
        """
        self._check_pos(r, c)
        self._check_digit(digit)
        if not self._mutable[r][c]:
            return False
        cell = self._grid[r][c]
        if isinstance(cell, int) and cell == digit:
            return False

        if self._mode is EditMode.DIRECT:
            if self._placed[digit - 1] >= 9:
                return False
            self._push()
            self._grid[r][c] = digit
            for (pr, pc) in PEERS[(r, c)]:
                peer = self._grid[pr][pc]
                if isinstance(peer, Notes):
                    peer.discard(digit)
        else:
            # une case déjà répondue ne redevient jamais une case de notes
            if isinstance(cell, int):
                return False
            self._push()
            _toggle_ordered(cell.corner if self._mode is EditMode.CORNER else cell.middle, digit)

        self._after_edit()
        if self._mode is EditMode.DIRECT and self._lock == digit and self._placed[digit - 1] >= 9:
            self._lock = 0
        return True

    def erase(self, r: int, c: int) -> bool:
        """Vide la case (chiffre ou notes). No-op si figée ou déjà vide."""
        self._check_pos(r, c)
        if not self._mutable[r][c]:
            return False
        cell = self._grid[r][c]
        if isinstance(cell, Notes) and cell.is_empty():
            return False
        self._push()
        self._grid[r][c] = Notes()
        self._after_edit()
        return True

    def undo(self) -> bool:
        if not self._undo:
            return False
        snap = self._undo.pop()
        self._grid = snap.grid
        self._focus = snap.focus
        self._conflicts = snap.conflicts
        self._placed = count_placed(self._grid)
        self._mistakes.clear()
        return True

    def auto_notate(self) -> bool:
        """
        Recalcule les notes de coin de chaque case éditable sans réponse :
        les chiffres qu'aucun pair ne porte. Les notes de centre ne bougent pas.
        Annulable ; no-op si rien ne change.
        """
        updates = {}
        for r in range(9):
            for c in range(9):
                cell = self._grid[r][c]
                if not self._mutable[r][c] or not isinstance(cell, Notes):
                    continue
                used = {
                    self._grid[pr][pc]
                    for (pr, pc) in PEERS[(r, c)]
                    if isinstance(self._grid[pr][pc], int)
                }
                corner = [v for v in DIGITS if v not in used]
                if corner != cell.corner:
                    updates[(r, c)] = corner
        if not updates:
            return False
        self._push()
        for (r, c), corner in updates.items():
            self._grid[r][c].corner = corner
        self._after_edit()
        return True

    def check_against_solution(self) -> List[Pos]:
        """Cases dont le chiffre diffère de la solution du puzzle (gardées jusqu'à la prochaine modification)."""
        solution = self.puzzle.solution
        self._mistakes = {
            (r, c)
            for r in range(9)
            for c in range(9)
            if isinstance(self._grid[r][c], int) and self._grid[r][c] != solution[r][c]
        }
        return sorted(self._mistakes)

    # ---------- focus, mode, verrou ----------

    def set_focus(self, r: int, c: int) -> bool:
        self._check_pos(r, c)
        self._focus = (r, c)
        return True

    def move_focus(self, direction: Direction) -> bool:
        """Déplacement relatif, bloqué aux bords (pas de retour de l'autre côté)."""
        if not isinstance(direction, Direction):
            raise IllegalEdit(f"Direction invalide : {direction!r}")
        if self._focus is None:
            return False
        dr, dc = direction.value
        r, c = self._focus
        target = (min(8, max(0, r + dr)), min(8, max(0, c + dc)))
        if target == self._focus:
            return False
        self._focus = target
        return True

    def set_mode(self, mode: EditMode) -> bool:
        if not isinstance(mode, EditMode):
            raise IllegalEdit(f"Mode invalide : {mode!r}")
        if mode is self._mode:
            return False
        self._mode = mode
        return True

    def cycle_mode(self) -> bool:
        self._mode = self._mode.next()
        return True

    def arm_lock(self, digit: Optional[int]) -> bool:
        """
        None : verrou coupé. 0 : verrou actif sans chiffre.
        1..9 : arme le chiffre et place le focus sur sa première occurrence
        (ordre ligne par ligne) ; un chiffre déjà complet arme le verrou à vide.
        """
        before = (self._lock, self._focus)
        if digit is None or digit == 0:
            self._lock = digit
            return before != (self._lock, self._focus)
        self._check_digit(digit)
        if self._placed[digit - 1] >= 9:
            self._lock = 0
        else:
            self._lock = digit
            first = next(
                ((r, c) for r in range(9) for c in range(9) if self._grid[r][c] == digit),
                None,
            )
            if first is not None:
                self._focus = first
        return before != (self._lock, self._focus)

    def activate(self, r: int, c: int) -> bool:
        """
        Clic sur une case. Verrou armé sur d : pose d dans une case éditable
        sans réponse (sans déplacer le focus). Clic sur un chiffre avec verrou
        actif : le verrou passe sur ce chiffre. Sinon : simple focus.
        """
        self._check_pos(r, c)
        if self._lock is None:
            return self.set_focus(r, c)
        cell = self._grid[r][c]
        if isinstance(cell, int):
            self._lock = cell if self._placed[cell - 1] < 9 else 0
            self._focus = (r, c)
            return True
        if self._lock and self._mutable[r][c]:
            return self.place(r, c, self._lock)
        return self.set_focus(r, c)

    # ---------- vues ----------

    @property
    def focus(self) -> Optional[Pos]:
        return self._focus

    @property
    def mode(self) -> EditMode:
        return self._mode

    def lock_state(self) -> Optional[int]:
        return self._lock

    def grid(self) -> BoardGrid:
        return copy_board(self._grid)

    def cell(self, r: int, c: int) -> Cell:
        self._check_pos(r, c)
        v = self._grid[r][c]
        return v.copy() if isinstance(v, Notes) else v

    def conflicts(self) -> List[List[bool]]:
        return [row[:] for row in self._conflicts]

    def mistakes(self) -> List[Pos]:
        return sorted(self._mistakes)

    def mutable(self, r: int, c: int) -> bool:
        self._check_pos(r, c)
        return self._mutable[r][c]

    def placed_counts(self) -> List[int]:
        return list(self._placed)

    def per_digit_remaining(self) -> List[int]:
        return [9 - n for n in self._placed]

    def is_won(self) -> bool:
        return check_win(self._grid, self._conflicts)

    def can_undo(self) -> bool:
        return bool(self._undo)

    def elapsed_seconds(self) -> float:
        return time.monotonic() - self.started_at


def new_session(puzzle: Puzzle) -> Session:
    return Session(puzzle)


# ====================================================
#   COMMANDES
# ====================================================

@dataclass(frozen=True)
class PlaceDigit:
    row: int
    col: int
    digit: int


@dataclass(frozen=True)
class Erase:
    row: int
    col: int


@dataclass(frozen=True)
class Undo:
    pass


@dataclass(frozen=True)
class SetFocus:
    row: int
    col: int


@dataclass(frozen=True)
class MoveFocus:
    direction: Direction


@dataclass(frozen=True)
class SetMode:
    mode: EditMode


@dataclass(frozen=True)
class CycleMode:
    pass


@dataclass(frozen=True)
class ArmLock:
    digit: Optional[int]


@dataclass(frozen=True)
class Activate:
    row: int
    col: int


@dataclass(frozen=True)
class AutoNotate:
    pass


@dataclass(frozen=True)
class CheckSolution:
    pass


Command = Union[
    PlaceDigit, Erase, Undo, SetFocus, MoveFocus, SetMode, CycleMode,
    ArmLock, Activate, AutoNotate, CheckSolution,
]


@dataclass
class SessionDelta:
    applied: bool
    changed_cells: List[Pos] = field(default_factory=list)
    won: bool = False


def apply(session: Session, command: Command) -> SessionDelta:
    """Point d'entrée unique de l'interface : exécute une commande et résume l'effet."""
    before = session.grid()

    if isinstance(command, PlaceDigit):
        applied = session.place(command.row, command.col, command.digit)
    elif isinstance(command, Erase):
        applied = session.erase(command.row, command.col)
    elif isinstance(command, Undo):
        applied = session.undo()
    elif isinstance(command, SetFocus):
        applied = session.set_focus(command.row, command.col)
    elif isinstance(command, MoveFocus):
        applied = session.move_focus(command.direction)
    elif isinstance(command, SetMode):
        applied = session.set_mode(command.mode)
    elif isinstance(command, CycleMode):
        applied = session.cycle_mode()
    elif isinstance(command, ArmLock):
        applied = session.arm_lock(command.digit)
    elif isinstance(command, Activate):
        applied = session.activate(command.row, command.col)
    elif isinstance(command, AutoNotate):
        applied = session.auto_notate()
    elif isinstance(command, CheckSolution):
        session.check_against_solution()
        applied = True
    else:
        raise IllegalEdit(f"Commande inconnue : {command!r}")

    after = session.grid()
    changed = [(r, c) for r in range(9) for c in range(9) if before[r][c] != after[r][c]]
    log.debug("%r -> applied=%s, %d case(s) modifiée(s)", command, applied, len(changed))
    return SessionDelta(applied, changed, session.is_won())


# ---------- Clavier ----------

ARROW_KEYS = {
    "ArrowUp": Direction.UP,
    "ArrowDown": Direction.DOWN,
    "ArrowLeft": Direction.LEFT,
    "ArrowRight": Direction.RIGHT,
    # keysyms Tk
    "Up": Direction.UP,
    "Down": Direction.DOWN,
    "Left": Direction.LEFT,
    "Right": Direction.RIGHT,
}
DELETE_KEYS = ("Backspace", "BackSpace", "Delete")


def command_from_key(session: Session, key: str, ctrl: bool = False) -> Optional[Command]:
    """
    Traduit une touche en commande, d'après le focus courant.
    Chiffres et effacement n'agissent que sur une case focalisée éditable.
    """
    if ctrl and key.lower() == "z":
        return Undo()
    if key in ARROW_KEYS:
        return MoveFocus(ARROW_KEYS[key])

    focus = session.focus
    if focus is None or not session.mutable(*focus):
        return None
    if key in DELETE_KEYS:
        return Erase(*focus)
    if len(key) == 1 and key in "123456789":
        return PlaceDigit(focus[0], focus[1], int(key))
    return None
