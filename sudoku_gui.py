# sudoku_gui.py
"""
Interface CustomTkinter pour jouer une partie de Sudoku.

Aucune règle ici : chaque clic ou touche devient une commande passée à
sudoku_board.apply(), puis la grille est redessinée depuis les vues de la
session (conflits, chiffres restants, victoire).
"""

from __future__ import annotations

from tkinter import messagebox

import customtkinter as ctk

from sudoku_board import (
    Activate,
    ArmLock,
    AutoNotate,
    CheckSolution,
    CycleMode,
    EditMode,
    Erase,
    Notes,
    PlaceDigit,
    Session,
    Undo,
    apply,
    command_from_key,
)
from sudoku_config import DEFAULT_DIFFICULTY
from sudoku_core import Difficulty, SudokuError
from sudoku_generator import generate
from sudoku_logging import get_logger

log = get_logger("gui")

# ---------------------------
# Libellés FR pour l'UI
# ---------------------------
DIFF_KEY_TO_LABEL_FR = {
    "easy": "facile",
    "medium": "moyen",
    "hard": "difficile",
    "expert": "expert",
}
DIFF_LABEL_FR_TO_KEY = {v: k for k, v in DIFF_KEY_TO_LABEL_FR.items()}

MODE_LABEL_FR = {
    EditMode.DIRECT: "notes : off",
    EditMode.CORNER: "notes : coin",
    EditMode.MIDDLE: "notes : centre",
}

# Délai max d'une génération depuis l'UI ; au-delà on garde le meilleur puzzle trouvé
GUI_GENERATION_TIMEOUT = 20.0

CELL_SIZE = 52
GIVEN_COLOR = "#1f4fbf"
ADDED_COLOR = "black"
NOTE_COLOR = "gray40"
CELL_BG = "white"
FOCUS_BG = "#cfe0ff"
SAME_DIGIT_BG = "#dbe8ff"
LINE_BG = "#eef4ff"
ERROR_BG = "#f7c4c4"
MISTAKE_BG = "#ffd9a8"


def diff_label_fr_to_key(label: str) -> str:
    return DIFF_LABEL_FR_TO_KEY.get(label, label)


def cell_text(cell) -> str:
    """Texte d'une case : le chiffre, ou notes de coin puis notes de centre."""
    if isinstance(cell, Notes):
        corner = " ".join(str(v) for v in cell.corner)
        middle = "".join(str(v) for v in cell.middle)
        return f"{corner}\n{middle}" if middle else corner
    return str(cell)


def launch_gui():
    ctk.set_appearance_mode("light")
    ctk.set_default_color_theme("blue")

    app = ctk.CTk()
    app.title("Sudoku")

    difficulty_var = ctk.StringVar(value=DIFF_KEY_TO_LABEL_FR[DEFAULT_DIFFICULTY])
    status_var = ctk.StringVar(value="Prêt.")
    mode_var = ctk.StringVar(value=MODE_LABEL_FR[EditMode.DIRECT])
    lock_var = ctk.StringVar(value="verrou : off")

    state = {"session": None}

    # ----- Grille -----
    frame_board = ctk.CTkFrame(app, fg_color="black")
    frame_board.grid(row=0, column=0, padx=10, pady=10)

    cell_buttons = [[None] * 9 for _ in range(9)]
    for r in range(9):
        for c in range(9):
            btn = ctk.CTkButton(
                frame_board,
                text="",
                width=CELL_SIZE,
                height=CELL_SIZE,
                corner_radius=0,
                fg_color=CELL_BG,
                hover_color=LINE_BG,
                command=lambda r=r, c=c: run(Activate(r, c)),
            )
            # bords épais entre les blocs 3x3
            padx = (3 if c % 3 == 0 else 1, 3 if c == 8 else 0)
            pady = (3 if r % 3 == 0 else 1, 3 if r == 8 else 0)
            btn.grid(row=r, column=c, padx=padx, pady=pady)
            cell_buttons[r][c] = btn

    # ----- Pavé numérique -----
    frame_pad = ctk.CTkFrame(app)
    frame_pad.grid(row=1, column=0, padx=10, pady=(0, 10), sticky="ew")

    default_button_color = ctk.ThemeManager.theme["CTkButton"]["fg_color"]
    digit_buttons = []
    for d in range(1, 10):
        btn = ctk.CTkButton(frame_pad, text=str(d), width=44, command=lambda d=d: on_digit(d))
        btn.grid(row=0, column=d - 1, padx=2, pady=5)
        digit_buttons.append(btn)

    # ----- Actions -----
    frame_right = ctk.CTkFrame(app)
    frame_right.grid(row=0, column=1, rowspan=2, padx=(0, 10), pady=10, sticky="ns")

    ctk.CTkLabel(
        frame_right,
        text="Partie",
        font=ctk.CTkFont(size=16, weight="bold"),
    ).grid(row=0, column=0, pady=(10, 10), padx=10)

    ctk.CTkOptionMenu(
        frame_right,
        values=[DIFF_KEY_TO_LABEL_FR[d.value] for d in Difficulty],
        variable=difficulty_var,
    ).grid(row=1, column=0, sticky="ew", padx=10, pady=5)
    ctk.CTkButton(frame_right, text="Nouvelle partie", command=lambda: new_game()).grid(
        row=2, column=0, sticky="ew", padx=10, pady=(5, 20)
    )

    ctk.CTkButton(frame_right, textvariable=mode_var, command=lambda: run(CycleMode())).grid(
        row=3, column=0, sticky="ew", padx=10, pady=5
    )
    ctk.CTkButton(frame_right, textvariable=lock_var, command=lambda: on_lock()).grid(
        row=4, column=0, sticky="ew", padx=10, pady=5
    )
    ctk.CTkButton(frame_right, text="Effacer", command=lambda: on_erase()).grid(
        row=5, column=0, sticky="ew", padx=10, pady=5
    )
    ctk.CTkButton(frame_right, text="Annuler", command=lambda: run(Undo())).grid(
        row=6, column=0, sticky="ew", padx=10, pady=5
    )
    ctk.CTkButton(frame_right, text="Notes auto", command=lambda: run(AutoNotate())).grid(
        row=7, column=0, sticky="ew", padx=10, pady=5
    )
    ctk.CTkButton(frame_right, text="Vérifier", command=lambda: run(CheckSolution())).grid(
        row=8, column=0, sticky="ew", padx=10, pady=5
    )

    ctk.CTkLabel(app, textvariable=status_var, anchor="w").grid(
        row=2, column=0, columnspan=2, sticky="w", padx=10, pady=(0, 10)
    )

    # ==========================
    #   ACTIONS
    # ==========================

    def run(command):
        session: Session | None = state["session"]
        if session is None:
            return
        delta = apply(session, command)
        refresh()
        if delta.won:
            status_var.set("Bravo, grille terminée !")

    def on_digit(d: int):
        session: Session | None = state["session"]
        if session is None:
            return
        if session.lock_state() is not None:
            run(ArmLock(d))
        elif session.focus is not None:
            run(PlaceDigit(session.focus[0], session.focus[1], d))

    def on_erase():
        session: Session | None = state["session"]
        if session is not None and session.focus is not None:
            run(Erase(*session.focus))

    def on_lock():
        session: Session | None = state["session"]
        if session is None:
            return
        run(ArmLock(None if session.lock_state() is not None else 0))

    def on_key(event):
        session: Session | None = state["session"]
        if session is None:
            return
        ctrl = bool(event.state & 0x4)
        command = command_from_key(session, event.keysym, ctrl=ctrl)
        if command is not None:
            run(command)

    def refresh():
        session: Session | None = state["session"]
        if session is None:
            return
        grid = session.grid()
        conflicts = session.conflicts()
        mistakes = set(session.mistakes())
        focus = session.focus
        focus_value = grid[focus[0]][focus[1]] if focus else None

        for r in range(9):
            for c in range(9):
                cell = grid[r][c]
                if conflicts[r][c]:
                    bg = ERROR_BG
                elif (r, c) in mistakes:
                    bg = MISTAKE_BG
                elif focus == (r, c):
                    bg = FOCUS_BG
                elif isinstance(cell, int) and cell == focus_value:
                    bg = SAME_DIGIT_BG
                elif focus and (focus[0] == r or focus[1] == c):
                    bg = LINE_BG
                else:
                    bg = CELL_BG

                if isinstance(cell, Notes):
                    color, font = NOTE_COLOR, ctk.CTkFont(size=10)
                elif session.mutable(r, c):
                    color, font = ADDED_COLOR, ctk.CTkFont(size=20)
                else:
                    color, font = GIVEN_COLOR, ctk.CTkFont(size=20, weight="bold")

                cell_buttons[r][c].configure(
                    text=cell_text(cell), fg_color=bg, text_color=color, font=font
                )

        remaining = session.per_digit_remaining()
        lock = session.lock_state()
        for d, btn in enumerate(digit_buttons, start=1):
            done = remaining[d - 1] <= 0
            btn.configure(
                text=str(d) if not done else "·",
                fg_color="#2b8a3e" if lock == d else ("gray60" if done else default_button_color),
            )

        mode_var.set(MODE_LABEL_FR[session.mode])
        if lock is None:
            lock_var.set("verrou : off")
        else:
            lock_var.set(f"verrou : {lock}" if lock else "verrou : choisir")

    def new_game():
        diff_key = diff_label_fr_to_key(difficulty_var.get())
        status_var.set("Génération en cours...")
        app.update_idletasks()
        try:
            puzzle = generate(diff_key, timeout=GUI_GENERATION_TIMEOUT, best_effort=True)
        except (SudokuError, ValueError) as e:
            log.exception("échec de génération")
            status_var.set("❌ Erreur lors de la génération.")
            messagebox.showerror("Erreur", f"Une erreur est survenue : {e}")
            return

        if state["session"] is None:
            state["session"] = Session(puzzle)
        else:
            state["session"].load(puzzle)
        status_var.set(
            f"Niveau {DIFF_KEY_TO_LABEL_FR[diff_key]} : {puzzle.empty_count} cases à remplir."
        )
        refresh()

    app.bind("<Key>", on_key)
    new_game()
    app.mainloop()


if __name__ == "__main__":
    launch_gui()
