# sudoku_config.py
"""
Réglages communs du moteur Sudoku.

Tout ce qui est « constante de réglage » (cibles de cases vides par niveau,
politique de relance du générateur, poids du notateur, logs) est regroupé ici
pour pouvoir être ajusté sans toucher au code.
"""

from __future__ import annotations

import os
from typing import Dict

# ---------- Générateur ----------

# Nombre de cases vides visé par niveau (seul l'ordre compte : expert => plus de vides)
TIER_TARGET_EMPTY: Dict[str, int] = {
    "easy": 28,
    "medium": 37,
    "hard": 45,
    "expert": 58,
}

# Au-delà de ce nombre de tentatives ratées, la cible baisse d'une case par tentative
RELAX_AFTER_ATTEMPTS: int = 10

# Garde-fou absolu sur le nombre de tentatives
DEFAULT_MAX_ATTEMPTS: int = 200

# Délai max (secondes) d'une génération ; None = pas de limite de temps
DEFAULT_TIMEOUT: float | None = None

# Le test d'unicité s'arrête dès la 2e solution trouvée
UNIQUENESS_LIMIT: int = 2

# ---------- Notateur de difficulté ----------

TECHNIQUE_WEIGHTS: Dict[str, int] = {
    "single": 1,
    "pointing": 3,
    "naked_pair": 4,
    "hidden_pair": 5,
    "xwing": 8,
}
GUESS_WEIGHT: int = 20

# ---------- Logs ----------

LOG_LEVEL: str = os.environ.get("SUDOKU_LOG_LEVEL", "INFO").upper()

# ---------- Interface ----------

DEFAULT_DIFFICULTY: str = "medium"
