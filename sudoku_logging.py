# sudoku_logging.py
"""
Configuration des logs partagée par tous les modules sudoku_*.
"""

from __future__ import annotations

import logging

from sudoku_config import LOG_LEVEL

# Logger racine du projet ; les modules utilisent des sous-loggers "sudoku.xxx"
LOGGER_NAME = "sudoku"


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Retourne le logger du projet (ou un sous-logger "sudoku.<name>").

    Le handler console n'est installé qu'une fois, sur le logger racine.
    """
    root = logging.getLogger(LOGGER_NAME)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s [%(levelname)s] [%(name)s] %(message)s")
        )
        root.addHandler(handler)
        root.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))

    if not name:
        return root
    return root.getChild(name)
