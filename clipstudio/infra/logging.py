# -*- coding: utf-8 -*-
"""
Logging configuration for clipstudio
"""

import logging
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Bibliotecas que registram cada requisição HTTP em INFO
NOISY_LOGGERS = ("httpx", "httpcore", "google_genai")

_handlers: list[logging.Handler] = []


def setup_logging(log_file: Optional[str] = "clipstudio.log", level: int = logging.INFO):
    """
    Configura o logger raiz

    O arquivo recebe tudo a partir de `level`; o console (stderr, para não
    misturar com o progresso impresso em stdout) só avisos e erros. Chamadas
    repetidas substituem os handlers instalados anteriormente.
    """
    formatter = logging.Formatter(LOG_FORMAT)
    root_logger = logging.getLogger()

    for handler in _handlers:
        root_logger.removeHandler(handler)
        handler.close()
    _handlers.clear()

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        file_handler.setLevel(level)
        _handlers.append(file_handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(logging.WARNING)
    _handlers.append(console_handler)

    root_logger.setLevel(level)
    for handler in _handlers:
        root_logger.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    return root_logger


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
