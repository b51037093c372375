# src/rasterwrap/log_helpers.py
from __future__ import annotations

"""
Helpers de logging para la CLI. Los módulos de la librería solo piden
`logging.getLogger(__name__)`; configurar handlers es cosa de quien llama.
"""

import logging
import os
import sys
from typing import Optional

MESSAGE_FORMAT = "%(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logger(log_file: Optional[str] = None, level: int = logging.INFO) -> logging.Logger:
    """
    Configura el root logger: stdout con mensajes simples y, opcionalmente,
    un archivo con timestamp/nivel.
    """
    logger = logging.getLogger()
    logger.setLevel(level)

    if logger.hasHandlers():
        logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(MESSAGE_FORMAT))
    logger.addHandler(handler)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        logger.addHandler(file_handler)

    # rasterio/GDAL son muy verbosos en DEBUG
    logging.getLogger("rasterio").setLevel(max(level, logging.WARNING))
    return logger


def shutdown_logger(logger: Optional[logging.Logger]) -> None:
    """Cierra y quita los handlers (libera el archivo de log)."""
    if not logger:
        return
    for handler in logger.handlers[:]:
        handler.flush()
        handler.close()
        logger.removeHandler(handler)


__all__ = ["setup_logger", "shutdown_logger"]
