"""Configuración común leída del entorno (.env)."""

import logging
import os
from typing import List

from dotenv import load_dotenv

load_dotenv()

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

PORT = int(os.getenv("PORT", 4000))

# Orígenes permitidos separados por comas. "*" abre la API a cualquier frontend.
CORS_ORIGINS: List[str] = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]


def configure_logging() -> None:
    logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)

