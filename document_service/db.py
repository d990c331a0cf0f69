"""Conexión a la base de datos documental (MongoDB) usando pymongo."""

import os
import logging

from fastapi import HTTPException
from pymongo import ASCENDING, MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

load_dotenv()

MONGO_URL = os.getenv("MONGO_URL")
MONGO_DB_NAME = os.getenv("MONGO_DB_NAME", "catalogo")

if not MONGO_URL:
    logger.error("MONGO_URL no está definida en las variables de entorno.")

# MongoClient no conecta hasta la primera operación
client = MongoClient(MONGO_URL, serverSelectionTimeoutMS=5000) if MONGO_URL else None
database = client[MONGO_DB_NAME] if client is not None else None


def ping() -> bool:
    if client is None:
        return False
    try:
        client.admin.command("ping")
        return True
    except PyMongoError as e:
        logger.error(f"MongoDB no responde: {e}")
        return False


def ensure_indexes(db: Database) -> None:
    """El email es la clave de login y debe ser único."""
    db["usuarios"].create_index([("email", ASCENDING)], unique=True)
    logger.info("Índice único 'usuarios.email' verificado/creado.")


def get_db() -> Database:
    """Función de dependencia de FastAPI para obtener la base de datos."""
    if database is None:
        logger.error("Intento de acceso a BD fallido: MongoDB no configurado.")
        raise HTTPException(status_code=503, detail="Servicio de base de datos no disponible.")
    return database
