"""Configuración de la conexión a la base de datos MySQL usando SQLAlchemy."""

import os
import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy import create_engine, exc, text
from sqlalchemy.orm import sessionmaker, declarative_base
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Carga variables de entorno desde el archivo .env
load_dotenv()


def build_database_url() -> Optional[str]:
    """
    Construye la URL de SQLAlchemy.

    Usa DATABASE_URL si existe (un esquema `mysql://` se convierte a `mysql+pymysql://`);
    si no, la arma con DB_USER, DB_PASS, DB_HOST y DB_NAME. Devuelve None si falta configuración.
    """
    url = os.getenv("DATABASE_URL")
    if url:
        if url.startswith("mysql://"):
            url = "mysql+pymysql://" + url[len("mysql://"):]
        return url

    required_db_vars = ["DB_USER", "DB_PASS", "DB_HOST", "DB_NAME"]
    missing_vars = [var for var in required_db_vars if not os.getenv(var)]
    if missing_vars:
        logger.error(f"Faltan variables de entorno para la base de datos: {', '.join(missing_vars)}")
        return None

    return (
        f"mysql+pymysql://{os.getenv('DB_USER')}:{os.getenv('DB_PASS')}"
        f"@{os.getenv('DB_HOST')}/{os.getenv('DB_NAME')}"
    )


SQLALCHEMY_DATABASE_URL = build_database_url()

# pool_pre_ping=True ayuda a manejar conexiones inactivas en el pool.
engine = create_engine(SQLALCHEMY_DATABASE_URL, pool_pre_ping=True) if SQLALCHEMY_DATABASE_URL else None

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine) if engine else None

Base = declarative_base()


def ping() -> bool:
    """Comprueba que la base de datos responde a un SELECT 1."""
    if engine is None:
        return False
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
        return True
    except exc.SQLAlchemyError as e:
        logger.error(f"La base de datos no responde: {e}")
        return False


# --- Función de Dependencia para FastAPI ---
def get_db():
    """
    Generador de dependencia de FastAPI para obtener una sesión de base de datos.
    Asegura que la sesión se cierre correctamente después de cada petición.
    """
    if SessionLocal is None:
        logger.error("La fábrica de sesiones de base de datos no está inicializada.")
        raise HTTPException(status_code=503, detail="Servicio de base de datos no disponible.")

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
