"""Hash de contraseñas y emisión de tokens JWT."""

import logging
import os
from datetime import datetime, timedelta, timezone
from typing import Dict

from dotenv import load_dotenv
from jose import jwt
from passlib.context import CryptContext

load_dotenv()

logger = logging.getLogger(__name__)

SECRET_KEY = os.getenv("JWT_SECRET_KEY")
if not SECRET_KEY:
    logger.warning("JWT_SECRET_KEY no está definida. Usando clave insegura por defecto para desarrollo.")
    SECRET_KEY = "clave_insegura_por_defecto_cambiar"

ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24))

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Compara una contraseña contra el hash guardado. Un hash ilegible cuenta como fallo."""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        logger.warning("Hash de contraseña con formato no reconocido.")
        return False


def dummy_verify() -> None:
    """Consume el mismo tiempo que una verificación real cuando el usuario no existe."""
    pwd_context.dummy_verify()


def create_access_token(data: Dict) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)
