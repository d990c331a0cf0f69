# sql_service/check_db.py
"""Script para verificar la conexión y la estructura de la tabla 'usuarios'."""

import logging
import sys
from typing import Any, Dict

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import NoSuchTableError, OperationalError, SQLAlchemyError

from sql_service.db import build_database_url

logger = logging.getLogger(__name__)

# Códigos de error de MySQL
ER_NO_SUCH_TABLE = 1146
CR_CONN_REFUSED = 2003


def check_database(engine: Engine) -> Dict[str, Any]:
    """
    Verifica conexión, columnas de 'usuarios', total de usuarios y los primeros
    cinco registros (sin contraseñas). Devuelve un resumen con lo encontrado.
    """
    logger.info("🔍 Verificando conexión a la base de datos...")
    with engine.connect() as connection:
        connection.execute(text("SELECT 1"))
        logger.info("✅ Conexión exitosa")

        columns = inspect(connection).get_columns("usuarios")
        logger.info("📋 Columnas de la tabla 'usuarios':")
        for column in columns:
            logger.info(f"   {column['name']:<15} {column['type']}  nullable={column['nullable']}")

        total = connection.execute(text("SELECT COUNT(*) AS total FROM usuarios")).scalar_one()
        logger.info(f"📊 Total de usuarios registrados: {total}")

        first_users = []
        if total > 0:
            rows = connection.execute(
                text("SELECT id, nombre, email, created_at FROM usuarios ORDER BY id LIMIT 5")
            ).mappings().all()
            first_users = [dict(row) for row in rows]
            logger.info("👥 Primeros 5 usuarios (sin contraseñas):")
            for user in first_users:
                logger.info(f"   {user['id']} | {user['nombre']} | {user['email']} | {user['created_at']}")

    return {
        "columns": [column["name"] for column in columns],
        "total": total,
        "first_users": first_users,
    }


def _error_code(error: SQLAlchemyError):
    args = getattr(getattr(error, "orig", None), "args", ())
    return args[0] if args else None


def main() -> int:
    logging.basicConfig(level=logging.INFO, format='[%(asctime)s] [%(levelname)s] %(message)s')

    url = build_database_url()
    if not url:
        logger.error("❌ DATABASE_URL (o DB_USER/DB_PASS/DB_HOST/DB_NAME) no está configurado en .env")
        return 1

    engine = create_engine(url)
    try:
        check_database(engine)
        return 0
    except NoSuchTableError:
        logger.error("❌ La tabla 'usuarios' no existe. Necesitas crearla primero (arranca el servicio).")
        return 1
    except SQLAlchemyError as e:
        logger.error(f"❌ Error: {e}")
        code = _error_code(e)
        if isinstance(e, OperationalError) and code == CR_CONN_REFUSED:
            logger.error("   No se pudo conectar a la base de datos.")
            logger.error("   Verifica que MySQL esté corriendo y DATABASE_URL sea correcto.")
        elif code == ER_NO_SUCH_TABLE:
            logger.error("   La tabla 'usuarios' no existe. Necesitas crearla primero.")
        return 1
    finally:
        engine.dispose()


if __name__ == "__main__":
    sys.exit(main())
