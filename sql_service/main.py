"""API del catálogo (games y usuarios) sobre MySQL."""

import logging

from fastapi import FastAPI, Depends
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session

from catalog_core import config
from catalog_core.errors import register_error_handlers
from catalog_core.monitoring import register_monitoring
from catalog_core.routes import create_games_router, create_usuarios_router
from sql_service import db
from sql_service.db import Base, get_db
from sql_service.repository import GameRepository, UsuarioRepository

# Configura logger
config.configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Catálogo API - MySQL",
    description="CRUD de juegos y usuarios respaldado por MySQL.",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials="*" not in config.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_game_repository(session: Session = Depends(get_db)) -> GameRepository:
    return GameRepository(session)


def get_usuario_repository(session: Session = Depends(get_db)) -> UsuarioRepository:
    return UsuarioRepository(session)


register_error_handlers(app)
register_monitoring(app, "sql_service", ping_database=db.ping)
app.include_router(create_games_router(get_game_repository))
app.include_router(create_usuarios_router(get_usuario_repository))


@app.on_event("startup")
def create_tables():
    """Crea las tablas si no existen al iniciar."""
    if db.engine is None:
        logger.error("Base de datos no configurada: el servicio responderá 503 en las rutas de datos.")
        return
    try:
        Base.metadata.create_all(bind=db.engine)
        logger.info("Tablas de base de datos verificadas/creadas.")
    except Exception as e:
        logger.error(f"Error al inicializar la base de datos: {e}", exc_info=True)


if __name__ == "__main__":
    import uvicorn
    logger.info(f"API corriendo en http://localhost:{config.PORT}")
    uvicorn.run(app, host="0.0.0.0", port=config.PORT)
