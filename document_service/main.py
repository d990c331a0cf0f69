"""API del catálogo (games y usuarios) sobre una base de datos documental (MongoDB)."""

import logging

from fastapi import FastAPI, Depends
from fastapi.middleware.cors import CORSMiddleware
from pymongo.database import Database
from pymongo.errors import PyMongoError

from catalog_core import config
from catalog_core.errors import register_error_handlers
from catalog_core.monitoring import register_monitoring
from catalog_core.routes import create_games_router, create_usuarios_router
from document_service import db
from document_service.db import get_db
from document_service.repository import GameRepository, UsuarioRepository

config.configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Catálogo API - Documental",
    description="CRUD de juegos y usuarios respaldado por MongoDB.",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials="*" not in config.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_game_repository(database: Database = Depends(get_db)) -> GameRepository:
    return GameRepository(database)


def get_usuario_repository(database: Database = Depends(get_db)) -> UsuarioRepository:
    return UsuarioRepository(database)


register_error_handlers(app)
register_monitoring(app, "document_service", ping_database=db.ping)
app.include_router(create_games_router(get_game_repository))
app.include_router(create_usuarios_router(get_usuario_repository))


@app.on_event("startup")
def startup_event():
    """Verifica los índices al arrancar."""
    if db.database is None:
        logger.critical("MongoDB no configurado: el servicio responderá 503 en las rutas de datos.")
        return
    try:
        db.ensure_indexes(db.database)
    except PyMongoError as e:
        logger.error(f"No se pudieron crear los índices de MongoDB: {e}", exc_info=True)


@app.on_event("shutdown")
def shutdown_event():
    if db.client is not None:
        db.client.close()
        logger.info("Conexión a MongoDB cerrada.")


if __name__ == "__main__":
    import uvicorn
    logger.info(f"API corriendo en http://localhost:{config.PORT}")
    uvicorn.run(app, host="0.0.0.0", port=config.PORT)
