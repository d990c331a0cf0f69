"""
Rutas de los recursos `games` y `usuarios`.

Las rutas no conocen el almacenamiento: cada variante entrega una dependencia
que construye su repositorio (adaptador de persistencia) y las rutas sólo
validan, mapean y delegan.
"""

import logging
from typing import Any, Callable, Dict, Optional

from fastapi import APIRouter, Body, Depends, status
from fastapi.responses import Response

from catalog_core.errors import AuthenticationError, ConflictError, EmptyInputError, ValidationError
from catalog_core.mapping import build_record, build_update_pairs
from catalog_core.schemas import LoginRequest, LoginResponse
from catalog_core.security import create_access_token, dummy_verify, verify_password
from catalog_core.validation import validate_game, validate_user

logger = logging.getLogger(__name__)


def _require_valid(defects) -> None:
    if defects:
        raise ValidationError(defects)


def _require_fields(payload: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    if not payload:
        raise EmptyInputError()
    return payload


def create_games_router(get_repository: Callable) -> APIRouter:
    router = APIRouter(prefix="/games", tags=["Games"])

    @router.get("")
    def list_games(repo=Depends(get_repository)):
        return repo.fetch_all()

    @router.get("/{game_id}")
    def get_game(game_id: str, repo=Depends(get_repository)):
        return repo.fetch_one(game_id)

    @router.post("", status_code=status.HTTP_201_CREATED)
    def create_game(payload: Optional[Dict[str, Any]] = Body(None), repo=Depends(get_repository)):
        data = payload or {}
        _require_valid(validate_game(data))
        created = repo.create(build_record(data, repo.field_map))
        logger.info(f"Juego creado con ID: {created['id']}")
        return created

    @router.put("/{game_id}")
    def replace_game(game_id: str, payload: Optional[Dict[str, Any]] = Body(None), repo=Depends(get_repository)):
        data = payload or {}
        _require_valid(validate_game(data))
        return repo.replace(game_id, build_record(data, repo.field_map))

    @router.patch("/{game_id}")
    def modify_game(game_id: str, payload: Optional[Dict[str, Any]] = Body(None), repo=Depends(get_repository)):
        data = _require_fields(payload)
        _require_valid(validate_game(data, partial=True))
        pairs = build_update_pairs(data, repo.field_map, repo.touched_key)
        logger.info(f"Actualización parcial del juego {game_id}: {[key for key, _ in pairs]}")
        return repo.apply_partial(game_id, pairs)

    @router.delete("/{game_id}", status_code=status.HTTP_204_NO_CONTENT)
    def delete_game(game_id: str, repo=Depends(get_repository)):
        repo.remove(game_id)
        logger.info(f"Juego {game_id} eliminado.")
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router


def create_usuarios_router(get_repository: Callable) -> APIRouter:
    router = APIRouter(prefix="/usuarios", tags=["Usuarios"])

    def _ensure_email_free(repo, data: Dict[str, Any], user_id: Optional[str] = None) -> None:
        if "email" in data and repo.email_taken(data["email"], exclude_id=user_id):
            raise ConflictError("El email ya está registrado")

    @router.post("/login", response_model=LoginResponse)
    def login(credentials: LoginRequest, repo=Depends(get_repository)):
        """
        Autentica por email y contraseña y devuelve un token de acceso.
        Email inexistente y contraseña incorrecta producen la misma respuesta 401.
        """
        found = repo.fetch_credentials(credentials.email)
        if found is None:
            dummy_verify()
            logger.warning("Login fallido: credenciales inválidas.")
            raise AuthenticationError()
        usuario, password_hash = found
        if not verify_password(credentials.password, password_hash):
            logger.warning("Login fallido: credenciales inválidas.")
            raise AuthenticationError()

        token = create_access_token({"sub": str(usuario["id"]), "name": usuario["nombre"]})
        logger.info(f"Login exitoso para usuario {usuario['id']}")
        return {"access_token": token, "token_type": "bearer", "usuario": usuario}

    @router.get("")
    def list_usuarios(repo=Depends(get_repository)):
        return repo.fetch_all()

    @router.get("/{user_id}")
    def get_usuario(user_id: str, repo=Depends(get_repository)):
        return repo.fetch_one(user_id)

    @router.post("", status_code=status.HTTP_201_CREATED)
    def create_usuario(payload: Optional[Dict[str, Any]] = Body(None), repo=Depends(get_repository)):
        data = payload or {}
        _require_valid(validate_user(data))
        _ensure_email_free(repo, data)
        created = repo.create(build_record(data, repo.field_map))
        logger.info(f"Usuario creado con ID: {created['id']}")
        return created

    @router.put("/{user_id}")
    def replace_usuario(user_id: str, payload: Optional[Dict[str, Any]] = Body(None), repo=Depends(get_repository)):
        data = payload or {}
        _require_valid(validate_user(data))
        repo.fetch_one(user_id)
        _ensure_email_free(repo, data, user_id)
        return repo.replace(user_id, build_record(data, repo.field_map))

    @router.patch("/{user_id}")
    def modify_usuario(user_id: str, payload: Optional[Dict[str, Any]] = Body(None), repo=Depends(get_repository)):
        data = _require_fields(payload)
        _require_valid(validate_user(data, partial=True))
        # Un usuario inexistente es 404 aunque el email choque con otro
        repo.fetch_one(user_id)
        _ensure_email_free(repo, data, user_id)
        pairs = build_update_pairs(data, repo.field_map, repo.touched_key)
        return repo.apply_partial(user_id, pairs)

    @router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
    def delete_usuario(user_id: str, repo=Depends(get_repository)):
        repo.remove(user_id)
        logger.info(f"Usuario {user_id} eliminado.")
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router
