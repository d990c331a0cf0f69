"""Adaptadores de persistencia sobre SQLAlchemy para 'games' y 'usuarios'."""

import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from catalog_core.errors import ConflictError, NotFoundError, StorageError
from catalog_core.mapping import SQL_GAME_FIELDS, USER_FIELDS, UpdatePairs, record_from_storage, utcnow
from sql_service.models import Game, Usuario

logger = logging.getLogger(__name__)


class SqlRepository:
    """
    Operaciones CRUD comunes. Las subclases fijan el modelo, la tabla de campos
    y las columnas de fecha que se exponen.
    """
    model = None
    field_map = None
    touched_key: Optional[str] = None
    timestamps: Dict[str, str] = {}
    not_found_message = "No encontrado"
    conflict_message: Optional[str] = None

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def _storage_errors(self, action: str):
        try:
            yield
        except IntegrityError as e:
            self.db.rollback()
            if self.conflict_message:
                logger.warning(f"Conflicto de integridad al {action}: {e.orig}")
                raise ConflictError(self.conflict_message)
            logger.error(f"Error de integridad al {action}: {e}", exc_info=True)
            raise StorageError()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error de base de datos al {action}: {e}", exc_info=True)
            raise StorageError()

    def _parse_id(self, item_id: Any) -> int:
        try:
            return int(item_id)
        except (TypeError, ValueError):
            raise NotFoundError(self.not_found_message)

    def _get(self, item_id: Any):
        pk = self._parse_id(item_id)
        instance = self.db.get(self.model, pk)
        if instance is None:
            raise NotFoundError(self.not_found_message)
        return instance

    def to_dict(self, instance) -> Dict[str, Any]:
        stored = {column.key: getattr(instance, column.key) for column in self.model.__table__.columns}
        record = {"id": instance.id}
        record.update(record_from_storage(stored, self.field_map))
        for field, column in self.timestamps.items():
            record[field] = stored.get(column)
        return record

    def fetch_all(self) -> List[Dict[str, Any]]:
        with self._storage_errors("listar"):
            instances = self.db.query(self.model).order_by(self.model.id).all()
            return [self.to_dict(instance) for instance in instances]

    def fetch_one(self, item_id: Any) -> Dict[str, Any]:
        with self._storage_errors("consultar"):
            return self.to_dict(self._get(item_id))

    def create(self, record: Dict[str, Any]) -> Dict[str, Any]:
        with self._storage_errors("crear"):
            instance = self.model(**record)
            self.db.add(instance)
            self.db.commit()
            self.db.refresh(instance)
            return self.to_dict(instance)

    def replace(self, item_id: Any, record: Dict[str, Any]) -> Dict[str, Any]:
        with self._storage_errors("reemplazar"):
            instance = self._get(item_id)
            for key, value in record.items():
                setattr(instance, key, value)
            if self.touched_key:
                setattr(instance, self.touched_key, utcnow())
            self.db.commit()
            self.db.refresh(instance)
            return self.to_dict(instance)

    def apply_partial(self, item_id: Any, pairs: UpdatePairs) -> Dict[str, Any]:
        """UPDATE ... SET sólo con las columnas recibidas."""
        pk = self._parse_id(item_id)
        with self._storage_errors("actualizar"):
            updated = (
                self.db.query(self.model)
                .filter(self.model.id == pk)
                .update(dict(pairs), synchronize_session=False)
            )
            if updated == 0:
                self.db.rollback()
                raise NotFoundError(self.not_found_message)
            self.db.commit()
            return self.to_dict(self._get(pk))

    def remove(self, item_id: Any) -> None:
        pk = self._parse_id(item_id)
        with self._storage_errors("eliminar"):
            deleted = self.db.query(self.model).filter(self.model.id == pk).delete(synchronize_session=False)
            if deleted == 0:
                self.db.rollback()
                raise NotFoundError(self.not_found_message)
            self.db.commit()


class GameRepository(SqlRepository):
    model = Game
    field_map = SQL_GAME_FIELDS
    touched_key = "updated_at"
    timestamps = {"createdAt": "created_at", "updatedAt": "updated_at"}
    not_found_message = "Juego no encontrado"


class UsuarioRepository(SqlRepository):
    model = Usuario
    field_map = USER_FIELDS
    timestamps = {"createdAt": "created_at"}
    not_found_message = "Usuario no encontrado"
    conflict_message = "El email ya está registrado"

    def email_taken(self, email: str, exclude_id: Any = None) -> bool:
        with self._storage_errors("buscar email"):
            query = self.db.query(Usuario.id).filter(Usuario.email == email)
            if exclude_id is not None:
                query = query.filter(Usuario.id != self._parse_id(exclude_id))
            return query.first() is not None

    def fetch_credentials(self, email: str) -> Optional[Tuple[Dict[str, Any], str]]:
        """Usuario público y hash de su contraseña, o None si el email no existe."""
        with self._storage_errors("autenticar"):
            usuario = self.db.query(Usuario).filter(Usuario.email == email).first()
            if usuario is None:
                return None
            return self.to_dict(usuario), usuario.password_hash
