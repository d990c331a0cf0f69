"""Adaptadores de persistencia sobre colecciones de MongoDB para 'games' y 'usuarios'."""

import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Optional, Tuple

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError

from catalog_core.errors import ConflictError, NotFoundError, StorageError
from catalog_core.mapping import DOCUMENT_GAME_FIELDS, USER_FIELDS, UpdatePairs, record_from_storage, utcnow

logger = logging.getLogger(__name__)


class MongoRepository:
    collection_name = ""
    field_map = None
    touched_key: Optional[str] = None
    created_key = "createdAt"
    not_found_message = "No encontrado"
    conflict_message: Optional[str] = None

    def __init__(self, db: Database):
        self.collection = db[self.collection_name]

    @contextmanager
    def _storage_errors(self, action: str):
        try:
            yield
        except DuplicateKeyError as e:
            if self.conflict_message:
                logger.warning(f"Clave duplicada al {action} en '{self.collection_name}': {e}")
                raise ConflictError(self.conflict_message)
            logger.error(f"Clave duplicada al {action} en '{self.collection_name}': {e}", exc_info=True)
            raise StorageError()
        except PyMongoError as e:
            logger.error(f"Error de MongoDB al {action} en '{self.collection_name}': {e}", exc_info=True)
            raise StorageError()

    def _object_id(self, item_id: Any) -> ObjectId:
        try:
            return ObjectId(item_id)
        except (InvalidId, TypeError):
            raise NotFoundError(self.not_found_message)

    def to_dict(self, doc: Dict[str, Any]) -> Dict[str, Any]:
        record = {"id": str(doc["_id"])}
        record.update(record_from_storage(doc, self.field_map))
        for key in (self.created_key, self.touched_key):
            if key:
                record[key] = doc.get(key)
        return record

    def fetch_all(self) -> List[Dict[str, Any]]:
        with self._storage_errors("listar"):
            return [self.to_dict(doc) for doc in self.collection.find()]

    def fetch_one(self, item_id: Any) -> Dict[str, Any]:
        oid = self._object_id(item_id)
        with self._storage_errors("consultar"):
            doc = self.collection.find_one({"_id": oid})
        if doc is None:
            raise NotFoundError(self.not_found_message)
        return self.to_dict(doc)

    def create(self, record: Dict[str, Any]) -> Dict[str, Any]:
        now = utcnow()
        doc = dict(record)
        doc[self.created_key] = now
        if self.touched_key:
            doc[self.touched_key] = now
        with self._storage_errors("crear"):
            result = self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        return self.to_dict(doc)

    def _set(self, item_id: Any, changes: Dict[str, Any], action: str) -> Dict[str, Any]:
        oid = self._object_id(item_id)
        with self._storage_errors(action):
            doc = self.collection.find_one_and_update(
                {"_id": oid},
                {"$set": changes},
                return_document=ReturnDocument.AFTER,
            )
        if doc is None:
            raise NotFoundError(self.not_found_message)
        return self.to_dict(doc)

    def replace(self, item_id: Any, record: Dict[str, Any]) -> Dict[str, Any]:
        # $set conserva createdAt
        changes = dict(record)
        if self.touched_key:
            changes[self.touched_key] = utcnow()
        return self._set(item_id, changes, "reemplazar")

    def apply_partial(self, item_id: Any, pairs: UpdatePairs) -> Dict[str, Any]:
        return self._set(item_id, dict(pairs), "actualizar")

    def remove(self, item_id: Any) -> None:
        oid = self._object_id(item_id)
        with self._storage_errors("eliminar"):
            result = self.collection.delete_one({"_id": oid})
        if result.deleted_count == 0:
            raise NotFoundError(self.not_found_message)


class GameRepository(MongoRepository):
    collection_name = "games"
    field_map = DOCUMENT_GAME_FIELDS
    touched_key = "updatedAt"
    not_found_message = "Juego no encontrado"


class UsuarioRepository(MongoRepository):
    collection_name = "usuarios"
    field_map = USER_FIELDS
    not_found_message = "Usuario no encontrado"
    conflict_message = "El email ya está registrado"

    def email_taken(self, email: str, exclude_id: Any = None) -> bool:
        with self._storage_errors("buscar email"):
            doc = self.collection.find_one({"email": email})
        if doc is None:
            return False
        return exclude_id is None or doc["_id"] != self._object_id(exclude_id)

    def fetch_credentials(self, email: str) -> Optional[Tuple[Dict[str, Any], str]]:
        with self._storage_errors("autenticar"):
            doc = self.collection.find_one({"email": email})
        if doc is None:
            return None
        return self.to_dict(doc), doc.get("password_hash", "")
