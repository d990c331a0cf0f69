"""
Traducción entre los campos externos (JSON de la API) y las claves de almacenamiento.

Cada tabla es un mapeo estático `campo externo -> FieldMapping`. El orden de la
tabla es el orden de los pares que produce `build_update_pairs`.
"""

import json
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, NamedTuple, Optional, Tuple

from catalog_core.errors import NoValidFieldsError
from catalog_core.security import get_password_hash

UpdatePairs = List[Tuple[str, Any]]


class FieldMapping(NamedTuple):
    storage_key: str
    serializer: Optional[Callable[[Any], Any]] = None
    deserializer: Optional[Callable[[Any], Any]] = None
    # Los campos no legibles (p. ej. el hash de la contraseña) nunca se devuelven
    readable: bool = True


def to_json_text(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def from_json_text(value: Any) -> Any:
    if value is None or not isinstance(value, str):
        return value
    return json.loads(value)


def _json_field(storage_key: str) -> FieldMapping:
    return FieldMapping(storage_key, to_json_text, from_json_text)


# Variante relacional: columnas snake_case, estructuras como texto JSON
SQL_GAME_FIELDS: Dict[str, FieldMapping] = {
    "title": FieldMapping("title"),
    "price": FieldMapping("price"),
    "originalPrice": FieldMapping("original_price"),
    "discount": FieldMapping("discount"),
    "image": FieldMapping("image"),
    "category": FieldMapping("category"),
    "platform": _json_field("platform"),
    "rating": FieldMapping("rating"),
    "description": FieldMapping("description"),
    "requirements": _json_field("requirements"),
    "features": _json_field("features"),
    "releaseDate": FieldMapping("release_date"),
    "publisher": FieldMapping("publisher"),
    "featured": FieldMapping("featured"),
}

# Variante documental: mismas claves, las estructuras se guardan nativas
DOCUMENT_GAME_FIELDS: Dict[str, FieldMapping] = {field: FieldMapping(field) for field in SQL_GAME_FIELDS}

USER_FIELDS: Dict[str, FieldMapping] = {
    "nombre": FieldMapping("nombre"),
    "email": FieldMapping("email"),
    "password": FieldMapping("password_hash", get_password_hash, readable=False),
}


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _project(data: Mapping[str, Any], field_map: Mapping[str, FieldMapping]) -> UpdatePairs:
    pairs: UpdatePairs = []
    for field, mapping in field_map.items():
        if field not in data:
            continue
        value = data[field]
        if mapping.serializer is not None:
            value = mapping.serializer(value)
        pairs.append((mapping.storage_key, value))
    return pairs


def build_update_pairs(
    data: Mapping[str, Any],
    field_map: Mapping[str, FieldMapping],
    touched_key: Optional[str] = None,
    now: Optional[datetime] = None,
) -> UpdatePairs:
    """
    Proyecta un payload parcial (ya validado) sobre la lista permitida.

    Devuelve pares `(clave de almacenamiento, valor)` sólo para los campos
    presentes, seguidos del par de última modificación si `touched_key` está
    definido. Lanza NoValidFieldsError si ningún campo permitido vino en `data`.
    """
    pairs = _project(data, field_map)
    if not pairs:
        raise NoValidFieldsError()
    if touched_key:
        pairs.append((touched_key, now or utcnow()))
    return pairs


def build_record(data: Mapping[str, Any], field_map: Mapping[str, FieldMapping]) -> Dict[str, Any]:
    """Registro completo en claves de almacenamiento. Las claves desconocidas se descartan."""
    return dict(_project(data, field_map))


def record_from_storage(stored: Mapping[str, Any], field_map: Mapping[str, FieldMapping]) -> Dict[str, Any]:
    """Operación inversa: de claves de almacenamiento a campos externos legibles."""
    record = {}
    for field, mapping in field_map.items():
        if not mapping.readable or mapping.storage_key not in stored:
            continue
        value = stored[mapping.storage_key]
        if mapping.deserializer is not None:
            value = mapping.deserializer(value)
        record[field] = value
    return record
