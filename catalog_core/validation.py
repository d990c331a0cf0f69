"""
Validación de payloads de juegos y usuarios.

Dos modos:
  - completo (crear / reemplazar): todos los campos son obligatorios.
  - parcial (modificar): los campos ausentes se ignoran, los presentes deben
    cumplir la misma regla que en modo completo.

Las reglas viven en los schemas de `catalog_core.schemas`; aquí se traducen
los errores de Pydantic a la lista de defectos que recibe el cliente (vacía si
el payload es aceptable). Nunca se detienen en el primer defecto.
"""

from typing import Any, Dict, List, Mapping, Type

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from catalog_core.schemas import (
    NUMBER_BOUNDS,
    REQUIREMENT_FIELDS,
    GameCreate,
    GameUpdate,
    UsuarioCreate,
    UsuarioUpdate,
)

LIST_FIELDS = ("platform", "features")


def _message(error: Dict[str, Any], partial: bool) -> str:
    loc = error["loc"]
    kind = error["type"]
    field = loc[0]

    if len(loc) == 1 and kind == "missing":
        return f"'{field}' es obligatorio"
    if field in LIST_FIELDS:
        return f"'{field}' debe ser una lista de textos"
    if field == "requirements":
        if len(loc) == 1:
            return f"'{field}' debe ser un objeto con {', '.join(REQUIREMENT_FIELDS)}"
        if partial:
            return f"'{field}.{loc[1]}' debe ser texto"
        return f"'{field}.{loc[1]}' es obligatorio y debe ser texto"
    if field in NUMBER_BOUNDS:
        minimum, maximum = NUMBER_BOUNDS[field]
        if kind not in ("greater_than_equal", "less_than_equal"):
            return f"'{field}' debe ser numérico"
        if maximum is None:
            return f"'{field}' debe ser mayor o igual a {minimum}"
        return f"'{field}' debe estar entre {minimum} y {maximum}"
    if field == "releaseDate":
        return f"'{field}' debe tener el formato YYYY-MM-DD"
    if field == "featured":
        return f"'{field}' debe ser booleano"
    if field == "email" and kind == "value_error":
        return f"'{field}' no es un email válido"
    if kind == "blank_text":
        return f"'{field}' no puede estar vacío"
    if kind == "string_too_short" and error.get("ctx", {}).get("min_length", 1) > 1:
        return f"'{field}' debe tener al menos {error['ctx']['min_length']} caracteres"
    return f"'{field}' debe ser un texto no vacío"


def defects_from(exc: PydanticValidationError, partial: bool = False) -> List[str]:
    """Convierte los errores de Pydantic en defectos legibles, en el orden de los campos del schema."""
    defects: List[str] = []
    for error in exc.errors():
        message = _message(error, partial)
        # Varios elementos inválidos de una misma lista dan un solo defecto
        if message not in defects:
            defects.append(message)
    return defects


def validate(data: Mapping[str, Any], schema: Type[BaseModel], partial: bool = False) -> List[str]:
    try:
        schema.model_validate(dict(data))
    except PydanticValidationError as exc:
        return defects_from(exc, partial)
    return []


def validate_game(data: Mapping[str, Any], partial: bool = False) -> List[str]:
    return validate(data, GameUpdate if partial else GameCreate, partial)


def validate_user(data: Mapping[str, Any], partial: bool = False) -> List[str]:
    return validate(data, UsuarioUpdate if partial else UsuarioCreate, partial)
