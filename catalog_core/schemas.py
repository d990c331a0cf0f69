"""Modelos Pydantic (schemas) para validar los payloads de juegos y usuarios."""

import math
from typing import Annotated, Any, Dict, List

from pydantic import BaseModel, BeforeValidator, EmailStr, Field, StrictBool, StrictStr, field_validator
from pydantic_core import PydanticCustomError

# Sólo el patrón, sin comprobar que la fecha exista en el calendario
RELEASE_DATE_PATTERN = r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$"
MIN_PASSWORD_LENGTH = 8
REQUIREMENT_FIELDS = ("os", "processor", "memory", "graphics", "storage")

# Límites inclusivos (mínimo, máximo) de los campos numéricos
NUMBER_BOUNDS = {
    "price": (0, None),
    "originalPrice": (0, None),
    "discount": (0, 100),
    "rating": (0, 5),
}


def _finite_number(value: Any) -> Any:
    # bool es subclase de int, pero no es un número válido aquí
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise PydanticCustomError("number_type", "debe ser numérico")
    try:
        finite = math.isfinite(value)
    except OverflowError:
        finite = False
    if not finite:
        raise PydanticCustomError("number_type", "debe ser numérico")
    return value


def _not_blank(value: str) -> str:
    if not value.strip():
        raise PydanticCustomError("blank_text", "no puede estar vacío")
    return value


Text = Annotated[StrictStr, Field(min_length=1)]
Number = Annotated[float, BeforeValidator(_finite_number)]
TextList = List[StrictStr]

GAME_TEXT_FIELDS = ("title", "image", "category", "description", "publisher")


# --- Schemas de Juego ---

class Requirements(BaseModel):
    """Requisitos del sistema: los cinco sub-campos son obligatorios."""
    os: Text
    processor: Text
    memory: Text
    graphics: Text
    storage: Text


class RequirementsUpdate(BaseModel):
    """En una modificación sólo se comprueban los sub-campos enviados."""
    os: StrictStr = None
    processor: StrictStr = None
    memory: StrictStr = None
    graphics: StrictStr = None
    storage: StrictStr = None


class GameCreate(BaseModel):
    """Schema para crear o reemplazar un juego. El orden de los campos define el orden de los defectos."""
    title: Text
    price: Number = Field(..., ge=0)
    originalPrice: Number = Field(..., ge=0)
    discount: Number = Field(..., ge=0, le=100)
    image: Text
    category: Text
    platform: TextList
    rating: Number = Field(..., ge=0, le=5)
    description: Text
    requirements: Requirements
    features: TextList
    releaseDate: StrictStr = Field(..., pattern=RELEASE_DATE_PATTERN)
    publisher: Text
    featured: StrictBool


class GameUpdate(BaseModel):
    """
    Schema para una modificación parcial. Los campos ausentes toman el valor por
    defecto (que no se valida); los presentes, incluido un null, se validan con
    la misma regla que al crear.
    """
    title: Text = None
    price: Number = Field(None, ge=0)
    originalPrice: Number = Field(None, ge=0)
    discount: Number = Field(None, ge=0, le=100)
    image: Text = None
    category: Text = None
    platform: TextList = None
    rating: Number = Field(None, ge=0, le=5)
    description: Text = None
    requirements: RequirementsUpdate = None
    features: TextList = None
    releaseDate: StrictStr = Field(None, pattern=RELEASE_DATE_PATTERN)
    publisher: Text = None
    featured: StrictBool = None

    @field_validator(*GAME_TEXT_FIELDS)
    @classmethod
    def text_not_blank(cls, value: str) -> str:
        return _not_blank(value)


# --- Schemas de Usuario ---

class UsuarioCreate(BaseModel):
    """Schema para registrar o reemplazar un usuario."""
    nombre: Text
    email: EmailStr
    password: StrictStr = Field(..., min_length=MIN_PASSWORD_LENGTH, description="La contraseña debe tener al menos 8 caracteres")


class UsuarioUpdate(BaseModel):
    nombre: Text = None
    email: EmailStr = None
    password: StrictStr = Field(None, min_length=MIN_PASSWORD_LENGTH)

    @field_validator("nombre", "password")
    @classmethod
    def text_not_blank(cls, value: str) -> str:
        return _not_blank(value)


# --- Schemas de Login ---

class LoginRequest(BaseModel):
    email: str
    password: str


class LoginResponse(BaseModel):
    """Token de acceso JWT y los datos públicos del usuario autenticado."""
    access_token: str
    token_type: str = "bearer"
    usuario: Dict[str, Any]
