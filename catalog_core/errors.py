"""Taxonomía de errores de la API y su traducción a respuestas HTTP."""

import logging
from typing import List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Error base. Cada subclase fija su código HTTP y un mensaje por defecto."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Error interno del servidor"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)
        self.message = message or self.message

    def to_body(self) -> dict:
        return {"error": self.message}


class ValidationError(ApiError):
    """El payload tiene uno o más defectos. Se reportan todos juntos."""
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Datos inválidos"

    def __init__(self, defects: List[str], message: Optional[str] = None):
        super().__init__(message)
        self.defects = list(defects)

    def to_body(self) -> dict:
        return {"error": self.message, "details": self.defects}


class EmptyInputError(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "No se enviaron campos para actualizar"


class NoValidFieldsError(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "No hay campos válidos para actualizar"


class NotFoundError(ApiError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "No encontrado"


class ConflictError(ApiError):
    status_code = status.HTTP_409_CONFLICT
    message = "El recurso ya existe"


class AuthenticationError(ApiError):
    # Mismo mensaje para email inexistente y contraseña incorrecta
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Credenciales inválidas"


class StorageError(ApiError):
    """Fallo del almacenamiento. El detalle se registra en el log, nunca se devuelve al cliente."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Error interno del servidor"


def register_error_handlers(app: FastAPI) -> None:
    """Registra los manejadores que convierten los errores en cuerpos `{"error": ...}`."""

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
        else:
            logger.warning(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_body())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        # Cuerpo que no es JSON o no es un objeto: se trata como error del cliente (400)
        details = []
        for err in exc.errors():
            location = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
            details.append(f"{location}: {err.get('msg')}" if location else err.get("msg"))
        logger.warning(f"{request.method} {request.url.path} -> 400: cuerpo inválido {details}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Cuerpo de la petición inválido", "details": details},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        headers = getattr(exc, "headers", None)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=headers)
