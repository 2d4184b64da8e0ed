"""
Excepciones de dominio para la capa de servicios.

main.py las traduce a respuestas HTTP (400, 403, 404, 409) según el tipo.
No dependen de FastAPI.
"""

from typing import Any, Dict, List, Optional


class DomainError(Exception):
    """Base para errores de negocio."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ValidationError(DomainError):
    """Payload mal formado. field_errors: ruta del campo -> mensajes."""

    def __init__(
        self,
        message: str = "Revisa los campos del formulario.",
        field_errors: Optional[Dict[str, List[str]]] = None,
    ) -> None:
        super().__init__(message)
        self.field_errors: Dict[str, List[str]] = field_errors or {}


class AuthorizationError(DomainError):
    """Rol, acción o delegación no permitidos. El mensaje no se expone al cliente."""


class NotFoundError(DomainError):
    """Recurso no encontrado."""


class ConflictError(DomainError):
    """Duplicado dentro del ámbito (ej. mismo nombre y temporada en la delegación)."""


class AssignmentRejectedError(ConflictError):
    """
    Terna rechazada por una validación de designación.
    code identifica la regla (DUPLICATE_REFEREES, SCHEDULE_CONFLICT...);
    details viaja tal cual en la respuesta 409.
    """

    def __init__(self, code: str, message: str, **details: Any) -> None:
        super().__init__(message)
        self.code = code
        self.details: Dict[str, Any] = details
