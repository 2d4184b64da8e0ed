"""
Roles de usuario y matriz de permisos (RBAC).

Roles:
  - SUPERUSUARIO: ve y edita todo, puede cambiar de delegado activo.
  - DELEGADO: gestiona solo los datos de su delegación.
  - ASISTENTE | ARBITRO: solo lectura de designaciones.

La matriz es una constante inmutable construida al importar el módulo.
Un rol desconocido o ausente no tiene ningún permiso.
"""

from enum import Enum
from types import MappingProxyType
from typing import Mapping


class Role(str, Enum):
    SUPERUSUARIO = "SUPERUSUARIO"
    DELEGADO = "DELEGADO"
    ASISTENTE = "ASISTENTE"
    ARBITRO = "ARBITRO"


class RbacAction(str, Enum):
    USERS_SET_ROLE = "users.setRole"
    DESIGNACIONES_VIEW = "designaciones.view"
    DESIGNACIONES_CREATE = "designaciones.create"
    DESIGNACIONES_UPDATE = "designaciones.update"
    DESIGNACIONES_DELETE = "designaciones.delete"
    DESIGNACIONES_OVERRIDE = "designaciones.override"  # modificar lo del delegado


PERMISSION_MATRIX: Mapping[Role, frozenset[RbacAction]] = MappingProxyType({
    Role.SUPERUSUARIO: frozenset(RbacAction),
    Role.DELEGADO: frozenset({
        RbacAction.DESIGNACIONES_VIEW,
        RbacAction.DESIGNACIONES_CREATE,
        RbacAction.DESIGNACIONES_UPDATE,
        RbacAction.DESIGNACIONES_DELETE,
    }),
    Role.ASISTENTE: frozenset({RbacAction.DESIGNACIONES_VIEW}),
    Role.ARBITRO: frozenset({RbacAction.DESIGNACIONES_VIEW}),
})


def normalize_role(role: str | Role | None) -> Role | None:
    """Devuelve el Role correspondiente o None si no es reconocible (nunca un rol por defecto)."""
    if isinstance(role, Role):
        return role
    if not role or not str(role).strip():
        return None
    try:
        return Role(str(role).strip().upper())
    except ValueError:
        return None


def can(role: str | Role | None, action: str | RbacAction) -> bool:
    """True si el rol tiene permiso para la acción. Nunca lanza."""
    r = normalize_role(role)
    if r is None:
        return False
    try:
        a = RbacAction(action)
    except ValueError:
        return False
    return a in PERMISSION_MATRIX.get(r, frozenset())


def can_view_designaciones(role: str | Role | None) -> bool:
    return can(role, RbacAction.DESIGNACIONES_VIEW)


def can_edit_designaciones(role: str | Role | None) -> bool:
    """Todo o nada: requiere create, update y delete a la vez."""
    return (
        can(role, RbacAction.DESIGNACIONES_CREATE)
        and can(role, RbacAction.DESIGNACIONES_UPDATE)
        and can(role, RbacAction.DESIGNACIONES_DELETE)
    )


def can_override_designaciones(role: str | Role | None) -> bool:
    return can(role, RbacAction.DESIGNACIONES_OVERRIDE)


def can_set_user_role(role: str | Role | None) -> bool:
    return can(role, RbacAction.USERS_SET_ROLE)
