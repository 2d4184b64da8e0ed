"""
Resolución del ámbito de delegación (multi-tenant) por request.

Frontera de confianza:
- role y user_delegate_id vienen del token/perfil verificados en el servidor.
- active_delegate_id viene del cliente (cookie o query) y SOLO se usa
  para SUPERUSUARIO. Para DELEGADO se ignora siempre.

Sin rol resoluble todo se deniega; nunca se cae a "todas las delegaciones".
"""

import logging
from typing import Any, Mapping, Optional

from designaciones.cache import TTLCache, scope_cache_key
from designaciones.models import CurrentUser, DelegateContext
from designaciones.roles import Role, can_edit_designaciones, can_override_designaciones
from designaciones.services.exceptions import AuthorizationError

logger = logging.getLogger(__name__)


def resolve_effective_delegate_id(
    role: Optional[Role],
    user_delegate_id: Optional[str],
    active_delegate_id: Optional[str] = None,
) -> Optional[str]:
    """
    - DELEGADO: siempre su propio delegate_id (el valor del cliente se ignora).
    - SUPERUSUARIO: el delegado activo elegido en UI, o None (vista global).
    - ASISTENTE / ARBITRO: None (no aplica).
    """
    if role == Role.DELEGADO:
        return user_delegate_id or None
    if role == Role.SUPERUSUARIO:
        return (active_delegate_id or "").strip() or None
    return None


def build_delegate_context(
    user: Optional[CurrentUser],
    active_delegate_id: Optional[str] = None,
) -> DelegateContext:
    """Arma el contexto de la sesión. Lanza AuthorizationError si no hay usuario o rol."""
    if user is None or not user.user_id:
        raise AuthorizationError("No hay sesión activa.")
    if user.role is None:
        raise AuthorizationError(f"Usuario {user.user_id} sin rol asignado.")

    if user.role == Role.DELEGADO and active_delegate_id and active_delegate_id != user.delegate_id:
        logger.warning(
            "DELEGADO %s envió activeDelegateId=%s; se ignora y se usa %s",
            user.user_id,
            active_delegate_id,
            user.delegate_id,
        )

    return DelegateContext(
        uid=user.user_id,
        role=user.role,
        user_delegate_id=user.delegate_id,
        effective_delegate_id=resolve_effective_delegate_id(
            user.role, user.delegate_id, active_delegate_id
        ),
    )


def require_delegate_context(ctx: DelegateContext) -> DelegateContext:
    """Un DELEGADO sin delegate_id configurado no puede operar."""
    if ctx.role == Role.DELEGADO and not ctx.effective_delegate_id:
        raise AuthorizationError(
            "Tu cuenta de delegado no tiene un delegate_id asignado. Contacta al administrador."
        )
    return ctx


def read_scope(ctx: DelegateContext) -> Optional[str]:
    """
    Delegado con el que se filtran las lecturas de catálogo.
    None solo es posible para SUPERUSUARIO en vista global.
    """
    if ctx.is_super:
        return ctx.effective_delegate_id
    if ctx.role == Role.DELEGADO:
        return assert_effective_delegate_id(ctx)
    raise AuthorizationError(f"El rol {ctx.role.value} no tiene acceso a catálogos de delegación.")


def assert_effective_delegate_id(ctx: DelegateContext) -> str:
    """Operaciones que exigen un delegado concreto (crear ligas, árbitros...)."""
    if not ctx.effective_delegate_id:
        if ctx.role == Role.DELEGADO:
            raise AuthorizationError("Tu cuenta no tiene delegate_id asignado.")
        raise AuthorizationError("Se requiere seleccionar un delegado para esta operación.")
    return ctx.effective_delegate_id


def assert_doc_belongs_to_delegate(doc: Optional[Mapping[str, Any]], ctx: DelegateContext) -> None:
    """
    Valida que un registro pertenezca al delegado del contexto.

    - Registro con delegate_id: debe coincidir, salvo SUPERUSUARIO en vista global.
    - Registro sin delegate_id (legacy): solo SUPERUSUARIO.
    """
    if not doc:
        raise AuthorizationError("Documento no encontrado.")

    doc_delegate_id = doc.get("delegate_id")
    if isinstance(doc_delegate_id, str) and doc_delegate_id:
        if ctx.is_super and not ctx.effective_delegate_id:
            return
        if doc_delegate_id != ctx.effective_delegate_id:
            raise AuthorizationError(
                f"Registro de {doc_delegate_id} fuera del ámbito {ctx.effective_delegate_id}."
            )
        return

    if ctx.is_super:
        return
    raise AuthorizationError("Este recurso aún no está asignado a ningún delegado.")


def assert_can_edit(ctx: DelegateContext) -> None:
    """Escrituras: create, update y delete de designaciones según la matriz."""
    if not can_edit_designaciones(ctx.role):
        raise AuthorizationError(f"El rol {ctx.role.value} no puede editar.")


def assert_can_override(ctx: DelegateContext) -> None:
    if not can_override_designaciones(ctx.role):
        raise AuthorizationError(f"El rol {ctx.role.value} no puede forzar designaciones.")


def assert_is_superuser(ctx: DelegateContext) -> None:
    if not ctx.is_super:
        raise AuthorizationError("Requiere rol SUPERUSUARIO.")


def switch_active_delegate(
    ctx: DelegateContext,
    new_delegate_id: Optional[str],
    cache: TTLCache,
) -> Optional[str]:
    """
    Cambia el delegado activo del SUPERUSUARIO e invalida la caché del ámbito anterior
    antes de que se sirva ninguna lectura con el nuevo.
    Devuelve el nuevo delegado efectivo (None = vista global).
    """
    assert_is_superuser(ctx)
    new_id = (new_delegate_id or "").strip() or None
    previous = ctx.effective_delegate_id
    if previous != new_id:
        removed = cache.invalidate_prefix(scope_cache_key(previous))
        logger.info(
            "SUPERUSUARIO %s cambia delegado activo %s -> %s (%d entradas invalidadas)",
            ctx.uid,
            previous or "global",
            new_id or "global",
            removed,
        )
    return new_id
