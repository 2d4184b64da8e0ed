"""
Sesión: GET /auth/me devuelve el contexto resuelto en el servidor
(rol, delegación propia y efectiva) y los permisos del rol.
"""

from fastapi import APIRouter

from designaciones.deps import DelegateContextDep, CurrentUserDep
from designaciones.models import MeResponse
from designaciones.roles import RbacAction, can


router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/me", response_model=MeResponse)
def me(current_user: CurrentUserDep, ctx: DelegateContextDep) -> MeResponse:
    """Perfil del usuario autenticado. Sin rol resoluble responde 403."""
    return MeResponse(
        uid=ctx.uid,
        email=current_user.email,
        role=ctx.role,
        user_delegate_id=ctx.user_delegate_id,
        effective_delegate_id=ctx.effective_delegate_id,
        is_super=ctx.is_super,
        permissions={action.value: can(ctx.role, action) for action in RbacAction},
    )
