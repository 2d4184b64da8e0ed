"""
Dependencias de seguridad y ámbito para FastAPI.

- get_current_user valida el JWT de Supabase Auth y resuelve rol y
  delegate_id: primero desde app_metadata del token, después desde
  public.profiles (con caché por user_id).
- get_delegate_context arma el DelegateContext del request con el delegado
  activo (query activeDelegateId o cookie del mismo nombre).
- get_*_service construyen los servicios con repositorios ya scoped.
"""

import logging
from typing import Annotated, Any, Dict, Optional, Tuple

import jwt
from fastapi import Cookie, Depends, HTTPException, Query, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from supabase import Client

from designaciones.cache import profile_cache
from designaciones.config import ACTIVE_DELEGATE_COOKIE, SKIP_AUTH, SUPABASE_JWT_SECRET
from designaciones.database import get_supabase_client
from designaciones.models import CurrentUser, DelegateContext
from designaciones.repositories import (
    DelegatesRepository,
    GroupsRepository,
    InternalRulesRepository,
    LeaguesRepository,
    MatchdaysRepository,
    MatchesRepository,
    ProfilesRepository,
    RefereesRepository,
    TeamsRepository,
)
from designaciones.roles import Role, normalize_role
from designaciones.services import (
    AssignmentsService,
    DelegatesService,
    InternalRulesService,
    LeaguesService,
    MatchdaysService,
    RefereesService,
    SuggestionsService,
    TeamsService,
    UsersService,
)
from designaciones.services.delegate_scope import build_delegate_context, read_scope, require_delegate_context

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

JWT_AUDIENCE = "authenticated"


def get_db() -> Client:
    """Cliente Supabase del proceso. Los tests lo sustituyen vía dependency_overrides."""
    return get_supabase_client()


DbDep = Annotated[Client, Depends(get_db)]


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _get_dummy_user() -> CurrentUser:
    """Usuario dummy para desarrollo cuando SKIP_AUTH=true."""
    return CurrentUser(
        user_id="dev-dummy-user",
        email="dev@localhost",
        role=Role.SUPERUSUARIO,
        delegate_id=None,
    )


def _decode_token(token: str, db: Client) -> Dict[str, Any]:
    """Verifica el JWT localmente; si no se puede, lo valida contra Supabase Auth."""
    if SUPABASE_JWT_SECRET:
        try:
            return jwt.decode(
                token,
                SUPABASE_JWT_SECRET,
                audience=JWT_AUDIENCE,
                algorithms=["HS256"],
            )
        except jwt.ExpiredSignatureError:
            raise _unauthorized("Token expirado.")
        except jwt.InvalidTokenError:
            pass

    # Fallback: si la verificación local falla (ej. Supabase usa ECC), validar con la API
    try:
        user_resp = db.auth.get_user(token)
    except Exception as e:
        logger.info("Validación remota del token fallida: %s", e)
        raise _unauthorized("Token inválido o expirado.") from e
    if not user_resp or not user_resp.user:
        raise _unauthorized("Token inválido.")
    user = user_resp.user
    return {
        "sub": str(user.id),
        "email": user.email or "",
        "aud": JWT_AUDIENCE,
        "app_metadata": getattr(user, "app_metadata", None) or {},
    }


def _claims_identity(payload: Dict[str, Any]) -> Tuple[Optional[Role], Optional[str]]:
    claims = payload.get("app_metadata") or {}
    role = normalize_role(claims.get("role"))
    delegate_id = claims.get("delegateId") or claims.get("delegate_id")
    return role, (str(delegate_id) if delegate_id else None)


def _profile_identity(db: Client, user_id: str) -> Tuple[Optional[Role], Optional[str]]:
    """(role, delegate_id) desde public.profiles, cacheado por user_id."""
    cached = profile_cache.get(user_id)
    if cached is not None:
        return cached

    profile = ProfilesRepository(db).get_profile(user_id)
    if not profile:
        logger.warning("Usuario %s sin perfil en profiles", user_id)
        return None, None

    identity = (normalize_role(profile.get("role")), profile.get("delegate_id") or None)
    profile_cache.set(user_id, identity)
    return identity


async def get_current_user(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    db: DbDep,
) -> CurrentUser:
    """
    Valida el JWT Bearer y devuelve el usuario con rol y delegación.

    1. Si SKIP_AUTH=true y no hay token, devuelve usuario dummy (desarrollo).
    2. Verifica el token (secreto HS256 o API de Supabase Auth).
    3. Rol y delegate_id desde app_metadata; lo que falte, desde profiles.
    """
    if credentials is None:
        if SKIP_AUTH:
            return _get_dummy_user()
        raise _unauthorized("No se proporcionó token de autorización.")

    payload = _decode_token(credentials.credentials, db)

    user_id = payload.get("sub")
    if not user_id:
        raise _unauthorized("Token malformado: falta sub.")

    role, delegate_id = _claims_identity(payload)
    if role is None or (role == Role.DELEGADO and not delegate_id):
        profile_role, profile_delegate_id = _profile_identity(db, user_id)
        role = role or profile_role
        delegate_id = delegate_id or profile_delegate_id

    return CurrentUser(
        user_id=user_id,
        email=payload.get("email") or "",
        role=role,
        delegate_id=delegate_id,
    )


CurrentUserDep = Annotated[CurrentUser, Depends(get_current_user)]


def get_delegate_context(
    user: CurrentUserDep,
    active_delegate_query: Annotated[Optional[str], Query(alias="activeDelegateId")] = None,
    active_delegate_cookie: Annotated[Optional[str], Cookie(alias=ACTIVE_DELEGATE_COOKIE)] = None,
) -> DelegateContext:
    """
    Contexto de delegación del request. El query param tiene prioridad sobre la cookie.
    Lanza AuthorizationError (403) si el usuario no tiene rol o un DELEGADO no tiene delegación.
    """
    active = active_delegate_query or active_delegate_cookie
    return require_delegate_context(build_delegate_context(user, active))


DelegateContextDep = Annotated[DelegateContext, Depends(get_delegate_context)]


def get_read_scope(ctx: DelegateContextDep) -> Optional[str]:
    """delegate_id con el que se construyen los repositorios (None = vista global)."""
    return read_scope(ctx)


ReadScopeDep = Annotated[Optional[str], Depends(get_read_scope)]


# ----- Servicios -----


def get_leagues_service(db: DbDep, ctx: DelegateContextDep, scope: ReadScopeDep) -> LeaguesService:
    return LeaguesService(
        LeaguesRepository(db, scope),
        GroupsRepository(db, scope),
        TeamsRepository(db, scope),
        MatchdaysRepository(db, scope),
        ctx,
    )


def get_teams_service(db: DbDep, ctx: DelegateContextDep, scope: ReadScopeDep) -> TeamsService:
    return TeamsService(TeamsRepository(db, scope), GroupsRepository(db, scope), ctx)


def get_referees_service(db: DbDep, ctx: DelegateContextDep, scope: ReadScopeDep) -> RefereesService:
    return RefereesService(RefereesRepository(db, scope), ctx)


def get_internal_rules_service(
    db: DbDep, ctx: DelegateContextDep, scope: ReadScopeDep
) -> InternalRulesService:
    return InternalRulesService(InternalRulesRepository(db, scope), RefereesRepository(db, scope), ctx)


def get_matchdays_service(db: DbDep, ctx: DelegateContextDep, scope: ReadScopeDep) -> MatchdaysService:
    return MatchdaysService(
        MatchdaysRepository(db, scope),
        MatchesRepository(db, scope),
        GroupsRepository(db, scope),
        TeamsRepository(db, scope),
        ctx,
    )


def get_suggestions_service(
    db: DbDep,
    matchdays: Annotated[MatchdaysService, Depends(get_matchdays_service)],
    rules: Annotated[InternalRulesService, Depends(get_internal_rules_service)],
    scope: ReadScopeDep,
) -> SuggestionsService:
    return SuggestionsService(matchdays, rules, RefereesRepository(db, scope))


def get_delegates_service(db: DbDep, ctx: DelegateContextDep) -> DelegatesService:
    return DelegatesService(DelegatesRepository(db), ctx)


def get_assignments_service(
    db: DbDep,
    ctx: DelegateContextDep,
    matchdays: Annotated[MatchdaysService, Depends(get_matchdays_service)],
    scope: ReadScopeDep,
) -> AssignmentsService:
    return AssignmentsService(
        matchdays,
        MatchdaysRepository(db, scope),
        MatchesRepository(db, scope),
        RefereesRepository(db, scope),
        LeaguesRepository(db, scope),
        ctx,
    )


def get_users_service(db: DbDep, ctx: DelegateContextDep) -> UsersService:
    return UsersService(db, ProfilesRepository(db), DelegatesRepository(db), ctx)
