"""
Servicio de ligas y grupos: lógica de negocio aislada de HTTP.

Recibe repositorios ya scoped por delegación y el DelegateContext del request.
Lanza excepciones de dominio (NotFoundError, ConflictError, AuthorizationError).
"""

import logging
from typing import Any, Dict, List, Optional

from designaciones.cache import invalidate_entity, query_cache, scope_cache_key
from designaciones.models import DelegateContext, GroupCreate, GroupUpdate, LeagueCreate, LeagueUpdate
from designaciones.repositories.leagues_repository import GroupsRepository, LeaguesRepository
from designaciones.repositories.matchdays_repository import MatchdaysRepository
from designaciones.repositories.teams_repository import TeamsRepository
from designaciones.services.delegate_scope import (
    assert_can_edit,
    assert_doc_belongs_to_delegate,
    assert_effective_delegate_id,
)
from designaciones.services.exceptions import ConflictError, NotFoundError
from designaciones.utils import norm, slugify

logger = logging.getLogger(__name__)


class LeaguesService:
    """Ligas y sus grupos. Multi-tenant vía repositorio."""

    def __init__(
        self,
        leagues_repo: LeaguesRepository,
        groups_repo: GroupsRepository,
        teams_repo: TeamsRepository,
        matchdays_repo: MatchdaysRepository,
        ctx: DelegateContext,
    ) -> None:
        self._leagues = leagues_repo
        self._groups = groups_repo
        self._teams = teams_repo
        self._matchdays = matchdays_repo
        self._ctx = ctx

    # ----- Ligas -----

    def list_leagues(self, status: Optional[str] = None, search: Optional[str] = None) -> List[Dict[str, Any]]:
        key = f"{scope_cache_key(self._leagues.delegate_id)}leagues:{status or ''}:{norm(search)}"
        return query_cache.get_or_set(key, lambda: self._leagues.list_leagues(status=status, search=search))

    def get_league(self, league_id: str) -> Dict[str, Any]:
        """Liga del ámbito. Fuera de ámbito y no existente responden igual (NotFoundError)."""
        league = self._leagues.get_by_id(league_id)
        if not league:
            raise NotFoundError("Liga no encontrada.")
        assert_doc_belongs_to_delegate(league, self._ctx)
        return league

    def create_league(self, payload: LeagueCreate) -> Dict[str, Any]:
        assert_can_edit(self._ctx)
        delegate_id = assert_effective_delegate_id(self._ctx)

        name_lc = norm(payload.name)
        season_lc = norm(payload.season)
        if self._leagues.find_duplicate(delegate_id, name_lc, season_lc):
            raise ConflictError("Ya existe una liga con ese nombre y temporada en esta delegación.")

        row = {
            "name": payload.name.strip(),
            "name_lc": name_lc,
            "season": payload.season.strip(),
            "season_lc": season_lc,
            "slug": (payload.slug or "").strip() or slugify(payload.name, payload.season),
            "status": payload.status.value,
        }
        if payload.rcs_policy is not None:
            row["rcs_policy"] = payload.rcs_policy.value
        created = self._leagues.create(row)
        invalidate_entity("leagues", delegate_id)
        return created

    def update_league(self, league_id: str, payload: LeagueUpdate) -> Dict[str, Any]:
        assert_can_edit(self._ctx)
        existing = self.get_league(league_id)
        update_data = payload.model_dump(exclude_unset=True, exclude_none=True, mode="json")
        if not update_data:
            return existing

        name = update_data.get("name", existing.get("name") or "")
        season = update_data.get("season", existing.get("season") or "")
        name_lc, season_lc = norm(name), norm(season)
        if (name_lc, season_lc) != (existing.get("name_lc"), existing.get("season_lc")):
            if self._leagues.find_duplicate(existing.get("delegate_id"), name_lc, season_lc, exclude_id=league_id):
                raise ConflictError("Ya existe una liga con ese nombre y temporada en esta delegación.")

        update_data.update({"name_lc": name_lc, "season_lc": season_lc})
        if "name" in update_data:
            update_data["name"] = update_data["name"].strip()
        if "season" in update_data:
            update_data["season"] = update_data["season"].strip()
        try:
            updated = self._leagues.update(league_id, update_data)
        except ValueError:
            raise NotFoundError("Liga no encontrada.")
        invalidate_entity("leagues", existing.get("delegate_id"))
        return updated

    def delete_league(self, league_id: str) -> None:
        assert_can_edit(self._ctx)
        existing = self.get_league(league_id)
        if self._groups.list_by_league(league_id):
            raise ConflictError("La liga tiene grupos; elimínalos antes de borrar la liga.")
        self._leagues.delete(league_id)
        invalidate_entity("leagues", existing.get("delegate_id"))
        logger.info("Liga %s eliminada por %s", league_id, self._ctx.uid)

    # ----- Grupos -----

    def list_groups(self, league_id: str) -> List[Dict[str, Any]]:
        self.get_league(league_id)
        key = f"{scope_cache_key(self._groups.delegate_id)}groups:{league_id}"
        return query_cache.get_or_set(key, lambda: self._groups.list_by_league(league_id))

    def get_group(self, group_id: str) -> Dict[str, Any]:
        group = self._groups.get_by_id(group_id)
        if not group:
            raise NotFoundError("Grupo no encontrado.")
        assert_doc_belongs_to_delegate(group, self._ctx)
        return group

    def create_group(self, league_id: str, payload: GroupCreate) -> Dict[str, Any]:
        assert_can_edit(self._ctx)
        delegate_id = assert_effective_delegate_id(self._ctx)
        league = self.get_league(league_id)

        name_lc = norm(payload.name)
        if self._groups.find_duplicate(league_id, name_lc):
            raise ConflictError("Ya existe un grupo con ese nombre en la liga.")

        season = (payload.season or league.get("season") or "").strip()
        created = self._groups.create({
            "league_id": league_id,
            "name": payload.name.strip(),
            "name_lc": name_lc,
            "season": season,
            "season_lc": norm(season),
        })
        invalidate_entity("groups", delegate_id)
        return created

    def update_group(self, group_id: str, payload: GroupUpdate) -> Dict[str, Any]:
        assert_can_edit(self._ctx)
        existing = self.get_group(group_id)
        update_data = payload.model_dump(exclude_unset=True, exclude_none=True, mode="json")
        if not update_data:
            return existing

        if "name" in update_data:
            name_lc = norm(update_data["name"])
            if self._groups.find_duplicate(existing["league_id"], name_lc, exclude_id=group_id):
                raise ConflictError("Ya existe un grupo con ese nombre en la liga.")
            update_data["name"] = update_data["name"].strip()
            update_data["name_lc"] = name_lc
        if "season" in update_data:
            update_data["season_lc"] = norm(update_data["season"])

        try:
            updated = self._groups.update(group_id, update_data)
        except ValueError:
            raise NotFoundError("Grupo no encontrado.")
        invalidate_entity("groups", existing.get("delegate_id"))
        return updated

    def delete_group(self, group_id: str) -> None:
        assert_can_edit(self._ctx)
        existing = self.get_group(group_id)
        if self._teams.exists(group_id=group_id) or self._matchdays.exists(group_id=group_id):
            raise ConflictError("El grupo tiene equipos o jornadas; elimínalos antes de borrar el grupo.")
        self._groups.delete(group_id)
        invalidate_entity("groups", existing.get("delegate_id"))
