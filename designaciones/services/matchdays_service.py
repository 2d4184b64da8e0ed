"""
Servicio de jornadas y partidos.

Las jornadas se numeran solas dentro de su grupo. Cada partido expone su MDS:
si el registro trae un mds numérico explícito se respeta; si no, se calcula
con los tiers actuales de local y visitante.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

from designaciones.cache import invalidate_entity
from designaciones.models import DelegateContext, MatchCreate, MatchdayCreate, MatchdayUpdate, MatchMds
from designaciones.repositories.leagues_repository import GroupsRepository
from designaciones.repositories.matchdays_repository import MatchdaysRepository, MatchesRepository
from designaciones.repositories.teams_repository import TeamsRepository
from designaciones.services.delegate_scope import (
    assert_can_edit,
    assert_doc_belongs_to_delegate,
    assert_effective_delegate_id,
)
from designaciones.services.difficulty import compute_match_mds_from_teams, parse_team_tier
from designaciones.services.exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def stored_mds(match: Mapping[str, Any]) -> Optional[int]:
    """mds guardado en el partido (override manual), si es un número 1..4."""
    raw = match.get("mds")
    if isinstance(raw, bool) or raw is None:
        return None
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return None
    return value if 1 <= value <= 4 else None


class MatchdaysService:
    def __init__(
        self,
        matchdays_repo: MatchdaysRepository,
        matches_repo: MatchesRepository,
        groups_repo: GroupsRepository,
        teams_repo: TeamsRepository,
        ctx: DelegateContext,
    ) -> None:
        self._matchdays = matchdays_repo
        self._matches = matches_repo
        self._groups = groups_repo
        self._teams = teams_repo
        self._ctx = ctx

    def _get_scoped(self, repo, record_id: str, not_found: str) -> Dict[str, Any]:
        row = repo.get_by_id(record_id)
        if not row:
            raise NotFoundError(not_found)
        assert_doc_belongs_to_delegate(row, self._ctx)
        return row

    # ----- Jornadas -----

    def list_matchdays(self, group_id: str) -> List[Dict[str, Any]]:
        self._get_scoped(self._groups, group_id, "Grupo no encontrado.")
        return self._matchdays.list_by_group(group_id)

    def get_matchday(self, matchday_id: str) -> Dict[str, Any]:
        return self._get_scoped(self._matchdays, matchday_id, "Jornada no encontrada.")

    def create_matchday(self, group_id: str, payload: MatchdayCreate) -> Dict[str, Any]:
        assert_can_edit(self._ctx)
        delegate_id = assert_effective_delegate_id(self._ctx)
        group = self._get_scoped(self._groups, group_id, "Grupo no encontrado.")

        created = self._matchdays.create({
            "league_id": group.get("league_id"),
            "group_id": group_id,
            "number": self._matchdays.next_number(group_id),
            "start_date": payload.start_date.isoformat(),
            "end_date": payload.end_date.isoformat(),
            "status": "ACTIVE",
        })
        invalidate_entity("matchdays", delegate_id)
        return created

    def update_matchday(self, matchday_id: str, payload: MatchdayUpdate) -> Dict[str, Any]:
        assert_can_edit(self._ctx)
        existing = self.get_matchday(matchday_id)
        update_data = payload.model_dump(exclude_unset=True, exclude_none=True, mode="json")
        if not update_data:
            return existing

        start = update_data.get("start_date", existing.get("start_date"))
        end = update_data.get("end_date", existing.get("end_date"))
        # Fechas ISO (YYYY-MM-DD): la comparación de texto respeta el orden
        if start and end and str(end) < str(start):
            raise ValidationError(
                field_errors={"end_date": ["La fecha de fin no puede ser anterior a la de inicio."]}
            )

        try:
            updated = self._matchdays.update(matchday_id, update_data)
        except ValueError:
            raise NotFoundError("Jornada no encontrada.")
        invalidate_entity("matchdays", existing.get("delegate_id"))
        return updated

    # ----- Partidos -----

    def _tiers_by_team(self, matches: List[Mapping[str, Any]]) -> Dict[str, Optional[str]]:
        team_ids: List[str] = []
        for m in matches:
            team_ids.extend(t for t in (m.get("home_team_id"), m.get("away_team_id")) if t)
        if not team_ids:
            return {}
        return {t["id"]: t.get("tier") for t in self._teams.get_many(list(dict.fromkeys(team_ids)))}

    def _match_mds(self, match: Mapping[str, Any], tiers: Mapping[str, Optional[str]]) -> MatchMds:
        home_tier = parse_team_tier(tiers.get(match.get("home_team_id")))
        away_tier = parse_team_tier(tiers.get(match.get("away_team_id")))
        mds = stored_mds(match)
        if mds is None:
            mds = compute_match_mds_from_teams(home_tier, away_tier)
        return MatchMds(match_id=match["id"], home_tier=home_tier, away_tier=away_tier, mds=mds)

    def list_matches(self, matchday_id: str) -> List[Dict[str, Any]]:
        self.get_matchday(matchday_id)
        matches = self._matches.list_by_matchday(matchday_id)
        tiers = self._tiers_by_team(matches)
        return [{**m, "mds": self._match_mds(m, tiers).mds} for m in matches]

    def get_match(self, match_id: str) -> Dict[str, Any]:
        return self._get_scoped(self._matches, match_id, "Partido no encontrado.")

    def get_match_mds(self, match_id: str) -> MatchMds:
        match = self.get_match(match_id)
        return self._match_mds(match, self._tiers_by_team([match]))

    def create_match(self, matchday_id: str, payload: MatchCreate) -> Dict[str, Any]:
        assert_can_edit(self._ctx)
        delegate_id = assert_effective_delegate_id(self._ctx)
        matchday = self.get_matchday(matchday_id)

        teams = {t["id"]: t for t in self._teams.get_many([payload.home_team_id, payload.away_team_id])}
        field_errors: Dict[str, List[str]] = {}
        for field, team_id in (("home_team_id", payload.home_team_id), ("away_team_id", payload.away_team_id)):
            team = teams.get(team_id)
            if team is None:
                field_errors[field] = ["Equipo no encontrado."]
            elif team.get("group_id") != matchday.get("group_id"):
                field_errors[field] = ["El equipo no pertenece al grupo de la jornada."]
        if field_errors:
            raise ValidationError(field_errors=field_errors)

        home = teams[payload.home_team_id]
        created = self._matches.create({
            "league_id": matchday.get("league_id"),
            "group_id": matchday.get("group_id"),
            "matchday_id": matchday_id,
            "home_team_id": payload.home_team_id,
            "away_team_id": payload.away_team_id,
            "kickoff": payload.kickoff.isoformat() if payload.kickoff else None,
            "venue_name": (payload.venue_name or home.get("venue") or "").strip(),
            "municipality": (payload.municipality or home.get("municipality") or "").strip(),
        })
        invalidate_entity("matches", delegate_id)
        logger.info("Partido %s creado en jornada %s", created.get("id"), matchday_id)
        return created
