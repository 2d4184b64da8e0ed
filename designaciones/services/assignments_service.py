"""
Servicio de designaciones: guardar la terna (central, AA1, AA2) de un partido.

Antes de escribir se valida, en este orden:
  1. Árbitros repetidos dentro de la terna.
  2. Árbitros existentes en el ámbito y DISPONIBLES.
  3. Repetición de equipo: ningún árbitro de la terna puede haber estado en un
     partido de local o visitante en las 4 jornadas anteriores del grupo.
     Un SUPERUSUARIO puede ignorarlo con ignore_recent_team_conflicts.
  4. Choque de horario con otro partido del mismo árbitro.
  5. RCS del central contra el MDS del partido: BLOCK rechaza, WARN guarda
     y devuelve code RCS_BELOW_THRESHOLD_WARNING.

Las reglas internas RA-XX no se aplican aquí; solo filtran sugerencias.
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Mapping, Optional

from designaciones.cache import invalidate_entity
from designaciones.config import RCS_BELOW_MDS_POLICY, SCHEDULE_CONFLICT_WINDOW_MINUTES
from designaciones.models import (
    AssignmentResult,
    DelegateContext,
    RcsEvaluation,
    RcsPolicy,
    RecentTeamConflict,
    RefRole,
    RefStatus,
    ScheduleConflict,
    TernaAssignment,
)
from designaciones.repositories.leagues_repository import LeaguesRepository
from designaciones.repositories.matchdays_repository import MatchdaysRepository, MatchesRepository
from designaciones.repositories.referees_repository import RefereesRepository
from designaciones.services.delegate_scope import assert_can_edit, assert_can_override
from designaciones.services.difficulty import referee_tier_to_rcs_central
from designaciones.services.exceptions import AssignmentRejectedError
from designaciones.services.matchdays_service import MatchdaysService

logger = logging.getLogger(__name__)

RECENT_MATCHDAYS = 4

SLOT_COLUMNS: Dict[RefRole, str] = {
    RefRole.CENTRAL: "central_referee_id",
    RefRole.AA1: "aa1_referee_id",
    RefRole.AA2: "aa2_referee_id",
}


def _policy(raw: Any) -> RcsPolicy:
    try:
        return RcsPolicy(str(raw or "").strip().upper())
    except ValueError:
        return RcsPolicy.WARN


def _parse_kickoff(raw: Any) -> Optional[datetime]:
    if isinstance(raw, datetime):
        return raw
    if not raw:
        return None
    try:
        return datetime.fromisoformat(str(raw))
    except ValueError:
        logger.warning("kickoff con formato inválido: %r", raw)
        return None


def _referees_in(match: Mapping[str, Any]) -> List[str]:
    return [match[c] for c in SLOT_COLUMNS.values() if match.get(c)]


class AssignmentsService:
    def __init__(
        self,
        matchdays_service: MatchdaysService,
        matchdays_repo: MatchdaysRepository,
        matches_repo: MatchesRepository,
        referees_repo: RefereesRepository,
        leagues_repo: LeaguesRepository,
        ctx: DelegateContext,
    ) -> None:
        self._matchdays_service = matchdays_service
        self._matchdays = matchdays_repo
        self._matches = matches_repo
        self._referees = referees_repo
        self._leagues = leagues_repo
        self._ctx = ctx

    # ----- Validaciones -----

    def find_recent_team_conflicts(
        self,
        match: Mapping[str, Any],
        slots: Mapping[RefRole, str],
    ) -> List[RecentTeamConflict]:
        """Partidos de las 4 jornadas previas con el mismo equipo y algún árbitro de la terna."""
        matchday = self._matchdays.get_by_id(match.get("matchday_id")) if match.get("matchday_id") else None
        number = int((matchday or {}).get("number") or 0)
        if number <= 1:
            return []

        previous = self._matchdays.list_numbers_between(
            match.get("group_id") or matchday.get("group_id"),
            max(1, number - RECENT_MATCHDAYS),
            number - 1,
        )
        numbers = {md["id"]: int(md.get("number") or 0) for md in previous}
        teams = {t for t in (match.get("home_team_id"), match.get("away_team_id")) if t}
        role_by_referee = {referee_id: role for role, referee_id in slots.items()}

        conflicts: List[RecentTeamConflict] = []
        seen = set()
        for other in self._matches.list_by_matchdays(list(numbers)):
            if other.get("id") == match.get("id"):
                continue
            shared = [t for t in (other.get("home_team_id"), other.get("away_team_id")) if t in teams]
            for referee_id in _referees_in(other):
                role = role_by_referee.get(referee_id)
                if role is None:
                    continue
                for team_id in shared:
                    key = (role, referee_id, team_id, other["id"])
                    if key in seen:
                        continue
                    seen.add(key)
                    conflicts.append(
                        RecentTeamConflict(
                            role=role,
                            referee_id=referee_id,
                            team_id=team_id,
                            matchday_number=numbers.get(other.get("matchday_id"), 0),
                            match_id=other["id"],
                        )
                    )
        return conflicts

    def find_schedule_conflicts(
        self,
        match: Mapping[str, Any],
        slots: Mapping[RefRole, str],
    ) -> List[ScheduleConflict]:
        """Otros partidos a menos de la ventana configurada con algún árbitro de la terna."""
        kickoff = _parse_kickoff(match.get("kickoff"))
        if kickoff is None:
            return []
        window = timedelta(minutes=SCHEDULE_CONFLICT_WINDOW_MINUTES)
        nearby = self._matches.list_kickoff_between(
            (kickoff - window).isoformat(),
            (kickoff + window).isoformat(),
        )

        role_by_referee = {referee_id: role for role, referee_id in slots.items()}
        conflicts: List[ScheduleConflict] = []
        for other in nearby:
            if other.get("id") == match.get("id"):
                continue
            for referee_id in dict.fromkeys(_referees_in(other)):
                role = role_by_referee.get(referee_id)
                if role is not None:
                    conflicts.append(
                        ScheduleConflict(
                            role=role,
                            referee_id=referee_id,
                            match_id=other["id"],
                            kickoff=other.get("kickoff"),
                        )
                    )
        return conflicts

    def evaluate_central_rcs(self, match: Mapping[str, Any], central: Mapping[str, Any]) -> RcsEvaluation:
        mds = self._matchdays_service.get_match_mds(match["id"]).mds
        rcs = referee_tier_to_rcs_central(central.get("tier"))

        league = self._leagues.get_by_id(match["league_id"]) if match.get("league_id") else None
        policy = _policy((league or {}).get("rcs_policy") or RCS_BELOW_MDS_POLICY)
        below = mds is not None and (rcs is None or rcs < mds)
        return RcsEvaluation(mds=mds, rcs_central=rcs, below_threshold=below, policy=policy)

    # ----- Escritura -----

    def assign_terna(self, match_id: str, payload: TernaAssignment) -> AssignmentResult:
        assert_can_edit(self._ctx)
        if payload.ignore_recent_team_conflicts:
            assert_can_override(self._ctx)

        slots = payload.slots()
        if len(set(slots.values())) < len(slots):
            raise AssignmentRejectedError(
                "DUPLICATE_REFEREES",
                "Un árbitro no puede repetirse como central y asistente en la misma terna.",
            )

        match = self._matchdays_service.get_match(match_id)

        referees = {r["id"]: r for r in self._referees.get_many(list(slots.values()))}
        unavailable = [
            referee_id
            for referee_id in slots.values()
            if str((referees.get(referee_id) or {}).get("status") or "").upper() != RefStatus.DISPONIBLE.value
        ]
        if unavailable:
            raise AssignmentRejectedError(
                "REFEREE_NOT_AVAILABLE",
                "Uno o más árbitros no están disponibles.",
                unavailable_refs=unavailable,
            )

        conflicts = self.find_recent_team_conflicts(match, slots)
        if conflicts:
            if not payload.ignore_recent_team_conflicts:
                raise AssignmentRejectedError(
                    "RECENT_TEAM_CONFLICT",
                    "Algún árbitro ya estuvo con este equipo en las últimas 4 jornadas.",
                    conflicts=[c.model_dump(mode="json") for c in conflicts],
                )
            logger.info(
                "%s ignora %d conflictos de equipo reciente en partido %s",
                self._ctx.uid,
                len(conflicts),
                match_id,
            )

        schedule_conflicts = self.find_schedule_conflicts(match, slots)
        if schedule_conflicts:
            raise AssignmentRejectedError(
                "SCHEDULE_CONFLICT",
                "Choque de horario: algún árbitro ya tiene otro partido a esa hora.",
                schedule_conflicts=[c.model_dump(mode="json") for c in schedule_conflicts],
            )

        evaluation = self.evaluate_central_rcs(match, referees[payload.central_referee_id])
        if evaluation.below_threshold and evaluation.policy == RcsPolicy.BLOCK:
            raise AssignmentRejectedError(
                "RCS_BELOW_THRESHOLD_BLOCK",
                "El RCS del central está por debajo del mínimo permitido para este partido.",
                rcs_evaluation=evaluation.model_dump(mode="json"),
            )

        changes: Dict[str, Any] = {"assigned_by": self._ctx.uid}
        for role, referee_id in slots.items():
            column = SLOT_COLUMNS[role]
            changes[column] = referee_id
            changes[column.replace("_id", "_name")] = referees[referee_id].get("name")
        updated = self._matches.update(match_id, changes)
        invalidate_entity("matches", match.get("delegate_id"))
        logger.info("Terna asignada en partido %s por %s", match_id, self._ctx.uid)

        code = "RCS_BELOW_THRESHOLD_WARNING" if evaluation.below_threshold else "OK"
        return AssignmentResult(code=code, match=updated, rcs_evaluation=evaluation)

    def clear_terna(self, match_id: str) -> Dict[str, Any]:
        assert_can_edit(self._ctx)
        match = self._matchdays_service.get_match(match_id)
        changes: Dict[str, Any] = {"assigned_by": self._ctx.uid}
        for column in SLOT_COLUMNS.values():
            changes[column] = None
            changes[column.replace("_id", "_name")] = None
        updated = self._matches.update(match_id, changes)
        invalidate_entity("matches", match.get("delegate_id"))
        logger.info("Terna retirada del partido %s por %s", match_id, self._ctx.uid)
        return updated
