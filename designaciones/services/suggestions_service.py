"""
Sugerencias de árbitros para un partido.

1. MDS del partido (mds guardado, o max de los tiers de los equipos).
2. Pool: árbitros del ámbito DISPONIBLE con RCS (NO_ELEGIBLE queda fuera)
   y, si se pide, con el rol en roles_allowed.
3. Se descartan los RCS por debajo de MDS - tolerancia.
4. Reglas internas: las prohibidas excluyen, las preferidas suman pesoExtra.
5. Orden: peso desc, RCS desc, nombre asc.
"""

import logging
from typing import Optional

from designaciones.models import RefereeCandidate, RefRole, RefStatus, SuggestionResult
from designaciones.repositories.referees_repository import RefereesRepository
from designaciones.services.difficulty import rcs_central_to_referee_tier, referee_tier_to_rcs_central
from designaciones.services.internal_rules_service import InternalRulesService
from designaciones.services.matchdays_service import MatchdaysService
from designaciones.services.rule_engine import build_match_rule_context, evaluate_rules
from designaciones.utils import norm

logger = logging.getLogger(__name__)


class SuggestionsService:
    def __init__(
        self,
        matchdays_service: MatchdaysService,
        rules_service: InternalRulesService,
        referees_repo: RefereesRepository,
    ) -> None:
        self._matchdays = matchdays_service
        self._rules = rules_service
        self._referees = referees_repo

    def suggest_for_match(
        self,
        match_id: str,
        role: Optional[RefRole] = None,
        tolerance: int = 0,
    ) -> SuggestionResult:
        match = self._matchdays.get_match(match_id)
        mds = self._matchdays.get_match_mds(match_id).mds
        context = build_match_rule_context(match)

        pool = []
        for referee in self._referees.list_all(status=RefStatus.DISPONIBLE.value):
            rcs = referee_tier_to_rcs_central(referee.get("tier"))
            if rcs is None:
                continue
            if role is not None and role.value not in (referee.get("roles_allowed") or []):
                continue
            if mds is not None and rcs < mds - tolerance:
                continue
            pool.append((referee, rcs))

        rules_by_referee = self._rules.rules_for_referees([r["id"] for r, _ in pool])

        candidates = []
        for referee, rcs in pool:
            evaluation = evaluate_rules(rules_by_referee.get(referee["id"]), context, referee_id=referee["id"])
            if evaluation.blocked:
                continue
            candidates.append(
                RefereeCandidate(
                    id=referee["id"],
                    name=referee.get("name") or "",
                    tier=rcs_central_to_referee_tier(rcs),
                    rcs_central=rcs,
                    weight=evaluation.weight_adjustment,
                    reasons=evaluation.reasons,
                )
            )

        candidates.sort(key=lambda c: (-c.weight, -(c.rcs_central or 0), norm(c.name)))
        logger.debug(
            "Partido %s: MDS=%s, %d candidatos de %d en el pool",
            match_id,
            mds,
            len(candidates),
            len(pool),
        )
        return SuggestionResult(match_id=match_id, mds=mds, candidates=candidates)
