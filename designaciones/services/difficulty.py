"""
Dificultad de partidos (MDS) y capacidad de árbitros (RCS).

MDS (Match Difficulty Score): 1-4, se deriva de los tiers de local y visitante
tomando siempre el máximo: el lado más exigente manda.
RCS (Referee Capability Score): 1-4 desde el tier del árbitro; NO_ELEGIBLE no
entra en sugerencias automáticas.
"""

import logging
from typing import Any, Optional

from designaciones.models import RefereeTier, TeamDifficultyTier

logger = logging.getLogger(__name__)

TEAM_TIER_TO_MDS = {
    TeamDifficultyTier.TRANQUILO: 1,
    TeamDifficultyTier.REGULARES: 2,
    TeamDifficultyTier.COMPLICADO: 3,
    TeamDifficultyTier.MUY_COMPLICADO: 4,
}

REFEREE_TIER_TO_RCS = {
    RefereeTier.NO_ELEGIBLE: None,
    RefereeTier.DEBUTANTE: 1,
    RefereeTier.EN_DESARROLLO: 2,
    RefereeTier.EXPERIMENTADO: 3,
    RefereeTier.MUY_EXPERIMENTADO: 4,
}


def _coerce_enum(enum_cls, value: Any):
    if value is None:
        return None
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().upper())
    except ValueError:
        return None


def parse_team_tier(tier: TeamDifficultyTier | str | None) -> Optional[TeamDifficultyTier]:
    """Acepta mayúsculas o minúsculas; None si no es un tier conocido."""
    return _coerce_enum(TeamDifficultyTier, tier)


def team_difficulty_tier_to_mds(tier: TeamDifficultyTier | str | None) -> Optional[int]:
    """Tier del equipo -> 1..4. None si no hay tier o no es reconocible."""
    parsed = parse_team_tier(tier)
    if parsed is None:
        return None
    return TEAM_TIER_TO_MDS[parsed]


def compute_match_mds_from_teams(
    home_tier: TeamDifficultyTier | str | None = None,
    away_tier: TeamDifficultyTier | str | None = None,
) -> Optional[int]:
    """
    MDS del partido = max(local, visitante).

    Si solo un equipo tiene tier se usa ese; si ninguno, None.
    """
    home = team_difficulty_tier_to_mds(home_tier)
    away = team_difficulty_tier_to_mds(away_tier)
    if home is None and away is None:
        return None
    if home is None:
        return away
    if away is None:
        return home
    return max(home, away)


def referee_tier_to_rcs_central(tier: RefereeTier | str | None) -> Optional[int]:
    """Tier del árbitro -> RCS 1..4. NO_ELEGIBLE y tiers desconocidos devuelven None."""
    if tier is None:
        return None
    parsed = _coerce_enum(RefereeTier, tier)
    if parsed is None:
        logger.warning("Tier de árbitro no reconocido: %r", tier)
        return None
    return REFEREE_TIER_TO_RCS[parsed]


def rcs_central_to_referee_tier(rcs: float | None) -> Optional[RefereeTier]:
    """Camino inverso aproximado: RCS numérico -> tier mínimo que lo alcanza."""
    if rcs is None:
        return None
    if rcs >= 4:
        return RefereeTier.MUY_EXPERIMENTADO
    if rcs >= 3:
        return RefereeTier.EXPERIMENTADO
    if rcs >= 2:
        return RefereeTier.EN_DESARROLLO
    if rcs >= 1:
        return RefereeTier.DEBUTANTE
    return None
