"""
Motor de reglas internas RA-XX de árbitros.

- validate_internal_rule: payload de entrada -> variante tipada o ValidationError.
- evaluate_rules: aplica las reglas activas de un árbitro a un partido.
  Una regla "prohibida" que coincide veta al árbitro y corta la evaluación.
  Cada regla "preferida" que coincide suma su pesoExtra.

Funciones puras: sin I/O.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from designaciones.models import (
    DiasParams,
    EquiposParams,
    InternalRule,
    InternalRuleInput,
    MatchRuleContext,
    MunicipiosParams,
    RuleEvaluation,
)
from designaciones.services.exceptions import ValidationError
from designaciones.utils import norm, weekday_symbol

logger = logging.getLogger(__name__)

_input_adapter: TypeAdapter = TypeAdapter(InternalRuleInput)
_stored_adapter: TypeAdapter = TypeAdapter(InternalRule)


def pydantic_field_errors(exc: PydanticValidationError) -> Dict[str, List[str]]:
    """Convierte errores de pydantic en {"params.dias.1": ["..."]}."""
    out: Dict[str, List[str]] = {}
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ())]
        # La unión discriminada añade el tag como primer segmento: se omite
        if loc and loc[0].startswith("RA_"):
            loc = loc[1:]
        if not loc and err.get("type") in ("union_tag_invalid", "union_tag_not_found"):
            loc = ["type"]
        key = ".".join(loc) or "__root__"
        out.setdefault(key, []).append(err.get("msg", "Valor inválido."))
    return out


def validate_internal_rule(data: Any):
    """Valida un payload de regla. Lanza ValidationError con errores por campo."""
    try:
        return _input_adapter.validate_python(data)
    except PydanticValidationError as exc:
        raise ValidationError("Regla interna inválida.", pydantic_field_errors(exc)) from exc


def parse_stored_rule(row: Mapping[str, Any]):
    """Fila de internal_rules -> variante almacenada. Lanza pydantic.ValidationError si está corrupta."""
    return _stored_adapter.validate_python(dict(row))


def build_match_rule_context(match: Mapping[str, Any], league_id: Optional[str] = None) -> MatchRuleContext:
    """Extrae del registro de partido los datos que usan las reglas RA-XX."""
    municipality_raw = (
        match.get("municipality")
        or match.get("municipio")
        or match.get("zone_name")
        or match.get("venue_municipality")
    )
    municipality = norm(municipality_raw) if isinstance(municipality_raw, str) else None

    home = match.get("home_team_id")
    away = match.get("away_team_id")

    return MatchRuleContext(
        league_id=league_id or match.get("league_id"),
        municipality=municipality or None,
        weekday=weekday_symbol(match.get("kickoff") or match.get("date")),
        home_team_id=home if isinstance(home, str) and home else None,
        away_team_id=away if isinstance(away, str) and away else None,
    )


def _rule_matches(params: Any, context: MatchRuleContext) -> Optional[str]:
    """Devuelve el valor del partido que dispara la regla, o None si no coincide."""
    if isinstance(params, MunicipiosParams):
        if context.municipality and context.municipality in {norm(m) for m in params.municipios}:
            return context.municipality
        return None
    if isinstance(params, DiasParams):
        if context.weekday and context.weekday in params.dias:
            return context.weekday
        return None
    if isinstance(params, EquiposParams):
        hits = [t for t in context.team_ids if t in params.team_ids]
        return hits[0] if hits else None
    raise TypeError(f"Parámetros de regla no soportados: {type(params).__name__}")


def evaluate_rules(
    rules: Optional[Iterable[Any]],
    context: MatchRuleContext,
    referee_id: Optional[str] = None,
) -> RuleEvaluation:
    """
    Aplica las reglas de un árbitro a un partido candidato.

    Sin reglas (o todas desactivadas) el resultado es neutro:
    blocked=False, weight_adjustment=0.
    """
    weight = 0.0
    reasons: List[str] = []

    for rule in rules or ():
        if not rule.enabled:
            continue
        hit = _rule_matches(rule.params, context)
        if hit is None:
            continue

        if rule.prohibits:
            reason = f"{rule.type}: {hit}"
            logger.info(
                "Árbitro %s excluido por regla %s (%s)",
                referee_id or "-",
                getattr(rule, "id", None) or rule.type,
                hit,
            )
            return RuleEvaluation(blocked=True, weight_adjustment=0.0, reasons=[*reasons, reason])

        peso = rule.params.peso_extra
        weight += peso
        reasons.append(f"{rule.type}: {hit} +{peso:g}")

    return RuleEvaluation(blocked=False, weight_adjustment=weight, reasons=reasons)
