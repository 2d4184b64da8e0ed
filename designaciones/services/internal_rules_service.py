"""
Servicio de reglas internas RA-XX por árbitro.

Orden de comprobaciones en escrituras: permiso de edición, árbitro dentro
del ámbito y después validación del payload. Las reglas no se borran;
se desactivan con toggle_enabled.
"""

import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from designaciones.cache import invalidate_entity, query_cache, scope_cache_key
from designaciones.models import DelegateContext, InternalRuleToggle
from designaciones.repositories.internal_rules_repository import InternalRulesRepository
from designaciones.repositories.referees_repository import RefereesRepository
from designaciones.services.delegate_scope import (
    assert_can_edit,
    assert_doc_belongs_to_delegate,
    assert_effective_delegate_id,
)
from designaciones.services.exceptions import NotFoundError
from designaciones.services.rule_engine import parse_stored_rule, validate_internal_rule
from designaciones.utils import now_iso

logger = logging.getLogger(__name__)


def _rule_row(rule) -> Dict[str, Any]:
    """Variante validada -> columnas de internal_rules (params con alias camelCase)."""
    return {
        "type": rule.type,
        "params": rule.params.model_dump(by_alias=True, exclude_none=True),
        "enabled": rule.enabled,
        "reason": rule.reason,
    }


def parse_rule_rows(rows: List[Dict[str, Any]]) -> list:
    """Filas -> reglas tipadas. Las filas corruptas se registran y se omiten."""
    rules = []
    for row in rows:
        try:
            rules.append(parse_stored_rule(row))
        except PydanticValidationError as exc:
            logger.warning("Regla interna %s inválida en base de datos, se omite: %s", row.get("id"), exc)
    return rules


class InternalRulesService:
    def __init__(
        self,
        rules_repo: InternalRulesRepository,
        referees_repo: RefereesRepository,
        ctx: DelegateContext,
    ) -> None:
        self._rules = rules_repo
        self._referees = referees_repo
        self._ctx = ctx

    def _get_referee(self, referee_id: str) -> Dict[str, Any]:
        referee = self._referees.get_by_id(referee_id)
        if not referee:
            raise NotFoundError("Árbitro no encontrado.")
        assert_doc_belongs_to_delegate(referee, self._ctx)
        return referee

    def list_rules(self, referee_id: str) -> list:
        self._get_referee(referee_id)
        key = f"{scope_cache_key(self._rules.delegate_id)}internal_rules:{referee_id}"
        return query_cache.get_or_set(key, lambda: parse_rule_rows(self._rules.list_by_referee(referee_id)))

    def create_rule(self, referee_id: str, data: Any):
        assert_can_edit(self._ctx)
        delegate_id = assert_effective_delegate_id(self._ctx)
        self._get_referee(referee_id)
        rule = validate_internal_rule(data)

        row = self._rules.create({
            **_rule_row(rule),
            "referee_id": referee_id,
            "updated_by": self._ctx.uid,
        })
        invalidate_entity("internal_rules", delegate_id)
        logger.info("Regla %s (%s) creada para árbitro %s", row.get("id"), rule.type, referee_id)
        return parse_stored_rule(row)

    def update_rule(self, referee_id: str, rule_id: str, data: Any):
        assert_can_edit(self._ctx)
        referee = self._get_referee(referee_id)
        if not self._rules.get_for_referee(referee_id, rule_id):
            raise NotFoundError("Regla no encontrada.")
        rule = validate_internal_rule(data)

        try:
            row = self._rules.update(rule_id, {**_rule_row(rule), "updated_by": self._ctx.uid})
        except ValueError:
            raise NotFoundError("Regla no encontrada.")
        invalidate_entity("internal_rules", referee.get("delegate_id"))
        return parse_stored_rule(row)

    def save_rule(self, referee_id: str, data: Any, rule_id: Optional[str] = None):
        """Alta si no hay rule_id; si lo hay, reemplaza la regla existente."""
        if rule_id:
            return self.update_rule(referee_id, rule_id, data)
        return self.create_rule(referee_id, data)

    def toggle_enabled(self, referee_id: str, rule_id: str, payload: InternalRuleToggle):
        """Activa o desactiva una regla dejando constancia de quién y cuándo."""
        assert_can_edit(self._ctx)
        referee = self._get_referee(referee_id)
        if not self._rules.get_for_referee(referee_id, rule_id):
            raise NotFoundError("Regla no encontrada.")

        changes: Dict[str, Any] = {"enabled": payload.enabled, "updated_by": self._ctx.uid}
        if payload.reason is not None:
            changes["reason"] = payload.reason
        try:
            row = self._rules.update(rule_id, changes)
        except ValueError:
            raise NotFoundError("Regla no encontrada.")
        invalidate_entity("internal_rules", referee.get("delegate_id"))
        logger.info(
            "Regla %s %s por %s a las %s",
            rule_id,
            "activada" if payload.enabled else "desactivada",
            self._ctx.uid,
            row.get("updated_at") or now_iso(),
        )
        return parse_stored_rule(row)

    def rules_for_referees(self, referee_ids: List[str]) -> Dict[str, list]:
        """Reglas activas agrupadas por árbitro (para sugerencias)."""
        grouped: Dict[str, list] = {rid: [] for rid in referee_ids}
        for rule in parse_rule_rows(self._rules.list_enabled_for_referees(referee_ids)):
            grouped.setdefault(rule.referee_id, []).append(rule)
        return grouped
