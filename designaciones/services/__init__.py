"""
Capa de servicios: lógica de negocio aislada de HTTP.

Los servicios reciben repositorios por inyección y el DelegateContext del
request, y lanzan excepciones de dominio (designaciones.services.exceptions),
no HTTPException.
"""

from designaciones.services.assignments_service import AssignmentsService
from designaciones.services.delegates_service import DelegatesService
from designaciones.services.internal_rules_service import InternalRulesService
from designaciones.services.leagues_service import LeaguesService
from designaciones.services.matchdays_service import MatchdaysService
from designaciones.services.referees_service import RefereesService
from designaciones.services.suggestions_service import SuggestionsService
from designaciones.services.teams_service import TeamsService
from designaciones.services.users_service import UsersService

__all__ = [
    "AssignmentsService",
    "DelegatesService",
    "InternalRulesService",
    "LeaguesService",
    "MatchdaysService",
    "RefereesService",
    "SuggestionsService",
    "TeamsService",
    "UsersService",
]
