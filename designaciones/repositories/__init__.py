"""
Repositorios con aislamiento multi-tenant por delegación.

Los repositorios de catálogo heredan de BaseDelegateRepository y aplican
siempre el filtro delegate_id para evitar fugas de datos entre delegaciones.
"""

from designaciones.repositories.base_repository import BaseDelegateRepository
from designaciones.repositories.delegates_repository import DelegatesRepository, ProfilesRepository
from designaciones.repositories.internal_rules_repository import InternalRulesRepository
from designaciones.repositories.leagues_repository import GroupsRepository, LeaguesRepository
from designaciones.repositories.matchdays_repository import MatchdaysRepository, MatchesRepository
from designaciones.repositories.referees_repository import RefereesRepository
from designaciones.repositories.teams_repository import TeamsRepository

__all__ = [
    "BaseDelegateRepository",
    "DelegatesRepository",
    "GroupsRepository",
    "InternalRulesRepository",
    "LeaguesRepository",
    "MatchdaysRepository",
    "MatchesRepository",
    "ProfilesRepository",
    "RefereesRepository",
    "TeamsRepository",
]
