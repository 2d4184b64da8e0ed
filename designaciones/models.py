from datetime import date, datetime
from enum import Enum
from typing import Annotated, Any, ClassVar, Dict, List, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StringConstraints,
    field_validator,
    model_validator,
)

from designaciones.roles import Role

NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]

# Días de la semana: Lunes, Martes, miércoles (X), Jueves, Viernes, Sábado, Domingo
DiaSemana = Literal["L", "M", "X", "J", "V", "S", "D"]


# ----- Tiers -----


class TeamDifficultyTier(str, Enum):
    """Dificultad del equipo. El MDS del partido se deriva de los tiers de local y visitante."""

    TRANQUILO = "TRANQUILO"
    REGULARES = "REGULARES"
    COMPLICADO = "COMPLICADO"
    MUY_COMPLICADO = "MUY_COMPLICADO"


class RefereeTier(str, Enum):
    """Nivel del árbitro. Se mapea a RCS (1-4) para comparar contra el MDS."""

    NO_ELEGIBLE = "NO_ELEGIBLE"
    DEBUTANTE = "DEBUTANTE"
    EN_DESARROLLO = "EN_DESARROLLO"
    EXPERIMENTADO = "EXPERIMENTADO"
    MUY_EXPERIMENTADO = "MUY_EXPERIMENTADO"


class RefRole(str, Enum):
    CENTRAL = "CENTRAL"
    AA1 = "AA1"
    AA2 = "AA2"
    CUARTO = "4TO"


class RefStatus(str, Enum):
    DISPONIBLE = "DISPONIBLE"
    DUDOSO = "DUDOSO"
    LESIONADO = "LESIONADO"


class LeagueStatus(str, Enum):
    ACTIVE = "ACTIVE"
    ARCHIVED = "ARCHIVED"


class RcsPolicy(str, Enum):
    """Qué hacer si el RCS del central queda por debajo del MDS del partido."""

    BLOCK = "BLOCK"
    WARN = "WARN"


# ----- Identidad y ámbito -----


class CurrentUser(BaseModel):
    """
    Usuario autenticado inyectado por get_current_user.
    role es None si no se pudo resolver (y entonces todo se deniega).
    """

    user_id: str = Field(..., description="UUID del usuario (auth.users.id).")
    email: str = Field("", description="Correo electrónico.")
    role: Optional[Role] = Field(None, description="Rol resuelto desde claims o profiles.")
    delegate_id: Optional[str] = Field(None, description="Delegación propia del usuario (DELEGADO).")


class DelegateContext(BaseModel):
    """
    Contexto de delegación armado en el servidor para cada request.

    user_delegate_id viene del perfil (nunca del cliente).
    effective_delegate_id es el delegado con el que se filtran los datos.
    """

    model_config = ConfigDict(frozen=True)

    uid: str
    role: Role
    user_delegate_id: Optional[str] = None
    effective_delegate_id: Optional[str] = None

    @property
    def is_super(self) -> bool:
        return self.role == Role.SUPERUSUARIO


class MeResponse(BaseModel):
    uid: str
    email: str
    role: Role
    user_delegate_id: Optional[str] = None
    effective_delegate_id: Optional[str] = None
    is_super: bool = False
    permissions: Dict[str, bool] = Field(default_factory=dict)


class ActiveDelegateUpdate(BaseModel):
    """Payload de PUT /delegates/active. null = vista global."""

    model_config = ConfigDict(populate_by_name=True)

    delegate_id: Optional[str] = Field(None, alias="activeDelegateId")


class DelegateOption(BaseModel):
    value: str
    label: str


# ----- Reglas internas (RA-XX): unión discriminada por type -----


class _RuleParamsBase(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    comentario: Optional[str] = Field(None, max_length=500)


class MunicipiosParams(_RuleParamsBase):
    municipios: List[NonEmptyStr]

    @field_validator("municipios")
    @classmethod
    def _al_menos_uno(cls, v: List[str]) -> List[str]:
        if not v:
            raise ValueError("Agrega al menos un municipio.")
        return v


class DiasParams(_RuleParamsBase):
    dias: List[DiaSemana]

    @field_validator("dias")
    @classmethod
    def _al_menos_uno(cls, v: List[str]) -> List[str]:
        if not v:
            raise ValueError("Selecciona al menos un día.")
        return v


class EquiposParams(_RuleParamsBase):
    team_ids: List[NonEmptyStr] = Field(..., alias="teamIds")

    @field_validator("team_ids")
    @classmethod
    def _al_menos_uno(cls, v: List[str]) -> List[str]:
        if not v:
            raise ValueError("Selecciona al menos un equipo.")
        return v


class _PesoExtra(BaseModel):
    peso_extra: float = Field(1.0, ge=0.1, le=10, alias="pesoExtra")


class MunicipiosPreferidosParams(MunicipiosParams, _PesoExtra):
    pass


class DiasPreferidosParams(DiasParams, _PesoExtra):
    pass


class EquiposPreferidosParams(EquiposParams, _PesoExtra):
    pass


class _InternalRuleBase(BaseModel):
    """Campos comunes de toda regla. prohibits = True veta al árbitro si la regla coincide."""

    prohibits: ClassVar[bool] = False

    enabled: bool = True
    reason: Optional[str] = Field(None, max_length=500)

    @model_validator(mode="before")
    @classmethod
    def _hoist_peso_extra(cls, data: Any) -> Any:
        # pesoExtra puede venir al nivel de la regla; se guarda dentro de params
        if not isinstance(data, dict):
            return data
        key = "pesoExtra" if "pesoExtra" in data else "peso_extra" if "peso_extra" in data else None
        if key is None:
            return data
        data = dict(data)
        peso = data.pop(key)
        params = data.get("params")
        if isinstance(params, dict) and "pesoExtra" not in params and "peso_extra" not in params:
            data["params"] = {**params, "pesoExtra": peso}
        return data


class MunicipiosProhibidosRule(_InternalRuleBase):
    prohibits: ClassVar[bool] = True
    type: Literal["RA_municipios_prohibidos"]
    params: MunicipiosParams


class MunicipiosPreferidosRule(_InternalRuleBase):
    type: Literal["RA_municipios_preferidos"]
    params: MunicipiosPreferidosParams


class DiasProhibidosRule(_InternalRuleBase):
    prohibits: ClassVar[bool] = True
    type: Literal["RA_dias_prohibidos"]
    params: DiasParams


class DiasPreferidosRule(_InternalRuleBase):
    type: Literal["RA_dias_preferidos"]
    params: DiasPreferidosParams


class EquiposProhibidosRule(_InternalRuleBase):
    prohibits: ClassVar[bool] = True
    type: Literal["RA_equipos_prohibidos"]
    params: EquiposParams


class EquiposPreferidosRule(_InternalRuleBase):
    type: Literal["RA_equipos_preferidos"]
    params: EquiposPreferidosParams


InternalRuleInput = Annotated[
    Union[
        MunicipiosProhibidosRule,
        MunicipiosPreferidosRule,
        DiasProhibidosRule,
        DiasPreferidosRule,
        EquiposProhibidosRule,
        EquiposPreferidosRule,
    ],
    Field(discriminator="type"),
]

INTERNAL_RULE_TYPES = (
    "RA_municipios_prohibidos",
    "RA_municipios_preferidos",
    "RA_dias_prohibidos",
    "RA_dias_preferidos",
    "RA_equipos_prohibidos",
    "RA_equipos_preferidos",
)


class _StoredRuleMeta(BaseModel):
    """Metadatos de una regla guardada en tbl internal_rules."""

    id: str
    referee_id: str
    delegate_id: Optional[str] = None
    updated_at: Optional[str] = None
    updated_by: Optional[str] = None


class StoredMunicipiosProhibidos(MunicipiosProhibidosRule, _StoredRuleMeta):
    pass


class StoredMunicipiosPreferidos(MunicipiosPreferidosRule, _StoredRuleMeta):
    pass


class StoredDiasProhibidos(DiasProhibidosRule, _StoredRuleMeta):
    pass


class StoredDiasPreferidos(DiasPreferidosRule, _StoredRuleMeta):
    pass


class StoredEquiposProhibidos(EquiposProhibidosRule, _StoredRuleMeta):
    pass


class StoredEquiposPreferidos(EquiposPreferidosRule, _StoredRuleMeta):
    pass


InternalRule = Annotated[
    Union[
        StoredMunicipiosProhibidos,
        StoredMunicipiosPreferidos,
        StoredDiasProhibidos,
        StoredDiasPreferidos,
        StoredEquiposProhibidos,
        StoredEquiposPreferidos,
    ],
    Field(discriminator="type"),
]


class InternalRuleToggle(BaseModel):
    """Payload de PATCH /referees/{id}/internal-rules/{rule_id}/enabled."""

    enabled: bool
    reason: Optional[str] = Field(None, max_length=500)


# ----- Evaluación de reglas y sugerencias -----


class MatchRuleContext(BaseModel):
    """Datos del partido relevantes para las reglas RA-XX."""

    league_id: Optional[str] = None
    municipality: Optional[str] = None
    weekday: Optional[DiaSemana] = None
    home_team_id: Optional[str] = None
    away_team_id: Optional[str] = None

    @property
    def team_ids(self) -> List[str]:
        return [t for t in (self.home_team_id, self.away_team_id) if t]


class RuleEvaluation(BaseModel):
    """Resultado de aplicar las reglas internas de un árbitro a un partido."""

    blocked: bool = False
    weight_adjustment: float = 0.0
    reasons: List[str] = Field(default_factory=list)


class RefereeCandidate(BaseModel):
    id: str
    name: str
    tier: Optional[RefereeTier] = None
    rcs_central: Optional[int] = None
    weight: float = 0.0
    reasons: List[str] = Field(default_factory=list)


class SuggestionResult(BaseModel):
    match_id: str
    mds: Optional[int] = None
    candidates: List[RefereeCandidate] = Field(default_factory=list)


class MatchMds(BaseModel):
    match_id: str
    home_tier: Optional[TeamDifficultyTier] = None
    away_tier: Optional[TeamDifficultyTier] = None
    mds: Optional[int] = None


# ----- Ligas y grupos -----


class LeagueCreate(BaseModel):
    name: str = Field(..., min_length=2, description="Nombre de la liga.")
    season: str = Field(..., min_length=1, description="Temporada (ej. 2025-2026).")
    slug: Optional[str] = Field(None, description="Se genera desde nombre + temporada si no se envía.")
    status: LeagueStatus = LeagueStatus.ACTIVE
    rcs_policy: Optional[RcsPolicy] = Field(None, description="Sin valor se usa RCS_BELOW_MDS_POLICY.")


class LeagueUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2)
    season: Optional[str] = Field(None, min_length=1)
    slug: Optional[str] = None
    status: Optional[LeagueStatus] = None
    rcs_policy: Optional[RcsPolicy] = None


class GroupCreate(BaseModel):
    name: str = Field(..., min_length=1)
    season: Optional[str] = None


class GroupUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    season: Optional[str] = None


# ----- Equipos -----


class TeamCreate(BaseModel):
    name: str = Field(..., min_length=2)
    municipality: Optional[str] = None
    venue: Optional[str] = None
    tier: TeamDifficultyTier = TeamDifficultyTier.REGULARES


class TeamUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2)
    municipality: Optional[str] = None
    venue: Optional[str] = None
    tier: Optional[TeamDifficultyTier] = None


class TeamTierUpdate(BaseModel):
    tier: TeamDifficultyTier


class TeamPage(BaseModel):
    items: List[Dict[str, Any]] = Field(default_factory=list)
    next_cursor_id: Optional[str] = None


# ----- Árbitros -----


class RefereeCreate(BaseModel):
    name: str = Field(..., min_length=3, description="Nombre completo.")
    zones: List[NonEmptyStr] = Field(..., min_length=1, description="IDs de zonas.")
    roles_allowed: List[RefRole] = Field(default_factory=list)
    status: RefStatus = RefStatus.DISPONIBLE
    tier: RefereeTier = RefereeTier.DEBUTANTE
    email: Optional[str] = None
    phone: Optional[str] = None


class RefereeUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=3)
    zones: Optional[List[NonEmptyStr]] = None
    roles_allowed: Optional[List[RefRole]] = None
    status: Optional[RefStatus] = None
    tier: Optional[RefereeTier] = None
    email: Optional[str] = None
    phone: Optional[str] = None


# ----- Jornadas y partidos -----


class MatchdayCreate(BaseModel):
    start_date: date
    end_date: date

    @model_validator(mode="after")
    def _rango_valido(self) -> "MatchdayCreate":
        if self.end_date < self.start_date:
            raise ValueError("La fecha de fin no puede ser anterior a la de inicio.")
        return self


class MatchdayUpdate(BaseModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[LeagueStatus] = None


class MatchCreate(BaseModel):
    home_team_id: str = Field(..., min_length=1)
    away_team_id: str = Field(..., min_length=1)
    kickoff: Optional[datetime] = None
    venue_name: Optional[str] = None
    municipality: Optional[str] = None

    @model_validator(mode="after")
    def _equipos_distintos(self) -> "MatchCreate":
        if self.home_team_id == self.away_team_id:
            raise ValueError("Local y visitante deben ser equipos distintos.")
        return self


# ----- Designaciones (terna del partido) -----


class TernaAssignment(BaseModel):
    """Payload de PUT /matches/{id}/assignment."""

    central_referee_id: str = Field(..., min_length=1)
    aa1_referee_id: str = Field(..., min_length=1)
    aa2_referee_id: str = Field(..., min_length=1)
    ignore_recent_team_conflicts: bool = Field(
        False, description="Solo SUPERUSUARIO: designar aunque repita equipo en las últimas jornadas."
    )

    def slots(self) -> Dict[RefRole, str]:
        return {
            RefRole.CENTRAL: self.central_referee_id,
            RefRole.AA1: self.aa1_referee_id,
            RefRole.AA2: self.aa2_referee_id,
        }


class RecentTeamConflict(BaseModel):
    role: RefRole
    referee_id: str
    team_id: str
    matchday_number: int
    match_id: str


class ScheduleConflict(BaseModel):
    role: RefRole
    referee_id: str
    match_id: str
    kickoff: Optional[str] = None


class RcsEvaluation(BaseModel):
    mds: Optional[int] = None
    rcs_central: Optional[int] = None
    below_threshold: bool = False
    policy: RcsPolicy = RcsPolicy.WARN


class AssignmentResult(BaseModel):
    code: Literal["OK", "RCS_BELOW_THRESHOLD_WARNING"]
    match: Dict[str, Any]
    rcs_evaluation: RcsEvaluation


# ----- Usuarios -----


class UserRoleUpdate(BaseModel):
    """Payload de PUT /users/{id}/role. DELEGADO exige delegate_id."""

    model_config = ConfigDict(populate_by_name=True)

    role: Role
    delegate_id: Optional[str] = Field(None, alias="delegateId")


class UserRoleOut(BaseModel):
    user_id: str
    role: Role
    delegate_id: Optional[str] = None
