"""
Utilidades compartidas: normalización de nombres y fechas.
"""

import re
import unicodedata
from datetime import date, datetime, timezone
from typing import Any, Optional

_WHITESPACE_RE = re.compile(r"\s+")
_SLUG_RE = re.compile(r"[^a-z0-9]+")

# Día de la semana (datetime.weekday(): 0 = lunes) -> símbolo L,M,X,J,V,S,D
WEEKDAY_SYMBOLS = ("L", "M", "X", "J", "V", "S", "D")


def norm(value: Any) -> str:
    """
    Normaliza una cadena para comparaciones y unicidad (campos *_lc):
    quita acentos, pasa a minúsculas y colapsa espacios.
    """
    if value is None:
        return ""
    s = unicodedata.normalize("NFKD", str(value))
    s = "".join(ch for ch in s if not unicodedata.combining(ch))
    return _WHITESPACE_RE.sub(" ", s.lower()).strip()


def slugify(*parts: Any) -> str:
    """Slug ascii a partir de varias partes ("Liga Norte", "2025") -> "liga-norte-2025"."""
    joined = "-".join(str(p) for p in parts if p is not None and str(p).strip())
    return _SLUG_RE.sub("-", norm(joined)).strip("-")


def now_iso() -> str:
    """Marca de tiempo UTC para campos de auditoría (created_at / updated_at)."""
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def parse_datetime(valor: Any) -> Optional[datetime]:
    """Convierte ISO string / date / datetime a datetime. None si no es interpretable."""
    if not valor:
        return None
    if isinstance(valor, datetime):
        return valor
    if isinstance(valor, date):
        return datetime(valor.year, valor.month, valor.day)
    if isinstance(valor, str):
        try:
            return datetime.fromisoformat(valor.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    return None


def weekday_symbol(valor: Any) -> Optional[str]:
    """Símbolo de día (L..D) para una fecha, o None si no hay fecha válida."""
    dt = parse_datetime(valor)
    if dt is None:
        return None
    return WEEKDAY_SYMBOLS[dt.weekday()]
