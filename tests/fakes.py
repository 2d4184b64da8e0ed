"""
Doble en memoria del cliente supabase-py para los tests.

Implementa el subconjunto del query builder de PostgREST que usan los
repositorios: select/insert/update/delete con filtros eq, neq, gt, gte,
lt, lte, like, ilike, in_, is_, order, limit y range.
"""

import copy
import re
import uuid
from typing import Any, Callable, Dict, List, Optional


class FakeResponse:
    def __init__(self, data: List[Dict[str, Any]]) -> None:
        self.data = data
        self.count = len(data)


def _like_to_regex(pattern: str, flags: int = 0) -> "re.Pattern[str]":
    parts = [".*" if ch == "%" else "." if ch == "_" else re.escape(ch) for ch in pattern]
    return re.compile("^" + "".join(parts) + "$", flags | re.DOTALL)


def _compare(op: Callable[[Any, Any], bool]) -> Callable[[Any, Any], bool]:
    def _cmp(value: Any, target: Any) -> bool:
        if value is None:
            return False
        return op(value, target)

    return _cmp


class FakeQuery:
    def __init__(self, store: "FakeSupabase", table: str) -> None:
        self._store = store
        self._table = table
        self._action = "select"
        self._columns = "*"
        self._payload: Any = None
        self._filters: List[Callable[[Dict[str, Any]], bool]] = []
        self._order: List[tuple] = []
        self._limit: Optional[int] = None
        self._offset = 0

    # ----- acciones -----

    def select(self, columns: str = "*", **_kwargs: Any) -> "FakeQuery":
        self._action = "select"
        self._columns = columns
        return self

    def insert(self, payload: Any) -> "FakeQuery":
        self._action = "insert"
        self._payload = payload
        return self

    def update(self, payload: Dict[str, Any]) -> "FakeQuery":
        self._action = "update"
        self._payload = payload
        return self

    def delete(self) -> "FakeQuery":
        self._action = "delete"
        return self

    # ----- filtros -----

    def _add(self, column: str, predicate: Callable[[Any], bool]) -> "FakeQuery":
        self._filters.append(lambda row: predicate(row.get(column)))
        return self

    def eq(self, column: str, value: Any) -> "FakeQuery":
        return self._add(column, lambda v: v == value)

    def neq(self, column: str, value: Any) -> "FakeQuery":
        return self._add(column, lambda v: v != value)

    def gt(self, column: str, value: Any) -> "FakeQuery":
        return self._add(column, lambda v: _compare(lambda a, b: a > b)(v, value))

    def gte(self, column: str, value: Any) -> "FakeQuery":
        return self._add(column, lambda v: _compare(lambda a, b: a >= b)(v, value))

    def lt(self, column: str, value: Any) -> "FakeQuery":
        return self._add(column, lambda v: _compare(lambda a, b: a < b)(v, value))

    def lte(self, column: str, value: Any) -> "FakeQuery":
        return self._add(column, lambda v: _compare(lambda a, b: a <= b)(v, value))

    def like(self, column: str, pattern: str) -> "FakeQuery":
        rx = _like_to_regex(pattern)
        return self._add(column, lambda v: isinstance(v, str) and bool(rx.match(v)))

    def ilike(self, column: str, pattern: str) -> "FakeQuery":
        rx = _like_to_regex(pattern, re.IGNORECASE)
        return self._add(column, lambda v: isinstance(v, str) and bool(rx.match(v)))

    def in_(self, column: str, values: List[Any]) -> "FakeQuery":
        allowed = list(values)
        return self._add(column, lambda v: v in allowed)

    def is_(self, column: str, value: Any) -> "FakeQuery":
        target = None if value in (None, "null") else value
        return self._add(column, lambda v: v is target or v == target)

    # ----- modificadores -----

    def order(self, column: str, desc: bool = False, **_kwargs: Any) -> "FakeQuery":
        self._order.append((column, desc))
        return self

    def limit(self, count: int) -> "FakeQuery":
        self._limit = count
        return self

    def range(self, start: int, end: int) -> "FakeQuery":
        self._offset = start
        self._limit = end - start + 1
        return self

    # ----- ejecución -----

    def _matching(self) -> List[Dict[str, Any]]:
        rows = self._store.rows(self._table)
        return [r for r in rows if all(f(r) for f in self._filters)]

    def _project(self, row: Dict[str, Any]) -> Dict[str, Any]:
        if self._columns.strip() == "*":
            return copy.deepcopy(row)
        cols = [c.strip() for c in self._columns.split(",") if c.strip()]
        return {c: copy.deepcopy(row.get(c)) for c in cols if c in row}

    def execute(self) -> FakeResponse:
        self._store.executed.append((self._table, self._action))

        if self._action == "insert":
            payloads = self._payload if isinstance(self._payload, list) else [self._payload]
            created = []
            for p in payloads:
                row = copy.deepcopy(p)
                row.setdefault("id", str(uuid.uuid4()))
                self._store.rows(self._table).append(row)
                created.append(copy.deepcopy(row))
            return FakeResponse(created)

        matched = self._matching()

        if self._action == "update":
            for row in matched:
                row.update(copy.deepcopy(self._payload))
            return FakeResponse([copy.deepcopy(r) for r in matched])

        if self._action == "delete":
            table = self._store.rows(self._table)
            ids = {id(r) for r in matched}
            table[:] = [r for r in table if id(r) not in ids]
            return FakeResponse([copy.deepcopy(r) for r in matched])

        rows = list(matched)
        for column, desc in reversed(self._order):
            present = [r for r in rows if r.get(column) is not None]
            missing = [r for r in rows if r.get(column) is None]
            present.sort(key=lambda r: r.get(column), reverse=desc)
            rows = present + missing
        rows = rows[self._offset:]
        if self._limit is not None:
            rows = rows[: self._limit]
        return FakeResponse([self._project(r) for r in rows])


class FakeAuthUser:
    def __init__(self, user_id: str, email: str = "", app_metadata: Optional[Dict[str, Any]] = None) -> None:
        self.id = user_id
        self.email = email
        self.app_metadata = app_metadata or {}


class FakeAuthResponse:
    def __init__(self, user: Optional[FakeAuthUser]) -> None:
        self.user = user


class FakeAuthAdmin:
    """auth.admin.update_user_by_id: guarda app_metadata por usuario."""

    def __init__(self, auth: "FakeAuth") -> None:
        self._auth = auth
        self.app_metadata: Dict[str, Dict[str, Any]] = {}

    def update_user_by_id(self, user_id: str, attributes: Dict[str, Any]) -> FakeAuthResponse:
        metadata = {**self.app_metadata.get(user_id, {}), **(attributes.get("app_metadata") or {})}
        self.app_metadata[user_id] = metadata
        user = None
        for registered in self._auth._tokens.values():
            if registered.id == user_id:
                registered.app_metadata = dict(metadata)
                user = registered
        return FakeAuthResponse(user)


class FakeAuth:
    """auth.get_user: token -> usuario registrado con register_token."""

    def __init__(self) -> None:
        self._tokens: Dict[str, FakeAuthUser] = {}
        self.admin = FakeAuthAdmin(self)

    def register_token(self, token: str, user: FakeAuthUser) -> None:
        self._tokens[token] = user

    def get_user(self, token: str) -> FakeAuthResponse:
        user = self._tokens.get(token)
        if user is None:
            raise RuntimeError("invalid JWT")
        return FakeAuthResponse(user)


class FakeSupabase:
    def __init__(self) -> None:
        self._tables: Dict[str, List[Dict[str, Any]]] = {}
        self.executed: List[tuple] = []
        self.auth = FakeAuth()

    def rows(self, table: str) -> List[Dict[str, Any]]:
        return self._tables.setdefault(table, [])

    def seed(self, table: str, *rows: Dict[str, Any]) -> List[Dict[str, Any]]:
        stored = []
        for r in rows:
            row = copy.deepcopy(r)
            row.setdefault("id", str(uuid.uuid4()))
            self.rows(table).append(row)
            stored.append(row)
        return stored

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def count_executed(self, table: str, action: str = "select") -> int:
        return sum(1 for t, a in self.executed if t == table and a == action)
