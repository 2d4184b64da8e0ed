"""
Designación de terna (central, AA1, AA2) y sus validaciones.
"""
from datetime import date, timedelta

import pytest

from designaciones.roles import Role
from tests.conftest import DEL_A, DEL_B


def _created(resp) -> dict:
    assert resp.status_code == 201, resp.text
    return resp.json()


def build_calendar(client, rcs_policy=None, matchdays=6) -> dict:
    """Liga con un grupo, equipos y jornadas semanales desde marzo de 2025."""
    league_payload = {"name": "Liga Norte", "season": "2025-2026"}
    if rcs_policy:
        league_payload["rcs_policy"] = rcs_policy
    league = _created(client.post("/api/leagues", json=league_payload))
    group = _created(client.post(f"/api/leagues/{league['id']}/groups", json={"name": "Grupo 1"}))

    teams = {}
    for key, name, tier in (
        ("A", "Atlético", "TRANQUILO"),
        ("B", "Bosque", "REGULARES"),
        ("C", "Cantera", "TRANQUILO"),
        ("D", "Deportivo", "TRANQUILO"),
        ("E", "Estrella", "MUY_COMPLICADO"),
    ):
        teams[key] = _created(
            client.post(f"/api/groups/{group['id']}/teams", json={"name": name, "tier": tier})
        )["id"]

    start = date(2025, 3, 1)
    days = []
    for i in range(matchdays):
        first = start + timedelta(weeks=i)
        days.append(
            _created(
                client.post(
                    f"/api/groups/{group['id']}/matchdays",
                    json={"start_date": first.isoformat(), "end_date": (first + timedelta(days=1)).isoformat()},
                )
            )
        )
    return {"league": league, "group": group, "teams": teams, "matchdays": days}


def add_match(client, calendar, number, home, away, hour=18):
    matchday = calendar["matchdays"][number - 1]
    kickoff = f"{matchday['start_date']}T{hour:02d}:00:00"
    return _created(
        client.post(
            f"/api/matchdays/{matchday['id']}/matches",
            json={
                "home_team_id": calendar["teams"][home],
                "away_team_id": calendar["teams"][away],
                "kickoff": kickoff,
            },
        )
    )


def assign(client, match_id, central, aa1, aa2, **extra):
    payload = {"central_referee_id": central, "aa1_referee_id": aa1, "aa2_referee_id": aa2, **extra}
    return client.put(f"/api/matches/{match_id}/assignment", json=payload)


@pytest.fixture
def calendar(delegado_a):
    return build_calendar(delegado_a)


@pytest.fixture
def refs(delegado_a):
    created = {}
    for key, name, tier, status in (
        ("r1", "Ruiz Uno", "MUY_EXPERIMENTADO", "DISPONIBLE"),
        ("r2", "Ruiz Dos", "MUY_EXPERIMENTADO", "DISPONIBLE"),
        ("r3", "Ruiz Tres", "MUY_EXPERIMENTADO", "DISPONIBLE"),
        ("r4", "Ruiz Cuatro", "EXPERIMENTADO", "DISPONIBLE"),
        ("debutante", "Díaz Debutante", "DEBUTANTE", "DISPONIBLE"),
        ("lesionado", "Castro Lesionado", "MUY_EXPERIMENTADO", "LESIONADO"),
    ):
        created[key] = _created(
            delegado_a.post(
                "/api/referees",
                json={"name": name, "zones": ["sur"], "tier": tier, "status": status},
            )
        )["id"]
    return created


class TestAssignTerna:

    def test_assigns_and_stores_names(self, delegado_a, calendar, refs):
        match = add_match(delegado_a, calendar, 1, "A", "B")
        resp = assign(delegado_a, match["id"], refs["r1"], refs["r2"], refs["r3"])
        assert resp.status_code == 200, resp.text
        body = resp.json()
        assert body["code"] == "OK"
        assert body["rcs_evaluation"] == {"mds": 2, "rcs_central": 4, "below_threshold": False, "policy": "WARN"}

        stored = delegado_a.get(f"/api/matches/{match['id']}").json()
        assert stored["central_referee_id"] == refs["r1"]
        assert stored["aa1_referee_id"] == refs["r2"]
        assert stored["aa2_referee_id"] == refs["r3"]
        assert stored["central_referee_name"] == "Ruiz Uno"
        assert stored["assigned_by"] == "u1"

    def test_clear_terna(self, delegado_a, calendar, refs):
        match = add_match(delegado_a, calendar, 1, "A", "B")
        assign(delegado_a, match["id"], refs["r1"], refs["r2"], refs["r3"])
        resp = delegado_a.delete(f"/api/matches/{match['id']}/assignment")
        assert resp.status_code == 200
        assert resp.json()["central_referee_id"] is None
        assert resp.json()["aa2_referee_name"] is None

    def test_unknown_match(self, delegado_a, refs):
        assert assign(delegado_a, "nope", refs["r1"], refs["r2"], refs["r3"]).status_code == 404


class TestRejections:

    def test_duplicate_referees(self, delegado_a, calendar, refs):
        match = add_match(delegado_a, calendar, 1, "A", "B")
        resp = assign(delegado_a, match["id"], refs["r1"], refs["r2"], refs["r1"])
        assert resp.status_code == 409
        assert resp.json()["code"] == "DUPLICATE_REFEREES"

    def test_referee_not_available(self, delegado_a, calendar, refs):
        match = add_match(delegado_a, calendar, 1, "A", "B")
        resp = assign(delegado_a, match["id"], refs["r1"], refs["lesionado"], "desconocido")
        assert resp.status_code == 409
        body = resp.json()
        assert body["code"] == "REFEREE_NOT_AVAILABLE"
        assert body["unavailable_refs"] == [refs["lesionado"], "desconocido"]

    def test_recent_team_conflict_in_any_role(self, delegado_a, calendar, refs):
        first = add_match(delegado_a, calendar, 1, "A", "B")
        assert assign(delegado_a, first["id"], refs["r1"], refs["r2"], refs["r3"]).status_code == 200

        third = add_match(delegado_a, calendar, 3, "C", "A")
        resp = assign(delegado_a, third["id"], refs["r4"], refs["r1"], refs["r2"])
        assert resp.status_code == 409
        body = resp.json()
        assert body["code"] == "RECENT_TEAM_CONFLICT"
        assert {(c["role"], c["referee_id"]) for c in body["conflicts"]} == {
            ("AA1", refs["r1"]),
            ("AA2", refs["r2"]),
        }
        assert all(c["team_id"] == calendar["teams"]["A"] and c["matchday_number"] == 1 for c in body["conflicts"])

    def test_conflict_window_is_four_matchdays(self, delegado_a, calendar, refs):
        first = add_match(delegado_a, calendar, 1, "A", "B")
        assign(delegado_a, first["id"], refs["r1"], refs["r2"], refs["r3"])

        fifth = add_match(delegado_a, calendar, 5, "A", "C")
        assert assign(delegado_a, fifth["id"], refs["r1"], refs["r2"], refs["r3"]).json()["code"] == "RECENT_TEAM_CONFLICT"

        sixth = add_match(delegado_a, calendar, 6, "A", "C")
        assert assign(delegado_a, sixth["id"], refs["r1"], refs["r2"], refs["r3"]).status_code == 200

    def test_other_teams_do_not_conflict(self, delegado_a, calendar, refs):
        first = add_match(delegado_a, calendar, 1, "A", "B")
        assign(delegado_a, first["id"], refs["r1"], refs["r2"], refs["r3"])
        second = add_match(delegado_a, calendar, 2, "C", "D")
        assert assign(delegado_a, second["id"], refs["r1"], refs["r2"], refs["r3"]).status_code == 200

    def test_schedule_conflict(self, delegado_a, calendar, refs):
        early = add_match(delegado_a, calendar, 1, "A", "B", hour=17)
        assign(delegado_a, early["id"], refs["r1"], refs["r2"], refs["r3"])

        clash = add_match(delegado_a, calendar, 1, "C", "D", hour=18)
        resp = assign(delegado_a, clash["id"], refs["r4"], refs["r3"], refs["debutante"])
        assert resp.status_code == 409
        body = resp.json()
        assert body["code"] == "SCHEDULE_CONFLICT"
        assert body["schedule_conflicts"] == [
            {"role": "AA1", "referee_id": refs["r3"], "match_id": early["id"], "kickoff": early["kickoff"]}
        ]

    def test_no_clash_outside_window(self, delegado_a, calendar, refs):
        early = add_match(delegado_a, calendar, 1, "A", "B", hour=12)
        assign(delegado_a, early["id"], refs["r1"], refs["r2"], refs["r3"])
        later = add_match(delegado_a, calendar, 1, "C", "D", hour=18)
        assert assign(delegado_a, later["id"], refs["r1"], refs["r2"], refs["r3"]).status_code == 200

    def test_rcs_below_mds_blocks_when_league_says_so(self, delegado_a, refs):
        calendar = build_calendar(delegado_a, rcs_policy="BLOCK", matchdays=1)
        match = add_match(delegado_a, calendar, 1, "E", "A")
        resp = assign(delegado_a, match["id"], refs["debutante"], refs["r1"], refs["r2"])
        assert resp.status_code == 409
        body = resp.json()
        assert body["code"] == "RCS_BELOW_THRESHOLD_BLOCK"
        assert body["rcs_evaluation"] == {"mds": 4, "rcs_central": 1, "below_threshold": True, "policy": "BLOCK"}
        assert delegado_a.get(f"/api/matches/{match['id']}").json().get("central_referee_id") is None

    def test_rcs_below_mds_warns_by_default(self, delegado_a, calendar, refs):
        match = add_match(delegado_a, calendar, 1, "E", "A")
        resp = assign(delegado_a, match["id"], refs["r4"], refs["r1"], refs["r2"])
        assert resp.status_code == 200
        assert resp.json()["code"] == "RCS_BELOW_THRESHOLD_WARNING"
        assert resp.json()["match"]["central_referee_id"] == refs["r4"]


class TestAssignmentPermissions:

    def test_ignoring_recent_conflicts_requires_override(self, client_for, delegado_a, calendar, refs):
        first = add_match(delegado_a, calendar, 1, "A", "B")
        assign(delegado_a, first["id"], refs["r1"], refs["r2"], refs["r3"])
        second = add_match(delegado_a, calendar, 2, "A", "C")

        resp = assign(delegado_a, second["id"], refs["r1"], refs["r2"], refs["r3"], ignore_recent_team_conflicts=True)
        assert resp.status_code == 403

        root = client_for(Role.SUPERUSUARIO, None, user_id="root")
        root.cookies.set("activeDelegateId", DEL_A)
        resp = assign(root, second["id"], refs["r1"], refs["r2"], refs["r3"], ignore_recent_team_conflicts=True)
        assert resp.status_code == 200, resp.text
        assert resp.json()["match"]["assigned_by"] == "root"

    @pytest.mark.parametrize("role", [Role.ASISTENTE, Role.ARBITRO])
    def test_readonly_roles_cannot_assign(self, client_for, delegado_a, calendar, refs, role):
        match = add_match(delegado_a, calendar, 1, "A", "B")
        reader = client_for(role, DEL_A)
        assert assign(reader, match["id"], refs["r1"], refs["r2"], refs["r3"]).status_code == 403

    def test_other_delegation_gets_not_found(self, client_for, delegado_a, calendar, refs):
        match = add_match(delegado_a, calendar, 1, "A", "B")
        other = client_for(Role.DELEGADO, DEL_B)
        assert assign(other, match["id"], refs["r1"], refs["r2"], refs["r3"]).status_code == 404
