"""
Testes das rotas de leads: escopo por role, edição, atribuição e notas.
"""

import pytest
from httpx import AsyncClient

from leaddesk.domain.entities import UserRole
from tests.utils import auth_headers


def lead_payload(**overrides) -> dict:
    payload = {
        "name": "João Silva",
        "mobile": "51999998888",
        "service_type": "Instalação",
        "city": "Canoas",
        "source": "indicação",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
async def team(admin, make_user):
    """Admin, um gestor com um executivo e um segundo executivo da mesma equipe."""
    manager = await make_user("gestor", UserRole.MANAGER)
    executive = await make_user("exec_a", UserRole.EXECUTIVE, manager=manager)
    colleague = await make_user("exec_b", UserRole.EXECUTIVE, manager=manager)
    return {"admin": admin, "manager": manager, "executive": executive, "colleague": colleague}


async def create_lead(client: AsyncClient, user, **overrides) -> dict:
    response = await client.post("/api/v1/leads", json=lead_payload(**overrides), headers=auth_headers(user))
    assert response.status_code == 201, response.text
    return response.json()


# ==========================================
# AUTENTICAÇÃO E VALIDAÇÃO
# ==========================================

@pytest.mark.asyncio
async def test_leads_require_authentication(async_client: AsyncClient):
    response = await async_client.get("/api/v1/leads")

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_missing_field_names_first_invalid_field(async_client: AsyncClient, admin):
    payload = lead_payload()
    del payload["name"]

    response = await async_client.post("/api/v1/leads", json=payload, headers=auth_headers(admin))

    assert response.status_code == 400
    assert response.json()["field"] == "name"


@pytest.mark.asyncio
async def test_follow_up_requires_date_on_create(async_client: AsyncClient, admin):
    response = await async_client.post(
        "/api/v1/leads",
        json=lead_payload(status="FOLLOW_UP"),
        headers=auth_headers(admin),
    )

    assert response.status_code == 400
    assert response.json()["field"] == "follow_up_at"


@pytest.mark.asyncio
async def test_follow_up_requires_date_on_update(async_client: AsyncClient, admin):
    lead = await create_lead(async_client, admin)

    response = await async_client.put(
        f"/api/v1/leads/{lead['id']}",
        json={"status": "FOLLOW_UP"},
        headers=auth_headers(admin),
    )
    assert response.status_code == 400
    assert response.json()["field"] == "follow_up_at"

    ok = await async_client.put(
        f"/api/v1/leads/{lead['id']}",
        json={"status": "FOLLOW_UP", "follow_up_at": "2030-01-15T10:00:00"},
        headers=auth_headers(admin),
    )
    assert ok.status_code == 200
    assert ok.json()["status"] == "FOLLOW_UP"
    assert ok.json()["follow_up_at"].startswith("2030-01-15T10:00:00")


# ==========================================
# CRIAÇÃO E DISTRIBUIÇÃO
# ==========================================

@pytest.mark.asyncio
async def test_create_with_auto_assignment_returns_enriched_lead(async_client: AsyncClient, team):
    lead = await create_lead(
        async_client, team["admin"], auto_assign_level1=True, auto_assign_level2=True
    )

    assert lead["assignment_stage"] == "EXECUTIVE_ASSIGNED"
    assert lead["assigned_manager_id"] == team["manager"].id
    assert lead["assigned_executive_id"] == team["executive"].id
    assert lead["manager_name"] == team["manager"].name
    assert lead["executive_name"] == team["executive"].name
    assert lead["assigned_by"] == team["admin"].id
    assert [h["level"] for h in lead["history"]] == ["MANAGER_LEVEL", "EXECUTIVE_LEVEL"]


@pytest.mark.asyncio
async def test_unassigned_lead_shows_placeholder_names(async_client: AsyncClient, admin):
    lead = await create_lead(async_client, admin, auto_assign_level1=True)

    assert lead["assignment_stage"] == "UNASSIGNED"
    assert lead["manager_name"] == "Unassigned"
    assert lead["executive_name"] == "Unassigned"
    assert lead["history"] == []


# ==========================================
# ESCOPO
# ==========================================

@pytest.mark.asyncio
async def test_each_role_sees_only_its_leads(async_client: AsyncClient, team):
    mine = await create_lead(
        async_client, team["admin"], name="Do Executivo", auto_assign_level1=True, auto_assign_level2=True
    )
    other = await create_lead(async_client, team["admin"], name="Sem Dono")

    executive_list = await async_client.get("/api/v1/leads", headers=auth_headers(team["executive"]))
    manager_list = await async_client.get("/api/v1/leads", headers=auth_headers(team["manager"]))
    admin_list = await async_client.get("/api/v1/leads", headers=auth_headers(team["admin"]))

    assert [lead["id"] for lead in executive_list.json()] == [mine["id"]]
    assert [lead["id"] for lead in manager_list.json()] == [mine["id"]]
    assert {lead["id"] for lead in admin_list.json()} == {mine["id"], other["id"]}

    forbidden = await async_client.get(
        f"/api/v1/leads/{other['id']}", headers=auth_headers(team["executive"])
    )
    assert forbidden.status_code == 403


@pytest.mark.asyncio
async def test_filters_combine_with_scope(async_client: AsyncClient, admin):
    await create_lead(async_client, admin, name="Ana", city="Gramado")
    await create_lead(async_client, admin, name="Bruno", city="Pelotas")
    closed = await create_lead(async_client, admin, name="Carla", city="Gramado", status="CLOSED")

    by_city = await async_client.get(
        "/api/v1/leads", params={"search": "gramado"}, headers=auth_headers(admin)
    )
    assert {lead["name"] for lead in by_city.json()} == {"Ana", "Carla"}

    by_status = await async_client.get(
        "/api/v1/leads",
        params={"search": "gramado", "status": "CLOSED"},
        headers=auth_headers(admin),
    )
    assert [lead["id"] for lead in by_status.json()] == [closed["id"]]


async def assign_to(client: AsyncClient, team, lead: dict, executive) -> None:
    """Admin passa o lead para o gestor da equipe e depois para o executivo."""
    headers = auth_headers(team["admin"])
    manager = await client.post(
        f"/api/v1/leads/{lead['id']}/assign-manager",
        json={"manager_id": team["manager"].id},
        headers=headers,
    )
    assert manager.status_code == 200, manager.text
    response = await client.post(
        f"/api/v1/leads/{lead['id']}/assign-executive",
        json={"executive_id": executive.id},
        headers=headers,
    )
    assert response.status_code == 200, response.text


@pytest.mark.asyncio
async def test_executive_sees_exactly_own_leads_with_any_status_filter(async_client: AsyncClient, team):
    new_lead = await create_lead(async_client, team["admin"], name="Novo")
    closed_lead = await create_lead(async_client, team["admin"], name="Fechado", status="CLOSED")
    colleague_lead = await create_lead(async_client, team["admin"], name="Do Colega")

    await assign_to(async_client, team, new_lead, team["executive"])
    await assign_to(async_client, team, closed_lead, team["executive"])
    await assign_to(async_client, team, colleague_lead, team["colleague"])

    headers = auth_headers(team["executive"])

    everything = await async_client.get("/api/v1/leads", headers=headers)
    assert {lead["id"] for lead in everything.json()} == {new_lead["id"], closed_lead["id"]}

    for expected in (new_lead, closed_lead):
        filtered = await async_client.get(
            "/api/v1/leads", params={"status": expected["status"]}, headers=headers
        )
        assert [lead["id"] for lead in filtered.json()] == [expected["id"]]


@pytest.mark.asyncio
async def test_search_treats_wildcards_literally(async_client: AsyncClient, admin):
    solar = await create_lead(async_client, admin, name="100% Solar")
    await create_lead(async_client, admin, name="1000 Watts")
    await create_lead(async_client, admin, name="Ana", city="Gramado")

    percent = await async_client.get(
        "/api/v1/leads", params={"search": "100%"}, headers=auth_headers(admin)
    )
    assert [lead["id"] for lead in percent.json()] == [solar["id"]]

    only_wildcard = await async_client.get(
        "/api/v1/leads", params={"search": "_"}, headers=auth_headers(admin)
    )
    assert only_wildcard.json() == []


@pytest.mark.asyncio
async def test_get_unknown_lead_returns_404(async_client: AsyncClient, admin):
    response = await async_client.get("/api/v1/leads/9999", headers=auth_headers(admin))

    assert response.status_code == 404


# ==========================================
# EDIÇÃO
# ==========================================

@pytest.mark.asyncio
async def test_executive_cannot_reassign_through_update(async_client: AsyncClient, team):
    lead = await create_lead(
        async_client, team["admin"], auto_assign_level1=True, auto_assign_level2=True
    )

    response = await async_client.put(
        f"/api/v1/leads/{lead['id']}",
        json={"assigned_executive_id": team["colleague"].id},
        headers=auth_headers(team["executive"]),
    )
    assert response.status_code == 403

    own_edit = await async_client.put(
        f"/api/v1/leads/{lead['id']}",
        json={"city": "Novo Hamburgo"},
        headers=auth_headers(team["executive"]),
    )
    assert own_edit.status_code == 200
    assert own_edit.json()["city"] == "Novo Hamburgo"


@pytest.mark.asyncio
async def test_executive_cannot_edit_closed_lead(async_client: AsyncClient, team):
    lead = await create_lead(
        async_client, team["admin"], auto_assign_level1=True, auto_assign_level2=True
    )
    closed = await async_client.put(
        f"/api/v1/leads/{lead['id']}",
        json={"status": "CLOSED"},
        headers=auth_headers(team["executive"]),
    )
    assert closed.status_code == 200

    response = await async_client.put(
        f"/api/v1/leads/{lead['id']}",
        json={"status": "NEW"},
        headers=auth_headers(team["executive"]),
    )
    assert response.status_code == 403

    reopened = await async_client.put(
        f"/api/v1/leads/{lead['id']}",
        json={"status": "NEW"},
        headers=auth_headers(team["manager"]),
    )
    assert reopened.status_code == 200


@pytest.mark.asyncio
async def test_manager_reassigns_executive_through_update(async_client: AsyncClient, team):
    lead = await create_lead(
        async_client, team["admin"], auto_assign_level1=True, auto_assign_level2=True
    )

    response = await async_client.put(
        f"/api/v1/leads/{lead['id']}",
        json={"assigned_executive_id": team["colleague"].id},
        headers=auth_headers(team["manager"]),
    )

    assert response.status_code == 200
    data = response.json()
    assert data["assigned_executive_id"] == team["colleague"].id
    assert data["history"][-1]["to_user_id"] == team["colleague"].id
    assert data["history"][-1]["from_user_id"] == team["manager"].id


# ==========================================
# ATRIBUIÇÃO MANUAL
# ==========================================

@pytest.mark.asyncio
async def test_two_manual_reassignments_keep_both_history_rows(async_client: AsyncClient, admin, make_user):
    first = await make_user("gestor1", UserRole.MANAGER)
    second = await make_user("gestor2", UserRole.MANAGER)
    lead = await create_lead(async_client, admin)

    for manager in (first, second):
        response = await async_client.post(
            f"/api/v1/leads/{lead['id']}/assign-manager",
            json={"manager_id": manager.id, "reason": "redistribuição"},
            headers=auth_headers(admin),
        )
        assert response.status_code == 200

    history = await async_client.get(f"/api/v1/leads/{lead['id']}/history", headers=auth_headers(admin))
    rows = history.json()
    assert [row["to_user_id"] for row in rows] == [first.id, second.id]

    detail = await async_client.get(f"/api/v1/leads/{lead['id']}", headers=auth_headers(admin))
    assert detail.json()["assigned_manager_id"] == rows[-1]["to_user_id"]
    assert detail.json()["assignment_stage"] == "MANAGER_ASSIGNED"


@pytest.mark.asyncio
async def test_manager_cannot_assign_manager(async_client: AsyncClient, team):
    lead = await create_lead(async_client, team["admin"], auto_assign_level1=True)

    response = await async_client.post(
        f"/api/v1/leads/{lead['id']}/assign-manager",
        json={"manager_id": team["manager"].id},
        headers=auth_headers(team["manager"]),
    )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_manager_cannot_assign_executive_from_other_team(async_client: AsyncClient, team, make_user):
    other_manager = await make_user("gestor2", UserRole.MANAGER)
    outsider = await make_user("exec_c", UserRole.EXECUTIVE, manager=other_manager)
    lead = await create_lead(async_client, team["admin"], auto_assign_level1=True)

    response = await async_client.post(
        f"/api/v1/leads/{lead['id']}/assign-executive",
        json={"executive_id": outsider.id},
        headers=auth_headers(team["manager"]),
    )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_assign_inactive_manager_names_field(async_client: AsyncClient, admin, make_user):
    inactive = await make_user("gestor", UserRole.MANAGER, is_active=False)
    lead = await create_lead(async_client, admin)

    response = await async_client.post(
        f"/api/v1/leads/{lead['id']}/assign-manager",
        json={"manager_id": inactive.id},
        headers=auth_headers(admin),
    )

    assert response.status_code == 400
    assert response.json()["field"] == "manager_id"


# ==========================================
# NOTAS
# ==========================================

@pytest.mark.asyncio
async def test_notes_follow_lead_visibility(async_client: AsyncClient, team):
    mine = await create_lead(
        async_client, team["admin"], auto_assign_level1=True, auto_assign_level2=True
    )
    other = await create_lead(async_client, team["admin"])
    headers = auth_headers(team["executive"])

    created = await async_client.post(
        f"/api/v1/leads/{mine['id']}/notes", json={"note_text": "Ligar amanhã"}, headers=headers
    )
    assert created.status_code == 201
    assert created.json()["author_name"] == team["executive"].name

    notes = await async_client.get(f"/api/v1/leads/{mine['id']}/notes", headers=headers)
    assert [n["note_text"] for n in notes.json()] == ["Ligar amanhã"]

    forbidden = await async_client.post(
        f"/api/v1/leads/{other['id']}/notes", json={"note_text": "x"}, headers=headers
    )
    assert forbidden.status_code == 403

    missing = await async_client.get("/api/v1/leads/9999/notes", headers=headers)
    assert missing.status_code == 404
