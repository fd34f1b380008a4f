"""
Testes das notificações e do dashboard via API.
"""

import pytest
from httpx import AsyncClient

from leaddesk.domain.entities import UserRole
from tests.utils import auth_headers


@pytest.fixture
async def assigned_lead(async_client: AsyncClient, admin, make_user):
    manager = await make_user("gestor", UserRole.MANAGER)
    executive = await make_user("exec", UserRole.EXECUTIVE, manager=manager)

    response = await async_client.post(
        "/api/v1/leads",
        json={
            "name": "Paula Lima",
            "mobile": "51988887777",
            "service_type": "Manutenção",
            "city": "Caxias do Sul",
            "source": "site",
            "auto_assign_level1": True,
            "auto_assign_level2": True,
        },
        headers=auth_headers(admin),
    )
    assert response.status_code == 201
    return {"lead": response.json(), "manager": manager, "executive": executive}


@pytest.mark.asyncio
async def test_assignment_creates_notification(async_client: AsyncClient, assigned_lead):
    headers = auth_headers(assigned_lead["executive"])

    response = await async_client.get("/api/v1/notifications", headers=headers)
    count = await async_client.get("/api/v1/notifications/count", headers=headers)

    assert response.status_code == 200
    [notification] = response.json()
    assert notification["type"] == "LEAD_ASSIGNED"
    assert notification["related_lead_id"] == assigned_lead["lead"]["id"]
    assert notification["is_read"] is False
    assert count.json() == {"unread_count": 1}


@pytest.mark.asyncio
async def test_mark_as_read_is_idempotent(async_client: AsyncClient, assigned_lead):
    headers = auth_headers(assigned_lead["manager"])
    [notification] = (await async_client.get("/api/v1/notifications", headers=headers)).json()

    for _ in range(2):
        response = await async_client.patch(
            f"/api/v1/notifications/{notification['id']}/read", headers=headers
        )
        assert response.status_code == 200
        assert response.json()["is_read"] is True

    count = await async_client.get("/api/v1/notifications/count", headers=headers)
    assert count.json() == {"unread_count": 0}


@pytest.mark.asyncio
async def test_cannot_mark_someone_elses_notification(async_client: AsyncClient, assigned_lead):
    [notification] = (
        await async_client.get("/api/v1/notifications", headers=auth_headers(assigned_lead["manager"]))
    ).json()

    response = await async_client.patch(
        f"/api/v1/notifications/{notification['id']}/read",
        headers=auth_headers(assigned_lead["executive"]),
    )

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_mark_all_as_read(async_client: AsyncClient, assigned_lead):
    headers = auth_headers(assigned_lead["executive"])

    response = await async_client.patch("/api/v1/notifications/read-all", headers=headers)
    assert response.status_code == 200

    unread = await async_client.get(
        "/api/v1/notifications", params={"unread_only": True}, headers=headers
    )
    assert unread.json() == []


@pytest.mark.asyncio
async def test_dashboard_stats_by_role(async_client: AsyncClient, assigned_lead):
    manager_stats = await async_client.get(
        "/api/v1/dashboard/stats", headers=auth_headers(assigned_lead["manager"])
    )
    executive_stats = await async_client.get(
        "/api/v1/dashboard/stats", headers=auth_headers(assigned_lead["executive"])
    )

    assert manager_stats.status_code == 200
    data = manager_stats.json()
    assert data["total_leads"] == 1
    assert data["stage_stats"]["executive_assigned"] == 1
    assert data["team_performance"] == [
        {
            "executive_id": assigned_lead["executive"].id,
            "name": assigned_lead["executive"].name,
            "assigned_count": 1,
            "converted_count": 0,
        }
    ]

    assert executive_stats.json()["total_leads"] == 1
    assert "team_performance" not in executive_stats.json()
