# tests/test_api.py
import pytest

from egghunt.main import create_app
from egghunt.repositories import AdminUserRepository


async def _create_campaign(client, headers, name="Easter"):
    r = await client.post(
        "/api/campaigns",
        json={"name": name, "description": "Office hunt", "createdBy": "root"},
        headers=headers,
    )
    assert r.status_code == 201, r.text
    return r.json()


async def _create_qr(client, headers, campaign_id, title="Lobby"):
    r = await client.post("/api/qrcodes", json={"campaignId": campaign_id, "title": title}, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()


async def _create_user(client, name="alice"):
    r = await client.post("/api/users", json={"name": name})
    assert r.status_code == 201, r.text
    return r.json()


def test_statistics_routes_registered(settings):
    app = create_app(settings)
    paths = app.openapi()["paths"]
    for path in [
        "/api/statistics/overview",
        "/api/statistics/campaign/{campaign_id}",
        "/api/statistics/campaign/{campaign_id}/qrcodes",
        "/api/statistics/user/{user_id}",
        "/api/statistics/qrcode/{qr_code_id}",
        "/api/statistics/top-performers",
        "/api/statistics/time-series",
        "/api/statistics/find-history",
    ]:
        assert path in paths


@pytest.mark.asyncio
class TestHealthAndAuth:
    async def test_health(self, client):
        r = await client.get("/health")
        assert r.json() == {"status": "ok", "service": "egghunt-svc"}

    async def test_metrics_exposed(self, client):
        await client.get("/health")
        r = await client.get("/metrics")
        assert r.status_code == 200

    async def test_login_issues_token(self, client, admin_headers):
        r = await client.post("/api/auth/login", json={"username": "root", "password": "hunter2hunter2"})
        assert r.status_code == 200
        body = r.json()
        assert body["tokenType"] == "bearer"
        assert body["admin"]["username"] == "root"

        me = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {body['accessToken']}"})
        assert me.status_code == 200
        assert me.json()["lastLogin"] is not None

    async def test_bad_login(self, client, admin_headers):
        r = await client.post("/api/auth/login", json={"username": "root", "password": "wrong"})
        assert r.status_code == 401

    async def test_admin_routes_need_token(self, client):
        assert (await client.get("/api/statistics/overview")).status_code == 401
        bad = {"Authorization": "Bearer not-a-token"}
        assert (await client.get("/api/statistics/overview", headers=bad)).status_code == 401

    async def test_deactivated_admin_token_rejected(self, app, client, admin_headers):
        async with app.state.session_maker() as db:
            repo = AdminUserRepository(db)
            admin = await repo.get_by_username("root")
            admin.deactivate()
            await repo.update(admin)

        r = await client.get("/api/statistics/overview", headers=admin_headers)
        assert r.status_code == 403

    async def test_change_password(self, client, admin_headers):
        r = await client.post(
            "/api/auth/change-password",
            json={"currentPassword": "hunter2hunter2", "newPassword": "correct-horse"},
            headers=admin_headers,
        )
        assert r.status_code == 204
        r = await client.post("/api/auth/login", json={"username": "root", "password": "correct-horse"})
        assert r.status_code == 200


@pytest.mark.asyncio
class TestCrudRoutes:
    async def test_campaign_crud(self, client, admin_headers):
        camp = await _create_campaign(client, admin_headers)
        assert camp["isActive"] is True

        r = await client.put(
            f"/api/campaigns/{camp['id']}", json={"name": "Spring", "description": "new"}, headers=admin_headers
        )
        assert r.json()["name"] == "Spring"

        await client.post(f"/api/campaigns/{camp['id']}/deactivate", headers=admin_headers)
        assert (await client.get("/api/campaigns/active")).json() == []

        assert (await client.delete(f"/api/campaigns/{camp['id']}", headers=admin_headers)).status_code == 204
        assert (await client.get(f"/api/campaigns/{camp['id']}")).status_code == 404

    async def test_blank_campaign_rejected(self, client, admin_headers):
        r = await client.post(
            "/api/campaigns", json={"name": " ", "description": "d", "createdBy": "x"}, headers=admin_headers
        )
        assert r.status_code == 422

    async def test_qr_code_routes(self, client, admin_headers):
        camp = await _create_campaign(client, admin_headers)
        qr = await _create_qr(client, admin_headers, camp["id"])

        public = await client.get(f"/api/qrcodes/by-code/{qr['code']}")
        assert public.status_code == 200
        assert "internalNotes" not in public.json()

        r = await client.put(f"/api/qrcodes/{qr['id']}/sort-order", json={"sortOrder": 3}, headers=admin_headers)
        assert r.json()["sortOrder"] == 3

        png = await client.get(f"/api/qrcodes/{qr['id']}/image.png", headers=admin_headers)
        assert png.headers["content-type"] == "image/png"

        r = await client.post("/api/qrcodes", json={"campaignId": 999, "title": "x"}, headers=admin_headers)
        assert r.status_code == 400

    async def test_duplicate_user_name_conflicts(self, client):
        await _create_user(client, "alice")
        r = await client.post("/api/users", json={"name": "alice"})
        assert r.status_code == 409
        check = await client.post("/api/users/check-name", json={"name": "alice"})
        assert check.json() == {"name": "alice", "exists": True}

    async def test_register_find_flow(self, client, admin_headers):
        camp = await _create_campaign(client, admin_headers)
        qr = await _create_qr(client, admin_headers, camp["id"])
        user = await _create_user(client)
        payload = {"qrCodeId": qr["id"], "userId": user["id"], "ipAddress": "10.0.0.1", "userAgent": "pytest"}

        first = await client.post("/api/finds", json=payload)
        second = await client.post("/api/finds", json=payload)

        assert first.status_code == 201
        assert first.json()["alreadyFound"] is False
        assert second.status_code == 200
        assert second.json()["alreadyFound"] is True
        assert second.json()["find"]["id"] == first.json()["find"]["id"]

        check = await client.get("/api/finds/check", params={"qrCodeId": qr["id"], "userId": user["id"]})
        assert check.json()["found"] is True
        count = await client.get(f"/api/finds/user/{user['id']}/count")
        assert count.json() == {"count": 1}

        bad = await client.post("/api/finds", json={**payload, "userId": 999})
        assert bad.status_code == 400

    async def test_session_routes(self, client):
        user = await _create_user(client)
        r = await client.post("/api/sessions", json={"userId": user["id"]})
        assert r.status_code == 201
        sid = r.json()["id"]

        assert (await client.get(f"/api/sessions/{sid}/validate")).json()["valid"] is True
        r = await client.put(f"/api/sessions/{sid}/data", json={"data": '{"a": 1}'})
        assert r.json()["data"] == '{"a": 1}'
        await client.post(f"/api/sessions/{sid}/deactivate")
        assert (await client.get(f"/api/sessions/{sid}/validate")).json()["valid"] is False
        assert (await client.get("/api/sessions/nope")).status_code == 404

    async def test_gdpr_routes(self, client, admin_headers):
        user = await _create_user(client)
        r = await client.post(f"/api/users/{user['id']}/anonymize", headers=admin_headers)
        assert r.json()["newName"].startswith(f"Anonymized_User_{user['id']}_")

        r = await client.post(f"/api/users/{user['id']}/gdpr-delete", params={"delete_finds": True}, headers=admin_headers)
        assert r.json()["userDeleted"] is True
        assert (await client.get(f"/api/users/{user['id']}")).status_code == 404


@pytest.mark.asyncio
class TestStatisticsRoutes:
    async def _seed(self, client, headers):
        camp = await _create_campaign(client, headers)
        q1 = await _create_qr(client, headers, camp["id"], "Lobby")
        await _create_qr(client, headers, camp["id"], "Roof")
        alice = await _create_user(client, "alice")
        await client.post(
            "/api/finds",
            json={"qrCodeId": q1["id"], "userId": alice["id"], "ipAddress": "10.0.0.1", "userAgent": "pytest"},
        )
        return camp, q1, alice

    async def test_overview(self, client, admin_headers):
        await self._seed(client, admin_headers)
        body = (await client.get("/api/statistics/overview", headers=admin_headers)).json()
        assert body["totalCampaigns"] == 1
        assert body["totalQrCodes"] == 2
        assert body["activeUsers"] == 1
        assert body["totalFinds"] == 1
        assert "generatedAt" in body

    async def test_campaign_and_qr_statistics(self, client, admin_headers):
        camp, q1, alice = await self._seed(client, admin_headers)

        body = (await client.get(f"/api/statistics/campaign/{camp['id']}", headers=admin_headers)).json()
        assert body["completionRate"] == pytest.approx(0.5)
        assert body["activeQrCodes"] == 2

        body = (await client.get(f"/api/statistics/campaign/{camp['id']}/qrcodes", headers=admin_headers)).json()
        assert body["foundQrCodes"] == 1
        assert body["unfoundQrCodes"] == 1

        body = (await client.get(f"/api/statistics/qrcode/{q1['id']}", headers=admin_headers)).json()
        assert body["finders"][0]["userName"] == "alice"

        body = (await client.get(f"/api/statistics/user/{alice['id']}", headers=admin_headers)).json()
        assert body["totalFinds"] == 1
        assert body["isActive"] is True
        assert body["firstSeen"] is not None

    async def test_missing_entities_are_404(self, client, admin_headers):
        for path in ["campaign/99", "campaign/99/qrcodes", "user/99", "qrcode/99"]:
            r = await client.get(f"/api/statistics/{path}", headers=admin_headers)
            assert r.status_code == 404, path

    async def test_top_performers_time_series_and_history(self, client, admin_headers):
        await self._seed(client, admin_headers)

        top = (await client.get("/api/statistics/top-performers", params={"limit": 1}, headers=admin_headers)).json()
        assert len(top["topByTotalFinds"]) == 1

        series = (await client.get("/api/statistics/time-series", headers=admin_headers)).json()
        assert series["daily"][0]["count"] == 1

        history = (await client.get("/api/statistics/find-history", params={"take": 10}, headers=admin_headers)).json()
        assert history["totalCount"] == 1
        assert history["items"][0]["qrCodeTitle"] == "Lobby"

    async def test_time_series_rejects_inverted_window(self, client, admin_headers):
        r = await client.get(
            "/api/statistics/time-series",
            params={"startDate": "2024-02-01T00:00:00Z", "endDate": "2024-01-01T00:00:00Z"},
            headers=admin_headers,
        )
        assert r.status_code == 400
