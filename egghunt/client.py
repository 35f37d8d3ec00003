"""
Async HTTP client for the egg hunt API, used by the web front end.

Every call raises ``httpx.HTTPStatusError`` on a non-2xx answer, except the
single-entity lookups which return ``None`` on 404.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict

import httpx

from .schemas import (
    CampaignQrCodeStatistics,
    CampaignRead,
    CampaignStatistics,
    FindRegistration,
    LoginResponse,
    QrCodePublic,
    QrCodeRead,
    QrCodeStatistics,
    SystemOverview,
    TimeBasedStatistics,
    TopPerformersStatistics,
    UserRead,
    UserStatistics,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5.0


class EggHuntApiClient:
    def __init__(
        self,
        base_url: str,
        *,
        token: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(base_url=base_url.rstrip("/"), timeout=timeout, transport=transport)
        self.token = token

    async def __aenter__(self) -> "EggHuntApiClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _headers(self) -> Dict[str, str]:
        if self.token:
            return {"Authorization": f"Bearer {self.token}"}
        return {}

    async def _get(self, path: str, *, params: Dict[str, Any] | None = None, allow_404: bool = False) -> Any:
        r = await self._client.get(path, params=params, headers=self._headers())
        if allow_404 and r.status_code == 404:
            return None
        if r.is_error:
            logger.warning("GET %s failed with %s", path, r.status_code)
        r.raise_for_status()
        return r.json()

    async def _post(self, path: str, payload: Dict[str, Any]) -> Any:
        r = await self._client.post(path, json=payload, headers=self._headers())
        if r.is_error:
            logger.warning("POST %s failed with %s", path, r.status_code)
        r.raise_for_status()
        return r.json()

    # --- auth ---

    async def login(self, username: str, password: str) -> LoginResponse:
        data = await self._post("/api/auth/login", {"username": username, "password": password})
        res = LoginResponse.model_validate(data)
        self.token = res.access_token
        return res

    # --- campaigns & qr codes ---

    async def get_active_campaigns(self) -> list[CampaignRead]:
        return [CampaignRead.model_validate(x) for x in await self._get("/api/campaigns/active")]

    async def get_campaign(self, campaign_id: int) -> CampaignRead | None:
        data = await self._get(f"/api/campaigns/{campaign_id}", allow_404=True)
        return CampaignRead.model_validate(data) if data is not None else None

    async def get_qr_codes_by_campaign(self, campaign_id: int) -> list[QrCodeRead]:
        return [QrCodeRead.model_validate(x) for x in await self._get(f"/api/qrcodes/campaign/{campaign_id}")]

    async def get_qr_code_by_code(self, code: str) -> QrCodePublic | None:
        data = await self._get(f"/api/qrcodes/by-code/{code}", allow_404=True)
        return QrCodePublic.model_validate(data) if data is not None else None

    # --- users & finds ---

    async def create_user(self, name: str) -> UserRead:
        return UserRead.model_validate(await self._post("/api/users", {"name": name}))

    async def register_find(self, *, qr_code_id: int, user_id: int, ip_address: str, user_agent: str) -> FindRegistration:
        payload = {"qrCodeId": qr_code_id, "userId": user_id, "ipAddress": ip_address, "userAgent": user_agent}
        return FindRegistration.model_validate(await self._post("/api/finds", payload))

    # --- statistics ---

    async def get_system_overview(self) -> SystemOverview:
        return SystemOverview.model_validate(await self._get("/api/statistics/overview"))

    async def get_campaign_statistics(self, campaign_id: int) -> CampaignStatistics | None:
        data = await self._get(f"/api/statistics/campaign/{campaign_id}", allow_404=True)
        return CampaignStatistics.model_validate(data) if data is not None else None

    async def get_campaign_qr_code_statistics(self, campaign_id: int) -> CampaignQrCodeStatistics | None:
        data = await self._get(f"/api/statistics/campaign/{campaign_id}/qrcodes", allow_404=True)
        return CampaignQrCodeStatistics.model_validate(data) if data is not None else None

    async def get_qr_code_statistics(self, qr_code_id: int) -> QrCodeStatistics | None:
        data = await self._get(f"/api/statistics/qrcode/{qr_code_id}", allow_404=True)
        return QrCodeStatistics.model_validate(data) if data is not None else None

    async def get_user_statistics(self, user_id: int) -> UserStatistics | None:
        data = await self._get(f"/api/statistics/user/{user_id}", allow_404=True)
        return UserStatistics.model_validate(data) if data is not None else None

    async def get_top_performers(self, limit: int | None = None) -> TopPerformersStatistics:
        params = {"limit": limit} if limit else None
        return TopPerformersStatistics.model_validate(await self._get("/api/statistics/top-performers", params=params))

    async def get_time_based_statistics(
        self, *, start: datetime | None = None, end: datetime | None = None
    ) -> TimeBasedStatistics:
        params: Dict[str, Any] = {}
        if start is not None:
            params["startDate"] = start.isoformat()
        if end is not None:
            params["endDate"] = end.isoformat()
        return TimeBasedStatistics.model_validate(await self._get("/api/statistics/time-series", params=params or None))
