from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal
from pydantic import BaseModel, ConfigDict, Field, StringConstraints, model_validator
from pydantic.alias_generators import to_camel

Str200 = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=200)]
Str100 = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]
Text2000 = Annotated[str, Field(max_length=2000)]
Password = Annotated[str, Field(min_length=8, max_length=128)]


class ApiModel(BaseModel):
    # camelCase on the wire, either casing accepted on input
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# -------- Campaigns --------
class CampaignCreate(ApiModel):
    name: Str200
    description: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=2000)]
    created_by: Str100


class CampaignUpdate(ApiModel):
    name: Str200
    description: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=2000)]


class CampaignRead(ApiModel):
    id: int
    name: str
    description: str
    created_by: str
    is_active: bool
    created_at: datetime
    updated_at: datetime


# -------- QR codes --------
class QrCodeCreate(ApiModel):
    campaign_id: int
    title: Str200
    description: Text2000 = ""
    internal_notes: Text2000 = ""


class QrCodeUpdate(ApiModel):
    title: Str200
    description: Text2000 = ""
    internal_notes: Text2000 = ""


class SortOrderUpdate(ApiModel):
    sort_order: Annotated[int, Field(ge=0)]


class QrCodeRead(ApiModel):
    id: int
    campaign_id: int
    title: str
    description: str
    internal_notes: str
    code: str
    sort_order: int
    is_active: bool
    created_at: datetime
    updated_at: datetime


class QrCodePublic(ApiModel):
    """What a finder sees after scanning; no internal notes."""
    id: int
    campaign_id: int
    title: str
    description: str
    code: str
    is_active: bool


# -------- Users --------
class UserCreate(ApiModel):
    name: Str100


class UserRead(ApiModel):
    id: int
    name: str
    is_active: bool
    first_seen: datetime
    last_seen: datetime


class NameCheckRequest(ApiModel):
    name: Str100


class NameCheckResponse(ApiModel):
    name: str
    exists: bool


# -------- Finds --------
class FindCreate(ApiModel):
    qr_code_id: int
    user_id: int
    ip_address: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=64)]
    user_agent: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=512)]


class FindRead(ApiModel):
    id: int
    qr_code_id: int
    user_id: int
    found_at: datetime
    ip_address: str
    user_agent: str


class FindRegistration(ApiModel):
    find: FindRead
    already_found: bool


class FindCheckResponse(ApiModel):
    qr_code_id: int
    user_id: int
    found: bool
    find: FindRead | None = None


class CountResponse(ApiModel):
    count: int


# -------- Sessions --------
class SessionCreate(ApiModel):
    user_id: int
    expiration_days: Annotated[int, Field(ge=1, le=365)] | None = None


class SessionExtend(ApiModel):
    days: Annotated[int, Field(ge=1, le=365)] = 30


class SessionDataUpdate(ApiModel):
    data: str = "{}"


class SessionRead(ApiModel):
    id: str
    user_id: int
    created_at: datetime
    expires_at: datetime
    data: str
    is_active: bool


class SessionValidation(ApiModel):
    session_id: str
    valid: bool


# -------- Admin auth --------
class LoginRequest(ApiModel):
    username: Str100
    password: Annotated[str, Field(min_length=1, max_length=128)]


class AdminRead(ApiModel):
    id: int
    username: str
    email: str
    is_active: bool
    created_at: datetime
    last_login: datetime | None = None


class LoginResponse(ApiModel):
    access_token: str
    token_type: Literal["bearer"] = "bearer"
    expires_in: int
    admin: AdminRead


class ChangePasswordRequest(ApiModel):
    current_password: Annotated[str, Field(min_length=1, max_length=128)]
    new_password: Password

    @model_validator(mode="after")
    def _differs(self):
        if self.current_password == self.new_password:
            raise ValueError("new password must differ from the current one")
        return self


# -------- GDPR --------
class GdprDeleteResult(ApiModel):
    user_id: int
    deleted_sessions: int
    deleted_finds: int
    user_deleted: bool


class AnonymizeResult(ApiModel):
    user_id: int
    new_name: str
    deleted_sessions: int


# -------- Statistics --------
class SystemOverview(ApiModel):
    total_campaigns: int = 0
    active_campaigns: int = 0
    total_qr_codes: int = 0
    total_users: int = 0
    active_users: int = 0
    total_finds: int = 0
    completed_finds: int = 0
    generated_at: datetime


class CampaignStatistics(ApiModel):
    campaign_id: int
    campaign_name: str = ""
    total_qr_codes: int = 0
    active_qr_codes: int = 0
    total_finds: int = 0
    unique_finders: int = 0
    completion_rate: float = 0.0
    generated_at: datetime


class UserStatistics(ApiModel):
    user_id: int
    user_name: str = ""
    first_seen: datetime | None = None
    last_seen: datetime | None = None
    is_active: bool = False
    total_finds: int = 0
    unique_qr_codes_found: int = 0
    first_find_date: datetime | None = None
    last_find_date: datetime | None = None
    generated_at: datetime


class QrCodeFinder(ApiModel):
    user_id: int
    user_name: str
    found_at: datetime
    ip_address: str


class QrCodeStatistics(ApiModel):
    qr_code_id: int
    title: str = ""
    campaign_id: int = 0
    campaign_name: str = ""
    find_count: int = 0
    unique_finders: int = 0
    is_found: bool = False
    first_find_date: datetime | None = None
    last_find_date: datetime | None = None
    finders: list[QrCodeFinder] = Field(default_factory=list)
    generated_at: datetime


class CampaignQrCodeStatistics(ApiModel):
    campaign_id: int
    campaign_name: str = ""
    total_qr_codes: int = 0
    found_qr_codes: int = 0
    unfound_qr_codes: int = 0
    total_finds: int = 0
    qr_codes: list[QrCodeStatistics] = Field(default_factory=list)
    generated_at: datetime


class TopPerformersStatistics(ApiModel):
    top_by_total_finds: list[UserStatistics] = Field(default_factory=list)
    top_by_unique_qr_codes: list[UserStatistics] = Field(default_factory=list)
    most_recent_activity: list[UserStatistics] = Field(default_factory=list)
    generated_at: datetime


class TimeBucket(ApiModel):
    date: datetime
    count: int
    unique_finders: int
    unique_qr_codes: int


class TimeBasedStatistics(ApiModel):
    start_date: datetime | None = None
    end_date: datetime | None = None
    daily: list[TimeBucket] = Field(default_factory=list)
    weekly: list[TimeBucket] = Field(default_factory=list)
    monthly: list[TimeBucket] = Field(default_factory=list)
    generated_at: datetime


class FindHistoryItem(ApiModel):
    find_id: int
    found_at: datetime
    ip_address: str
    user_agent: str
    user_id: int
    user_name: str
    qr_code_id: int
    qr_code_title: str
    campaign_id: int
    campaign_name: str


class FindHistory(ApiModel):
    items: list[FindHistoryItem] = Field(default_factory=list)
    total_count: int = 0
    skip: int = 0
    take: int = 50
    generated_at: datetime
