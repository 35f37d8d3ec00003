from .admin_users import AdminUserRepository
from .campaigns import CampaignRepository
from .finds import FindHistoryFilter, FindRepository
from .qr_codes import QrCodeRepository
from .sessions import SessionRepository
from .users import UserRepository

__all__ = [
    "AdminUserRepository",
    "CampaignRepository",
    "FindHistoryFilter",
    "FindRepository",
    "QrCodeRepository",
    "SessionRepository",
    "UserRepository",
]
