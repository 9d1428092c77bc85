from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from justoo.core.config import Settings, get_settings
from justoo.db.session import get_session
from justoo.db.sql_auth_store import SqlAuthStore
from justoo.services.auth_service import CustomerAuthService
from justoo.services.sms import SmsSender, get_sms_sender


async def get_auth_service(
    session: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
    sms_sender: SmsSender = Depends(get_sms_sender),
) -> CustomerAuthService:
    return CustomerAuthService(SqlAuthStore(session), settings, sms_sender)
