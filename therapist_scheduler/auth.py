import logging
import secrets

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import SchedulerSettings, get_settings

logger = logging.getLogger(__name__)

security = HTTPBearer()


async def get_current_identity(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    settings: SchedulerSettings = Depends(get_settings),
) -> str:
    """
    Identify the caller from the bearer token.

    Only presence of identity is enforced; when SCHEDULER_API_TOKEN is set the
    token must match it.
    """
    token = (credentials.credentials or "").strip()
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    if settings.api_token and not secrets.compare_digest(token, settings.api_token):
        logger.warning("❌ Rejected request with unknown API token")
        raise HTTPException(status_code=401, detail="Invalid API token")

    return token
