# auth/dependencies.py
import secrets
from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import APIKeyHeader

from firewood_ops.config import Settings, get_settings

service_token_header = APIKeyHeader(name="X-Sync-Token", auto_error=False)


async def require_service_token(
    token: Optional[str] = Depends(service_token_header),
    settings: Settings = Depends(get_settings),
):
    """Guard for write endpoints. A blank SYNC_API_TOKEN leaves them open."""
    expected = settings.sync_api_token
    if not expected:
        return None
    if not token:
        raise HTTPException(status_code=401, detail="Missing service token")
    if not secrets.compare_digest(token, expected):
        raise HTTPException(status_code=403, detail="Invalid service token")
    return token
