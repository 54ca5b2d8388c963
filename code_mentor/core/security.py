from typing import Optional

from fastapi import HTTPException, Security
from fastapi.security.api_key import APIKeyHeader
from starlette.status import HTTP_401_UNAUTHORIZED

from code_mentor.core.config import get_settings

api_key_header = APIKeyHeader(name="x-api-key", auto_error=False)


def require_api_key(api_key: Optional[str] = Security(api_key_header)) -> Optional[str]:
    """
    Checks the x-api-key header when an API_KEY is configured.
    Without a configured key, every request passes.
    """
    expected = get_settings().API_KEY
    if not expected or api_key == expected:
        return api_key
    raise HTTPException(
        status_code=HTTP_401_UNAUTHORIZED,
        detail="Invalid API key",
    )
