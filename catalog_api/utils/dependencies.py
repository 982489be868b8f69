from fastapi import Depends, Header, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional
import secrets

from catalog_api.services.boxoffice_service import BoxOfficeClient

UNAUTHORIZED_MESSAGE = "Missing or invalid authentication"

# auto_error=False so a missing header answers 401 (not 403) through our own check
security = HTTPBearer(auto_error=False)


def get_box_office_client(request: Request) -> Optional[BoxOfficeClient]:
    """Upstream client built at startup; None when enrichment is disabled"""
    return request.app.state.box_office_client


async def require_bearer(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> None:
    """Write endpoints need `Authorization: Bearer <AUTH_TOKEN>`; no token configured means open"""
    expected = request.app.state.settings.auth_token
    if not expected:
        return

    if credentials is None or not credentials.credentials.strip():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=UNAUTHORIZED_MESSAGE)

    # Constant-time comparison
    if not secrets.compare_digest(credentials.credentials.strip().encode(), expected.encode()):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=UNAUTHORIZED_MESSAGE)


async def require_rater(x_rater_id: Optional[str] = Header(None)) -> str:
    """Rating submissions identify the rater through the X-Rater-Id header (surrounding whitespace ignored)"""
    rater_id = (x_rater_id or "").strip()
    if not rater_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=UNAUTHORIZED_MESSAGE)
    return rater_id
