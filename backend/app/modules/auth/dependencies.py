from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional

from app.core.exceptions import UnauthorizedError, PasswordChangeRequiredError
from app.core.logging_config import logger, set_staff_email
from app.core.security import decode_token
from app.schemas.auth import TokenData

# auto_error=False so a missing header is a 401 in our error format, not FastAPI's 403
security = HTTPBearer(auto_error=False)


async def get_token_data(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> TokenData:
    """
    Verify the bearer token's signature and expiry only.

    Used directly by change-password, the one route allowed while the
    forced-change flag is still set.
    """
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError()

    payload = decode_token(credentials.credentials)

    token_data = TokenData(
        email=payload["sub"],
        must_change_password=bool(payload.get("must_change_password", False)),
        jti=payload.get("jti"),
    )
    set_staff_email(token_data.email)
    return token_data


async def require_staff(
    token_data: TokenData = Depends(get_token_data)
) -> str:
    """Authorize a protected route and return the staff email"""
    if token_data.must_change_password:
        logger.log_auth_event(
            event="authorize",
            success=False,
            user_email=token_data.email,
            reason="Password change required"
        )
        raise PasswordChangeRequiredError()

    return token_data.email
