from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.exceptions import MissingCredentialsError
from app.core.rate_limiter import login_rate_limit
from app.modules.auth.dependencies import get_token_data
from app.schemas.auth import (
    UserLogin,
    LoginResponse,
    ChangePasswordRequest,
    ChangePasswordResponse,
    TokenData,
)
from app.services.credentials import CredentialService

router = APIRouter()


@router.post("/login", response_model=LoginResponse)
@login_rate_limit()
async def login(
    request: Request,
    credentials: UserLogin,
    db: AsyncSession = Depends(get_db)
):
    """Staff login. The client routes to change-password when mustChangePassword is true."""
    if not credentials.email or not credentials.password:
        raise MissingCredentialsError()

    token, must_change_password = await CredentialService(db).authenticate(
        credentials.email, credentials.password
    )

    return {"token": token, "mustChangePassword": must_change_password}


@router.post("/change-password", response_model=ChangePasswordResponse)
async def change_password(
    body: ChangePasswordRequest,
    token_data: TokenData = Depends(get_token_data),
    db: AsyncSession = Depends(get_db)
):
    """Set a new password. Accepts tokens that still carry the forced-change flag."""
    token = await CredentialService(db).change_password(token_data.email, body.new_password)
    return {"success": True, "token": token}
