from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class UserLogin(BaseModel):
    # Both optional so a missing field gets the same 400 message as a blank one
    email: Optional[str] = None
    password: Optional[str] = None


class LoginResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    token: str
    must_change_password: bool = Field(..., alias="mustChangePassword")


class ChangePasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    new_password: Optional[str] = Field(None, alias="newPassword")


class ChangePasswordResponse(BaseModel):
    success: bool = True
    token: str


class TokenData(BaseModel):
    """Verified claims of a staff bearer token"""
    email: str
    must_change_password: bool = False
    jti: Optional[str] = None
