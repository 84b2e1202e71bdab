"""
Credential Service - staff login, password changes and provisioning

Only this module reads or writes the users table.
"""

from typing import Optional, Tuple

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import (
    CredentialUpdateError,
    InvalidCredentialsError,
    UnauthorizedError,
    ValidationError,
    WeakPasswordError,
)
from app.core.logging_config import logger
from app.core.security import (
    TokenService,
    token_service as default_token_service,
    get_password_hash,
    verify_password,
    generate_temporary_password,
)
from app.models.user import User


_dummy_hash: Optional[str] = None


def _get_dummy_hash() -> str:
    """Hash checked when the email is unknown, so both failures cost the same"""
    global _dummy_hash
    if _dummy_hash is None:
        _dummy_hash = get_password_hash(generate_temporary_password())
    return _dummy_hash


def normalize_email(email: str) -> str:
    return email.strip().lower()


class CredentialService:
    """Staff credential store and token issuer"""

    def __init__(self, db: AsyncSession, tokens: Optional[TokenService] = None):
        self.db = db
        self.tokens = tokens or default_token_service

    async def get_user(self, email: str) -> Optional[User]:
        result = await self.db.execute(
            select(User).where(User.email == normalize_email(email))
        )
        return result.scalar_one_or_none()

    async def authenticate(self, email: str, password: str) -> Tuple[str, bool]:
        """
        Check email/password and issue a token.

        Returns:
            (token, must_change_password)

        Raises:
            InvalidCredentialsError: unknown email or wrong password
        """
        user = await self.get_user(email)

        if user is None:
            verify_password(password, _get_dummy_hash())
            logger.log_auth_event("login", success=False, user_email=normalize_email(email),
                                  reason="Unknown email")
            raise InvalidCredentialsError()

        if not verify_password(password, user.password_hash):
            logger.log_auth_event("login", success=False, user_email=user.email,
                                  reason="Wrong password")
            raise InvalidCredentialsError()

        token = self.tokens.issue(user.email, user.must_change_password)

        logger.log_auth_event("login", success=True, user_email=user.email,
                              must_change_password=user.must_change_password)
        return token, user.must_change_password

    async def change_password(self, email: str, new_password: Optional[str]) -> str:
        """
        Replace the password, clear the forced-change flag and issue a fresh token.

        The caller has already verified the token's signature and expiry; the
        forced-change gate does not apply here.
        """
        min_length = settings.MIN_PASSWORD_LENGTH
        if not new_password or len(new_password) < min_length:
            raise WeakPasswordError(min_length)

        password_hash = get_password_hash(new_password)

        try:
            result = await self.db.execute(
                update(User)
                .where(User.email == normalize_email(email))
                .values(password_hash=password_hash, must_change_password=False)
            )
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.log_error_with_context(e, context="change password", user_email=email)
            raise CredentialUpdateError() from e

        if result.rowcount == 0:
            logger.log_auth_event("change_password", success=False, user_email=email,
                                  reason="Account not found")
            raise UnauthorizedError("Account not found")

        logger.log_auth_event("change_password", success=True, user_email=email)
        return self.tokens.issue(normalize_email(email), False)

    async def create_user(self, email: str, password: Optional[str] = None) -> Tuple[User, str]:
        """
        Provision a staff account that must change its password on first login.

        Returns:
            (user, initial_password)
        """
        email = normalize_email(email)
        if not email or "@" not in email:
            raise ValidationError("A valid email address is required", field="email")

        if await self.get_user(email) is not None:
            raise ValidationError(f"User {email} already exists", field="email")

        initial_password = password or generate_temporary_password()
        user = User(
            email=email,
            password_hash=get_password_hash(initial_password),
            must_change_password=True,
        )
        self.db.add(user)
        await self.db.commit()
        await self.db.refresh(user)

        logger.info(f"[Auth] Provisioned staff user {email}")
        return user, initial_password

    async def reset_password(self, email: str, password: Optional[str] = None) -> str:
        """Set a temporary password and re-arm the forced-change flag"""
        user = await self.get_user(email)
        if user is None:
            raise ValidationError(f"User {normalize_email(email)} does not exist", field="email")

        temporary_password = password or generate_temporary_password()
        user.password_hash = get_password_hash(temporary_password)
        user.must_change_password = True
        await self.db.commit()

        logger.info(f"[Auth] Reset password for staff user {user.email}")
        return temporary_password
