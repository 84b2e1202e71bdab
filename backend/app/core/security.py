from datetime import datetime, timedelta
from typing import Optional, Dict, Any
from jose import JWTError, ExpiredSignatureError, jwt
import bcrypt
import secrets

from app.core.config import settings
from app.core.exceptions import InvalidTokenError, TokenExpiredError


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against a bcrypt hash"""
    # Bcrypt has a 72 byte limit - truncate password if necessary
    password_bytes = plain_password.encode('utf-8')[:72]
    try:
        return bcrypt.checkpw(password_bytes, hashed_password.encode('utf-8'))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def get_password_hash(password: str) -> str:
    """Hash password with configurable rounds (BCRYPT_ROUNDS in .env)"""
    # Bcrypt has a 72 byte limit - truncate password if necessary
    password_bytes = password.encode('utf-8')[:72]
    hashed = bcrypt.hashpw(password_bytes, bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS))
    return hashed.decode('utf-8')


def generate_temporary_password() -> str:
    """Generate a one-time password for a newly provisioned staff account"""
    return secrets.token_urlsafe(12)


class TokenService:
    """
    Issues and verifies staff bearer tokens.

    Tokens are self-contained HS256 JWTs; nothing is stored server-side.
    Claims:
        sub                   staff email
        must_change_password  snapshot of the account flag at issuance
        exp / iat             fixed horizon (ACCESS_TOKEN_EXPIRE_MINUTES)
        jti                   random id, the key a revocation list would use
        type                  always "access"

    Subclasses can override ``is_revoked`` to consult a denylist.
    """

    token_type = "access"

    def __init__(
        self,
        secret_key: Optional[str] = None,
        algorithm: Optional[str] = None,
        expire_minutes: Optional[int] = None
    ):
        self.secret_key = secret_key or settings.JWT_SECRET_KEY
        self.algorithm = algorithm or settings.JWT_ALGORITHM
        self.expire_minutes = expire_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES

    def issue(
        self,
        email: str,
        must_change_password: bool,
        expires_delta: Optional[timedelta] = None
    ) -> str:
        """Create a signed access token for ``email``"""
        now = datetime.utcnow()
        expire = now + (expires_delta or timedelta(minutes=self.expire_minutes))
        to_encode = {
            "sub": email,
            "must_change_password": bool(must_change_password),
            "iat": now,
            "exp": expire,
            "jti": secrets.token_hex(16),
            "type": self.token_type,
        }
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def decode(self, token: str) -> Dict[str, Any]:
        """
        Verify signature, expiry and token type.

        Raises:
            TokenExpiredError: the token is past its ``exp``
            InvalidTokenError: anything else wrong with it
        """
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            raise TokenExpiredError()
        except JWTError:
            raise InvalidTokenError()

        if payload.get("type") != self.token_type or not payload.get("sub"):
            raise InvalidTokenError()

        if self.is_revoked(payload):
            raise InvalidTokenError()

        return payload

    def is_revoked(self, payload: Dict[str, Any]) -> bool:
        """No revocation list yet; expiry is the only invalidation"""
        return False


token_service = TokenService()


def create_access_token(email: str, must_change_password: bool,
                        expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token"""
    return token_service.issue(email, must_change_password, expires_delta=expires_delta)


def decode_token(token: str) -> Dict[str, Any]:
    """Decode JWT token"""
    return token_service.decode(token)
