# Authentication module

from app.modules.auth.dependencies import (
    get_token_data,
    require_staff,
    security,
)

__all__ = [
    "get_token_data",
    "require_staff",
    "security",
]
