from chirpy.models.refresh_token import RefreshToken
from chirpy.models.user import User

__all__ = [
    "RefreshToken",
    "User",
]
