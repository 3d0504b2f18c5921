from .dto import ResetOut, UserPublicOut, UserRegisterIn, UserUpdateIn
from .service import IdentityService

__all__ = ["IdentityService", "ResetOut", "UserPublicOut", "UserRegisterIn", "UserUpdateIn"]
