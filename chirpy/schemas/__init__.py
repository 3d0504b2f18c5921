"""Marshmallow schemas for request validation and response rendering."""

from .auth import AccessTokenSchema, CredentialsSchema, SessionSchema, UserUpdateSchema
from .user import UserSchema

__all__ = [
    "AccessTokenSchema",
    "CredentialsSchema",
    "SessionSchema",
    "UserSchema",
    "UserUpdateSchema",
]
