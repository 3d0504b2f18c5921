"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, validate


class CredentialsSchema(Schema):
    """Input payload for registration and login."""

    class Meta:
        unknown = EXCLUDE

    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))


class UserUpdateSchema(CredentialsSchema):
    """Input payload for ``PUT /users``; both fields are replaced."""


class SessionSchema(Schema):
    """Login response: the public user plus both tokens."""

    id = fields.UUID(attribute="user_id", required=True)
    email = fields.Email(required=True)
    created_at = fields.DateTime(allow_none=True)
    updated_at = fields.DateTime(allow_none=True)
    token = fields.String(attribute="access_token", required=True)
    refresh_token = fields.String(required=True)


class AccessTokenSchema(Schema):
    """Refresh response containing a new access token."""

    token = fields.String(attribute="access_token", required=True)
