"""Session endpoints: login, refresh and revoke."""

from __future__ import annotations

from flask import Blueprint, request

from chirpy.api.deps import authorization_header, get_auth_service, json_response, timing
from chirpy.schemas import AccessTokenSchema, CredentialsSchema, SessionSchema
from chirpy.services.auth import LoginIn, RefreshIn, RevokeIn

bp = Blueprint("auth", __name__)

credentials_schema = CredentialsSchema()
session_schema = SessionSchema()
access_token_schema = AccessTokenSchema()


@bp.post("/login")
@timing
def login():
    """Authenticate credentials and issue an access token plus a refresh token."""

    data = credentials_schema.load(request.get_json(silent=True) or {})
    session = get_auth_service().login(LoginIn(email=data["email"], password=data["password"]))
    return json_response(session_schema.dump(session))


@bp.post("/refresh")
@timing
def refresh():
    """Exchange the bearer refresh token for a new access token."""

    out = get_auth_service().refresh(RefreshIn(authorization=authorization_header()))
    return json_response(access_token_schema.dump(out))


@bp.post("/revoke")
@timing
def revoke():
    """Revoke the bearer refresh token. Unknown tokens are accepted."""

    get_auth_service().revoke(RevokeIn(authorization=authorization_header()))
    return "", 204
