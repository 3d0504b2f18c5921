"""User endpoints."""

from __future__ import annotations

from flask import Blueprint, request

from chirpy.api.deps import (
    current_user_id,
    get_identity_service,
    json_response,
    require_auth,
    timing,
)
from chirpy.schemas import CredentialsSchema, UserSchema, UserUpdateSchema
from chirpy.services.identity import UserRegisterIn, UserUpdateIn

bp = Blueprint("users", __name__)

user_schema = UserSchema()
register_schema = CredentialsSchema()
update_schema = UserUpdateSchema()


@bp.post("")
@timing
def create_user():
    """Register a new account."""

    data = register_schema.load(request.get_json(silent=True) or {})
    user = get_identity_service().register_user(
        UserRegisterIn(email=data["email"], password=data["password"])
    )
    return json_response(user_schema.dump(user), status=201)


@bp.put("")
@require_auth
@timing
def update_user():
    """Replace the authenticated user's email and password."""

    data = update_schema.load(request.get_json(silent=True) or {})
    user = get_identity_service().update_user(
        current_user_id(),
        UserUpdateIn(email=data["email"], password=data["password"]),
    )
    return json_response(user_schema.dump(user))
