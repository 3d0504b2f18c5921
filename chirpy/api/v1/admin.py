"""Administrative endpoints, only enabled on the ``dev`` platform."""

from __future__ import annotations

from flask import Blueprint

from chirpy.api.deps import get_auth_service, get_identity_service, json_response, timing

bp = Blueprint("admin", __name__)


@bp.post("/reset")
@timing
def reset():
    """Terminate every session and delete every account.

    Responds ``403`` unless ``PLATFORM=dev``.
    """

    sessions = get_auth_service().reset_sessions()
    wiped = get_identity_service().reset_users()
    return json_response(
        {
            "refresh_tokens": sessions + wiped.refresh_tokens,
            "users": wiped.users,
        }
    )
