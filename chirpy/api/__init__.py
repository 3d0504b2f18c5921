"""HTTP surface: versioned blueprints mounted under ``API_BASE_PREFIX``."""

from __future__ import annotations

import logging

from flask import Flask

log = logging.getLogger(__name__)


def join_prefix(*segments: str) -> str:
    """
    Join URL segments into one absolute prefix without doubled slashes.

    ``join_prefix("/api/", "v1", "")`` gives ``"/api/v1"``.
    """
    parts = [s.strip("/") for s in segments if s and s.strip("/")]
    return "/" + "/".join(parts)


def init_app(app: Flask) -> None:
    """Mount every v1 blueprint at ``{API_BASE_PREFIX}/v1{relative prefix}``."""
    from chirpy.api.v1 import API_VERSION, REGISTRY

    base = join_prefix(app.config.get("API_BASE_PREFIX", "/api"), API_VERSION)
    for bp, rel_prefix in REGISTRY:
        app.register_blueprint(bp, url_prefix=join_prefix(base, rel_prefix))
    log.debug("api.mounted base=%s blueprints=%s", base, [bp.name for bp, _ in REGISTRY])


__all__ = ["init_app", "join_prefix"]
