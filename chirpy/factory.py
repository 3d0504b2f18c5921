"""Application factory wiring Flask extensions, services and blueprints."""

from __future__ import annotations

from flask import Flask

from chirpy.core.config import BaseConfig, get_config
from chirpy.core.logger import configure_logging
from chirpy.core.logger import init_app as init_logging
from chirpy.services._shared.ports import InMemoryRefreshTokenStore, RefreshTokenStore

REFRESH_BACKENDS = ("sqlalchemy", "redis", "memory")


def build_refresh_store(app: Flask, refresh_ttl) -> RefreshTokenStore:
    """Instantiate the refresh-token store selected by ``REFRESH_TOKEN_BACKEND``.

    :raises RuntimeError: Unknown backend, or Redis selected without ``REDIS_URL``.
    """

    backend = str(app.config.get("REFRESH_TOKEN_BACKEND", "sqlalchemy")).lower()
    if backend not in REFRESH_BACKENDS:
        raise RuntimeError(f"Unknown REFRESH_TOKEN_BACKEND {backend!r}")

    if backend == "redis":
        from chirpy.core.extensions import get_redis
        from chirpy.infra.redis import RedisRefreshTokenStore

        return RedisRefreshTokenStore(r=get_redis(), default_ttl=refresh_ttl)
    if backend == "memory":
        return InMemoryRefreshTokenStore(default_ttl=refresh_ttl)

    from chirpy.infra.sqlalchemy import SQLAlchemyRefreshTokenStore

    return SQLAlchemyRefreshTokenStore(default_ttl=refresh_ttl)


def init_services(app: Flask) -> None:
    """Build the service graph from ``app.config`` and park it on ``app.extensions``."""

    from chirpy.api.deps import AUTH_SERVICE_KEY, IDENTITY_SERVICE_KEY
    from chirpy.infra.hashing import WerkzeugPasswordHasher
    from chirpy.infra.jwt import JWTAccessTokenCodec
    from chirpy.infra.sqlalchemy import SQLAlchemyAccountDirectory
    from chirpy.services.auth import AuthService, AuthTokenConfig
    from chirpy.services.identity import IdentityService

    token_cfg = AuthTokenConfig.from_mapping(app.config)
    hasher = WerkzeugPasswordHasher(method=app.config.get("PASSWORD_HASH_METHOD", "scrypt"))
    codec = JWTAccessTokenCodec(issuer=token_cfg.issuer, leeway=token_cfg.leeway)
    refresh_store = build_refresh_store(app, token_cfg.refresh_expires)

    app.extensions[AUTH_SERVICE_KEY] = AuthService(
        accounts=SQLAlchemyAccountDirectory(),
        hasher=hasher,
        codec=codec,
        refresh_store=refresh_store,
        token_cfg=token_cfg,
    )
    app.extensions[IDENTITY_SERVICE_KEY] = IdentityService(
        hasher=hasher,
        refresh_store=refresh_store,
        allow_reset=token_cfg.admin_reset_allowed,
    )


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """Build and configure the Flask application."""

    app = Flask(__name__, instance_relative_config=instance_relative_config)

    app.config.from_object(get_config() if config is None else config)
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    from chirpy.core import extensions

    extensions.init_app(app)

    init_logging(app)

    init_services(app)

    from chirpy.api import init_app as init_api

    init_api(app)

    from chirpy.core import errors

    errors.init_app(app)

    from chirpy import cli as app_cli

    app_cli.init_app(app)

    return app
