"""Unit tests for configuration selection and the token policy object."""

from __future__ import annotations

from datetime import timedelta

import pytest

from chirpy.core.config import DevelopmentConfig, ProductionConfig, TestingConfig, env_bool, get_config
from chirpy.services.auth import AuthTokenConfig


@pytest.mark.parametrize(
    ("value", "expected"),
    [("development", DevelopmentConfig), ("testing", TestingConfig), ("production", ProductionConfig), ("???", DevelopmentConfig)],
)
def test_get_config_follows_app_env(monkeypatch, value, expected):
    monkeypatch.setenv("APP_ENV", value)
    assert get_config() is expected


@pytest.mark.parametrize(("raw", "expected"), [("1", True), ("Yes", True), ("off", False), ("", False)])
def test_env_bool(monkeypatch, raw, expected):
    monkeypatch.setenv("SOME_FLAG", raw)
    assert env_bool("SOME_FLAG") is expected


def test_env_bool_default(monkeypatch):
    monkeypatch.delenv("SOME_FLAG", raising=False)
    assert env_bool("SOME_FLAG", True) is True


def test_token_config_from_mapping_defaults():
    cfg = AuthTokenConfig.from_mapping({"JWT_SECRET": "s" * 40})

    assert cfg.issuer == "chirpy"
    assert cfg.access_expires == timedelta(hours=1)
    assert cfg.refresh_expires == timedelta(days=60)
    assert cfg.leeway == timedelta(0)
    assert cfg.admin_reset_allowed is False


def test_token_config_from_mapping_overrides():
    cfg = AuthTokenConfig.from_mapping(
        {
            "JWT_SECRET": "s" * 40,
            "ACCESS_TOKEN_TTL_SECONDS": "120",
            "REFRESH_TOKEN_TTL_DAYS": 7,
            "TOKEN_LEEWAY_SECONDS": 5,
            "PLATFORM": " DEV ",
        }
    )

    assert cfg.access_expires == timedelta(minutes=2)
    assert cfg.refresh_expires == timedelta(days=7)
    assert cfg.leeway == timedelta(seconds=5)
    assert cfg.admin_reset_allowed is True


def test_token_config_requires_secret():
    with pytest.raises(ValueError):
        AuthTokenConfig.from_mapping({"JWT_SECRET": ""})


@pytest.mark.parametrize(
    "overrides",
    [
        {"ACCESS_TOKEN_TTL_SECONDS": 0},
        {"REFRESH_TOKEN_TTL_DAYS": 0},
        {"REFRESH_TOKEN_TTL_DAYS": -1},
        {"TOKEN_LEEWAY_SECONDS": -5},
    ],
)
def test_token_config_rejects_non_positive_lifetimes(overrides):
    with pytest.raises(ValueError):
        AuthTokenConfig.from_mapping({"JWT_SECRET": "s" * 40, **overrides})
