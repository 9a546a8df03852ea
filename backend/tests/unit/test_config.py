# tests/unit/test_config.py
from __future__ import annotations

from datetime import timedelta

import pytest
from talkauth.core.config import (
    BaseConfig,
    DevelopmentConfig,
    ProductionConfig,
    TestingConfig,
    env_bool,
    env_int,
    env_timedelta,
    get_config,
)


@pytest.mark.parametrize(
    "env, expected",
    [
        ("production", ProductionConfig),
        ("Testing", TestingConfig),
        ("development", DevelopmentConfig),
        ("staging", DevelopmentConfig),
    ],
)
def test_get_config_follows_app_env(monkeypatch, env, expected):
    monkeypatch.setenv("APP_ENV", env)
    assert get_config() is expected


def test_token_lifetimes_default_to_thirty_minutes_and_seven_days():
    assert BaseConfig.JWT_ALGORITHM == "HS256"
    assert BaseConfig.JWT_ACCESS_TOKEN_EXPIRES == timedelta(minutes=30)
    assert BaseConfig.JWT_REFRESH_TOKEN_EXPIRES == timedelta(days=7)
    assert BaseConfig.VERIFICATION_CODE_TTL == 300


@pytest.mark.parametrize("raw, expected", [("1", True), ("YES", True), ("off", False)])
def test_env_bool(monkeypatch, raw, expected):
    monkeypatch.setenv("TALKAUTH_FLAG", raw)
    assert env_bool("TALKAUTH_FLAG") is expected


def test_env_int_falls_back_on_blank(monkeypatch):
    monkeypatch.setenv("TALKAUTH_NUM", " ")
    assert env_int("TALKAUTH_NUM", 7) == 7
    monkeypatch.setenv("TALKAUTH_NUM", "12")
    assert env_int("TALKAUTH_NUM", 7) == 12


def test_token_lifetimes_read_env_vars_named_after_settings(monkeypatch):
    monkeypatch.setenv("JWT_ACCESS_TOKEN_EXPIRES", "15")
    monkeypatch.setenv("JWT_REFRESH_TOKEN_EXPIRES", "")

    assert env_timedelta("JWT_ACCESS_TOKEN_EXPIRES", "minutes", 30) == timedelta(minutes=15)
    assert env_timedelta("JWT_REFRESH_TOKEN_EXPIRES", "days", 7) == timedelta(days=7)
