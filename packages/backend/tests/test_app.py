"""App factory tests — startup refuses to run without a signing secret."""

import pytest
from pydantic import ValidationError as SettingsError

from userauth.auth import dependencies
from userauth.config import Settings, settings
from userauth.errors import ConfigurationError
from userauth.main import create_app


@pytest.fixture()
def fresh_components():
    caches = [
        dependencies.get_password_hasher,
        dependencies.get_token_issuer,
        dependencies.get_token_validator,
    ]
    for fn in caches:
        fn.cache_clear()
    yield
    for fn in caches:
        fn.cache_clear()


def test_missing_secret_blocks_startup(monkeypatch, fresh_components):
    monkeypatch.setattr(settings, "jwt_secret", "")
    with pytest.raises(ConfigurationError):
        create_app()


def test_create_app_with_secret(fresh_components):
    app = create_app()
    paths = {route.path for route in app.routes}
    assert {"/api/v1/users", "/api/v1/login", "/api/v1/health"} <= paths


def test_default_secret_rejected_outside_development():
    with pytest.raises(SettingsError):
        Settings(environment="production", jwt_secret="change-me-in-production")


def test_cost_factor_bounds():
    with pytest.raises(SettingsError):
        Settings(hash_cost_factor=3)
    assert Settings(hash_cost_factor=4).hash_cost_factor == 4
