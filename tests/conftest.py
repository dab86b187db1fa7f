import pytest
from fastapi.testclient import TestClient

from config.settings import Settings
from main import create_app


@pytest.fixture()
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        jwt_secret="test-jwt-secret",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'accounts.db'}",
        bcrypt_rounds=4,
    )


@pytest.fixture()
def client(settings):
    app = create_app(settings)
    with TestClient(app) as test_client:
        yield test_client
