# venturepool/tests/test_app.py : construction de l'application et configuration

from fastapi.testclient import TestClient

from venturepool import config
from venturepool.main import create_app


class TestApp:
    def test_health(self):
        response = TestClient(create_app("sqlite://")).get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["database"] == "connected"

    def test_docs_exposed_in_development(self, monkeypatch):
        monkeypatch.setattr(config, "ENVIRONMENT", "development")
        assert not config.is_production()
        app = create_app("sqlite://")
        assert app.docs_url == "/docs"

    def test_docs_hidden_in_production(self, monkeypatch):
        monkeypatch.setattr(config, "ENVIRONMENT", "production")
        assert config.is_production()
        app = create_app("sqlite://")
        assert app.docs_url is None
        assert app.redoc_url is None
