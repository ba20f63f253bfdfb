"""
test_main.py - 앱 생성/lifespan 테스트
"""

from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import select

from src.core.config import Settings
from src.domain.models import FileType


class TestApp:
    """create_app + lifespan."""

    def test_health(self, client: TestClient):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_lifespan_creates_uploads_dir(self, client: TestClient, settings: Settings):
        assert settings.uploads_path.is_dir()

    def test_lifespan_seeds_file_types(self, app: FastAPI, client: TestClient):
        with app.state.session_factory() as session:
            exts = set(session.scalars(select(FileType.ext)).all())

        assert exts == {"png", "jpg"}
