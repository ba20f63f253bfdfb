"""
Pytest fixtures for the upload service tests.

구성:
- 설정: tmp_path 아래 public/, 메모리 SQLite
- 앱: create_app(settings) + TestClient (lifespan 실행)
- DB: 화이트리스트(png, jpg) 시드, 사용자 fixture
"""

from collections.abc import Generator
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from src.app.main import create_app
from src.core.config import Settings
from src.domain.models import User

# =============================================================================
# Config Fixtures
# =============================================================================

@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """테스트용 설정 (png, jpg만 허용)."""
    return Settings(
        public_root=tmp_path / "public",
        uploads_dir="/uploads/",
        lock_dir=tmp_path / "locks",
        page_max_size=20,
        database_url="sqlite://",
        create_tables=True,
        session_cookie="session",
        site_title="Test Uploads",
        log_level="DEBUG",
        file_types=[
            {"ext": "png", "name": "PNG image", "mime": "image/png"},
            {"ext": "jpg", "name": "JPEG image", "mime": "image/jpeg"},
        ],
    )


# =============================================================================
# App Fixtures
# =============================================================================

@pytest.fixture
def app(settings: Settings) -> FastAPI:
    """테스트용 FastAPI 앱."""
    return create_app(settings)


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    """테스트 클라이언트 (lifespan 포함)."""
    with TestClient(app) as client:
        yield client


@pytest.fixture
def db_session(app: FastAPI, client: TestClient) -> Generator[Session, None, None]:
    """앱과 같은 DB를 보는 세션."""
    session = app.state.session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def admin_user(db_session: Session) -> User:
    """관리자 (session_token=admin-token)."""
    user = User(
        username="admin",
        display_name="관리자",
        is_admin=True,
        session_token="admin-token",
    )
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture
def regular_user(db_session: Session) -> User:
    """일반 사용자 (session_token=user-token)."""
    user = User(
        username="hong",
        display_name="홍길동",
        is_admin=False,
        session_token="user-token",
    )
    db_session.add(user)
    db_session.commit()
    return user


# =============================================================================
# Payload Fixtures
# =============================================================================

@pytest.fixture
def png_bytes() -> bytes:
    """PNG 시그니처로 시작하는 모의 이미지."""
    return b"\x89PNG\r\n\x1a\n" + b"fake png payload" * 64
