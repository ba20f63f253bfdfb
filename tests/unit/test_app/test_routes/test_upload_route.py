"""
test_upload_route.py - Upload Route 테스트

검증 포인트:
1. 성공: 200, success=true, 양수 id, <sha256><ext> 저장
2. 동일 내용 재업로드 → 동일 저장 파일명
3. file 필드 누락 → 400, id=-1
4. 화이트리스트에 없는 확장자 → 400, 디스크에 파일 남지 않음
5. 확장자 없음 → 400
6. DB 기록 실패 → 406
"""

import hashlib
import logging
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import select
from sqlalchemy.orm import Session

from src.core.config import Settings
from src.domain.models import UploadedFile

UPLOAD_URL = "/api/upload"


def stored_files(settings: Settings) -> list[Path]:
    """업로드 디렉토리의 저장 파일 목록 (락/임시 파일 제외)."""
    root = settings.uploads_path
    if not root.exists():
        return []
    return sorted(p for p in root.iterdir() if p.is_file() and not p.name.endswith(".tmp"))


# =============================================================================
# 1. 성공 케이스
# =============================================================================


class TestUploadSuccess:
    """정상 업로드 테스트."""

    def test_upload_png(
        self,
        client: TestClient,
        settings: Settings,
        db_session: Session,
        png_bytes: bytes,
    ):
        response = client.post(UPLOAD_URL, files={"file": ("photo.png", png_bytes, "image/png")})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["id"] > 0
        assert body["message"] == "Successfully uploaded"

        digest = hashlib.sha256(png_bytes).hexdigest()
        stored = settings.uploads_path / f"{digest}.png"
        assert stored.read_bytes() == png_bytes

        record = db_session.get(UploadedFile, body["id"])
        assert record is not None
        assert record.name == f"{digest}.png"
        assert record.original == "photo.png"
        assert record.hash == digest
        assert record.extension == ".png"
        assert record.size == len(png_bytes)
        assert record.location == "/uploads/"
        assert record.path == f"/uploads/{digest}.png"
        assert record.compressed is False
        assert record.type.ext == "png"

    def test_upload_jpg(self, client: TestClient):
        response = client.post(UPLOAD_URL, files={"file": ("a.jpg", b"jpeg bytes", "image/jpeg")})

        assert response.status_code == 200
        assert response.json()["success"] is True

    def test_uppercase_extension_normalized(self, client: TestClient, settings: Settings):
        payload = b"upper"
        response = client.post(UPLOAD_URL, files={"file": ("PHOTO.PNG", payload, "image/png")})

        assert response.status_code == 200
        digest = hashlib.sha256(payload).hexdigest()
        assert (settings.uploads_path / f"{digest}.png").exists()

    def test_stored_file_is_servable(self, client: TestClient, png_bytes: bytes):
        """/public<path>로 저장 파일 접근 가능."""
        client.post(UPLOAD_URL, files={"file": ("photo.png", png_bytes, "image/png")})
        digest = hashlib.sha256(png_bytes).hexdigest()

        response = client.get(f"/public/uploads/{digest}.png")

        assert response.status_code == 200
        assert response.content == png_bytes


# =============================================================================
# 2. 내용 기반 파일명
# =============================================================================


class TestContentAddressing:
    """동일 내용 → 동일 파일명."""

    def test_same_content_same_name(
        self,
        client: TestClient,
        settings: Settings,
        db_session: Session,
    ):
        payload = b"identical bytes"

        first = client.post(UPLOAD_URL, files={"file": ("first.png", payload, "image/png")})
        second = client.post(UPLOAD_URL, files={"file": ("second.png", payload, "image/png")})

        assert first.status_code == 200
        assert second.status_code == 200
        assert first.json()["id"] != second.json()["id"]

        names = {
            r.name for r in db_session.scalars(select(UploadedFile)).all()
        }
        assert names == {f"{hashlib.sha256(payload).hexdigest()}.png"}
        assert len(stored_files(settings)) == 1

    def test_different_content_different_name(self, client: TestClient, settings: Settings):
        client.post(UPLOAD_URL, files={"file": ("a.png", b"one", "image/png")})
        client.post(UPLOAD_URL, files={"file": ("a.png", b"two", "image/png")})

        assert len(stored_files(settings)) == 2

    def test_filename_not_used_in_path(self, client: TestClient, settings: Settings):
        """경로 순회 파일명도 해시 이름으로만 저장."""
        payload = b"traversal"
        response = client.post(
            UPLOAD_URL,
            files={"file": ("../../etc/passwd.png", payload, "image/png")},
        )

        assert response.status_code == 200
        files = stored_files(settings)
        assert [f.name for f in files] == [f"{hashlib.sha256(payload).hexdigest()}.png"]


# =============================================================================
# 3~5. 요청/검증 실패
# =============================================================================


class TestUploadRejected:
    """400 응답 테스트."""

    def test_missing_file_field(self, client: TestClient):
        response = client.post(UPLOAD_URL, data={"other": "value"})

        assert response.status_code == 400
        assert response.json() == {
            "id": -1,
            "message": "Error retrieving file from form data",
            "success": False,
        }

    def test_no_body(self, client: TestClient):
        response = client.post(UPLOAD_URL)

        assert response.status_code == 400
        assert response.json()["id"] == -1
        assert response.json()["success"] is False

    def test_text_field_named_file(self, client: TestClient):
        """file 필드가 파일이 아닌 텍스트 → 400 (422 아님)."""
        response = client.post(UPLOAD_URL, data={"file": "not a file"})

        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_unsupported_extension(self, client: TestClient, settings: Settings):
        response = client.post(
            UPLOAD_URL,
            files={"file": ("setup.exe", b"MZ binary", "application/octet-stream")},
        )

        assert response.status_code == 400
        body = response.json()
        assert body["id"] == -1
        assert body["success"] is False
        assert body["message"] == "Server can't accept .exe type files"
        # 타입 검증이 쓰기보다 먼저 → 고아 파일 없음
        assert stored_files(settings) == []

    def test_rejection_logged_with_error_code(
        self,
        client: TestClient,
        caplog: pytest.LogCaptureFixture,
    ):
        with caplog.at_level(logging.WARNING, logger="src.app.routes.upload"):
            client.post(UPLOAD_URL, files={"file": ("setup.exe", b"MZ", "application/octet-stream")})

        assert "UNSUPPORTED_TYPE" in caplog.text
        assert "'extension': '.exe'" in caplog.text

    def test_missing_extension(self, client: TestClient, settings: Settings):
        response = client.post(UPLOAD_URL, files={"file": ("README", b"text", "text/plain")})

        assert response.status_code == 400
        assert response.json()["id"] == -1
        assert stored_files(settings) == []

    def test_trailing_dot_extension(self, client: TestClient):
        response = client.post(UPLOAD_URL, files={"file": ("photo.", b"x", "image/png")})

        assert response.status_code == 400
        assert response.json()["success"] is False


# =============================================================================
# 6. DB 기록 실패
# =============================================================================


class TestPersistenceFailure:
    """406 응답 테스트."""

    def test_insert_error_returns_406(
        self,
        client: TestClient,
        app: FastAPI,
        settings: Settings,
        png_bytes: bytes,
    ):
        UploadedFile.__table__.drop(app.state.engine)

        response = client.post(UPLOAD_URL, files={"file": ("photo.png", png_bytes, "image/png")})

        assert response.status_code == 406
        assert response.json() == {
            "id": -1,
            "message": "File uploaded but was not saved in database",
            "success": False,
        }
        # 내용 주소 파일은 다른 레코드와 공유될 수 있어 남겨둠
        assert len(stored_files(settings)) == 1
