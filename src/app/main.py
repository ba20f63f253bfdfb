"""
FastAPI 애플리케이션 진입점.

실행:
- 개발: uv run uvicorn src.app.main:app --reload
- 프로덕션: uv run uvicorn src.app.main:app
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import Depends, FastAPI
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from src.app.auth import authenticate
from src.app.routes import files, upload
from src.core.config import Settings, configure_logging, load_settings
from src.core.database import (
    create_db_engine,
    create_session_factory,
    init_db,
    seed_file_types,
)
from src.core.storage import UploadStorage

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent / "templates"


# =============================================================================
# Lifespan
# =============================================================================


def init_database(app: FastAPI, settings: Settings) -> None:
    """Engine/세션 팩토리 생성, 필요 시 테이블 생성 + 화이트리스트 시드."""
    engine = create_db_engine(settings.database_url)
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)

    if settings.create_tables:
        init_db(engine)

    if settings.file_types:
        with app.state.session_factory() as session:
            seed_file_types(session, settings.file_types)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    애플리케이션 생명주기 관리.

    시작 시: 로깅 설정, DB 연결, 업로드 디렉토리 생성
    종료 시: DB 연결 정리
    """
    # Startup
    settings: Settings = app.state.settings
    configure_logging(settings)
    init_database(app, settings)
    settings.uploads_path.mkdir(parents=True, exist_ok=True)
    logger.info(f"Serving uploads from {settings.uploads_path}")

    yield

    # Shutdown
    app.state.engine.dispose()


# =============================================================================
# App Factory
# =============================================================================


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    FastAPI 앱 생성.

    Args:
        settings: None이면 default.yaml + 환경 변수에서 로드

    Returns:
        라우트/정적 파일/상태가 설정된 FastAPI 인스턴스
    """
    if settings is None:
        settings = load_settings()

    app = FastAPI(
        title="Upload Service",
        description="htmx 페이지 렌더링 + 내용 해시 기반 파일 업로드",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.templates = Jinja2Templates(directory=TEMPLATES_DIR)
    app.state.storage = UploadStorage.from_settings(settings)

    # 업로드 파일 공개 경로 (/public/uploads/<hash><ext>)
    app.mount(
        "/public",
        StaticFiles(directory=settings.public_root, check_dir=False),
        name="public",
    )

    # 페이지 라우트 (HTML)
    app.include_router(
        files.router,
        prefix="/files",
        tags=["Files"],
        dependencies=[Depends(authenticate)],
    )

    # API 라우트
    app.include_router(
        upload.api_router,
        prefix="/api/upload",
        tags=["Upload API"],
        dependencies=[Depends(authenticate)],
    )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """헬스 체크."""
        return {"status": "ok"}

    return app


app = create_app()


# =============================================================================
# CLI Entry Point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.app.main:app",
        host="127.0.0.1",
        port=8000,
        reload=True,
    )
