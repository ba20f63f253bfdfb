"""
관계형 저장소 연결: engine, 세션, 화이트리스트 시드.

스키마 소유권은 외부 마이그레이션에 있다.
create_tables=True는 개발/테스트 환경 전용.
"""

import logging
from collections.abc import Generator
from pathlib import Path

from fastapi import Request
from sqlalchemy import Engine, create_engine, select
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from src.domain.models import Base, FileType

logger = logging.getLogger(__name__)


def create_db_engine(database_url: str) -> Engine:
    """
    DB engine 생성.

    - sqlite 파일: 상위 디렉토리 자동 생성
    - sqlite 메모리: 단일 커넥션 공유 (StaticPool)
    """
    if database_url.startswith("sqlite"):
        connect_args = {"check_same_thread": False}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            return create_engine(
                database_url,
                connect_args=connect_args,
                poolclass=StaticPool,
            )
        db_path = database_url.removeprefix("sqlite:///")
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        return create_engine(database_url, connect_args=connect_args)

    return create_engine(database_url, pool_pre_ping=True)


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, expire_on_commit=False)


def init_db(engine: Engine) -> None:
    """모든 테이블 생성 (이미 있으면 건너뜀)."""
    Base.metadata.create_all(engine)


def seed_file_types(session: Session, file_types: list[dict[str, str]]) -> int:
    """
    허용 확장자 시드.

    이미 존재하는 ext는 건드리지 않는다.

    Args:
        session: DB 세션
        file_types: [{"ext": "png", "name": "...", "mime": "..."}]

    Returns:
        새로 추가된 개수
    """
    existing = set(session.scalars(select(FileType.ext)).all())
    added = 0
    for entry in file_types:
        ext = str(entry["ext"]).lstrip(".").lower()
        if not ext or ext in existing:
            continue
        session.add(FileType(ext=ext, name=entry.get("name", ext), mime=entry.get("mime")))
        existing.add(ext)
        added += 1

    if added:
        session.commit()
        logger.info(f"Seeded {added} file type(s)")
    return added


def get_session(request: Request) -> Generator[Session, None, None]:
    """
    요청 단위 DB 세션 (FastAPI 의존성).

    app.state.session_factory는 lifespan에서 설정된다.
    """
    session_factory: sessionmaker[Session] = request.app.state.session_factory
    session = session_factory()
    try:
        yield session
    finally:
        session.close()
