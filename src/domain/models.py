"""
ORM models: files, file_types, users.

스키마/마이그레이션 소유권은 외부에 있음.
create_tables 설정은 개발/테스트용 편의 기능.
"""

from datetime import UTC, datetime

from sqlalchemy import BigInteger, Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


class FileType(Base):
    """업로드 허용 확장자 화이트리스트."""

    __tablename__ = "file_types"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    ext: Mapped[str] = mapped_column(String(16), nullable=False, unique=True)  # 점 제외 (png)
    name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    mime: Mapped[str | None] = mapped_column(String(100), nullable=True)

    def __repr__(self) -> str:
        return f"<FileType(id={self.id}, ext={self.ext!r})>"


class UploadedFile(Base):
    """업로드된 파일 메타데이터. 생성 후 변경하지 않음."""

    __tablename__ = "files"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(80), nullable=False)  # <sha256hex><ext>
    original: Mapped[str] = mapped_column(String(500), nullable=False)
    hash: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    extension: Mapped[str] = mapped_column(String(16), nullable=False)
    size: Mapped[int] = mapped_column(BigInteger, nullable=False)
    location: Mapped[str] = mapped_column(Text, nullable=False)
    path: Mapped[str] = mapped_column(Text, nullable=False)
    compressed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    type_id: Mapped[int] = mapped_column(ForeignKey("file_types.id"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
    )

    type: Mapped[FileType] = relationship(lazy="joined")

    def __repr__(self) -> str:
        return f"<UploadedFile(id={self.id}, name={self.name!r}, original={self.original!r})>"


class User(Base):
    """인증 단계가 조회하는 사용자."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    display_name: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    is_admin: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    session_token: Mapped[str | None] = mapped_column(String(128), nullable=True, unique=True)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username={self.username!r}, is_admin={self.is_admin})>"
