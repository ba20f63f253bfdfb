"""
Upload Service: 업로드 파일 → 해시 → 타입 확인 → 저장 → 기록.

단계 (각 단계 실패 시 UploadError로 즉시 종료):
1. Extract   - multipart "file" 필드 확인
2. Open      - 스트림 되감기
3. Hash      - SHA-256 전체 스트리밍
4. Extension - 점 뒤 1글자 이상
5. Type      - file_types 화이트리스트 조회
6. Persist   - <uploads>/<digest><ext>에 원자적 저장
7. Record    - files 테이블 insert (정확히 1행)

타입 검증을 디스크 쓰기 전에 수행하므로 거절된 업로드는 파일을 남기지 않는다.
Record 실패 시 저장된 파일은 지우지 않는다 (같은 내용의 다른 레코드가 참조할 수 있음).
"""

import logging
from dataclasses import dataclass
from pathlib import PurePath

from sqlalchemy import insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.datastructures import UploadFile

from src.core.hashing import compute_upload_hash
from src.core.storage import UploadStorage
from src.domain.constants import MIN_EXTENSION_LENGTH
from src.domain.errors import ErrorCodes, UploadError
from src.domain.models import FileType, UploadedFile

logger = logging.getLogger(__name__)


@dataclass
class UploadResult:
    """성공한 업로드 결과."""
    file_id: int
    name: str
    path: str
    size: int
    digest: str


def file_extension(filename: str) -> str:
    """
    파일명 확장자 (점 포함, 소문자).

    "photo.PNG" → ".png", "archive.tar.gz" → ".gz", "README" → ""
    """
    return PurePath(filename).suffix.lower()


class UploadService:
    """
    업로드 한 건 처리.

    Usage:
        service = UploadService(session, storage)
        result = await service.upload(file)
    """

    def __init__(self, session: Session, storage: UploadStorage) -> None:
        self.session = session
        self.storage = storage

    async def upload(self, upload: UploadFile | None) -> UploadResult:
        """
        업로드 파일 처리.

        스트림은 모든 종료 경로에서 닫힌다.

        Args:
            upload: multipart "file" 필드 (없으면 None)

        Returns:
            UploadResult

        Raises:
            UploadError: 단계별 실패 (status_code 400 또는 406)
        """
        if upload is None or not upload.filename:
            raise UploadError(
                ErrorCodes.FORM_FIELD_MISSING,
                "Error retrieving file from form data",
            )

        try:
            return await self._process(upload)
        finally:
            await upload.close()

    async def _process(self, upload: UploadFile) -> UploadResult:
        filename = upload.filename or ""

        # 2. Open
        try:
            await upload.seek(0)
        except (OSError, ValueError) as e:
            raise UploadError(
                ErrorCodes.STREAM_OPEN_FAILURE,
                "Error opening received file",
                filename=filename,
            ) from e

        # 3. Hash
        try:
            digest = await compute_upload_hash(upload)
        except (OSError, ValueError) as e:
            raise UploadError(
                ErrorCodes.HASH_OR_COPY_FAILURE,
                "Error calculating hash",
                filename=filename,
            ) from e

        # 4. Extension
        extension = file_extension(filename)
        if len(extension) < MIN_EXTENSION_LENGTH:
            raise UploadError(
                ErrorCodes.INVALID_EXTENSION,
                f"File type {extension} has a problem",
                filename=filename,
            )

        # 5. Type
        file_type = self._find_file_type(extension)
        if file_type is None:
            raise UploadError(
                ErrorCodes.UNSUPPORTED_TYPE,
                f"Server can't accept {extension} type files",
                extension=extension,
            )

        # 6. Persist
        name = self.storage.stored_name(digest, extension)
        relative_path = self.storage.relative_path(name)
        try:
            size = await self.storage.save(upload, digest, extension)
        except OSError as e:
            logger.error(f"Failed to store upload {filename!r} as {relative_path}: {e}")
            raise UploadError(
                ErrorCodes.HASH_OR_COPY_FAILURE,
                f"Error creating file on server: {relative_path}",
                filename=filename,
            ) from e

        # 7. Record
        file_id = self._record(
            name=name,
            original=filename,
            digest=digest,
            extension=extension,
            size=size,
            relative_path=relative_path,
            type_id=file_type.id,
        )

        logger.info(f"Uploaded {filename!r} → {relative_path} (id={file_id}, {size} bytes)")
        return UploadResult(
            file_id=file_id,
            name=name,
            path=relative_path,
            size=size,
            digest=digest,
        )

    def _find_file_type(self, extension: str) -> FileType | None:
        """화이트리스트 조회 (점 제외 확장자, 같은 ext가 여럿이면 최신)."""
        stmt = (
            select(FileType)
            .where(FileType.ext == extension[1:])
            .order_by(FileType.id.desc())
            .limit(1)
        )
        try:
            return self.session.scalars(stmt).first()
        except SQLAlchemyError as e:
            logger.error(f"File type lookup failed for {extension}: {e}")
            return None

    def _record(
        self,
        name: str,
        original: str,
        digest: str,
        extension: str,
        size: int,
        relative_path: str,
        type_id: int,
    ) -> int:
        """files 테이블 insert. 정확히 1행이 아니면 406."""
        stmt = insert(UploadedFile).values(
            name=name,
            original=original,
            hash=digest,
            extension=extension,
            size=size,
            location=self.storage.uploads_dir,
            path=relative_path,
            compressed=False,
            type_id=type_id,
        )
        try:
            result = self.session.execute(stmt)
            if result.rowcount != 1:
                self.session.rollback()
                raise UploadError(
                    ErrorCodes.PERSISTENCE_FAILURE,
                    "File uploaded but was not saved in database",
                    status_code=406,
                    rowcount=result.rowcount,
                )
            file_id = int(result.inserted_primary_key[0])
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Failed to record upload {relative_path}: {e}")
            raise UploadError(
                ErrorCodes.PERSISTENCE_FAILURE,
                "File uploaded but was not saved in database",
                status_code=406,
            ) from e
        return file_id
