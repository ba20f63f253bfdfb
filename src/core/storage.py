"""
업로드 저장소: 내용 주소 기반 파일 저장.

규칙:
- 파일명은 항상 <sha256 hex><확장자> (클라이언트 파일명은 경로에 쓰지 않음)
- 동일 내용 재업로드 → 같은 경로 (이미 같은 내용이면 다시 쓰지 않음)
- 원자적 쓰기: temp → rename + fsync
- 동일 파일명 동시 쓰기: FileLock으로 직렬화
- 락 구간(대기 포함)은 워커 스레드에서 실행: 이벤트 루프를 막지 않음
- 락 파일은 공개 디렉토리(public_root) 밖에 둠
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import BinaryIO

from filelock import FileLock
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from src.core.config import Settings
from src.core.hashing import compute_file_hash
from src.domain.constants import HASH_CHUNK_SIZE

logger = logging.getLogger(__name__)

LOCKS_DIRNAME = ".upload-locks"


def _fsync_dir(dir_path: Path) -> None:
    """디렉토리 fsync (rename 엔트리 내구성, 지원 환경에서만)."""
    try:
        dir_fd = os.open(str(dir_path), os.O_RDONLY | os.O_DIRECTORY)
        try:
            os.fsync(dir_fd)
        finally:
            os.close(dir_fd)
    except (OSError, AttributeError) as e:
        logger.warning(
            f"Directory fsync failed for {dir_path}: {e}. "
            f"Rename durability may not be guaranteed."
        )


class UploadStorage:
    """
    <public_root>/<uploads_dir>/ 아래 업로드 파일 관리.

    Usage:
        storage = UploadStorage.from_settings(settings)
        name = storage.stored_name(digest, ".png")
        size = await storage.save(upload, digest, ".png")
    """

    LOCK_TIMEOUT = 30  # seconds

    def __init__(
        self,
        public_root: Path,
        uploads_dir: str,
        lock_dir: Path | None = None,
    ) -> None:
        self.public_root = public_root
        self.uploads_dir = uploads_dir
        self.root = public_root / uploads_dir.strip("/")
        # 기본값: public_root 옆 (정적 마운트 대상 아님)
        self.lock_dir = lock_dir if lock_dir is not None else public_root.parent / LOCKS_DIRNAME

    @classmethod
    def from_settings(cls, settings: Settings) -> "UploadStorage":
        return cls(settings.public_root, settings.uploads_dir, settings.lock_dir)

    @staticmethod
    def stored_name(digest: str, extension: str) -> str:
        return f"{digest}{extension}"

    def relative_path(self, name: str) -> str:
        """DB path 컬럼 값 (예: /uploads/<name>)."""
        return f"{self.uploads_dir}{name}"

    def absolute_path(self, name: str) -> Path:
        return self.root / name

    def exists(self, name: str) -> bool:
        return self.absolute_path(name).is_file()

    def _lock_for(self, name: str) -> FileLock:
        self.lock_dir.mkdir(parents=True, exist_ok=True)
        return FileLock(str(self.lock_dir / f"{name}.lock"), timeout=self.LOCK_TIMEOUT)

    async def save(self, upload: UploadFile, digest: str, extension: str) -> int:
        """
        업로드 스트림을 처음부터 끝까지 <root>/<digest><extension>에 저장.

        같은 이름의 파일이 이미 있고 해시가 digest와 일치하면 쓰지 않는다.
        락 획득부터 rename까지 전부 워커 스레드에서 수행한다.

        Args:
            upload: 해시 계산이 끝난 UploadFile (여기서 처음으로 되감음)
            digest: 업로드 내용의 sha256 hex
            extension: 점 포함 확장자 (.png)

        Returns:
            저장된 파일 크기 (bytes)

        Raises:
            OSError: 디렉토리 생성/쓰기/rename 실패, 락 타임아웃
        """
        name = self.stored_name(digest, extension)
        return await run_in_threadpool(self._save_sync, upload.file, name, digest)

    def _save_sync(self, stream: BinaryIO, name: str, digest: str) -> int:
        self.root.mkdir(parents=True, exist_ok=True)
        dst = self.absolute_path(name)

        with self._lock_for(name):
            if dst.is_file() and compute_file_hash(dst) == digest:
                logger.info(f"Stored file already present, skipping write: {dst}")
                return dst.stat().st_size

            stream.seek(0)
            return self._atomic_write(stream, dst)

    def _atomic_write(self, stream: BinaryIO, dst: Path) -> int:
        temp_path: Path | None = None
        written = 0
        try:
            with tempfile.NamedTemporaryFile(
                mode="wb",
                dir=dst.parent,
                suffix=".tmp",
                delete=False,
            ) as f:
                temp_path = Path(f.name)
                for chunk in iter(lambda: stream.read(HASH_CHUNK_SIZE), b""):
                    f.write(chunk)
                    written += len(chunk)
                f.flush()
                try:
                    os.fsync(f.fileno())
                except OSError as e:
                    logger.warning(
                        f"File fsync failed for {dst}: {e}. "
                        f"Data may not be durable on power loss."
                    )

            os.replace(temp_path, dst)  # 원자적 (기존 파일 덮어씀)
            _fsync_dir(dst.parent)

        except Exception:
            # 실패 시 temp 파일 정리
            if temp_path and temp_path.exists():
                try:
                    temp_path.unlink()
                except OSError:
                    pass
            raise

        return written
