"""
해시 계산: 업로드 파일 내용 → SHA-256

규칙:
- 저장 파일명 = <sha256 hex><확장자>
- 동일 내용 → 동일 파일명 (내용 기반 중복 제거)
- 청크 단위 스트리밍 (전체를 메모리에 올리지 않음)
"""

import hashlib
from pathlib import Path
from typing import BinaryIO

from starlette.datastructures import UploadFile

from src.domain.constants import HASH_CHUNK_SIZE


def compute_stream_hash(stream: BinaryIO, algorithm: str = "sha256") -> str:
    """
    바이너리 스트림 해시 계산.

    현재 위치부터 EOF까지 읽는다. 호출 후 위치는 EOF.

    Args:
        stream: 읽기 가능한 바이너리 스트림
        algorithm: 해시 알고리즘 (기본: sha256)

    Returns:
        hex digest
    """
    h = hashlib.new(algorithm)
    for chunk in iter(lambda: stream.read(HASH_CHUNK_SIZE), b""):
        h.update(chunk)
    return h.hexdigest()


async def compute_upload_hash(upload: UploadFile, algorithm: str = "sha256") -> str:
    """
    UploadFile 해시 계산 (비동기 청크 읽기).

    Args:
        upload: FastAPI UploadFile (위치는 호출자가 관리)
        algorithm: 해시 알고리즘 (기본: sha256)

    Returns:
        hex digest
    """
    h = hashlib.new(algorithm)
    while True:
        chunk = await upload.read(HASH_CHUNK_SIZE)
        if not chunk:
            break
        h.update(chunk)
    return h.hexdigest()


def compute_file_hash(file_path: Path, algorithm: str = "sha256") -> str:
    """
    파일 해시 계산.

    Args:
        file_path: 파일 경로
        algorithm: 해시 알고리즘 (기본: sha256)

    Returns:
        해시 문자열
    """
    with open(file_path, "rb") as f:
        return compute_stream_hash(f, algorithm)
