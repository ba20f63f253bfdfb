"""
Core layer: 설정, DB 연결, 해시, 저장소.

역할:
- 설정 로드 (default.yaml + APP_* 환경 변수)
- 내용 해시 (SHA-256) 기반 파일 저장
"""

from .config import Settings, load_config, load_settings
from .database import create_db_engine, create_session_factory, get_session, init_db
from .hashing import compute_file_hash, compute_stream_hash, compute_upload_hash
from .storage import UploadStorage

__all__ = [
    # config
    "Settings",
    "load_config",
    "load_settings",
    # database
    "create_db_engine",
    "create_session_factory",
    "get_session",
    "init_db",
    # hashing
    "compute_file_hash",
    "compute_stream_hash",
    "compute_upload_hash",
    # storage
    "UploadStorage",
]
