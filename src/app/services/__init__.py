"""
Application Services.

역할:
- upload: 업로드 파일 해시/저장/기록
"""

from .upload import UploadResult, UploadService, file_extension

__all__ = [
    "UploadService",
    "UploadResult",
    "file_extension",
]
