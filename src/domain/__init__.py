"""Domain layer: errors, schemas and ORM models."""

from .errors import ContextError, ErrorCodes, UploadError
from .models import Base, FileType, UploadedFile, User
from .schemas import Cookie, PageQuery, UploadResponse

__all__ = [
    "ContextError",
    "ErrorCodes",
    "UploadError",
    "Base",
    "FileType",
    "UploadedFile",
    "User",
    "Cookie",
    "PageQuery",
    "UploadResponse",
]
