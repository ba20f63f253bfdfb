"""
Data schemas for the request context and upload flow.

규칙:
- 요청 단위 값 객체(Cookie, PageQuery)는 저장하지 않음
- 업로드 응답은 항상 {id, message, success} 형태
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

# =============================================================================
# Request Value Objects
# =============================================================================

@dataclass
class Cookie:
    """단순화된 쿠키 값 객체 (key/value/expires)."""
    key: str
    value: str
    expires: datetime | None = None


@dataclass(frozen=True)
class PageQuery:
    """
    페이지네이션 파라미터.

    요청마다 한 번 파싱되며 page >= 1, 1 <= page_size <= 최대값이 보장됨.
    """
    page: int
    page_size: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    @property
    def limit(self) -> int:
        return self.page_size


# =============================================================================
# Upload Response
# =============================================================================

@dataclass
class UploadResponse:
    """업로드 엔드포인트의 단일 응답 형태."""
    id: int
    message: str
    success: bool

    @classmethod
    def ok(cls, file_id: int) -> "UploadResponse":
        return cls(id=file_id, message="Successfully uploaded", success=True)

    @classmethod
    def failure(cls, message: str) -> "UploadResponse":
        return cls(id=-1, message=message, success=False)

    def to_dict(self) -> dict[str, Any]:
        """JSON 직렬화용."""
        return {
            "id": self.id,
            "message": self.message,
            "success": self.success,
        }
