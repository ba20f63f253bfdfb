"""
Error definitions for the upload flow.

규칙:
- 조용한 실패 금지 → UploadError로 명시적 실패
- 모든 실패는 동일한 응답 형태 {id, message, success}로 변환
- 재시도 없음: 요청 단위로 종결
"""

from typing import Any


class UploadError(Exception):
    """
    업로드 단계 실패 시 발생하는 에러.

    라우트에서 UploadResponse.failure()로 변환된다.

    Usage:
        raise UploadError(ErrorCodes.UNSUPPORTED_TYPE, "Server can't accept .exe type files", ext=".exe")
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 400,
        **context: Any,
    ) -> None:
        self.code = code
        self.message = message
        self.status_code = status_code
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        ctx_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
        return f"[{self.code}] {self.message} ({ctx_str})" if ctx_str else f"[{self.code}] {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """로그/JSON 직렬화용."""
        return {
            "code": self.code,
            "message": self.message,
            **self.context,
        }


class ContextError(RuntimeError):
    """요청 컨텍스트에 기대한 상태가 없을 때 (예: 인증 단계 누락)."""


# =============================================================================
# Error Codes
# =============================================================================

class ErrorCodes:
    """에러 코드 상수."""

    # === Request ===
    FORM_FIELD_MISSING = "FORM_FIELD_MISSING"
    STREAM_OPEN_FAILURE = "STREAM_OPEN_FAILURE"

    # === Storage ===
    HASH_OR_COPY_FAILURE = "HASH_OR_COPY_FAILURE"

    # === Validation ===
    INVALID_EXTENSION = "INVALID_EXTENSION"
    UNSUPPORTED_TYPE = "UNSUPPORTED_TYPE"

    # === Database ===
    PERSISTENCE_FAILURE = "PERSISTENCE_FAILURE"  # 406
