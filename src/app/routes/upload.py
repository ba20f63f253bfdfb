"""
Upload Routes: 파일 업로드.

- POST /api/upload → multipart "file" 필드
  응답: {"id": int, "message": str, "success": bool}
  상태: 200 성공 / 400 요청·검증 실패 / 406 DB 기록 실패

폼은 직접 파싱한다: 필드가 없거나 파일이 아닌 값이어도 422가 아닌 400 응답을 보장.
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from starlette.datastructures import UploadFile
from starlette.formparsers import MultiPartException

from src.app.context import RequestContext, get_context
from src.app.services.upload import UploadService
from src.core.database import get_session
from src.core.storage import UploadStorage
from src.domain.constants import UPLOAD_FORM_FIELD
from src.domain.errors import UploadError
from src.domain.schemas import UploadResponse

logger = logging.getLogger(__name__)

# Routers
api_router = APIRouter()  # API endpoints


def get_storage(request: Request) -> UploadStorage:
    """Request에서 UploadStorage 가져오기."""
    return request.app.state.storage


async def read_upload_field(request: Request) -> UploadFile | None:
    """multipart 폼에서 파일 필드 추출 (없거나 파일이 아니면 None)."""
    try:
        form = await request.form()
    except MultiPartException as e:
        logger.warning(f"Malformed multipart body: {e}")
        return None

    field = form.get(UPLOAD_FORM_FIELD)
    return field if isinstance(field, UploadFile) else None


@api_router.post("")
async def upload_file(
    request: Request,
    ctx: RequestContext = Depends(get_context),
    session: Session = Depends(get_session),
    storage: UploadStorage = Depends(get_storage),
) -> JSONResponse:
    """
    파일 업로드.

    1. 해시 계산 (SHA-256)
    2. 확장자/타입 확인
    3. <uploads>/<hash><ext> 저장
    4. files 테이블 기록
    """
    upload = await read_upload_field(request)

    service = UploadService(session, storage)
    try:
        result = await service.upload(upload)
    except UploadError as e:
        logger.warning(f"Upload rejected: {e.to_dict()}")
        return ctx.json(UploadResponse.failure(e.message).to_dict(), status_code=e.status_code)

    return ctx.json(UploadResponse.ok(result.file_id).to_dict(), status_code=200)
