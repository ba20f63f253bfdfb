"""
Files Routes: 업로드된 파일 목록.

- GET /files → 목록 화면 (htmx 요청이면 조각만)
  쿼리: page, pageSize
"""

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from src.app.context import Component, RequestContext, get_context
from src.core.database import get_session
from src.domain.models import UploadedFile

# Routers
router = APIRouter()  # HTML pages


@router.get("", response_class=HTMLResponse)
async def files_page(
    ctx: RequestContext = Depends(get_context),
    session: Session = Depends(get_session),
) -> HTMLResponse:
    """업로드 파일 목록 (최신순)."""
    query = ctx.page_query()

    total = session.scalar(select(func.count()).select_from(UploadedFile)) or 0
    files = session.scalars(
        select(UploadedFile)
        .order_by(UploadedFile.id.desc())
        .offset(query.offset)
        .limit(query.limit)
    ).all()

    pages = max(1, -(-total // query.page_size))

    return ctx.html(Component(
        "components/files.html",
        {
            "files": files,
            "total": total,
            "page": query.page,
            "page_size": query.page_size,
            "pages": pages,
        },
    ))
