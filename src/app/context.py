"""
RequestContext: FastAPI Request 위에 얹는 렌더링/쿠키/페이지네이션 헬퍼.

사용:
    @router.get("/files", response_class=HTMLResponse)
    async def files_page(ctx: RequestContext = Depends(get_context)) -> Response:
        if ctx.is_htmx():
            ...
        return ctx.html(Component("components/files.html", {...}))

렌더링 규칙:
- htmx 부분 요청(HX-Request: true, hx-fullPage != true) → 컴포넌트만
- 그 외 → 관리자면 layouts/admin.html, 아니면 layouts/page.html로 감쌈

write_cookie()로 쌓인 쿠키는 이 컨텍스트가 만드는 다음 응답(html/renders/json)에 적용된다.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, TypeVar

from fastapi import Request
from fastapi.responses import HTMLResponse, JSONResponse, Response
from fastapi.templating import Jinja2Templates
from markupsafe import Markup

from src.app.auth import Identity, get_identity
from src.core.config import Settings
from src.domain.constants import (
    ADMIN_LAYOUT,
    DEFAULT_PAGE,
    HTMX_FULL_PAGE_HEADER,
    HTMX_REQUEST_HEADER,
    PAGE_LAYOUT,
    PAGE_PARAM,
    PAGE_SIZE_MAX_SENTINEL,
    PAGE_SIZE_PARAM,
)
from src.domain.errors import ContextError
from src.domain.models import User
from src.domain.schemas import Cookie, PageQuery

ResponseT = TypeVar("ResponseT", bound=Response)


@dataclass
class Component:
    """Jinja2 템플릿 + 렌더 컨텍스트."""
    template: str
    context: Mapping[str, Any] = field(default_factory=dict)

    def render(self, templates: Jinja2Templates, **extra: Any) -> str:
        return templates.get_template(self.template).render(**{**extra, **self.context})


def _atoi(value: str) -> int:
    """정수 변환 (실패 시 0)."""
    try:
        return int(value.strip())
    except ValueError:
        return 0


class RequestContext:
    """요청 하나에 대응하는 컨텍스트. 요청 종료 시 버려진다."""

    def __init__(
        self,
        request: Request,
        templates: Jinja2Templates,
        settings: Settings,
    ) -> None:
        self.request = request
        self.templates = templates
        self.settings = settings
        self._pending_cookies: list[Cookie] = []

    # -------------------------------------------------------------------------
    # Identity
    # -------------------------------------------------------------------------

    @property
    def identity(self) -> Identity | None:
        return get_identity(self.request)

    def is_admin(self) -> bool:
        identity = self.identity
        return identity.is_admin if identity is not None else False

    def current_user(self) -> User:
        """
        인증된 사용자.

        Raises:
            ContextError: 인증 단계가 실행되지 않았거나 익명 요청
        """
        identity = self.identity
        if identity is None or not identity.is_authenticated:
            raise ContextError("No authenticated user bound to this request")
        return identity.user

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def is_htmx(self) -> bool:
        headers = self.request.headers
        return (
            headers.get(HTMX_REQUEST_HEADER) == "true"
            and headers.get(HTMX_FULL_PAGE_HEADER) != "true"
        )

    def html(self, component: Component, status_code: int = 200) -> HTMLResponse:
        """
        htmx 부분 요청이면 컴포넌트만, 아니면 레이아웃으로 감싸 렌더링.

        Args:
            component: 렌더링할 컴포넌트
            status_code: HTTP 상태 코드

        Returns:
            HTMLResponse (text/html)
        """
        if self.is_htmx():
            return self.renders(component, status_code)

        layout = ADMIN_LAYOUT if self.is_admin() else PAGE_LAYOUT
        identity = self.identity
        body = self.templates.get_template(layout).render(
            content=Markup(component.render(self.templates, request=self.request)),
            request=self.request,
            site_title=self.settings.site_title,
            user=identity.user if identity is not None else None,
        )
        return self._finalize(HTMLResponse(content=body, status_code=status_code))

    def renders(self, component: Component, status_code: int = 200) -> HTMLResponse:
        """레이아웃 없이 컴포넌트만 렌더링."""
        body = component.render(self.templates, request=self.request)
        return self._finalize(HTMLResponse(content=body, status_code=status_code))

    def json(self, content: Any, status_code: int = 200) -> JSONResponse:
        return self._finalize(JSONResponse(content=content, status_code=status_code))

    def _finalize(self, response: ResponseT) -> ResponseT:
        for cookie in self._pending_cookies:
            response.set_cookie(
                key=cookie.key,
                value=cookie.value,
                expires=cookie.expires,
            )
        self._pending_cookies.clear()
        return response

    # -------------------------------------------------------------------------
    # Cookies
    # -------------------------------------------------------------------------

    def write_cookie(self, cookie: Cookie) -> None:
        """다음 응답에 쿠키 설정 (expires는 UTC 기준으로 변환)."""
        expires = cookie.expires
        if expires is not None and expires.tzinfo is None:
            expires = expires.replace(tzinfo=UTC)
        elif expires is not None:
            expires = expires.astimezone(UTC)
        self._pending_cookies.append(Cookie(key=cookie.key, value=cookie.value, expires=expires))

    def read_cookie(self, key: str) -> Cookie:
        """요청 쿠키 조회. 없으면 빈 placeholder (에러 아님)."""
        value = self.request.cookies.get(key)
        if value is None:
            return Cookie(key="", value="", expires=datetime.now(UTC))
        return Cookie(key=key, value=value)

    # -------------------------------------------------------------------------
    # Pagination
    # -------------------------------------------------------------------------

    def page(self) -> int:
        """page 쿼리 파라미터 (기본 1, 최소 1, 숫자 아니면 1)."""
        raw = self.request.query_params.get(PAGE_PARAM, "")
        page = _atoi(raw) if raw != "" else DEFAULT_PAGE
        return page if page > 0 else DEFAULT_PAGE

    def page_size(self) -> int:
        """pageSize 쿼리 파라미터 (기본/-1/0 이하/최대 초과 → 설정 최대값)."""
        max_size = self.settings.page_max_size
        raw = self.request.query_params.get(PAGE_SIZE_PARAM, "")
        size = _atoi(raw) if raw != "" else PAGE_SIZE_MAX_SENTINEL
        if size <= 0 or size > max_size:
            return max_size
        return size

    def page_query(self) -> PageQuery:
        return PageQuery(page=self.page(), page_size=self.page_size())


def get_context(request: Request) -> RequestContext:
    """RequestContext 생성 (FastAPI 의존성)."""
    return RequestContext(
        request=request,
        templates=request.app.state.templates,
        settings=request.app.state.settings,
    )
