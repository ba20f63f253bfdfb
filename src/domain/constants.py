"""
Domain Constants: 업로드/렌더링 전역 상수.

헤더 이름, 쿼리 파라미터, 레이아웃 경로 등 시스템 전반에서 사용되는 값들.
"""

# =============================================================================
# HTMX Headers
# =============================================================================
# HX-Request: htmx가 보내는 부분 요청 표시
# hx-fullPage: 부분 요청이지만 전체 페이지를 원할 때 (클라이언트 규약)

HTMX_REQUEST_HEADER = "HX-Request"
HTMX_FULL_PAGE_HEADER = "hx-fullPage"

# =============================================================================
# Pagination Query Parameters
# =============================================================================

PAGE_PARAM = "page"
PAGE_SIZE_PARAM = "pageSize"
DEFAULT_PAGE = 1
PAGE_SIZE_MAX_SENTINEL = -1  # "-1" → 설정된 최대값

# =============================================================================
# Layouts (Jinja2)
# =============================================================================
# src/app/templates/layouts/
# ├── base.html   # <html> 골격
# ├── admin.html  # 관리자 레이아웃
# └── page.html   # 일반 페이지 레이아웃

ADMIN_LAYOUT = "layouts/admin.html"
PAGE_LAYOUT = "layouts/page.html"

# =============================================================================
# Upload
# =============================================================================

UPLOAD_FORM_FIELD = "file"
HASH_CHUNK_SIZE = 8192

# 확장자 최소 길이: "." + 1글자 이상
MIN_EXTENSION_LENGTH = 2
